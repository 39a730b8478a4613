"""
Cabinet Portal

A FastAPI service that fronts a medical practice backend: role dashboards
for doctors, secretaries and patients, and the appointment lifecycle.
"""

__version__ = "1.0.0"
