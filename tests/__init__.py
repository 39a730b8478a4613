"""
Test suite for the Cabinet Portal.

Unit tests for the appointment lifecycle, gateways and dashboards, and API
tests run against a faked practice backend.
"""
