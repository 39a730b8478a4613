"""Medications, prescriptions and treatments."""

from typing import List, Optional

from fastapi import APIRouter, Depends

from ...api.deps import (
    get_doctor_gateway,
    get_patient_dashboard,
    get_patient_gateway,
    get_treatment_gateway,
    require_role,
)
from ...core.http import BackendClient, get_backend
from ...core.security import Session, UserRole
from ...models.care import Medication, Prescription, Treatment
from ...schemas.care import MedicationCreate, PrescriptionCreate, TreatmentCreate, TreatmentUpdate
from ...services.dashboards import PatientDashboardController
from ...services.gateway import DoctorGateway, PatientGateway, TreatmentGateway

router = APIRouter(tags=["Care"])

doctor_only = require_role([UserRole.DOCTOR])

# Medications (patient)
@router.get("/medications", response_model=List[Medication])
async def list_medications(patients: PatientGateway = Depends(get_patient_gateway)):
    return await patients.list_medications()

@router.post("/medications", status_code=201)
async def add_medication(
    request: MedicationCreate,
    dashboard: PatientDashboardController = Depends(get_patient_dashboard),
):
    """Record a medication and return the refreshed patient dashboard."""
    return await dashboard.add_medication(request)

# Prescriptions
@router.get("/prescriptions", response_model=List[Prescription])
async def list_prescriptions(
    backend: BackendClient = Depends(get_backend),
    session: Session = Depends(require_role([UserRole.DOCTOR, UserRole.PATIENT])),
):
    if session.role == UserRole.DOCTOR:
        return await DoctorGateway(backend, session).list_prescriptions()
    return await PatientGateway(backend, session).list_prescriptions()

@router.get("/prescriptions/{prescription_id}", response_model=Prescription)
async def get_prescription(
    prescription_id: str,
    backend: BackendClient = Depends(get_backend),
    session: Session = Depends(require_role([UserRole.DOCTOR, UserRole.PATIENT])),
):
    if session.role == UserRole.DOCTOR:
        return await DoctorGateway(backend, session).get_prescription(prescription_id)
    return await PatientGateway(backend, session).get_prescription(prescription_id)

@router.post("/prescriptions", response_model=Optional[Prescription], status_code=201)
async def create_prescription(
    request: PrescriptionCreate,
    doctors: DoctorGateway = Depends(get_doctor_gateway),
):
    return await doctors.create_prescription(
        request.destination, request.traitement, request.signature_electronique
    )

# Treatments
@router.get("/treatments", response_model=List[Treatment])
async def list_treatments(treatments: TreatmentGateway = Depends(get_treatment_gateway)):
    return await treatments.list()

@router.get("/treatments/mine", response_model=List[Treatment])
async def list_my_treatments(
    treatments: TreatmentGateway = Depends(get_treatment_gateway),
    _: Session = Depends(doctor_only),
):
    """Treatments written by the logged-in doctor."""
    return await treatments.list_for_doctor()

@router.get("/treatments/patients/{patient_id}", response_model=List[Treatment])
async def list_patient_treatments(
    patient_id: str,
    treatments: TreatmentGateway = Depends(get_treatment_gateway),
):
    return await treatments.list_for_patient(patient_id)

@router.post("/treatments", response_model=Optional[Treatment], status_code=201)
async def create_treatment(
    request: TreatmentCreate,
    treatments: TreatmentGateway = Depends(get_treatment_gateway),
    _: Session = Depends(doctor_only),
):
    return await treatments.create(request)

@router.put("/treatments/{treatment_id}", response_model=Optional[Treatment])
async def update_treatment(
    treatment_id: str,
    request: TreatmentUpdate,
    treatments: TreatmentGateway = Depends(get_treatment_gateway),
    _: Session = Depends(doctor_only),
):
    return await treatments.update(treatment_id, request)

@router.delete("/treatments/{treatment_id}")
async def delete_treatment(
    treatment_id: str,
    treatments: TreatmentGateway = Depends(get_treatment_gateway),
    _: Session = Depends(doctor_only),
):
    await treatments.delete(treatment_id)
    return {"message": "Traitement supprimé"}
