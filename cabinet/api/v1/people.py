"""Team, patient registry and doctor directory."""

from typing import List, Optional

from fastapi import APIRouter, Depends

from ...api.deps import get_doctor_gateway, get_secretary_gateway, require_role
from ...core.exceptions import ConfirmationRequiredError
from ...core.http import BackendClient, get_backend
from ...core.security import Session, UserRole
from ...models.doctor import Doctor, Secretary
from ...models.patient import Patient
from ...schemas.people import PatientCreate, PatientUpdate, SecretaryLink, SecretaryUpdate
from ...services.gateway import DoctorGateway, PatientGateway, SecretaryGateway

router = APIRouter(tags=["People"])

# Team management (doctor)
@router.get("/team/secretaries", response_model=List[Secretary])
async def list_secretaries(doctors: DoctorGateway = Depends(get_doctor_gateway)):
    return await doctors.list_secretaries()

@router.post("/team/secretaries", status_code=201)
async def link_secretary(
    request: SecretaryLink,
    doctors: DoctorGateway = Depends(get_doctor_gateway),
):
    """Attach an existing secretary account to the doctor's practice."""
    await doctors.link_secretary(request.email)
    return {"message": "Secrétaire ajoutée à l'équipe"}

@router.put("/team/secretaries/{secretary_id}", response_model=Optional[Secretary])
async def update_secretary(
    secretary_id: str,
    request: SecretaryUpdate,
    doctors: DoctorGateway = Depends(get_doctor_gateway),
):
    return await doctors.update_secretary(secretary_id, request.model_dump())

@router.delete("/team/secretaries/{secretary_id}")
async def remove_secretary(
    secretary_id: str,
    doctors: DoctorGateway = Depends(get_doctor_gateway),
):
    await doctors.remove_secretary(secretary_id)
    return {"message": "Secrétaire retirée de l'équipe"}

# Patients
@router.get("/patients", response_model=List[Patient])
async def list_patients(
    q: Optional[str] = None,
    backend: BackendClient = Depends(get_backend),
    session: Session = Depends(require_role([UserRole.DOCTOR, UserRole.SECRETARY])),
):
    """The actor's patients; ``q`` searches the secretary's registry."""
    if session.role == UserRole.DOCTOR:
        return await DoctorGateway(backend, session).list_patients()
    secretary = SecretaryGateway(backend, session)
    if q:
        return await secretary.search_patients(q)
    return await secretary.list_patients()

@router.get("/patients/by-doctor/{medecin_id}", response_model=List[Patient])
async def list_patients_of_doctor(
    medecin_id: str,
    secretary: SecretaryGateway = Depends(get_secretary_gateway),
):
    return await secretary.list_patients_of_doctor(medecin_id)

@router.get("/patients/{patient_id}", response_model=Patient)
async def get_patient(
    patient_id: str,
    secretary: SecretaryGateway = Depends(get_secretary_gateway),
):
    return await secretary.get_patient(patient_id)

@router.post("/patients", response_model=Patient, status_code=201)
async def create_patient(
    request: PatientCreate,
    secretary: SecretaryGateway = Depends(get_secretary_gateway),
):
    return await secretary.create_patient(request.to_backend())

@router.put("/patients/{patient_id}", response_model=Patient)
async def update_patient(
    patient_id: str,
    request: PatientUpdate,
    secretary: SecretaryGateway = Depends(get_secretary_gateway),
):
    return await secretary.update_patient(patient_id, request.to_backend())

@router.delete("/patients/{patient_id}")
async def delete_patient(
    patient_id: str,
    confirm: bool = False,
    secretary: SecretaryGateway = Depends(get_secretary_gateway),
):
    if not confirm:
        raise ConfirmationRequiredError("Voulez-vous vraiment supprimer ce patient ?")
    await secretary.delete_patient(patient_id)
    return {"message": "Patient supprimé"}

# Doctor directory
@router.get("/doctors", response_model=List[Doctor])
async def list_doctors(
    specialite: Optional[str] = None,
    nom: Optional[str] = None,
    backend: BackendClient = Depends(get_backend),
    session: Session = Depends(require_role([UserRole.PATIENT, UserRole.SECRETARY])),
):
    """Patients browse or search all doctors; secretaries see the doctors they work for."""
    if session.role == UserRole.SECRETARY:
        return await SecretaryGateway(backend, session).list_doctors()
    patients = PatientGateway(backend, session)
    if specialite:
        return await patients.search_doctors_by_specialty(specialite)
    if nom:
        return await patients.search_doctors_by_name(nom)
    return await patients.list_doctors()
