import datetime as dt
import logging
from typing import Any, Dict, List, Optional

from ...core.exceptions import AppointmentNotFoundError
from ...models.appointment import Appointment, normalize_appointment, normalize_appointments
from ...models.doctor import Doctor, normalize_doctors
from ...models.patient import Patient, normalize_patient, normalize_patients
from .base import BaseGateway

logger = logging.getLogger(__name__)


class SecretaryGateway(BaseGateway):
    """Scheduling and patient registry endpoints used by a secretary."""

    async def list_appointments(self, date: Optional[dt.date] = None) -> List[Appointment]:
        params = {"date": date.isoformat()} if date else None
        return normalize_appointments(await self._get("/rendez-vous", params=params))

    async def get_appointment(self, appointment_id: str) -> Appointment:
        data = await self._get(f"/rdv/{appointment_id}")
        if not isinstance(data, dict):
            raise AppointmentNotFoundError(f"Rendez-vous {appointment_id} introuvable")
        return normalize_appointment(data)

    async def create_appointment(self, payload: Dict[str, Any]) -> Optional[Appointment]:
        data = await self._post("/rdv", payload)
        return normalize_appointment(data) if isinstance(data, dict) else None

    async def update_appointment(self, appointment_id: str, payload: Dict[str, Any]) -> Any:
        return await self._put(f"/rdv/modifier/{appointment_id}", payload)

    async def delete_appointment(self, appointment_id: str) -> Any:
        return await self._delete(f"/rdv/{appointment_id}")

    async def cancel_appointment(self, appointment_id: str, reason: Optional[str] = None) -> Any:
        return await self._put(f"/rendez-vous/annuler/{appointment_id}", {"reason": reason})

    async def check_availability(self, medecin_id: str, date: dt.date, heure: str) -> bool:
        data = await self._get(
            "/rdv/disponibilite/test/main",
            params={"medecinId": medecin_id, "date": date.isoformat(), "heure": heure},
        )
        available = bool(data.get("disponible")) if isinstance(data, dict) else False
        logger.info(f"Availability for doctor {medecin_id} on {date} at {heure}: {available}")
        return available

    async def list_doctors(self) -> List[Doctor]:
        return normalize_doctors(await self._get("/medecins-by-secretaire"))

    async def list_patients(self) -> List[Patient]:
        return normalize_patients(await self._get("/patients-by-secretaire"))

    async def list_patients_of_doctor(self, medecin_id: str) -> List[Patient]:
        return normalize_patients(await self._get(f"/{medecin_id}/patients"))

    async def get_patient(self, patient_id: str) -> Patient:
        return normalize_patient(await self._get(f"/patients/patient/{patient_id}") or {})

    async def create_patient(self, payload: Dict[str, Any]) -> Patient:
        return normalize_patient(await self._post("/secretary/patients", payload) or {})

    async def update_patient(self, patient_id: str, payload: Dict[str, Any]) -> Patient:
        return normalize_patient(await self._put(f"/patients/{patient_id}", payload) or {})

    async def delete_patient(self, patient_id: str) -> Any:
        return await self._delete(f"/secretary/patients/{patient_id}")

    async def search_patients(self, query: str) -> List[Patient]:
        return normalize_patients(await self._get("/secretary/patients/search", params={"q": query}))
