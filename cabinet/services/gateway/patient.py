from typing import Any, Dict, List, Optional
from urllib.parse import quote

from ...models.appointment import Appointment, normalize_appointments
from ...models.care import (
    Medication,
    Prescription,
    normalize_medication,
    normalize_medications,
    normalize_prescription,
    normalize_prescriptions,
)
from ...models.doctor import Doctor, normalize_doctors
from .base import BaseGateway


class PatientGateway(BaseGateway):
    """Endpoints available to a logged-in patient."""

    async def list_appointments(self) -> List[Appointment]:
        return normalize_appointments(await self._get("/rdv/patient/me"))

    async def cancel_appointment(self, appointment_id: str, reason: Optional[str] = None) -> Any:
        body = {"reason": reason} if reason else {}
        return await self._put(f"/rdv/annuler/{appointment_id}", body)

    async def add_comment(self, appointment_id: str, text: str) -> Any:
        return await self._put(f"/rdv/patient/{appointment_id}/commentaire", {"commentaire": text})

    async def list_prescriptions(self) -> List[Prescription]:
        return normalize_prescriptions(await self._get("/ordonnances/patient"))

    async def get_prescription(self, prescription_id: str) -> Prescription:
        return normalize_prescription(await self._get(f"/ordonnances/patient/{prescription_id}") or {})

    async def list_medications(self) -> List[Medication]:
        return normalize_medications(await self._get("/medicaments"))

    async def add_medication(self, payload: Dict[str, Any]) -> Optional[Medication]:
        data = await self._post("/medicaments", payload)
        if isinstance(data, dict):
            created = data.get("medicament") if isinstance(data.get("medicament"), dict) else data
            return normalize_medication(created)
        return None

    async def list_doctors(self) -> List[Doctor]:
        return normalize_doctors(await self._get("/"))

    async def search_doctors_by_specialty(self, specialite: str) -> List[Doctor]:
        return normalize_doctors(await self._get(f"/specialite/{quote(specialite, safe='')}"))

    async def search_doctors_by_name(self, nom: str) -> List[Doctor]:
        return normalize_doctors(await self._get(f"/nom/{quote(nom, safe='')}"))
