import logging
from typing import Any, Dict, List, Optional

from ...models.appointment import Appointment, normalize_appointments
from ...models.care import Prescription, normalize_prescription, normalize_prescriptions
from ...models.doctor import Secretary, normalize_secretaries, normalize_secretary
from ...models.patient import Patient, normalize_patients
from .base import BaseGateway

logger = logging.getLogger(__name__)


class DoctorGateway(BaseGateway):
    """Consultations, prescriptions and team endpoints for a doctor."""

    async def list_today_appointments(self) -> List[Appointment]:
        return normalize_appointments(await self._get("/rdv/aujourdhui"))

    async def list_appointments(self) -> List[Appointment]:
        return normalize_appointments(await self._get("/rdv"))

    async def mark_consulted(self, appointment_id: str) -> Any:
        return await self._put(f"/rdv/consulter/{appointment_id}", {})

    async def list_prescriptions(self) -> List[Prescription]:
        return normalize_prescriptions(await self._get("/ordonnances/medecin"))

    async def get_prescription(self, prescription_id: str) -> Prescription:
        data = await self._get(f"/ordonnances/medecin/{prescription_id}")
        if isinstance(data, dict) and isinstance(data.get("ordonnance"), dict):
            data = data["ordonnance"]
        return normalize_prescription(data or {})

    async def create_prescription(
        self, destination: str, traitement: str, signature: Optional[str] = None
    ) -> Optional[Prescription]:
        """Sent as multipart form data, the way the backend's upload route expects it."""
        form = {"destination": destination, "traitement": traitement}
        if signature:
            form["signatureElectronique"] = signature
        # (None, value) parts are sent as plain multipart form fields
        files = {key: (None, value) for key, value in form.items()}
        data = await self.backend.request("POST", "/ordonnances", token=self.token, files=files)
        if isinstance(data, dict) and isinstance(data.get("ordonnance"), dict):
            data = data["ordonnance"]
        return normalize_prescription(data) if isinstance(data, dict) else None

    async def list_patients(self) -> List[Patient]:
        return normalize_patients(await self._get(f"/{self.session.user_id}/patients"))

    async def list_secretaries(self) -> List[Secretary]:
        return normalize_secretaries(await self._get("/secretaires"))

    async def link_secretary(self, email: str) -> Any:
        logger.info(f"Linking secretary {email} to doctor {self.session.user_id}")
        return await self._post("/secretaires", {"email": email})

    async def update_secretary(self, secretary_id: str, payload: Dict[str, Any]) -> Optional[Secretary]:
        data = await self._put(f"/secretaires/{secretary_id}", payload)
        if isinstance(data, dict) and isinstance(data.get("data"), dict):
            return normalize_secretary(data["data"])
        return None

    async def remove_secretary(self, secretary_id: str) -> Any:
        return await self._delete(f"/secretaires/{secretary_id}")
