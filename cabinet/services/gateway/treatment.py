from typing import Any, Dict, List, Optional

from ...models.care import Treatment, normalize_treatment, normalize_treatments, parse_schedule
from ...schemas.care import MedicationLine, TreatmentCreate, TreatmentUpdate
from .base import BaseGateway


def medication_line_payload(line: MedicationLine) -> Dict[str, Any]:
    horaires = line.horaires if isinstance(line.horaires, list) else parse_schedule(line.horaires)
    return {
        "nomCommercial": line.nom_commercial,
        "dosage": line.dosage,
        "frequence": line.frequence,
        "voieAdministration": line.voie_administration,
        "dateDebut": line.date_debut.isoformat(),
        "dateFin": line.date_fin.isoformat(),
        "horaires": horaires,
    }


class TreatmentGateway(BaseGateway):
    async def list(self) -> List[Treatment]:
        return normalize_treatments(await self._get("/traitements"))

    async def list_for_doctor(self) -> List[Treatment]:
        return normalize_treatments(await self._get("/traitements/medecin"))

    async def list_for_patient(self, patient_id: str) -> List[Treatment]:
        return normalize_treatments(await self._get(f"/traitements/patients/{patient_id}"))

    async def create(self, request: TreatmentCreate) -> Optional[Treatment]:
        payload = {
            "nom": request.nom,
            "observations": request.observations,
            "medicaments": [medication_line_payload(m) for m in request.medicaments],
        }
        if request.patient:
            payload["patient"] = request.patient
        data = await self._post("/traitements", payload)
        return normalize_treatment(data) if isinstance(data, dict) else None

    async def update(self, treatment_id: str, request: TreatmentUpdate) -> Optional[Treatment]:
        payload = request.model_dump(exclude_none=True, exclude={"medicaments"})
        if request.medicaments is not None:
            payload["medicaments"] = [medication_line_payload(m) for m in request.medicaments]
        data = await self._put(f"/traitements/{treatment_id}", payload)
        return normalize_treatment(data) if isinstance(data, dict) else None

    async def delete(self, treatment_id: str) -> Any:
        return await self._delete(f"/traitements/{treatment_id}")
