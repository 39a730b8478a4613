from typing import Any, Dict, List, Optional

from pydantic import BaseModel

class Notification(BaseModel):
    id: str
    contenu: str = ""
    type: Optional[str] = None
    horaire: Optional[str] = None
    lu: bool = False
    date_envoi: Optional[str] = None
    patient_id: Optional[str] = None
    medicament: Optional[str] = None

def normalize_notification(raw: Dict[str, Any]) -> Notification:
    patient = raw.get("patient")
    medicament = raw.get("medicament")
    if isinstance(medicament, dict):
        medicament = f"{medicament.get('nomCommercial', '')} ({medicament.get('dosage', '')})"
    return Notification(
        id=str(raw.get("_id") or raw.get("id") or ""),
        contenu=raw.get("contenu") or "",
        type=raw.get("type"),
        horaire=raw.get("horaire"),
        lu=bool(raw.get("lu")),
        date_envoi=raw.get("dateEnvoi"),
        patient_id=patient.get("_id") if isinstance(patient, dict) else patient,
        medicament=medicament,
    )

def normalize_notifications(payload: Any) -> List[Notification]:
    if not isinstance(payload, list):
        return []
    return [normalize_notification(item) for item in payload if isinstance(item, dict)]
