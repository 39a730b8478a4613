from typing import Any, Dict, List, Optional

from pydantic import BaseModel

from .appointment import parse_date
import datetime as dt

class Patient(BaseModel):
    id: str
    nom: str = ""
    prenom: str = ""
    email: Optional[str] = None
    telephone: Optional[str] = None
    adresse: Optional[str] = None
    date_naissance: Optional[dt.date] = None
    sexe: Optional[str] = None
    groupe_sanguin: Optional[str] = None
    allergies: Optional[str] = None
    medecins: List[str] = []
    date_inscription: Optional[dt.date] = None

    @property
    def nom_complet(self) -> str:
        return f"{self.prenom} {self.nom}".strip()

    def __repr__(self):
        return f"<Patient(id={self.id}, name='{self.prenom} {self.nom}')>"

def normalize_patient(raw: Dict[str, Any]) -> Patient:
    return Patient(
        id=str(raw.get("_id") or raw.get("id") or ""),
        nom=raw.get("nom") or "",
        prenom=raw.get("prenom") or "",
        email=raw.get("email"),
        telephone=raw.get("numero") or raw.get("telephone"),
        adresse=raw.get("adresse"),
        date_naissance=parse_date(raw.get("dateNaissance")),
        sexe=raw.get("sexe"),
        groupe_sanguin=raw.get("groupeSanguin"),
        allergies=raw.get("allergies"),
        medecins=[m if isinstance(m, str) else str(m.get("_id", "")) for m in raw.get("Medecins") or []],
        date_inscription=parse_date(raw.get("dateInscription") or raw.get("createdAt")),
    )

def normalize_patients(payload: Any) -> List[Patient]:
    """Accept a bare list or the backend's ``{"patients": [...]}`` wrapper."""
    if isinstance(payload, dict):
        payload = payload.get("patients")
    if not isinstance(payload, list):
        return []
    return [normalize_patient(item) for item in payload if isinstance(item, dict)]
