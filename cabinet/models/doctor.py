from typing import Any, Dict, List, Optional

from pydantic import BaseModel

from .appointment import parse_date
import datetime as dt

class Doctor(BaseModel):
    id: str
    nom: str = ""
    prenom: str = ""
    email: Optional[str] = None
    numero: Optional[str] = None
    adresse: Optional[str] = None
    specialite: Optional[str] = None
    numero_licence: Optional[str] = None
    adresse_cabinet: Optional[str] = None
    nombre_patients: int = 0
    nombre_secretaires: int = 0
    date_inscription: Optional[dt.date] = None

    def __repr__(self):
        return f"<Doctor(id={self.id}, name='{self.prenom} {self.nom}', specialite='{self.specialite}')>"

class Secretary(BaseModel):
    id: str
    nom: str = ""
    prenom: str = ""
    email: Optional[str] = None
    numero: Optional[str] = None
    bureau: Optional[str] = None
    date_embauche: Optional[dt.date] = None
    medecins: List[str] = []

def normalize_doctor(raw: Dict[str, Any]) -> Doctor:
    return Doctor(
        id=str(raw.get("_id") or raw.get("id") or ""),
        nom=raw.get("nom") or "",
        prenom=raw.get("prenom") or "",
        email=raw.get("email"),
        numero=raw.get("numero"),
        adresse=raw.get("adresse"),
        specialite=raw.get("specialite"),
        numero_licence=raw.get("numeroLicence"),
        adresse_cabinet=raw.get("adresseCabinet"),
        nombre_patients=len(raw.get("Patients") or []),
        nombre_secretaires=len(raw.get("Secretaires") or []),
        date_inscription=parse_date(raw.get("createdAt")),
    )

def normalize_doctors(payload: Any) -> List[Doctor]:
    """Accept a bare list or the backend's ``{"medecins": [...]}`` wrapper."""
    if isinstance(payload, dict):
        payload = payload.get("medecins")
    if not isinstance(payload, list):
        return []
    return [normalize_doctor(item) for item in payload if isinstance(item, dict)]

def normalize_secretary(raw: Dict[str, Any]) -> Secretary:
    return Secretary(
        id=str(raw.get("_id") or raw.get("id") or ""),
        nom=raw.get("nom") or "",
        prenom=raw.get("prenom") or "",
        email=raw.get("email"),
        numero=raw.get("numero"),
        bureau=raw.get("bureau"),
        date_embauche=parse_date(raw.get("dateEmbauche")),
        medecins=[m for m in raw.get("Medecins") or [] if isinstance(m, str)],
    )

def normalize_secretaries(payload: Any) -> List[Secretary]:
    if isinstance(payload, dict):
        payload = payload.get("secretaires")
    if not isinstance(payload, list):
        return []
    return [normalize_secretary(item) for item in payload if isinstance(item, dict)]
