from typing import Any, Dict, Optional

from pydantic import BaseModel

from .appointment import parse_date
import datetime as dt

class UserProfile(BaseModel):
    id: str
    nom: str = ""
    prenom: str = ""
    email: Optional[str] = None
    numero: Optional[str] = None
    role: Optional[str] = None
    nombre_patients: int = 0
    nombre_secretaires: int = 0
    created_at: Optional[dt.date] = None

    def __repr__(self):
        return f"<UserProfile(id={self.id}, email='{self.email}', role='{self.role}')>"

def normalize_profile(raw: Dict[str, Any]) -> UserProfile:
    return UserProfile(
        id=str(raw.get("_id") or raw.get("id") or ""),
        nom=raw.get("nom") or "",
        prenom=raw.get("prenom") or "",
        email=raw.get("email"),
        numero=raw.get("numero"),
        role=raw.get("role"),
        nombre_patients=len(raw.get("Patients") or []),
        nombre_secretaires=len(raw.get("Secretaires") or []),
        created_at=parse_date(raw.get("createdAt")),
    )
