import datetime as dt
from typing import List, Optional

from pydantic import BaseModel, field_validator

from .auth import EMAIL_PATTERN


class PatientCreate(BaseModel):
    nom: str
    prenom: str
    email: str
    numero: str
    date_naissance: dt.date
    adresse: str
    mot_de_passe: str
    sexe: Optional[str] = None
    groupe_sanguin: Optional[str] = None
    medecins: List[str] = []

    @field_validator("email")
    @classmethod
    def validate_email(cls, v):
        if not EMAIL_PATTERN.match(v.strip()):
            raise ValueError("Format d'email invalide")
        return v.strip()

    def to_backend(self) -> dict:
        payload = {
            "nom": self.nom,
            "prenom": self.prenom,
            "email": self.email,
            "numero": self.numero,
            "dateNaissance": self.date_naissance.isoformat(),
            "adresse": self.adresse,
            "motDePasse": self.mot_de_passe,
            "Medecins": self.medecins,
        }
        if self.sexe:
            payload["sexe"] = self.sexe
        if self.groupe_sanguin:
            payload["groupeSanguin"] = self.groupe_sanguin
        return payload


class PatientUpdate(BaseModel):
    nom: Optional[str] = None
    prenom: Optional[str] = None
    email: Optional[str] = None
    numero: Optional[str] = None
    date_naissance: Optional[dt.date] = None
    adresse: Optional[str] = None
    sexe: Optional[str] = None
    groupe_sanguin: Optional[str] = None
    medecins: Optional[List[str]] = None

    def to_backend(self) -> dict:
        names = {
            "date_naissance": "dateNaissance",
            "groupe_sanguin": "groupeSanguin",
            "medecins": "Medecins",
        }
        payload = {}
        for field, value in self.model_dump(exclude_none=True).items():
            if isinstance(value, dt.date):
                value = value.isoformat()
            payload[names.get(field, field)] = value
        return payload


class SecretaryLink(BaseModel):
    email: str

    @field_validator("email")
    @classmethod
    def validate_email(cls, v):
        if not EMAIL_PATTERN.match(v.strip()):
            raise ValueError("Format d'email invalide")
        return v.strip()


class SecretaryUpdate(BaseModel):
    nom: str
    prenom: str
    email: str
    numero: str
