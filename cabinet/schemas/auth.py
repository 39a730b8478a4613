import re
from typing import Literal, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
PHONE_PATTERN = re.compile(r"^(\+216)?[2579]\d{7}$")
BLOOD_GROUPS = ("A+", "A-", "B+", "B-", "AB+", "AB-", "O+", "O-")


def _check_email(value: str) -> str:
    value = value.strip()
    if not EMAIL_PATTERN.match(value):
        raise ValueError("Format d'email invalide")
    return value


class LoginRequest(BaseModel):
    email: str
    mot_de_passe: str = Field(min_length=1)

    @field_validator("email")
    @classmethod
    def validate_email(cls, v):
        return _check_email(v)


class RegisterRequest(BaseModel):
    """Self-registration; only doctors and patients may sign up."""

    role: Literal["Medecin", "Patient"]
    nom: str = Field(min_length=2)
    prenom: str = Field(min_length=2)
    email: str
    numero: str
    mot_de_passe: str = Field(min_length=6)

    # Patient
    date_naissance: Optional[str] = None
    sexe: Optional[Literal["Homme", "Femme"]] = None
    groupe_sanguin: Optional[str] = None

    # Medecin
    numero_licence: Optional[str] = None
    specialite: Optional[str] = None
    adresse_cabinet: Optional[str] = None

    @field_validator("email")
    @classmethod
    def validate_email(cls, v):
        return _check_email(v)

    @field_validator("numero")
    @classmethod
    def validate_numero(cls, v):
        if not PHONE_PATTERN.match(v.strip()):
            raise ValueError("Format de numéro invalide (ex: +21622222222 ou 22222222)")
        return v.strip()

    @field_validator("groupe_sanguin")
    @classmethod
    def validate_groupe_sanguin(cls, v):
        if v is not None and v not in BLOOD_GROUPS:
            raise ValueError("Groupe sanguin invalide")
        return v

    @model_validator(mode="after")
    def check_role_fields(self):
        if self.role == "Patient":
            required = {"date_naissance": self.date_naissance, "sexe": self.sexe, "groupe_sanguin": self.groupe_sanguin}
        else:
            required = {
                "numero_licence": self.numero_licence,
                "specialite": self.specialite,
                "adresse_cabinet": self.adresse_cabinet,
            }
        missing = [name for name, value in required.items() if not value]
        if missing:
            raise ValueError(f"Champs requis manquants: {', '.join(missing)}")
        return self

    def to_backend(self) -> dict:
        payload = {
            "role": self.role,
            "nom": self.nom.strip(),
            "prenom": self.prenom.strip(),
            "email": self.email,
            "numero": self.numero,
            "motDePasse": self.mot_de_passe,
        }
        if self.role == "Patient":
            payload.update(
                dateNaissance=self.date_naissance,
                sexe=self.sexe,
                groupeSanguin=self.groupe_sanguin,
            )
        else:
            payload.update(
                numeroLicence=self.numero_licence,
                specialite=self.specialite,
                adresseCabinet=self.adresse_cabinet,
            )
        return payload


class ForgotPasswordRequest(BaseModel):
    email: str

    @field_validator("email")
    @classmethod
    def validate_email(cls, v):
        return _check_email(v)


class ProfileUpdate(BaseModel):
    nom: str
    prenom: str
    email: str
    numero: Optional[str] = None

    @field_validator("nom")
    @classmethod
    def validate_nom(cls, v):
        if not v.strip():
            raise ValueError("Le nom est requis")
        return v.strip()

    @field_validator("prenom")
    @classmethod
    def validate_prenom(cls, v):
        if not v.strip():
            raise ValueError("Le prénom est requis")
        return v.strip()

    @field_validator("email")
    @classmethod
    def validate_email(cls, v):
        if not EMAIL_PATTERN.match(v.strip()):
            raise ValueError("Un email valide est requis")
        return v.strip()

    @field_validator("numero")
    @classmethod
    def validate_numero(cls, v):
        if v and not re.match(r"^\+?[1-9]\d{1,14}$", v):
            raise ValueError("Le numéro de téléphone est invalide")
        return v or None
