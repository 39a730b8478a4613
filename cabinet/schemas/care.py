import datetime as dt
from typing import List, Optional, Union

from pydantic import BaseModel


class MedicationCreate(BaseModel):
    """A medication the patient records. ``horaires`` may be typed as free text."""

    nom_commercial: str = ""
    dosage: str = ""
    frequence: Optional[float] = None
    voie_administration: str = ""
    date_debut: Optional[dt.date] = None
    date_fin: Optional[dt.date] = None
    horaires: Union[str, List[str]] = []


class MedicationLine(BaseModel):
    nom_commercial: str
    dosage: str
    frequence: int
    voie_administration: str
    date_debut: dt.date
    date_fin: dt.date
    horaires: Union[str, List[str]] = []


class TreatmentCreate(BaseModel):
    nom: str
    observations: str = ""
    patient: Optional[str] = None
    medicaments: List[MedicationLine] = []


class TreatmentUpdate(BaseModel):
    nom: Optional[str] = None
    observations: Optional[str] = None
    patient: Optional[str] = None
    medicaments: Optional[List[MedicationLine]] = None


class PrescriptionCreate(BaseModel):
    destination: str
    traitement: str
    signature_electronique: Optional[str] = None
