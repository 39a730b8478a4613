"""Medications, treatments and prescriptions as the dashboards display them."""

import datetime as dt
import re
from typing import Any, Dict, List, Optional

from pydantic import BaseModel

from .appointment import parse_date

_SCHEDULE_SEPARATORS = re.compile(r"[,;]")


def parse_schedule(text: Optional[str]) -> List[str]:
    """Split a typed list of intake times.

    "08:00, 12:00, 20:00" gives ["08:00", "12:00", "20:00"]. Commas and
    semicolons both separate entries; blanks are dropped and order is kept.
    """
    if not text:
        return []
    return [part.strip() for part in _SCHEDULE_SEPARATORS.split(text) if part.strip()]


class Medication(BaseModel):
    id: str
    nom_commercial: str = ""
    dosage: str = ""
    frequence: int = 0
    voie_administration: str = ""
    date_debut: Optional[dt.date] = None
    date_fin: Optional[dt.date] = None
    horaires: List[str] = []


class Treatment(BaseModel):
    id: str
    nom: str = ""
    observations: Optional[str] = None
    patient_id: Optional[str] = None
    patient: Optional[str] = None
    medecin: Optional[str] = None
    medicaments: List[Medication] = []


class Prescription(BaseModel):
    id: str
    date: Optional[dt.date] = None
    medecin: str = ""
    patient: Optional[str] = None
    medicaments: List[str] = []
    statut: str = "Active"
    signature_electronique: Optional[str] = None
    traitement_nom: Optional[str] = None


def _name(person: Any) -> Optional[str]:
    if isinstance(person, dict):
        return f"{person.get('prenom', '')} {person.get('nom', '')}".strip() or None
    return None


def normalize_medication(raw: Dict[str, Any]) -> Medication:
    horaires = raw.get("horaires") or []
    if isinstance(horaires, str):
        horaires = parse_schedule(horaires)
    try:
        frequence = int(raw.get("frequence") or 0)
    except (TypeError, ValueError):
        frequence = 0
    return Medication(
        id=str(raw.get("_id") or raw.get("id") or ""),
        nom_commercial=raw.get("nomCommercial") or "",
        dosage=raw.get("dosage") or "",
        frequence=frequence,
        voie_administration=raw.get("voieAdministration") or "",
        date_debut=parse_date(raw.get("dateDebut")),
        date_fin=parse_date(raw.get("dateFin")),
        horaires=list(horaires),
    )


def normalize_treatment(raw: Dict[str, Any]) -> Treatment:
    patient = raw.get("patient")
    return Treatment(
        id=str(raw.get("_id") or raw.get("id") or ""),
        nom=raw.get("nom") or "",
        observations=raw.get("observations"),
        patient_id=patient.get("_id") if isinstance(patient, dict) else patient,
        patient=_name(patient),
        medecin=_name(raw.get("medecin")),
        medicaments=[
            normalize_medication(m) for m in raw.get("medicaments") or [] if isinstance(m, dict)
        ],
    )


def normalize_prescription(raw: Dict[str, Any]) -> Prescription:
    traitement = raw.get("traitement") if isinstance(raw.get("traitement"), dict) else {}
    return Prescription(
        id=str(raw.get("_id") or raw.get("id") or ""),
        date=parse_date(raw.get("dateEmission")),
        medecin=_name(raw.get("medecin")) or "",
        patient=_name(raw.get("destination")),
        medicaments=[
            m.get("nomCommercial", "") for m in traitement.get("medicaments") or [] if isinstance(m, dict)
        ],
        signature_electronique=raw.get("signatureElectronique"),
        traitement_nom=traitement.get("nom"),
    )


def _unwrap(payload: Any, key: str) -> List[Dict[str, Any]]:
    if isinstance(payload, dict):
        payload = payload.get(key)
    if not isinstance(payload, list):
        return []
    return [item for item in payload if isinstance(item, dict)]


def normalize_medications(payload: Any) -> List[Medication]:
    return [normalize_medication(item) for item in _unwrap(payload, "medicaments")]


def normalize_treatments(payload: Any) -> List[Treatment]:
    return [normalize_treatment(item) for item in _unwrap(payload, "traitements")]


def normalize_prescriptions(payload: Any) -> List[Prescription]:
    return [normalize_prescription(item) for item in _unwrap(payload, "ordonnances")]
