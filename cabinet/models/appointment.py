import datetime as dt
from typing import Any, Dict, List, Optional
import enum
import unicodedata

from pydantic import BaseModel, computed_field

class AppointmentStatus(str, enum.Enum):
    PENDING = "en_attente"
    CONFIRMED = "confirme"
    COMPLETED = "consulté"
    CANCELLED = "annule"

TERMINAL_STATUSES = frozenset({AppointmentStatus.COMPLETED, AppointmentStatus.CANCELLED})

class AppointmentAction(str, enum.Enum):
    CONFIRM = "confirm"
    CANCEL = "cancel"
    CONSULT = "consult"
    COMMENT = "comment"
    EDIT = "edit"
    DELETE = "delete"

# Accent-free, lower-case spellings seen across the backend and older clients
_STATUS_ALIASES = {
    "en_attente": AppointmentStatus.PENDING,
    "confirme": AppointmentStatus.CONFIRMED,
    "consulte": AppointmentStatus.COMPLETED,
    "termine": AppointmentStatus.COMPLETED,
    "annule": AppointmentStatus.CANCELLED,
}

def _fold(value: str) -> str:
    decomposed = unicodedata.normalize("NFKD", value.strip().lower())
    stripped = "".join(c for c in decomposed if not unicodedata.combining(c))
    return "_".join(stripped.split())

def normalize_status(raw: Optional[str]) -> Optional[AppointmentStatus]:
    """Map any backend spelling of a status onto the canonical enum.

    'Annulé', 'annulé' and 'annule' all become CANCELLED; 'En attente'
    becomes PENDING. Anything unrecognized returns None.
    """
    if not raw or not isinstance(raw, str):
        return None
    return _STATUS_ALIASES.get(_fold(raw))

class StatusBadge(BaseModel):
    label: str
    color: str

_BADGES = {
    AppointmentStatus.PENDING: StatusBadge(label="En attente", color="yellow"),
    AppointmentStatus.CONFIRMED: StatusBadge(label="Confirmé", color="blue"),
    AppointmentStatus.COMPLETED: StatusBadge(label="Consulté", color="green"),
    AppointmentStatus.CANCELLED: StatusBadge(label="Annulé", color="red"),
}

def status_badge(status: Optional[AppointmentStatus], raw: Optional[str] = None) -> StatusBadge:
    """Label and color for a status; unknown values get the neutral badge."""
    if status in _BADGES:
        return _BADGES[status]
    return StatusBadge(label=raw or "Inconnu", color="gray")

class Appointment(BaseModel):
    id: str
    patient_id: Optional[str] = None
    patient_nom: Optional[str] = None
    patient_prenom: Optional[str] = None
    medecin_id: Optional[str] = None
    medecin: str = ""
    specialite: Optional[str] = None
    date: Optional[dt.date] = None
    heure: Optional[str] = None
    statut: Optional[AppointmentStatus] = None
    statut_brut: Optional[str] = None
    commentaire: Optional[str] = None
    actions: List[AppointmentAction] = []

    @property
    def starts_at(self) -> Optional[dt.datetime]:
        """Date and time of day combined into one instant."""
        if self.date is None:
            return None
        return dt.datetime.combine(self.date, parse_time(self.heure) or dt.time(0, 0))

    @property
    def is_terminal(self) -> bool:
        return self.statut in TERMINAL_STATUSES

    @computed_field
    @property
    def badge(self) -> StatusBadge:
        return status_badge(self.statut, self.statut_brut)

    def __repr__(self):
        return f"<Appointment(id={self.id}, medecin_id={self.medecin_id}, date='{self.date}', heure='{self.heure}')>"

def parse_date(value: Any) -> Optional[dt.date]:
    """Accept '2025-09-10' as well as full ISO timestamps from the backend."""
    if isinstance(value, dt.datetime):
        return value.date()
    if isinstance(value, dt.date):
        return value
    if not isinstance(value, str) or len(value) < 10:
        return None
    try:
        return dt.date.fromisoformat(value[:10])
    except ValueError:
        return None

def parse_time(value: Optional[str]) -> Optional[dt.time]:
    if not value:
        return None
    try:
        return dt.datetime.strptime(value[:5], "%H:%M").time()
    except ValueError:
        return None

def _full_name(person: Dict[str, Any]) -> str:
    return f"{person.get('prenom', '')} {person.get('nom', '')}".strip()

def normalize_appointment(raw: Dict[str, Any]) -> Appointment:
    """Build an Appointment from either backend shape.

    The doctor and patient endpoints populate ``medecinId`` / ``patientId``
    with nested objects and use ``_id``; the secretary listing is already
    flat (``id``, ``medecin``, ``patientNom``...).
    """
    medecin = raw.get("medecinId")
    patient = raw.get("patientId")

    if isinstance(medecin, dict):
        medecin_id = medecin.get("_id") or medecin.get("id")
        medecin_name = _full_name(medecin)
        specialite = medecin.get("specialite")
    else:
        medecin_id = medecin
        medecin_name = raw.get("medecin") or ""
        specialite = raw.get("specialite") or raw.get("type")

    if isinstance(patient, dict):
        patient_id = patient.get("_id") or patient.get("id")
        patient_nom = patient.get("nom")
        patient_prenom = patient.get("prenom")
    else:
        patient_id = patient
        patient_nom = raw.get("patientNom")
        patient_prenom = raw.get("patientPrenom")

    raw_status = raw.get("statut")
    heure = raw.get("heure")

    return Appointment(
        id=str(raw.get("_id") or raw.get("id") or ""),
        patient_id=patient_id,
        patient_nom=patient_nom,
        patient_prenom=patient_prenom,
        medecin_id=medecin_id,
        medecin=medecin_name,
        specialite=specialite,
        date=parse_date(raw.get("date")),
        heure=heure[:5] if isinstance(heure, str) else None,
        statut=normalize_status(raw_status),
        statut_brut=raw_status,
        commentaire=raw.get("commentaire"),
    )

def normalize_appointments(payload: Any) -> List[Appointment]:
    """Normalize a list payload; tolerates ``{"rendezVous": [...]}`` style wrappers."""
    if isinstance(payload, dict):
        for key in ("rendezVous", "rdvs", "data"):
            if isinstance(payload.get(key), list):
                payload = payload[key]
                break
    if not isinstance(payload, list):
        return []
    return [normalize_appointment(item) for item in payload if isinstance(item, dict)]
