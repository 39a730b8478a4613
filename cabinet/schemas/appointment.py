import datetime as dt
from typing import Optional

from pydantic import BaseModel


class ScheduleRequest(BaseModel):
    medecin_id: str
    patient_id: str
    date: dt.date
    heure: str
    commentaire: Optional[str] = None

    def to_backend(self) -> dict:
        payload = {
            "medecinId": self.medecin_id,
            "patientId": self.patient_id,
            "date": self.date.isoformat(),
            "heure": self.heure,
        }
        if self.commentaire:
            payload["commentaire"] = self.commentaire
        return payload


class AppointmentUpdate(BaseModel):
    """Partial edit; only the supplied fields are sent."""

    medecin_id: Optional[str] = None
    patient_id: Optional[str] = None
    date: Optional[dt.date] = None
    heure: Optional[str] = None
    commentaire: Optional[str] = None
    statut: Optional[str] = None

    def to_backend(self) -> dict:
        names = {"medecin_id": "medecinId", "patient_id": "patientId"}
        payload = {}
        for field, value in self.model_dump(exclude_none=True).items():
            if isinstance(value, dt.date):
                value = value.isoformat()
            payload[names.get(field, field)] = value
        return payload


class CancelRequest(BaseModel):
    reason: Optional[str] = None


class CommentRequest(BaseModel):
    commentaire: str
