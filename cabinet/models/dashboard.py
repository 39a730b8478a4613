from typing import Dict, List, Optional

from pydantic import BaseModel

from .appointment import Appointment
from .care import Medication, Prescription, Treatment
from .notification import Notification
from .patient import Patient


class NotificationPanel(BaseModel):
    items: List[Notification] = []
    unread: int = 0
    error: Optional[str] = None


class DoctorDashboard(BaseModel):
    rendez_vous_aujourdhui: List[Appointment] = []
    ordonnances: List[Prescription] = []
    traitements: List[Treatment] = []
    statistiques: Dict[str, int] = {}
    notifications: NotificationPanel = NotificationPanel()
    # section name -> message, for sections that failed to load
    errors: Dict[str, str] = {}


class SecretaryDashboard(BaseModel):
    patients: List[Patient] = []
    rendez_vous: List[Appointment] = []
    rendez_vous_aujourdhui: List[Appointment] = []
    par_medecin: Dict[str, List[Appointment]] = {}
    statistiques: Dict[str, int] = {}
    notifications: NotificationPanel = NotificationPanel()
    error: Optional[str] = None
    # appointment just created, echoed back for display
    cree: Optional[Appointment] = None


class PatientDashboard(BaseModel):
    rendez_vous: List[Appointment] = []
    prochain_rendez_vous: Optional[Appointment] = None
    ordonnances: List[Prescription] = []
    medicaments: List[Medication] = []
    statistiques: Dict[str, int] = {}
    notifications: NotificationPanel = NotificationPanel()
    error: Optional[str] = None
