from .auth import AuthGateway, LoginResult
from .doctor import DoctorGateway
from .notification import NotificationGateway
from .patient import PatientGateway
from .profile import ProfileGateway
from .secretary import SecretaryGateway
from .treatment import TreatmentGateway

__all__ = [
    "AuthGateway",
    "LoginResult",
    "DoctorGateway",
    "NotificationGateway",
    "PatientGateway",
    "ProfileGateway",
    "SecretaryGateway",
    "TreatmentGateway",
]
