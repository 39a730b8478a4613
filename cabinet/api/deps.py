import datetime as dt
from typing import Callable, List

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials

from ..core.cache import get_redis, is_session_revoked
from ..core.config import settings
from ..core.http import BackendClient, get_backend
from ..core.security import AuthenticationError, AuthorizationError, Session, UserRole, security, verify_session_token
from ..services.appointment_service import AppointmentService
from ..services.dashboards import (
    DashboardController,
    DoctorDashboardController,
    PatientDashboardController,
    SecretaryDashboardController,
)
from ..services.gateway import (
    AuthGateway,
    DoctorGateway,
    NotificationGateway,
    PatientGateway,
    ProfileGateway,
    SecretaryGateway,
    TreatmentGateway,
)


async def get_current_session(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    redis_client=Depends(get_redis),
) -> Session:
    """Decode the portal session token from the Authorization header."""
    session = verify_session_token(credentials.credentials)
    if not session:
        raise AuthenticationError("Invalid or expired session")

    if is_session_revoked(redis_client, session.jti):
        raise AuthenticationError("Session has been logged out")

    return session


# Role-based access control dependencies
def require_role(allowed_roles: List[UserRole]):
    """Create a dependency that requires specific user roles."""
    async def role_checker(
        session: Session = Depends(get_current_session)
    ) -> Session:
        if session.role not in allowed_roles:
            raise AuthorizationError(
                f"Access denied. Required roles: {[role.value for role in allowed_roles]}"
            )
        return session

    return role_checker


get_doctor_session = require_role([UserRole.DOCTOR])
get_secretary_session = require_role([UserRole.SECRETARY])
get_patient_session = require_role([UserRole.PATIENT])


# Rate limiting dependency
async def rate_limit_check(
    request: Request,
    redis_client=Depends(get_redis)
) -> None:
    """Per-IP request budget for the unauthenticated account endpoints."""
    client_ip = request.client.host if request.client else "unknown"
    key = f"rate_limit:{request.url.path}:{client_ip}"

    current_requests = redis_client.get(key)
    if current_requests is None:
        redis_client.setex(key, settings.RATE_LIMIT_WINDOW_SECONDS, 1)
    else:
        if int(current_requests) >= settings.RATE_LIMIT_MAX_REQUESTS:
            raise HTTPException(
                status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                detail="Trop de tentatives. Veuillez réessayer plus tard."
            )
        redis_client.incr(key)


def get_clock() -> Callable[[], dt.datetime]:
    return dt.datetime.now


# Gateway factories
def get_auth_gateway(backend: BackendClient = Depends(get_backend)) -> AuthGateway:
    return AuthGateway(backend)


def get_profile_gateway(
    backend: BackendClient = Depends(get_backend),
    session: Session = Depends(get_current_session),
) -> ProfileGateway:
    return ProfileGateway(backend, session)


def get_notification_gateway(
    backend: BackendClient = Depends(get_backend),
    session: Session = Depends(get_current_session),
) -> NotificationGateway:
    return NotificationGateway(backend, session)


def get_patient_gateway(
    backend: BackendClient = Depends(get_backend),
    session: Session = Depends(get_patient_session),
) -> PatientGateway:
    return PatientGateway(backend, session)


def get_secretary_gateway(
    backend: BackendClient = Depends(get_backend),
    session: Session = Depends(get_secretary_session),
) -> SecretaryGateway:
    return SecretaryGateway(backend, session)


def get_doctor_gateway(
    backend: BackendClient = Depends(get_backend),
    session: Session = Depends(get_doctor_session),
) -> DoctorGateway:
    return DoctorGateway(backend, session)


def get_treatment_gateway(
    backend: BackendClient = Depends(get_backend),
    session: Session = Depends(require_role([UserRole.DOCTOR, UserRole.PATIENT])),
) -> TreatmentGateway:
    return TreatmentGateway(backend, session)


def get_appointment_service(
    backend: BackendClient = Depends(get_backend),
    session: Session = Depends(get_current_session),
    clock: Callable[[], dt.datetime] = Depends(get_clock),
) -> AppointmentService:
    """Coordinator wired with the gateway that matches the actor's role."""
    return AppointmentService(
        session,
        secretary=SecretaryGateway(backend, session) if session.role == UserRole.SECRETARY else None,
        patient=PatientGateway(backend, session) if session.role == UserRole.PATIENT else None,
        doctor=DoctorGateway(backend, session) if session.role == UserRole.DOCTOR else None,
        today=lambda: clock().date(),
    )


def get_dashboard(
    backend: BackendClient = Depends(get_backend),
    session: Session = Depends(get_current_session),
    service: AppointmentService = Depends(get_appointment_service),
    clock: Callable[[], dt.datetime] = Depends(get_clock),
) -> DashboardController:
    """Pick the dashboard controller for the actor's role."""
    notifications = NotificationGateway(backend, session)
    if session.role == UserRole.DOCTOR:
        return DoctorDashboardController(
            session, DoctorGateway(backend, session), TreatmentGateway(backend, session),
            notifications, service, now=clock,
        )
    if session.role == UserRole.SECRETARY:
        return SecretaryDashboardController(
            session, SecretaryGateway(backend, session), notifications, service, now=clock,
        )
    return PatientDashboardController(
        session, PatientGateway(backend, session), notifications, service, now=clock,
    )


def get_secretary_dashboard(
    session: Session = Depends(get_secretary_session),
    dashboard: DashboardController = Depends(get_dashboard),
) -> SecretaryDashboardController:
    return dashboard


def get_patient_dashboard(
    session: Session = Depends(get_patient_session),
    dashboard: DashboardController = Depends(get_dashboard),
) -> PatientDashboardController:
    return dashboard


def get_doctor_dashboard(
    session: Session = Depends(get_doctor_session),
    dashboard: DashboardController = Depends(get_dashboard),
) -> DoctorDashboardController:
    return dashboard
