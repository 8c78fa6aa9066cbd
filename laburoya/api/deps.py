import logging
from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from pydantic import BaseModel

from laburoya.config.settings import settings
from laburoya.core.datastore.repository.base import Repository
from laburoya.core.event.publisher import EventPublisher
from laburoya.core.exceptions import AuthenticationException, UnauthorizedException
from laburoya.core.model.schemas import UserAccount, UserRole
from laburoya.service.accounts import AccountService
from laburoya.service.admin import AdminService
from laburoya.service.chat import ChatService
from laburoya.service.job_offers import JobOfferService
from laburoya.service.match_engine import MatchEngine
from laburoya.service.match_lifecycle import MatchLifecycleManager
from laburoya.service.profiles import EmployerProfileService, WorkerProfileService

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


class AuthenticatedUser(BaseModel):
    uid: str
    email: Optional[str] = None


def decode_token(token: str) -> AuthenticatedUser:
    """Verifica el token bearer y devuelve la identidad que contiene (claim `sub`)."""
    options = {"verify_aud": settings.JWT_AUDIENCE is not None}
    try:
        payload = jwt.decode(
            token,
            settings.JWT_SECRET_KEY,
            algorithms=[settings.JWT_ALGORITHM],
            audience=settings.JWT_AUDIENCE,
            options=options
        )
    except JWTError as e:
        logger.info(f"Rejected bearer token: {str(e)}")
        raise AuthenticationException("Invalid or expired token")

    uid = payload.get("sub")
    if not uid:
        raise AuthenticationException("Invalid or expired token")
    return AuthenticatedUser(uid=uid, email=payload.get("email"))


async def get_current_user(
        credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme)
) -> AuthenticatedUser:
    if credentials is None or credentials.scheme.lower() != "bearer":
        raise AuthenticationException("No token provided")
    return decode_token(credentials.credentials)


def get_repository(request: Request) -> Repository:
    return request.app.state.repository


def get_event_publisher(request: Request) -> EventPublisher:
    return request.app.state.event_publisher


def get_account_service(repository: Repository = Depends(get_repository)) -> AccountService:
    return AccountService(repository)


async def get_current_account(
        user: AuthenticatedUser = Depends(get_current_user),
        accounts: AccountService = Depends(get_account_service)
) -> UserAccount:
    """Cuenta del llamador. Rechaza con 403 las cuentas deshabilitadas."""
    return await accounts.get_account(user.uid)


async def get_superuser(account: UserAccount = Depends(get_current_account)) -> UserAccount:
    if account.role != UserRole.SUPERUSER:
        raise UnauthorizedException("Access denied. Superuser privileges required.")
    return account


def get_match_engine(
        repository: Repository = Depends(get_repository),
        publisher: EventPublisher = Depends(get_event_publisher)
) -> MatchEngine:
    return MatchEngine(repository, publisher)


def get_match_lifecycle(
        repository: Repository = Depends(get_repository),
        publisher: EventPublisher = Depends(get_event_publisher)
) -> MatchLifecycleManager:
    return MatchLifecycleManager(repository, publisher)


def get_chat_service(
        repository: Repository = Depends(get_repository),
        publisher: EventPublisher = Depends(get_event_publisher)
) -> ChatService:
    return ChatService(repository, publisher)


def get_worker_service(
        repository: Repository = Depends(get_repository),
        engine: MatchEngine = Depends(get_match_engine)
) -> WorkerProfileService:
    return WorkerProfileService(repository, engine)


def get_employer_service(repository: Repository = Depends(get_repository)) -> EmployerProfileService:
    return EmployerProfileService(repository)


def get_job_offer_service(
        repository: Repository = Depends(get_repository),
        engine: MatchEngine = Depends(get_match_engine)
) -> JobOfferService:
    return JobOfferService(repository, engine)


def get_admin_service(repository: Repository = Depends(get_repository)) -> AdminService:
    return AdminService(repository)
