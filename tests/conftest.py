"""
Fixtures compartidas.

Los servicios se prueban contra InMemoryRepository y un publicador de
eventos que registra lo enviado; los tests de integración usan la app de
FastAPI con esos mismos dobles y tokens firmados con la clave configurada.
"""
from datetime import datetime, timedelta
from typing import Optional

import pytest
from fastapi.testclient import TestClient
from jose import jwt

from laburoya.config.settings import settings
from laburoya.core.datastore.repository.memory import InMemoryRepository
from laburoya.core.event.publisher import EventPublisher
from laburoya.core.model.schemas import (
    EmployerProfile,
    JobOffer,
    UserAccount,
    UserRole,
    WorkerProfile,
)
from laburoya.main import create_app
from laburoya.service.chat import ChatService
from laburoya.service.match_engine import MatchEngine
from laburoya.service.match_lifecycle import MatchLifecycleManager


class RecordingPublisher(EventPublisher):
    def __init__(self):
        self.events = []

    async def send_event(self, topic: str, event: dict):
        self.events.append((topic, event))

    def types(self):
        return [event["type"] for _, event in self.events]


class Seeder:
    """Atajos para cargar documentos directamente en el repositorio."""

    def __init__(self, repository: InMemoryRepository):
        self.repository = repository

    async def user(self, uid: str, role: UserRole, secondary_role: Optional[UserRole] = None) -> UserAccount:
        account = UserAccount(uid=uid, role=role, secondary_role=secondary_role, email=f"{uid}@example.com")
        await self.repository.save_user(account)
        return account

    async def worker(self, uid: str, rubro: str = "gastronomia", puesto: str = "Cocinero",
                     active: bool = True, **extra) -> WorkerProfile:
        await self.user(uid, UserRole.WORKER)
        profile = WorkerProfile(uid=uid, rubro=rubro, puesto=puesto, active=active, **extra)
        await self.repository.save_worker(profile)
        return profile

    async def employer(self, uid: str, business_name: str = "Parrilla El Puerto",
                       rubro: str = "gastronomia") -> EmployerProfile:
        await self.user(uid, UserRole.EMPLOYER)
        profile = EmployerProfile(uid=uid, business_name=business_name, rubro=rubro)
        await self.repository.save_employer(profile)
        return profile

    async def offer(self, employer_id: str, rubro: str = "gastronomia", puesto: str = "Cocinero",
                    active: bool = True, created_at: Optional[datetime] = None, **extra) -> JobOffer:
        offer = JobOffer(employer_id=employer_id, rubro=rubro, puesto=puesto, active=active,
                         created_at=created_at or datetime.utcnow(), **extra)
        return await self.repository.create_job_offer(offer)


def make_token(uid: str, email: Optional[str] = None, expires_in: timedelta = timedelta(minutes=30),
               secret: Optional[str] = None) -> str:
    payload = {"sub": uid, "exp": datetime.utcnow() + expires_in}
    if email:
        payload["email"] = email
    return jwt.encode(payload, secret or settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def auth_headers(uid: str) -> dict:
    return {"Authorization": f"Bearer {make_token(uid, email=f'{uid}@example.com')}"}


@pytest.fixture
def repository():
    return InMemoryRepository()


@pytest.fixture
def publisher():
    return RecordingPublisher()


@pytest.fixture
def seed(repository):
    return Seeder(repository)


@pytest.fixture
def engine(repository, publisher):
    return MatchEngine(repository, publisher)


@pytest.fixture
def lifecycle(repository, publisher):
    return MatchLifecycleManager(repository, publisher)


@pytest.fixture
def chat_service(repository, publisher):
    return ChatService(repository, publisher)


@pytest.fixture
def client(repository, publisher):
    app = create_app(repository=repository, event_publisher=publisher)
    return TestClient(app)


@pytest.fixture
def headers():
    return auth_headers


@pytest.fixture
def token_factory():
    return make_token
