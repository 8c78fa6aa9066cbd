import logging
from datetime import datetime
from typing import List, Tuple

from laburoya.core.datastore.repository.base import Repository
from laburoya.core.exceptions import NotFoundException
from laburoya.core.model.schemas import (
    EmployerProfile,
    EmployerProfileCreate,
    Match,
    UserRole,
    WorkerProfile,
    WorkerProfileCreate,
)
from laburoya.service.accounts import AccountService
from laburoya.service.match_engine import MatchEngine

logger = logging.getLogger(__name__)


class WorkerProfileService:
    def __init__(self, repository: Repository, match_engine: MatchEngine):
        self.repository = repository
        self.accounts = AccountService(repository)
        self.match_engine = match_engine

    async def save_profile(self, uid: str, data: WorkerProfileCreate) -> Tuple[WorkerProfile, bool, List[Match]]:
        """
        Guarda el perfil completo (no es un patch) y lo activa, luego corre
        el matching. Devuelve el perfil, si era nuevo y los matches creados.
        """
        await self.accounts.require_role(uid, UserRole.WORKER)

        existing = await self.repository.get_worker(uid)
        now = datetime.utcnow()
        profile = WorkerProfile(
            uid=uid,
            **data.model_dump(),
            active=True,
            created_at=existing.created_at if existing else now,
            updated_at=now
        )
        await self.repository.save_worker(profile)

        matches = await self.match_engine.on_worker_profile_published(uid, profile)
        return profile, existing is None, matches

    async def get_profile(self, uid: str) -> WorkerProfile:
        profile = await self.repository.get_worker(uid)
        if profile is None:
            raise NotFoundException("Worker profile not found")
        return profile

    async def set_active(self, uid: str, active: bool) -> Tuple[WorkerProfile, List[Match]]:
        """Activa u oculta el perfil. Al reactivarlo se vuelve a correr el matching."""
        profile = await self.get_profile(uid)
        profile = profile.model_copy(update={"active": active, "updated_at": datetime.utcnow()})
        await self.repository.save_worker(profile)

        matches = []
        if active:
            matches = await self.match_engine.on_worker_profile_published(uid, profile)
        return profile, matches


class EmployerProfileService:
    def __init__(self, repository: Repository):
        self.repository = repository
        self.accounts = AccountService(repository)

    async def save_profile(self, uid: str, data: EmployerProfileCreate) -> Tuple[EmployerProfile, bool]:
        await self.accounts.require_role(uid, UserRole.EMPLOYER)

        existing = await self.repository.get_employer(uid)
        now = datetime.utcnow()
        profile = EmployerProfile(
            uid=uid,
            **data.model_dump(),
            active=True,
            created_at=existing.created_at if existing else now,
            updated_at=now
        )
        await self.repository.save_employer(profile)
        return profile, existing is None

    async def get_profile(self, uid: str) -> EmployerProfile:
        profile = await self.repository.get_employer(uid)
        if profile is None:
            raise NotFoundException("Employer profile not found")
        return profile
