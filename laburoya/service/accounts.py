import logging
from datetime import datetime
from typing import Optional

from laburoya.core.datastore.repository.base import Repository
from laburoya.core.exceptions import NotFoundException, UnauthorizedException
from laburoya.core.model.schemas import UserAccount, UserRole

logger = logging.getLogger(__name__)


class AccountService:
    """Registro de cuentas y resolución del rol con el que opera cada usuario."""

    def __init__(self, repository: Repository):
        self.repository = repository

    async def register(self, uid: str, role: UserRole, email: Optional[str] = None) -> UserAccount:
        """Crea la cuenta o cambia su rol conservando la fecha de alta."""
        existing = await self.repository.get_user(uid)
        now = datetime.utcnow()

        if existing is None:
            account = UserAccount(uid=uid, role=role, email=email, created_at=now, updated_at=now)
        else:
            if existing.role == UserRole.SUPERUSER:
                raise UnauthorizedException("Superusers cannot change their role here")
            account = existing.model_copy(update={
                "role": role,
                "email": email or existing.email,
                "updated_at": now
            })

        await self.repository.save_user(account)
        logger.info(f"User {uid} registered as {role.value}")
        return account

    async def get_account(self, uid: str) -> UserAccount:
        account = await self.repository.get_user(uid)
        if account is None:
            raise NotFoundException("User not found")
        if account.disabled:
            raise UnauthorizedException("User is disabled")
        return account

    async def require_role(self, uid: str, role: UserRole) -> UserAccount:
        account = await self.get_account(uid)
        if account.effective_role != role:
            raise UnauthorizedException(f"User must be registered as {role.value}")
        return account

    async def get_me(self, uid: str) -> dict:
        account = await self.get_account(uid)

        profile = None
        if account.effective_role == UserRole.WORKER:
            profile = await self.repository.get_worker(uid)
        elif account.effective_role == UserRole.EMPLOYER:
            profile = await self.repository.get_employer(uid)

        return {
            "user": account.model_dump(),
            "profile": profile.model_dump() if profile else None
        }

    async def set_secondary_role(self, uid: str, secondary_role: UserRole) -> UserAccount:
        account = await self.get_account(uid)
        if account.role != UserRole.SUPERUSER:
            raise UnauthorizedException("Only superusers can set a secondary role")

        account = account.model_copy(update={"secondary_role": secondary_role, "updated_at": datetime.utcnow()})
        await self.repository.save_user(account)
        return account

    async def promote_to_superuser(self, uid: str, email: Optional[str] = None) -> UserAccount:
        """Crea o promueve una cuenta de superusuario. Solo se usa desde scripts de operación."""
        account = await self.repository.get_user(uid)
        now = datetime.utcnow()
        if account is None:
            account = UserAccount(uid=uid, role=UserRole.SUPERUSER, email=email, created_at=now, updated_at=now)
        else:
            account = account.model_copy(update={"role": UserRole.SUPERUSER, "updated_at": now})

        await self.repository.save_user(account)
        logger.info(f"User {uid} promoted to superuser")
        return account
