import logging
from datetime import datetime
from typing import List, Optional

from laburoya.core.datastore.repository.base import Repository
from laburoya.core.exceptions import NotFoundException, UnauthorizedException
from laburoya.core.model.schemas import AdminUserUpdate, MatchStatus, UserAccount, UserRole
from laburoya.service.match_lifecycle import enrich

logger = logging.getLogger(__name__)


def paginate(key: str, items: List[dict], limit: int, offset: int) -> dict:
    return {
        key: items[offset:offset + limit],
        "total": len(items),
        "limit": limit,
        "offset": offset
    }


class AdminService:
    """Consultas y mantenimiento del back-office, solo para superusuarios."""

    def __init__(self, repository: Repository):
        self.repository = repository

    async def get_stats(self) -> dict:
        users = await self.repository.list_users()
        matches = await self.repository.list_matches()
        offers = await self.repository.find_job_offers()

        return {
            "total_users": len(users),
            "users_by_role": {role.value: sum(1 for u in users if u.role == role) for role in UserRole},
            "total_matches": len(matches),
            "matches_by_status": {
                status.value: sum(1 for m in matches if m.status == status) for status in MatchStatus
            },
            "total_job_offers": len(offers),
            "active_job_offers": sum(1 for o in offers if o.active),
            "inactive_job_offers": sum(1 for o in offers if not o.active)
        }

    async def _get_profile(self, user: UserAccount):
        if user.role == UserRole.WORKER:
            return await self.repository.get_worker(user.uid)
        if user.role == UserRole.EMPLOYER:
            return await self.repository.get_employer(user.uid)
        return None

    async def list_users(self, role: Optional[UserRole], limit: int, offset: int) -> dict:
        users = await self.repository.list_users(role)

        views = []
        for user in users:
            view = user.model_dump()
            profile = await self._get_profile(user)
            view["profile"] = profile.model_dump() if profile else None
            if user.role == UserRole.EMPLOYER:
                offers = await self.repository.find_job_offers(employer_id=user.uid)
                if offers:
                    view["job_offers"] = [o.model_dump() for o in offers]
            views.append(view)

        return paginate("users", views, limit, offset)

    async def get_user_detail(self, uid: str) -> dict:
        user = await self.repository.get_user(uid)
        if user is None:
            raise NotFoundException("User not found")

        profile = await self._get_profile(user)
        stats = {"matches": 0, "job_offers": 0, "chats": 0}
        if user.role == UserRole.WORKER:
            stats["matches"] = len(await self.repository.list_matches(worker_id=uid))
            stats["chats"] = len(await self.repository.list_chats(worker_id=uid))
        elif user.role == UserRole.EMPLOYER:
            stats["matches"] = len(await self.repository.list_matches(employer_id=uid))
            stats["job_offers"] = len(await self.repository.find_job_offers(employer_id=uid))
            stats["chats"] = len(await self.repository.list_chats(employer_id=uid))

        return {
            "user": user.model_dump(),
            "profile": profile.model_dump() if profile else None,
            "stats": stats
        }

    async def update_user(self, uid: str, data: AdminUserUpdate) -> UserAccount:
        user = await self.repository.get_user(uid)
        if user is None:
            raise NotFoundException("User not found")

        updates = {field: value for field, value in data.model_dump(exclude_unset=True).items() if value is not None}
        updates["updated_at"] = datetime.utcnow()
        user = user.model_copy(update=updates)
        await self.repository.save_user(user)
        logger.info(f"Admin updated user {uid}: {sorted(updates)}")
        return user

    async def delete_user(self, uid: str, hard: bool = False) -> str:
        """
        Baja lógica (disabled) o borrado físico de la cuenta, su perfil y sus
        ofertas. Matches y chats que referencian al usuario no se borran.
        """
        user = await self.repository.get_user(uid)
        if user is None:
            raise NotFoundException("User not found")
        if user.role == UserRole.SUPERUSER:
            raise UnauthorizedException("Cannot delete superuser accounts")

        if hard:
            await self.repository.purge_user(user)
            logger.info(f"User {uid} permanently deleted")
            return "User permanently deleted"

        now = datetime.utcnow()
        await self.repository.save_user(user.model_copy(update={
            "disabled": True,
            "deleted_at": now,
            "updated_at": now
        }))
        logger.info(f"User {uid} disabled")
        return "User disabled"

    async def list_job_offers(
            self,
            active: Optional[bool],
            employer_id: Optional[str],
            limit: int,
            offset: int
    ) -> dict:
        offers = await self.repository.find_job_offers(active=active, employer_id=employer_id)

        views = []
        for offer in offers:
            view = offer.model_dump()
            view["employer"] = None
            enrich(view, "employer", await self.repository.get_employer(offer.employer_id))
            views.append(view)
        return paginate("job_offers", views, limit, offset)

    async def list_matches(self, status: Optional[MatchStatus], limit: int, offset: int) -> dict:
        matches = await self.repository.list_matches(status=status)

        views = []
        for match in matches:
            view = match.model_dump()
            view["worker"] = None
            view["employer"] = None
            enrich(view, "worker", await self.repository.get_worker(match.worker_id))
            enrich(view, "employer", await self.repository.get_employer(match.employer_id))
            views.append(view)
        return paginate("matches", views, limit, offset)
