"""
Promueve una cuenta a superusuario (o la crea si no existe).

Uso:
    python -m laburoya.scripts.create_superuser <uid> [--email admin@example.com]
"""
import argparse
import asyncio
import logging

from laburoya.config.database import initialize_database
from laburoya.config.settings import settings
from laburoya.core.model.schemas import UserRole
from laburoya.service.accounts import AccountService

logger = logging.getLogger(__name__)


async def create_superuser(uid: str, email: str = None) -> None:
    repository = await initialize_database(settings)
    accounts = AccountService(repository)

    existing = await repository.get_user(uid)
    if existing is not None and existing.role == UserRole.SUPERUSER:
        logger.info(f"User {uid} is already a superuser")
        return

    account = await accounts.promote_to_superuser(uid, email=email)
    logger.info(f"Superuser ready: uid={account.uid} email={account.email}")


def main(argv=None):
    logging.basicConfig(level=settings.LOG_LEVEL, format="%(levelname)s %(message)s")

    parser = argparse.ArgumentParser(description="Create or promote a LaburoYA superuser")
    parser.add_argument("uid", help="Identity provider user id (token `sub`)")
    parser.add_argument("--email", default=None)
    args = parser.parse_args(argv)

    asyncio.run(create_superuser(args.uid, args.email))


if __name__ == "__main__":
    main()
