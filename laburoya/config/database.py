import logging

from laburoya.config.settings import Settings, settings as default_settings
from laburoya.core.datastore.repository.base import Repository
from laburoya.core.datastore.repository.memory import InMemoryRepository
from laburoya.core.datastore.repository.mongodb import MongoDBRepository

logger = logging.getLogger(__name__)


async def initialize_database(settings: Settings = default_settings) -> Repository:
    """
    Crea el repositorio configurado y, en MongoDB, verifica la conexión y
    configura las colecciones e índices necesarios.
    """
    if settings.STORE_BACKEND == "memory":
        logger.warning("Using in-memory store; data will not survive a restart")
        return InMemoryRepository()

    if settings.STORE_BACKEND != "mongodb":
        raise ValueError(f"STORE_BACKEND no soportado: {settings.STORE_BACKEND}")

    repository = MongoDBRepository(
        settings.MONGO_URI,
        settings.MONGO_DB_NAME,
        use_transactions=settings.MONGO_USE_TRANSACTIONS,
    )
    if not await repository.verify_connection():
        raise RuntimeError(f"No se pudo conectar a MongoDB en {settings.MONGO_DB_NAME}")
    await repository.initialize()
    return repository
