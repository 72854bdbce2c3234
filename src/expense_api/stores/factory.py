"""
Store selection - picks the persistence backend from settings.
"""
import structlog

from ..config import Settings
from ..database import create_engine_for
from .base import Stores
from .file_store import JsonFileCategoryStore, JsonFileExpenseStore
from .sql_store import SqlCategoryStore, SqlDatabase, SqlExpenseStore

logger = structlog.get_logger()

FILE_BACKEND = "file"
DATABASE_BACKEND = "database"


def build_stores(settings: Settings) -> Stores:
    """Build the expense/category store pair for the configured backend"""
    backend = settings.STORE_BACKEND.lower()

    if backend == FILE_BACKEND:
        logger.info("Using file store", data_file=settings.DATA_FILE)
        return Stores(
            expenses=JsonFileExpenseStore(settings.DATA_FILE),
            categories=JsonFileCategoryStore(settings.CATEGORIES_FILE),
        )

    if backend == DATABASE_BACKEND:
        database = SqlDatabase(create_engine_for(settings.DATABASE_URL, echo=settings.DEBUG))
        logger.info("Using database store", url=database.engine.url.render_as_string(hide_password=True))
        return Stores(
            expenses=SqlExpenseStore(database),
            categories=SqlCategoryStore(database),
        )

    raise ValueError(
        f"Unknown STORE_BACKEND '{settings.STORE_BACKEND}'. "
        f"Must be one of: {FILE_BACKEND}, {DATABASE_BACKEND}"
    )
