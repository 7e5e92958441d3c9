from fastapi.templating import Jinja2Templates

from .catalog import CatalogSource, HttpCatalogSource, VocabularyManager
from .config import settings
from .engine import QuizEngine
from .scheduler import AsyncioScheduler
from .sessions import SessionStore

templates = Jinja2Templates(directory="templates")
vocab_manager = VocabularyManager(f"{settings.VOCAB_DIR}")


def catalog_source() -> CatalogSource:
    if settings.CATALOG_SOURCE == "http":
        return HttpCatalogSource(
            settings.API_URL,
            token=settings.API_TOKEN,
            timeout=settings.CATALOG_TIMEOUT_SECONDS,
        )
    return vocab_manager


def new_engine(session_id: str) -> QuizEngine:
    return QuizEngine(scheduler=AsyncioScheduler(), session_id=session_id)


session_store = SessionStore(new_engine)
