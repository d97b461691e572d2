from contextlib import asynccontextmanager
import logging

from career_tools.ai.config import load_ai_config
from career_tools.ai.factory import get_model_client
from career_tools.core.config import settings
from career_tools.core.fallback_tables import get_fallback_config
from career_tools.interview.session import InterviewSessionMachine
from career_tools.pipeline.orchestrator import AnalysisOrchestrator
from career_tools.storage.db import SQLiteStore

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app):
    ai_config = load_ai_config()
    store = SQLiteStore(settings.database_path)
    store.init_db()
    get_fallback_config()

    client = get_model_client(ai_config)
    orchestrator = AnalysisOrchestrator(client, store, timeout_s=ai_config.timeout_s)
    app.state.store = store
    app.state.model_client = client
    app.state.orchestrator = orchestrator
    app.state.sessions = InterviewSessionMachine(orchestrator, store)

    if not getattr(client, "configured", True):
        logger.warning(
            "model_client_unconfigured provider=%s; every analysis will use the fallback",
            ai_config.provider,
        )
    logger.info(
        "startup_complete provider=%s model=%s db=%s",
        ai_config.provider,
        ai_config.model,
        settings.database_path,
    )
    yield
