"""Application FastAPI principale du registre des menus E-Unify."""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.concurrency import run_in_threadpool
from fastapi.middleware.cors import CORSMiddleware
from uvicorn.middleware.proxy_headers import ProxyHeadersMiddleware

from backend.api import auth, menu_settings
from backend.core import db
from backend.core.config import settings
from backend.core.logging_config import configure_logging
from backend.core.storage import MenuRegistryStore
from backend.services.menu_initializer import initialize_with_retry

configure_logging()

logger = logging.getLogger(__name__)


@asynccontextmanager
async def _lifespan(app: FastAPI):
    client = db.create_client(settings)
    store = MenuRegistryStore.from_client(client, settings)
    try:
        if settings.MENU_INIT_ON_STARTUP:
            # Échec immédiat : l'application ne sert jamais un registre partiellement initialisé.
            report = await run_in_threadpool(
                initialize_with_retry,
                store,
                max_attempts=settings.MENU_INIT_MAX_ATTEMPTS,
                backoff=settings.MENU_INIT_BACKOFF_SECONDS,
            )
            logger.info("[MENU] Registre prêt (%s)", report.summary())
        app.state.menu_store = store
        yield
    finally:
        app.state.menu_store = None
        client.close()


app = FastAPI(title="E-Unify Menu Settings API", version="1.0.0", lifespan=_lifespan)

app.add_middleware(
    ProxyHeadersMiddleware,
    trusted_hosts="*",
)
app.add_middleware(
    CORSMiddleware,
    allow_origins=list(settings.CORS_ORIGINS),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(auth.router, prefix="/auth", tags=["auth"])
app.include_router(menu_settings.router, prefix="/menu-settings", tags=["menu-settings"])


@app.get("/health", tags=["health"])
async def healthcheck() -> dict[str, str]:
    """Renvoie l'état de santé générique du service."""
    return {"status": "ok"}
