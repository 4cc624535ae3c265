# =============================================================================
# app/context.py - Application Context
# =============================================================================
# Everything that exists once per running instance, built once at startup
# and passed to whatever needs it (no module-level client singletons):
#
#   settings  - validated configuration
#   session   - SessionStore (the one live Credential)
#   data      - DataAccess façade
#   backend   - BackendApi client
#   tracker   - PageViewTracker
#
# Usage:
#   async with build_context() as ctx:
#       await ctx.session.sign_in(email, password)
#       posts = await ctx.data.select("blog_posts")
# =============================================================================

import logging
from dataclasses import dataclass, field

import httpx

from app.config import Settings, load_settings
from lib.auth_client import AuthClient
from lib.backend_api import BackendApi
from lib.data_access import DataAccess, LiveDataAccess
from lib.remote_client import RemoteClient
from lib.session_store import SessionStore
from lib.storage import CredentialStorage, FileStorage, MemoryStorage
from lib.tracker import PageViewTracker
from lib.utils import project_ref

logger = logging.getLogger(__name__)


@dataclass
class AppContext:
    """Per-instance services; close with `aclose()` or `async with`."""

    settings: Settings
    session: SessionStore
    data: DataAccess
    auth: AuthClient
    backend: BackendApi
    tracker: PageViewTracker
    _clients: list[RemoteClient] = field(default_factory=list, repr=False)

    async def aclose(self) -> None:
        await self.tracker.flush()
        for client in self._clients:
            await client.aclose()
        logger.info("Application context closed")

    async def __aenter__(self) -> "AppContext":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()


def build_context(
    settings: Settings | None = None,
    storage: CredentialStorage | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> AppContext:
    """
    Assemble the application context.

    Args:
        settings: Pre-loaded settings (loaded from the environment if omitted)
        storage: Credential slot (FileStorage when CREDENTIAL_STORE_PATH is
            set, else in-memory)
        transport: httpx transport shared by every client (tests inject
            httpx.MockTransport here)

    Raises:
        ConfigError: If settings are loaded here and are invalid
    """
    settings = settings or load_settings()
    timeout = settings.HTTP_TIMEOUT_SECONDS

    service_client = RemoteClient(
        settings.SUPABASE_URL,
        default_headers={"apikey": settings.SUPABASE_ANON_KEY},
        timeout=timeout,
        transport=transport,
    )
    backend_client = RemoteClient(settings.API_URL, timeout=timeout, transport=transport)
    analytics_client = RemoteClient(settings.ANALYTICS_ENDPOINT, timeout=timeout, transport=transport)

    if storage is None:
        storage = (
            FileStorage(settings.CREDENTIAL_STORE_PATH)
            if settings.CREDENTIAL_STORE_PATH
            else MemoryStorage()
        )

    auth = AuthClient(service_client)
    session = SessionStore(
        auth,
        storage=storage,
        storage_key=f"sb-{project_ref(settings.SUPABASE_URL)}-auth-token",
        refresh_margin=settings.SESSION_REFRESH_MARGIN_SECONDS,
    )
    session.restore()

    data = LiveDataAccess(
        service_client,
        session,
        anon_key=settings.SUPABASE_ANON_KEY,
        public_collections=settings.public_collections_set,
    )

    logger.info(
        f"Application context ready ({settings.ENVIRONMENT}, "
        f"{len(settings.public_collections_set)} public collections)"
    )

    return AppContext(
        settings=settings,
        session=session,
        data=data,
        auth=auth,
        backend=BackendApi(backend_client, session),
        tracker=PageViewTracker(analytics_client, settings.ANALYTICS_ENDPOINT),
        _clients=[service_client, backend_client, analytics_client],
    )
