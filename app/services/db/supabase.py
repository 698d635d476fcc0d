import structlog
from supabase import AsyncClient
from supabase.lib.client_options import AsyncClientOptions

from app.services.db.base import BaseDBConnectionService, MissingDatabaseConfigError
from supabase.client import create_async_client

from app.settings import settings

logger = structlog.get_logger(__name__)


class SupabaseConnectionService(BaseDBConnectionService):
    db: AsyncClient | None = None
    client_info = "calltrack-pro-license-api"

    async def _connect(self, **kwargs):
        db_config = settings.db_config
        if db_config is None:
            raise MissingDatabaseConfigError("Missing SUPABASE_URL or SUPABASE_SERVICE_ROLE_KEY")
        if not self.db:
            self.db = await create_async_client(
                db_config.url,
                db_config.service_role_key,
                AsyncClientOptions(
                    auto_refresh_token=False,
                    persist_session=False,
                    headers={"X-Client-Info": self.client_info},
                    postgrest_client_timeout=settings.store_timeout,
                    **kwargs
                )
            )
            logger.info("Connected to Supabase", url=db_config.url)
        return self.db
