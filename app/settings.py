from typing import List, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict, PydanticBaseSettingsSource, YamlConfigSettingsSource

from app.models.config import DBConfig
from app.utils.filesystem import get_project_root


class Settings(BaseSettings):
    debug: bool = True
    admin_issue_secret: Optional[str] = None
    supabase_url: Optional[str] = None
    supabase_service_role_key: Optional[str] = None
    sentry_dsn: Optional[str] = None
    store_timeout: float = 10.0
    cors_allow_origins: List[str] = ["*"]

    model_config = SettingsConfigDict(
        env_file=get_project_root() / ".env",
        yaml_file=get_project_root() / "config.yaml",
        extra="ignore",
    )

    @property
    def db_config(self) -> DBConfig | None:
        if not self.supabase_url or not self.supabase_service_role_key:
            return None
        return DBConfig(url=self.supabase_url, service_role_key=self.supabase_service_role_key)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return init_settings, env_settings, dotenv_settings, YamlConfigSettingsSource(settings_cls)


settings = Settings()
