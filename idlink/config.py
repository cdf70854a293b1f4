import logging
import os
import sys
from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, model_validator
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource
from typing_extensions import Self


def default_data_dir() -> Path:
    """Directory for local state (SQLite database). Overridable via IDLINK_DATA_DIR."""
    override = os.environ.get("IDLINK_DATA_DIR")
    if override:
        return Path(override).expanduser()
    return Path.home() / ".local" / "share" / "idlink"


class YamlConfigSettingsSource(PydanticBaseSettingsSource):
    """Load settings from YAML file specified by IDLINK_CONFIG_FILE env var."""

    def get_field_value(self, field: Any, field_name: str) -> tuple[Any, str, bool]:
        yaml_data = self._load_yaml_config()
        field_value = yaml_data.get(field_name)
        return field_value, field_name, False

    def __call__(self) -> dict[str, Any]:
        return self._load_yaml_config()

    def _load_yaml_config(self) -> dict[str, Any]:
        config_file = os.environ.get("IDLINK_CONFIG_FILE")
        if config_file:
            path = Path(config_file)
            if path.exists():
                return yaml.safe_load(path.read_text()) or {}
        return {}


class Server(BaseModel):
    """Server configuration (nested in Config, uses env_nested_delimiter)."""

    name: str = "idlink"
    version: str = "0.1.0"
    description: str = "Links GitHub accounts to corporate directory identities"


class DatabaseConfig(BaseModel):
    """Database configuration.

    An empty url means "derive a SQLite file under the data directory"; see
    Config.derive_database_url.
    """

    url: str = ""
    echo: bool = False
    auto_migrate: bool = True


class LoggingConfig(BaseModel):
    """Logging configuration (nested in Config, uses env_nested_delimiter)."""

    level: str = "INFO"
    format: str = "%(asctime)s %(levelname)-8s [%(name)s] %(message)s"
    date_format: str = "%Y-%m-%d %H:%M:%S"

    @property
    def file(self) -> str | None:
        """Get log file path from IDLINK_LOG_FILE env var."""
        return os.environ.get("IDLINK_LOG_FILE")


class SessionConfig(BaseModel):
    """Signed session tokens carrying the caller's GitHub and corporate identities."""

    secret: str = ""  # Must be set in production
    algorithm: str = "HS256"
    expire_minutes: int = 60


class AuthenticationConfig(BaseModel):
    """Which identity the portal signs users in with first."""

    scheme: Literal["aad", "github"] = "aad"


class ActiveDirectoryConfig(BaseModel):
    """Guest policy applied before any link is created or updated."""

    block_guest_user_types: bool = False
    authorized_guest_ids: set[str] = set()  # Corporate object ids allowed despite being guests


class GraphConfig(BaseModel):
    """Microsoft Graph application credentials for directory lookups."""

    tenant_id: str = ""
    client_id: str = ""
    client_secret: str = ""
    authority: str = "https://login.microsoftonline.com"
    base_url: str = "https://graph.microsoft.com/v1.0"

    @property
    def is_configured(self) -> bool:
        return bool(self.tenant_id and self.client_id and self.client_secret)


class BrandConfig(BaseModel):
    company_name: str = "Contoso"
    operations_email: str | None = None  # Copied on service-account welcome mail


class HttpMailConfig(BaseModel):
    """Mail API endpoint accepting JSON messages."""

    url: str = ""
    api_key: str = ""


class SmtpMailConfig(BaseModel):
    host: str = "localhost"
    port: int = 587
    username: str = ""
    password: str = ""
    use_tls: bool = True


class MailConfig(BaseModel):
    """Welcome mail delivery. transport="none" disables sending entirely."""

    transport: Literal["none", "http", "smtp"] = "none"
    sender: str = "noreply@example.com"
    http: HttpMailConfig = HttpMailConfig()
    smtp: SmtpMailConfig = SmtpMailConfig()


class CacheConfig(BaseModel):
    link_ttl_seconds: float = 300.0


class LinkFlowConfig(BaseModel):
    """Where the browser goes after link flows complete."""

    onboarding_url: str = "/?onboarding=yes"
    home_url: str = "/"
    sign_in_url: str = "/?signin"


class Config(BaseSettings):
    server: Server = Server()
    database: DatabaseConfig = DatabaseConfig()
    logging: LoggingConfig = LoggingConfig()
    session: SessionConfig = SessionConfig()
    authentication: AuthenticationConfig = AuthenticationConfig()
    active_directory: ActiveDirectoryConfig = ActiveDirectoryConfig()
    graph: GraphConfig = GraphConfig()
    brand: BrandConfig = BrandConfig()
    mail: MailConfig = MailConfig()
    cache: CacheConfig = CacheConfig()
    links: LinkFlowConfig = LinkFlowConfig()

    model_config = {
        "env_prefix": "IDLINK_",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "env_nested_delimiter": "__",  # Allows IDLINK_DATABASE__URL override
    }

    @model_validator(mode="after")
    def derive_database_url(self) -> Self:
        """Derive a SQLite database URL under the data directory if none was given."""
        if not self.database.url:
            db_file = default_data_dir() / "idlink.db"
            self.database = DatabaseConfig(
                url=f"sqlite+aiosqlite:///{db_file}",
                echo=self.database.echo,
                auto_migrate=self.database.auto_migrate,
            )
        return self

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Customize settings sources to include YAML config.

        Priority (highest to lowest):
        1. init_settings - values passed to Config()
        2. env_settings - environment variables
        3. dotenv_settings - .env file
        4. yaml_settings - IDLINK_CONFIG_FILE yaml
        5. file_secret_settings - secrets from files
        """
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            YamlConfigSettingsSource(settings_cls),
            file_secret_settings,
        )


def configure_logging(config: LoggingConfig) -> None:
    """Configure Python logging based on config.

    Should be called early in application startup so all loggers pick up
    the configuration.
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(config.level)

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    formatter = logging.Formatter(config.format, datefmt=config.date_format)

    if config.file:
        log_path = Path(config.file).expanduser()
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path)
        file_handler.setLevel(config.level)
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)
    else:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(config.level)
        console_handler.setFormatter(formatter)
        root_logger.addHandler(console_handler)

    # Reduce noise from third-party libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("asyncio").setLevel(logging.WARNING)
    logging.getLogger("aiosqlite").setLevel(logging.WARNING)
    logging.getLogger("alembic").setLevel(logging.INFO)

    logging.debug("Logging configured: level=%s, file=%s", config.level, config.file)
