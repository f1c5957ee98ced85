import logging

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


logger = logging.getLogger(__name__)


class CustomSettings(BaseSettings):
    """Application settings loaded from environment variables.

    Validates configuration at startup to catch misconfiguration early.
    Missing feed URLs are tolerated: the directory simply stays empty.
    """

    m3u_url: str | None = None
    epg_url: str | None = None
    host: str = "0.0.0.0"
    port: int = 3000
    log_level: str = "INFO"

    refresh_interval_sec: int = 3600
    fetch_timeout_sec: float = 15.0
    fetch_max_retries: int = 3
    fetch_backoff_factor: float = 2.0
    guide_parse_timeout_sec: int = 120  # 0 disables timeout

    self_ping_url: str | None = None
    self_ping_interval_sec: int = 120

    addon_id: str = "community.iptv-directory"
    addon_version: str = "1.0.0"
    addon_name: str = "IPTV Directory"
    addon_description: str = "IPTV with category filtering and EPG"
    addon_logo: str = "https://upload.wikimedia.org/wikipedia/commons/9/99/TV_icon_2.svg"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("m3u_url", "epg_url", "self_ping_url", mode="before")
    @classmethod
    def blank_url_to_none(cls, value):
        """Treat empty strings as unset."""
        if isinstance(value, str) and not value.strip():
            return None
        return value.strip() if isinstance(value, str) else value

    @field_validator("m3u_url", "epg_url", "self_ping_url")
    @classmethod
    def validate_urls(cls, value: str | None, info) -> str | None:
        """Validate feed URLs are HTTP/HTTPS."""
        if value is None:
            return value
        if not value.lower().startswith(("http://", "https://")):
            raise ValueError(f"{info.field_name} must be HTTP/HTTPS: {value}")
        return value

    @field_validator("port")
    @classmethod
    def validate_port(cls, value: int) -> int:
        if not 0 < value < 65536:
            raise ValueError("port must be between 1 and 65535")
        return value

    @field_validator(
        "refresh_interval_sec",
        "fetch_max_retries",
        "self_ping_interval_sec",
    )
    @classmethod
    def validate_positive_ints(cls, value: int, info) -> int:
        """Ensure interval and retry settings are positive."""
        if value <= 0:
            raise ValueError(f"{info.field_name} must be > 0")
        return value

    @field_validator("fetch_timeout_sec", "fetch_backoff_factor")
    @classmethod
    def validate_positive_floats(cls, value: float, info) -> float:
        if value <= 0:
            raise ValueError(f"{info.field_name} must be > 0")
        return value

    @field_validator("guide_parse_timeout_sec")
    @classmethod
    def validate_parse_timeout(cls, value: int) -> int:
        """Validate XML parsing timeout (seconds)."""
        if value < 0:
            raise ValueError("guide_parse_timeout_sec must be >= 0")
        return value

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        normalized = value.upper()
        allowed = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if normalized not in allowed:
            raise ValueError(f"log_level must be one of {sorted(allowed)}")
        return normalized

    @model_validator(mode="after")
    def validate_feed_configuration(self):
        """Warn about feeds that will never be fetched."""
        if not self.m3u_url:
            logger.warning("M3U_URL not configured - channel directory will stay empty")
        if not self.epg_url:
            logger.warning("EPG_URL not configured - channels will have no programme guide")
        return self

    def __init__(self, **data):
        """Initialize settings and log configuration."""
        super().__init__(**data)

        logger.info("Configuration loaded:")
        logger.info("  Playlist feed: %s", "configured" if self.m3u_url else "not configured")
        logger.info("  Guide feed: %s", "configured" if self.epg_url else "not configured")
        logger.info("  Listen: %s:%s", self.host, self.port)
        logger.info("  Refresh Interval: %ss", self.refresh_interval_sec)
        logger.info(
            "  Fetch Timeout: %.1fs (max retries: %s)",
            self.fetch_timeout_sec,
            self.fetch_max_retries,
        )
        logger.info(
            "  Guide Parse Timeout: %s",
            f"{self.guide_parse_timeout_sec}s" if self.guide_parse_timeout_sec else "disabled",
        )
        logger.info(
            "  Self Ping: %s",
            f"every {self.self_ping_interval_sec}s" if self.self_ping_url else "disabled",
        )


settings = CustomSettings()


def setup_logging() -> None:
    """Configure application logging."""
    logging.basicConfig(
        level=getattr(logging, settings.log_level),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
