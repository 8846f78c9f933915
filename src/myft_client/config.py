"""
Configuration for the myFT relationship client.

Each concern gets its own pydantic-settings class with its own env prefix.
All settings objects are frozen: they are read once at startup and passed
into the components that need them.

Environment variables:
    MYFT_*          API endpoint, paging and batching, default mutation flags
    FT_*            Attribution identifiers written onto relationships
    MYFT_HTTP_*     Transport timeout and retry policy
    MYFT_EVENTS_*   Downstream event channel (Redis)
"""

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class MyFTSettings(BaseSettings):
    """Remote API location and request shaping."""

    model_config = SettingsConfigDict(env_prefix="MYFT_", frozen=True, extra="ignore")

    api_url: str = Field(default="http://localhost:3000/api/v3", description="Base URL of the myFT API")
    api_key: SecretStr | None = Field(default=None, description="Value of the X-API-KEY header")
    environment: str = Field(default="development", description="Deployment environment name")

    page_size: int = Field(default=500, ge=1, le=500, description="Items requested per page on list reads")
    batch_user_count: int = Field(default=100, ge=1, le=1000, description="Subject ids per batch request")
    batch_user_concurrency: int = Field(default=5, ge=1, le=64, description="Batch requests in flight at once")

    no_event: bool = Field(default=False, description="Suppress downstream events on mutations by default")
    wait_for_purge_add: bool = Field(default=True, description="Block mutations until the read cache is purged")

    @property
    def exact_content_length(self) -> bool:
        """Production sits behind a CDN that rejects bodiless non-GET requests."""
        return self.environment.lower() == "production"


class AttributionSettings(BaseSettings):
    """Identifiers recorded as byTool/byUser on every relationship we create."""

    model_config = SettingsConfigDict(env_prefix="FT_", frozen=True, extra="ignore")

    tool_id: str | None = None
    tool_admin_id: str | None = None


class HttpSettings(BaseSettings):
    """Transport timeout and retry policy."""

    model_config = SettingsConfigDict(env_prefix="MYFT_HTTP_", frozen=True, extra="ignore")

    timeout: float = Field(default=10.0, gt=0.0)
    max_attempts: int = Field(default=3, ge=1, le=10)
    backoff_multiplier: float = Field(default=0.5, ge=0.0)
    backoff_max: float = Field(default=5.0, ge=0.0)


class EventStreamSettings(BaseSettings):
    """Redis list that downstream subscribers consume follow events from."""

    model_config = SettingsConfigDict(env_prefix="MYFT_EVENTS_", frozen=True, extra="ignore")

    enabled: bool = False
    redis_url: str = "redis://localhost:6379"
    stream_key: str = "myft:events"
    max_connections: int = Field(default=10, ge=1, le=256)


class Settings(BaseSettings):
    """Root settings object aggregating every concern."""

    model_config = SettingsConfigDict(frozen=True, extra="ignore")

    myft: MyFTSettings = Field(default_factory=MyFTSettings)
    attribution: AttributionSettings = Field(default_factory=AttributionSettings)
    http: HttpSettings = Field(default_factory=HttpSettings)
    events: EventStreamSettings = Field(default_factory=EventStreamSettings)


settings = Settings()
