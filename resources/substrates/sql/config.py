"""Configuration model for shared SQL substrate access."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator
from sqlalchemy.engine import make_url
from sqlalchemy.exc import ArgumentError

from packages.stratum_shared.config import StratumSettings, resolve_component_settings
from resources.substrates.sql.component import RESOURCE_COMPONENT_ID


class SqlSettings(BaseModel):
    """Runtime settings for constructing SQLAlchemy engines and pools."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    url: str = "sqlite+pysqlite:///:memory:"
    echo: bool = False
    pool_size: int = Field(default=5, gt=0)
    max_overflow: int = Field(default=10, ge=0)
    pool_timeout_seconds: float = Field(default=30.0, gt=0)
    pool_pre_ping: bool = True

    @field_validator("url")
    @classmethod
    def _validate_url(cls, value: str) -> str:
        """Require a parseable SQLAlchemy URL."""
        normalized = value.strip()
        if normalized == "":
            raise ValueError("sql.url is required")
        try:
            make_url(normalized)
        except ArgumentError as exc:
            raise ValueError(f"sql.url is not a valid database URL: {exc}") from exc
        return normalized

    @property
    def is_sqlite(self) -> bool:
        """Return ``True`` when the URL targets SQLite."""
        return make_url(self.url).get_backend_name() == "sqlite"


def resolve_sql_settings(settings: StratumSettings) -> SqlSettings:
    """Resolve SQL substrate settings from ``components.substrate.sql``."""
    return resolve_component_settings(
        settings=settings,
        component_id=RESOURCE_COMPONENT_ID,
        model=SqlSettings,
    )
