"""Pydantic settings for Record Authority orchestration behavior."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from packages.stratum_shared.config import StratumSettings, resolve_component_settings
from services.state.record_authority.component import SERVICE_COMPONENT_ID


class RecordAuthoritySettings(BaseModel):
    """Record orchestration runtime behavior settings."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    default_modified_by: int = Field(default=0, ge=0)
    soft_delete: bool = False
    require_version_on_update: bool = True


def resolve_record_authority_settings(
    settings: StratumSettings,
) -> RecordAuthoritySettings:
    """Resolve settings from ``components.service.record_authority``."""
    return resolve_component_settings(
        settings=settings,
        component_id=SERVICE_COMPONENT_ID,
        model=RecordAuthoritySettings,
    )
