"""Settings loading with deterministic precedence.

The cascade is always:
1) explicit params (``cli_params``)
2) environment variables
3) YAML config file (``~/.config/stratum/stratum.yaml`` unless overridden)
4) model defaults

Environment variable format:
- Prefix: ``STRATUM_``
- Nested keys: ``__`` separator
- Example: ``STRATUM_LOGGING__LEVEL=DEBUG`` -> ``logging.level = "DEBUG"``
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, ClassVar, Mapping

from .models import StratumSettings


def load_settings(
    *,
    cli_params: Mapping[str, Any] | None = None,
    config_path: str | Path | None = None,
) -> StratumSettings:
    """Build root settings, optionally reading YAML from ``config_path``."""
    params = dict(cli_params or {})
    if config_path is None:
        return StratumSettings(**params)

    resolved_path = Path(config_path)

    class _PathScopedSettings(StratumSettings):
        _config_path: ClassVar[Path] = resolved_path

    return _PathScopedSettings(**params)
