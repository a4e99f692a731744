"""
Settings for catalog access and the on-disk metadata cache.

Settings are read from an optional YAML file, then overridden by
environment variables, then by explicit keyword overrides (the CLI options).
"""

from __future__ import annotations

import logging
import os
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union

import yaml

from schema_explorer.errors import InvalidArgumentError

logger = logging.getLogger(__name__)

DEFAULT_FAN_OUT_LIMIT = 5

ENV_VARS = {
    "connection_string": "SCHEMA_EXPLORER_ORACLE_CONN",
    "schema_owner": "SCHEMA_EXPLORER_SCHEMA_OWNER",
    "cache_dir": "SCHEMA_EXPLORER_CACHE_DIR",
    "fan_out_limit": "SCHEMA_EXPLORER_FAN_OUT_LIMIT",
}


def default_cache_dir() -> Path:
    """Return ``metadata/`` beside the hosting program."""
    program = sys.argv[0] if sys.argv and sys.argv[0] else ""
    base = Path(program).resolve().parent if program else Path.cwd()
    return base / "metadata"


@dataclass
class Settings:
    """Configuration shared by the catalog, cache and fan-out components."""
    connection_string: Optional[str] = None
    schema_owner: Optional[str] = None
    cache_dir: Optional[Path] = None
    fan_out_limit: int = DEFAULT_FAN_OUT_LIMIT

    def __post_init__(self):
        if isinstance(self.cache_dir, str):
            self.cache_dir = Path(self.cache_dir).expanduser() if self.cache_dir.strip() else None
        if self.schema_owner is not None:
            self.schema_owner = str(self.schema_owner).strip().upper() or None
        if self.connection_string is not None:
            self.connection_string = str(self.connection_string).strip() or None

        try:
            self.fan_out_limit = int(self.fan_out_limit)
        except (TypeError, ValueError):
            raise InvalidArgumentError(
                f"fan_out_limit must be an integer, got {self.fan_out_limit!r}"
            ) from None
        if self.fan_out_limit < 0:
            raise InvalidArgumentError("fan_out_limit cannot be negative")

    def resolve_cache_dir(self) -> Path:
        """Return the configured cache directory, or the default beside the program."""
        return self.cache_dir if self.cache_dir else default_cache_dir()

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Settings:
        """Create from a mapping, ignoring unknown keys."""
        known = {k: v for k, v in data.items() if k in ENV_VARS and v is not None}
        unknown = sorted(set(data) - set(ENV_VARS))
        if unknown:
            logger.warning(f"Ignoring unknown settings: {', '.join(unknown)}")
        return cls(**known)

    @classmethod
    def load(
        cls,
        path: Optional[Union[str, Path]] = None,
        environ: Optional[Mapping[str, str]] = None,
        **overrides: Any,
    ) -> Settings:
        """
        Load settings.

        Args:
            path: Optional YAML file with a top-level mapping of settings
            environ: Environment to read overrides from (defaults to os.environ)
            **overrides: Explicit values; None means "not given"

        Returns:
            Settings with file < environment < overrides precedence
        """
        values: Dict[str, Any] = {}

        if path:
            path = Path(path)
            with open(path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
            if not isinstance(data, dict):
                raise InvalidArgumentError(f"Settings file {path} must contain a mapping")
            values.update(data)
            logger.debug(f"Loaded settings from {path}")

        environ = os.environ if environ is None else environ
        for key, env_var in ENV_VARS.items():
            if environ.get(env_var):
                values[key] = environ[env_var]

        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls.from_dict(values)
