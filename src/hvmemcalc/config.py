"""Pydantic-validated config loaded from TOML.

TOML loading uses ``tomllib`` (3.11+) with ``tomli`` fallback.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, ConfigDict, field_validator

from hvmemcalc.calc.base import ConfigError, ParseError
from hvmemcalc.calc.sizes import parse_size

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

logger = logging.getLogger(__name__)

_CONFIG_DIR = Path("~/.config/hvmemcalc").expanduser()
_DEFAULT_CONFIG_PATH = _CONFIG_DIR / "config.toml"

DEFAULT_ANNOTATION_KEY = "harvesterhci.io/reservedMemory"
DEFAULT_COMMON_SIZES = ["1Gi", "2Gi", "4Gi", "8Gi", "16Gi", "32Gi"]


# ---------------------------------------------------------------------------
# Pydantic models
# ---------------------------------------------------------------------------


class DefaultsConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")

    method: Literal["auto", "legacy", "ratio"] = "auto"
    verbose: bool = False


class OutputConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")

    annotation_key: str = DEFAULT_ANNOTATION_KEY
    common_sizes: list[str] = DEFAULT_COMMON_SIZES

    @field_validator("annotation_key")
    @classmethod
    def _check_annotation_key(cls, v: str) -> str:
        if not v.strip():
            msg = "annotation_key must not be empty"
            raise ValueError(msg)
        return v

    @field_validator("common_sizes")
    @classmethod
    def _check_common_sizes(cls, v: list[str]) -> list[str]:
        for size in v:
            try:
                parse_size(size)
            except ParseError as exc:
                raise ValueError(str(exc)) from exc
        return v


class LoggingConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "WARNING"


class HvmemcalcConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")

    defaults: DefaultsConfig = DefaultsConfig()
    output: OutputConfig = OutputConfig()
    logging: LoggingConfig = LoggingConfig()


# ---------------------------------------------------------------------------
# Loading
# ---------------------------------------------------------------------------


def load_config(path: Path | None = None) -> HvmemcalcConfig:
    """Load config from *path*, the default location, or built-in defaults.

    Resolution order:
    1. Explicit *path* (error if missing or invalid).
    2. ``~/.config/hvmemcalc/config.toml`` (skip silently if absent).
    3. Built-in defaults.

    Raises :class:`ConfigError` on parse/validation failure.
    """
    if path is not None:
        return _load_from_path(path)

    if _DEFAULT_CONFIG_PATH.is_file():
        return _load_from_path(_DEFAULT_CONFIG_PATH)

    return HvmemcalcConfig()


def _load_from_path(path: Path) -> HvmemcalcConfig:
    """Parse a TOML file and return a validated config."""
    try:
        raw = path.read_bytes()
    except OSError as exc:
        raise ConfigError(f"Cannot read config file {path}: {exc}") from exc

    try:
        data = tomllib.loads(raw.decode())
    except (tomllib.TOMLDecodeError, UnicodeDecodeError) as exc:
        raise ConfigError(f"Invalid TOML in {path}: {exc}") from exc

    try:
        config = HvmemcalcConfig(**data)
    except Exception as exc:
        raise ConfigError(f"Config validation error in {path}: {exc}") from exc

    logger.debug("Loaded config from %s", path)
    return config
