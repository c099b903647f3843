"""Configuration utilities and dataclasses for the OFX statement CLI."""

from __future__ import annotations

import tomllib
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

DEFAULT_CONFIG_PATH: Path = Path.home() / '.local/etc/ofx_statement.toml'
"""Default location for the user provided TOML configuration file."""

BASE_SETTINGS: dict[str, Any] = {
    'encoding': None,
    'csv_delimiter': ',',
    'rename': {},
}
"""Default settings merged with any local overrides."""


@dataclass(frozen=True, slots=True)
class StatementSettings:
    """Structured settings used when reading and exporting statements."""

    encoding: str | None = None
    csv_delimiter: str = ','
    rename: Mapping[str, str] = field(default_factory=dict)


def _merge_dict(base: Mapping[str, Any], overrides: Mapping[str, Any]) -> dict[str, Any]:
    """Deep merge two dictionaries, returning a new dictionary."""

    merged: dict[str, Any] = dict(base)
    for key, value in overrides.items():
        if key in merged and isinstance(merged[key], Mapping) and isinstance(value, Mapping):
            merged[key] = _merge_dict(merged[key], value)
        else:
            merged[key] = value
    return merged


def _prepare_settings(raw: Mapping[str, Any]) -> StatementSettings:
    """Convert a raw dictionary into ``StatementSettings`` with proper types."""

    encoding = raw.get('encoding')
    rename = raw.get('rename', {})
    if not isinstance(rename, Mapping):
        raise ValueError('rename must be a table of memo prefix = replacement entries')
    for prefix, replacement in rename.items():
        if not isinstance(replacement, str):
            raise ValueError(f'rename value for {prefix!r} must be a string')
    delimiter = str(raw.get('csv_delimiter', ','))
    if len(delimiter) != 1:
        raise ValueError('csv_delimiter must be a single character')
    return StatementSettings(
        encoding=str(encoding) if encoding else None,
        csv_delimiter=delimiter,
        rename=dict(rename),
    )


def default_settings() -> StatementSettings:
    """Return settings built from ``BASE_SETTINGS`` only."""

    return _prepare_settings(BASE_SETTINGS)


def load_settings(path: Path | None = None) -> StatementSettings:
    """Load ``StatementSettings`` from ``path`` or the default location.

    An explicit ``path`` must exist; a missing default file yields the defaults.
    """

    config_path = (path or DEFAULT_CONFIG_PATH).expanduser()
    if not config_path.is_file():
        if path is None:
            return default_settings()
        raise FileNotFoundError(f'Configuration file not found: {config_path}')

    with config_path.open('rb') as handle:
        overrides = tomllib.load(handle)

    return _prepare_settings(_merge_dict(BASE_SETTINGS, overrides))
