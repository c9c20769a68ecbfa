"""Application configuration read from a TOML file."""

from __future__ import annotations

import tomllib
from dataclasses import dataclass, field
from os import PathLike
from pathlib import Path
from typing import Any


class ConfigError(ValueError):
    """Raised when the configuration file cannot be parsed."""


@dataclass
class Application:
    """Settings of the ``[application]`` table."""

    download_dir: str = ""
    crypto: str = ""
    max_http_parallel: int = 100
    p2p_port: int = 0
    num_want: int = 0
    global_connection_limit: int = 50
    fallocate: bool = False


@dataclass
class Config:
    """The whole configuration."""

    app: Application = field(default_factory=Application)


# attribute, accepted key spellings (compared lower-cased), kind
_FIELDS: tuple[tuple[str, frozenset[str], str], ...] = (
    ("download_dir", frozenset({"download-dir", "downloaddir"}), "str"),
    ("crypto", frozenset({"crypto"}), "str"),
    ("max_http_parallel", frozenset({"max-http-parallel", "maxhttpparallel"}), "int"),
    ("p2p_port", frozenset({"p2p-port", "p2pport"}), "uint16"),
    ("num_want", frozenset({"num-want", "numwant"}), "uint16"),
    (
        "global_connection_limit",
        frozenset({"global-connections-limit", "globalconnectionlimit"}),
        "uint16",
    ),
    ("fallocate", frozenset({"fallocate"}), "bool"),
)


def _convert(key: str, value: Any, kind: str) -> Any:
    if kind == "str":
        if not isinstance(value, str):
            raise ConfigError(f"failed to parse config file: {key!r} must be a string")
        return value
    if kind == "bool":
        if not isinstance(value, bool):
            raise ConfigError(f"failed to parse config file: {key!r} must be a boolean")
        return value
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConfigError(f"failed to parse config file: {key!r} must be an integer")
    if kind == "uint16" and not 0 <= value <= 0xFFFF:
        raise ConfigError(f"failed to parse config file: {key!r} out of range")
    return value


def _apply(app: Application, table: Any) -> None:
    if not isinstance(table, dict):
        raise ConfigError("failed to parse config file: 'application' must be a table")
    for key, value in table.items():
        lowered = key.lower()
        for attr, names, kind in _FIELDS:
            if lowered in names:
                setattr(app, attr, _convert(key, value, kind))
                break


def load_from_file(path: str | PathLike[str]) -> Config:
    """Load the configuration; a missing file yields the defaults."""
    cfg = Config()
    try:
        with open(path, "rb") as stream:
            document = tomllib.load(stream)
    except FileNotFoundError:
        document = {}
    except (tomllib.TOMLDecodeError, UnicodeDecodeError) as exc:
        raise ConfigError(f"failed to parse config file: {exc}") from exc

    for key, value in document.items():
        if key.lower() == "application":
            _apply(cfg.app, value)

    if not cfg.app.download_dir:
        cfg.app.download_dir = str(Path.home() / "downloads")

    return cfg