"""Persisted configuration.

Credentials and the active provider live in a JSON file under
``$DIFX_CONFIG_DIR`` (default ``~/.config/difx``).
"""

from __future__ import annotations

import json
import os
from dataclasses import asdict, dataclass, fields
from pathlib import Path

from .errors import ConfigError
from .render import SCHEMES

CONFIG_DIR_ENV = "DIFX_CONFIG_DIR"
DEFAULT_CONFIG_DIR = "~/.config/difx"
CONFIG_FILE = "config.json"

# Model identifiers used as the active_model value
MODEL_CLAUDE = "claude"
MODEL_AZURE_OPENAI = "azure-openai"


@dataclass
class Config:
    """Settings consumed by the provider adapters and the renderer."""

    active_model: str = MODEL_CLAUDE
    claude_api_key: str = ""
    claude_model: str = "claude-3-7-sonnet-latest"
    claude_api_url: str = "https://api.anthropic.com/v1/messages"
    azure_openai_key: str = ""
    azure_openai_endpoint: str = ""
    azure_openai_deployment: str = "gpt-4o"
    azure_openai_api_version: str = "2024-02-15-preview"
    # Stream tokens as they arrive instead of printing the whole answer at once
    streaming: bool = True
    # Color marking convention requested from the model: tags or ansi
    markup: str = "tags"


def config_dir() -> Path:
    """Directory holding the config file."""
    return Path(os.environ.get(CONFIG_DIR_ENV) or DEFAULT_CONFIG_DIR).expanduser()


def config_path() -> Path:
    return config_dir() / CONFIG_FILE


def load_config(path: Path | None = None) -> Config:
    """
    Load the config file, returning defaults if it does not exist yet.

    Unknown keys are ignored so older and newer files stay readable.

    Raises:
        ConfigError: If the file cannot be read, is not a JSON object,
            or holds a value of the wrong type
    """
    path = path or config_path()
    if not path.is_file():
        return Config()

    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except OSError as e:
        raise ConfigError(f"Cannot read config file {path}: {e}") from e
    except json.JSONDecodeError as e:
        raise ConfigError(f"Cannot decode config file {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"Config file {path} must contain a JSON object")

    known = {f.name: type(f.default) for f in fields(Config)}
    values = {}
    for name, value in data.items():
        if name not in known:
            continue
        if type(value) is not known[name]:
            raise ConfigError(
                f"Invalid value for {name} in {path}: expected {known[name].__name__}, got {value!r}"
            )
        values[name] = value

    config = Config(**values)
    if config.markup not in SCHEMES:
        raise ConfigError(f"Unknown markup in {path}: {config.markup}. Available: {list(SCHEMES)}")
    return config


def save_config(config: Config, path: Path | None = None) -> Path:
    """
    Write the config file, creating its directory as needed.

    Raises:
        ConfigError: If the file cannot be written
    """
    path = path or config_path()
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            json.dump(asdict(config), f, indent=2)
    except OSError as e:
        raise ConfigError(f"Cannot write config file {path}: {e}") from e
    return path


def mask_secret(value: str) -> str:
    """Hide all but the last four characters of a credential."""
    if not value:
        return "(not set)"
    if len(value) <= 4:
        return "*" * len(value)
    return "*" * (len(value) - 4) + value[-4:]
