"""Configuration loading and saving.

Config file location: ~/.config/sparklr/config.toml

Schema:
    [auth]
    session = "..."  # value of the "D" session cookie

    [api]
    base_url = "https://sparklr.me/api/"
    timeout = 30.0
"""

import os
import tomllib
from dataclasses import dataclass
from pathlib import Path

import tomli_w

CONFIG_DIR = Path.home() / ".config" / "sparklr"
CONFIG_FILE = CONFIG_DIR / "config.toml"


@dataclass
class SparklrConfig:
    session: str
    base_url: str | None = None
    timeout: float = 30.0


def load_config(config_path: Path = CONFIG_FILE) -> SparklrConfig:
    """Load and validate config from TOML file."""
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path, "rb") as f:
        data = tomllib.load(f)

    session = data.get("auth", {}).get("session", "")
    if not session:
        raise ValueError("Config missing required auth.session")

    api_data = data.get("api", {})

    return SparklrConfig(
        session=session,
        base_url=api_data.get("base_url"),
        timeout=float(api_data.get("timeout", 30.0)),
    )


def save_config(config: SparklrConfig, config_path: Path = CONFIG_FILE) -> None:
    """Write config to TOML file with restricted permissions."""
    config_path.parent.mkdir(parents=True, exist_ok=True)

    api: dict = {"timeout": config.timeout}
    if config.base_url:
        api["base_url"] = config.base_url

    data = {
        "auth": {"session": config.session},
        "api": api,
    }

    with open(config_path, "wb") as f:
        tomli_w.dump(data, f)

    # File holds the session token
    os.chmod(config_path, 0o600)


def config_exists(config_path: Path = CONFIG_FILE) -> bool:
    return config_path.exists()
