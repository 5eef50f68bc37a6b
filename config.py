"""Configuration management for fintoc-sync.

Reads configuration from ~/.config/fintoc-sync.toml (creating a default one
if needed), then applies a .env file and environment variable overrides.
"""

import os
from pathlib import Path
from dataclasses import dataclass, field
from datetime import date
from typing import List, Optional
import tomllib
import tomli_w
from dotenv import load_dotenv

DEFAULT_MOVEMENTS_SINCE = "2020-01-01"


@dataclass
class Config:
    """Application configuration."""

    base_dir: Path
    fintoc_api_key: str
    actual_server_url: str
    actual_password: str
    actual_data_dir: Path
    budget_name: str
    movements_since: str
    accounts_json_file: Path
    log_level: str
    log_dir: Path
    link_tokens: List[str] = field(default_factory=list)
    actual_encryption_password: Optional[str] = None
    max_workers: int = 4

    @classmethod
    def default(cls) -> "Config":
        """Create a Config with default values."""
        base_dir = Path.home() / "data" / "fintoc-sync"
        return cls(
            base_dir=base_dir,
            fintoc_api_key="",
            actual_server_url="http://localhost:5006",
            actual_password="",
            actual_data_dir=base_dir / "actual",
            budget_name="Fintoc",
            movements_since=DEFAULT_MOVEMENTS_SINCE,
            accounts_json_file=base_dir / "accounts.json",
            log_level="INFO",
            log_dir=base_dir / "logs",
        )


def get_config_path() -> Path:
    """Get the path to the config file."""
    return Path.home() / ".config" / "fintoc-sync.toml"


def parse_list(value: Optional[str]) -> List[str]:
    """Split a comma-separated string into trimmed, non-empty items."""
    if not value:
        return []
    return [item.strip() for item in value.split(",") if item.strip()]


def validate_since(value: str) -> str:
    """Check that a movements cutoff is a YYYY-MM-DD date.

    Raises:
        ValueError: If the value is not an ISO calendar date.
    """
    try:
        date.fromisoformat(value)
    except (TypeError, ValueError):
        raise ValueError(
            f"Invalid movements cutoff '{value}', expected YYYY-MM-DD"
        ) from None
    return value


def load_config(config_path: Optional[Path] = None, env_file: Optional[Path] = None) -> Config:
    """Load configuration from file and environment.

    Precedence, lowest first: defaults, TOML file, .env file, process
    environment. The TOML file is created with defaults if it doesn't exist.

    Args:
        config_path: Override for the TOML file location.
        env_file: Optional .env file to load. If None, python-dotenv searches
                  from the current directory.

    Returns:
        Config object with loaded values.

    Raises:
        ValueError: If MOVEMENTS_SINCE is not a valid date.
    """
    config_path = config_path or get_config_path()

    if not config_path.exists():
        config = Config.default()
        _write_config(config, config_path)
    else:
        with open(config_path, "rb") as f:
            data = tomllib.load(f)
        config = _from_toml(data)

    # .env values never override variables already set in the environment
    load_dotenv(dotenv_path=env_file)
    _apply_env(config, os.environ)

    validate_since(config.movements_since)
    return config


def _from_toml(data: dict) -> Config:
    """Build a Config from parsed TOML, falling back to defaults."""
    defaults = Config.default()
    base_dir = Path(data.get("base_dir", defaults.base_dir))

    fintoc_config = data.get("fintoc", {})
    actual_config = data.get("actual", {})
    sync_config = data.get("sync", {})
    log_config = data.get("logging", {})

    return Config(
        base_dir=base_dir,
        fintoc_api_key=fintoc_config.get("api_key", ""),
        link_tokens=_link_tokens(fintoc_config.get("link_tokens", [])),
        actual_server_url=actual_config.get("server_url", defaults.actual_server_url),
        actual_password=actual_config.get("password", ""),
        actual_encryption_password=actual_config.get("encryption_password") or None,
        actual_data_dir=Path(actual_config.get("data_dir", base_dir / "actual")),
        budget_name=actual_config.get("budget_name", defaults.budget_name),
        movements_since=sync_config.get("movements_since", DEFAULT_MOVEMENTS_SINCE),
        accounts_json_file=Path(
            sync_config.get("accounts_json_file", base_dir / "accounts.json")
        ),
        max_workers=int(sync_config.get("max_workers", defaults.max_workers)),
        log_level=log_config.get("level", "INFO"),
        log_dir=Path(log_config.get("log_dir", base_dir / "logs")),
    )


def _link_tokens(value) -> List[str]:
    """Accept link tokens as a TOML array or a comma-separated string."""
    if isinstance(value, str):
        return parse_list(value)
    if isinstance(value, list):
        return [str(token).strip() for token in value if str(token).strip()]
    raise ValueError(f"link_tokens must be a list or a string, got {type(value).__name__}")


def _apply_env(config: Config, environ) -> None:
    """Override config fields from environment variables that are set."""
    if environ.get("FINTOC_API_KEY"):
        config.fintoc_api_key = environ["FINTOC_API_KEY"]
    if environ.get("FINTOC_LINK_TOKENS"):
        config.link_tokens = parse_list(environ["FINTOC_LINK_TOKENS"])
    if environ.get("ACTUAL_SERVER_URL"):
        config.actual_server_url = environ["ACTUAL_SERVER_URL"]
    if environ.get("ACTUAL_PASSWORD"):
        config.actual_password = environ["ACTUAL_PASSWORD"]
    if environ.get("ACTUAL_ENCRYPTION_PASSWORD"):
        config.actual_encryption_password = environ["ACTUAL_ENCRYPTION_PASSWORD"]
    if environ.get("ACTUAL_DATA_DIR"):
        config.actual_data_dir = Path(environ["ACTUAL_DATA_DIR"])
    if environ.get("ACTUAL_BUDGET_NAME"):
        config.budget_name = environ["ACTUAL_BUDGET_NAME"]
    if environ.get("MOVEMENTS_SINCE"):
        config.movements_since = environ["MOVEMENTS_SINCE"]
    if environ.get("ACCOUNTS_JSON_FILE"):
        config.accounts_json_file = Path(environ["ACCOUNTS_JSON_FILE"])
    if environ.get("LOG_LEVEL"):
        config.log_level = environ["LOG_LEVEL"]
    if environ.get("LOG_DIR"):
        config.log_dir = Path(environ["LOG_DIR"])


def _write_config(config: Config, config_path: Path) -> None:
    """Write config to the config file.

    Secrets are left blank; they are expected to come from the environment.

    Args:
        config: Config object to write.
        config_path: Destination TOML file.
    """
    # Ensure config directory exists
    config_path.parent.mkdir(parents=True, exist_ok=True)

    data = {
        "base_dir": str(config.base_dir),
        "fintoc": {
            "api_key": "",
            "link_tokens": list(config.link_tokens),
        },
        "actual": {
            "server_url": config.actual_server_url,
            "password": "",
            "data_dir": str(config.actual_data_dir),
            "budget_name": config.budget_name,
        },
        "sync": {
            "movements_since": config.movements_since,
            "accounts_json_file": str(config.accounts_json_file),
            "max_workers": config.max_workers,
        },
        "logging": {
            "level": config.log_level,
            "log_dir": str(config.log_dir),
        },
    }

    with open(config_path, "wb") as f:
        tomli_w.dump(data, f)
