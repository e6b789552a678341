"""Configuration models and loading."""

import json
from pathlib import Path

import httpx
from pydantic import BaseModel, Field, ValidationError

from core.exceptions import ConfigurationError

CONFIG_DIR = Path.home() / ".config" / "perimeter-proxy"
CONFIG_FILE = CONFIG_DIR / "config.json"


class ProxySettings(BaseModel):
    host: str = "127.0.0.1"
    port: int = 8080


class DestinationSettings(BaseModel):
    url: str = "https://httpbin.org/anything"
    timeout: float = 30.0


class VerificationSettings(BaseModel):
    """Signature verification for bearer tokens.

    Without this block tokens are decoded but never verified; trust is
    assumed to be established by the edge layer in front of the proxy.
    """

    key: str
    algorithms: list[str] = Field(default_factory=lambda: ["HS256"])
    audience: str | None = None


class IdentitySettings(BaseModel):
    claim: str = "name"
    header: str = "X-Identity-Id"
    verification: VerificationSettings | None = None


class LimitsSettings(BaseModel):
    max_body_size: int = 10 * 1024 * 1024  # 10MB
    keep_alive_timeout: int = 5
    max_connections: int = 100
    max_keepalive_connections: int = 20


class Config(BaseModel):
    proxy: ProxySettings = Field(default_factory=ProxySettings)
    destination: DestinationSettings = Field(default_factory=DestinationSettings)
    identity: IdentitySettings = Field(default_factory=IdentitySettings)
    limits: LimitsSettings = Field(default_factory=LimitsSettings)


def load_config(config_file: Path = CONFIG_FILE) -> Config:
    """Load configuration from JSON file, creating default if needed."""
    if not config_file.exists():
        config_file.parent.mkdir(parents=True, exist_ok=True)
        default = Config()
        config_file.write_text(default.model_dump_json(indent=2))
        return default

    try:
        data = json.loads(config_file.read_text())
        return Config.model_validate(data)
    except (json.JSONDecodeError, ValidationError):
        # Backup corrupted config and recreate default
        backup = config_file.with_suffix(".json.bak")
        config_file.rename(backup)
        default = Config()
        config_file.write_text(default.model_dump_json(indent=2))
        return default


def validate_config(config: Config) -> None:
    """Reject settings the proxy cannot run with."""
    try:
        url = httpx.URL(config.destination.url)
    except httpx.InvalidURL as e:
        raise ConfigurationError(f"Invalid destination URL: {e}") from e
    if url.scheme not in ("http", "https") or not url.host:
        raise ConfigurationError(
            f"Destination must be an absolute http(s) URL: {config.destination.url}"
        )
    if config.destination.timeout <= 0:
        raise ConfigurationError("Destination timeout must be positive")
    if not config.identity.claim or not config.identity.header:
        raise ConfigurationError("Identity claim and header must be set")
    verification = config.identity.verification
    if verification is not None:
        if not verification.key:
            raise ConfigurationError("Verification key is empty")
        if not verification.algorithms:
            raise ConfigurationError("Verification needs at least one algorithm")
