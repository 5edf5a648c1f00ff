"""
ollamalink Config - Client configuration

Usage:
    from ollamalink.config import ClientConfig, load_config

    config = ClientConfig()                      # defaults
    config = ClientConfig.from_env()             # OLLAMA_* environment variables
    config = load_config("ollama.yaml")          # YAML with ${VAR} substitution

YAML layout (the ``ollama:`` section is optional):

    ollama:
      base_url: http://gpu-box:11434
      timeout: 60
      api_key: ${OLLAMA_API_KEY}
      debug: false
      log_level: INFO
"""

import os
import re
from dataclasses import dataclass, fields, replace
from typing import Any, Dict, Mapping, Optional

import yaml

DEFAULT_BASE_URL = "http://localhost:11434"
DEFAULT_TIMEOUT = 30.0

_TRUTHY = ("true", "1", "yes", "on")


@dataclass(frozen=True)
class ClientConfig:
    """
    Settings read by the transport.

    Attributes:
        base_url: Server URL
        timeout: Request timeout in seconds, applied to every call
        api_key: Optional bearer token
        debug: Emit DEBUG diagnostics to stderr
        log_level: Optional level name (NONE, ERROR, WARN, INFO, DEBUG)
    """
    base_url: str = DEFAULT_BASE_URL
    timeout: float = DEFAULT_TIMEOUT
    api_key: Optional[str] = None
    debug: bool = False
    log_level: Optional[str] = None

    def __post_init__(self):
        if not self.base_url:
            raise ValueError("base_url must not be empty")
        if self.timeout <= 0:
            raise ValueError(f"timeout must be positive, got {self.timeout}")
        # Endpoints are joined as base_url + "/api/..."
        object.__setattr__(self, "base_url", self.base_url.rstrip("/"))

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "ClientConfig":
        """Build a config from OLLAMA_* environment variables."""
        env = os.environ if environ is None else environ

        kwargs: Dict[str, Any] = {}
        host = env.get("OLLAMA_HOST")
        if host:
            kwargs["base_url"] = host if "://" in host else f"http://{host}"
        if env.get("OLLAMA_TIMEOUT"):
            kwargs["timeout"] = float(env["OLLAMA_TIMEOUT"])
        if env.get("OLLAMA_API_KEY"):
            kwargs["api_key"] = env["OLLAMA_API_KEY"]
        kwargs["debug"] = env.get("OLLAMA_DEBUG", "").strip().lower() in _TRUTHY
        if env.get("OLLAMA_LOG_LEVEL"):
            kwargs["log_level"] = env["OLLAMA_LOG_LEVEL"]
        return cls(**kwargs)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ClientConfig":
        """Build a config from a mapping, rejecting unknown keys."""
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ValueError(f"Unknown config keys: {', '.join(unknown)}")

        kwargs = dict(data)
        if "timeout" in kwargs:
            kwargs["timeout"] = float(kwargs["timeout"])
        if isinstance(kwargs.get("debug"), str):
            kwargs["debug"] = kwargs["debug"].strip().lower() in _TRUTHY
        return cls(**kwargs)

    def with_base_url(self, base_url: str) -> "ClientConfig":
        return replace(self, base_url=base_url)

    def with_timeout(self, timeout: float) -> "ClientConfig":
        return replace(self, timeout=timeout)

    def with_api_key(self, api_key: Optional[str]) -> "ClientConfig":
        return replace(self, api_key=api_key)

    def with_debug(self, debug: bool) -> "ClientConfig":
        return replace(self, debug=debug)


def load_config(path: str) -> ClientConfig:
    """Read a YAML config file with ${VAR} environment variable substitution."""
    with open(path, "r", encoding="utf-8") as f:
        raw = f.read()

    def _replace_env(match):
        var_name = match.group(1)
        value = os.environ.get(var_name)
        if value is None:
            raise ValueError(
                f"Environment variable '{var_name}' not set "
                f"(referenced in config file '{path}')"
            )
        return value

    resolved = re.sub(r"\$\{(\w+)\}", _replace_env, raw)
    data = yaml.safe_load(resolved) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Config file '{path}' must contain a mapping")

    section = data.get("ollama", data)
    if not isinstance(section, dict):
        raise ValueError(f"'ollama' section in '{path}' must be a mapping")
    return ClientConfig.from_dict(section)
