from __future__ import annotations

import os
from dataclasses import dataclass
from typing import List, Mapping, Optional, Tuple

from .errors import ConfigurationError

DEFAULT_API_URL = "https://api.telegram.org"
DEFAULT_TIMEOUT = 90.0
DEFAULT_RETRY_DELAY = 3.0


@dataclass
class BotConfig:
    token: str
    base_url: str = DEFAULT_API_URL
    timeout: float = DEFAULT_TIMEOUT
    retry_delay: float = DEFAULT_RETRY_DELAY

    @classmethod
    def from_env(cls, prefix: str = "GRAMVIBE_", environ: Optional[Mapping[str, str]] = None) -> "BotConfig":
        """Reads <prefix>TOKEN, <prefix>API_URL, <prefix>TIMEOUT and <prefix>RETRY_DELAY."""
        env = os.environ if environ is None else environ
        token = env.get(prefix + "TOKEN", "")
        if not token:
            raise ConfigurationError(f"{prefix}TOKEN is not set")
        try:
            return cls(
                token=token,
                base_url=env.get(prefix + "API_URL") or DEFAULT_API_URL,
                timeout=float(env.get(prefix + "TIMEOUT") or DEFAULT_TIMEOUT),
                retry_delay=float(env.get(prefix + "RETRY_DELAY") or DEFAULT_RETRY_DELAY),
            )
        except ValueError as e:
            raise ConfigurationError(f"invalid numeric setting: {e}") from e


@dataclass
class PollingConfig:
    timeout: int = 60  # long-poll wait, seconds
    limit: int = 100
    allowed_updates: Optional[List[str]] = None
    drop_pending: bool = False
    drain_timeout: Optional[float] = None  # wait for in-flight dispatches on stop; None = no limit

    def validate(self) -> None:
        if not 1 <= self.limit <= 100:
            raise ConfigurationError(f"polling limit must be within 1..100, got {self.limit}")
        if self.timeout < 0:
            raise ConfigurationError(f"polling timeout must not be negative, got {self.timeout}")


@dataclass
class WebhookConfig:
    url: str = ""
    listen: str = "0.0.0.0:8443"
    path: str = "/"
    max_connections: int = 40
    allowed_updates: Optional[List[str]] = None
    drop_pending_updates: bool = False
    secret_token: str = ""
    ip_address: str = ""
    drain_timeout: Optional[float] = None

    def validate(self) -> None:
        if not self.url:
            raise ConfigurationError("webhook URL is required")
        if not 1 <= self.max_connections <= 100:
            raise ConfigurationError(f"max_connections must be within 1..100, got {self.max_connections}")
        if not self.path.startswith("/"):
            raise ConfigurationError(f"webhook path must start with '/', got {self.path!r}")
        self.host_port()

    def host_port(self) -> Tuple[str, int]:
        host, sep, port = self.listen.rpartition(":")
        if not sep:
            raise ConfigurationError(f"listen address must be host:port, got {self.listen!r}")
        try:
            return host or "0.0.0.0", int(port)
        except ValueError as e:
            raise ConfigurationError(f"invalid listen port in {self.listen!r}") from e
