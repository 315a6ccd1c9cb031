"""Connection settings and protocol constants for schedprobe runs.

Settings come from SCHEDPROBE_* environment variables and can be overridden
per invocation by CLI options.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Optional

# Auth headers sent on every request.
API_KEY_HEADER = "x-api-key"
API_SECRET_HEADER = "x-secret-key"
ACCOUNT_ID_HEADER = "x-account-id"

API_PREFIX = "/api/v1"

# Fixed-interval polling: 30 attempts x 1s.
POLL_ATTEMPTS = 30
POLL_INTERVAL_S = 1.0

_ENV_PREFIX = "SCHEDPROBE_"


@dataclass(frozen=True)
class Settings:
    """Everything an ApiClient needs to talk to one account on one host."""

    host: str = ""
    api_key: str = ""
    api_secret: str = ""
    account_id: str = ""
    results_dir: Path = field(default_factory=lambda: Path("schedprobe-results"))
    poll_attempts: int = POLL_ATTEMPTS
    poll_interval_s: float = POLL_INTERVAL_S

    @classmethod
    def from_env(cls, env: Optional[dict[str, str]] = None) -> Settings:
        """Build settings from SCHEDPROBE_* variables."""
        env = os.environ if env is None else env
        results_dir = env.get(f"{_ENV_PREFIX}RESULTS_DIR")
        return cls(
            host=env.get(f"{_ENV_PREFIX}HOST", ""),
            api_key=env.get(f"{_ENV_PREFIX}API_KEY", ""),
            api_secret=env.get(f"{_ENV_PREFIX}API_SECRET", ""),
            account_id=env.get(f"{_ENV_PREFIX}ACCOUNT_ID", ""),
            results_dir=Path(results_dir) if results_dir else Path("schedprobe-results"),
        )

    def override(self, **values) -> Settings:
        """Return a copy with every non-empty value applied."""
        return replace(self, **{k: v for k, v in values.items() if v not in (None, "")})

    def missing(self) -> list[str]:
        """Names of the connection settings that are still empty."""
        required = {
            "host": self.host,
            "api-key": self.api_key,
            "api-secret": self.api_secret,
            "account-id": self.account_id,
        }
        return [name for name, value in required.items() if not value]

    @property
    def base_url(self) -> str:
        return self.host.rstrip("/") + API_PREFIX

    def auth_headers(self) -> dict[str, str]:
        return {
            API_KEY_HEADER: self.api_key,
            API_SECRET_HEADER: self.api_secret,
            ACCOUNT_ID_HEADER: self.account_id,
        }
