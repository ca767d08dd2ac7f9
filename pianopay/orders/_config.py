"""
API configuration — immutable, fluent.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, replace

from dotenv import load_dotenv

DEFAULT_BASE_URL = "http://localhost:5000/api"


@dataclass(frozen=True, slots=True)
class ApiConfig:
    """
    Order API connection settings.

    Example:
        config = ApiConfig().with_base_url("https://shop.example/api").with_timeout(seconds=5)

    Note: Immutable — each method returns new ApiConfig.
    """

    base_url: str = DEFAULT_BASE_URL
    timeout: float = 10.0

    def with_base_url(self, base_url: str) -> ApiConfig:
        return replace(self, base_url=base_url)

    def with_timeout(self, *, seconds: float) -> ApiConfig:
        return replace(self, timeout=seconds)

    def url(self, path: str) -> str:
        return f"{self.base_url.rstrip('/')}/{path.lstrip('/')}"

    @classmethod
    def from_env(cls, dotenv_path: str | None = None) -> ApiConfig:
        """
        Read PIANOPAY_API_URL / PIANOPAY_API_TIMEOUT.

        A .env file is loaded first; variables already set win.
        """
        load_dotenv(dotenv_path)
        return cls(
            base_url=os.getenv("PIANOPAY_API_URL", DEFAULT_BASE_URL),
            timeout=float(os.getenv("PIANOPAY_API_TIMEOUT", "10")),
        )


__all__ = ("ApiConfig", "DEFAULT_BASE_URL")
