"""Client settings from the environment; loads .env locally via python-dotenv."""

from __future__ import annotations

import os

from dotenv import find_dotenv, load_dotenv
from pydantic import BaseModel, Field

DEFAULT_API_URL = "https://api.palletizer.app"
DEFAULT_TIMEOUT = 120.0


class ClientSettings(BaseModel):
    """Where and how the client talks to the service."""

    api_url: str = Field(default=DEFAULT_API_URL, description="Base URL of the Palletizer API")
    timeout: float = Field(default=DEFAULT_TIMEOUT, gt=0, description="Network timeout in seconds")
    log_level: str = Field(default="WARNING", description="Level used by the CLI logging setup")

    @classmethod
    def from_env(cls, dotenv: bool = True) -> "ClientSettings":
        """
        Read PALLETIZER_API_URL, PALLETIZER_TIMEOUT and PALLETIZER_LOG_LEVEL.

        A .env file found from the working directory upwards is loaded first; it
        never overrides variables already set in the process environment.
        """
        if dotenv:
            load_dotenv(find_dotenv(usecwd=True))

        raw_timeout = os.getenv("PALLETIZER_TIMEOUT")
        timeout = DEFAULT_TIMEOUT
        if raw_timeout:
            try:
                timeout = float(raw_timeout)
            except ValueError:
                raise ValueError(f"PALLETIZER_TIMEOUT must be a number of seconds, got '{raw_timeout}'") from None
            if not timeout > 0:
                raise ValueError(f"PALLETIZER_TIMEOUT must be a positive number of seconds, got '{raw_timeout}'")

        return cls(
            api_url=os.getenv("PALLETIZER_API_URL") or DEFAULT_API_URL,
            timeout=timeout,
            log_level=(os.getenv("PALLETIZER_LOG_LEVEL") or "WARNING").upper(),
        )
