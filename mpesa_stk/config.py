import os
from dataclasses import dataclass
from typing import Mapping

from .errors import ConfigurationError
from .types import EnvironmentType

BASE_URLS = {
    "sandbox": "https://sandbox.safaricom.co.ke",
    "production": "https://api.safaricom.co.ke",
}

_REQUIRED = {
    "consumer_key": "MPESA_CONSUMER_KEY",
    "consumer_secret": "MPESA_CONSUMER_SECRET",
    "short_code": "MPESA_SHORTCODE",
    "passkey": "MPESA_PASSKEY",
    "callback_url": "MPESA_CALLBACK_URL",
}


@dataclass(frozen=True)
class MpesaConfig:
    consumer_key: str
    consumer_secret: str
    short_code: str
    passkey: str
    callback_url: str
    environment: EnvironmentType = "sandbox"

    def __post_init__(self):
        if self.environment not in BASE_URLS:
            raise ConfigurationError(
                f"environment must be 'sandbox' or 'production', got '{self.environment}'"
            )

    @property
    def base_url(self) -> str:
        return BASE_URLS[self.environment]

    def __repr__(self) -> str:
        # Keep secrets out of logs and tracebacks
        return (
            f"MpesaConfig(short_code={self.short_code!r}, callback_url={self.callback_url!r}, "
            f"environment={self.environment!r})"
        )


def load_config(environ: Mapping[str, str] | None = None) -> MpesaConfig:
    """
    Read M-Pesa settings from the process environment.

    Args:
        environ: Mapping to read from (default: os.environ)

    Returns:
        MpesaConfig

    Raises:
        ConfigurationError: if a required variable is empty or the
            environment name is unknown
    """
    if environ is None:
        environ = os.environ

    values = {}
    missing = []
    for field, var in _REQUIRED.items():
        value = (environ.get(var) or "").strip()
        if not value:
            missing.append(var)
        values[field] = value

    if missing:
        raise ConfigurationError(f"{', '.join(missing)} environment variable(s) not set")

    environment = (environ.get("MPESA_ENVIRONMENT") or "sandbox").strip().lower()
    return MpesaConfig(environment=environment, **values)
