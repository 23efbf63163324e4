"""M-Pesa STK push client and callback handler for donations"""

from .auth import TokenManager
from .callback import parse_callback, project_metadata, REQUIRED_METADATA_FIELDS
from .client import MpesaSTK, stk_push, DonationStore, ReceiptSender
from .config import MpesaConfig, load_config
from .errors import (
    MpesaError,
    AuthenticationError,
    ConfigurationError,
    MalformedCallbackError,
    ProviderDeclinedError,
    TransportError,
)
from .signing import generate_password, generate_timestamp
from .types import Credential, PushRequest, PushResult, CallbackResult, CallbackOutcome

__version__ = "0.1.0"
__all__ = [
    "MpesaSTK",
    "stk_push",
    "TokenManager",
    "MpesaConfig",
    "load_config",
    "DonationStore",
    "ReceiptSender",
    "parse_callback",
    "project_metadata",
    "REQUIRED_METADATA_FIELDS",
    "generate_password",
    "generate_timestamp",
    "Credential",
    "PushRequest",
    "PushResult",
    "CallbackResult",
    "CallbackOutcome",
    "MpesaError",
    "AuthenticationError",
    "ConfigurationError",
    "MalformedCallbackError",
    "ProviderDeclinedError",
    "TransportError",
]
