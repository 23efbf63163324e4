import base64
from datetime import datetime, timezone

from .config import MpesaConfig
from .types import PushRequest

TIMESTAMP_FORMAT = "%Y%m%d%H%M%S"


def generate_timestamp(now: datetime | None = None) -> str:
    """Daraja timestamp (YYYYMMDDHHMMSS), whole seconds, no zone suffix"""
    if now is None:
        now = datetime.now(timezone.utc)
    return now.strftime(TIMESTAMP_FORMAT)


def generate_password(short_code: str, passkey: str, timestamp: str) -> str:
    """base64(short_code + passkey + timestamp)"""
    raw = f"{short_code}{passkey}{timestamp}".encode("utf-8")
    return base64.b64encode(raw).decode("utf-8")


def build_push_request(
    config: MpesaConfig,
    phone_number: str,
    amount,
    account_reference: str,
    transaction_desc: str,
    timestamp: str | None = None,
) -> PushRequest:
    """
    Assemble a Lipa na M-Pesa Online request.

    The short code is both the paying business and the receiving party,
    and the donor's phone is both PartyA and PhoneNumber. Amount and phone
    are passed through as given.
    """
    if timestamp is None:
        timestamp = generate_timestamp()

    return PushRequest(
        business_short_code=config.short_code,
        password=generate_password(config.short_code, config.passkey, timestamp),
        timestamp=timestamp,
        amount=amount,
        party_a=phone_number,
        party_b=config.short_code,
        phone_number=phone_number,
        callback_url=config.callback_url,
        account_reference=account_reference,
        transaction_desc=transaction_desc,
    )
