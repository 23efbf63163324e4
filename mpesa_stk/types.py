from dataclasses import dataclass, asdict
from typing import Any, Literal

EnvironmentType = Literal["sandbox", "production"]
CallbackStatus = Literal["completed"]

TOKEN_SAFETY_MARGIN = 60


@dataclass(frozen=True)
class Credential:
    token: str
    expires_at: float

    @classmethod
    def from_response(cls, data: dict, now: float) -> "Credential":
        """Build a credential from a token endpoint body, expiring a minute early."""
        return cls(
            token=data["access_token"],
            expires_at=now + int(data["expires_in"]) - TOKEN_SAFETY_MARGIN,
        )

    def is_valid(self, now: float) -> bool:
        return now < self.expires_at


@dataclass(frozen=True)
class PushRequest:
    business_short_code: str
    password: str
    timestamp: str
    amount: Any
    party_a: str
    party_b: str
    phone_number: str
    callback_url: str
    account_reference: str
    transaction_desc: str
    transaction_type: str = "CustomerPayBillOnline"

    def to_payload(self) -> dict:
        return {
            "BusinessShortCode": self.business_short_code,
            "Password": self.password,
            "Timestamp": self.timestamp,
            "TransactionType": self.transaction_type,
            "Amount": self.amount,
            "PartyA": self.party_a,
            "PartyB": self.party_b,
            "PhoneNumber": self.phone_number,
            "CallBackURL": self.callback_url,
            "AccountReference": self.account_reference,
            "TransactionDesc": self.transaction_desc,
        }


@dataclass
class PushResult:
    success: bool
    checkout_request_id: str | None = None
    merchant_request_id: str | None = None
    customer_message: str | None = None
    error: Any = None


@dataclass
class CallbackResult:
    result_code: int
    result_description: str
    checkout_request_id: str
    amount: Any
    mpesa_receipt_number: str
    transaction_date: Any
    phone_number: Any
    status: CallbackStatus = "completed"

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class CallbackOutcome:
    success: bool
    data: CallbackResult | None = None
    error: Any = None
