"""
Parsing of the STK push result callback.

The provider POSTs::

    {"Body": {"stkCallback": {
        "MerchantRequestID": "...",
        "CheckoutRequestID": "ws_CO_...",
        "ResultCode": 0,
        "ResultDesc": "The service request is processed successfully.",
        "CallbackMetadata": {"Item": [{"Name": "Amount", "Value": 100}, ...]}
    }}}

``CallbackMetadata`` is only present when ``ResultCode`` is 0.
"""

from typing import Any

from .errors import MalformedCallbackError, ProviderDeclinedError
from .types import CallbackResult

SUCCESS_RESULT_CODE = 0

# Metadata item name -> CallbackResult field
REQUIRED_METADATA_FIELDS = {
    "Amount": "amount",
    "MpesaReceiptNumber": "mpesa_receipt_number",
    "TransactionDate": "transaction_date",
    "PhoneNumber": "phone_number",
}


def project_metadata(items: Any) -> dict[str, Any]:
    """
    Map a list of {Name, Value} items onto the required donation fields.

    Args:
        items: CallbackMetadata.Item list from the callback

    Returns:
        Dict keyed by CallbackResult field name

    Raises:
        MalformedCallbackError: if items is not a list or any required
            name is absent or has a null value
    """
    if not isinstance(items, list):
        raise MalformedCallbackError("CallbackMetadata.Item is missing or not a list")

    found = {}
    for item in items:
        if not isinstance(item, dict):
            continue
        name = item.get("Name")
        # Value can be absent or null on some items (e.g. Balance); required ones must carry it
        if name in REQUIRED_METADATA_FIELDS and item.get("Value") is not None:
            found[REQUIRED_METADATA_FIELDS[name]] = item["Value"]

    missing = tuple(name for name, field in REQUIRED_METADATA_FIELDS.items() if field not in found)
    if missing:
        raise MalformedCallbackError(
            f"Callback metadata missing required field(s): {', '.join(missing)}",
            missing=missing,
        )
    return found


def _stk_callback(payload: Any) -> dict:
    try:
        stk_callback = payload["Body"]["stkCallback"]
    except (KeyError, TypeError) as e:
        raise MalformedCallbackError(f"Not an STK callback payload: missing {e}") from e
    if not isinstance(stk_callback, dict):
        raise MalformedCallbackError("Body.stkCallback is not an object")

    missing = tuple(k for k in ("ResultCode", "ResultDesc", "CheckoutRequestID") if k not in stk_callback)
    if missing:
        raise MalformedCallbackError(
            f"stkCallback missing required field(s): {', '.join(missing)}",
            missing=missing,
        )
    return stk_callback


def _result_code(value: Any) -> int:
    # Integers or digit strings only; floats and bools must not collapse onto 0
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    if isinstance(value, str) and value.strip().isascii() and value.strip().isdigit():
        return int(value)
    raise MalformedCallbackError(f"ResultCode is not an integer: {value!r}")


def parse_callback(payload: Any) -> CallbackResult:
    """
    Turn a callback payload into a completed CallbackResult.

    Raises:
        MalformedCallbackError: if the envelope is missing, ResultCode is
            not an integer or, on success, any required metadata field
            is missing
        ProviderDeclinedError: if the result code is not 0
    """
    stk_callback = _stk_callback(payload)

    result_code = _result_code(stk_callback["ResultCode"])
    result_desc = stk_callback["ResultDesc"]
    checkout_request_id = stk_callback["CheckoutRequestID"]

    if result_code != SUCCESS_RESULT_CODE:
        raise ProviderDeclinedError(result_code, result_desc, checkout_request_id)

    metadata = stk_callback.get("CallbackMetadata") or {}
    fields = project_metadata(metadata.get("Item") if isinstance(metadata, dict) else None)

    return CallbackResult(
        result_code=result_code,
        result_description=result_desc,
        checkout_request_id=checkout_request_id,
        status="completed",
        **fields,
    )
