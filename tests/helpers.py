import json
from unittest.mock import Mock


def mock_response(json_data, status_code: int = 200) -> Mock:
    """Mock requests.Response whose .json() returns json_data."""
    resp = Mock()
    resp.ok = 200 <= status_code < 400
    resp.status_code = status_code
    if isinstance(json_data, Exception):
        resp.json.side_effect = json_data
        resp.text = "<html>bad gateway</html>"
    else:
        resp.json.return_value = json_data
        resp.text = json.dumps(json_data)
    return resp


def token_response(token: str = "daraja_tok_abc", expires_in="3599") -> Mock:
    return mock_response({"access_token": token, "expires_in": expires_in})


class FakeClock:
    def __init__(self, now: float = 1_700_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


def make_callback(result_code=0, result_desc="The service request is processed successfully.", items=None):
    stk_callback = {
        "MerchantRequestID": "29115-34620561-1",
        "CheckoutRequestID": "ws_CO_191220191020363925",
        "ResultCode": result_code,
        "ResultDesc": result_desc,
    }
    if items is not None:
        stk_callback["CallbackMetadata"] = {"Item": items}
    return {"Body": {"stkCallback": stk_callback}}


SUCCESS_ITEMS = [
    {"Name": "Amount", "Value": 100},
    {"Name": "MpesaReceiptNumber", "Value": "ABC123"},
    {"Name": "Balance"},
    {"Name": "TransactionDate", "Value": 20240101120500},
    {"Name": "PhoneNumber", "Value": 254712345678},
]
