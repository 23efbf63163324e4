import base64
from unittest.mock import patch

import pytest
import requests

from mpesa_stk import AuthenticationError, Credential
from mpesa_stk.auth import basic_auth_header
from tests.helpers import mock_response, token_response


def test_basic_auth_header():
    header = basic_auth_header("key", "secret")
    assert header == "Basic " + base64.b64encode(b"key:secret").decode()


def test_fetches_token_when_absent(token_manager, clock):
    with patch("requests.get", return_value=token_response()) as mock_get:
        token = token_manager.ensure_token()

    assert token == "daraja_tok_abc"
    mock_get.assert_called_once()
    url = mock_get.call_args.args[0]
    assert url == "https://sandbox.safaricom.co.ke/oauth/v1/generate?grant_type=client_credentials"
    assert mock_get.call_args.kwargs["headers"]["Authorization"] == basic_auth_header(
        "test_consumer_key", "test_consumer_secret"
    )
    assert token_manager.credential == Credential(token="daraja_tok_abc", expires_at=clock.now + 3599 - 60)


def test_reuses_cached_token_without_network(token_manager, clock):
    token_manager._credential = Credential(token="cached", expires_at=clock.now + 100)

    with patch("requests.get") as mock_get:
        assert token_manager.ensure_token() == "cached"

    mock_get.assert_not_called()


def test_refreshes_expired_token_once(token_manager, clock):
    token_manager._credential = Credential(token="old", expires_at=clock.now)

    with patch("requests.get", return_value=token_response("new", 3600)) as mock_get:
        assert token_manager.ensure_token() == "new"
        assert token_manager.ensure_token() == "new"

    assert mock_get.call_count == 1
    assert token_manager.credential.token == "new"
    assert token_manager.credential.expires_at == clock.now + 3540


def test_token_refetched_after_safety_margin(token_manager, clock):
    with patch("requests.get", side_effect=[token_response("first", 3600), token_response("second", 3600)]) as mock_get:
        assert token_manager.ensure_token() == "first"
        clock.now += 3539
        assert token_manager.ensure_token() == "first"
        clock.now += 1
        assert token_manager.ensure_token() == "second"

    assert mock_get.call_count == 2


def test_invalidate_forces_refresh(token_manager):
    with patch("requests.get", side_effect=[token_response("a"), token_response("b")]):
        assert token_manager.ensure_token() == "a"
        token_manager.invalidate()
        assert token_manager.credential is None
        assert token_manager.ensure_token() == "b"


def test_network_error_raises_authentication_error(token_manager):
    cause = requests.ConnectionError("connection refused")
    with patch("requests.get", side_effect=cause):
        with pytest.raises(AuthenticationError) as exc_info:
            token_manager.ensure_token()

    assert exc_info.value.__cause__ is cause
    assert token_manager.credential is None


def test_rejected_credentials_raise_authentication_error(token_manager):
    body = {"errorCode": "400.008.01", "errorMessage": "Invalid Authentication passed"}
    with patch("requests.get", return_value=mock_response(body, status_code=400)):
        with pytest.raises(AuthenticationError, match="Invalid Authentication passed"):
            token_manager.ensure_token()

    assert token_manager.credential is None


@pytest.mark.parametrize("body", [
    {"expires_in": "3599"},
    {"access_token": "tok"},
    {"access_token": "tok", "expires_in": "soon"},
    ["not", "a", "dict"],
])
def test_incomplete_token_response_keeps_cache_untouched(token_manager, clock, body):
    token_manager._credential = Credential(token="old", expires_at=clock.now - 1)

    with patch("requests.get", return_value=mock_response(body)):
        with pytest.raises(AuthenticationError):
            token_manager.ensure_token()

    assert token_manager.credential == Credential(token="old", expires_at=clock.now - 1)


def test_non_json_token_response(token_manager):
    with patch("requests.get", return_value=mock_response(ValueError("no json"))):
        with pytest.raises(AuthenticationError, match="not JSON"):
            token_manager.ensure_token()


def test_credential_from_response_is_pure():
    data = {"access_token": "tok", "expires_in": "3599"}
    assert Credential.from_response(data, 1000.0) == Credential.from_response(data, 1000.0)
    assert Credential.from_response(data, 1000.0).expires_at == 1000.0 + 3599 - 60
    assert Credential(token="t", expires_at=10).is_valid(9.99)
    assert not Credential(token="t", expires_at=10).is_valid(10)
