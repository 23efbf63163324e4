from unittest.mock import Mock

import pytest

from mpesa_stk import MpesaConfig, MpesaSTK, TokenManager
from tests.helpers import FakeClock


@pytest.fixture
def config():
    return MpesaConfig(
        consumer_key="test_consumer_key",
        consumer_secret="test_consumer_secret",
        short_code="174379",
        passkey="bfb279f9aa9bdbcf158e97dd71a467cd2e0c893059b10f78e6b72ada1ed2c919",
        callback_url="https://example.com/mpesa/callback",
    )


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def token_manager(config, clock):
    return TokenManager(config, clock=clock)


@pytest.fixture
def store():
    return Mock()


@pytest.fixture
def notifier():
    return Mock()


@pytest.fixture
def client(config, token_manager, store, notifier):
    return MpesaSTK(config, token_manager=token_manager, store=store, notifier=notifier)
