import httpx
import pytest
from fastapi.testclient import TestClient
from solders.pubkey import Pubkey

from paylinks.config import Settings
from paylinks.main import create_app
from paylinks.schemas import CreatePaymentLinkIn
from paylinks.services.relayer import RelayerConfigClient
from paylinks.store import PaymentLinkStore
from paylinks.tokens import SOL_MINT, get_token_by_name

RELAYER_URL = "http://relayer.test"


@pytest.fixture
def recipient():
    return str(Pubkey.new_unique())


@pytest.fixture
def other_recipient():
    return str(Pubkey.new_unique())


@pytest.fixture
def sol():
    return get_token_by_name("sol")


@pytest.fixture
def usdc():
    return get_token_by_name("usdc")


@pytest.fixture
def store():
    return PaymentLinkStore()


@pytest.fixture
def make_link(store, recipient):
    """Create a link in `store` with sensible defaults; keyword args override."""
    def _make(**overrides):
        fields = {
            "recipient_address": recipient,
            "token_mint": SOL_MINT,
            "amount_type": "fixed",
            "fixed_amount": 500_000,
            "reusable": False,
        }
        fields.update(overrides)
        return store.create_payment_link(CreatePaymentLinkIn(**fields))
    return _make


def relayer_transport(payload=None, status_code=200, calls=None):
    """MockTransport answering GET /config; payload None simulates an unreachable relayer."""
    def handler(request: httpx.Request) -> httpx.Response:
        if calls is not None:
            calls.append(request)
        if payload is None:
            raise httpx.ConnectError("relayer unreachable", request=request)
        return httpx.Response(status_code, json=payload)
    return httpx.MockTransport(handler)


@pytest.fixture
def make_transport():
    return relayer_transport


@pytest.fixture
def make_client(store):
    def _make(relayer_payload=None):
        relayer = RelayerConfigClient(RELAYER_URL, timeout=1.0, transport=relayer_transport(relayer_payload))
        settings = Settings(public_base_url="https://pay.example.com")
        return TestClient(create_app(settings, store=store, relayer=relayer))
    return _make


@pytest.fixture
def client(store):
    """API client whose relayer is unreachable, so fees come from the fallback config."""
    relayer = RelayerConfigClient(RELAYER_URL, timeout=1.0, transport=relayer_transport())
    settings = Settings(public_base_url="https://pay.example.com")
    app = create_app(settings, store=store, relayer=relayer)
    with TestClient(app) as c:
        yield c
