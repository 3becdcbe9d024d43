from fastapi import Request
from .config import Settings
from .services.relayer import RelayerConfigClient
from .store import PaymentLinkStore

def get_store(request: Request) -> PaymentLinkStore:
    return request.app.state.store

def get_relayer(request: Request) -> RelayerConfigClient:
    return request.app.state.relayer

def get_settings(request: Request) -> Settings:
    return request.app.state.settings

def payment_url(request: Request, payment_id: str) -> str:
    base = get_settings(request).public_base_url or str(request.base_url)
    return f"{base.rstrip('/')}/pay/{payment_id}"
