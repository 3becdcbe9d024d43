import asyncio
import logging
import math
from typing import Any, Dict, Optional

import httpx
from pydantic import BaseModel, Field

from ..config import settings

logger = logging.getLogger(__name__)

DEFAULT_WITHDRAW_FEE_RATE = 0.0035
DEFAULT_WITHDRAW_RENT_FEE = 0.006  # SOL per withdrawal


class RelayerConfig(BaseModel):
    withdraw_fee_rate: float = DEFAULT_WITHDRAW_FEE_RATE
    withdraw_rent_fee: float = DEFAULT_WITHDRAW_RENT_FEE
    rent_fees: Dict[str, float] = Field(default_factory=dict)
    minimum_withdrawal: Dict[str, float] = Field(default_factory=dict)

    @classmethod
    def from_payload(cls, raw: Dict[str, Any]) -> "RelayerConfig":
        """Build from the relayer's /config json, falling back per field on junk values."""
        rate = _as_float(raw.get("withdraw_fee_rate"))
        rent = _as_float(raw.get("withdraw_rent_fee"))
        rent_fees = raw.get("rent_fees")
        minimum_withdrawal = raw.get("minimum_withdrawal")
        return cls(
            withdraw_fee_rate=rate if rate else DEFAULT_WITHDRAW_FEE_RATE,
            withdraw_rent_fee=rent if rent is not None else DEFAULT_WITHDRAW_RENT_FEE,
            rent_fees=_numeric_map(rent_fees),
            minimum_withdrawal=_numeric_map(minimum_withdrawal),
        )


FALLBACK_CONFIG = RelayerConfig()


def _as_float(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def _numeric_map(value: Any) -> Dict[str, float]:
    if not isinstance(value, dict):
        return {}
    out = {}
    for key, item in value.items():
        number = _as_float(item)
        if number is not None:
            out[str(key)] = number
    return out


class RelayerConfigClient:
    """
    Fetches the relayer's fee config once and memoizes it for the process.

    A failed fetch is not cached: the caller gets FALLBACK_CONFIG and the next
    call tries the relayer again.
    """

    def __init__(self,
                 base_url: Optional[str] = None,
                 timeout: Optional[float] = None,
                 transport: Optional[httpx.AsyncBaseTransport] = None,
                 ) -> None:
        self.base_url = (base_url or settings.relayer_api_url).rstrip("/")
        self.timeout = timeout if timeout is not None else settings.relayer_timeout
        self._transport = transport
        self._cached: Optional[RelayerConfig] = None
        self._lock = asyncio.Lock()

    @property
    def cached(self) -> Optional[RelayerConfig]:
        return self._cached

    async def fetch_config(self) -> Optional[RelayerConfig]:
        """Memoized relayer config, or None if the relayer could not be reached."""
        if self._cached is not None:
            return self._cached
        async with self._lock:
            if self._cached is not None:
                return self._cached
            try:
                async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                    resp = await client.get(f"{self.base_url}/config")
                    resp.raise_for_status()
                    raw = resp.json()
            except (httpx.HTTPError, httpx.InvalidURL, ValueError) as e:
                logger.warning("relayer config fetch from %s failed: %s", self.base_url, e)
                return None
            if not isinstance(raw, dict):
                logger.warning("relayer config from %s is not an object", self.base_url)
                return None
            self._cached = RelayerConfig.from_payload(raw)
            logger.info(
                "relayer config loaded: rate=%s rent=%s",
                self._cached.withdraw_fee_rate,
                self._cached.withdraw_rent_fee,
            )
            return self._cached

    async def get_config(self) -> RelayerConfig:
        config = await self.fetch_config()
        return config if config is not None else FALLBACK_CONFIG
