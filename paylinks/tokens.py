"""
Registry of the tokens the Privacy Cash SDK supports.

The SDK ships its token list with `pubkey` either as a base58 string or as a
key object. Entries are normalized into `TokenInfo` once, here, so the rest of
the service only ever deals with mint strings.
"""

from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Dict, Iterable, List, Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel
from solders.pubkey import Pubkey

LAMPORTS_PER_SOL = 1_000_000_000

# Same shape as the SDK's `tokens` export.
SDK_TOKENS: List[Dict[str, Any]] = [
    {
        "name": "sol",
        "pubkey": Pubkey.from_string("So11111111111111111111111111111111111111112"),
        "units_per_token": LAMPORTS_PER_SOL,
    },
    {
        "name": "usdc",
        "pubkey": "EPjFWdd5AufqSSqeM2qN1xzybapC8G4wEGGkZwyTDt1v",
        "units_per_token": 1_000_000,
    },
    {
        "name": "usdt",
        "pubkey": "Es9vMFrzaCERmJfrF4H2FYD4KCoNkY11McCe8BenwNYB",
        "units_per_token": 1_000_000,
    },
]


class TokenInfo(BaseModel):
    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    name: str
    mint: str
    units_per_token: int
    decimals: int
    label: str


def mint_to_str(pubkey: Any) -> str:
    if isinstance(pubkey, str):
        return pubkey
    for attr in ("to_base58", "toBase58"):
        method = getattr(pubkey, attr, None)
        if callable(method):
            encoded = method()
            return encoded.decode() if isinstance(encoded, bytes) else str(encoded)
    # solders.Pubkey renders as base58
    return str(pubkey)


def decimals_for(units_per_token: int) -> int:
    decimals = 0
    value = units_per_token
    while value > 1 and value % 10 == 0:
        decimals += 1
        value //= 10
    return decimals


def build_registry(entries: Iterable[Dict[str, Any]]) -> List[TokenInfo]:
    return [
        TokenInfo(
            name=entry["name"],
            mint=mint_to_str(entry["pubkey"]),
            units_per_token=int(entry["units_per_token"]),
            decimals=decimals_for(int(entry["units_per_token"])),
            label=entry["name"].upper(),
        )
        for entry in entries
    ]


TOKEN_REGISTRY: List[TokenInfo] = build_registry(SDK_TOKENS)

_BY_MINT = {token.mint: token for token in TOKEN_REGISTRY}
_BY_NAME = {token.name: token for token in TOKEN_REGISTRY}

SOL_MINT = _BY_NAME["sol"].mint


def get_token_by_mint(mint: str) -> Optional[TokenInfo]:
    return _BY_MINT.get(mint)


def get_token_by_name(name: str) -> Optional[TokenInfo]:
    return _BY_NAME.get(name.lower())


def is_sol_mint(mint: str) -> bool:
    return mint == SOL_MINT


def resolve_token_mint(token_mint: Optional[str] = None, token_type: Optional[str] = None) -> Optional[str]:
    """Resolve a request's token, given either as a mint or as an SDK token name."""
    if token_mint:
        return token_mint if token_mint in _BY_MINT else None
    if token_type:
        token = get_token_by_name(token_type)
        return token.mint if token else None
    return None


def format_token_amount(base_units: int, token: TokenInfo, max_fraction_digits: int = 6) -> str:
    """
    Render base units for display, e.g. 1_500_000_000 lamports -> "1.5".

    Thousands are grouped and trailing zeros dropped; at most
    min(max_fraction_digits, token.decimals) fraction digits are kept.
    """
    digits = min(max_fraction_digits, token.decimals)
    value = Decimal(base_units) / Decimal(token.units_per_token)
    value = value.quantize(Decimal(1).scaleb(-digits), rounding=ROUND_HALF_UP)
    text = f"{value:,.{digits}f}"
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text


def is_valid_public_key(address: str) -> bool:
    try:
        Pubkey.from_string(address)
    except (ValueError, TypeError):
        return False
    return True
