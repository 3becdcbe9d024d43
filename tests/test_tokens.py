"""Tests for the token registry: key normalization, lookups, amount formatting."""

from solders.pubkey import Pubkey

from paylinks.tokens import (
    SOL_MINT,
    TOKEN_REGISTRY,
    build_registry,
    decimals_for,
    format_token_amount,
    get_token_by_mint,
    get_token_by_name,
    is_sol_mint,
    is_valid_public_key,
    resolve_token_mint,
)

USDC_MINT = "EPjFWdd5AufqSSqeM2qN1xzybapC8G4wEGGkZwyTDt1v"


class _JsKey:
    """Key object exposing toBase58, as the SDK's PublicKey does."""

    def __init__(self, value):
        self.value = value

    def toBase58(self):
        return self.value


class TestRegistry:

    def test_pubkey_shapes_normalized(self):
        key = Pubkey.new_unique()
        tokens = build_registry([
            {"name": "a", "pubkey": key, "units_per_token": 100},
            {"name": "b", "pubkey": "So11111111111111111111111111111111111111112", "units_per_token": 10},
            {"name": "c", "pubkey": _JsKey(USDC_MINT), "units_per_token": 1},
        ])
        assert [t.mint for t in tokens] == [str(key), "So11111111111111111111111111111111111111112", USDC_MINT]
        assert [t.decimals for t in tokens] == [2, 1, 0]
        assert tokens[0].label == "A"

    def test_decimals(self):
        assert decimals_for(1_000_000_000) == 9
        assert decimals_for(1_000_000) == 6
        assert decimals_for(250) == 1
        assert decimals_for(1) == 0

    def test_lookups(self):
        assert all(isinstance(t.mint, str) for t in TOKEN_REGISTRY)
        assert SOL_MINT == "So11111111111111111111111111111111111111112"
        assert is_sol_mint(SOL_MINT)
        assert not is_sol_mint(USDC_MINT)
        assert get_token_by_mint(USDC_MINT).name == "usdc"
        assert get_token_by_name("USDC").mint == USDC_MINT
        assert get_token_by_mint("nope") is None

    def test_resolve_token_mint(self):
        assert resolve_token_mint(USDC_MINT) == USDC_MINT
        assert resolve_token_mint(None, "sol") == SOL_MINT
        assert resolve_token_mint(USDC_MINT, "sol") == USDC_MINT
        assert resolve_token_mint("11111111111111111111111111111111") is None
        assert resolve_token_mint(None, "doge") is None
        assert resolve_token_mint() is None


class TestAmounts:

    def test_format(self, sol, usdc):
        assert format_token_amount(1_500_000_000, sol) == "1.5"
        assert format_token_amount(500_000, sol) == "0.0005"
        assert format_token_amount(1_234_567_890_000, sol) == "1,234.56789"
        assert format_token_amount(2_000_000_000, sol) == "2"
        assert format_token_amount(1, usdc) == "0.000001"
        assert format_token_amount(1, sol) == "0"

    def test_format_fraction_digits(self, sol):
        assert format_token_amount(1_234_567_890, sol, max_fraction_digits=2) == "1.23"

    def test_format_largest_u64_amount(self, sol, usdc):
        assert format_token_amount(2**64 - 1, sol) == "18,446,744,073.709552"
        assert format_token_amount(2**64 - 1, usdc) == "18,446,744,073,709.551615"

    def test_public_key_validation(self):
        assert is_valid_public_key(str(Pubkey.new_unique()))
        assert not is_valid_public_key("not-a-key")
        assert not is_valid_public_key("")
