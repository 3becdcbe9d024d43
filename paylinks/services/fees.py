"""
Withdrawal fee model matching the Privacy Cash SDK's relayer deduction.

The SDK charges ``fee = total * rate + rent`` on a withdrawal of ``total`` base
units and pays ``total - fee`` to the recipient. The functions here invert that
so a caller can quote, before signing anything, how much has to leave the
sender's private balance for the recipient to receive an exact amount, and how
much must be deposited first when the balance falls short.

Deposits carry no relayer fee.

All amounts are integer base units (lamports for SOL). Inputs are assumed to be
validated, non-negative and finite.
"""

import math
from typing import Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from ..tokens import LAMPORTS_PER_SOL, TokenInfo, is_sol_mint
from .relayer import FALLBACK_CONFIG, RelayerConfig

DEPOSIT_FEE = 0
DEFAULT_SPL_RENT_FEE = 0.001  # whole tokens, when the relayer lists none for the token


class FeeBreakdown(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    total: int
    fee: int


class WithdrawalQuote(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    token_mint: str
    amount_to_recipient: int
    fee: int
    total: int
    minimum_withdrawal: int = 0
    below_minimum: bool = False
    private_balance: Optional[int] = None
    shortfall: Optional[int] = None
    needs_deposit: Optional[bool] = None
    has_sufficient_balance: Optional[bool] = None
    max_amount_to_recipient: Optional[int] = None


def compute_total_for_recipient(amount_to_recipient: int, config: Optional[RelayerConfig]) -> FeeBreakdown:
    """Native SOL: lamports to debit so the recipient receives `amount_to_recipient`."""
    c = config or FALLBACK_CONFIG
    rent = math.floor(LAMPORTS_PER_SOL * c.withdraw_rent_fee)
    rate = c.withdraw_fee_rate
    if rate >= 1:
        return FeeBreakdown(total=amount_to_recipient + rent, fee=rent)
    total = math.floor((amount_to_recipient + rent) / (1 - rate))
    return FeeBreakdown(total=total, fee=max(0, total - amount_to_recipient))


def compute_total_for_recipient_spl(amount_to_recipient: int,
                                    units_per_token: int,
                                    token_name: str,
                                    config: Optional[RelayerConfig],
                                    ) -> FeeBreakdown:
    """
    SPL tokens: base units to debit so the recipient receives `amount_to_recipient`.

    Rent comes from the relayer's per-token ``rent_fees``. Unlike the native
    path, the fee is recomputed forward from the solved total, which is how
    the SDK's withdrawSPL derives it; the two can differ by one base unit.
    """
    c = config or FALLBACK_CONFIG
    token_rent_fee = c.rent_fees.get(token_name, DEFAULT_SPL_RENT_FEE)
    rent = math.floor(units_per_token * token_rent_fee)
    rate = c.withdraw_fee_rate
    if rate >= 1:
        return FeeBreakdown(total=amount_to_recipient + rent, fee=rent)
    total = math.floor((amount_to_recipient + rent) / (1 - rate))
    fee = math.floor(total * rate + units_per_token * token_rent_fee)
    return FeeBreakdown(total=total, fee=fee)


def compute_total_for_token(amount_to_recipient: int, token: TokenInfo, config: Optional[RelayerConfig]) -> FeeBreakdown:
    if is_sol_mint(token.mint):
        return compute_total_for_recipient(amount_to_recipient, config)
    return compute_total_for_recipient_spl(amount_to_recipient, token.units_per_token, token.name, config)


def rent_for_token(token: TokenInfo, config: Optional[RelayerConfig]) -> float:
    """Per-withdrawal rent in (possibly fractional) base units."""
    c = config or FALLBACK_CONFIG
    if is_sol_mint(token.mint):
        return math.floor(LAMPORTS_PER_SOL * c.withdraw_rent_fee)
    return token.units_per_token * c.rent_fees.get(token.name, DEFAULT_SPL_RENT_FEE)


def compute_shortfall(required: int, private_balance: int) -> int:
    return max(0, required - private_balance)


def max_amount_to_recipient(private_balance: int, token: TokenInfo, config: Optional[RelayerConfig]) -> int:
    """
    Largest recipient amount whose quoted total fits in `private_balance`.

    Starts from the SDK's forward deduction and settles on the inversion used
    by `compute_total_for_token`, so ``compute_total_for_token(result).total
    <= private_balance`` holds whenever the result is positive.
    """
    c = config or FALLBACK_CONFIG
    if c.withdraw_fee_rate >= 1:
        return max(0, private_balance - compute_total_for_token(0, token, c).total)

    fee = math.floor(private_balance * c.withdraw_fee_rate + rent_for_token(token, c))
    amount = max(0, private_balance - fee)
    while amount > 0 and compute_total_for_token(amount, token, c).total > private_balance:
        amount -= 1
    while compute_total_for_token(amount + 1, token, c).total <= private_balance:
        amount += 1
    return amount


def minimum_withdrawal_base_units(token: TokenInfo, config: Optional[RelayerConfig]) -> int:
    c = config or FALLBACK_CONFIG
    minimum = c.minimum_withdrawal.get(token.name)
    if not minimum:
        return 0
    return math.floor(minimum * token.units_per_token)


def quote_withdrawal(amount_to_recipient: int,
                     token: TokenInfo,
                     config: Optional[RelayerConfig],
                     private_balance: Optional[int] = None,
                     ) -> WithdrawalQuote:
    breakdown = compute_total_for_token(amount_to_recipient, token, config)
    minimum = minimum_withdrawal_base_units(token, config)
    quote = WithdrawalQuote(
        token_mint=token.mint,
        amount_to_recipient=amount_to_recipient,
        fee=breakdown.fee,
        total=breakdown.total,
        minimum_withdrawal=minimum,
        below_minimum=breakdown.total < minimum,
    )
    if private_balance is not None:
        shortfall = compute_shortfall(breakdown.total, private_balance)
        quote.private_balance = private_balance
        quote.shortfall = shortfall
        quote.needs_deposit = shortfall > 0
        quote.has_sufficient_balance = shortfall == 0
        quote.max_amount_to_recipient = max_amount_to_recipient(private_balance, token, config)
    return quote


def quote_deposit(amount: int) -> FeeBreakdown:
    return FeeBreakdown(total=amount + DEPOSIT_FEE, fee=DEPOSIT_FEE)
