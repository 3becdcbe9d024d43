from fastapi import APIRouter, Depends
from ..errors import PaymentLinkValidationError
from ..schemas import DepositQuoteIn, DepositQuoteOut, FeeConfigOut, FeeQuoteIn, FeeQuoteOut, TokenListOut
from ..services.fees import quote_deposit, quote_withdrawal
from ..services.relayer import FALLBACK_CONFIG, RelayerConfigClient
from ..tokens import TOKEN_REGISTRY, get_token_by_mint, resolve_token_mint
from ..utils import get_relayer

router = APIRouter(tags=["fees"])


@router.get("/fees/config", response_model=FeeConfigOut)
async def fee_config(relayer: RelayerConfigClient = Depends(get_relayer)):
    config = await relayer.fetch_config()
    if config is None:
        return FeeConfigOut(config=FALLBACK_CONFIG, source="fallback")
    return FeeConfigOut(config=config, source="relayer")


@router.post("/fees/quote", response_model=FeeQuoteOut)
async def fee_quote(payload: FeeQuoteIn, relayer: RelayerConfigClient = Depends(get_relayer)):
    """
    What leaves the private balance for the recipient to get `amount`, and the
    deposit needed first when `privateBalance` is given and falls short.
    """
    token_mint = resolve_token_mint(payload.token_mint, payload.token_type)
    if token_mint is None:
        raise PaymentLinkValidationError("Invalid token mint")
    if payload.amount <= 0:
        raise PaymentLinkValidationError("Amount must be positive")
    if payload.private_balance is not None and payload.private_balance < 0:
        raise PaymentLinkValidationError("Private balance cannot be negative")

    config = await relayer.get_config()
    quote = quote_withdrawal(payload.amount, get_token_by_mint(token_mint), config, payload.private_balance)
    return FeeQuoteOut(quote=quote)


@router.post("/fees/deposit-quote", response_model=DepositQuoteOut)
async def deposit_quote(payload: DepositQuoteIn):
    """Deposits into the private pool carry no relayer fee, for any token."""
    if payload.amount <= 0:
        raise PaymentLinkValidationError("Amount must be positive")
    return DepositQuoteOut(quote=quote_deposit(payload.amount))


@router.get("/tokens", response_model=TokenListOut)
async def list_tokens():
    return TokenListOut(tokens=TOKEN_REGISTRY)
