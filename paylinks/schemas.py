from typing import List, Optional
from pydantic import Field
from .models import AmountType, CamelModel, PaymentLink, PaymentLinkPublicInfo, PaymentLinkStatus, PaymentRecord
from .services.fees import FeeBreakdown, WithdrawalQuote
from .services.relayer import RelayerConfig
from .tokens import TokenInfo

# amounts are u64 base units on chain
U64_MAX = 2**64 - 1


class CreatePaymentLinkIn(CamelModel):
    recipient_address: str = ""
    token_mint: Optional[str] = None
    token_type: Optional[str] = None  # SDK token name, alternative to token_mint
    amount_type: AmountType
    fixed_amount: Optional[int] = Field(default=None, le=U64_MAX)
    min_amount: Optional[int] = Field(default=None, le=U64_MAX)
    max_amount: Optional[int] = Field(default=None, le=U64_MAX)
    reusable: bool = False
    max_usage_count: Optional[int] = Field(default=None, le=U64_MAX)
    label: Optional[str] = Field(default=None, max_length=200)
    message: Optional[str] = Field(default=None, max_length=1000)


class CreatePaymentLinkOut(CamelModel):
    success: bool = True
    payment_link: PaymentLinkPublicInfo
    url: str


class PaymentLinkOut(CamelModel):
    success: bool = True
    payment_link: PaymentLinkPublicInfo


class PaymentLinkListOut(CamelModel):
    success: bool = True
    payment_links: List[PaymentLink]


class PaymentHistoryOut(CamelModel):
    success: bool = True
    payments: List[PaymentRecord]


class CompletePaymentIn(CamelModel):
    tx_signature: str = ""
    amount: int = Field(le=U64_MAX)


class CompletePaymentOut(CamelModel):
    success: bool = True
    payment: PaymentRecord


class RecipientIn(CamelModel):
    amount: int = Field(le=U64_MAX)


class RecipientOut(CamelModel):
    success: bool = True
    recipient_address: str


class OwnerIn(CamelModel):
    recipient_address: str = ""


class UpdateStatusIn(OwnerIn):
    status: PaymentLinkStatus


class SuccessOut(CamelModel):
    success: bool = True


class FeeConfigOut(CamelModel):
    success: bool = True
    config: RelayerConfig
    source: str  # "relayer" or "fallback"


class FeeQuoteIn(CamelModel):
    token_mint: Optional[str] = None
    token_type: Optional[str] = None
    amount: int = Field(le=U64_MAX)
    private_balance: Optional[int] = Field(default=None, le=U64_MAX)


class FeeQuoteOut(CamelModel):
    success: bool = True
    quote: WithdrawalQuote


class TokenListOut(CamelModel):
    success: bool = True
    tokens: List[TokenInfo]


class DepositQuoteIn(CamelModel):
    amount: int = Field(le=U64_MAX)


class DepositQuoteOut(CamelModel):
    success: bool = True
    quote: FeeBreakdown
