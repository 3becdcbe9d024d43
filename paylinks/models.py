import time
from typing import Literal, Optional
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

AmountType = Literal["fixed", "flexible"]
PaymentLinkStatus = Literal["active", "completed", "disabled"]
PaymentRecordStatus = Literal["completed"]


def now_ms() -> int:
    return int(time.time() * 1000)


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class PaymentLinkPublicInfo(CamelModel):
    """What a payer may see: everything except the recipient address."""
    payment_id: str
    token_mint: str
    amount_type: AmountType
    fixed_amount: Optional[int] = None  # lamports for SOL, base units for SPL
    min_amount: Optional[int] = None
    max_amount: Optional[int] = None
    reusable: bool
    max_usage_count: Optional[int] = None
    label: Optional[str] = None
    message: Optional[str] = None
    created_at: int = Field(default_factory=now_ms)  # unix ms
    status: PaymentLinkStatus = "active"
    usage_count: int = 0


class PaymentLink(PaymentLinkPublicInfo):
    recipient_address: str

    def public_info(self) -> PaymentLinkPublicInfo:
        return PaymentLinkPublicInfo(**self.model_dump(exclude={"recipient_address"}))


class PaymentRecord(CamelModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    id: str
    payment_id: str
    token_mint: str
    amount: int
    tx_signature: str
    completed_at: int = Field(default_factory=now_ms)
    status: PaymentRecordStatus = "completed"
