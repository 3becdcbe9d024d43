"""
In-memory payment link store.

One instance is created per app and handed to the routes through app.state.
Every operation takes the store lock, so each one applies fully or not at all.
State is process-local: it is lost on restart and not shared between workers.

Link lifecycle:

    active ──(one-time link used / max usage reached)──> completed
       │                                                    │
       └──────────────(explicit disable)──> disabled <──────┘

Only `active` links accept payments; nothing moves a link back to `active`.
"""

import logging
import secrets
import threading
import uuid
from typing import Dict, List, Optional

from pydantic import BaseModel

from .errors import PaymentLinkInactive, PaymentLinkNotFound, PaymentLinkValidationError
from .models import PaymentLink, PaymentLinkPublicInfo, PaymentLinkStatus, PaymentRecord
from .schemas import CreatePaymentLinkIn
from .tokens import format_token_amount, get_token_by_mint

logger = logging.getLogger(__name__)

PAYMENT_ID_BYTES = 9  # 12 url-safe characters

_TRANSITIONS: Dict[str, set] = {
    "active": {"completed", "disabled"},
    "completed": {"disabled"},
    "disabled": set(),
}


class AmountValidation(BaseModel):
    valid: bool
    error: Optional[str] = None


def _format_amount(amount: int, token_mint: str) -> str:
    token = get_token_by_mint(token_mint)
    if token is None:
        return f"{amount} base units"
    return f"{format_token_amount(amount, token)} {token.label}"


class PaymentLinkStore:
    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._links: Dict[str, PaymentLink] = {}
        self._records: List[PaymentRecord] = []

    def _new_payment_id(self) -> str:
        while True:
            payment_id = secrets.token_urlsafe(PAYMENT_ID_BYTES)
            if payment_id not in self._links:
                return payment_id

    def create_payment_link(self, request: CreatePaymentLinkIn) -> PaymentLink:
        """
        Validate and store a new link. Raises PaymentLinkValidationError.

        The returned link carries the recipient address; strip it with
        `public_info()` before handing it to anyone but the recipient.
        """
        if not request.recipient_address:
            raise PaymentLinkValidationError("Recipient address is required")
        if not request.token_mint:
            raise PaymentLinkValidationError("Token mint is required")
        if request.amount_type not in ("fixed", "flexible"):
            raise PaymentLinkValidationError("Invalid amount type")

        fixed_amount = min_amount = max_amount = None
        if request.amount_type == "fixed":
            if request.fixed_amount is None:
                raise PaymentLinkValidationError("Fixed amount is required for fixed amount type")
            if request.fixed_amount <= 0:
                raise PaymentLinkValidationError("Fixed amount must be positive")
            fixed_amount = request.fixed_amount
        else:
            if request.min_amount is not None and request.min_amount < 0:
                raise PaymentLinkValidationError("Min amount cannot be negative")
            if request.max_amount is not None and request.max_amount < (request.min_amount or 0):
                raise PaymentLinkValidationError("Max amount must be greater than min amount")
            min_amount, max_amount = request.min_amount, request.max_amount

        if request.max_usage_count is not None and request.max_usage_count < 1:
            raise PaymentLinkValidationError("Max usage count must be at least 1")

        with self._lock:
            link = PaymentLink(
                payment_id=self._new_payment_id(),
                recipient_address=request.recipient_address,
                token_mint=request.token_mint,
                amount_type=request.amount_type,
                fixed_amount=fixed_amount,
                min_amount=min_amount,
                max_amount=max_amount,
                reusable=request.reusable,
                max_usage_count=request.max_usage_count,
                label=request.label,
                message=request.message,
            )
            self._links[link.payment_id] = link
        logger.info("payment link %s created (%s, reusable=%s)", link.payment_id, link.amount_type, link.reusable)
        return link.model_copy()

    def get_payment_link(self, payment_id: str) -> Optional[PaymentLink]:
        """Full record including the recipient. Backend use only."""
        with self._lock:
            link = self._links.get(payment_id)
            return link.model_copy() if link else None

    def get_payment_link_public_info(self, payment_id: str) -> Optional[PaymentLinkPublicInfo]:
        with self._lock:
            link = self._links.get(payment_id)
            return link.public_info() if link else None

    def _can_accept(self, link: PaymentLink) -> bool:
        if link.status != "active":
            return False
        if not link.reusable and link.usage_count > 0:
            return False
        if link.max_usage_count is not None and link.usage_count >= link.max_usage_count:
            return False
        return True

    def can_accept_payment(self, payment_id: str) -> bool:
        with self._lock:
            link = self._links.get(payment_id)
            return link is not None and self._can_accept(link)

    def _validate_amount(self, link: PaymentLink, amount: int) -> AmountValidation:
        if amount <= 0:
            return AmountValidation(valid=False, error="Amount must be positive")
        if link.amount_type == "fixed":
            if amount != link.fixed_amount:
                return AmountValidation(
                    valid=False,
                    error=f"Amount must be exactly {_format_amount(link.fixed_amount, link.token_mint)}",
                )
            return AmountValidation(valid=True)
        if link.min_amount is not None and amount < link.min_amount:
            return AmountValidation(
                valid=False,
                error=f"Amount must be at least {_format_amount(link.min_amount, link.token_mint)}",
            )
        if link.max_amount is not None and amount > link.max_amount:
            return AmountValidation(
                valid=False,
                error=f"Amount cannot exceed {_format_amount(link.max_amount, link.token_mint)}",
            )
        return AmountValidation(valid=True)

    def validate_amount(self, payment_id: str, amount: int) -> AmountValidation:
        with self._lock:
            link = self._links.get(payment_id)
            if link is None:
                return AmountValidation(valid=False, error="Payment link not found")
            return self._validate_amount(link, amount)

    def _increment(self, link: PaymentLink) -> None:
        link.usage_count += 1
        if not link.reusable or (
            link.max_usage_count is not None and link.usage_count >= link.max_usage_count
        ):
            if link.status != "completed":
                logger.info("payment link %s completed after %d use(s)", link.payment_id, link.usage_count)
            link.status = "completed"

    def increment_usage_count(self, payment_id: str) -> None:
        with self._lock:
            link = self._links.get(payment_id)
            if link is not None:
                self._increment(link)

    def update_payment_link_status(self, payment_id: str, status: PaymentLinkStatus) -> bool:
        """Apply an explicit status change. False if the link is missing or the move is not allowed."""
        with self._lock:
            link = self._links.get(payment_id)
            if link is None:
                return False
            if link.status == status:
                return True
            if status not in _TRANSITIONS.get(link.status, set()):
                return False
            logger.info("payment link %s: %s -> %s", payment_id, link.status, status)
            link.status = status
            return True

    def list_payment_links_by_recipient(self, recipient_address: str) -> List[PaymentLink]:
        with self._lock:
            return [
                link.model_copy()
                for link in self._links.values()
                if link.recipient_address == recipient_address
            ]

    def add_payment_record(self, payment_id: str, amount: int, token_mint: str, tx_signature: str) -> PaymentRecord:
        """Append a record. Does not check the link: call can_accept_payment first, or use complete_payment."""
        record = PaymentRecord(
            id=uuid.uuid4().hex,
            payment_id=payment_id,
            token_mint=token_mint,
            amount=amount,
            tx_signature=tx_signature,
        )
        with self._lock:
            self._records.append(record)
        return record

    def complete_payment(self, payment_id: str, amount: int, tx_signature: str) -> PaymentRecord:
        """
        Check the link and the amount, record the payment and bump usage, all
        under one lock so two payers cannot both use a one-time link.
        """
        with self._lock:
            link = self._links.get(payment_id)
            if link is None:
                raise PaymentLinkNotFound()
            if not self._can_accept(link):
                raise PaymentLinkInactive()
            validation = self._validate_amount(link, amount)
            if not validation.valid:
                raise PaymentLinkValidationError(validation.error)
            record = self.add_payment_record(payment_id, amount, link.token_mint, tx_signature)
            self._increment(link)
        logger.info("payment link %s paid, tx %s", payment_id, tx_signature)
        return record

    def list_payment_records(self, payment_id: str) -> List[PaymentRecord]:
        with self._lock:
            return [record for record in self._records if record.payment_id == payment_id]

    def list_payment_records_by_recipient(self, recipient_address: str) -> List[PaymentRecord]:
        with self._lock:
            ids = {
                link.payment_id
                for link in self._links.values()
                if link.recipient_address == recipient_address
            }
            return [record for record in self._records if record.payment_id in ids]

    def delete_payment_link(self, payment_id: str) -> bool:
        """Remove a link and every record that points at it."""
        with self._lock:
            if self._links.pop(payment_id, None) is None:
                return False
            removed = 0
            for i in range(len(self._records) - 1, -1, -1):
                if self._records[i].payment_id == payment_id:
                    del self._records[i]
                    removed += 1
        logger.info("payment link %s deleted with %d record(s)", payment_id, removed)
        return True
