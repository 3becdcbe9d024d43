from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, Query, Request
from ..errors import PaymentLinkForbidden, PaymentLinkInactive, PaymentLinkNotFound, PaymentLinkValidationError
from ..schemas import (
    CompletePaymentIn, CompletePaymentOut,
    CreatePaymentLinkIn, CreatePaymentLinkOut,
    OwnerIn, PaymentHistoryOut, PaymentLinkListOut, PaymentLinkOut,
    RecipientIn, RecipientOut, SuccessOut, UpdateStatusIn,
)
from ..store import PaymentLinkStore
from ..tokens import is_valid_public_key, resolve_token_mint
from ..utils import get_store, payment_url

router = APIRouter(prefix="/payment-links", tags=["payment-links"])


def _require_recipient(recipient_address: Optional[str]) -> str:
    if not recipient_address:
        raise HTTPException(status_code=400, detail="Recipient address is required")
    return recipient_address


@router.get("", response_model=PaymentLinkListOut)
async def list_payment_links(recipient_address: Optional[str] = Query(default=None, alias="recipientAddress"),
                             store: PaymentLinkStore = Depends(get_store)):
    """All links created by a recipient, recipient address included."""
    links = store.list_payment_links_by_recipient(_require_recipient(recipient_address))
    return PaymentLinkListOut(payment_links=links)


@router.get("/history", response_model=PaymentHistoryOut)
async def list_payment_history(recipient_address: Optional[str] = Query(default=None, alias="recipientAddress"),
                               store: PaymentLinkStore = Depends(get_store)):
    payments = store.list_payment_records_by_recipient(_require_recipient(recipient_address))
    return PaymentHistoryOut(payments=payments)


@router.post("", response_model=CreatePaymentLinkOut, status_code=201)
async def create_payment_link(payload: CreatePaymentLinkIn,
                              request: Request,
                              store: PaymentLinkStore = Depends(get_store)):
    if not is_valid_public_key(payload.recipient_address):
        raise PaymentLinkValidationError("Invalid recipient address")

    token_mint = resolve_token_mint(payload.token_mint, payload.token_type)
    if token_mint is None:
        raise PaymentLinkValidationError("Invalid token mint")

    link = store.create_payment_link(payload.model_copy(update={"token_mint": token_mint}))
    return CreatePaymentLinkOut(payment_link=link.public_info(), url=payment_url(request, link.payment_id))


@router.get("/{payment_id}", response_model=PaymentLinkOut)
async def get_payment_link(payment_id: str, store: PaymentLinkStore = Depends(get_store)):
    """Public view for payers; never includes the recipient address."""
    info = store.get_payment_link_public_info(payment_id)
    if info is None:
        raise PaymentLinkNotFound()
    return PaymentLinkOut(payment_link=info)


@router.post("/{payment_id}/complete", response_model=CompletePaymentOut)
async def complete_payment(payment_id: str, payload: CompletePaymentIn, store: PaymentLinkStore = Depends(get_store)):
    """Record a confirmed payment and bump the link's usage (one-time links complete here)."""
    if store.get_payment_link(payment_id) is None:
        raise PaymentLinkNotFound()
    if not payload.tx_signature:
        raise PaymentLinkValidationError("Transaction signature is required")
    record = store.complete_payment(payment_id, payload.amount, payload.tx_signature)
    return CompletePaymentOut(payment=record)


@router.post("/{payment_id}/recipient", response_model=RecipientOut)
async def get_recipient(payment_id: str, payload: RecipientIn, store: PaymentLinkStore = Depends(get_store)):
    """Reveal where to send funds, once the link is usable and the amount fits it."""
    link = store.get_payment_link(payment_id)
    if link is None:
        raise PaymentLinkNotFound()
    if not store.can_accept_payment(payment_id):
        raise PaymentLinkInactive()
    validation = store.validate_amount(payment_id, payload.amount)
    if not validation.valid:
        raise PaymentLinkValidationError(validation.error)
    return RecipientOut(recipient_address=link.recipient_address)


@router.patch("/{payment_id}/status", response_model=PaymentLinkOut)
async def update_status(payment_id: str, payload: UpdateStatusIn, store: PaymentLinkStore = Depends(get_store)):
    link = store.get_payment_link(payment_id)
    if link is None:
        raise PaymentLinkNotFound()
    if link.recipient_address != payload.recipient_address:
        raise PaymentLinkForbidden()
    if payload.status != "disabled":
        raise PaymentLinkValidationError("Only disabling a payment link is supported")
    store.update_payment_link_status(payment_id, payload.status)
    return PaymentLinkOut(payment_link=store.get_payment_link_public_info(payment_id))


@router.delete("/{payment_id}", response_model=SuccessOut)
async def delete_payment_link(payment_id: str, payload: OwnerIn, store: PaymentLinkStore = Depends(get_store)):
    """Delete a link and its payment history. Only the link's recipient may do this."""
    link = store.get_payment_link(payment_id)
    if link is None:
        raise PaymentLinkNotFound()
    if link.recipient_address != payload.recipient_address:
        raise PaymentLinkForbidden()
    store.delete_payment_link(payment_id)
    return SuccessOut()
