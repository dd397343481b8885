from __future__ import annotations

from typing import Any, Dict, List

from fastapi import APIRouter, Depends

from blood_platform.auth import get_current_user
from blood_platform.billing.stripe_billing import create_payment_intent
from blood_platform.context import AppContext, get_context
from blood_platform.errors import BadRequest, NotConfigured
from blood_platform.funds.crud import create_fund, list_funds

from .schemas import FundCreate, PaymentIntentRequest


router = APIRouter(prefix="/api/funds", tags=["funds"])


@router.get("")
def list_all(
    _user: Dict[str, Any] = Depends(get_current_user),
    ctx: AppContext = Depends(get_context),
) -> List[Dict[str, Any]]:
    with ctx.store.connect() as conn:
        return list_funds(conn)


@router.post("", status_code=201)
def contribute(
    payload: FundCreate,
    user: Dict[str, Any] = Depends(get_current_user),
    ctx: AppContext = Depends(get_context),
) -> Dict[str, Any]:
    with ctx.store.connect() as conn:
        return create_fund(conn, user=user, amount=payload.amount, transaction_id=payload.transaction_id)


@router.post("/payment-intent")
def payment_intent(
    payload: PaymentIntentRequest,
    user: Dict[str, Any] = Depends(get_current_user),
    ctx: AppContext = Depends(get_context),
) -> Dict[str, Any]:
    """Start a card payment; the client records the fund after confirming it."""
    try:
        secret = create_payment_intent(ctx.cfg, amount=payload.amount, user_id=int(user["id"]), email=user["email"])
    except ValueError:
        raise BadRequest("Amount is too small")
    except RuntimeError as e:
        # Stripe missing / not configured.
        raise NotConfigured(str(e))
    return {"clientSecret": secret}
