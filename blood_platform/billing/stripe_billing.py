from __future__ import annotations

from typing import Any, Dict

from blood_platform.config import Config


def _get_stripe(cfg: Config):
    try:
        import stripe  # type: ignore
    except ImportError as e:
        raise RuntimeError(
            "Stripe selected but the 'stripe' package is not installed. Install stripe and try again."
        ) from e

    if not cfg.STRIPE_SECRET_KEY:
        raise RuntimeError("stripe_secret_key_missing")

    stripe.api_key = cfg.STRIPE_SECRET_KEY
    return stripe


def to_minor_units(amount: float) -> int:
    """Stripe wants integer cents."""
    return int(round(float(amount) * 100))


def create_payment_intent(cfg: Config, *, amount: float, user_id: int, email: str | None = None) -> str:
    """Create a card PaymentIntent for a fund contribution and return its client secret.

    The fund itself is recorded separately (POST /api/funds) once the client confirms
    the payment, carrying the intent id as transactionId.
    """
    cents = to_minor_units(amount)
    if cents <= 0:
        raise ValueError("amount_must_be_positive")

    stripe = _get_stripe(cfg)
    params: Dict[str, Any] = {
        "amount": cents,
        "currency": cfg.STRIPE_CURRENCY,
        "payment_method_types": ["card"],
        "metadata": {"user_id": str(user_id)},
    }
    if email:
        params["receipt_email"] = email

    intent = stripe.PaymentIntent.create(**params)
    secret = intent.get("client_secret")
    if not secret:
        raise RuntimeError("stripe_client_secret_missing")
    return str(secret)
