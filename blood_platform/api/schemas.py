"""Request bodies.

Every model forbids unknown keys, so typos and stray fields (e.g. `role` on a
profile update) are rejected with 400 before any handler logic runs.
JSON uses camelCase; Python attributes are snake_case.
"""

from __future__ import annotations

from datetime import date
from typing import Annotated, Optional

from pydantic import AfterValidator, BaseModel, ConfigDict, EmailStr, Field

from blood_platform.util.normalization import normalize_blood_group


def _lower_email(v: str) -> str:
    return v.strip().lower()


def _check_blood_group(v: Optional[str]) -> Optional[str]:
    try:
        return normalize_blood_group(v)
    except ValueError:
        raise ValueError("invalid blood group")


def _require_blood_group(v: str) -> str:
    bg = _check_blood_group(v)
    if bg is None:
        raise ValueError("blood group is required")
    return bg


Email = Annotated[EmailStr, AfterValidator(_lower_email)]
BloodGroup = Annotated[str, AfterValidator(_require_blood_group)]
OptBloodGroup = Annotated[Optional[str], AfterValidator(_check_blood_group)]


class ApiModel(BaseModel):
    model_config = ConfigDict(extra="forbid", populate_by_name=True, str_strip_whitespace=True)


class CredentialsModel(BaseModel):
    # Passwords are taken verbatim; the other string fields are trimmed by the store layer.
    model_config = ConfigDict(extra="forbid", populate_by_name=True)


# -----------------------------
# Auth
# -----------------------------


class RegisterRequest(CredentialsModel):
    name: str = Field("", max_length=120)
    email: Email
    password: str = Field(..., min_length=1, max_length=256)
    avatar: str = Field("", max_length=2048)
    blood_group: OptBloodGroup = Field(None, alias="bloodGroup")
    district: str = Field("", max_length=120)
    sub_district: str = Field("", alias="subDistrict", max_length=120)


class LoginRequest(CredentialsModel):
    # Not validated as an address: an unknown or malformed email is just bad credentials.
    email: str
    password: str


class FederatedLoginRequest(ApiModel):
    email: Email
    display_name: str = Field("", alias="displayName", max_length=120)
    external_id: str = Field(..., alias="externalId", min_length=1)
    photo_url: str = Field("", alias="photoURL", max_length=2048)
    id_token: Optional[str] = Field(None, alias="idToken")


# -----------------------------
# Users
# -----------------------------


class ProfileUpdateRequest(ApiModel):
    name: Optional[str] = Field(None, min_length=1, max_length=120)
    avatar: Optional[str] = Field(None, max_length=2048)
    blood_group: OptBloodGroup = Field(None, alias="bloodGroup")
    district: Optional[str] = Field(None, max_length=120)
    sub_district: Optional[str] = Field(None, alias="subDistrict", max_length=120)


class StatusUpdateRequest(ApiModel):
    status: str = Field(..., pattern=r"^(active|blocked)$")


class RoleUpdateRequest(ApiModel):
    role: str = Field(..., pattern=r"^(donor|volunteer|admin)$")


# -----------------------------
# Donation requests
# -----------------------------


class DonationRequestCreate(ApiModel):
    recipient_name: str = Field(..., alias="recipientName", min_length=1, max_length=120)
    recipient_district: str = Field("", alias="recipientDistrict", max_length=120)
    recipient_sub_district: str = Field("", alias="recipientSubDistrict", max_length=120)
    hospital_name: str = Field("", alias="hospitalName", max_length=200)
    full_address: str = Field("", alias="fullAddress", max_length=500)
    blood_group: BloodGroup = Field(..., alias="bloodGroup")
    donation_date: date = Field(..., alias="donationDate")
    donation_time: str = Field("", alias="donationTime", max_length=20)
    request_message: str = Field("", alias="requestMessage", max_length=2000)


class DonationRequestUpdate(ApiModel):
    recipient_name: Optional[str] = Field(None, alias="recipientName", min_length=1, max_length=120)
    recipient_district: Optional[str] = Field(None, alias="recipientDistrict", max_length=120)
    recipient_sub_district: Optional[str] = Field(None, alias="recipientSubDistrict", max_length=120)
    hospital_name: Optional[str] = Field(None, alias="hospitalName", max_length=200)
    full_address: Optional[str] = Field(None, alias="fullAddress", max_length=500)
    blood_group: OptBloodGroup = Field(None, alias="bloodGroup")
    donation_date: Optional[date] = Field(None, alias="donationDate")
    donation_time: Optional[str] = Field(None, alias="donationTime", max_length=20)
    request_message: Optional[str] = Field(None, alias="requestMessage", max_length=2000)
    status: Optional[str] = Field(None, pattern=r"^(pending|inprogress|done|canceled)$")


# -----------------------------
# Funds
# -----------------------------


class FundCreate(ApiModel):
    amount: float = Field(..., gt=0, le=1_000_000)
    transaction_id: Optional[str] = Field(None, alias="transactionId", max_length=200)


class PaymentIntentRequest(ApiModel):
    amount: float = Field(..., gt=0, le=1_000_000)
