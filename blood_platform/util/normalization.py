from __future__ import annotations

from typing import Optional


BLOOD_GROUPS = ("A+", "A-", "B+", "B-", "AB+", "AB-", "O+", "O-")


def normalize_blood_group(value: Optional[str]) -> Optional[str]:
    """Canonicalize a blood group, or return None when blank.

    Query strings decode '+' as a space, so `?bloodGroup=A+` arrives as "A ".
    A trailing space is therefore read back as '+'. Unknown values raise ValueError.
    """
    if value is None:
        return None
    raw = value.upper()
    v = raw.strip()
    if not v:
        return None
    if v in BLOOD_GROUPS:
        return v
    if raw.endswith(" ") and f"{v}+" in BLOOD_GROUPS:
        return f"{v}+"
    raise ValueError("invalid_blood_group")
