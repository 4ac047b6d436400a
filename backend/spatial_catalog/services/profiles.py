from __future__ import annotations

import os
import re
from typing import Optional

from sqlalchemy.orm import Session

from .. import models

# purpose: contributor profile upserts, ORCID formatting and public contact projection
# status: active

ORCID_PATTERN = re.compile(r"^(\d{4}-){3}\d{3}[\dX]$")
ORCID_URL = "https://orcid.org/{orcid}"


class ProfileValidationError(ValueError):
    pass


def normalize_orcid(value: Optional[str]) -> str:
    """Keep digits, X and hyphens and regroup them in blocks of four."""

    raw = re.sub(r"[^0-9Xx-]", "", (value or "").strip()).upper()
    digits = raw.replace("-", "")[:16]
    groups = [digits[i:i + 4] for i in range(0, len(digits), 4)]
    return "-".join(groups)


def is_valid_orcid(value: Optional[str]) -> bool:
    return bool(ORCID_PATTERN.match((value or "").strip()))


def orcid_url(orcid: Optional[str]) -> Optional[str]:
    if orcid and is_valid_orcid(orcid):
        return ORCID_URL.format(orcid=orcid.strip())
    return None


def get_profile(db: Session, user_id) -> Optional[models.Profile]:
    return db.get(models.Profile, user_id)


def profile_payload(user_id, profile: Optional[models.Profile]) -> dict:
    """Owner's own view; a missing row reads as the defaults."""

    if profile is None:
        return {"user_id": user_id, "contact_via_orcid": True, "contact_via_email": False}
    return {
        "user_id": profile.user_id,
        "display_name": profile.display_name,
        "affiliation": profile.affiliation,
        "orcid": profile.orcid,
        "orcid_url": orcid_url(profile.orcid),
        "contact_email": profile.contact_email,
        "contact_via_orcid": profile.contact_via_orcid,
        "contact_via_email": profile.contact_via_email,
    }


def upsert_profile(db: Session, user: models.User, data) -> models.Profile:
    orcid = (data.orcid or "").strip()
    if orcid and not is_valid_orcid(orcid):
        raise ProfileValidationError(
            "ORCID must be in the format 0000-0000-0000-0000 (last character can be X)."
        )
    profile = db.get(models.Profile, user.id)
    if profile is None:
        profile = models.Profile(user_id=user.id)
    profile.display_name = (data.display_name or "").strip() or None
    profile.affiliation = (data.affiliation or "").strip() or None
    profile.orcid = orcid or None
    profile.contact_email = (data.contact_email or "").strip() or None
    profile.contact_via_orcid = bool(data.contact_via_orcid)
    profile.contact_via_email = bool(data.contact_via_email)
    db.add(profile)
    db.commit()
    db.refresh(profile)
    return profile


def contributor_card(
    owner_id, profile: Optional[models.Profile], viewer: Optional[models.User]
) -> dict:
    """Public attribution for an entry's owner.

    The ORCID iD is only shown when the contributor allows contact via ORCID.
    The email is only exposed to signed-in viewers, and only when the
    contributor opted in and left a non-empty address.
    """

    orcid = ""
    if profile is not None and profile.contact_via_orcid:
        orcid = (profile.orcid or "").strip()
    display_name = (profile.display_name or "").strip() if profile else ""
    if display_name:
        name = display_name
    elif orcid:
        name = f"ORCID {orcid}"
    else:
        name = "Contributor"

    email = None
    if (
        profile is not None
        and viewer is not None
        and profile.contact_via_email
        and (profile.contact_email or "").strip()
    ):
        email = profile.contact_email.strip()

    return {
        "user_id": owner_id,
        "name": name,
        "orcid": orcid or None,
        "orcid_url": orcid_url(orcid),
        "email": email,
    }


def orcid_required() -> bool:
    return os.getenv("CATALOG_REQUIRE_ORCID") == "1"


def submit_eligibility(db: Session, user: models.User) -> tuple[bool, Optional[str]]:
    """Whether the contributor may submit entries under the ORCID policy."""

    if not orcid_required():
        return True, None
    profile = get_profile(db, user.id)
    if profile is None or not is_valid_orcid(profile.orcid):
        return False, "Add your ORCID iD to your profile before submitting entries."
    return True, None
