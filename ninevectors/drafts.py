"""Assessment drafts, as recorded locally by "Launch assessment".

A draft is written to the ``assessments`` key before any invitation goes
out.  Launching requires a name, a company and at least one participant
with an email address.
"""

from __future__ import annotations

import logging
import secrets
from datetime import datetime, timezone

from pydantic import BaseModel, Field, ValidationError

from ninevectors.store import KEY_ASSESSMENTS, KeyValueStore

logger = logging.getLogger(__name__)

PARTICIPANT_ROLES = (
    "CEO / Executive",
    "Board Member",
    "Senior Leadership",
    "Manager",
    "Employee",
    "Customer",
    "Partner",
    "Consultant/Advisor",
    "Investor",
    "Other",
)

DEFAULT_ROLE = "Employee"


class DraftValidationError(ValueError):
    """Raised when a draft is missing fields required to launch it."""

    def __init__(self, missing: list[str]) -> None:
        self.missing = missing
        super().__init__(f"Cannot launch assessment, missing: {', '.join(missing)}")


class Participant(BaseModel):
    name: str = ""
    email: str = ""
    role: str = DEFAULT_ROLE


class AssessmentDraft(BaseModel):
    id: str
    name: str
    company: str
    description: str = ""
    participants: list[Participant] = Field(default_factory=list)
    created_at: str
    status: str = "active"


def _now_iso() -> str:
    return datetime.now(tz=timezone.utc).isoformat()


def _new_id() -> str:
    return secrets.token_hex(6)


def missing_fields(name: str, company: str, participants: list[Participant]) -> list[str]:
    """List the launch requirements that are not met (empty when ready)."""
    missing: list[str] = []
    if not name.strip():
        missing.append("name")
    if not company.strip():
        missing.append("company")
    if not any(p.email.strip() for p in participants):
        missing.append("participant email")
    return missing


def load_drafts(store: KeyValueStore) -> list[AssessmentDraft]:
    """Return stored drafts in launch order, skipping entries that fail to parse."""
    raw = store.get(KEY_ASSESSMENTS) or []
    drafts: list[AssessmentDraft] = []
    for item in raw:
        try:
            drafts.append(AssessmentDraft.model_validate(item))
        except ValidationError as exc:
            logger.warning("Skipping invalid assessment draft: %s", exc)
    return drafts


def launch_assessment(
    store: KeyValueStore,
    *,
    name: str,
    company: str,
    participants: list[Participant],
    description: str = "",
) -> AssessmentDraft:
    """Validate and append a new draft to the store.

    Raises:
        DraftValidationError: if a required field is missing.
    """
    missing = missing_fields(name, company, participants)
    if missing:
        raise DraftValidationError(missing)

    draft = AssessmentDraft(
        id=_new_id(),
        name=name.strip(),
        company=company.strip(),
        description=description,
        participants=participants,
        created_at=_now_iso(),
    )
    stored = store.get(KEY_ASSESSMENTS) or []
    stored.append(draft.model_dump(mode="json"))
    store.set(KEY_ASSESSMENTS, stored)
    logger.info("Launched assessment %s (%d participants)", draft.id, len(participants))
    return draft
