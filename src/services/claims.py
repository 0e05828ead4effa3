"""Profile claims: a provider account takes ownership of a preloaded listing.

Ownership moves ``unclaimed -> pending-claim -> claimed``. Approval flips
``is_claimed``/``is_preloaded`` and sets the owner in a single provider update.
"""
import logging
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Sequence

from src.data.models import ProfileClaim, Provider, ReviewStatus, UserRole, is_claimable, utcnow
from src.services.admin_log import log_admin_action
from src.services.errors import DuplicateError, InvalidTransitionError, NotFoundError
from src.utils.validation import validate_document

logger = logging.getLogger(__name__)

MIN_REASON_LENGTH = 20
MAX_DOCUMENTS = 5


class ClaimState(str, Enum):
    UNCLAIMED = "unclaimed"
    PENDING = "pending-claim"
    CLAIMED = "claimed"


@dataclass
class ClaimDocument:
    filename: str
    data: bytes
    content_type: Optional[str] = None

    @property
    def size(self) -> int:
        return len(self.data)


def claim_state(provider: Provider, claims: Sequence[ProfileClaim]) -> ClaimState:
    """Ownership state of a listing given its claims."""
    if provider.is_claimed:
        return ClaimState.CLAIMED
    if any(c.status == ReviewStatus.PENDING.value for c in claims):
        return ClaimState.PENDING
    return ClaimState.UNCLAIMED


def validate_claim(reason: str, documents: Sequence[ClaimDocument]) -> List[str]:
    """Return every problem with a claim submission (empty when valid)."""
    errors = []
    if len((reason or "").strip()) < MIN_REASON_LENGTH:
        errors.append(f"Please explain your claim in at least {MIN_REASON_LENGTH} characters")
    if not documents:
        errors.append("At least one supporting document is required")
    elif len(documents) > MAX_DOCUMENTS:
        errors.append(f"No more than {MAX_DOCUMENTS} documents can be attached")
    for document in documents or []:
        ok, message = validate_document(document.filename, document.size, document.content_type)
        if not ok:
            errors.append(message)
    return errors


def submit_claim(ctx, provider_id: str, reason: str, documents: Sequence[ClaimDocument]) -> ProfileClaim:
    """Upload the proof documents and file a pending claim for ``provider_id``.

    Raises:
        AuthorizationError: if the user is not signed in with the provider role
        NotFoundError: if the listing does not exist
        InvalidTransitionError: if the listing is not claimable
        DuplicateError: if a claim for the listing is already pending
        ValueError: if the reason or documents are invalid
    """
    user = ctx.require_role(UserRole.PROVIDER)
    provider = ctx.backend.get_provider(provider_id)
    if provider is None:
        raise NotFoundError(f"Provider {provider_id} not found")
    if not is_claimable(provider):
        raise InvalidTransitionError("This profile has already been claimed or cannot be claimed")
    if ctx.backend.list_claims(provider_id=provider_id, status=ReviewStatus.PENDING.value):
        raise DuplicateError("A claim for this profile is already pending review")

    errors = validate_claim(reason, documents)
    if errors:
        raise ValueError("; ".join(errors))

    storage = ctx.require_storage()
    urls = [storage.upload(f"claims/{user.id}", d.filename, d.data, d.content_type) for d in documents]

    claim = ctx.backend.create_claim(
        ProfileClaim(
            id="",
            provider_id=provider_id,
            user_id=user.id,
            reason=reason.strip(),
            documentation=urls,
        )
    )
    logger.info(f"User {user.id} submitted claim {claim.id} for provider {provider_id}")
    return claim


def _pending_claim(ctx, claim_id: str) -> ProfileClaim:
    claim = ctx.backend.get_claim(claim_id)
    if claim is None:
        raise NotFoundError(f"Claim {claim_id} not found")
    if claim.status != ReviewStatus.PENDING.value:
        raise InvalidTransitionError(f"Claim {claim_id} has already been {claim.status}")
    return claim


def approve_claim(ctx, claim_id: str, notes: Optional[str] = None) -> ProfileClaim:
    """Approve a pending claim and hand the listing to the claimant."""
    admin = ctx.require_admin()
    claim = _pending_claim(ctx, claim_id)
    provider = ctx.backend.get_provider(claim.provider_id)
    if provider is None:
        raise NotFoundError(f"Provider {claim.provider_id} not found")
    if not is_claimable(provider):
        raise InvalidTransitionError("This profile has already been claimed")

    reviewed_at = utcnow()
    ctx.backend.update_claim(
        claim_id,
        status=ReviewStatus.APPROVED.value,
        reviewed_by=admin.id,
        reviewed_at=reviewed_at,
        notes=notes,
    )
    ctx.backend.update_provider(claim.provider_id, user_id=claim.user_id, is_claimed=True, is_preloaded=False)
    log_admin_action(
        ctx,
        "approve_claim",
        "profile_claim",
        claim_id,
        {"provider_id": claim.provider_id, "user_id": claim.user_id},
    )
    return ctx.backend.get_claim(claim_id)


def reject_claim(ctx, claim_id: str, reason: str) -> ProfileClaim:
    admin = ctx.require_admin()
    _pending_claim(ctx, claim_id)
    ctx.backend.update_claim(
        claim_id,
        status=ReviewStatus.REJECTED.value,
        reviewed_by=admin.id,
        reviewed_at=utcnow(),
        notes=reason,
    )
    log_admin_action(ctx, "reject_claim", "profile_claim", claim_id, {"reason": reason})
    return ctx.backend.get_claim(claim_id)


def pending_claims(ctx) -> List[ProfileClaim]:
    ctx.require_admin()
    return ctx.backend.list_claims(status=ReviewStatus.PENDING.value)
