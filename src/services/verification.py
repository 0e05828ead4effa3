"""Provider verification (the trust badge).

A provider submits proof documents in a verification request; an admin
reviews it, and the provider's ``verification_status`` follows the decision.
"""
import logging
from typing import List, Optional, Sequence

from src.data.models import MISSING_CREATED_AT, VerificationRequest, VerificationStatus, utcnow
from src.services.admin_log import log_admin_action
from src.services.errors import AuthorizationError, InvalidTransitionError, NotFoundError

logger = logging.getLogger(__name__)

REVIEW_DECISIONS = (VerificationStatus.VERIFIED.value, VerificationStatus.REJECTED.value)


def is_missing_created_at(request: VerificationRequest) -> bool:
    """True for legacy requests stored without a creation time."""
    return request.created_at is None or request.created_at == MISSING_CREATED_AT


def create_verification_request(
    ctx, provider_id: str, document_urls: Sequence[str], document_type: str = "license"
) -> VerificationRequest:
    """File a pending verification request for a provider the user owns (or any, for admins)."""
    user = ctx.require_user()
    provider = ctx.backend.get_provider(provider_id)
    if provider is None:
        raise NotFoundError(f"Provider {provider_id} not found")
    if provider.user_id != user.id and not ctx.is_admin:
        raise AuthorizationError("You can only request verification for your own profile")

    request = ctx.backend.create_verification_request(
        VerificationRequest(
            id="",
            provider_id=provider_id,
            user_id=user.id,
            document_type=document_type or "license",
            document_urls=list(document_urls),
        )
    )
    logger.info(f"Verification request {request.id} created for provider {provider_id}")
    return request


def latest_verification(ctx, provider_id: str) -> Optional[VerificationRequest]:
    requests = ctx.backend.list_verification_requests(provider_id=provider_id)
    return requests[0] if requests else None


def get_verification_status(ctx, provider_id: str) -> Optional[str]:
    """Status of the provider's most recent request, or None if it never applied."""
    request = latest_verification(ctx, provider_id)
    return request.status if request else None


def verification_history(ctx, provider_id: str) -> List[VerificationRequest]:
    return ctx.backend.list_verification_requests(provider_id=provider_id)


def pending_verifications(ctx) -> List[VerificationRequest]:
    ctx.require_admin()
    return ctx.backend.list_verification_requests(status=VerificationStatus.PENDING.value)


def review_verification(
    ctx, request_id: str, status: str, rejection_reason: Optional[str] = None
) -> VerificationRequest:
    """Accept or reject a pending request.

    The rejection reason is stored only for rejections and cleared otherwise.
    The provider's ``verification_status`` is set to the same decision.

    Raises:
        AuthorizationError: if the user is not an admin
        NotFoundError: if the request does not exist
        InvalidTransitionError: if the request was already reviewed
        ValueError: if ``status`` is not 'verified' or 'rejected'
    """
    admin = ctx.require_admin()
    status = status.value if isinstance(status, VerificationStatus) else status
    if status not in REVIEW_DECISIONS:
        raise ValueError(f"Invalid review decision: {status}")

    request = ctx.backend.get_verification_request(request_id)
    if request is None:
        raise NotFoundError(f"Verification request {request_id} not found")
    if request.status != VerificationStatus.PENDING.value:
        raise InvalidTransitionError(f"Verification request {request_id} has already been {request.status}")

    reason = rejection_reason if status == VerificationStatus.REJECTED.value else None
    ctx.backend.update_verification_request(
        request_id,
        status=status,
        reviewed_at=utcnow(),
        reviewed_by=admin.id,
        rejection_reason=reason,
    )
    ctx.backend.update_provider(request.provider_id, verification_status=status)
    log_admin_action(
        ctx,
        "approve_verification" if status == VerificationStatus.VERIFIED.value else "reject_verification",
        "verification",
        request_id,
        {"provider_id": request.provider_id, "status": status, "rejection_reason": reason},
    )
    return ctx.backend.get_verification_request(request_id)
