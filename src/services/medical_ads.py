"""Medical announcements published by verified providers after admin review."""
import logging
from datetime import date
from typing import List, Optional, Sequence

from src.data.models import MISSING_CREATED_AT, MedicalAd, ReviewStatus, VerificationStatus
from src.services.admin_log import log_admin_action
from src.services.errors import AuthorizationError, InvalidTransitionError, NotFoundError

logger = logging.getLogger(__name__)


def validate_ad(title: str, content: str, start_date: date, end_date: Optional[date]) -> List[str]:
    errors = []
    if not (title or "").strip():
        errors.append("Title is required")
    if not (content or "").strip():
        errors.append("Content is required")
    if start_date is None:
        errors.append("Start date is required")
    elif end_date is not None and end_date <= start_date:
        errors.append("End date must be after the start date")
    return errors


def create_medical_ad(
    ctx,
    provider_id: str,
    title: str,
    content: str,
    start_date: date,
    end_date: Optional[date] = None,
    image_url: Optional[str] = None,
) -> MedicalAd:
    """Submit an ad for review. Only the owner of a verified listing may do this.

    Raises:
        AuthorizationError: if the user does not own the listing or it is not verified
        NotFoundError: if the provider does not exist
        ValueError: on missing fields or an end date not after the start date
    """
    user = ctx.require_user()
    provider = ctx.backend.get_provider(provider_id)
    if provider is None:
        raise NotFoundError(f"Provider {provider_id} not found")
    if provider.user_id != user.id and not ctx.is_admin:
        raise AuthorizationError("You can only publish announcements for your own profile")
    if provider.verification_status != VerificationStatus.VERIFIED.value:
        raise AuthorizationError("Only verified providers can publish medical announcements")

    errors = validate_ad(title, content, start_date, end_date)
    if errors:
        raise ValueError("; ".join(errors))

    ad = ctx.backend.create_medical_ad(
        MedicalAd(
            id="",
            provider_id=provider_id,
            title=title.strip(),
            content=content.strip(),
            start_date=start_date,
            end_date=end_date,
            image_url=image_url or None,
            status=ReviewStatus.PENDING.value,
            display_priority=0,
        )
    )
    logger.info(f"Medical ad {ad.id} submitted by provider {provider_id}")
    return ad


def _review(ctx, ad_id: str, status: str, display_priority: Optional[int] = None) -> MedicalAd:
    ctx.require_admin()
    ad = ctx.backend.get_medical_ad(ad_id)
    if ad is None:
        raise NotFoundError(f"Medical ad {ad_id} not found")
    if ad.status != ReviewStatus.PENDING.value:
        raise InvalidTransitionError(f"Medical ad {ad_id} has already been {ad.status}")
    changes = {"status": status}
    if display_priority is not None:
        changes["display_priority"] = int(display_priority)
    ctx.backend.update_medical_ad(ad_id, **changes)
    log_admin_action(ctx, f"{'approve' if status == 'approved' else 'reject'}_ad", "medical_ad", ad_id, changes)
    return ctx.backend.get_medical_ad(ad_id)


def approve_medical_ad(ctx, ad_id: str, display_priority: Optional[int] = None) -> MedicalAd:
    return _review(ctx, ad_id, ReviewStatus.APPROVED.value, display_priority)


def reject_medical_ad(ctx, ad_id: str) -> MedicalAd:
    return _review(ctx, ad_id, ReviewStatus.REJECTED.value)


def delete_medical_ad(ctx, ad_id: str) -> None:
    ctx.require_admin()
    if ctx.backend.get_medical_ad(ad_id) is None:
        raise NotFoundError(f"Medical ad {ad_id} not found")
    ctx.backend.delete_medical_ad(ad_id)
    log_admin_action(ctx, "delete_ad", "medical_ad", ad_id)


def active_ads(ads: Sequence[MedicalAd], today: Optional[date] = None) -> List[MedicalAd]:
    """Approved, unexpired ads: highest priority first, then newest."""
    today = today or date.today()
    live = [
        ad
        for ad in ads
        if ad.status == ReviewStatus.APPROVED.value
        and (ad.start_date is None or ad.start_date <= today)
        and (ad.end_date is None or ad.end_date >= today)
    ]
    live.sort(key=lambda ad: ad.created_at or MISSING_CREATED_AT, reverse=True)
    live.sort(key=lambda ad: ad.display_priority, reverse=True)
    return live


def carousel_ads(ctx, today: Optional[date] = None, limit: int = 5) -> List[MedicalAd]:
    return active_ads(ctx.backend.list_medical_ads(status=ReviewStatus.APPROVED.value), today)[:limit]
