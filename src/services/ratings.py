"""Star ratings left by signed-in users."""
import logging
from typing import List, Optional

from src.data.models import Rating
from src.services.errors import NotFoundError

logger = logging.getLogger(__name__)

MIN_STARS = 1
MAX_STARS = 5


def add_rating(ctx, provider_id: str, stars: int, comment: Optional[str] = None) -> Rating:
    """Rate a provider and refresh its average.

    Raises:
        AuthorizationError: if nobody is signed in
        NotFoundError: if the provider does not exist
        ValueError: if ``stars`` is not a whole number from 1 to 5
    """
    user = ctx.require_user("Please sign in to leave a review")
    if isinstance(stars, bool) or not isinstance(stars, int) or not MIN_STARS <= stars <= MAX_STARS:
        raise ValueError(f"Rating must be between {MIN_STARS} and {MAX_STARS} stars")
    if ctx.backend.get_provider(provider_id) is None:
        raise NotFoundError(f"Provider {provider_id} not found")

    rating = ctx.backend.add_rating(
        Rating(id="", provider_id=provider_id, user_id=user.id, rating=stars, comment=(comment or "").strip() or None)
    )
    logger.info(f"User {user.id} rated provider {provider_id} {stars}/{MAX_STARS}")
    return rating


def recent_ratings(ctx, provider_id: str, limit: int = 10) -> List[Rating]:
    return ctx.backend.list_ratings(provider_id)[:limit]
