"""Saved providers for signed-in users."""
import logging
from typing import List

from src.data.models import Favorite
from src.services.errors import NotFoundError

logger = logging.getLogger(__name__)

SIGN_IN_MESSAGE = "Please sign in to save favorites"


def add_favorite(ctx, provider_id: str) -> Favorite:
    """Raises DuplicateError when the provider is already saved."""
    user = ctx.require_user(SIGN_IN_MESSAGE)
    if ctx.backend.get_provider(provider_id) is None:
        raise NotFoundError(f"Provider {provider_id} not found")
    return ctx.backend.add_favorite(Favorite(id="", user_id=user.id, provider_id=provider_id))


def remove_favorite(ctx, provider_id: str) -> None:
    user = ctx.require_user(SIGN_IN_MESSAGE)
    ctx.backend.remove_favorite(user.id, provider_id)


def get_favorites(ctx) -> List[Favorite]:
    user = ctx.require_user(SIGN_IN_MESSAGE)
    return ctx.backend.list_favorites(user.id)


def is_favorite(ctx, provider_id: str) -> bool:
    if ctx.user is None:
        return False
    return ctx.backend.get_favorite(ctx.user.id, provider_id) is not None


def toggle_favorite(ctx, provider_id: str) -> bool:
    """Add or remove the provider; returns True when it is now a favorite."""
    if is_favorite(ctx, provider_id):
        remove_favorite(ctx, provider_id)
        return False
    add_favorite(ctx, provider_id)
    return True


def favorite_providers(ctx):
    """Providers behind the user's favorites, newest favorite first (deleted providers skipped)."""
    providers = []
    for favorite in get_favorites(ctx):
        provider = ctx.backend.get_provider(favorite.provider_id)
        if provider is not None:
            providers.append(provider)
    logger.debug(f"Loaded {len(providers)} favorite providers")
    return providers
