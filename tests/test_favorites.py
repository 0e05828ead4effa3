"""Tests for saved providers."""
import pytest

from src.services.errors import AuthorizationError, DuplicateError, NotFoundError
from src.services.favorites import (
    add_favorite,
    favorite_providers,
    get_favorites,
    is_favorite,
    remove_favorite,
    toggle_favorite,
)


@pytest.fixture
def user_ctx(make_ctx):
    return make_ctx("patient-1")


@pytest.fixture
def providers(backend, make_provider):
    return [backend.create_provider(make_provider()) for _ in range(3)]


def test_add_and_list(user_ctx, providers):
    add_favorite(user_ctx, providers[0].id)
    add_favorite(user_ctx, providers[2].id)

    assert {f.provider_id for f in get_favorites(user_ctx)} == {providers[0].id, providers[2].id}
    assert is_favorite(user_ctx, providers[0].id) is True
    assert is_favorite(user_ctx, providers[1].id) is False


def test_duplicate_is_rejected(user_ctx, providers):
    add_favorite(user_ctx, providers[0].id)
    with pytest.raises(DuplicateError):
        add_favorite(user_ctx, providers[0].id)
    assert len(get_favorites(user_ctx)) == 1


def test_favorites_are_per_user(user_ctx, make_ctx, providers):
    add_favorite(user_ctx, providers[0].id)
    assert get_favorites(make_ctx("patient-2")) == []


def test_remove(user_ctx, providers):
    add_favorite(user_ctx, providers[0].id)

    remove_favorite(user_ctx, providers[0].id)
    remove_favorite(user_ctx, providers[0].id)

    assert get_favorites(user_ctx) == []


def test_toggle(user_ctx, providers):
    assert toggle_favorite(user_ctx, providers[1].id) is True
    assert toggle_favorite(user_ctx, providers[1].id) is False
    assert is_favorite(user_ctx, providers[1].id) is False


def test_unknown_provider(user_ctx):
    with pytest.raises(NotFoundError):
        add_favorite(user_ctx, "missing")


def test_anonymous_users(make_ctx, providers):
    anonymous = make_ctx(None)
    assert is_favorite(anonymous, providers[0].id) is False
    with pytest.raises(AuthorizationError, match="sign in"):
        add_favorite(anonymous, providers[0].id)
    with pytest.raises(AuthorizationError):
        get_favorites(anonymous)


def test_favorite_providers_skips_deleted_listings(user_ctx, backend, providers):
    add_favorite(user_ctx, providers[0].id)
    add_favorite(user_ctx, providers[1].id)
    backend.delete_provider(providers[0].id)

    assert [p.id for p in favorite_providers(user_ctx)] == [providers[1].id]
