import re

import pytest

from app.core.exceptions import InvalidArgument
from app.core.slug import (
    DEFAULT_SLUG,
    MAX_SLUG_LENGTH,
    clean_slug,
    generate_slug,
    generate_slug_with_random,
    generate_unique_slug,
    is_valid_slug,
)
from app.models.post import PostCategory, PostStatus
from app.models.user import UserRole


# ------------------------------ slug ------------------------------

@pytest.mark.parametrize(
    "title, expected",
    [
        ("Hello World", "hello-world"),
        ("  Hello_World  ", "hello-world"),
        ("Résumé Tips!", "resume-tips"),
        ("a -- b", "a-b"),
        ("你好 World", "nihao-world"),
        ("!!!", DEFAULT_SLUG),
        ("", DEFAULT_SLUG),
        (None, DEFAULT_SLUG),
    ],
)
def test_generate_slug(title, expected):
    assert generate_slug(title) == expected


def test_generate_slug_is_deterministic():
    assert generate_slug("Campus News 2024") == generate_slug("Campus News 2024")


def test_long_title_is_truncated():
    slug = generate_slug("word " * 60)
    assert len(slug) <= MAX_SLUG_LENGTH
    assert not slug.endswith("-")
    assert is_valid_slug(slug)


def test_unique_slugs_never_collide_and_fit_length():
    title = "x" * 200
    slugs = {generate_unique_slug(title) for _ in range(50)}
    assert len(slugs) == 50
    assert all(len(s) <= MAX_SLUG_LENGTH for s in slugs)
    assert all(re.fullmatch(r"x+-\d+", s) for s in slugs)


def test_random_suffix_has_four_digits():
    slug = generate_slug_with_random("Lost Keys")
    assert re.fullmatch(r"lost-keys-\d{4}", slug)


def test_clean_slug_normalizes_legacy_values():
    assert clean_slug("Old_Slug--With  Spaces") == "old-slug-with-spaces"
    assert clean_slug("-already-clean-") == "already-clean"
    assert clean_slug(None) == DEFAULT_SLUG


@pytest.mark.parametrize(
    "slug, valid",
    [
        ("hello-world", True),
        ("abc123", True),
        ("-hello", False),
        ("hello-", False),
        ("hello--world", False),
        ("Hello", False),
        ("", False),
        (None, False),
        ("a" * (MAX_SLUG_LENGTH + 1), False),
    ],
)
def test_is_valid_slug(slug, valid):
    assert is_valid_slug(slug) is valid


# ------------------------------ 枚举 ------------------------------

def test_post_status_lookup_is_exact():
    assert PostStatus.from_code("PUBLISHED") is PostStatus.PUBLISHED
    assert PostStatus.from_code("published") is None
    assert PostStatus.from_code(None) is None
    assert PostStatus.DRAFT.display_name == "草稿"


def test_category_lookup_by_code_and_display_name():
    assert PostCategory.from_code("campus_life") is PostCategory.CAMPUS_LIFE
    assert PostCategory.from_code("CAMPUS_LIFE") is None
    assert PostCategory.from_display_name("失物招领") is PostCategory.LOST_FOUND
    assert PostCategory.is_valid("二手交易")
    assert PostCategory.is_valid("secondhand")
    assert not PostCategory.is_valid("nope")
    assert len(list(PostCategory)) == 20


def test_user_role_lookup_ignores_case_and_rejects_unknown():
    assert UserRole.from_code("admin") is UserRole.ADMIN
    assert UserRole.from_code(" Moderator ") is UserRole.MODERATOR
    with pytest.raises(InvalidArgument):
        UserRole.from_code("superuser")
    with pytest.raises(InvalidArgument):
        UserRole.from_code(None)


def test_user_role_predicates():
    assert UserRole.ADMIN.is_admin()
    assert UserRole.ADMIN.is_moderator()
    assert UserRole.MODERATOR.is_moderator()
    assert not UserRole.MODERATOR.is_admin()
    assert UserRole.USER.is_user()
    assert UserRole.GUEST.display_name == "游客"
