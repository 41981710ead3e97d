from datetime import datetime

import pytest

from app.core.exceptions import (
    InvalidArgument,
    PermissionDenied,
    PostAlreadyPublished,
    PostNotFound,
)
from app.schemas.comment import CommentCreate
from app.schemas.post import PostCreate, PostUpdate
from app.service import admin_post_svc, comment_svc, post_svc


def test_create_defaults_to_draft_without_published_at(alice, post_repo):
    post = post_svc.create_post(post_repo, alice, PostCreate(title="Draft", content="body"), to_dict=False)
    assert post.status == "DRAFT"
    assert post.published_at is None
    assert post.view_count == 0
    assert post.comment_count == 0
    assert post.slug.startswith("draft-")


def test_create_published_sets_published_at(alice, make_post):
    post = make_post(alice)
    assert post.status == "PUBLISHED"
    assert post.published_at is not None


def test_create_rejects_unknown_category_and_status(alice, post_repo):
    with pytest.raises(InvalidArgument):
        post_svc.create_post(post_repo, alice, PostCreate(title="t", content="c", category="nope"))
    with pytest.raises(InvalidArgument):
        post_svc.create_post(post_repo, alice, PostCreate(title="t", content="c", status="LIVE"))


def test_publish_twice_is_conflict(alice, make_post, post_repo):
    draft = make_post(alice, status="DRAFT")
    published = post_svc.publish_post(post_repo, alice, draft.pid, to_dict=False)
    assert published.published_at is not None

    with pytest.raises(PostAlreadyPublished):
        post_svc.publish_post(post_repo, alice, draft.pid)


def test_published_at_kept_on_hide_and_refreshed_on_republish(alice, admin, make_post, post_repo):
    post = make_post(alice)
    first_published = post.published_at

    hidden = admin_post_svc.update_post_status(post_repo, admin, post.pid, "HIDDEN", to_dict=False)
    assert hidden.status == "HIDDEN"
    assert hidden.published_at == first_published

    old = datetime(2020, 1, 1, 8, 0, 0)
    post_repo.update_post(post.pid, {"published_at": old})

    republished = admin_post_svc.update_post_status(post_repo, admin, post.pid, "PUBLISHED", to_dict=False)
    assert republished.published_at.replace(tzinfo=None) > old


def test_setting_published_again_does_not_touch_published_at(alice, admin, make_post, post_repo):
    post = make_post(alice)
    old = datetime(2020, 1, 1, 8, 0, 0)
    post_repo.update_post(post.pid, {"published_at": old})

    again = admin_post_svc.update_post_status(post_repo, admin, post.pid, "PUBLISHED", to_dict=False)
    assert again.published_at.replace(tzinfo=None) == old


def test_slug_view_counts_only_published(alice, make_post, post_repo, stats_repo):
    published = make_post(alice, title="Seen")
    draft = make_post(alice, title="Unseen", status="DRAFT")

    first = post_svc.get_post_by_slug(post_repo, stats_repo, published.slug, to_dict=False)
    second = post_svc.get_post_by_slug(post_repo, stats_repo, published.slug, to_dict=False)
    assert first.view_count == 1
    assert second.view_count == 2

    unseen = post_svc.get_post_by_slug(post_repo, stats_repo, draft.slug, to_dict=False)
    assert unseen.status == "DRAFT"
    assert unseen.view_count == 0
    assert stats_repo.get_by_post_id(draft.pid).view_count == 0


def test_unknown_slug_is_not_found(post_repo, stats_repo):
    with pytest.raises(PostNotFound) as exc:
        post_svc.get_post_by_slug(post_repo, stats_repo, "missing-slug")
    assert "slug" in exc.value.message


def test_update_is_owner_only_and_regenerates_slug(alice, bob, make_post, post_repo):
    post = make_post(alice, title="Old Title")

    with pytest.raises(PermissionDenied):
        post_svc.update_post(post_repo, bob, post.pid, PostUpdate(content="hijack"))

    updated = post_svc.update_post(post_repo, alice, post.pid, PostUpdate(title="New Title"), to_dict=False)
    assert updated.title == "New Title"
    assert updated.content == post.content
    assert updated.slug.startswith("new-title-")
    assert updated.slug != post.slug


def test_feed_contains_only_published_with_summary(alice, make_post, post_repo):
    make_post(alice, title="Draft", status="DRAFT")
    long_post = make_post(alice, title="Long", content="x" * 200)

    feed = post_svc.get_feed(post_repo, to_dict=False)
    assert feed.total_elements == 1
    item = feed.content[0]
    assert item.pid == long_post.pid
    assert item.summary == "x" * 150 + "..."


def test_feed_page_past_the_end_is_empty(alice, make_post, post_repo):
    for title in ("one", "two", "three"):
        make_post(alice, title=title)

    feed = post_svc.get_feed(post_repo, page=7, page_size=2, to_dict=False)
    assert feed.content == []
    assert feed.page == 7
    assert feed.total_elements == 3
    assert feed.total_pages == 2
    assert feed.last is True
    assert feed.has_next is False
    assert feed.has_previous is True


def test_feed_rejects_unknown_sort(post_repo):
    with pytest.raises(InvalidArgument):
        post_svc.get_feed(post_repo, sort="author_id")


def test_feed_sort_by_view_count(alice, make_post, post_repo, stats_repo):
    quiet = make_post(alice, title="Quiet")
    popular = make_post(alice, title="Popular")
    stats_repo.update_views(popular.pid, step=5)
    stats_repo.update_views(quiet.pid, step=1)

    desc = post_svc.get_feed(post_repo, sort="view_count", direction="DESC", to_dict=False)
    assert [p.pid for p in desc.content] == [popular.pid, quiet.pid]

    asc = post_svc.get_feed(post_repo, sort="view_count", direction="asc", to_dict=False)
    assert [p.pid for p in asc.content] == [quiet.pid, popular.pid]


def test_search_requires_keyword_and_matches_content(alice, make_post, post_repo):
    make_post(alice, title="Library hours", content="open till ten")
    make_post(alice, title="Cafeteria", content="new menu")

    with pytest.raises(InvalidArgument):
        post_svc.search_posts(post_repo, "   ")

    result = post_svc.search_posts(post_repo, "menu", to_dict=False)
    assert [p.title for p in result.content] == ["Cafeteria"]


def test_top_posts_limit_is_clamped(alice, admin, make_post, post_repo):
    for i in range(3):
        post = make_post(alice, title=f"Top {i}")
        admin_post_svc.set_top(post_repo, admin, post.pid, True)

    assert len(post_svc.get_top_posts(post_repo, limit=0)) == 1
    assert len(post_svc.get_top_posts(post_repo)) == 3
    assert post_svc.get_recommended_posts(post_repo) == []


def test_delete_post_soft_deletes_comments(alice, bob, make_post, uow, user_repo, post_repo, comment_repo, stats_repo):
    post = make_post(alice)
    comment = comment_svc.create_comment(
        uow, user_repo, post_repo, comment_repo, stats_repo, bob,
        CommentCreate(post_id=post.pid, content="nice"), to_dict=False,
    )

    with pytest.raises(PermissionDenied):
        post_svc.delete_post(uow, post_repo, comment_repo, bob, post.pid)

    assert post_svc.delete_post(uow, post_repo, comment_repo, alice, post.pid) is True
    assert post_repo.get_post_by_pid(post.pid) is None
    assert stats_repo.get_by_post_id(post.pid) is None

    kept = comment_repo.get_comment_by_cid_for_admin(comment.cid)
    assert kept.is_deleted is True
    assert kept.delete_reason == post_svc.POST_DELETED_REASON
    assert kept.deleted_by == alice.uid
