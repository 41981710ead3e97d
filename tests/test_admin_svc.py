import pytest
from sqlalchemy.exc import OperationalError

from app.core.exceptions import InvalidArgument, PermissionDenied, PostNotFound, UserNotFound
from app.models.user import UserRole
from app.service import admin_post_svc, admin_user_svc


class FlakyRepo:
    """包一层真实仓库，对指定 id 的写操作抛数据库异常"""

    def __init__(self, repo, method, bad_id):
        self._repo = repo
        self._method = method
        self._bad_id = bad_id

    def __getattr__(self, name):
        attr = getattr(self._repo, name)
        if name != self._method:
            return attr

        def wrapper(key, *args, **kwargs):
            if key == self._bad_id:
                raise OperationalError("UPDATE", {}, Exception("lock wait timeout"))
            return attr(key, *args, **kwargs)
        return wrapper


# ------------------------------ 帖子 ------------------------------

def test_batch_status_skips_missing_posts(alice, admin, make_post, uow, post_repo):
    first = make_post(alice, title="One", status="DRAFT")
    second = make_post(alice, title="Two", status="DRAFT")

    result = admin_post_svc.batch_update_post_status(
        uow, post_repo, admin, [first.pid, "missing-pid", second.pid], "PUBLISHED", to_dict=False,
    )
    assert result.total == 3
    assert result.success_count == 2
    assert result.failure_count == 1
    assert [i.ok for i in result.items] == [True, False, True]
    assert "missing-pid" in result.items[1].error

    assert post_repo.get_post_by_pid(first.pid).status == "PUBLISHED"
    assert post_repo.get_post_by_pid(second.pid).published_at is not None


def test_batch_status_continues_after_database_error(alice, admin, make_post, uow, post_repo):
    posts = [make_post(alice, title=t, status="DRAFT") for t in ("A", "B", "C")]
    flaky = FlakyRepo(post_repo, "update_post", posts[1].pid)

    result = admin_post_svc.batch_update_post_status(
        uow, flaky, admin, [p.pid for p in posts], "PUBLISHED", to_dict=False,
    )
    assert result.success_count == 2
    assert result.failure_count == 1
    assert [i.ok for i in result.items] == [True, False, True]
    assert "lock wait timeout" in result.items[1].error

    assert post_repo.get_post_by_pid(posts[0].pid).status == "PUBLISHED"
    assert post_repo.get_post_by_pid(posts[1].pid).status == "DRAFT"
    assert post_repo.get_post_by_pid(posts[2].pid).status == "PUBLISHED"


def test_batch_status_rejects_unknown_status(admin, uow, post_repo):
    with pytest.raises(InvalidArgument):
        admin_post_svc.batch_update_post_status(uow, post_repo, admin, ["x"], "ARCHIVED")


def test_post_actions(alice, admin, make_post, uow, post_repo, comment_repo):
    post = make_post(alice, status="DRAFT")

    approved = admin_post_svc.execute_post_action(uow, post_repo, comment_repo, admin, post.pid, "approve")
    assert approved["status"] == "PUBLISHED"

    rejected = admin_post_svc.execute_post_action(uow, post_repo, comment_repo, admin, post.pid, "REJECT", reason="off topic")
    assert rejected["status"] == "HIDDEN"

    topped = admin_post_svc.execute_post_action(uow, post_repo, comment_repo, admin, post.pid, "set_top")
    assert topped["is_top"] is True
    untopped = admin_post_svc.execute_post_action(uow, post_repo, comment_repo, admin, post.pid, "remove_top")
    assert untopped["is_top"] is False

    recommended = admin_post_svc.execute_post_action(uow, post_repo, comment_repo, admin, post.pid, "set_recommended")
    assert recommended["is_recommended"] is True

    with pytest.raises(InvalidArgument):
        admin_post_svc.execute_post_action(uow, post_repo, comment_repo, admin, post.pid, "archive")

    assert admin_post_svc.execute_post_action(uow, post_repo, comment_repo, admin, post.pid, "delete") is None
    with pytest.raises(PostNotFound):
        admin_post_svc.get_post(post_repo, admin, post.pid)


def test_admin_post_list_filters_and_sort(alice, admin, make_post, post_repo):
    make_post(alice, title="Lost cat", category="lost_found")
    make_post(alice, title="Draft note", status="DRAFT")

    drafts = admin_post_svc.list_posts(post_repo, admin, status="DRAFT", to_dict=False)
    assert [p.title for p in drafts.content] == ["Draft note"]

    lost = admin_post_svc.list_posts(post_repo, admin, category="lost_found", to_dict=False)
    assert [p.category_display_name for p in lost.content] == ["失物招领"]

    with pytest.raises(InvalidArgument):
        admin_post_svc.list_posts(post_repo, admin, sort="published_at")
    with pytest.raises(InvalidArgument):
        admin_post_svc.list_posts(post_repo, admin, status="published")


def test_review_queue_lists_only_drafts(alice, bob, admin, make_post, post_repo):
    first = make_post(alice, title="Draft one", status="DRAFT")
    second = make_post(bob, title="Draft two", status="DRAFT")
    make_post(alice, title="Live")
    make_post(alice, title="Gone", status="HIDDEN")

    queue = admin_post_svc.list_posts_for_review(post_repo, admin, page_size=5, to_dict=False)
    assert queue.total_elements == 2
    assert {p.pid for p in queue.content} == {first.pid, second.pid}
    assert all(p.status == "DRAFT" for p in queue.content)

    with pytest.raises(PermissionDenied):
        admin_post_svc.list_posts_for_review(post_repo, alice)


def test_category_stats(alice, admin, make_post, post_repo):
    make_post(alice, title="a", category="dining")
    make_post(alice, title="b", category="dining")
    make_post(alice, title="c", category="sports")
    make_post(alice, title="d")

    stats = {s["category"]: s for s in admin_post_svc.category_stats(post_repo, admin)}
    assert stats["dining"]["count"] == 2
    assert stats["dining"]["display_name"] == "饮食推荐"
    assert stats["sports"]["count"] == 1
    assert None not in stats


def test_non_admin_is_rejected(alice, make_post, post_repo):
    post = make_post(alice)
    with pytest.raises(PermissionDenied):
        admin_post_svc.update_post_status(post_repo, alice, post.pid, "HIDDEN")
    with pytest.raises(PermissionDenied):
        admin_post_svc.list_statuses(alice)


# ------------------------------ 用户 ------------------------------

def test_admin_cannot_disable_or_delete_self(admin, user_repo):
    with pytest.raises(PermissionDenied) as exc:
        admin_user_svc.set_user_status(user_repo, admin, admin.uid, False)
    assert exc.value.message == "Cannot modify your own account status."

    with pytest.raises(PermissionDenied) as exc:
        admin_user_svc.delete_user(user_repo, admin, admin.uid)
    assert exc.value.message == "Cannot delete your own account."


def test_batch_user_status_marks_self_and_missing_as_failed(admin, alice, bob, uow, user_repo):
    result = admin_user_svc.batch_set_user_status(
        uow, user_repo, admin, [alice.uid, admin.uid, "ghost", bob.uid], False, to_dict=False,
    )
    assert result.success_count == 2
    assert result.failure_count == 2
    assert user_repo.get_user_by_uid(alice.uid).is_enabled is False
    assert user_repo.get_user_by_uid(bob.uid).is_enabled is False
    assert user_repo.get_user_by_uid(admin.uid).is_enabled is True


def test_batch_user_status_continues_after_database_error(admin, alice, bob, make_user, uow, user_repo):
    carol = make_user("carol")
    flaky = FlakyRepo(user_repo, "set_enabled", bob.uid)

    result = admin_user_svc.batch_set_user_status(
        uow, flaky, admin, [alice.uid, bob.uid, carol.uid], False, to_dict=False,
    )
    assert result.success_count == 2
    assert [i.ok for i in result.items] == [True, False, True]
    assert "lock wait timeout" in result.items[1].error
    assert user_repo.get_user_by_uid(bob.uid).is_enabled is True
    assert user_repo.get_user_by_uid(carol.uid).is_enabled is False


def test_set_status_and_delete_other_user(admin, alice, user_repo):
    disabled = admin_user_svc.set_user_status(user_repo, admin, alice.uid, False, to_dict=False)
    assert disabled.is_enabled is False
    assert "password" not in disabled.model_dump()

    assert admin_user_svc.delete_user(user_repo, admin, alice.uid) is True
    with pytest.raises(UserNotFound):
        admin_user_svc.get_user(user_repo, admin, alice.uid)


def test_list_users_by_role(admin, alice, make_user, user_repo):
    make_user("mod", role=UserRole.MODERATOR)

    admins = admin_user_svc.list_users(user_repo, admin, role="admin", to_dict=False)
    assert [u.username for u in admins.content] == ["admin"]

    everyone = admin_user_svc.list_users(user_repo, admin, sort="username", to_dict=False)
    assert [u.username for u in everyone.content] == ["admin", "alice", "mod"]

    with pytest.raises(InvalidArgument):
        admin_user_svc.list_users(user_repo, admin, role="root")
