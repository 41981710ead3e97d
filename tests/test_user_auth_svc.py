import pytest

from app.core.exceptions import (
    DuplicateUserError,
    NotAuthenticated,
    PasswordMismatchError,
    PermissionDenied,
    UserNotFound,
)
from app.core.security import decode_access_token, verify_password
from app.schemas.user import (
    UserCreate,
    UserLogin,
    UserUpdate,
    UserPasswordUpdate,
    UserDeleteRequest,
)
from app.service import auth_svc, user_svc


# ------------------------------ 注册 / 登录 ------------------------------

def test_register_hashes_password_and_hides_it(user_repo):
    profile = auth_svc.register(
        user_repo, UserCreate(username="carol", email="carol@example.com", password="hunter22"), to_dict=False,
    )
    assert profile.username == "carol"
    assert profile.role.value == "USER"
    assert "password" not in profile.model_dump()

    stored = user_repo.get_user_by_uid(profile.uid)
    assert stored.password != "hunter22"
    assert verify_password("hunter22", stored.password)


def test_register_rejects_taken_username_and_email(alice, user_repo):
    with pytest.raises(DuplicateUserError) as exc:
        auth_svc.register(user_repo, UserCreate(username="alice", email="new@example.com", password="hunter22"))
    assert exc.value.field == "username"

    with pytest.raises(DuplicateUserError) as exc:
        auth_svc.register(user_repo, UserCreate(username="alice2", email="alice@example.com", password="hunter22"))
    assert exc.value.field == "email"


def test_login_returns_token_for_user(alice, user_repo, password):
    token = auth_svc.login(user_repo, UserLogin(username="alice", password=password), to_dict=False)
    assert token.token_type == "bearer"
    assert token.user.uid == alice.uid
    assert decode_access_token(token.access_token)["sub"] == alice.uid


def test_login_failures_share_one_message(alice, user_repo, password):
    for username, secret in [("alice", "wrong-pass"), ("nobody", password)]:
        with pytest.raises(NotAuthenticated) as exc:
            auth_svc.login(user_repo, UserLogin(username=username, password=secret))
        assert exc.value.message == "Invalid username or password"


def test_disabled_user_cannot_login(alice, user_repo, password):
    user_repo.set_enabled(alice.uid, False)
    with pytest.raises(PermissionDenied):
        auth_svc.login(user_repo, UserLogin(username="alice", password=password))


# ------------------------------ 个人资料 ------------------------------

def test_public_user_hides_email(alice, user_repo):
    public = user_svc.get_public_user(user_repo, alice.uid)
    assert public["username"] == "alice"
    assert "email" not in public

    with pytest.raises(UserNotFound):
        user_svc.get_public_user(user_repo, "ghost")


def test_update_profile_only_touches_sent_fields(alice, user_repo):
    user_repo.update_profile(alice.uid, {"bio": "hello"})

    updated = user_svc.update_profile(user_repo, alice, UserUpdate(avatar_url="  https://img/a.png "), to_dict=False)
    assert updated.avatar_url == "https://img/a.png"
    assert updated.bio == "hello"

    cleared = user_svc.update_profile(user_repo, alice, UserUpdate(bio="   "), to_dict=False)
    assert cleared.bio is None
    assert cleared.avatar_url == "https://img/a.png"


def test_update_profile_rejects_taken_email(alice, bob, user_repo):
    with pytest.raises(DuplicateUserError):
        user_svc.update_profile(user_repo, alice, UserUpdate(email="bob@example.com"))

    same = user_svc.update_profile(user_repo, alice, UserUpdate(email="alice@example.com"), to_dict=False)
    assert same.email == "alice@example.com"


def test_profile_requires_login(user_repo):
    with pytest.raises(NotAuthenticated):
        user_svc.get_me(user_repo, None)


# ------------------------------ 密码 / 注销 ------------------------------

@pytest.mark.parametrize(
    "current, new, confirm",
    [
        (None, "newpass1", "newpass2"),
        ("not-my-pass", "newpass1", "newpass1"),
        (None, None, None),
    ],
    ids=["confirm-mismatch", "wrong-current", "same-as-old"],
)
def test_change_password_rules(alice, user_repo, password, current, new, confirm):
    # None 表示用户的当前密码
    data = UserPasswordUpdate(
        current_password=current or password,
        new_password=new or password,
        confirm_password=confirm or password,
    )
    with pytest.raises(PasswordMismatchError):
        user_svc.change_password(user_repo, alice, data)


def test_change_password_allows_login_with_new_one(alice, user_repo, password):
    data = UserPasswordUpdate(current_password=password, new_password="newpass1", confirm_password="newpass1")
    assert user_svc.change_password(user_repo, alice, data) is True

    token = auth_svc.login(user_repo, UserLogin(username="alice", password="newpass1"), to_dict=False)
    assert token.user.uid == alice.uid
    with pytest.raises(NotAuthenticated):
        auth_svc.login(user_repo, UserLogin(username="alice", password=password))


def test_delete_my_account_disables_instead_of_removing(alice, user_repo, password):
    with pytest.raises(PasswordMismatchError):
        user_svc.delete_my_account(user_repo, alice, UserDeleteRequest(password="wrong-pass"))

    assert user_svc.delete_my_account(user_repo, alice, UserDeleteRequest(password=password)) is True
    stored = user_repo.get_user_by_uid(alice.uid)
    assert stored is not None
    assert stored.is_enabled is False
