def test_root(client):
    resp = client.get("/")
    assert resp.status_code == 200
    assert "version" in resp.json()


def test_register_login_and_me(client):
    resp = client.post("/auth/register", json={"username": "dave", "email": "dave@example.com", "password": "hunter22"})
    assert resp.status_code == 201
    body = resp.json()
    assert body["code"] == 201
    assert body["data"]["username"] == "dave"
    assert "password" not in body["data"]

    again = client.post("/auth/register", json={"username": "dave", "email": "other@example.com", "password": "hunter22"})
    assert again.status_code == 400

    login = client.post("/auth/login", json={"username": "dave", "password": "hunter22"})
    assert login.status_code == 200
    token = login.json()["data"]["access_token"]

    me = client.get("/users/me", headers={"Authorization": f"Bearer {token}"})
    assert me.status_code == 200
    assert me.json()["data"]["email"] == "dave@example.com"

    whoami = client.get("/auth/whoami", headers={"Authorization": f"Bearer {token}"})
    assert whoami.json()["data"]["uid"] == me.json()["data"]["uid"]


def test_bad_login_is_401(client, alice):
    resp = client.post("/auth/login", json={"username": "alice", "password": "wrong-pass"})
    assert resp.status_code == 401
    assert resp.json()["msg"] == "Invalid username or password"


def test_missing_or_bad_token_is_401(client):
    resp = client.get("/users/me")
    assert resp.status_code == 401
    assert resp.json()["code"] == 401
    assert resp.json()["data"] is None
    assert resp.headers["www-authenticate"] == "Bearer"

    resp = client.get("/users/me", headers={"Authorization": "Bearer not-a-jwt"})
    assert resp.status_code == 401


def test_validation_error_is_400(client, alice, auth_headers):
    resp = client.post("/posts/", json={"title": "", "content": "body"}, headers=auth_headers(alice))
    assert resp.status_code == 400
    body = resp.json()
    assert body["code"] == 400
    assert any(err["field"] == "title" for err in body["data"])


def test_post_and_comment_flow(client, alice, bob, auth_headers):
    created = client.post(
        "/posts/",
        json={"title": "Lost umbrella", "content": "Blue umbrella near the library", "category": "lost_found", "status": "PUBLISHED"},
        headers=auth_headers(alice),
    )
    assert created.status_code == 201
    post = created.json()["data"]
    assert post["category_display_name"] == "失物招领"

    feed = client.get("/posts/feed")
    assert feed.status_code == 200
    assert [p["pid"] for p in feed.json()["data"]["content"]] == [post["pid"]]

    by_slug = client.get(f"/posts/slug/{post['slug']}")
    assert by_slug.json()["data"]["view_count"] == 1

    comment = client.post(
        "/comments/", json={"post_id": post["pid"], "content": "I saw it at the front desk"}, headers=auth_headers(bob),
    )
    assert comment.status_code == 201
    cid = comment.json()["data"]["cid"]

    listed = client.get(f"/comments/post/{post['pid']}")
    assert listed.status_code == 200
    assert listed.json()["data"]["content"][0]["cid"] == cid
    assert listed.json()["data"]["content"][0]["can_edit"] is False

    forbidden = client.delete(f"/comments/{cid}", headers=auth_headers(alice))
    assert forbidden.status_code == 403

    deleted = client.delete(f"/comments/{cid}", headers=auth_headers(bob))
    assert deleted.status_code == 200
    assert client.get(f"/posts/{post['pid']}").json()["data"]["comment_count"] == 0


def test_unknown_post_is_404(client):
    resp = client.get("/posts/does-not-exist")
    assert resp.status_code == 404
    assert resp.json()["code"] == 404


def test_admin_routes_require_admin(client, alice, admin, make_post, auth_headers):
    post = make_post(alice, status="DRAFT")

    assert client.get("/admin/posts/", headers=auth_headers(alice)).status_code == 403
    assert client.get("/admin/posts/").status_code == 401

    resp = client.put(f"/admin/posts/{post.pid}/status", json={"status": "PUBLISHED"}, headers=auth_headers(admin))
    assert resp.status_code == 200
    assert resp.json()["data"]["status"] == "PUBLISHED"

    resp = client.put(
        "/admin/posts/batch/status",
        json={"post_ids": [post.pid, "ghost"], "status": "HIDDEN"},
        headers=auth_headers(admin),
    )
    assert resp.status_code == 200
    assert resp.json()["data"]["success_count"] == 1
    assert resp.json()["data"]["failure_count"] == 1


def test_admin_cannot_disable_self_over_http(client, admin, auth_headers):
    resp = client.put(f"/admin/users/{admin.uid}/status", json={"enabled": False}, headers=auth_headers(admin))
    assert resp.status_code == 403
    assert resp.json()["msg"] == "Cannot modify your own account status."


def test_disabled_user_token_is_rejected(client, alice, admin, auth_headers):
    headers = auth_headers(alice)
    client.put(f"/admin/users/{alice.uid}/status", json={"enabled": False}, headers=auth_headers(admin))
    assert client.get("/users/me", headers=headers).status_code == 403


def test_emotion_endpoint_caches(client, alice, make_post, sentiment_calls):
    post = make_post(alice, content="what a lovely day")

    first = client.get(f"/emotion/post/{post.pid}")
    second = client.get(f"/emotion/post/{post.pid}")
    assert first.status_code == 200
    assert first.json()["data"]["sentiment"] == "positive"
    assert second.json()["data"]["eid"] == first.json()["data"]["eid"]
    assert len(sentiment_calls) == 1

    assert client.get("/emotion/post/ghost").status_code == 404


def test_feed_page_size_is_clamped_over_http(client, alice, make_post):
    make_post(alice)

    resp = client.get("/posts/feed?page=99&page_size=500")
    assert resp.status_code == 200
    data = resp.json()["data"]
    assert data["size"] == 100
    assert data["content"] == []
    assert data["total_elements"] == 1
    assert data["last"] is True


def test_hiding_deleted_comment_is_400(client, alice, bob, admin, make_post, auth_headers):
    post = make_post(alice)
    comment = client.post("/comments/", json={"post_id": post.pid, "content": "spam spam"}, headers=auth_headers(bob))
    cid = comment.json()["data"]["cid"]
    client.delete(f"/comments/{cid}", headers=auth_headers(bob))

    resp = client.put(f"/admin/comments/{cid}/hide", headers=auth_headers(admin))
    assert resp.status_code == 400
    assert resp.json()["msg"] == f"comment {cid} is already deleted"


def test_review_queue_route(client, alice, admin, make_post, auth_headers):
    draft = make_post(alice, status="DRAFT")
    make_post(alice, title="Published one")

    resp = client.get("/admin/posts/review", headers=auth_headers(admin))
    assert resp.status_code == 200
    assert [p["pid"] for p in resp.json()["data"]["content"]] == [draft.pid]

    assert client.get("/admin/posts/review", headers=auth_headers(alice)).status_code == 403
