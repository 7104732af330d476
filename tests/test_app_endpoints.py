from pathlib import Path

from fastapi.testclient import TestClient
from sqlalchemy.exc import OperationalError

from conftest import csrf_token, signup


def _login(client: TestClient, email: str, password: str, **extra):
    data = {"email": email, "password": password, "csrf_token": csrf_token(client), **extra}
    return client.post("/login", data=data, follow_redirects=False)


def _create_gallery(client: TestClient, title: str) -> int:
    r = client.post("/galleries", data={"title": title, "csrf_token": csrf_token(client)}, follow_redirects=False)
    assert r.status_code == 303
    loc = r.headers["location"]
    assert loc.startswith("/galleries/") and loc.endswith("/edit")
    return int(loc.split("/")[2])


def test_static_pages(client):
    for path in ("/", "/contact", "/faq", "/signup", "/login"):
        r = client.get(path)
        assert r.status_code == 200
        assert r.headers["content-type"].startswith("text/html")
    assert client.get("/assets/style.css").status_code == 200


def test_signup_sets_remember_cookie_and_stores_normalised_user(client, services):
    r = signup(client, "  Bob@Example.com ", "secretpw", name="Bob")
    assert r.status_code == 303
    assert r.headers["location"] == "/galleries"
    assert client.cookies.get("remember_token")

    user = services.user.by_email("bob@example.com")
    assert user.email == "bob@example.com"
    assert user.password_hash and user.remember_hash

    r = client.get("/galleries")
    assert r.status_code == 200
    assert "Your galleries" in r.text


def test_signup_validation_error_is_shown(client):
    r = signup(client, "bob@example.com", "short")
    assert r.status_code == 200
    assert "Password must be at least 8 characters" in r.text
    assert client.cookies.get("remember_token") is None


def test_signup_duplicate_email(client, other_client):
    signup(client, "bob@example.com")
    r = signup(other_client, "BOB@example.com")
    assert r.status_code == 200
    assert "Email address is already taken" in r.text


def test_post_without_csrf_token_is_forbidden(client):
    r = client.post("/signup", data={"email": "x@example.com", "password": "secretpw"})
    assert r.status_code == 403


def test_galleries_require_login(client):
    r = client.get("/galleries", follow_redirects=False)
    assert r.status_code == 303
    assert r.headers["location"] == "/login?next=/galleries"


def test_invalid_remember_cookie_is_anonymous(client):
    client.cookies.set("remember_token", "garbage")
    r = client.get("/galleries", follow_redirects=False)
    assert r.status_code == 303
    assert r.headers["location"].startswith("/login")


def test_login_wrong_password_sets_no_cookie(client, other_client):
    signup(other_client, "bob@example.com", "secretpw")
    r = _login(client, "bob@example.com", "wrongpassword")
    assert r.status_code == 200
    assert "Incorrect password provided" in r.text
    assert client.cookies.get("remember_token") is None


def test_login_unknown_email(client):
    r = _login(client, "nobody@example.com", "secretpw")
    assert r.status_code == 200
    assert "Incorrect email provided" in r.text


def test_login_rotates_token_and_honours_next(client, other_client):
    signup(other_client, "bob@example.com", "secretpw")
    first_token = other_client.cookies.get("remember_token")

    r = _login(client, " BOB@example.com", "secretpw", next="/galleries/new")
    assert r.status_code == 303
    assert r.headers["location"] == "/galleries/new"
    assert client.cookies.get("remember_token") != first_token

    # The signup session was rotated away.
    assert other_client.get("/galleries", follow_redirects=False).status_code == 303
    assert client.get("/galleries").status_code == 200


def test_login_refuses_offsite_next(client, other_client):
    signup(other_client, "bob@example.com", "secretpw")
    r = _login(client, "bob@example.com", "secretpw", next="//evil.example.com/")
    assert r.headers["location"] == "/galleries"


def test_logout_invalidates_cookie(client):
    signup(client, "bob@example.com")
    old = client.cookies.get("remember_token")
    r = client.post("/logout", data={"csrf_token": csrf_token(client)}, follow_redirects=False)
    assert r.status_code == 303

    client.cookies.set("remember_token", old)
    assert client.get("/galleries", follow_redirects=False).status_code == 303


def test_gallery_crud_and_images(client, config):
    signup(client, "bob@example.com")
    gid = _create_gallery(client, "Holidays")

    r = client.get("/galleries")
    assert "Holidays" in r.text

    r = client.post(
        f"/galleries/{gid}/update",
        data={"title": "Summer", "csrf_token": csrf_token(client)},
    )
    assert r.status_code == 200
    assert "Gallery successfully updated" in r.text

    r = client.post(
        f"/galleries/{gid}/images",
        data={"csrf_token": csrf_token(client)},
        files=[
            ("images", ("beach.jpg", b"sand", "image/jpeg")),
            ("images", ("sea.png", b"water", "image/png")),
        ],
        follow_redirects=False,
    )
    assert r.status_code == 303
    assert r.headers["location"] == f"/galleries/{gid}/edit"

    r = client.get(f"/galleries/{gid}")
    assert r.status_code == 200
    assert "Summer" in r.text
    assert f"/images/galleries/{gid}/beach.jpg" in r.text
    assert client.get(f"/images/galleries/{gid}/sea.png").content == b"water"

    r = client.post(
        f"/galleries/{gid}/images/beach.jpg/delete",
        data={"csrf_token": csrf_token(client)},
        follow_redirects=False,
    )
    assert r.status_code == 303
    assert client.get(f"/images/galleries/{gid}/beach.jpg").status_code == 404

    r = client.post(f"/galleries/{gid}/delete", data={"csrf_token": csrf_token(client)}, follow_redirects=False)
    assert r.status_code == 303
    assert r.headers["location"] == "/galleries"
    assert client.get(f"/galleries/{gid}").status_code == 404
    # Files stay on disk when their gallery is deleted.
    assert (Path(config.images_dir) / "galleries" / str(gid) / "sea.png").exists()


def test_gallery_title_required(client):
    signup(client, "bob@example.com")
    r = client.post("/galleries", data={"title": "  ", "csrf_token": csrf_token(client)})
    assert r.status_code == 200
    assert "Title is required" in r.text


def test_non_owner_gets_not_found(client, other_client):
    signup(client, "owner@example.com")
    gid = _create_gallery(client, "Private Title")

    signup(other_client, "intruder@example.com")
    token = csrf_token(other_client)

    r = other_client.get(f"/galleries/{gid}/edit")
    assert r.status_code == 404
    assert "Private Title" not in r.text

    for path in (f"/galleries/{gid}/update", f"/galleries/{gid}/delete", f"/galleries/{gid}/images"):
        r = other_client.post(path, data={"title": "pwned", "csrf_token": token})
        assert r.status_code == 404
        assert "Private Title" not in r.text

    # Untouched.
    assert "Private Title" in client.get(f"/galleries/{gid}/edit").text


def test_unknown_and_invalid_gallery_ids(client):
    signup(client, "bob@example.com")
    r = client.get("/galleries/999/edit")
    assert r.status_code == 404
    assert r.json()["detail"] == "Gallery not found"
    r = client.get("/galleries/abc")
    assert r.status_code == 404
    assert r.json()["detail"] == "Invalid gallery id"


def test_static_paths_skip_user_lookup(client, services, config, monkeypatch):
    signup(client, "bob@example.com")
    img = Path(config.images_dir) / "galleries" / "1" / "x.jpg"
    img.parent.mkdir(parents=True, exist_ok=True)
    img.write_bytes(b"pixels")

    calls = []
    original = services.user.by_remember

    def counting(token):
        calls.append(token)
        return original(token)

    monkeypatch.setattr(services.user, "by_remember", counting)

    assert client.get("/assets/style.css").status_code == 200
    assert client.get("/images/galleries/1/x.jpg").content == b"pixels"
    assert calls == []

    assert client.get("/").status_code == 200
    assert len(calls) == 1


def test_storage_failure_during_lookup_leaves_request_anonymous(client, services, monkeypatch):
    signup(client, "bob@example.com")

    def failing(token):
        raise OperationalError("SELECT 1", {}, Exception("database is down"))

    monkeypatch.setattr(services.user, "by_remember", failing)

    r = client.get("/galleries", follow_redirects=False)
    assert r.status_code == 303
    assert r.headers["location"].startswith("/login")
