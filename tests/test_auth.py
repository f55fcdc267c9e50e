from app.core import security
from app.models import User, UserRole, UserSession

AUTH_URL = "/api/v1/auth"


def login(client, email, password):
    return client.post(f"{AUTH_URL}/login", data={"username": email, "password": password})


def test_login_returns_tokens_and_redirect(client, db, make_user):
    make_user(UserRole.teacher, email="teacher@school.test", password="chalk123", first_name="Sam", last_name="Ndlovu")

    response = login(client, "teacher@school.test", "chalk123")

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["token_type"] == "bearer"
    assert body["data"]["role"] == "teacher"
    assert body["data"]["redirect_to"] == "/teacher/dashboard"
    assert body["data"]["name"] == "Sam Ndlovu"
    assert "access_token" in response.cookies
    assert db.query(UserSession).one().user_agent == "testclient"


def test_wrong_password_is_reported(client, make_user):
    make_user(UserRole.student, email="pupil@school.test", password="right-one")

    body = login(client, "pupil@school.test", "wrong-one").json()

    assert body == {"success": False, "message": "Invalid email or password", "data": None}


def test_account_locks_after_repeated_failures(client, db, make_user):
    make_user(UserRole.student, email="pupil@school.test", password="right-one")

    for _ in range(security.MAX_FAILED_LOGINS - 1):
        assert login(client, "pupil@school.test", "nope").json()["success"] is False
    locked = login(client, "pupil@school.test", "nope")
    assert locked.status_code == 403

    still_locked = login(client, "pupil@school.test", "right-one")
    assert still_locked.status_code == 403
    db.expire_all()
    assert db.query(User).filter_by(email="pupil@school.test").one().locked_until is not None


def test_me_and_refresh(client, make_user):
    make_user(UserRole.principal, email="head@school.test", password="office-key")
    tokens = login(client, "head@school.test", "office-key").json()["data"]

    me = client.get(f"{AUTH_URL}/me", headers={"Authorization": f"Bearer {tokens['token']}"})
    assert me.status_code == 200
    assert me.json()["role"] == "principal"

    refreshed = client.post(f"{AUTH_URL}/refresh", json={"refresh_token": tokens["refresh_token"]})
    assert refreshed.status_code == 200
    assert refreshed.json()["role"] == "principal"


def test_refresh_token_is_not_an_access_token(client, make_user):
    user = make_user(UserRole.admin)
    refresh = security.create_refresh_token(user.id)

    response = client.get(f"{AUTH_URL}/me", headers={"Authorization": f"Bearer {refresh}"})

    assert response.status_code == 403


def test_logout_drops_session(client, db, make_user):
    make_user(UserRole.admin, email="root@school.test", password="pw-12345")
    tokens = login(client, "root@school.test", "pw-12345").json()["data"]

    client.post(f"{AUTH_URL}/logout", json={"refresh_token": tokens["refresh_token"]})

    assert db.query(UserSession).count() == 0
    expired = client.post(f"{AUTH_URL}/refresh", json={"refresh_token": tokens["refresh_token"]})
    assert expired.status_code == 401
