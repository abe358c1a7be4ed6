"""
End-to-end tests of the three login endpoints through the Flask test client.

Codes are read back from the Flask-Mail outbox; the challenge manager runs
on a frozen clock so expiry can be stepped through deterministically.
"""
from flask_jwt_extended import decode_token

from stepup_auth.extensions import db
from stepup_auth.models import AuditLog, LoginChallenge, User

from conftest import PASSWORD, other_code, read_code

LOGIN = "/auth/login"
VERIFY = "/auth/login/verify-otp"
RESEND = "/auth/login/resend-otp"


def start_login(client, outbox, email="ada@example.com", password=PASSWORD, remember_me=False):
    resp = client.post(LOGIN, json={"email": email, "password": password, "rememberMe": remember_me})
    assert resp.status_code == 200, resp.get_json()
    return resp.get_json()["challengeToken"], read_code(outbox[-1])


def verify(client, token, code, **extra):
    return client.post(VERIFY, json={"otp": code, "challengeToken": token, **extra})


class TestLogin:
    def test_login_always_requires_otp(self, client, user, outbox):
        resp = client.post(LOGIN, json={"email": user.email, "password": PASSWORD, "rememberMe": False})

        assert resp.status_code == 200
        body = resp.get_json()
        assert body["status"] == "otp_required"
        assert "token" not in body
        assert body["expiresAt"].endswith("Z")
        assert len(body["challengeToken"]) >= 22

        assert len(outbox) == 1
        assert outbox[0].recipients == [user.email]
        assert read_code(outbox[0]) not in body.values()

    def test_every_login_gets_a_new_token(self, client, user, outbox):
        first, _ = start_login(client, outbox)
        second, _ = start_login(client, outbox)
        assert first != second

    def test_email_lookup_is_case_insensitive(self, client, user, outbox):
        resp = client.post(LOGIN, json={"email": "ADA@Example.COM", "password": PASSWORD})
        assert resp.status_code == 200
        assert outbox[-1].recipients == ["ada@example.com"]

    def test_unknown_email_and_wrong_password_look_the_same(self, client, user, outbox):
        wrong_password = client.post(LOGIN, json={"email": user.email, "password": "nope-nope"})
        unknown_email = client.post(LOGIN, json={"email": "ghost@example.com", "password": PASSWORD})

        assert wrong_password.status_code == unknown_email.status_code == 401
        a, b = wrong_password.get_json(), unknown_email.get_json()
        a.pop("request_id"), b.pop("request_id")
        assert a == b
        assert a["code"] == "INVALID_CREDENTIALS"
        assert outbox == []

    def test_disabled_account(self, client, make_user, outbox):
        make_user(email="off@example.com", is_active=False)
        resp = client.post(LOGIN, json={"email": "off@example.com", "password": PASSWORD})
        assert resp.status_code == 403
        assert resp.get_json()["code"] == "ACCOUNT_DISABLED"
        assert outbox == []

    def test_validation_error(self, client):
        resp = client.post(LOGIN, json={"email": "not-an-email"})
        assert resp.status_code == 400
        body = resp.get_json()
        assert body["code"] == "VALIDATION_ERROR"
        assert set(body["details"]) == {"email", "password"}

    def test_outcomes_are_audited(self, client, user, outbox):
        client.post(LOGIN, json={"email": user.email, "password": "wrong-one"})
        start_login(client, outbox)

        actions = [a.action for a in AuditLog.query.order_by(AuditLog.created_at).all()]
        assert "LOGIN_FAILED_INVALID_CREDENTIALS" in actions
        assert "LOGIN_OTP_ISSUED" in actions


class TestVerifyOtp:
    def test_success_returns_session_and_user(self, app, client, make_user, outbox):
        make_user(email="root@example.com", role="super_admin", full_name="Root", company_name="HQ")
        token, code = start_login(client, outbox, email="root@example.com")

        resp = verify(client, token, code, rememberMe=False)
        assert resp.status_code == 200
        body = resp.get_json()
        assert body["status"] == "success"
        assert body["user"] == {
            "id": body["user"]["id"],
            "email": "root@example.com",
            "fullName": "Root",
            "companyName": "HQ",
            "role": "super_admin",
        }

        claims = decode_token(body["token"])
        assert claims["sub"] == body["user"]["id"]
        assert claims["role"] == "super_admin"
        assert claims["exp"] - claims["iat"] == int(app.config["SESSION_TTL"].total_seconds())

        stored = User.query.filter_by(email="root@example.com").first()
        assert stored.last_login_at is not None

    def test_remember_me_from_login_extends_the_session(self, app, client, user, outbox):
        token, code = start_login(client, outbox, remember_me=True)
        body = verify(client, token, code).get_json()

        claims = decode_token(body["token"])
        assert claims["exp"] - claims["iat"] == int(app.config["SESSION_REMEMBER_ME_TTL"].total_seconds())

    def test_code_is_single_use(self, client, user, outbox):
        token, code = start_login(client, outbox)
        assert verify(client, token, code).status_code == 200

        again = verify(client, token, code)
        assert again.status_code == 410
        assert again.get_json()["code"] == "CHALLENGE_EXPIRED"

    def test_five_wrong_codes_lock_the_challenge(self, client, user, outbox):
        token, code = start_login(client, outbox)
        wrong = other_code(code)

        for _ in range(4):
            resp = verify(client, token, wrong)
            assert resp.status_code == 400
            assert resp.get_json()["code"] == "INVALID_CODE"
        fifth = verify(client, token, wrong)
        assert fifth.status_code == 401
        assert fifth.get_json()["code"] == "TOO_MANY_ATTEMPTS"

        sixth = verify(client, token, code)
        assert sixth.status_code == 401
        assert sixth.get_json()["code"] == "TOO_MANY_ATTEMPTS"

    def test_expired_challenge(self, client, clock, user, outbox):
        token, code = start_login(client, outbox)
        clock.advance(minutes=5, seconds=1)

        resp = verify(client, token, code)
        assert resp.status_code == 410
        assert resp.get_json()["code"] == "CHALLENGE_EXPIRED"

    def test_unknown_token_looks_like_expired(self, client, clock, user, outbox):
        token, code = start_login(client, outbox)
        clock.advance(minutes=10)
        expired = verify(client, token, code).get_json()
        unknown = verify(client, "made-up-token", code).get_json()

        assert expired["code"] == unknown["code"]
        assert expired["message"] == unknown["message"]

    def test_new_login_abandons_old_challenge(self, client, user, outbox):
        old_token, old_code = start_login(client, outbox)
        new_token, new_code = start_login(client, outbox)

        assert verify(client, old_token, old_code).status_code == 410
        assert verify(client, new_token, new_code).status_code == 200

    def test_account_disabled_between_steps(self, client, user, outbox):
        token, code = start_login(client, outbox)
        user.is_active = False
        db.session.commit()

        resp = verify(client, token, code)
        assert resp.status_code == 403

    def test_malformed_otp_does_not_burn_an_attempt(self, client, user, outbox):
        token, _ = start_login(client, outbox)
        resp = verify(client, token, "12ab")
        assert resp.status_code == 400
        assert resp.get_json()["code"] == "VALIDATION_ERROR"
        assert LoginChallenge.query.one().attempts == 0


class TestResendOtp:
    def test_resend_invalidates_the_previous_code(self, client, user, outbox):
        token, old_code = start_login(client, outbox)

        resp = client.post(RESEND, json={"challengeToken": token})
        assert resp.status_code == 200
        body = resp.get_json()
        assert body["status"] == "success"
        assert body["expiresAt"].endswith("Z")
        new_code = read_code(outbox[-1])
        assert len(outbox) == 2

        if new_code != old_code:
            assert verify(client, token, old_code).status_code == 400
        assert verify(client, token, new_code).status_code == 200

    def test_fourth_resend_is_refused(self, client, clock, user, outbox):
        token, _ = start_login(client, outbox)
        for _ in range(3):
            assert client.post(RESEND, json={"challengeToken": token}).status_code == 200
        third_code = read_code(outbox[-1])

        resp = client.post(RESEND, json={"challengeToken": token})
        assert resp.status_code == 429
        assert resp.get_json()["code"] == "RESEND_LIMIT_EXCEEDED"

        clock.advance(minutes=4)
        assert verify(client, token, third_code).status_code == 200

    def test_resend_on_expired_challenge(self, client, clock, user, outbox):
        token, _ = start_login(client, outbox)
        clock.advance(minutes=6)

        resp = client.post(RESEND, json={"challengeToken": token})
        assert resp.status_code == 410

    def test_resend_requires_token(self, client):
        resp = client.post(RESEND, json={})
        assert resp.status_code == 400
        assert resp.get_json()["code"] == "VALIDATION_ERROR"


def test_health_and_request_id(client):
    resp = client.get("/health", headers={"X-Request-Id": "abc-123"})
    assert resp.get_json() == {"status": "ok"}
    assert resp.headers["X-Request-Id"] == "abc-123"

    resp = client.get("/health", headers={"X-Request-Id": "bad id; drop"})
    assert resp.headers["X-Request-Id"] != "bad id; drop"


def test_unknown_route_uses_error_envelope(client):
    resp = client.get("/nope")
    assert resp.status_code == 404
    assert resp.get_json()["status"] == "error"
