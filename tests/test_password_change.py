"""Password change tests: code-verified change and plain change."""

from datetime import timedelta

import pytest

from yang.models import CredentialToken
from yang.models.enums import TokenPurpose
from yang.models.mixins import utc_now


@pytest.fixture
def change_code(client, auth_headers, mailer):
    """Request a change code for the default user and return it."""
    response = client.post(
        "/auth/password/request", json={"email": auth_headers.email}, headers=auth_headers
    )
    assert response.status_code == 200
    return mailer.last_code()


def _confirm(client, headers, code, current="testpass123", new="newpass123", confirm=None):
    return client.patch(
        "/auth/password",
        headers=headers,
        json={
            "currentPassword": current,
            "newPassword": new,
            "confirmPassword": confirm if confirm is not None else new,
            "verificationCode": code,
        },
    )


def _login(client, email, password):
    return client.post("/auth/login", json={"email": email, "password": password})


class TestRequestChangeCode:
    def test_requires_session(self, client):
        response = client.post("/auth/password/request", json={"email": "test@example.com"})
        assert response.status_code == 401

    def test_sends_code_to_account_email(self, client, db, auth_headers, mailer):
        response = client.post(
            "/auth/password/request", json={"email": "Test@Example.com"}, headers=auth_headers
        )
        assert response.status_code == 200
        assert mailer.last.to == auth_headers.email
        code = mailer.last_code()
        assert len(code) == 6 and code.isdigit()

        token = db.query(CredentialToken).one()
        assert token.purpose == TokenPurpose.CHANGE
        assert token.user_id == auth_headers.user_id

    def test_blank_email(self, client, auth_headers):
        response = client.post("/auth/password/request", json={"email": "  "}, headers=auth_headers)
        assert response.status_code == 400

    def test_malformed_email(self, client, auth_headers):
        response = client.post(
            "/auth/password/request", json={"email": "not-an-email"}, headers=auth_headers
        )
        assert response.status_code == 400

    def test_code_mailed_to_edited_address(self, client, db, auth_headers, mailer):
        response = client.post(
            "/auth/password/request", json={"email": "Elsewhere@Example.com"}, headers=auth_headers
        )
        assert response.status_code == 200
        assert mailer.last.to == "elsewhere@example.com"

        token = db.query(CredentialToken).one()
        assert token.user_id == auth_headers.user_id

    def test_code_from_edited_address_changes_own_password(
        self, client, auth_headers, other_headers, mailer
    ):
        client.post(
            "/auth/password/request", json={"email": other_headers.email}, headers=auth_headers
        )
        code = mailer.last_code()

        response = _confirm(client, auth_headers, code)
        assert response.status_code == 200
        assert _login(client, auth_headers.email, "newpass123").status_code == 200
        assert _login(client, other_headers.email, other_headers.password).status_code == 200

    def test_mail_failure(self, client, auth_headers, mailer):
        mailer.fail = True
        response = client.post(
            "/auth/password/request", json={"email": auth_headers.email}, headers=auth_headers
        )
        assert response.status_code == 500


class TestConfirmChange:
    def test_success(self, client, auth_headers, mailer, change_code):
        response = _confirm(client, auth_headers, change_code)
        assert response.status_code == 200

        assert _login(client, auth_headers.email, "newpass123").status_code == 200
        assert _login(client, auth_headers.email, "testpass123").status_code == 401

        # A notice about the change went out after the code mail
        assert len(mailer.sent) == 2
        assert "changed" in mailer.last.subject

    def test_code_is_single_use(self, client, auth_headers, change_code):
        assert _confirm(client, auth_headers, change_code).status_code == 200
        again = _confirm(client, auth_headers, change_code, current="newpass123", new="third1234")
        assert again.status_code == 410

    def test_notice_failure_does_not_undo_change(self, client, auth_headers, mailer, change_code):
        mailer.fail = True
        assert _confirm(client, auth_headers, change_code).status_code == 200
        mailer.fail = False
        assert _login(client, auth_headers.email, "newpass123").status_code == 200

    def test_confirmation_mismatch(self, client, auth_headers, change_code):
        response = _confirm(client, auth_headers, change_code, confirm="newpass124")
        assert response.status_code == 400

    def test_new_password_too_short(self, client, auth_headers, change_code):
        response = _confirm(client, auth_headers, change_code, new="abcd")
        assert response.status_code == 400

    def test_new_password_same_as_current(self, client, auth_headers, change_code):
        response = _confirm(client, auth_headers, change_code, new="testpass123")
        assert response.status_code == 400

    def test_wrong_code(self, client, auth_headers, change_code):
        wrong = "100000" if change_code != "100000" else "100001"
        response = _confirm(client, auth_headers, wrong)
        assert response.status_code == 400
        assert _login(client, auth_headers.email, "testpass123").status_code == 200

    def test_wrong_current_password(self, client, auth_headers, change_code):
        response = _confirm(client, auth_headers, change_code, current="notmypass")
        assert response.status_code == 400
        assert _login(client, auth_headers.email, "testpass123").status_code == 200

    def test_code_of_another_user(self, client, auth_headers, other_headers, mailer):
        client.post(
            "/auth/password/request", json={"email": other_headers.email}, headers=other_headers
        )
        their_code = mailer.last_code()

        response = _confirm(client, auth_headers, their_code)
        assert response.status_code == 400
        assert _login(client, auth_headers.email, "testpass123").status_code == 200

    def test_expired_code(self, client, db, auth_headers, change_code):
        db.query(CredentialToken).update(
            {CredentialToken.expires_at: utc_now() - timedelta(minutes=1)}
        )
        db.commit()
        assert _confirm(client, auth_headers, change_code).status_code == 410

    def test_missing_fields(self, client, auth_headers):
        response = client.patch(
            "/auth/password",
            headers=auth_headers,
            json={"currentPassword": "testpass123", "newPassword": "newpass123"},
        )
        assert response.status_code == 400

    def test_newer_code_supersedes_older(self, client, auth_headers, mailer, change_code):
        client.post(
            "/auth/password/request", json={"email": auth_headers.email}, headers=auth_headers
        )
        newer = mailer.last_code()
        if newer != change_code:
            assert _confirm(client, auth_headers, change_code).status_code == 410
        assert _confirm(client, auth_headers, newer).status_code == 200


class TestSimpleChange:
    def test_success(self, client, auth_headers):
        response = client.post(
            "/auth/password-change",
            headers=auth_headers,
            json={"currentPassword": "testpass123", "newPassword": "brandnew1"},
        )
        assert response.status_code == 200
        assert _login(client, auth_headers.email, "brandnew1").status_code == 200

    def test_requires_session(self, client):
        response = client.post(
            "/auth/password-change",
            json={"currentPassword": "testpass123", "newPassword": "brandnew1"},
        )
        assert response.status_code == 401

    def test_too_short(self, client, auth_headers):
        response = client.post(
            "/auth/password-change",
            headers=auth_headers,
            json={"currentPassword": "testpass123", "newPassword": "abcde"},
        )
        assert response.status_code == 400

    def test_same_password(self, client, auth_headers):
        response = client.post(
            "/auth/password-change",
            headers=auth_headers,
            json={"currentPassword": "testpass123", "newPassword": "testpass123"},
        )
        assert response.status_code == 400

    def test_wrong_current_password(self, client, auth_headers):
        response = client.post(
            "/auth/password-change",
            headers=auth_headers,
            json={"currentPassword": "wrongpass", "newPassword": "brandnew1"},
        )
        assert response.status_code == 400

    def test_invalidates_outstanding_codes(self, client, auth_headers, change_code):
        client.post(
            "/auth/password-change",
            headers=auth_headers,
            json={"currentPassword": "testpass123", "newPassword": "brandnew1"},
        )
        response = _confirm(client, auth_headers, change_code, current="brandnew1")
        assert response.status_code == 410
