"""
Tests for AuthService.

Covers:
- login: existing user with right/wrong secret, first-login registration,
  the registration race, missing fields
- search_user: exact-name lookup
- issue_tokens: JWT pair carrying the user name
"""

from django.db import IntegrityError
from rest_framework_simplejwt.tokens import AccessToken

from authentication.models import User
from authentication.services import AuthService
from authentication.tests.factories import DEFAULT_SECRET, UserFactory


# =============================================================================
# TestAuthServiceLogin
# =============================================================================


class TestAuthServiceLogin:
    """
    Tests for AuthService.login().

    Verifies:
    - Existing users authenticate with their secret
    - Wrong secrets are rejected with UNAUTHORIZED
    - Unknown names are registered
    - At most one user exists per name
    """

    def test_existing_user_with_matching_secret_logs_in(self, db):
        """
        Why it matters: this is the returning-user happy path.
        """
        user = UserFactory(name="ana")

        result = AuthService.login("ana", DEFAULT_SECRET)

        assert result.success is True
        assert result.data.user == user
        assert result.data.created is False

    def test_wrong_secret_is_unauthorized(self, db):
        """
        Why it matters: a name is owned by whoever registered it first.
        """
        UserFactory(name="ana")

        result = AuthService.login("ana", "not-the-secret")

        assert result.success is False
        assert result.error_code == "UNAUTHORIZED"

    def test_unknown_name_registers_user(self, db):
        result = AuthService.login("newcomer", "pick-a-secret")

        assert result.success is True
        assert result.data.created is True
        user = User.objects.get(name="newcomer")
        assert user.check_password("pick-a-secret")

    def test_second_login_after_registration_does_not_create_again(self, db):
        """
        login(n, s) twice yields one user.

        Why it matters: at most one user per name.
        """
        AuthService.login("newcomer", "s")
        result = AuthService.login("newcomer", "s")

        assert result.data.created is False
        assert User.objects.filter(name="newcomer").count() == 1

    def test_inactive_user_is_unauthorized(self, db, deactivated_user):
        result = AuthService.login(deactivated_user.name, DEFAULT_SECRET)

        assert result.success is False
        assert result.error_code == "UNAUTHORIZED"

    def test_lost_registration_race_is_name_taken(self, db, mocker):
        """
        A concurrent insert of the same name surfaces as NAME_TAKEN.

        Why it matters: two first logins racing for one name must not both
        succeed, and the loser must get a clear error instead of a 500.
        """
        mocker.patch.object(
            User.objects,
            "create_user",
            side_effect=IntegrityError("duplicate key value violates unique constraint"),
        )

        result = AuthService.login("contested", "s")

        assert result.success is False
        assert result.error_code == "NAME_TAKEN"

    def test_missing_name_is_validation_error(self, db):
        result = AuthService.login("", "secret")

        assert result.success is False
        assert result.error_code == "VALIDATION_ERROR"
        assert "name" in result.errors

    def test_missing_secret_is_validation_error(self, db):
        result = AuthService.login("ana", "")

        assert result.success is False
        assert result.error_code == "VALIDATION_ERROR"
        assert "secret" in result.errors


# =============================================================================
# TestAuthServiceSearchUser
# =============================================================================


class TestAuthServiceSearchUser:
    """Tests for AuthService.search_user()."""

    def test_finds_user_by_exact_name(self, db):
        user = UserFactory(name="bob")

        result = AuthService.search_user("bob")

        assert result.success is True
        assert result.data == user

    def test_search_is_case_sensitive(self, db):
        UserFactory(name="bob")

        result = AuthService.search_user("Bob")

        assert result.success is False
        assert result.error_code == "USER_NOT_FOUND"

    def test_unknown_user_not_found(self, db):
        result = AuthService.search_user("nobody")

        assert result.success is False
        assert result.error_code == "USER_NOT_FOUND"


# =============================================================================
# TestAuthServiceIssueTokens
# =============================================================================


class TestAuthServiceIssueTokens:
    """Tests for AuthService.issue_tokens()."""

    def test_access_token_identifies_user_by_name(self, db):
        """
        Why it matters: the WebSocket middleware resolves the user from
        this claim.
        """
        user = UserFactory(name="carol")

        tokens = AuthService.issue_tokens(user)

        assert set(tokens) == {"access", "refresh"}
        assert AccessToken(tokens["access"])["user_id"] == "carol"
