import pytest

from civicflow.core.errors import AuthenticationError, DuplicateEmailError, ValidationError
from civicflow.models.user import UserRole
from civicflow.services.account_service import AccountService
from civicflow.services.auth_provider import AuthProvider, AuthResult, LocalAuthProvider


class RefusingProvider(AuthProvider):
    def get_provider_name(self):
        return "refusing"

    def sign_in(self, email, password):
        return AuthResult.failed("Incorrect password", "refusing")

    def sign_up(self, email, password, name):
        return AuthResult.failed("Sign-ups are closed", "refusing")


@pytest.fixture
def accounts(profiles):
    return AccountService(profiles, LocalAuthProvider())


def test_login_activates_profile(accounts, profiles):
    profile, token = accounts.login("municipality@city.example", "municipality123")

    assert profile.role == UserRole.MUNICIPALITY
    assert token
    assert profiles.current() == profile
    assert accounts.current() == profile


@pytest.mark.parametrize("email,password", [("", "x"), ("a@b.c", ""), ("   ", "x")])
def test_login_rejects_empty_fields(accounts, email, password):
    with pytest.raises(ValidationError):
        accounts.login(email, password)


def test_login_wrong_password(accounts, profiles):
    with pytest.raises(AuthenticationError):
        accounts.login("citizen@example.com", "wrong-password")
    assert profiles.current() is None


def test_login_refused_by_provider(profiles):
    accounts = AccountService(profiles, RefusingProvider())

    with pytest.raises(AuthenticationError, match="Incorrect password"):
        accounts.login("citizen@example.com", "citizen123")
    assert profiles.current() is None


def test_register_creates_and_activates_profile(accounts, profiles):
    profile, token = accounts.register("ana@example.com", "secret1", "secret1", "Ana", UserRole.HOSPITAL)

    assert profile.role == UserRole.HOSPITAL
    assert token
    assert profiles.current() == profile
    assert profiles.find_by_credentials("ana@example.com", "secret1") == profile


def test_register_password_mismatch_writes_nothing(accounts, profiles, blob_store):
    writes = blob_store.write_count

    with pytest.raises(ValidationError, match="Passwords do not match"):
        accounts.register("ana@example.com", "secret1", "secret2", "Ana")

    assert blob_store.write_count == writes
    assert profiles.find_by_email("ana@example.com") is None


def test_register_short_password(accounts):
    with pytest.raises(ValidationError):
        accounts.register("ana@example.com", "abc", "abc", "Ana")


def test_register_minimum_length_is_configurable(profiles):
    accounts = AccountService(profiles, LocalAuthProvider(), min_password_length=10)
    with pytest.raises(ValidationError):
        accounts.register("ana@example.com", "secret12", "secret12", "Ana")


def test_register_duplicate_email(accounts, blob_store):
    writes = blob_store.write_count

    with pytest.raises(DuplicateEmailError):
        accounts.register("Citizen@Example.com", "secret1", "secret1", "Someone")
    assert blob_store.write_count == writes


def test_register_refused_by_provider(profiles):
    accounts = AccountService(profiles, RefusingProvider())

    with pytest.raises(AuthenticationError):
        accounts.register("ana@example.com", "secret1", "secret1", "Ana")
    assert profiles.find_by_email("ana@example.com") is None


def test_logout(accounts, profiles):
    accounts.login("citizen@example.com", "citizen123")
    accounts.logout()
    assert accounts.current() is None


def test_welcome_flag(accounts):
    assert accounts.has_seen_welcome() is False
    accounts.complete_welcome()
    assert accounts.has_seen_welcome() is True
