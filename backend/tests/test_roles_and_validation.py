import pytest

from medicare.auth import UserPrincipal, hash_password, verify_password
from medicare.exceptions import ValidationError
from medicare.roles import Role
from medicare.scanner.validation import is_likely_worker_id, validate_manual_id


def test_role_home_paths():
    assert Role.ADMIN.home_path == "/admin"
    assert Role.DOCTOR.home_path == "/doctor"


def test_role_parse():
    assert Role.parse("Doctor ") is Role.DOCTOR
    assert Role.parse(Role.ADMIN) is Role.ADMIN
    with pytest.raises(ValueError):
        Role.parse("nurse")


def test_principal_role_checks():
    admin = UserPrincipal(user_id="u1", email="a@x.test", display_name="A", role=Role.ADMIN)
    nobody = UserPrincipal(user_id="u2", email="b@x.test", display_name="B", role=None)

    assert admin.is_admin and not admin.is_doctor
    assert admin.has_role(Role.ADMIN, Role.DOCTOR)
    assert not nobody.has_role(Role.ADMIN, Role.DOCTOR)


def test_password_hashing():
    hashed = hash_password("doctor123")
    assert hashed != "doctor123"
    assert verify_password("doctor123", hashed)
    assert not verify_password("doctor124", hashed)


@pytest.mark.parametrize(
    "value,expected",
    [
        ("abc", True),
        ("  WKR-000123  ", True),
        ("x" * 64, True),
        ("ab", False),
        ("   ab   ", False),
        ("x" * 65, False),
        ("", False),
        (None, False),
    ],
)
def test_manual_id_length_rule(value, expected):
    assert is_likely_worker_id(value) is expected


def test_validate_manual_id_trims():
    assert validate_manual_id("  WKR-000123 ") == "WKR-000123"
    with pytest.raises(ValidationError) as exc:
        validate_manual_id("a")
    assert exc.value.message == "Please enter a valid Worker ID."
