import pytest

from seedvault.errors import InvalidPassword
from seedvault.wallet.passwords import password_strength, require_valid_password, validate_password


@pytest.mark.parametrize("password,error", [
    ("", "required"),
    ("ab1", "at least 6"),
    ("abcdefgh", "letters and numbers"),
    ("12345678", "letters and numbers"),
])
def test_invalid_passwords(password, error):
    check = validate_password(password)
    assert not check.is_valid
    assert error in check.errors[0]


def test_valid_password():
    check = validate_password("Correct1")
    assert check.is_valid
    assert check.errors == []


@pytest.mark.parametrize("password,strength", [
    ("", "None"),
    ("abc", "Weak"),
    ("abcdef", "Weak"),
    ("abcdef1", "Medium"),
    ("Correct1", "Strong"),
    ("Correct1!", "Strong"),
])
def test_strength(password, strength):
    assert password_strength(password) == strength


def test_require_valid_password_raises_with_errors():
    with pytest.raises(InvalidPassword) as exc:
        require_valid_password("short")
    assert exc.value.code == "INVALID_PASSWORD"
    assert exc.value.errors
