import pytest

from mimanasa.validators import AuthValidator, CatalogValidator


@pytest.mark.parametrize("value,expected", [
    ("a@b.com", True),
    ("  reader@example.co.in ", True),
    ("a@b", False),
    ("a b@c.com", False),
    ("", False),
    (None, False),
])
def test_is_email(value, expected):
    assert AuthValidator.is_email(value) is expected


def test_registration():
    assert AuthValidator.validate_registration("a@b.com", "a", "secret") is None
    assert AuthValidator.validate_registration("a@b.com", "", "secret") == "Please fill all fields"
    assert AuthValidator.validate_registration("ab.com", "a", "secret") == "Please enter a valid email address"


def test_otp_length_is_configurable():
    assert AuthValidator.validate_otp("1234", length=4) is None
    assert AuthValidator.validate_otp("123456", length=4) == "Please enter 4-digit OTP"
    assert AuthValidator.validate_otp(" 123456 ") is None


def test_new_password_min_length_is_configurable():
    assert AuthValidator.validate_new_password("abcdefgh", "abcdefgh", min_length=8) is None
    assert AuthValidator.validate_new_password("abcdefg", "abcdefg", min_length=8) == \
        "Password must be at least 8 characters"


def test_catalog_validators():
    assert CatalogValidator.validate_book("  ") == "Please enter a book title"
    assert CatalogValidator.validate_author("Premchand") is None
    assert CatalogValidator.validate_poem("Title", "") == "Title and content are required"
    assert CatalogValidator.validate_category(None) == "Category name is required"


@pytest.mark.parametrize("rating", [0, 6, None])
def test_rating_out_of_range(rating):
    assert CatalogValidator.validate_rating(rating) == "Please select a rating"
