import re
from typing import Optional


EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


class AuthValidator:
    """Client-side checks run before any auth request is sent.
    Each method returns the message to show, or None when the input is acceptable.
    """

    @staticmethod
    def _blank(*values: Optional[str]) -> bool:
        return any(v is None or not v.strip() for v in values)

    @staticmethod
    def is_email(value: Optional[str]) -> bool:
        if not value:
            return False
        return bool(EMAIL_PATTERN.match(value.strip()))

    @staticmethod
    def validate_login(email: Optional[str], password: Optional[str]) -> Optional[str]:
        if AuthValidator._blank(email, password):
            return "Please fill all fields"
        return None

    @staticmethod
    def validate_registration(email: Optional[str], username: Optional[str], password: Optional[str]) -> Optional[str]:
        if AuthValidator._blank(email, username, password):
            return "Please fill all fields"
        if not AuthValidator.is_email(email):
            return "Please enter a valid email address"
        return None

    @staticmethod
    def validate_recovery_email(email: Optional[str]) -> Optional[str]:
        if AuthValidator._blank(email):
            return "Please enter your email"
        return None

    @staticmethod
    def validate_otp(otp: Optional[str], length: int = 6) -> Optional[str]:
        s = (otp or "").strip()
        if len(s) != length or not s.isdigit():
            return f"Please enter {length}-digit OTP"
        return None

    @staticmethod
    def validate_new_password(password: Optional[str], confirm: Optional[str], min_length: int = 6) -> Optional[str]:
        if AuthValidator._blank(password, confirm):
            return "Please fill all fields"
        if password != confirm:
            return "Passwords do not match"
        if len(password) < min_length:
            return f"Password must be at least {min_length} characters"
        return None

    @staticmethod
    def validate_profile(username: Optional[str], email: Optional[str]) -> Optional[str]:
        if AuthValidator._blank(username, email):
            return "Please fill all fields"
        return None


class CatalogValidator:
    """Checks for the admin forms and the review modal."""

    @staticmethod
    def validate_book(title: Optional[str]) -> Optional[str]:
        if not title or not title.strip():
            return "Please enter a book title"
        return None

    @staticmethod
    def validate_author(name: Optional[str]) -> Optional[str]:
        if not name or not name.strip():
            return "Please enter author name"
        return None

    @staticmethod
    def validate_poem(title: Optional[str], content: Optional[str]) -> Optional[str]:
        if not title or not title.strip() or not content or not content.strip():
            return "Title and content are required"
        return None

    @staticmethod
    def validate_category(name: Optional[str]) -> Optional[str]:
        if not name or not name.strip():
            return "Category name is required"
        return None

    @staticmethod
    def validate_rating(rating: Optional[int]) -> Optional[str]:
        if rating is None or not 1 <= rating <= 5:
            return "Please select a rating"
        return None
