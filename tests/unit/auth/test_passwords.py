import pytest

from raugupatis.auth.passwords import (
    email_problem,
    hash_password,
    normalize_email,
    password_problem,
    verify_password,
)


class TestHashing:

    def test_hash_is_not_plaintext_and_verifies(self):
        hashed = hash_password("securepass123")
        assert hashed != "securepass123"
        assert hashed.startswith("$2")
        assert verify_password("securepass123", hashed)

    def test_hashes_are_salted(self):
        assert hash_password("securepass123") != hash_password("securepass123")

    def test_wrong_password_rejected(self):
        assert not verify_password("wrongpass123", hash_password("securepass123"))

    def test_malformed_hash_is_a_mismatch(self):
        assert verify_password("securepass123", "not-a-bcrypt-hash") is False


class TestRules:

    @pytest.mark.parametrize("email", ["a@b.com", "first.last@sub.example.org", "x+tag@ex.io"])
    def test_valid_emails(self, email):
        assert email_problem(email) is None

    @pytest.mark.parametrize(
        "email",
        ["", "plainaddress", "@example.com", "a@b", "a@@b.com", "a@b..com", "a@.com", "a b@c.com"],
    )
    def test_invalid_emails(self, email):
        assert email_problem(email) is not None

    def test_password_length_bounds(self):
        assert password_problem("short") is not None
        assert password_problem("12345678") is None
        assert password_problem("x" * 72) is None
        assert password_problem("x" * 73) is not None

    def test_blank_password_rejected(self):
        assert password_problem(" " * 10) is not None

    def test_normalize_email(self):
        assert normalize_email("  Alice@Example.COM ") == "alice@example.com"
