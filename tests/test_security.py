"""Tests for password hashing and the password policy."""

import pytest

from goodie.core.errors import ValidationError
from goodie.core.security import BCRYPT_MAX_BYTES, PasswordHasher, check_password_policy


class TestPasswordHasher:
    def test_compare_accepts_the_original_password(self, hasher: PasswordHasher):
        digest = hasher.hash("secret123")

        assert hasher.compare("secret123", digest) is True

    def test_compare_rejects_a_different_password(self, hasher: PasswordHasher):
        digest = hasher.hash("secret123")

        assert hasher.compare("secret124", digest) is False

    def test_hash_is_salted(self, hasher: PasswordHasher):
        assert hasher.hash("secret123") != hasher.hash("secret123")

    def test_digest_never_contains_the_plaintext(self, hasher: PasswordHasher):
        assert "secret123" not in hasher.hash("secret123")

    def test_work_factor_is_embedded_in_the_digest(self):
        digest = PasswordHasher(rounds=5).hash("secret123")

        assert digest.startswith("$2b$05$")

    @pytest.mark.parametrize("digest", [None, "", "not-a-bcrypt-hash"])
    def test_compare_returns_false_for_unusable_digest(self, hasher, digest):
        assert hasher.compare("secret123", digest) is False

    def test_compare_returns_false_for_missing_password(self, hasher):
        assert hasher.compare(None, hasher.hash("secret123")) is False

    def test_hash_refuses_empty_password(self, hasher):
        with pytest.raises(ValueError):
            hasher.hash("")


class TestPasswordPolicy:
    def test_accepts_minimum_length(self):
        check_password_policy("abcdef", min_length=6)

    def test_rejects_short_password(self):
        with pytest.raises(ValidationError) as exc_info:
            check_password_policy("abcde", min_length=6)

        assert exc_info.value.status_code == 400
        assert "at least 6" in exc_info.value.detail

    def test_rejects_password_longer_than_bcrypt_limit(self):
        with pytest.raises(ValidationError):
            check_password_policy("a" * (BCRYPT_MAX_BYTES + 1), min_length=6)

    def test_limit_counts_bytes_not_characters(self):
        # 40 characters, 80 bytes in UTF-8
        with pytest.raises(ValidationError):
            check_password_policy("é" * 40, min_length=6)
