"""
Password policy, hashing and JWT helpers
"""
from datetime import timedelta

import pytest

from app.core.config import settings
from app.core.security import (
    ACCESS_TOKEN_TYPE,
    REFRESH_TOKEN_TYPE,
    SecurityUtils,
    check_password_strength,
)


class TestPasswordPolicy:
    def test_strong_password_has_no_issues(self):
        assert check_password_strength("Vert!Soleil42", "awa@example.com", "Awa Diop") == []

    def test_all_violations_reported_in_order(self):
        assert check_password_strength("") == [
            "8 caractères min.",
            "Minuscule.",
            "Majuscule.",
            "Chiffre.",
            "Symbole.",
        ]

    def test_short_lowercase_password(self):
        assert check_password_strength("abc") == [
            "8 caractères min.",
            "Majuscule.",
            "Chiffre.",
            "Symbole.",
        ]

    @pytest.mark.parametrize("password", ["Xyzuvw12 ", "Xyzuvw12_"])
    def test_whitespace_and_underscore_are_not_symbols(self, password):
        assert check_password_strength(password) == ["Symbole."]

    def test_email_part_rejected(self):
        issues = check_password_strength("Jeanne!Mbaye9", email="jeanne.dupont@ex.com")
        assert issues == ["Pas nom/email."]

    def test_name_word_rejected_case_insensitive(self):
        issues = check_password_strength("LEFEBVRE#x9z", name="Marc Lefebvre")
        assert issues == ["Pas nom/email."]

    def test_short_parts_are_ignored(self):
        # "ex" is shorter than three characters
        assert check_password_strength("Texas!Ranger7", email="bo@ex.io", name="Bo") == []

    @pytest.mark.parametrize("password", ["Pass1234!x", "Xx!0123yyy", "Abcd!9999", "Qwerty!9zz", "MyPassword!9"])
    def test_obvious_sequences_rejected(self, password):
        assert "Évitez séquences évidentes." in check_password_strength(password)


class TestPasswordHashing:
    def test_hash_is_never_the_plaintext(self):
        hashed = SecurityUtils.get_password_hash("Vert!Soleil42")
        assert hashed != "Vert!Soleil42"
        assert hashed.startswith("$2b$")

    def test_verify(self):
        hashed = SecurityUtils.get_password_hash("Vert!Soleil42")
        assert SecurityUtils.verify_password("Vert!Soleil42", hashed)
        assert not SecurityUtils.verify_password("vert!soleil42", hashed)

    def test_verify_against_malformed_hash(self):
        assert not SecurityUtils.verify_password("Vert!Soleil42", "not-a-hash")


class TestTokens:
    def test_access_token_claims(self):
        token = SecurityUtils.create_access_token(7, "awa@example.com")
        payload = SecurityUtils.decode_token(token, settings.JWT_ACCESS_SECRET, ACCESS_TOKEN_TYPE)

        assert payload["sub"] == "7"
        assert payload["email"] == "awa@example.com"
        assert payload["type"] == "access"
        assert payload["exp"] - payload["iat"] == settings.ACCESS_TOKEN_TTL_MIN * 60

    def test_refresh_token_is_not_an_access_token(self):
        token = SecurityUtils.create_refresh_token(7)
        assert SecurityUtils.decode_token(token, settings.JWT_ACCESS_SECRET, ACCESS_TOKEN_TYPE) is None
        assert SecurityUtils.decode_token(token, settings.JWT_REFRESH_SECRET, ACCESS_TOKEN_TYPE) is None
        assert SecurityUtils.decode_token(token, settings.JWT_REFRESH_SECRET, REFRESH_TOKEN_TYPE) is not None

    def test_expired_token_rejected(self):
        token = SecurityUtils.create_access_token(7, "awa@example.com", expires_delta=timedelta(seconds=-5))
        assert SecurityUtils.decode_token(token, settings.JWT_ACCESS_SECRET, ACCESS_TOKEN_TYPE) is None

    def test_tampered_token_rejected(self):
        token = SecurityUtils.create_access_token(7, "awa@example.com")
        assert SecurityUtils.decode_token(token + "x", settings.JWT_ACCESS_SECRET, ACCESS_TOKEN_TYPE) is None

    def test_refresh_tokens_are_unique(self):
        assert SecurityUtils.create_refresh_token(7) != SecurityUtils.create_refresh_token(7)

    def test_admin_tokens_are_random(self):
        first, second = SecurityUtils.generate_admin_token(), SecurityUtils.generate_admin_token()
        assert first != second
        assert len(first) >= 43
