"""Tests for password hashing and Basic header parsing."""

import base64

import pytest

from book_api.core.security import (
    BasicCredentials,
    get_password_context,
    hash_password,
    parse_basic_authorization,
    verify_password,
)


def _encode(raw: bytes) -> str:
    return base64.b64encode(raw).decode("ascii")


class TestPasswordHashing:
    def test_hash_is_not_plaintext(self):
        hashed = hash_password("secret")

        assert hashed != "secret"
        assert hashed.startswith("$pbkdf2-sha256$")

    def test_hash_is_salted(self):
        assert hash_password("secret") != hash_password("secret")

    def test_verify(self):
        hashed = hash_password("secret")

        assert verify_password("secret", hashed) is True
        assert verify_password("Secret", hashed) is False

    def test_unknown_hash_format_is_a_mismatch(self):
        assert verify_password("secret", "not-a-hash") is False

    def test_context_follows_schemes(self):
        context = get_password_context(["pbkdf2_sha256"])

        assert context is get_password_context(["pbkdf2_sha256"])
        assert verify_password("pw", context.hash("pw"), context)


class TestParseBasicAuthorization:
    def test_valid(self):
        header = "Basic " + _encode(b"user@gmail.com:123")

        assert parse_basic_authorization(header) == BasicCredentials("user@gmail.com", "123")

    def test_scheme_is_case_insensitive(self):
        assert parse_basic_authorization("basic " + _encode(b"a:b")) == BasicCredentials("a", "b")

    def test_password_keeps_later_colons(self):
        header = "Basic " + _encode(b"user:pa:ss")

        assert parse_basic_authorization(header) == BasicCredentials("user", "pa:ss")

    def test_empty_password(self):
        assert parse_basic_authorization("Basic " + _encode(b"user:")) == BasicCredentials(
            "user", ""
        )

    def test_utf8(self):
        header = "Basic " + _encode("jürgen:pässword".encode())

        assert parse_basic_authorization(header) == BasicCredentials("jürgen", "pässword")

    @pytest.mark.parametrize(
        "header",
        [
            None,
            "",
            "Basic",
            "Basic   ",
            "Bearer abc.def.ghi",
            "Basic %%%",
            "Basic " + _encode(b"missing-separator"),
            "Basic " + _encode(b"\xff\xfe:\xfa"),
        ],
    )
    def test_invalid(self, header):
        assert parse_basic_authorization(header) is None
