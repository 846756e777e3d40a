"""Tests for OpenCart password hashing."""

import hashlib

import bcrypt

from storefront.accounts.passwords import check_password, hash_password, make_salt, set_password
from storefront.opencart.models import Customer


def sha1(value):
    return hashlib.sha1(value.encode()).hexdigest()


class TestHashPassword:
    """Tests for the OpenCart 3 storefront hash."""

    def test_matches_opencart_formula(self):
        """sha1(salt + sha1(salt + sha1(password)))."""
        expected = sha1("salt12345" + sha1("salt12345" + sha1("secret123")))

        assert hash_password("secret123", "salt12345") == expected

    def test_salt_is_nine_characters(self):
        """Salts fit the oc_customer.salt column."""
        salt = make_salt()

        assert len(salt) == 9
        assert salt.isalnum()


class TestCheckPassword:
    """Tests for verifying stored hashes."""

    def test_accepts_opencart_hash(self):
        stored = hash_password("secret123", "abc")

        assert check_password("secret123", stored, "abc")
        assert not check_password("wrong", stored, "abc")

    def test_accepts_two_round_hash(self):
        """Hashes written by older mobile API builds still verify."""
        stored = sha1("abc" + sha1("abc" + "secret123"))

        assert check_password("secret123", stored, "abc")

    def test_accepts_bcrypt_hash(self):
        """OpenCart 4 bcrypt hashes verify without a salt."""
        stored = bcrypt.hashpw(b"secret123", bcrypt.gensalt(rounds=4)).decode()

        assert check_password("secret123", stored)
        assert not check_password("wrong", stored)

    def test_rejects_empty_values(self):
        assert not check_password("", hash_password("", "abc"), "abc")
        assert not check_password("secret123", "", "abc")


class TestSetPassword:
    def test_generates_salt_when_missing(self):
        """A customer without a salt gets one before hashing."""
        customer = Customer(salt="")

        set_password(customer, "secret123")

        assert len(customer.salt) == 9
        assert customer.password == hash_password("secret123", customer.salt)
