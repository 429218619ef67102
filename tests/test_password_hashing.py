"""Tests for the bcrypt password hasher."""

from __future__ import annotations

import unittest

from mapshare.security import PasswordHasher, build_password_context


class PasswordHashingTests(unittest.TestCase):
    def setUp(self) -> None:
        self.hasher = PasswordHasher(build_password_context(rounds=4))

    def test_hash_and_verify(self) -> None:
        hashed = self.hasher.hash("hunter2")
        self.assertTrue(hashed.startswith("$2b$"))
        self.assertNotIn("hunter2", hashed)
        self.assertTrue(self.hasher.verify("hunter2", hashed))
        self.assertFalse(self.hasher.verify("incorrect", hashed))

    def test_each_hash_uses_a_fresh_salt(self) -> None:
        first = self.hasher.hash("same-password")
        second = self.hasher.hash("same-password")
        self.assertNotEqual(first, second)
        self.assertTrue(self.hasher.verify("same-password", first))
        self.assertTrue(self.hasher.verify("same-password", second))

    def test_empty_password_cannot_be_hashed(self) -> None:
        with self.assertRaises(ValueError):
            self.hasher.hash("")

    def test_malformed_or_missing_hash_never_verifies(self) -> None:
        self.assertFalse(self.hasher.verify("hunter2", "not-a-bcrypt-hash"))
        self.assertFalse(self.hasher.verify("hunter2", ""))
        self.assertFalse(self.hasher.verify("", self.hasher.hash("hunter2")))


if __name__ == "__main__":  # pragma: no cover
    unittest.main()
