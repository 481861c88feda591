"""Tests for api.audit.hasher."""

from __future__ import annotations

import hashlib

import pytest

from api.audit.hasher import PatientHasher, derive_server_hash
from dka_common.errors import ConfigurationError


class TestDeriveServerHash:
    def test_matches_sha256_of_prehash_plus_pepper(self):
        expected = hashlib.sha256(b"abc123test-pepper").hexdigest()
        assert derive_server_hash("abc123", "test-pepper") == expected

    def test_deterministic(self, hasher: PatientHasher):
        assert hasher.derive("abc123") == hasher.derive("abc123")

    def test_distinct_prehashes_give_distinct_hashes(self, hasher: PatientHasher):
        samples = ["abc123", "abc124", "ABC123", "", "abc123 "]
        assert len({hasher.derive(s) for s in samples}) == len(samples)

    def test_pepper_changes_output(self):
        assert PatientHasher("pepper-a").derive("abc123") != PatientHasher("pepper-b").derive("abc123")

    def test_output_is_64_hex_chars(self, hasher: PatientHasher):
        digest = hasher.derive("anything")
        assert len(digest) == 64
        int(digest, 16)

    def test_non_ascii_prehash(self, hasher: PatientHasher):
        expected = hashlib.sha256("é中test-pepper".encode("utf-8")).hexdigest()
        assert hasher.derive("é中") == expected


class TestPatientHasherConstruction:
    def test_empty_pepper_rejected(self):
        with pytest.raises(ConfigurationError):
            PatientHasher("")

    def test_repr_hides_pepper(self, hasher: PatientHasher):
        assert "test-pepper" not in repr(hasher)


class TestMatches:
    def test_match(self, hasher: PatientHasher):
        stored = hasher.derive("abc123")
        assert hasher.matches("abc123", stored) is True

    def test_mismatch(self, hasher: PatientHasher):
        stored = hasher.derive("abc123")
        assert hasher.matches("wrong", stored) is False

    def test_prehash_is_not_the_stored_form(self, hasher: PatientHasher):
        # Resubmitting the stored value itself must not pass the gate.
        stored = hasher.derive("abc123")
        assert hasher.matches(stored, stored) is False

    def test_null_stored_hash_never_matches(self, hasher: PatientHasher):
        assert hasher.matches("abc123", None) is False
        assert hasher.matches("", None) is False

    def test_truncated_stored_hash_does_not_match(self, hasher: PatientHasher):
        stored = hasher.derive("abc123")
        assert hasher.matches("abc123", stored[:32]) is False

    def test_non_ascii_stored_hash_does_not_raise(self, hasher: PatientHasher):
        assert hasher.matches("abc123", "é" * 64) is False
