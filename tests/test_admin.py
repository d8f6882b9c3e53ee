"""Tests for the admin capability gate."""

import hashlib

import pytest

from judging.errors import AdminAccessError
from judging.services.admin import AdminCapability, AdminGate

ADMIN_PASSPHRASE = "correct horse battery staple"
ADMIN_DIGEST = hashlib.sha256(ADMIN_PASSPHRASE.encode("utf-8")).hexdigest()


class TestAdminGate:
    """Passphrase check and capability lifecycle."""

    def test_unlock_issues_capability(self, gate: AdminGate) -> None:
        capability = gate.unlock(ADMIN_PASSPHRASE)
        gate.require(capability)

    def test_wrong_passphrase(self, gate: AdminGate) -> None:
        with pytest.raises(AdminAccessError):
            gate.unlock("admin123")

    def test_unconfigured_gate_stays_locked(self) -> None:
        gate = AdminGate(None)
        assert not gate.enabled
        with pytest.raises(AdminAccessError):
            gate.unlock(ADMIN_PASSPHRASE)

    def test_digest_is_case_insensitive(self) -> None:
        gate = AdminGate(ADMIN_DIGEST.upper())
        gate.require(gate.unlock(ADMIN_PASSPHRASE))

    def test_capabilities_are_per_gate(self, gate: AdminGate) -> None:
        other = AdminGate(ADMIN_DIGEST)
        with pytest.raises(AdminAccessError):
            other.require(gate.unlock(ADMIN_PASSPHRASE))

    def test_revoke(self, gate: AdminGate, capability: AdminCapability) -> None:
        gate.revoke(capability)
        with pytest.raises(AdminAccessError):
            gate.require(capability)

    def test_missing_capability(self, gate: AdminGate) -> None:
        with pytest.raises(AdminAccessError):
            gate.require(None)
