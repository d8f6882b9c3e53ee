import hashlib
import hmac
import secrets
from typing import Optional, Set

from loguru import logger
from pydantic import BaseModel, ConfigDict

from judging.errors import AdminAccessError


class AdminCapability(BaseModel):
    """Proof that the admin passphrase was checked. Grants all mutations."""

    model_config = ConfigDict(frozen=True)

    token: str


class AdminGate:
    """Single shared-secret gate in front of every admin mutation.

    The passphrase itself is never configured, only its SHA-256 hex
    digest. There is no per-admin identity: one valid passphrase unlocks
    everything until the capability is revoked.
    """

    def __init__(self, passphrase_sha256: Optional[str]):
        self._digest = passphrase_sha256.lower() if passphrase_sha256 else None
        self._issued: Set[str] = set()

    @property
    def enabled(self) -> bool:
        return self._digest is not None

    def unlock(self, passphrase: str) -> AdminCapability:
        if not self._digest:
            raise AdminAccessError("Admin access is not configured.")
        candidate = hashlib.sha256(passphrase.encode("utf-8")).hexdigest()
        if not hmac.compare_digest(candidate, self._digest):
            logger.warning("Rejected admin unlock attempt with an invalid passphrase.")
            raise AdminAccessError("Invalid admin passphrase.")
        capability = AdminCapability(token=secrets.token_urlsafe(32))
        self._issued.add(capability.token)
        logger.info("Admin access granted.")
        return capability

    def revoke(self, capability: AdminCapability) -> None:
        self._issued.discard(capability.token)

    def require(self, capability: Optional[AdminCapability]) -> None:
        if capability is None or capability.token not in self._issued:
            raise AdminAccessError("This action requires admin access.")
