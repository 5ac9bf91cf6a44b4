"""
Protector adapters.

The walker only sees the ``Protector`` protocol; the concrete schemes here
wrap the ``cryptography`` package and never expose key material.
"""

import base64
import getpass
import os
import platform
from pathlib import Path
from typing import Optional, Protocol, runtime_checkable

from cryptography.exceptions import InvalidTag
from cryptography.fernet import Fernet, InvalidToken
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.ciphers.aead import AESGCM
from cryptography.hazmat.primitives.kdf.hkdf import HKDF

from secure_options.core.exceptions import ConfigurationError, ProtectionError
from secure_options.core.logging import logger
from secure_options.models.protection import (
    DEFAULT_PARAMETERS,
    ProtectionParameters,
    ProtectionScope,
)


@runtime_checkable
class Protector(Protocol):
    """Byte-level protect/unprotect capability used by the walker."""

    def protect(self, data: bytes, parameters: ProtectionParameters) -> bytes:
        ...  # pragma: no cover

    def unprotect(self, data: bytes, parameters: ProtectionParameters) -> bytes:
        ...  # pragma: no cover


def _machine_id() -> str:
    """Stable machine identity: /etc/machine-id when present, else the host name."""
    for candidate in (Path("/etc/machine-id"), Path("/var/lib/dbus/machine-id")):
        try:
            value = candidate.read_text(encoding="utf-8").strip()
        except OSError:
            continue
        if value:
            return value
    return platform.node()


class AesGcmProtector:
    """
    AES-256-GCM protector with scoped keys.

    Characteristics:
    - One key per scope, derived with HKDF-SHA256 from the secret and the
      scope identity (machine id, or machine id plus user name)
    - Entropy is the AEAD associated data: wrong entropy or scope fails
      authentication instead of returning garbage
    - Token layout: version byte | 12-byte nonce | ciphertext + tag
    """

    VERSION = b"\x01"
    NONCE_SIZE = 12
    MIN_SECRET_SIZE = 16

    def __init__(
        self,
        secret: bytes,
        machine_id: Optional[str] = None,
        user: Optional[str] = None,
    ) -> None:
        if not secret or len(secret) < self.MIN_SECRET_SIZE:
            raise ConfigurationError(
                f"Protector secret must be at least {self.MIN_SECRET_SIZE} bytes"
            )
        self._secret = secret
        self._machine_id = machine_id or _machine_id()
        self._user = user

    @classmethod
    def from_environment(cls, variable: str = "SECURE_OPTIONS_KEY", **kwargs) -> "AesGcmProtector":
        """Build from a base64 secret stored in an environment variable."""
        encoded = os.getenv(variable)
        if not encoded:
            raise ConfigurationError(
                f"Environment variable {variable} is not set",
                context={"variable": variable},
            )
        try:
            secret = base64.b64decode(encoded, validate=True)
        except ValueError as e:
            raise ConfigurationError(
                f"Environment variable {variable} is not valid base64",
                context={"variable": variable},
                cause=e,
            ) from e
        return cls(secret, **kwargs)

    @staticmethod
    def generate_secret() -> str:
        """New random 256-bit secret, base64 encoded."""
        return base64.b64encode(AESGCM.generate_key(bit_length=256)).decode("ascii")

    def _scope_identity(self, scope: ProtectionScope) -> str:
        if scope is ProtectionScope.CURRENT_USER:
            return f"{self._machine_id}/{self._user or getpass.getuser()}"
        return self._machine_id

    def _key(self, scope: ProtectionScope) -> bytes:
        hkdf = HKDF(
            algorithm=hashes.SHA256(),
            length=32,
            salt=b"secure-options",
            info=f"{scope.value}:{self._scope_identity(scope)}".encode("utf-8"),
        )
        return hkdf.derive(self._secret)

    def _resolve(self, parameters: Optional[ProtectionParameters]) -> ProtectionParameters:
        return ProtectionParameters.resolve(parameters, None, DEFAULT_PARAMETERS)

    def protect(self, data: bytes, parameters: ProtectionParameters) -> bytes:
        params = self._resolve(parameters)
        nonce = os.urandom(self.NONCE_SIZE)
        cipher = AESGCM(self._key(params.scope))
        return self.VERSION + nonce + cipher.encrypt(nonce, data, params.entropy)

    def unprotect(self, data: bytes, parameters: ProtectionParameters) -> bytes:
        params = self._resolve(parameters)
        if len(data) <= 1 + self.NONCE_SIZE or data[:1] != self.VERSION:
            raise ProtectionError("Protected data is malformed or has an unknown version")
        nonce = data[1 : 1 + self.NONCE_SIZE]
        cipher = AESGCM(self._key(params.scope))
        try:
            return cipher.decrypt(nonce, data[1 + self.NONCE_SIZE :], params.entropy)
        except InvalidTag as e:
            raise ProtectionError(
                "Protected data could not be authenticated (wrong key, scope or entropy)",
                cause=e,
            ) from e


class FernetProtector:
    """
    Purpose-bound Fernet protector.

    Ignores entropy and scope: the key alone decides who can unprotect.
    Useful when protected values travel between machines.
    """

    def __init__(self, key: bytes | str) -> None:
        try:
            self._fernet = Fernet(key)
        except (ValueError, TypeError) as e:
            raise ConfigurationError("Invalid Fernet key", cause=e) from e

    @classmethod
    def from_environment(cls, variable: str = "SECURE_OPTIONS_KEY") -> "FernetProtector":
        key = os.getenv(variable)
        if not key:
            raise ConfigurationError(
                f"Environment variable {variable} is not set",
                context={"variable": variable},
            )
        return cls(key)

    @staticmethod
    def generate_secret() -> str:
        return Fernet.generate_key().decode("ascii")

    def protect(self, data: bytes, parameters: ProtectionParameters) -> bytes:
        return self._fernet.encrypt(data)

    def unprotect(self, data: bytes, parameters: ProtectionParameters) -> bytes:
        try:
            return self._fernet.decrypt(data)
        except InvalidToken as e:
            raise ProtectionError("Protected data is not a valid token for this key", cause=e) from e


def create_protector(
    scheme: str = "aesgcm", key_env: str = "SECURE_OPTIONS_KEY", **kwargs
) -> Protector:
    """Factory used by the CLI: build the protector for ``scheme`` from ``key_env``."""
    if scheme == "aesgcm":
        protector: Protector = AesGcmProtector.from_environment(key_env, **kwargs)
    elif scheme == "fernet":
        protector = FernetProtector.from_environment(key_env)
    else:
        raise ConfigurationError(f"Unknown protector scheme: {scheme}")
    logger.debug("Protector created", scheme=scheme, key_env=key_env)
    return protector
