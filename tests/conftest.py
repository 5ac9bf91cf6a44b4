"""
Shared fixtures for the secure-options tests.
"""

import base64
from typing import List, Optional, Tuple

import pytest
from loguru import logger as loguru_logger

from secure_options.models.protection import (
    DEFAULT_PARAMETERS,
    ProtectionParameters,
)
from secure_options.protection.protectors import AesGcmProtector, FernetProtector

TEST_SECRET = bytes(range(32))


class RecordingProtector:
    """Reversible fake protector that records every call."""

    def __init__(self) -> None:
        self.calls: List[Tuple[str, bytes, ProtectionParameters]] = []

    def protect(self, data: bytes, parameters: ProtectionParameters) -> bytes:
        self.calls.append(("protect", data, parameters))
        return b"sealed:" + data

    def unprotect(self, data: bytes, parameters: ProtectionParameters) -> bytes:
        self.calls.append(("unprotect", data, parameters))
        if not data.startswith(b"sealed:"):
            raise ValueError("not sealed")
        return data[len(b"sealed:") :]


@pytest.fixture
def protector() -> AesGcmProtector:
    return AesGcmProtector(TEST_SECRET, machine_id="test-machine", user="tester")


@pytest.fixture
def fernet_protector() -> FernetProtector:
    return FernetProtector(FernetProtector.generate_secret())


@pytest.fixture
def recording_protector() -> RecordingProtector:
    return RecordingProtector()


@pytest.fixture
def key_env(monkeypatch) -> str:
    """SECURE_OPTIONS_KEY set to the test secret."""
    monkeypatch.setenv("SECURE_OPTIONS_KEY", base64.b64encode(TEST_SECRET).decode("ascii"))
    return "SECURE_OPTIONS_KEY"


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch, tmp_path):
    """Run every test from an empty directory without settings overrides."""
    monkeypatch.chdir(tmp_path)
    for name in (
        "SECURE_OPTIONS_SCOPE",
        "SECURE_OPTIONS_SCHEME",
        "SECURE_OPTIONS_KEY_ENV",
        "SECURE_OPTIONS_LOG_LEVEL",
        "SECURE_OPTIONS_DEBUG",
    ):
        monkeypatch.delenv(name, raising=False)
    yield
    # The CLI enables library logging; keep it silent between tests
    loguru_logger.disable("secure_options")


def seal(
    protector,
    value: str,
    parameters: Optional[ProtectionParameters] = None,
) -> str:
    """Protect ``value`` the way the walker stores it (base64 text)."""
    effective = ProtectionParameters.resolve(parameters, None, DEFAULT_PARAMETERS)
    return base64.b64encode(protector.protect(value.encode("utf-8"), effective)).decode("ascii")


@pytest.fixture
def sealer():
    return seal
