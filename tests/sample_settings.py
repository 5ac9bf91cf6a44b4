"""
Settings types shared by the tests and the CLI tests (imported as
``sample_settings:MailOptions``).
"""

from dataclasses import dataclass, field
from typing import Annotated, Optional

from pydantic import Field, field_validator

from secure_options.models import OptionsBase, Plain, Protected, ProtectedStr, ProtectionScope


class SmtpOptions(OptionsBase):
    host: str
    port: int = 25
    password: ProtectedStr = None


class MailOptions(OptionsBase):
    sender: str
    smtp: Optional[SmtpOptions] = None
    api_key: Annotated[Optional[str], Protected(entropy=b"mail")] = None
    signature: Optional[str] = None
    note: Annotated[Optional[str], Plain()] = None

    @field_validator("sender")
    @classmethod
    def sender_has_at(cls, value: str) -> str:
        if "@" not in value:
            raise ValueError("sender must be an e-mail address")
        return value


class UserScopedOptions(OptionsBase):
    token: Annotated[Optional[str], Protected(scope=ProtectionScope.CURRENT_USER)] = None


class AliasedOptions(OptionsBase):
    secret_value: ProtectedStr = Field(default=None, alias="Secret")


class MailContract:
    """Service type MailOptions can be registered under."""


@dataclass
class CacheOptions:
    url: Optional[str] = None
    token: Annotated[Optional[str], Protected()] = None


@dataclass
class TwoSecrets:
    first: Annotated[Optional[str], Protected()] = None
    second: Annotated[Optional[str], Protected()] = None


@dataclass(frozen=True)
class FrozenOptions:
    token: Annotated[Optional[str], Protected()] = None


@dataclass
class DatabaseOptions:
    connection_string: ProtectedStr = None
    pool_size: int = 5
    cache: CacheOptions = field(default_factory=CacheOptions)


class LegacyOptions:
    """Plain class, walkable only through an explicit field table."""

    def __init__(self) -> None:
        self.name: Optional[str] = None
        self.secret: Optional[str] = None


@dataclass
class LegacyHolder:
    legacy: Optional[LegacyOptions] = None


class NeedsArguments:
    def __init__(self, value: str) -> None:
        self.value = value
