"""
Tests for the graph walker: round trips, parameters and failure handling.
"""

import base64

import pytest

from secure_options.core.exceptions import ArgumentInvalidError, ProtectionError
from secure_options.models.descriptors import FieldDescriptor
from secure_options.models.protection import (
    DEFAULT_ENTROPY,
    ProtectionParameters,
    ProtectionScope,
)
from secure_options.protection.classifier import FieldClassifier
from secure_options.protection.walker import (
    GraphWalker,
    WalkDirection,
    decrypt_properties,
    encrypt_properties,
)
from sample_settings import (
    CacheOptions,
    DatabaseOptions,
    LegacyHolder,
    LegacyOptions,
    MailOptions,
    SmtpOptions,
    TwoSecrets,
    UserScopedOptions,
)


def make_mail():
    return MailOptions.model_construct(
        sender="ops@example.com",
        api_key="key-123",
        signature="Regards",
        note="plain note",
        smtp=SmtpOptions.model_construct(host="smtp.example.com", password="hunter2"),
    )


class TestRoundTrip:
    def test_encrypt_then_decrypt_restores_values(self, protector):
        options = make_mail()

        encrypt_properties(options, protector)
        assert options.api_key != "key-123"
        assert options.smtp.password != "hunter2"
        # Stored as base64 text
        base64.b64decode(options.api_key, validate=True)

        decrypt_properties(options, protector)
        assert options.api_key == "key-123"
        assert options.smtp.password == "hunter2"

    def test_untagged_fields_are_untouched(self, protector):
        options = make_mail()
        encrypt_properties(options, protector)

        assert options.sender == "ops@example.com"
        assert options.signature == "Regards"
        assert options.note == "plain note"
        assert options.smtp.host == "smtp.example.com"

    def test_nested_fields_are_processed_first(self, protector):
        result = encrypt_properties(make_mail(), protector)

        assert result.direction is WalkDirection.ENCRYPT
        assert result.transformed == ["smtp.password", "api_key"]

    def test_dataclass_graph(self, protector):
        options = DatabaseOptions(connection_string="Server=db;Password=x")
        options.cache.token = "cache-token"

        result = encrypt_properties(options, protector)
        assert result.transformed == ["cache.token", "connection_string"]

        decrypt_properties(options, protector)
        assert options.connection_string == "Server=db;Password=x"
        assert options.cache.token == "cache-token"

    def test_non_ascii_values(self, protector):
        options = CacheOptions(token="contraseña-🔑")
        encrypt_properties(options, protector)
        decrypt_properties(options, protector)
        assert options.token == "contraseña-🔑"

    def test_fernet_ignores_parameters(self, fernet_protector):
        options = CacheOptions(token="secret")
        encrypt_properties(options, fernet_protector, ProtectionParameters(entropy=b"one"))
        decrypt_properties(options, fernet_protector, ProtectionParameters(entropy=b"two"))
        assert options.token == "secret"


class TestEmptyValues:
    def test_empty_and_unset_values_are_skipped(self, recording_protector):
        options = TwoSecrets(first="", second=None)

        result = encrypt_properties(options, recording_protector)

        assert options.first == ""
        assert options.second is None
        assert result.transformed == []
        assert result.skipped == ["first", "second"]
        assert recording_protector.calls == []

    def test_none_nested_object_is_skipped(self, recording_protector):
        options = MailOptions.model_construct(sender="a@b", smtp=None, api_key="k")

        result = encrypt_properties(options, recording_protector)

        assert result.transformed == ["api_key"]


class TestParameters:
    def test_default_entropy_is_reproducible(self, protector):
        options = CacheOptions(token="secret")
        encrypt_properties(options, protector)

        decrypt_properties(options, protector, ProtectionParameters(entropy=DEFAULT_ENTROPY))
        assert options.token == "secret"

    def test_empty_entropy_counts_as_absent(self, protector):
        options = CacheOptions(token="secret")
        encrypt_properties(options, protector, ProtectionParameters(entropy=b""))

        decrypt_properties(options, protector)
        assert options.token == "secret"

    def test_explicit_entropy_against_default_fails(self, protector):
        options = CacheOptions(token="secret")
        encrypt_properties(options, protector, ProtectionParameters(entropy=b"xyz"))

        with pytest.raises(ProtectionError) as exc_info:
            decrypt_properties(options, protector)

        error = exc_info.value
        assert error.field_name == "token"
        assert error.owner_type == "CacheOptions"
        assert error.is_parameter_mismatch()

    def test_default_entropy_against_explicit_fails(self, protector):
        options = CacheOptions(token="secret")
        encrypt_properties(options, protector)

        with pytest.raises(ProtectionError) as exc_info:
            decrypt_properties(options, protector, ProtectionParameters(entropy=b"\x01\x02\x03"))

        error = exc_info.value
        assert error.field_name == "token"
        assert error.owner_type == "CacheOptions"
        assert error.is_parameter_mismatch()

    def test_field_entropy_is_used(self, recording_protector):
        options = MailOptions.model_construct(sender="a@b", api_key="k")
        encrypt_properties(options, recording_protector)

        _, _, parameters = recording_protector.calls[0]
        assert parameters.entropy == b"mail"
        assert parameters.scope is ProtectionScope.LOCAL_MACHINE

    def test_call_site_overrides_field_marker(self, recording_protector):
        options = MailOptions.model_construct(sender="a@b", api_key="k")
        encrypt_properties(options, recording_protector, ProtectionParameters(entropy=b"site"))

        _, _, parameters = recording_protector.calls[0]
        assert parameters.entropy == b"site"

    def test_parameters_resolve_per_field(self, recording_protector):
        options = MailOptions.model_construct(
            sender="a@b",
            api_key="k",
            smtp=SmtpOptions.model_construct(host="h", password="p"),
        )
        encrypt_properties(options, recording_protector)

        entropies = [call[2].entropy for call in recording_protector.calls]
        # smtp.password has no marker entropy, api_key has b"mail"
        assert entropies == [DEFAULT_ENTROPY, b"mail"]

    def test_scope_mismatch_fails(self, protector):
        options = UserScopedOptions.model_construct(token="t")
        encrypt_properties(options, protector)

        with pytest.raises(ProtectionError):
            decrypt_properties(
                options, protector, ProtectionParameters(scope=ProtectionScope.LOCAL_MACHINE)
            )


class TestFailures:
    def test_invalid_base64_is_wrapped(self, protector):
        options = CacheOptions(token="not base64!")

        with pytest.raises(ProtectionError) as exc_info:
            decrypt_properties(options, protector)

        error = exc_info.value
        assert "Failed to decrypt field 'token' on 'CacheOptions'" in str(error)
        assert error.cause is not None
        assert error.context["path"] == "token"

    def test_fail_fast_keeps_earlier_fields(self, protector, sealer):
        options = TwoSecrets(first=sealer(protector, "one"), second="garbage!")

        with pytest.raises(ProtectionError) as exc_info:
            decrypt_properties(options, protector)

        assert exc_info.value.field_name == "second"
        assert options.first == "one"
        assert options.second == "garbage!"

    def test_nested_failure_is_not_wrapped_twice(self, protector):
        options = MailOptions.model_construct(
            sender="a@b", smtp=SmtpOptions.model_construct(host="h", password="garbage!")
        )

        with pytest.raises(ProtectionError) as exc_info:
            decrypt_properties(options, protector)

        error = exc_info.value
        assert error.field_name == "password"
        assert error.owner_type == "SmtpOptions"
        assert error.context["path"] == "smtp.password"
        assert not isinstance(error.cause, ProtectionError)

    def test_protector_failure_is_wrapped(self, recording_protector):
        options = CacheOptions(token=base64.b64encode(b"plain").decode("ascii"))

        with pytest.raises(ProtectionError) as exc_info:
            decrypt_properties(options, recording_protector)

        assert isinstance(exc_info.value.cause, ValueError)

    def test_none_arguments(self, protector):
        with pytest.raises(ArgumentInvalidError) as exc_info:
            encrypt_properties(None, protector)
        assert exc_info.value.argument == "options"

        with pytest.raises(ArgumentInvalidError) as exc_info:
            encrypt_properties(CacheOptions(), None)
        assert exc_info.value.argument == "protector"


class TestRegisteredTypes:
    def test_walks_registered_table(self, protector):
        classifier = FieldClassifier()
        classifier.register(
            LegacyOptions, [FieldDescriptor.scalar("name"), FieldDescriptor.protected("secret")]
        )
        walker = GraphWalker(classifier)

        holder = LegacyHolder(legacy=LegacyOptions())
        holder.legacy.name = "legacy"
        holder.legacy.secret = "s3cret"

        result = walker.walk(holder, WalkDirection.ENCRYPT, protector)
        assert result.transformed == ["legacy.secret"]
        assert holder.legacy.name == "legacy"

        walker.walk(holder, "decrypt", protector)
        assert holder.legacy.secret == "s3cret"
