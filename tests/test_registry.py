"""
Tests for the options registry.
"""

import pytest

from secure_options.core.exceptions import ArgumentInvalidError, SecureOptionsError
from secure_options.services.registry import OptionsRegistry, OptionsWrapper
from sample_settings import CacheOptions, MailContract


class TestOptionsRegistry:
    def test_first_registration_wins(self):
        registry = OptionsRegistry()
        first, second = CacheOptions(url="1"), CacheOptions(url="2")

        assert registry.try_add_singleton(CacheOptions, first) is True
        assert registry.try_add_singleton(CacheOptions, second) is False
        assert registry.get(CacheOptions).value is first

    def test_register_callback(self):
        registry = OptionsRegistry()
        registry.register(MailContract, CacheOptions())

        assert MailContract in registry
        assert CacheOptions not in registry
        assert len(registry) == 1
        assert list(registry) == [MailContract]

    def test_missing_registration(self):
        with pytest.raises(SecureOptionsError) as exc_info:
            OptionsRegistry().get(CacheOptions)
        assert exc_info.value.code == "NotRegistered"

    def test_none_arguments(self):
        registry = OptionsRegistry()
        with pytest.raises(ArgumentInvalidError):
            registry.try_add_singleton(CacheOptions, None)
        with pytest.raises(ArgumentInvalidError):
            registry.try_add_singleton(None, CacheOptions())


class TestOptionsWrapper:
    def test_value_is_read_only(self):
        wrapper = OptionsWrapper(CacheOptions())
        with pytest.raises(AttributeError):
            wrapper.value = CacheOptions()

    def test_repr(self):
        assert repr(OptionsWrapper(CacheOptions())) == "OptionsWrapper(CacheOptions)"
