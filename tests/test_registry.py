"""Tests for the backend registry."""

from unittest.mock import Mock

import pytest

from fuzzfleet.core.errors import (
    BackendRegistrationError,
    NotFoundError,
    UnknownBackendError,
)
from fuzzfleet.vm.registry import BackendRegistry


class TestBackendRegistry:
    """Tests for BackendRegistry."""

    def test_register_and_create(self):
        registry = BackendRegistry()
        inst = Mock()
        ctor = Mock(return_value=inst)
        registry.register("fake", ctor)

        result = registry.create("fake", "/tmp/w", frozenset({1}), 4000, 3, {"a": 1})

        assert result is inst
        ctor.assert_called_once_with("/tmp/w", frozenset({1}), 4000, 3, {"a": 1})

    def test_duplicate_registration(self):
        registry = BackendRegistry()
        registry.register("fake", Mock())
        with pytest.raises(BackendRegistrationError):
            registry.register("fake", Mock())

    def test_unknown_backend(self):
        registry = BackendRegistry()
        ctor = Mock()
        registry.register("fake", ctor)
        with pytest.raises(UnknownBackendError) as exc:
            registry.create("qemu", "/tmp/w", None, 4000, 0, {})
        assert exc.value.name == "qemu"
        ctor.assert_not_called()

    def test_name_lookup_is_exact(self):
        registry = BackendRegistry()
        registry.register("local", Mock())
        with pytest.raises(UnknownBackendError):
            registry.create("Local", "/tmp/w", None, 4000, 0, {})

    def test_constructor_error_passes_through(self):
        registry = BackendRegistry()
        err = NotFoundError("fuzzer binary 'x' does not exist")
        registry.register("fake", Mock(side_effect=err))
        with pytest.raises(NotFoundError) as exc:
            registry.create("fake", "/tmp/w", None, 4000, 0, {})
        assert exc.value is err

    def test_names(self):
        registry = BackendRegistry()
        registry.register("b", Mock())
        registry.register("a", Mock())
        assert registry.names() == ["a", "b"]
        assert "a" in registry
        assert "c" not in registry


class TestDefaultRegistry:
    """Tests for the package-level registry."""

    def test_local_backend_registered(self):
        from fuzzfleet.vm import default_registry
        from fuzzfleet.vm import local

        assert "local" in default_registry
        assert default_registry._ctors["local"] is local.ctor

    def test_local_cannot_be_registered_twice(self):
        from fuzzfleet.vm import register

        with pytest.raises(BackendRegistrationError):
            register("local", Mock())

    def test_create_unknown(self, tmp_path):
        from fuzzfleet.vm import create

        with pytest.raises(UnknownBackendError):
            create("no-such-backend", str(tmp_path / "w"), None, 4000, 0, {})
        assert not (tmp_path / "w").exists()
