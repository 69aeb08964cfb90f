"""Unit tests for core/registry.py and the check contract in core/contracts.py."""

import pytest

from core.contracts import AbstractCheck, SecurityCheck, is_security_check
from core.exceptions import CheckNotRegisteredError
from core.registry import CheckRegistry, default_registry
from tests.conftest import FakeRequest


class AlwaysAllow(AbstractCheck):
    def execute(self) -> bool:
        return True


class TestCheckRegistry:
    def test_register_and_resolve_class(self, registry):
        registry.register("allow", AlwaysAllow)
        request = FakeRequest("/admin")
        check = registry.resolve("allow", request)
        assert isinstance(check, AlwaysAllow)
        assert check.request is request

    def test_resolve_builds_a_new_instance_each_time(self, registry):
        registry.register("allow", AlwaysAllow)
        assert registry.resolve("allow") is not registry.resolve("allow")

    def test_decorator_registration(self, registry):
        @registry.register("decorated")
        class DecoratedCheck(AbstractCheck):
            def execute(self) -> bool:
                return False

        assert "decorated" in registry
        assert isinstance(registry.resolve("decorated"), DecoratedCheck)
        assert DecoratedCheck.__name__ == "DecoratedCheck"

    def test_reregistering_replaces_factory(self, registry):
        registry.register("check", AlwaysAllow)
        registry.register("check", lambda request: "replaced")
        assert registry.resolve("check") == "replaced"
        assert len(registry) == 1

    def test_unknown_identifier_raises(self, registry):
        with pytest.raises(CheckNotRegisteredError, match="nope"):
            registry.resolve("nope")

    def test_unhashable_identifier_raises_not_registered(self, registry):
        with pytest.raises(CheckNotRegisteredError):
            registry.resolve(["token"])
        assert ["token"] not in registry

    def test_identifiers_keep_registration_order(self, registry):
        for name in ("b", "a", "c"):
            registry.register(name, AlwaysAllow)
        assert registry.identifiers() == ["b", "a", "c"]

    def test_unregister(self, registry):
        registry.register("allow", AlwaysAllow)
        registry.unregister("allow")
        registry.unregister("never-registered")
        assert "allow" not in registry

    def test_default_registry_is_a_registry(self):
        assert isinstance(default_registry, CheckRegistry)


class TestCheckContract:
    def test_abstract_check_cannot_be_instantiated(self):
        with pytest.raises(TypeError):
            AbstractCheck()

    def test_abstract_check_name_is_class_name(self):
        assert AlwaysAllow().name == "AlwaysAllow"

    def test_duck_typed_check_satisfies_contract(self):
        class Duck:
            def execute(self):
                return True

        assert isinstance(Duck(), SecurityCheck)
        assert is_security_check(Duck())

    def test_objects_without_callable_execute_do_not(self):
        class Attr:
            execute = "yes"

        assert not is_security_check(object())
        assert not is_security_check(Attr())
        assert not is_security_check(None)
