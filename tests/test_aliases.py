import unittest

import pytest
from assets import ClassWithoutDependencies

from servicebind import FactoryNotFoundError, ServiceCreationError, ServiceManager, type_name


class TestAliases(unittest.TestCase):
    manager: ServiceManager

    def setUp(self):
        self.manager = ServiceManager()

    def test_alias_resolves_to_service(self):
        self.manager.add_service("config", {"debug": True})
        self.manager.add_alias("settings", "config")

        assert self.manager.get("settings") is self.manager.get("config")
        assert self.manager.has("settings")

    def test_alias_shares_cached_instance_with_target(self):
        self.manager.add_invokable(ClassWithoutDependencies)
        self.manager.add_alias("deps", type_name(ClassWithoutDependencies))

        assert self.manager.get("deps") is self.manager.get(type_name(ClassWithoutDependencies))

    def test_alias_target_is_not_checked_on_registration(self):
        self.manager.add_alias("missing", "nowhere")

        assert not self.manager.has("missing")

    def test_failed_creation_names_the_alias(self):
        self.manager.add_alias("missing", "nowhere")

        with pytest.raises(ServiceCreationError, match='The service "missing" could not be created.') as ctx:
            self.manager.create_service("missing")

        assert isinstance(ctx.value.__cause__, FactoryNotFoundError)
        assert "nowhere" in str(ctx.value.__cause__)

    def test_alias_is_resolved_one_hop_only(self):
        self.manager.add_service("c", 1)
        self.manager.add_alias("b", "c")
        self.manager.add_alias("a", "b")

        assert self.manager.get("b") == 1
        assert not self.manager.has("a")
        with pytest.raises(ServiceCreationError):
            self.manager.get("a")

    def test_remove_service_by_alias_removes_alias_and_target(self):
        assert not self.manager.has("b")

        self.manager.add_service("b", "value")
        self.manager.add_alias("a", "b")
        assert self.manager.get("a") == "value"

        self.manager.remove_service("a")

        assert not self.manager.has("a")
        assert not self.manager.has("b")

    def test_remove_target_keeps_alias(self):
        self.manager.add_service("b", "value")
        self.manager.add_alias("a", "b")

        self.manager.remove_service("b")
        assert not self.manager.has("a")

        self.manager.add_service("b", "other")
        assert self.manager.get("a") == "other"
