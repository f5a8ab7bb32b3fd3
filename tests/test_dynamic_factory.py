import sys
import unittest

import pytest
from assets import (
    AbstractService,
    ClassWithoutDependencies,
    FooBar,
    NotCallableFactory,
    ServiceOnlyBuiltByFactory,
)

from servicebind import CannotCreateError, DynamicFactory, ServiceManager, type_name


class TestDynamicFactory(unittest.TestCase):
    manager: ServiceManager
    factory: DynamicFactory

    def setUp(self):
        self.manager = ServiceManager()
        self.factory = DynamicFactory()

    def test_can_create(self):
        assert self.factory.can_create(self.manager, type_name(FooBar))
        assert self.factory.can_create(self.manager, type_name(ClassWithoutDependencies))
        assert not self.factory.can_create(self.manager, type_name(AbstractService))
        assert not self.factory.can_create(self.manager, "assets.DoesNotExist")

    def test_invoke_delegates_to_factory_found_by_name(self):
        obj = self.factory(self.manager, type_name(FooBar))

        assert isinstance(obj, FooBar)
        assert (obj.foo, obj.bar) == ("foo", "bar")

    def test_invoke_passes_service_id_to_factory(self):
        obj = self.factory(self.manager, type_name(ServiceOnlyBuiltByFactory))
        assert obj.token == type_name(ServiceOnlyBuiltByFactory)

    def test_invoke_constructs_class_without_factory(self):
        obj = self.factory(self.manager, type_name(ClassWithoutDependencies))
        assert isinstance(obj, ClassWithoutDependencies)

    def test_invoke_fails(self):
        service = type_name(AbstractService)
        with pytest.raises(CannotCreateError, match=f'Cannot create service "{service}".'):
            self.factory(self.manager, service)

    def test_factory_class_with_non_callable_instances_is_ignored(self):
        service = type_name(NotCallableFactory).removesuffix("Factory")
        assert not self.factory.can_create(self.manager, service)

        with pytest.raises(CannotCreateError, match=f'Cannot create service "{service}".'):
            self.factory(self.manager, service)

    def test_undotted_ids_are_not_imported(self):
        sys.modules.pop("this", None)

        assert not self.factory.can_create(self.manager, "this")
        assert "this" not in sys.modules
