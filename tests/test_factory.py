import pytest

from asl.factory import Factory, factory_for, register


def test_register_and_create():
    class Animal:
        pass

    @register(Animal)
    class Dog(Animal):
        pass

    factory = factory_for(Animal)
    assert isinstance(factory.create("Dog"), Dog)
    assert factory.has("Dog")


def test_register_under_other_name():
    class Shape:
        pass

    @register(Shape, "Round")
    class Circle(Shape):
        pass

    factory = factory_for(Shape)
    assert isinstance(factory.create("Round"), Circle)
    assert not factory.has("Circle")


def test_create_unknown_returns_none():
    factory = Factory()
    assert factory.create("Nothing") is None
    assert not factory.has("Nothing")


def test_catalog_is_sorted():
    factory = Factory()
    names = ["Zebra", "Ant", "Mole"]
    for n in names:
        factory.add(n, object)
    assert factory.catalog() == sorted(names)


def test_factory_for_is_shared_per_base():
    class A:
        pass

    class B:
        pass

    assert factory_for(A) is factory_for(A)
    assert factory_for(A) is not factory_for(B)


def test_register_rejects_non_subclass():
    class Base:
        pass

    with pytest.raises(TypeError):
        @register(Base)
        class Other:
            pass


def test_merge_takes_other_classes_and_info():
    main, plugin = Factory(), Factory()
    main.add("Local", list)
    plugin.add("Remote", dict)
    info = {"version": "2"}
    plugin.set_class_info("Remote", info)
    main.merge(plugin)
    assert main.catalog() == sorted(["Local", "Remote"])
    assert main.create("Remote") == dict()
    assert main.class_info("Remote") == info


def test_class_info_round_trip_and_copy():
    factory = Factory()
    info = {"author": "someone", "kind": "pet"}
    factory.set_class_info("Cat", info)
    got = factory.class_info("Cat")
    assert got == info
    got["kind"] = "changed"
    assert factory.class_info("Cat") == info


def test_class_info_missing_is_empty():
    assert Factory().class_info("Unknown") == {}


def test_each_create_gives_new_object():
    factory = Factory()
    factory.add("List", list)
    first, second = factory.create("List"), factory.create("List")
    assert first == second
    assert first is not second