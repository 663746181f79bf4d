"""Creation of objects by registered class name."""

from __future__ import annotations

from typing import Any, Callable, TypeVar

T = TypeVar("T")


class Factory:
    """A catalog of constructors addressed by class name."""

    def __init__(self) -> None:
        self._constructors: dict[str, Callable[[], Any]] = {}
        self._class_info: dict[str, dict[str, str]] = {}

    def create(self, name: str) -> Any:
        """Construct an object of the named class, or return None if it is not registered."""
        constructor = self._constructors.get(name)
        return constructor() if constructor is not None else None

    def add(self, class_name: str, constructor: Callable[[], Any]) -> None:
        """Register a constructor under a class name."""
        self._constructors[class_name] = constructor

    def merge(self, other: Factory) -> None:
        """Take over all classes and class information registered in another factory."""
        self._constructors.update(other._constructors)
        self._class_info.update({k: dict(v) for k, v in other._class_info.items()})

    def catalog(self) -> list[str]:
        """Return the registered class names in sorted order."""
        return sorted(self._constructors)

    def has(self, class_name: str) -> bool:
        """Tell whether a class name is registered."""
        return class_name in self._constructors

    def set_class_info(self, class_name: str, info: dict[str, Any]) -> None:
        """Associate key/value information with a class."""
        self._class_info[class_name] = {str(k): str(v) for k, v in info.items()}

    def class_info(self, class_name: str) -> dict[str, str]:
        """Return the information associated with a class (empty if none)."""
        return dict(self._class_info.get(class_name, {}))


_factories: dict[type, Factory] = {}


def factory_for(base: type) -> Factory:
    """Return the shared factory for a base class, creating it on first use."""
    return _factories.setdefault(base, Factory())


def register(base: type, name: str | None = None) -> Callable[[type[T]], type[T]]:
    """Class decorator registering a subclass of ``base`` in its factory, optionally under another name."""

    def decorator(cls: type[T]) -> type[T]:
        if not (isinstance(cls, type) and issubclass(cls, base)):
            raise TypeError(f"{cls!r} is not a subclass of {base.__name__}")
        factory_for(base).add(name or cls.__name__, cls)
        return cls

    return decorator