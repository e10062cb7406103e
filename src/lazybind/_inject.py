from __future__ import annotations

import copy
import logging
import threading
from collections.abc import Mapping
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, Callable

from ._hooks import check_hook, identity


logger = logging.getLogger(__name__)

if TYPE_CHECKING:
    from collections.abc import Iterator, KeysView

    from ._hooks import Hook, HookMap


# (instance) -> raw field value
Builder = Callable[["Instance"], Any]
Builders = Mapping[str, Builder]

_MISSING = object()


class ResolutionError(RuntimeError):
    pass


class CyclicDependencyError(ResolutionError):
    def __init__(self, path: tuple[str, ...]) -> None:
        self.path = path
        super().__init__(f"Cyclic dependency detected: {' -> '.join(path)}")


class Instance:
    """One lazily resolved object graph, produced by a `Factory` call.

    Fields are read as attributes or items. The first read of a field calls
    its builder with this instance, passes the result through the field's
    hook and memoizes the outcome. A builder or hook that raises leaves the
    field unresolved, so the next read tries again.

    Unknown names raise `AttributeError` or `KeyError`; use `get` to read a
    field that may be absent, which returns a default instead.

    Enumeration (`iter`, `len`, `keys`, `in`) never resolves anything;
    `dict(instance)` resolves every field. `copy.copy` returns an instance
    sharing builders and hooks that keeps the values resolved so far.
    """

    __slots__ = ("_builders", "_hooks", "_lock", "_resolving", "_values")

    def __init__(self, builders: Mapping[str, Builder], hooks: Mapping[str, Hook]) -> None:
        # Bypass __setattr__, which rejects all writes.
        object.__setattr__(self, "_builders", builders)
        object.__setattr__(self, "_hooks", hooks)
        object.__setattr__(self, "_values", {})
        object.__setattr__(self, "_resolving", [])
        object.__setattr__(self, "_lock", threading.RLock())

    def __getattr__(self, name: str) -> Any:
        # Only reached when regular lookup fails, i.e. for fields and unknown names.
        if name.startswith("_") or name not in self._builders:
            msg = f"{type(self).__name__!r} object has no field {name!r}"
            raise AttributeError(msg)
        return self._resolve(name)

    def __getitem__(self, name: str) -> Any:
        if name not in self._builders:
            raise KeyError(name)
        return self._resolve(name)

    def get(self, name: str, default: Any = None) -> Any:
        """Return the field value, or `default` when no builder exists for `name`."""
        if name not in self._builders:
            return default
        return self._resolve(name)

    def keys(self) -> KeysView[str]:
        return self._builders.keys()

    def is_resolved(self, name: str) -> bool:
        if name not in self._builders:
            raise KeyError(name)
        return name in self._values

    def __iter__(self) -> Iterator[str]:
        return iter(self._builders)

    def __len__(self) -> int:
        return len(self._builders)

    def __contains__(self, name: object) -> bool:
        return name in self._builders

    def __dir__(self) -> list[str]:
        return [*super().__dir__(), *self._builders]

    def __eq__(self, other: object) -> bool:
        if other is self:
            return True
        if isinstance(other, (Instance, Mapping)):
            return dict(self) == dict(other)
        return NotImplemented

    __hash__ = None  # type: ignore[assignment]

    def __setattr__(self, name: str, value: Any) -> None:
        msg = f"Cannot set {name!r}: instance fields are read-only"
        raise AttributeError(msg)

    def __delattr__(self, name: str) -> None:
        msg = f"Cannot delete {name!r}: instance fields are read-only"
        raise AttributeError(msg)

    def __repr__(self) -> str:
        parts = [
            f"{name}={self._values[name]!r}" if name in self._values else f"{name}=<unresolved>"
            for name in self._builders
        ]
        return f"{type(self).__name__}({', '.join(parts)})"

    def __copy__(self) -> Instance:
        copied = type(self)(self._builders, self._hooks)
        with self._lock:
            copied._values.update(self._values)  # noqa: SLF001
        return copied

    def __deepcopy__(self, memo: dict[int, Any]) -> Instance:
        copied = type(self)(self._builders, self._hooks)
        memo[id(self)] = copied
        with self._lock:
            for name, value in self._values.items():
                copied._values[name] = copy.deepcopy(value, memo)  # noqa: SLF001
        return copied

    def _resolve(self, name: str) -> Any:
        with self._lock:
            value = self._values.get(name, _MISSING)
            if value is not _MISSING:
                return value

            if name in self._resolving:
                path = (*self._resolving[self._resolving.index(name) :], name)
                logger.warning("Cyclic dependency detected: %s", " -> ".join(path))
                raise CyclicDependencyError(path)

            self._resolving.append(name)
            try:
                raw = self._builders[name](self)
                value = self._hooks.get(name, identity)(raw, self)
            except Exception:
                logger.debug("Resolving field %r failed", name)
                raise
            finally:
                self._resolving.pop()

            self._values[name] = value
            logger.debug("Resolved field %r", name)
            return value


# Field names that would be shadowed by Instance attributes.
_RESERVED = frozenset(name for name in dir(Instance) if not name.startswith("_"))


class Factory:
    """Create `Instance` objects from a fixed set of builders.

    Each call returns an independent instance with its own memoized values;
    all instances share the builders.
    """

    def __init__(self, builders: Builders) -> None:
        self._validate_builders(builders)
        self._builders: Mapping[str, Builder] = MappingProxyType(dict(builders))

    @property
    def builders(self) -> Mapping[str, Builder]:
        return self._builders

    @property
    def fields(self) -> tuple[str, ...]:
        return tuple(self._builders)

    def __call__(self, hooks: HookMap | None = None) -> Instance:
        """Create a new instance, installing the given partial hooks.

        Example:
          factory = inject({"foo": lambda _: 3})
          factory({"foo": lambda n, _: n * 2}).foo  # 6

        """
        installed: dict[str, Hook] = {}
        for name, hook in (hooks or {}).items():
            check_hook(name, hook)
            if name not in self._builders:
                logger.debug("Ignoring hook for unknown field %r", name)
                continue
            if hook is not None:
                installed[name] = hook
        return Instance(self._builders, MappingProxyType(installed))

    def __repr__(self) -> str:
        return f"{type(self).__name__}(fields={self.fields!r})"

    def _validate_builders(self, builders: Builders) -> None:
        if not isinstance(builders, Mapping):
            msg = f"Builders must be a mapping, got {type(builders).__name__}"
            raise TypeError(msg)

        if not builders:
            msg = "At least one builder must be provided."
            raise ValueError(msg)

        for name, build in builders.items():
            if not isinstance(name, str):
                msg = f"Field name {name!r} must be a string"
                raise ValueError(msg)
            if name.startswith("_") or name in _RESERVED:
                msg = f"Field name {name!r} is reserved"
                raise ValueError(msg)
            if not callable(build):
                msg = f"Builder for field {name!r} must be callable, got {type(build).__name__}"
                raise TypeError(msg)


def inject(builders: Builders) -> Factory:
    """Create a factory for instances of a service graph.

    Every builder receives the instance being built and returns the value
    of its field; reading other fields from that instance wires in the
    dependencies. Nothing is built until a field is read.

    Example:
      factory = inject({
          "foo": lambda _: 3,
          "bar": lambda self: self.foo * 2,
      })
      factory().bar  # 6

    """
    factory = Factory(builders)
    logger.debug("Created factory for fields: %s", ", ".join(factory.fields))
    return factory
