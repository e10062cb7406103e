"""Lazy, hookable dependency injection.

This package wires an object graph from a mapping of builders, one per named
service. Services are built on first access, memoized per instance, and can
be intercepted with hooks when an instance is created.

Exports:
- `inject`: Create a `Factory` from a mapping of field name to builder.
- `Factory`: Callable producing independent `Instance` objects, optionally
  with a map of hooks that transform built values.
- `Instance`: Lazily resolved object graph with read-only fields.
- `chain`: Combine several hook maps into one, applied in argument order.
- `ResolutionError`, `CyclicDependencyError`: Errors raised while resolving.
"""

from ._chain import chain
from ._hooks import Hook, HookMap, identity
from ._inject import Builder, Builders, CyclicDependencyError, Factory, Instance, ResolutionError, inject


__all__ = [
    "Builder",
    "Builders",
    "CyclicDependencyError",
    "Factory",
    "Hook",
    "HookMap",
    "Instance",
    "ResolutionError",
    "chain",
    "identity",
    "inject",
]
