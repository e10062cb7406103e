from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any, Callable, Optional


if TYPE_CHECKING:
    from ._inject import Instance


# (current_value, instance) -> new_value
Hook = Callable[[Any, "Instance"], Any]

# Partial maps are legal; a missing or None entry means identity.
HookMap = Mapping[str, Optional[Hook]]


def identity(value: Any, instance: Instance) -> Any:  # noqa: ARG001
    return value


def check_hook(name: str, hook: object) -> None:
    if hook is not None and not callable(hook):
        msg = f"Hook for field {name!r} must be callable, got {type(hook).__name__}"
        raise TypeError(msg)
