from __future__ import annotations

from typing import TYPE_CHECKING, Any

from ._hooks import check_hook


if TYPE_CHECKING:
    from ._hooks import Hook, HookMap
    from ._inject import Instance


def chain(*hook_maps: HookMap) -> dict[str, Hook]:
    """Combine hook maps by feeding the result of one hook into the next.

    For every field, the hooks found across ``hook_maps`` run in argument
    order: the first map's hook receives the built value, each following
    hook receives the previous hook's result. All of them receive the same
    instance as second argument.

    A field defined by a single map keeps that map's hook object as is.
    Fields no map defines are left out, so the factory applies identity.

    Example:
      factory(chain({"foo": lambda n, _: 2 * n}, {"foo": lambda n, _: n + 2}))
      # foo == 2 * raw + 2

    """
    result: dict[str, Hook] = {}
    for hooks in hook_maps:
        for name, hook in hooks.items():
            check_hook(name, hook)
            if hook is None:
                continue
            prev = result.get(name)
            result[name] = hook if prev is None else _compose(prev, hook)
    return result


def _compose(first: Hook, second: Hook) -> Hook:
    def composed(value: Any, instance: Instance) -> Any:
        return second(first(value, instance), instance)

    return composed
