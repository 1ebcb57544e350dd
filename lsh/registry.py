"""Immutable name -> handler maps used for builtins, producers and filters."""

from types import MappingProxyType
from typing import Callable, Generic, Iterator, List, Mapping, Optional, TypeVar

H = TypeVar("H", bound=Callable)


class Registry(Generic[H]):
    """A read-only mapping from command name to handler.

    Names are matched exactly. The mapping is fixed when the registry is
    built; registries are passed to the executor rather than kept as
    module-level state.
    """

    def __init__(self, kind: str, handlers: Mapping[str, H]):
        self.kind = kind
        for name, handler in handlers.items():
            if not name or any(ch.isspace() for ch in name):
                raise ValueError(f"invalid {kind} name: {name!r}")
            if not callable(handler):
                raise TypeError(f"{kind} '{name}' is not callable")
        self._handlers: Mapping[str, H] = MappingProxyType(dict(handlers))

    def __contains__(self, name: object) -> bool:
        return name in self._handlers

    def __iter__(self) -> Iterator[str]:
        return iter(self._handlers)

    def __len__(self) -> int:
        return len(self._handlers)

    def __repr__(self) -> str:
        return f"Registry({self.kind!r}, {sorted(self._handlers)!r})"

    def get(self, name: str) -> Optional[H]:
        return self._handlers.get(name)

    def names(self) -> List[str]:
        return sorted(self._handlers)

