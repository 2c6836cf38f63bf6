from __future__ import annotations

import logging
import threading
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from ._errors import CyclicDependencyError, MemberAccessError, UndefinedDependencyError
from ._graph import CycleCheck, validate


if TYPE_CHECKING:
    from collections.abc import Callable, Iterator, Sequence

    Provider = Callable[["Dependencies"], Any]
    LogSink = Callable[[str], None]


logger = logging.getLogger(__name__)

_MISSING = object()


class Dependencies(Mapping[str, Any]):
    """Resolved dependencies handed to a provider.

    Read-only. Values are available by key (`deps["db"]`) or by attribute (`deps.db`).
    A declared dependency wins over the mapping method of the same name, so
    `deps.values` is the `values` dependency when one is declared; the methods stay
    reachable through the class (`Dependencies.values(deps)`).
    """

    __slots__ = ("_values",)

    def __init__(self, values: dict[str, Any]) -> None:
        self._values = values

    def __getattribute__(self, name: str) -> Any:
        if not name.startswith("_"):
            values = object.__getattribute__(self, "_values")
            if name in values:
                return values[name]
        return object.__getattribute__(self, name)

    def __getitem__(self, name: str) -> Any:
        return self._values[name]

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Dependencies):
            return self._values == other._values
        if isinstance(other, Mapping):
            return self._values == dict(Mapping.items(other))
        return NotImplemented

    __hash__ = None  # type: ignore[assignment]

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __getattr__(self, name: str) -> Any:
        if name.startswith("_"):
            raise AttributeError(name)
        try:
            return self._values[name]
        except KeyError:
            msg = f"{name!r} is not a declared dependency (available: {', '.join(self._values) or 'none'})"
            raise AttributeError(msg) from None

    def __repr__(self) -> str:
        return f"Dependencies({self._values!r})"


class Injector:
    """Lazily builds a fixed set of named members, each exactly once.

    - `dependencies` maps every member to the members it needs first.
    - `providers` maps every member to a callable taking a `Dependencies` lookup.
    - members are built on first access, depth-first, and cached for the injector's lifetime.

    Members are read with `injector.get(name)`, `injector[name]` or `injector.<name>`.
    Names that start with an underscore or clash with an `Injector` method are only
    reachable through `get` / item access.

    An access holds the injector's lock until the whole chain is built. A provider may
    read the injector from its own thread, but must not wait on another thread that
    uses the same injector.

    Example:
      injector = Injector(
          {"url": [], "db": ["url"]},
          {"url": lambda _: "sqlite://", "db": lambda deps: connect(deps.url)},
      )
      injector.db

    """

    def __init__(
        self,
        dependencies: Mapping[str, Sequence[str]],
        providers: Mapping[str, Provider],
        *,
        check_for_cycles: CycleCheck | str = CycleCheck.SIMPLE,
        log: LogSink | None = None,
    ) -> None:
        graph = {member: tuple(deps) for member, deps in dependencies.items()}

        result = validate(graph, check_for_cycles)
        if result.has_cycles:
            logger.debug("Refusing to create injector: cyclic dependencies %s", result.cycles or "")
            raise CyclicDependencyError(CyclicDependencyError.STANDARD_MESSAGE, cycles=result.cycles)

        _check_providers(graph, providers)

        self._dependencies = graph
        self._providers = dict(providers)
        self._log = log
        self._cache: dict[str, Any] = {}
        self._lock = threading.RLock()

    def get(self, name: str) -> Any:
        """Return member `name`, constructing it and its missing dependencies first if needed."""
        with self._lock:
            return self._resolve(name)

    def _resolve(self, name: str) -> Any:
        if name not in self._dependencies:
            msg = f"No member named {name!r}"
            raise UndefinedDependencyError(msg, missing=[name])

        self._emit(name, "get")

        value = self._cache.get(name, _MISSING)
        if value is not _MISSING:
            self._emit(name, "already constructed")
            return value

        self._emit(name, "constructing")

        # Declared order; each call either hits the cache or builds the dependency's own chain.
        resolved = Dependencies({dep: self._resolve(dep) for dep in self._dependencies[name]})
        value = self._providers[name](resolved)

        self._cache[name] = value
        self._emit(name, "constructed")
        return value

    def _emit(self, member: str, event: str) -> None:
        logger.debug("%s - %s", member, event)
        if self._log is not None:
            self._log(f"{member} - {event}")

    @property
    def members(self) -> tuple[str, ...]:
        return tuple(self._dependencies)

    def dependencies_of(self, name: str) -> tuple[str, ...]:
        try:
            return self._dependencies[name]
        except KeyError:
            msg = f"No member named {name!r}"
            raise UndefinedDependencyError(msg, missing=[name]) from None

    def is_constructed(self, name: str) -> bool:
        if name not in self._dependencies:
            msg = f"No member named {name!r}"
            raise UndefinedDependencyError(msg, missing=[name])
        return name in self._cache

    def __getitem__(self, name: str) -> Any:
        return self.get(name)

    def __getattr__(self, name: str) -> Any:
        # Only reached when normal lookup fails, i.e. for member names.
        if name.startswith("_") or name not in self._dependencies:
            msg = f"{type(self).__name__!r} has no member {name!r}"
            raise MemberAccessError(msg, missing=[name])
        return self.get(name)

    def __setattr__(self, name: str, value: Any) -> None:
        if name.startswith("_"):
            super().__setattr__(name, value)
            return
        msg = f"Injector members are read-only, cannot assign {name!r}"
        raise AttributeError(msg)

    def __contains__(self, name: object) -> bool:
        return name in self._dependencies

    def __iter__(self) -> Iterator[str]:
        return iter(self._dependencies)

    def __len__(self) -> int:
        return len(self._dependencies)

    def __dir__(self) -> list[str]:
        members = [m for m in self._dependencies if m.isidentifier() and not m.startswith("_")]
        return sorted(set(super().__dir__()) | set(members))

    def __repr__(self) -> str:
        return f"<{type(self).__name__} members={len(self._dependencies)} constructed={len(self._cache)}>"


def make_injector(
    dependencies: Mapping[str, Sequence[str]],
    providers: Mapping[str, Provider],
    *,
    check_for_cycles: CycleCheck | str = CycleCheck.SIMPLE,
    log: LogSink | None = None,
) -> Injector:
    return Injector(dependencies, providers, check_for_cycles=check_for_cycles, log=log)


def _check_providers(dependencies: Mapping[str, Sequence[str]], providers: Mapping[str, Provider]) -> None:
    missing = [member for member in dependencies if member not in providers]
    if missing:
        msg = f"No provider for member(s): {', '.join(map(repr, missing))}"
        raise UndefinedDependencyError(msg, missing=missing)

    unknown = [member for member in providers if member not in dependencies]
    if unknown:
        msg = f"Provider(s) given for undeclared member(s): {', '.join(map(repr, unknown))}"
        raise UndefinedDependencyError(msg, missing=unknown)

    for member, provider in providers.items():
        if not callable(provider):
            msg = f"Provider for {member!r} must be callable, got {type(provider).__name__}"
            raise TypeError(msg)
