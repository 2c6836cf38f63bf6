"""Lazy, memoized construction of interdependent named values.

Declare which members depend on which, give one provider per member, and the
injector builds each member exactly once, on first access, after its
dependencies. Cyclic dependency graphs are rejected up front.

Exports:
- `Injector` / `make_injector`: build the lazy resolver from a dependency mapping and providers.
- `Dependencies`: read-only lookup of resolved dependencies passed to each provider.
- `CycleCheck`: how much cycle checking to do at creation (skip, simple or detailed).
- `validate`, `has_cycles`, `find_cycles`: the cycle detection on its own.
- `CyclicDependencyError`, `UndefinedDependencyError`, `MemberAccessError`, `InjectionError`: errors.
"""

from ._errors import CyclicDependencyError, InjectionError, MemberAccessError, UndefinedDependencyError
from ._graph import CycleCheck, ValidationResult, find_cycles, has_cycles, validate
from ._injector import Dependencies, Injector, make_injector


__all__ = [
    "CycleCheck",
    "CyclicDependencyError",
    "Dependencies",
    "InjectionError",
    "Injector",
    "MemberAccessError",
    "UndefinedDependencyError",
    "ValidationResult",
    "find_cycles",
    "has_cycles",
    "make_injector",
    "validate",
]
