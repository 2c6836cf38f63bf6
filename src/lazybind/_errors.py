from __future__ import annotations

from typing import TYPE_CHECKING


if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence


class InjectionError(RuntimeError):
    pass


class CyclicDependencyError(InjectionError):
    """Raised at injector creation when the dependency graph has a cycle.

    `cycles` is only populated by detailed validation. Each cycle is a sorted
    tuple of member names; cycles are ordered by size, then by their joined names.
    """

    STANDARD_MESSAGE = "At least one cycle found in provided dependencies"

    def __init__(
        self,
        message: str = STANDARD_MESSAGE,
        cycles: Iterable[Iterable[str]] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.cycles: tuple[tuple[str, ...], ...] | None = sort_cycles(cycles) if cycles is not None else None

    def __str__(self) -> str:
        if self.cycles is None:
            return self.message

        lines = "\n".join(f"    [{', '.join(cycle)}]" for cycle in self.cycles)
        return f"{self.message}\nCycles: [\n{lines}\n]"


class UndefinedDependencyError(InjectionError, LookupError):
    """A name is used as a member (or dependency) but is not declared."""

    def __init__(self, message: str, missing: Sequence[str] = ()) -> None:
        super().__init__(message)
        self.missing = tuple(missing)


class MemberAccessError(UndefinedDependencyError, AttributeError):
    pass


def sort_cycles(cycles: Iterable[Iterable[str]]) -> tuple[tuple[str, ...], ...]:
    """Normalize cycles: members sorted within each, then by size and joined names."""
    normalized = [tuple(sorted(cycle)) for cycle in cycles]
    normalized.sort(key=lambda cycle: (len(cycle), ",".join(cycle)))
    return tuple(normalized)
