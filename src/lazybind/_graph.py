from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

from ._errors import UndefinedDependencyError, sort_cycles


if TYPE_CHECKING:
    from collections.abc import Iterator, Mapping, Sequence

    DependencyMap = Mapping[str, Sequence[str]]


logger = logging.getLogger(__name__)


class CycleCheck(Enum):
    SKIP = "skip"
    SIMPLE = "simple"
    DETAILED = "detailed"


@dataclass(frozen=True)
class ValidationResult:
    has_cycles: bool
    cycles: tuple[tuple[str, ...], ...] | None = None


@dataclass
class _NodeState:
    index: int
    low_link: int
    on_stack: bool = True


def validate(dependencies: DependencyMap, mode: CycleCheck | str = CycleCheck.SIMPLE) -> ValidationResult:
    """Check a dependency graph for cycles.

    - SKIP: never looks at the graph and always reports no cycle.
    - SIMPLE: stops at the first cycle found; `cycles` stays None.
    - DETAILED: full pass, `cycles` holds every cycle (SCCs of size > 1 and self-loops).

    Raises UndefinedDependencyError in SIMPLE/DETAILED mode when a dependency is not a key of the graph.
    """
    mode = CycleCheck(mode)
    if mode is CycleCheck.SKIP:
        return ValidationResult(has_cycles=False)

    check_defined(dependencies)

    if mode is CycleCheck.SIMPLE:
        found = _Traversal(dependencies, stop_at_first=True).run()
        logger.debug("Simple cycle check over %d members: %s", len(dependencies), "cycle found" if found else "acyclic")
        return ValidationResult(has_cycles=found)

    cycles = _Traversal(dependencies, stop_at_first=False).cycles()
    logger.debug("Detailed cycle check over %d members: %d cycle(s)", len(dependencies), len(cycles))
    return ValidationResult(has_cycles=bool(cycles), cycles=cycles)


def has_cycles(dependencies: DependencyMap) -> bool:
    check_defined(dependencies)
    return _Traversal(dependencies, stop_at_first=True).run()


def find_cycles(dependencies: DependencyMap) -> tuple[tuple[str, ...], ...]:
    check_defined(dependencies)
    return _Traversal(dependencies, stop_at_first=False).cycles()


def check_defined(dependencies: DependencyMap) -> None:
    """Raise if any member lists a dependency that is not itself a member."""
    undefined = sorted(
        (member, dep) for member, deps in dependencies.items() for dep in deps if dep not in dependencies
    )
    if undefined:
        pairs = ", ".join(f"{member!r} -> {dep!r}" for member, dep in undefined)
        msg = f"Undefined dependencies: {pairs}"
        raise UndefinedDependencyError(msg, missing=sorted({dep for _, dep in undefined}))


class _Traversal:
    """Iterative depth-first search tracking visit index and low-link per node.

    Nodes stay on the component stack until the root of their SCC finishes, so an
    edge into a finished node only lowers the low-link while that node's
    component is still open. Edges into closed components are ignored.
    """

    def __init__(self, dependencies: DependencyMap, *, stop_at_first: bool) -> None:
        self._dependencies = dependencies
        self._stop_at_first = stop_at_first
        self._states: dict[str, _NodeState] = {}
        self._stack: list[str] = []
        self._self_loops: set[str] = set()
        self._components: list[list[str]] = []
        self._found = False

    def run(self) -> bool:
        for node in self._dependencies:
            if node not in self._states and self._visit(node):
                return True
        return self._found

    def cycles(self) -> tuple[tuple[str, ...], ...]:
        self.run()
        if not self._found:
            return ()

        cycles = [
            component
            for component in self._components
            if len(component) > 1 or component[0] in self._self_loops
        ]
        return sort_cycles(cycles)

    def _enter(self, node: str) -> Iterator[str]:
        index = len(self._states)
        self._states[node] = _NodeState(index=index, low_link=index)
        self._stack.append(node)
        return iter(self._dependencies[node])

    def _visit(self, start: str) -> bool:
        """Walk everything reachable from `start`. Returns True to short-circuit."""
        work = [(start, self._enter(start))]

        while work:
            node, neighbors = work[-1]
            state = self._states[node]
            descended = False

            for neighbor in neighbors:
                if neighbor == node:
                    self._self_loops.add(node)
                    self._found = True
                    if self._stop_at_first:
                        return True
                    continue

                neighbor_state = self._states.get(neighbor)
                if neighbor_state is None:
                    work.append((neighbor, self._enter(neighbor)))
                    descended = True
                    break

                if neighbor_state.on_stack:
                    self._found = True
                    if self._stop_at_first:
                        return True
                    state.low_link = min(state.low_link, neighbor_state.index)

            if descended:
                continue

            work.pop()
            if work:
                parent = self._states[work[-1][0]]
                parent.low_link = min(parent.low_link, state.low_link)

            if state.low_link == state.index:
                self._close_component(node)

        return False

    def _close_component(self, root: str) -> None:
        component = []
        while True:
            member = self._stack.pop()
            self._states[member].on_stack = False
            component.append(member)
            if member == root:
                break
        self._components.append(component)
