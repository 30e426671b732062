"""Field dependency tracking for Report Builder.

Tracks which fields a calculated field reads, so calculated fields can
be evaluated after the fields they reference and circular references
are rejected before they reach a table.
"""

import heapq
from collections import defaultdict
from collections.abc import Iterable, Sequence

from reportbuilder.schemas.field import FieldDefinitionBase


class FieldDependencyGraph:
    """
    Track field dependencies for evaluation ordering.

    Maintains a bidirectional graph of field keys:
    - dependencies: key -> set of keys that read this field
    - reverse: key -> set of keys this field reads
    """

    def __init__(self) -> None:
        """Initialize empty dependency graph."""
        # If field A changes, every field in dependencies[A] must be recomputed
        self.dependencies: dict[str, set[str]] = defaultdict(set)

        # To compute field A, every field in reverse[A] must be resolved
        self.reverse: dict[str, set[str]] = defaultdict(set)

    @classmethod
    def from_definitions(cls, definitions: Iterable[FieldDefinitionBase]) -> "FieldDependencyGraph":
        """Build a graph from the references of calculated definitions."""
        graph = cls()
        for definition in definitions:
            if definition.is_calculated:
                graph.add_field(definition.key, set(definition.references()))
        return graph

    def add_field(self, key: str, depends_on: set[str]) -> None:
        """
        Add a field to the dependency graph, replacing its previous edges.

        Cycles are not checked here; callers that must reject them call
        ``detect_circular_reference`` first.

        Args:
            key: Key of the field
            depends_on: Keys the formula references
        """
        if key in self.reverse:
            for old_dep in self.reverse[key]:
                self.dependencies[old_dep].discard(key)

        self.reverse[key] = depends_on.copy()
        for dep in depends_on:
            self.dependencies[dep].add(key)

    def remove_field(self, key: str) -> None:
        """
        Remove a field from the dependency graph.

        Fields that still reference the removed key keep their edge, so
        re-adding the key later cannot close a cycle unnoticed.

        Args:
            key: Key of the field to remove
        """
        if key in self.reverse:
            for dep in self.reverse[key]:
                self.dependencies[dep].discard(key)
            del self.reverse[key]

    def detect_circular_reference(self, key: str, depends_on: set[str]) -> bool:
        """
        Check if adding this dependency would create a cycle.

        Args:
            key: Key of the field being added
            depends_on: Keys the formula references

        Returns:
            True if circular reference detected
        """
        if not depends_on:
            return False

        if key in depends_on:
            return True

        visited: set[str] = set()
        to_check = list(depends_on)

        while to_check:
            current = to_check.pop()

            if current == key:
                return True

            if current in visited:
                continue
            visited.add(current)

            to_check.extend(self.reverse.get(current, ()))

        return False

    def resolve_order(self, keys: Sequence[str]) -> tuple[list[str], list[str]]:
        """
        Order fields so each comes after the fields it references.

        Topological sort (Kahn's algorithm) using the position in ``keys``
        as tie-breaker, so fields that do not depend on each other keep
        their declared order.

        Args:
            keys: Calculated field keys in declared order

        Returns:
            Tuple of (ordered keys, keys left unordered because they sit on
            or behind a cycle, in declared order)
        """
        position = {key: index for index, key in enumerate(keys)}
        in_degree = {key: 0 for key in position}

        for key in position:
            for dep in self.reverse.get(key, ()):
                if dep in position and dep != key:
                    in_degree[key] += 1
            if key in self.reverse.get(key, ()):
                # A self-reference can never be satisfied
                in_degree[key] += 1

        ready = [position[key] for key, degree in in_degree.items() if degree == 0]
        heapq.heapify(ready)

        ordered: list[str] = []
        while ready:
            key = keys[heapq.heappop(ready)]
            ordered.append(key)

            for dependent in self.dependencies.get(key, ()):
                if dependent in in_degree and dependent != key:
                    in_degree[dependent] -= 1
                    if in_degree[dependent] == 0:
                        heapq.heappush(ready, position[dependent])

        resolved = set(ordered)
        unresolved = [key for key in keys if key not in resolved]
        return ordered, unresolved

    def get_dependents(self, key: str) -> set[str]:
        """Direct dependents (keys that read the field)."""
        return set(self.dependencies.get(key, ()))
