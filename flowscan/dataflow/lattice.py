"""
Lattice Store - per-node dataflow sets for a single analysis run

Every analysis allocates its own LatticeStore so that two analyses over the
same CFG never share mutable GEN/KILL/IN/OUT sets.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Hashable, Iterable, Iterator, List, Optional, Set


class Meet(Enum):
    """Meet operator used at merge points"""
    UNION = "union"                # may analyses
    INTERSECTION = "intersection"  # must analyses

    def combine(self, sets: List[Set[Hashable]], identity: Optional[Set[Hashable]] = None) -> Set[Hashable]:
        """
        Meet over a list of sets.

        With no sets, UNION yields the empty set and INTERSECTION yields
        ``identity`` (the caller's stand-in for the universal set).
        """
        if not sets:
            if self is Meet.UNION or identity is None:
                return set()
            return set(identity)

        result = set(sets[0])
        for other in sets[1:]:
            if self is Meet.UNION:
                result |= other
            else:
                result &= other
        return result


@dataclass
class NodeSets:
    """GEN, KILL, IN and OUT for one node"""
    gen: Set[Hashable] = field(default_factory=set)
    kill: Set[Hashable] = field(default_factory=set)
    in_: Set[Hashable] = field(default_factory=set)
    out: Set[Hashable] = field(default_factory=set)

    def copy(self) -> 'NodeSets':
        return NodeSets(set(self.gen), set(self.kill), set(self.in_), set(self.out))


class LatticeStore:
    """Map from node id to that node's NodeSets"""

    def __init__(self, node_ids: Iterable[int] = ()):
        self._sets: Dict[int, NodeSets] = {node_id: NodeSets() for node_id in node_ids}

    def __getitem__(self, node_id: int) -> NodeSets:
        # Nodes added after allocation still get a fresh quadruple
        if node_id not in self._sets:
            self._sets[node_id] = NodeSets()
        return self._sets[node_id]

    def __contains__(self, node_id: object) -> bool:
        return node_id in self._sets

    def __iter__(self) -> Iterator[int]:
        return iter(self._sets)

    def __len__(self) -> int:
        return len(self._sets)

    def seed(self, value: Set[Hashable], node_ids: Optional[Iterable[int]] = None) -> None:
        """Set IN and OUT of the given nodes (default: all) to a copy of ``value``"""
        targets = self._sets.keys() if node_ids is None else node_ids
        for node_id in targets:
            sets = self[node_id]
            sets.in_ = set(value)
            sets.out = set(value)

    def snapshot(self) -> Dict[int, NodeSets]:
        """Deep copy of the current sets"""
        return {node_id: sets.copy() for node_id, sets in self._sets.items()}

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, LatticeStore):
            return False
        return self._sets == other._sets
