"""
Dataflow Engine - direction- and meet-parameterized fixed-point solver

Runs round-robin passes over the CFG until a full pass leaves every IN and
OUT set unchanged, or until the pass cap is hit. The solver is generic over
any hashable token type; analyses supply GEN/KILL through the LatticeStore.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, Hashable, List, Optional, Set
import logging

from ..cfg import ControlFlowGraph, StatementNode
from .lattice import LatticeStore, Meet

logger = logging.getLogger(__name__)

DEFAULT_MAX_ITERATIONS = 100

PassObserver = Callable[[int, LatticeStore], None]


class Direction(Enum):
    FORWARD = "forward"    # IN from predecessors' OUT
    BACKWARD = "backward"  # OUT from successors' IN


@dataclass(frozen=True)
class ConvergenceInfo:
    """Outcome of one engine run"""
    converged: bool
    iterations: int
    direction: Direction
    meet: Meet

    def to_dict(self) -> Dict[str, object]:
        return {
            'converged': self.converged,
            'iterations': self.iterations,
            'direction': self.direction.value,
            'meet': self.meet.value,
        }


class DataflowEngine:
    """
    Round-robin fixed-point solver.

    Algorithm (forward shown, backward mirrors it over successors):
    1. IN[ENTRY] = boundary
    2. For every other node, IN[n] = meet(OUT[p] for p in preds(n));
       with no predecessors UNION yields {} and INTERSECTION keeps IN[n]
       (empty for nodes the boundary cannot reach, which are never seeded)
    3. OUT[n] = GEN[n] | (IN[n] - KILL[n])
    4. Repeat until a pass changes nothing or max_iterations is reached

    The engine never raises for graph shape. Hitting the cap is reported
    through ConvergenceInfo.converged; the sets then hold the last pass.
    """

    def __init__(self, max_iterations: int = DEFAULT_MAX_ITERATIONS):
        self.max_iterations = max_iterations

    def run(self, cfg: ControlFlowGraph, store: LatticeStore,
            direction: Direction, meet: Meet,
            boundary: Optional[Set[Hashable]] = None,
            initial: Optional[Set[Hashable]] = None,
            observer: Optional[PassObserver] = None) -> ConvergenceInfo:
        """
        Solve the dataflow equations in place.

        Args:
            cfg: Graph to analyze
            store: GEN/KILL already initialized; IN/OUT are overwritten
            direction: FORWARD or BACKWARD
            meet: UNION (may) or INTERSECTION (must)
            boundary: Value at the open end (IN[ENTRY] or OUT[EXIT])
            initial: Optional seed for IN/OUT of every node the boundary reaches
            observer: Called with (pass_number, store) after each pass

        Returns:
            ConvergenceInfo with the number of passes performed
        """
        boundary = set(boundary or ())

        if direction is Direction.FORWARD:
            order = list(cfg.nodes)
            boundary_node = cfg.entry
        else:
            order = list(reversed(cfg.nodes))
            boundary_node = cfg.exit

        if initial is not None:
            # Nodes cut off from the boundary keep empty sets
            reachable = None
            if boundary_node is not None:
                reachable = cfg.reachable_from(boundary_node, forward=direction is Direction.FORWARD)
            store.seed(initial, reachable)

        iterations = 0
        changed = True
        while changed and iterations < self.max_iterations:
            iterations += 1
            changed = False

            for node in order:
                if self._visit(node, store, direction, meet, boundary,
                               node is boundary_node):
                    changed = True

            if observer is not None:
                observer(iterations, store)
            logger.debug(f"{direction.value}/{meet.value} pass {iterations}: "
                         f"{'changed' if changed else 'stable'}")

        converged = not changed
        if not converged:
            logger.warning(f"Dataflow did not converge after {iterations} passes "
                           f"({direction.value}, {meet.value}); results are approximate")

        return ConvergenceInfo(
            converged=converged,
            iterations=iterations,
            direction=direction,
            meet=meet,
        )

    def _visit(self, node: StatementNode, store: LatticeStore,
               direction: Direction, meet: Meet,
               boundary: Set[Hashable], is_boundary: bool) -> bool:
        """Recompute one node's sets; True if either changed"""
        sets = store[node.id]

        if direction is Direction.FORWARD:
            neighbours = node.predecessors
            old_entry, old_exit = sets.in_, sets.out
        else:
            neighbours = node.successors
            old_entry, old_exit = sets.out, sets.in_

        if is_boundary:
            new_entry = set(boundary)
        else:
            new_entry = meet.combine(self._neighbour_sets(neighbours, store, direction),
                                     identity=old_entry)

        new_exit = sets.gen | (new_entry - sets.kill)

        if direction is Direction.FORWARD:
            sets.in_, sets.out = new_entry, new_exit
        else:
            sets.out, sets.in_ = new_entry, new_exit

        return new_entry != old_entry or new_exit != old_exit

    @staticmethod
    def _neighbour_sets(neighbours: List[StatementNode], store: LatticeStore,
                        direction: Direction) -> List[Set[Hashable]]:
        if direction is Direction.FORWARD:
            return [store[n.id].out for n in neighbours]
        return [store[n.id].in_ for n in neighbours]
