"""
Analysis instantiations of the dataflow engine.

Each analysis fixes a token kind, a GEN/KILL rule, a direction, a meet
operator and its boundary condition:

    analysis      token           direction  meet          exposed sets
    reaching      DefinitionSite  forward    union         reaching (IN)
    live          VariableName    backward   union         liveIn, liveOut
    available     Expression      forward    intersection  availableIn, availableOut
    busy          Expression      backward   intersection  busyIn, busyOut

A run allocates a fresh LatticeStore, fills GEN/KILL, hands the store to the
engine and projects the converged sets into ResultRecords.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Dict, Hashable, List, Optional, Set, Type
import logging

from ..cfg import ControlFlowGraph, StatementNode
from ..facts import FactEntry, FactTable
from ..models import AnalysisResult, Issue, ResultRecord
from .engine import DataflowEngine, Direction
from .issues import (
    detect_available_issues,
    detect_busy_issues,
    detect_liveness_issues,
    detect_reaching_issues,
)
from .lattice import LatticeStore, Meet, NodeSets
from .tokens import DefinitionSite, Expression, VariableName, render_tokens

logger = logging.getLogger(__name__)

BOUNDARY_UNIVERSAL = "universal"
BOUNDARY_EMPTY = "empty"
BOUNDARY_POLICIES = (BOUNDARY_UNIVERSAL, BOUNDARY_EMPTY)


class DataflowAnalysis(ABC):
    """
    Base class for GEN/KILL analyses.

    Subclasses set the class attributes and implement ``initialize`` and
    ``detect_issues``. ``run`` is the only entry point callers need.
    """

    name: str = ""
    title: str = ""
    direction: Direction = Direction.FORWARD
    meet: Meet = Meet.UNION
    # Exposed names for the IN and OUT sets; None hides that side
    in_label: Optional[str] = None
    out_label: Optional[str] = None

    def __init__(self, engine: Optional[DataflowEngine] = None,
                 must_boundary: str = BOUNDARY_UNIVERSAL,
                 optimization_hints: bool = False):
        self.engine = engine or DataflowEngine()
        self.must_boundary = must_boundary
        self.optimization_hints = optimization_hints
        self.store: Optional[LatticeStore] = None

    @abstractmethod
    def initialize(self, cfg: ControlFlowGraph, facts: FactTable, store: LatticeStore) -> None:
        """Fill GEN and KILL for every statement node"""

    @abstractmethod
    def detect_issues(self, fact: FactEntry, sets: NodeSets) -> List[Issue]:
        """Diagnostics for one statement from its converged sets"""

    def universe(self, cfg: ControlFlowGraph, facts: FactTable) -> Set[Hashable]:
        """All tokens this analysis can produce (only needed by must analyses)"""
        return set()

    def boundary(self, universe: Set[Hashable]) -> Set[Hashable]:
        """Value pinned at the open end: IN[ENTRY] or OUT[EXIT]"""
        if self.meet is Meet.INTERSECTION and self.must_boundary == BOUNDARY_UNIVERSAL:
            return set(universe)
        return set()

    def initial(self, universe: Set[Hashable]) -> Optional[Set[Hashable]]:
        """Seed for IN/OUT; must analyses start from the top element"""
        if self.meet is Meet.INTERSECTION:
            return set(universe)
        return None

    def run(self, cfg: ControlFlowGraph, facts: FactTable) -> AnalysisResult:
        """Compute GEN/KILL, solve, and collect per-statement records"""
        store = LatticeStore(node.id for node in cfg.nodes)
        self.initialize(cfg, facts, store)

        universe = self.universe(cfg, facts)
        convergence = self.engine.run(
            cfg, store,
            direction=self.direction,
            meet=self.meet,
            boundary=self.boundary(universe),
            initial=self.initial(universe),
        )
        self.store = store

        logger.debug(f"{self.name}: {convergence.iterations} passes, "
                     f"converged={convergence.converged}")

        records = [
            self._make_record(node, facts.get(node.id), store[node.id])
            for node in cfg.statement_nodes()
        ]
        return AnalysisResult(name=self.name, records=records, convergence=convergence)

    def exposed_sets(self, sets: NodeSets) -> Dict[str, tuple]:
        exposed = {}
        if self.in_label:
            exposed[self.in_label] = tuple(render_tokens(sets.in_))
        if self.out_label:
            exposed[self.out_label] = tuple(render_tokens(sets.out))
        return exposed

    def _make_record(self, node: StatementNode, fact: FactEntry, sets: NodeSets) -> ResultRecord:
        return ResultRecord(
            node_id=node.id,
            line=node.line,
            statement=node.statement,
            sets=self.exposed_sets(sets),
            issues=tuple(self.detect_issues(fact, sets)),
        )


class ReachingDefinitions(DataflowAnalysis):
    """Which definitions may reach each program point"""

    name = "reaching"
    title = "Reaching Definitions"
    direction = Direction.FORWARD
    meet = Meet.UNION
    in_label = "reaching"

    def initialize(self, cfg: ControlFlowGraph, facts: FactTable, store: LatticeStore) -> None:
        definitions: Dict[str, Set[DefinitionSite]] = {}
        for node in cfg.statement_nodes():
            fact = facts.get(node.id)
            if fact.defined:
                site = DefinitionSite(fact.defined, node.line)
                definitions.setdefault(fact.defined, set()).add(site)
                store[node.id].gen = {site}

        for node in cfg.statement_nodes():
            fact = facts.get(node.id)
            if fact.defined:
                store[node.id].kill = definitions[fact.defined] - store[node.id].gen

    def detect_issues(self, fact: FactEntry, sets: NodeSets) -> List[Issue]:
        return detect_reaching_issues(fact, sets.in_)


class LiveVariables(DataflowAnalysis):
    """Which variables may be read before being overwritten"""

    name = "live"
    title = "Live Variables"
    direction = Direction.BACKWARD
    meet = Meet.UNION
    in_label = "liveIn"
    out_label = "liveOut"

    def initialize(self, cfg: ControlFlowGraph, facts: FactTable, store: LatticeStore) -> None:
        for node in cfg.statement_nodes():
            fact = facts.get(node.id)
            store[node.id].gen = {VariableName(v) for v in fact.used}
            if fact.defined:
                store[node.id].kill = {VariableName(fact.defined)}

    def detect_issues(self, fact: FactEntry, sets: NodeSets) -> List[Issue]:
        return detect_liveness_issues(fact, sets.out)


class ExpressionAnalysis(DataflowAnalysis):
    """
    Shared GEN/KILL rule of the two expression analyses.

    KILL is computed against every expression in the program, not just the
    ones local to the statement: an assignment to ``x`` kills each known
    expression whose text mentions ``x``.
    """

    meet = Meet.INTERSECTION

    def universe(self, cfg: ControlFlowGraph, facts: FactTable) -> Set[Hashable]:
        return {Expression(text) for text in facts.all_expressions()}

    def initialize(self, cfg: ControlFlowGraph, facts: FactTable, store: LatticeStore) -> None:
        all_expressions = [Expression(text) for text in facts.all_expressions()]

        for node in cfg.statement_nodes():
            fact = facts.get(node.id)
            store[node.id].gen = {Expression(text) for text in fact.expressions}
            if fact.defined:
                store[node.id].kill = {e for e in all_expressions if e.mentions(fact.defined)}


class AvailableExpressions(ExpressionAnalysis):
    """Expressions computed on every path to a point and not since invalidated"""

    name = "available"
    title = "Available Expressions"
    direction = Direction.FORWARD
    in_label = "availableIn"
    out_label = "availableOut"

    def detect_issues(self, fact: FactEntry, sets: NodeSets) -> List[Issue]:
        if not self.optimization_hints:
            return []
        return detect_available_issues(fact, sets.in_)


class VeryBusyExpressions(ExpressionAnalysis):
    """Expressions evaluated on every path from a point before any operand changes"""

    name = "busy"
    title = "Very Busy Expressions"
    direction = Direction.BACKWARD
    in_label = "busyIn"
    out_label = "busyOut"

    def detect_issues(self, fact: FactEntry, sets: NodeSets) -> List[Issue]:
        if not self.optimization_hints:
            return []
        return detect_busy_issues(fact, sets.out)


ANALYSES: Dict[str, Type[DataflowAnalysis]] = {
    ReachingDefinitions.name: ReachingDefinitions,
    LiveVariables.name: LiveVariables,
    AvailableExpressions.name: AvailableExpressions,
    VeryBusyExpressions.name: VeryBusyExpressions,
}


def get_analysis(name: str, **kwargs) -> DataflowAnalysis:
    """Factory function to get an analysis by key"""
    analysis_class = ANALYSES.get(name.lower())
    if not analysis_class:
        raise ValueError(f"Unknown analysis: {name}. Supported: {list(ANALYSES.keys())}")
    return analysis_class(**kwargs)
