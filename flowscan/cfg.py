"""
Control flow graph for FlowScan.

A ControlFlowGraph is an ordered list of StatementNodes bounded by an ENTRY
and an EXIT sentinel. Nodes own identity and adjacency only; dataflow sets
live in per-analysis lattice stores (see ``flowscan.dataflow.lattice``).

CFGBuilder turns source text into a straight-line chain. Graphs with
branches, merges or loops can be assembled by hand with ``add_node`` and
``add_edge``; the dataflow engine handles any number of predecessors and
successors per node.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional, Set
import logging

from .facts import mask_string_literals
from .language_loader import LanguageProfile

logger = logging.getLogger(__name__)

ENTRY = "entry"
EXIT = "exit"
STATEMENT = "statement"


@dataclass(eq=False)
class StatementNode:
    """A program point: one statement or one of the two sentinels"""
    id: int
    statement: str
    line: int
    kind: str = STATEMENT
    successors: List[StatementNode] = field(default_factory=list, repr=False)
    predecessors: List[StatementNode] = field(default_factory=list, repr=False)

    @property
    def is_sentinel(self) -> bool:
        return self.kind in (ENTRY, EXIT)

    def __hash__(self) -> int:
        return hash(self.id)

    def __str__(self) -> str:
        if self.is_sentinel:
            return self.statement
        return f"L{self.line}: {self.statement}"


class ControlFlowGraph:
    """Statement-level CFG with exactly one ENTRY and one EXIT"""

    def __init__(self):
        self.nodes: List[StatementNode] = []
        self._by_id: Dict[int, StatementNode] = {}
        self._next_id = 0
        self.entry = self._new_node("ENTRY", 0, ENTRY)
        self.exit: Optional[StatementNode] = None

    def _new_node(self, statement: str, line: int, kind: str) -> StatementNode:
        node = StatementNode(id=self._next_id, statement=statement, line=line, kind=kind)
        self._next_id += 1
        self.nodes.append(node)
        self._by_id[node.id] = node
        return node

    def add_node(self, statement: str, line: int) -> StatementNode:
        """Append a statement node; ids follow insertion (program) order"""
        if self.exit is not None:
            raise ValueError("Cannot add statements after the graph is finalized")
        return self._new_node(statement, line, STATEMENT)

    def add_edge(self, source: StatementNode, target: StatementNode) -> None:
        """Add a control-flow edge, ignoring duplicates"""
        if target not in source.successors:
            source.successors.append(target)
        if source not in target.predecessors:
            target.predecessors.append(source)

    def finalize(self) -> StatementNode:
        """Create the EXIT sentinel; statements without successors flow into it"""
        if self.exit is not None:
            return self.exit

        dangling = [n for n in self.nodes if not n.successors]
        self.exit = self._new_node("EXIT", 0, EXIT)
        for node in dangling:
            self.add_edge(node, self.exit)
        return self.exit

    def get_node(self, node_id: int) -> Optional[StatementNode]:
        return self._by_id.get(node_id)

    def statement_nodes(self) -> List[StatementNode]:
        """Non-sentinel nodes in program order"""
        return [n for n in self.nodes if not n.is_sentinel]

    def reachable_from(self, start: StatementNode, forward: bool = True) -> Set[int]:
        """Ids of nodes reachable from ``start`` along successors (or predecessors)"""
        seen = {start.id}
        stack = [start]
        while stack:
            node = stack.pop()
            for neighbour in (node.successors if forward else node.predecessors):
                if neighbour.id not in seen:
                    seen.add(neighbour.id)
                    stack.append(neighbour)
        return seen

    def edges(self) -> List[tuple]:
        return [(n.id, s.id) for n in self.nodes for s in n.successors]

    def __iter__(self) -> Iterator[StatementNode]:
        return iter(self.nodes)

    def __len__(self) -> int:
        return len(self.nodes)

    def to_dict(self) -> Dict[str, object]:
        return {
            'nodes': [
                {'id': n.id, 'line': n.line, 'statement': n.statement, 'kind': n.kind}
                for n in self.nodes
            ],
            'edges': [list(edge) for edge in self.edges()],
        }


class CFGBuilder:
    """Builds a straight-line CFG from source text"""

    BLOCK_COMMENT_PREFIXES = ('/*', '*/', '*')

    def __init__(self, profile: LanguageProfile):
        self.profile = profile

    def build(self, source: str) -> ControlFlowGraph:
        """Chain every statement line between ENTRY and EXIT"""
        cfg = ControlFlowGraph()
        current = cfg.entry
        in_block_comment = False

        for line_number, raw in enumerate(source.splitlines(), 1):
            line = raw.strip()
            if not line:
                continue

            if in_block_comment:
                if '*/' in line:
                    in_block_comment = False
                continue
            if line.startswith('/*'):
                in_block_comment = '*/' not in line
                continue

            statement = self._statement_text(line)
            if statement is None:
                continue

            node = cfg.add_node(statement, line_number)
            cfg.add_edge(current, node)
            current = node

        cfg.finalize()
        logger.debug(f"Built CFG with {len(cfg.statement_nodes())} statements")
        return cfg

    def _statement_text(self, line: str) -> Optional[str]:
        """Return the statement on a line, or None for scaffolding"""
        if line.startswith('//') or line.startswith(self.BLOCK_COMMENT_PREFIXES):
            return None

        # Comment and marker checks must not see the inside of string literals
        masked = mask_string_literals(line)
        comment = masked.find('//')
        if comment != -1:
            line, masked = line[:comment].rstrip(), masked[:comment].rstrip()

        if self.profile.is_structural(masked):
            return None

        line = line.lstrip('}').rstrip('{').strip()
        masked = masked.lstrip('}').rstrip('{').strip()
        if not line.strip(';') or self.profile.is_structural(masked):
            return None
        return line
