"""
Statement facts for FlowScan.

The fact extractor classifies each CFG statement of a simplified Java / C++
subset and records:

- kind: ``decl`` (typed declaration), ``assign`` (plain or compound
  assignment, increments) or ``use`` (anything else)
- defined: the variable written by the statement, if any
- used: the variables read by the statement, in order of appearance
- expressions: normalized binary sub-expressions (``x + y``) found on the
  right-hand side of an assignment

Extraction is regex based and only understands one statement per line.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Dict, Iterator, List, Optional, Tuple, TYPE_CHECKING
import logging

from .language_loader import LanguageProfile

if TYPE_CHECKING:
    from .cfg import ControlFlowGraph

logger = logging.getLogger(__name__)

DECL = "decl"
ASSIGN = "assign"
USE = "use"

_STRING_LITERAL = re.compile(r'"(?:\\.|[^"\\])*"|\'(?:\\.|[^\'\\])*\'')
# Skip member names (obj.name) and call targets (name(...))
_IDENTIFIER = re.compile(r'(?<![\w.])([A-Za-z_]\w*)\b(?!\s*\()')
_BINARY_EXPR = re.compile(r'(\w+)\s*([+\-*/%])\s*(\w+)')
_ASSIGN = re.compile(r'^(\w+)\s*=(?!=)\s*(.+)$')
_COMPOUND_ASSIGN = re.compile(r'^(\w+)\s*([+\-*/%])=\s*(.+)$')
_INCREMENT = re.compile(r'^(?:(\w+)\s*(\+\+|--)|(\+\+|--)\s*(\w+))$')


@dataclass(frozen=True)
class FactEntry:
    """Per-statement facts consumed by the dataflow analyses"""
    kind: str = USE
    defined: Optional[str] = None
    used: Tuple[str, ...] = ()
    expressions: Tuple[str, ...] = ()

    def to_dict(self) -> Dict[str, object]:
        return {
            'kind': self.kind,
            'defined': self.defined,
            'used': list(self.used),
            'expressions': list(self.expressions),
        }


EMPTY_FACT = FactEntry()


def mask_string_literals(text: str) -> str:
    """Blank the contents of string literals, keeping every offset in place"""
    return _STRING_LITERAL.sub(
        lambda m: m.group(0)[0] + ' ' * (len(m.group(0)) - 2) + m.group(0)[-1], text)


def normalize_expression(left: str, operator: str, right: str) -> str:
    """Render a binary expression in the canonical ``a + b`` form"""
    return f"{left} {operator} {right}"


def _unique(items: List[str]) -> Tuple[str, ...]:
    seen = set()
    result = []
    for item in items:
        if item not in seen:
            seen.add(item)
            result.append(item)
    return tuple(result)


class FactExtractor:
    """Classifies statements using a language profile"""

    def __init__(self, profile: LanguageProfile):
        self.profile = profile
        self._ignored = set(profile.ignored_identifiers)

        # Longest first so 'std::string' wins over 'string'
        types = sorted(profile.type_keywords, key=len, reverse=True)
        type_group = '|'.join(re.escape(t) for t in types) or r'(?!x)x'
        self._decl = re.compile(rf'^(?:{type_group})\s+(\w+)\s*=(?!=)\s*(.+)$')
        self._bare_decl = re.compile(rf'^(?:{type_group})\s+(\w+)\s*$')

    def extract(self, statement: str) -> FactEntry:
        """Compute the fact entry for one statement"""
        cleaned = statement.replace(';', '').strip()
        cleaned = _STRING_LITERAL.sub('""', cleaned)

        match = self._decl.match(cleaned)
        if match:
            variable, rhs = match.group(1), match.group(2)
            return FactEntry(
                kind=DECL,
                defined=variable,
                used=self.used_variables(rhs),
                expressions=self.extract_expressions(rhs),
            )

        match = self._bare_decl.match(cleaned)
        if match:
            # Declared but not initialized: nothing is defined yet
            return FactEntry(kind=DECL)

        match = _COMPOUND_ASSIGN.match(cleaned)
        if match:
            variable, operator, rhs = match.groups()
            expressions = list(self.extract_expressions(rhs))
            rhs = rhs.strip()
            if re.fullmatch(r'\w+', rhs):
                expressions.insert(0, normalize_expression(variable, operator, rhs))
            return FactEntry(
                kind=ASSIGN,
                defined=variable,
                used=_unique([variable] + list(self.used_variables(rhs))),
                expressions=_unique(expressions),
            )

        match = _INCREMENT.match(cleaned)
        if match:
            variable = match.group(1) or match.group(4)
            return FactEntry(kind=ASSIGN, defined=variable, used=(variable,))

        match = _ASSIGN.match(cleaned)
        if match and match.group(1) not in self._ignored:
            variable, rhs = match.group(1), match.group(2)
            return FactEntry(
                kind=ASSIGN,
                defined=variable,
                used=self.used_variables(rhs),
                expressions=self.extract_expressions(rhs),
            )

        return FactEntry(kind=USE, used=self.used_variables(cleaned))

    def used_variables(self, text: str) -> Tuple[str, ...]:
        """Variable names read by a fragment, in order of first appearance"""
        text = _STRING_LITERAL.sub('""', text)
        names = [
            name for name in _IDENTIFIER.findall(text)
            if name not in self._ignored
        ]
        return _unique(names)

    def extract_expressions(self, rhs: str) -> Tuple[str, ...]:
        """Normalized binary sub-expressions of an assignment right-hand side"""
        rhs = _STRING_LITERAL.sub('""', rhs)
        return _unique([
            normalize_expression(left, operator, right)
            for left, operator, right in _BINARY_EXPR.findall(rhs)
        ])


class FactTable:
    """
    Fact entries keyed by CFG node id.

    Lookups for unknown ids return the empty ``use`` fact, so a node without
    an entry simply contributes nothing to GEN/KILL.
    """

    def __init__(self, entries: Optional[Dict[int, FactEntry]] = None):
        self._entries: Dict[int, FactEntry] = dict(entries or {})

    def __getitem__(self, node_id: int) -> FactEntry:
        return self._entries.get(node_id, EMPTY_FACT)

    def get(self, node_id: int) -> FactEntry:
        return self._entries.get(node_id, EMPTY_FACT)

    def __setitem__(self, node_id: int, entry: FactEntry) -> None:
        self._entries[node_id] = entry

    def __contains__(self, node_id: object) -> bool:
        return node_id in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[int]:
        return iter(self._entries)

    def all_expressions(self) -> Tuple[str, ...]:
        """Every expression seen anywhere in the program (whole-program pre-pass)"""
        expressions: List[str] = []
        for node_id in sorted(self._entries):
            expressions.extend(self._entries[node_id].expressions)
        return _unique(expressions)

    @classmethod
    def from_graph(cls, cfg: ControlFlowGraph, extractor: FactExtractor) -> FactTable:
        """Extract facts for every statement node of a graph"""
        table = cls()
        for node in cfg.statement_nodes():
            table[node.id] = extractor.extract(node.statement)
        logger.debug(f"Extracted facts for {len(table)} statements")
        return table
