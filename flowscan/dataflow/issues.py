"""
Issue detection over converged dataflow sets.

Every detector is a pure function of one statement's fact entry and the
final sets of one analysis. Nothing here looks at neighbouring nodes.
"""

from typing import Iterable, List, Set

from ..facts import FactEntry
from ..models import Issue, Severity
from .tokens import DefinitionSite, Expression, VariableName

UNINITIALIZED_USE = "uninitialized-use"
MULTIPLE_DEFINITIONS = "multiple-definitions"
DEAD_STORE = "dead-store"
REDUNDANT_COMPUTATION = "redundant-computation"
HOISTABLE_EXPRESSION = "hoistable-expression"


def _definitions_of(variable: str, reaching: Iterable[DefinitionSite]) -> List[DefinitionSite]:
    return [d for d in reaching if d.defines(variable)]


def detect_reaching_issues(fact: FactEntry, reaching: Set[DefinitionSite]) -> List[Issue]:
    """Uninitialized uses and multiply-defined variables at a statement"""
    issues = []

    for variable in fact.used:
        if not _definitions_of(variable, reaching):
            issues.append(Issue(
                severity=Severity.WARNING,
                message=f"Variable '{variable}' may be uninitialized",
                code=UNINITIALIZED_USE,
                variable=variable,
            ))

    if fact.defined:
        definitions = _definitions_of(fact.defined, reaching)
        if len(definitions) > 1:
            issues.append(Issue(
                severity=Severity.INFO,
                message=f"Variable '{fact.defined}' has multiple reaching definitions",
                code=MULTIPLE_DEFINITIONS,
                variable=fact.defined,
            ))

    return issues


def detect_liveness_issues(fact: FactEntry, live_out: Set[VariableName]) -> List[Issue]:
    """Dead stores: a definition whose value is never read afterwards"""
    if fact.defined and VariableName(fact.defined) not in live_out:
        return [Issue(
            severity=Severity.WARNING,
            message=f"Dead code: Variable '{fact.defined}' is never used after this definition",
            code=DEAD_STORE,
            variable=fact.defined,
        )]
    return []


def detect_available_issues(fact: FactEntry, available_in: Set[Expression]) -> List[Issue]:
    """Expressions recomputed while their value is already available"""
    return [
        Issue(
            severity=Severity.INFO,
            message=f"Expression '{text}' is already available here; its earlier value can be reused",
            code=REDUNDANT_COMPUTATION,
        )
        for text in fact.expressions
        if Expression(text) in available_in
    ]


def detect_busy_issues(fact: FactEntry, busy_out: Set[Expression]) -> List[Issue]:
    """Expressions that every path re-evaluates after this statement"""
    return [
        Issue(
            severity=Severity.INFO,
            message=f"Expression '{text}' is evaluated again on every path from here; "
                    f"later evaluations can reuse this value",
            code=HOISTABLE_EXPRESSION,
        )
        for text in fact.expressions
        if Expression(text) in busy_out
    ]
