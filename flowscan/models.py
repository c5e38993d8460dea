"""
Data models for FlowScan.

This module defines the result structures produced by an analysis run:

- Severity: Issue classification (error / warning / info)
- Issue: One diagnostic attached to a statement
- ResultRecord: Per-statement projection of an analysis' final sets
- AnalysisResult: All records of one analysis plus its convergence status
- AnalysisReport: Complete output of a run over one source text

Records reference statements by node id and line only, so every model
serializes to plain JSON without cycles.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, List, Dict, Any, Iterator, Tuple, TYPE_CHECKING

if TYPE_CHECKING:
    from .dataflow.engine import ConvergenceInfo


class Severity(Enum):
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"

    @property
    def priority(self) -> int:
        priorities = {
            Severity.ERROR: 3,
            Severity.WARNING: 2,
            Severity.INFO: 1,
        }
        return priorities[self]


@dataclass(frozen=True)
class Issue:
    """A diagnostic derived from a statement's converged dataflow sets"""
    severity: Severity
    message: str
    code: str
    variable: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'severity': self.severity.value,
            'message': self.message,
            'code': self.code,
            'variable': self.variable,
        }


@dataclass(frozen=True)
class ResultRecord:
    """Read-only view of one statement after an analysis converged"""
    node_id: int
    line: int
    statement: str
    sets: Dict[str, Tuple[str, ...]] = field(default_factory=dict)
    issues: Tuple[Issue, ...] = ()

    def get_set(self, name: str) -> Tuple[str, ...]:
        """Exposed set by name (e.g. 'reaching', 'liveOut')"""
        return self.sets.get(name, ())

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            'line': self.line,
            'statement': self.statement,
        }
        for name, tokens in self.sets.items():
            data[name] = list(tokens)
        data['issues'] = [issue.to_dict() for issue in self.issues]
        return data


@dataclass
class AnalysisResult:
    """Records of one analysis over one CFG"""
    name: str
    records: List[ResultRecord] = field(default_factory=list)
    convergence: Optional[ConvergenceInfo] = None

    @property
    def converged(self) -> bool:
        return self.convergence is None or self.convergence.converged

    @property
    def issues(self) -> List[Issue]:
        return [issue for record in self.records for issue in record.issues]

    def record_for_line(self, line: int) -> Optional[ResultRecord]:
        """First record at a source line"""
        for record in self.records:
            if record.line == line:
                return record
        return None

    def __iter__(self) -> Iterator[ResultRecord]:
        return iter(self.records)

    def __len__(self) -> int:
        return len(self.records)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'name': self.name,
            'records': [r.to_dict() for r in self.records],
            'convergence': self.convergence.to_dict() if self.convergence else None,
        }


@dataclass
class AnalysisReport:
    """Result of running the analyses over one source text"""
    source: str
    language: str
    timestamp: str
    results: Dict[str, AnalysisResult] = field(default_factory=dict)
    errors: List[str] = field(default_factory=list)

    def __getitem__(self, name: str) -> AnalysisResult:
        return self.results[name]

    def all_issues(self) -> List[Tuple[str, ResultRecord, Issue]]:
        """(analysis name, record, issue) for every issue, in report order"""
        return [
            (name, record, issue)
            for name, result in self.results.items()
            for record in result.records
            for issue in record.issues
        ]

    @property
    def summary(self) -> Dict[str, int]:
        """Get issue count by severity"""
        counts = {s.value: 0 for s in Severity}
        for _, _, issue in self.all_issues():
            counts[issue.severity.value] += 1
        return counts

    def get_issues_by_severity(self, severity: Severity) -> List[Issue]:
        return [issue for _, _, issue in self.all_issues() if issue.severity == severity]

    def has_warnings(self) -> bool:
        """Check if any issue is a warning or worse"""
        return any(
            issue.severity.priority >= Severity.WARNING.priority
            for _, _, issue in self.all_issues()
        )

    @property
    def converged(self) -> bool:
        return all(result.converged for result in self.results.values())

    def to_dict(self) -> Dict[str, Any]:
        """Export layout: run metadata plus records keyed by analysis name"""
        return {
            'language': self.language,
            'timestamp': self.timestamp,
            'code': self.source,
            'analysisResults': {
                name: [r.to_dict() for r in result.records]
                for name, result in self.results.items()
            },
            'convergence': {
                name: result.convergence.to_dict() if result.convergence else None
                for name, result in self.results.items()
            },
            'summary': self.summary,
            'errors': self.errors,
        }
