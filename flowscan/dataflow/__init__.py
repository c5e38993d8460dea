"""
Dataflow analysis framework for FlowScan

This package provides:
- Typed tokens (definition sites, variable names, expressions)
- Per-analysis lattice stores holding GEN/KILL/IN/OUT
- A direction- and meet-parameterized fixed-point engine
- Four analysis instantiations and their issue detectors
"""

from .tokens import (
    DefinitionSite,
    VariableName,
    Expression,
    Token,
    render_tokens,
)

from .lattice import (
    Meet,
    NodeSets,
    LatticeStore,
)

from .engine import (
    Direction,
    ConvergenceInfo,
    DataflowEngine,
    DEFAULT_MAX_ITERATIONS,
)

from .analyses import (
    DataflowAnalysis,
    ReachingDefinitions,
    LiveVariables,
    ExpressionAnalysis,
    AvailableExpressions,
    VeryBusyExpressions,
    ANALYSES,
    get_analysis,
)

from .issues import (
    detect_reaching_issues,
    detect_liveness_issues,
    detect_available_issues,
    detect_busy_issues,
)

__all__ = [
    # Tokens
    'DefinitionSite',
    'VariableName',
    'Expression',
    'Token',
    'render_tokens',
    # Lattice
    'Meet',
    'NodeSets',
    'LatticeStore',
    # Engine
    'Direction',
    'ConvergenceInfo',
    'DataflowEngine',
    'DEFAULT_MAX_ITERATIONS',
    # Analyses
    'DataflowAnalysis',
    'ReachingDefinitions',
    'LiveVariables',
    'ExpressionAnalysis',
    'AvailableExpressions',
    'VeryBusyExpressions',
    'ANALYSES',
    'get_analysis',
    # Issue detection
    'detect_reaching_issues',
    'detect_liveness_issues',
    'detect_available_issues',
    'detect_busy_issues',
]
