"""
FlowScan - Monotone data-flow analysis over statement-level control flow graphs.

One fixed-point engine, parameterized by direction and meet operator,
instantiated four ways:

    1. Reaching Definitions - which definitions may reach each statement
    2. Live Variables - which variables may still be read
    3. Available Expressions - which expressions are computed on every path
    4. Very Busy Expressions - which expressions every path will evaluate

An issue detector turns the converged sets into diagnostics:
uninitialized uses, multiply-defined variables, dead stores and
(optionally) redundant or hoistable expressions.

Quick Start:
    >>> from flowscan import analyze_source
    >>> report = analyze_source("int x = 5;\\nint y = x;", language="java")
    >>> report["reaching"].records[1].get_set("reaching")
    ('x@L1',)

Supported Languages:
    Java, C++ (simplified statement subset)

Output Formats:
    Console (human review), JSON (export)
"""

__version__ = "0.3.0"
__author__ = "FlowScan"

from .analyzer import StaticAnalyzer, analyze_source
from .cfg import CFGBuilder, ControlFlowGraph, StatementNode
from .config import AnalysisConfig, load_config
from .errors import FlowScanError, ConfigurationError, UnsupportedLanguageError
from .facts import FactEntry, FactExtractor, FactTable
from .language_loader import LanguageLoader, LanguageProfile
from .models import AnalysisReport, AnalysisResult, Issue, ResultRecord, Severity
from .reporters import ConsoleReporter, JSONReporter, get_reporter
from .dataflow import (
    ANALYSES,
    AvailableExpressions,
    ConvergenceInfo,
    DataflowAnalysis,
    DataflowEngine,
    Direction,
    LatticeStore,
    LiveVariables,
    Meet,
    ReachingDefinitions,
    VeryBusyExpressions,
    get_analysis,
)

__all__ = [
    # Core
    'StaticAnalyzer',
    'analyze_source',
    'AnalysisConfig',
    'load_config',
    # Graph and facts
    'CFGBuilder',
    'ControlFlowGraph',
    'StatementNode',
    'FactEntry',
    'FactExtractor',
    'FactTable',
    'LanguageLoader',
    'LanguageProfile',
    # Results
    'AnalysisReport',
    'AnalysisResult',
    'Issue',
    'ResultRecord',
    'Severity',
    # Dataflow
    'ANALYSES',
    'AvailableExpressions',
    'ConvergenceInfo',
    'DataflowAnalysis',
    'DataflowEngine',
    'Direction',
    'LatticeStore',
    'LiveVariables',
    'Meet',
    'ReachingDefinitions',
    'VeryBusyExpressions',
    'get_analysis',
    # Reporting
    'ConsoleReporter',
    'JSONReporter',
    'get_reporter',
    # Errors
    'FlowScanError',
    'ConfigurationError',
    'UnsupportedLanguageError',
]
