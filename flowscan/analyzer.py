"""
Main analyzer - orchestrates one analysis run over a source text
"""

from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional
import logging
import time

from .cfg import CFGBuilder, ControlFlowGraph
from .config import AnalysisConfig
from .dataflow.analyses import DataflowAnalysis, get_analysis
from .dataflow.engine import DataflowEngine
from .errors import FlowScanError
from .facts import FactExtractor, FactTable
from .language_loader import LanguageLoader, LanguageProfile
from .models import AnalysisReport

logger = logging.getLogger(__name__)


class StaticAnalyzer:
    """
    Runs the configured dataflow analyses.

    Pipeline per run:
    1. Resolve the language profile
    2. Build a fresh straight-line CFG from the source
    3. Extract per-statement facts
    4. Run each analysis with its own lattice store
    5. Collect records, issues and convergence status into a report
    """

    def __init__(self, config: Optional[AnalysisConfig] = None):
        self.config = (config or AnalysisConfig()).validate()
        self.language_loader = LanguageLoader(self.config.languages_dir)
        self.engine = DataflowEngine(max_iterations=self.config.max_iterations)

    def create_analyses(self) -> List[DataflowAnalysis]:
        """One analysis instance per enabled key, in configured order"""
        return [
            get_analysis(
                name,
                engine=self.engine,
                must_boundary=self.config.must_boundary,
                optimization_hints=self.config.optimization_hints,
            )
            for name in self.config.analyses
        ]

    def get_profile(self, language: Optional[str] = None) -> LanguageProfile:
        return self.language_loader.get_profile(language or self.config.language)

    def analyze(self, source: str, language: Optional[str] = None) -> AnalysisReport:
        """Analyze source text and return the report"""
        profile = self.get_profile(language)
        cfg = CFGBuilder(profile).build(source)
        facts = FactTable.from_graph(cfg, FactExtractor(profile))

        report = self.analyze_graph(cfg, facts)
        report.source = source
        report.language = profile.name
        return report

    def analyze_file(self, path: Path, language: Optional[str] = None) -> AnalysisReport:
        """Analyze a source file, picking the language from its extension if not given"""
        path = Path(path)
        if language is None:
            profile = self.language_loader.get_profile_for_file(path)
            language = profile.name if profile else None
        source = self._read_file(path)
        return self.analyze(source, language)

    def _read_file(self, filepath: Path) -> str:
        """Read file content with encoding detection"""
        encodings = ['utf-8', 'latin-1', 'cp1252']

        for encoding in encodings:
            try:
                with open(filepath, 'r', encoding=encoding) as f:
                    return f.read()
            except UnicodeDecodeError:
                logger.debug(f"{filepath} is not {encoding}, trying next encoding")
                continue
            except OSError as e:
                raise FlowScanError(f"Cannot read {filepath}: {e}", source="input") from e

        raise FlowScanError(f"Cannot decode {filepath} as any of {encodings}", source="input")

    def analyze_graph(self, cfg: ControlFlowGraph, facts: FactTable) -> AnalysisReport:
        """Run every enabled analysis over an already-built graph"""
        start_time = time.time()
        report = AnalysisReport(
            source="",
            language=self.config.language,
            timestamp=datetime.now(timezone.utc).isoformat(),
        )

        statements = len(cfg.statement_nodes())
        logger.info(f"Analyzing {statements} statements with {len(self.config.analyses)} analyses")

        for analysis in self.create_analyses():
            result = analysis.run(cfg, facts)
            report.results[analysis.name] = result

            if not result.converged:
                report.errors.append(
                    f"{analysis.title} did not converge after "
                    f"{result.convergence.iterations} passes; results are approximate"
                )

        duration = time.time() - start_time
        logger.info(f"Analysis complete in {duration:.3f}s: {len(report.all_issues())} issues")
        return report


def analyze_source(source: str, language: str = "java",
                   config: Optional[AnalysisConfig] = None) -> AnalysisReport:
    """
    Convenience function to analyze a source text.

    Args:
        source: Program text
        language: Language name or alias
        config: Optional analysis configuration

    Returns:
        AnalysisReport with one result per enabled analysis
    """
    analyzer = StaticAnalyzer(config)
    return analyzer.analyze(source, language)
