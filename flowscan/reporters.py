"""
Report generators for analysis results
"""

import json
from typing import Optional
import sys

from .dataflow.analyses import ANALYSES
from .models import AnalysisReport, Severity


class BaseReporter:
    """Base class for reporters"""

    def report(self, result: AnalysisReport, output: Optional[str] = None) -> str:
        """Generate report and optionally write to file"""
        raise NotImplementedError

    def _write_output(self, content: str, output: Optional[str]) -> None:
        """Write content to file or stdout"""
        if output:
            with open(output, 'w', encoding='utf-8') as f:
                f.write(content)
        else:
            print(content)


class ConsoleReporter(BaseReporter):
    """Console/terminal output reporter with colors"""

    # ANSI color codes
    COLORS = {
        'error': '\033[91m',    # Red
        'warning': '\033[93m',  # Yellow
        'info': '\033[94m',     # Blue
        'reset': '\033[0m',
        'bold': '\033[1m',
        'gray': '\033[90m',
        'green': '\033[92m',
    }

    def __init__(self, use_colors: bool = True, verbose: bool = False):
        self.use_colors = use_colors and sys.stdout.isatty()
        self.verbose = verbose

    def _color(self, text: str, color: str) -> str:
        """Apply color to text if colors enabled"""
        if not self.use_colors:
            return text
        return f"{self.COLORS.get(color, '')}{text}{self.COLORS['reset']}"

    @staticmethod
    def _format_set(tokens) -> str:
        return ", ".join(tokens) if tokens else "None"

    def report(self, result: AnalysisReport, output: Optional[str] = None) -> str:
        """Generate console report"""
        lines = []

        lines.append("")
        lines.append(self._color("=" * 60, 'bold'))
        lines.append(self._color("  DATAFLOW ANALYSIS RESULTS", 'bold'))
        lines.append(self._color("=" * 60, 'bold'))
        lines.append("")
        lines.append(f"Language: {result.language}")
        lines.append(f"Timestamp: {result.timestamp}")

        for name, analysis in result.results.items():
            analysis_class = ANALYSES.get(name)
            title = analysis_class.title if analysis_class else name

            lines.append("")
            lines.append(self._color(f"[{title.upper()}]", 'bold'))
            if analysis.convergence and self.verbose:
                state = "converged" if analysis.convergence.converged else "NOT converged"
                lines.append(self._color(
                    f"  {state} after {analysis.convergence.iterations} passes", 'gray'))
            lines.append("-" * 60)

            if not analysis.records:
                lines.append("  No statements")

            for record in analysis.records:
                lines.append(f"  Line {record.line}: {record.statement}")
                for set_name, tokens in record.sets.items():
                    lines.append(f"    {set_name}: {self._format_set(tokens)}")
                for issue in record.issues:
                    marker = self._color(issue.severity.value.upper(), issue.severity.value)
                    lines.append(f"    {marker}: {issue.message}")

        lines.append("")
        lines.append(self._color("SUMMARY BY SEVERITY:", 'bold'))
        summary = result.summary
        for severity in Severity:
            count = summary.get(severity.value, 0)
            if count > 0:
                lines.append(f"  {self._color(severity.value.upper(), severity.value)}: {count}")
        if not any(summary.values()):
            lines.append(self._color("  No issues found!", 'green'))

        if result.errors:
            lines.append("")
            lines.append(self._color("ERRORS:", 'error'))
            for error in result.errors:
                lines.append(f"  - {error}")

        lines.append("")
        lines.append(self._color("=" * 60, 'bold'))

        content = "\n".join(lines)
        self._write_output(content, output)
        return content


class JSONReporter(BaseReporter):
    """JSON export of the full report"""

    def __init__(self, indent: int = 2):
        self.indent = indent

    def report(self, result: AnalysisReport, output: Optional[str] = None) -> str:
        """Generate JSON report"""
        content = json.dumps(result.to_dict(), indent=self.indent)
        self._write_output(content, output)
        return content


def get_reporter(format: str, **kwargs) -> BaseReporter:
    """Factory function to get reporter by format"""
    reporters = {
        'console': ConsoleReporter,
        'json': JSONReporter,
    }

    reporter_class = reporters.get(format.lower())
    if not reporter_class:
        raise ValueError(f"Unknown report format: {format}. Supported: {list(reporters.keys())}")

    return reporter_class(**kwargs)
