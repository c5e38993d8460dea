"""
Analysis configuration for FlowScan.

Settings come from an optional YAML file and are overridden by CLI flags:

    max_iterations: 100          # engine pass cap
    must_boundary: universal     # or 'empty'; open-end value for must analyses
    optimization_hints: false    # redundant / hoistable expression notes
    language: java
    languages_dir: null          # directory of extra language profiles
    analyses: [reaching, live, available, busy]
"""

from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any, Dict, List, Optional
import logging

import yaml

from .dataflow.analyses import ANALYSES, BOUNDARY_POLICIES, BOUNDARY_UNIVERSAL
from .dataflow.engine import DEFAULT_MAX_ITERATIONS
from .errors import ConfigurationError

logger = logging.getLogger(__name__)


def _default_analyses() -> List[str]:
    return list(ANALYSES.keys())


@dataclass
class AnalysisConfig:
    """Settings for one analysis run"""
    max_iterations: int = DEFAULT_MAX_ITERATIONS
    must_boundary: str = BOUNDARY_UNIVERSAL
    optimization_hints: bool = False
    language: str = "java"
    languages_dir: Optional[Path] = None
    analyses: List[str] = field(default_factory=_default_analyses)

    def validate(self) -> 'AnalysisConfig':
        """Check option values, raising ConfigurationError on the first bad one"""
        if not isinstance(self.max_iterations, int) or isinstance(self.max_iterations, bool) \
                or self.max_iterations < 1:
            raise ConfigurationError(
                f"max_iterations must be a positive integer, got {self.max_iterations!r}",
                source="config",
            )

        if self.must_boundary not in BOUNDARY_POLICIES:
            raise ConfigurationError(
                f"must_boundary must be one of {list(BOUNDARY_POLICIES)}, got {self.must_boundary!r}",
                source="config",
            )

        if not self.analyses:
            raise ConfigurationError("At least one analysis must be enabled", source="config")

        unknown = [a for a in self.analyses if a not in ANALYSES]
        if unknown:
            raise ConfigurationError(
                f"Unknown analyses: {unknown}. Supported: {list(ANALYSES.keys())}",
                source="config",
            )

        if self.optimization_hints and self.must_boundary == BOUNDARY_UNIVERSAL:
            logger.warning("Optimization hints with a universal must boundary report every "
                           "expression as available at ENTRY and busy at EXIT; "
                           "use must_boundary: empty for precise hints")

        return self

    def merged(self, **overrides: Any) -> 'AnalysisConfig':
        """Copy with non-None overrides applied"""
        changes = {k: v for k, v in overrides.items() if v is not None}
        return replace(self, **changes).validate()

    def to_dict(self) -> Dict[str, Any]:
        return {
            'max_iterations': self.max_iterations,
            'must_boundary': self.must_boundary,
            'optimization_hints': self.optimization_hints,
            'language': self.language,
            'languages_dir': str(self.languages_dir) if self.languages_dir else None,
            'analyses': list(self.analyses),
        }


def parse_config(raw: Dict[str, Any]) -> AnalysisConfig:
    """Build a validated AnalysisConfig from a parsed YAML mapping"""
    known = {f.name for f in fields(AnalysisConfig)}
    unknown = sorted(set(raw) - known)
    if unknown:
        raise ConfigurationError(f"Unknown configuration keys: {unknown}", source="config")

    values = dict(raw)
    if values.get('languages_dir'):
        values['languages_dir'] = Path(values['languages_dir'])
    if isinstance(values.get('analyses'), str):
        values['analyses'] = [values['analyses']]
    if 'analyses' in values:
        values['analyses'] = [str(a).lower() for a in values['analyses'] or []]

    return AnalysisConfig(**values).validate()


def load_config(path: Optional[Path] = None) -> AnalysisConfig:
    """Load configuration from a YAML file, or defaults when no path is given"""
    if path is None:
        return AnalysisConfig().validate()

    path = Path(path)
    try:
        with open(path, 'r', encoding='utf-8') as f:
            data = yaml.safe_load(f)
    except OSError as e:
        raise ConfigurationError(f"Cannot read config file {path}: {e}", source="config") from e
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in {path}: {e}", source="config") from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigurationError(f"Config file {path} must contain a mapping", source="config")

    config = parse_config(data)
    logger.info(f"Loaded configuration from {path}")
    return config
