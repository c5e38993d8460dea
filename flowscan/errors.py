"""
Exceptions raised by FlowScan.

Only the configuration boundary raises: loading a config file, resolving a
language profile, or selecting an unknown analysis. The dataflow engine and
the analyses never raise on data-shape problems.
"""


class FlowScanError(Exception):
    """Base exception for FlowScan errors."""
    def __init__(self, message: str, source: str = ""):
        self.message = message
        self.source = source
        super().__init__(f"[{source}] {message}" if source else message)


class ConfigurationError(FlowScanError):
    """Invalid configuration file or option value."""
    pass


class UnsupportedLanguageError(FlowScanError):
    """No language profile is available for the requested language."""
    pass
