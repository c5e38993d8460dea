"""
Tokens - the units of information tracked by each analysis family.

- DefinitionSite: one definition of a variable at one line (reaching definitions)
- VariableName: a variable (live variables)
- Expression: a normalized expression string (available / very busy expressions)

All tokens are frozen and ordered so they can live in sets and be reported
in a stable order. The engine itself only needs them to be hashable.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Union


@dataclass(frozen=True, order=True)
class DefinitionSite:
    """A definition of ``variable`` at source line ``line``"""
    variable: str
    line: int

    def defines(self, variable: str) -> bool:
        return self.variable == variable

    def __str__(self):
        return f"{self.variable}@L{self.line}"


@dataclass(frozen=True, order=True)
class VariableName:
    name: str

    def __str__(self):
        return self.name


@dataclass(frozen=True, order=True)
class Expression:
    """A normalized binary expression such as ``x + y``"""
    text: str

    def mentions(self, variable: str) -> bool:
        """Substring containment on the normalized text ('a' is mentioned by 'ab + c')"""
        return variable in self.text

    def __str__(self):
        return self.text


Token = Union[DefinitionSite, VariableName, Expression]


def render_tokens(tokens: Iterable[Token]) -> List[str]:
    """Render a token set as a sorted list of strings"""
    return [str(t) for t in sorted(tokens)]
