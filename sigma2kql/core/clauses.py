"""
Clause Tree

Boolean intermediate representation shared by the selection compiler,
the condition resolver and the KQL generator.
"""

from dataclasses import dataclass
from typing import Tuple, Union

EXACT = 'exact'
PREFIX = 'prefix'
SUFFIX = 'suffix'
SUBSTRING = 'substring'

OPERATORS = (EXACT, PREFIX, SUFFIX, SUBSTRING)
COMBINATORS = ('or', 'and')


@dataclass(frozen=True)
class FieldClause:
    """
    Match of one field against one or more values.

    `combinator` decides how several values combine ('or' unless the
    Sigma `all` modifier was given).
    """

    field: str
    operator: str
    values: Tuple[str, ...]
    combinator: str = 'or'

    def __post_init__(self):
        if not self.values:
            raise ValueError(f"FieldClause for '{self.field}' needs at least one value")
        if self.operator not in OPERATORS:
            raise ValueError(f"Unknown operator: {self.operator}")
        if self.combinator not in COMBINATORS:
            raise ValueError(f"Unknown combinator: {self.combinator}")


@dataclass(frozen=True)
class And:
    children: Tuple['ClauseNode', ...]


@dataclass(frozen=True)
class Or:
    children: Tuple['ClauseNode', ...]


@dataclass(frozen=True)
class Not:
    child: 'ClauseNode'


ClauseNode = Union[FieldClause, And, Or, Not]

# Empty disjunction, never satisfied.
UNSATISFIABLE = Or(())
