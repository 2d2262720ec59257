"""
Sigma Condition Parser

Recursive-descent parser for the `detection.condition` expression.
Produces an AST over selection names, covering:
- `and` / `or` / `not` with standard precedence and parentheses
- Wildcard name groups such as `selection_*`
- Quantifiers `1 of X` and `all of X`, where X is a name, a group or `them`
"""

import re
from dataclasses import dataclass
from typing import List, Union

from .exceptions import ConditionSyntaxError

KEYWORDS = ('and', 'or', 'not', 'of', 'them')
QUANTIFIERS = {'1': 'one', 'all': 'all'}

TOKEN_PATTERN = re.compile(r'\(|\)|[^\s()]+')

# Combined depth of open parentheses and `not` operators.
MAX_NESTING_DEPTH = 64


@dataclass(frozen=True)
class Identifier:
    name: str


@dataclass(frozen=True)
class WildcardGroup:
    """Selection names starting with `prefix` (written `prefix*`)."""

    prefix: str


@dataclass(frozen=True)
class Them:
    """Every selection of the rule."""


@dataclass(frozen=True)
class NotExpr:
    operand: 'ConditionNode'


@dataclass(frozen=True)
class AndExpr:
    left: 'ConditionNode'
    right: 'ConditionNode'


@dataclass(frozen=True)
class OrExpr:
    left: 'ConditionNode'
    right: 'ConditionNode'


@dataclass(frozen=True)
class Quantifier:
    kind: str  # 'one' or 'all'
    target: Union[Identifier, WildcardGroup, Them]


ConditionNode = Union[Identifier, WildcardGroup, NotExpr, AndExpr, OrExpr, Quantifier]


def tokenize(condition: str) -> List[str]:
    """
    Split a condition into parentheses and whitespace-separated words.

    Example: 'sel and not (f1 or f2)' → ['sel', 'and', 'not', '(', 'f1', 'or', 'f2', ')']
    """
    return TOKEN_PATTERN.findall(condition)


class ConditionParser:
    """
    Parses one condition string. Use `parse_condition` for the common case.
    """

    def __init__(self, condition: str):
        self.condition = condition
        self.tokens = tokenize(condition)
        self.pos = 0
        self.depth = 0

    def parse(self) -> ConditionNode:
        if not self.tokens:
            raise ConditionSyntaxError("Empty condition")

        node = self._parse_or()

        if self.pos < len(self.tokens):
            token = self.tokens[self.pos]
            if token == ')':
                raise ConditionSyntaxError("Unmatched ')'", self.pos)
            raise ConditionSyntaxError(f"Unexpected '{token}' after complete expression", self.pos)
        return node

    def _peek(self):
        if self.pos < len(self.tokens):
            return self.tokens[self.pos]
        return None

    def _next(self) -> str:
        token = self._peek()
        if token is None:
            raise ConditionSyntaxError(f"Unexpected end of condition '{self.condition}'", self.pos)
        self.pos += 1
        return token

    def _parse_or(self) -> ConditionNode:
        left = self._parse_and()
        while self._peek() == 'or':
            self.pos += 1
            left = OrExpr(left, self._parse_and())
        return left

    def _parse_and(self) -> ConditionNode:
        left = self._parse_unary()
        while self._peek() == 'and':
            self.pos += 1
            left = AndExpr(left, self._parse_unary())
        return left

    def _enter(self, levels: int, position: int):
        self.depth += levels
        if self.depth > MAX_NESTING_DEPTH:
            raise ConditionSyntaxError(f"Condition nesting deeper than {MAX_NESTING_DEPTH} levels", position)

    def _parse_unary(self) -> ConditionNode:
        start = self.pos
        negations = 0
        while self._peek() == 'not':
            self.pos += 1
            negations += 1
        self._enter(negations, start)

        if self._peek() in QUANTIFIERS:
            node = self._parse_quantifier()
        else:
            node = self._parse_atom()

        self.depth -= negations
        for _ in range(negations):
            node = NotExpr(node)
        return node

    def _parse_quantifier(self) -> Quantifier:
        start = self.pos
        kind = QUANTIFIERS[self._next()]
        if self._peek() != 'of':
            raise ConditionSyntaxError(f"Quantifier '{self.tokens[start]}' must be followed by 'of'", start)
        self.pos += 1

        token = self._next()
        if token == 'them':
            return Quantifier(kind, Them())
        if token in ('(', ')') or token in KEYWORDS or token in QUANTIFIERS:
            raise ConditionSyntaxError(f"Expected selection name after 'of', got '{token}'", self.pos - 1)
        return Quantifier(kind, self._name_node(token))

    def _parse_atom(self) -> ConditionNode:
        start = self.pos
        token = self._next()

        if token == '(':
            self._enter(1, start)
            node = self._parse_or()
            if self._peek() != ')':
                raise ConditionSyntaxError("Unmatched '('", start)
            self.pos += 1
            self.depth -= 1
            return node

        if token == ')' or token in KEYWORDS:
            raise ConditionSyntaxError(f"Expected selection name, got '{token}'", start)
        return self._name_node(token)

    @staticmethod
    def _name_node(token: str) -> Union[Identifier, WildcardGroup]:
        if token.endswith('*'):
            return WildcardGroup(token[:-1])
        return Identifier(token)


def parse_condition(condition: str) -> ConditionNode:
    """
    Parse a Sigma condition into an AST.

    Raises:
        ConditionSyntaxError: condition does not match the grammar
    """
    return ConditionParser(condition).parse()
