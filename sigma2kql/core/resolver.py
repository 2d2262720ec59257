"""
Condition Resolver

Binds a parsed condition to the compiled selections of a rule and returns
the final clause tree.
"""

import logging
from typing import List, Mapping, Union

from .clauses import And, ClauseNode, Not, Or, UNSATISFIABLE
from .condition_parser import (
    AndExpr,
    ConditionNode,
    Identifier,
    NotExpr,
    OrExpr,
    Quantifier,
    Them,
    WildcardGroup,
)


class ConditionResolver:
    """
    Resolves condition nodes against a name → clause table.

    Unknown names never raise: they resolve to an unsatisfiable clause so a
    query is still produced.
    """

    def __init__(self, selections: Mapping[str, ClauseNode]):
        self.selections = selections

    def resolve(self, node: ConditionNode) -> ClauseNode:
        if isinstance(node, Identifier):
            return self._resolve_identifier(node.name)
        if isinstance(node, WildcardGroup):
            return self._combine('one', self.matching_names(node))
        if isinstance(node, Quantifier):
            return self._combine(node.kind, self.matching_names(node.target))
        if isinstance(node, NotExpr):
            return Not(self.resolve(node.operand))
        if isinstance(node, AndExpr):
            return And((self.resolve(node.left), self.resolve(node.right)))
        if isinstance(node, OrExpr):
            return Or((self.resolve(node.left), self.resolve(node.right)))
        raise TypeError(f"Unknown condition node: {node!r}")

    def matching_names(self, target: Union[Identifier, WildcardGroup, Them]) -> List[str]:
        """
        Selection names a quantifier target refers to, sorted for determinism.
        """
        if isinstance(target, Them):
            return sorted(self.selections)
        if isinstance(target, WildcardGroup):
            return sorted(name for name in self.selections if name.startswith(target.prefix))
        return [target.name]

    def _resolve_identifier(self, name: str) -> ClauseNode:
        if name not in self.selections:
            logging.warning(f"Condition references undefined selection '{name}', it will never match")
            return UNSATISFIABLE
        return self.selections[name]

    def _combine(self, kind: str, names: List[str]) -> ClauseNode:
        if not names:
            logging.warning("Condition group matches no selections, it will never match")
            return UNSATISFIABLE
        clauses = tuple(self._resolve_identifier(name) for name in names)
        if kind == 'all':
            return And(clauses)
        return Or(clauses)


def resolve_condition(node: ConditionNode, selections: Mapping[str, ClauseNode]) -> ClauseNode:
    return ConditionResolver(selections).resolve(node)
