"""
Selection Compiler

Compiles the named selections of a Sigma detection block into clause trees:
- A mapping becomes an AND of its field clauses
- A list of mappings becomes an OR of those ANDs
- Value lists become one field clause combined with OR (AND with `|all`)
"""

import logging
from typing import Dict, List, Optional

from .clauses import And, ClauseNode, EXACT, FieldClause, Or, PREFIX, SUBSTRING, SUFFIX
from .exceptions import RuleValidationError
from .field_mapper import FieldMapper
from .sigma_parser import (
    Detection,
    SUPPORTED_MODIFIERS,
    SelectionBody,
    SelectionList,
    SelectionMap,
    Value,
    parse_field_with_modifiers,
)


class SelectionCompiler:
    """
    Turns Sigma selection bodies into clause trees using an ECS field mapper.
    """

    def __init__(self, field_mapper: Optional[FieldMapper] = None):
        self.field_mapper = field_mapper or FieldMapper()
        self.operator_mappings = {
            'startswith': PREFIX,
            'endswith': SUFFIX,
            'contains': SUBSTRING,
        }

    def compile_selections(self, detection: Detection) -> Dict[str, ClauseNode]:
        """
        Compile every selection of a detection block, keyed by selection name.
        """
        return {
            name: self.compile_selection(name, body)
            for name, body in detection.selections.items()
        }

    def compile_selection(self, name: str, body: SelectionBody) -> ClauseNode:
        if isinstance(body, SelectionList):
            if not body.maps:
                raise RuleValidationError(f"Selection '{name}' is an empty list")
            return Or(tuple(self._compile_map(name, item) for item in body.maps))
        return self._compile_map(name, body)

    def _compile_map(self, name: str, selection: SelectionMap) -> And:
        if not selection.entries:
            raise RuleValidationError(f"Selection '{name}' has no fields")
        return And(tuple(
            self.compile_field(name, field_expr, value)
            for field_expr, value in selection.entries
        ))

    def compile_field(self, name: str, field_expr: str, value: Value) -> FieldClause:
        """
        Compile one `Field|modifier: value` entry.

        Example: ('Image|endswith', 'cmd.exe') →
        FieldClause('process.executable', 'suffix', ('cmd.exe',), 'or')
        """
        base_field, modifiers = parse_field_with_modifiers(field_expr)
        if not base_field:
            raise RuleValidationError(f"Selection '{name}' has an empty field name")

        values = value if isinstance(value, tuple) else (value,)
        if not values:
            raise RuleValidationError(
                f"Selection '{name}', field '{field_expr}' has an empty value list"
            )

        return FieldClause(
            field=self.field_mapper.resolve(base_field),
            operator=self._select_operator(modifiers, field_expr),
            values=values,
            combinator='and' if 'all' in modifiers else 'or',
        )

    def _select_operator(self, modifiers: List[str], field_expr: str) -> str:
        unsupported = [m for m in modifiers if m not in SUPPORTED_MODIFIERS]
        if unsupported:
            logging.warning(f"Ignoring unsupported modifiers {unsupported} on '{field_expr}'")

        # startswith, then endswith, then contains
        for modifier in ('startswith', 'endswith', 'contains'):
            if modifier in modifiers:
                return self.operator_mappings[modifier]
        return EXACT


def compile_selections(detection: Detection,
                       field_mapper: Optional[FieldMapper] = None) -> Dict[str, ClauseNode]:
    return SelectionCompiler(field_mapper).compile_selections(detection)
