"""
Core components for Sigma rule translation.

Contains the loading, compiling, parsing, resolving and rendering stages.
"""

from .sigma_parser import SigmaParser, load_rule
from .field_mapper import FieldMapper, resolve
from .selection_compiler import SelectionCompiler
from .condition_parser import ConditionParser, parse_condition
from .resolver import ConditionResolver, resolve_condition
from .kql_generator import KQLExpressionGenerator, render_query

__all__ = [
    'SigmaParser',
    'load_rule',
    'FieldMapper',
    'resolve',
    'SelectionCompiler',
    'ConditionParser',
    'parse_condition',
    'ConditionResolver',
    'resolve_condition',
    'KQLExpressionGenerator',
    'render_query',
]
