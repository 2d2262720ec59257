"""
Sigma to KQL Rule Converter

This package translates Sigma detection rules into Kibana Query Language
(KQL) filter expressions, using Elastic Common Schema (ECS) field names.
"""

__version__ = "1.0.0"

from .core.exceptions import (
    ConditionSyntaxError,
    RuleDecodeError,
    RuleValidationError,
    TranslationError,
)
from .core.field_mapper import FieldMapper, resolve
from .core.sigma_parser import SigmaParser, load_rule
from .processors.rule_converter import RuleConverter, TranslationResult, convert_sigma_to_kql, translate
from .processors.batch_processor import BatchProcessor

__all__ = [
    'translate',
    'convert_sigma_to_kql',
    'TranslationResult',
    'TranslationError',
    'RuleDecodeError',
    'RuleValidationError',
    'ConditionSyntaxError',
    'SigmaParser',
    'load_rule',
    'FieldMapper',
    'resolve',
    'RuleConverter',
    'BatchProcessor',
]
