"""
Rule Converter Module

Runs the full Sigma to KQL pipeline:
load rule → compile selections → parse condition → resolve → render.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional, Union

from ..core.condition_parser import parse_condition
from ..core.exceptions import TranslationError
from ..core.field_mapper import FieldMapper
from ..core.kql_generator import KQLExpressionGenerator
from ..core.resolver import resolve_condition
from ..core.selection_compiler import SelectionCompiler
from ..core.sigma_parser import Rule, SigmaParser
from ..utils.file_handler import read_rule_text, save_query


@dataclass(frozen=True)
class TranslationResult:
    """
    Outcome of a translation: `query` on success, `error` otherwise.
    """

    query: Optional[str] = None
    error: Optional[TranslationError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def to_dict(self) -> Dict[str, Any]:
        if self.ok:
            return {'status': 'success', 'query': self.query}
        return {
            'status': 'error',
            'error_kind': self.error.kind,
            'error': self.error.message,
        }


class RuleConverter:
    """
    Converts Sigma rules to KQL queries against ECS field names.
    """

    def __init__(self, field_mapper: Optional[FieldMapper] = None):
        self.sigma_parser = SigmaParser()
        self.selection_compiler = SelectionCompiler(field_mapper)
        self.kql_generator = KQLExpressionGenerator()

    def rule_to_kql(self, rule: Rule) -> str:
        selections = self.selection_compiler.compile_selections(rule.detection)
        condition = parse_condition(rule.detection.condition)
        return self.kql_generator.generate(resolve_condition(condition, selections))

    def validate_rule_text(self, rule_text: Union[str, bytes]) -> Rule:
        """
        Load the rule, compile its selections and parse its condition
        without rendering a query. Raises TranslationError on the first problem.
        """
        rule = self.sigma_parser.parse_rule_text(rule_text)
        self.selection_compiler.compile_selections(rule.detection)
        parse_condition(rule.detection.condition)
        return rule

    def convert_to_kql(self, rule_text: Union[str, bytes]) -> str:
        """
        Translate rule text, raising the typed TranslationError on failure.
        """
        return self.rule_to_kql(self.sigma_parser.parse_rule_text(rule_text))

    def translate(self, rule_text: Union[str, bytes]) -> TranslationResult:
        try:
            return TranslationResult(query=self.convert_to_kql(rule_text))
        except TranslationError as e:
            return TranslationResult(error=e)

    def convert_rule_text(self, rule_text: Union[str, bytes], source: str = '<text>') -> Dict[str, Any]:
        """
        Convert rule text into a result dictionary.

        Returns:
            Dictionary with 'status' plus either 'query' and rule metadata,
            or 'error' and 'error_kind'
        """
        try:
            rule = self.sigma_parser.parse_rule_text(rule_text)
            query = self.rule_to_kql(rule)
        except TranslationError as e:
            logging.error(f"Error converting Sigma rule {source}: {e.kind}: {e.message}")
            return {
                'status': 'error',
                'sigma_file': source,
                'error_kind': e.kind,
                'error': e.message,
            }

        techniques = rule.mitre_techniques
        return {
            'status': 'success',
            'sigma_file': source,
            'title': rule.title,
            'level': rule.level,
            'technique': ', '.join(techniques) if techniques else 'Unknown',
            'query': query,
        }

    def convert_sigma_rule(self, sigma_file: Path, output_dir: Optional[Path] = None,
                           output_name: Optional[Path] = None) -> Dict[str, Any]:
        """
        Convert a single Sigma rule file.

        Args:
            sigma_file: Path to Sigma rule file
            output_dir: Directory to save the .kql query (optional)
            output_name: Relative output path inside output_dir (defaults to <rule stem>.kql)

        Returns:
            Dictionary with conversion results
        """
        try:
            rule_text = read_rule_text(sigma_file)
        except (OSError, UnicodeDecodeError) as e:
            logging.error(f"Error reading Sigma rule {sigma_file}: {e}")
            return {
                'status': 'error',
                'sigma_file': str(sigma_file),
                'error_kind': 'IOError',
                'error': str(e),
            }

        result = self.convert_rule_text(rule_text, str(sigma_file))
        result['output_file'] = None

        if output_dir and result['status'] == 'success':
            relative = output_name or Path(Path(sigma_file).stem + '.kql')
            result['output_file'] = str(save_query(result['query'], Path(output_dir) / relative))

        return result


_default_converter = RuleConverter()


def convert_sigma_to_kql(rule_text: Union[str, bytes]) -> str:
    """
    Translate Sigma rule text to a KQL query.

    Raises:
        TranslationError: RuleDecodeError, RuleValidationError or ConditionSyntaxError
    """
    return _default_converter.convert_to_kql(rule_text)


def translate(rule_text: Union[str, bytes]) -> TranslationResult:
    """
    Translate Sigma rule text to a KQL query without raising on bad input.
    """
    return _default_converter.translate(rule_text)
