"""
Sigma Rule Parser

Loads Sigma YAML detection rules into validated, immutable Rule objects.
Checks the detection block shape and normalizes selection bodies into
explicit single-map or list-of-maps variants.
"""

import re

import yaml
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Tuple, Union

from .exceptions import RuleDecodeError, RuleValidationError

TECHNIQUE_TAG = re.compile(r'attack\.t\d{4}(\.\d{3})?$')

SUPPORTED_MODIFIERS = ('contains', 'startswith', 'endswith', 'all')

Value = Union[str, Tuple[str, ...]]


@dataclass(frozen=True)
class SelectionMap:
    """Field expression → value entries, AND-combined."""

    entries: Tuple[Tuple[str, Any], ...]


@dataclass(frozen=True)
class SelectionList:
    """Sequence of maps, OR-combined."""

    maps: Tuple[SelectionMap, ...]


SelectionBody = Union[SelectionMap, SelectionList]


@dataclass(frozen=True)
class Detection:
    condition: str
    selections: Mapping[str, SelectionBody]

    @property
    def names(self) -> List[str]:
        return list(self.selections.keys())


@dataclass(frozen=True)
class Rule:
    title: str
    logsource: Mapping[str, str]
    detection: Detection
    id: str = ''
    description: str = ''
    status: str = 'experimental'
    level: str = 'medium'
    tags: Tuple[str, ...] = field(default_factory=tuple)

    @property
    def mitre_techniques(self) -> List[str]:
        return extract_mitre_techniques(self.tags)


def parse_field_with_modifiers(field_name: str) -> Tuple[str, List[str]]:
    """
    Parse field name and extract modifiers.

    Example: 'Image|endswith' → ('Image', ['endswith'])
    """
    if '|' not in field_name:
        return field_name.strip(), []

    parts = field_name.split('|')
    base_field = parts[0].strip()
    modifiers = [part.strip().lower() for part in parts[1:] if part.strip()]

    return base_field, modifiers


def extract_mitre_techniques(tags) -> List[str]:
    """
    Extract MITRE ATT&CK technique IDs from tags.
    """
    techniques = []
    for tag in tags:
        if TECHNIQUE_TAG.match(tag):  # attack.t1234 or attack.t1234.001
            technique_id = tag.replace('attack.t', 'T').upper()
            techniques.append(technique_id)
    return techniques


def _scalar_to_text(value: Any, where: str) -> str:
    if isinstance(value, bool):
        return 'true' if value else 'false'
    if isinstance(value, (str, int, float)):
        return str(value)
    if value is None:
        raise RuleValidationError(f"Null value is not supported in {where}")
    raise RuleValidationError(f"Unsupported value type {type(value).__name__} in {where}")


def _normalize_value(value: Any, where: str) -> Value:
    if isinstance(value, list):
        return tuple(_scalar_to_text(item, where) for item in value)
    return _scalar_to_text(value, where)


def _normalize_map(body: Dict[Any, Any], name: str) -> SelectionMap:
    entries = []
    for field_expr, value in body.items():
        where = f"selection '{name}', field '{field_expr}'"
        entries.append((str(field_expr), _normalize_value(value, where)))
    return SelectionMap(tuple(entries))


def _normalize_selection(name: str, body: Any) -> SelectionBody:
    if isinstance(body, dict):
        return _normalize_map(body, name)
    if isinstance(body, list) and all(isinstance(item, dict) for item in body):
        return SelectionList(tuple(_normalize_map(item, name) for item in body))
    raise RuleValidationError(
        f"Selection '{name}' must be a mapping or a list of mappings, "
        f"got {type(body).__name__}"
    )


def _normalize_condition(condition: Any) -> str:
    if isinstance(condition, list):
        parts = [c.strip() for c in condition if isinstance(c, str) and c.strip()]
        if not parts or len(parts) != len(condition):
            raise RuleValidationError("Condition list must contain non-empty strings")
        if len(parts) == 1:
            return parts[0]
        return ' or '.join(f"({part})" for part in parts)
    if not isinstance(condition, str) or not condition.strip():
        raise RuleValidationError("Invalid Sigma rule: 'detection.condition' must be a non-empty string")
    return condition.strip()


def load_rule(rule_text: Union[str, bytes]) -> Rule:
    """
    Decode and validate Sigma rule text.

    Raises:
        RuleDecodeError: text is not valid YAML
        RuleValidationError: decoded document is not a usable Sigma rule
    """
    if isinstance(rule_text, bytes):
        try:
            rule_text = rule_text.decode('utf-8')
        except UnicodeDecodeError as e:
            raise RuleDecodeError(f"Rule text is not valid UTF-8: {e}")

    try:
        rule_data = yaml.safe_load(rule_text)
    except yaml.YAMLError as e:
        raise RuleDecodeError(f"Invalid YAML: {e}")

    if not isinstance(rule_data, dict):
        raise RuleValidationError("Invalid YAML: the rule must be a YAML mapping")

    detection = rule_data.get('detection')
    if not isinstance(detection, dict):
        raise RuleValidationError("Invalid Sigma rule: 'detection' mapping is required")
    if 'condition' not in detection:
        raise RuleValidationError("Invalid Sigma rule: 'detection' must contain 'condition'")

    condition = _normalize_condition(detection['condition'])

    selections = {}
    for key, body in detection.items():
        if key == 'condition':
            continue
        selections[str(key)] = _normalize_selection(str(key), body)

    if not selections:
        raise RuleValidationError("Invalid Sigma rule: 'detection' declares no selections")

    logsource = rule_data.get('logsource') or {}
    if not isinstance(logsource, dict):
        raise RuleValidationError("Invalid Sigma rule: 'logsource' must be a mapping")

    tags = rule_data.get('tags') or []
    if not isinstance(tags, list):
        tags = [tags]

    return Rule(
        title=str(rule_data.get('title') or ''),
        logsource=MappingProxyType({str(k): str(v) for k, v in logsource.items()}),
        detection=Detection(condition=condition, selections=MappingProxyType(selections)),
        id=str(rule_data.get('id') or ''),
        description=str(rule_data.get('description') or ''),
        status=str(rule_data.get('status') or 'experimental'),
        level=str(rule_data.get('level') or 'medium').lower(),
        tags=tuple(str(tag) for tag in tags),
    )


class SigmaParser:
    """
    Loads Sigma rules from text or files.
    """

    def parse_rule_text(self, rule_text: Union[str, bytes]) -> Rule:
        return load_rule(rule_text)

    def parse_sigma_rule(self, file_path: Path) -> Rule:
        """
        Parse a Sigma rule file.

        Returns:
            Validated Rule
        """
        with open(file_path, 'r', encoding='utf-8') as f:
            return load_rule(f.read())

    def parse_field_with_modifiers(self, field_name: str) -> Tuple[str, List[str]]:
        return parse_field_with_modifiers(field_name)
