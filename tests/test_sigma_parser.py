"""
Tests for Sigma rule loading and validation.
"""

import pytest

from sigma2kql.core.exceptions import RuleDecodeError, RuleValidationError, TranslationError
from sigma2kql.core.sigma_parser import (
    SelectionList,
    SelectionMap,
    SigmaParser,
    extract_mitre_techniques,
    load_rule,
    parse_field_with_modifiers,
)


class TestLoadRule:
    """Tests for rule decoding and shape validation."""

    def test_load_valid_rule(self, powershell_rule):
        rule = load_rule(powershell_rule)

        assert rule.title == "Encoded PowerShell Command"
        assert rule.logsource['category'] == "process_creation"
        assert rule.level == "high"
        assert rule.detection.condition == "selection"
        assert rule.detection.names == ["selection"]

        selection = rule.detection.selections["selection"]
        assert isinstance(selection, SelectionMap)
        assert selection.entries == (
            ("Image", "*\\powershell.exe"),
            ("CommandLine|contains", "-enc"),
        )

    def test_mitre_techniques_from_tags(self, powershell_rule):
        rule = load_rule(powershell_rule)
        assert rule.mitre_techniques == ["T1059.001"]

    def test_tactic_tags_are_not_techniques(self):
        assert extract_mitre_techniques(
            ["attack.ta0002", "attack.t1059", "attack.execution", "attack.t1218.011"]
        ) == ["T1059", "T1218.011"]

    def test_list_of_maps_selection(self):
        rule = load_rule("""
detection:
    selection:
        - Image|endswith: '\\x.exe'
        - CommandLine: foo
    condition: selection
""")
        selection = rule.detection.selections["selection"]
        assert isinstance(selection, SelectionList)
        assert len(selection.maps) == 2

    def test_scalar_values_become_text(self):
        rule = load_rule("""
detection:
    selection:
        EventID:
            - 4688
            - 1
        Enabled: true
    condition: selection
""")
        entries = dict(rule.detection.selections["selection"].entries)
        assert entries["EventID"] == ("4688", "1")
        assert entries["Enabled"] == "true"

    def test_condition_list_is_or_combined(self):
        rule = load_rule("""
detection:
    sel1:
        a: b
    sel2:
        c: d
    condition:
        - sel1
        - sel2 and sel1
""")
        assert rule.detection.condition == "(sel1) or (sel2 and sel1)"

    def test_defaults_for_missing_metadata(self):
        rule = load_rule("detection:\n    sel:\n        a: b\n    condition: sel\n")
        assert rule.title == ""
        assert rule.level == "medium"
        assert dict(rule.logsource) == {}
        assert rule.mitre_techniques == []

    def test_invalid_yaml(self):
        with pytest.raises(RuleDecodeError) as exc_info:
            load_rule("detection: [unclosed")
        assert exc_info.value.kind == "DecodeError"

    def test_invalid_utf8_bytes(self):
        with pytest.raises(RuleDecodeError):
            load_rule(b"\xff\xfe\xfa")

    @pytest.mark.parametrize("text", ["", "   \n  ", "just a string", "- a\n- b\n"])
    def test_non_mapping_documents(self, text):
        with pytest.raises(RuleValidationError) as exc_info:
            load_rule(text)
        assert exc_info.value.kind == "ValidationError"

    def test_whitespace_with_tab(self):
        # PyYAML rejects the tab before it sees an empty document.
        with pytest.raises(TranslationError) as exc_info:
            load_rule("   \n\t  ")
        assert exc_info.value.kind in ("DecodeError", "ValidationError")

    def test_missing_detection(self):
        with pytest.raises(RuleValidationError, match="detection"):
            load_rule("title: No detection\n")

    def test_missing_condition(self):
        with pytest.raises(RuleValidationError, match="condition"):
            load_rule("detection:\n    sel:\n        a: b\n")

    def test_empty_condition(self):
        with pytest.raises(RuleValidationError):
            load_rule("detection:\n    sel:\n        a: b\n    condition: '  '\n")

    def test_no_selections(self):
        with pytest.raises(RuleValidationError, match="no selections"):
            load_rule("detection:\n    condition: sel\n")

    def test_keyword_list_selection_rejected(self):
        with pytest.raises(RuleValidationError, match="mapping or a list of mappings"):
            load_rule("detection:\n    keywords:\n        - mimikatz\n    condition: keywords\n")

    def test_null_value_rejected(self):
        with pytest.raises(RuleValidationError, match="Null value"):
            load_rule("detection:\n    sel:\n        CommandLine: null\n    condition: sel\n")

    def test_loaded_rule_is_read_only(self, powershell_rule):
        rule = load_rule(powershell_rule)
        with pytest.raises(TypeError):
            rule.detection.selections["other"] = None


class TestFieldModifiers:

    def test_no_modifiers(self):
        assert parse_field_with_modifiers("Image") == ("Image", [])

    def test_modifiers_lowercased_in_order(self):
        assert parse_field_with_modifiers("CommandLine|Contains|ALL") == ("CommandLine", ["contains", "all"])


class TestSigmaParser:

    def test_parse_rule_file(self, tmp_path, powershell_rule):
        rule_file = tmp_path / "rule.yml"
        rule_file.write_text(powershell_rule, encoding='utf-8')

        rule = SigmaParser().parse_sigma_rule(rule_file)
        assert rule.title == "Encoded PowerShell Command"
