"""Mapping axe violations onto WCAG findings."""

from a11y_scanner.checks.wcag import (
    conformance_level,
    criterion_code,
    normalize_violations,
    severity_for,
    to_wcag_finding,
)

from fakes import SAMPLE_VIOLATION


class TestCriterionCode:
    def test_three_digits(self):
        assert criterion_code(["wcag131"]) == "1.3.1"

    def test_four_digits_become_four_sections(self):
        assert criterion_code(["wcag1410"]) == "1.4.1.0"

    def test_level_tags_are_not_codes(self):
        assert criterion_code(["wcag2a", "wcag21aa", "best-practice"]) is None

    def test_first_numeric_tag_wins(self):
        assert criterion_code(["cat.color", "wcag143", "wcag111"]) == "1.4.3"


class TestConformanceLevel:
    def test_defaults_to_a(self):
        assert conformance_level(["cat.forms", "wcag131"]) == "A"

    def test_aa(self):
        assert conformance_level(["wcag2aa"]) == "AA"

    def test_aaa(self):
        assert conformance_level(["wcag2aaa"]) == "AAA"

    def test_versioned_level_tag(self):
        assert conformance_level(["wcag21aa"]) == "AA"

    def test_escalates_to_aa(self):
        assert conformance_level(["wcag2a", "wcag2aa"]) == "AA"

    def test_escalates_to_aaa_regardless_of_order(self):
        assert conformance_level(["wcag2aaa", "wcag2aa"]) == "AAA"
        assert conformance_level(["wcag2aa", "wcag2aaa"]) == "AAA"


class TestSeverity:
    def test_mapping(self):
        assert severity_for("critical") == "error"
        assert severity_for("serious") == "error"
        assert severity_for("moderate") == "warning"
        assert severity_for("minor") == "info"
        assert severity_for(None) == "info"


class TestToWcagFinding:
    def test_serious_aa_violation(self):
        finding = to_wcag_finding({
            "id": "landmark", "impact": "serious", "tags": ["wcag131", "wcag2aa"], "nodes": [],
        })
        assert finding.code == "1.3.1"
        assert finding.level == "AA"
        assert finding.severity == "error"
        assert finding.label == "WCAG 1.3.1 (AA)"

    def test_unmapped_when_no_numeric_tag(self):
        finding = to_wcag_finding({"id": "region", "impact": "moderate", "tags": ["best-practice"]})
        assert finding.code is None
        assert "Unmapped" in finding.label
        assert finding.severity == "warning"

    def test_only_first_node_is_used(self):
        finding = to_wcag_finding(SAMPLE_VIOLATION)
        assert finding.label == "WCAG 1.3.1 (AA)"
        assert finding.location == "#email"
        assert finding.detail == "Fix any of the following: no label"
        assert finding.rule_id == "label"

    def test_nested_targets_are_flattened(self):
        finding = to_wcag_finding({
            "id": "button-name",
            "tags": [],
            "nodes": [{"target": [["iframe#pay", "#submit"]]}],
            "help": "Buttons must have discernible text",
        })
        assert finding.location == "iframe#pay, #submit"
        assert finding.detail == "Buttons must have discernible text"

    def test_location_falls_back_to_rule_id(self):
        assert to_wcag_finding({"id": "document-title", "tags": []}).location == "document-title"

    def test_detail_fallback_chain(self):
        assert to_wcag_finding({"id": "x", "description": "desc"}).detail == "desc"
        assert to_wcag_finding({"id": "x", "help": "", "description": ""}).detail == "x"

    def test_normalize_keeps_order(self):
        findings = normalize_violations([{"id": "a"}, {"id": "b"}])
        assert [f.rule_id for f in findings] == ["a", "b"]
