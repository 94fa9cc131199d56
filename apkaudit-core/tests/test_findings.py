"""Tests for criticality tiers, findings and finding sets."""

import pytest
from pydantic import ValidationError

from apkaudit.models.findings import Criticality, Finding, FindingSet


def _finding(name="Internet access", criticality=Criticality.WARNING, **kwargs):
    return Finding(criticality=criticality, name=name, **kwargs)


class TestCriticality:
    @pytest.mark.parametrize("text", ["high", "HIGH", "High", " high "])
    def test_parse_case_insensitive(self, text):
        assert Criticality.parse(text) is Criticality.HIGH

    @pytest.mark.parametrize("text", ["", "severe", "hi", "5"])
    def test_parse_rejects_unknown(self, text):
        with pytest.raises(ValueError):
            Criticality.parse(text)

    def test_parse_rejects_non_string(self):
        with pytest.raises(ValueError):
            Criticality.parse(3)

    def test_total_order(self):
        assert (
            Criticality.WARNING
            < Criticality.LOW
            < Criticality.MEDIUM
            < Criticality.HIGH
            < Criticality.CRITICAL
        )

    def test_max(self):
        assert max([Criticality.LOW, Criticality.CRITICAL, Criticality.MEDIUM]) is Criticality.CRITICAL

    def test_canonical_text(self):
        assert str(Criticality.MEDIUM) == "medium"


class TestFinding:
    def test_frozen(self):
        finding = _finding()
        with pytest.raises(ValidationError):
            finding.name = "other"

    def test_equal_findings_hash_equal(self):
        a = _finding(file="AndroidManifest.xml", line=3)
        b = _finding(file="AndroidManifest.xml", line=3)
        assert a == b
        assert hash(a) == hash(b)

    def test_identity_missing_location_sorts_first(self):
        located = _finding(file="AndroidManifest.xml", line=1)
        bare = _finding()
        assert bare.identity < located.identity


class TestFindingSet:
    def test_deduplicates(self):
        findings = FindingSet()
        assert findings.add(_finding(line=4)) is True
        assert findings.add(_finding(line=4)) is False
        assert len(findings) == 1

    def test_iteration_independent_of_insertion_order(self):
        items = [
            _finding("Read SMS", Criticality.HIGH, line=9),
            _finding("Camera", Criticality.HIGH, line=7),
            _finding("Camera", Criticality.HIGH, line=2),
        ]
        forward = list(FindingSet(items))
        backward = list(FindingSet(reversed(items)))
        assert forward == backward
        assert [(f.name, f.line) for f in forward] == [
            ("Camera", 2),
            ("Camera", 7),
            ("Read SMS", 9),
        ]

    def test_contains(self):
        finding = _finding()
        findings = FindingSet([finding])
        assert finding in findings
        assert _finding(name="Other") not in findings
