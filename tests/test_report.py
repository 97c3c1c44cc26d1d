"""Tests for the SARIF report model and severity summarizer."""

from __future__ import annotations

import copy
import json

import pytest
from pydantic import ValidationError

from graphrisk_scan.errors import ReportWriteError
from graphrisk_scan.report import (
    Level,
    Report,
    count_by_level,
    count_findings,
    summarize,
)


class TestReportModel:
    def test_extra_fields_preserved(self, make_sarif):
        doc = make_sarif(["error"])
        doc["$schema"] = "https://json.schemastore.org/sarif-2.1.0.json"
        report = Report.from_document(doc)
        assert report.document is doc
        assert json.loads(report.to_json())["$schema"].endswith("sarif-2.1.0.json")

    def test_missing_level_defaults_to_warning(self):
        report = Report.from_document({"runs": [{"results": [{"ruleId": "X"}]}]})
        assert list(report.iter_levels()) == ["warning"]

    @pytest.mark.parametrize(
        "doc",
        [
            {},
            {"runs": []},
            {"runs": [{}]},
            {"runs": [{"results": "oops"}]},
            None,
        ],
    )
    def test_invalid_documents(self, doc):
        with pytest.raises(ValidationError):
            Report.from_document(doc)

    def test_write_pretty_prints(self, tmp_path, make_sarif):
        report = Report.from_document(make_sarif(["note"]))
        target = report.write(tmp_path / "out" / "graphrisk.sarif")

        text = target.read_text()
        assert text.startswith("{\n  ")
        assert json.loads(text) == report.document

    def test_write_failure_raises_report_write_error(self, tmp_path, make_sarif):
        report = Report.from_document(make_sarif(["note"]))
        (tmp_path / "taken").write_text("")

        with pytest.raises(ReportWriteError) as exc_info:
            report.write(tmp_path / "taken" / "graphrisk.sarif")
        assert isinstance(exc_info.value.cause, OSError)
        assert exc_info.value.path == str(tmp_path / "taken" / "graphrisk.sarif")


class TestSummarizer:
    def test_counts_across_all_runs(self, make_sarif):
        report = Report.from_document(
            make_sarif(["error", "error", "warning"], ["note", "error"])
        )
        assert count_findings(report, "error") == 3
        assert count_findings(report, Level.WARNING) == 1
        assert count_findings(report, "note") == 1
        assert count_findings(report, "none") == 0

    def test_default_level_is_error(self, make_sarif):
        report = Report.from_document(make_sarif(["error", "warning"]))
        assert count_findings(report) == 1

    def test_empty_results(self, make_sarif):
        report = Report.from_document(make_sarif([], []))
        assert count_findings(report) == 0
        assert count_by_level(report) == {}

    def test_count_by_level(self, make_sarif):
        report = Report.from_document(make_sarif(["error", "note"], ["note"]))
        assert count_by_level(report) == {"error": 1, "note": 2}

    def test_summarize(self, make_sarif):
        report = Report.from_document(make_sarif(["error", "warning", "warning"]))

        summary = summarize(report)

        assert summary.critical_level == "error"
        assert summary.critical_count == 1
        assert summary.has_critical
        assert summary.counts == {"error": 1, "warning": 2}

    def test_summarize_other_level(self, make_sarif):
        report = Report.from_document(make_sarif(["error", "warning", "warning"]))
        summary = summarize(report, critical_level=Level.WARNING)
        assert summary.critical_level == "warning"
        assert summary.critical_count == 2

    def test_summarize_does_not_mutate(self, make_sarif):
        doc = make_sarif(["error"], ["warning"])
        before = copy.deepcopy(doc)
        summary = summarize(Report.from_document(doc))
        assert summary.critical_count == 1
        assert doc == before

    def test_serialization_round_trip_keeps_counts(self, make_sarif):
        report = Report.from_document(
            make_sarif(["error", "warning", "note"], ["error", "none"])
        )
        reparsed = Report.from_document(json.loads(report.to_json()))
        assert count_by_level(reparsed) == count_by_level(report)
