"""
Tests for the LCOV conversion and report writing.
"""

import os

import pytest

from apex_code_coverage import persist_coverage, source_path, translate
from apexcov_errors import PersistError
from tooling_query import CoverageRecord


@pytest.fixture
def project(tmp_path):
    """Project directory with one class and one trigger."""
    (tmp_path / "classes").mkdir()
    (tmp_path / "triggers").mkdir()
    (tmp_path / "classes" / "Foo.cls").write_text("public class Foo {}")
    (tmp_path / "triggers" / "FooTrigger.trigger").write_text("trigger FooTrigger on Account (before insert) {}")
    return str(tmp_path)


class TestTranslate:
    """Tests for converting records to LCOV text."""

    def test_empty_records(self, project):
        assert translate([], project) == "TN:\n"

    def test_class_record(self, project):
        record = CoverageRecord("01p000000000001AAA", "Foo", [3, 5], [4])
        path = os.path.join(project, "classes", "Foo.cls")

        assert translate([record], project) == (
            "TN:\n"
            f"SF:{path}\n"
            "DA:3,1\n"
            "DA:5,1\n"
            "DA:4,0\n"
            "end_of_record\n"
        )

    def test_trigger_record(self, project):
        record = CoverageRecord("01q000000000001AAA", "FooTrigger", [2], [7, 1])
        path = os.path.join(project, "triggers", "FooTrigger.trigger")

        assert translate([record], project) == (
            f"TN:\nSF:{path}\nDA:2,1\nDA:7,0\nDA:1,0\nend_of_record\n"
        )

    def test_trigger_path(self):
        record = CoverageRecord("01q1", "Bar", [], [])
        assert source_path(record, "/src") == os.path.join("/src", "triggers", "Bar.trigger")

    def test_missing_file_skipped(self, project):
        record = CoverageRecord("01p000000000002AAA", "Missing", [1], [2])
        assert translate([record], project) == "TN:\n"
        assert translate([record], project) == "TN:\n"

    def test_directory_skipped(self, project):
        os.mkdir(os.path.join(project, "classes", "Dir.cls"))
        record = CoverageRecord("01p000000000003AAA", "Dir", [1], [])
        assert translate([record], project) == "TN:\n"

    def test_order_preserved(self, project):
        records = [
            CoverageRecord("01q1", "FooTrigger", [1], []),
            CoverageRecord("01p2", "Missing", [1], []),
            CoverageRecord("01p3", "Foo", [], [9]),
        ]
        lines = translate(records, project).splitlines()

        assert lines[0] == "TN:"
        assert lines[1].endswith("FooTrigger.trigger")
        assert lines[4].endswith("Foo.cls")
        assert lines.count("end_of_record") == 2


class TestPersistCoverage:
    """Tests for writing the report."""

    def test_round_trip(self, project, tmp_path):
        body = translate([CoverageRecord("01p1", "Foo", [3, 5], [4])], project)
        output = tmp_path / "coverage" / "lcov.info"

        persist_coverage(body, str(output))

        assert output.read_bytes() == body.encode("utf-8")

    def test_existing_directory(self, tmp_path):
        (tmp_path / "coverage").mkdir()
        output = tmp_path / "coverage" / "lcov.info"
        persist_coverage("TN:\n", str(output))
        assert output.read_text() == "TN:\n"

    def test_write_failure(self, tmp_path):
        blocker = tmp_path / "coverage"
        blocker.write_text("not a directory")
        with pytest.raises(PersistError):
            persist_coverage("TN:\n", str(blocker / "lcov.info"))
