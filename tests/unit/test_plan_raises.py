"""Tests for the plan_raises command-line report."""

from __future__ import annotations

import asyncio
import json
import sys
from pathlib import Path

import pytest

# Make scripts/ importable
sys.path.insert(0, str(Path(__file__).resolve().parent.parent.parent / "scripts"))

from meritflow.core.config import AppSettings, IngestionConfig  # noqa: E402
from meritflow.core.exceptions import FileTooLargeError  # noqa: E402
from plan_raises import build_report, main  # noqa: E402

SALARY_CSV = (
    b"Employee ID,Name,Country,Currency,Base Salary\n"
    b"1001,Ann Lee,US,USD,100000\n"
    b"1002,Ravi Kumar,India,INR,876100\n"
)
PERFORMANCE_CSV = b"Employee ID,Name,Performance Rating\n1001,Ann Lee,4\n1002,Ravi Kumar,Meets\n"
PROPOSALS_CSV = b"Employee ID,Proposed Raise\n1001,13000\n"


@pytest.fixture
def exports(tmp_path):
    paths = {}
    for name, data in (("salary.csv", SALARY_CSV), ("perf.csv", PERFORMANCE_CSV),
                       ("proposals.csv", PROPOSALS_CSV)):
        path = tmp_path / name
        path.write_bytes(data)
        paths[name] = path
    return paths


class TestBuildReport:
    def test_full_report(self, exports):
        report = asyncio.run(build_report(
            [exports["salary.csv"]], [exports["perf.csv"]], exports["proposals.csv"],
            budget=1000, offline=True,
        ))
        assert [f["type"] for f in report["files"]] == ["salary", "performance"]
        assert report["join"]["id_matches"] == 2
        assert report["rate_sources"] == {"identity": 1, "fallback": 1}
        assert "Static fallback rate used for INR->USD" in report["warnings"]
        assert report["proposals"]["successful_matches"] == 1
        assert report["statistics"]["employee_count"] == 2
        assert report["violation_level"] == "error"
        assert any("Budget exceeded" in v for v in report["violations"])

    def test_salary_only(self, exports):
        report = asyncio.run(build_report([exports["salary.csv"]], offline=True))
        assert "proposals" not in report
        assert report["violation_level"] == "none"

    def test_oversized_export_rejected(self, exports):
        settings = AppSettings(ingestion=IngestionConfig(max_file_size_mb=0))
        with pytest.raises(FileTooLargeError, match="salary.csv"):
            asyncio.run(build_report([exports["salary.csv"]], offline=True, settings=settings))


class TestMain:
    def test_exit_code_and_json(self, exports, capsys):
        code = main(["--salary", str(exports["salary.csv"]), "--offline"])
        assert code == 0
        report = json.loads(capsys.readouterr().out)
        assert report["statistics"]["currency_distribution"] == {"USD": 1, "INR": 1}

    def test_error_violations_fail(self, exports, capsys):
        code = main([
            "--salary", str(exports["salary.csv"]), "--proposals", str(exports["proposals.csv"]), "--offline",
        ])
        assert code == 1
        assert json.loads(capsys.readouterr().out)["violation_level"] == "error"

    def test_salary_required(self):
        with pytest.raises(SystemExit):
            main([])
