"""
LoanLens Integration Tests: Command Line Interface
==================================================

Runs the real pipeline, store, comparator and evaluator behind each command.
"""

import json

import pytest
import sys
import os

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__)))))

import cli


@pytest.fixture
def demo_file(tmp_path, demo_text):
    path = tmp_path / "demo_agreement.txt"
    path.write_text(demo_text, encoding="utf-8")
    return path


@pytest.fixture
def sterling_file(tmp_path, sterling_text):
    path = tmp_path / "sterling.txt"
    path.write_text(sterling_text, encoding="utf-8")
    return path


def _json_output(capsys):
    return json.loads(capsys.readouterr().out)


@pytest.mark.integration
class TestAnalyzeCommand:

    def test_analyze_json(self, demo_file, capsys):
        exit_code = cli.main(["analyze", str(demo_file), "--json"])
        data = _json_output(capsys)

        assert exit_code == 0
        assert data["name"] == "demo_agreement.txt"
        assert data["parties"]["borrowers"] == ["Acme Corporation Limited"]
        assert data["financial_terms"]["currency"] == "USD"

    def test_analyze_custom_name(self, demo_file, capsys):
        cli.main(["analyze", str(demo_file), "--name", "Acme 2026", "--json"])

        assert _json_output(capsys)["name"] == "Acme 2026"

    def test_analyze_table(self, demo_file, capsys):
        exit_code = cli.main(["analyze", str(demo_file)])
        out = capsys.readouterr().out

        assert exit_code == 0
        assert "Acme Corporation Limited" in out
        assert "Term SOFR" in out

    def test_empty_file(self, tmp_path, capsys):
        path = tmp_path / "empty.txt"
        path.write_text("   ", encoding="utf-8")

        exit_code = cli.main(["analyze", str(path)])

        assert exit_code == 1
        assert "No text provided" in capsys.readouterr().out

    def test_missing_file(self, tmp_path, capsys):
        exit_code = cli.main(["analyze", str(tmp_path / "nope.txt")])

        assert exit_code == 1
        assert "Error" in capsys.readouterr().out

    def test_error_log_names_command(self, tmp_path, capsys, monkeypatch):
        monkeypatch.setenv("LOG_FORMAT", "json")

        exit_code = cli.main(["analyze", str(tmp_path / "nope.txt")])
        entries = [json.loads(line) for line in capsys.readouterr().err.splitlines() if line.strip()]

        assert exit_code == 1
        assert any(entry.get("command") == "analyze" for entry in entries)


@pytest.mark.integration
class TestCompareCommand:

    def test_compare_json(self, demo_file, sterling_file, capsys):
        exit_code = cli.main(["compare", str(demo_file), str(sterling_file), "--json"])
        data = _json_output(capsys)

        assert exit_code == 0
        assert [loan["name"] for loan in data["loans"]] == ["demo_agreement.txt", "sterling.txt"]
        assert data["inconsistencies"][0]["type"] == "Currency Mismatch"

    def test_compare_single_file(self, demo_file, capsys):
        exit_code = cli.main(["compare", str(demo_file)])

        assert exit_code == 1
        assert "at least 2" in capsys.readouterr().out

    def test_compare_table(self, demo_file, sterling_file, capsys):
        exit_code = cli.main(["compare", str(demo_file), str(sterling_file)])
        out = capsys.readouterr().out

        assert exit_code == 0
        assert "Currency Mismatch" in out


@pytest.mark.integration
class TestComplianceCommand:

    def test_compliance_json(self, demo_file, capsys):
        exit_code = cli.main(["compliance", str(demo_file), "--leverage-ratio", "4.0", "--json"])
        data = _json_output(capsys)

        assert exit_code == 0
        assert data["details"][0]["covenant"] == "Leverage Ratio"
        assert data["details"][0]["status"] == "breach"
        assert data["summary"]["overall_status"] == "breach"

    def test_compliance_invalid_metric(self, demo_file, capsys):
        exit_code = cli.main(["compliance", str(demo_file), "--net-worth", "lots"])

        assert exit_code == 1
        assert "netWorth" in capsys.readouterr().out

    def test_compliance_no_metrics(self, demo_file, capsys):
        exit_code = cli.main(["compliance", str(demo_file)])

        assert exit_code == 0
        assert "No testable covenants" in capsys.readouterr().out


@pytest.mark.integration
class TestDemoCommand:

    def test_demo_json(self, capsys):
        exit_code = cli.main(["demo", "--json"])
        data = _json_output(capsys)

        assert exit_code == 0
        assert data["name"] == "Demo_Facility_Agreement.pdf"
        assert data["summary"]["total_risks"] == 4
        assert data["esg_clauses"]["sustainability_linked"] is True

    def test_no_command_prints_help(self, capsys):
        assert cli.main([]) == 2
        assert "loanlens" in capsys.readouterr().out
