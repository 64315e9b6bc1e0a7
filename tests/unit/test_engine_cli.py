"""
Unit tests for the CLI commands, run in-process with Typer's CliRunner.
"""

import json

import pytest
from typer.testing import CliRunner

from portal_engine.cli.engine_cli import app

runner = CliRunner()

NOW = "2024-03-01T09:00:00+00:00"


@pytest.fixture
def cards_file(tmp_path):
    path = tmp_path / "cards.json"
    path.write_text(
        json.dumps(
            [
                {"id": "due-now", "due_at": NOW},
                {"id": "later", "due_at": "2024-03-05T09:00:00+00:00", "interval": 6},
            ]
        ),
        encoding="utf-8",
    )
    return path


class TestDueCommand:
    def test_lists_due_cards(self, cards_file):
        result = runner.invoke(app, ["due", str(cards_file), "--now", NOW])

        assert result.exit_code == 0, result.output
        assert "1 of 2 cards due" in result.output
        assert "due-now" in result.output
        assert "later" not in result.output

    @pytest.mark.parametrize("command", ["due", "rate"])
    def test_unparseable_now_exits_with_code_one(self, cards_file, command):
        args = [command, str(cards_file)]
        if command == "rate":
            args += ["due-now", "4"]
        result = runner.invoke(app, args + ["--now", "not-a-date"])

        assert result.exit_code == 1
        assert "Cannot parse time 'not-a-date'" in result.output

    def test_naive_now_treated_as_utc(self, cards_file):
        result = runner.invoke(app, ["due", str(cards_file), "--now", "2024-03-05 09:00"])

        assert result.exit_code == 0, result.output
        assert "2 of 2 cards due" in result.output


class TestRateCommand:
    def test_rate_and_write(self, cards_file):
        result = runner.invoke(app, ["rate", str(cards_file), "later", "5", "--now", NOW, "-w"])

        assert result.exit_code == 0, result.output
        saved = {c["id"]: c for c in json.loads(cards_file.read_text(encoding="utf-8"))}
        assert saved["later"]["interval"] == 16
        assert saved["later"]["version"] == 1
        assert saved["due-now"]["version"] == 0

    def test_invalid_rating(self, cards_file):
        result = runner.invoke(app, ["rate", str(cards_file), "due-now", "0"])

        assert result.exit_code == 1
        assert "Rating must be between 1 and 5" in result.output


class TestNextItemCommand:
    def test_session_cap_reached(self, tmp_path):
        pool = tmp_path / "pool.json"
        pool.write_text(json.dumps([{"id": f"q{i}", "difficulty": 3} for i in range(12)]))
        history = tmp_path / "history.json"
        history.write_text(
            json.dumps([{"item_id": f"q{i}", "difficulty": 3, "correct": True} for i in range(10)])
        )

        result = runner.invoke(app, ["next-item", str(pool), "--history", str(history)])

        assert result.exit_code == 0, result.output
        assert "Session cap of 10 items reached" in result.output

    def test_invalid_pool(self, tmp_path):
        pool = tmp_path / "pool.json"
        pool.write_text(json.dumps([{"difficulty": 3}]))

        result = runner.invoke(app, ["next-item", str(pool)])

        assert result.exit_code == 1
        assert "Could not load session data" in result.output


class TestAnalyzeCommand:
    def test_json_report(self, tmp_path):
        mistakes = tmp_path / "mistakes.json"
        mistakes.write_text(
            json.dumps([{"category": "grammar"}, {"category": "grammar"}, {"category": "vocab"}])
        )

        result = runner.invoke(app, ["analyze", str(mistakes), "--json"])

        assert result.exit_code == 0, result.output
        report = json.loads(result.stdout)
        assert report["categoryCounts"] == [
            {"category": "grammar", "count": 2},
            {"category": "vocab", "count": 1},
        ]
        assert report["mostCommonMistake"] == {"category": "grammar", "count": 2}
