"""Tests for the command line entry point."""

import json
import os
from pathlib import Path
from unittest.mock import patch

import pytest

from mortgage_cashflow.cli import build_parser, main, read_loans
from mortgage_cashflow.exceptions import CashflowError, LoanValidationError


@pytest.fixture
def env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    """Quiet, file-less environment rooted in a temp dir."""
    monkeypatch.chdir(tmp_path)
    values = {"LOG_LEVEL": "WARNING", "OUTPUT_DIR": str(tmp_path / "output")}
    with patch.dict(os.environ, values, clear=True):
        yield tmp_path


def write_loans(path: Path, loans: list) -> Path:
    path.write_text(json.dumps(loans))
    return path


class TestParser:
    def test_requires_command(self) -> None:
        with pytest.raises(SystemExit):
            build_parser().parse_args([])

    def test_calc_options(self) -> None:
        args = build_parser().parse_args(["calc", "loans.json", "--workers", "3", "--sink", "none", "--partial"])

        assert args.file == Path("loans.json")
        assert args.workers == 3
        assert args.sink == "none"
        assert args.partial is True


class TestReadLoans:
    """Tests for loading batch files."""

    def test_reads_array(self, tmp_path: Path) -> None:
        path = write_loans(tmp_path / "in.json", [{"id": "A", "wam": 12, "wac": 5.0, "face": 1000, "staticdq": True}])

        loans = read_loans(path)

        assert loans[0].id == "A"
        assert loans[0].static_dq is True

    def test_not_an_array(self, tmp_path: Path) -> None:
        path = tmp_path / "in.json"
        path.write_text('{"id": "A"}')

        with pytest.raises(CashflowError, match="JSON array"):
            read_loans(path)

    def test_missing_field(self, tmp_path: Path) -> None:
        path = write_loans(tmp_path / "in.json", [{"id": "A", "wam": 12, "wac": 5.0}])

        with pytest.raises(LoanValidationError) as exc_info:
            read_loans(path)

        assert exc_info.value.index == 0

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(CashflowError, match="Cannot read"):
            read_loans(tmp_path / "absent.json")


class TestCommands:
    """End-to-end command runs."""

    def test_generate_stdout(self, env: Path, capsys: pytest.CaptureFixture) -> None:
        assert main(["generate", "3", "--seed", "7"]) == 0

        loans = json.loads(capsys.readouterr().out)
        assert len(loans) == 3
        assert all("performing_transition" not in loan for loan in loans)

    def test_generate_ladder_file(self, env: Path) -> None:
        out = env / "gen" / "ladder.json"

        assert main(["generate", "4", "--ladder", "-o", str(out)]) == 0

        loans = json.loads(out.read_text())
        assert [loan["wam"] for loan in loans] == [60, 150, 240, 60]

    def test_generate_then_calc(self, env: Path) -> None:
        """Generated batches feed straight into calc."""
        batch = env / "batch.json"
        main(["generate", "5", "--seed", "3", "-o", str(batch)])

        assert main(["calc", str(batch), "--workers", "2"]) == 0

        files = sorted((env / "output").glob("cashflow_*.json"))
        assert len(files) == 5
        document = json.loads(files[0].read_text())
        assert set(document) == {"mortgage", "local_date", "amort_table"}

    def test_calc_invalid_batch(self, env: Path, capsys: pytest.CaptureFixture) -> None:
        path = write_loans(
            env / "bad.json",
            [
                {"id": "OK", "wam": 12, "wac": 5.0, "face": 1000},
                {"id": "BAD", "wam": 0, "wac": 5.0, "face": 1000},
            ],
        )

        assert main(["calc", str(path)]) == 1

        error = json.loads(capsys.readouterr().err)
        assert error["index"] == 1
        assert error["loan_id"] == "BAD"
        assert not (env / "output").exists() or not list((env / "output").iterdir())

    def test_calc_scalar_vector_is_validation_error(
        self, env: Path, capsys: pytest.CaptureFixture
    ) -> None:
        """A scalar smm_arr exits with a validation error, not a traceback."""
        path = write_loans(
            env / "scalar.json",
            [{"id": "L1", "wam": 12, "wac": 5.0, "face": 1000, "smm_arr": 0.01}],
        )

        assert main(["calc", str(path)]) == 1

        error = json.loads(capsys.readouterr().err)
        assert error == {"error": "smm_arr must be a list of 12 numbers", "index": 0, "loan_id": "L1"}

    def test_calc_partial(self, env: Path) -> None:
        path = write_loans(
            env / "bad.json",
            [
                {"id": "OK", "wam": 12, "wac": 5.0, "face": 1000},
                {"id": "BAD", "wam": 0, "wac": 5.0, "face": 1000},
            ],
        )

        assert main(["calc", str(path), "--partial"]) == 1

        assert [p.name.split("_")[1] for p in (env / "output").glob("*.json")] == ["OK"]

    def test_calc_console_sink(self, env: Path, capsys: pytest.CaptureFixture) -> None:
        path = write_loans(env / "one.json", [{"id": "C1", "wam": 2, "wac": 0.0, "face": 200}])

        assert main(["calc", str(path), "--sink", "console"]) == 0

        assert '"C1"' in capsys.readouterr().out

    def test_bad_configuration(self, env: Path, capsys: pytest.CaptureFixture) -> None:
        with patch.dict(os.environ, {"POOL_KIND": "fiber"}):
            assert main(["generate", "1"]) == 2

        assert "POOL_KIND" in capsys.readouterr().err

    def test_serve_runs_uvicorn(self, env: Path) -> None:
        with patch("uvicorn.run") as run:
            assert main(["serve", "--port", "9100"]) == 0

        kwargs = run.call_args.kwargs
        assert kwargs["port"] == 9100
        assert kwargs["host"] == "localhost"
