import json
import logging
from pathlib import Path

import pytest

from bomfeeds.cli import parse_args, run_command
from bomfeeds.common.constants import EXIT_BAD_INPUT, EXIT_HARD_FAIL, EXIT_SUCCESS
from bomfeeds.common.errors import TransportError


class FixtureSource:
    def fetch(self, feed: str) -> bytes:
        path = Path("tests/fixtures") / feed
        if not path.exists():
            raise TransportError(f"{feed} unavailable. Please retry again later.")
        return path.read_bytes()


def _args(*extra: str, data_dir: Path):
    return parse_args([*extra, "--config-dir", "config", "--data-dir", str(data_dir), "--run-id", "run-test"])


@pytest.mark.integration
def test_cli_precis_writes_csv_and_summary(tmp_path: Path):
    data_dir = tmp_path / "data"

    exit_code = run_command(_args("precis", "--region", "NSW", data_dir=data_dir), source=FixtureSource())

    assert exit_code == EXIT_SUCCESS
    out = data_dir / "out" / "precis_forecast_nsw.csv"
    assert out.exists()
    assert len(out.read_text(encoding="utf-8").splitlines()) == 4
    summary = json.loads((data_dir / "out" / "reports" / "run-test_summary.json").read_text(encoding="utf-8"))
    assert summary["counts"]["rows"] == 3
    assert summary["counts"]["unmatched_locations"] == ["NSW_PT999"]
    assert summary["status"] == "partial"
    assert (data_dir / "run_meta" / "run-test.log.jsonl").exists()



@pytest.mark.integration
def test_cli_overlay_supplies_full_town_table(tmp_path: Path):
    towns = tmp_path / "towns.csv"
    towns.write_text(
        "code,name,lat,lon,elev\n"
        "NSW_PT131,Sydney,-33.8607,151.205,39.0\n"
        "NSW_PT999,Testville,-34.0,150.0,12.0\n",
        encoding="utf-8",
    )
    overlay = tmp_path / "overlay"
    overlay.mkdir()
    (overlay / "settings.yml").write_text(f"locations:\n  forecast_towns: {towns}\n", encoding="utf-8")
    data_dir = tmp_path / "data"
    args = _args("precis", "--region", "NSW", "--overlay-config-dir", str(overlay), data_dir=data_dir)

    assert run_command(args, source=FixtureSource()) == EXIT_SUCCESS

    summary = json.loads((data_dir / "out" / "reports" / "run-test_summary.json").read_text(encoding="utf-8"))
    assert summary["counts"]["unmatched_locations"] == []
    assert summary["status"] == "success"

@pytest.mark.integration
def test_cli_ag_bulletin_writes_csv(tmp_path: Path):
    data_dir = tmp_path / "data"

    exit_code = run_command(_args("ag-bulletin", "--region", "nsw", data_dir=data_dir), source=FixtureSource())

    assert exit_code == EXIT_SUCCESS
    header = (data_dir / "out" / "ag_bulletin_nsw.csv").read_text(encoding="utf-8").splitlines()[0]
    assert header.startswith("product_id,state,site,station")


@pytest.mark.integration
def test_cli_unknown_region_is_bad_input_without_output(tmp_path: Path):
    data_dir = tmp_path / "data"

    exit_code = run_command(_args("precis", "--region", "XX", data_dir=data_dir), source=FixtureSource())

    assert exit_code == EXIT_BAD_INPUT
    assert not (data_dir / "out").exists()
    log_lines = (data_dir / "run_meta" / "run-test.log.jsonl").read_text(encoding="utf-8").splitlines()
    assert json.loads(log_lines[-1])["error_code"] == "UNKNOWN_REGION"


@pytest.mark.integration
def test_cli_transport_failure_is_hard_fail(tmp_path: Path):
    data_dir = tmp_path / "data"

    exit_code = run_command(_args("precis", "--region", "QLD", data_dir=data_dir), source=FixtureSource())

    assert exit_code == EXIT_HARD_FAIL
    assert not (data_dir / "out").exists()


@pytest.mark.integration
def test_cli_station_by_coordinate_prints_match(tmp_path: Path, capsys):
    exit_code = run_command(_args("station", "--lat", "-35.3", "--lon", "149.2", data_dir=tmp_path / "data"))

    assert exit_code == EXIT_SUCCESS
    payload = json.loads(capsys.readouterr().out)
    assert payload["code"] == "070351"
    assert payload["distance_km"] < 2


@pytest.mark.integration
def test_cli_station_by_unknown_name_is_bad_input(tmp_path: Path):
    exit_code = run_command(_args("station", "--name", "Zzyzx Springs", data_dir=tmp_path / "data"))
    assert exit_code == EXIT_BAD_INPUT


@pytest.mark.integration
@pytest.mark.parametrize("region, expected", [("NSW", EXIT_SUCCESS), ("QLD", EXIT_HARD_FAIL)])
def test_cli_releases_run_log_handlers(tmp_path: Path, region, expected):
    args = _args("precis", "--region", region, data_dir=tmp_path / "data")
    run_logger = logging.getLogger("bomfeeds.run-test")

    assert run_command(args, source=FixtureSource()) == expected
    assert run_logger.handlers == []

    # A second run in the same process appends to a fresh handler.
    assert run_command(args, source=FixtureSource()) == expected
    assert run_logger.handlers == []
    log_lines = (tmp_path / "data" / "run_meta" / "run-test.log.jsonl").read_text(encoding="utf-8").splitlines()
    assert [json.loads(line)["event"] for line in log_lines].count("COMMAND_START") == 2


def test_cli_station_requires_name_or_coordinates():
    with pytest.raises(SystemExit):
        parse_args(["station", "--lat", "-35.3"])
