"""Tests for the command line entry point."""

from pathlib import Path

import numpy as np
import pytest

from flightcore.main import main, parse_args


class TestParseArgs:
    """Argument parsing."""

    def test_defaults(self) -> None:
        args = parse_args([])

        assert args.aircraft == "trainer"
        assert args.weather == "default"
        assert args.duration == 60.0
        assert args.hz == 60
        assert args.seed is None
        assert args.record is None
        assert not args.no_start

    def test_unknown_weather_rejected(self) -> None:
        with pytest.raises(SystemExit):
            parse_args(["--weather", "hail"])


class TestMain:
    """End-to-end headless runs."""

    def test_short_run(self, capsys: pytest.CaptureFixture[str]) -> None:
        assert main(["--duration", "1", "--hz", "10", "--seed", "1"]) == 0

        out = capsys.readouterr().out
        assert "T-6 Trainer" in out
        assert "Engine:         running" in out

    def test_glide_without_engine(self, capsys: pytest.CaptureFixture[str]) -> None:
        assert main(["--no-start", "--duration", "2", "--hz", "10"]) == 0

        out = capsys.readouterr().out
        assert "Simulated time: 2.0 s" in out
        assert "Engine:         off" in out

    def test_record_csv(self, tmp_path: Path) -> None:
        path = tmp_path / "flight.csv"

        assert main(
            ["--duration", "1", "--hz", "10", "--seed", "3", "--weather", "calm",
             "--record", str(path)]
        ) == 0

        data = np.loadtxt(path, delimiter=",", skiprows=1, ndmin=2)
        # 5 s of startup plus 1 s of flight at 10 Hz
        assert data.shape == (60, 12)

    def test_custom_catalog(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        catalog = tmp_path / "fleet.yaml"
        catalog.write_text(
            "aircraft:\n"
            "  cub:\n"
            "    name: Piper Cub\n"
            "    max_thrust: 90\n"
            "    lift_coefficient: 1.1\n"
            "    drag_coefficient: 0.03\n"
            "    maneuverability: 5\n"
            "    fuel_efficiency: 9\n"
        )

        exit_code = main(
            ["--aircraft", "cub", "--aircraft-config", str(catalog), "--duration", "0.5"]
        )

        assert exit_code == 0
        assert "Piper Cub" in capsys.readouterr().out

    def test_custom_waypoints(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        waypoints = tmp_path / "fixes.yaml"
        waypoints.write_text(
            "waypoints:\n"
            "  HOME:\n"
            "    name: Home Field\n"
            "    position: [0, 0, -100]\n"
            "    type: airport\n"
        )

        exit_code = main(["--no-start", "--duration", "0.1", "--waypoints", str(waypoints)])

        assert exit_code == 0
        out = capsys.readouterr().out
        assert "Nearest fix:    HOME" in out
        assert "Position:" in out

    def test_unknown_aircraft_fails(self) -> None:
        assert main(["--aircraft", "zeppelin", "--duration", "1"]) == 1
