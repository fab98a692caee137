from __future__ import annotations

import json
import logging
from pathlib import Path

import pytest

from transit_route_mapper import route_finder


@pytest.fixture(autouse=True)
def _reset_package_logger():
    yield
    logging.getLogger("transit_route_mapper").handlers.clear()


def _answers(*values: str):
    it = iter(values)
    return lambda _prompt: next(it)


def _run(fixture_dir: Path, tmp_path: Path, *extra: str, input_func=None) -> int:
    argv = [
        "--data-dir",
        str(fixture_dir),
        "--output",
        str(tmp_path / "route_map.html"),
        "--json",
        str(tmp_path / "payload.json"),
        *extra,
    ]
    if input_func is None:
        return route_finder.main(argv)
    return route_finder.main(argv, input_func=input_func)


def test_end_to_end_with_flags(fixture_dir: Path, tmp_path: Path) -> None:
    code = _run(fixture_dir, tmp_path, "--origin", "105", "--destination", "120")

    assert code == route_finder.EXIT_OK
    assert (tmp_path / "route_map.html").exists()
    payload = json.loads((tmp_path / "payload.json").read_text(encoding="utf-8"))
    assert [p["id"] for p in payload["points"]] == ["105", "110", "120"]
    assert [p["role"] for p in payload["points"]] == ["origin", "intermediate", "destination"]


def test_prompts_when_flags_missing(fixture_dir: Path, tmp_path: Path) -> None:
    code = _run(fixture_dir, tmp_path, input_func=_answers("Guelph", "  university  "))

    assert code == route_finder.EXIT_OK
    payload = json.loads((tmp_path / "payload.json").read_text(encoding="utf-8"))
    assert payload["points"][-1]["id"] == "120"


def test_empty_origin_exits_quietly(fixture_dir: Path, tmp_path: Path) -> None:
    code = _run(fixture_dir, tmp_path, input_func=_answers(""))

    assert code == route_finder.EXIT_OK
    assert not (tmp_path / "route_map.html").exists()


def test_route_not_found_is_reported(fixture_dir: Path, tmp_path: Path) -> None:
    code = _run(fixture_dir, tmp_path, "--origin", "200", "--destination", "105")

    assert code == route_finder.EXIT_NOT_FOUND
    assert not (tmp_path / "route_map.html").exists()


def test_direct_fallback_draws_two_points(fixture_dir: Path, tmp_path: Path) -> None:
    code = _run(
        fixture_dir, tmp_path, "--origin", "200", "--destination", "105", "--direct-fallback"
    )

    assert code == route_finder.EXIT_OK
    payload = json.loads((tmp_path / "payload.json").read_text(encoding="utf-8"))
    assert [p["id"] for p in payload["points"]] == ["200", "105"]


def test_unknown_stop_is_reported(fixture_dir: Path, tmp_path: Path) -> None:
    code = _run(fixture_dir, tmp_path, "--origin", "Nowhere", "--destination", "105")
    assert code == route_finder.EXIT_NOT_FOUND


def test_missing_data_dir(tmp_path: Path) -> None:
    code = route_finder.main(
        ["--data-dir", str(tmp_path / "missing"), "--origin", "1", "--destination", "2"]
    )
    assert code == route_finder.EXIT_DATA_ERROR


def test_unknown_args_are_ignored() -> None:
    args, unknown = route_finder.parse_args(["--origin", "105", "-f", "kernel.json"])
    assert args.origin == "105"
    assert unknown == ["-f", "kernel.json"]


@pytest.mark.parametrize("speed", ["0", "-5", "nan", "inf"])
def test_non_positive_speed_is_a_usage_error(speed: str, capsys) -> None:
    with pytest.raises(SystemExit) as excinfo:
        route_finder.main(["--origin", "105", "--destination", "120", "--speed-kmh", speed])
    assert excinfo.value.code == 2
    assert "--speed-kmh must be a positive number" in capsys.readouterr().err
