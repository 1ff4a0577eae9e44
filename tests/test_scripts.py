"""Tests for the command line scripts."""
import importlib.util
import json
from pathlib import Path

SCRIPTS_DIR = Path(__file__).parent.parent / "scripts"


def _load_script(name):
    spec = importlib.util.spec_from_file_location(name, SCRIPTS_DIR / f"{name}.py")
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


def test_link_cascade_script(scenario_files, capsys):
    script = _load_script("link_cascade")
    code = script.main([
        "--states", str(scenario_files["states"]),
        "--districts", str(scenario_files["districts"]),
        "--children", str(scenario_files["children"]),
        "--output", str(scenario_files["output"]),
        "--no-progress",
    ])

    assert code == 0
    assert len(json.loads(scenario_files["output"].read_text())["features"]) == 3
    assert "CASCADE SUMMARY" in capsys.readouterr().out


def test_link_cascade_script_missing_input(tmp_path, scenario_files):
    script = _load_script("link_cascade")
    code = script.main([
        "--states", str(tmp_path / "missing.geojson"),
        "--districts", str(scenario_files["districts"]),
        "--children", str(scenario_files["children"]),
        "--output", str(scenario_files["output"]),
        "--no-progress",
    ])
    assert code == 1


def test_inspect_output_script(scenario_files, capsys):
    _load_script("link_cascade").main([
        "--states", str(scenario_files["states"]),
        "--districts", str(scenario_files["districts"]),
        "--children", str(scenario_files["children"]),
        "--output", str(scenario_files["output"]),
        "--no-progress",
    ])
    capsys.readouterr()

    code = _load_script("inspect_output").main([str(scenario_files["output"]), "--json"])
    summary = json.loads(capsys.readouterr().out)
    assert code == 0
    assert summary["features"] == 3
    assert summary["has_bbox"] is True
