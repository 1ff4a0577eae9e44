"""Tests for structured JSON logging."""
import json
import logging
from adminlink.core.pipeline import run_cascade
from adminlink.utils.logging import log_context, log_error, log_structured, setup_logging


def _lines(caplog):
    return [json.loads(r.getMessage()) for r in caplog.records if r.name == "adminlink"]


def test_log_structured_fields(caplog):
    caplog.set_level(logging.INFO, logger="adminlink")
    log_structured("warning", "BBox error", feature="C-1")

    entry = _lines(caplog)[-1]
    assert entry["level"] == "WARNING"
    assert entry["message"] == "BBox error"
    assert entry["feature"] == "C-1"
    assert "timestamp" in entry


def test_log_context_is_scoped(caplog):
    caplog.set_level(logging.INFO, logger="adminlink")
    with log_context(run="cascade", children="adm3.geojson"):
        with log_context(run="inner"):
            log_structured("info", "nested")
        log_structured("info", "outer", children="override.geojson")
    log_structured("info", "after")

    nested, outer, after = _lines(caplog)[-3:]
    assert nested["run"] == "inner"
    assert nested["children"] == "adm3.geojson"
    assert outer["run"] == "cascade"
    assert outer["children"] == "override.geojson"
    assert "run" not in after


def test_log_error_includes_traceback(caplog):
    caplog.set_level(logging.INFO, logger="adminlink")
    try:
        raise ValueError("bad input")
    except ValueError as e:
        log_error(e, {"path": "states.geojson"})

    entry = _lines(caplog)[-1]
    assert entry["error_type"] == "ValueError"
    assert entry["path"] == "states.geojson"
    assert "ValueError: bad input" in entry["traceback"]


def test_setup_logging_unknown_level_falls_back_to_info():
    setup_logging("chatty")
    assert logging.getLogger("adminlink").level == logging.INFO
    setup_logging("debug")
    assert logging.getLogger("adminlink").level == logging.DEBUG
    setup_logging("INFO")


def test_run_lines_carry_run_context(caplog, scenario_files):
    caplog.set_level(logging.INFO, logger="adminlink")
    run_cascade(
        scenario_files["states"],
        scenario_files["districts"],
        scenario_files["children"],
        None,
        progress=False,
    )
    entries = _lines(caplog)

    summary = next(e for e in entries if e["message"] == "Cascade finished")
    assert summary["run"] == "cascade"
    assert summary["children"] == "children.geojson"
    assert all(e.get("run") == "cascade" for e in entries)
