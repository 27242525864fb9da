import io

import pytest

from vcucore.errors import ErrorCode, ErrorLog
from vcucore.params import ParamStore
from vcucore.terminal import (
    format_all,
    format_attributes,
    format_errors,
    format_list,
    load_defaults,
    main,
    run_command,
)


@pytest.fixture
def params():
    return ParamStore()


def test_format_list(params):
    text = format_list(params)
    assert text.startswith("Available parameters and values\r\n")
    assert "udc [V]\r\n" in text
    assert text.count("\r\n") == len(params) + 1


def test_format_attributes_only_parameters(params):
    text = format_attributes(params)
    assert text.startswith("Parameter attributes\r\nName\t\tmin - max [default]\r\n")
    assert "potmax\t\t0.000000 - 4095.000000 [4095.000000]\r\n" in text
    assert "\nudc\t\t" not in text


def test_load_defaults_restores(params):
    params["potmax"] = 100
    assert load_defaults(params) == "Defaults loaded\r\n"
    assert params["potmax"] == 4095


def test_format_all_shows_values(params):
    params["udc"] = 12.5
    text = format_all(params)
    assert "udc\t\t12.500000\r\n" in text
    assert text.count("\r\n") == len(params)


def test_format_errors_matches_log():
    log = ErrorLog()
    log.post(ErrorCode.OVERVOLTAGE)
    assert format_errors(log) == log.format_all()
    assert "OVERVOLTAGE" in format_errors(log)


def test_run_command_dispatch(params):
    log = ErrorLog()
    assert run_command("list", params, log) == format_list(params)
    assert run_command("  atr  ", params, log) == format_attributes(params)
    assert run_command("errors", params, log) == log.format_all()


def test_run_command_defaults(params):
    params["throtmax"] = 5
    assert run_command("defaults", params, ErrorLog()) == "Defaults loaded\r\n"
    assert params["throtmax"] == 100


def test_run_command_unknown(params):
    with pytest.raises(ValueError):
        run_command("bogus", params, ErrorLog())
    with pytest.raises(ValueError):
        run_command("   ", params, ErrorLog())


def test_main_runs_arguments(capsys):
    assert main(["list"]) == 0
    out = capsys.readouterr().out
    assert out.startswith("Available parameters and values")


def test_main_reports_unknown(capsys):
    assert main(["bogus"]) == 1
    assert "unknown command" in capsys.readouterr().err


def test_main_reads_stdin(monkeypatch, capsys):
    monkeypatch.setattr("sys.stdin", io.StringIO("defaults\n\nerrors\n"))
    assert main([]) == 0
    out = capsys.readouterr().out
    assert out == "Defaults loaded\r\nNo errors\r\n"