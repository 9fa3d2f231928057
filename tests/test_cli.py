import sys

import pytest
from click.testing import CliRunner

from scpomatic import __version__
from scpomatic.cli import main

from .utils import read_args

pytestmark = pytest.mark.skipif(sys.platform == "win32", reason="shell stubs")


def _invoke(args, env=None):
    runner = CliRunner()
    return runner.invoke(main, args, env=env)


def test_version():
    result = _invoke(["--version"])
    assert result.exit_code == 0
    assert __version__ in result.output


def test_clean_run_with_single_dash_flags(tmp_path, make_storescp):
    stub = make_storescp("exit 0")
    storage = tmp_path / "inbox"

    result = _invoke(
        ["-aet", "TESTAE", "-port", "11112", "-storage", str(storage), "-storescp", str(stub)]
    )

    assert result.exit_code == 0, result.output
    assert storage.is_dir()
    assert read_args(tmp_path) == ["-d", "-aet", "TESTAE", "-od", str(storage), "11112"]
    assert "TESTAE" in result.output
    assert "=== scpomatic" in result.output
    assert "AE Title : TESTAE" in result.output


def test_failure_exit_code_propagates(tmp_path, make_storescp):
    stub = make_storescp("exit 4")
    result = _invoke(["--storage", str(tmp_path / "inbox"), "--storescp", str(stub)])
    assert result.exit_code == 4


def test_missing_binary_is_fatal(tmp_path):
    result = _invoke(
        ["-storage", str(tmp_path / "inbox"), "-storescp", str(tmp_path / "missing-storescp")]
    )
    assert result.exit_code == 1
    assert "cannot start" in result.output


def test_storage_collision_is_fatal(tmp_path, make_storescp):
    stub = make_storescp()
    storage = tmp_path / "inbox"
    storage.write_text("file")
    result = _invoke(["-storage", str(storage), "-storescp", str(stub)])
    assert result.exit_code == 1
    assert "cannot create storage directory" in result.output


def test_invalid_port_is_usage_error(tmp_path, make_storescp):
    stub = make_storescp()
    result = _invoke(["-port", "eleven", "-storescp", str(stub), "-storage", str(tmp_path / "in")])
    assert result.exit_code == 2
    assert "Invalid configuration" in result.output
    assert not (tmp_path / "storescp.args").exists()


def test_env_and_yaml_precedence(tmp_path, make_storescp):
    stub = make_storescp()
    cfg_file = tmp_path / "scp.yaml"
    cfg_file.write_text(f"aet: YAMLAE\nport: 4242\nstorage: {tmp_path / 'yaml-inbox'}\n")

    result = _invoke(
        ["--config", str(cfg_file), "-storescp", str(stub)],
        env={"SCPOMATIC_AET": "ENVAE"},
    )

    assert result.exit_code == 0, result.output
    assert read_args(tmp_path) == [
        "-d", "-aet", "ENVAE", "-od", str(tmp_path / "yaml-inbox"), "4242",
    ]


def test_save_logfile(tmp_path, make_storescp):
    stub = make_storescp()
    logfile = tmp_path / "logs" / "scp.log"
    result = _invoke(
        ["-storage", str(tmp_path / "in"), "-storescp", str(stub), "--save-logfile", str(logfile)]
    )
    assert result.exit_code == 0, result.output
    text = logfile.read_text()
    assert "storescp.exec" in text
    assert "storescp.exited" in text
    assert "supervisor.closed" in text
