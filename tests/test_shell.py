import logging
import os
import sys
import time
from unittest.mock import patch

import pytest

from stream_collector.components import shell
from stream_collector.components.shell import execute_command, shell_prefix
from stream_collector.config import ShellConfig, CollectorConfig

posix_only = pytest.mark.skipif(sys.platform == "win32", reason="runs bash commands")


def test_shell_prefix():
    with patch.object(shell.sys, "platform", "win32"):
        assert shell_prefix() == ("cmd.exe", "/c")
    with patch.object(shell.sys, "platform", "linux"):
        assert shell_prefix() == ("/bin/bash", "-c")


@posix_only
def test_execute_command_collects_stdout_and_stderr():
    result = execute_command("echo alpha; echo beta; echo oops 1>&2")

    assert result.exit_code == 0
    assert result.succeeded
    assert result.stdout_lines == ["alpha", "beta"]
    assert result.stderr_lines == ["oops"]
    assert result.output == os.linesep.join(["alpha", "beta"])


@posix_only
def test_execute_command_reports_exit_code():
    result = execute_command("echo partial; exit 3", tee_stdout=False, echo_command=False)

    assert result.exit_code == 3
    assert result.stdout_lines == ["partial"]


@posix_only
def test_execute_command_decodes_with_collector_encoding():
    result = execute_command("printf 'h\\xe9llo\\n'", collector_config=CollectorConfig(encoding="latin-1"))

    assert result.stdout_lines == ["héllo"]


@posix_only
def test_execute_command_large_output_on_both_pipes():
    """Both pipes are drained concurrently, so filling them does not block the command."""
    result = execute_command("seq 1 20000; seq 1 20000 1>&2", tee_stdout=False)

    assert result.exit_code == 0
    assert len(result.stdout_lines) == 20000
    assert len(result.stderr_lines) == 20000
    assert result.stdout_lines[-1] == "20000"


@posix_only
def test_execute_command_timeout():
    """The command closes its output but does not exit: it is killed once the wait timeout expires."""
    result = execute_command("echo before; exec >&- 2>&-; sleep 10", config=ShellConfig(wait_timeout=0.2))

    assert result.exit_code == 126
    assert result.stdout_lines == ["before"]


@posix_only
def test_execute_command_output_longer_than_wait_timeout():
    """The wait timeout only starts once the output is closed, a slow but talkative command succeeds."""
    result = execute_command("echo start; sleep 1; echo done", config=ShellConfig(wait_timeout=0.2))

    assert result.exit_code == 0
    assert result.stdout_lines == ["start", "done"]
    assert result.output == os.linesep.join(["start", "done"])


def _is_running(pid: int) -> bool:
    try:
        with open(f"/proc/{pid}/stat") as f:
            state = f.read().rsplit(")", 1)[1].split()[0]
    except FileNotFoundError:
        return False
    return state != "Z"


@pytest.mark.skipif(not os.path.isdir("/proc"), reason="inspects /proc")
def test_execute_command_timeout_kills_background_children(tmp_path):
    pid_file = tmp_path / "child.pid"

    result = execute_command(f"exec >&- 2>&-; sleep 30 & echo $! > {pid_file}; sleep 10",
                             config=ShellConfig(wait_timeout=0.2))

    assert result.exit_code == 126
    child_pid = int(pid_file.read_text())
    deadline = time.monotonic() + 5
    while _is_running(child_pid) and time.monotonic() < deadline:
        time.sleep(0.05)
    assert not _is_running(child_pid)


@posix_only
def test_execute_command_tees_stdout_lines(caplog):
    caplog.set_level(logging.INFO, logger=shell.__name__)

    execute_command("echo alpha; echo beta", echo_command=False)

    logged = [record.getMessage() for record in caplog.records if record.name == shell.__name__]
    assert logged[:2] == ["alpha", "beta"]


@posix_only
def test_execute_command_without_tee(caplog):
    caplog.set_level(logging.INFO, logger=shell.__name__)

    execute_command("echo alpha", tee_stdout=False, echo_command=False)

    logged = [record.getMessage() for record in caplog.records if record.name == shell.__name__]
    assert "alpha" not in logged
@posix_only
def test_execute_command_undecodable_output():
    result = execute_command("printf 'ok\\n\\377\\n'", collector_config=CollectorConfig(encoding="utf-8"))

    assert result.exit_code == 126
    assert result.stdout_lines == ["ok"]


def test_execute_command_cannot_start(caplog):
    with patch.object(shell.subprocess, "Popen", side_effect=OSError("No such file or directory")):
        result = execute_command("anything", config=ShellConfig(failure_exit_code=127))

    assert result.exit_code == 127
    assert result.output == ""
    assert "Unable to start" in caplog.text
