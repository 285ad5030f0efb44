"""
Module providing a helper to run a shell command and collect its output.
"""
import logging
import os
import signal
import subprocess
import sys

from stream_collector.components.collector import LineCollector
from stream_collector.components.errors import StreamReadError
from stream_collector.components.results import CommandResult
from stream_collector.config import ShellConfig, CollectorConfig

logger = logging.getLogger(__name__)


def shell_prefix() -> tuple[str, str]:
    """
    Return the shell executable and the option making it run a command string.
    """
    if sys.platform == "win32":
        return "cmd.exe", "/c"
    return "/bin/bash", "-c"


def _kill(process: subprocess.Popen):
    """
    Kill the shell along with every process it started.
    """
    if sys.platform == "win32":
        process.kill()
        return
    try:
        # The shell leads its own session, its process group id is its pid
        os.killpg(process.pid, signal.SIGKILL)
    except ProcessLookupError:
        pass


def _wait_for_lines(collector: LineCollector, name: str) -> tuple[list[str], bool]:
    """
    Wait for a collector and return its lines along with whether the collection completed.
    On failure, the lines collected before it are returned.
    """
    try:
        return list(collector.result()), True
    except StreamReadError as e:
        logger.error("Unable to read %s: %s", name, e)
    return list(collector.lines), False


def execute_command(command: str,
                    tee_stdout: bool = True,
                    echo_command: bool = True,
                    config: ShellConfig | None = None,
                    collector_config: CollectorConfig | None = None) -> CommandResult:
    """
    Run `command` in the platform shell and collect its standard output and standard error.

    The output is read until the command closes it, however long that takes. Only then is the
    command given `config.wait_timeout` seconds to exit.
    Args:
        command: The command line handed to the shell.
        tee_stdout: Log every line of the standard output as soon as it is read.
        echo_command: Log the command before running it.
        config: A `ShellConfig`, default values are used if not given.
        collector_config: The `CollectorConfig` of both collectors (encoding of the output...).
    Returns:
        A `CommandResult`. If the command cannot be started, does not exit in time once its output
        is closed, or its output cannot be read, the exit code is `config.failure_exit_code`.
    """
    config = config or ShellConfig()
    if echo_command:
        logger.info("%s", command)

    try:
        process = subprocess.Popen([*shell_prefix(), command],
                                   stdin=subprocess.DEVNULL,
                                   stdout=subprocess.PIPE,
                                   stderr=subprocess.PIPE,
                                   start_new_session=sys.platform != "win32")
    except OSError:
        logger.exception("Unable to start %s", command)
        return CommandResult(exit_code=config.failure_exit_code, output="")

    # Both pipes are drained at the same time so that a full pipe never blocks the command
    stdout_collector = LineCollector(process.stdout,
                                     config=collector_config,
                                     on_line=(lambda line: logger.info("%s", line)) if tee_stdout else None)
    stderr_collector = LineCollector(process.stderr, config=collector_config)
    stdout_collector.start()
    stderr_collector.start()

    stdout_lines, stdout_complete = _wait_for_lines(stdout_collector, "standard output")
    stderr_lines, stderr_complete = _wait_for_lines(stderr_collector, "standard error")

    try:
        exit_code = process.wait(timeout=config.wait_timeout)
    except subprocess.TimeoutExpired:
        logger.error("Command did not exit %.1f seconds after closing its output, killing it",
                     config.wait_timeout)
        _kill(process)
        process.wait()
        exit_code = config.failure_exit_code

    if not (stdout_complete and stderr_complete):
        exit_code = config.failure_exit_code
    logger.info("Exit code %i", exit_code)

    return CommandResult(exit_code=exit_code,
                         output=os.linesep.join(stdout_lines),
                         stdout_lines=stdout_lines,
                         stderr_lines=stderr_lines)
