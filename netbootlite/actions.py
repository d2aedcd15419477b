# -*- coding: utf-8 -*-
"""Run the pre-boot actions of a machine."""
import os
import subprocess
import typing as t

from netbootlite.errors import ActionError
from netbootlite.logging import get as get_logger
from netbootlite.machine import (
    IPMI_SUBCOMMANDS,
    Action,
    IpmiPower,
    Machine,
    RunCommand,
)
from netbootlite.vars import IPMITOOL_EXEC


class CommandRunnerCallable(t.Protocol):
    """
    Type definition for a function which runs an external command.

    Implementations block until the command exits. They raise
    `subprocess.CalledProcessError` on a non-zero exit status and
    `OSError` if the command cannot be started.

    Parameters
    ----------
    argv : sequence of str
        Program followed by its arguments.
    env : dict, optional
        Environment for the command. If omitted the current environment
        is inherited.
    """

    def __call__(
        self,
        argv: t.Sequence[str],
        env: t.Optional[t.Mapping[str, str]] = None,
    ) -> t.Any:
        ...


def run_command(
    argv: t.Sequence[str],
    env: t.Optional[t.Mapping[str, str]] = None,
) -> subprocess.CompletedProcess:
    """
    Run the given command to completion.

    No timeout is applied: a command is never interrupted half way, as
    that could leave the machine in an unknown power state.

    Raises
    ------
    subprocess.CalledProcessError
        If the command exits with a non-zero status.
    OSError
        If the command could not be started.
    """

    return subprocess.run(
        list(argv),
        env=None if env is None else dict(env),
        capture_output=True,
        check=True,
    )


def _describe_failure(program: str, err: Exception) -> str:
    """Build a human readable reason from a failed command's error."""

    if isinstance(err, subprocess.CalledProcessError):
        reason = f"{program} exited with status {err.returncode}"
        stderr = err.stderr
        if isinstance(stderr, bytes):
            stderr = stderr.decode("utf-8", errors="replace")
        if stderr:
            reason += f": {stderr.strip()}"
        return reason
    return f"unable to run {program}: {err}"


class ActionExecutor:
    """
    Execute pre-boot actions one at a time.

    Parameters
    ----------
    runner : CommandRunnerCallable, optional
        Function used to run external commands. Defaults to
        `run_command`.
    ipmitool : str, optional
        ipmitool executable used for ipmi actions.
    """

    def __init__(
        self,
        runner: t.Optional[CommandRunnerCallable] = None,
        ipmitool: str = IPMITOOL_EXEC,
    ):
        self.runner: CommandRunnerCallable = (
            run_command if runner is None else runner
        )
        self.ipmitool = ipmitool
        self.logger = get_logger("ActionExecutor")

    def _run(
        self,
        argv: t.Sequence[str],
        env: t.Optional[t.Mapping[str, str]] = None,
    ):
        """Run argv through the runner, mapping failures to ActionError."""

        self.logger.debug("Running %s", " ".join(argv))
        try:
            result = self.runner(argv, env=env)
        except (subprocess.SubprocessError, OSError) as err:
            raise ActionError(_describe_failure(argv[0], err)) from err

        stdout = getattr(result, "stdout", None)
        if stdout:
            self.logger.debug("Output of %s: %s", argv[0], stdout)

    def _execute_command(self, action: RunCommand, _: Machine):
        """Run an external program."""

        self._run([action.program, *action.args])

    def _execute_ipmi(self, action: IpmiPower, machine: Machine):
        """Send a power command to the machine's BMC through ipmitool."""

        endpoint = machine.management
        if endpoint is None:
            raise ActionError(
                f"Machine {machine.id} has no management endpoint"
            )

        # -E reads the password from IPMI_PASSWORD, which keeps it out of
        # the process list and our logs
        argv = [
            self.ipmitool,
            "-I",
            endpoint.interface,
            "-H",
            endpoint.address,
            "-U",
            endpoint.username,
            "-E",
            *IPMI_SUBCOMMANDS[action.command],
        ]
        env = dict(os.environ)
        env["IPMI_PASSWORD"] = endpoint.password.get_secret_value()
        self._run(argv, env=env)

    def execute(self, action: Action, machine: Machine):
        """
        Execute the given action on behalf of the given machine.

        Raises
        ------
        ActionError
            If the action failed or its type is unknown.
        """

        execute_method = getattr(self, f"_execute_{action.type}", None)
        if execute_method is None:
            raise ActionError(f"Unknown action type {action.type}")

        self.logger.info(
            "Running action for machine %s: %s", machine.id, action.describe()
        )
        execute_method(action, machine)
