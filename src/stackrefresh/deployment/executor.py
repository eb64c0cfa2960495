"""LXC command execution and container enumeration.

Runs commands inside running LXC containers through ``lxc-attach`` and lists
running containers with ``lxc-ls --running``. Every call blocks until the
command finishes; there is no timeout.

Examples:
    Basic usage::

        from stackrefresh.deployment.executor import LxcExecutor

        executor = LxcExecutor()
        for name in executor.list_running_environments():
            result = executor.run_in_environment(name, ["docker", "compose", "pull"], cwd="/root")
            print(name, result.exit_status)
"""

import shlex
import shutil
import subprocess
from collections.abc import Sequence
from typing import Protocol

from rich.markup import escape

from stackrefresh.deployment.exceptions import CommandExecutionError, EnumerationError
from stackrefresh.deployment.models import CommandResult
from stackrefresh.deployment.settings import UpdaterSettings
from stackrefresh.utils.logger import get_logger

logger = get_logger("executor")


class CommandExecutor(Protocol):
    """Runs a command inside a named container."""

    def run_in_environment(
        self, environment: str, command: Sequence[str], cwd: str | None = None
    ) -> CommandResult: ...


class EnvironmentEnumerator(Protocol):
    """Lists the containers currently running on the host."""

    def list_running_environments(self) -> list[str]: ...


class LxcExecutor:
    """CommandExecutor and EnvironmentEnumerator backed by the LXC tools."""

    def __init__(self, settings: UpdaterSettings | None = None):
        self.settings = settings or UpdaterSettings()

    def build_command(
        self, environment: str, command: Sequence[str], cwd: str | None = None
    ) -> list[str]:
        """Build the host-side argv for running ``command`` inside ``environment``.

        With ``cwd`` the command is wrapped in ``sh -c 'cd <cwd> && ...'`` since
        lxc-attach has no working directory option.
        """
        attach = [*self.settings.attach_command, "-n", environment, "--"]
        if cwd is None:
            return attach + list(command)
        inner = f"cd {shlex.quote(cwd)} && {shlex.join(command)}"
        return attach + ["sh", "-c", inner]

    def run_in_environment(
        self, environment: str, command: Sequence[str], cwd: str | None = None
    ) -> CommandResult:
        """Run a command inside a container and capture merged stdout/stderr.

        Args:
            environment: Container name
            command: Command argv to run inside the container
            cwd: Optional working directory inside the container

        Returns:
            CommandResult with combined output and exit status

        Raises:
            CommandExecutionError: If the attach tool could not be launched
        """
        argv = self.build_command(environment, command, cwd)
        logger.debug(f"Running: {escape(shlex.join(argv))}")

        try:
            result = subprocess.run(
                argv,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                text=True,
                errors="replace",
                check=False,
            )
        except OSError as e:
            raise CommandExecutionError(
                f"Could not run {argv[0]} for container {environment}: {e}",
                environment=environment,
                command=argv,
            ) from e

        return CommandResult(output=result.stdout or "", exit_status=result.returncode)

    def list_running_environments(self) -> list[str]:
        """List running containers in the order the enumeration tool reports them.

        Raises:
            EnumerationError: If the tool is missing or exits non-zero
        """
        argv = list(self.settings.list_command)

        if not shutil.which(argv[0]):
            raise EnumerationError(
                f"{argv[0]} not found. Install the LXC userspace tools "
                f"(e.g. 'apt install lxc-utils') or run on the container host.",
                command=argv,
            )

        try:
            result = subprocess.run(argv, capture_output=True, text=True, check=False)
        except OSError as e:
            raise EnumerationError(f"Could not run {argv[0]}: {e}", command=argv) from e

        if result.returncode != 0:
            raise EnumerationError(
                f"{shlex.join(argv)} exited with status {result.returncode}: "
                f"{result.stderr.strip()}",
                command=argv,
            )

        return result.stdout.split()
