"""Apply a detected update to one container's compose stack.

The steps run strictly in order: stop, start, prune. Stopping first frees
ports and container names for the new services; pruning last keeps images
referenced by the old containers until those containers are gone. The first
failing step ends the sequence. Completed steps are not reversed.
"""

from dataclasses import dataclass

from rich.markup import escape

from stackrefresh.deployment.exceptions import CommandExecutionError
from stackrefresh.deployment.executor import CommandExecutor
from stackrefresh.deployment.models import EnvironmentOutcome, UpdateDecision
from stackrefresh.deployment.settings import UpdaterSettings
from stackrefresh.utils.logger import ComponentLogger, get_logger


@dataclass(frozen=True)
class ApplyStep:
    name: str
    command: tuple[str, ...]
    cwd: str | None
    message: str


class UpdateApplier:
    """Runs the stop/start/prune sequence inside a container."""

    def __init__(
        self,
        executor: CommandExecutor,
        settings: UpdaterSettings | None = None,
        logger: ComponentLogger | None = None,
    ):
        self.executor = executor
        self.settings = settings or UpdaterSettings()
        self.logger = logger or get_logger("applier")

    def steps(self) -> list[ApplyStep]:
        workdir = self.settings.working_directory
        return [
            ApplyStep("stop", self.settings.stop_command, workdir, "Stopping services..."),
            ApplyStep("start", self.settings.start_command, workdir, "Starting services..."),
            # Prune is not tied to the stack, so it runs without a working directory
            ApplyStep(
                "prune",
                self.settings.prune_command,
                None,
                "Cleaning up unused Docker resources...",
            ),
        ]

    def apply(self, environment: str) -> EnvironmentOutcome:
        """Apply the update for ``environment``.

        Assumes the descriptor exists and new images were already pulled.

        Returns:
            UPDATE_APPLIED if every step succeeds, otherwise UPDATE_FAILED with
            the failing step name as detail
        """
        for step in self.steps():
            self.logger.info(f"Container {environment}: {step.message}")

            try:
                result = self.executor.run_in_environment(environment, step.command, cwd=step.cwd)
            except CommandExecutionError as e:
                self.logger.error(
                    f"Container {environment}: {step.name} step failed: {escape(str(e))}"
                )
                return EnvironmentOutcome(environment, UpdateDecision.UPDATE_FAILED, step.name)

            if not result.succeeded:
                self.logger.error(
                    f"Container {environment}: {step.name} step failed "
                    f"(exit status {result.exit_status})"
                )
                output = result.output.strip()
                if output:
                    self.logger.debug(
                        f"Container {environment}: {step.name} output:\n{escape(output)}"
                    )
                return EnvironmentOutcome(environment, UpdateDecision.UPDATE_FAILED, step.name)

        self.logger.success(f"Container {environment}: Update complete")
        return EnvironmentOutcome(environment, UpdateDecision.UPDATE_APPLIED)
