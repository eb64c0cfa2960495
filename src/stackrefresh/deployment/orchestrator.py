"""Per-container update orchestration.

The orchestrator lists running containers once, then drives each one through
an explicit state machine::

    START -> CHECKING_DESCRIPTOR -> SKIPPED                   (no compose file)
                                 -> SIMULATED                 (dry-run)
                                 -> PULLING -> NO_UPDATE
                                            -> APPLYING -> APPLIED | FAILED

Containers are processed sequentially in enumeration order, and each one
ends in exactly one terminal state. A failure in one container is recorded
in the report and never stops the run; only a failure to list containers
is fatal.

Examples:
    Real run::

        executor = LxcExecutor(settings)
        report = UpdateOrchestrator(executor, executor, settings).run()

    Preview without touching any stack::

        report = UpdateOrchestrator(executor, executor, settings, simulate=True).run()
"""

import shlex
from collections.abc import Callable
from dataclasses import dataclass

from rich.markup import escape

from stackrefresh.deployment.applier import UpdateApplier
from stackrefresh.deployment.detector import UpdateDetector
from stackrefresh.deployment.exceptions import CommandExecutionError
from stackrefresh.deployment.executor import CommandExecutor, EnvironmentEnumerator
from stackrefresh.deployment.models import (
    TERMINAL_DECISIONS,
    EnvironmentOutcome,
    PipelineState,
    RunReport,
    UpdateDecision,
    can_transition,
    is_terminal,
)
from stackrefresh.deployment.settings import UpdaterSettings
from stackrefresh.utils.logger import ComponentLogger, get_logger


@dataclass
class _PipelineContext:
    environment: str
    detail: str | None = None


class UpdateOrchestrator:
    """Drives the update pipeline across all running containers."""

    def __init__(
        self,
        executor: CommandExecutor,
        enumerator: EnvironmentEnumerator,
        settings: UpdaterSettings | None = None,
        *,
        simulate: bool = False,
        detector: UpdateDetector | None = None,
        applier: UpdateApplier | None = None,
        logger: ComponentLogger | None = None,
    ):
        self.executor = executor
        self.enumerator = enumerator
        self.settings = settings or UpdaterSettings()
        self.simulate = simulate
        self.detector = detector or UpdateDetector(self.settings.update_markers)
        self.applier = applier or UpdateApplier(executor, self.settings)
        self.logger = logger or get_logger("orchestrator")

        self._handlers: dict[PipelineState, Callable[[_PipelineContext], PipelineState]] = {
            PipelineState.START: self._start,
            PipelineState.CHECKING_DESCRIPTOR: self._check_descriptor,
            PipelineState.PULLING: self._pull,
            PipelineState.APPLYING: self._apply,
        }

    def run(self) -> RunReport:
        """Process every running container once.

        Returns:
            RunReport with one outcome per container, in enumeration order

        Raises:
            EnumerationError: If running containers cannot be listed
        """
        report = RunReport()

        if self.simulate:
            self.logger.simulate("Running in DRY-RUN mode - no changes will be made")

        self.logger.key_info("Finding running LXC containers...")
        environments = self.enumerator.list_running_environments()

        if not environments:
            self.logger.warning("No running LXC containers found")
        else:
            self.logger.info(f"Found running containers: {' '.join(environments)}")
            for environment in environments:
                report.add(self.process_environment(environment))

        self.logger.key_info(f"All containers processed. {report.summary()}")
        return report

    def process_environment(self, environment: str) -> EnvironmentOutcome:
        """Run one container through the pipeline to a terminal state."""
        self.logger.key_info(f"Processing container: {environment}")

        context = _PipelineContext(environment)
        state = PipelineState.START
        while not is_terminal(state):
            next_state = self._handlers[state](context)
            if not can_transition(state, next_state):
                raise RuntimeError(
                    f"Invalid pipeline transition for {environment}: "
                    f"{state.value} -> {next_state.value}"
                )
            self.logger.debug(f"Container {environment}: {state.value} -> {next_state.value}")
            state = next_state

        return EnvironmentOutcome(environment, TERMINAL_DECISIONS[state], context.detail)

    # ------------------------------------------------------------------
    # State handlers
    # ------------------------------------------------------------------

    def _start(self, context: _PipelineContext) -> PipelineState:
        return PipelineState.CHECKING_DESCRIPTOR

    def _check_descriptor(self, context: _PipelineContext) -> PipelineState:
        environment = context.environment
        path = self.settings.descriptor_path

        try:
            result = self.executor.run_in_environment(environment, ("test", "-f", path))
            present = result.succeeded
        except CommandExecutionError as e:
            self.logger.error(
                f"Container {environment}: Could not check for {path}: {escape(str(e))}"
            )
            present = False

        if not present:
            self.logger.warning(f"Container {environment}: No {path} found, skipping")
            return PipelineState.SKIPPED

        self.logger.info(f"Container {environment}: Found {path}")

        if self.simulate:
            self._log_simulated_commands(environment)
            return PipelineState.SIMULATED
        return PipelineState.PULLING

    def _pull(self, context: _PipelineContext) -> PipelineState:
        environment = context.environment
        self.logger.info(f"Container {environment}: Pulling latest images...")

        try:
            result = self.executor.run_in_environment(
                environment, self.settings.refresh_command, cwd=self.settings.working_directory
            )
        except CommandExecutionError as e:
            # A refresh that never ran counts as no update
            self.logger.warning(
                f"Container {environment}: Image refresh could not run ({escape(str(e))}), "
                f"treating as no update"
            )
            context.detail = "refresh could not run"
            return PipelineState.NO_UPDATE

        if not result.succeeded:
            # Kept as "no update" but made visible, since a failed pull and
            # an up-to-date stack are otherwise indistinguishable
            self.logger.warning(
                f"Container {environment}: Image refresh exited with status "
                f"{result.exit_status}, treating as no update"
            )
            context.detail = f"refresh exit status {result.exit_status}"
            return PipelineState.NO_UPDATE

        if self.detector.detect(result.output):
            self.logger.info(f"Container {environment}: New images detected, updating services...")
            return PipelineState.APPLYING

        self.logger.info(f"Container {environment}: No new images available, skipping update")
        return PipelineState.NO_UPDATE

    def _apply(self, context: _PipelineContext) -> PipelineState:
        outcome = self.applier.apply(context.environment)
        context.detail = outcome.detail
        if outcome.decision is UpdateDecision.UPDATE_APPLIED:
            return PipelineState.APPLIED
        return PipelineState.FAILED

    def _log_simulated_commands(self, environment: str) -> None:
        settings = self.settings
        self.logger.simulate(
            f"Container {environment}: Would run: {shlex.join(settings.refresh_command)}"
        )
        self.logger.simulate(f"Container {environment}: Would check if new images were pulled")
        for command in (settings.stop_command, settings.start_command, settings.prune_command):
            self.logger.simulate(
                f"Container {environment}: If new images found, would run: {shlex.join(command)}"
            )
