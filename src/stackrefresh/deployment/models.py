"""Data models for the per-container update pipeline.

Pipeline states flow::

    start -> checking_descriptor -> skipped
                                 |-> simulated
                                 |-> pulling -> no_update
                                             |-> applying -> applied
                                                          |-> failed

Every terminal state maps to exactly one UpdateDecision.
"""

from collections import Counter
from collections.abc import Iterator
from dataclasses import dataclass, field
from enum import Enum


@dataclass(frozen=True)
class CommandResult:
    """Combined output and exit status of one command run inside a container.

    Attributes:
        output: stdout and stderr, merged
        exit_status: Process exit status
    """

    output: str
    exit_status: int

    @property
    def succeeded(self) -> bool:
        return self.exit_status == 0


class UpdateDecision(str, Enum):
    """Final outcome for one container in one run."""

    NO_DESCRIPTOR = "no_descriptor"
    NO_UPDATE_AVAILABLE = "no_update_available"
    UPDATE_APPLIED = "update_applied"
    UPDATE_FAILED = "update_failed"
    SIMULATED_UPDATE = "simulated_update"


class PipelineState(str, Enum):
    """States a container passes through during one run."""

    START = "start"
    CHECKING_DESCRIPTOR = "checking_descriptor"
    PULLING = "pulling"
    APPLYING = "applying"
    SKIPPED = "skipped"
    SIMULATED = "simulated"
    NO_UPDATE = "no_update"
    APPLIED = "applied"
    FAILED = "failed"


# Valid state transitions (from_state -> to_states)
VALID_TRANSITIONS: dict[PipelineState, frozenset[PipelineState]] = {
    PipelineState.START: frozenset({PipelineState.CHECKING_DESCRIPTOR}),
    PipelineState.CHECKING_DESCRIPTOR: frozenset(
        {PipelineState.SKIPPED, PipelineState.PULLING, PipelineState.SIMULATED}
    ),
    PipelineState.PULLING: frozenset({PipelineState.NO_UPDATE, PipelineState.APPLYING}),
    PipelineState.APPLYING: frozenset({PipelineState.APPLIED, PipelineState.FAILED}),
    PipelineState.SKIPPED: frozenset(),  # Terminal
    PipelineState.SIMULATED: frozenset(),  # Terminal
    PipelineState.NO_UPDATE: frozenset(),  # Terminal
    PipelineState.APPLIED: frozenset(),  # Terminal
    PipelineState.FAILED: frozenset(),  # Terminal
}

TERMINAL_DECISIONS: dict[PipelineState, UpdateDecision] = {
    PipelineState.SKIPPED: UpdateDecision.NO_DESCRIPTOR,
    PipelineState.SIMULATED: UpdateDecision.SIMULATED_UPDATE,
    PipelineState.NO_UPDATE: UpdateDecision.NO_UPDATE_AVAILABLE,
    PipelineState.APPLIED: UpdateDecision.UPDATE_APPLIED,
    PipelineState.FAILED: UpdateDecision.UPDATE_FAILED,
}


def can_transition(from_state: PipelineState, to_state: PipelineState) -> bool:
    """Check whether a pipeline state transition is allowed.

    Examples:
        >>> can_transition(PipelineState.START, PipelineState.CHECKING_DESCRIPTOR)
        True
        >>> can_transition(PipelineState.CHECKING_DESCRIPTOR, PipelineState.APPLYING)
        False
    """
    return to_state in VALID_TRANSITIONS.get(from_state, frozenset())


def is_terminal(state: PipelineState) -> bool:
    return not VALID_TRANSITIONS[state]


@dataclass(frozen=True)
class EnvironmentOutcome:
    """Decision reached for one container.

    Attributes:
        environment: Container identifier
        decision: Final UpdateDecision
        detail: Failed step name, refresh exit status, or None
    """

    environment: str
    decision: UpdateDecision
    detail: str | None = None


@dataclass
class RunReport:
    """Ordered outcomes of one run, one entry per processed container."""

    outcomes: list[EnvironmentOutcome] = field(default_factory=list)

    def add(self, outcome: EnvironmentOutcome) -> None:
        if any(existing.environment == outcome.environment for existing in self.outcomes):
            raise ValueError(f"Container {outcome.environment} already has a decision")
        self.outcomes.append(outcome)

    def __iter__(self) -> Iterator[EnvironmentOutcome]:
        return iter(self.outcomes)

    def __len__(self) -> int:
        return len(self.outcomes)

    def decisions(self) -> dict[str, UpdateDecision]:
        """Map each container to its decision, in processing order."""
        return {outcome.environment: outcome.decision for outcome in self.outcomes}

    def counts(self) -> Counter:
        return Counter(outcome.decision for outcome in self.outcomes)

    def failed(self) -> list[EnvironmentOutcome]:
        return [o for o in self.outcomes if o.decision is UpdateDecision.UPDATE_FAILED]

    def summary(self) -> str:
        """One-line description of the run, e.g. for the final log line."""
        if not self.outcomes:
            return "No containers processed"

        counts = self.counts()
        parts = [
            f"{counts[decision]} {decision.value.replace('_', ' ')}"
            for decision in UpdateDecision
            if counts[decision]
        ]
        return f"{len(self.outcomes)} container(s) processed: " + ", ".join(parts)
