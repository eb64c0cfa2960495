"""Tests for the stop/start/prune update applier."""

import logging

import pytest
from rich.text import Text

from stackrefresh.deployment.applier import UpdateApplier
from stackrefresh.deployment.exceptions import CommandExecutionError
from stackrefresh.deployment.models import UpdateDecision


@pytest.fixture
def executor(fake_executor_factory):
    return fake_executor_factory(["web2"], descriptors=["web2"])


@pytest.fixture
def applier(executor, settings):
    return UpdateApplier(executor, settings)


class TestApplySequence:
    """Tests for step ordering and success."""

    def test_runs_stop_start_prune_in_order(self, applier, executor, settings):
        outcome = applier.apply("web2")

        assert outcome.decision is UpdateDecision.UPDATE_APPLIED
        assert outcome.detail is None
        assert executor.commands_for("web2") == [
            settings.stop_command,
            settings.start_command,
            settings.prune_command,
        ]

    def test_stack_commands_run_in_descriptor_directory(self, applier, executor):
        applier.apply("web2")

        cwds = [cwd for _, _, cwd in executor.calls]
        assert cwds == ["/root", "/root", None]

    def test_default_commands(self, settings):
        assert settings.stop_command == ("docker", "compose", "down")
        assert settings.start_command == ("docker", "compose", "up", "-d")
        assert settings.prune_command == ("docker", "system", "prune", "-f")


class TestApplyFailures:
    """Tests for the first failing step ending the sequence."""

    def test_stop_failure_skips_start_and_prune(self, applier, executor, settings):
        executor.on("web2", settings.stop_command, output="no such service", exit_status=1)

        outcome = applier.apply("web2")

        assert outcome.decision is UpdateDecision.UPDATE_FAILED
        assert outcome.detail == "stop"
        assert executor.commands_for("web2") == [settings.stop_command]

    def test_start_failure_skips_prune(self, applier, executor, settings):
        executor.on("web2", settings.start_command, exit_status=1)

        outcome = applier.apply("web2")

        assert outcome.decision is UpdateDecision.UPDATE_FAILED
        assert outcome.detail == "start"
        assert settings.prune_command not in executor.commands_for("web2")

    def test_prune_failure_reported(self, applier, executor, settings):
        executor.on("web2", settings.prune_command, exit_status=125)

        outcome = applier.apply("web2")

        assert outcome.decision is UpdateDecision.UPDATE_FAILED
        assert outcome.detail == "prune"
        assert len(executor.calls) == 3

    def test_completed_steps_are_not_reversed(self, applier, executor, settings):
        executor.on("web2", settings.start_command, exit_status=1)

        applier.apply("web2")

        # Only stop and start ran; nothing tries to bring the old stack back
        assert executor.commands_for("web2") == [settings.stop_command, settings.start_command]

    def test_launch_error_counts_as_step_failure(self, applier, executor, settings):
        executor.on(
            "web2",
            settings.stop_command,
            raises=CommandExecutionError("lxc-attach missing", environment="web2"),
        )

        outcome = applier.apply("web2")

        assert outcome.decision is UpdateDecision.UPDATE_FAILED
        assert outcome.detail == "stop"
        assert executor.commands_for("web2") == [settings.stop_command]

    def test_launch_error_text_is_not_read_as_markup(self, applier, executor, settings, caplog):
        executor.on(
            "web2",
            settings.stop_command,
            raises=CommandExecutionError("bad config [/etc/lxc]", environment="web2"),
        )

        with caplog.at_level(logging.ERROR):
            applier.apply("web2")

        message = next(r.getMessage() for r in caplog.records if r.levelno == logging.ERROR)
        assert Text.from_markup(message).plain.endswith("stop step failed: bad config [/etc/lxc]")
