"""
Pytest configuration and shared test utilities.

Provides a scripted fake of the LXC executor so pipeline tests never spawn
real processes, plus configuration isolation for every test.
"""

import pytest

from stackrefresh.deployment.models import CommandResult
from stackrefresh.deployment.settings import UpdaterSettings
from stackrefresh.utils import config as config_module

# ===================================================================
# Fake Executor
# ===================================================================


class FakeExecutor:
    """Scripted CommandExecutor and EnvironmentEnumerator.

    Every call is recorded as ``(environment, command, cwd)``. Commands return
    an empty successful result unless scripted with :meth:`on`. The descriptor
    presence check succeeds only for containers passed in ``descriptors``.

    Examples:
        executor = FakeExecutor(["web1", "web2"], descriptors=["web2"])
        executor.on("web2", settings.refresh_command, output="web Pulled")
        executor.on("web2", settings.stop_command, exit_status=1)
    """

    def __init__(self, environments=(), descriptors=(), settings=None):
        self.environments = list(environments)
        self.descriptors = set(descriptors)
        self.settings = settings or UpdaterSettings()
        self.calls = []
        self._scripted = {}

    def on(self, environment, command, output="", exit_status=0, raises=None):
        self._scripted[(environment, tuple(command))] = raises or CommandResult(output, exit_status)
        return self

    def list_running_environments(self):
        return list(self.environments)

    def run_in_environment(self, environment, command, cwd=None):
        command = tuple(command)
        self.calls.append((environment, command, cwd))

        scripted = self._scripted.get((environment, command))
        if isinstance(scripted, Exception):
            raise scripted
        if scripted is not None:
            return scripted

        if command == ("test", "-f", self.settings.descriptor_path):
            return CommandResult("", 0 if environment in self.descriptors else 1)
        return CommandResult("", 0)

    def commands_for(self, environment):
        return [command for env, command, _ in self.calls if env == environment]

    def mutating_commands_for(self, environment):
        mutating = {
            self.settings.stop_command,
            self.settings.start_command,
            self.settings.prune_command,
        }
        return [c for c in self.commands_for(environment) if c in mutating]


# ===================================================================
# Fixtures
# ===================================================================


@pytest.fixture(autouse=True)
def isolated_config(monkeypatch, tmp_path):
    """Run every test with built-in defaults and no cached configuration."""
    monkeypatch.delenv(config_module.CONFIG_ENV_VAR, raising=False)
    monkeypatch.chdir(tmp_path)
    config_module.reset_config()
    yield
    config_module.reset_config()


@pytest.fixture
def settings():
    return UpdaterSettings()


@pytest.fixture
def fake_executor_factory(settings):
    def factory(environments=(), descriptors=()):
        return FakeExecutor(environments, descriptors, settings=settings)

    return factory
