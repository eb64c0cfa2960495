"""Resolved runtime settings for an update run.

UpdaterSettings is built once from the configuration and passed explicitly
to the executor, applier and orchestrator.
"""

import posixpath
import shlex
from dataclasses import dataclass

from stackrefresh.utils.config import ConfigBuilder

DEFAULT_DESCRIPTOR_PATH = "/root/docker-compose.yml"
DEFAULT_REFRESH_COMMAND = "docker compose pull"
DEFAULT_STOP_COMMAND = "docker compose down"
DEFAULT_START_COMMAND = "docker compose up -d"
DEFAULT_PRUNE_COMMAND = "docker system prune -f"
DEFAULT_UPDATE_MARKERS = ("Pulled", "Downloaded newer image")
DEFAULT_LIST_COMMAND = "lxc-ls --running"
DEFAULT_ATTACH_COMMAND = "lxc-attach"


def _as_command(key: str, value: str | list[str]) -> tuple[str, ...]:
    """Accept commands as a shell-style string or a YAML list."""
    if isinstance(value, str):
        parts = shlex.split(value)
    elif isinstance(value, (list, tuple)):
        parts = [str(part) for part in value]
    else:
        raise ValueError(f"{key} must be a string or a list, got {type(value).__name__}")
    if not parts:
        raise ValueError(f"Commands must not be empty ({key})")
    return tuple(parts)


def _as_markers(value: str | list[str]) -> tuple[str, ...]:
    if isinstance(value, str):
        return (value,)
    if isinstance(value, (list, tuple)):
        return tuple(str(marker) for marker in value)
    raise ValueError(
        f"detection.update_markers must be a string or a list, got {type(value).__name__}"
    )


@dataclass(frozen=True)
class UpdaterSettings:
    """Commands, paths and markers used by one run.

    Attributes:
        descriptor_path: Compose file location inside each container
        refresh_command: Fetches newer images without touching running services
        stop_command: Brings the stack down
        start_command: Recreates and starts the stack, detached
        prune_command: Removes unused runtime resources
        update_markers: Substrings of refresh output that mean new content arrived
        list_command: Lists running containers on the host
        attach_command: Runs a command inside a named container
    """

    descriptor_path: str = DEFAULT_DESCRIPTOR_PATH
    refresh_command: tuple[str, ...] = tuple(shlex.split(DEFAULT_REFRESH_COMMAND))
    stop_command: tuple[str, ...] = tuple(shlex.split(DEFAULT_STOP_COMMAND))
    start_command: tuple[str, ...] = tuple(shlex.split(DEFAULT_START_COMMAND))
    prune_command: tuple[str, ...] = tuple(shlex.split(DEFAULT_PRUNE_COMMAND))
    update_markers: tuple[str, ...] = DEFAULT_UPDATE_MARKERS
    list_command: tuple[str, ...] = tuple(shlex.split(DEFAULT_LIST_COMMAND))
    attach_command: tuple[str, ...] = (DEFAULT_ATTACH_COMMAND,)

    @property
    def working_directory(self) -> str:
        """Directory holding the descriptor; stack commands run from here."""
        return posixpath.dirname(self.descriptor_path) or "/"

    @classmethod
    def from_config(cls, config: ConfigBuilder) -> "UpdaterSettings":
        """Build settings from configuration, falling back to defaults per key.

        Raises:
            ValueError: If a key is present with a value of the wrong type,
                including an empty YAML value
        """

        def command(key: str, default: str) -> tuple[str, ...]:
            return _as_command(key, config.get(key, default))

        descriptor_path = config.get("descriptor.path", DEFAULT_DESCRIPTOR_PATH)
        if not isinstance(descriptor_path, str) or not descriptor_path:
            raise ValueError("descriptor.path must be a non-empty string")

        return cls(
            descriptor_path=descriptor_path,
            refresh_command=command("commands.refresh", DEFAULT_REFRESH_COMMAND),
            stop_command=command("commands.stop", DEFAULT_STOP_COMMAND),
            start_command=command("commands.start", DEFAULT_START_COMMAND),
            prune_command=command("commands.prune", DEFAULT_PRUNE_COMMAND),
            update_markers=_as_markers(
                config.get("detection.update_markers", list(DEFAULT_UPDATE_MARKERS))
            ),
            list_command=command("lxc.list_command", DEFAULT_LIST_COMMAND),
            attach_command=command("lxc.attach_command", DEFAULT_ATTACH_COMMAND),
        )
