"""Main CLI entry point for stackrefresh.

Runs the update pipeline once over every running LXC container. Per-container
failures are reported in the log stream and do not change the exit status;
only argument errors (exit 2) and a failure to list containers or load the
configuration (exit 1) do.
"""

import sys

import click
import yaml
from rich.markup import escape

from stackrefresh.deployment.exceptions import EnumerationError
from stackrefresh.deployment.executor import LxcExecutor
from stackrefresh.deployment.orchestrator import UpdateOrchestrator
from stackrefresh.deployment.settings import UpdaterSettings
from stackrefresh.utils.config import get_config_builder
from stackrefresh.utils.logger import get_logger

logger = get_logger("orchestrator")


class UsageReportingCommand(click.Command):
    """Click command that shows the usage line with every argument error."""

    def parse_args(self, ctx, args):
        try:
            return super().parse_args(ctx, args)
        except click.UsageError as e:
            # Some parser errors are raised without a context, which drops the usage line
            if e.ctx is None:
                e.ctx = ctx
            raise


@click.command(
    cls=UsageReportingCommand,
    context_settings={"help_option_names": ["-h", "--help"]},
)
@click.option(
    "--dry-run",
    "dry_run",
    is_flag=True,
    help="Check containers for compose files and show what would run, without changing anything.",
)
@click.pass_context
def cli(ctx, dry_run: bool):
    """Update Docker Compose stacks across running LXC containers.

    For every running container that has /root/docker-compose.yml, pulls the
    latest images and, when new images arrived, recreates the stack
    (down, up -d) and prunes unused Docker resources.

    Set STACKREFRESH_CONFIG to a YAML file to change paths, commands or the
    phrases that signal a fresh image.

    Examples:

    \b
      stackrefresh              Update all containers
      stackrefresh --dry-run    Preview without changes
    """
    try:
        settings = UpdaterSettings.from_config(get_config_builder())
        executor = LxcExecutor(settings)
        orchestrator = UpdateOrchestrator(executor, executor, settings, simulate=dry_run)
    except (OSError, ValueError, yaml.YAMLError) as e:
        logger.error(f"Could not load configuration: {escape(str(e))}")
        ctx.exit(1)

    try:
        orchestrator.run()
    except EnumerationError as e:
        logger.error(f"Could not list running containers: {escape(str(e))}")
        ctx.exit(1)


def main():
    """Entry point for the stackrefresh command.

    Runs the command outside click's standalone mode so an interrupt reaches
    this function as ``Abort`` and exits 130 instead of click's generic 1.
    """
    try:
        exit_code = cli(standalone_mode=False)
    except click.exceptions.Abort:
        click.echo("Interrupted", err=True)
        sys.exit(130)
    except click.ClickException as e:
        e.show()
        sys.exit(e.exit_code)
    sys.exit(exit_code or 0)


if __name__ == "__main__":
    main()
