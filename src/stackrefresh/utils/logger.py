"""
Component Logger Framework

Provides colored, leveled logging for stackrefresh components with:
- Unified API for the orchestrator, applier and executor
- Rich terminal output with component-specific colors
- A dedicated simulate level for dry-run previews
- Graceful fallbacks when configuration is unavailable

Usage:
    logger = get_logger("orchestrator")
    logger.key_info("Finding running LXC containers...")
    logger.info("Container web1: Found docker-compose.yml")
    logger.warning("Container web2: No descriptor found, skipping")
    logger.error("Container web3: Stopping services failed")
    logger.success("Container web1: Update complete")
    logger.simulate("Container web1: Would run: docker compose pull")

    # Custom loggers with explicit parameters
    logger = get_logger(name="custom_component", color="blue")
"""

import logging

from rich.console import Console
from rich.logging import RichHandler

from stackrefresh.utils.config import get_config_value


class ComponentLogger:
    """
    Rich-formatted logger for stackrefresh components with color coding and message hierarchy.

    Message Types:
    - key_info: Important operational information
    - info: Normal operational messages
    - debug: Detailed tracing information
    - warning: Warning messages
    - error: Error messages
    - success: Success messages
    - simulate: Dry-run previews of commands that would run
    """

    def __init__(self, base_logger: logging.Logger, component_name: str, color: str = "white"):
        """
        Initialize component logger.

        Args:
            base_logger: Underlying Python logger
            component_name: Name of the component (e.g., 'orchestrator', 'applier')
            color: Rich color name for this component
        """
        self.base_logger = base_logger
        self.component_name = component_name
        self.color = color

    def _format_message(self, message: str, style: str, emoji: str = "") -> str:
        """Format message with Rich markup and emoji prefix."""
        try:
            prefix = f"{emoji}{self.component_name.title()}: "
            if style:
                return f"[{style}]{prefix}{message}[/{style}]"
            else:
                return f"{prefix}{message}"
        except Exception:
            return f"{emoji}{self.component_name.title()}: {message}"

    def key_info(self, message: str) -> None:
        """Important operational information."""
        style = f"bold {self.color}" if self.color != "white" else "bold white"
        self.base_logger.info(self._format_message(message, style, ""))

    def info(self, message: str) -> None:
        """Info message."""
        self.base_logger.info(self._format_message(message, self.color, ""))

    def debug(self, message: str) -> None:
        """Debug message - detailed technical info, hidden at the default level."""
        style = f"dim {self.color}" if self.color != "white" else "dim white"
        self.base_logger.debug(self._format_message(message, style, "🔍 "))

    def warning(self, message: str) -> None:
        """Warning message."""
        self.base_logger.warning(self._format_message(message, "bold yellow", "⚠️  "))

    def error(self, message: str, exc_info: bool = False) -> None:
        """Error message.

        Args:
            message: Error message
            exc_info: Whether to include exception traceback
        """
        self.base_logger.error(self._format_message(message, "bold red", "❌ "), exc_info=exc_info)

    def success(self, message: str) -> None:
        """Success message."""
        self.base_logger.info(self._format_message(message, "bold green", "✅ "))

    def simulate(self, message: str) -> None:
        """Dry-run message.

        Marks an action that would have been taken if the run were not
        simulated. Logged at INFO so previews show with default settings.
        """
        self.base_logger.info(self._format_message(message, "bold blue", "[DRY-RUN] "))


def _resolve_level(level: int | str) -> int:
    """Accept numeric levels or names like 'DEBUG' from configuration."""
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(str(level).upper())
    return resolved if isinstance(resolved, int) else logging.INFO


def _setup_rich_logging(level: int | None = None) -> None:
    """Configure Rich logging for the root logger (called once)."""
    root_logger = logging.getLogger()

    # Prevent duplicate handler registration
    for handler in root_logger.handlers:
        if isinstance(handler, RichHandler):
            return

    if root_logger.hasHandlers():
        root_logger.handlers.clear()

    # Load user-configurable display preferences from config
    try:
        if level is None:
            level = _resolve_level(get_config_value("logging.level", "INFO"))
        rich_tracebacks = get_config_value("logging.rich_tracebacks", True)
        show_full_paths = get_config_value("logging.show_full_paths", False)
    except Exception:
        # Secure defaults when configuration system is unavailable
        level = level if level is not None else logging.INFO
        rich_tracebacks = True
        show_full_paths = False

    root_logger.setLevel(level)

    # Console resolves sys.stdout on every write, so redirected output is honored
    console = Console(width=120)

    handler = RichHandler(
        console=console,
        rich_tracebacks=rich_tracebacks,
        markup=True,
        show_path=show_full_paths,
        show_time=True,
        show_level=True,
        tracebacks_show_locals=False,
    )

    root_logger.addHandler(handler)


def get_logger(
    component_name: str = None,
    level: int | None = None,
    *,
    name: str = None,
    color: str = None,
) -> ComponentLogger:
    """
    Get a component logger writing to the shared Rich handler.

    Args:
        component_name: Component name (e.g., 'orchestrator', 'applier')
        level: Root logging level, applied only when the handler is first set up
        name: Direct logger name (keyword-only)
        color: Direct color specification (keyword-only)

    Returns:
        ComponentLogger instance

    Examples:
        logger = get_logger("orchestrator")
        logger.info("Processing container: web1")

        logger = get_logger(name="test_logger", color="blue")
    """
    _setup_rich_logging(level)

    # Direct logger creation bypasses config-based color assignment
    if name is not None:
        return ComponentLogger(logging.getLogger(name), name, color or "white")

    if component_name is None:
        raise ValueError(
            "Component name is required. Usage: get_logger('component_name') or "
            "get_logger(name='custom_name', color='blue')"
        )

    base_logger = logging.getLogger(component_name)

    try:
        color = get_config_value(f"logging.logging_colors.{component_name}") or "white"
    except Exception:
        color = "white"

    return ComponentLogger(base_logger, component_name, color)
