"""stackrefresh.

Refreshes Docker Compose stacks running inside LXC containers when newer
images are available.

This package contains:
- The per-container update pipeline (deployment)
- The command-line entry point (cli)
- Configuration and logging utilities (utils)
"""

# Version information
__version__ = "0.1.0"

__all__ = ["__version__"]
