"""
Shared test infrastructure.

Modules:
- file_utils: Utilities for creating files and touching mtimes
- project_builders: Template project layout and Environment factory
- cli_utils: Running the CLI in a subprocess
"""

from .file_utils import write, set_mtime
from .project_builders import create_template_project, make_environment
from .cli_utils import run_cli, jload

__all__ = [
    "write", "set_mtime",
    "create_template_project", "make_environment",
    "run_cli", "jload",
]
