"""
modctl CLI package.

Provides the command-line interface with auto-discovery of commands from
``cli/commands/``.

Framework utilities for building CLI commands:
- _output: Output formatting (JSON/text modes)
- _args: Common argument registration helpers
- _utils: Shared CLI utilities
"""
from ._output import OutputFormatter, print_error, print_info, print_success, print_warning
from ._args import add_json_flag, add_module_id_arg, add_repo_root_flag, add_standard_flags
from ._utils import build_service, error_code_for, get_repo_root, hints_for

__all__ = [
    # Output formatting
    "OutputFormatter",
    "print_success",
    "print_warning",
    "print_info",
    "print_error",
    # Argument helpers
    "add_json_flag",
    "add_repo_root_flag",
    "add_module_id_arg",
    "add_standard_flags",
    # Utilities
    "get_repo_root",
    "build_service",
    "error_code_for",
    "hints_for",
]
