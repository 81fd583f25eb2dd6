"""
Shared test infrastructure.
"""

from .cli_utils import jload, run_cli
from .file_utils import write, write_bytes
from .filter_utils import apply_filter

__all__ = ["write", "write_bytes", "run_cli", "jload", "apply_filter"]
