"""
Copier Module - Black Box Interface

Purpose: Copy local files into the agent pod on a node
Interface: copy_into(), build_copy_command(), CopyResult, CopyExecutor
Hidden: Shell invocation of the external copy tool

The CopyExecutor protocol lets a native streaming copy replace the
external tool without changing copy_into().
"""

from .copier import (
    CopyExecutor,
    CopyResult,
    ShellCopyExecutor,
    build_copy_command,
    copy_into,
)

__all__ = [
    "CopyExecutor",
    "CopyResult",
    "ShellCopyExecutor",
    "build_copy_command",
    "copy_into",
]
