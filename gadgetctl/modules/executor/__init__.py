"""
Executor Module - Black Box Interface

Purpose: Run shell commands inside the agent container on a node
Interface: execute(), execute_capture(), execute_simple(), ExecResult
Hidden: Credential loading, REST client construction, websocket draining

Can be replaced with different execution mechanisms (SPDY, a node-local
daemon API) without touching callers.
"""

from .credentials import build_rest_client, load_rest_configuration
from .remote import ExecResult, execute, execute_capture, execute_simple

__all__ = [
    "ExecResult",
    "build_rest_client",
    "execute",
    "execute_capture",
    "execute_simple",
    "load_rest_configuration",
]
