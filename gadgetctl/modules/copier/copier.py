"""
Remote Copier - copy a local file into the node's agent pod.

The transfer itself is delegated to an external copy-capable command
(``kubectl cp``), which already knows how to tar-stream into a pod. This
module finds the pod, builds the command line, announces it and runs it
through a CopyExecutor.
"""

import logging
import shlex
import subprocess
import sys
from dataclasses import dataclass
from typing import Optional, Protocol, TextIO, Tuple, runtime_checkable

from gadgetctl.config import SHELL_WRAPPER, ClusterConfig
from gadgetctl.errors import ExternalCommandFailed
from gadgetctl.modules.locator import locate_agent_pod

logger = logging.getLogger("gadgetctl.copier")


@dataclass
class CopyResult:
    """Outcome of one copy. ``message`` is empty on success."""

    ok: bool
    message: str = ""
    command: str = ""

    def __str__(self) -> str:
        return self.message

    def __bool__(self) -> bool:
        return self.ok

    @classmethod
    def success(cls, command: str = "") -> "CopyResult":
        return cls(ok=True, message="", command=command)

    @classmethod
    def failure(cls, message: str, command: str = "") -> "CopyResult":
        return cls(ok=False, message=message, command=command)


@runtime_checkable
class CopyExecutor(Protocol):
    """Capability that carries out a prepared copy command line."""

    def run(self, command_line: str) -> CopyResult:
        """Run the command line and report the outcome."""
        ...


class ShellCopyExecutor:
    """Runs the copy command through a shell, sharing our stdout/stderr."""

    def __init__(self, shell: Tuple[str, ...] = SHELL_WRAPPER):
        self.shell = tuple(shell)

    def run(self, command_line: str) -> CopyResult:
        try:
            process = subprocess.Popen([*self.shell, command_line])
        except OSError as e:
            logger.error(f"Failed to start copy command: {e}")
            return CopyResult.failure(str(ExternalCommandFailed(str(e))), command_line)

        returncode = process.wait()
        if returncode != 0:
            error = ExternalCommandFailed(f"exit status {returncode}", returncode=returncode)
            logger.error(f"Copy command failed: {error}")
            return CopyResult.failure(str(error), command_line)

        return CopyResult.success(command_line)


def build_copy_command(
    config: ClusterConfig,
    pod_name: str,
    source_path: str,
    dest_path: str,
) -> str:
    """
    Build ``<tool> [--kubeconfig=<path>] cp <src> <ns>/<pod>:<dest>``.

    The kubeconfig clause appears exactly once when an explicit path is
    configured and not at all otherwise.
    """
    parts = [config.copy_tool]
    if config.has_explicit_kubeconfig:
        parts.append(f"--kubeconfig={shlex.quote(config.kubeconfig)}")
    parts.append("cp")
    parts.append(shlex.quote(source_path))
    parts.append(shlex.quote(f"{config.namespace}/{pod_name}:{dest_path}"))
    return " ".join(parts)


def copy_into(
    core_api,
    node: str,
    source_path: str,
    dest_path: str,
    config: Optional[ClusterConfig] = None,
    copy_executor: Optional[CopyExecutor] = None,
    echo: Optional[TextIO] = None,
) -> CopyResult:
    """
    Copy a local file into the agent pod on ``node``.

    The command line is printed to ``echo`` (stdout by default) before the
    copy starts, so callers can keep an audit trail.

    Returns:
        CopyResult; ``str(result)`` is empty on success, otherwise it
        describes the failure
    """
    config = config or ClusterConfig()
    if copy_executor is None:
        copy_executor = ShellCopyExecutor(config.shell)
    if echo is None:
        echo = sys.stdout

    try:
        pod_name = locate_agent_pod(core_api, node, config)
    except Exception as e:
        logger.info(f"Copy to node {node} skipped: {e}")
        return CopyResult.failure(str(e))

    command_line = build_copy_command(config, pod_name, source_path, dest_path)
    print(command_line, file=echo)
    logger.debug(f"Running copy command: {command_line}")

    return copy_executor.run(command_line)
