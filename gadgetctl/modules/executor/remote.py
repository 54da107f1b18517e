"""
Remote Executor - run a shell command in the node's agent container.

The command goes through the pods/exec sub-resource over the control
plane's websocket upgrade, so the node itself never has to be reachable.
Output is drained channel by channel, as raw bytes, into caller-supplied
binary sinks.
"""

import io
import logging
from dataclasses import dataclass
from typing import BinaryIO, Optional

import yaml
from kubernetes.client.exceptions import ApiException
from kubernetes.stream import stream
from kubernetes.stream.ws_client import ERROR_CHANNEL
from websocket import WebSocketException

from gadgetctl.config import ClusterConfig
from gadgetctl.errors import (
    RemoteCommandFailed,
    StreamFailed,
    TransportConstructionFailed,
)
from gadgetctl.modules.executor.credentials import build_rest_client, load_rest_configuration
from gadgetctl.modules.locator import locate_agent_pod

logger = logging.getLogger("gadgetctl.executor")


@dataclass
class ExecResult:
    """
    Captured output of one remote command.

    Raw channel bytes are buffered for the whole run and decoded once at
    the end, so characters split across frames survive.
    """

    stdout: str = ""
    stderr: str = ""
    error: Optional[Exception] = None
    exit_code: Optional[int] = None

    @property
    def ok(self) -> bool:
        """True when the command ran and nothing failed."""
        return self.error is None

    def raise_for_error(self) -> None:
        """Re-raise the recorded error, if any."""
        if self.error is not None:
            raise self.error

    def combined(self) -> str:
        """Error text (if any) followed by stdout and stderr."""
        output = self.stdout + self.stderr
        if self.error is not None:
            return f"{self.error}{output}"
        return output


def execute(
    core_api,
    node: str,
    command: str,
    stdout: BinaryIO,
    stderr: BinaryIO,
    config: Optional[ClusterConfig] = None,
) -> None:
    """
    Run ``command`` through the shell in the agent container on ``node``.

    Blocks until the remote process exits and both streams are drained.
    No timeout is applied here.

    Args:
        core_api: Client handle used to locate the agent pod
        node: Node name
        command: Shell command line
        stdout: Sink for the command's standard output
        stderr: Sink for the command's standard error
        config: Cluster access configuration; defaults apply when omitted

    Raises:
        NotFound, AmbiguousMatch: From the pod lookup
        ConfigResolutionFailed: Credentials could not be loaded
        TransportConstructionFailed: Client or exec channel could not be built
        StreamFailed: Streaming failed; RemoteCommandFailed on non-zero exit
    """
    config = config or ClusterConfig()
    pod_name = locate_agent_pod(core_api, node, config)

    configuration = load_rest_configuration(config)
    exec_api = build_rest_client(configuration)

    exec_command = [*config.shell, command]
    logger.debug(f"Executing {exec_command} in {config.namespace}/{pod_name}:{config.container}")

    try:
        ws_client = stream(
            exec_api.connect_get_namespaced_pod_exec,
            pod_name,
            config.namespace,
            container=config.container,
            command=exec_command,
            stdin=False,
            stdout=True,
            stderr=True,
            tty=False,
            binary=True,
            _preload_content=False,
        )
    except (ApiException, WebSocketException, OSError) as e:
        raise TransportConstructionFailed(
            f"Failed to open exec stream to {config.namespace}/{pod_name}: {e}", node=node
        ) from e

    try:
        _drain(ws_client, stdout, stderr, config.stream_poll_seconds)
        status = ws_client.read_channel(ERROR_CHANNEL)
    except (WebSocketException, OSError) as e:
        raise StreamFailed(f"Exec stream to {pod_name} failed: {e}", node=node) from e
    finally:
        ws_client.close()

    _check_status(status, node)


def _drain(ws_client, stdout: BinaryIO, stderr: BinaryIO, poll_seconds: float) -> None:
    """Copy stdout/stderr channel data into the sinks until the socket closes."""
    while ws_client.is_open():
        ws_client.update(timeout=poll_seconds)
        if ws_client.peek_stdout():
            stdout.write(ws_client.read_stdout())
        if ws_client.peek_stderr():
            stderr.write(ws_client.read_stderr())

    # Frames that arrived together with the close
    if ws_client.peek_stdout():
        stdout.write(ws_client.read_stdout())
    if ws_client.peek_stderr():
        stderr.write(ws_client.read_stderr())


def _check_status(raw_status: bytes, node: str) -> None:
    """Raise if the exec status channel reports a failure."""
    if not raw_status:
        return

    try:
        status = yaml.safe_load(raw_status)
    except yaml.YAMLError as e:
        raise StreamFailed(f"Unreadable exec status {raw_status!r}: {e}", node=node) from e

    if not isinstance(status, dict) or status.get("status") == "Success":
        return

    message = status.get("message") or status.get("reason") or "command failed"
    details = status.get("details")
    causes = details.get("causes") if isinstance(details, dict) else None
    for cause in causes or []:
        if isinstance(cause, dict) and cause.get("reason") == "ExitCode":
            try:
                exit_code = int(cause.get("message"))
            except (TypeError, ValueError):
                break
            raise RemoteCommandFailed(exit_code, message, node=node)

    raise StreamFailed(message, node=node)


def execute_capture(
    core_api,
    node: str,
    command: str,
    config: Optional[ClusterConfig] = None,
) -> ExecResult:
    """
    Run a command and capture both streams into an ExecResult.

    Failures are recorded on the result instead of raised, so whatever
    output arrived before the failure is kept.
    """
    out, err = io.BytesIO(), io.BytesIO()
    result = ExecResult()

    try:
        execute(core_api, node, command, out, err, config)
        result.exit_code = 0
    except RemoteCommandFailed as e:
        result.error = e
        result.exit_code = e.exit_code
    except Exception as e:
        result.error = e

    if result.error is not None:
        logger.info(f"Command on node {node} failed: {result.error}")

    result.stdout = out.getvalue().decode("utf-8", "replace")
    result.stderr = err.getvalue().decode("utf-8", "replace")
    return result


def execute_simple(
    core_api,
    node: str,
    command: str,
    config: Optional[ClusterConfig] = None,
) -> str:
    """Run a command and return error text plus all captured output as one string."""
    return execute_capture(core_api, node, command, config).combined()
