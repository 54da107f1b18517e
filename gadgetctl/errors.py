"""
Error taxonomy for agent pod access.

Every failure the core can produce is a GadgetError subclass tagged with
an ErrorKind, so callers can branch on ``err.kind`` instead of matching
message text. Messages keep the short sentinel prefixes ("not-found",
"too-many") used by older string-based callers.
"""

from enum import Enum
from typing import List, Optional


class ErrorKind(Enum):
    """Closed set of failure kinds."""

    NOT_FOUND = "not-found"
    AMBIGUOUS_MATCH = "too-many"
    CONFIG_RESOLUTION_FAILED = "config-resolution-failed"
    TRANSPORT_CONSTRUCTION_FAILED = "transport-construction-failed"
    STREAM_FAILED = "stream-failed"
    EXTERNAL_COMMAND_FAILED = "external-command-failed"


class GadgetError(Exception):
    """Base class for all agent pod access failures."""

    kind: ErrorKind = ErrorKind.STREAM_FAILED

    def __init__(self, detail: str, node: Optional[str] = None):
        """
        Initialize error.

        Args:
            detail: Human-readable description of what went wrong
            node: Node the failing call targeted, if known
        """
        self.detail = detail
        self.node = node
        super().__init__(f"{self.kind.value}: {detail}")


class NotFound(GadgetError):
    """No running agent pod matched on the node."""

    kind = ErrorKind.NOT_FOUND

    def __init__(self, node: str, selector: str):
        self.match_count = 0
        super().__init__(f"no running pod matching {selector} on node {node}", node=node)


class AmbiguousMatch(GadgetError):
    """More than one running agent pod matched on the node."""

    kind = ErrorKind.AMBIGUOUS_MATCH

    def __init__(self, node: str, pod_names: List[str]):
        self.match_count = len(pod_names)
        self.pod_names = list(pod_names)
        super().__init__(
            f"{self.match_count} agent pods running on node {node}: {', '.join(pod_names)}",
            node=node,
        )


class ConfigResolutionFailed(GadgetError):
    """Cluster credentials could not be loaded."""

    kind = ErrorKind.CONFIG_RESOLUTION_FAILED


class TransportConstructionFailed(GadgetError):
    """The REST client or exec channel could not be built."""

    kind = ErrorKind.TRANSPORT_CONSTRUCTION_FAILED


class StreamFailed(GadgetError):
    """The exec stream failed after it was opened."""

    kind = ErrorKind.STREAM_FAILED


class RemoteCommandFailed(StreamFailed):
    """The remote command ran and exited with a non-zero status."""

    def __init__(self, exit_code: int, detail: str, node: Optional[str] = None):
        self.exit_code = exit_code
        super().__init__(detail, node=node)


class ExternalCommandFailed(GadgetError):
    """The external copy command could not be spawned or exited non-zero."""

    kind = ErrorKind.EXTERNAL_COMMAND_FAILED

    def __init__(self, detail: str, returncode: Optional[int] = None, node: Optional[str] = None):
        self.returncode = returncode
        super().__init__(detail, node=node)
