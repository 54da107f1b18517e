"""
Shared pytest fixtures for gadgetctl tests.

This module provides common fixtures including:
- PodListMocker: fake CoreV1Api that filters canned pods by selector
- ExecStreamMocker: stand-in for the kubernetes websocket exec client
- PopenMocker: records copy commands instead of spawning them
"""

import os
import sys
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple, Union
from unittest.mock import MagicMock, patch

import pytest
from kubernetes import client

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from kubernetes.stream.ws_client import ERROR_CHANNEL, STDERR_CHANNEL, STDOUT_CHANNEL


# =============================================================================
# Pod Listing Infrastructure
# =============================================================================

@dataclass
class FakePod:
    """A pod as far as selector matching is concerned."""
    name: str
    node: str
    phase: str = "Running"
    namespace: str = "kube-system"
    labels: Dict[str, str] = field(default_factory=lambda: {"k8s-app": "gadget"})

    def to_v1(self) -> client.V1Pod:
        """Convert to a kubernetes V1Pod model."""
        return client.V1Pod(
            metadata=client.V1ObjectMeta(
                name=self.name, namespace=self.namespace, labels=dict(self.labels)
            ),
            spec=client.V1PodSpec(
                node_name=self.node,
                containers=[client.V1Container(name="gadget")],
            ),
            status=client.V1PodStatus(phase=self.phase),
        )


@dataclass
class ListCall:
    """Record of a list_namespaced_pod call made during testing."""
    namespace: str
    label_selector: str
    field_selector: str


def _parse_selector(selector: str) -> Dict[str, str]:
    pairs = {}
    for term in filter(None, (selector or "").split(",")):
        key, _, value = term.partition("=")
        pairs[key.strip()] = value.strip()
    return pairs


class PodListMocker:
    """
    Fake CoreV1Api that answers list_namespaced_pod from canned pods.

    Selectors are evaluated the way the API server would for the subset
    the locator uses (label equality, spec.nodeName, status.phase), so
    tests exercise the real selector strings.

    Usage:
        def test_lookup(pod_lister):
            pod_lister.add(FakePod("gadget-abc123", node="node-1"))
            assert locate_agent_pod(pod_lister, "node-1") == "gadget-abc123"
    """

    def __init__(self):
        self._pods: List[FakePod] = []
        self._call_history: List[ListCall] = []
        self.error: Optional[Exception] = None

    def add(self, *pods: FakePod) -> "PodListMocker":
        """Register pods; returns self for chaining."""
        self._pods.extend(pods)
        return self

    def register_scenario(self, scenario_name: str) -> "PodListMocker":
        """Register all pods for a named scenario."""
        from fixtures.pod_scenarios import SCENARIOS

        if scenario_name not in SCENARIOS:
            raise ValueError(
                f"Unknown scenario: {scenario_name}. "
                f"Available: {list(SCENARIOS.keys())}"
            )
        return self.add(*SCENARIOS[scenario_name])

    def list_namespaced_pod(
        self,
        namespace: str,
        label_selector: str = "",
        field_selector: str = "",
        **kwargs
    ) -> client.V1PodList:
        """Mock implementation of CoreV1Api.list_namespaced_pod."""
        self._call_history.append(ListCall(namespace, label_selector, field_selector))
        if self.error is not None:
            raise self.error

        labels = _parse_selector(label_selector)
        fields = _parse_selector(field_selector)

        def matches(pod: FakePod) -> bool:
            if pod.namespace != namespace:
                return False
            if any(pod.labels.get(k) != v for k, v in labels.items()):
                return False
            if "spec.nodeName" in fields and pod.node != fields["spec.nodeName"]:
                return False
            if "status.phase" in fields and pod.phase != fields["status.phase"]:
                return False
            return True

        return client.V1PodList(items=[p.to_v1() for p in self._pods if matches(p)])

    @property
    def calls(self) -> List[ListCall]:
        """Get all list calls made during the test."""
        return self._call_history

    @property
    def call_count(self) -> int:
        """Get the number of list calls made."""
        return len(self._call_history)


@pytest.fixture
def pod_lister():
    """An empty PodListMocker; add pods or register a scenario."""
    return PodListMocker()


# =============================================================================
# Exec Stream Mocking Infrastructure
# =============================================================================

class FakeExecStream:
    """
    Mimics the parts of kubernetes.stream.ws_client.WSClient the executor uses.

    Each update() delivers the next queued frame; the socket closes once
    the frames run out. The status frame, if any, lands on ERROR_CHANNEL.
    """

    def __init__(self, frames: List[Tuple[int, bytes]], status: bytes = b"", fail_after: Optional[int] = None):
        self._frames = list(frames)
        if status:
            self._frames.append((ERROR_CHANNEL, status))
        self._channels: Dict[int, bytes] = {}
        self._open = True
        self._updates = 0
        self._fail_after = fail_after
        self.closed = False

    def is_open(self) -> bool:
        return self._open

    def update(self, timeout=0):
        if not self._open:
            return
        if self._fail_after is not None and self._updates >= self._fail_after:
            raise OSError("connection reset by peer")
        self._updates += 1
        if self._frames:
            channel, data = self._frames.pop(0)
            self._channels[channel] = self._channels.get(channel, b"") + data
        if not self._frames:
            self._open = False

    def peek_channel(self, channel, timeout=0) -> bytes:
        return self._channels.get(channel, b"")

    def read_channel(self, channel, timeout=0) -> bytes:
        return self._channels.pop(channel, b"")

    def peek_stdout(self, timeout=0) -> bytes:
        return self.peek_channel(STDOUT_CHANNEL)

    def read_stdout(self, timeout=None) -> bytes:
        return self.read_channel(STDOUT_CHANNEL)

    def peek_stderr(self, timeout=0) -> bytes:
        return self.peek_channel(STDERR_CHANNEL)

    def read_stderr(self, timeout=None) -> bytes:
        return self.read_channel(STDERR_CHANNEL)

    def close(self, **kwargs):
        self._open = False
        self.closed = True


SUCCESS_STATUS = b"metadata: {}\nstatus: Success\n"


def exit_status(code: int) -> bytes:
    """Status frame the API server sends for a non-zero exit."""
    return (
        '{"metadata":{},"status":"Failure",'
        f'"message":"command terminated with non-zero exit code: exit status {code}",'
        '"reason":"NonZeroExitCode",'
        f'"details":{{"causes":[{{"reason":"ExitCode","message":"{code}"}}]}}}}'
    ).encode()


def _as_bytes(data) -> bytes:
    return data.encode() if isinstance(data, str) else data


class ExecStreamMocker:
    """
    Patches credential loading and the exec stream in the executor module.

    Usage:
        def test_echo(pod_lister, exec_mocker):
            pod_lister.add(FakePod("gadget-abc123", node="node-1"))
            exec_mocker.respond(stdout="hello\\n")
            result = execute_capture(pod_lister, "node-1", "echo hello")
    """

    def __init__(self):
        self.stream = MagicMock(name="stream")
        self.load_rest_configuration = MagicMock(name="load_rest_configuration")
        self.build_rest_client = MagicMock(name="build_rest_client")
        self.last_stream: Optional[FakeExecStream] = None
        self.respond()

    def respond(
        self,
        stdout: Union[str, bytes] = b"",
        stderr: Union[str, bytes] = b"",
        status: Union[str, bytes] = SUCCESS_STATUS,
        fail_after: Optional[int] = None,
        frames: Optional[List[Tuple[int, bytes]]] = None,
    ) -> "ExecStreamMocker":
        """
        Queue the frames the next stream() call will deliver.

        Text is UTF-8 encoded. Pass ``frames`` to control exactly how output
        is split across websocket messages.
        """
        frames = list(frames or [])
        if stdout:
            frames.append((STDOUT_CHANNEL, _as_bytes(stdout)))
        if stderr:
            frames.append((STDERR_CHANNEL, _as_bytes(stderr)))
        status = _as_bytes(status)

        def make_stream(*args, **kwargs):
            self.last_stream = FakeExecStream(frames, status=status, fail_after=fail_after)
            return self.last_stream

        self.stream.side_effect = make_stream
        return self

    @property
    def stream_kwargs(self) -> dict:
        """Keyword arguments of the most recent stream() call."""
        return self.stream.call_args.kwargs


@pytest.fixture
def exec_mocker():
    """ExecStreamMocker with the executor's transport patched out."""
    mocker = ExecStreamMocker()
    with patch("gadgetctl.modules.executor.remote.stream", mocker.stream), \
         patch("gadgetctl.modules.executor.remote.load_rest_configuration",
               mocker.load_rest_configuration), \
         patch("gadgetctl.modules.executor.remote.build_rest_client",
               mocker.build_rest_client):
        yield mocker


# =============================================================================
# Copy Command Mocking Infrastructure
# =============================================================================

class PopenMocker:
    """Records copy command spawns and returns a canned exit status."""

    def __init__(self):
        self.returncode = 0
        self.spawn_error: Optional[Exception] = None
        self.commands: List[List[str]] = []
        self.events: List[str] = []

    def popen(self, args, **kwargs):
        if self.spawn_error is not None:
            raise self.spawn_error
        self.commands.append(list(args))
        self.events.append("spawn")
        process = MagicMock()
        process.wait.return_value = self.returncode
        return process


@pytest.fixture
def popen_mocker():
    """PopenMocker with subprocess.Popen patched."""
    mocker = PopenMocker()
    with patch("subprocess.Popen", side_effect=mocker.popen):
        yield mocker


# =============================================================================
# Test Markers Configuration
# =============================================================================

def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "k8s_mock: Tests using mocked Kubernetes API calls"
    )
