"""Configuration provider following Black Box Design principles."""
import os
from dataclasses import dataclass
from typing import Optional, Protocol, Tuple

from gadgetctl.errors import ConfigResolutionFailed

AGENT_NAMESPACE = "kube-system"
AGENT_LABEL_SELECTOR = "k8s-app=gadget"
AGENT_CONTAINER = "gadget"
SHELL_WRAPPER = ("/bin/sh", "-c")
COPY_TOOL = "kubectl"


@dataclass
class ClusterConfig:
    """Everything the core needs to reach the agent pods."""
    kubeconfig: Optional[str] = None
    namespace: str = AGENT_NAMESPACE
    label_selector: str = AGENT_LABEL_SELECTOR
    container: str = AGENT_CONTAINER
    shell: Tuple[str, ...] = SHELL_WRAPPER
    copy_tool: str = COPY_TOOL
    stream_poll_seconds: float = 1.0

    @property
    def has_explicit_kubeconfig(self) -> bool:
        """Check if an explicit kubeconfig override is configured."""
        return bool(self.kubeconfig)


class ConfigProvider(Protocol):
    """Protocol for configuration providers."""

    def get_cluster_config(self) -> ClusterConfig:
        """Get cluster access configuration."""
        ...


class EnvConfigProvider:
    """Environment-based configuration provider."""

    def get_cluster_config(self) -> ClusterConfig:
        """Get cluster access configuration from environment variables."""
        poll_env = os.getenv("GADGET_STREAM_POLL_SECONDS", "1.0")
        try:
            poll_seconds = float(poll_env)
        except ValueError:
            raise ValueError(
                f"GADGET_STREAM_POLL_SECONDS must be a number of seconds, got {poll_env!r}"
            )

        return ClusterConfig(
            # Empty string means "not configured", same as unset
            kubeconfig=os.getenv("GADGET_KUBECONFIG") or None,
            namespace=os.getenv("GADGET_NAMESPACE", AGENT_NAMESPACE),
            label_selector=os.getenv("GADGET_LABEL_SELECTOR", AGENT_LABEL_SELECTOR),
            container=os.getenv("GADGET_CONTAINER", AGENT_CONTAINER),
            copy_tool=os.getenv("GADGET_COPY_TOOL", COPY_TOOL),
            stream_poll_seconds=poll_seconds,
        )


def check_kubeconfig_exists(config: ClusterConfig) -> None:
    """
    Check that an explicitly configured kubeconfig file exists.

    Without an explicit path this is a no-op; default discovery decides.

    Raises:
        ConfigResolutionFailed: If the configured path does not exist
    """
    if config.has_explicit_kubeconfig and not os.path.exists(config.kubeconfig):
        raise ConfigResolutionFailed(f"Kubeconfig {config.kubeconfig!r} not found")
