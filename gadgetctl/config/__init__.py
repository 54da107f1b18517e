"""
Config Module - Black Box Interface

Purpose: Cluster access configuration
Interface: ClusterConfig, EnvConfigProvider, check_kubeconfig_exists()
Hidden: Environment parsing, defaults

Configuration is always passed into entry points explicitly. Nothing in
the core reads process-wide configuration on its own.
"""

from .provider import (
    AGENT_CONTAINER,
    AGENT_LABEL_SELECTOR,
    AGENT_NAMESPACE,
    COPY_TOOL,
    SHELL_WRAPPER,
    ClusterConfig,
    ConfigProvider,
    EnvConfigProvider,
    check_kubeconfig_exists,
)

__all__ = [
    "AGENT_CONTAINER",
    "AGENT_LABEL_SELECTOR",
    "AGENT_NAMESPACE",
    "COPY_TOOL",
    "SHELL_WRAPPER",
    "ClusterConfig",
    "ConfigProvider",
    "EnvConfigProvider",
    "check_kubeconfig_exists",
]
