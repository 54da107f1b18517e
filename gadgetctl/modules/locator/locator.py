"""
Pod Locator for the per-node agent.

The agent runs as one pod per node. Looking it up is a single list call
with a label selector for the agent workload and a field selector pinning
the node and the Running phase. Exactly one match is required: zero means
the agent is not (yet) there, more than one means the deployment is
broken and we refuse to guess.
"""

import logging
from typing import Optional

from gadgetctl.config import ClusterConfig
from gadgetctl.errors import AmbiguousMatch, NotFound

logger = logging.getLogger("gadgetctl.locator")


def build_field_selector(node: str) -> str:
    """Field selector matching running pods assigned to ``node``."""
    return f"spec.nodeName={node},status.phase=Running"


def locate_agent_pod(core_api, node: str, config: Optional[ClusterConfig] = None) -> str:
    """
    Find the single running agent pod on a node.

    Args:
        core_api: CoreV1Api (or anything with list_namespaced_pod)
        node: Node name, used only as a selector value
        config: Cluster access configuration; defaults apply when omitted

    Returns:
        Name of the agent pod

    Raises:
        NotFound: No pod matched
        AmbiguousMatch: More than one pod matched
        ApiException: The list call itself failed (propagated unchanged)
    """
    config = config or ClusterConfig()
    field_selector = build_field_selector(node)

    logger.debug(
        f"Listing pods in {config.namespace} with labels {config.label_selector!r} "
        f"and fields {field_selector!r}"
    )
    pods = core_api.list_namespaced_pod(
        config.namespace,
        label_selector=config.label_selector,
        field_selector=field_selector,
    )

    items = pods.items or []
    if not items:
        raise NotFound(node, config.label_selector)
    if len(items) != 1:
        names = [pod.metadata.name for pod in items]
        logger.warning(f"Refusing to pick among {len(names)} agent pods on {node}: {names}")
        raise AmbiguousMatch(node, names)

    pod_name = items[0].metadata.name
    logger.debug(f"Located agent pod {pod_name} on node {node}")
    return pod_name
