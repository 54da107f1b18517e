"""
gadgetctl - Node-local agent access for Inspektor Gadget style deployments

Runs commands inside (and copies files into) the per-node agent pod
without needing network access to the node itself. Everything goes
through the cluster control plane.

Architecture:
- Each module is self-contained with clear interfaces
- Configuration is passed explicitly, never read from global state
- Errors carry a structured kind so callers can branch on them

Modules:
- locator: find the single agent pod running on a node
- executor: run a shell command in the agent container and capture output
- copier: copy a local file into the agent pod via an external tool
"""

__version__ = "1.0.0"
