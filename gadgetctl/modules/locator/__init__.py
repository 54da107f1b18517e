"""
Locator Module - Black Box Interface

Purpose: Find the one agent pod running on a given node
Interface: locate_agent_pod(), build_field_selector()
Hidden: Selector construction, cardinality checks

No caching: every call asks the control plane again.
"""

from .locator import build_field_selector, locate_agent_pod

__all__ = ["build_field_selector", "locate_agent_pod"]
