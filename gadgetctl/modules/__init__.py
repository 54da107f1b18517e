"""
gadgetctl Modules - Black Box Architecture

Each module is a self-contained black box with:
- Clear interface (public API)
- Hidden implementation details
- Single responsibility

locator is a dependency of both executor and copier; neither of those
knows how the other works.
"""
