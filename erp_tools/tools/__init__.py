"""Tool factories, grouped by backend area."""

from erp_tools.tools import catalog, content, data_manager, orders

TOOL_BUILDERS = [
    *data_manager.TOOL_BUILDERS,
    *content.TOOL_BUILDERS,
    *orders.TOOL_BUILDERS,
    *catalog.TOOL_BUILDERS,
]

__all__ = ["TOOL_BUILDERS"]
