"""
Tool registry - schemas for every capability the LLM may ask us to call
"""
from .schemas.marketplace_tools import search_marketplace_tool
from .schemas.marketing_tools import get_taste_profile_tool, generate_ad_copy_tool

TOOLS = [
    search_marketplace_tool,
    get_taste_profile_tool,
    generate_ad_copy_tool,
]

TOOL_NAMES = frozenset(tool["name"] for tool in TOOLS)

__all__ = ["TOOLS", "TOOL_NAMES"]
