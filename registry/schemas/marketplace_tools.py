"""
Marketplace search tool schema
"""

search_marketplace_tool = {
    "name": "search_marketplace",
    "description": "Search for products across multiple marketplaces (Amazon, eBay) with optional price filtering",
    "input_schema": {
        "type": "object",
        "properties": {
            "query": {"type": "string", "description": "Search query for products"},
            "min_price": {"type": "number", "description": "Minimum price filter (optional)"},
            "max_price": {"type": "number", "description": "Maximum price filter (optional)"}
        },
        "required": ["query"]
    }
}
