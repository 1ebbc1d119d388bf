"""
Marketing tool schemas - audience analysis and ad copy generation
"""

get_taste_profile_tool = {
    "name": "get_taste_profile",
    "description": "Analyze a product description using Qloo's Taste AI to identify target audience segments with affinity scores",
    "input_schema": {
        "type": "object",
        "properties": {
            "description": {
                "type": "string",
                "description": "Product description to analyze for audience segments"
            }
        },
        "required": ["description"]
    }
}

generate_ad_copy_tool = {
    "name": "generate_ad_copy",
    "description": "Generate marketing copy and advertisements for a product targeting specific audience segments",
    "input_schema": {
        "type": "object",
        "properties": {
            "product_title": {"type": "string", "description": "Title or name of the product"},
            "segments": {
                "type": "array",
                "items": {"type": "string"},
                "description": "Target audience segments for the ad copy"
            }
        },
        "required": ["product_title", "segments"]
    }
}
