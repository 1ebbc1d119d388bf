"""
Response formatting
Renders normalized results as the chat message the user reads.
"""
from .types import MarketingCopy, SearchResultsSummary

SEARCH_PREVIEW_LIMIT = 5
COMBINED_PREVIEW_LIMIT = 3
COMBINED_HEADLINE_LIMIT = 2

GENERIC_APOLOGY = (
    "I encountered some issues processing your request. "
    "Please try again with more specific details."
)


def _product_line(title: str, price: float) -> str:
    return f"• {title} - ${price:.2f}"


def format_search_message(results: SearchResultsSummary) -> str:
    """Format search results, listing at most five products"""
    if results.count == 0:
        return (
            f"I couldn't find any products matching '{results.query}'. "
            "Try adjusting your search terms or price range."
        )

    lines = [f"I found {results.count} products for '{results.query}':", ""]
    for product in results.products[:SEARCH_PREVIEW_LIMIT]:
        lines.append(_product_line(product.title, product.price))

    if results.count > SEARCH_PREVIEW_LIMIT:
        lines.append(f"... and {results.count - SEARCH_PREVIEW_LIMIT} more results")

    return "\n".join(lines)


def format_marketing_message(marketing: MarketingCopy, product_name: str = "") -> str:
    """Format marketing copy with one section per non-empty field"""
    if product_name:
        parts = [f"Here's marketing copy for '{product_name}':"]
    else:
        parts = ["Here's your marketing copy:"]

    if marketing.segments:
        parts.append(f"**Target Audience:** {', '.join(marketing.segments)}")

    if marketing.headlines:
        parts.append("**Headlines:**\n" + "\n".join(f"• {h}" for h in marketing.headlines))

    if marketing.descriptions:
        parts.append("**Descriptions:**\n" + "\n".join(f"• {d}" for d in marketing.descriptions))

    if marketing.call_to_action:
        parts.append(f"**Call to Action:** {marketing.call_to_action}")

    return "\n\n".join(parts)


def format_combined_message(
    search_results: SearchResultsSummary | None,
    marketing: MarketingCopy | None,
    product_name: str = "",
) -> str:
    """
    Format a combined search + marketing response.

    Either half may be missing when its step failed; if neither produced
    anything worth showing the user gets an apology instead of a blank reply.
    """
    sections = []

    if search_results is not None:
        lines = ["## Product Listings"]
        if search_results.count == 0:
            lines.append("No products found.")
        else:
            lines.append(f"Found {search_results.count} products:")
            for product in search_results.products[:COMBINED_PREVIEW_LIMIT]:
                lines.append(_product_line(product.title, product.price))
            if search_results.count > COMBINED_PREVIEW_LIMIT:
                lines.append(f"... and {search_results.count - COMBINED_PREVIEW_LIMIT} more")
        sections.append("\n".join(lines))

    if marketing is not None and marketing.headlines:
        lines = ["## Marketing Copy"]
        if marketing.segments:
            lines.append(f"**Target Audience:** {', '.join(marketing.segments)}")
            lines.append("")
        lines.append("**Top Headlines:**")
        lines.extend(f"• {h}" for h in marketing.headlines[:COMBINED_HEADLINE_LIMIT])
        if marketing.call_to_action:
            lines.append("")
            lines.append(f"**Call to Action:** {marketing.call_to_action}")
        sections.append("\n".join(lines))

    if not sections:
        return GENERIC_APOLOGY

    if product_name:
        sections.insert(0, f"Here's what I found for '{product_name}':")

    return "\n\n".join(sections)
