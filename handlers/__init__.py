"""
Capability handlers
Decodes a CapabilityCall into its typed arguments and routes it to the
implementation registered under its name.
"""
from typing import Any

from orchestration.types import (
    ArgumentError,
    CapabilityCall,
    GENERATE_AD_COPY,
    GET_TASTE_PROFILE,
    SEARCH_MARKETPLACE,
    UnknownArgs,
)
from utils import get_logger
from .types import CapabilityError, CapabilityHandler
from .marketplace_handlers import handle_search_marketplace
from .marketing_handlers import handle_get_taste_profile, handle_generate_ad_copy

logger = get_logger(__name__)

HANDLERS: dict[str, CapabilityHandler] = {
    SEARCH_MARKETPLACE: handle_search_marketplace,
    GET_TASTE_PROFILE: handle_get_taste_profile,
    GENERATE_AD_COPY: handle_generate_ad_copy,
}


def handle_capability_call(call: CapabilityCall) -> Any:
    """Execute a capability call. Raises CapabilityError on failure."""
    try:
        args = call.parse_arguments()
    except ArgumentError as e:
        raise CapabilityError(str(e)) from e

    if isinstance(args, UnknownArgs):
        raise CapabilityError(f"unknown function: {call.name}")

    logger.info(f"Capability called: {call.name} with args: {args}")
    return HANDLERS[call.name](args)


__all__ = [
    "handle_capability_call",
    "CapabilityError",
    "HANDLERS",
]
