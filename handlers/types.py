"""
Shared handler types
"""
from typing import Any, Callable

from orchestration.types import CapabilityArgs


class CapabilityError(Exception):
    """A capability couldn't produce a result (bad arguments or provider failure)"""
    pass


CapabilityHandler = Callable[[CapabilityArgs], Any]
