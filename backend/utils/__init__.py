from .logger import setup_logging, get_logger
from .utcnow import utcnow
from .validation import validate_eth_address

__all__ = [
    # Logger
    "setup_logging",
    "get_logger",

    # Clock
    "utcnow",

    # Validation
    "validate_eth_address",
]
