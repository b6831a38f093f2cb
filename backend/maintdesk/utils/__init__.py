"""Utility modules"""
from .logger import get_logger, setup_logging
from .idgen import generate_id, generate_correlation_id, generate_response_id
from .time import utc_now, parse_iso, to_datetime

__all__ = [
    "get_logger",
    "setup_logging",
    "generate_id",
    "generate_correlation_id",
    "generate_response_id",
    "utc_now",
    "parse_iso",
    "to_datetime",
]
