"""Parsing of FastNetMon blackhole API responses."""

import logging
from typing import List

from pydantic import ValidationError

from .errors import DecodeError, UpstreamNotSuccessful
from .models import BlackholeResponse, BlockedEntry

logger = logging.getLogger(__name__)


def parse_blocked_entries(body: bytes) -> List[BlockedEntry]:
    """
    Decode a blackhole API response into blocked entries.

    Args:
        body: Raw response body

    Returns:
        Entries in upstream order, duplicates and empty fields kept as-is

    Raises:
        DecodeError: body is not the expected JSON structure
        UpstreamNotSuccessful: body reports success=false
    """
    # invalid UTF-8 sequences become U+FFFD
    text = body.decode("utf-8", errors="replace")

    try:
        response = BlackholeResponse.model_validate_json(text)
    except ValidationError as e:
        raise DecodeError(f"error decoding JSON: {e.error_count()} error(s): {e.errors()[0]['msg']}") from e

    if not response.success:
        raise UpstreamNotSuccessful("API request was not successful according to response body")

    entries = [
        value.to_entry() if value is not None else BlockedEntry(address="", identifier="")
        for value in response.values or []
    ]
    logger.debug(f"Parsed {len(entries)} blocked entries from {len(body)} bytes")
    return entries
