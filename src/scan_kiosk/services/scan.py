"""Scan-landing flow: validate, count, consume, advance."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from enum import Enum

from scan_kiosk.services.ledger import MAX_TOKEN, TokenLedger
from scan_kiosk.services.metrics import MetricsAggregator

logger = logging.getLogger(__name__)

_TOKEN_PATTERN = re.compile(r"[0-9]+")
_MAX_TOKEN_DIGITS = len(str(MAX_TOKEN))


class InvalidTokenError(ValueError):
    """Raised when a scanned path segment is not a non-negative integer."""


class ScanOutcome(Enum):
    """Terminal result of a scan request."""

    REDIRECT = "redirect"
    ALREADY_USED = "already_used"


@dataclass(frozen=True)
class ScanResult:
    """What happened to one scan request."""

    token: int
    outcome: ScanOutcome

    @property
    def first_use(self) -> bool:
        return self.outcome is ScanOutcome.REDIRECT


def parse_token(raw: str) -> int:
    """Return ``raw`` as a token, accepting only ASCII decimal digits.

    Leading zeros are allowed; the value must fit in a signed 64-bit integer.

    Raises:
        InvalidTokenError: If ``raw`` is empty, signed, non-numeric or too large
    """
    if not isinstance(raw, str) or not _TOKEN_PATTERN.fullmatch(raw):
        raise InvalidTokenError(f"Invalid token: {str(raw)[:32]!r}")
    digits = raw.lstrip("0") or "0"
    if len(digits) > _MAX_TOKEN_DIGITS:
        raise InvalidTokenError(f"Token too long: {len(raw)} digits")
    token = int(digits)
    if token > MAX_TOKEN:
        raise InvalidTokenError(f"Token out of range: {token}")
    return token


def process_scan(raw_token: str, ledger: TokenLedger, metrics: MetricsAggregator) -> ScanResult:
    """Run one scan through the ledger and the counters.

    A malformed token is rejected before anything is recorded. Every valid
    scan counts towards ``qr_scans``; the first scan of a token also counts as
    a unique scan and a redirect and moves the poster on to the next token,
    later scans count as revisits.

    Args:
        raw_token: Path segment taken from the scan URL
        ledger: Token ledger
        metrics: Metrics aggregator

    Returns:
        The scan result

    Raises:
        InvalidTokenError: If the token is malformed
        StorageError: If the backing store fails
    """
    token = parse_token(raw_token)
    metrics.increment("qr_scans")

    if not ledger.consume_token(token):
        metrics.increment("revisits")
        logger.info("Token %d scanned again", token)
        return ScanResult(token=token, outcome=ScanOutcome.ALREADY_USED)

    metrics.increment("unique_scans")
    ledger.advance_if_current(token)
    metrics.increment("redirects")
    logger.info("Token %d redeemed", token)
    return ScanResult(token=token, outcome=ScanOutcome.REDIRECT)
