"""Ordered fallback chains of acquisition strategies.

A tier pairs an acquisition step (run a command, read a file) with the
parser for its output. Tiers are tried in order; the first tier that
yields at least one record wins. A tier that raises NetinfoError or
returns nothing is logged and skipped.
"""

from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from logging_config import get_logger
from utils import NetinfoError, sanitize_for_log

logger = get_logger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class Tier(Generic[T]):
    """One acquisition strategy within a fallback chain.

    Attributes:
        name: Provenance label used in logs
        acquire: Returns the raw source (may raise NetinfoError)
        parse: Turns the raw source into records (may raise NetinfoError)
    """

    name: str
    acquire: Callable[[], Any]
    parse: Callable[[Any], list[T]]

    def collect(self) -> list[T]:
        return self.parse(self.acquire())


def run_tiers(tiers: Sequence[Tier[T]]) -> tuple[list[T], str | None]:
    """Try tiers in order until one yields records.

    Args:
        tiers: Ordered strategies, most preferred first

    Returns:
        Tuple of (records, winning tier name). ([], None) when every
        tier failed or came back empty.
    """
    for tier in tiers:
        try:
            records = tier.collect()
        except NetinfoError as e:
            logger.debug("Tier '%s' failed: %s", tier.name, sanitize_for_log(str(e)))
            continue

        if records:
            logger.debug("Tier '%s' produced %d records", tier.name, len(records))
            return (records, tier.name)

        logger.debug("Tier '%s' produced no records", tier.name)

    return ([], None)


def acquire_each(steps: Sequence[tuple[str, Callable[[], str]]]) -> tuple[str, ...]:
    """Run one acquisition step per IP family.

    A failed step is logged and counts as empty output, so one family
    cannot hide the other. The tier itself fails only when every step
    failed.

    Args:
        steps: (label, acquire) pairs in output order

    Returns:
        Outputs in step order ("" for failed steps).

    Raises:
        NetinfoError: Every step failed (the last failure is re-raised).
    """
    outputs = []
    failures = []
    for label, step in steps:
        try:
            outputs.append(step())
        except NetinfoError as e:
            logger.debug("%s query failed: %s", label, sanitize_for_log(str(e)))
            failures.append(e)
            outputs.append("")

    if failures and len(failures) == len(steps):
        raise failures[-1]
    return tuple(outputs)


def parse_each(parse: Callable[[str], list[T]]) -> Callable[[Sequence[str]], list[T]]:
    """Lift a single-output parser over the outputs of acquire_each()."""

    def parse_all(outputs: Sequence[str]) -> list[T]:
        records: list[T] = []
        for output in outputs:
            records.extend(parse(output))
        return records

    return parse_all
