"""Splitting of large BRL amounts into transfer parts below the bank limit."""

import logging
import random
from decimal import Decimal
from typing import Protocol

from .money import from_cents, to_cents

logger = logging.getLogger(__name__)

SPLIT_CEILING = 99999  # reais, per-transfer limit
SPLIT_CEILING_CENTS = SPLIT_CEILING * 100

MIN_SHIFT_CENTS = 1000  # R$ 10.00
MAX_SHIFT_PERCENT = 15


class RandomSource(Protocol):
    """The subset of ``random.Random`` the splitter needs."""

    def randint(self, a: int, b: int) -> int: ...

    def shuffle(self, x: list) -> None: ...


_default_rng: RandomSource = random.SystemRandom()


def count_parts(total: Decimal | int | float | str) -> int:
    """
    Number of parts ``split_amount`` produces for ``total``.

    Returns:
        0 for non-positive totals, otherwise ceil(total / ceiling)
    """
    total_cents = to_cents(total)
    if total_cents <= 0:
        return 0
    return -(-total_cents // SPLIT_CEILING_CENTS)


def equal_partition(total_cents: int, num_parts: int) -> list[int]:
    """
    Partition ``total_cents`` into ``num_parts`` near-equal integer parts.

    The remainder goes one cent at a time to the leading parts.
    """
    base, remainder = divmod(total_cents, num_parts)
    return [base + 1 if i < remainder else base for i in range(num_parts)]


def redistribute(amounts: list[int], rng: RandomSource) -> list[int]:
    """
    Make parts unequal by shifting value between mirrored pairs.

    Part ``i`` gives a random amount between R$ 10.00 and 15% of its value to
    part ``n-1-i``. Pairs where that range is empty, or where the shift would
    consume the whole part, are left unchanged. The sum is preserved.
    """
    amounts = list(amounts)
    num_parts = len(amounts)

    for i in range(num_parts // 2):
        partner = num_parts - 1 - i
        max_shift = amounts[i] * MAX_SHIFT_PERCENT // 100
        if max_shift < MIN_SHIFT_CENTS:
            logger.debug(f"Skipping shift for pair ({i}, {partner}): part too small")
            continue

        shift = rng.randint(MIN_SHIFT_CENTS, max_shift)
        if amounts[i] > shift:
            amounts[i] -= shift
            amounts[partner] += shift

    return amounts


def split_amount(
    total: Decimal | int | float | str, rng: RandomSource | None = None
) -> list[Decimal]:
    """
    Split a total into transfer parts of at most R$ 99.999,00 each.

    Steps:
    1. Round the total to cents
    2. Return it unchanged if it already fits under the ceiling
    3. Otherwise partition it equally into the minimum number of parts
    4. Shift random amounts between mirrored pairs of parts
    5. Shuffle the parts so the order does not reveal the shifted pairs

    All arithmetic happens in integer cents, so the parts always sum to the
    rounded total exactly.

    Args:
        total: Amount in reais
        rng: Random source; defaults to a process-wide ``SystemRandom``

    Returns:
        Parts as two-digit Decimals, or an empty list for non-positive totals
    """
    rng = rng or _default_rng

    total_cents = to_cents(total)
    if total_cents <= 0:
        return []

    if total_cents <= SPLIT_CEILING_CENTS:
        return [from_cents(total_cents)]

    num_parts = count_parts(total)
    amounts = redistribute(equal_partition(total_cents, num_parts), rng)

    assert sum(amounts) == total_cents, "Redistribution changed the total"

    over_ceiling = [cents for cents in amounts if cents > SPLIT_CEILING_CENTS]
    if over_ceiling:
        logger.warning(
            f"{len(over_ceiling)} of {num_parts} parts ended above the "
            f"R$ {SPLIT_CEILING} ceiling after redistribution: "
            f"{[str(from_cents(cents)) for cents in over_ceiling]}"
        )

    parts = [from_cents(cents) for cents in amounts]
    rng.shuffle(parts)

    logger.info(f"Split {from_cents(total_cents)} into {num_parts} parts")
    return parts
