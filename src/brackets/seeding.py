"""
Bracket sizing, seeding and first round bye allocation.
"""
import math
import random
from typing import List, Optional, Sequence, Tuple

from .errors import InvalidInputError
from .models import BYE

SEED_TYPES = ('random', 'ordered', 'as-entered')

# Fields up to this size are drawn directly instead of being split in halves.
SMALL_FIELD_SIZE = 8

# 0-based seed indices that receive a bye, keyed by field size.
BYE_TABLE = {
    3: [0],
    5: [0, 3, 4],
    6: [0, 5],
    7: [0],
}

Pair = Tuple[Optional[str], Optional[str]]


def next_pow2(n: int) -> int:
    """Smallest power of two that can hold n participants."""
    if n <= 0:
        return 0
    return 2 ** math.ceil(math.log2(n))


def calculate_byes(num_participants: int) -> int:
    """Calculate number of byes needed to fill the bracket."""
    return next_pow2(num_participants) - num_participants


def seed_participants(participants: Sequence[str], seed_type: str,
                      rng: Optional[random.Random] = None) -> List[str]:
    """
    Return participants in draw order for the given seeding mode.

    'random' shuffles with rng (a fresh random.Random when omitted);
    'ordered' and 'as-entered' keep the input order.
    """
    if seed_type not in SEED_TYPES:
        raise InvalidInputError(f"Unknown seed type: {seed_type!r}")
    seeded = list(participants)
    if seed_type == 'random':
        (rng or random.Random()).shuffle(seeded)
    return seeded


def _bye_indices(num_participants: int, num_byes: int, reverse: bool) -> List[int]:
    table = BYE_TABLE.get(num_participants)
    if table is not None and len(table) == num_byes:
        indices = table
    else:
        indices = range(num_byes)
    if reverse:
        return sorted(num_participants - 1 - i for i in indices)
    return sorted(indices)


def _draw_small_field(participants: List[str], num_byes: int, reverse: bool) -> List[Pair]:
    """
    Pair a field of at most SMALL_FIELD_SIZE participants.

    Bye seeds from the top half of the list open the draw, bye seeds from the
    bottom half close it, and everyone else is folded first-vs-last in between.
    """
    count = len(participants)
    bye_indices = set(_bye_indices(count, num_byes, reverse))

    head, tail, remaining = [], [], []
    for index, participant in enumerate(participants):
        if index not in bye_indices:
            remaining.append(participant)
        elif index * 2 < count:
            head.append((participant, BYE))
        else:
            tail.append((participant, BYE))

    middle = [(remaining[i], remaining[-1 - i]) for i in range(len(remaining) // 2)]
    return head + middle + tail


def allocate_pairs(participants: Sequence[str], num_byes: int, reverse: bool = False) -> List[Pair]:
    """
    Split seeded participants into first round pairs, handing out num_byes byes.

    Larger fields are bisected recursively. Going forward the upper half takes
    the extra bye when the count is odd; the lower half is always drawn with
    the direction flipped so its byes mirror the upper half's.
    """
    participants = list(participants)
    count = len(participants)

    if num_byes >= count:
        pairs = [(participant, BYE) for participant in participants]
        pairs.extend((None, BYE) for _ in range((num_byes - count) // 2))
        return pairs

    if count <= SMALL_FIELD_SIZE:
        return _draw_small_field(participants, num_byes, reverse)

    if reverse:
        upper_count = (count + 1) // 2
        upper_byes = num_byes // 2
    else:
        upper_count = count // 2
        upper_byes = (num_byes + 1) // 2

    upper = allocate_pairs(participants[:upper_count], upper_byes, reverse)
    lower = allocate_pairs(participants[upper_count:], num_byes - upper_byes, not reverse)
    return upper + lower


def generate_pairs(participants: Sequence[str], seed_type: str,
                   rng: Optional[random.Random] = None) -> List[Pair]:
    """Seed participants and draw the first round, byes included."""
    seeded = seed_participants(participants, seed_type, rng)
    capacity = max(next_pow2(len(seeded)), 2)
    return allocate_pairs(seeded, capacity - len(seeded))
