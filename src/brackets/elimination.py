"""
Single elimination bracket generation.
"""
import math
import random
from typing import Dict, List, Optional, Sequence

from .models import BYE, Bracket, Match
from .seeding import Pair, generate_pairs, seed_participants

# Hand-drawn first rounds for fields that the general allocator does not draw.
# One entry per bracket slot: the 0-based seed index, or None for a bye.
SPECIAL_LAYOUTS: Dict[int, List[Optional[int]]] = {
    5: [0, None, 1, 2, 3, None, 4, None],
    6: [0, None, 1, 4, 2, 3, 5, None],
    7: [0, None, 1, 6, 2, 5, 3, 4],
}


def get_round_name(teams_in_round: int) -> str:
    """Get the name of a round based on number of participants in it."""
    if teams_in_round == 2:
        return "Final"
    elif teams_in_round == 4:
        return "Semifinal"
    elif teams_in_round == 8:
        return "Quarterfinal"
    else:
        return f"Round of {teams_in_round}"


def get_round_names(bracket: Bracket) -> List[str]:
    """Round names in play order, e.g. ['Quarterfinal', 'Semifinal', 'Final']."""
    return [get_round_name(len(round_matches) * 2) for round_matches in bracket]


def match_id(round_index: int, match_index: int) -> str:
    """Build the id of a match from its 0-based round and position."""
    return f"match-r{round_index + 1}-{match_index + 1}"


def layout_pairs(seeded: Sequence[str], layout: Sequence[Optional[int]]) -> List[Pair]:
    """Turn a special-case slot layout into first round pairs."""
    slots = [BYE if seed is None else seeded[seed] for seed in layout]
    return [(slots[i], slots[i + 1]) for i in range(0, len(slots), 2)]


def _bye_winner(participants: List[Optional[str]]) -> Optional[str]:
    if participants[0] == BYE and participants[1] != BYE:
        return participants[1]
    if participants[1] == BYE and participants[0] != BYE:
        return participants[0]
    return None


def build_bracket(pairs: Sequence[Pair]) -> Bracket:
    """
    Lay out every round from the first round pairs.

    Bye matches are decided on creation, and their winners are already
    seated in the following round. Slots waiting on an undecided match
    stay None until the winner is recorded.
    """
    total_rounds = int(math.log2(len(pairs) * 2))
    bracket = Bracket()
    previous_round: List[Match] = []

    for round_index in range(total_rounds):
        num_matches = len(pairs) // (2 ** round_index)
        is_final_round = round_index == total_rounds - 1
        round_matches = []

        for i in range(num_matches):
            if round_index == 0:
                participants = list(pairs[i])
            else:
                participants = [previous_round[i * 2].winner, previous_round[i * 2 + 1].winner]

            match = Match(
                id=match_id(round_index, i),
                participants=participants,
                next_match_id=None if is_final_round else match_id(round_index + 1, i // 2),
                position=i,
            )
            match.winner = _bye_winner(participants)
            round_matches.append(match)

        bracket.add_round(round_matches)
        previous_round = round_matches

    return bracket


def create_bracket(participants: Sequence[str], seed_type: str = 'as-entered',
                   rng: Optional[random.Random] = None) -> Bracket:
    """
    Create a single elimination bracket.

    Args:
        participants: Participant names, at least 2 (not checked here)
        seed_type: 'random', 'ordered' or 'as-entered'
        rng: Random source used by 'random' seeding

    Returns:
        Bracket whose first round holds next_pow2(n) / 2 matches
    """
    layout = SPECIAL_LAYOUTS.get(len(participants))
    if layout is not None:
        pairs = layout_pairs(seed_participants(participants, seed_type, rng), layout)
    else:
        pairs = generate_pairs(participants, seed_type, rng)

    return build_bracket(pairs)
