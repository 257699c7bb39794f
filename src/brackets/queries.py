from typing import List, Optional, Tuple

from .models import BYE, NO_PLAYER, NO_WINNER, Bracket, Match


def is_bye_match(match: Match) -> bool:
    return match.participants[0] == BYE or match.participants[1] == BYE


def is_real_participant(name: Optional[str]) -> bool:
    return bool(name) and name not in (BYE, NO_PLAYER)


def match_number(bracket: Bracket, round_index: int, match_index: int) -> Optional[int]:
    """
    Display number of a match, counting only matches that are actually played.

    Bye matches have no number.
    """
    match = bracket[round_index][match_index]
    if is_bye_match(match):
        return None

    number = 0
    for i in range(round_index):
        number += sum(1 for m in bracket[i] if not is_bye_match(m))
    number += sum(1 for m in bracket[round_index][:match_index] if not is_bye_match(m))
    return number + 1


def participant_path(bracket: Bracket, name: str) -> List[Tuple[int, int, Match]]:
    """Every (round_index, match_index, match) the participant appears in."""
    if not name:
        return []
    path = []
    for round_index, round_matches in enumerate(bracket):
        for match_index, match in enumerate(round_matches):
            if name in match.participants:
                path.append((round_index, match_index, match))
    return path


def participants_in_bracket(bracket: Bracket) -> List[str]:
    """Unique real participant names, in order of first appearance."""
    seen = []
    for match in bracket.matches():
        for name in match.participants:
            if is_real_participant(name) and name not in seen:
                seen.append(name)
    return seen


def bye_count(bracket: Bracket) -> int:
    """Number of byes in the first round."""
    if not bracket.rounds:
        return 0
    return sum(m.participants.count(BYE) for m in bracket[0])


def champion(bracket: Bracket) -> Optional[str]:
    final = bracket.final
    if final is None or final.winner == NO_WINNER:
        return None
    return final.winner
