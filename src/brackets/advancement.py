"""
Winner advancement through a single elimination bracket.
"""
import logging

from .models import BYE, NO_PLAYER, NO_WINNER, Bracket

logger = logging.getLogger(__name__)


def target_slot(position: int) -> int:
    """Slot of the next match taken by the winner of the match at position."""
    return 0 if position % 2 == 0 else 1


def record_winner(bracket: Bracket, match_id: str, winner: str) -> Bracket:
    """
    Record the winner of a match and move them into the next round.

    When the winner lands opposite a bye they win that match too, and the
    advancement continues until a real opponent or the final is reached.
    Unknown match ids are ignored. A winner recorded earlier is overwritten
    but never retracted from later rounds.

    NO_WINNER marks a match where both participants were disqualified:
    the next match receives NO_PLAYER and nothing cascades.
    """
    match = bracket.get_match(match_id)
    if match is None:
        logger.debug("Ignoring winner %r for unknown match %s", winner, match_id)
        return bracket

    pending = [(match, winner)]
    while pending:
        match, winner = pending.pop()
        match.winner = winner

        if not match.next_match_id:
            continue
        next_match = bracket.get_match(match.next_match_id)
        if next_match is None:
            logger.debug("Match %s points at missing match %s", match.id, match.next_match_id)
            continue

        slot = target_slot(match.position)
        if winner == NO_WINNER:
            next_match.participants[slot] = NO_PLAYER
            continue

        next_match.participants[slot] = winner
        if next_match.participants[1 - slot] == BYE:
            logger.debug("%s advances past a bye in %s", winner, next_match.id)
            pending.append((next_match, winner))

    return bracket
