"""
Tournament session: one bracket, its scored results and participant edits.
"""
import random
from datetime import datetime
from typing import Dict, List, Optional, Sequence, Tuple

from .advancement import record_winner, target_slot
from .elimination import create_bracket
from .errors import InvalidInputError, UnknownMatchError
from .models import BYE, NO_PLAYER, Bracket
from .queries import champion, is_real_participant, participants_in_bracket
from .results import DEFAULT_ROUNDS_PER_MATCH, MatchResult, record_history, resize_rounds
from .seeding import SEED_TYPES, next_pow2


def validate_participants(participants: Sequence[str]) -> List[str]:
    """
    Clean up a participant list before drawing a bracket.

    Names are stripped; blank names, duplicates (case-insensitive) and
    fields of fewer than 2 are rejected.
    """
    names = []
    seen = set()
    for raw in participants or []:
        name = str(raw).strip() if raw is not None else ''
        if not name:
            raise InvalidInputError("Participant names cannot be empty.")
        if name in (BYE, NO_PLAYER):
            raise InvalidInputError(f'"{name}" is reserved and cannot be a participant name.')
        if name.lower() in seen:
            raise InvalidInputError(f'Participant "{name}" is listed more than once.')
        seen.add(name.lower())
        names.append(name)
    if len(names) < 2:
        raise InvalidInputError("At least 2 participants are required.")
    return names


class Tournament:
    """Mutable state of a single tournament; assumes a single writer."""

    def __init__(self, name='Tournament Draw Sheet', seed_type='random',
                 rounds_per_match=DEFAULT_ROUNDS_PER_MATCH, rng=None):
        self.name = name
        self.seed_type = seed_type
        self.rounds_per_match = rounds_per_match
        self.rng = rng or random.Random()
        self.created = datetime.now().isoformat()
        self.bracket: Optional[Bracket] = None
        self.participant_count = 0
        self.match_results: Dict[str, MatchResult] = {}

    def generate(self, participants: Sequence[str], seed_type: Optional[str] = None) -> Bracket:
        """Draw a fresh bracket, discarding the previous one and all results."""
        seed_type = seed_type or self.seed_type
        if seed_type not in SEED_TYPES:
            raise InvalidInputError(f"Unknown seed type: {seed_type!r}")
        names = validate_participants(participants)

        self.bracket = create_bracket(names, seed_type, self.rng)
        self.seed_type = seed_type
        self.participant_count = len(names)
        self.match_results = {}
        return self.bracket

    def record_winner(self, match_id: str, winner: str) -> Optional[Bracket]:
        if self.bracket is None:
            return None
        return record_winner(self.bracket, match_id, winner)

    def champion(self) -> Optional[str]:
        if self.bracket is None:
            return None
        return champion(self.bracket)

    # Scored results

    def set_rounds_per_match(self, rounds: int):
        if rounds < 1:
            raise InvalidInputError("A match needs at least one round.")
        self.rounds_per_match = rounds
        for result in self.match_results.values():
            resize_rounds(result, rounds)

    def save_match_result(self, result: MatchResult) -> MatchResult:
        """Store a result; a completed result with a winner advances that winner."""
        if self.bracket is None or self.bracket.get_match(result.match_id) is None:
            raise UnknownMatchError(f"Match {result.match_id} is not in the bracket.")
        self.match_results[result.match_id] = result
        if result.completed and result.winner:
            self.record_winner(result.match_id, result.winner)
        return result

    def update_match_winner(self, match_id: str, new_winner: str, reason: Optional[str] = None) -> MatchResult:
        """Change the winner of a scored match, keeping an audit trail."""
        result = self.match_results.get(match_id)
        if result is None:
            raise UnknownMatchError(f"No result stored for match {match_id}.")
        record_history(result, new_winner, reason)
        self.record_winner(match_id, new_winner)
        return result

    def round_status(self) -> Tuple[bool, bool]:
        """
        Returns (any_matches_started, any_rounds_started).

        Bye advancements never count as a started match.
        """
        any_matches_started = False
        any_rounds_started = False
        if self.bracket is None:
            return False, False

        for result in self.match_results.values():
            if result.is_bye():
                continue
            if result.completed:
                any_matches_started = True
            if any(r.is_started() for r in result.rounds):
                any_matches_started = True
                any_rounds_started = True

        if not any_matches_started:
            for match in self.bracket.matches():
                if match.winner is not None and all(is_real_participant(p) for p in match.participants):
                    any_matches_started = True
                    break

        return any_matches_started, any_rounds_started

    def can_modify_participants(self) -> Tuple[bool, Optional[str]]:
        started, _ = self.round_status()
        if started:
            return False, 'Actual tournament matches have started. Use disqualification to remove participants.'
        return True, None

    # Participant management

    def _known_names(self) -> List[str]:
        return participants_in_bracket(self.bracket) if self.bracket else []

    def _regenerate(self, participants: List[str]):
        self.bracket = create_bracket(participants, self.seed_type, self.rng)
        self.participant_count = len(participants)
        self.match_results = {}

    def _clear_advancement(self, match):
        """Undo a bye win and every automatic advancement that followed it."""
        winner = match.winner
        match.winner = None
        while winner and match.next_match_id:
            next_match = self.bracket.get_match(match.next_match_id)
            slot = target_slot(match.position)
            if next_match is None or next_match.participants[slot] != winner:
                break
            next_match.participants[slot] = None
            if next_match.winner != winner:
                break
            next_match.winner = None
            match = next_match

    def rename_participant(self, old_name: str, new_name: str) -> Tuple[bool, str]:
        """Rename a participant everywhere in the bracket and the stored results."""
        if not is_real_participant(old_name) or old_name not in self._known_names():
            return False, f'Participant "{old_name}" not found.'
        new_name = (new_name or '').strip()
        if not new_name:
            return False, 'New name cannot be empty.'
        if old_name == new_name:
            return True, 'Names are the same, no update performed.'
        if not is_real_participant(new_name):
            return False, f'"{new_name}" is reserved and cannot be a participant name.'

        existing = {name.lower() for name in self._known_names()}
        if new_name.lower() in existing and old_name.lower() != new_name.lower():
            return False, f'Participant name "{new_name}" already exists.'

        for match in self.bracket.matches():
            for i, participant in enumerate(match.participants):
                if participant == old_name:
                    match.participants[i] = new_name
            if match.winner == old_name:
                match.winner = new_name

        for result in self.match_results.values():
            if result.player1 == old_name:
                result.player1 = new_name
            if result.player2 == old_name:
                result.player2 = new_name
            if result.winner == old_name:
                result.winner = new_name
            for round_result in result.rounds:
                if round_result.winner == old_name:
                    round_result.winner = new_name
            for entry in result.history:
                if entry.previous_winner == old_name:
                    entry.previous_winner = new_name
                if entry.new_winner == old_name:
                    entry.new_winner = new_name

        return True, f'Participant "{old_name}" updated to "{new_name}".'

    def remove_participant(self, name: str) -> Tuple[bool, str]:
        """
        Take a participant out before play starts.

        The bracket is redrawn when the remaining field fits a smaller one;
        otherwise the participant's slots become byes and any first round
        opponent advances on the spot.
        """
        can_modify, reason = self.can_modify_participants()
        if not can_modify:
            return False, reason
        if self.bracket is None:
            return False, 'No tournament bracket found.'

        names = self._known_names()
        if name not in names:
            return False, f'Participant "{name}" not found.'
        remaining = [n for n in names if n != name]
        if not remaining:
            return False, 'Cannot delete the last participant.'

        current_size = self.bracket.bracket_size
        new_size = next_pow2(len(remaining))
        if len(remaining) > 1 and new_size < current_size:
            self._regenerate(remaining)
            return True, (f'Participant "{name}" removed. Bracket optimized from '
                          f'{current_size} to {new_size} slots.')

        for match in self.bracket.matches():
            match.participants = [BYE if p == name else p for p in match.participants]
            if match.winner == name:
                match.winner = None
        self.match_results = {
            match_id: result for match_id, result in self.match_results.items()
            if name not in (result.player1, result.player2)
        }
        self.participant_count = max(0, self.participant_count - 1)

        for match in self.bracket[0]:
            opponents = [p for p in match.participants if p != BYE]
            if match.winner is None and len(opponents) == 1 and is_real_participant(opponents[0]):
                record_winner(self.bracket, match.id, opponents[0])

        return True, f'Participant "{name}" removed from tournament.'

    def add_participant(self, name: str) -> Tuple[bool, str]:
        """
        Add a participant before play starts.

        Takes the first open or bye slot of the first round; when none is
        left the bracket is redrawn one size up.
        """
        can_modify, reason = self.can_modify_participants()
        if not can_modify:
            return False, reason
        if self.bracket is None:
            return False, 'No tournament bracket found.'
        name = (name or '').strip()
        if not name:
            return False, 'Participant name cannot be empty.'
        if not is_real_participant(name):
            return False, f'"{name}" is reserved and cannot be a participant name.'

        names = self._known_names()
        if name.lower() in {n.lower() for n in names}:
            return False, f'Participant "{name}" already exists.'

        for match in self.bracket[0]:
            for i, participant in enumerate(match.participants):
                if participant in (BYE, None):
                    if match.winner is not None:
                        self._clear_advancement(match)
                    match.participants[i] = name
                    if BYE in match.participants:
                        record_winner(self.bracket, match.id, name)
                    self.participant_count += 1
                    open_slots = sum(
                        1 for m in self.bracket[0] for p in m.participants if p in (BYE, None)
                    )
                    return True, (f'Participant "{name}" added to Round 1. '
                                  f'{open_slots} slots remaining in current bracket.')

        participants = names + [name]
        self._regenerate(participants)
        new_size = self.bracket.bracket_size
        return True, (f'Participant "{name}" added. Bracket expanded to {new_size} slots '
                      f'with {new_size - len(participants)} byes.')

    # Persistence

    def to_dict(self) -> Dict:
        return {
            'name': self.name,
            'seedType': self.seed_type,
            'roundsPerMatch': self.rounds_per_match,
            'created': self.created,
            'participantCount': self.participant_count,
            'bracket': self.bracket.to_list() if self.bracket else None,
            'matchResults': {k: v.to_dict() for k, v in self.match_results.items()},
            'champion': self.champion(),
        }

    @classmethod
    def from_dict(cls, data: Dict, rng=None) -> 'Tournament':
        tournament = cls(
            name=data.get('name', 'Tournament Draw Sheet'),
            seed_type=data.get('seedType', 'random'),
            rounds_per_match=data.get('roundsPerMatch', DEFAULT_ROUNDS_PER_MATCH),
            rng=rng,
        )
        tournament.created = data.get('created', tournament.created)
        tournament.participant_count = data.get('participantCount', 0)
        if data.get('bracket'):
            tournament.bracket = Bracket.from_list(data['bracket'])
        tournament.match_results = {
            k: MatchResult.from_dict(v) for k, v in (data.get('matchResults') or {}).items()
        }
        return tournament
