"""
Scored match results: per-round scores, win methods and winner history.
"""
import time
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from .errors import InvalidInputError
from .models import BYE, Match

DEFAULT_ROUNDS_PER_MATCH = 3

WIN_METHODS = {
    'PTF': 'Points to Finish',
    'PTG': 'Points Gap',
    'DSQ': 'Disqualification',
    'PUN': 'Punitive Declaration',
    'RSC': 'Referee Stops Contest',
    'WDR': 'Withdrawal',
    'DQB': 'Disqualification for Behavior',
    'DQBOTH': 'Both Disqualified',
}
DISQUALIFICATION_METHODS = {'DSQ', 'DQB', 'DQBOTH'}


@dataclass
class RoundResult:
    player1_score: Optional[int] = None
    player2_score: Optional[int] = None
    win_method: Optional[str] = None
    winner: Optional[str] = None
    reason: Optional[str] = None

    def __post_init__(self):
        if self.win_method is not None and self.win_method not in WIN_METHODS:
            raise InvalidInputError(f"Unknown win method: {self.win_method!r}")

    def is_started(self) -> bool:
        return (self.player1_score is not None or self.player2_score is not None
                or self.win_method is not None)

    def to_dict(self) -> Dict:
        return {
            'player1Score': self.player1_score,
            'player2Score': self.player2_score,
            'winMethod': self.win_method,
            'winner': self.winner,
            'reason': self.reason,
        }

    @classmethod
    def from_dict(cls, data: Dict) -> 'RoundResult':
        if not isinstance(data, dict):
            raise InvalidInputError("Each round must be an object")
        return cls(
            player1_score=data.get('player1Score'),
            player2_score=data.get('player2Score'),
            win_method=data.get('winMethod'),
            winner=data.get('winner'),
            reason=data.get('reason'),
        )


@dataclass
class HistoryEntry:
    timestamp: float
    action: str  # 'create' or 'update'
    previous_winner: Optional[str]
    new_winner: Optional[str]
    reason: Optional[str] = None

    def to_dict(self) -> Dict:
        return {
            'timestamp': self.timestamp,
            'action': self.action,
            'previousWinner': self.previous_winner,
            'newWinner': self.new_winner,
            'reason': self.reason,
        }

    @classmethod
    def from_dict(cls, data: Dict) -> 'HistoryEntry':
        return cls(
            timestamp=data.get('timestamp', 0.0),
            action=data.get('action', 'update'),
            previous_winner=data.get('previousWinner'),
            new_winner=data.get('newWinner'),
            reason=data.get('reason'),
        )


@dataclass
class MatchResult:
    match_id: str
    player1: Optional[str]
    player2: Optional[str]
    winner: Optional[str] = None
    completed: bool = False
    rounds: List[RoundResult] = field(default_factory=list)
    comment: str = ''
    history: List[HistoryEntry] = field(default_factory=list)

    def is_bye(self) -> bool:
        return BYE in (self.player1, self.player2)

    def to_dict(self) -> Dict:
        return {
            'matchId': self.match_id,
            'player1': self.player1,
            'player2': self.player2,
            'winner': self.winner,
            'completed': self.completed,
            'rounds': [r.to_dict() for r in self.rounds],
            'comment': self.comment,
            'history': [h.to_dict() for h in self.history],
        }

    @classmethod
    def from_dict(cls, data: Dict) -> 'MatchResult':
        if not isinstance(data, dict) or not data.get('matchId'):
            raise InvalidInputError("Match result needs a matchId")
        return cls(
            match_id=data['matchId'],
            player1=data.get('player1'),
            player2=data.get('player2'),
            winner=data.get('winner'),
            completed=bool(data.get('completed', False)),
            rounds=[RoundResult.from_dict(r) for r in data.get('rounds') or []],
            comment=data.get('comment') or '',
            history=[HistoryEntry.from_dict(h) for h in data.get('history') or []],
        )


def new_match_result(match: Match, rounds_per_match: int = DEFAULT_ROUNDS_PER_MATCH) -> MatchResult:
    """Empty, unscored result for a bracket match."""
    player1, player2 = match.participants
    return MatchResult(
        match_id=match.id,
        player1=player1,
        player2=player2,
        rounds=[RoundResult() for _ in range(rounds_per_match)],
    )


def resize_rounds(result: MatchResult, rounds_per_match: int) -> MatchResult:
    """Pad with empty rounds or drop trailing ones to match rounds_per_match."""
    if len(result.rounds) > rounds_per_match:
        result.rounds = result.rounds[:rounds_per_match]
    while len(result.rounds) < rounds_per_match:
        result.rounds.append(RoundResult())
    return result


def decisive_round(result: MatchResult) -> Optional[RoundResult]:
    """Last round that was decided by a win method."""
    for round_result in reversed(result.rounds):
        if round_result.win_method and round_result.winner:
            return round_result
    return None


def is_participant_disqualified(participant: str, result: Optional[MatchResult]) -> bool:
    if result is None or not result.completed:
        return False
    decisive = decisive_round(result)
    if decisive is None or decisive.win_method not in DISQUALIFICATION_METHODS:
        return False
    if decisive.win_method == 'DQBOTH':
        return True
    return participant != decisive.winner


def record_history(result: MatchResult, new_winner: Optional[str], reason: Optional[str] = None,
                   action: str = 'update') -> HistoryEntry:
    entry = HistoryEntry(
        timestamp=time.time(),
        action=action,
        previous_winner=result.winner,
        new_winner=new_winner,
        reason=reason,
    )
    result.history.append(entry)
    result.winner = new_winner
    return entry
