BYE = "(bye)"
# Recorded as a match winner when both participants are disqualified.
NO_WINNER = "NO_WINNER"
# Written into the next match in place of a winner when nobody advances.
NO_PLAYER = "No player"


class Match:
    def __init__(self, id, participants=None, winner=None, next_match_id=None, position=0):
        self.id = id
        self.participants = list(participants) if participants else [None, None]
        self.winner = winner
        self.next_match_id = next_match_id
        self.position = position

    def has_bye(self):
        return BYE in self.participants

    def to_dict(self):
        return {
            'id': self.id,
            'participants': list(self.participants),
            'winner': self.winner,
            'nextMatchId': self.next_match_id,
            'position': self.position,
        }

    @classmethod
    def from_dict(cls, data):
        return cls(
            id=data['id'],
            participants=data.get('participants') or [None, None],
            winner=data.get('winner'),
            next_match_id=data.get('nextMatchId'),
            position=data.get('position', 0),
        )

    def __eq__(self, other):
        if not isinstance(other, Match):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def __repr__(self):
        return (f"Match(id={self.id}, participants={self.participants}, winner={self.winner}, "
                f"next_match_id={self.next_match_id}, position={self.position})")


class Bracket:
    """Ordered rounds of matches, indexed by match id."""

    def __init__(self, rounds=None):
        self.rounds = []
        self._matches = {}
        for round_matches in rounds or []:
            self.add_round(round_matches)

    def add_round(self, matches):
        self.rounds.append(list(matches))
        for match in matches:
            self._matches[match.id] = match

    def get_match(self, match_id):
        return self._matches.get(match_id)

    def matches(self):
        for round_matches in self.rounds:
            yield from round_matches

    @property
    def final(self):
        if not self.rounds or not self.rounds[-1]:
            return None
        return self.rounds[-1][0]

    @property
    def bracket_size(self):
        if not self.rounds:
            return 0
        return len(self.rounds[0]) * 2

    def __len__(self):
        return len(self.rounds)

    def __getitem__(self, index):
        return self.rounds[index]

    def __iter__(self):
        return iter(self.rounds)

    def __eq__(self, other):
        if not isinstance(other, Bracket):
            return NotImplemented
        return self.to_list() == other.to_list()

    def to_list(self):
        return [[match.to_dict() for match in round_matches] for round_matches in self.rounds]

    @classmethod
    def from_list(cls, data):
        return cls([[Match.from_dict(m) for m in round_matches] for round_matches in data or []])

    def __repr__(self):
        return f"Bracket(rounds={len(self.rounds)}, bracket_size={self.bracket_size})"
