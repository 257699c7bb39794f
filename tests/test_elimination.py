"""
Unit tests for single elimination bracket generation.
"""
import pytest
import random
import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from brackets.elimination import (
    get_round_name,
    get_round_names,
    match_id,
    layout_pairs,
    build_bracket,
    create_bracket,
    SPECIAL_LAYOUTS,
)
from brackets.models import BYE
from brackets.seeding import next_pow2


def participants_of(round_matches):
    return [m.participants for m in round_matches]


class TestRoundNames:
    """Tests for round naming."""

    def test_get_round_name_final(self):
        """Test round name for 2 participants (Final)."""
        assert get_round_name(2) == "Final"

    def test_get_round_name_semifinal(self):
        """Test round name for 4 participants (Semifinal)."""
        assert get_round_name(4) == "Semifinal"

    def test_get_round_name_quarterfinal(self):
        assert get_round_name(8) == "Quarterfinal"

    def test_get_round_name_round_of_16(self):
        assert get_round_name(16) == "Round of 16"

    def test_round_names_for_bracket(self, letters):
        bracket = create_bracket(letters(12), 'as-entered')
        assert get_round_names(bracket) == ["Round of 16", "Quarterfinal", "Semifinal", "Final"]


class TestMatchIds:
    """Tests for match identity and wiring."""

    def test_match_id_format(self):
        assert match_id(0, 0) == "match-r1-1"
        assert match_id(2, 3) == "match-r3-4"

    def test_four_participant_wiring(self, letters):
        bracket = create_bracket(letters(4), 'as-entered')
        first_round = bracket[0]
        assert [m.id for m in first_round] == ["match-r1-1", "match-r1-2"]
        assert [m.next_match_id for m in first_round] == ["match-r2-1", "match-r2-1"]
        assert bracket[1][0].id == "match-r2-1"
        assert bracket[1][0].next_match_id is None

    def test_positions_are_indexes(self, letters):
        bracket = create_bracket(letters(13), 'as-entered')
        for round_matches in bracket:
            assert [m.position for m in round_matches] == list(range(len(round_matches)))

    @pytest.mark.parametrize("count", [2, 3, 5, 9, 13, 16, 23])
    def test_next_match_in_following_round(self, letters, count):
        bracket = create_bracket(letters(count), 'as-entered')
        for round_index, round_matches in enumerate(bracket.rounds[:-1]):
            next_ids = {m.id for m in bracket[round_index + 1]}
            for match in round_matches:
                assert match.next_match_id in next_ids
                assert match.next_match_id == match_id(round_index + 1, match.position // 2)
        assert all(m.next_match_id is None for m in bracket[-1])

    def test_every_match_indexed_by_id(self, letters):
        bracket = create_bracket(letters(10), 'as-entered')
        for match in bracket.matches():
            assert bracket.get_match(match.id) is match


class TestBracketShape:
    """Tests for round and match counts."""

    @pytest.mark.parametrize("count", range(2, 27))
    def test_first_round_size_and_byes(self, letters, count):
        bracket = create_bracket(letters(count), 'as-entered')
        first_round = bracket[0]
        assert len(first_round) == next_pow2(count) // 2
        byes = sum(m.participants.count(BYE) for m in first_round)
        assert byes == next_pow2(count) - count

    @pytest.mark.parametrize("count", range(2, 27))
    def test_round_sizes_halve(self, letters, count):
        bracket = create_bracket(letters(count), 'as-entered')
        size = next_pow2(count)
        for round_index, round_matches in enumerate(bracket):
            assert len(round_matches) == size // 2 ** (round_index + 1)
        assert len(bracket[-1]) == 1

    @pytest.mark.parametrize("count", [2, 4, 8, 16])
    def test_power_of_two_has_no_byes(self, letters, count):
        bracket = create_bracket(letters(count), 'as-entered')
        for match in bracket[0]:
            assert BYE not in match.participants
            assert None not in match.participants
            assert match.winner is None

    def test_thirty_two_has_no_byes(self):
        players = [f"Player {i}" for i in range(1, 33)]
        bracket = create_bracket(players, 'as-entered')
        assert len(bracket[0]) == 16
        assert all(BYE not in m.participants for m in bracket[0])

    def test_round_counts(self, letters):
        assert len(create_bracket(letters(2), 'as-entered')) == 1
        assert len(create_bracket(letters(3), 'as-entered')) == 2
        assert len(create_bracket(letters(5), 'as-entered')) == 3
        for count in range(9, 17):
            assert len(create_bracket(letters(count), 'as-entered')) == 4

    def test_two_participants_single_match(self):
        bracket = create_bracket(['A', 'B'], 'as-entered')
        assert len(bracket) == 1
        final = bracket[0][0]
        assert final.participants == ['A', 'B']
        assert final.next_match_id is None
        assert final.winner is None


class TestSpecialCases:
    """Tests for the hand-drawn fields of 5, 6 and 7."""

    def test_seven_participants(self, letters):
        bracket = create_bracket(letters(7), 'as-entered')
        assert participants_of(bracket[0]) == [
            ['A', BYE], ['B', 'G'], ['C', 'F'], ['D', 'E']
        ]
        assert bracket[0][0].winner == 'A'
        assert [m.winner for m in bracket[0][1:]] == [None, None, None]

    def test_seven_participants_bye_winner_seated(self, letters):
        bracket = create_bracket(letters(7), 'as-entered')
        assert bracket[1][0].participants == ['A', None]
        assert bracket[1][1].participants == [None, None]

    def test_six_participants(self, letters):
        bracket = create_bracket(letters(6), 'as-entered')
        assert participants_of(bracket[0]) == [
            ['A', BYE], ['B', 'E'], ['C', 'D'], ['F', BYE]
        ]
        assert bracket[0][0].winner == 'A'
        assert bracket[0][3].winner == 'F'
        assert participants_of(bracket[1]) == [['A', None], [None, 'F']]

    def test_five_participants(self, letters):
        bracket = create_bracket(letters(5), 'as-entered')
        assert participants_of(bracket[0]) == [
            ['A', BYE], ['B', 'C'], ['D', BYE], ['E', BYE]
        ]
        assert participants_of(bracket[1]) == [['A', None], ['D', 'E']]
        assert bracket[1][1].winner is None

    def test_three_rounds_for_special_cases(self, letters):
        for count in (5, 6, 7):
            assert len(create_bracket(letters(count), 'as-entered')) == 3

    def test_layouts_cover_eight_slots(self):
        for count, layout in SPECIAL_LAYOUTS.items():
            assert len(layout) == 8
            seeds = [s for s in layout if s is not None]
            assert sorted(seeds) == list(range(count))

    def test_layout_pairs(self):
        assert layout_pairs(['A', 'B', 'C', 'D', 'E'], SPECIAL_LAYOUTS[5]) == [
            ('A', BYE), ('B', 'C'), ('D', BYE), ('E', BYE)
        ]


class TestSeeding:
    """Tests for seeding modes in generated brackets."""

    def test_as_entered_is_deterministic(self, letters):
        first = create_bracket(letters(11), 'as-entered')
        second = create_bracket(letters(11), 'as-entered')
        assert first.to_list() == second.to_list()

    def test_ordered_matches_as_entered(self, letters):
        assert (create_bracket(letters(9), 'ordered').to_list()
                == create_bracket(letters(9), 'as-entered').to_list())

    def test_random_reproducible_with_seeded_rng(self, letters):
        first = create_bracket(letters(12), 'random', random.Random(7))
        second = create_bracket(letters(12), 'random', random.Random(7))
        assert first == second

    @pytest.mark.parametrize("count", [6, 7, 11, 12])
    def test_random_keeps_shape(self, letters, count):
        ordered = create_bracket(letters(count), 'as-entered')
        shuffled = create_bracket(letters(count), 'random', random.Random(21))
        assert [m.has_bye() for m in ordered[0]] == [m.has_bye() for m in shuffled[0]]
        assert len(ordered) == len(shuffled)
        placed = sorted(p for m in shuffled[0] for p in m.participants if p != BYE)
        assert placed == letters(count)


class TestBuildBracket:
    """Tests for laying out rounds from first round pairs."""

    def test_bye_in_first_slot(self):
        bracket = build_bracket([(BYE, 'A'), ('B', 'C')])
        assert bracket[0][0].winner == 'A'
        assert bracket[1][0].participants == ['A', None]

    def test_empty_bye_pair_has_no_winner(self):
        bracket = build_bracket([('A', BYE), (None, BYE)])
        assert bracket[0][0].winner == 'A'
        assert bracket[0][1].winner is None
        assert bracket[1][0].participants == ['A', None]

    def test_single_participant_gets_walkover(self):
        bracket = create_bracket(['A'], 'as-entered')
        assert len(bracket) == 1
        assert bracket[0][0].participants == ['A', BYE]
        assert bracket[0][0].winner == 'A'
