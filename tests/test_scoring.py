"""Tests for skirmish.scoring."""

from skirmish.card import Environment, PlayerCard
from skirmish.enums import CardType, PlayerColor
from skirmish.player import Player
from skirmish.scoring import ScoreResult, ScoringResolver, determine_winner, standings
from skirmish.state import EnvironmentState, GameState


def score(pid, power, cards):
    return ScoreResult(player_id=pid, player_name=pid.upper(), power=power, cards_in_play=cards)


class TestDetermineWinner:
    def test_highest_power_wins(self):
        scores = [score("p1", 5, 1), score("p2", 7, 1)]
        winner = determine_winner(scores)
        assert winner.player_id == "p2"
        assert winner.is_winner
        assert not scores[0].is_winner

    def test_power_tie_broken_by_card_count(self):
        winner = determine_winner([score("p1", 5, 3), score("p2", 5, 2)])
        assert winner.player_id == "p1"

    def test_full_tie_has_no_winner(self):
        scores = [score("p1", 5, 2), score("p2", 5, 2), score("p3", 1, 1)]
        assert determine_winner(scores) is None
        assert not any(s.is_winner for s in scores)

    def test_no_scores(self):
        assert determine_winner([]) is None


class TestScoringResolver:
    def test_scores_every_seated_player(self):
        state = GameState(id="g1", players=[
            Player(id="p1", name="A", color=PlayerColor.BLACK),
            Player(id="p2", name="B", color=PlayerColor.BROWN),
        ])
        env = EnvironmentState(environment=Environment(id="e1", title="Outskirts"))
        env.cards_in_play["p1"] = [PlayerCard(id="c1", title="Heap", type=CardType.COLOSSUS, power=4)]
        scores, winner = ScoringResolver().resolve(state, env)

        assert [s.player_id for s in scores] == ["p1", "p2"]
        assert [s.power for s in scores] == [4, 0]
        assert winner.player_id == "p1"
        assert scores[0].to_dict()["is_winner"] is True

    def test_standings_order(self):
        state = GameState(id="g1", players=[
            Player(id="p1", name="A", color=PlayerColor.BLACK, skirmishes_won=1),
            Player(id="p2", name="B", color=PlayerColor.BROWN, skirmishes_won=2),
            Player(id="p3", name="C", color=PlayerColor.TAN, skirmishes_won=1),
        ])
        assert [row["player_id"] for row in standings(state)] == ["p2", "p1", "p3"]
