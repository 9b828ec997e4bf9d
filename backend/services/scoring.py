"""
Ranking score: maps one player's aggregate statistics to a single number.

Formula:
    score = win_rate * 0.4 + average_score * 0.3
            + tournaments_won * 15 + matches_won * 0.3

- Win rate dominates: it is a 0-100 percentage, so it contributes up to 40.
- Tournament wins are a large discrete bonus (15 each).
- Average score and match wins add finer-grained separation.

The weights are a fixed policy shared with every client that displays or
compares ranking scores; changing them changes every leaderboard.
"""
from dataclasses import dataclass

WIN_RATE_WEIGHT = 0.4
AVERAGE_SCORE_WEIGHT = 0.3
TOURNAMENT_WIN_BONUS = 15
MATCH_WIN_WEIGHT = 0.3


@dataclass(frozen=True)
class StatisticsSnapshot:
    """Aggregate counters for one player at one point in time."""
    player_id: str
    matches_played: int = 0
    matches_won: int = 0
    matches_lost: int = 0
    total_points: float = 0.0
    average_score: float = 0.0
    tournaments_played: int = 0
    tournaments_won: int = 0
    win_rate: float = 0.0
    # True when synthesised because the player has no statistics row.
    placeholder: bool = False

    @classmethod
    def empty(cls, player_id):
        return cls(player_id=player_id, placeholder=True)

    @classmethod
    def from_model(cls, row):
        return cls(
            player_id=row.player_id,
            matches_played=row.matches_played or 0,
            matches_won=row.matches_won or 0,
            matches_lost=row.matches_lost or 0,
            total_points=row.total_points or 0.0,
            average_score=row.average_score or 0.0,
            tournaments_played=row.tournaments_played or 0,
            tournaments_won=row.tournaments_won or 0,
            win_rate=row.win_rate or 0.0,
        )

    def to_dict(self):
        return {
            'player_id': self.player_id,
            'matches_played': self.matches_played,
            'matches_won': self.matches_won,
            'matches_lost': self.matches_lost,
            'total_points': self.total_points,
            'average_score': self.average_score,
            'tournaments_played': self.tournaments_played,
            'tournaments_won': self.tournaments_won,
            'win_rate': self.win_rate,
            'placeholder': self.placeholder,
        }


def ranking_score(stats):
    """Score a statistics snapshot. Zero-match players score from zeros."""
    return (
        stats.win_rate * WIN_RATE_WEIGHT
        + stats.average_score * AVERAGE_SCORE_WEIGHT
        + stats.tournaments_won * TOURNAMENT_WIN_BONUS
        + stats.matches_won * MATCH_WIN_WEIGHT
    )
