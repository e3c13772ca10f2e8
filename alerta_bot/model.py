from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, List, Optional

# Um jogo conta como "poucos golos" se home + away < GOAL_LIMIT
GOAL_LIMIT = 2


@dataclass
class Match:
    competition: str
    date: datetime
    home_goals: Optional[int] = None
    away_goals: Optional[int] = None


def total_goals(match: Match) -> int:
    # Golos em falta (jogo adiado/cancelado) contam como 0
    return (match.home_goals or 0) + (match.away_goals or 0)


def is_low_scoring(match: Match, goal_limit: int = GOAL_LIMIT) -> bool:
    return total_goals(match) < goal_limit


def has_low_scoring_sequence(
    matches: Iterable[Match],
    sequence_length: int,
    goal_limit: int = GOAL_LIMIT,
) -> bool:
    """
    Verifica se existe uma sequência contígua de pelo menos `sequence_length`
    jogos com menos de `goal_limit` golos.

    Os jogos devem vir ordenados do mais recente para o mais antigo.
    Pára assim que a contagem atinge o limiar.
    """
    if sequence_length < 1:
        raise ValueError(f"sequence_length must be >= 1, got {sequence_length}")

    count = 0
    for match in matches:
        if is_low_scoring(match, goal_limit):
            count += 1
            if count >= sequence_length:
                return True
        else:
            count = 0
    return False


def belongs_to(match: Match, competition: str) -> bool:
    return competition.lower() in match.competition.lower()


def matches_for_competition(matches: Iterable[Match], competition: str) -> List[Match]:
    """Jogos da competição, do mais recente para o mais antigo."""
    selected = [m for m in matches if belongs_to(m, competition)]
    selected.sort(key=lambda m: m.date, reverse=True)
    return selected
