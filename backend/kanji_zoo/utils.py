import time
from typing import Iterable, List

from .models import LeaderboardEntry, Player


def now_ms() -> float:
    return time.monotonic() * 1000


def project_leaderboard(players: Iterable[Player]) -> List[LeaderboardEntry]:
    # sorted() is stable: equal scores keep join order
    ranked = sorted(players, key=lambda p: -p.score)
    entries: List[LeaderboardEntry] = []
    rank = 1
    for i, p in enumerate(ranked):
        if i > 0 and p.score < ranked[i - 1].score:
            rank = i + 1
        entries.append(LeaderboardEntry(rank=rank, id=p.id, name=p.name, score=p.score))
    return entries
