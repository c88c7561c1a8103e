import math


def calculate_score(elapsed_ms: float, time_limit_ms: float, ceiling: int = 1000, floor: int = 100) -> int:
    """Points for a correct answer given after ``elapsed_ms``.

    Decays linearly from ``ceiling`` at 0 ms to ``floor`` at the time limit and
    never drops below ``floor``, even for answers arriving after the limit.
    Rounds half up rather than to even.
    """
    raw = ceiling - (elapsed_ms / time_limit_ms) * (ceiling - floor)
    return max(floor, math.floor(raw + 0.5))
