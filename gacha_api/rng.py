import random
from typing import Optional


def get_rng(seed: Optional[int] = None) -> random.Random:
    """Same seed always produces the same draw order."""
    return random.Random(seed)
