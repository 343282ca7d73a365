"""Seed handling for synthetic sessions.

Without an explicit seed one is drawn from OS entropy and logged, so
any generated session can be replayed with ``--seed``.
"""

from __future__ import annotations

import logging
import random
import secrets

log = logging.getLogger(__name__)


def init_seed(seed: int | None = None) -> random.Random:
    """Return a dedicated Random instance for the synthetic collector."""
    if seed is None:
        seed = secrets.randbits(32)
        log.info("No seed given, using %d (pass --seed %d to replay)", seed, seed)
    else:
        log.info("Random seed: %d", seed)
    return random.Random(seed)
