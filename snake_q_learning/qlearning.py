import logging
from typing import Optional

import numpy as np

N_ACTIONS = 4

logger = logging.getLogger(__name__)


def initialize_q_table(table_size: int, initial_q: float = 0.0) -> np.ndarray:
    return np.full((table_size, N_ACTIONS), initial_q, dtype=np.float64)


def in_table(Q: np.ndarray, state: int) -> bool:
    return 0 <= state < Q.shape[0]


def get_q_value(Q, state, action):
    if not in_table(Q, state):
        return 0.0
    return float(Q[state, action])


def best_q_value(Q: np.ndarray, state: int) -> float:
    if not in_table(Q, state):
        return 0.0
    return float(Q[state].max())


def update_q_value(
        Q: np.ndarray,
        state: int,
        action: int,
        reward: float,
        next_state: int,
        alpha: float,
        gamma: float,
        terminal: bool = False,
        ) -> Optional[float]:
    # out of range indices leave the table untouched
    if not in_table(Q, state) or not in_table(Q, next_state) or not 0 <= action < N_ACTIONS:
        logger.warning("skipping update for state=%s action=%s next_state=%s", state, action, next_state)
        return None
    old_value = Q[state, action]
    next_max = 0.0 if terminal else best_q_value(Q, next_state)
    new_value = (1 - alpha) * old_value + alpha * (reward + gamma * next_max)
    Q[state, action] = new_value
    return float(new_value)


def average_q_value(Q: np.ndarray) -> float:
    return float(Q.mean()) if Q.size else 0.0
