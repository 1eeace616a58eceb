import logging
import random
from typing import Iterable, List, NamedTuple, Optional, Tuple

import numpy as np

from .config import Config
from .qlearning import N_ACTIONS, initialize_q_table, update_q_value
from .snake_game import OPPOSITE, Position, SnakeGame, manhattan

logger = logging.getLogger(__name__)

NO_ESCAPE = -1
SENTINEL_STATE = 0

Regions = Tuple[np.ndarray, List[int]]

# radices of the packed state, position zone first
N_DIRECTIONS = 4
N_FOOD_DIRECTIONS = 9
N_DANGER_MASKS = 1 << N_ACTIONS
N_FEATURE_BITS = 3


class StateKey(NamedTuple):
    zone: int       # coarse head position, row-major over position_buckets^2
    direction: int  # current heading, 0-3
    food_dir: int   # (sign(drow) + 1) * 3 + (sign(dcol) + 1), 0-8
    danger: int     # bit a set when the neighbour in action a is blocked
    features: int   # near_wall | in_corner << 1 | long << 2


def table_size(config: Config) -> int:
    # +1 for the sentinel row
    return 1 + config.position_buckets ** 2 * N_DIRECTIONS * N_FOOD_DIRECTIONS * N_DANGER_MASKS * (1 << N_FEATURE_BITS)


def pack_state(key: StateKey, config: Config) -> int:
    index = key.zone
    index = index * N_DIRECTIONS + key.direction
    index = index * N_FOOD_DIRECTIONS + key.food_dir
    index = index * N_DANGER_MASKS + key.danger
    index = index * (1 << N_FEATURE_BITS) + key.features
    index += 1
    size = table_size(config)
    if not 0 < index < size:
        logger.warning("state %s packs to %d, outside table of %d", key, index, size)
        return SENTINEL_STATE
    return index


def _sign(x: int) -> int:
    return (x > 0) - (x < 0)


def state_key(game: SnakeGame, config: Config) -> Optional[StateKey]:
    head = game.head
    if not game.is_valid_position(head):
        return None
    row, col = head
    h, w = game.height, game.width
    buckets = config.position_buckets
    zone = (row * buckets // h) * buckets + (col * buckets // w)

    if game.food is None:
        food_dir = 4
    else:
        food_dir = (_sign(game.food[0] - row) + 1) * 3 + (_sign(game.food[1] - col) + 1)

    danger = 0
    for action, cell in enumerate(game.neighbours(head)):
        if game.is_blocked(cell):
            danger |= 1 << action

    on_row_edge = row == 0 or row == h - 1
    on_col_edge = col == 0 or col == w - 1
    near_wall = on_row_edge or on_col_edge
    in_corner = on_row_edge and on_col_edge
    is_long = len(game.snake) >= config.long_snake_threshold
    features = int(near_wall) | int(in_corner) << 1 | int(is_long) << 2

    return StateKey(zone, game.direction, food_dir, danger, features)


def state_index(game: SnakeGame, config: Config) -> int:
    key = state_key(game, config)
    if key is None:
        return SENTINEL_STATE
    return pack_state(key, config)


def region_area(game: SnakeGame, regions: Regions, p: Position) -> int:
    labels, sizes = regions
    if not game.is_valid_position(p) or labels[p] == -1:
        return 0
    return sizes[labels[p]]


def candidate_actions(game: SnakeGame, config: Config, regions: Optional[Regions] = None) -> List[int]:
    """Actions worth considering this tick, in action order.

    Empty only when no neighbouring cell of the head is free.
    """
    head = game.head
    cells = game.neighbours(head)
    safe = [a for a in range(N_ACTIONS) if not game.is_blocked(cells[a])]
    if not safe:
        return []
    if not config.filter_unsafe:
        return list(range(N_ACTIONS))
    if config.trap_filter:
        if regions is None:
            regions = game.free_regions()
        needed = config.trap_area_ratio * len(game.snake)
        roomy = [a for a in safe if region_area(game, regions, cells[a]) >= needed]
        if roomy:
            return roomy
    return safe


def choose_action(
        game: SnakeGame,
        Q: np.ndarray,
        epsilon: float,
        config: Config,
        rng: random.Random,
        regions: Optional[Regions] = None,
        ) -> int:
    candidates = candidate_actions(game, config, regions)
    if not candidates:
        logger.debug("no escape from %s", game.head)
        return NO_ESCAPE

    if rng.random() < epsilon:
        reverse = OPPOSITE[game.direction]
        if len(candidates) > 1 and reverse in candidates:
            candidates = [a for a in candidates if a != reverse]
        return candidates[rng.randrange(len(candidates))]

    state = state_index(game, config)
    row = Q[state] if 0 <= state < Q.shape[0] else Q[SENTINEL_STATE]
    # first maximum wins ties
    best = candidates[0]
    for a in candidates[1:]:
        if row[a] > row[best]:
            best = a
    return best


def reward(
        game: SnakeGame,
        prev_pos: Position,
        new_pos: Position,
        got_food: bool,
        crashed: bool,
        config: Config,
        area: Optional[int] = None,
        recent: Iterable[Position] = (),
        ) -> float:
    """Shaped reward for moving the head from prev_pos to new_pos.

    Evaluated against the board before the move is committed.
    """
    if crashed:
        return config.collision_reward

    total = config.step_reward
    length = len(game.snake)

    if got_food:
        total += config.food_reward * (1 + config.food_length_scale * (length - 1))

    if game.food is not None:
        total += config.distance_reward * (manhattan(prev_pos, game.food) - manhattan(new_pos, game.food))

    # the current head becomes the neck, the tail leaves unless we grow
    body = game.snake[1:] if got_food else game.snake[1:-1]
    near = sum(1 for segment in body if manhattan(segment, new_pos) <= config.proximity_radius)
    total += config.proximity_penalty * near

    if new_pos not in recent:
        total += config.exploration_bonus

    if area is None:
        area = game.reachable_area(new_pos)
    if area < config.trap_area_ratio * length:
        total += config.trap_penalty

    return total


class QLearningAgent:
    """Owns the value table and the exploration/learning-rate schedule."""

    def __init__(self, config: Config, rng: Optional[random.Random] = None):
        self.config = config
        self.rng = rng if rng is not None else random.Random()
        self.Q = initialize_q_table(table_size(config), config.initial_q)
        self.epsilon = config.epsilon
        self.alpha = config.alpha
        self.episodes = 0

    def state_index(self, game: SnakeGame) -> int:
        return state_index(game, self.config)

    def act(self, game: SnakeGame, regions: Optional[Regions] = None) -> int:
        return choose_action(game, self.Q, self.epsilon, self.config, self.rng, regions)

    def learn(self, state: int, action: int, reward: float, next_state: int, terminal: bool = False):
        return update_q_value(self.Q, state, action, reward, next_state, self.alpha, self.config.gamma, terminal)

    def end_episode(self):
        config = self.config
        self.episodes += 1
        self.epsilon = max(config.epsilon_min, self.epsilon * config.epsilon_decay)
        if config.alpha_decay < 1.0:
            floor = min(config.alpha, config.alpha_min)
            self.alpha = max(floor, config.alpha * config.alpha_decay ** self.episodes)

