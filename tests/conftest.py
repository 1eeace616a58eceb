import random

import pytest

from snake_q_learning.config import Config
from snake_q_learning.snake_game import RIGHT, SnakeGame


class NeverExplore(random.Random):
    """Random source whose coin flips always land on exploit."""

    def random(self):
        return 0.99


def place(game, snake, food=None, direction=RIGHT):
    game.snake = list(snake)
    game.food = food
    game.direction = direction
    return game


@pytest.fixture
def small_config():
    return Config(grid_width=10, grid_height=10)


@pytest.fixture
def make_game(small_config):
    def _make(snake, food=None, direction=RIGHT, config=None, seed=0):
        game = SnakeGame(config or small_config, random.Random(seed))
        return place(game, snake, food, direction)
    return _make
