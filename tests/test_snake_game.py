import random

from snake_q_learning.config import Config
from snake_q_learning.snake_game import DOWN, LEFT, RIGHT, UP, Outcome, SnakeGame, manhattan


def test_reset_places_snake_in_centre_facing_right():
    game = SnakeGame(Config(grid_width=10, grid_height=10, initial_length=3), random.Random(1))
    assert game.snake == [(5, 5), (5, 4), (5, 3)]
    assert game.direction == RIGHT
    assert game.food is not None and game.food not in game.snake
    assert game.score == 0 and game.steps == 0


def test_is_valid_position(make_game):
    game = make_game([(5, 5)])
    assert game.is_valid_position((0, 0))
    assert game.is_valid_position((9, 9))
    assert not game.is_valid_position((-1, 0))
    assert not game.is_valid_position((0, 10))
    assert not game.is_valid_position((10, 3))


def test_is_occupied_by_snake_head_switch(make_game):
    game = make_game([(5, 5), (5, 4)])
    assert game.is_occupied_by_snake((5, 5))
    assert not game.is_occupied_by_snake((5, 5), include_head=False)
    assert game.is_occupied_by_snake((5, 4), include_head=False)
    assert not game.is_occupied_by_snake((0, 0))


def test_advance_moved_keeps_length(make_game):
    game = make_game([(5, 5), (5, 4)], food=(0, 0))
    assert game.advance(RIGHT) is Outcome.MOVED
    assert game.snake == [(5, 6), (5, 5)]
    assert game.steps == 1
    assert game.steps_since_food == 1


def test_advance_fed_grows_and_respawns_food(make_game):
    game = make_game([(5, 5), (5, 4)], food=(5, 6))
    game.steps_since_food = 7
    assert game.advance(RIGHT) is Outcome.FED
    assert game.snake == [(5, 6), (5, 5), (5, 4)]
    assert game.score == 1
    assert game.lifetime_score == 1
    assert game.steps_since_food == 0
    assert game.food is not None and game.food not in game.snake


def test_advance_into_wall_is_blocked_and_leaves_board(make_game):
    game = make_game([(0, 3), (1, 3)], food=(5, 5), direction=UP)
    assert game.advance(UP) is Outcome.BLOCKED
    assert game.snake == [(0, 3), (1, 3)]
    assert game.food == (5, 5)
    assert game.steps == 0


def test_advance_into_body_is_blocked(make_game):
    snake = [(5, 5), (5, 4), (6, 4), (6, 5), (6, 6), (5, 6), (4, 6)]
    game = make_game(snake, food=(0, 0))
    assert game.advance(RIGHT) is Outcome.BLOCKED
    assert game.snake == snake


def test_tail_counts_as_blocked(make_game):
    game = make_game([(5, 5), (5, 6), (4, 6), (4, 5)], food=(0, 0), direction=LEFT)
    assert game.is_blocked((4, 5))
    assert game.advance(UP) is Outcome.BLOCKED


def test_free_cells_is_repeatable_and_excludes_snake(make_game):
    game = make_game([(5, 5), (5, 4), (5, 3)])
    first = list(game.free_cells())
    second = list(game.free_cells())
    assert first == second
    assert len(first) == 100 - 3
    assert not set(first) & set(game.snake)


def test_spawn_food_takes_last_free_cell():
    game = SnakeGame(Config(grid_width=2, grid_height=2), random.Random(0))
    game.snake = [(0, 0), (0, 1), (1, 1)]
    game.spawn_food()
    assert game.food == (1, 0)


def test_spawn_food_on_full_board_leaves_food_unset():
    game = SnakeGame(Config(grid_width=2, grid_height=2), random.Random(0))
    game.snake = [(0, 0), (0, 1), (1, 1), (1, 0)]
    game.spawn_food()
    assert game.food is None


def test_spawned_food_never_on_snake(make_game):
    game = make_game([(5, 5), (5, 4), (5, 3), (4, 3), (3, 3)], seed=3)
    for _ in range(200):
        game.spawn_food()
        assert game.food not in game.snake


def test_reachable_area_splits_board():
    game = SnakeGame(Config(grid_width=5, grid_height=5), random.Random(0))
    game.snake = [(0, 2), (1, 2), (2, 2), (3, 2), (4, 2)]
    assert game.reachable_area((0, 0)) == 10
    assert game.reachable_area((4, 4)) == 10
    assert game.reachable_area((2, 2)) == 0
    assert game.reachable_area((-1, 0)) == 0


def test_free_regions_match_reachable_area():
    game = SnakeGame(Config(grid_width=6, grid_height=6), random.Random(0))
    game.snake = [(0, 2), (1, 2), (2, 2), (2, 3), (2, 4), (2, 5)]
    labels, sizes = game.free_regions()
    for cell in game.free_cells():
        assert sizes[labels[cell]] == game.reachable_area(cell)
    for segment in game.snake:
        assert labels[segment] == -1
    assert sorted(sizes) == [6, 24]


def test_head_area_counts_every_touching_region():
    game = SnakeGame(Config(grid_width=5, grid_height=5), random.Random(0))
    game.snake = [(0, 2), (1, 2), (2, 2), (3, 2), (4, 2)]
    regions = game.free_regions()
    # head at (0, 2) touches both halves
    assert game.head_area(regions) == 20


def test_random_walk_keeps_snake_consistent():
    rng = random.Random(42)
    game = SnakeGame(Config(grid_width=8, grid_height=8), rng)
    for _ in range(2000):
        before = len(game.snake)
        outcome = game.advance(rng.choice([RIGHT, LEFT, DOWN, UP]))
        if outcome is Outcome.BLOCKED:
            game.reset()
            continue
        assert len(set(game.snake)) == len(game.snake)
        assert all(game.is_valid_position(p) for p in game.snake)
        assert game.food not in game.snake
        expected = before + 1 if outcome is Outcome.FED else before
        assert len(game.snake) == expected
        if len(game.snake) > 1:
            assert manhattan(game.snake[0], game.snake[1]) == 1
