import logging
import random
from collections import deque
from enum import Enum
from typing import Iterator, List, Optional, Tuple

import numpy as np

from .config import Config, DEFAULT_CONFIG

logger = logging.getLogger(__name__)

Position = Tuple[int, int]  # (row, col)

# action id -> (drow, dcol)
DIRECTIONS = [
    (0, 1),   # right
    (0, -1),  # left
    (1, 0),   # down
    (-1, 0),  # up
]
RIGHT, LEFT, DOWN, UP = range(4)
OPPOSITE = {RIGHT: LEFT, LEFT: RIGHT, DOWN: UP, UP: DOWN}


class Outcome(Enum):
    BLOCKED = "blocked"
    FED = "fed"
    MOVED = "moved"


def manhattan(a: Position, b: Position) -> int:
    return abs(a[0] - b[0]) + abs(a[1] - b[1])


class SnakeGame:
    """Board state for one snake: body (head first), food and walls.

    Only `reset` and `advance` mutate the snake. Every random choice goes
    through the injected `rng` so a seeded run is reproducible.
    """

    def __init__(self, config: Config = DEFAULT_CONFIG, rng: Optional[random.Random] = None):
        self.config = config
        self.height = config.grid_height
        self.width = config.grid_width
        self.rng = rng if rng is not None else random.Random()
        self.lifetime_score = 0
        self.reset()

    def reset(self):
        head = (self.height // 2, self.width // 2)
        self.snake: List[Position] = [(head[0], head[1] - i) for i in range(self.config.initial_length)]
        self.direction = RIGHT
        self.food: Optional[Position] = None
        self.score = 0
        self.steps = 0
        self.steps_since_food = 0
        self.spawn_food()

    @property
    def head(self) -> Position:
        return self.snake[0]

    def is_valid_position(self, p: Position) -> bool:
        return 0 <= p[0] < self.height and 0 <= p[1] < self.width

    def is_occupied_by_snake(self, p: Position, include_head: bool = True) -> bool:
        body = self.snake if include_head else self.snake[1:]
        return p in body

    def is_blocked(self, p: Position) -> bool:
        # the tail still counts, collisions are tested before it moves
        return not self.is_valid_position(p) or self.is_occupied_by_snake(p)

    def neighbours(self, p: Position) -> List[Position]:
        return [(p[0] + dr, p[1] + dc) for dr, dc in DIRECTIONS]

    def free_cells(self) -> Iterator[Position]:
        occupied = set(self.snake)
        for row in range(self.height):
            for col in range(self.width):
                if (row, col) not in occupied:
                    yield (row, col)

    def spawn_food(self):
        cells = list(self.free_cells())
        if not cells:
            logger.debug("board is full, no food spawned")
            self.food = None
            return
        self.food = cells[self.rng.randrange(len(cells))]

    def advance(self, action: int) -> Outcome:
        dr, dc = DIRECTIONS[action]
        head = self.head
        new_head = (head[0] + dr, head[1] + dc)

        if self.is_blocked(new_head):
            return Outcome.BLOCKED

        self.direction = action
        self.snake.insert(0, new_head)
        self.steps += 1
        self.steps_since_food += 1

        if new_head == self.food:
            self.score += 1
            self.lifetime_score += 1
            self.steps_since_food = 0
            self.spawn_food()
            return Outcome.FED

        self.snake.pop()
        return Outcome.MOVED

    def reachable_area(self, start: Position) -> int:
        # BFS over free cells, start included
        if self.is_blocked(start):
            return 0
        occupied = set(self.snake)
        seen = {start}
        queue = deque([start])
        while queue:
            cell = queue.popleft()
            for n in self.neighbours(cell):
                if n not in seen and self.is_valid_position(n) and n not in occupied:
                    seen.add(n)
                    queue.append(n)
        return len(seen)

    def free_regions(self) -> Tuple[np.ndarray, List[int]]:
        """Label every connected free region in a single pass.

        Returns (labels, sizes): labels is an (H, W) int array holding the
        region id of each free cell and -1 for snake cells; sizes[i] is the
        cell count of region i.
        """
        labels = np.full((self.height, self.width), -1, dtype=np.int32)
        occupied = set(self.snake)
        sizes = []
        for row in range(self.height):
            for col in range(self.width):
                if labels[row, col] != -1 or (row, col) in occupied:
                    continue
                region = len(sizes)
                labels[row, col] = region
                queue = deque([(row, col)])
                count = 0
                while queue:
                    cell = queue.popleft()
                    count += 1
                    for n in self.neighbours(cell):
                        if self.is_valid_position(n) and labels[n] == -1 and n not in occupied:
                            labels[n] = region
                            queue.append(n)
                sizes.append(count)
        return labels, sizes

    def head_area(self, regions: Tuple[np.ndarray, List[int]]) -> int:
        """Free cells reachable from the head, through any free neighbour."""
        labels, sizes = regions
        seen = set()
        for n in self.neighbours(self.head):
            if self.is_valid_position(n) and labels[n] != -1:
                seen.add(int(labels[n]))
        return sum(sizes[r] for r in seen)

    def distance_to_food(self, p: Optional[Position] = None) -> Optional[int]:
        if self.food is None:
            return None
        return manhattan(p if p is not None else self.head, self.food)
