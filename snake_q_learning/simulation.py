import logging
import random
from collections import deque
from typing import Callable, NamedTuple, Optional, Tuple

from .agent import NO_ESCAPE, QLearningAgent, Regions, region_area, reward
from .config import Config, DEFAULT_CONFIG
from .qlearning import average_q_value
from .snake_game import DIRECTIONS, Outcome, Position, SnakeGame

logger = logging.getLogger(__name__)

# why an episode ended
COLLISION = "collision"
NO_ESCAPE_REASON = "no_escape"
STARVATION = "starvation"
TRAP = "trap"

RECENT_SCORES = 200


class Snapshot(NamedTuple):
    head: Position
    snake: Tuple[Position, ...]
    food: Optional[Position]
    score: int
    lifetime_score: int
    episode: int
    epsilon: float
    steps: int


class Telemetry(NamedTuple):
    episode: int
    score: int
    lifetime_score: int
    average_q: float
    epsilon: float


class TickResult(NamedTuple):
    terminal: bool
    outcome: Outcome
    action: int
    reward: float
    reason: Optional[str]
    snapshot: Snapshot


def log_telemetry(t: Telemetry):
    logger.info(
        "Episode %d: score=%d lifetime=%d avg_q=%.4f epsilon=%.4f",
        t.episode, t.score, t.lifetime_score, t.average_q, t.epsilon,
    )


class Simulation:
    """One snake, one learner, stepped one tick at a time by the caller.

    A terminal tick does the episode bookkeeping (episode count, epsilon
    decay, telemetry) right away but leaves the final board in place; the
    board is reset at the start of the following tick.
    """

    def __init__(
            self,
            config: Config = DEFAULT_CONFIG,
            rng: Optional[random.Random] = None,
            seed: Optional[int] = None,
            telemetry_sink: Optional[Callable[[Telemetry], None]] = log_telemetry,
            ):
        self.config = config.validate()
        self.rng = rng if rng is not None else random.Random(seed)
        self.game = SnakeGame(config, self.rng)
        self.agent = QLearningAgent(config, self.rng)
        self.telemetry_sink = telemetry_sink
        self.recent: deque = deque(maxlen=config.visit_history)
        self.recent_scores: deque = deque(maxlen=RECENT_SCORES)
        self.pending_reset = False
        self._regions: Optional[Regions] = None

    @property
    def episodes(self) -> int:
        return self.agent.episodes

    def reset_episode(self):
        self.game.reset()
        self.recent.clear()
        self._regions = None
        self.pending_reset = False

    def regions(self) -> Regions:
        # one labelling per board state, shared by policy, reward and trap check
        if self._regions is None:
            self._regions = self.game.free_regions()
        return self._regions

    def tick(self) -> TickResult:
        if self.pending_reset:
            self.reset_episode()

        game, agent, config = self.game, self.agent, self.config
        regions = self.regions()
        state = agent.state_index(game)
        action = agent.act(game, regions)

        if action == NO_ESCAPE:
            # nowhere to go counts as a collision, there is no action to learn from
            self._end_episode(NO_ESCAPE_REASON)
            return TickResult(True, Outcome.BLOCKED, action, config.collision_reward, NO_ESCAPE_REASON, self.snapshot())

        prev_pos = game.head
        dr, dc = DIRECTIONS[action]
        new_pos = (prev_pos[0] + dr, prev_pos[1] + dc)
        crashed = game.is_blocked(new_pos)
        got_food = not crashed and new_pos == game.food
        area = 0 if crashed else region_area(game, regions, new_pos)
        r = reward(game, prev_pos, new_pos, got_food, crashed, config, area, self.recent)

        outcome = game.advance(action)
        self._regions = None

        reason = None
        if outcome is Outcome.BLOCKED:
            reason = COLLISION
        else:
            self.recent.append(new_pos)
            if game.head_area(self.regions()) < config.trap_terminal_area:
                reason = TRAP
            elif game.steps_since_food > config.starvation_steps:
                reason = STARVATION

        # collision and trap are dead ends: future value 0. starvation is a time limit and still bootstraps
        agent.learn(state, action, r, agent.state_index(game), terminal=reason in (COLLISION, TRAP))

        if reason is not None:
            self._end_episode(reason)
        return TickResult(reason is not None, outcome, action, r, reason, self.snapshot())

    def run_episode(self, max_ticks: Optional[int] = None) -> TickResult:
        ticks = 0
        while True:
            result = self.tick()
            ticks += 1
            if result.terminal or (max_ticks is not None and ticks >= max_ticks):
                return result

    def _end_episode(self, reason: str):
        game = self.game
        self.recent_scores.append(game.score)
        self.agent.end_episode()
        self.pending_reset = True
        logger.debug(
            "episode %d ended (%s) score=%d length=%d steps=%d",
            self.agent.episodes, reason, game.score, len(game.snake), game.steps,
        )
        if self.telemetry_sink is not None and self.agent.episodes % self.config.telemetry_every == 0:
            self.telemetry_sink(self.telemetry())

    def telemetry(self) -> Telemetry:
        return Telemetry(
            episode=self.agent.episodes,
            score=self.game.score,
            lifetime_score=self.game.lifetime_score,
            average_q=average_q_value(self.agent.Q),
            epsilon=self.agent.epsilon,
        )

    def snapshot(self) -> Snapshot:
        game = self.game
        return Snapshot(
            head=game.head,
            snake=tuple(game.snake),
            food=game.food,
            score=game.score,
            lifetime_score=game.lifetime_score,
            episode=self.agent.episodes,
            epsilon=self.agent.epsilon,
            steps=game.steps,
        )
