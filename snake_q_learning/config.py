from typing import NamedTuple

# Board
GRID_WIDTH = 20
GRID_HEIGHT = 20
INITIAL_LENGTH = 1

# Q-learning parameters
ALPHA = 0.1  # learning rate
ALPHA_DECAY = 1.0  # per episode, 1.0 keeps alpha fixed
ALPHA_MIN = 0.01
GAMMA = 0.9  # discount factor
INITIAL_Q = 0.0

# Exploration
EPSILON = 1.0  # exploration rate
EPSILON_MIN = 0.01
EPSILON_DECAY = 0.995  # per episode

# State abstraction
POSITION_BUCKETS = 3  # head zone resolution per axis
LONG_SNAKE_THRESHOLD = 10

# Rewards
COLLISION_REWARD = -100.0
FOOD_REWARD = 50.0
FOOD_LENGTH_SCALE = 0.0  # late-game food bonus per segment
DISTANCE_REWARD = 1.0  # per cell closer to food
PROXIMITY_PENALTY = -0.5  # per body segment near the head
PROXIMITY_RADIUS = 1
EXPLORATION_BONUS = 0.1
VISIT_HISTORY = 20
TRAP_PENALTY = -20.0
STEP_REWARD = -0.1

# Safety and episode limits
FILTER_UNSAFE = True
TRAP_FILTER = True
TRAP_AREA_RATIO = 1.0  # reachable cells per snake segment considered roomy
TRAP_TERMINAL_AREA = 2
STARVATION_STEPS = 400

TELEMETRY_EVERY = 100  # episodes


class Config(NamedTuple):
    grid_width: int = GRID_WIDTH
    grid_height: int = GRID_HEIGHT
    initial_length: int = INITIAL_LENGTH

    alpha: float = ALPHA
    alpha_decay: float = ALPHA_DECAY
    alpha_min: float = ALPHA_MIN
    gamma: float = GAMMA
    initial_q: float = INITIAL_Q

    epsilon: float = EPSILON
    epsilon_min: float = EPSILON_MIN
    epsilon_decay: float = EPSILON_DECAY

    position_buckets: int = POSITION_BUCKETS
    long_snake_threshold: int = LONG_SNAKE_THRESHOLD

    collision_reward: float = COLLISION_REWARD
    food_reward: float = FOOD_REWARD
    food_length_scale: float = FOOD_LENGTH_SCALE
    distance_reward: float = DISTANCE_REWARD
    proximity_penalty: float = PROXIMITY_PENALTY
    proximity_radius: int = PROXIMITY_RADIUS
    exploration_bonus: float = EXPLORATION_BONUS
    visit_history: int = VISIT_HISTORY
    trap_penalty: float = TRAP_PENALTY
    step_reward: float = STEP_REWARD

    filter_unsafe: bool = FILTER_UNSAFE
    trap_filter: bool = TRAP_FILTER
    trap_area_ratio: float = TRAP_AREA_RATIO
    trap_terminal_area: int = TRAP_TERMINAL_AREA
    starvation_steps: int = STARVATION_STEPS

    telemetry_every: int = TELEMETRY_EVERY

    def validate(self) -> "Config":
        if self.grid_width <= 0 or self.grid_height <= 0:
            raise ValueError(f"grid must be positive, got {self.grid_width}x{self.grid_height}")
        if not 1 <= self.initial_length <= self.grid_width // 2 + 1:
            raise ValueError(f"initial_length {self.initial_length} does not fit a {self.grid_width} wide grid")
        if not 0.0 <= self.epsilon_min <= self.epsilon <= 1.0:
            raise ValueError(f"need 0 <= epsilon_min <= epsilon <= 1, got {self.epsilon_min}, {self.epsilon}")
        if not 0.0 < self.epsilon_decay <= 1.0:
            raise ValueError(f"epsilon_decay must be in (0, 1], got {self.epsilon_decay}")
        if not 0.0 < self.alpha <= 1.0 or not 0.0 < self.alpha_decay <= 1.0:
            raise ValueError(f"alpha and alpha_decay must be in (0, 1], got {self.alpha}, {self.alpha_decay}")
        if not 0.0 <= self.gamma <= 1.0:
            raise ValueError(f"gamma must be in [0, 1], got {self.gamma}")
        if self.position_buckets <= 0:
            raise ValueError(f"position_buckets must be positive, got {self.position_buckets}")
        if self.trap_area_ratio < 0 or self.trap_terminal_area < 0 or self.proximity_radius < 0:
            raise ValueError(
                f"trap_area_ratio, trap_terminal_area and proximity_radius must be non-negative, "
                f"got {self.trap_area_ratio}, {self.trap_terminal_area}, {self.proximity_radius}"
            )
        if self.visit_history < 0 or self.starvation_steps <= 0 or self.telemetry_every <= 0:
            raise ValueError("visit_history, starvation_steps and telemetry_every must be non-negative/positive")
        return self


DEFAULT_CONFIG = Config()

# Driver and display
EPISODES = 1_000_000
RENDER_EVERY = 5_000
CELL_SIZE = 20
INITIAL_DELAY_MS = 150  # frame delay while rendering
MIN_DELAY_MS = 50
DELAY_STEP_MS = 5  # faster per food eaten

# Colors
BLACK = (0, 0, 0)
WHITE = (255, 255, 255)
RED = (255, 0, 0)
GREEN = (0, 255, 0)
