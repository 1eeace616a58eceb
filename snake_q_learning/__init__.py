from .config import Config, DEFAULT_CONFIG
from .simulation import Simulation, Snapshot, Telemetry, TickResult
from .snake_game import Outcome, SnakeGame
