import argparse
import logging

import numpy as np

from .config import DEFAULT_CONFIG, DELAY_STEP_MS, EPISODES, INITIAL_DELAY_MS, MIN_DELAY_MS, RENDER_EVERY
from .simulation import Simulation

logger = logging.getLogger(__name__)


def frame_delay(score):
    # the game speeds up as the snake eats
    return max(MIN_DELAY_MS, INITIAL_DELAY_MS - DELAY_STEP_MS * score)


def window_closed(pygame):
    return any(event.type == pygame.QUIT for event in pygame.event.get())


def train_snake(episodes=EPISODES, render=False, seed=None, config=DEFAULT_CONFIG, render_every=RENDER_EVERY):
    sim = Simulation(config, seed=seed)

    screen = font = None
    if render:
        import pygame
        from .renderer import open_window, render as draw
        screen = open_window(config)
        font = pygame.font.SysFont("Arial", 14)

    max_length = 0
    try:
        for episode in range(episodes):
            verbose = render and episode % render_every == 0

            done = False
            while not done:
                result = sim.tick()
                done = result.terminal
                if verbose:
                    logger.debug("Reward: %.4f", result.reward)
                    if window_closed(pygame):
                        return sim
                    draw(screen, result.snapshot, font=font)
                    pygame.time.wait(frame_delay(result.snapshot.score))

            snake_length = len(result.snapshot.snake)
            max_length = max(max_length, snake_length)
            avg = np.mean(sim.recent_scores)
            logger.info(
                "Episode %d/%d completed (%s), length=%d, avg=%.2f max=%d",
                episode + 1, episodes, result.reason, snake_length, avg, max_length,
            )

            # the window stays open between shown episodes, keep it responsive
            if render and window_closed(pygame):
                return sim
    finally:
        if render:
            pygame.quit()
    return sim


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Train a Q-learning agent to play Snake")
    parser.add_argument("--render", action="store_true", help="Show every RENDER_EVERY-th episode in a window")
    parser.add_argument("--episodes", type=int, default=EPISODES, help="Number of episodes to train")
    parser.add_argument("--seed", type=int, default=None, help="Seed for a reproducible run")
    return parser.parse_args(argv)


if __name__ == "__main__":
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s [%(levelname)s] %(message)s',
        datefmt='%H:%M:%S',
    )
    args = parse_args()
    train_snake(args.episodes, args.render, args.seed)
