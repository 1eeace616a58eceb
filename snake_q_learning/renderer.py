import pygame

from .config import BLACK, CELL_SIZE, GREEN, RED, WHITE
from .simulation import Snapshot


def open_window(config, cell_size=CELL_SIZE):
    pygame.init()
    screen = pygame.display.set_mode((config.grid_width * cell_size, config.grid_height * cell_size))
    pygame.display.set_caption('Snake Q-learning')
    return screen


def render(screen, snapshot: Snapshot, cell_size=CELL_SIZE, font=None):
    screen.fill(BLACK)
    for row, col in snapshot.snake:
        pygame.draw.rect(screen, GREEN, pygame.Rect(col * cell_size, row * cell_size, cell_size, cell_size))
    if snapshot.food is not None:
        row, col = snapshot.food
        pygame.draw.rect(screen, RED, pygame.Rect(col * cell_size, row * cell_size, cell_size, cell_size))
    if font is not None:
        hud = f"Ep: {snapshot.episode} | Score: {snapshot.score} | Eps: {snapshot.epsilon:.3f}"
        screen.blit(font.render(hud, True, WHITE), (5, 5))
    pygame.display.flip()
