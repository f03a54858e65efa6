from __future__ import annotations

import math
from typing import Callable, Dict, List, Optional, Tuple

import pygame

from board import Car
from game import Game

Colour = Tuple[int, int, int]

WINDOW_SIZE = 600
FPS = 60
BUTTON_WIDTH = 130
BUTTON_HEIGHT = 40
BUTTON_MARGIN = 12
TOP_PANEL_HEIGHT = 50
BOTTOM_PANEL_HEIGHT = 70
AUTO_PLAY_DELAY = 0.6

GOAL_COLOURS: Tuple[Colour, Colour] = ((255, 60, 60), (255, 120, 120))
PALETTE: Tuple[Tuple[Colour, Colour], ...] = (
    ((100, 200, 255), (150, 220, 255)),
    ((255, 200, 100), (255, 220, 150)),
    ((150, 255, 150), (200, 255, 200)),
)


def compute_board_geometry(size: int) -> Tuple[int, int, int]:

    # One spare column keeps the exit marker and departing cars visible.
    cell_size = max(1, WINDOW_SIZE // (max(1, size) + 1))
    board_px = cell_size * size
    offset_x = (WINDOW_SIZE - board_px) // 2
    offset_y = (WINDOW_SIZE - board_px) // 2
    return cell_size, offset_x, offset_y


def car_colours(identifier: str, goal_car: str) -> Tuple[Colour, Colour]:

    if identifier == goal_car:
        return GOAL_COLOURS
    return PALETTE[ord(identifier[0]) % len(PALETTE)]


class AnimatedCar:

    def __init__(self, car: Car) -> None:
        self.car = car
        self.display_x = float(car.x)
        self.display_y = float(car.y)
        self.target_x = float(car.x)
        self.target_y = float(car.y)
        self.departed = False

    def update_target(self, car: Car) -> None:

        self.car = car
        self.target_x = float(car.x)
        self.target_y = float(car.y)
        self.departed = False

    def drive_off(self, board_size: int) -> None:

        self.target_x = float(board_size + 1)
        self.departed = True

    def animate(self, speed: float = 0.25) -> bool:

        dx = self.target_x - self.display_x
        dy = self.target_y - self.display_y
        if (dx * dx + dy * dy) ** 0.5 < 0.01:
            self.display_x = self.target_x
            self.display_y = self.target_y
            return False
        self.display_x += dx * speed
        self.display_y += dy * speed
        return True


class Button:

    def __init__(
        self,
        label: str,
        position: Tuple[int, int],
        callback: Callable[[], None],
        width: int = BUTTON_WIDTH,
        height: int = BUTTON_HEIGHT,
    ) -> None:
        self.label = label
        self.rect = pygame.Rect(position[0], position[1], width, height)
        self.callback = callback
        self.hover = False

    def draw(self, screen: pygame.Surface, font: pygame.font.Font) -> None:

        base = 95 if self.hover else 70
        pygame.draw.rect(screen, (base, base, base), self.rect, border_radius=12)
        text_surface = font.render(self.label, True, (230, 230, 230))
        screen.blit(text_surface, text_surface.get_rect(center=self.rect.center))

    def handle_event(self, event: pygame.event.Event) -> None:

        if event.type == pygame.MOUSEMOTION:
            self.hover = self.rect.collidepoint(event.pos)
        elif event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
            if self.rect.collidepoint(event.pos):
                self.callback()


class SolutionViewer:
    """Window that replays a solved game one move at a time."""

    def __init__(self, game: Game, title: str = "Rush Hour Solver") -> None:

        self.game = game
        self.title = title
        self.animated_cars: Dict[str, AnimatedCar] = {}
        self.auto_play = False
        self.auto_play_timer = 0.0
        self.status_message = "Ready"
        self.sync(snap=True)

    def sync(self, snap: bool = False) -> None:

        board = self.game.current_board
        if board is None:
            return
        cars = board.cars()
        for identifier, car in cars.items():
            animated = self.animated_cars.get(identifier)
            if animated is None:
                self.animated_cars[identifier] = AnimatedCar(car)
            else:
                animated.update_target(car)
        for identifier, animated in self.animated_cars.items():
            if identifier not in cars:
                animated.drive_off(board.size)
        if snap:
            for animated in self.animated_cars.values():
                animated.display_x = animated.target_x
                animated.display_y = animated.target_y

    def next_step(self) -> None:

        if self.game.step_solution():
            step = self.game.solution[self.game.solution_index - 1]
            self.status_message = f"Step {step.number}: {step.car} {step.direction}"
            self.sync()
        else:
            self.auto_play = False
            self.status_message = "Solved!" if self.game.solution else "No solution to play"

    def previous_step(self) -> None:

        self.auto_play = False
        if self.game.step_back():
            self.status_message = f"Back to step {self.game.solution_index}"
            self.sync()

    def toggle_play(self) -> None:

        self.auto_play = not self.auto_play
        self.auto_play_timer = 0.0

    def reset(self) -> None:

        self.game.reset()
        self.auto_play = False
        self.status_message = "Reset to initial state."
        self.sync(snap=True)

    def update(self, dt: float) -> bool:

        animating = False
        for animated in self.animated_cars.values():
            animating = animated.animate() or animating
        if self.auto_play and not animating:
            self.auto_play_timer += dt
            if self.auto_play_timer >= AUTO_PLAY_DELAY:
                self.auto_play_timer = 0.0
                self.next_step()
        return animating

    def draw_board(self, surface: pygame.Surface) -> None:

        board = self.game.current_board
        if board is None:
            return
        size = board.size
        cell_size, offset_x, offset_y = compute_board_geometry(size)
        board_px = cell_size * size

        surface.fill((32, 34, 40))
        pygame.draw.rect(
            surface, (55, 58, 66), pygame.Rect(offset_x, offset_y, board_px, board_px)
        )
        for index in range(size + 1):
            pygame.draw.line(
                surface,
                (70, 74, 84),
                (offset_x + index * cell_size, offset_y),
                (offset_x + index * cell_size, offset_y + board_px),
            )
            pygame.draw.line(
                surface,
                (70, 74, 84),
                (offset_x, offset_y + index * cell_size),
                (offset_x + board_px, offset_y + index * cell_size),
            )

        pulse = int(100 + 50 * math.sin(pygame.time.get_ticks() / 500))
        exit_rect = pygame.Rect(
            offset_x + board_px,
            offset_y + board.exit_row * cell_size,
            max(4, cell_size // 3),
            cell_size,
        )
        exit_glow = pygame.Surface((exit_rect.width, exit_rect.height), pygame.SRCALPHA)
        pygame.draw.rect(exit_glow, (0, 255, 100, pulse), exit_glow.get_rect(), border_radius=6)
        surface.blit(exit_glow, exit_rect.topleft)

        for identifier, animated in sorted(self.animated_cars.items()):
            if animated.departed and animated.display_x > size:
                continue
            car = animated.car
            rect = pygame.Rect(
                offset_x + int(animated.display_x * cell_size),
                offset_y + int(animated.display_y * cell_size),
                cell_size * car.length if car.orientation == "H" else cell_size,
                cell_size * car.length if car.orientation == "V" else cell_size,
            ).inflate(-6, -6)
            colour, accent = car_colours(identifier, self.game.goal_car)

            shadow = rect.move(3, 3)
            shadow_surf = pygame.Surface(shadow.size, pygame.SRCALPHA)
            pygame.draw.rect(shadow_surf, (0, 0, 0, 80), shadow_surf.get_rect(), border_radius=12)
            surface.blit(shadow_surf, shadow.topleft)
            pygame.draw.rect(surface, colour, rect, border_radius=12)
            highlight = pygame.Rect(rect.x, rect.y, rect.width, max(1, rect.height // 3))
            pygame.draw.rect(surface, accent, highlight, border_radius=10)

    def run(self) -> None:

        pygame.init()
        screen = pygame.display.set_mode(
            (WINDOW_SIZE, TOP_PANEL_HEIGHT + WINDOW_SIZE + BOTTOM_PANEL_HEIGHT)
        )
        pygame.display.set_caption(self.title)
        clock = pygame.time.Clock()
        board_surface = pygame.Surface((WINDOW_SIZE, WINDOW_SIZE))
        font = pygame.font.SysFont(["Courier New", "Consolas", "monospace"], 16)
        button_font = pygame.font.SysFont(["Courier New", "Consolas", "monospace"], 18, bold=True)

        labels: List[Tuple[str, Callable[[], None]]] = [
            ("Prev", self.previous_step),
            ("Play", self.toggle_play),
            ("Next", self.next_step),
            ("Reset", self.reset),
        ]
        row_width = len(labels) * BUTTON_WIDTH + (len(labels) - 1) * BUTTON_MARGIN
        start_x = (WINDOW_SIZE - row_width) // 2
        button_y = TOP_PANEL_HEIGHT + WINDOW_SIZE + (BOTTOM_PANEL_HEIGHT - BUTTON_HEIGHT) // 2
        buttons = [
            Button(label, (start_x + index * (BUTTON_WIDTH + BUTTON_MARGIN), button_y), callback)
            for index, (label, callback) in enumerate(labels)
        ]
        key_actions: Dict[int, Callable[[], None]] = {
            pygame.K_RIGHT: self.next_step,
            pygame.K_LEFT: self.previous_step,
            pygame.K_SPACE: self.toggle_play,
            pygame.K_r: self.reset,
        }

        running = True
        while running:
            dt = clock.tick(FPS) / 1000.0
            for event in pygame.event.get():
                if event.type == pygame.QUIT:
                    running = False
                elif event.type == pygame.KEYDOWN:
                    if event.key == pygame.K_ESCAPE:
                        running = False
                    elif event.key in key_actions:
                        key_actions[event.key]()
                for button in buttons:
                    button.handle_event(event)

            self.update(dt)

            screen.fill((25, 25, 30))
            header = font.render(
                f"Move {self.game.solution_index}/{len(self.game.solution)}"
                f"   explored {self.game.nodes_expanded} boards",
                True,
                (220, 220, 220),
            )
            screen.blit(header, header.get_rect(midleft=(15, TOP_PANEL_HEIGHT // 2)))
            status = font.render(self.status_message, True, (150, 200, 255))
            status_rect = status.get_rect(midright=(WINDOW_SIZE - 15, TOP_PANEL_HEIGHT // 2))
            screen.blit(status, status_rect)

            self.draw_board(board_surface)
            screen.blit(board_surface, (0, TOP_PANEL_HEIGHT))
            for button in buttons:
                button.draw(screen, button_font)
            pygame.display.flip()

        pygame.quit()
