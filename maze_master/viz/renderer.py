import numpy as np
import pygame
from typing import Sequence, Tuple

from maze_master.core.events import MazeObserver
from maze_master.core.grid import Grid
from maze_master.algo.registry import GenerationAlgorithm, SolvingAlgorithm

# Indexed by cell state
PALETTE = np.array([
    (10, 10, 10),     # 0 unused
    (200, 200, 200),  # WALL
    (60, 100, 160),   # PATH (blue tint)
    (10, 10, 10),     # EMPTY
    (120, 50, 50),    # VISITED
    (40, 200, 80),    # START
    (220, 60, 60),    # GOAL
    (255, 215, 0),    # SOLUTION (gold)
], dtype=np.uint8)


def colorize(snapshot: Sequence[Sequence[int]], start: Tuple[int, int], goal: Tuple[int, int]) -> np.ndarray:
    """Maps a grid snapshot to a (rows, columns, 3) RGB array."""
    cells = np.asarray(snapshot, dtype=np.int32)
    # Room markers are carved cells still waiting to be merged
    cells = np.where(cells < 0, Grid.EMPTY, cells)
    cells = np.clip(cells, 0, len(PALETTE) - 1)
    rgb = PALETTE[cells]

    for (r, c), state in ((start, Grid.START), (goal, Grid.GOAL)):
        if 0 <= r < cells.shape[0] and 0 <= c < cells.shape[1] and cells[r, c] != Grid.WALL:
            rgb[r, c] = PALETTE[state]
    return rgb


class Renderer(MazeObserver):
    COLOR_BG = (10, 10, 10)

    GEN_KEYS = {
        pygame.K_1: GenerationAlgorithm.RECURSIVE_BACKTRACKING,
        pygame.K_2: GenerationAlgorithm.KRUSKAL,
        pygame.K_3: GenerationAlgorithm.PRIM,
    }
    SOLVE_KEYS = {
        pygame.K_4: SolvingAlgorithm.DFS,
        pygame.K_5: SolvingAlgorithm.BFS,
        pygame.K_6: SolvingAlgorithm.ASTAR,
        pygame.K_7: SolvingAlgorithm.DIJKSTRA,
    }

    def __init__(self, controller, width=1280, height=720):
        self.controller = controller
        self.screen_width = width
        self.screen_height = height

        # Camera
        self.cell_size = 20.0  # Pixels per cell
        self.offset_x = 0.0
        self.offset_y = 0.0
        self.zoom_speed = 1.1

        self.font = None
        self.running = True
        self.clock = None
        self.surface = None

        # Written from worker threads, read by the draw loop
        self.status = "Idle"
        self.path_length = 0
        self.needs_fit = True

    # MazeObserver (worker thread side: record state only, never draw)

    def on_maze_changed(self, grid):
        self.needs_fit = True
        self.path_length = 0

    def on_generation_started(self):
        self.status = "Generating"

    def on_generation_completed(self):
        self.status = "Generated"

    def on_generation_stopped(self):
        self.status = "Generation stopped"

    def on_solving_started(self):
        self.status = "Solving"
        self.path_length = 0

    def on_path_found(self, path):
        self.path_length = len(path)

    def on_solving_completed(self, solved):
        self.status = "Solved" if solved else "No path"

    def on_solving_stopped(self):
        self.status = "Solving stopped"

    def on_run_failed(self, kind, error):
        self.status = f"{kind.capitalize()} failed: {error}"

    # Window

    def fit_to_screen(self):
        """Auto-adjust zoom and pan to fit the entire grid on screen with padding."""
        grid = self.controller.grid
        padding = 40
        available_w = self.screen_width - (padding * 2)
        available_h = self.screen_height - (padding * 2) - 80  # room for HUD

        self.cell_size = max(1.0, min(available_w / grid.columns, available_h / grid.rows))

        total_maze_w = grid.columns * self.cell_size
        total_maze_h = grid.rows * self.cell_size
        self.offset_x = (self.screen_width - total_maze_w) / 2
        self.offset_y = 80 + (self.screen_height - 80 - total_maze_h) / 2
        self.needs_fit = False

    def init_window(self):
        pygame.init()
        pygame.display.set_caption("Maze Master")
        self.surface = pygame.display.set_mode((self.screen_width, self.screen_height), pygame.RESIZABLE)
        self.clock = pygame.time.Clock()
        self.font = pygame.font.SysFont("Consolas", 16)
        self.fit_to_screen()

    def handle_key(self, key):
        ctrl = self.controller
        if key == pygame.K_g:
            ctrl.generate_maze()
        elif key == pygame.K_s:
            ctrl.solve_maze()
        elif key == pygame.K_SPACE:
            ctrl.toggle_pause()
        elif key == pygame.K_ESCAPE:
            ctrl.stop_current_operation()
        elif key == pygame.K_r:
            ctrl.reset_maze()
            self.status = "Idle"
        elif key == pygame.K_c:
            if ctrl.clear_solution():
                self.status = "Generated"
        elif key in self.GEN_KEYS:
            ctrl.set_generation_algorithm(self.GEN_KEYS[key])
        elif key in self.SOLVE_KEYS:
            ctrl.set_solving_algorithm(self.SOLVE_KEYS[key])
        elif key in (pygame.K_PLUS, pygame.K_EQUALS, pygame.K_KP_PLUS):
            ctrl.set_animation_delay(ctrl.delay_ms + 5)
        elif key in (pygame.K_MINUS, pygame.K_KP_MINUS):
            ctrl.set_animation_delay(ctrl.delay_ms - 5)
        elif key == pygame.K_f:
            self.fit_to_screen()

    def handle_input(self):
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                self.running = False

            elif event.type == pygame.VIDEORESIZE:
                self.screen_width, self.screen_height = event.w, event.h
                self.needs_fit = True

            elif event.type == pygame.KEYDOWN:
                self.handle_key(event.key)

            elif event.type == pygame.MOUSEWHEEL:
                # Zoom towards mouse
                mx, my = pygame.mouse.get_pos()
                wx = (mx - self.offset_x) / self.cell_size
                wy = (my - self.offset_y) / self.cell_size

                if event.y > 0:
                    self.cell_size *= self.zoom_speed
                else:
                    self.cell_size /= self.zoom_speed
                self.cell_size = max(1.0, min(100.0, self.cell_size))

                self.offset_x = mx - wx * self.cell_size
                self.offset_y = my - wy * self.cell_size

            elif event.type == pygame.MOUSEMOTION:
                if pygame.mouse.get_pressed()[0] or pygame.mouse.get_pressed()[2]:  # Left or Right drag
                    self.offset_x += event.rel[0]
                    self.offset_y += event.rel[1]

    def draw_grid(self):
        self.surface.fill(self.COLOR_BG)
        grid = self.controller.grid

        # Snapshot read; a torn frame mid-run is fine for display
        rgb = colorize(grid.snapshot(), grid.start, grid.goal)
        # surfarray is (x, y), grid is (row, col)
        maze_surface = pygame.surfarray.make_surface(np.ascontiguousarray(rgb.transpose(1, 0, 2)))
        size = (int(grid.columns * self.cell_size), int(grid.rows * self.cell_size))
        self.surface.blit(pygame.transform.scale(maze_surface, size), (int(self.offset_x), int(self.offset_y)))

    def draw_hud(self):
        ctrl = self.controller
        fps = int(self.clock.get_fps())
        status = self.status + (" (paused)" if ctrl.is_paused else "")
        info = [
            f"FPS: {fps}   Size: {ctrl.grid.rows}x{ctrl.grid.columns}   Delay: {ctrl.delay_ms}ms",
            f"Generator: {ctrl.current_generation_algorithm.label}   Solver: {ctrl.current_solving_algorithm.label}",
            f"Status: {status}" + (f"   Path: {self.path_length}" if self.path_length else ""),
            "G gen  S solve  Space pause  Esc stop  R reset  C clear  1-3 gen algo  4-7 solver  +/- speed",
        ]

        for i, text in enumerate(info):
            lbl = self.font.render(text, True, (255, 255, 255))
            self.surface.blit(lbl, (10, 10 + i * 18))

    def run_loop(self):
        while self.running:
            self.handle_input()
            if self.needs_fit:
                self.fit_to_screen()

            self.draw_grid()
            self.draw_hud()
            pygame.display.flip()
            self.clock.tick(60)

        self.controller.shutdown()
        pygame.quit()
