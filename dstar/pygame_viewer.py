# dstar/pygame_viewer.py (step-by-step replay of a D* run)
from __future__ import annotations
import argparse
from dataclasses import dataclass
from typing import List, Optional
import os
import pygame

from .engine import Snapshot
from .grid import GridWorld
from .planners import dstar_run, RunStats
from .types import Coord, Tag, Terrain

@dataclass
class Colors:
    BG = (18, 18, 22)
    WALL = (35, 35, 44)
    FLOOR = (230, 230, 240)
    HIDDEN = (200, 200, 220)
    DISCOVERED = (150, 40, 40)
    OPEN = (235, 200, 90)
    CLOSED = (160, 200, 160)
    BACKPOINTER = (90, 90, 110)
    PLAYER = (220, 90, 90)
    GOAL = (90, 160, 220)
    PATH = (70, 170, 110)
    GRID = (60, 60, 70)

class Viewer:
    def __init__(self, world: GridWorld, cell_size: int = 28, fps: int = 60,
                 speed: float = 10.0, fullscreen: bool = False,
                 env_dir: str | None = None, max_steps: Optional[int] = None):
        self.world = world
        self.cell = cell_size
        self.fps = fps
        self.speed_frames_per_sec = speed
        self.env_dir = env_dir
        self.env_files: List[str] = []
        self.env_index = -1
        self.max_steps = max_steps

        self.autopilot = False
        self._step_timer = 0.0
        self.show_grid = False
        self.show_backpointers = True

        self.fullscreen = fullscreen
        self._recreate_display()
        pygame.display.set_caption("D* replay")
        self.clock = pygame.time.Clock()

        self._reset_state()
        if self.env_dir:
            self._find_env_files()

    # ----------------- display / fullscreen -----------------
    def _recreate_display(self) -> None:
        W, H = self.world.cols * self.cell, self.world.rows * self.cell
        flags = pygame.FULLSCREEN if self.fullscreen else 0
        self.screen = pygame.display.set_mode((W, H), flags)

    def toggle_fullscreen(self) -> None:
        self.fullscreen = not self.fullscreen
        self._recreate_display()

    def _recalculate_step_interval(self) -> None:
        self._step_interval = 1.0 / self.speed_frames_per_sec

    # ----------------- recording -----------------
    def _reset_state(self) -> None:
        """Re-runs D* on a copy of the current world and rewinds to the first frame."""
        self.frames: List[Snapshot] = []
        self.stats: RunStats = dstar_run(self.world.clone(), max_steps=self.max_steps,
                                         on_step=self.frames.append)
        self.frame_index = 0
        self._recalculate_step_interval()
        outcome = "reached goal" if self.stats.reached else f"no path ({self.stats.reason})"
        print(f"{len(self.frames)} frames, {outcome}")

    def _find_env_files(self) -> None:
        if self.env_dir and os.path.isdir(self.env_dir):
            self.env_files = sorted([f for f in os.listdir(self.env_dir) if f.endswith(".txt")])

    def _load_env_by_index(self, index: int) -> None:
        if not self.env_files or not (0 <= index < len(self.env_files)):
            return
        self.env_index = index
        filepath = os.path.join(self.env_dir, self.env_files[self.env_index])
        print(f"Loading: {filepath}")
        self._set_world(GridWorld.load(filepath))

    def _set_world(self, world: GridWorld) -> None:
        resize = (world.rows, world.cols) != (self.world.rows, self.world.cols)
        self.world = world
        if resize:
            self._recreate_display()
        self._reset_state()

    @property
    def current(self) -> Snapshot:
        return self.frames[self.frame_index]

    def step_forward(self) -> None:
        self.frame_index = min(self.frame_index + 1, len(self.frames) - 1)

    def step_back(self) -> None:
        self.frame_index = max(self.frame_index - 1, 0)

    def agent_trail(self) -> List[Coord]:
        trail: List[Coord] = []
        for snap in self.frames[:self.frame_index + 1]:
            if not trail or trail[-1] != snap.agent:
                trail.append(snap.agent)
        return trail

    # ----------------- draw -----------------
    def _center(self, s: Coord):
        r, c = s
        return (c * self.cell + self.cell // 2, r * self.cell + self.cell // 2)

    def draw(self) -> None:
        snap, cell = self.current, self.cell
        scr = self.screen
        scr.fill(Colors.BG)

        for v in snap.cells:
            r, c = v.coord
            rect = pygame.Rect(c * cell, r * cell, cell, cell)
            if v.terrain is Terrain.BLOCKED:
                original = self.world.node_at(v.coord).terrain
                color = Colors.DISCOVERED if original is Terrain.UNKNOWN_BLOCKED else Colors.WALL
            elif v.terrain is Terrain.UNKNOWN_BLOCKED:
                color = Colors.HIDDEN
            else:
                color = Colors.FLOOR
            scr.fill(color, rect)

            if v.tag is not Tag.NEW and v.terrain is not Terrain.BLOCKED:
                s = pygame.Surface((cell, cell), pygame.SRCALPHA)
                s.fill((*(Colors.OPEN if v.tag is Tag.OPEN else Colors.CLOSED), 90))
                scr.blit(s, rect.topleft)

        if self.show_backpointers:
            for v in snap.cells:
                if v.backpointer is not None and v.terrain is not Terrain.BLOCKED:
                    a, b = self._center(v.coord), self._center(v.backpointer)
                    mid = ((a[0] + b[0]) // 2, (a[1] + b[1]) // 2)
                    pygame.draw.line(scr, Colors.BACKPOINTER, a, mid, 2)

        for s in self.agent_trail():
            r, c = s
            rect = pygame.Rect(c * cell + cell // 4, r * cell + cell // 4, cell // 2, cell // 2)
            pygame.draw.rect(scr, Colors.PATH, rect, border_radius=4)

        gr, gc = self.world.goal
        goal_rect = pygame.Rect(gc * cell + 4, gr * cell + 4, cell - 8, cell - 8)
        pygame.draw.rect(scr, Colors.GOAL, goal_rect, border_radius=6)

        pr, pc = snap.agent
        player_rect = pygame.Rect(pc * cell + 6, pr * cell + 6, cell - 12, cell - 12)
        pygame.draw.rect(scr, Colors.PLAYER, player_rect, border_radius=8)

        if self.show_grid:
            W, H = self.world.cols * cell, self.world.rows * cell
            for i in range(self.world.cols + 1):
                pygame.draw.line(scr, Colors.GRID, (i * cell, 0), (i * cell, H))
            for i in range(self.world.rows + 1):
                pygame.draw.line(scr, Colors.GRID, (0, i * cell), (W, i * cell))

        pygame.display.flip()

    # ----------------- loop -----------------
    def handle_key(self, event) -> bool:
        """Returns False when the viewer should close."""
        if event.key == pygame.K_ESCAPE:
            return False
        elif event.key == pygame.K_SPACE:
            self.autopilot = not self.autopilot
        elif event.key == pygame.K_RIGHT:
            self.step_forward()
        elif event.key == pygame.K_LEFT:
            self.step_back()
        elif event.key == pygame.K_r:
            self.frame_index = 0
        elif event.key == pygame.K_g:
            self._set_world(GridWorld.random(rows=self.world.rows, cols=self.world.cols))
        elif event.key == pygame.K_LEFTBRACKET and self.env_files:  # previous map '['
            self._load_env_by_index((self.env_index - 1 + len(self.env_files)) % len(self.env_files))
        elif event.key == pygame.K_RIGHTBRACKET and self.env_files:  # next map ']'
            self._load_env_by_index((self.env_index + 1) % len(self.env_files))
        elif event.key == pygame.K_PAGEUP:
            self.speed_frames_per_sec = min(self.speed_frames_per_sec + 2, 120)
            self._recalculate_step_interval()
        elif event.key == pygame.K_PAGEDOWN:
            self.speed_frames_per_sec = max(self.speed_frames_per_sec - 2, 1)
            self._recalculate_step_interval()
        elif event.key == pygame.K_h:
            self.show_grid = not self.show_grid
        elif event.key == pygame.K_b:
            self.show_backpointers = not self.show_backpointers
        elif event.key == pygame.K_F11:
            self.toggle_fullscreen()
        return True

    def advance(self, dt: float) -> None:
        if not self.autopilot:
            return
        self._step_timer += dt
        while self._step_timer >= self._step_interval:
            self.step_forward()
            self._step_timer -= self._step_interval
        if self.frame_index == len(self.frames) - 1:
            self.autopilot = False

    def run(self) -> None:
        running = True
        while running:
            dt = self.clock.tick(self.fps) / 1000.0
            for event in pygame.event.get():
                if event.type == pygame.QUIT:
                    running = False
                elif event.type == pygame.KEYDOWN:
                    running = self.handle_key(event)
            self.advance(dt)
            self.draw()

def main():
    parser = argparse.ArgumentParser(description="Replay a D* run frame by frame")
    parser.add_argument("--rows", type=int, default=20, help="Rows when generating a random map")
    parser.add_argument("--cols", type=int, default=20, help="Columns when generating a random map")
    parser.add_argument("--p", type=float, default=0.20, help="Blocked probability for random maps")
    parser.add_argument("--u", type=float, default=0.10, help="Hidden-blockage probability for random maps")
    parser.add_argument("--load", type=str, default=None, help="Load a map (.txt)")
    parser.add_argument("--cell", type=int, default=28, help="Cell size in pixels")
    parser.add_argument("--envdir", type=str, default="envs", help="Directory of maps to cycle through with [ and ]")
    parser.add_argument("--fps", type=int, default=60, help="Frames per second")
    parser.add_argument("--speed", type=float, default=10.0, help="Autoplay speed in trace steps/sec")
    parser.add_argument("--max-steps", type=int, default=None, help="Cap on process_state calls")
    parser.add_argument("--fullscreen", action="store_true", help="Start in fullscreen (toggle with F11)")
    args = parser.parse_args()

    if args.load:
        world = GridWorld.load(args.load)
    elif os.path.isdir(args.envdir) and any(f.endswith(".txt") for f in os.listdir(args.envdir)):
        first_env = sorted([f for f in os.listdir(args.envdir) if f.endswith(".txt")])[0]
        world = GridWorld.load(os.path.join(args.envdir, first_env))
    else:
        world = GridWorld.random(rows=args.rows, cols=args.cols, p_blocked=args.p, p_unknown=args.u)

    pygame.init()
    try:
        Viewer(world, cell_size=args.cell, fps=args.fps, speed=args.speed, fullscreen=args.fullscreen,
               env_dir=args.envdir, max_steps=args.max_steps).run()
    finally:
        pygame.quit()

if __name__ == "__main__":
    main()
