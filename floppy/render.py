from __future__ import annotations

import random
from dataclasses import dataclass, field

import pygame

from floppy.config import (
    BIRD_BODY,
    BIRD_H,
    BIRD_W,
    BIRD_WING,
    BLACK,
    FPS,
    GROUND,
    GROUND_HEIGHT,
    GROUND_LEVEL,
    GROUND_SCROLL_SPEED,
    GROUND_TILE,
    HILL,
    HUD_INK,
    PIPE_CAP,
    PIPE_GREEN,
    PIPE_WIDTH,
    RED,
    SCREEN_HEIGHT,
    SCREEN_WIDTH,
    SKY,
    WHITE,
)
from floppy.session import GameSession, Mode

SHAKE_INTENSITY, SHAKE_TICKS = 15, int(0.4 * FPS)
FLASH_FADE = 25


@dataclass
class Hud:
    """Everything drawn on screen that does not live in the session."""
    volume: float = 0.0
    muted: bool = False
    leaders: list = field(default_factory=list)
    name_text: str = ""


def render_text(font, text, color=WHITE):
    """Renders text with a simple drop shadow."""
    main_surf = font.render(text, True, color)
    shadow_surf = font.render(text, True, BLACK)
    w, h = main_surf.get_size()
    surf = pygame.Surface((w + 2, h + 2), pygame.SRCALPHA)
    surf.blit(shadow_surf, (2, 2))
    surf.blit(main_surf, (0, 0))
    return surf


def make_bird_image():
    w, h = BIRD_W + 8, BIRD_H + 8
    surf = pygame.Surface((w, h), pygame.SRCALPHA)
    pygame.draw.rect(surf, BIRD_BODY, (4, 6, w - 12, h - 12), border_radius=6)
    pygame.draw.ellipse(surf, BIRD_WING, (2, 12, 16, 8))
    pygame.draw.circle(surf, BLACK, (w - 13, 12), 3)
    return surf


class Renderer:
    def __init__(self):
        self.surface = pygame.Surface((SCREEN_WIDTH, SCREEN_HEIGHT))
        self.font_hud = pygame.font.SysFont("Arial", 36, bold=True)
        self.font_title = pygame.font.SysFont("Arial", 44, bold=True)
        self.font_body = pygame.font.SysFont("Arial", 20)
        self.font_small = pygame.font.SysFont("Arial", 18)
        self.bird_image = make_bird_image()
        self.rotation_cache = {}
        self.ground_scroll = 0
        self.cloud_frame = 0
        self.shake = 0
        self.flash_alpha = 0
        self.dim = pygame.Surface((SCREEN_WIDTH, SCREEN_HEIGHT), pygame.SRCALPHA)

    # --- Per-tick effects ---

    def advance(self, session: GameSession):
        if session.mode == Mode.PAUSED:
            return
        self.cloud_frame += 1
        self.ground_scroll = (self.ground_scroll - GROUND_SCROLL_SPEED) % -60
        if self.shake > 0:
            self.shake -= 1
        self.flash_alpha = max(0, self.flash_alpha - FLASH_FADE)

    def on_crash(self):
        self.shake, self.flash_alpha = SHAKE_TICKS, 255

    # --- Frame ---

    def draw(self, session: GameSession, hud: Hud):
        s = self.surface
        s.fill(SKY)
        self.draw_background(s)
        self.draw_pipes(s, session.pipes)
        self.draw_bird(s, session.bird)
        self.draw_ground(s)
        self.draw_hud(s, session, hud)

        if session.mode == Mode.MENU:
            self.draw_menu(s, session, hud)
        elif session.mode == Mode.PAUSED:
            self.draw_overlay(s, 0.28)
            self.blit_center(s, render_text(self.font_title, "Paused"), SCREEN_HEIGHT // 2 - 40)
            self.blit_center(s, render_text(self.font_body, "Press P to resume"), SCREEN_HEIGHT // 2 + 10)
        elif session.mode == Mode.CRASHED:
            self.draw_crashed(s, session)

        if self.flash_alpha > 0:
            flash = pygame.Surface((SCREEN_WIDTH, SCREEN_HEIGHT))
            flash.fill(WHITE)
            flash.set_alpha(self.flash_alpha)
            s.blit(flash, (0, 0))
        return s

    def present(self, screen):
        ox = oy = 0
        if self.shake > 0:
            intense = int(SHAKE_INTENSITY * (self.shake / SHAKE_TICKS))
            if intense > 0:
                ox, oy = random.randint(-intense, intense), random.randint(-intense, intense)
        screen.fill(BLACK)
        screen.blit(self.surface, (ox, oy))

    # --- Pieces ---

    def draw_background(self, s):
        for cx, cy, rx, ry in ((0.15, 0.85, 380, 140), (0.7, 0.86, 420, 130)):
            cx, cy = int(SCREEN_WIDTH * cx), int(SCREEN_HEIGHT * cy)
            pygame.draw.ellipse(s, HILL, (cx - rx, cy - ry, rx * 2, ry * 2))
        for i in range(4):
            cx = int((self.cloud_frame * 0.3 + i * 220) % (SCREEN_WIDTH + 200)) - 100 - i * 60
            cy = 90 + (i % 2) * 18
            for dx, dy, rx, ry in ((0, 0, 46, 22), (30, -6, 36, 18), (-30, -6, 36, 18)):
                pygame.draw.ellipse(s, WHITE, (cx + dx - rx, cy + dy - ry, rx * 2, ry * 2))

    def draw_pipes(self, s, pipes):
        for p in pipes:
            x = int(p.x)
            pygame.draw.rect(s, PIPE_GREEN, (x, 0, PIPE_WIDTH, p.top))
            pygame.draw.rect(s, PIPE_GREEN, (x, SCREEN_HEIGHT - p.bottom, PIPE_WIDTH, p.bottom))
            pygame.draw.rect(s, PIPE_CAP, (x, p.top - 18, PIPE_WIDTH, 16))
            pygame.draw.rect(s, PIPE_CAP, (x, SCREEN_HEIGHT - p.bottom - 2, PIPE_WIDTH, 16))

    def bird_frame(self, angle):
        key = int(angle)
        if key not in self.rotation_cache:
            # pygame rotates counter-clockwise; positive rotation means nose down
            self.rotation_cache[key] = pygame.transform.rotate(self.bird_image, -key)
        return self.rotation_cache[key]

    def draw_bird(self, s, bird):
        img = self.bird_frame(bird.rotation)
        center = (int(bird.x + bird.w / 2), int(bird.y + bird.h / 2))
        s.blit(img, img.get_rect(center=center))

    def draw_ground(self, s):
        pygame.draw.rect(s, GROUND, (0, GROUND_LEVEL, SCREEN_WIDTH, GROUND_HEIGHT))
        for x in range(-120, SCREEN_WIDTH + 120, 60):
            tile = (x + self.ground_scroll, GROUND_LEVEL + 8, 48, GROUND_HEIGHT - 16)
            pygame.draw.rect(s, GROUND_TILE, tile, border_radius=6)

    def draw_hud(self, s, session, hud):
        s.blit(self.font_hud.render(str(session.score), True, HUD_INK), (22, 24))
        sound = "Muted" if hud.muted else f"Vol {round(hud.volume * 100)}%"
        status = f"Best: {session.best}   {session.difficulty.name.title()}   {sound}"
        s.blit(self.font_small.render(status, True, WHITE), (12, SCREEN_HEIGHT - 30))

    def draw_overlay(self, s, alpha):
        self.dim.fill((0, 0, 0, int(255 * alpha)))
        s.blit(self.dim, (0, 0))

    def blit_center(self, s, surf, y):
        s.blit(surf, surf.get_rect(center=(SCREEN_WIDTH // 2, y)))

    def draw_menu(self, s, session, hud):
        self.draw_overlay(s, 0.28)
        mid = SCREEN_HEIGHT // 2
        self.blit_center(s, render_text(self.font_title, "Floppy Bird"), mid - 200)
        self.blit_center(s, render_text(self.font_small, "Click / Space to flap   P pause"), mid - 155)
        self.blit_center(s, render_text(self.font_small, "1 / 2 / 3 difficulty   +/- volume   M mute"), mid - 130)

        if session.pending_score is not None:
            self.draw_name_prompt(s, session.pending_score, hud.name_text, mid - 60)
        self.draw_leaders(s, hud.leaders, mid + 40)

    def draw_name_prompt(self, s, score, text, y):
        box = pygame.Rect(0, 0, 320, 90)
        box.center = (SCREEN_WIDTH // 2, y + 20)
        pygame.draw.rect(s, HUD_INK, box, border_radius=8)
        self.blit_center(s, self.font_body.render(f"Save score {score}? Type a name:", True, WHITE), y)
        self.blit_center(s, self.font_body.render(text + "_", True, BIRD_BODY), y + 26)
        self.blit_center(s, self.font_small.render("Enter to save   Esc to skip", True, WHITE), y + 50)

    def draw_leaders(self, s, leaders, y):
        if not leaders:
            return
        self.blit_center(s, render_text(self.font_body, "Leaderboard"), y)
        for i, entry in enumerate(leaders, 1):
            line = f"{i}. {entry.name} - {entry.score}"
            self.blit_center(s, render_text(self.font_small, line), y + 8 + i * 24)

    def draw_crashed(self, s, session):
        self.draw_overlay(s, 0.45)
        mid = SCREEN_HEIGHT // 2
        self.blit_center(s, render_text(self.font_title, "Game Over", RED), mid - 40)
        label = f"New best: {session.score}!" if session.new_record else f"Score: {session.score}   Best: {session.best}"
        self.blit_center(s, render_text(self.font_body, label), mid)
        if session.landed:
            self.blit_center(s, render_text(self.font_body, "Click / press Space to return"), mid + 40)
