from __future__ import annotations

import logging
import random

import pygame
from pygame.locals import *

from floppy.audio import AudioEngine, pre_init_mixer
from floppy.clock import FixedStepScheduler
from floppy.config import FPS, LEADERBOARD_SHOWN, NAME_MAX_LEN, SCREEN_HEIGHT, SCREEN_WIDTH, GameConfig, state_dir
from floppy.render import Hud, Renderer
from floppy.scoreboard import open_scoreboard
from floppy.session import Event, GameSession, Mode

logger = logging.getLogger(__name__)

FLAP_KEYS = (K_SPACE, K_UP)
DIFFICULTY_KEYS = {K_1: "easy", K_2: "normal", K_3: "hard"}
VOLUME_STEP = 0.05


class Controller:
    """Maps pygame events onto session, audio and name-entry actions."""

    def __init__(self, session: GameSession, audio: AudioEngine):
        self.session, self.audio = session, audio
        self.name_text = ""
        self.running = True

    @property
    def naming(self):
        return self.session.mode == Mode.MENU and self.session.pending_score is not None

    def handle(self, e):
        if e.type == QUIT:
            self.running = False
        elif e.type == MOUSEBUTTONDOWN and e.button == 1:
            self.name_text = ""
            self.session.flap()
        elif e.type == WINDOWMINIMIZED:
            self.audio.stop_music()
        elif e.type == WINDOWRESTORED and self.session.mode == Mode.PLAYING:
            self.audio.start_music()
        elif self.naming and e.type in (KEYDOWN, TEXTINPUT):
            self.handle_name(e)
        elif e.type == KEYDOWN:
            self.handle_key(e.key)

    def handle_name(self, e):
        if e.type == TEXTINPUT:
            self.name_text = (self.name_text + e.text)[:NAME_MAX_LEN]
        elif e.key in (K_RETURN, K_KP_ENTER):
            entry = self.session.submit_name(self.name_text)
            logger.info("Saved %s with %d points", entry.name, entry.score)
            self.name_text = ""
        elif e.key == K_ESCAPE:
            self.session.skip_name()
            self.name_text = ""
        elif e.key == K_BACKSPACE:
            self.name_text = self.name_text[:-1]

    def handle_key(self, key):
        session = self.session
        if key in FLAP_KEYS:
            session.flap()
        elif key == K_p:
            session.toggle_pause()
        elif key in DIFFICULTY_KEYS:
            if session.select_difficulty(DIFFICULTY_KEYS[key]):
                logger.debug("Difficulty set to %s", session.difficulty.name)
        elif key in (K_PLUS, K_EQUALS, K_KP_PLUS):
            self.audio.nudge_volume(VOLUME_STEP)
        elif key in (K_MINUS, K_KP_MINUS):
            self.audio.nudge_volume(-VOLUME_STEP)
        elif key == K_m:
            self.audio.toggle_mute()
            if not self.audio.muted and session.mode == Mode.PLAYING:
                self.audio.start_music()
        elif key == K_ESCAPE and session.mode == Mode.MENU:
            self.running = False


def open_window():
    try:
        screen = pygame.display.set_mode((SCREEN_WIDTH, SCREEN_HEIGHT), pygame.SCALED, vsync=1)
    except pygame.error:
        # No accelerated renderer (e.g. the dummy video driver)
        screen = pygame.display.set_mode((SCREEN_WIDTH, SCREEN_HEIGHT))
    pygame.display.set_caption("Floppy Bird")
    return screen


def run(config: GameConfig) -> int:
    """Open the window and play until it is closed. Returns the process exit code."""
    pre_init_mixer()
    pygame.init()
    try:
        screen = open_window()
        clock = pygame.time.Clock()

        directory = config.state_dir or state_dir()
        scoreboard = open_scoreboard(directory)
        logger.debug("Store at %s, best %d", directory, scoreboard.best)

        rng = random.Random(config.seed)
        session = GameSession(scoreboard, config.difficulty, rng)
        audio = AudioEngine(config.volume, config.muted)
        renderer = Renderer()
        scheduler = FixedStepScheduler(FPS)
        controller = Controller(session, audio)

        def tick():
            session.update()
            renderer.advance(session)
            for ev in session.drain_events():
                if ev == Event.HIT:
                    renderer.on_crash()
                audio.handle(ev)

        frames = 0
        while controller.running:
            dt = min(clock.tick(FPS) / 1000.0, 0.25)
            for e in pygame.event.get():
                controller.handle(e)

            scheduler.run(dt, tick)
            # Input events raised outside a tick (flap, pause) still need sound
            for ev in session.drain_events():
                audio.handle(ev)
            audio.update(dt)

            hud = Hud(audio.volume, audio.muted, scoreboard.top(LEADERBOARD_SHOWN), controller.name_text)
            renderer.draw(session, hud)
            renderer.present(screen)
            pygame.display.flip()

            frames += 1
            if config.smoke_frames and frames >= config.smoke_frames:
                break

        session.flush_best()
        return 0
    finally:
        pygame.quit()
