from __future__ import annotations

import logging

import numpy as np
import pygame

from floppy.config import DEFAULT_VOLUME
from floppy.physics import clamp
from floppy.session import Event

logger = logging.getLogger(__name__)

SAMPLE_RATE = 44100
SILENCE = 0.0001
TAIL = 0.02

# name: (freq, seconds, waveform, gain)
EFFECTS = {
    "flap": (520, 0.06, "sawtooth", 0.15),
    "score": (880, 0.09, "triangle", 0.14),
    "hit": (140, 0.4, "sine", 0.22),
}
MUSIC_NOTES = [440, 550, 660, 880, 660, 550]
MUSIC_STEP = 0.32
MUSIC_NOTE = (0.28, "sine", 0.05)


def waveform(kind, phase):
    """Unit-amplitude oscillator output for `phase` measured in cycles."""
    frac = phase % 1.0
    if kind == "sine":
        return np.sin(2 * np.pi * phase)
    if kind == "sawtooth":
        return 2.0 * frac - 1.0
    if kind == "triangle":
        return 1.0 - 4.0 * np.abs(frac - 0.5)
    if kind == "square":
        return np.where(frac < 0.5, 1.0, -1.0)
    raise ValueError(f"unknown waveform {kind!r}")


def tone_samples(freq, duration, kind="sine", gain=0.14, rate=SAMPLE_RATE):
    """
    A beep: one oscillator whose gain decays exponentially from `gain` to
    silence over `duration`, followed by a short silent tail.
    """
    n = max(1, int(rate * (duration + TAIL)))
    t = np.arange(n) / rate
    envelope = gain * (SILENCE / gain) ** np.minimum(t / duration, 1.0)
    envelope[t > duration] = 0.0
    return waveform(kind, freq * t) * envelope


def to_sound(freq, duration, kind="sine", gain=0.14):
    """Synthesize a beep at whatever rate and channel count the mixer opened with."""
    rate, _, channels = pygame.mixer.get_init()
    samples = tone_samples(freq, duration, kind, gain, rate=rate)
    pcm = (np.clip(samples, -1.0, 1.0) * 32767).astype(np.int16)
    if channels > 1:
        pcm = np.repeat(pcm[:, None], channels, axis=1)
    return pygame.sndarray.make_sound(np.ascontiguousarray(pcm))


def pre_init_mixer():
    pygame.mixer.pre_init(SAMPLE_RATE, -16, 2, 512)


class AudioEngine:
    """Synthesized sound effects and the arpeggio music loop."""

    def __init__(self, volume=DEFAULT_VOLUME, muted=False, enabled=True):
        self.volume = clamp(volume, 0.0, 1.0)
        self.muted = muted or self.volume == 0
        self.music_playing = False
        self.music_timer = 0.0
        self.music_index = 0
        self.sounds = {}
        self.enabled = enabled and self._init_mixer()
        if self.enabled:
            self._build_sounds()

    def _init_mixer(self):
        try:
            if not pygame.mixer.get_init():
                pre_init_mixer()
                pygame.mixer.init()
        except pygame.error as exc:
            logger.warning("Audio disabled: %s", exc)
            return False
        return True

    def _build_sounds(self):
        for name, (freq, dur, kind, gain) in EFFECTS.items():
            self.sounds[name] = to_sound(freq, dur, kind, gain)
        dur, kind, gain = MUSIC_NOTE
        for freq in set(MUSIC_NOTES):
            self.sounds[f"note{freq}"] = to_sound(freq, dur, kind, gain)

    def _play(self, key):
        if not self.enabled:
            return
        snd = self.sounds.get(key)
        if snd is not None:
            snd.set_volume(self.volume)
            snd.play()

    # --- Volume ---

    def set_volume(self, v):
        self.volume = clamp(v, 0.0, 1.0)
        self.muted = self.volume == 0

    def nudge_volume(self, delta):
        self.set_volume(round(self.volume + delta, 2))

    def toggle_mute(self):
        self.muted = not self.muted
        if self.muted:
            self.stop_all()

    def stop_all(self):
        if self.enabled:
            pygame.mixer.stop()

    # --- Effects ---

    def beep(self, name):
        if self.muted:
            return
        self._play(name)

    # --- Music ---

    def start_music(self):
        if self.music_playing or self.muted:
            return
        self.music_playing = True
        self.music_timer = 0.0
        self.music_index = 0

    def stop_music(self):
        self.music_playing = False

    def update(self, dt):
        if not self.music_playing:
            return
        self.music_timer += dt
        while self.music_timer >= MUSIC_STEP:
            self.music_timer -= MUSIC_STEP
            note = MUSIC_NOTES[self.music_index % len(MUSIC_NOTES)]
            self.music_index += 1
            if not self.muted:
                self._play(f"note{note}")

    def handle(self, event: Event):
        if event == Event.FLAP:
            self.beep("flap")
        elif event == Event.SCORE:
            self.beep("score")
        elif event == Event.HIT:
            self.beep("hit")
        elif event == Event.MUSIC_START:
            self.start_music()
        elif event == Event.MUSIC_STOP:
            self.stop_music()
