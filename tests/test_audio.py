from __future__ import annotations

import numpy as np
import pytest

from floppy import audio
from floppy.audio import AudioEngine, tone_samples, waveform
from floppy.session import Event


@pytest.fixture
def engine(monkeypatch) -> tuple[AudioEngine, list[str]]:
    played: list[str] = []
    eng = AudioEngine(volume=0.5, enabled=False)
    monkeypatch.setattr(eng, "_play", played.append)
    return eng, played


def test_tone_decays_to_silence_with_tail() -> None:
    s = tone_samples(520, 0.06, "sawtooth", 0.15, rate=10000)
    assert len(s) == int(10000 * (0.06 + audio.TAIL))
    assert np.max(np.abs(s)) <= 0.15 + 1e-9
    assert np.all(s[int(10000 * 0.06) + 1:] == 0)
    head = np.max(np.abs(s[:50]))
    tail = np.max(np.abs(s[550:600]))
    assert head > tail


def test_waveforms_stay_in_unit_range() -> None:
    phase = np.linspace(0, 3, 301)
    for kind in ("sine", "sawtooth", "triangle", "square"):
        w = waveform(kind, phase)
        assert w.min() >= -1.0 and w.max() <= 1.0
    assert waveform("sawtooth", np.array([0.0]))[0] == -1.0
    with pytest.raises(ValueError):
        waveform("noise", phase)


def test_session_events_map_to_sounds(engine) -> None:
    eng, played = engine
    for ev in (Event.FLAP, Event.SCORE, Event.HIT):
        eng.handle(ev)
    assert played == ["flap", "score", "hit"]


def test_mute_silences_effects(engine) -> None:
    eng, played = engine
    eng.toggle_mute()
    eng.handle(Event.FLAP)
    assert played == []
    eng.toggle_mute()
    eng.handle(Event.FLAP)
    assert played == ["flap"]


def test_music_loop_plays_arpeggio_on_schedule(engine) -> None:
    eng, played = engine
    eng.handle(Event.MUSIC_START)
    eng.update(0.3)
    assert played == []
    eng.update(0.35)
    assert played == ["note440", "note550"]

    eng.handle(Event.MUSIC_STOP)
    eng.update(5.0)
    assert played == ["note440", "note550"]


def test_music_refuses_to_start_when_muted(engine) -> None:
    eng, played = engine
    eng.set_volume(0)
    assert eng.muted
    eng.start_music()
    eng.update(2.0)
    assert not eng.music_playing
    assert played == []


def test_volume_is_clamped() -> None:
    eng = AudioEngine(volume=3.0, enabled=False)
    assert eng.volume == 1.0
    eng.nudge_volume(-0.25)
    assert eng.volume == 0.75
    eng.set_volume(-1)
    assert eng.volume == 0.0
    assert eng.muted


@pytest.mark.parametrize("rate, channels", [(22050, 2), (48000, 1)])
def test_sounds_follow_the_opened_mixer_rate(monkeypatch, rate: int, channels: int) -> None:
    monkeypatch.setattr(audio.pygame.mixer, "get_init", lambda: (rate, -16, channels))
    monkeypatch.setattr(audio.pygame.sndarray, "make_sound", lambda pcm: pcm)

    pcm = audio.to_sound(140, 0.4, "sine", 0.22)
    frames = int(rate * (0.4 + audio.TAIL))
    assert pcm.shape == ((frames, channels) if channels > 1 else (frames,))
    assert pcm.dtype == np.int16
    # Seconds of audio stay the same whatever the device rate
    assert pcm.shape[0] / rate == pytest.approx(0.42, abs=1e-3)
