from __future__ import annotations

import pytest

from floppy.config import BIRD_START_X, BIRD_START_Y, CEILING, GROUND_LEVEL, MAX_FALL_SPEED, PIPE_WIDTH
from floppy.pipes import Pipe, make_pipe
from floppy.session import Event, GameSession, Mode


def _run_until(session: GameSession, cond, limit=2000) -> None:
    for _ in range(limit):
        if cond():
            return
        session.update()
    raise AssertionError("condition never reached")


def test_flap_from_menu_starts_run_with_impulse(session: GameSession) -> None:
    assert session.mode == Mode.MENU
    session.flap()
    assert session.mode == Mode.PLAYING
    assert session.bird.vy == pytest.approx(-9.5)
    assert session.drain_events() == [Event.MUSIC_START, Event.FLAP]
    assert session.drain_events() == []


def test_falling_to_ground_crashes_and_lands(session: GameSession) -> None:
    session.flap()
    _run_until(session, lambda: session.mode != Mode.PLAYING)

    assert session.mode == Mode.CRASHED
    assert session.landed
    assert session.bird.bottom == GROUND_LEVEL
    events = session.drain_events()
    assert Event.HIT in events
    assert Event.MUSIC_STOP in events


def test_pipe_hit_crashes_mid_air_and_waits_for_landing(session: GameSession) -> None:
    session.flap()
    session.pipes.append(make_pipe(400, 160, x=session.bird.x))
    session.update()
    assert session.mode == Mode.CRASHED
    assert not session.landed

    session.flap()
    assert session.mode == Mode.CRASHED

    _run_until(session, lambda: session.landed)
    assert session.bird.bottom == GROUND_LEVEL
    assert session.bird.rotation == 90

    session.drain_events()
    session.flap()
    assert session.mode == Mode.MENU
    assert session.drain_events() == [Event.MUSIC_STOP]


def test_pipe_hit_at_the_ground_line_still_snaps_onto_ground(session: GameSession) -> None:
    session.flap()
    bird = session.bird
    bird.y, bird.vy = GROUND_LEVEL - bird.h - 5, 10.9
    session.pipes.append(make_pipe(100, 160, x=bird.x + 10))
    session.update()

    assert session.mode == Mode.CRASHED
    assert session.landed
    assert bird.bottom == GROUND_LEVEL
    assert session.stream.collides(bird.box)


def test_passing_a_pipe_scores_exactly_once(session: GameSession) -> None:
    session.flap()
    session.drain_events()
    session.pipes.append(Pipe(x=BIRD_START_X - PIPE_WIDTH + 1, top=200, bottom=340))

    events = []
    for _ in range(10):
        session.update()
        events += session.drain_events()

    assert session.mode == Mode.PLAYING
    assert session.score == 1
    assert events.count(Event.SCORE) == 1


def test_ceiling_is_not_terminal(session: GameSession) -> None:
    session.flap()
    session.bird.y, session.bird.vy = 0, -30
    session.update()
    assert session.mode == Mode.PLAYING
    assert session.bird.y == CEILING
    assert session.bird.vy == 0


def test_pause_freezes_simulation(session: GameSession) -> None:
    session.flap()
    for _ in range(5):
        session.update()
    session.drain_events()

    session.toggle_pause()
    assert session.mode == Mode.PAUSED
    assert session.drain_events() == [Event.MUSIC_STOP]

    y, vy = session.bird.y, session.bird.vy
    for _ in range(30):
        session.update()
    session.flap()
    assert session.mode == Mode.PAUSED
    assert (session.bird.y, session.bird.vy) == (y, vy)

    session.toggle_pause()
    assert session.mode == Mode.PLAYING
    assert session.drain_events() == [Event.MUSIC_START]


def test_pause_toggle_ignored_outside_a_run(session: GameSession) -> None:
    session.toggle_pause()
    assert session.mode == Mode.MENU
    assert session.drain_events() == []


def test_difficulty_only_changes_from_menu(session: GameSession) -> None:
    assert session.select_difficulty("hard")
    assert session.difficulty.gap == 140
    assert session.stream.difficulty.name == "hard"

    session.flap()
    assert not session.select_difficulty("easy")
    assert session.difficulty.name == "hard"

    with pytest.raises(KeyError):
        session.select_difficulty("nightmare")


def test_menu_hovers_the_bird(session: GameSession) -> None:
    for _ in range(40):
        session.update()
        assert abs(session.bird.y - BIRD_START_Y) <= 10
    assert session.tick == 40
    assert session.mode == Mode.MENU


def test_crash_records_best_and_offers_name_entry(session: GameSession) -> None:
    session.flap()
    session.score = 5
    _run_until(session, lambda: session.landed)

    assert session.new_record
    assert session.best == 5
    assert session.scoreboard.best == 5

    session.flap()
    assert session.mode == Mode.MENU
    assert session.pending_score == 5

    entry = session.submit_name("  Zed  ")
    assert entry.name == "Zed"
    assert entry.score == 5
    assert session.pending_score is None
    assert [e.score for e in session.scoreboard.entries()] == [5]
    assert session.submit_name("again") is None


def test_lower_score_keeps_best(session: GameSession) -> None:
    session.scoreboard.record_best(9)
    session.best = 9
    session.flap()
    session.score = 3
    _run_until(session, lambda: session.landed)
    assert not session.new_record
    assert session.best == 9


def test_new_run_discards_pending_name_entry(session: GameSession) -> None:
    session.flap()
    _run_until(session, lambda: session.landed)
    session.flap()
    assert session.pending_score == 0

    session.flap()
    assert session.mode == Mode.PLAYING
    assert session.pending_score is None
    assert session.score == 0
    assert session.pipes == []


def test_skip_name(session: GameSession) -> None:
    session.pending_score = 3
    session.skip_name()
    assert session.pending_score is None
    assert session.scoreboard.entries() == []


def test_flush_best_keeps_abandoned_run(session: GameSession) -> None:
    session.flap()
    session.score = 7
    session.flush_best()
    assert session.best == 7
    assert session.scoreboard.best == 7


def _target_y(session: GameSession) -> float:
    for p in session.pipes:
        if p.right >= session.bird.x:
            return p.top + session.difficulty.gap / 2
    return 300


def test_long_autoplay_keeps_invariants(session: GameSession) -> None:
    runs = 0
    for _ in range(6000):
        if session.mode == Mode.MENU:
            session.flap()
            runs += 1
        elif session.mode == Mode.CRASHED:
            if session.landed:
                session.flap()
            else:
                session.update()
            continue

        bird = session.bird
        if bird.y + bird.h / 2 > _target_y(session) + 10 and bird.vy >= 0:
            session.flap()

        passed_before = {id(p) for p in session.pipes if p.passed}
        score_before = session.score
        session.drain_events()
        session.update()
        events = session.drain_events()

        assert bird.vy <= MAX_FALL_SPEED
        for p in session.pipes:
            assert p.top >= 0 and p.bottom >= 0

        newly_passed = [p for p in session.pipes if p.passed and id(p) not in passed_before]
        assert session.score - score_before == len(newly_passed) == events.count(Event.SCORE)

        hit = session.stream.collides(bird.box) or bird.bottom >= GROUND_LEVEL
        assert hit == (session.mode == Mode.CRASHED)

    assert runs >= 1
