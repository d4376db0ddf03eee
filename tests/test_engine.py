"""
Tests for the scheduler, the sculpting engine and its settings.
"""

import time

import pytest
import numpy as np
from py_sculpt.config import Settings
from py_sculpt.core.alea_prng import AleaPRNG
from py_sculpt.core.autonomous_walker import WalkerOptions, WalkerPolicy
from py_sculpt.core.engine import EngineOptions, SculptEngine
from py_sculpt.core.height_field import HeightField
from py_sculpt.core.mountain_lifecycle import MountainOptions
from py_sculpt.core.path_carver import PathOptions
from py_sculpt.core.scheduler import Delay, Scheduler
from py_sculpt.core.stroke_mountains import StrokeMountainOptions


class TestDelay:
    """Test the resumable countdown."""

    def test_countdown(self):
        delay = Delay(1.0)

        assert not delay.advance(0.4)
        assert delay.remaining == pytest.approx(0.6)
        assert delay.advance(0.6)
        assert delay.done
        assert delay.remaining == 0.0

    def test_reset(self):
        delay = Delay(1.0)
        delay.advance(2.0)
        delay.reset(0.5)

        assert not delay.done
        assert delay.seconds == 0.5

    def test_zero_delay_is_immediately_done(self):
        assert Delay(0).advance(0.0)

    def test_negative_delay_is_invalid(self):
        with pytest.raises(ValueError):
            Delay(-1.0)


class TestScheduler:
    """Test tick ordering and time scaling."""

    def test_frame_tasks_run_before_sequences(self):
        scheduler = Scheduler()
        calls = []

        class Sequence:
            def advance(self, dt):
                calls.append(("sequence", dt))

        scheduler.add_sequence(Sequence())
        scheduler.add_frame_task(lambda dt: calls.append(("first", dt)))
        scheduler.add_frame_task(lambda dt: calls.append(("second", dt)))

        scheduler.tick(0.25)

        assert calls == [("first", 0.25), ("second", 0.25), ("sequence", 0.25)]
        assert scheduler.frame_count == 1

    def test_time_scale(self):
        scheduler = Scheduler(time_scale=2.0)
        seen = []
        scheduler.add_frame_task(seen.append)

        scheduler.tick(0.5)
        scheduler.tick(0.5)

        assert seen == [1.0, 1.0]
        assert scheduler.elapsed == pytest.approx(2.0)


class TestSculptEngine:
    """Test component wiring and driving."""

    @pytest.fixture
    def options(self):
        return EngineOptions(
            mountains=MountainOptions(
                min_radius=3, max_radius=6, pause_between_mountains=0.1
            ),
            walkers=[WalkerOptions(max_brush_size=5.0)],
            roads=None,
        )

    def test_missing_field_is_fatal(self):
        with pytest.raises(ValueError):
            SculptEngine(None)

    def test_wires_components(self):
        options = EngineOptions(
            stroke_mountains=StrokeMountainOptions(),
            walkers=[
                WalkerOptions(policy=WalkerPolicy.UNCLAMPED),
                WalkerOptions(policy=WalkerPolicy.CLAMPED),
            ],
            stats_interval=1.0,
        )
        engine = SculptEngine(HeightField(128), options, prng=AleaPRNG("wiring"))

        assert len(engine.walkers) == 2
        assert engine.roads is not None
        assert engine.mountains is not None
        assert engine.stroke_mountains is not None
        assert len(engine.scheduler.frame_tasks) == 3
        assert len(engine.scheduler.sequences) == 3

    def test_run_for(self, options):
        field = HeightField(64)
        engine = SculptEngine(field, options, prng=AleaPRNG("run"))

        ticks = engine.run_for(2.0, dt=0.1)

        assert ticks == 20
        assert engine.scheduler.frame_count == 20
        assert field.heights.max() > 0.0
        assert field.heights.min() >= 0.0

    def test_seeded_runs_are_reproducible(self, options):
        first = SculptEngine(HeightField(64), options, prng=AleaPRNG("same"))
        second = SculptEngine(HeightField(64), options, prng=AleaPRNG("same"))

        first.run_for(1.0)
        second.run_for(1.0)

        np.testing.assert_array_equal(first.field.heights, second.field.heights)

    def test_background_driver(self, options):
        engine = SculptEngine(HeightField(64), options, prng=AleaPRNG("thread"))

        engine.start(frame_rate=200.0)
        assert engine.running
        time.sleep(0.2)
        snapshot = engine.field.snapshot()
        engine.stop(timeout=1.0)

        assert not engine.running
        assert engine.scheduler.frame_count > 0
        assert snapshot.shape == (64, 64)

    def test_invalid_run_arguments(self, options):
        engine = SculptEngine(HeightField(64), options, prng=AleaPRNG("args"))

        with pytest.raises(ValueError):
            engine.run_for(1.0, dt=0.0)
        with pytest.raises(ValueError):
            engine.start(frame_rate=0.0)


class TestEngineSettings:
    """Test building engine options from settings."""

    def test_from_settings(self):
        settings = Settings(
            enable_mountains=False,
            enable_stroke_mountains=True,
            enable_clamped_walker=True,
            enable_roads=False,
            time_scale=2.0,
            stats_interval=0.0,
        )

        options = EngineOptions.from_settings(settings)

        assert options.mountains is None
        assert options.stroke_mountains is not None
        assert options.roads is None
        assert [w.policy for w in options.walkers] == [
            WalkerPolicy.UNCLAMPED,
            WalkerPolicy.CLAMPED,
        ]
        assert options.time_scale == 2.0
        unclamped, clamped = options.walkers
        assert unclamped.max_brush_size == 20.0
        assert unclamped.direction_change_interval == 2.0
        assert clamped.max_brush_size == 10.0
        assert clamped.direction_change_interval == 1.0

    def test_settings_validation(self):
        with pytest.raises(ValueError):
            Settings(grid_resolution=0)

    def test_invalid_engine_options(self):
        with pytest.raises(ValueError):
            EngineOptions(time_scale=0)
