"""
Example running a headless sculpting session and reporting the terrain.
"""

import numpy as np
from py_sculpt.config import settings
from py_sculpt.logging_config import configure_logging
from py_sculpt.core import (
    HeightField,
    SculptEngine, EngineOptions,
    analyze_field,
)

# Characters from low to high for the coarse terrain preview
_RAMP = " .:-=+*#%@"


def preview(heights, columns=64):
    """Downsample the grid into a coarse character map."""
    step = max(heights.shape[1] // columns, 1)
    coarse = heights[::step * 2, ::step]
    peak = coarse.max() or 1.0
    for row in coarse:
        print("".join(_RAMP[int(v / peak * (len(_RAMP) - 1))] for v in row))


def main():
    configure_logging()

    seed = settings.seed or "sculpt_demo"
    field = HeightField(settings.grid_resolution)
    options = EngineOptions.from_settings(settings)
    engine = SculptEngine(field, options, seed=seed)

    print("=" * 60)
    print("SCULPT DEMO")
    print("=" * 60)
    print(f"Seed: {seed}")
    print(f"Resolution: {field.width}x{field.height}")

    # Simulate a minute of frames at the configured rate
    ticks = engine.run_for(60.0, dt=1.0 / settings.frame_rate)
    print(f"Simulated {ticks} ticks")

    stats = analyze_field(field)
    print(f"\nHeight range: {stats.min_height:.3f} - {stats.max_height:.3f}")
    print(f"Mean height: {stats.mean_height:.3f}")
    print(f"Raised cells: {stats.raised_fraction:.1%}")

    if engine.mountains is not None:
        print(f"Active mountains: {len(engine.mountains.mountains)}")
        print(f"Flatten cycles: {engine.mountains.flatten_cycles}")
    if engine.roads is not None:
        print(f"Roads started: {engine.roads.paths_started}")

    print()
    preview(np.asarray(field.snapshot()))


if __name__ == "__main__":
    main()
