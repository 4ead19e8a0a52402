#!/usr/bin/env python3
"""
Simple demo script showing landscape evolution and its diagnostics.
"""

import numpy as np
from py_erosion.core import ErosionModel, EngineOptions, SimulationParameters, TerrainPreset


def main():
    """Run both terrain presets and print their relief statistics."""
    print("Py-Erosion Landscape Evolution Demo")
    print("=" * 40)

    size = 65
    steps = 100
    params = SimulationParameters(rain=100, erosion_k=0.005, deposition_d=0.003,
                                  threshold_t=20, uplift_u=10)

    for preset in TerrainPreset:
        print(f"\n{preset.value.upper()} preset:")
        print("-" * 30)

        model = ErosionModel(size, params.replace(), preset=preset, seed=2024,
                             engine_options=EngineOptions(hillslope_diffusion=True))
        initial = model.calculate_stats()
        print(f"  Initial relief: {initial.max_relief:.1f}")

        model.run(steps)
        stats = model.calculate_stats()

        print(f"  Steps run: {model.steps}")
        print(f"  Relief: {stats.max_relief:.1f}")
        print(f"  Mean elevation: {stats.mean_elevation:.1f}")
        print(f"  Drainage density: {stats.drainage_density:.3f}")
        print(f"  Hack exponent: {stats.hack_slope_exponent}")
        print(f"  Concavity: {stats.concavity_index}")

        river = model.get_river_stats()
        print(f"  Main channel length: {len(river.path)} cells")

        # Show drainage area distribution
        bins = [1, 10, 100, 1000, 10000]
        hist, _ = np.histogram(model.grid.q, bins=bins)
        print("  Drainage area distribution:")
        for i in range(len(bins) - 1):
            bar = '#' * int(hist[i] / max(hist) * 20)
            print(f"    {bins[i]:5d}-{bins[i+1]:5d}: {bar} ({hist[i]})")


if __name__ == "__main__":
    main()
