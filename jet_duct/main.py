#!/usr/bin/env python3
"""
Jet duct particle simulation: main entry point.

Runs:
  1. Single-particle trace through the duct (zero jitter)
  2. Population run with per-section summary
  3. Validation against hand-computed values
  4. Plots of the final state and the population history

Usage:
    jet-duct                         # full report + plots
    jet-duct --no-plots              # numbers only
    jet-duct --validate              # run validation suite
    jet-duct --animate               # live window
    jet-duct --combustion-temp-ratio 4 --seed 7
"""

import argparse
import logging
import os
import sys

from jet_duct import (
    DuctGeometry, PhysicsParameters, Particle, QuietNoise,
    Simulation, SimulationConfig, StatsSmoother, section_summary,
)
from jet_duct.duct import SECTIONS
from jet_duct.particle import FLAME_SIZE

SEPARATOR = "═" * 65


def print_header(title: str):
    print(f"\n{SEPARATOR}")
    print(f"  {title}")
    print(SEPARATOR)


def trace_particle(duct: DuctGeometry, params: PhysicsParameters,
                   y: float | None = None, dt_ms: float = 1000.0 / 60.0,
                   max_ticks: int = 10_000) -> dict:
    """
    Follow one jitter-free particle from x=0 until it recycles.

    Returns the first x seen in each section, the ignition point and
    the particle state right before and after recycling.
    """
    noise = QuietNoise()
    y = duct.center if y is None else y
    p = Particle(0.0, y, params.inlet_velocity, 0.0, params)
    initial_energy = p.energy

    entered = {}
    ignition = None
    last = None
    now = 0.0
    for tick in range(1, max_ticks + 1):
        entered.setdefault(duct.section(p.x), p.x)
        was_combusted = p.has_combusted
        now += dt_ms
        last = (p.x, p.vx, p.temperature, p.pressure)
        p.update(duct, params, now, noise)

        if p.has_combusted and not was_combusted:
            ignition = {"tick": tick, "x": last[0],
                        "temperature": p.temperature,
                        "energy_ratio": p.energy / initial_energy}
        if p.x < last[0]:
            break
    else:
        raise RuntimeError(f"Particle did not recycle within {max_ticks} ticks")

    return {
        "entered": entered,
        "ignition": ignition,
        "exit": {"x": last[0], "vx": last[1], "temperature": last[2], "pressure": last[3]},
        "recycled": p,
        "ticks": tick,
    }


def run_trace(params: PhysicsParameters, width: float, height: float):
    print_header("SINGLE PARTICLE — Trace Through The Duct")

    duct = DuctGeometry(width, height)
    trace = trace_particle(duct, params)

    print(f"\n  Duct {duct.width:.0f} x {duct.height:.0f}, "
          f"v_in = {params.inlet_velocity:.2f}, no jitter")
    print(f"\n  {'Section':<14} {'first x':>10} {'boundary':>10} {'area':>8}")
    print(f"  {'─'*45}")
    boundaries = [0.0, duct.inlet_start, duct.combustion_start,
                  duct.nozzle_start, duct.outlet]
    for name, boundary in zip(SECTIONS, boundaries):
        x = trace["entered"].get(name)
        shown = f"{x:>10.2f}" if x is not None else f"{'—':>10}"
        print(f"  {name:<14} {shown} {boundary:>10.1f} {duct.local_area(boundary):>8.2f}")

    ign = trace["ignition"]
    if ign is not None:
        print(f"\n  Ignition at x = {ign['x']:.2f} (tick {ign['tick']}): "
              f"T → {ign['temperature']:.1f} K, E × {ign['energy_ratio']:.3f}")
    out = trace["exit"]
    print(f"  Exit:  vx = {out['vx']:.2f}, T = {out['temperature']:.1f} K, "
          f"P = {out['pressure']/1e3:.3f} kPa")
    p = trace["recycled"]
    print(f"  Recycled after {trace['ticks']} ticks: x = {p.x:.1f}, "
          f"T = {p.temperature:.0f} K, combusted = {p.has_combusted}")


def run_population(sim: Simulation, ticks: int) -> dict:
    print_header("POPULATION — Per-Section Summary")

    smoother = StatsSmoother(alpha=0.1)
    history = sim.run(ticks)
    for i in range(ticks):
        smoother.update_many({
            "mean_vx": history["mean_vx"][i],
            "mean_temperature": history["mean_temperature"][i],
        })

    print(f"\n  {len(sim.particles)} particles, {ticks} ticks "
          f"({sim.time_ms/1e3:.2f} s simulated), seed = {sim.config.seed}")
    print(f"\n  {'Section':<14} {'N':>5} {'vx':>9} {'T [K]':>9} {'P [kPa]':>10} {'burnt':>7}")
    print(f"  {'─'*58}")
    for s in section_summary(sim.particles, sim.duct):
        if s.count == 0:
            print(f"  {s.section:<14} {0:>5} {'—':>9} {'—':>9} {'—':>10} {'—':>7}")
            continue
        print(f"  {s.section:<14} {s.count:>5} {s.mean_vx:>9.2f} "
              f"{s.mean_temperature:>9.1f} {s.mean_pressure/1e3:>10.3f} "
              f"{s.combusted_fraction*100:>6.1f}%")

    smoothed = smoother.values
    if smoothed:
        print(f"\n  Smoothed: vx = {smoothed['mean_vx']:.3f}, "
              f"T = {smoothed['mean_temperature']:.1f} K")
    return history


def run_validation():
    """
    Check the engine against values worked out by hand for the
    reference duct (1000 x 200) and default parameters.
    """
    print_header("VALIDATION — Reference Values")

    passed = 0
    total = 0

    def check(name, computed, expected, tol=1e-9):
        nonlocal passed, total
        total += 1
        err = abs(computed - expected) / abs(expected) if expected != 0 else abs(computed)
        ok = err < tol
        if ok:
            passed += 1
        status = "✓" if ok else "✗"
        print(f"  {status}  {name:.<45} {computed:>12.4f}  (expected {expected:.4f}, err={err:.2e})")
        return ok

    duct = DuctGeometry(1000, 200)
    params = PhysicsParameters.from_options({"atmosphericPressure": 101.325})

    print("\n  Geometry:")
    print(f"  {'─'*70}")
    check("top, pre-inlet", duct.top(50), 50.0)
    check("top, combustion", duct.top(500), 70.0)
    check("top, nozzle", duct.top(700), 60.0)
    check("bottom, nozzle", duct.bottom(700), 140.0)
    check("area, inlet", duct.local_area(200), 10.0)
    check("area, combustion", duct.local_area(500), 6.0)
    check("area, post-nozzle", duct.local_area(950), 8.0)
    check("stored atmospheric pressure", params.atmospheric_pressure, 101325.0)

    print("\n  Particle:")
    print(f"  {'─'*70}")
    p = Particle(0.0, 100.0, 2.0, 0.0, params)
    check("spawn energy", p.energy, 0.5 * 4 + 101325 / 1.225 + 1.4 * 288)
    p.ignite(params, now=0.0)
    check("flame at ignition", p.flame_size_at(0.0), FLAME_SIZE)
    check("flame at 500 ms", p.flame_size_at(500.0), FLAME_SIZE / 2)
    check("flame at 1000 ms", p.flame_size_at(1000.0), 0.0)

    trace = trace_particle(duct, params)
    ign = trace["ignition"]
    check("ignition temperature", ign["temperature"], 864.0)
    check("ignition energy factor", ign["energy_ratio"], 1.1)
    check("inlet entry x", trace["entered"]["inlet"], 126.0)
    check("recycled temperature", trace["recycled"].temperature, 288.0)
    check("recycled x", trace["recycled"].x, 0.0)

    print("\n  Determinism (seed 42, 300 ticks):")
    print(f"  {'─'*70}")
    runs = []
    for _ in range(2):
        sim = Simulation(SimulationConfig(particle_count=50, seed=42))
        sim.run(300)
        runs.append(sim.state_arrays())
    drift = float(abs(runs[0]["x"] - runs[1]["x"]).max() + abs(runs[0]["y"] - runs[1]["y"]).max())
    check("max trajectory difference", drift, 0.0)

    print(f"\n  Result: {passed}/{total} checks passed.")
    if passed == total:
        print("  All validations passed ✓")
    else:
        print(f"  ⚠ {total - passed} check(s) failed!")

    return passed == total


def generate_plots(sim: Simulation, history: dict, output_dir: str = "output"):
    """Save the final particle state and the population history."""
    import matplotlib
    matplotlib.use("Agg")
    from jet_duct.plots import plot_particles, plot_history

    os.makedirs(output_dir, exist_ok=True)
    print_header(f"GENERATING PLOTS → {output_dir}/")

    fig, _, _ = plot_particles(sim)
    fig.savefig(f"{output_dir}/particles.png", dpi=150, bbox_inches="tight")
    print(f"  ✓ particles.png")

    fig = plot_history(history)
    fig.savefig(f"{output_dir}/history.png", dpi=150, bbox_inches="tight")
    print(f"  ✓ history.png")

    print(f"\n  All plots saved to {output_dir}/")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Jet engine duct particle simulation"
    )
    parser.add_argument("--validate", action="store_true",
                        help="Run validation suite only")
    parser.add_argument("--no-plots", action="store_true",
                        help="Skip plot generation")
    parser.add_argument("--animate", action="store_true",
                        help="Open a live animation window")
    parser.add_argument("--verbose", "-v", action="store_true",
                        help="Debug logging")

    geom = parser.add_argument_group("duct & population")
    geom.add_argument("--width", type=float, default=1000.0)
    geom.add_argument("--height", type=float, default=200.0)
    geom.add_argument("--particles", type=int, default=150)
    geom.add_argument("--ticks", type=int, default=600)
    geom.add_argument("--seed", type=int, default=None)
    geom.add_argument("--output-dir", default="output")

    phys = parser.add_argument_group("physics")
    phys.add_argument("--inlet-velocity", type=float, dest="inletVelocity")
    phys.add_argument("--fluid-density", type=float, dest="fluidDensity")
    phys.add_argument("--atmospheric-pressure", type=float, dest="atmosphericPressure",
                      help="[kPa]")
    phys.add_argument("--specific-heat-ratio", type=float, dest="specificHeatRatio")
    phys.add_argument("--combustion-temp-ratio", type=float, dest="combustionTempRatio")
    phys.add_argument("--combustion-energy", type=float, dest="combustionEnergy")
    return parser


def physics_options(args) -> dict:
    keys = ("inletVelocity", "fluidDensity", "atmosphericPressure",
            "specificHeatRatio", "combustionTempRatio", "combustionEnergy")
    return {k: getattr(args, k) for k in keys if getattr(args, k) is not None}


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if args.validate:
        success = run_validation()
        sys.exit(0 if success else 1)

    try:
        if args.ticks < 0:
            raise ValueError(f"--ticks must be >= 0, got {args.ticks}")
        params = PhysicsParameters.from_options(physics_options(args))
        config = SimulationConfig(
            width=args.width, height=args.height,
            particle_count=args.particles, seed=args.seed, params=params,
        )
        sim = Simulation(config)
    except ValueError as e:
        print(f"  ✗ {e}", file=sys.stderr)
        sys.exit(2)

    if args.animate:
        import matplotlib.pyplot as plt
        from jet_duct.plots import animate
        anim = animate(sim)  # noqa: F841  must stay referenced while shown
        plt.show()
        return

    run_trace(params, args.width, args.height)
    history = run_population(sim, args.ticks)
    run_validation()

    if not args.no_plots:
        generate_plots(sim, history, args.output_dir)

    print(f"\n{SEPARATOR}")
    print("  Done.")
    print(SEPARATOR)


if __name__ == "__main__":
    main()
