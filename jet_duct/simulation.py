"""
Simulation loop: a fixed population of particles in one duct.

    params (staged) ──commit at tick start──► snapshot ──► Particle.update × N

The particle list is an arena. Particles leaving the duct are recycled
in place, so the population size only changes through
`set_particle_count` or `resize`.

Parameter changes from the control surface are validated immediately
but only take effect at the next tick boundary: every particle in a
tick sees the same snapshot.
"""

from dataclasses import dataclass, field
import logging
import math
import numpy as np

from .duct import DuctGeometry
from .noise import NoiseSource
from .params import PhysicsParameters
from .particle import Particle

logger = logging.getLogger(__name__)


def _check_dt(dt_ms: float) -> float:
    """Tick length must be positive and finite; the clock never runs backwards."""
    if not math.isfinite(dt_ms) or dt_ms <= 0:
        raise ValueError(f"Tick length dt_ms must be positive and finite, got {dt_ms!r}")
    return dt_ms


@dataclass
class SimulationConfig:
    """Everything needed to build a Simulation."""
    width: float = 1000.0
    height: float = 200.0
    particle_count: int = 150
    seed: int | None = None      # None: fresh entropy
    dt_ms: float = 1000.0 / 60.0  # one animation frame
    params: PhysicsParameters = field(default_factory=PhysicsParameters)


class Simulation:
    """
    Owner of the duct, the particle arena, the physics snapshot and the
    simulation clock.

    Usage:
        sim = Simulation(SimulationConfig(seed=1))
        sim.set_params({"combustionTempRatio": 4.0})   # applied next tick
        history = sim.run(600)
    """

    def __init__(self, config: SimulationConfig | None = None,
                 noise: NoiseSource | None = None):
        self.config = config or SimulationConfig()
        if self.config.particle_count < 0:
            raise ValueError(
                f"particle_count must be >= 0, got {self.config.particle_count}"
            )
        _check_dt(self.config.dt_ms)
        self.noise = noise if noise is not None else NoiseSource(self.config.seed)
        self.duct = DuctGeometry(self.config.width, self.config.height)
        self.params = self.config.params
        self._pending: PhysicsParameters | None = None
        self.time_ms = 0.0
        self.tick = 0
        self.particles: list[Particle] = []
        self.populate(self.config.particle_count)

    # ── Population ───────────────────────────────────────────────

    def populate(self, count: int):
        """Replace the arena with `count` particles scattered inside the duct."""
        self.particles = [self._spawn_random() for _ in range(count)]
        logger.info("Populated %d particles in %.0f x %.0f duct",
                    count, self.duct.width, self.duct.height)

    def _spawn_random(self) -> Particle:
        x, y = self.duct.random_point(self.noise)
        return Particle.spawn(x, y, self.params, self.noise)

    def add_particle(self, x: float, y: float) -> Particle:
        """Spawn one particle at a given point and add it to the arena."""
        particle = Particle.spawn(x, y, self.params, self.noise)
        self.particles.append(particle)
        return particle

    def set_particle_count(self, count: int):
        """Grow or shrink the arena; surviving particles keep their state."""
        if count < 0:
            raise ValueError(f"Particle count must be >= 0, got {count}")
        current = len(self.particles)
        if count < current:
            del self.particles[count:]
        else:
            self.particles.extend(self._spawn_random() for _ in range(count - current))

    def resize(self, width: float, height: float):
        """New duct dimensions; the population is regenerated to fit."""
        self.duct.resize(width, height)
        self.populate(len(self.particles))

    # ── Parameters ───────────────────────────────────────────────

    def set_params(self, options: dict) -> PhysicsParameters:
        """
        Stage a parameter update. Raises ValueError on bad options, in
        which case nothing is staged. Successive calls before the next
        tick accumulate.
        """
        base = self._pending if self._pending is not None else self.params
        self._pending = base.set(options)
        return self._pending

    def _commit_params(self):
        if self._pending is not None:
            self.params = self._pending
            self._pending = None
            logger.info("Physics parameters committed at tick %d: %s",
                        self.tick, self.params.to_options())

    # ── Time stepping ────────────────────────────────────────────

    def step(self, dt_ms: float | None = None):
        """One tick: commit staged parameters, advance the clock, update all."""
        dt_ms = self.config.dt_ms if dt_ms is None else _check_dt(dt_ms)
        self._commit_params()
        self.time_ms += dt_ms
        self.tick += 1

        duct, params, now, noise = self.duct, self.params, self.time_ms, self.noise
        for particle in self.particles:
            particle.update(duct, params, now, noise)

    def run(self, n_ticks: int, dt_ms: float | None = None) -> dict:
        """
        Step `n_ticks` times and record population means after each tick.

        Returns dict with time-series arrays.
        """
        if n_ticks < 0:
            raise ValueError(f"n_ticks must be >= 0, got {n_ticks}")
        if dt_ms is not None:
            _check_dt(dt_ms)

        t = np.zeros(n_ticks)
        mean_vx = np.zeros(n_ticks)
        mean_temperature = np.zeros(n_ticks)
        mean_pressure = np.zeros(n_ticks)
        combusted_fraction = np.zeros(n_ticks)
        flame_count = np.zeros(n_ticks, dtype=int)

        for i in range(n_ticks):
            self.step(dt_ms)
            t[i] = self.time_ms
            if not self.particles:
                mean_vx[i] = mean_temperature[i] = mean_pressure[i] = np.nan
                continue
            vx = np.array([p.vx for p in self.particles])
            mean_vx[i] = vx.mean()
            mean_temperature[i] = np.mean([p.temperature for p in self.particles])
            mean_pressure[i] = np.mean([p.pressure for p in self.particles])
            combusted_fraction[i] = np.mean([p.has_combusted for p in self.particles])
            flame_count[i] = sum(p.flame_size > 0 for p in self.particles)

        return {
            "t": t,
            "mean_vx": mean_vx,
            "mean_temperature": mean_temperature,
            "mean_pressure": mean_pressure,
            "combusted_fraction": combusted_fraction,
            "flame_count": flame_count,
        }

    def state_arrays(self) -> dict:
        """Current particle state as arrays, for renderers."""
        n = len(self.particles)
        colors = np.zeros((n, 3))
        for i, p in enumerate(self.particles):
            colors[i] = p.display_color
        return {
            "x": np.array([p.x for p in self.particles], dtype=float),
            "y": np.array([p.y for p in self.particles], dtype=float),
            "colors": np.clip(colors / 255.0, 0.0, 1.0),
            "flame_size": np.array([p.flame_size for p in self.particles], dtype=float),
        }
