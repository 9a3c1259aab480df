"""
Particle kinematics and thermodynamics.

Each particle is a statistically independent point mass carrying its
own pressure, temperature and a stylized specific energy:

    e = ½|v|² + P/ρ + γ·T

Per tick it reads the duct geometry and the physics snapshot, ignites
once on entering the combustion chamber, accelerates through the nozzle
from the energy released, and is recycled in place when it leaves the
duct at either end.

None of this is a conservation-law solver. The Mach estimate and the
pressure scaling only borrow the shape of the isentropic relations.
"""

import logging
import math

from .duct import COMBUSTION, NOZZLE
from .params import AMBIENT_TEMPERATURE, PhysicsParameters

logger = logging.getLogger(__name__)

PARTICLE_RADIUS = 3.0
FLAME_SIZE = 4 * PARTICLE_RADIUS
FLAME_LIFETIME = 1000.0   # [ms]

VELOCITY_BLEND = 0.1      # exponential smoothing factor toward target vx
WALL_RESTITUTION = 0.8
SPAWN_JITTER = 0.5        # half-range on spawn/recycle velocity
STEP_JITTER = 0.05        # half-range on per-tick velocity noise

COLOR_FLOOR = 50.0        # minimum gray level of unburnt particles


def _sign(v: float) -> float:
    """Sign with sign(0) == 0."""
    return float((v > 0) - (v < 0))


class Particle:
    """
    One simulated point mass.

    Two states: pre-ignition and combusted. Ignition happens once per
    pass through the duct; only recycling returns a particle to the
    pre-ignition state.
    """

    def __init__(self, x: float, y: float, vx: float, vy: float,
                 params: PhysicsParameters):
        self.x = x
        self.y = y
        self.vx = vx
        self.vy = vy
        self.pressure = params.atmospheric_pressure
        self.temperature = AMBIENT_TEMPERATURE
        self.has_combusted = False
        self.ignition_time = 0.0
        self.flame_size = 0.0
        self.energy = self.specific_energy(params)
        self.display_color = (COLOR_FLOOR, COLOR_FLOOR, 255.0)

    @classmethod
    def spawn(cls, x: float, y: float, params: PhysicsParameters,
              noise) -> "Particle":
        """New particle at (x, y) moving at inlet velocity plus jitter."""
        vx = params.inlet_velocity + noise.symmetric(SPAWN_JITTER)
        vy = noise.symmetric(SPAWN_JITTER)
        return cls(x, y, vx, vy, params)

    def specific_energy(self, params: PhysicsParameters) -> float:
        speed_sq = self.vx * self.vx + self.vy * self.vy
        return (0.5 * speed_sq
                + self.pressure / params.fluid_density
                + params.specific_heat_ratio * self.temperature)

    def mach_estimate(self, params: PhysicsParameters) -> float:
        """
        M = sqrt(2·(E_stored − e) / (γ·T))

        E_stored − e goes negative when the particle already carries more
        energy than it banked at ignition; the radicand is clamped to 0.
        """
        released = self.energy - self.specific_energy(params)
        if released < 0:
            logger.debug("Negative energy release %.3g clamped at x=%.1f",
                         released, self.x)
            released = 0.0
        return math.sqrt(2.0 * released /
                         (params.specific_heat_ratio * self.temperature))

    def update(self, duct, params: PhysicsParameters, now: float, noise):
        """
        Advance one tick.

        Parameters:
            duct: DuctGeometry queried for section, area and walls
            params: physics snapshot, constant for the whole tick
            now: simulation clock [ms], drives flame decay
            noise: NoiseSource for velocity jitter and recycling
        """
        section = duct.section(self.x)
        area = duct.local_area(self.x)
        # lookahead by the current vx, before integration
        next_area = duct.local_area(self.x + self.vx)

        if section == COMBUSTION and not self.has_combusted:
            self.ignite(params, now)

        if self.has_combusted:
            self.flame_size = self.flame_size_at(now)

        if area and next_area:
            area_ratio = next_area / area

            if section == NOZZLE and self.has_combusted:
                # supersonic branch: accelerate from released energy
                sound_speed = math.sqrt(params.specific_heat_ratio * self.temperature)
                target = self.mach_estimate(params) * sound_speed
                self.vx += (_sign(self.vx) * target - self.vx) * VELOCITY_BLEND
                self.pressure *= area_ratio ** params.specific_heat_ratio
            else:
                # subsonic branch: v·A = const
                target = (area / next_area) * abs(self.vx)
                self.vx += (_sign(self.vx) * target - self.vx) * VELOCITY_BLEND

        self.vx += noise.symmetric(STEP_JITTER)
        self.vy += noise.symmetric(STEP_JITTER)

        if not duct.is_inside(self.x, self.y):
            self.vy *= -WALL_RESTITUTION
            top = duct.top(self.x)
            bottom = duct.bottom(self.x)
            if self.y < top:
                self.y = top
            elif self.y > bottom:
                self.y = bottom

        self.x += self.vx
        self.y += self.vy

        if self.x > duct.width:
            self.recycle(0.0, params, noise)
        elif self.x < 0:
            self.recycle(duct.width, params, noise)

        self.display_color = self.color(params)

    def ignite(self, params: PhysicsParameters, now: float):
        self.temperature *= params.combustion_temperature_ratio
        self.energy *= params.combustion_energy_factor
        self.has_combusted = True
        self.ignition_time = now
        self.flame_size = FLAME_SIZE

    def flame_size_at(self, now: float) -> float:
        """Linear ramp from FLAME_SIZE down to 0 over FLAME_LIFETIME."""
        elapsed = now - self.ignition_time
        if elapsed < FLAME_LIFETIME:
            return FLAME_SIZE * (1.0 - elapsed / FLAME_LIFETIME)
        return 0.0

    def recycle(self, x: float, params: PhysicsParameters, noise):
        """Re-enter at `x` with fresh thermodynamic state; y and vy are kept."""
        self.x = x
        self.vx = params.inlet_velocity + noise.symmetric(SPAWN_JITTER)
        self.pressure = params.atmospheric_pressure
        self.temperature = AMBIENT_TEMPERATURE
        self.has_combusted = False
        self.ignition_time = 0.0
        self.flame_size = 0.0
        self.energy = self.specific_energy(params)

    def energy_ratio(self, params: PhysicsParameters) -> float:
        return self.specific_energy(params) / (self.energy * params.combustion_energy_factor)

    def color(self, params: PhysicsParameters) -> tuple[float, float, float]:
        """
        RGB in 0..255. Burnt particles go red-yellow, green fading as
        the energy ratio rises; unburnt ones are blue-tinted gray.
        """
        ratio = self.energy_ratio(params)
        if self.has_combusted:
            return (255.0, max(0.0, 255.0 * (1.0 - ratio)), 0.0)
        intensity = max(COLOR_FLOOR, 255.0 * (1.0 - ratio))
        return (intensity, intensity, 255.0)

    def __repr__(self):
        state = "combusted" if self.has_combusted else "fresh"
        return (f"Particle(x={self.x:.1f}, y={self.y:.1f}, vx={self.vx:.3f}, "
                f"T={self.temperature:.0f}, {state})")
