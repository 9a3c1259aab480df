"""
Physics parameters for the duct simulation.

One frozen snapshot per tick. The control surface (CLI, sliders, tests)
never mutates a snapshot in place: it builds a new one through `set`,
and the simulation swaps it in between ticks.

External option names follow the control surface (camelCase), the
dataclass fields are snake_case. Atmospheric pressure arrives in kPa
and is stored in Pa.
"""

from dataclasses import dataclass, fields, replace
import logging
import math

logger = logging.getLogger(__name__)

# ambient state of freshly spawned / recycled particles
AMBIENT_TEMPERATURE = 288.0  # [K]
PRESSURE_SCALE = 1000.0      # kPa -> Pa

# external option name -> dataclass field
OPTION_FIELDS = {
    "inletVelocity": "inlet_velocity",
    "fluidDensity": "fluid_density",
    "atmosphericPressure": "atmospheric_pressure",
    "specificHeatRatio": "specific_heat_ratio",
    "combustionTempRatio": "combustion_temperature_ratio",
    "combustionEnergy": "combustion_energy_factor",
}


@dataclass(frozen=True)
class PhysicsParameters:
    """
    Process-wide physics configuration, immutable once built.

    Every field must be positive and finite. `Particle.update` divides by
    fluid_density and by specific_heat_ratio · temperature without
    checking, so validation happens here, at the boundary.
    """
    inlet_velocity: float = 2.0                 # baseline vx at the inlet
    fluid_density: float = 1.225                # [kg/m³]
    atmospheric_pressure: float = 101325.0      # [Pa], stored scale
    specific_heat_ratio: float = 1.4            # gamma
    combustion_temperature_ratio: float = 3.0   # T multiplier at ignition
    combustion_energy_factor: float = 1.1       # energy multiplier at ignition

    def __post_init__(self):
        for f in fields(self):
            value = getattr(self, f.name)
            if (isinstance(value, bool) or not isinstance(value, (int, float))
                    or not math.isfinite(value) or value <= 0):
                raise ValueError(
                    f"{f.name} must be a positive finite number, got {value!r}"
                )

    @classmethod
    def from_options(cls, options: dict) -> "PhysicsParameters":
        """Build a snapshot from control-surface options, defaults for the rest."""
        return cls().set(options)

    def set(self, options: dict) -> "PhysicsParameters":
        """
        Return a new snapshot with `options` applied.

        Keys missing from `options` keep their current value. Unknown keys
        and invalid values raise ValueError; `self` is never modified.
        """
        unknown = set(options) - set(OPTION_FIELDS)
        if unknown:
            raise ValueError(
                f"Unknown physics option(s): {', '.join(sorted(unknown))}. "
                f"Recognized: {', '.join(OPTION_FIELDS)}"
            )

        changes = {}
        for key, value in options.items():
            field_name = OPTION_FIELDS[key]
            if isinstance(value, bool):
                raise ValueError(f"{key} must be a number, got {value!r}")
            try:
                value = float(value)
            except (TypeError, ValueError):
                raise ValueError(f"{key} must be a number, got {value!r}") from None
            if field_name == "atmospheric_pressure":
                value *= PRESSURE_SCALE
            changes[field_name] = value

        updated = replace(self, **changes)
        logger.debug("Physics parameters updated: %s", changes)
        return updated

    def to_options(self) -> dict:
        """Inverse of `set`: current values in control-surface units."""
        out = {}
        for key, field_name in OPTION_FIELDS.items():
            value = getattr(self, field_name)
            if field_name == "atmospheric_pressure":
                value /= PRESSURE_SCALE
            out[key] = value
        return out
