"""
jet_duct: particle simulation of a stylized jet engine duct.

Modules:
    params      - Physics parameter snapshots (control-surface options)
    duct        - Duct geometry: sections, walls, local area
    noise       - Injectable jitter sources
    particle    - Per-particle kinematic/thermodynamic update
    simulation  - Particle arena, tick loop, parameter commits
    stats       - Per-section summaries and smoothing
    plots       - Visualization
"""

from .params import PhysicsParameters, AMBIENT_TEMPERATURE
from .duct import DuctGeometry, SECTIONS
from .noise import NoiseSource, QuietNoise
from .particle import Particle, PARTICLE_RADIUS
from .simulation import Simulation, SimulationConfig
from .stats import SectionSummary, StatsSmoother, section_summary
