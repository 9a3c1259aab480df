"""
Population statistics per duct section, plus smoothing for live readouts.
"""

from dataclasses import dataclass
import numpy as np

from .duct import SECTIONS


@dataclass
class SectionSummary:
    """Population averages over one duct section."""
    section: str
    count: int
    mean_vx: float
    mean_temperature: float  # [K]
    mean_pressure: float     # [Pa]
    combusted_fraction: float


def section_summary(particles, duct) -> list[SectionSummary]:
    """One summary per section, in downstream order. Empty sections give NaN means."""
    buckets = {name: [] for name in SECTIONS}
    for p in particles:
        buckets[duct.section(p.x)].append(p)

    summaries = []
    for name in SECTIONS:
        group = buckets[name]
        if not group:
            summaries.append(SectionSummary(name, 0, np.nan, np.nan, np.nan, np.nan))
            continue
        summaries.append(SectionSummary(
            section=name,
            count=len(group),
            mean_vx=float(np.mean([p.vx for p in group])),
            mean_temperature=float(np.mean([p.temperature for p in group])),
            mean_pressure=float(np.mean([p.pressure for p in group])),
            combusted_fraction=float(np.mean([p.has_combusted for p in group])),
        ))
    return summaries


class StatsSmoother:
    """
    Exponential smoothing of named scalar readings:

        s ← s + α·(x − s)

    The first sample of each name passes through unchanged.
    NaN samples are ignored.
    """

    def __init__(self, alpha: float = 0.1):
        if not 0.0 < alpha <= 1.0:
            raise ValueError(f"alpha must be in (0, 1], got {alpha}")
        self.alpha = alpha
        self.values: dict[str, float] = {}

    def update(self, name: str, sample: float) -> float:
        if np.isnan(sample):
            return self.values.get(name, np.nan)
        if name not in self.values:
            self.values[name] = float(sample)
        else:
            self.values[name] += self.alpha * (sample - self.values[name])
        return self.values[name]

    def update_many(self, samples: dict) -> dict:
        return {name: self.update(name, value) for name, value in samples.items()}

    def reset(self):
        self.values.clear()
