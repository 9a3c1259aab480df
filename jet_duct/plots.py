"""
Visualization for the duct simulation.

Dark theme shared by every figure. Coordinates are screen-like: y grows
downwards, so axes holding the duct are inverted.
"""

import numpy as np
import matplotlib.pyplot as plt
from matplotlib.animation import FuncAnimation
from matplotlib.colors import LinearSegmentedColormap

from .duct import DuctGeometry
from .particle import PARTICLE_RADIUS

# color palette
C = {
    "blue":      "#7EC8E3",
    "red":       "#C2506A",
    "yellow":    "#eab308",
    "green":     "#22c55e",
    "purple":    "#a855f7",
    "orange":    "#f97316",
    "bg":        "#000000",
    "grid":      "#21262d",
    "zeroline":  "#30363d",
    "text":      "#c9d1d9",
    "text_sec":  "#8b949e",
    "wall":      "#ffffff",
}

# chamber glow: transparent at the ends, faint orange in between
CHAMBER_GLOW = [(0.0, 0.0), (0.2, 0.2), (0.8, 0.2), (1.0, 0.0)]
FLAME_CMAP = LinearSegmentedColormap.from_list(
    "flame", [(1.0, 200 / 255, 0.0), (1.0, 100 / 255, 0.0), (1.0, 0.0, 0.0)]
)
# flame halo layers: (radius fraction, opacity), outermost first
FLAME_LAYERS = [(1.0, 0.15), (0.6, 0.45), (0.3, 0.8)]


def _apply_theme(ax, title: str = "", xlabel: str = "", ylabel: str = ""):
    """Apply dark theme to an axis."""
    ax.set_facecolor(C["bg"])
    ax.figure.patch.set_facecolor(C["bg"])

    if title:
        ax.set_title(title, color=C["text"], fontsize=13,
                     fontfamily="sans-serif", pad=12)
    if xlabel:
        ax.set_xlabel(xlabel, color=C["text_sec"], fontsize=11)
    if ylabel:
        ax.set_ylabel(ylabel, color=C["text_sec"], fontsize=11)

    ax.tick_params(colors=C["text_sec"], labelsize=9)
    for spine in ax.spines.values():
        spine.set_color(C["zeroline"])


def _chamber_alpha(frac: float) -> float:
    """Piecewise-linear glow opacity across the chamber, frac in [0, 1]."""
    stops, alphas = zip(*CHAMBER_GLOW)
    return float(np.interp(frac, stops, alphas))


def plot_duct(duct: DuctGeometry, ax=None) -> plt.Figure:
    """Duct walls plus the combustion chamber glow."""
    if ax is None:
        fig, ax = plt.subplots(figsize=(12, 3))
    else:
        fig = ax.figure

    x, top, bottom = duct.profile(n_points=int(duct.width // 5) + 1)
    ax.plot(x, top, color=C["wall"], linewidth=2.0)
    ax.plot(x, bottom, color=C["wall"], linewidth=2.0)

    # glow drawn as thin vertical strips
    start, end = duct.combustion_start, duct.nozzle_start
    y0, y1 = duct.top(start), duct.bottom(start)
    n_strips = 40
    edges = np.linspace(start, end, n_strips + 1)
    for i in range(n_strips):
        frac = (i + 0.5) / n_strips
        ax.fill_between(edges[i:i+2], y0, y1, color=C["orange"],
                        alpha=_chamber_alpha(frac), linewidth=0)

    _apply_theme(ax)
    ax.set_xlim(0, duct.width)
    ax.set_ylim(duct.height, 0)
    ax.set_aspect("equal")
    ax.set_xticks([])
    ax.set_yticks([])

    return fig


def _marker_area(radius: float) -> np.ndarray:
    """Scatter marker area [pt²] for a radius in duct units (1 unit ≈ 1 pt)."""
    return np.pi * np.asarray(radius)**2


def _flame_offsets(state, lit):
    return np.column_stack([state["x"][lit], state["y"][lit]])


def plot_particles(sim, ax=None):
    """
    Particles colored by their display color, flame halos on top.
    Returns (figure, particle scatter, list of flame halo layers).
    """
    if ax is None:
        fig, ax = plt.subplots(figsize=(12, 3))
        plot_duct(sim.duct, ax=ax)
    else:
        fig = ax.figure

    state = sim.state_arrays()
    dots = ax.scatter(state["x"], state["y"], c=state["colors"],
                      s=_marker_area(PARTICLE_RADIUS), linewidths=0, zorder=3)

    # radial gradient approximated by concentric layers, outermost first
    lit = state["flame_size"] > 0
    flames = []
    for i, (frac, alpha) in enumerate(FLAME_LAYERS):
        layer = ax.scatter(state["x"][lit], state["y"][lit],
                           color=FLAME_CMAP(frac),
                           s=_marker_area(frac * state["flame_size"][lit]),
                           alpha=alpha, linewidths=0, zorder=4 + i)
        flames.append(layer)
    return fig, dots, flames


def plot_history(history: dict, axes=None) -> plt.Figure:
    """Population means over time: velocity, temperature, combustion."""
    if axes is None:
        fig, axes = plt.subplots(3, 1, figsize=(10, 9), sharex=True)
    else:
        fig = axes[0].figure

    t = history["t"] / 1e3

    axes[0].plot(t, history["mean_vx"], color=C["blue"], linewidth=2)
    _apply_theme(axes[0], title="Population Averages", ylabel="Mean vx")

    axes[1].plot(t, history["mean_temperature"], color=C["red"], linewidth=2)
    axes[1].fill_between(t, history["mean_temperature"], alpha=0.08, color=C["red"])
    _apply_theme(axes[1], ylabel="Mean T [K]")

    axes[2].plot(t, history["combusted_fraction"] * 100, color=C["orange"], linewidth=2)
    _apply_theme(axes[2], xlabel="Time [s]", ylabel="Combusted [%]")

    for ax in axes:
        ax.grid(True, color=C["grid"], linewidth=0.5, alpha=0.7)

    fig.tight_layout()
    return fig


def frame_updater(sim, dots, flames, label=None):
    """
    Per-frame callback for FuncAnimation: steps the simulation once and
    moves the artists returned by `plot_particles`.
    """
    def frame(_):
        sim.step()
        state = sim.state_arrays()
        dots.set_offsets(np.column_stack([state["x"], state["y"]]))
        dots.set_facecolors(state["colors"])

        lit = state["flame_size"] > 0
        offsets = _flame_offsets(state, lit)
        for layer, (frac, _alpha) in zip(flames, FLAME_LAYERS):
            layer.set_offsets(offsets)
            layer.set_sizes(_marker_area(frac * state["flame_size"][lit]))

        artists = [dots, *flames]
        if label is not None:
            label.set_text(f"t = {sim.time_ms / 1e3:6.2f} s   flames = {lit.sum():3d}")
            artists.append(label)
        return artists

    return frame


def animate(sim, frames: int | None = None, interval: float | None = None) -> FuncAnimation:
    """
    Live animation: each frame steps the simulation once and redraws.
    frames=None runs until the window is closed.
    """
    fig, ax = plt.subplots(figsize=(12, 3))
    plot_duct(sim.duct, ax=ax)
    _, dots, flames = plot_particles(sim, ax=ax)
    label = ax.text(0.01, 0.95, "", transform=ax.transAxes, color=C["text"],
                    fontsize=9, fontfamily="monospace", va="top")

    interval = sim.config.dt_ms if interval is None else interval
    return FuncAnimation(fig, frame_updater(sim, dots, flames, label),
                         frames=frames, interval=interval,
                         blit=False, cache_frame_data=False)
