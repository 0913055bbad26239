"""Strategy-table heat maps for the blackjack policies.

Public data builders return NumPy matrices that can be used
programmatically or passed to the plot helpers:

    build_basic_strategy_matrix()        — (28, 10) action codes from the fixed table
    build_adaptive_matrix(table, ...)    — (action codes, max weight) from a StrategyTable

Public plot functions render matplotlib figures:

    plot_action_heatmap(codes, title, ...)      — one panel of action codes
    plot_basic_strategy_heatmap(...)            — convenience fixed-table wrapper
    plot_adaptive_heatmaps(table, ...)          — 1×2 figure: greedy action + confidence
    plot_strategy_comparison(table, ...)        — 1×2 figure: fixed table vs learned table

Matrix convention:
    Rows   : hand buckets in index order (see bucket_labels()).
    Cols   : dealer buckets A, 10, 9, ..., 2.
    Values : action index 0=HIT, 1=STAND, 2=DOUBLE_DOWN, 3=SPLIT;
             np.nan = no decision is reachable from that cell.
"""

from __future__ import annotations

import matplotlib
import matplotlib.axes
import matplotlib.colors
import matplotlib.figure
import matplotlib.image
import matplotlib.pyplot as plt
import numpy as np

from blackjack_sim.config import DEALER_BUCKETS, INITIAL_BUCKETS
from blackjack_sim.engine.actions import Action
from blackjack_sim.engine.cards import RANK_ACE, RANK_TEN
from blackjack_sim.engine.hand import HandCategory
from blackjack_sim.policies.adaptive import StrategyTable
from blackjack_sim.policies.basic_strategy import basic_strategy_action

# ─── Constants ────────────────────────────────────────────────────────────────

DEALER_LABELS: list[str] = ["A", "10"] + [str(v) for v in range(9, 1, -1)]
ACTION_LETTERS: dict[int, str] = {
    Action.HIT.index: "H",
    Action.STAND.index: "S",
    Action.DOUBLE_DOWN.index: "D",
    Action.SPLIT.index: "P",
}
_NAN_COLOR: str = "#cccccc"
_ACTION_COLORS: list[str] = ["#2ca02c", "#d62728", "#1f77b4", "#ff7f0e"]

_HARD_TOTALS: list[int] = [17, 16, 15, 14, 13, 12, 11, 10, 9, 8]
_SOFT_TOTALS: list[int] = [20, 19, 18, 17, 16, 15, 14, 13]


def bucket_labels(is_initial: bool = True) -> list[str]:
    """Row labels for the initial (28) or subsequent (18) hand buckets.

    Examples:
        >>> bucket_labels()[:2]
        ['A,A', '10,10']
        >>> bucket_labels(is_initial=False)[0]
        'H≥17'
    """
    hard = ["H≥17"] + [f"H{t}" for t in _HARD_TOTALS[1:-1]] + ["H≤8"]
    soft = [f"S{t}" for t in _SOFT_TOTALS]
    if not is_initial:
        return hard + soft
    pairs = ["A,A", "10,10"] + [f"{v},{v}" for v in range(9, 1, -1)]
    return pairs + hard + soft


# ─── Colormaps ────────────────────────────────────────────────────────────────


def _make_action_cmap() -> matplotlib.colors.ListedColormap:
    """Green=HIT, red=STAND, blue=DOUBLE_DOWN, orange=SPLIT, grey=absent."""
    cmap = matplotlib.colors.ListedColormap(_ACTION_COLORS)
    cmap.set_bad(color=_NAN_COLOR)
    return cmap


def _make_weight_cmap() -> matplotlib.colors.Colormap:
    cmap = matplotlib.colormaps["viridis"].copy()
    cmap.set_bad(color=_NAN_COLOR)
    return cmap


_ACTION_CMAP: matplotlib.colors.Colormap = _make_action_cmap()
_WEIGHT_CMAP: matplotlib.colors.Colormap = _make_weight_cmap()


# ─── Data builders ────────────────────────────────────────────────────────────


def _pair_state(bucket: int) -> tuple[HandCategory, int, int]:
    """(category, total, pair_rank) of the pair addressed by an initial bucket."""
    if bucket == 0:
        return HandCategory.PAIR, 12, RANK_ACE
    if bucket == 1:
        return HandCategory.PAIR, 20, RANK_TEN
    value = 11 - bucket
    return HandCategory.PAIR, 2 * value, value - 2


def build_basic_strategy_matrix() -> np.ndarray:
    """Return the fixed table's initial-decision actions as a (28, 10) matrix.

    Every cell is filled: pairs use their rank, hard rows use the row's
    representative total (17 for "≥17", 8 for "≤8"), soft rows their total.
    Splitting and doubling are assumed affordable.

    Returns:
        float64 array of action indices, shape (INITIAL_BUCKETS, DEALER_BUCKETS).
    """
    matrix = np.full((INITIAL_BUCKETS, DEALER_BUCKETS), np.nan)
    for bucket in range(INITIAL_BUCKETS):
        if bucket < 10:
            category, total, pair_rank = _pair_state(bucket)
        elif bucket < 20:
            category, total, pair_rank = HandCategory.HARD, _HARD_TOTALS[bucket - 10], None
        else:
            category, total, pair_rank = HandCategory.SOFT, _SOFT_TOTALS[bucket - 20], None

        for d in range(DEALER_BUCKETS):
            action = basic_strategy_action(category, total, pair_rank, d, is_initial=True)
            matrix[bucket, d] = action.index
    return matrix


def build_adaptive_matrix(
    table: StrategyTable,
    is_initial: bool = True,
) -> tuple[np.ndarray, np.ndarray]:
    """Return (greedy action index, max weight) matrices for a learned table.

    Cells still at their uniform starting weights carry no preference and
    are reported as np.nan in both matrices.

    Args:
        table:      StrategyTable to summarise.
        is_initial: Summarise the initial (28×10×4) or subsequent (18×10×2) table.

    Returns:
        (codes, weights), float64 arrays of shape (n_buckets, DEALER_BUCKETS).
    """
    weights = table.initial if is_initial else table.subsequent
    codes = np.argmax(weights, axis=-1).astype(np.float64)
    best = np.max(weights, axis=-1)

    untouched = np.all(weights == weights[..., :1], axis=-1)
    codes[untouched] = np.nan
    best = best.copy()
    best[untouched] = np.nan
    return codes, best


# ─── Rendering helper ─────────────────────────────────────────────────────────


def _render_panel(
    ax: matplotlib.axes.Axes,
    data: np.ndarray,
    row_labels: list[str],
    *,
    categorical: bool,
) -> matplotlib.image.AxesImage:
    """Render one heat-map panel onto *ax* and return the AxesImage.

    Sets axis ticks, tick labels, and cell annotations.  The caller is
    responsible for setting title, xlabel, and ylabel.
    """
    masked = np.ma.masked_invalid(data)
    if categorical:
        im = ax.imshow(masked, cmap=_ACTION_CMAP, vmin=-0.5, vmax=3.5, aspect="auto")
    else:
        im = ax.imshow(masked, cmap=_WEIGHT_CMAP, vmin=0.0, vmax=1.0, aspect="auto")

    ax.set_xticks(range(DEALER_BUCKETS))
    ax.set_xticklabels(DEALER_LABELS, fontsize=8)
    ax.set_yticks(range(len(row_labels)))
    ax.set_yticklabels(row_labels, fontsize=7)

    for r in range(data.shape[0]):
        for c in range(data.shape[1]):
            val = data[r, c]
            if np.isnan(val):
                continue
            if categorical:
                text = ACTION_LETTERS[int(val)]
                text_color = "white"
            else:
                text = f"{val:.2f}"
                text_color = "black" if val > 0.6 else "white"
            ax.text(
                c,
                r,
                text,
                ha="center",
                va="center",
                fontsize=6 if not categorical else 7,
                color=text_color,
                fontweight="bold",
            )

    return im


def _finish(fig: matplotlib.figure.Figure, show: bool, save_path: str | None) -> None:
    plt.tight_layout()
    if save_path is not None:
        fig.savefig(save_path, bbox_inches="tight", dpi=120)
    if show:
        plt.show()


# ─── Public plot functions ────────────────────────────────────────────────────


def plot_action_heatmap(
    codes: np.ndarray,
    title: str,
    *,
    is_initial: bool = True,
    show: bool = True,
    save_path: str | None = None,
) -> matplotlib.figure.Figure:
    """Plot a single matrix of action codes.

    Args:
        codes:      (n_buckets, 10) action indices; NaN = absent.
        title:      Figure title.
        is_initial: Selects the row labels.
        show:       If True, call plt.show() after rendering.
        save_path:  If not None, save the figure to this path before showing.

    Returns:
        matplotlib.figure.Figure.
    """
    fig, ax = plt.subplots(figsize=(6, 9 if is_initial else 6))
    fig.suptitle(title, fontsize=12, fontweight="bold")
    _render_panel(ax, codes, bucket_labels(is_initial), categorical=True)
    ax.set_xlabel("Dealer up-card", fontsize=9)
    ax.set_ylabel("Player hand", fontsize=9)
    _finish(fig, show, save_path)
    return fig


def plot_basic_strategy_heatmap(
    *,
    show: bool = True,
    save_path: str | None = None,
) -> matplotlib.figure.Figure:
    """Convenience: render the fixed table's initial decisions."""
    return plot_action_heatmap(
        build_basic_strategy_matrix(),
        "Basic Strategy  (first decision)",
        show=show,
        save_path=save_path,
    )


def plot_adaptive_heatmaps(
    table: StrategyTable,
    *,
    is_initial: bool = True,
    show: bool = True,
    save_path: str | None = None,
) -> matplotlib.figure.Figure:
    """Plot a learned table as a 1×2 figure: greedy action and its weight.

    Args:
        table:      StrategyTable of a (trained) AdaptivePolicy.
        is_initial: Plot the initial or the subsequent table.
        show:       If True, call plt.show().
        save_path:  If not None, save to path.

    Returns:
        matplotlib.figure.Figure.
    """
    codes, best = build_adaptive_matrix(table, is_initial)
    labels = bucket_labels(is_initial)
    which = "first decision" if is_initial else "later decisions"

    fig, (ax_act, ax_w) = plt.subplots(1, 2, figsize=(12, 9 if is_initial else 6))
    fig.suptitle(f"Adaptive Policy  ({which})", fontsize=13, fontweight="bold")

    _render_panel(ax_act, codes, labels, categorical=True)
    im_w = _render_panel(ax_w, best, labels, categorical=False)

    ax_act.set_title("Greedy action", fontsize=10)
    ax_w.set_title("Max weight", fontsize=10)
    for ax in (ax_act, ax_w):
        ax.set_xlabel("Dealer up-card", fontsize=9)
    ax_act.set_ylabel("Player hand", fontsize=9)
    plt.colorbar(im_w, ax=ax_w, label="weight", fraction=0.046, pad=0.04)

    _finish(fig, show, save_path)
    return fig


def plot_strategy_comparison(
    table: StrategyTable,
    *,
    show: bool = True,
    save_path: str | None = None,
) -> matplotlib.figure.Figure:
    """Side-by-side first-decision actions: basic strategy vs learned table.

    Returns:
        matplotlib.figure.Figure with 2 subplot axes.
    """
    basic = build_basic_strategy_matrix()
    learned, _ = build_adaptive_matrix(table, is_initial=True)
    labels = bucket_labels(True)

    fig, axes = plt.subplots(1, 2, figsize=(12, 9))
    fig.suptitle("Blackjack Strategy Comparison", fontsize=14, fontweight="bold")

    for ax, data, title in zip(axes, (basic, learned), ("Basic strategy", "Adaptive (greedy)")):
        _render_panel(ax, data, labels, categorical=True)
        ax.set_title(title, fontsize=10, fontweight="bold")
        ax.set_xlabel("Dealer up-card", fontsize=9)
    axes[0].set_ylabel("Player hand", fontsize=9)

    _finish(fig, show, save_path)
    return fig


def agreement_rate(table: StrategyTable) -> float:
    """Fraction of learned initial cells whose greedy action matches basic strategy.

    Untouched cells are excluded; returns 0.0 when nothing has been learned.
    """
    basic = build_basic_strategy_matrix()
    learned, _ = build_adaptive_matrix(table, is_initial=True)
    mask = ~np.isnan(learned)
    if not mask.any():
        return 0.0
    return float(np.mean(basic[mask] == learned[mask]))


# ─── Entry point ──────────────────────────────────────────────────────────────

if __name__ == "__main__":
    import sys

    from blackjack_sim.analysis.simulator import make_policy, train_adaptive

    n_games = int(sys.argv[1]) if len(sys.argv) > 1 else 20_000
    print(f"Training adaptive policy for {n_games:,} games …")
    policy = make_policy("adaptive", seed=0)
    train_adaptive(policy, n_games)

    print("Generating strategy heat maps …")
    plot_basic_strategy_heatmap(show=False, save_path="basic_strategy.png")
    plot_adaptive_heatmaps(policy.table, show=False, save_path="adaptive_initial.png")
    plot_adaptive_heatmaps(
        policy.table, is_initial=False, show=False, save_path="adaptive_subsequent.png"
    )
    plot_strategy_comparison(policy.table, show=False, save_path="strategy_comparison.png")
    print(f"Agreement with basic strategy: {agreement_rate(policy.table):.1%}")
    print("Saved: basic_strategy.png, adaptive_initial.png, adaptive_subsequent.png, "
          "strategy_comparison.png")
