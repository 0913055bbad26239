"""Interactive Plotly strategy lookup tool for the blackjack policies.

Public functions:

    build_basic_lookup_figure()
        — Interactive first-decision table from basic strategy.
    build_adaptive_lookup_figure(table, is_initial)
        — Interactive learned table: greedy action plus every slot weight on hover.
    build_comparison_figure(table)
        — 1×2 grid: basic strategy vs adaptive greedy action.
    save_lookup_html(fig, path)
        — Export any figure to a self-contained HTML file.

Hover over any cell to see the hand bucket, dealer up-card, action and
(for learned tables) the raw weights.  Figures open in a browser via
``fig.show()`` or embed in Jupyter notebooks and the Streamlit dashboard.
"""

from __future__ import annotations

import numpy as np
import plotly.graph_objects as go
from plotly.subplots import make_subplots

from blackjack_sim.analysis.heat_maps import (
    ACTION_LETTERS,
    DEALER_LABELS,
    bucket_labels,
    build_adaptive_matrix,
    build_basic_strategy_matrix,
)
from blackjack_sim.engine.actions import Action
from blackjack_sim.policies.adaptive import StrategyTable

# ─── Constants ────────────────────────────────────────────────────────────────

# Discrete 4-step colorscale over action indices 0..3:
# HIT (green), STAND (red), DOUBLE_DOWN (blue), SPLIT (orange).
_ACTION_COLORSCALE: list[list] = [
    [0.00, "#2ca02c"],
    [0.25, "#2ca02c"],
    [0.25, "#d62728"],
    [0.50, "#d62728"],
    [0.50, "#1f77b4"],
    [0.75, "#1f77b4"],
    [0.75, "#ff7f0e"],
    [1.00, "#ff7f0e"],
]


# ─── Hover text builders ──────────────────────────────────────────────────────


def _build_action_hover(
    codes: np.ndarray,
    row_labels: list[str],
    weights: np.ndarray | None = None,
) -> list[list[str]]:
    """Return a list-of-rows of hover strings for an action panel.

    Args:
        codes:      (n_buckets, 10) action indices, NaN = absent.
        row_labels: Hand-bucket label per row.
        weights:    Optional (n_buckets, 10, n_actions) raw weights to list.

    Returns:
        HTML hover strings (empty string for absent cells).
    """
    rows: list[list[str]] = []
    for r, label in enumerate(row_labels):
        row: list[str] = []
        for c, dealer in enumerate(DEALER_LABELS):
            val = codes[r, c]
            if np.isnan(val):
                row.append("")
                continue
            lines = [
                f"Hand: <b>{label}</b>",
                f"Dealer shows: {dealer}",
                f"Action: <b>{Action.from_index(int(val)).name}</b>",
            ]
            if weights is not None:
                for i, w in enumerate(weights[r, c]):
                    lines.append(f"{Action.from_index(i).name}: {w:.4f}")
            row.append("<br>".join(lines))
        rows.append(row)
    return rows


# ─── Trace builder ─────────────────────────────────────────────────────────────


def _make_action_trace(
    codes: np.ndarray,
    row_labels: list[str],
    hover_text: list[list[str]],
    *,
    name: str,
    showscale: bool = True,
) -> go.Heatmap:
    """Build one go.Heatmap trace of action codes.

    NaN values are converted to None so Plotly renders them as blank cells.
    The first row is drawn at the top, matching the matplotlib panels.
    """
    z = [[None if np.isnan(v) else v for v in row] for row in codes.tolist()]
    letters = [["" if np.isnan(v) else ACTION_LETTERS[int(v)] for v in row] for row in codes.tolist()]
    return go.Heatmap(
        z=z,
        x=DEALER_LABELS,
        y=row_labels,
        colorscale=_ACTION_COLORSCALE,
        zmin=-0.5,
        zmax=3.5,
        text=hover_text,
        customdata=letters,
        texttemplate="%{customdata}",
        hovertemplate="%{text}<extra></extra>",
        showscale=showscale,
        colorbar={
            "title": "Action",
            "tickvals": [a.index for a in Action],
            "ticktext": [a.name for a in Action],
        },
        name=name,
    )


def _style(fig: go.Figure, title: str, height: int, width: int) -> go.Figure:
    fig.update_layout(title_text=title, title_font_size=15, height=height, width=width)
    fig.update_yaxes(autorange="reversed", title_text="Player hand")
    fig.update_xaxes(title_text="Dealer up-card")
    return fig


# ─── Public figure builders ───────────────────────────────────────────────────


def build_basic_lookup_figure() -> go.Figure:
    """Build an interactive figure of basic strategy's first decisions.

    Returns:
        go.Figure with one heatmap trace (28 rows × 10 dealer columns).
    """
    codes = build_basic_strategy_matrix()
    labels = bucket_labels(True)
    fig = go.Figure(
        _make_action_trace(codes, labels, _build_action_hover(codes, labels), name="Basic")
    )
    return _style(fig, "Basic Strategy Lookup — first decision", height=760, width=620)


def build_adaptive_lookup_figure(table: StrategyTable, is_initial: bool = True) -> go.Figure:
    """Build an interactive figure of a learned table's greedy actions.

    Hover text lists every slot weight of the cell, so the sampling
    distribution EXPLOIT mode would use can be read off directly.

    Args:
        table:      StrategyTable of an AdaptivePolicy.
        is_initial: Show the initial (28 rows) or subsequent (18 rows) table.

    Returns:
        go.Figure with one heatmap trace.
    """
    codes, _ = build_adaptive_matrix(table, is_initial)
    weights = table.initial if is_initial else table.subsequent
    labels = bucket_labels(is_initial)
    fig = go.Figure(
        _make_action_trace(
            codes, labels, _build_action_hover(codes, labels, weights), name="Adaptive"
        )
    )
    which = "first decision" if is_initial else "later decisions"
    return _style(
        fig, f"Adaptive Strategy Lookup — {which}", height=760 if is_initial else 540, width=620
    )


def build_comparison_figure(table: StrategyTable) -> go.Figure:
    """Build a 1×2 interactive comparison: basic strategy vs learned table.

    Returns:
        go.Figure with 2 heatmap traces in a 1×2 subplot layout.
    """
    basic = build_basic_strategy_matrix()
    learned, _ = build_adaptive_matrix(table, is_initial=True)
    labels = bucket_labels(True)

    fig = make_subplots(
        rows=1,
        cols=2,
        subplot_titles=["Basic strategy", "Adaptive (greedy)"],
        horizontal_spacing=0.10,
    )
    fig.add_trace(
        _make_action_trace(basic, labels, _build_action_hover(basic, labels), name="Basic"),
        row=1,
        col=1,
    )
    fig.add_trace(
        _make_action_trace(
            learned,
            labels,
            _build_action_hover(learned, labels, table.initial),
            name="Adaptive",
            showscale=False,
        ),
        row=1,
        col=2,
    )
    _style(fig, "Blackjack Strategy Comparison", height=760, width=1100)
    return fig


# ─── HTML export ───────────────────────────────────────────────────────────────


def save_lookup_html(fig: go.Figure, path: str) -> None:
    """Save a Plotly figure to a self-contained HTML file.

    Plotly JS is loaded from the CDN so the file itself remains compact.
    """
    fig.write_html(path, include_plotlyjs="cdn")


# ─── Entry point ───────────────────────────────────────────────────────────────

if __name__ == "__main__":
    import sys

    from blackjack_sim.analysis.simulator import make_policy, train_adaptive

    n_games = int(sys.argv[1]) if len(sys.argv) > 1 else 20_000
    print(f"Training adaptive policy for {n_games:,} games …")
    policy = make_policy("adaptive", seed=0)
    train_adaptive(policy, n_games)

    print("Building interactive lookup figures …")
    save_lookup_html(build_basic_lookup_figure(), "basic_lookup.html")
    save_lookup_html(build_adaptive_lookup_figure(policy.table), "adaptive_lookup.html")
    save_lookup_html(build_comparison_figure(policy.table), "strategy_comparison_lookup.html")
    print("Saved: basic_lookup.html, adaptive_lookup.html, strategy_comparison_lookup.html")
