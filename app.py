"""Blackjack Policy Simulator — Streamlit Dashboard.

Four-tab interactive dashboard for exploring the blackjack policies:
  Tab 1 — Strategy Tables      (matplotlib + Plotly, basic vs learned table)
  Tab 2 — Policy Comparison    (Monte Carlo EV of basic / random / adaptive)
  Tab 3 — Bankroll Analysis    (payout distribution, risk of ruin, survival)
  Tab 4 — Adaptive Training    (success-rate curve, learned-table report)

Run:
    streamlit run app.py
"""

from __future__ import annotations

import contextlib
import io

import matplotlib

matplotlib.use("Agg")  # must be set before any other matplotlib imports

import streamlit as st

# ─── Page config ──────────────────────────────────────────────────────────────

st.set_page_config(
    page_title="Blackjack Policy Simulator",
    page_icon="🃏",
    layout="wide",
)

# ─── Lazy imports (inside functions to keep startup fast) ─────────────────────


@st.cache_resource
def _load_analysis_modules():
    """Import heavy analysis modules once (cached for the process lifetime)."""
    from blackjack_sim.analysis.bankroll import (
        BANKROLL_LEVELS,
        adjustment_coefficient,
        compute_session_survival,
        print_bankroll_report,
        required_bankroll,
        risk_of_ruin,
        summarize_payouts,
    )
    from blackjack_sim.analysis.heat_maps import (
        agreement_rate,
        plot_adaptive_heatmaps,
        plot_basic_strategy_heatmap,
        plot_strategy_comparison,
    )
    from blackjack_sim.analysis.plotly_lookup import (
        build_adaptive_lookup_figure,
        build_basic_lookup_figure,
        build_comparison_figure,
    )
    from blackjack_sim.analysis.simulator import make_policy, simulate_games
    from blackjack_sim.analysis.strategy_report import (
        print_adaptive_summary,
        print_policy_comparison,
        print_training_summary,
    )

    return {
        "BANKROLL_LEVELS": BANKROLL_LEVELS,
        "summarize_payouts": summarize_payouts,
        "adjustment_coefficient": adjustment_coefficient,
        "risk_of_ruin": risk_of_ruin,
        "required_bankroll": required_bankroll,
        "compute_session_survival": compute_session_survival,
        "print_bankroll_report": print_bankroll_report,
        "agreement_rate": agreement_rate,
        "plot_basic_strategy_heatmap": plot_basic_strategy_heatmap,
        "plot_adaptive_heatmaps": plot_adaptive_heatmaps,
        "plot_strategy_comparison": plot_strategy_comparison,
        "build_basic_lookup_figure": build_basic_lookup_figure,
        "build_adaptive_lookup_figure": build_adaptive_lookup_figure,
        "build_comparison_figure": build_comparison_figure,
        "make_policy": make_policy,
        "simulate_games": simulate_games,
        "print_policy_comparison": print_policy_comparison,
        "print_training_summary": print_training_summary,
        "print_adaptive_summary": print_adaptive_summary,
    }


@st.cache_resource
def _train(n_games: int, seed: int, source: str):
    """Train an adaptive policy and cache it (keyed on its arguments)."""
    from blackjack_sim.analysis.simulator import make_policy, train_adaptive

    policy = make_policy("adaptive", seed)
    training = train_adaptive(policy, n_games, seed=seed + 1, source=source)
    return policy, training


@st.cache_data
def _simulate(name: str, n_games: int, seed: int, source: str):
    """Simulate a fixed policy and cache the result."""
    from blackjack_sim.analysis.simulator import make_policy, simulate_games

    return simulate_games(make_policy(name, seed), n_games, seed=seed, source=source,
                          return_payouts=True)


# ─── Sidebar controls ─────────────────────────────────────────────────────────

with st.sidebar:
    st.title("🃏 Blackjack Policy Simulator")
    st.markdown("---")

    source = st.selectbox(
        "Card source",
        options=["deck", "shoe"],
        format_func=lambda v: "Fresh 52-card deck" if v == "deck" else "Infinite shoe",
        index=0,
    )
    seed = int(st.number_input("Seed", min_value=0, value=42, step=1))

    n_training_games = st.slider(
        "Adaptive training games",
        min_value=5_000,
        max_value=200_000,
        value=50_000,
        step=5_000,
    )
    run_training = st.button("Train Adaptive Policy", type="primary")

    st.markdown("---")
    n_eval_games = st.slider(
        "Evaluation games per policy",
        min_value=2_000,
        max_value=100_000,
        value=20_000,
        step=2_000,
    )

    st.markdown("---")
    st.caption("Engine → Policies → Analysis")

# ─── Adaptive training result ─────────────────────────────────────────────────

adaptive = None
training = None
if run_training or "adaptive_cached" in st.session_state:
    with st.spinner(f"Training adaptive policy ({n_training_games:,} games) …"):
        adaptive, training = _train(n_training_games, seed, source)
    st.session_state["adaptive_cached"] = True
    st.sidebar.success(
        f"Training done — final success rate: {training.final_success_rate:.4f}"
    )

# ─── Tabs ─────────────────────────────────────────────────────────────────────

tab1, tab2, tab3, tab4 = st.tabs(
    [
        "Strategy Tables",
        "Policy Comparison",
        "Bankroll Analysis",
        "Adaptive Training",
    ]
)

m = _load_analysis_modules()

# ── Tab 1: Strategy Tables ────────────────────────────────────────────────────

with tab1:
    st.header("Strategy Tables")
    st.caption(
        "Rows = player hand bucket | Cols = dealer up-card | "
        "H = HIT, S = STAND, D = DOUBLE DOWN, P = SPLIT, Grey = not yet learned"
    )

    st.subheader("Basic Strategy — first decision")
    st.plotly_chart(m["build_basic_lookup_figure"](), use_container_width=True)
    with st.expander("Static heat map"):
        st.pyplot(m["plot_basic_strategy_heatmap"](show=False))

    st.markdown("---")

    if adaptive is not None:
        st.subheader("Basic vs Adaptive (greedy)")
        st.metric("Agreement with basic strategy", f"{m['agreement_rate'](adaptive.table):.1%}")
        st.plotly_chart(m["build_comparison_figure"](adaptive.table), use_container_width=True)

        st.subheader("Adaptive — later decisions")
        st.plotly_chart(
            m["build_adaptive_lookup_figure"](adaptive.table, is_initial=False),
            use_container_width=True,
        )
        with st.expander("Static heat maps"):
            st.pyplot(m["plot_strategy_comparison"](adaptive.table, show=False))
            st.pyplot(m["plot_adaptive_heatmaps"](adaptive.table, show=False))
    else:
        st.info("Press **Train Adaptive Policy** in the sidebar to see the learned table.")

# ── Tab 2: Policy Comparison ──────────────────────────────────────────────────

with tab2:
    st.header("Policy Comparison")
    st.caption("Net result per game in betting units (net cash / minimum bet).")

    import pandas as pd

    with st.spinner(f"Simulating {n_eval_games:,} games per policy …"):
        results = {name: _simulate(name, n_eval_games, seed, source) for name in ("basic", "random")}
        if adaptive is not None:
            from blackjack_sim.policies.adaptive import Mode

            previous_mode = adaptive.mode
            adaptive.mode = Mode.GREEDY
            try:
                results["adaptive"] = m["simulate_games"](
                    adaptive, n_eval_games, seed=seed, source=source, return_payouts=True
                )
            finally:
                adaptive.mode = previous_mode

    rows = [
        {
            "Policy": name,
            "EV / game": f"{res.mean_ev:+.4f}",
            "CI Low": f"{res.ci_95_low:+.4f}",
            "CI High": f"{res.ci_95_high:+.4f}",
            "Win rate": f"{res.win_rate:.3f}",
            "House edge %": f"{res.house_edge_pct:+.2f}",
            "W / L / P": f"{res.n_wins} / {res.n_losses} / {res.n_pushes}",
        }
        for name, res in results.items()
    ]
    st.dataframe(pd.DataFrame(rows), use_container_width=True, hide_index=True)
    if adaptive is None:
        st.info("Train the adaptive policy to add it to the comparison.")

    buf = io.StringIO()
    with contextlib.redirect_stdout(buf):
        m["print_policy_comparison"](results)
    st.code(buf.getvalue(), language=None)

# ── Tab 3: Bankroll Analysis ──────────────────────────────────────────────────

with tab3:
    st.header("Bankroll Analysis")
    st.caption(
        "Risk of ruin from the policy's simulated payout distribution "
        "(3:2 naturals, doubled and split stakes), not a normal approximation."
    )

    policy_name = st.selectbox("Policy", options=list(results.keys()), index=0)
    sim = results[policy_name]
    dist = m["summarize_payouts"](sim.payouts)

    st.subheader("Payout Distribution")
    col1, col2, col3, col4 = st.columns(4)
    col1.metric("Edge / round", f"{dist.mean:+.4f}")
    col2.metric("Std dev", f"{dist.std:.4f}")
    col3.metric("Naturals", f"{dist.p_natural:.2%}")
    col4.metric("|net| ≥ 2 units", f"{dist.p_multi_stake:.2%}")

    dist_df = pd.DataFrame({"Net (units)": dist.values, "P": dist.probs})
    st.bar_chart(dist_df, x="Net (units)", y="P")

    st.markdown("---")
    st.subheader("Risk of Ruin")

    coefficient = m["adjustment_coefficient"](dist)
    if coefficient == 0.0:
        st.info("Edge ≤ 0: every bankroll is eventually ruined.")
    else:
        ror_rows = [
            {"Bankroll (units)": br, "P(ruin)": f"{m['risk_of_ruin'](dist, br):.4%}"}
            for br in m["BANKROLL_LEVELS"]
        ]
        ror_rows += [
            {
                "Bankroll (units)": round(req.required_bankroll, 1),
                "P(ruin)": f"{1.0 - req.survival_prob:.0%} (required for {req.survival_prob:.0%})",
            }
            for req in (m["required_bankroll"](dist, sp) for sp in (0.90, 0.95, 0.99))
        ]
        st.dataframe(pd.DataFrame(ror_rows), use_container_width=True, hide_index=True)

    st.markdown("---")
    st.subheader("Session Survival")

    bankroll_units = st.slider("Bankroll (units)", min_value=10, max_value=500, value=100, step=10)
    session_length = st.slider("Session length (games)", min_value=100, max_value=5000,
                               value=1000, step=100)
    survival = m["compute_session_survival"](
        dist, sorted({*m["BANKROLL_LEVELS"], float(bankroll_units)}), session_length
    )
    chosen = next(s for s in survival if s.bankroll == bankroll_units)
    col1, col2 = st.columns(2)
    col1.metric("P(survive session)", f"{chosen.survival_prob:.1%}")
    col2.metric("Mean final bankroll", f"{chosen.mean_final:.1f} units")

    st.markdown("---")
    st.subheader("Full Bankroll Report (stdout capture)")
    buf = io.StringIO()
    with contextlib.redirect_stdout(buf):
        m["print_bankroll_report"](dist, survival=survival, label=policy_name)
    st.code(buf.getvalue(), language=None)

# ── Tab 4: Adaptive Training ──────────────────────────────────────────────────

with tab4:
    st.header("Adaptive Training")

    if adaptive is not None and training is not None:
        st.caption(
            f"Success rate per {training.window:,}-game window "
            "(a hand succeeds when it returns at least its own stake)."
        )
        curve = pd.DataFrame(
            {
                "Games": [(i + 1) * training.window for i in range(len(training.success_rates))],
                "Success rate": training.success_rates,
            }
        ).set_index("Games")
        st.line_chart(curve)

        for section_fn, arg, label in [
            (m["print_training_summary"], training, "Training Summary"),
            (m["print_adaptive_summary"], adaptive.table, "Learned Table vs Basic Strategy"),
        ]:
            st.subheader(label)
            buf = io.StringIO()
            with contextlib.redirect_stdout(buf):
                section_fn(arg)
            st.code(buf.getvalue(), language=None)
    else:
        st.info("Press **Train Adaptive Policy** in the sidebar to see training results.")
