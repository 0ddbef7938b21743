from __future__ import annotations

import logging
from datetime import datetime, timedelta

import pandas as pd
import plotly.express as px
import plotly.graph_objects as go
import streamlit as st

from abstats import (
    VariantObservation,
    analyze_test_results,
    calculate_bayesian_ab,
    calculate_test_metrics,
    optimize_traffic_split,
    planned_duration,
)
from abstats.config import load_settings
from abstats.data_generator import daily_summary, generate_experiment_data, summarize_experiment_data
from abstats.log import setup_logging
from abstats.random_utils import make_rng

settings = load_settings()
setup_logging(settings.log_level)
logger = logging.getLogger(__name__)

st.set_page_config(page_title="A/B Test Analyzer", layout="wide")

st.title("A/B Test Analyzer")
st.caption("Significance, power, sample size and a Monte Carlo read-out for conversion tests.")


with st.sidebar:
    st.header("Experiment")

    mode = st.radio("Mode", ["Enter counts", "Simulate traffic"], index=0)
    confidence_level = st.select_slider(
        "Confidence level",
        options=[0.90, 0.95, 0.99],
        value=settings.confidence_level if settings.confidence_level in (0.90, 0.95, 0.99) else 0.95,
    )
    baseline = st.number_input("Baseline conversion", min_value=0.0, max_value=1.0, value=0.10, step=0.01, format="%.4f")
    daily_traffic = st.number_input("Daily traffic", min_value=0, value=500, step=50)
    start_date = st.date_input("Start date", value=datetime.now().date() - timedelta(days=7))

    if mode == "Enter counts":
        control_visitors = st.number_input("Control visitors", min_value=0, value=1000, step=10)
        control_conversions = st.number_input("Control conversions", min_value=0, value=100, step=1)
        variant_visitors = st.number_input("Variant visitors", min_value=0, value=1000, step=10)
        variant_conversions = st.number_input("Variant conversions", min_value=0, value=130, step=1)
    else:
        uplift = st.number_input("True relative uplift", min_value=-1.0, max_value=5.0, value=0.20, step=0.05, format="%.2f")
        visitors_per_arm = st.number_input("Visitors per arm", min_value=50, max_value=500_000, value=2000, step=50)
        seed = st.text_input("Seed (optional)", value="")

    run = st.button("Analyse", type="primary")


def render_results(control: VariantObservation, variant: VariantObservation, df: pd.DataFrame | None = None):
    res = analyze_test_results(
        control,
        variant,
        confidence_level=confidence_level,
        baseline_conversion_rate=baseline or None,
    )
    metrics = calculate_test_metrics(
        control, variant, datetime.combine(start_date, datetime.min.time()), float(daily_traffic)
    )
    bayes = calculate_bayesian_ab(
        control.visitors,
        control.conversions,
        variant.visitors,
        variant.conversions,
        samples=settings.bayes_samples,
        rng=make_rng(seed.strip()) if mode == "Simulate traffic" and seed.strip() else None,
    )
    rec = res.recommendation

    st.subheader("Results")

    c1, c2, c3, c4 = st.columns(4)
    c1.metric("Control conversion", f"{res.control.conversion_rate*100:.2f}%", f"{control.conversions}/{control.visitors}")
    c2.metric("Variant conversion", f"{res.treatment.conversion_rate*100:.2f}%", f"{variant.conversions}/{variant.visitors}")
    c3.metric("Absolute lift", f"{res.absolute_improvement:.2f} pp")
    c4.metric("Relative lift", f"{res.relative_improvement:+.2f}%")

    c5, c6, c7, c8 = st.columns(4)
    c5.metric("p-value", f"{res.p_value:.4f}")
    c6.metric("z-score", f"{res.z_score:.3f}")
    c7.metric("Significant?", "Yes" if res.is_significant else "No")
    c8.metric("Observed power", f"{res.current_power*100:.1f}%")

    st.write(
        f"**{res.confidence_level:.0f}% confidence interval (variant − control):**",
        f"[{res.confidence_interval.lower*100:.2f}, {res.confidence_interval.upper*100:.2f}] pp",
    )

    body = f"**{rec.action.upper()}** ({rec.confidence:.0f}% confidence): {rec.message}"
    if rec.action == "winner":
        st.success(body)
    elif rec.action == "stop":
        st.error(body)
    else:
        st.warning(body)
    st.markdown("\n".join(f"- {step}" for step in rec.next_steps))

    b1, b2, b3 = st.columns(3)
    b1.metric("P(variant beats control)", f"{bayes.probability_to_beat_control*100:.1f}%")
    b2.metric("Expected loss", f"{bayes.expected_loss*100:.3f} pp")
    b3.metric("Risk of choosing wrong", f"{bayes.risk_of_choosing_wrong*100:.1f}%")

    left, right = st.columns(2)

    with left:
        st.markdown("#### Conversion rates")
        conv_df = pd.DataFrame(
            {
                "arm": ["control", "variant"],
                "conversion_rate": [res.control.conversion_rate, res.treatment.conversion_rate],
            }
        )
        fig = px.bar(conv_df, x="arm", y="conversion_rate", text=conv_df["conversion_rate"].map(lambda v: f"{v*100:.2f}%"))
        fig.update_layout(yaxis_tickformat=",.0%", height=360)
        st.plotly_chart(fig, use_container_width=True)

    with right:
        st.markdown("#### Confidence interval (difference)")
        diff = res.treatment.conversion_rate - res.control.conversion_rate
        fig2 = go.Figure()
        fig2.add_trace(
            go.Scatter(
                x=[res.confidence_interval.lower, res.confidence_interval.upper],
                y=[0, 0],
                mode="lines",
                line=dict(width=8),
                name="CI",
            )
        )
        fig2.add_trace(go.Scatter(x=[diff], y=[0], mode="markers", marker=dict(size=14), name="Observed lift"))
        fig2.update_layout(xaxis_title="Lift (variant − control)", yaxis_visible=False, height=360)
        fig2.update_xaxes(tickformat=",.2%")
        st.plotly_chart(fig2, use_container_width=True)

    st.markdown("#### Planning")
    p1, p2, p3, p4 = st.columns(4)
    p1.metric("Required per variant", f"{res.sample_size_required:,}" if res.sample_size_required else "n/a")
    duration = planned_duration(res.sample_size_required, float(daily_traffic))
    if duration is None:
        p2.metric("Estimated duration", "n/a")
    else:
        p2.metric("Estimated duration", "never" if duration == float("inf") else f"{duration} days")
    p3.metric("Running for", f"{metrics.test_duration_days} days")
    p4.metric("Overall conversion", f"{metrics.overall_conversion_rate*100:.2f}%")

    if baseline > 0 and res.relative_improvement != 0:
        plan = optimize_traffic_split(
            baseline,
            abs(res.relative_improvement) / 100,
            float(daily_traffic),
            settings.max_test_days,
            power=settings.statistical_power,
            confidence_level=settings.confidence_level,
        )
        st.write(
            f"Suggested split: **{plan.split[0]:.0f}/{plan.split[1]:.0f}** "
            f"for {plan.sample_size:,} visitors in about {plan.estimated_days} days."
        )

    if df is not None:
        st.markdown("#### Cumulative conversion rate over time")
        daily = daily_summary(df)
        fig3 = px.line(daily, x="date", y="cum_conversion_rate", color="arm", markers=True)
        fig3.update_layout(yaxis_tickformat=",.1%", height=340)
        st.plotly_chart(fig3, use_container_width=True)

        st.download_button(
            label="Download simulated visits (CSV)",
            data=df.to_csv(index=False).encode("utf-8"),
            file_name="experiment_data.csv",
            mime="text/csv",
        )


if run:
    try:
        if mode == "Enter counts":
            render_results(
                VariantObservation(int(control_visitors), int(control_conversions)),
                VariantObservation(int(variant_visitors), int(variant_conversions)),
            )
        else:
            df = generate_experiment_data(
                baseline_conversion=float(baseline),
                relative_uplift=float(uplift),
                visitors_per_arm=int(visitors_per_arm),
                start_date=datetime.combine(start_date, datetime.min.time()),
                seed=seed.strip() or None,
            )
            observations = summarize_experiment_data(df)
            render_results(observations["control"], observations["variant"], df)
    except ValueError as exc:
        logger.warning("rejected input: %s", exc)
        st.error(str(exc))
