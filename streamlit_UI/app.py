"""Streamlit front-end for the slayer-task lock calculator."""

from __future__ import annotations

import sys
from pathlib import Path

import altair as alt
import streamlit as st

ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from slayer_core import (
    DEFAULT_MAX_STEPS,
    POLICIES,
    ActiveTask,
    CompletedTask,
    Creature,
    Quest,
    SimulationComputationResult,
    StartPoint,
    TaskGiver,
    WorldEra,
    compute_simulation,
    default_start_point,
    hours_frame,
    kills_frame,
    tasks_done_frame,
)

ERA_LABELS = {era: era.value for era in WorldEra}


def reset_simulation_results() -> None:
    """Clear cached results so the UI reflects new inputs."""

    st.session_state.simulation_result = None
    st.session_state.simulation_error = None


def load_era_defaults(era: WorldEra) -> None:
    """Copy the historical start of ``era`` into the input widgets."""

    start = default_start_point(era)
    st.session_state.experience_input = start.experience
    st.session_state.streak_input = start.streak
    st.session_state.points_input = start.points
    st.session_state.quests_input = sorted(quest.value for quest in start.prerequisites_done)
    st.session_state.storage_unlocked_input = start.storage_unlocked
    st.session_state.task_creature_input = start.task_state.creature.value
    if isinstance(start.task_state, ActiveTask):
        st.session_state.task_active_input = True
        st.session_state.task_giver_input = start.task_state.giver.value
        st.session_state.task_amount_input = start.task_state.amount
    else:
        st.session_state.task_active_input = False
    st.session_state.loaded_era = era


def ensure_session_state_defaults() -> None:
    """Populate Streamlit session state with expected default entries."""

    st.session_state.setdefault("simulation_result", None)
    st.session_state.setdefault("simulation_error", None)
    st.session_state.setdefault("policy_input", "minimize-lock")
    st.session_state.setdefault("era_input", WorldEra.LIMP_2026)
    st.session_state.setdefault("runs_input", 1_000)
    st.session_state.setdefault("seed_input", 42)
    st.session_state.setdefault("parallel_input", True)
    st.session_state.setdefault("task_giver_input", TaskGiver.TURAEL.value)
    st.session_state.setdefault("task_amount_input", 20)
    if "loaded_era" not in st.session_state:
        load_era_defaults(st.session_state.era_input)


def build_start_point() -> StartPoint:
    """Assemble a start point from the current widget values."""

    creature = Creature(st.session_state.task_creature_input)
    if st.session_state.task_active_input:
        task_state = ActiveTask(
            creature,
            TaskGiver(st.session_state.task_giver_input),
            int(st.session_state.task_amount_input),
        )
    else:
        task_state = CompletedTask(creature)
    return StartPoint(
        experience=int(st.session_state.experience_input),
        prerequisites_done=frozenset(Quest(name) for name in st.session_state.quests_input),
        streak=int(st.session_state.streak_input),
        points=int(st.session_state.points_input),
        task_state=task_state,
        storage_unlocked=bool(st.session_state.storage_unlocked_input),
    )


def render_start_inputs() -> None:
    """Render the starting-character controls."""

    with st.container(border=True):
        st.markdown("**Starting character**")
        era = st.selectbox(
            "World era",
            options=list(WorldEra),
            format_func=ERA_LABELS.get,
            key="era_input",
            on_change=reset_simulation_results,
        )
        if era is not st.session_state.loaded_era:
            load_era_defaults(era)

        col1, col2, col3 = st.columns(3)
        col1.number_input("Slayer experience", min_value=0, step=1000, key="experience_input")
        col2.number_input("Task streak", min_value=0, step=1, key="streak_input")
        col3.number_input("Slayer points", min_value=0, step=10, key="points_input")
        st.multiselect(
            "Completed quests",
            options=[quest.value for quest in Quest],
            key="quests_input",
        )
        st.checkbox("Task storage unlocked", key="storage_unlocked_input")

        st.markdown("**Current task**")
        task_col1, task_col2, task_col3, task_col4 = st.columns([1.6, 1.0, 0.8, 0.8])
        task_col1.selectbox(
            "Creature",
            options=[creature.value for creature in Creature],
            key="task_creature_input",
        )
        task_col2.selectbox(
            "Task-giver",
            options=[giver.value for giver in TaskGiver],
            key="task_giver_input",
        )
        task_col3.number_input("Amount", min_value=1, step=1, key="task_amount_input")
        task_col4.checkbox("Active", key="task_active_input")


def render_simulation_configuration() -> bool:
    """Render policy and Monte Carlo controls and return whether a run was requested."""

    with st.container(border=True):
        st.markdown("**Simulation settings**")
        st.selectbox(
            "Policy",
            options=sorted(POLICIES),
            key="policy_input",
            on_change=reset_simulation_results,
        )
        sim_col1, sim_col2 = st.columns(2)
        sim_col1.number_input(
            "Monte Carlo runs",
            min_value=1,
            max_value=200_000,
            step=100,
            key="runs_input",
        )
        sim_col2.number_input("Random seed", min_value=0, step=1, key="seed_input")
        st.checkbox("Use worker processes", key="parallel_input")
        return st.button("Run simulation", type="primary")


def run_simulation() -> None:
    """Run the simulation with the current configuration."""

    st.session_state.simulation_error = None
    st.session_state.simulation_result = None
    try:
        start = build_start_point()
        with st.spinner("Simulating runs..."):
            result = compute_simulation(
                st.session_state.policy_input,
                start=start,
                era=st.session_state.era_input,
                runs=int(st.session_state.runs_input),
                seed=int(st.session_state.seed_input),
                parallel=bool(st.session_state.parallel_input),
                max_steps=DEFAULT_MAX_STEPS,
            )
        st.session_state.simulation_result = result
    except Exception as exc:  # surface contract violations and bad input to the user
        st.session_state.simulation_error = str(exc)


def render_hours_histogram(result: SimulationComputationResult) -> None:
    chart_data = hours_frame(result.report)
    if chart_data.empty:
        st.caption("No successful runs, skipping the time distribution.")
        return
    histogram = alt.Chart(chart_data).mark_bar(
        color="#6366f1",
        opacity=0.9,
        cornerRadiusTopLeft=2,
        cornerRadiusTopRight=2,
    ).encode(
        x=alt.X(
            "bin_start:Q",
            title="Hours until success",
            axis=alt.Axis(labelFontSize=11, titleFontSize=12, format=".0f"),
        ),
        x2="bin_end:Q",
        y=alt.Y(
            "probability:Q",
            title="Probability",
            axis=alt.Axis(format=".0%", labelFontSize=11, titleFontSize=12),
        ),
        tooltip=[
            alt.Tooltip("bin_start:Q", title="From (h)", format=".1f"),
            alt.Tooltip("bin_end:Q", title="To (h)", format=".1f"),
            alt.Tooltip("probability:Q", title="Probability", format=".2%"),
        ],
    ).properties(height=240)
    histogram = histogram.configure_view(strokeOpacity=0)
    histogram = histogram.configure_axis(gridColor="#e2e8f0")
    st.altair_chart(histogram, use_container_width=True)


def render_simulation_summary(result: SimulationComputationResult) -> None:
    """Render report metrics, the time histogram, and breakdown tables.

    Parameters
    ----------
    result:
        Dataclass bundle returned by ``compute_simulation``.
    """

    report = result.report
    with st.container(border=True):
        st.markdown("**Monte Carlo results**")
        cols = st.columns(3)
        cols[0].metric("Success rate", f"{report.success_rate * 100:.2f}%")
        cols[1].metric("Median hours", f"{report.success_hours.median:.1f}")
        cols[2].metric("Avg tasks received", f"{report.average_tasks_received:.1f}")

        point_cols = st.columns(3)
        point_cols[0].metric("Median min points", f"{report.success_min_points.median:.0f}")
        point_cols[1].metric("Median end points", f"{report.success_end_points.median:.0f}")
        point_cols[2].metric(
            "Max points when locked",
            f"{report.max_points_locked}",
            help=f"Median over failed runs: {report.failure_max_points.median:.0f}",
        )

        drops = report.drops
        drop_cols = st.columns(4)
        drop_cols[0].metric("Dust battlestaff", drops.dust_battlestaff)
        drop_cols[1].metric("Mist battlestaff", drops.mist_battlestaff)
        drop_cols[2].metric("Imbued heart", drops.imbued_heart)
        drop_cols[3].metric("Eternal gem", drops.eternal_gem)

        if report.step_limit_runs:
            st.warning(f"{report.step_limit_runs} runs hit the step limit.")
        st.caption(
            f"{result.runs} runs of {result.policy_name} ({result.era.value}) "
            f"in {result.compute_seconds:.2f} s"
        )

        render_hours_histogram(result)

        st.markdown("**Average tasks done per task-giver (successful runs)**")
        st.dataframe(tasks_done_frame(report), hide_index=True, use_container_width=True)
        st.markdown("**Total kills**")
        st.dataframe(kills_frame(report), hide_index=True, use_container_width=True)


def main() -> None:
    """Entry point used by Streamlit."""

    st.set_page_config(page_title="Slayer Lock Calculator", layout="centered")
    ensure_session_state_defaults()
    st.title("Slayer lock calculator")

    render_start_inputs()
    if render_simulation_configuration():
        run_simulation()

    if st.session_state.simulation_error:
        st.error(f"Simulation failed: {st.session_state.simulation_error}")
    elif isinstance(st.session_state.simulation_result, SimulationComputationResult):
        render_simulation_summary(st.session_state.simulation_result)


if __name__ == "__main__":
    main()
