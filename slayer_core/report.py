"""Console and table renderings of a :class:`MonteCarloReport`."""

from __future__ import annotations

import numpy as np
import pandas as pd

from .data import TaskGiver
from .models import MonteCarloReport


def format_report(report: MonteCarloReport) -> list[str]:
    """Return the console summary of ``report`` as a list of lines."""

    drops = report.drops
    lines = [
        (
            f"All drops: {drops.dust_battlestaff} dust battlestaff, "
            f"{drops.mist_battlestaff} mist battlestaff, {drops.imbued_heart} imbued heart, "
            f"{drops.eternal_gem} eternal gem"
        ),
        (
            f"Number of successes: {report.successes}, {report.success_rate * 100:.3f}%, "
            f"{report.average_tasks_received:.1f} tasks received on average, "
            f"{report.success_tasks.median:.0f} tasks median on success, "
            f"{report.failure_tasks.median:.0f} tasks median on failure"
        ),
        (
            f"Max points while eventually getting locked: {report.max_points_locked} "
            f"(median {report.failure_max_points.median:.0f}), "
            f"median min points on success: {report.success_min_points.median:.0f}"
        ),
        (
            f"Time on success: {report.success_hours.minimum:.1f} h min, "
            f"{report.success_hours.median:.1f} h median, "
            f"{report.success_hours.maximum:.1f} h max, "
            f"{report.success_hours.mean:.1f} h average"
        ),
        (
            f"Median total points: {report.success_total_points.median:.0f}, "
            f"median end points: {report.success_end_points.median:.0f}"
        ),
    ]
    if report.step_limit_runs:
        lines.append(f"Runs stopped at the step limit: {report.step_limit_runs}")

    median = report.median_run
    if median is None:
        lines.append("No successful run to show.")
        return lines

    acc = median.slayer_state.accumulator
    supplies = acc.supplies
    lines.extend(
        [
            "",
            "Median simulation:",
            (
                f"{acc.total_points} total points, {median.progression.experience} total exp, "
                f"{median.progression.level} end level, {acc.hours:.1f} total hours, "
                f"{acc.tasks_completed} total tasks"
            ),
            (
                f"{supplies.time_to_gather() / 3600.0:.1f} hours spent gathering supplies, "
                f"{acc.hours:.1f} hours total"
            ),
            "",
            "Tasks done per task-giver:",
        ]
    )
    for (giver, creature), count in sorted(
        acc.tasks_done.items(), key=lambda item: (item[0][0].value, item[0][1].value)
    ):
        lines.append(f"{giver.value:10} {creature.value:22} {count}")

    lines.extend(["", "Average tasks done per task-giver:"])
    for giver in TaskGiver:
        for (task_giver, creature), average in sorted(
            report.average_tasks_done.items(), key=lambda item: item[0][1].value
        ):
            if task_giver is giver and average > 0:
                lines.append(f"{giver.value:10} {creature.value:22} {average:.1f}")

    lines.extend(["", "Total kills:"])
    for creature, kills in sorted(acc.kills.items(), key=lambda item: item[0].value):
        lines.append(f"{creature.value:22} {kills}")
    return lines


def tasks_done_frame(report: MonteCarloReport) -> pd.DataFrame:
    """Average tasks completed per giver and creature over successful runs."""

    rows = [
        {"giver": giver.value, "creature": creature.value, "average_tasks": average}
        for (giver, creature), average in report.average_tasks_done.items()
    ]
    frame = pd.DataFrame(rows, columns=["giver", "creature", "average_tasks"])
    return frame.sort_values(["giver", "average_tasks"], ascending=[True, False]).reset_index(
        drop=True
    )


def kills_frame(report: MonteCarloReport) -> pd.DataFrame:
    """Total kills per creature summed over every run."""

    frame = pd.DataFrame(
        [{"creature": creature.value, "kills": kills} for creature, kills in report.kills.items()],
        columns=["creature", "kills"],
    )
    return frame.sort_values("kills", ascending=False).reset_index(drop=True)


def hours_frame(report: MonteCarloReport, bins: int = 20) -> pd.DataFrame:
    """Histogram of successful-run hours with ``bin_start``/``bin_end``/``probability`` columns.

    Parameters
    ----------
    report:
        Aggregated report.
    bins:
        Number of equally wide bins between the fastest and slowest run.
    """

    columns = ["bin_start", "bin_end", "probability"]
    hours = report.success_hours_sample
    if not hours:
        return pd.DataFrame(columns=columns)
    low, high = min(hours), max(hours)
    if high <= low:
        high = low + 1.0
    edges = np.linspace(low, high, bins + 1, dtype=float)
    categories = pd.cut(pd.Series(hours), bins=edges, include_lowest=True, right=True)
    counts = categories.value_counts().reindex(categories.cat.categories, fill_value=0)
    total = counts.sum()
    return pd.DataFrame(
        {
            "bin_start": [interval.left for interval in counts.index],
            "bin_end": [interval.right for interval in counts.index],
            "probability": counts.values / total,
        },
        columns=columns,
    )
