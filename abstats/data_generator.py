from __future__ import annotations

from datetime import datetime, timedelta
from typing import Dict, Optional, Union

import pandas as pd

from .models import VariantObservation
from .random_utils import make_rng


ARMS = ("control", "variant")
COLUMNS = ["visitor_id", "arm", "converted", "timestamp"]


def generate_experiment_data(
    baseline_conversion: float,
    relative_uplift: float,
    visitors_per_arm: int,
    days: int = 14,
    start_date: Optional[datetime] = None,
    seed: Optional[Union[int, str]] = None,
) -> pd.DataFrame:
    """Simulate visitor-level traffic for a two-arm test.

    The variant converts at ``baseline_conversion * (1 + relative_uplift)``.
    Visits are spread uniformly over `days` days from `start_date`.

    Returns a DataFrame with columns visitor_id, arm, converted, timestamp,
    sorted by timestamp.
    """
    if not (0 <= baseline_conversion <= 1):
        raise ValueError("baseline_conversion must be between 0 and 1")
    if relative_uplift < -1:
        raise ValueError("relative_uplift must be >= -1")
    if visitors_per_arm <= 0:
        raise ValueError("visitors_per_arm must be > 0")
    if days <= 0:
        raise ValueError("days must be > 0")

    if start_date is None:
        start_date = datetime.now()
    start_date = start_date.replace(second=0, microsecond=0)

    rng = make_rng(seed)
    variant_rate = min(1.0, baseline_conversion * (1 + relative_uplift))
    rates = {"control": baseline_conversion, "variant": variant_rate}

    rows = []
    for i in range(visitors_per_arm * len(ARMS)):
        arm = ARMS[i // visitors_per_arm]
        offset = timedelta(minutes=int(rng.random() * days * 24 * 60))
        rows.append(
            {
                "visitor_id": f"visitor_{i:07d}",
                "arm": arm,
                "converted": rng.random() < rates[arm],
                "timestamp": start_date + offset,
            }
        )

    df = pd.DataFrame(rows, columns=COLUMNS)
    return df.sort_values("timestamp").reset_index(drop=True)


def summarize_experiment_data(df: pd.DataFrame) -> Dict[str, VariantObservation]:
    """Collapse visitor rows into one observation per arm."""
    grouped = df.groupby("arm")["converted"].agg(["size", "sum"])
    return {
        str(arm): VariantObservation(visitors=int(row["size"]), conversions=int(row["sum"]))
        for arm, row in grouped.iterrows()
    }


def daily_summary(df: pd.DataFrame) -> pd.DataFrame:
    """Per-day, per-arm visitors and conversions with running totals."""
    tmp = df.copy()
    tmp["date"] = pd.to_datetime(tmp["timestamp"]).dt.date
    out = (
        tmp.groupby(["date", "arm"], as_index=False)
        .agg(visitors=("converted", "size"), conversions=("converted", "sum"))
        .sort_values(["date", "arm"])
        .reset_index(drop=True)
    )
    out["conversions"] = out["conversions"].astype(int)
    out["cum_visitors"] = out.groupby("arm")["visitors"].cumsum()
    out["cum_conversions"] = out.groupby("arm")["conversions"].cumsum()
    out["cum_conversion_rate"] = out["cum_conversions"] / out["cum_visitors"]
    return out
