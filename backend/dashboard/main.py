import logging
import os
from pathlib import Path
import sys

import streamlit as st

BACKEND_ROOT = Path(__file__).resolve().parents[1]
if str(BACKEND_ROOT) not in sys.path:
    sys.path.insert(0, str(BACKEND_ROOT))

from app.aggregate import load_summary
from app.config import load_settings

logging.basicConfig(
    level=os.getenv("WORKSHOP_LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s - %(levelname)s - %(message)s",
)

st.set_page_config(page_title="Planning Fallacy Workshop - Admin", layout="wide")
settings = load_settings()

st.title("Admin Dashboard")
st.caption("Countdown Edition - Planning Fallacy Workshop Results")

with st.spinner("Loading results..."):
    summary = load_summary(Path(settings.db_path))

stats = summary.stats

col1, col2, col3, col4 = st.columns(4)
with col1:
    st.metric("Total Participants", stats.total_participants)
with col2:
    st.metric("Avg Predicted (months)", f"{stats.avg_predicted:.1f}")
with col3:
    st.metric("Avg Actual (months)", f"{stats.avg_actual:.1f}")
with col4:
    st.metric("Perfect Predictions", stats.perfect_predictions)
    st.caption(f"{stats.share(stats.perfect_predictions)}% of participants")

if not summary.rows:
    st.info("No results yet.")

chart_col, scatter_col = st.columns(2)
with chart_col:
    st.subheader("Prediction Accuracy Distribution")
    st.caption("How participants' predictions compared to actual performance")
    st.vega_lite_chart(
        {
            "data": {
                "values": [
                    {"range": b["range"], "count": b["count"], "color": b["color"]}
                    for b in summary.distribution()
                ]
            },
            "mark": "bar",
            "encoding": {
                "x": {"field": "range", "type": "nominal", "sort": None, "title": None},
                "y": {"field": "count", "type": "quantitative", "title": "Participants"},
                "color": {"field": "color", "type": "nominal", "scale": None},
            },
        },
        use_container_width=True,
    )
    st.caption("Green: better than predicted | Amber: perfect | Red: worse than predicted")

with scatter_col:
    st.subheader("Predicted vs Actual Months")
    st.caption("Each dot represents one participant")
    pairs = summary.pairs()
    if pairs:
        st.scatter_chart(
            {
                "predicted": [p["predicted"] for p in pairs],
                "actual": [p["actual"] for p in pairs],
            },
            x="predicted",
            y="actual",
            color="#8b5cf6",
        )

st.subheader("Calibration Breakdown")
b1, b2, b3 = st.columns(3)
with b1:
    st.metric("Better Than Predicted", stats.underestimators)
    st.caption(f"({stats.share(stats.underestimators)}%) Completed more months than they thought")
with b2:
    st.metric("Perfect Calibration", stats.perfect_predictions)
    st.caption(f"({stats.share(stats.perfect_predictions)}%) Predicted exactly right")
with b3:
    st.metric("Overestimated Ability", stats.overestimators)
    st.caption(f"({stats.share(stats.overestimators)}%) Completed fewer months than predicted")

st.subheader("Individual Results")
st.dataframe(summary.table(), use_container_width=True, hide_index=True)

if summary.ignored_variants or summary.invalid_records:
    st.caption(
        f"Not shown: {summary.ignored_variants} records of other task versions, "
        f"{summary.invalid_records} records with unreadable numbers."
    )
st.caption(f"Data source: {settings.db_path}")
