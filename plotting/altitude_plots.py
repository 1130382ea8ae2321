"""Plotting helpers for visualising altitude over a telemetry playback."""

from __future__ import annotations

from pathlib import Path
from typing import Sequence

import plotly.graph_objects as go
from plotly.subplots import make_subplots

from telemetry_utils.playback import WindowFrame


def plot_altitude_profile(
    frames: Sequence[WindowFrame],
    *,
    title: str = "Flight Telemetry",
    output_html: str | Path = "plotting/altitude_profile.html",
) -> Path:
    """Create a 2x1 Plotly figure of altitude and progress per window."""

    if not frames:
        raise ValueError("frames must not be empty")

    output_path = Path(output_html)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    elapsed = [frame.elapsed for frame in frames]
    # Frames without a valid conversion are drawn as gaps
    altitudes = [frame.altitude_m for frame in frames]
    hover_text = [
        f"Window {frame.window_index} ({frame.num_samples} samples)<br>"
        f"lat {frame.geodetic.lat_deg:.5f}, lon {frame.geodetic.lon_deg:.5f}<br>"
        f"{frame.status.name}"
        for frame in frames
    ]

    fig = make_subplots(
        rows=2,
        cols=1,
        subplot_titles=("Altitude", "Percent through mission"),
        shared_xaxes=True,
        row_heights=[0.75, 0.25],
    )

    fig.add_trace(
        go.Scatter(
            x=elapsed,
            y=altitudes,
            mode="markers+lines",
            name="Altitude",
            marker=dict(color="#1f77b4", size=5),
            line=dict(color="#1f77b4"),
            text=hover_text,
            connectgaps=False,
            hovertemplate="T+%{x}<br>Altitude: %{y:,} m<extra>%{text}</extra>",
        ),
        row=1,
        col=1,
    )
    fig.add_trace(
        go.Scatter(
            x=elapsed,
            y=[frame.progress_pct for frame in frames],
            name="Progress",
            line=dict(color="#2ca02c", shape="hv"),
        ),
        row=2,
        col=1,
    )

    fig.update_layout(
        height=800,
        width=1200,
        template="plotly_white",
        legend=dict(orientation="h", yanchor="bottom", y=1.02, xanchor="right", x=1),
        margin=dict(l=60, r=30, t=80, b=50),
        title=title,
    )

    fig.update_yaxes(title_text="Altitude (m)", row=1, col=1)
    fig.update_yaxes(title_text="Progress (%)", range=[0, 100], row=2, col=1)
    fig.update_xaxes(title_text="Mission time (s)", row=2, col=1)

    fig.write_html(output_path)
    return output_path
