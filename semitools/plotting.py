"""
Plotting Module.
Plotly figures for the calculator pages: bin distribution of a yield record,
value histogram with specification limits, and wafer yield trend.
"""
from typing import List, Optional, Sequence

import plotly.graph_objects as go

from semitools.core.config import PlotTheme, DEFAULT_THEME, UNKNOWN_BIN_COLOR
from semitools.core.models import BinDefinition, YieldRecord, WaferDieCalculation
from semitools.analytics import yield_analysis, statistics


def apply_theme(fig: go.Figure, title: str = "", height: int = 400, theme_config: Optional[PlotTheme] = None) -> go.Figure:
    """
    Applies the standard engineering styling to any figure.
    """
    theme = theme_config or DEFAULT_THEME
    fig.update_layout(
        title=dict(text=title, font=dict(color=theme.text_color, size=18), x=0.5, xanchor='center'),
        plot_bgcolor=theme.plot_area_color,
        paper_bgcolor=theme.background_color,
        height=height,
        font=dict(color=theme.text_color),
        xaxis=dict(
            showgrid=False, zeroline=False, showline=True,
            linewidth=2, linecolor=theme.axis_color,
            title_font=dict(color=theme.text_color), tickfont=dict(color=theme.text_color)
        ),
        yaxis=dict(
            showgrid=True, gridcolor=theme.axis_color, zeroline=False, showline=True,
            linewidth=2, linecolor=theme.axis_color,
            title_font=dict(color=theme.text_color), tickfont=dict(color=theme.text_color)
        ),
        legend=dict(
            title_font=dict(color=theme.text_color), font=dict(color=theme.text_color),
            bgcolor=theme.background_color, bordercolor=theme.axis_color, borderwidth=1
        ),
        hoverlabel=dict(bgcolor="#4A4A4A", font_size=14, font_family="sans-serif")
    )
    return fig


def create_bin_distribution_figure(
    record: YieldRecord,
    bins: List[BinDefinition],
    theme_config: Optional[PlotTheme] = None
) -> go.Figure:
    """
    Bar chart of die counts per bin for one record. Counts whose bin was
    deleted are grouped into a grey 'Unknown bin' bar.
    """
    names, counts, colors, percents = [], [], [], []
    for b in bins:
        names.append(b.name)
        counts.append(yield_analysis.bin_count(record, b.id))
        colors.append(b.color)
        percents.append(yield_analysis.bin_percentage(record, b.id))

    orphaned = yield_analysis.orphaned_bin_ids(record, bins)
    if orphaned:
        orphan_ids = set(orphaned)
        orphan_count = sum(bc.count for bc in record.bin_counts if bc.bin_id in orphan_ids)
        total = yield_analysis.total_dies(record)
        names.append("Unknown bin")
        counts.append(orphan_count)
        colors.append(UNKNOWN_BIN_COLOR)
        percents.append(orphan_count / total * 100 if total else 0.0)

    fig = go.Figure(go.Bar(
        x=names,
        y=counts,
        marker_color=colors,
        text=[f"{p:.1f}%" for p in percents],
        textposition='auto',
        hovertemplate="<b>%{x}</b><br>Count: %{y}<br>%{text}<extra></extra>",
    ))
    title = f"{record.wafer_name} (Lot {record.lot_number})"
    apply_theme(fig, title=title, theme_config=theme_config)
    fig.update_layout(xaxis_title="Bin", yaxis_title="Die Count")
    return fig


def create_histogram_figure(
    values: Sequence[float],
    lsl: Optional[float] = None,
    usl: Optional[float] = None,
    title: str = "Distribution",
    theme_config: Optional[PlotTheme] = None
) -> go.Figure:
    """Histogram of the values with mean and optional LSL/USL markers."""
    theme = theme_config or DEFAULT_THEME
    fig = go.Figure()
    if len(values) == 0:
        return apply_theme(fig, title=title, theme_config=theme)

    fig.add_trace(go.Histogram(
        x=list(values),
        nbinsx=statistics.histogram_bins(values),
        marker_color=theme.bar_color,
        name="Values",
    ))

    fig.add_vline(x=statistics.mean(values), line_color=theme.mean_color, line_dash="dash",
                  annotation_text="Mean", annotation_position="top")
    if lsl is not None:
        fig.add_vline(x=lsl, line_color=theme.limit_color, annotation_text="LSL", annotation_position="top left")
    if usl is not None:
        fig.add_vline(x=usl, line_color=theme.limit_color, annotation_text="USL", annotation_position="top right")

    apply_theme(fig, title=title, theme_config=theme)
    fig.update_layout(xaxis_title="Value", yaxis_title="Frequency", bargap=0.05, showlegend=False)
    return fig


def create_yield_trend_figure(
    calculations: List[WaferDieCalculation],
    theme_config: Optional[PlotTheme] = None
) -> go.Figure:
    """Yield % per wafer in creation order, with the average as a reference line."""
    theme = theme_config or DEFAULT_THEME
    ordered = sorted(calculations, key=lambda c: c.created_at)
    fig = go.Figure(go.Scatter(
        x=[c.wafer_name for c in ordered],
        y=[c.yield_percentage for c in ordered],
        mode='lines+markers',
        line=dict(color=theme.bar_color),
        customdata=[c.lot_number for c in ordered],
        hovertemplate="<b>%{x}</b><br>Lot: %{customdata}<br>Yield: %{y:.2f}%<extra></extra>",
    ))
    if ordered:
        fig.add_hline(y=yield_analysis.average_yield(ordered), line_color=theme.mean_color,
                      line_dash="dash", annotation_text="Average")
    apply_theme(fig, title="Wafer Yield Trend", theme_config=theme)
    fig.update_layout(xaxis_title="Wafer", yaxis_title="Yield (%)")
    return fig
