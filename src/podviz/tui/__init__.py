"""Textual render adapter for the podviz dashboard."""

from .app import PodvizApp, chart_legend, create_app, plot_values, run_tui

__all__ = ["PodvizApp", "chart_legend", "create_app", "plot_values", "run_tui"]
