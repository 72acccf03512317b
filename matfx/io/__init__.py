"""I/O module: Diagnostic dE/dx tables."""

from matfx.io.dedx_table import tabulate_dedx, export_dedx, plot_dedx

__all__ = ["tabulate_dedx", "export_dedx", "plot_dedx"]
