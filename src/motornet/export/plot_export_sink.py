import io

import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt

from .export_sink import ExportSink
from ..utils.logger.logger import Logger


class PlotExportSink(ExportSink):
    """
    matplotlib figures: one line plot per xy series and one 3D plot per
    connected path.
    """

    folder_name = "image_export"

    def __init__(self, dpi=150):
        super().__init__()
        self.dpi = dpi

    def _render(self, fig):
        buffer = io.BytesIO()
        fig.savefig(buffer, format="png", dpi=self.dpi, bbox_inches="tight")
        plt.close(fig)
        return buffer.getvalue()

    def generate_export(self):
        files = []
        for name, xy in self.xy_series.items():
            fig, ax = plt.subplots(figsize=(6, 4))
            ax.plot(xy[:, 0], xy[:, 1], marker="o")
            xlabel, ylabel = self.xy_labels.get(name, ("x", "y"))
            ax.set_xlabel(xlabel)
            ax.set_ylabel(ylabel)
            ax.set_title(name.replace("_", " "))
            ax.grid(True, alpha=0.3)
            files.append((f"{name}.png", self._render(fig)))
            Logger.log(f"Plot export: {name}.png ({len(xy)} points)")

        for name, pts in self.paths.items():
            fig = plt.figure(figsize=(6, 6))
            ax = fig.add_subplot(projection="3d")
            ax.plot(pts[:, 0], pts[:, 1], pts[:, 2], linewidth=1)
            ax.set_xlabel("x (nm)")
            ax.set_ylabel("y (nm)")
            ax.set_zlabel("z (nm)")
            ax.set_title(name.replace("_", " "))
            files.append((f"{name}_3d.png", self._render(fig)))
            Logger.log(f"Plot export: {name}_3d.png ({len(pts)} points)")
        return files
