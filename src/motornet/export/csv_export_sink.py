import io

import pandas as pd

from .export_sink import ExportSink
from ..utils.logger.logger import Logger

XYZ = ["x_nm", "y_nm", "z_nm"]


class CsvExportSink(ExportSink):
    """One CSV file per dataset."""

    folder_name = "data_export"

    def _to_bytes(self, df: pd.DataFrame) -> bytes:
        buffer = io.StringIO()
        df.to_csv(buffer, index=False)
        return buffer.getvalue().encode("utf-8")

    def dataframes(self):
        """(filename stem, DataFrame) for every collected dataset."""
        frames = []
        for name, pts in self.points.items():
            frames.append((f"{name}_points", pd.DataFrame(pts, columns=XYZ)))
        for name, pts in self.paths.items():
            df = pd.DataFrame(pts, columns=XYZ)
            df.insert(0, "step", range(len(df)))
            frames.append((f"{name}_path", df))
        for name, (origins, directions) in self.vector_fields.items():
            df = pd.DataFrame(origins, columns=XYZ)
            df["u"] = directions[:, 0]
            df["v"] = directions[:, 1]
            df["w"] = directions[:, 2]
            frames.append((f"{name}_field", df))
        for name, xy in self.xy_series.items():
            xlabel, ylabel = self.xy_labels.get(name, ("x", "y"))
            frames.append((f"{name}_series", pd.DataFrame(xy, columns=[xlabel, ylabel])))
        return frames

    def generate_export(self):
        files = []
        for stem, df in self.dataframes():
            Logger.log(f"CSV export: {stem} ({len(df)} rows)")
            files.append((f"{stem}.csv", self._to_bytes(df)))
        return files
