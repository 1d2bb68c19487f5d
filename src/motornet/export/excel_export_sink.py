from io import BytesIO

import pandas as pd

from .csv_export_sink import CsvExportSink
from ..utils.logger.logger import Logger


class ExcelExportSink(CsvExportSink):
    """Single workbook with one sheet per dataset."""

    folder_name = "data_export"

    def __init__(self, filename="motornet_data.xlsx"):
        super().__init__()
        self.filename = filename

    def generate_export(self):
        frames = self.dataframes()
        if not frames:
            return []
        Logger.log("Creating in-memory Excel file")
        buffer = BytesIO()
        with pd.ExcelWriter(buffer, engine="openpyxl") as writer:
            for stem, df in frames:
                # Excel caps sheet names at 31 characters.
                df.to_excel(writer, index=False, sheet_name=stem[:31])
                Logger.log(f"Wrote sheet {stem[:31]} ({len(df)} rows)")
        return [(self.filename, buffer.getvalue())]
