from .csv_export_sink import CsvExportSink
from .excel_export_sink import ExcelExportSink
from .png_export_sink import PngExportSink
from .plot_export_sink import PlotExportSink
from ..exceptions import InvalidExportRequestError, UnsupportedExportError
from ..utils.logger.logger import Logger


class ExportRequestInterpreter:
    """Turn sink names or request strings into sink instances."""

    VALID_SINKS = {
        "csv": CsvExportSink,
        "excel": ExcelExportSink,
        "png": PngExportSink,
        "plot": PlotExportSink,
    }

    def create_sinks(self, names):
        sinks = []
        for name in names:
            key = name.strip().lower()
            if key not in self.VALID_SINKS:
                Logger.log(f"Invalid export sink: {name}", Logger.LogPriority.ERROR)
                raise UnsupportedExportError(f"Invalid export sink: '{name}'.")
            sinks.append(self.VALID_SINKS[key]())
        return sinks

    def parse_request(self, request_str: str):
        """
        Parse "export_request <sink[,sink...]> <folder>".

        Returns:
            dict with 'sinks' (instances) and 'folder_location'.
        """
        Logger.log(f"start parse_request({request_str})")
        request_str = request_str.strip()
        if not request_str.startswith("export_request"):
            raise InvalidExportRequestError("The request must start with 'export_request'")
        parts = request_str[len("export_request"):].strip().split(maxsplit=1)
        if len(parts) != 2:
            raise InvalidExportRequestError("Request must consist of exactly 2 parts: sinks, folder.")

        names = [n for n in parts[0].split(",") if n]
        folder_location = parts[1].strip()
        if not names:
            raise InvalidExportRequestError("At least one export sink must be provided.")
        if folder_location.lower() == "none":
            raise InvalidExportRequestError("Folder location cannot be 'none'.")

        sinks = self.create_sinks(names)
        Logger.log(f"Request parsed: sinks={names} folder={folder_location}")
        return {"sinks": sinks, "folder_location": folder_location}
