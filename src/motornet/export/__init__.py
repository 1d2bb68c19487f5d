from .export_sink import ExportSink
from .memory_sink import MemoryExportSink
from .csv_export_sink import CsvExportSink
from .excel_export_sink import ExcelExportSink
from .png_export_sink import PngExportSink
from .plot_export_sink import PlotExportSink
from .export_manager import ExportManager
from .export_request_interpreter import ExportRequestInterpreter

__all__ = [
    "ExportSink",
    "MemoryExportSink",
    "CsvExportSink",
    "ExcelExportSink",
    "PngExportSink",
    "PlotExportSink",
    "ExportManager",
    "ExportRequestInterpreter",
]
