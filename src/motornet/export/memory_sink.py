from .export_sink import ExportSink


class MemoryExportSink(ExportSink):
    """Keeps datasets in memory only; nothing is written."""

    def generate_export(self):
        return []
