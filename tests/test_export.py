"""
Tests for export sinks, the export manager and request parsing.

These tests verify:
1. Datasets are collected in (n, 3) / (n, 2) arrays
2. Each sink renders the expected files
3. ExportManager lays files out in a timestamped folder
4. Request strings are parsed or rejected
"""

import io
import json
import os

import numpy as np
import pandas as pd
import pytest
from PIL import Image

from motornet.exceptions import InvalidExportRequestError, UnsupportedExportError
from motornet.export import (
    CsvExportSink, ExcelExportSink, ExportManager, ExportRequestInterpreter,
    MemoryExportSink, PlotExportSink, PngExportSink,
)
from motornet.export.metadata import export_metadata
from motornet.geometry import Point3

PNG_SIGNATURE = b"\x89PNG\r\n\x1a\n"


def _fill(sink):
    sink.emit_points("overlaps", [Point3(0, 0, 0), Point3(1, 2, 3)])
    sink.emit_connected_path("motor_path", [Point3(0, 0, 0), Point3(5, 0, 0), Point3(5, 5, 1)])
    sink.emit_vector_field("network", [[0, 0, 0], [10, 0, 0]], [[1, 0, 0], [0, 1, 0]])
    sink.emit_xy_series("persistence_vs_entropy", [(1.0, 4.2), (10.0, 3.1)])
    return sink


class TestExportSink:
    """Tests for dataset collection."""

    def test_starts_empty(self):
        assert MemoryExportSink().is_empty()

    def test_point_arrays(self):
        sink = _fill(MemoryExportSink())
        assert sink.points["overlaps"].shape == (2, 3)
        assert sink.paths["motor_path"].shape == (3, 3)
        origins, directions = sink.vector_fields["network"]
        assert origins.shape == directions.shape == (2, 3)
        assert sink.xy_series["persistence_vs_entropy"].shape == (2, 2)

    def test_memory_sink_writes_nothing(self):
        assert _fill(MemoryExportSink()).generate_export() == []

    def test_empty_point_list(self):
        sink = MemoryExportSink()
        sink.emit_points("none", [])
        assert sink.points["none"].shape == (0, 3)


class TestCsvExportSink:
    """Tests for CSV rendering."""

    def test_one_file_per_dataset(self):
        files = dict(_fill(CsvExportSink()).generate_export())
        assert set(files) == {
            "overlaps_points.csv",
            "motor_path_path.csv",
            "network_field.csv",
            "persistence_vs_entropy_series.csv",
        }

    def test_columns(self):
        files = dict(_fill(CsvExportSink()).generate_export())
        path = pd.read_csv(io.BytesIO(files["motor_path_path.csv"]))
        assert list(path.columns) == ["step", "x_nm", "y_nm", "z_nm"]
        assert list(path["step"]) == [0, 1, 2]
        field = pd.read_csv(io.BytesIO(files["network_field.csv"]))
        assert list(field.columns) == ["x_nm", "y_nm", "z_nm", "u", "v", "w"]
        assert field["v"].tolist() == [0.0, 1.0]
        series = pd.read_csv(io.BytesIO(files["persistence_vs_entropy_series.csv"]))
        assert series["y"].tolist() == pytest.approx([4.2, 3.1])

    def test_series_labels_name_columns(self):
        sink = CsvExportSink()
        sink.emit_xy_series("sweep", [(1.0, 2.0)], "persistence length (nm)", "structural entropy (nats)")
        files = dict(sink.generate_export())
        series = pd.read_csv(io.BytesIO(files["sweep_series.csv"]))
        assert list(series.columns) == ["persistence length (nm)", "structural entropy (nats)"]


class TestExcelExportSink:
    """Tests for the workbook export."""

    def test_single_workbook(self):
        files = _fill(ExcelExportSink()).generate_export()
        assert len(files) == 1
        name, content = files[0]
        assert name == "motornet_data.xlsx"
        sheets = pd.read_excel(io.BytesIO(content), sheet_name=None, engine="openpyxl")
        assert "overlaps_points" in sheets
        assert len(sheets["motor_path_path"]) == 3

    def test_series_labels_in_sheet(self):
        sink = ExcelExportSink()
        sink.emit_xy_series("sweep", [(1.0, 2.0)], "Lp (nm)", "H (nats)")
        _, content = sink.generate_export()[0]
        sheet = pd.read_excel(io.BytesIO(content), sheet_name="sweep_series", engine="openpyxl")
        assert list(sheet.columns) == ["Lp (nm)", "H (nats)"]

    def test_empty_sink(self):
        assert ExcelExportSink().generate_export() == []


class TestImageSinks:
    """Tests for Pillow and matplotlib rendering."""

    def test_png_projection(self):
        files = _fill(PngExportSink(size=200)).generate_export()
        assert len(files) == 1
        name, content = files[0]
        assert name == "network_projection.png"
        assert content.startswith(PNG_SIGNATURE)
        assert Image.open(io.BytesIO(content)).size == (200, 200)

    def test_png_empty(self):
        assert PngExportSink().generate_export() == []

    def test_single_point_png(self):
        sink = PngExportSink(size=100)
        sink.emit_points("p", [Point3(1, 1, 1)])
        assert len(sink.generate_export()) == 1

    def test_plot_files(self):
        files = dict(_fill(PlotExportSink(dpi=50)).generate_export())
        assert set(files) == {"persistence_vs_entropy.png", "motor_path_3d.png"}
        assert all(content.startswith(PNG_SIGNATURE) for content in files.values())

    def test_plot_axis_labels(self, monkeypatch):
        from matplotlib.axes import Axes

        labels = []
        monkeypatch.setattr(Axes, "set_xlabel", lambda self, text, *a, **k: labels.append(("x", text)))
        monkeypatch.setattr(Axes, "set_ylabel", lambda self, text, *a, **k: labels.append(("y", text)))
        sink = PlotExportSink(dpi=50)
        sink.emit_xy_series("sweep", [(1.0, 2.0), (3.0, 1.0)], "persistence length (nm)", "structural entropy (nats)")
        sink.generate_export()
        assert labels == [("x", "persistence length (nm)"), ("y", "structural entropy (nats)")]


class TestExportManager:
    """Tests for folder layout."""

    def test_layout(self, tmp_path):
        sinks = [_fill(CsvExportSink()), _fill(PngExportSink(size=100))]
        root, written = ExportManager().save(sinks, str(tmp_path))
        assert os.path.basename(root).startswith("export_")
        assert os.path.isfile(os.path.join(root, "data_export", "overlaps_points.csv"))
        assert os.path.isfile(os.path.join(root, "image_export", "network_projection.png"))
        assert len(written) == 5

    def test_base_is_file(self, tmp_path):
        target = tmp_path / "file.txt"
        target.write_text("x")
        with pytest.raises(ValueError):
            ExportManager().save([], str(target))

    def test_empty_sink_makes_no_folder(self, tmp_path):
        root, written = ExportManager().save([PngExportSink()], str(tmp_path))
        assert written == []
        assert os.listdir(root) == []


class TestExportRequestInterpreter:
    """Tests for request parsing."""

    def test_parse(self):
        request = ExportRequestInterpreter().parse_request("export_request csv,png /tmp/out")
        assert request["folder_location"] == "/tmp/out"
        assert [type(s) for s in request["sinks"]] == [CsvExportSink, PngExportSink]

    def test_case_insensitive(self):
        sinks = ExportRequestInterpreter().create_sinks(["Excel", " plot "])
        assert [type(s) for s in sinks] == [ExcelExportSink, PlotExportSink]

    @pytest.mark.parametrize("request_str", [
        "export csv /tmp",
        "export_request csv",
        "export_request csv none",
        "export_request , /tmp",
    ])
    def test_invalid_requests(self, request_str):
        with pytest.raises(InvalidExportRequestError):
            ExportRequestInterpreter().parse_request(request_str)

    def test_unknown_sink(self):
        with pytest.raises(UnsupportedExportError):
            ExportRequestInterpreter().create_sinks(["svg"])


class TestMetadata:
    """Tests for run metadata."""

    def test_metadata_json(self, tmp_path):
        from motornet.config import SimulationConfig, TubeNetworkConfig
        from motornet.runner import run_simulation

        config = SimulationConfig(network=TubeNetworkConfig(volume_nm3=2.5))
        result = run_simulation(config)
        path = tmp_path / "meta" / "run.json"
        export_metadata(result, path)
        data = json.loads(path.read_text())
        assert set(data) == {"timestamp", "git_commit", "config", "summary"}
        assert data["config"]["network"]["volume_nm3"] == 2.5
        assert data["summary"]["num_tubes"] == 2
        assert np.isfinite(data["summary"]["entropy"])
