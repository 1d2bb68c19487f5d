import numpy as np

from ..geometry import Point3


def as_point_array(points) -> np.ndarray:
    """Convert a sequence of Point3 (or an array-like) to shape (n, 3)."""
    points = list(points) if not isinstance(points, np.ndarray) else points
    if len(points) and isinstance(points[0], Point3):
        return np.array([p.as_tuple() for p in points], dtype=np.float64)
    return np.asarray(points, dtype=np.float64).reshape(-1, 3)


class ExportSink:
    """
    Collects named datasets during a run and renders them on demand.

    Four dataset kinds are accepted: point clouds, connected paths,
    vector fields and labelled (x, y) series. Subclasses implement
    generate_export() to turn them into files.
    """

    folder_name = "data_export"

    def __init__(self):
        self.points = {}
        self.paths = {}
        self.vector_fields = {}
        self.xy_series = {}
        self.xy_labels = {}

    def emit_points(self, name, points):
        self.points[name] = as_point_array(points)

    def emit_connected_path(self, name, points):
        self.paths[name] = as_point_array(points)

    def emit_vector_field(self, name, origins, directions):
        self.vector_fields[name] = (as_point_array(origins), as_point_array(directions))

    def emit_xy_series(self, name, pairs, xlabel="x", ylabel="y"):
        """Store (x, y) pairs along with the axis labels they are plotted and tabulated under."""
        self.xy_series[name] = np.asarray(list(pairs), dtype=np.float64).reshape(-1, 2)
        self.xy_labels[name] = (xlabel, ylabel)

    def is_empty(self):
        return not (self.points or self.paths or self.vector_fields or self.xy_series)

    def generate_export(self):
        """Return a list[(filename, bytes)] for the collected datasets."""
        raise NotImplementedError()
