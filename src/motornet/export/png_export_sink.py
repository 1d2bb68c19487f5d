import io

import numpy as np
from PIL import Image, ImageDraw

from .export_sink import ExportSink
from ..utils.logger.logger import Logger


class PngExportSink(ExportSink):
    """
    Top-down (x-y) preview of every spatial dataset in one PNG.

    Vector fields are drawn as black line segments, paths as blue
    polylines, point clouds as red dots. xy series are ignored here.
    """

    folder_name = "image_export"

    def __init__(self, size=800, padding=40, filename="network_projection.png"):
        super().__init__()
        self.size = size
        self.padding = padding
        self.filename = filename

    def _all_xy(self):
        chunks = [pts[:, :2] for pts in self.points.values()]
        chunks += [pts[:, :2] for pts in self.paths.values()]
        for origins, directions in self.vector_fields.values():
            chunks.append(origins[:, :2])
            chunks.append((origins + directions)[:, :2])
        chunks = [c for c in chunks if len(c)]
        return np.vstack(chunks) if chunks else np.zeros((0, 2))

    def generate_export(self):
        xy = self._all_xy()
        if not len(xy):
            return []

        lo = xy.min(axis=0)
        span = float(np.max(xy.max(axis=0) - lo)) or 1.0
        scale = (self.size - 2 * self.padding) / span

        def to_px(p):
            x = (p[0] - lo[0]) * scale + self.padding
            y = self.size - ((p[1] - lo[1]) * scale + self.padding)  # image y grows downward
            return (float(x), float(y))

        img = Image.new("RGB", (self.size, self.size), "white")
        draw = ImageDraw.Draw(img)

        for origins, directions in self.vector_fields.values():
            for o, d in zip(origins, directions):
                draw.line((to_px(o), to_px(o + d)), fill="black", width=1)

        for pts in self.paths.values():
            if len(pts) > 1:
                draw.line([to_px(p) for p in pts], fill="blue", width=2)

        for pts in self.points.values():
            for p in pts:
                x, y = to_px(p)
                draw.ellipse((x - 3, y - 3, x + 3, y + 3), fill="red")

        buffer = io.BytesIO()
        img.save(buffer, format="PNG")
        Logger.log(f"PNG export: {self.filename} ({self.size}x{self.size})")
        return [(self.filename, buffer.getvalue())]
