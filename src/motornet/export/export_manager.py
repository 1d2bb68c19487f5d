import os
from datetime import datetime

from ..utils.logger.logger import Logger


class ExportManager:
    """Writes the files produced by export sinks into a timestamped folder."""

    def save(self, sinks, base_folder_location):
        """
        Render every sink and write its files.

        Files land in <base>/export_<timestamp>/<sink.folder_name>/.

        Returns:
            (root folder path, list of written file paths)
        """
        self._verify_folder(base_folder_location)
        root_folder = self._create_export_folder(base_folder_location)
        written = []
        for sink in sinks:
            files = sink.generate_export()
            if not files:
                continue
            folder = os.path.join(root_folder, sink.folder_name)
            os.makedirs(folder, exist_ok=True)
            written.extend(self._save_files(files, folder))
        return root_folder, written

    def _create_export_folder(self, base_folder_location):
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S_%f")
        root_folder = os.path.join(base_folder_location, f"export_{timestamp}")
        os.makedirs(root_folder)
        Logger.log(f"Created root folder: {root_folder}")
        return root_folder

    def _save_files(self, files, folder_location):
        """Write each (filename, bytes) to disk."""
        paths = []
        for filename, content in files:
            file_path = os.path.join(folder_location, filename)
            try:
                with open(file_path, 'wb') as f:
                    f.write(content)
            except OSError as e:
                Logger.log(f"Error saving file {file_path}: {e}", Logger.LogPriority.ERROR)
                raise
            Logger.log(f"Saved file: {file_path}")
            paths.append(file_path)
        return paths

    def _verify_folder(self, folder_path):
        """Ensure base folder exists and is a directory."""
        if os.path.exists(folder_path) and not os.path.isdir(folder_path):
            Logger.log(f"{folder_path} exists but is not a directory.", Logger.LogPriority.ERROR)
            raise ValueError(f"{folder_path} exists but is not a directory.")
        os.makedirs(folder_path, exist_ok=True)
        Logger.log(f"Folder verified: {folder_path}")
