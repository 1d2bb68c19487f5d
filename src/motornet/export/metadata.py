"""
Run metadata JSON: timestamp, git commit, full config and a summary.
"""

import json
import subprocess
from datetime import datetime
from pathlib import Path
from typing import Optional

from ..config import config_to_dict


def get_git_commit() -> Optional[str]:
    """Get current git commit hash if available."""
    try:
        result = subprocess.run(
            ["git", "rev-parse", "HEAD"],
            capture_output=True,
            text=True,
            timeout=5
        )
    except (OSError, subprocess.SubprocessError):
        return None
    if result.returncode == 0:
        return result.stdout.strip()[:12]
    return None


def export_metadata(result, path: Path) -> None:
    """
    Write metadata JSON for a SimulationResult.

    Args:
        result: Simulation result.
        path: Output JSON path.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    metadata = {
        "timestamp": datetime.now().isoformat(),
        "git_commit": get_git_commit(),
        "config": config_to_dict(result.config),
        "summary": result.summary(),
    }

    with open(path, 'w') as f:
        json.dump(metadata, f, indent=2)
