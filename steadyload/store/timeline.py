from __future__ import annotations

import json
from pathlib import Path

from steadyload.core.schemas import RunTimeline


def write_timeline(path: Path, timeline: RunTimeline) -> Path:
    """Write slot timings as JSON so they can be lined up with power meter logs."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as f:
        json.dump(timeline.to_dict(), f, indent=2, ensure_ascii=False)
        f.write("\n")
    return path
