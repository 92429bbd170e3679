from __future__ import annotations

from typing import Any


# Noise-band presets. Bounds are on the 8-bit difference scale (after the
# difference gain); min_points is the boundary length below which a region is
# treated as noise.


PRESETS: dict[str, dict[str, Any]] = {
    # Values the detector was tuned with on a Kinect mounted ~1.2 m above the floor.
    "default": {
        "lower_bound": 10,
        "upper_bound": 50,
        "clip_mode": "zero",
        "min_points": 100,
    },
    # Picks up smaller / flatter objects; noisier on uneven floors.
    "sensitive": {
        "lower_bound": 6,
        "upper_bound": 60,
        "clip_mode": "zero",
        "min_points": 60,
    },
    # Only large, clearly elevated blobs.
    "strict": {
        "lower_bound": 15,
        "upper_bound": 45,
        "clip_mode": "zero",
        "min_points": 160,
    },
}


PRESET_LABELS: dict[str, str] = {
    "default": "Default",
    "sensitive": "Sensitive",
    "strict": "Strict",
}


def list_presets() -> list[dict[str, Any]]:
    return [
        {
            "id": preset_id,
            "label": PRESET_LABELS.get(preset_id, preset_id),
            "settings": PRESETS[preset_id],
        }
        for preset_id in PRESETS.keys()
    ]


def preset_patch(preset_id: str) -> dict[str, Any]:
    if preset_id not in PRESETS:
        raise KeyError(preset_id)
    return dict(PRESETS[preset_id])
