"""Application configuration and display constants."""

from __future__ import annotations

import os
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parent.parent

DEFAULT_DATA_PATH = str(PROJECT_ROOT / "data" / "artist_collaboration_network.json")
DATA_PATH = os.getenv("ARTVIS_DATA_PATH", DEFAULT_DATA_PATH)

MIN_WEIGHT_RANGE = (1, 100)


def _default_min_weight() -> int:
    raw = os.getenv("ARTVIS_DEFAULT_MIN_WEIGHT", "")
    try:
        value = int(raw)
    except ValueError:
        return MIN_WEIGHT_RANGE[0]
    return max(MIN_WEIGHT_RANGE[0], min(MIN_WEIGHT_RANGE[1], value))


DEFAULT_MIN_WEIGHT = _default_min_weight()

UNKNOWN_CATEGORY = "Unknown"

# d3.schemeCategory10
CATEGORY_PALETTE = [
    "#1f77b4",
    "#ff7f0e",
    "#2ca02c",
    "#d62728",
    "#9467bd",
    "#8c564b",
    "#e377c2",
    "#7f7f7f",
    "#bcbd22",
    "#17becf",
]

GRAPH_CANVAS_HEIGHT = 700
GRAPH_CARD_HEIGHT = 760
VIS_FONT_FACE = "IBM Plex Sans, Arial, sans-serif"

APP_FONTS = {
    "display": "Fraunces",
    "body": "IBM Plex Sans",
    "mono": "IBM Plex Mono",
}

CONFIG = {
    "DATA_PATH": DATA_PATH,
    "REQUEST_TIMEOUT": 30,
    "CATEGORY_ATTRIBUTE": "nationality",
    "NODE_BASE_SIZE": 10,
    "NODE_BORDER_COLOR": "#FFFFFF",
    "EDGE_COLOR": "#999999",
    "EDGE_OPACITY": 0.5,
    "HIGHLIGHT_COLOR": "#FF9900",
    "LABEL_COLOR": "#FFFFFF",
    "PHYSICS_DEFAULTS": {
        "gravity": -200,
        "centralGravity": 0.01,
        "springLength": 100,
        "springStrength": 0.08,
        "avoidOverlap": 0.6,
    },
}
