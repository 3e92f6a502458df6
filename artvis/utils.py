"""Generic helpers (colors, coercion, serialization, profiling)."""

from __future__ import annotations

import functools
import html as html_lib
import logging
import math
import re
import time
from typing import Any, Dict, List, Optional, Tuple

from artvis.config import UNKNOWN_CATEGORY
from artvis.models import Edge, FilteredGraph, GraphData, Node

logging.basicConfig(level=logging.INFO, format="%(asctime)s [%(levelname)s] %(message)s")


def _hex_to_rgb(color: str) -> Tuple[int, int, int]:
    digits = color.lstrip("#")
    if not re.fullmatch(r"[0-9A-Fa-f]{6}", digits):
        raise ValueError(f"Invalid hex color: {color}")
    return int(digits[0:2], 16), int(digits[2:4], 16), int(digits[4:6], 16)


def _lighten(color: str, amount: float = 0.12) -> str:
    """Mix ``color`` toward white; used as the hover and selection fill."""
    amount = max(0.0, min(1.0, amount))
    channels = (round(c + (255 - c) * amount) for c in _hex_to_rgb(color))
    return "#" + "".join(f"{c:02X}" for c in channels)


def _pick_label_color(bg_hex: str, dark: str = "#0B0B0B", light: str = "#FFFFFF") -> str:
    try:
        r, g, b = _hex_to_rgb(bg_hex)
    except ValueError:
        return dark
    # perceived brightness, 0..255
    return dark if 0.299 * r + 0.587 * g + 0.114 * b > 128 else light


def _make_node_color(base: str, border: str, highlight: str) -> Dict[str, Any]:
    fill = _lighten(base)
    return {
        "background": base,
        "border": border,
        "highlight": {"background": fill, "border": highlight},
        "hover": {"background": fill, "border": highlight},
    }


def _make_edge_color(base: str, highlight: str, opacity: float) -> Dict[str, Any]:
    return {
        "color": base,
        "highlight": highlight,
        "hover": highlight,
        "opacity": opacity,
    }


def _edge_width_from_weight(weight: Optional[float]) -> float:
    # zero or missing weights draw as weight 1
    try:
        value = float(weight or 1)
    except (TypeError, ValueError):
        value = 1.0
    return math.sqrt(max(value, 0.0))


def profile_time(func):
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        start_time = time.time()
        result = func(*args, **kwargs)
        elapsed = time.time() - start_time
        logging.info("[PROFILE] Function '%s' executed in %.3f seconds", func.__name__, elapsed)
        return result

    return wrapper


def _coerce_node_id(value: Any) -> Optional[int]:
    """Return an integer node id, or None if the value is not one."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return None


def _coerce_weight(value: Any) -> Optional[float]:
    if value is None:
        return 0
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        if isinstance(value, float) and math.isnan(value):
            return None
        return value
    return None


def _clean_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def category_of(node: Node, attribute: str = "nationality") -> str:
    if attribute == "nationality":
        raw = node.nationality
    else:
        raw = node.attributes.get(attribute)
    return _clean_text(raw) or UNKNOWN_CATEGORY


def _truncate_text(text: str, max_len: int = 160) -> str:
    text = text.strip()
    if len(text) <= max_len:
        return text
    return text[: max_len - 3].rstrip() + "..."


def _format_weight(weight: float) -> str:
    if isinstance(weight, float) and weight.is_integer():
        return str(int(weight))
    return str(weight)


def _escape(value: Any) -> str:
    return html_lib.escape("" if value is None else str(value))


def _serialize_node(node: Node) -> Dict[str, Any]:
    payload: Dict[str, Any] = dict(node.attributes)
    payload["id"] = node.id
    for key in ("firstname", "lastname", "nationality"):
        value = getattr(node, key)
        if value is not None:
            payload[key] = value
    payload["weight"] = node.weight
    return payload


def _serialize_edge(edge: Edge) -> Dict[str, Any]:
    return {"source": edge.source, "target": edge.target, "weight": edge.weight}


def _serialize_graph_data(graph: GraphData | FilteredGraph) -> Dict[str, List[Dict[str, Any]]]:
    return {
        "nodes": [_serialize_node(n) for n in graph.nodes],
        "links": [_serialize_edge(e) for e in graph.edges],
    }


def slugify_filename(value: str) -> str:
    value = re.sub(r"[^A-Za-z0-9]+", "-", value.strip()).strip("-").lower()
    return value or "collaboration-network"
