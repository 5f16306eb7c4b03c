"""
utils.py

Utility functions for the situation plan editor.
"""

from __future__ import annotations

import base64
import io
import itertools
import re
import xml.etree.ElementTree as ET
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Tuple

from PIL import Image, UnidentifiedImageError

SVG_NS = "http://www.w3.org/2000/svg"
XLINK_NS = "http://www.w3.org/1999/xlink"

ET.register_namespace("", SVG_NS)
ET.register_namespace("xlink", XLINK_NS)

# Shared by elements and schema items so every content change gets a unique stamp
_version_counter = itertools.count(1)


def next_version() -> int:
    """Return a new, never repeated content version number."""
    return next(_version_counter)


def fmt_num(value: float) -> str:
    """Format a number for SVG attributes without trailing zeros."""
    text = f"{value:.4f}".rstrip("0").rstrip(".")
    return text if text not in ("", "-0") else "0"


def wrap_svg(body: str, view_box: Tuple[float, float, float, float], width: float, height: float) -> str:
    """
    Wrap an SVG body in an outer <svg> element of the given display size.

    Args:
        body: SVG content without the outer <svg> tag
        view_box: (x, y, w, h) of the user coordinate system
        width: Rendered width
        height: Rendered height

    Returns:
        Complete SVG document string
    """
    vb = " ".join(fmt_num(v) for v in view_box)
    return (
        f'<svg xmlns="{SVG_NS}" xmlns:xlink="{XLINK_NS}" '
        f'width="{fmt_num(width)}" height="{fmt_num(height)}" viewBox="{vb}">'
        f"{body}</svg>"
    )


def symbol_to_svg(symbol, defs: str, scale: float) -> str:
    """Render a schema symbol drawing at the given scale."""
    body = f"<defs>{defs}</defs>{symbol.data}" if defs else symbol.data
    return wrap_svg(
        body,
        (0.0, 0.0, symbol.width, symbol.height),
        symbol.width * scale,
        symbol.height * scale,
    )


_LENGTH_RE = re.compile(r"^\s*([0-9]*\.?[0-9]+(?:[eE][-+]?[0-9]+)?)\s*(px)?\s*$")


def parse_svg_length(value: Optional[str]) -> Optional[float]:
    """Parse an SVG width/height attribute. Only unitless and px values are accepted."""
    if not value:
        return None
    match = _LENGTH_RE.match(value)
    if not match:
        return None
    return float(match.group(1))


@dataclass
class ImportedImage:
    """An external image converted to SVG content."""
    body: str
    view_box: Tuple[float, float, float, float]
    width: float
    height: float

    def to_svg(self, scale: float) -> str:
        return wrap_svg(self.body, self.view_box, self.width * scale, self.height * scale)


def _load_svg_file(path: Path) -> ImportedImage:
    try:
        root = ET.parse(path).getroot()
    except (ET.ParseError, OSError) as e:
        raise ValueError(f"Not a valid SVG file: {path.name}") from e

    view_box = None
    vb_attr = root.get("viewBox")
    if vb_attr:
        parts = [float(p) for p in re.split(r"[\s,]+", vb_attr.strip()) if p]
        if len(parts) == 4:
            view_box = (parts[0], parts[1], parts[2], parts[3])

    width = parse_svg_length(root.get("width"))
    height = parse_svg_length(root.get("height"))
    if width is None or height is None:
        if view_box is None:
            raise ValueError(f"SVG file has no usable size: {path.name}")
        width, height = view_box[2], view_box[3]
    if view_box is None:
        view_box = (0.0, 0.0, width, height)

    body = "".join(ET.tostring(child, encoding="unicode") for child in root)
    return ImportedImage(body=body, view_box=view_box, width=width, height=height)


def _load_raster_file(path: Path) -> ImportedImage:
    try:
        with Image.open(path) as img:
            img.load()
            width, height = img.size
            if img.mode not in ("1", "L", "LA", "P", "RGB", "RGBA"):
                img = img.convert("RGBA")
            buf = io.BytesIO()
            img.save(buf, format="PNG")
    except (UnidentifiedImageError, OSError) as e:
        raise ValueError(f"Not a readable image: {path.name}") from e

    data = base64.b64encode(buf.getvalue()).decode("ascii")
    body = (
        f'<image x="0" y="0" width="{width}" height="{height}" '
        f'xlink:href="data:image/png;base64,{data}"/>'
    )
    return ImportedImage(body=body, view_box=(0.0, 0.0, float(width), float(height)),
                         width=float(width), height=float(height))


def load_image_as_svg(path) -> ImportedImage:
    """
    Load an external SVG or raster image as SVG content.

    Raster images (anything Pillow can open) are embedded as a PNG data URI.

    Raises:
        ValueError: If the file cannot be read as an image.
    """
    path = Path(path)
    if path.suffix.lower() == ".svg":
        return _load_svg_file(path)
    return _load_raster_file(path)
