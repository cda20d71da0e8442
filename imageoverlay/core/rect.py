from __future__ import annotations
from typing import Optional, Tuple

Rect = Tuple[int, int, int, int]  # x, y, w, h
Box = Tuple[int, int, int, int]  # left, top, right, bottom (Pillow crop/paste box)

def intersect(a: Rect, b: Rect) -> Rect | None:
    ax, ay, aw, ah = a
    bx, by, bw, bh = b
    x1, y1 = max(ax, bx), max(ay, by)
    x2, y2 = min(ax + aw, bx + bw), min(ay + ah, by + bh)
    if x2 <= x1 or y2 <= y1:
        return None
    return (x1, y1, x2 - x1, y2 - y1)

def to_box(r: Rect) -> Box:
    x, y, w, h = r
    return (x, y, x + w, y + h)

def clip_placement(dst_size: Tuple[int, int], src_size: Tuple[int, int], x: int, y: int) -> Optional[Tuple[Box, Box]]:
    """
    Clip a src of src_size placed at (x, y) to a dst of dst_size.
    Returns (dst_box, src_box) for the overlapping region, or None.
    """
    visible = intersect((0, 0, *dst_size), (x, y, *src_size))
    if visible is None:
        return None
    vx, vy, vw, vh = visible
    return to_box(visible), to_box((vx - x, vy - y, vw, vh))
