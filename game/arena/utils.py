"""
Geometry and seeding helpers shared by the arena modules
"""

from __future__ import annotations
import math
import random
from typing import Tuple, Optional
import numpy as np


def clamp(x: float, lo: float, hi: float) -> float:
    """Clamp value between low and high bounds"""
    return lo if x < lo else hi if x > hi else x


def normalize(x: float, y: float, eps: float = 1e-8) -> Tuple[float, float]:
    """Normalize a vector to unit length"""
    l = math.hypot(x, y)
    if l < eps:
        return 0.0, 0.0
    return x / l, y / l


def distance(x1: float, y1: float, x2: float, y2: float) -> float:
    return math.hypot(x1 - x2, y1 - y2)


def circle_collide(x1, y1, r1, x2, y2, r2) -> bool:
    """Check if two circles collide"""
    dx = x1 - x2
    dy = y1 - y2
    rr = r1 + r2
    return (dx * dx + dy * dy) <= (rr * rr)


def circle_rect_collide(cx, cy, r, rx, ry, rw, rh) -> bool:
    """Check a circle against a centre-anchored rectangle"""
    nx = clamp(cx, rx - rw / 2, rx + rw / 2)
    ny = clamp(cy, ry - rh / 2, ry + rh / 2)
    dx = cx - nx
    dy = cy - ny
    return (dx * dx + dy * dy) <= r * r


def rect_contains(rx, ry, rw, rh, px, py) -> bool:
    """Point-in-rectangle for a centre-anchored rectangle (edges inclusive)"""
    return abs(px - rx) <= rw / 2 and abs(py - ry) <= rh / 2


def push_out_of_rect(cx, cy, r, rx, ry, rw, rh) -> Tuple[float, float]:
    """Return the circle centre moved out of the rectangle along the shallow axis"""
    left = rx - rw / 2 - r
    right = rx + rw / 2 + r
    top = ry - rh / 2 - r
    bottom = ry + rh / 2 + r
    if not (left < cx < right and top < cy < bottom):
        return cx, cy

    pen_left = cx - left
    pen_right = right - cx
    pen_top = cy - top
    pen_bottom = bottom - cy
    smallest = min(pen_left, pen_right, pen_top, pen_bottom)
    if smallest == pen_left:
        return left, cy
    if smallest == pen_right:
        return right, cy
    if smallest == pen_top:
        return cx, top
    return cx, bottom


def seed_everything(py_seed: Optional[int]):
    """Seed all random number generators"""
    if py_seed is None:
        return
    random.seed(py_seed)
    np.random.seed(py_seed)
