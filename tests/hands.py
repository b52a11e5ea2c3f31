"""
Синтетические руки для тестов: вертикальная кисть, пальцы сжаты или выпрямлены.
"""
from air_canvas.vision.landmarks import HandLandmark as L, Landmark

FINGERS = {
    "index": (L.INDEX_FINGER_MCP, L.INDEX_FINGER_PIP, L.INDEX_FINGER_DIP, L.INDEX_FINGER_TIP, 0.40),
    "middle": (L.MIDDLE_FINGER_MCP, L.MIDDLE_FINGER_PIP, L.MIDDLE_FINGER_DIP, L.MIDDLE_FINGER_TIP, 0.47),
    "ring": (L.RING_FINGER_MCP, L.RING_FINGER_PIP, L.RING_FINGER_DIP, L.RING_FINGER_TIP, 0.53),
    "pinky": (L.PINKY_MCP, L.PINKY_PIP, L.PINKY_DIP, L.PINKY_TIP, 0.60),
}


def make_hand(extended=(), offset=(0.0, 0.0)):
    """21 точка; пальцы из extended выпрямлены (кончик выше DIP), остальные согнуты."""
    dx, dy = offset
    points = [Landmark(0.5, 0.9)] * 21
    points[L.WRIST] = Landmark(0.5, 0.9)
    points[L.THUMB_CMC] = Landmark(0.42, 0.85)
    points[L.THUMB_MCP] = Landmark(0.37, 0.8)
    points[L.THUMB_IP] = Landmark(0.34, 0.75)
    points[L.THUMB_TIP] = Landmark(0.32, 0.7)

    for name, (mcp, pip, dip, tip, x) in FINGERS.items():
        points[mcp] = Landmark(x, 0.6)
        points[pip] = Landmark(x, 0.5)
        points[dip] = Landmark(x, 0.45)
        points[tip] = Landmark(x, 0.35 if name in extended else 0.55)

    return [Landmark(p.x + dx, p.y + dy, p.z) for p in points]


def with_point(sample, index, x, y):
    sample = list(sample)
    sample[index] = Landmark(x, y)
    return sample


def pointing(offset=(0.0, 0.0)):
    return make_hand(extended=("index",), offset=offset)


def open_palm(offset=(0.0, 0.0)):
    return make_hand(extended=("index", "middle", "ring", "pinky"), offset=offset)


def fist(offset=(0.0, 0.0)):
    return make_hand(offset=offset)
