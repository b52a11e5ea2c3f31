from dataclasses import dataclass
from enum import IntEnum
from typing import NamedTuple, Optional, Sequence, Tuple

LANDMARK_COUNT = 21


class Landmark(NamedTuple):
    """Нормализованная точка руки: x, y в [0, 1] относительно кадра, z - относительная глубина."""
    x: float
    y: float
    z: float = 0.0


class HandLandmark(IntEnum):
    # Та же нумерация, что и у MediaPipe Hands
    WRIST = 0
    THUMB_CMC = 1
    THUMB_MCP = 2
    THUMB_IP = 3
    THUMB_TIP = 4
    INDEX_FINGER_MCP = 5
    INDEX_FINGER_PIP = 6
    INDEX_FINGER_DIP = 7
    INDEX_FINGER_TIP = 8
    MIDDLE_FINGER_MCP = 9
    MIDDLE_FINGER_PIP = 10
    MIDDLE_FINGER_DIP = 11
    MIDDLE_FINGER_TIP = 12
    RING_FINGER_MCP = 13
    RING_FINGER_PIP = 14
    RING_FINGER_DIP = 15
    RING_FINGER_TIP = 16
    PINKY_MCP = 17
    PINKY_PIP = 18
    PINKY_DIP = 19
    PINKY_TIP = 20


@dataclass(frozen=True)
class FingerJoints:
    """Пара (кончик, опорный сустав) для проверки выпрямленности пальца."""
    tip: HandLandmark
    reference: HandLandmark


@dataclass(frozen=True)
class FingerMap:
    index: FingerJoints
    middle: FingerJoints
    ring: FingerJoints
    pinky: FingerJoints


# Кончик сравнивается с DIP-суставом того же пальца
DIP_FINGER_MAP = FingerMap(
    index=FingerJoints(HandLandmark.INDEX_FINGER_TIP, HandLandmark.INDEX_FINGER_DIP),
    middle=FingerJoints(HandLandmark.MIDDLE_FINGER_TIP, HandLandmark.MIDDLE_FINGER_DIP),
    ring=FingerJoints(HandLandmark.RING_FINGER_TIP, HandLandmark.RING_FINGER_DIP),
    pinky=FingerJoints(HandLandmark.PINKY_TIP, HandLandmark.PINKY_DIP),
)

# Вариант с PIP-суставами - для альтернативных стратегий
PIP_FINGER_MAP = FingerMap(
    index=FingerJoints(HandLandmark.INDEX_FINGER_TIP, HandLandmark.INDEX_FINGER_PIP),
    middle=FingerJoints(HandLandmark.MIDDLE_FINGER_TIP, HandLandmark.MIDDLE_FINGER_PIP),
    ring=FingerJoints(HandLandmark.RING_FINGER_TIP, HandLandmark.RING_FINGER_PIP),
    pinky=FingerJoints(HandLandmark.PINKY_TIP, HandLandmark.PINKY_PIP),
)

# Скелет кисти для оверлея (топология MediaPipe HAND_CONNECTIONS)
HAND_CONNECTIONS: Tuple[Tuple[int, int], ...] = (
    (0, 1), (1, 2), (2, 3), (3, 4),
    (0, 5), (5, 6), (6, 7), (7, 8),
    (5, 9), (9, 10), (10, 11), (11, 12),
    (9, 13), (13, 14), (14, 15), (15, 16),
    (13, 17), (0, 17), (17, 18), (18, 19), (19, 20),
)

HandPoseSample = Tuple[Landmark, ...]


def to_sample(points: Optional[Sequence]) -> Optional[HandPoseSample]:
    """
    Приводит список точек детектора к HandPoseSample.
    Возвращает None, если точек не ровно 21 или какая-то точка без числовых x, y
    (битый кадр считается кадром без руки).
    """
    if points is None or len(points) != LANDMARK_COUNT:
        return None
    try:
        return tuple(Landmark(float(p.x), float(p.y), float(getattr(p, "z", 0.0))) for p in points)
    except (AttributeError, TypeError, ValueError):
        return None


def to_pixels(point, width: float, height: float) -> Tuple[float, float]:
    return point.x * width, point.y * height
