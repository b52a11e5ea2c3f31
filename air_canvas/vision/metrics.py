import math
import time
from collections import deque
from dataclasses import dataclass
from typing import Optional, Sequence

from .landmarks import HandLandmark, to_pixels

DEFAULT_DEPTH_SCALE = 50000.0

BRUSH_SCALE = 0.4
ERASER_SCALE = 1.5
DEFAULT_BRUSH_SIZE = 10.0
DEFAULT_ERASER_SIZE = 50.0


@dataclass(frozen=True)
class HandMetrics:
    palm_width: float = 0.0
    palm_height: float = 0.0
    hand_length: float = 0.0   # только для отладки
    palm_size: float = 0.0
    depth: float = 0.0


def distance_px(a, b, width: float, height: float) -> float:
    """Евклидово расстояние в пикселях между двумя нормализованными точками."""
    ax, ay = to_pixels(a, width, height)
    bx, by = to_pixels(b, width, height)
    return math.hypot(ax - bx, ay - by)


def calculate_metrics(sample: Sequence, width: float, height: float,
                      depth_scale: float = DEFAULT_DEPTH_SCALE) -> HandMetrics:
    """
    Оценка размеров ладони по 21 точке.
    x масштабируется на ширину кадра, y - на высоту, независимо друг от друга.

    depth - эвристика расстояния до камеры: площадь ладони относительно площади
    кадра, умноженная на depth_scale и зажатая в [0, 1]. Чем больше ладонь в кадре,
    тем ближе значение к 1.
    """
    palm_width = distance_px(sample[HandLandmark.PINKY_MCP], sample[HandLandmark.INDEX_FINGER_MCP], width, height)
    palm_height = distance_px(sample[HandLandmark.WRIST], sample[HandLandmark.MIDDLE_FINGER_MCP], width, height)
    hand_length = distance_px(sample[HandLandmark.WRIST], sample[HandLandmark.MIDDLE_FINGER_TIP], width, height)

    # Площадь прямоугольника, а не настоящего многоугольника ладони
    palm_size = palm_width * palm_height

    frame_area = width * height
    if frame_area <= 0 or math.isnan(palm_size):
        depth = 0.0
    else:
        depth = min(max(palm_size / frame_area * depth_scale, 0.0), 1.0)

    return HandMetrics(
        palm_width=palm_width,
        palm_height=palm_height,
        hand_length=hand_length,
        palm_size=palm_size,
        depth=depth,
    )


def brush_size(metrics: Optional[HandMetrics], scale: float = BRUSH_SCALE,
               fallback: float = DEFAULT_BRUSH_SIZE) -> float:
    if metrics is None:
        return fallback
    return metrics.palm_width * scale


def eraser_size(metrics: Optional[HandMetrics], scale: float = ERASER_SCALE,
                fallback: float = DEFAULT_ERASER_SIZE) -> float:
    # Ластик примерно с ладонь
    if metrics is None:
        return fallback
    return metrics.palm_width * scale


class FpsCounter:
    def __init__(self, window: int = 30):
        self.frame_times = deque(maxlen=window)

    def update(self) -> float:
        """Вызывается каждый кадр. Возвращает текущий FPS."""
        self.frame_times.append(time.perf_counter())

        if len(self.frame_times) < 2:
            return 0.0

        # FPS = (число кадров - 1) / (время между первым и последним)
        elapsed = self.frame_times[-1] - self.frame_times[0]
        if elapsed <= 0:
            return 0.0
        return (len(self.frame_times) - 1) / elapsed

    def reset(self):
        self.frame_times.clear()
