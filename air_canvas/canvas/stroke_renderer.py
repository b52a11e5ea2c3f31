"""
Покадровый конечный автомат рисования.

process_frame - чистая функция: (кадр, предыдущее состояние) -> (новое состояние, команды
отрисовки). Сам холст здесь не трогается, команды исполняет CanvasModel.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional, Sequence, Tuple

from air_canvas.vision.gesture_detector import GesturePose, PoseClassifier, classify_pose
from air_canvas.vision.landmarks import HAND_CONNECTIONS, HandLandmark, to_pixels, to_sample
from air_canvas.vision.metrics import (
    BRUSH_SCALE,
    DEFAULT_BRUSH_SIZE,
    DEFAULT_DEPTH_SCALE,
    DEFAULT_ERASER_SIZE,
    ERASER_SCALE,
    HandMetrics,
    brush_size,
    calculate_metrics,
    eraser_size,
)


class StrokeMode(str, Enum):
    IDLE = "idle"
    DRAWING = "drawing"
    ERASING = "erasing"


@dataclass(frozen=True)
class StrokeState:
    mode: StrokeMode = StrokeMode.IDLE
    # Последняя точка штриха, имеет смысл только вне IDLE
    last_x: float = 0.0
    last_y: float = 0.0


IDLE_STATE = StrokeState()


# --- КОМАНДЫ ОТРИСОВКИ ---

@dataclass(frozen=True)
class ClearOverlay:
    pass


@dataclass(frozen=True)
class HandSkeleton:
    points: Tuple[Tuple[float, float], ...]
    connections: Tuple[Tuple[int, int], ...] = HAND_CONNECTIONS


@dataclass(frozen=True)
class Pointer:
    x: float
    y: float
    size: float
    kind: str            # "draw", "erase" или "idle"
    color: Any = None


@dataclass(frozen=True)
class DebugText:
    lines: Tuple[str, ...]


@dataclass(frozen=True)
class Segment:
    kind: str            # "draw" или "erase"
    x1: float
    y1: float
    x2: float
    y2: float
    width: float
    color: Any = None


@dataclass(frozen=True)
class RendererSettings:
    brush_scale: float = BRUSH_SCALE
    eraser_scale: float = ERASER_SCALE
    default_brush_size: float = DEFAULT_BRUSH_SIZE
    default_eraser_size: float = DEFAULT_ERASER_SIZE
    min_stroke_width: float = 1.0
    depth_scale: float = DEFAULT_DEPTH_SCALE
    debug: bool = False

    @classmethod
    def from_config(cls, drawing, debug: bool = False) -> "RendererSettings":
        return cls(
            brush_scale=drawing.brush_scale,
            eraser_scale=drawing.eraser_scale,
            default_brush_size=drawing.default_brush_size,
            default_eraser_size=drawing.default_eraser_size,
            min_stroke_width=drawing.min_stroke_width,
            depth_scale=drawing.depth_scale,
            debug=debug,
        )


@dataclass(frozen=True)
class FrameOutcome:
    state: StrokeState
    commands: Tuple[Any, ...]
    pose: GesturePose = GesturePose.NONE
    metrics: Optional[HandMetrics] = None
    malformed: bool = False

    @property
    def segments(self) -> Tuple[Segment, ...]:
        return tuple(c for c in self.commands if isinstance(c, Segment))


def process_frame(sample: Optional[Sequence],
                  state: StrokeState,
                  frame_size: Tuple[float, float],
                  color: Any = None,
                  settings: RendererSettings = RendererSettings(),
                  classifier: PoseClassifier = classify_pose,
                  extra_debug: Tuple[str, ...] = ()) -> FrameOutcome:
    """
    Обработка одного кадра.

    sample - 21 точка первой руки или None, если руки нет. Другое количество точек или
    точка без координат - битый кадр, он обрабатывается как кадр без руки (malformed=True).
    color читается в момент фиксации сегмента, поэтому смена цвета посреди жеста
    применяется к следующему же сегменту.
    extra_debug - дополнительные строки отладочного текста (FPS, время обработки кадра).
    """
    width, height = frame_size
    hand = to_sample(sample)
    malformed = sample is not None and hand is None

    commands = [ClearOverlay()]

    # Нет руки -> IDLE, на холст ничего не пишем
    if hand is None:
        if settings.debug and extra_debug:
            commands.append(DebugText(tuple(extra_debug)))
        return FrameOutcome(IDLE_STATE, tuple(commands), GesturePose.NONE, None, malformed)

    metrics = calculate_metrics(hand, width, height, settings.depth_scale)
    pose = classifier(hand)

    commands.append(HandSkeleton(tuple(to_pixels(p, width, height) for p in hand)))

    brush = max(brush_size(metrics, settings.brush_scale, settings.default_brush_size),
                settings.min_stroke_width)
    eraser = max(eraser_size(metrics, settings.eraser_scale, settings.default_eraser_size),
                 settings.min_stroke_width)

    if pose is GesturePose.POINTING:
        x, y = to_pixels(hand[HandLandmark.INDEX_FINGER_TIP], width, height)
        new_state, segment = _advance(state, StrokeMode.DRAWING, x, y, brush, "draw", color)
        commands.append(Pointer(x, y, brush, "draw", color))
        size = brush
    elif pose is GesturePose.OPEN_PALM:
        # Центр ладони - основание среднего пальца
        x, y = to_pixels(hand[HandLandmark.MIDDLE_FINGER_MCP], width, height)
        new_state, segment = _advance(state, StrokeMode.ERASING, x, y, eraser, "erase", None)
        commands.append(Pointer(x, y, eraser, "erase"))
        size = eraser
    else:
        x, y = to_pixels(hand[HandLandmark.INDEX_FINGER_TIP], width, height)
        new_state, segment = IDLE_STATE, None
        commands.append(Pointer(x, y, brush, "idle", color))
        size = brush

    if settings.debug:
        commands.append(_debug_text(metrics, size, pose, extra_debug))

    if segment is not None:
        commands.append(segment)

    return FrameOutcome(new_state, tuple(commands), pose, metrics, malformed)


def _advance(state: StrokeState, mode: StrokeMode, x: float, y: float,
             width: float, kind: str, color) -> Tuple[StrokeState, Optional[Segment]]:
    # Вход в режим (или смена режима) - только запоминаем точку, без сегмента
    if state.mode is not mode:
        return StrokeState(mode, x, y), None
    segment = Segment(kind, state.last_x, state.last_y, x, y, width, color)
    return StrokeState(mode, x, y), segment


def _debug_text(metrics: HandMetrics, size: float, pose: GesturePose,
                extra: Tuple[str, ...] = ()) -> DebugText:
    return DebugText((
        f"Depth: {metrics.depth:.3f}",
        f"Palm Width: {metrics.palm_width:.0f}px",
        f"Palm Size: {metrics.palm_size:.0f}px²",
        f"Hand Length: {metrics.hand_length:.0f}px",
        f"Brush Size: {size:.1f}px",
        f"Pose: {pose.value}",
    ) + tuple(extra))
