import logging
from dataclasses import replace
from typing import Any, Optional, Sequence, Tuple

from air_canvas.canvas.stroke_renderer import (
    IDLE_STATE,
    FrameOutcome,
    RendererSettings,
    StrokeState,
    process_frame,
)
from air_canvas.vision.gesture_detector import DebouncedGestureDetector, GestureDetector, GesturePose
from air_canvas.vision.metrics import HandMetrics

logger = logging.getLogger(__name__)


class CanvasSession:
    """
    Состояние одного сеанса рисования: автомат штрихов, текущий цвет и счётчики.
    Холст (target) - любой объект с методами apply(commands) и clear().
    """

    def __init__(self, target, settings: RendererSettings = RendererSettings(),
                 color: Any = "#000000", detector: Optional[GestureDetector] = None):
        self.target = target
        self.settings = settings
        self.color = color
        self.detector = detector or GestureDetector()

        self.state: StrokeState = IDLE_STATE
        self.pose: GesturePose = GesturePose.NONE
        self.metrics: Optional[HandMetrics] = None

        self.frames_processed = 0
        self.frames_without_hand = 0
        self.malformed_frames = 0

    @classmethod
    def from_config(cls, target, cfg, color: Any = None) -> "CanvasSession":
        settings = RendererSettings.from_config(cfg.drawing, debug=cfg.display.debug)
        if cfg.gestures.debounce_frames:
            detector = DebouncedGestureDetector(cfg.gestures.debounce_frames)
        else:
            detector = GestureDetector()
        return cls(target, settings, color if color is not None else cfg.drawing.default_color, detector)

    def handle_frame(self, frame_data) -> FrameOutcome:
        """Колбэк источника кадров."""
        extra = ()
        if self.settings.debug:
            extra = (f"FPS: {frame_data.fps:.1f}", f"Frame Time: {frame_data.processing_ms:.1f}ms")
        return self.process(frame_data.first_hand, frame_data.frame_size, extra)

    def process(self, sample: Optional[Sequence], frame_size: Tuple[float, float],
                extra_debug: Tuple[str, ...] = ()) -> FrameOutcome:
        outcome = process_frame(sample, self.state, frame_size, self.color,
                                self.settings, self.detector.detect, extra_debug)

        self.frames_processed += 1
        if outcome.malformed:
            self.malformed_frames += 1
            logger.debug("Malformed hand sample (%d points), treated as no hand", len(sample))
        if outcome.metrics is None:
            self.frames_without_hand += 1

        self.state = outcome.state
        self.pose = outcome.pose
        self.metrics = outcome.metrics
        self.target.apply(outcome.commands)
        return outcome

    def set_color(self, color: Any):
        self.color = color

    def set_debug(self, enabled: bool):
        self.settings = replace(self.settings, debug=enabled)

    def clear(self):
        # Очистка не трогает автомат штрихов
        self.target.clear()

    def reset(self):
        """Сброс автомата, например после смены камеры."""
        self.state = IDLE_STATE
        self.pose = GesturePose.NONE
        self.metrics = None
        self.detector.reset()
