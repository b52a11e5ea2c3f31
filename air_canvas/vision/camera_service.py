import logging
import time
from typing import Callable, List, Optional, Sequence, Tuple

import cv2
import mediapipe as mp

from .frame_data import FrameData
from .metrics import FpsCounter

logger = logging.getLogger(__name__)

FrameCallback = Callable[[FrameData], None]


class CameraError(RuntimeError):
    """Камера не открылась или перестала отдавать кадры."""


def list_cameras(max_index: int = 5, skip: Sequence[int] = ()) -> List[int]:
    """Перебор индексов устройств: возвращает те, что открываются."""
    found = []
    for index in range(max_index):
        if index in skip:
            continue
        cap = cv2.VideoCapture(index)
        try:
            if cap.isOpened():
                found.append(index)
        finally:
            cap.release()
    logger.debug("Probed cameras: %s", found)
    return found


class CameraService:
    """
    Источник кадров и точек руки: OpenCV захват + MediaPipe Hands.
    Каждый poll() читает один кадр и синхронно раздаёт FrameData подписчикам,
    так что следующий кадр не начнётся, пока не обработан текущий.
    """

    def __init__(self, camera_index: int = 0, resolution: Tuple[int, int] = (1280, 720),
                 mirror: bool = True, max_num_hands: int = 1, model_complexity: int = 1,
                 min_detection_confidence: float = 0.5, min_tracking_confidence: float = 0.5):
        self.resolution = resolution
        self.mirror = mirror
        self.camera_index = camera_index
        self.cap: Optional[cv2.VideoCapture] = None

        # MediaPipe
        self.mp_hands = mp.solutions.hands
        self.hands = self.mp_hands.Hands(
            static_image_mode=False,
            max_num_hands=max_num_hands,
            model_complexity=model_complexity,
            min_detection_confidence=min_detection_confidence,
            min_tracking_confidence=min_tracking_confidence,
        )

        self.fps_counter = FpsCounter()
        self._callbacks: List[FrameCallback] = []

        try:
            self._open(camera_index)
        except CameraError:
            self.hands.close()
            raise

    @classmethod
    def from_config(cls, cfg, camera_index: Optional[int] = None) -> "CameraService":
        return cls(
            camera_index=cfg.camera.index if camera_index is None else camera_index,
            resolution=(cfg.camera.width, cfg.camera.height),
            mirror=cfg.camera.mirror,
            max_num_hands=cfg.mediapipe.max_num_hands,
            model_complexity=cfg.mediapipe.model_complexity,
            min_detection_confidence=cfg.mediapipe.min_detection_confidence,
            min_tracking_confidence=cfg.mediapipe.min_tracking_confidence,
        )

    def _open(self, camera_index: int):
        cap = cv2.VideoCapture(camera_index)
        if not cap.isOpened():
            cap.release()
            raise CameraError(f"Cannot open camera {camera_index}")

        cap.set(cv2.CAP_PROP_FRAME_WIDTH, self.resolution[0])
        cap.set(cv2.CAP_PROP_FRAME_HEIGHT, self.resolution[1])

        self.cap = cap
        self.camera_index = camera_index
        self.fps_counter.reset()
        logger.info("Camera %d opened (%dx%d requested)", camera_index, *self.resolution)

    def on_frame_result(self, callback: FrameCallback):
        """Подписка на результат каждого кадра."""
        self._callbacks.append(callback)

    def switch_camera(self, camera_index: int):
        """
        Переключение устройства. Старый поток полностью останавливается
        до открытия нового, чтобы два источника не писали в одно состояние.
        """
        self.release()
        self._open(camera_index)

    def poll(self) -> Optional[FrameData]:
        """Читает один кадр, прогоняет детектор и раздаёт результат подписчикам."""
        if self.cap is None or not self.cap.isOpened():
            return None

        started = time.perf_counter()
        ret, frame = self.cap.read()
        if not ret:
            logger.warning("Camera %d returned no frame", self.camera_index)
            return None

        if self.mirror:
            frame = cv2.flip(frame, 1)

        height, width = frame.shape[:2]
        frame_data = FrameData(raw_frame=frame, width=width, height=height)

        rgb_frame = cv2.cvtColor(frame, cv2.COLOR_BGR2RGB)
        results = self.hands.process(rgb_frame)
        if results.multi_hand_landmarks:
            frame_data.hands = [list(h.landmark) for h in results.multi_hand_landmarks]

        # Время чтения кадра и работы детектора, без обработки подписчиками
        frame_data.processing_ms = (time.perf_counter() - started) * 1000
        frame_data.fps = self.fps_counter.update()

        for callback in self._callbacks:
            callback(frame_data)
        return frame_data

    @property
    def frame_size(self) -> Tuple[int, int]:
        if self.cap is None:
            return self.resolution
        w = int(self.cap.get(cv2.CAP_PROP_FRAME_WIDTH)) or self.resolution[0]
        h = int(self.cap.get(cv2.CAP_PROP_FRAME_HEIGHT)) or self.resolution[1]
        return w, h

    def release(self):
        if self.cap is not None:
            if self.cap.isOpened():
                self.cap.release()
                logger.info("Camera %d released", self.camera_index)
            self.cap = None

    def close(self):
        self.release()
        self.hands.close()
