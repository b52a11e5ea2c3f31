from collections import Counter, deque
from enum import Enum
from typing import Callable, Optional, Sequence

from .landmarks import DIP_FINGER_MAP, FingerJoints, FingerMap


class GesturePose(str, Enum):
    POINTING = "pointing"
    OPEN_PALM = "open_palm"
    NONE = "none"


PoseClassifier = Callable[[Sequence], GesturePose]


def is_finger_extended(sample: Sequence, joints: FingerJoints) -> bool:
    # Ось Y направлена вниз: выпрямленный палец - кончик выше опорного сустава
    return sample[joints.tip].y < sample[joints.reference].y


def classify_pose(sample: Sequence, finger_map: FingerMap = DIP_FINGER_MAP) -> GesturePose:
    """
    Чистая функция: 21 точка -> GesturePose.
    Большой палец не учитывается. Предполагается вертикальная рука.
    """
    index = is_finger_extended(sample, finger_map.index)
    middle = is_finger_extended(sample, finger_map.middle)
    ring = is_finger_extended(sample, finger_map.ring)
    pinky = is_finger_extended(sample, finger_map.pinky)

    # РИСОВАНИЕ: указательный выпрямлен, остальные сжаты
    if index and not middle and not ring and not pinky:
        return GesturePose.POINTING

    # ЛАСТИК: все четыре пальца выпрямлены
    if index and middle and ring and pinky:
        return GesturePose.OPEN_PALM

    return GesturePose.NONE


class GestureDetector:
    """Обёртка над стратегией классификации. Без состояния."""

    def __init__(self, classifier: PoseClassifier = classify_pose):
        self._classifier = classifier

    def detect(self, sample: Optional[Sequence]) -> GesturePose:
        if sample is None:
            return GesturePose.NONE
        return self._classifier(sample)

    def reset(self):
        pass


class DebouncedGestureDetector(GestureDetector):
    """
    Вариант с подавлением мерцания: поза меняется только когда
    держится buffer_size - 1 кадров из последних buffer_size.
    По умолчанию не используется.
    """

    def __init__(self, buffer_size: int = 4, classifier: PoseClassifier = classify_pose):
        super().__init__(classifier)
        if buffer_size < 2:
            raise ValueError("buffer_size must be at least 2")
        self.buffer_size = buffer_size
        self.gesture_buffer = deque(maxlen=buffer_size)

    def detect(self, sample: Optional[Sequence]) -> GesturePose:
        current = super().detect(sample)
        self.gesture_buffer.append(current)

        candidate, count = Counter(self.gesture_buffer).most_common(1)[0]
        if count >= self.buffer_size - 1:
            return candidate
        return current

    def reset(self):
        self.gesture_buffer.clear()
