from dataclasses import dataclass, field
from typing import List, Optional, Sequence

import numpy as np


@dataclass
class FrameData:
    # Входной кадр (BGR, numpy array), уже отзеркаленный при необходимости
    raw_frame: Optional[np.ndarray] = None

    width: int = 0
    height: int = 0

    # Точки всех найденных рук, как их отдал детектор (по 21 на руку)
    hands: List[Sequence] = field(default_factory=list)

    # Метрики качества
    fps: float = 0.0
    processing_ms: float = 0.0

    @property
    def first_hand(self) -> Optional[Sequence]:
        # Используется только первая рука
        return self.hands[0] if self.hands else None

    @property
    def frame_size(self):
        return self.width, self.height
