import logging
from typing import Iterable, Optional

import numpy as np
from PySide6.QtCore import QBuffer, QByteArray, QIODevice, QPointF, QRectF, Qt
from PySide6.QtGui import QBrush, QColor, QFont, QImage, QPainter, QPen

from .stroke_renderer import ClearOverlay, DebugText, HandSkeleton, Pointer, Segment

logger = logging.getLogger(__name__)


class CanvasModel:
    """
    Постоянный слой с рисунком + прозрачный оверлей, который перерисовывается каждый кадр.
    Рисунок меняется только сегментами штрихов и явной очисткой.
    """

    def __init__(self, width: int = 1280, height: int = 720):
        self.width = width
        self.height = height

        self.camera_frame: Optional[QImage] = None
        self.camera_opacity = 1.0

        self.segment_count = 0

        self._image = self._blank(width, height)
        self._overlay = self._blank(width, height)

    @staticmethod
    def _blank(width: int, height: int) -> QImage:
        image = QImage(width, height, QImage.Format.Format_ARGB32)
        image.fill(Qt.transparent)
        return image

    def set_camera_frame(self, image: Optional[QImage]):
        self.camera_frame = image

    def set_camera_opacity(self, opacity: float):
        self.camera_opacity = max(0.0, min(1.0, opacity))

    # --- ИСПОЛНЕНИЕ КОМАНД ---

    def apply(self, commands: Iterable):
        for command in commands:
            if isinstance(command, Segment):
                self.draw_segment(command)
            elif isinstance(command, ClearOverlay):
                self.clear_overlay()
            elif isinstance(command, HandSkeleton):
                self.draw_skeleton(command)
            elif isinstance(command, Pointer):
                self.draw_pointer(command)
            elif isinstance(command, DebugText):
                self.draw_debug_text(command)
            else:
                raise TypeError(f"Unknown render command: {command!r}")

    def draw_segment(self, segment: Segment):
        painter = QPainter(self._image)
        self._configure_painter(painter)
        if segment.kind == "erase":
            painter.setCompositionMode(QPainter.CompositionMode_Clear)
            pen = QPen(QColor(0, 0, 0))
        else:
            painter.setCompositionMode(QPainter.CompositionMode_SourceOver)
            pen = QPen(_to_qcolor(segment.color))

        pen.setWidthF(segment.width)
        pen.setCapStyle(Qt.RoundCap)
        pen.setJoinStyle(Qt.RoundJoin)
        painter.setPen(pen)
        painter.drawLine(QPointF(segment.x1, segment.y1), QPointF(segment.x2, segment.y2))
        painter.end()
        self.segment_count += 1

    def clear_overlay(self):
        self._overlay.fill(Qt.transparent)

    def draw_skeleton(self, skeleton: HandSkeleton):
        painter = QPainter(self._overlay)
        self._configure_painter(painter)
        painter.setPen(QPen(QColor("#00FF00"), 2))
        for a, b in skeleton.connections:
            pa, pb = skeleton.points[a], skeleton.points[b]
            painter.drawLine(QPointF(*pa), QPointF(*pb))

        painter.setPen(QPen(QColor("#FF0000"), 1))
        painter.setBrush(QColor("#FF0000"))
        for x, y in skeleton.points:
            painter.drawEllipse(QPointF(x, y), 3, 3)
        painter.end()

    def draw_pointer(self, pointer: Pointer):
        painter = QPainter(self._overlay)
        self._configure_painter(painter)
        center = QPointF(pointer.x, pointer.y)
        radius = pointer.size / 2

        if pointer.kind == "erase":
            pen = QPen(QColor(255, 0, 0, 204), 2)
            brush = QBrush(QColor(255, 0, 0, 77))
        elif pointer.kind == "draw":
            pen = QPen(_to_qcolor(pointer.color), 2)
            brush = QBrush(QColor(255, 255, 255, 128))
        else:
            # Рука есть, но жест не распознан - пустое кольцо
            radius = max(radius, 8)
            painter.setPen(QPen(Qt.black, 5))
            painter.setBrush(Qt.NoBrush)
            painter.drawEllipse(center, radius, radius)
            pen = QPen(Qt.white, 3)
            brush = QBrush(Qt.transparent)

        painter.setPen(pen)
        painter.setBrush(brush)
        painter.drawEllipse(center, radius, radius)
        painter.end()

    def draw_debug_text(self, text: DebugText):
        painter = QPainter(self._overlay)
        self._configure_painter(painter)
        font = QFont("Arial")
        font.setPixelSize(14)
        painter.setFont(font)
        painter.setPen(Qt.white)
        y = 30
        for line in text.lines:
            painter.drawText(20, y, line)
            y += 20
        painter.end()

    # --- ВНЕШНИЕ КОМАНДЫ ---

    def clear(self):
        self._image.fill(Qt.transparent)
        self.segment_count = 0

    def resize(self, width: int, height: int):
        """Изменение размера холста с сохранением нарисованного."""
        if (width, height) == (self.width, self.height):
            return
        new_image = self._blank(width, height)
        painter = QPainter(new_image)
        painter.drawImage(0, 0, self._image)
        painter.end()

        self.width = width
        self.height = height
        self._image = new_image
        self._overlay = self._blank(width, height)
        logger.info("Canvas resized to %dx%d", width, height)

    def export_png(self) -> bytes:
        """Сырые байты PNG постоянного слоя."""
        data = QByteArray()
        buffer = QBuffer(data)
        buffer.open(QIODevice.WriteOnly)
        self._image.save(buffer, "PNG")
        buffer.close()
        return bytes(data.data())

    def save_to_file(self, path: str) -> bool:
        ok = self._image.save(path, "PNG")
        if ok:
            logger.info("Drawing saved to %s", path)
        else:
            logger.error("Failed to save drawing to %s", path)
        return ok

    def _configure_painter(self, painter: QPainter):
        painter.setRenderHint(QPainter.Antialiasing)
        painter.setRenderHint(QPainter.SmoothPixmapTransform)

    @property
    def image(self) -> QImage:
        return self._image

    @property
    def overlay(self) -> QImage:
        return self._overlay


def image_to_array(image: QImage) -> np.ndarray:
    """QImage -> массив (h, w, 4) в порядке байт ARGB32 (B, G, R, A на little-endian)."""
    image = image.convertToFormat(QImage.Format.Format_ARGB32)
    h, w = image.height(), image.width()
    buf = np.frombuffer(image.constBits(), dtype=np.uint8, count=image.sizeInBytes())
    return buf.reshape(h, image.bytesPerLine())[:, :w * 4].reshape(h, w, 4).copy()


def _to_qcolor(color) -> QColor:
    if color is None:
        return QColor(0, 0, 0)
    return QColor(color)


class RenderEngine:
    def __init__(self, model: CanvasModel):
        self.model = model

    def fit_rect(self, target_rect: QRectF) -> QRectF:
        # Вписываем холст в виджет с сохранением пропорций
        scale = min(target_rect.width() / self.model.width, target_rect.height() / self.model.height)
        w, h = self.model.width * scale, self.model.height * scale
        x = target_rect.x() + (target_rect.width() - w) / 2
        y = target_rect.y() + (target_rect.height() - h) / 2
        return QRectF(x, y, w, h)

    def render_to_painter(self, painter: QPainter, target_rect: QRectF):
        painter.save()
        painter.fillRect(target_rect, Qt.white)

        rect = self.fit_rect(QRectF(target_rect))

        if self.model.camera_frame is not None and self.model.camera_opacity > 0.01:
            painter.save()
            painter.setOpacity(self.model.camera_opacity)
            painter.drawImage(rect, self.model.camera_frame)
            painter.restore()

        painter.drawImage(rect, self.model.image)
        painter.drawImage(rect, self.model.overlay)

        painter.restore()
