import logging
import os
from typing import List, Optional

from PySide6.QtCore import Qt, Signal
from PySide6.QtGui import QColor, QPainter, QPaintEvent
from PySide6.QtWidgets import (
    QColorDialog, QComboBox, QFileDialog, QFrame, QHBoxLayout, QLabel, QMainWindow,
    QPushButton, QSizePolicy, QSlider, QStatusBar, QVBoxLayout, QWidget
)

from air_canvas.canvas.canvas import CanvasModel, RenderEngine
from air_canvas.core.session import CanvasSession
from air_canvas.vision.gesture_detector import GesturePose

logger = logging.getLogger(__name__)


# --- ВИДЖЕТ ХОЛСТА ---
class CanvasWidget(QWidget):
    def __init__(self, model: CanvasModel, engine: RenderEngine, parent=None):
        super().__init__(parent)
        self._model = model
        self._engine = engine
        self.setSizePolicy(QSizePolicy.Expanding, QSizePolicy.Expanding)

    def paintEvent(self, event: QPaintEvent):
        painter = QPainter(self)
        painter.setRenderHint(QPainter.Antialiasing)
        self._engine.render_to_painter(painter, self.rect())
        painter.end()


# --- КОМПОНЕНТЫ UI ---
class ToolButton(QPushButton):
    def __init__(self, tooltip: str, icon_text: str, parent=None, size: int = 56, checkable=False):
        super().__init__(parent)
        self.setText(icon_text)
        self.setToolTip(tooltip)
        self.setFixedSize(size, size)
        self._size = size
        self.setCheckable(checkable)
        self.toggled.connect(lambda _: self._init_style())
        self._init_style()

    def _init_style(self):
        if self.isCheckable() and self.isChecked():
            bg, hover, border, text = "#2ECC71", "#4CD988", "#27AE60", "white"
        else:
            bg, hover, border, text = "#FFFFFF", "#F5F6FA", "#E0E0E0", "#333333"

        font_size = "12px" if len(self.text()) > 5 else "22px"
        self.setStyleSheet(f"""
            QPushButton {{
                background-color: {bg}; color: {text}; border: 2px solid {border};
                border-radius: {self._size // 2}px; font-size: {font_size}; font-weight: bold;
            }}
            QPushButton:hover {{ background-color: {hover}; }}
        """)


class ColorSwatchButton(ToolButton):
    def __init__(self, color_hex: str, tooltip: str = "", size: int = 44, parent=None, is_picker=False):
        self._color_hex = color_hex
        self._is_picker = is_picker
        self._is_selected = False
        super().__init__(tooltip=tooltip or color_hex, icon_text="..." if is_picker else "",
                         parent=parent, size=size)

    @property
    def color_hex(self):
        return self._color_hex

    def set_selected(self, selected: bool):
        self._is_selected = selected
        self._init_style()

    def _init_style(self):
        border = "3px solid #5A7FFF" if self._is_selected else "2px solid #FFFFFF"

        bg_style = f"background-color: {self._color_hex};"
        if self._is_picker:
            bg_style = "background: qlineargradient(x1:0, y1:0, x2:1, y2:1, stop:0 #ff9a9e, stop:1 #fad0c4);"

        self.setStyleSheet(f"""
            QPushButton {{
                {bg_style}
                border: {border};
                border-radius: {self._size // 2}px;
                color: #333; font-weight: bold; font-size: 14px;
            }}
            QPushButton:hover {{ border: 3px solid #BDC3C7; }}
        """)


class GestureHintWidget(QLabel):
    HINTS = {
        GesturePose.NONE: "✋ Поднимите указательный палец для рисования",
        GesturePose.POINTING: "☝️ Рисование (указательный палец)",
        GesturePose.OPEN_PALM: "🖐 Ластик (раскрытая ладонь)",
    }

    def __init__(self):
        super().__init__("👀 Поиск руки...")
        self.setAlignment(Qt.AlignCenter)
        self.setFixedHeight(40)
        self.update_hint(None)

    def update_hint(self, pose: Optional[GesturePose]):
        # None - руки в кадре нет
        self.setText(self.HINTS.get(pose, "👀 Поиск руки..."))

        if pose is GesturePose.POINTING:
            self.setStyleSheet("background: #27AE60; color: white; padding: 10px 20px; border-radius: 10px; font-weight: bold;")
        elif pose is GesturePose.OPEN_PALM:
            self.setStyleSheet("background: #E67E22; color: white; padding: 10px 20px; border-radius: 10px; font-weight: bold;")
        else:
            self.setStyleSheet("background: #2C3E50; color: #ECF0F1; padding: 10px 20px; border-radius: 10px;")


# --- MAIN WINDOW ---
class MainWindow(QMainWindow):
    camera_selected = Signal(int)

    SWATCHES = ["#000000", "#FF4757", "#FF7A3D", "#FFC312", "#2ECC71", "#3498DB", "#9B59B6", "#E91E63", "#FFFFFF"]

    def __init__(self, model: CanvasModel, engine: RenderEngine, session: CanvasSession,
                 title: str = "Air Canvas", export_filename: str = "hand-gesture-drawing.png"):
        super().__init__()
        self._model = model
        self._engine = engine
        self._session = session
        self._export_filename = export_filename

        self._color_swatches: List[ColorSwatchButton] = []
        self._active_color_btn: Optional[ColorSwatchButton] = None

        self.setWindowTitle(title)
        self._init_ui()
        self._select_initial_color()

    def _init_ui(self):
        self.setStyleSheet("QMainWindow { background-color: #E9EEF3; }")

        central = QWidget()
        self.setCentralWidget(central)
        main_layout = QVBoxLayout(central)
        main_layout.setContentsMargins(16, 16, 16, 16)
        main_layout.setSpacing(12)

        self._create_top_bar(main_layout)

        mid_layout = QHBoxLayout()
        mid_layout.setSpacing(12)
        self.canvas_widget = CanvasWidget(self._model, self._engine)
        mid_layout.addWidget(self.canvas_widget, stretch=1)
        self._create_right_control_panel(mid_layout)
        main_layout.addLayout(mid_layout, stretch=1)

        self._create_bottom_bar(main_layout)

    def _create_top_bar(self, layout):
        frame = QFrame()
        frame.setFixedHeight(80)
        frame.setStyleSheet("QFrame { background: #2C3E50; border-radius: 16px; }")
        l = QHBoxLayout(frame)
        l.setContentsMargins(24, 12, 24, 12)

        for c in self.SWATCHES:
            btn = ColorSwatchButton(c)
            btn.clicked.connect(lambda ch, b=btn: self.set_color(b.color_hex, b))
            l.addWidget(btn)
            self._color_swatches.append(btn)

        l.addSpacing(10)
        self.picker_btn = ColorSwatchButton("#ffffff", "Выбрать цвет", is_picker=True)
        self.picker_btn.clicked.connect(self._open_color_picker)
        l.addWidget(self.picker_btn)

        l.addStretch()

        camera_label = QLabel("Камера:")
        camera_label.setStyleSheet("color: #ECF0F1; font-weight: 700;")
        l.addWidget(camera_label)

        self.camera_select = QComboBox()
        self.camera_select.setMinimumWidth(160)
        self.camera_select.currentIndexChanged.connect(self._on_camera_changed)
        l.addWidget(self.camera_select)

        layout.addWidget(frame)

    def _create_right_control_panel(self, layout):
        frame = QFrame()
        frame.setFixedWidth(96)
        frame.setStyleSheet("background: transparent;")
        l = QVBoxLayout(frame)
        l.setSpacing(15)

        btn_save = ToolButton("Сохранить", "💾", size=60)
        btn_save.clicked.connect(self._on_save)
        l.addWidget(btn_save)

        btn_clear = ToolButton("Очистить", "🗑", size=60)
        btn_clear.clicked.connect(self._on_clear)
        l.addWidget(btn_clear)

        l.addStretch()

        self.btn_debug = ToolButton("Отладочная информация", "Debug", size=60, checkable=True)
        self.btn_debug.setChecked(self._session.settings.debug)
        self.btn_debug.toggled.connect(self._session.set_debug)
        l.addWidget(self.btn_debug)

        layout.addWidget(frame)

    def _create_bottom_bar(self, layout):
        frame = QFrame()
        frame.setFixedHeight(90)
        frame.setStyleSheet("background: #FFFFFF; border: 1px solid #BDC3C7; border-radius: 16px;")
        l = QHBoxLayout(frame)
        l.setSpacing(30)
        l.setContentsMargins(30, 5, 30, 5)

        self.gesture_hint = GestureHintWidget()
        self.gesture_hint.setFixedWidth(380)
        l.addWidget(self.gesture_hint)

        l.addStretch()

        container = QVBoxLayout()
        container.setAlignment(Qt.AlignCenter)
        label = QLabel("ПРОЗРАЧНОСТЬ КАМЕРЫ")
        label.setAlignment(Qt.AlignCenter)
        label.setStyleSheet("border: none; font-size: 11px; font-weight: bold; color: #7f8c8d; letter-spacing: 1px;")
        slider = QSlider(Qt.Horizontal)
        slider.setRange(0, 100)
        slider.setValue(int(self._model.camera_opacity * 100))
        slider.setFixedWidth(180)
        slider.valueChanged.connect(self._on_opacity_change)
        container.addWidget(label)
        container.addWidget(slider)
        l.addLayout(container)

        layout.addWidget(frame)

        self.status_bar = QStatusBar()
        self.setStatusBar(self.status_bar)

    # --- КАМЕРЫ ---

    def set_cameras(self, indices: List[int], current: Optional[int]):
        self.camera_select.blockSignals(True)
        self.camera_select.clear()
        if not indices:
            self.camera_select.addItem("Камеры не найдены", -1)
        for i in indices:
            self.camera_select.addItem(f"Камера {i}", i)
        if current is not None and current in indices:
            self.camera_select.setCurrentIndex(indices.index(current))
        self.camera_select.blockSignals(False)

    def _on_camera_changed(self, combo_index: int):
        camera_index = self.camera_select.itemData(combo_index)
        if camera_index is not None and camera_index >= 0:
            self.camera_selected.emit(camera_index)

    # --- ДЕЙСТВИЯ ---

    def _on_clear(self):
        self._session.clear()
        self.canvas_widget.update()
        self.status_bar.showMessage("Холст очищен", 3000)

    def _on_save(self):
        save_dir = os.path.join(os.getcwd(), "saved_drawings")
        try:
            os.makedirs(save_dir, exist_ok=True)
        except OSError as e:
            logger.warning("Cannot create %s: %s", save_dir, e)
            save_dir = os.getcwd()

        path, _ = QFileDialog.getSaveFileName(
            self, "Сохранить рисунок", os.path.join(save_dir, self._export_filename),
            "PNG Image (*.png)"
        )
        if not path:
            return

        if self._model.save_to_file(path):
            self.status_bar.showMessage(f"Сохранено в: {path}", 5000)
        else:
            self.status_bar.showMessage("Ошибка при сохранении!", 5000)

    def _on_opacity_change(self, val):
        self._model.set_camera_opacity(val / 100.0)
        self.canvas_widget.update()

    def _open_color_picker(self):
        current = self._active_color_btn.color_hex if self._active_color_btn else "#000000"
        color = QColorDialog.getColor(QColor(current), self, "Выбрать цвет")
        if color.isValid():
            self.set_color(color.name(), None)

    def set_color(self, hex_color: str, btn_obj: Optional[ColorSwatchButton]):
        # Цвет читается сессией при фиксации следующего сегмента
        self._session.set_color(QColor(hex_color))
        self._active_color_btn = btn_obj
        for b in self._color_swatches:
            b.set_selected(b is btn_obj)
        self.status_bar.showMessage(f"Цвет: {hex_color}")

    def _select_initial_color(self):
        initial = QColor(self._session.color).name()
        for b in self._color_swatches:
            if QColor(b.color_hex).name() == initial:
                self.set_color(b.color_hex, b)
                return
        self.set_color(initial, None)

    def update_gesture_hint(self, pose: Optional[GesturePose]):
        self.gesture_hint.update_hint(pose)

    def show_status(self, message: str, timeout: int = 5000):
        self.status_bar.showMessage(message, timeout)
