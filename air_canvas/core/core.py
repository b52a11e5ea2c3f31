import argparse
import logging
import sys
from typing import List, Optional

import cv2
from PySide6.QtCore import QTimer
from PySide6.QtGui import QImage
from PySide6.QtWidgets import QApplication

from air_canvas.canvas.canvas import CanvasModel, RenderEngine
from air_canvas.config import Cfg, load_config
from air_canvas.core.session import CanvasSession
from air_canvas.ui.ui import MainWindow
from air_canvas.vision.camera_service import CameraError, CameraService, list_cameras
from air_canvas.vision.frame_data import FrameData

logger = logging.getLogger(__name__)


class AppCore:
    def __init__(self, sys_argv: List[str], cfg: Cfg):
        self.app = QApplication(sys_argv)
        self.app.setStyle("Fusion")
        self.cfg = cfg

        self.camera: Optional[CameraService] = None
        try:
            self.camera = CameraService.from_config(cfg)
            width, height = self.camera.frame_size
        except CameraError as e:
            logger.error("Camera error: %s. Running without camera.", e)
            width, height = cfg.camera.width, cfg.camera.height

        self.model = CanvasModel(width=width, height=height)
        self.engine = RenderEngine(self.model)
        self.session = CanvasSession.from_config(self.model, cfg)

        self.window = MainWindow(self.model, self.engine, self.session,
                                 title=cfg.display.window_title,
                                 export_filename=cfg.display.export_filename)
        self.window.camera_selected.connect(self.switch_camera)
        self._populate_cameras()

        self.window.resize(min(1600, width + 200), min(1000, height + 220))
        self.window.show()

        if self.camera is None:
            self.window.show_status("Камера недоступна", 0)
        else:
            self.camera.on_frame_result(self._on_frame)

        self.timer = QTimer()
        self.timer.timeout.connect(self._game_loop)
        self.timer.start(cfg.display.frame_interval_ms)

    def run(self) -> int:
        try:
            return self.app.exec()
        finally:
            self.timer.stop()
            if self.camera is not None:
                self.camera.close()

    def _populate_cameras(self):
        current = self.camera.camera_index if self.camera is not None else None
        # Текущее устройство уже занято, при переборе его не переоткрываем
        skip = () if current is None else (current,)
        indices = list_cameras(self.cfg.display.camera_probe_limit, skip=skip)
        if current is not None:
            indices = sorted(indices + [current])
        self.window.set_cameras(indices, current)

    def switch_camera(self, camera_index: int):
        if self.camera is not None and camera_index == self.camera.camera_index:
            return

        # Таймер стоит, пока меняется устройство: кадры старой камеры не должны пройти в сессию
        self.timer.stop()
        try:
            if self.camera is None:
                self.camera = CameraService.from_config(self.cfg, camera_index=camera_index)
                self.camera.on_frame_result(self._on_frame)
            else:
                self.camera.switch_camera(camera_index)
        except CameraError as e:
            logger.error("Cannot switch to camera %d: %s", camera_index, e)
            self.window.show_status(f"Не удалось открыть камеру {camera_index}")
            return
        finally:
            self.session.reset()
            self.timer.start(self.cfg.display.frame_interval_ms)

        self.model.resize(*self.camera.frame_size)
        self.window.show_status(f"Камера {camera_index}", 3000)

    def _game_loop(self):
        if self.camera is not None:
            self.camera.poll()

    def _on_frame(self, data: FrameData):
        if data.frame_size != (self.model.width, self.model.height):
            self.model.resize(*data.frame_size)

        outcome = self.session.handle_frame(data)

        if data.raw_frame is not None:
            rgb_frame = cv2.cvtColor(data.raw_frame, cv2.COLOR_BGR2RGB)
            h, w, ch = rgb_frame.shape
            qt_image = QImage(rgb_frame.data, w, h, ch * w, QImage.Format_RGB888)
            self.model.set_camera_frame(qt_image.copy())

        self.window.update_gesture_hint(outcome.pose if outcome.metrics is not None else None)
        self.window.canvas_widget.update()


def main(argv: Optional[List[str]] = None) -> int:
    argv = sys.argv if argv is None else argv
    parser = argparse.ArgumentParser(prog="air-canvas", description="Draw in the air with your index finger.")
    parser.add_argument("--config", help="path to a YAML config file")
    parser.add_argument("--debug", action="store_true", help="verbose logging and metrics overlay")
    args, qt_args = parser.parse_known_args(argv[1:])

    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    cfg = load_config(args.config)
    if args.debug:
        cfg.display.debug = True

    core = AppCore(argv[:1] + qt_args, cfg)
    return core.run()
