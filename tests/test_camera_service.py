"""
Tests for CameraService with OpenCV and MediaPipe replaced by fakes.
"""
import unittest
from types import SimpleNamespace
from unittest import mock

import numpy as np

try:
    from air_canvas.vision import camera_service
except ImportError as e:  # cv2 или mediapipe не установлены
    raise unittest.SkipTest(f"camera dependencies unavailable: {e}")

from air_canvas.config import Cfg
from air_canvas.vision.camera_service import CameraError, CameraService, list_cameras
from tests.hands import pointing


class FakeCapture:
    def __init__(self, index, events, openable):
        self.index = index
        self.events = events
        self.opened = index in openable
        self.events.append(("open", index))

    def isOpened(self):
        return self.opened

    def set(self, prop, value):
        return True

    def get(self, prop):
        return 0

    def read(self):
        frame = np.zeros((4, 6, 3), dtype=np.uint8)
        frame[:, 0] = 255  # левый столбец
        return True, frame

    def release(self):
        if self.opened:
            self.events.append(("release", self.index))
        self.opened = False


class CameraServiceTestCase(unittest.TestCase):

    def setUp(self):
        self.events = []
        self.openable = {0, 1}

        cv2_patch = mock.patch.object(camera_service, "cv2")
        mp_patch = mock.patch.object(camera_service, "mp")
        self.cv2 = cv2_patch.start()
        self.mp = mp_patch.start()
        self.addCleanup(cv2_patch.stop)
        self.addCleanup(mp_patch.stop)

        self.cv2.VideoCapture.side_effect = lambda i: FakeCapture(i, self.events, self.openable)
        self.cv2.flip.side_effect = lambda frame, code: frame[:, ::-1]
        self.cv2.cvtColor.side_effect = lambda frame, code: frame

        self.hands = self.mp.solutions.hands.Hands.return_value
        self.hands.process.return_value = SimpleNamespace(multi_hand_landmarks=None)


class TestCameraService(CameraServiceTestCase):

    def test_open_failure(self):
        with self.assertRaises(CameraError):
            CameraService(camera_index=5)
        self.hands.close.assert_called_once()

    def test_detector_options(self):
        CameraService(camera_index=0, max_num_hands=1, model_complexity=1,
                      min_detection_confidence=0.5, min_tracking_confidence=0.5)
        kwargs = self.mp.solutions.hands.Hands.call_args.kwargs
        self.assertEqual(kwargs["max_num_hands"], 1)
        self.assertEqual(kwargs["model_complexity"], 1)
        self.assertFalse(kwargs["static_image_mode"])

    def test_from_config(self):
        cfg = Cfg()
        cfg.camera.index = 1
        service = CameraService.from_config(cfg)
        self.assertEqual(service.camera_index, 1)
        self.assertEqual(service.frame_size, (1280, 720))

        other = CameraService.from_config(cfg, camera_index=0)
        self.assertEqual(other.camera_index, 0)

    def test_switch_releases_previous_stream_first(self):
        service = CameraService(camera_index=0)
        self.events.clear()

        service.switch_camera(1)

        self.assertEqual(self.events, [("release", 0), ("open", 1)])
        self.assertEqual(service.camera_index, 1)

    def test_poll_without_hand(self):
        service = CameraService(camera_index=0, mirror=False)
        received = []
        service.on_frame_result(received.append)

        data = service.poll()

        self.assertEqual(len(received), 1)
        self.assertIs(received[0], data)
        self.assertEqual(data.hands, [])
        self.assertIsNone(data.first_hand)
        self.assertEqual(data.frame_size, (6, 4))
        self.cv2.flip.assert_not_called()

    def test_poll_with_hands_and_mirror(self):
        first, second = pointing(), pointing(offset=(0.1, 0.0))
        self.hands.process.return_value = SimpleNamespace(multi_hand_landmarks=[
            SimpleNamespace(landmark=first),
            SimpleNamespace(landmark=second),
        ])
        service = CameraService(camera_index=0, mirror=True)

        data = service.poll()

        self.assertEqual(len(data.hands), 2)
        self.assertEqual(list(data.first_hand), list(first))
        # Отзеркаленный кадр: белый столбец справа
        self.assertEqual(int(data.raw_frame[0, -1, 0]), 255)

    def test_poll_reports_processing_time_and_fps(self):
        service = CameraService(camera_index=0)
        # Начало и конец обработки, затем отметка счётчика FPS, для двух кадров
        ticks = [1.0, 1.25, 1.3, 2.0, 2.01, 2.3]

        with mock.patch.object(camera_service.time, "perf_counter", side_effect=ticks):
            first = service.poll()
            second = service.poll()

        self.assertAlmostEqual(first.processing_ms, 250.0)
        self.assertEqual(first.fps, 0.0)
        self.assertAlmostEqual(second.processing_ms, 10.0)
        self.assertAlmostEqual(second.fps, 1.0)

    def test_poll_after_release(self):
        service = CameraService(camera_index=0)
        service.release()
        self.assertIsNone(service.poll())

    def test_close_releases_everything(self):
        service = CameraService(camera_index=0)
        service.close()
        self.assertIn(("release", 0), self.events)
        self.hands.close.assert_called_once()


class TestListCameras(CameraServiceTestCase):

    def test_lists_openable_devices(self):
        self.assertEqual(list_cameras(4), [0, 1])

    def test_skip_busy_device(self):
        self.assertEqual(list_cameras(4, skip=(0,)), [1])
        self.assertNotIn(("open", 0), self.events)


if __name__ == "__main__":
    unittest.main()
