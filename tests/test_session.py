"""
Tests for the per-session state object that drives the canvas.
"""
import unittest

from air_canvas.canvas.stroke_renderer import IDLE_STATE, DebugText, Segment, StrokeMode
from air_canvas.config import Cfg
from air_canvas.core.session import CanvasSession
from air_canvas.vision.frame_data import FrameData
from air_canvas.vision.gesture_detector import DebouncedGestureDetector, GestureDetector, GesturePose
from tests.hands import fist, open_palm, pointing


class RecordingTarget:
    """Заглушка холста: запоминает команды."""

    def __init__(self):
        self.commands = []
        self.cleared = 0

    def apply(self, commands):
        self.commands.extend(commands)

    def clear(self):
        self.cleared += 1

    @property
    def segments(self):
        return [c for c in self.commands if isinstance(c, Segment)]


class TestCanvasSession(unittest.TestCase):

    def setUp(self):
        self.target = RecordingTarget()
        self.session = CanvasSession(self.target)
        self.size = (640, 480)

    def test_starts_idle(self):
        self.assertEqual(self.session.state, IDLE_STATE)
        self.assertEqual(self.session.pose, GesturePose.NONE)

    def test_commands_reach_target(self):
        self.session.process(pointing(), self.size)
        self.session.process(pointing(offset=(0.05, 0.0)), self.size)

        self.assertEqual(len(self.target.segments), 1)
        self.assertEqual(self.session.state.mode, StrokeMode.DRAWING)
        self.assertEqual(self.session.pose, GesturePose.POINTING)
        self.assertIsNotNone(self.session.metrics)

    def test_counters(self):
        self.session.process(None, self.size)
        self.session.process(pointing()[:5], self.size)
        self.session.process(open_palm(), self.size)

        self.assertEqual(self.session.frames_processed, 3)
        self.assertEqual(self.session.frames_without_hand, 2)
        self.assertEqual(self.session.malformed_frames, 1)

    def test_color_change_applies_to_next_segment(self):
        self.session.set_color("#ff0000")
        self.session.process(pointing(), self.size)
        self.session.process(pointing(offset=(0.01, 0.0)), self.size)
        self.session.set_color("#00ff00")
        self.session.process(pointing(offset=(0.02, 0.0)), self.size)

        self.assertEqual([s.color for s in self.target.segments], ["#ff0000", "#00ff00"])

    def test_clear_does_not_touch_stroke_state(self):
        self.session.process(pointing(), self.size)
        before = self.session.state

        self.session.clear()

        self.assertEqual(self.target.cleared, 1)
        self.assertEqual(self.session.state, before)

    def test_reset(self):
        self.session.process(open_palm(), self.size)
        self.session.reset()
        self.assertEqual(self.session.state, IDLE_STATE)
        self.assertIsNone(self.session.metrics)

    def test_handle_frame_uses_first_hand_only(self):
        frame = FrameData(width=640, height=480, hands=[pointing(), open_palm()])
        outcome = self.session.handle_frame(frame)
        self.assertEqual(outcome.pose, GesturePose.POINTING)

    def test_handle_frame_without_hands(self):
        outcome = self.session.handle_frame(FrameData(width=640, height=480))
        self.assertEqual(outcome.state, IDLE_STATE)
        self.assertEqual(self.session.frames_without_hand, 1)

    def test_debug_toggle(self):
        self.session.set_debug(True)
        self.session.process(fist(), self.size)
        self.assertTrue(any(isinstance(c, DebugText) for c in self.target.commands))

        self.target.commands.clear()
        self.session.set_debug(False)
        self.session.process(fist(), self.size)
        self.assertFalse(any(isinstance(c, DebugText) for c in self.target.commands))


    def test_debug_overlay_shows_fps_and_frame_time(self):
        self.session.set_debug(True)
        for hands in ([], [pointing()]):
            self.target.commands.clear()
            self.session.handle_frame(FrameData(width=640, height=480, hands=hands, fps=30.0, processing_ms=12.5))

            text, = [c for c in self.target.commands if isinstance(c, DebugText)]
            self.assertIn("FPS: 30.0", text.lines)
            self.assertIn("Frame Time: 12.5ms", text.lines)

    def test_no_fps_line_without_debug(self):
        self.session.handle_frame(FrameData(width=640, height=480, fps=30.0, processing_ms=12.5))
        self.assertFalse(any(isinstance(c, DebugText) for c in self.target.commands))

    def test_sample_with_empty_point_counts_as_malformed(self):
        sample = list(pointing())
        sample[3] = None
        self.session.process(sample, self.size)
        self.assertEqual(self.session.malformed_frames, 1)
        self.assertEqual(self.session.frames_without_hand, 1)

class TestSessionFromConfig(unittest.TestCase):

    def test_defaults(self):
        cfg = Cfg()
        session = CanvasSession.from_config(RecordingTarget(), cfg)

        self.assertIs(type(session.detector), GestureDetector)
        self.assertEqual(session.color, "#000000")
        self.assertEqual(session.settings.brush_scale, 0.4)
        self.assertFalse(session.settings.debug)

    def test_debounce_and_debug_from_config(self):
        cfg = Cfg()
        cfg.gestures.debounce_frames = 3
        cfg.display.debug = True
        cfg.drawing.min_stroke_width = 4.0

        session = CanvasSession.from_config(RecordingTarget(), cfg, color="#123456")

        self.assertIsInstance(session.detector, DebouncedGestureDetector)
        self.assertEqual(session.detector.buffer_size, 3)
        self.assertTrue(session.settings.debug)
        self.assertEqual(session.settings.min_stroke_width, 4.0)
        self.assertEqual(session.color, "#123456")


if __name__ == "__main__":
    unittest.main()
