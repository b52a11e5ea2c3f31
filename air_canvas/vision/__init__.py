# CameraService не импортируется здесь, чтобы чистая логика не тянула cv2 и mediapipe
from .gesture_detector import DebouncedGestureDetector, GestureDetector, GesturePose, classify_pose
from .landmarks import HandLandmark, Landmark, to_sample
from .metrics import HandMetrics, brush_size, calculate_metrics, eraser_size
