"""
Загрузка настроек приложения из YAML.
"""
import logging
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path(__file__).parent / "config.default.yaml"


class ConfigError(ValueError):
    """Некорректное значение в файле настроек."""


@dataclass
class CameraConfig:
    index: int = 0
    width: int = 1280
    height: int = 720
    mirror: bool = True


@dataclass
class MediaPipeConfig:
    max_num_hands: int = 1
    model_complexity: int = 1
    min_detection_confidence: float = 0.5
    min_tracking_confidence: float = 0.5


@dataclass
class DrawingConfig:
    brush_scale: float = 0.4
    eraser_scale: float = 1.5
    default_brush_size: float = 10.0
    default_eraser_size: float = 50.0
    # Минимальная толщина штриха, чтобы вырожденная ладонь не давала невидимых линий
    min_stroke_width: float = 1.0
    depth_scale: float = 50000.0
    default_color: str = "#000000"


@dataclass
class GesturesConfig:
    # 0 - без подавления мерцания
    debounce_frames: int = 0


@dataclass
class DisplayConfig:
    window_title: str = "Air Canvas"
    debug: bool = False
    frame_interval_ms: int = 16
    export_filename: str = "hand-gesture-drawing.png"
    camera_probe_limit: int = 5


@dataclass
class Cfg:
    camera: CameraConfig = field(default_factory=CameraConfig)
    mediapipe: MediaPipeConfig = field(default_factory=MediaPipeConfig)
    drawing: DrawingConfig = field(default_factory=DrawingConfig)
    gestures: GesturesConfig = field(default_factory=GesturesConfig)
    display: DisplayConfig = field(default_factory=DisplayConfig)


def load_config(path: Optional[str] = None) -> Cfg:
    """
    Load configuration from a YAML file.

    Args:
        path: Path to config file. If None, uses the packaged config.default.yaml

    Returns:
        Configuration object; sections missing from the file keep their defaults
    """
    config_path = Path(path) if path is not None else DEFAULT_CONFIG_PATH
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path, "r", encoding="utf-8") as f:
        try:
            data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigError(f"Cannot parse {config_path}: {e}") from e

    logger.info("Loaded config from %s", config_path)
    return dict_to_config(data)


def dict_to_config(data: Dict[str, Any]) -> Cfg:
    if not isinstance(data, dict):
        raise ConfigError("Config root must be a mapping")

    cfg = Cfg(
        camera=_section(CameraConfig, data, "camera"),
        mediapipe=_section(MediaPipeConfig, data, "mediapipe"),
        drawing=_section(DrawingConfig, data, "drawing"),
        gestures=_section(GesturesConfig, data, "gestures"),
        display=_section(DisplayConfig, data, "display"),
    )
    _validate(cfg)
    return cfg


def _section(cls, data: Dict[str, Any], name: str):
    raw = data.get(name) or {}
    if not isinstance(raw, dict):
        raise ConfigError(f"Section '{name}' must be a mapping")

    known = {f.name: f for f in fields(cls)}
    unknown = set(raw) - set(known)
    if unknown:
        raise ConfigError(f"Unknown keys in '{name}': {', '.join(sorted(unknown))}")

    values = {}
    for key, value in raw.items():
        default = getattr(cls(), key)
        values[key] = _coerce(value, type(default), f"{name}.{key}")
    return cls(**values)


def _coerce(value, expected: type, where: str):
    # bool - подкласс int, поэтому проверяем отдельно
    if expected is bool:
        if not isinstance(value, bool):
            raise ConfigError(f"{where} must be true or false")
        return value
    if expected is float:
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ConfigError(f"{where} must be a number")
        return float(value)
    if expected is int:
        if isinstance(value, bool) or not isinstance(value, int):
            raise ConfigError(f"{where} must be an integer")
        return value
    if not isinstance(value, expected):
        raise ConfigError(f"{where} must be {expected.__name__}")
    return value


def _validate(cfg: Cfg):
    if cfg.camera.width <= 0 or cfg.camera.height <= 0:
        raise ConfigError("camera.width and camera.height must be positive")
    if cfg.camera.index < 0:
        raise ConfigError("camera.index must not be negative")
    if cfg.mediapipe.max_num_hands < 1:
        raise ConfigError("mediapipe.max_num_hands must be at least 1")
    if cfg.mediapipe.model_complexity not in (0, 1):
        raise ConfigError("mediapipe.model_complexity must be 0 or 1")
    for name in ("min_detection_confidence", "min_tracking_confidence"):
        value = getattr(cfg.mediapipe, name)
        if not 0.0 <= value <= 1.0:
            raise ConfigError(f"mediapipe.{name} must be within [0, 1]")
    if cfg.drawing.min_stroke_width <= 0:
        raise ConfigError("drawing.min_stroke_width must be positive")
    if cfg.drawing.brush_scale < 0 or cfg.drawing.eraser_scale < 0:
        raise ConfigError("drawing scales must not be negative")
    if cfg.drawing.depth_scale < 0:
        raise ConfigError("drawing.depth_scale must not be negative")
    if cfg.gestures.debounce_frames == 1 or cfg.gestures.debounce_frames < 0:
        raise ConfigError("gestures.debounce_frames must be 0 or at least 2")
    if cfg.display.frame_interval_ms <= 0:
        raise ConfigError("display.frame_interval_ms must be positive")
    if cfg.display.camera_probe_limit < 1:
        raise ConfigError("display.camera_probe_limit must be at least 1")
