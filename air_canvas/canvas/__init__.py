from .stroke_renderer import FrameOutcome, RendererSettings, StrokeMode, StrokeState, process_frame
