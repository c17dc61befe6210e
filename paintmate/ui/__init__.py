from .image_canvas import ImageCanvas
from .info_panel import InfoPanel
from .layer_panel import LayerPanel
from .tools_panel import ToolsPanel

__all__ = ["ImageCanvas", "InfoPanel", "LayerPanel", "ToolsPanel"]
