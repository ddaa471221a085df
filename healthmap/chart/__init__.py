from .common import (
    theme_from_cfg,
    apply_theme,
    export_html,
    export_png,
)

# expose submodules without importing symbols (prevents import-time failures)
from . import choropleth, threshold, renderer

__all__ = [
    "theme_from_cfg", "apply_theme",
    "export_html", "export_png",
    "choropleth", "threshold", "renderer",
]
