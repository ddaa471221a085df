from __future__ import annotations
from pathlib import Path
from typing import Optional
import tempfile

_THEMES: dict[str, dict[str, str]] = {
    "light": {
        "paper_bg": "#ffffff",
        "plot_bg": "#ffffff",
        "axis": "#333333",
        "grid": "#e5e7eb",
        "neutral": "#999999",
        "stroke": "#333333",
        "highlight": "#999999",
        "font": "sans-serif",
    },
    "dark_blue": {
        "paper_bg": "#0b1220",
        "plot_bg": "#0b1220",
        "axis": "#e5e7eb",
        "grid": "#1f2937",
        "neutral": "#6b7280",
        "stroke": "#cbd5e1",
        "highlight": "#f8fafc",
        "font": "sans-serif",
    },
}

def theme_from_cfg(name: str = "light") -> dict[str, str]:
    try:
        return dict(_THEMES[name])
    except KeyError:
        raise ValueError(f"Unknown theme '{name}'. Available: {sorted(_THEMES)}") from None

def apply_theme(fig, theme: dict[str, str]):
    fig.update_layout(
        paper_bgcolor=theme["paper_bg"],
        plot_bgcolor=theme["plot_bg"],
        font=dict(family=theme["font"], color=theme["axis"]),
    )
    return fig

def _ensure_parent(path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)

def export_html(fig, out_html: Optional[str | Path] = None) -> Path:
    """Write a self-contained HTML file for a Plotly figure and return its path."""
    from plotly.io import to_html
    html = to_html(fig, full_html=True, include_plotlyjs="cdn")
    if out_html is None:
        tmp = tempfile.NamedTemporaryFile(delete=False, suffix=".html")
        tmp.write(html.encode("utf-8"))
        tmp.flush()
        tmp.close()
        return Path(tmp.name)
    out = Path(out_html)
    _ensure_parent(out)
    out.write_text(html, encoding="utf-8")
    return out

def export_png(
    fig,
    out_path: str | Path,
    *,
    width: int = 1200,
    height: int = 700,
    scale: float = 2.0,
    engine: str = "playwright",
    timeout_ms: int = 10_000,
) -> str:
    """Screenshot the figure's HTML in headless Chromium; returns the absolute PNG path."""
    if engine != "playwright":
        raise ValueError(f"Unknown engine '{engine}'. Only 'playwright' is supported.")
    try:
        from playwright.sync_api import sync_playwright
    except ImportError as e:
        raise RuntimeError(
            "Playwright not available. Install the 'png' extra and run 'playwright install chromium'."
        ) from e

    out = Path(out_path).resolve()
    _ensure_parent(out)
    html_path = export_html(fig)
    try:
        with sync_playwright() as pw:
            browser = pw.chromium.launch(headless=True, args=["--allow-file-access-from-files"])
            page = browser.new_page(viewport={"width": width, "height": height}, device_scale_factor=scale)
            page.goto(html_path.resolve().as_uri(), wait_until="networkidle", timeout=timeout_ms)
            page.screenshot(path=str(out))
            browser.close()
    finally:
        html_path.unlink(missing_ok=True)
    return str(out)
