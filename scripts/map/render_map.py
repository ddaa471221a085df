"""
Render the county map and its break chart to HTML.

  python scripts/map/render_map.py --field "Primary Care Physicians Ratio" --highlight 2
"""
from __future__ import annotations
from pathlib import Path
import argparse
import sys

from healthmap.config_model.model import load_config
from healthmap.chart.common import export_png
from healthmap.chart.renderer import PlotlyRenderer
from healthmap.errors import InsufficientDataError
from healthmap.io.geo import load_regions
from healthmap.io.readers import read_table
from healthmap.session import MapSession


def parse_args(argv=None) -> argparse.Namespace:
    ap = argparse.ArgumentParser(description="Render a classified county choropleth.")
    ap.add_argument("--config", default=None, help="config TOML (default: config/config.toml or $HEALTHMAP_CFG)")
    ap.add_argument("--field", default=None, help="field to map (default: first numeric column)")
    ap.add_argument("--highlight", type=int, default=None, help="break index to highlight with labels")
    ap.add_argument("--out", default=None, help="output directory (default: charts.output_dir)")
    ap.add_argument("--png", action="store_true", help="also export map.png via playwright")
    ap.add_argument("--list-fields", action="store_true", help="print mappable fields and exit")
    return ap.parse_args(argv)


def main(argv=None) -> int:
    args = parse_args(argv)
    cfg = load_config(args.config)

    try:
        table = read_table(cfg.data.table_path)
        regions = load_regions(
            cfg.data.geo_path,
            key_property=cfg.data.geo_key_property,
            width=cfg.viewport.width,
            height=cfg.viewport.height,
            margin=cfg.viewport.margin,
        )
    except FileNotFoundError as e:
        print(f"[ERROR] input file not found: {e} (set [data] paths in the config)", file=sys.stderr)
        return 2
    renderer = PlotlyRenderer(regions, cfg)
    session = MapSession(table, regions, renderer, cfg)

    if args.list_fields:
        for f in session.fields:
            print(f)
        return 0

    try:
        result = session.select_field(args.field) if args.field else session.start()
    except InsufficientDataError as e:
        print(f"[ERROR] {e}", file=sys.stderr)
        return 2
    except KeyError as e:
        print(f"[ERROR] unknown field {e}; use --list-fields", file=sys.stderr)
        return 2
    except ValueError as e:
        print(f"[ERROR] {e}", file=sys.stderr)
        return 2

    if args.highlight is not None:
        if not 0 <= args.highlight < len(result.breaks):
            print(f"[ERROR] --highlight must be in 0..{len(result.breaks) - 1}", file=sys.stderr)
            return 2
        print(result.range_label(args.highlight))
        session.on_select_break(result.breaks[args.highlight])

    out_dir = Path(args.out or cfg.charts.output_dir)
    paths = renderer.write_html(out_dir)
    for name, p in paths.items():
        print(f"[OK] {name}: {p}")
    if args.png:
        try:
            png = export_png(
                renderer.map_figure, out_dir / "map.png",
                width=cfg.charts.png_width, height=cfg.charts.png_height, scale=cfg.charts.png_scale,
            )
            print(f"[OK] png: {png}")
        except RuntimeError as e:
            print(f"[WARN] PNG export failed: {e}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
