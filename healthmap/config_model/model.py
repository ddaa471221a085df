from __future__ import annotations
from typing import List, Optional
from pathlib import Path
import os
from pydantic import (
    BaseModel,
    ConfigDict,
    PrivateAttr,
    model_validator,
)


# ---------- Leaf models ----------

class EnvCfg(BaseModel):
    project_name: str = "county-health-map"
    seed: int = 42


class DataCfg(BaseModel):
    table_path: str = "data/county_health_rankings.csv"
    geo_path: str = "data/counties.geojson"
    key_column: str = "county"
    geo_key_property: str = "NAME"
    # identifier/count columns never offered as a mapped field
    reserved_columns: List[str] = ["county", "fips", "deaths"]
    source_url: str = "https://www.countyhealthrankings.org/health-data"


class ClassifyCfg(BaseModel):
    max_classes: int = 9
    quantile_classes: int = 5
    min_unique: int = 5
    palette: str = "Reds"
    no_data_color: str = "#ccc"

    @model_validator(mode="after")
    def _bounds_ok(self):
        if self.max_classes < 2:
            raise ValueError("classify.max_classes must be >= 2")
        if self.quantile_classes < 2:
            raise ValueError("classify.quantile_classes must be >= 2")
        return self


class LabelsCfg(BaseModel):
    # seeding
    seed_radius: float = 60.0
    radius_step: float = 5.0
    min_radius: float = 10.0
    angle_step: float = 12.0
    angle_offset: float = 1.5
    seed_padding: float = 10.0
    # relaxation
    attraction: float = 0.02
    collision_radius: float = 60.0
    iterations: int = 250
    velocity_decay: float = 0.6
    # bubble
    bubble_padding: float = 6.0
    bubble_text_padding: float = 6.0
    bubble_height: float = 28.0
    font_px: float = 11.0
    skip_zero: bool = True


class ViewportCfg(BaseModel):
    width: float = 960.0
    height: float = 700.0
    margin: float = 20.0


class ChartsCfg(BaseModel):
    theme: str = "light"
    output_dir: str = "out"
    chart_width: float = 420.0
    chart_height: float = 320.0
    # PNG (Playwright) settings
    png_width: int = 1200
    png_height: int = 700
    png_scale: float = 2.0


class LoggingCfg(BaseModel):
    level: str = "INFO"
    structured_json: bool = True


# ---------- Root ----------

class RootCfg(BaseModel):
    model_config = ConfigDict(extra="ignore")

    env: EnvCfg = EnvCfg()
    data: DataCfg = DataCfg()
    classify: ClassifyCfg = ClassifyCfg()
    labels: LabelsCfg = LabelsCfg()
    viewport: ViewportCfg = ViewportCfg()
    charts: ChartsCfg = ChartsCfg()
    logging: LoggingCfg = LoggingCfg()

    # Private attribute (not a field); used only to resolve relative paths
    _config_dir: Optional[Path] = PrivateAttr(default=None)

    @model_validator(mode="after")
    def _normalize_paths(self):
        if self._config_dir:
            # A conventional "config" folder resolves against the project root (its parent);
            # anything else resolves against the config file's own directory.
            base_dir = self._config_dir.parent if self._config_dir.name.lower() == "config" else self._config_dir

            def _abs(p: str) -> str:
                pp = Path(p)
                return str(pp if pp.is_absolute() else (base_dir / pp).resolve())

            self.data.table_path = _abs(self.data.table_path)
            self.data.geo_path = _abs(self.data.geo_path)
            self.charts.output_dir = _abs(self.charts.output_dir)
        return self

    @classmethod
    def from_toml(cls, path: str | os.PathLike[str]) -> "RootCfg":
        try:
            import tomllib  # py>=3.11
        except ImportError:
            import tomli as tomllib

        p = Path(path)
        text = p.read_text(encoding="utf-8-sig")
        try:
            raw = tomllib.loads(text)
        except tomllib.TOMLDecodeError as e:
            snippet = text.strip()[:80].replace("\n", "\\n")
            raise RuntimeError(f"Failed to parse TOML at {p}. First chars: {snippet!r}") from e

        for section in ("env", "data", "classify", "labels", "viewport", "charts", "logging"):
            raw.setdefault(section, {})

        cfg = cls(
            env=EnvCfg(**raw["env"]),
            data=DataCfg(**raw["data"]),
            classify=ClassifyCfg(**raw["classify"]),
            labels=LabelsCfg(**raw["labels"]),
            viewport=ViewportCfg(**raw["viewport"]),
            charts=ChartsCfg(**raw["charts"]),
            logging=LoggingCfg(**raw["logging"]),
        )
        cfg._config_dir = p.parent.resolve()
        return cfg._normalize_paths()

    @classmethod
    def load(cls, path: str | None = None) -> "RootCfg":
        final = Path(path or os.environ.get("HEALTHMAP_CFG", "config/config.toml")).resolve()
        return cls.from_toml(final)


def load_config(path: str | None = None) -> RootCfg:
    return RootCfg.load(path)
