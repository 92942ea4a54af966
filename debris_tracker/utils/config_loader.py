"""
Configuration management for the debris tracker.

Each section lives in its own YAML file under the config directory and is
validated by a pydantic model; missing or empty files fall back to defaults.
"""

import os
from pathlib import Path
from typing import Dict, Optional, Tuple

import yaml
from pydantic import BaseModel, Field, model_validator

from debris_tracker.simulation.tle_loader import DataSource

OFFLINE_ENV_VAR = "DEBRIS_TRACKER_OFFLINE"


class SectionConfig(BaseModel):
    """Base for config sections; assignments are re-validated."""

    class Config:
        """Pydantic config."""
        validate_assignment = True


class DataSourceConfig(SectionConfig):
    """Where tracked-object records come from."""

    source: DataSource = Field(DataSource.RECENT, description="Record group to load")
    request_timeout_seconds: float = Field(15.0, gt=0, description="HTTP timeout for a record fetch")
    offline: bool = Field(False, description="Skip the network and serve synthetic data")


class ViewConfig(SectionConfig):
    """Screen-space geometry of the map view."""

    width: int = Field(1280, ge=1, description="View width in pixels")
    height: int = Field(720, ge=1, description="View height in pixels")
    earth_radius_fraction: float = Field(0.35, gt=0, le=1, description="Earth radius as a fraction of min(width, height)")


class TrailConfig(SectionConfig):
    """Per-object position trails."""

    window_seconds: float = Field(90.0, gt=0, description="How long a sample stays in a trail")


class HoverConfig(SectionConfig):
    """Pointer hover resolution."""

    pick_radius_px: float = Field(20.0, gt=0, description="Pointer pick radius in pixels")


class ProjectionConfig(SectionConfig):
    """Debris growth forecasts."""

    start_year: int = Field(2000, ge=2000, description="First year of the growth projection")
    end_year: int = Field(2028, ge=2000, description="Last year of the growth projection (inclusive)")
    baseline_count: int = Field(20, ge=0, description="Object count in the 2000 base year")

    category_start_year: int = Field(2024, ge=2000, description="First year of the per-category forecast")
    category_horizon_years: int = Field(10, ge=0, le=100, description="Years forecast past the start year")

    @model_validator(mode="after")
    def check_year_order(self):
        if self.end_year < self.start_year:
            raise ValueError("end_year must not precede start_year")
        return self


class SimulationConfig(SectionConfig):
    """Tick loop."""

    tick_interval_ms: float = Field(33.0, gt=0, le=1000, description="Time between ticks")
    max_tracked_objects: int = Field(25, ge=1, description="Cap on objects shown at once")


class APIConfig(SectionConfig):
    """API server."""

    host: str = Field("0.0.0.0", description="API host")
    port: int = Field(8000, ge=1024, le=65535, description="API port")
    reload: bool = Field(False, description="Auto-reload on code changes")


# attribute name -> (file name, model)
SECTIONS: Dict[str, Tuple[str, type]] = {
    "data_source": ("data_source.yaml", DataSourceConfig),
    "view": ("view.yaml", ViewConfig),
    "trail": ("trail.yaml", TrailConfig),
    "hover": ("hover.yaml", HoverConfig),
    "projection": ("projection.yaml", ProjectionConfig),
    "simulation": ("simulation.yaml", SimulationConfig),
    "api": ("api.yaml", APIConfig),
}


class Config:
    """
    Holds every config section for one run.

    Example:
        >>> config = Config(Path("config"))
        >>> config.load_all()
        >>> config.trail.window_seconds
        90.0
    """

    def __init__(self, config_dir: Path = Path("config")):
        self.config_dir = Path(config_dir)
        self.data_source: Optional[DataSourceConfig] = None
        self.view: Optional[ViewConfig] = None
        self.trail: Optional[TrailConfig] = None
        self.hover: Optional[HoverConfig] = None
        self.projection: Optional[ProjectionConfig] = None
        self.simulation: Optional[SimulationConfig] = None
        self.api: Optional[APIConfig] = None

    def load_all(self):
        """Load every section, then apply environment overrides."""
        for attr, (filename, model) in SECTIONS.items():
            setattr(self, attr, self.load_config(filename, model))

        if os.environ.get(OFFLINE_ENV_VAR, "false").lower() == "true":
            self.data_source.offline = True

    def load_config(self, filename: str, config_class: type) -> BaseModel:
        """
        Load and validate one section file.

        Raises:
            pydantic.ValidationError: If a value is out of range
        """
        filepath = self.config_dir / filename
        if not filepath.exists():
            return config_class()

        with open(filepath, 'r') as f:
            values = yaml.safe_load(f)

        return config_class(**(values or {}))

    def save_config(self, config: BaseModel, filename: str):
        """Write one section to YAML, enums as their plain values."""
        filepath = self.config_dir / filename
        filepath.parent.mkdir(parents=True, exist_ok=True)

        with open(filepath, 'w') as f:
            yaml.dump(config.model_dump(mode="json"), f, default_flow_style=False, sort_keys=False)

    def create_default_configs(self):
        """Write default files for sections that have none yet."""
        for filename, model in SECTIONS.values():
            if not (self.config_dir / filename).exists():
                self.save_config(model(), filename)
