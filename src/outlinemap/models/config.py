"""Configuration models for Outlinemap."""

from pydantic import BaseModel, Field, model_validator
from pathlib import Path
import yaml


class SimulationConfig(BaseModel):
    """Force simulation parameters (defaults match d3-force)."""

    link_distance: float = Field(
        default=100.0,
        gt=0,
        description="Rest length of the spring along each parent-child link"
    )

    charge_strength: float = Field(
        default=-300.0,
        description="Many-body strength; negative values repel"
    )

    collide_radius: float = Field(
        default=30.0,
        ge=0,
        description="Radius of the circle each node keeps clear of others"
    )

    center_strength: float = Field(
        default=1.0,
        ge=0,
        le=1,
        description="Fraction of the centroid offset removed per tick"
    )

    alpha_min: float = Field(
        default=0.001,
        gt=0,
        lt=1,
        description="The simulation settles once alpha drops below this"
    )

    alpha_decay: float = Field(
        default=1 - 0.001 ** (1 / 300),
        gt=0,
        lt=1,
        description="Per-tick decay of alpha toward alpha_target (~300 ticks)"
    )

    alpha_target_drag: float = Field(
        default=0.3,
        ge=0,
        le=1,
        description="Alpha target held while a node is being dragged"
    )

    velocity_decay: float = Field(
        default=0.4,
        ge=0,
        le=1,
        description="Friction applied to velocities each tick"
    )

    seed: int = Field(
        default=0,
        description="Seed for the jiggle that separates coincident nodes"
    )

    max_headless_ticks: int = Field(
        default=1000,
        ge=1,
        description="Upper bound on ticks when settling without a UI"
    )

    model_config = {"frozen": True}


class ViewConfig(BaseModel):
    """Graph canvas rendering and navigation settings."""

    fps: int = Field(
        default=30,
        ge=1,
        le=120,
        description="Simulation ticks (and repaints) per second while running"
    )

    zoom_min: float = Field(default=0.1, gt=0, description="Smallest zoom factor")
    zoom_max: float = Field(default=4.0, gt=0, description="Largest zoom factor")

    zoom_step: float = Field(
        default=1.1,
        gt=1,
        description="Zoom factor applied per wheel notch or +/- key"
    )

    pan_step: int = Field(
        default=4,
        ge=1,
        description="Cells moved per arrow key press"
    )

    cell_width: float = Field(
        default=8.0,
        gt=0,
        description="Layout units covered by one terminal column"
    )

    cell_height: float = Field(
        default=16.0,
        gt=0,
        description="Layout units covered by one terminal row"
    )

    label_max_chars: int = Field(
        default=20,
        ge=1,
        description="Labels longer than this are truncated with '...'"
    )

    @model_validator(mode="after")
    def validate_zoom_range(self) -> "ViewConfig":
        """Ensure the zoom extent is not inverted."""
        if self.zoom_min > self.zoom_max:
            raise ValueError(
                f"zoom_min ({self.zoom_min}) must not exceed zoom_max ({self.zoom_max})"
            )
        return self

    model_config = {"frozen": True}


class EditorConfig(BaseModel):
    """Source editor settings."""

    read_only: bool = Field(
        default=False,
        description="Disable structural edits from the graph and typing in the editor"
    )

    show_line_numbers: bool = Field(
        default=True,
        description="Show line numbers in the source editor"
    )

    model_config = {"frozen": True}


class Config(BaseModel):
    """Root configuration for Outlinemap application."""

    simulation: SimulationConfig = Field(
        default_factory=SimulationConfig, description="Force layout settings"
    )
    view: ViewConfig = Field(default_factory=ViewConfig, description="Graph canvas settings")
    editor: EditorConfig = Field(default_factory=EditorConfig, description="Editor settings")

    @classmethod
    def load(cls, path: Path) -> "Config":
        """
        Load configuration from YAML file.

        Every section is optional; an empty file yields the defaults.

        Args:
            path: Path to config.yaml file

        Returns:
            Validated Config instance

        Raises:
            FileNotFoundError: If config file doesn't exist
            ValueError: If YAML is invalid or validation fails
        """
        if not path.exists():
            raise FileNotFoundError(
                f"Configuration file not found at {path}\n\n"
                f"Example format:\n\n"
                f"simulation:\n"
                f"  link_distance: 100\n"
                f"  charge_strength: -300\n\n"
                f"view:\n"
                f"  fps: 30\n\n"
                f"editor:\n"
                f"  show_line_numbers: true\n"
            )

        with open(path) as f:
            data = yaml.safe_load(f) or {}

        if not isinstance(data, dict):
            raise ValueError(f"Configuration root must be a mapping, got {type(data).__name__}")

        return cls(**data)

    model_config = {"frozen": True}
