import logging
from dataclasses import dataclass, fields
from typing import Tuple
import yaml

logger = logging.getLogger(__name__)

# Fields stored as fixed-length tuples; YAML gives lists.
_VECTOR_FIELDS = {"n_voxels", "voxel_size", "origin"}


@dataclass
class Config:
    # Grid
    n_voxels: Tuple[int, int, int] = (200, 200, 4)  # X, Y, Z
    voxel_size: Tuple[float, float, float] = (0.5, 0.5, 1.5)
    origin: Tuple[float, float, float] = (0.0, 0.0, -1.0)

    # Feature map (shared by all cameras)
    height: int = 64
    width: int = 176
    n_channels: int = 64

    # Cameras: .npy or .npz (key "projection") holding (N, 3, 4) matrices
    projection_file: str = ""

    # Output
    output_file: str = "lut.npz"

    # Build
    chunk_size: int = 1 << 20
    progress: bool = True

    # Logging
    log_dir: str = "runs/lut"

    @classmethod
    def from_yaml(cls, yaml_path: str) -> "Config":
        """Load config from YAML file, overriding defaults."""
        cfg = cls()
        with open(yaml_path, "r") as f:
            yaml_cfg = yaml.safe_load(f)

        if yaml_cfg is None:
            return cfg

        # Get valid field names
        valid_fields = {f.name for f in fields(cls)}

        for key, value in yaml_cfg.items():
            if key in valid_fields:
                if key in _VECTOR_FIELDS and isinstance(value, list):
                    value = tuple(value)
                setattr(cfg, key, value)
            else:
                logger.warning(f"Unknown config key '{key}' in YAML, ignored.")

        return cfg

    def to_yaml(self, yaml_path: str) -> None:
        """Save current config to YAML file."""
        cfg_dict = {}
        for f in fields(self):
            value = getattr(self, f.name)
            # Convert tuple to list for YAML
            if isinstance(value, tuple):
                value = list(value)
            cfg_dict[f.name] = value

        with open(yaml_path, "w") as f:
            yaml.dump(cfg_dict, f, default_flow_style=False, sort_keys=False)

    def validate(self) -> None:
        """Check grid and image dimensions before a build."""
        for name in _VECTOR_FIELDS:
            if len(getattr(self, name)) != 3:
                raise ValueError(f"{name} must have 3 entries, got {getattr(self, name)!r}")
        if any(n <= 0 for n in self.n_voxels):
            raise ValueError(f"n_voxels must be positive, got {self.n_voxels}")
        for name in ("height", "width", "chunk_size"):
            if getattr(self, name) <= 0:
                raise ValueError(f"{name} must be positive, got {getattr(self, name)}")
        if self.n_channels < 0:
            raise ValueError(f"n_channels must be non-negative, got {self.n_channels}")
