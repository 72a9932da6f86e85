"""
Container for the three per-voxel output arrays of a LUT build.
"""
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Union

import numpy as np
import torch

from lut.grid import VoxelGrid


@dataclass
class LUTResult:
    """
    Output of build_lut.

    Attributes:
        lut: int32 buffer of total * 2 values, (camera_index, pixel_index) per voxel
        valid: int32 buffer of total values, 1 where some camera observes the voxel
        volume: float32 buffer of total values, reserved for the feature gather stage
        grid: Voxel grid the LUT was built for
        n_images: Number of cameras
        height: Feature map height
        width: Feature map width
        n_channels: Feature map channels
    """

    lut: np.ndarray
    valid: np.ndarray
    volume: np.ndarray
    grid: VoxelGrid
    n_images: int
    height: int
    width: int
    n_channels: int

    @property
    def pairs(self) -> np.ndarray:
        """LUT viewed as (total, 2)."""
        return self.lut.reshape(-1, 2)

    @property
    def camera_index(self) -> np.ndarray:
        return self.pairs[:, 0]

    @property
    def pixel_index(self) -> np.ndarray:
        return self.pairs[:, 1]

    @property
    def valid_mask(self) -> np.ndarray:
        return self.valid.reshape(-1) == 1

    def coverage(self) -> Dict[str, int]:
        """Number of observed voxels, overall and per winning camera."""
        cams = self.camera_index
        stats = {
            "total": self.grid.total,
            "observed": int(self.valid_mask.sum()),
        }
        counts = np.bincount(cams[cams >= 0], minlength=self.n_images)
        for img in range(self.n_images):
            stats[f"camera_{img}"] = int(counts[img])
        return stats

    def as_grid(self, values: np.ndarray) -> np.ndarray:
        """Reshape a per-voxel array to (n_z, n_y, n_x[, ...])."""
        values = np.asarray(values)
        per_voxel = values.size // self.grid.total
        if per_voxel == 1:
            return values.reshape(self.grid.shape)
        return values.reshape(self.grid.shape + (per_voxel,))

    def to_torch(self, device: Union[str, torch.device] = "cpu") -> Dict[str, torch.Tensor]:
        """LUT, valid and volume as torch tensors for the feature gather stage."""
        return {
            "lut": torch.from_numpy(self.pairs.copy()).to(device),
            "valid": torch.from_numpy(self.valid.reshape(-1).copy()).to(device),
            "volume": torch.from_numpy(self.volume.reshape(-1).copy()).to(device),
        }

    def save(self, path: Union[str, Path]) -> Path:
        """Write the LUT to exactly path; np.savez would append .npz to a bare name."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "wb") as f:
            np.savez(
                f,
                lut=self.lut.reshape(-1),
                valid=self.valid.reshape(-1),
                n_voxels=np.array(self.grid.n_voxels, dtype=np.int64),
                voxel_size=self.grid.voxel_size,
                origin=self.grid.origin,
                image=np.array([self.n_images, self.height, self.width, self.n_channels], dtype=np.int64),
            )
        return path

    @classmethod
    def load(cls, path: Union[str, Path]) -> "LUTResult":
        with np.load(path) as data:
            grid = VoxelGrid.create(
                [int(n) for n in data["n_voxels"]], data["voxel_size"], data["origin"]
            )
            n_images, height, width, n_channels = (int(v) for v in data["image"])
            return cls(
                lut=data["lut"].astype(np.int32),
                valid=data["valid"].astype(np.int32),
                volume=np.zeros(grid.total, dtype=np.float32),
                grid=grid,
                n_images=n_images,
                height=height,
                width=width,
                n_channels=n_channels,
            )
