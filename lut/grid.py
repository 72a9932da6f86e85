"""
Regular BEV voxel grid.

Voxel (xi, yi, zi) has its world-space centre at

    world = (idx - n / 2) * size + origin

per axis, evaluated in float32. The grid is centred on the origin with a
half-voxel bias when n is odd; downstream consumers rely on this exact
convention, so it is kept as is.
"""
from dataclasses import dataclass
from typing import Sequence, Tuple, Union

import numpy as np

from lut.errors import InvalidArgumentError, InvalidShapeError
from lut.tensor import Tensor


def as_vec3(value: Union[Tensor, Sequence[float], np.ndarray], name: str) -> np.ndarray:
    """Copy a Tensor or array-like of exactly three values to a read-only float32 (3,)."""
    data = value.data if isinstance(value, Tensor) else value
    vec = np.array(data, dtype=np.float32).reshape(-1)
    if vec.size != 3:
        raise InvalidShapeError(f"{name} must have exactly 3 values, got {vec.size}")
    vec.setflags(write=False)
    return vec


@dataclass(frozen=True, eq=False)
class VoxelGrid:
    n_voxels: Tuple[int, int, int]  # X, Y, Z
    voxel_size: np.ndarray
    origin: np.ndarray

    @classmethod
    def create(cls, n_voxels: Sequence[int], voxel_size, origin) -> "VoxelGrid":
        """Validate and build a grid.

        Args:
            n_voxels: (n_x, n_y, n_z) voxel counts, all positive
            voxel_size: 3 per-axis voxel dimensions (array-like or Tensor)
            origin: 3 world-space origin coordinates (array-like or Tensor)

        Raises:
            InvalidArgumentError: if n_voxels is not three positive integers
            InvalidShapeError: if voxel_size or origin does not hold 3 values
        """
        counts = tuple(n_voxels)
        if len(counts) != 3:
            raise InvalidArgumentError(f"n_voxels must have 3 entries, got {len(counts)}")
        for axis, n in zip("xyz", counts):
            if isinstance(n, (bool, np.bool_)) or not isinstance(n, (int, np.integer)):
                raise InvalidArgumentError(f"n_{axis} must be an integer, got {n!r}")
            if n <= 0:
                raise InvalidArgumentError(f"n_{axis} must be positive, got {n}")

        return cls(
            n_voxels=tuple(int(n) for n in counts),
            voxel_size=as_vec3(voxel_size, "voxel_size"),
            origin=as_vec3(origin, "origin"),
        )

    def __eq__(self, other) -> bool:
        if not isinstance(other, VoxelGrid):
            return NotImplemented
        return (
            self.n_voxels == other.n_voxels
            and np.array_equal(self.voxel_size, other.voxel_size)
            and np.array_equal(self.origin, other.origin)
        )

    def __hash__(self) -> int:
        return hash((self.n_voxels, tuple(self.voxel_size.tolist()), tuple(self.origin.tolist())))

    @property
    def total(self) -> int:
        n_x, n_y, n_z = self.n_voxels
        return n_x * n_y * n_z

    @property
    def shape(self) -> Tuple[int, int, int]:
        """Array shape matching the flat voxel order: (n_z, n_y, n_x)."""
        n_x, n_y, n_z = self.n_voxels
        return (n_z, n_y, n_x)

    def offset(self, xi: int, yi: int, zi: int) -> int:
        n_x, n_y, _ = self.n_voxels
        return (zi * n_y + yi) * n_x + xi

    def unravel(self, offsets: np.ndarray) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
        """Split flat offsets into (xi, yi, zi) index arrays."""
        n_x, n_y, _ = self.n_voxels
        offsets = np.asarray(offsets, dtype=np.int64)
        xi = offsets % n_x
        yi = (offsets // n_x) % n_y
        zi = offsets // (n_x * n_y)
        return xi, yi, zi

    def center(self, xi: int, yi: int, zi: int) -> np.ndarray:
        """World-space centre of a single voxel, float32 (3,)."""
        idx = np.array([xi, yi, zi], dtype=np.float32)
        half = np.array(self.n_voxels, dtype=np.float32) / np.float32(2.0)
        return (idx - half) * self.voxel_size + self.origin

    def centers(self, offsets: np.ndarray) -> np.ndarray:
        """World-space centres for flat offsets, float32 (M, 3)."""
        idx = np.stack(self.unravel(offsets), axis=1).astype(np.float32)
        half = np.array(self.n_voxels, dtype=np.float32) / np.float32(2.0)
        return (idx - half) * self.voxel_size + self.origin
