"""
Per-camera 3x4 projection matrices.

Matrices map homogeneous world points to homogeneous image points and are
stored camera-major, row-major: element (camera, row, col) lives at flat
index (camera * 3 + row) * 4 + col.
"""
from typing import Iterable, Optional

import numpy as np

from lut.errors import InvalidArgumentError, InvalidShapeError
from lut.tensor import Tensor


class ProjectionSet:
    """Typed, validated view over an (N, 3, 4) float32 projection buffer."""

    def __init__(self, projection, n_images: Optional[int] = None):
        """
        Args:
            projection: Tensor or array-like holding n_images * 12 values
                (flat, (N, 12) or (N, 3, 4))
            n_images: Expected number of cameras. Inferred from the buffer
                size when omitted.

        Raises:
            InvalidArgumentError: if n_images is not positive
            InvalidShapeError: if the buffer does not hold n_images * 12 values
        """
        data = projection.data if isinstance(projection, Tensor) else projection
        flat = np.array(data, dtype=np.float32).reshape(-1)

        if n_images is None:
            if flat.size == 0 or flat.size % 12 != 0:
                raise InvalidShapeError(
                    f"Projection buffer of {flat.size} values is not a whole number of 3x4 matrices"
                )
            n_images = flat.size // 12

        if n_images <= 0:
            raise InvalidArgumentError(f"n_images must be positive, got {n_images}")
        if flat.size != n_images * 12:
            raise InvalidShapeError(
                f"Projection buffer has {flat.size} values, expected {n_images} x 3 x 4 = {n_images * 12}"
            )

        flat.setflags(write=False)
        self._matrices = flat.reshape(n_images, 3, 4)

    @classmethod
    def from_matrices(cls, matrices: Iterable[np.ndarray]) -> "ProjectionSet":
        """Stack individual 3x4 matrices in camera order."""
        stacked = [np.asarray(m, dtype=np.float32) for m in matrices]
        for i, m in enumerate(stacked):
            if m.shape != (3, 4):
                raise InvalidShapeError(f"Camera {i}: expected a 3x4 matrix, got {m.shape}")
        if not stacked:
            raise InvalidArgumentError("At least one camera is required")
        return cls(np.stack(stacked), n_images=len(stacked))

    @property
    def n_images(self) -> int:
        return self._matrices.shape[0]

    @property
    def matrices(self) -> np.ndarray:
        return self._matrices

    def matrix(self, camera: int) -> np.ndarray:
        return self._matrices[camera]

    def get(self, camera: int, row: int, col: int) -> np.float32:
        return self._matrices[camera, row, col]

    def __len__(self) -> int:
        return self.n_images

    def __repr__(self) -> str:
        return f"ProjectionSet(n_images={self.n_images})"


def compose_projection(intrinsics: np.ndarray, world_to_camera: np.ndarray) -> np.ndarray:
    """
    Build a 3x4 projection matrix P = K @ [R | t].

    Args:
        intrinsics: (3, 3) camera matrix K, already scaled to the feature map
        world_to_camera: (3, 4) or (4, 4) rigid transform

    Returns:
        (3, 4) float32 projection matrix
    """
    K = np.asarray(intrinsics, dtype=np.float64)
    Rt = np.asarray(world_to_camera, dtype=np.float64)
    if K.shape != (3, 3):
        raise InvalidShapeError(f"intrinsics must be 3x3, got {K.shape}")
    if Rt.shape not in ((3, 4), (4, 4)):
        raise InvalidShapeError(f"world_to_camera must be 3x4 or 4x4, got {Rt.shape}")
    return (K @ Rt[:3, :]).astype(np.float32)
