"""
Shape-tagged contiguous float32 buffer used to pass grid and camera
parameters into the LUT builder.
"""
from typing import Sequence, Tuple

import numpy as np

from lut.errors import InvalidShapeError


class Tensor:
    """Flat row-major float32 data plus the shape it represents."""

    def __init__(self, dims: Sequence[int], data):
        """
        Args:
            dims: Shape of the tensor, e.g. (N, 3, 4)
            data: Flat (or already shaped) numeric data, row-major

        Raises:
            InvalidShapeError: if dims or data is empty, any dim is not positive,
                or the element count implied by dims does not equal the data length
        """
        dims = tuple(int(d) for d in dims)
        flat = np.array(data, dtype=np.float32).reshape(-1)

        if len(dims) == 0 or flat.size == 0:
            raise InvalidShapeError("Dimensions and data cannot be empty")
        if any(d <= 0 for d in dims):
            raise InvalidShapeError(f"Dimensions must be positive, got {dims}")

        total_size = int(np.prod(dims))
        if total_size != flat.size:
            raise InvalidShapeError(
                f"Data size {flat.size} does not match dimensions {dims} ({total_size})"
            )

        self._dims = dims
        self._data = flat

    @classmethod
    def from_array(cls, array) -> "Tensor":
        """Wrap an array, taking its shape as the dims."""
        array = np.asarray(array, dtype=np.float32)
        return cls(array.shape, array)

    @property
    def dims(self) -> Tuple[int, ...]:
        return self._dims

    @property
    def data(self) -> np.ndarray:
        """Flat contiguous float32 view of the buffer."""
        return self._data

    def view(self) -> np.ndarray:
        """Buffer reshaped to dims (no copy)."""
        return self._data.reshape(self._dims)

    def __len__(self) -> int:
        return self._data.size

    def __repr__(self) -> str:
        return f"Tensor(dims={self._dims})"
