"""
Voxel-to-image lookup table builder.

For every voxel of a BEV grid, project its centre through each camera's 3x4
projection matrix in ascending camera order and record the first camera
that sees it (positive depth, rounded pixel inside the image) together with
the linear pixel index y * width + x. Voxels no camera sees get (-1, 0).

Voxels are processed in chunks with numpy. Within a chunk, cameras are
scanned in ascending order over the voxels that are still unmatched, which
gives exactly the first-match result of the per-voxel scan in lookup_voxel.
All arithmetic is float32 and follows the per-voxel operation order, so the
two paths agree bit for bit.
"""
import logging
from typing import Optional, Sequence, Tuple

import numpy as np
from tqdm import tqdm

from lut.errors import InvalidArgumentError, InvalidShapeError
from lut.grid import VoxelGrid
from lut.projection import ProjectionSet
from lut.result import LUTResult

logger = logging.getLogger(__name__)

INVALID_CAMERA = -1
DEFAULT_CHUNK_SIZE = 1 << 20


def round_half_away(values):
    """Round to the nearest integer, ties away from zero (C ``round``).

    Computed from the exact fractional part so values just below .5 are not
    pushed over by the addition error of floor(v + 0.5).
    """
    values = np.asarray(values)
    whole = np.trunc(values)
    frac = values - whole
    step = np.where(np.abs(frac) >= 0.5, np.sign(values), 0).astype(values.dtype)
    return whole + step


def _check_integer(value, name: str) -> int:
    if isinstance(value, (bool, np.bool_)) or not isinstance(value, (int, np.integer)):
        raise InvalidArgumentError(f"{name} must be an integer, got {value!r}")
    return int(value)


def _check_positive(value, name: str) -> int:
    value = _check_integer(value, name)
    if value <= 0:
        raise InvalidArgumentError(f"{name} must be positive, got {value}")
    return value


def _check_non_negative(value, name: str) -> int:
    value = _check_integer(value, name)
    if value < 0:
        raise InvalidArgumentError(f"{name} must be non-negative, got {value}")
    return value


def _output_buffer(buf: Optional[np.ndarray], size: int, dtype, name: str) -> np.ndarray:
    """Validate a caller-owned output buffer and return a flat view of it."""
    if buf is None:
        return np.zeros(size, dtype=dtype)
    if not isinstance(buf, np.ndarray):
        raise InvalidShapeError(f"{name} must be a numpy array, got {type(buf).__name__}")
    if buf.dtype != dtype:
        raise InvalidShapeError(f"{name} must have dtype {np.dtype(dtype)}, got {buf.dtype}")
    if buf.size != size:
        raise InvalidShapeError(f"{name} must hold {size} elements, got {buf.size}")
    if not buf.flags.c_contiguous or not buf.flags.writeable:
        raise InvalidShapeError(f"{name} must be a writable C-contiguous array")
    return buf.reshape(-1)


def lookup_voxel(
    xi: int,
    yi: int,
    zi: int,
    grid: VoxelGrid,
    cameras: ProjectionSet,
    height: int,
    width: int,
) -> Tuple[int, int]:
    """
    Find the first camera observing voxel (xi, yi, zi).

    Args:
        xi, yi, zi: Voxel indices
        grid: Voxel grid
        cameras: Projection matrices, scanned in ascending camera order
        height: Image height in pixels
        width: Image width in pixels

    Returns:
        (camera_index, pixel_index), or (-1, 0) if no camera sees the voxel
    """
    pt = grid.center(xi, yi, zi)
    with np.errstate(divide="ignore", invalid="ignore"):
        for img in range(cameras.n_images):
            P = cameras.matrix(img)
            # Translation column first, then the 3x3 part one column at a time.
            ar = P[:, 3] + P[:, 0] * pt[0]
            ar = ar + P[:, 1] * pt[1]
            ar = ar + P[:, 2] * pt[2]

            x = round_half_away(ar[0] / ar[2])
            y = round_half_away(ar[1] / ar[2])
            z = ar[2]

            if 0 <= x < width and 0 <= y < height and z > 0:
                return img, int(y) * width + int(x)
    return INVALID_CAMERA, 0


def _build_chunk(
    grid: VoxelGrid,
    matrices: np.ndarray,
    height: int,
    width: int,
    start: int,
    stop: int,
    lut_chunk: np.ndarray,
    valid_chunk: np.ndarray,
) -> None:
    pts = grid.centers(np.arange(start, stop, dtype=np.int64))

    lut_chunk[:, 0] = INVALID_CAMERA
    lut_chunk[:, 1] = 0
    valid_chunk[:] = 0

    pending = np.arange(stop - start)
    for img in range(matrices.shape[0]):
        if pending.size == 0:
            break
        P = matrices[img]
        p = pts[pending]

        ar = P[:, 3] + p[:, 0:1] * P[:, 0]
        ar = ar + p[:, 1:2] * P[:, 1]
        ar = ar + p[:, 2:3] * P[:, 2]

        z = ar[:, 2]
        x = round_half_away(ar[:, 0] / z)
        y = round_half_away(ar[:, 1] / z)

        hit = (x >= 0) & (y >= 0) & (x < width) & (y < height) & (z > 0)
        rows = pending[hit]
        lut_chunk[rows, 0] = img
        lut_chunk[rows, 1] = y[hit].astype(np.int64) * width + x[hit].astype(np.int64)
        valid_chunk[rows] = 1

        pending = pending[~hit]


def build_lut(
    n_voxels: Sequence[int],
    voxel_size,
    origin,
    projection,
    n_images: int,
    height: int,
    width: int,
    n_channels: int = 0,
    lut: Optional[np.ndarray] = None,
    valid: Optional[np.ndarray] = None,
    volume: Optional[np.ndarray] = None,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
    progress: bool = False,
) -> LUTResult:
    """
    Build the voxel-to-image lookup table.

    Args:
        n_voxels: (n_x, n_y, n_z) voxel counts
        voxel_size: 3 voxel dimensions (array-like or Tensor)
        origin: 3 world-space origin coordinates (array-like or Tensor)
        projection: n_images * 12 projection values (array-like, Tensor or ProjectionSet)
        n_images: Number of cameras
        height: Feature map height in pixels
        width: Feature map width in pixels
        n_channels: Feature map channels, carried through for the gather stage
        lut: Optional int32 output buffer of total * 2 elements
        valid: Optional int32 output buffer of total elements
        volume: Optional float32 buffer of total elements, never written
        chunk_size: Number of voxels evaluated per numpy batch
        progress: Show a tqdm progress bar over chunks

    Returns:
        LUTResult wrapping the (possibly caller-provided) buffers

    Raises:
        InvalidArgumentError: on non-positive counts or image dimensions
        InvalidShapeError: on input or output buffers of the wrong size
    """
    grid = VoxelGrid.create(n_voxels, voxel_size, origin)
    n_images = _check_positive(n_images, "n_images")
    height = _check_positive(height, "height")
    width = _check_positive(width, "width")
    chunk_size = _check_positive(chunk_size, "chunk_size")
    n_channels = _check_non_negative(n_channels, "n_channels")

    if isinstance(projection, ProjectionSet):
        projection = projection.matrices
    cameras = ProjectionSet(projection, n_images)

    total = grid.total
    lut_flat = _output_buffer(lut, total * 2, np.int32, "lut")
    valid_flat = _output_buffer(valid, total, np.int32, "valid")
    volume_flat = _output_buffer(volume, total, np.float32, "volume")

    logger.debug(
        f"Building LUT: grid={grid.n_voxels}, cameras={n_images}, image={height}x{width}, "
        f"chunk_size={chunk_size}"
    )

    pairs = lut_flat.reshape(total, 2)
    with np.errstate(divide="ignore", invalid="ignore"):
        for start in tqdm(range(0, total, chunk_size), desc="  LUT", leave=False, disable=not progress):
            stop = min(start + chunk_size, total)
            _build_chunk(
                grid, cameras.matrices, height, width, start, stop,
                pairs[start:stop], valid_flat[start:stop],
            )

    result = LUTResult(
        lut=lut if lut is not None else lut_flat,
        valid=valid if valid is not None else valid_flat,
        volume=volume if volume is not None else volume_flat,
        grid=grid,
        n_images=n_images,
        height=height,
        width=width,
        n_channels=n_channels,
    )

    observed = int(valid_flat.sum())
    logger.info(
        f"Built LUT for {total:,} voxels x {n_images} cameras: "
        f"{observed:,} observed ({100.0 * observed / total:.2f}%)"
    )
    return result
