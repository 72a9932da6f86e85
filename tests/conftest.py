import numpy as np
import pytest

from lut import compose_projection


def _ortho_camera(tx: float = 0.0, ty: float = 0.0, depth: float = 1.0, scale: float = 1.0) -> np.ndarray:
    """Camera whose pixel is ((scale*X + tx) / depth, (scale*Y + ty) / depth) at constant depth."""
    return np.array(
        [
            [scale, 0.0, 0.0, tx],
            [0.0, scale, 0.0, ty],
            [0.0, 0.0, 0.0, depth],
        ],
        dtype=np.float32,
    )


@pytest.fixture
def ortho_camera():
    return _ortho_camera


@pytest.fixture
def plane_grid():
    """4x4x1 grid whose voxel centres sit on integer pixels: X = xi, Y = yi."""
    return dict(n_voxels=(4, 4, 1), voxel_size=(1.0, 1.0, 1.0), origin=(2.0, 2.0, 0.0))


@pytest.fixture
def pinhole_rig():
    """Three pinhole cameras (front, back, and one behind the grid) on a 6x5x4 grid."""
    K = np.array([[8.0, 0.0, 4.0], [0.0, 8.0, 3.0], [0.0, 0.0, 1.0]])

    front = np.eye(4)
    front[2, 3] = 5.0

    back = np.diag([-1.0, 1.0, -1.0, 1.0])
    back[2, 3] = 5.0

    behind = np.eye(4)
    behind[2, 3] = -10.0

    rng = np.random.default_rng(0)
    projection = np.stack([compose_projection(K, T) for T in (front, back, behind)])
    projection = projection + rng.normal(scale=0.01, size=projection.shape).astype(np.float32)

    return dict(
        n_voxels=(6, 5, 4),
        voxel_size=(1.0, 1.0, 1.0),
        origin=(0.0, 0.0, 0.0),
        projection=projection,
        n_images=3,
        height=6,
        width=8,
        n_channels=16,
    )
