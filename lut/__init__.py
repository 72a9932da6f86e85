from lut.errors import InvalidArgumentError, InvalidShapeError
from lut.tensor import Tensor
from lut.grid import VoxelGrid
from lut.projection import ProjectionSet, compose_projection
from lut.result import LUTResult
from lut.builder import INVALID_CAMERA, build_lut, lookup_voxel, round_half_away

__all__ = [
    "InvalidArgumentError",
    "InvalidShapeError",
    "Tensor",
    "VoxelGrid",
    "ProjectionSet",
    "compose_projection",
    "LUTResult",
    "INVALID_CAMERA",
    "build_lut",
    "lookup_voxel",
    "round_half_away",
]
