import numpy as np
import pytest
import torch

from lut import LUTResult, build_lut


@pytest.fixture
def result(pinhole_rig):
    return build_lut(**pinhole_rig)


class TestLUTResult:
    def test_coverage_counts(self, result):
        stats = result.coverage()
        assert stats["total"] == 120
        assert stats["observed"] == int(result.valid.sum())
        per_camera = sum(stats[f"camera_{i}"] for i in range(result.n_images))
        assert per_camera == stats["observed"]
        assert stats["camera_2"] == 0

    def test_as_grid_shapes(self, result):
        assert result.as_grid(result.valid).shape == (4, 5, 6)
        assert result.as_grid(result.lut).shape == (4, 5, 6, 2)

    def test_as_grid_index_order(self, result):
        """Grid element [zi, yi, xi] is the voxel at flat offset zi*n_y*n_x + yi*n_x + xi."""
        cams = result.as_grid(result.camera_index)
        assert cams[2, 3, 4] == result.camera_index[result.grid.offset(4, 3, 2)]

    def test_to_torch(self, result):
        tensors = result.to_torch()
        assert tensors["lut"].shape == (120, 2)
        assert tensors["lut"].dtype == torch.int32
        assert tensors["valid"].dtype == torch.int32
        assert tensors["volume"].dtype == torch.float32
        assert torch.equal(tensors["valid"], torch.from_numpy(result.valid.copy()))

    def test_save_load(self, result, tmp_path):
        path = tmp_path / "lut.npz"
        result.save(path)
        loaded = LUTResult.load(path)

        np.testing.assert_array_equal(loaded.lut, result.lut)
        np.testing.assert_array_equal(loaded.valid, result.valid)
        assert loaded.grid.n_voxels == result.grid.n_voxels
        np.testing.assert_array_equal(loaded.grid.origin, result.grid.origin)
        assert (loaded.n_images, loaded.height, loaded.width, loaded.n_channels) == (3, 6, 8, 16)
        assert loaded.volume.shape == (120,)

    def test_save_keeps_exact_path(self, result, tmp_path):
        """A path without the .npz suffix is written as given, not renamed."""
        path = tmp_path / "rig.lut"
        saved = result.save(path)

        assert saved == path
        assert path.exists()
        assert sorted(p.name for p in tmp_path.iterdir()) == ["rig.lut"]
        np.testing.assert_array_equal(LUTResult.load(path).lut, result.lut)

    def test_grid_metadata_survives_caller_mutation(self, pinhole_rig, tmp_path):
        voxel_size = np.array([1.0, 1.0, 1.0], dtype=np.float32)
        result = build_lut(**{**pinhole_rig, "voxel_size": voxel_size})
        voxel_size[0] = 5.0

        result.save(tmp_path / "lut.npz")
        loaded = LUTResult.load(tmp_path / "lut.npz")
        np.testing.assert_array_equal(loaded.grid.voxel_size, [1.0, 1.0, 1.0])
