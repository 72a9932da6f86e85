import numpy as np
import pytest

from lut import InvalidArgumentError, InvalidShapeError, ProjectionSet, Tensor, compose_projection


class TestProjectionSet:
    def test_get_matches_flat_layout(self):
        """Element (camera, row, col) sits at flat index (camera * 3 + row) * 4 + col."""
        flat = np.arange(2 * 12, dtype=np.float32)
        cams = ProjectionSet(flat, n_images=2)
        for camera in range(2):
            for row in range(3):
                for col in range(4):
                    assert cams.get(camera, row, col) == flat[(camera * 3 + row) * 4 + col]

    def test_infers_n_images(self):
        cams = ProjectionSet(np.zeros((6, 3, 4)))
        assert cams.n_images == 6
        assert len(cams) == 6
        assert cams.matrices.dtype == np.float32

    def test_accepts_tensor(self):
        cams = ProjectionSet(Tensor([1, 3, 4], list(range(12))), n_images=1)
        np.testing.assert_array_equal(cams.matrix(0)[2], [8, 9, 10, 11])

    def test_size_mismatch_raises(self):
        with pytest.raises(InvalidShapeError):
            ProjectionSet(np.zeros(12), n_images=2)
        with pytest.raises(InvalidShapeError):
            ProjectionSet(np.zeros(13))

    def test_non_positive_count_raises(self):
        with pytest.raises(InvalidArgumentError):
            ProjectionSet(np.zeros(12), n_images=0)

    def test_from_matrices(self):
        cams = ProjectionSet.from_matrices([np.eye(3, 4), 2 * np.eye(3, 4)])
        assert cams.n_images == 2
        assert cams.get(1, 1, 1) == 2.0
        with pytest.raises(InvalidShapeError):
            ProjectionSet.from_matrices([np.eye(3)])


class TestComposeProjection:
    def test_intrinsics_times_extrinsics(self):
        K = np.array([[2.0, 0.0, 1.0], [0.0, 3.0, 2.0], [0.0, 0.0, 1.0]])
        T = np.eye(4)
        T[:3, 3] = [0.5, -1.0, 4.0]
        P = compose_projection(K, T)
        assert P.shape == (3, 4)
        assert P.dtype == np.float32
        np.testing.assert_allclose(P, K @ T[:3, :], rtol=1e-6)

    def test_bad_shapes_raise(self):
        with pytest.raises(InvalidShapeError):
            compose_projection(np.eye(4), np.eye(4))
        with pytest.raises(InvalidShapeError):
            compose_projection(np.eye(3), np.eye(3))


class TestProjectionSetOwnership:
    def test_does_not_share_caller_array(self):
        matrices = np.zeros((2, 3, 4), dtype=np.float32)
        cams = ProjectionSet(matrices)
        matrices[1, 2, 3] = 7.0
        assert cams.get(1, 2, 3) == 0.0

    def test_matrices_are_read_only(self):
        cams = ProjectionSet(np.zeros(12, dtype=np.float32))
        with pytest.raises(ValueError):
            cams.matrices[0, 0, 0] = 1.0
