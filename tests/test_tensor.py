import numpy as np
import pytest

from lut import InvalidShapeError, Tensor


class TestTensor:
    def test_valid_construction(self):
        """Dims and data of matching size are accepted and stored as float32."""
        t = Tensor([1, 3, 4], list(range(12)))
        assert t.dims == (1, 3, 4)
        assert t.data.dtype == np.float32
        assert len(t) == 12

    def test_view_is_shaped(self):
        t = Tensor([2, 3], [1, 2, 3, 4, 5, 6])
        view = t.view()
        assert view.shape == (2, 3)
        assert view[1, 0] == 4.0

    def test_size_mismatch_raises(self):
        with pytest.raises(InvalidShapeError):
            Tensor([3], [1.0, 2.0])

    def test_empty_dims_raises(self):
        with pytest.raises(InvalidShapeError):
            Tensor([], [1.0])

    def test_empty_data_raises(self):
        with pytest.raises(InvalidShapeError):
            Tensor([0], [])

    def test_from_array_keeps_shape(self):
        arr = np.arange(24, dtype=np.float64).reshape(2, 3, 4)
        t = Tensor.from_array(arr)
        assert t.dims == (2, 3, 4)
        np.testing.assert_array_equal(t.view(), arr.astype(np.float32))

    @pytest.mark.parametrize("dims", [[-1, -3], [3, 0, 1], [-3]])
    def test_non_positive_dims_raise(self, dims):
        """A negative pair of dims can still multiply to the data length."""
        with pytest.raises(InvalidShapeError):
            Tensor(dims, [1.0, 2.0, 3.0])

    def test_does_not_share_caller_array(self):
        data = np.arange(3, dtype=np.float32)
        t = Tensor([3], data)
        data[0] = 9.0
        assert t.data[0] == 0.0
