"""数值工具单元测试。"""

import math

import numpy as np
import pytest

from utils.numeric import normalize, stable_sigmoid, validate_domain


class TestValidateDomain:
    def test_inside_returns_value(self):
        assert validate_domain(0.3, 0.0, 1.0, "bias") == 0.3
        assert validate_domain(0.0, 0.0, 1.0) == 0.0
        assert validate_domain(1.0, 0.0, 1.0) == 1.0

    def test_outside_raises_with_name(self):
        with pytest.raises(ValueError, match=r"bias=1.5 超出定义域"):
            validate_domain(1.5, 0.0, 1.0, "bias")

    def test_nan_raises(self):
        with pytest.raises(ValueError, match="NaN"):
            validate_domain(math.nan, 0.0, 1.0, "rate")

    def test_reversed_bounds_raise(self):
        with pytest.raises(ValueError, match="定义域非法"):
            validate_domain(0.5, 1.0, 0.0, "x")


class TestNormalize:
    def test_maps_min_max_to_unit_interval(self):
        result = normalize(np.array([2.0, 4.0, 6.0]))
        assert list(result) == pytest.approx([0.0, 0.5, 1.0])

    def test_equal_values_map_to_half(self):
        result = normalize(np.array([3.0, 3.0, 3.0, 3.0]))
        assert list(result) == [0.5, 0.5, 0.5, 0.5]

    def test_does_not_modify_input(self):
        values = np.array([1.0, 5.0])
        normalize(values)
        assert list(values) == [1.0, 5.0]

    def test_empty_raises(self):
        with pytest.raises(ValueError):
            normalize(np.array([]))


class TestStableSigmoid:
    def test_known_values(self):
        result = stable_sigmoid(np.array([0.0, 2.0, -2.0]))
        assert result[0] == 0.5
        assert result[1] == pytest.approx(1 / (1 + math.exp(-2)))
        assert result[2] == pytest.approx(1 - result[1])

    def test_extremes_do_not_overflow(self):
        with np.errstate(over="raise"):
            result = stable_sigmoid(np.array([-1e6, 1e6]))
        assert list(result) == [0.0, 1.0]
