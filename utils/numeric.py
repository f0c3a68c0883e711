"""数值工具模块。

提供定义域校验、线性归一化和数值稳定的 sigmoid 函数。
"""

import math
from typing import Union

import numpy as np

Number = Union[int, float]


def validate_domain(value: Number, lower: Number, upper: Number, name: str = "参数") -> Number:
    """校验数值落在闭区间 [lower, upper] 内。

    Args:
        value: 待校验的数值
        lower: 区间下界（包含）
        upper: 区间上界（包含）
        name: 参数名称（用于错误消息）

    Returns:
        原样返回 value，便于链式调用

    Raises:
        ValueError: value 超出区间或为 NaN，或 lower > upper

    示例:
        >>> validate_domain(0.3, 0.0, 1.0, "bias")
        0.3
        >>> validate_domain(1.5, 0.0, 1.0, "bias")
        Traceback (most recent call last):
        ...
        ValueError: bias=1.5 超出定义域 [0.0, 1.0]
    """
    if lower > upper:
        raise ValueError(f"{name} 的定义域非法: [{lower}, {upper}]")
    if isinstance(value, float) and math.isnan(value):
        raise ValueError(f"{name} 不能为 NaN")
    if value < lower or value > upper:
        raise ValueError(f"{name}={value} 超出定义域 [{lower}, {upper}]")
    return value


def normalize(values: np.ndarray) -> np.ndarray:
    """按观测到的最小/最大值把数组线性归一化到 [0, 1]。

    最小值映射为 0.0，最大值映射为 1.0，中间线性缩放。
    所有值相等时没有可比较的区间，统一返回 0.5。

    Args:
        values: 一维数组

    Returns:
        归一化后的新数组（float64）

    Raises:
        ValueError: 数组为空
    """
    arr = np.asarray(values, dtype=np.float64)
    if arr.size == 0:
        raise ValueError("无法归一化空数组")

    low = arr.min()
    high = arr.max()
    if high == low:
        return np.full(arr.shape, 0.5)
    return (arr - low) / (high - low)


def stable_sigmoid(x: np.ndarray) -> np.ndarray:
    """数值稳定的 logistic 函数。

    对正负输入分别使用 1/(1+e^-|x|) 与 e^-|x|/(1+e^-|x|)，
    避免大斜率下 exp 溢出。

    Args:
        x: 输入数组

    Returns:
        逐元素 sigmoid 结果，范围 [0, 1]
    """
    arr = np.asarray(x, dtype=np.float64)
    z = np.exp(-np.abs(arr))
    return np.where(arr >= 0, 1.0 / (1.0 + z), z / (1.0 + z))
