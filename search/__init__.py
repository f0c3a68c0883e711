"""搜索评估模块。

提供代价函数校验、参考代价函数与并行评估器。
"""

from .fitness import ThresholdPolicyCost, threshold_cost_factory, validate_cost
from .parallel_evaluator import EvaluationError, ParallelEvaluator, split_shards

__all__ = [
    "ThresholdPolicyCost",
    "threshold_cost_factory",
    "validate_cost",
    "EvaluationError",
    "ParallelEvaluator",
    "split_shards",
]
