"""代价函数模块。

代价统一为"越小越好"的非负实数，0.0 表示完美。

提供:
- validate_cost: 校验外部代价函数的返回值
- ThresholdPolicyCost: 参考代价函数，衡量 Agent 与"低于阈值要牌"策略的偏离程度
- threshold_cost_factory: 供并行评估器为每个工作线程创建独立的代价函数实例
"""

import math
import numbers
import random
from typing import Callable

from agents.blackjack_agent import DEALER_FACES, MAX_SCORE, MIN_SCORE, BlackjackAgent


def validate_cost(value) -> float:
    """校验代价为非负有限实数。

    Args:
        value: 代价函数的返回值

    Returns:
        转换为 float 的代价

    Raises:
        ValueError: 非数值、NaN、无穷大或负数

    示例:
        >>> validate_cost(0.25)
        0.25
        >>> validate_cost(-1)
        Traceback (most recent call last):
        ...
        ValueError: 代价必须非负: -1
    """
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        raise ValueError(f"代价必须是实数，实际类型 {type(value).__name__}")
    cost = float(value)
    if not math.isfinite(cost):
        raise ValueError(f"代价必须是有限值: {value}")
    if cost < 0:
        raise ValueError(f"代价必须非负: {value}")
    return cost


class ThresholdPolicyCost:
    """阈值参考策略代价。

    随机抽取 samples 个决策上下文（庄家明牌、点数、是否有 A），让 Agent 按基因倾向
    做出要牌/停牌决定，与参考策略"点数 < stand_threshold 时要牌"比较，返回不一致的比例。

    这不是完整的牌局引擎，只是一个有明确最优解的替身目标：
    最优 Agent 在阈值以下的基因全为 GENE_MAX，阈值及以上全为 0。

    注意:
        实例持有自己的随机源，不可跨线程共享；并行评估时每个工作线程各自创建一个实例。
    """

    def __init__(self, stand_threshold: int, samples: int, rng: random.Random):
        if not MIN_SCORE <= stand_threshold <= MAX_SCORE + 1:
            raise ValueError(
                f"stand_threshold 必须在 [{MIN_SCORE}, {MAX_SCORE + 1}] 内，实际 {stand_threshold}"
            )
        if samples <= 0:
            raise ValueError(f"samples 必须为正整数，实际 {samples}")
        self.stand_threshold = stand_threshold
        self.samples = samples
        self.rng = rng

    def __call__(self, agent: BlackjackAgent) -> float:
        mistakes = 0
        for _ in range(self.samples):
            dealer_face = self.rng.randrange(DEALER_FACES)
            score = self.rng.randrange(MIN_SCORE, MAX_SCORE + 1)
            has_ace = self.rng.random() < 0.5

            hit = agent.should_hit(dealer_face, score, has_ace, self.rng)
            if hit != (score < self.stand_threshold):
                mistakes += 1
        return mistakes / self.samples


def threshold_cost_factory(
    stand_threshold: int, samples: int
) -> Callable[[random.Random], ThresholdPolicyCost]:
    """构造 cost_factory(rng) -> ThresholdPolicyCost。"""

    def factory(rng: random.Random) -> ThresholdPolicyCost:
        return ThresholdPolicyCost(stand_threshold, samples, rng)

    return factory
