"""选择梯度：在已排序种群上做随机化的生存决策。

apply() 之后 [0, N/2) 为存活者，[N/2, N) 为待补位的空槽。

流程:
1. 代价按观测到的最小/最大值归一化
2. 由具体梯度把归一化代价映射为分数 score ∈ [0, 1]（越大越可能被淘汰）
3. 前半区：score < 抽样值 -> elite（存活），否则 unlucky（淘汰）
   后半区：score > 抽样值 -> non_elite（淘汰），否则 lucky（存活）
4. 调整两侧数量使存活者恰好 N/2
5. 按 elite ++ lucky ++ non_elite ++ unlucky 重排，代价随之重排
"""

from __future__ import annotations

import random
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, List

import numpy as np

from core.statistics import SelectionReport
from utils.logger_system import log_msg
from utils.numeric import normalize, stable_sigmoid, validate_domain

if TYPE_CHECKING:
    from core.population import Population


class Gradient(ABC):
    """选择梯度基类。"""

    def __init__(self, rng: random.Random):
        if rng is None:
            log_msg("ERROR", "Gradient 需要随机源")
            raise ValueError("Gradient 需要随机源")
        self.rng = rng

    @abstractmethod
    def scores(self, normalized: np.ndarray) -> np.ndarray:
        """把 [0, 1] 内的归一化代价映射为淘汰分数。"""

    def apply(self, population: Population) -> SelectionReport:
        """对已按代价升序排序的种群做生存选择。

        Args:
            population: 已排序的种群

        Returns:
            本轮选择的四类计数
        """
        n = len(population)
        half = n // 2
        scores = self.scores(normalize(population.costs))

        elite: List[int] = []
        unlucky: List[int] = []
        lucky: List[int] = []
        non_elite: List[int] = []

        for i in range(half):
            if scores[i] < self.rng.random():
                elite.append(i)
            else:
                unlucky.append(i)
        for i in range(half, n):
            if scores[i] > self.rng.random():
                non_elite.append(i)
            else:
                lucky.append(i)

        # 存活者不足时从后半区提拔最优的淘汰者，过多时降级最差的 elite
        while len(elite) + len(lucky) < half:
            elite.append(non_elite.pop(0))
        while len(elite) + len(lucky) > half:
            non_elite.insert(0, elite.pop())

        population.permute(elite + lucky + non_elite + unlucky)

        report = SelectionReport(
            elite=len(elite),
            lucky=len(lucky),
            non_elite=len(non_elite),
            unlucky=len(unlucky),
        )
        log_msg(
            "DEBUG",
            f"选择完成: elite={report.elite}, lucky={report.lucky}, "
            f"non_elite={report.non_elite}, unlucky={report.unlucky}",
        )
        return report


class SigmoidGradient(Gradient):
    """S 型梯度：score = sigmoid((normalized - 0.5) * steepness)。

    steepness 越大越接近纯精英选择；steepness=1 时分数几乎都在 0.5 附近，接近随机选择。
    """

    def __init__(self, rng: random.Random, steepness: float = 10.0):
        super().__init__(rng)
        if steepness < 1:
            msg = f"steepness 必须 >= 1，实际 {steepness}"
            log_msg("ERROR", msg)
            raise ValueError(msg)
        self.steepness = float(steepness)

    def scores(self, normalized: np.ndarray) -> np.ndarray:
        return stable_sigmoid((normalized - 0.5) * self.steepness)


class BirdshotGradient(Gradient):
    """线性梯度：score = choke + normalized * (1 - 2 * choke)。

    choke 把分数压缩到 [choke, 1 - choke]，choke=0.5 时退化为完全随机选择。
    """

    def __init__(self, rng: random.Random, choke: float = 0.1):
        super().__init__(rng)
        try:
            validate_domain(choke, 0.0, 0.5, "choke")
        except ValueError as e:
            log_msg("ERROR", str(e))
            raise
        self.choke = float(choke)

    def scores(self, normalized: np.ndarray) -> np.ndarray:
        return self.choke + normalized * (1.0 - 2.0 * self.choke)


def build_gradient(name: str, rng: random.Random, steepness: float = 10.0, choke: float = 0.1) -> Gradient:
    """按名称创建梯度（sigmoid / birdshot）。"""
    if name == "sigmoid":
        return SigmoidGradient(rng, steepness)
    if name == "birdshot":
        return BirdshotGradient(rng, choke)
    raise ValueError(f"未知梯度: {name}（可选: sigmoid, birdshot）")
