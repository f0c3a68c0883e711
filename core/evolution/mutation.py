"""基因变异策略。"""

from __future__ import annotations

import random
from abc import ABC, abstractmethod

from utils.numeric import validate_domain


class Mutation(ABC):
    """变异策略基类。"""

    @abstractmethod
    def perform(self, gene: int, rng: random.Random, mutation_rate: float = 0.5) -> int:
        """扰动单个基因并返回新值。

        Raises:
            ValueError: gene 为负或 mutation_rate 超出 [0, 1]
        """


class UniformMutation(Mutation):
    """逐比特翻转变异。

    从最低位开始，只遍历到原基因的最高置位比特；每一位以 mutation_rate 的
    概率翻转。高位前导零永远不会被翻转，因此变异结果不会超过原基因的位宽。

    示例:
        >>> UniformMutation().perform(6, random.Random(0), 1.0)
        1
    """

    def perform(self, gene: int, rng: random.Random, mutation_rate: float = 0.5) -> int:
        if gene < 0:
            raise ValueError(f"基因必须非负: {gene}")
        validate_domain(mutation_rate, 0.0, 1.0, "mutation_rate")

        # remaining 只用于控制循环边界，翻转累积在 result 上
        result = gene
        remaining = gene
        position = 0
        while remaining != 0:
            if rng.random() < mutation_rate:
                result ^= 1 << position
            remaining >>= 1
            position += 1
        return result
