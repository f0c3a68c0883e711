"""基因交叉策略。

交叉是两个同下标父代基因到子代基因的纯函数，随机性完全来自传入的 rng。
"""

from __future__ import annotations

import random
from abc import ABC, abstractmethod

from utils.numeric import validate_domain


def _check_genes(father_gene: int, mother_gene: int, bias: float) -> None:
    if father_gene < 0 or mother_gene < 0:
        raise ValueError(f"基因必须非负: father={father_gene}, mother={mother_gene}")
    validate_domain(bias, 0.0, 1.0, "bias")


class Crossover(ABC):
    """交叉策略基类。"""

    @abstractmethod
    def perform(
        self,
        father_gene: int,
        mother_gene: int,
        rng: random.Random,
        bias: float = 0.5,
    ) -> int:
        """由父代、母代基因生成子代基因。

        Args:
            father_gene: 父代基因（非负整数）
            mother_gene: 母代基因（非负整数）
            rng: 随机源
            bias: 继承父代的概率，[0, 1]

        Returns:
            子代基因

        Raises:
            ValueError: 基因为负或 bias 超出 [0, 1]
        """


class UniformCrossover(Crossover):
    """逐比特均匀交叉。

    从最低位开始逐位处理，直到父母双方在当前位及更高位都没有置位比特。
    每一位独立抽取 r = rng.random()：r < bias 取父代该位，否则取母代该位。

    示例:
        father=0b1010, mother=0b0101, 抽样 [0.1, 0.9, 0.3, 0.7]
        第 0 位取父(0)，第 1 位取母(0)，第 2 位取父(0)，第 3 位取母(0) -> 0
    """

    def perform(
        self,
        father_gene: int,
        mother_gene: int,
        rng: random.Random,
        bias: float = 0.5,
    ) -> int:
        _check_genes(father_gene, mother_gene, bias)

        child = 0
        position = 0
        a, b = father_gene, mother_gene
        while a != 0 or b != 0:
            source = a if rng.random() < bias else b
            child |= (source & 1) << position
            a >>= 1
            b >>= 1
            position += 1
        return child


class SinglePointCrossover(Crossover):
    """单点交叉。

    在 [0, 最高有效位数] 内随机选取切点，低段与高段分别来自不同父代。
    以 bias 的概率由父代提供低段，否则由母代提供低段。
    """

    def perform(
        self,
        father_gene: int,
        mother_gene: int,
        rng: random.Random,
        bias: float = 0.5,
    ) -> int:
        _check_genes(father_gene, mother_gene, bias)

        width = max(father_gene.bit_length(), mother_gene.bit_length())
        cut = rng.randrange(width + 1)
        low_mask = (1 << cut) - 1

        if rng.random() < bias:
            low, high = father_gene, mother_gene
        else:
            low, high = mother_gene, father_gene
        return (low & low_mask) | (high & ~low_mask)


CROSSOVERS = {
    "uniform": UniformCrossover,
    "single_point": SinglePointCrossover,
}


def build_crossover(name: str) -> Crossover:
    """按名称创建交叉策略（uniform / single_point）。"""
    try:
        return CROSSOVERS[name]()
    except KeyError:
        raise ValueError(f"未知交叉策略: {name}（可选: {', '.join(CROSSOVERS)}）") from None
