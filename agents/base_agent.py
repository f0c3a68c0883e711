"""Agent 抽象基类模块。

定义可进化策略 Agent 的统一接口：基因向量访问与有性繁殖（inherit）。
"""

from __future__ import annotations

import random
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

import numpy as np

if TYPE_CHECKING:
    from core.evolution.crossover import Crossover

# 基因取值上界（无符号 31 位整数）
GENE_MAX = 2**31 - 1


def random_gene(rng: random.Random) -> int:
    """从随机源抽取一个 [0, GENE_MAX] 内的均匀随机基因。"""
    return rng.getrandbits(31)


class Agent(ABC):
    """可进化的决策策略。

    Agent 对进化引擎而言是不透明的，引擎只通过基因向量和 inherit 操作它。
    基因向量长度由具体 Agent 类型固定，同一种群内所有 Agent 相同。
    """

    @abstractmethod
    def get_weights(self) -> np.ndarray:
        """返回基因向量本身（可原地读写，不做拷贝）。

        Returns:
            一维 int64 数组，每个元素取值 [0, GENE_MAX]
        """

    def blank(self) -> Agent:
        """创建与本 Agent 同类型、基因全为 0 的新个体，用作繁殖的子代载体。

        默认调用无参构造函数；构造函数需要参数的子类应覆盖此方法。
        """
        return type(self)()

    def inherit(
        self,
        father: Agent,
        mother: Agent,
        rng: random.Random,
        crossover: Crossover,
        bias: float = 0.5,
    ) -> None:
        """从父母双方继承基因，原地覆盖本 Agent 的基因向量。

        对每个基因下标 i：self[i] = crossover.perform(father[i], mother[i], rng, bias)。

        Args:
            father: 父代
            mother: 母代
            rng: 随机源
            crossover: 基因交叉策略
            bias: 继承父代比特的概率

        Raises:
            ValueError: 父母为同一对象，或任一父母就是本 Agent
        """
        # 身份比较：结构相同的两个 Agent 仍是不同的父母
        if father is mother:
            raise ValueError("父代与母代必须是不同的 Agent")
        if father is self or mother is self:
            raise ValueError("子代不能作为自己的父代或母代")

        genes = self.get_weights()
        father_genes = father.get_weights()
        mother_genes = mother.get_weights()
        if not (len(genes) == len(father_genes) == len(mother_genes)):
            raise ValueError(
                f"基因向量长度不一致: child={len(genes)}, "
                f"father={len(father_genes)}, mother={len(mother_genes)}"
            )

        for i in range(len(genes)):
            genes[i] = crossover.perform(
                int(father_genes[i]), int(mother_genes[i]), rng, bias
            )
