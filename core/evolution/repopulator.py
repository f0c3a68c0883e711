"""补位策略：由存活者配对繁殖，填满被淘汰者留下的空槽。"""

from __future__ import annotations

import random
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Callable

from utils.logger_system import log_msg

if TYPE_CHECKING:
    from agents.base_agent import Agent
    from core.population import Population

Spawner = Callable[["Agent", "Agent"], "Agent"]


class Repopulator(ABC):
    """补位策略基类。"""

    @abstractmethod
    def repopulate(self, population: Population, rng: random.Random, spawner: Spawner) -> None:
        """用 spawner(father, mother) 的产物覆盖 [N/2, N) 的全部空槽。"""


class TwoPassRepopulator(Repopulator):
    """两轮配对补位。

    每轮在存活者的工作副本上以步长 2 前进：位置 j 为父代，母代从 [j+1, half)
    中均匀抽取并换到 j+1。第 0 轮的子代写入偶数空槽 half+j，第 1 轮写入奇数空槽
    half+j+1。每个存活者在两轮中恰好各被选中一次，种群中的存活者位置保持不变。

    示例:
        half=4 时共 4 次配对，空槽 4,6 来自第 0 轮，5,7 来自第 1 轮
    """

    def repopulate(self, population: Population, rng: random.Random, spawner: Spawner) -> None:
        half = len(population) // 2
        if half % 2 != 0:
            msg = f"存活者数量必须为偶数，实际 {half}"
            log_msg("ERROR", msg)
            raise ValueError(msg)

        parents = list(population.agents[:half])
        for pass_index in range(2):
            for j in range(0, half, 2):
                m = rng.randrange(j + 1, half)
                parents[j + 1], parents[m] = parents[m], parents[j + 1]

                child = spawner(parents[j], parents[j + 1])
                if child is None:
                    msg = f"spawner 未返回子代（slot={half + j + pass_index}）"
                    log_msg("ERROR", msg)
                    raise ValueError(msg)
                population.replace(half + j + pass_index, child)
