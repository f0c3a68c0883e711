"""种群容器模块。

持有 N 个 Agent 及与之下标对齐的代价数组，提供评估、排序、统计与补位繁殖。
种群对象在整个模拟期间只创建一次，每代原地覆盖代价与空槽。
"""

from __future__ import annotations

import random
from typing import Callable, List, Sequence

import numpy as np

from agents.base_agent import Agent
from core.evolution.crossover import Crossover
from core.evolution.mutation import Mutation
from core.evolution.repopulator import Repopulator
from core.statistics import CostStatistics, GeneStatistics
from search.fitness import validate_cost
from utils.logger_system import ensure, log_msg
from utils.numeric import validate_domain

AgentFactory = Callable[[random.Random], Agent]
CostFunction = Callable[[Agent], float]


class Population:
    """遗传算法种群。

    Attributes:
        rng: 随机源（初始化、繁殖与变异共用）
        repopulator: 补位策略
        crossover: 交叉策略
        mutation: 变异策略
        mutation_rate: 每个比特的翻转概率
        crossover_bias: 继承父代比特的概率
    """

    def __init__(
        self,
        size: int,
        agent_factory: AgentFactory,
        rng: random.Random,
        repopulator: Repopulator,
        crossover: Crossover,
        mutation: Mutation,
        mutation_rate: float = 0.15,
        crossover_bias: float = 0.5,
    ):
        """初始化种群，创建 size 个随机 Agent，代价清零。

        Args:
            size: 种群大小，必须是 4 的正整数倍
            agent_factory: agent_factory(rng) -> 随机初始化的 Agent
            rng: 随机源
            repopulator: 补位策略
            crossover: 交叉策略
            mutation: 变异策略
            mutation_rate: 变异率 [0, 1]
            crossover_bias: 交叉偏置 [0, 1]

        Raises:
            ValueError: 任一参数非法
        """
        if size <= 0 or size % 4 != 0:
            msg = f"种群大小必须是 4 的正整数倍，实际 {size}"
            log_msg("ERROR", msg)
            raise ValueError(msg)
        for name, value in (
            ("agent_factory", agent_factory),
            ("rng", rng),
            ("repopulator", repopulator),
            ("crossover", crossover),
            ("mutation", mutation),
        ):
            if value is None:
                msg = f"{name} 不能为空"
                log_msg("ERROR", msg)
                raise ValueError(msg)
        try:
            validate_domain(mutation_rate, 0.0, 1.0, "mutation_rate")
            validate_domain(crossover_bias, 0.0, 1.0, "crossover_bias")
        except ValueError as e:
            log_msg("ERROR", str(e))
            raise

        self.agent_factory = agent_factory
        self.rng = rng
        self.repopulator = repopulator
        self.crossover = crossover
        self.mutation = mutation
        self.mutation_rate = mutation_rate
        self.crossover_bias = crossover_bias

        self._agents: List[Agent] = [agent_factory(rng) for _ in range(size)]
        self._costs = np.zeros(size, dtype=np.float64)

        log_msg(
            "INFO",
            f"种群初始化完成: size={size}, mutation_rate={mutation_rate}, "
            f"crossover_bias={crossover_bias}",
        )

    # ---- 访问器 ----

    @property
    def agents(self) -> List[Agent]:
        return self._agents

    @property
    def costs(self) -> np.ndarray:
        return self._costs

    @property
    def size(self) -> int:
        return len(self._agents)

    def __len__(self) -> int:
        return len(self._agents)

    def best_agent(self) -> Agent:
        """返回已评估个体中代价最低的 Agent（并列时取下标最小者）。

        补位后尚未评估的子代（代价为 NaN）不参与比较。

        Raises:
            RuntimeError: 没有任何已评估的个体
        """
        if np.isnan(self._costs).all():
            raise RuntimeError("没有已评估的个体")
        return self._agents[int(np.nanargmin(self._costs))]

    # ---- 评估 ----

    def evaluate_agent(self, agent: Agent, cost_fn: CostFunction) -> float:
        """调用外部代价函数并校验结果为非负有限实数。"""
        return validate_cost(cost_fn(agent))

    def evaluate_fitness(self, index: int, cost_fn: CostFunction) -> None:
        """评估下标 index 处的 Agent 并写入代价数组。

        不同下标的调用只写各自的代价槽，可由多个工作线程并发执行。

        Raises:
            IndexError: index 越界
        """
        if not 0 <= index < len(self._agents):
            raise IndexError(f"下标越界: {index}（种群大小 {len(self._agents)}）")
        self._costs[index] = self.evaluate_agent(self._agents[index], cost_fn)

    # ---- 排序与重排 ----

    def sort_population(self) -> None:
        """按代价升序稳定排序，Agent 与代价同步重排，下标 0 为最优。"""
        order = np.argsort(self._costs, kind="stable")
        self.permute(order)

    def permute(self, order: Sequence[int]) -> None:
        """按给定排列同步重排 Agent 与代价（基于快照）。

        Args:
            order: 新位置 k 处放置原下标 order[k] 的个体

        Raises:
            ValueError: order 不是 0..N-1 的排列
        """
        order = [int(i) for i in order]
        if sorted(order) != list(range(len(self._agents))):
            raise ValueError(f"非法排列: {order}")
        snapshot = self._agents
        self._agents = [snapshot[i] for i in order]
        self._costs = self._costs[order]

    def replace(self, index: int, agent: Agent) -> None:
        """用新个体覆盖下标 index 处的槽位，其代价标记为未评估（NaN）。"""
        if not 0 <= index < len(self._agents):
            raise IndexError(f"下标越界: {index}（种群大小 {len(self._agents)}）")
        self._agents[index] = agent
        self._costs[index] = np.nan

    # ---- 繁殖 ----

    def spawn(self, father: Agent, mother: Agent) -> Agent:
        """由一对父母生成子代：空白个体 -> inherit -> 逐基因变异。"""
        child = father.blank()
        child.inherit(father, mother, self.rng, self.crossover, self.crossover_bias)

        genes = child.get_weights()
        for i in range(len(genes)):
            genes[i] = self.mutation.perform(int(genes[i]), self.rng, self.mutation_rate)
        return child

    def repopulate(self) -> None:
        """用存活者 [0, N/2) 的后代填满空槽 [N/2, N)。"""
        size_before = len(self._agents)
        self.repopulator.repopulate(self, self.rng, self.spawn)
        ensure(
            len(self._agents) == size_before,
            f"补位后种群大小变化: {size_before} -> {len(self._agents)}",
        )

    # ---- 统计 ----

    def gene_evaluation(self) -> List[GeneStatistics]:
        """逐基因下标统计整个种群的 min/max/mean/count。

        Raises:
            RuntimeError: 种群为空
        """
        if not self._agents:
            raise RuntimeError("种群为空，无法统计基因")

        matrix = np.vstack([agent.get_weights() for agent in self._agents])
        count = matrix.shape[0]
        return [
            GeneStatistics(
                index=i,
                min=int(matrix[:, i].min()),
                max=int(matrix[:, i].max()),
                mean=float(matrix[:, i].mean()),
                count=count,
            )
            for i in range(matrix.shape[1])
        ]

    def cost_evaluation(self) -> CostStatistics:
        """统计当前代价数组的 min/max/mean/count。

        Raises:
            RuntimeError: 代价数组为空，或存在补位后尚未评估的个体
        """
        if self._costs.size == 0:
            raise RuntimeError("没有可统计的代价")
        stale = np.flatnonzero(np.isnan(self._costs))
        if stale.size:
            raise RuntimeError(f"存在未评估的个体: {stale.tolist()}")

        mean = float(self._costs.mean())
        return CostStatistics(
            min=float(self._costs.min()),
            max=float(self._costs.max()),
            mean=mean,
            count=int(self._costs.size),
        )
