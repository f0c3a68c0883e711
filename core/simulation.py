"""进化模拟主循环。

每一代执行:
    并发评估 -> 屏障 -> 代价统计回调 -> 排序 -> 梯度选择 -> 补位繁殖
"""

from __future__ import annotations

import random
import time
from typing import Callable, List, Optional

from core.evolution.gradient import Gradient
from core.population import Population
from core.statistics import CostStatistics
from search.parallel_evaluator import CostFactory, ParallelEvaluator
from utils.logger_system import log_json, log_msg

GenerationCallback = Callable[[CostStatistics, int], object]


class Simulation:
    """遗传算法模拟器。

    Attributes:
        population: 种群（整个运行期间保持同一对象）
        gradient: 选择梯度
        cost_factory: cost_factory(worker_rng) -> cost_fn
        generations: 代数
        rng: 主随机源（为评估分片派生种子）
        evaluator: 并行评估器
        history: 每代的代价统计
    """

    def __init__(
        self,
        population: Population,
        gradient: Gradient,
        cost_factory: CostFactory,
        generations: int,
        rng: random.Random,
        max_workers: Optional[int] = None,
        evaluator: Optional[ParallelEvaluator] = None,
    ):
        """初始化模拟器。

        Args:
            population: 种群
            gradient: 选择梯度
            cost_factory: 代价函数工厂
            generations: 代数（>= 0）
            rng: 随机源
            max_workers: 评估线程数（未传入 evaluator 时使用）
            evaluator: 外部评估器（由调用方负责关闭）

        Raises:
            ValueError: 参数非法
        """
        for name, value in (
            ("population", population),
            ("gradient", gradient),
            ("cost_factory", cost_factory),
            ("rng", rng),
        ):
            if value is None:
                msg = f"{name} 不能为空"
                log_msg("ERROR", msg)
                raise ValueError(msg)
        if generations < 0:
            msg = f"generations 必须 >= 0，实际 {generations}"
            log_msg("ERROR", msg)
            raise ValueError(msg)

        self.population = population
        self.gradient = gradient
        self.cost_factory = cost_factory
        self.generations = generations
        self.rng = rng
        self.max_workers = max_workers
        self._owns_evaluator = evaluator is None
        self.evaluator = evaluator
        self.history: List[CostStatistics] = []

    def run(self, callback: Optional[GenerationCallback] = None) -> List[CostStatistics]:
        """运行全部代数。

        Args:
            callback: callback(stats, generation)，每代评估完成后调用，返回值被忽略

        Returns:
            每代的代价统计

        Raises:
            EvaluationError: 任一代评估失败（运行终止）
        """
        if self.evaluator is None:
            self.evaluator = ParallelEvaluator(self.max_workers)

        log_msg(
            "INFO",
            f"模拟开始: population={len(self.population)}, generations={self.generations}",
        )
        start = time.time()
        try:
            for generation in range(self.generations):
                stats = self.run_generation(generation)
                if callback is not None:
                    callback(stats, generation)
                self.breed(generation, stats)
        finally:
            self.close()

        log_msg("INFO", f"模拟结束: 共 {self.generations} 代，耗时 {time.time() - start:.2f}s")
        return self.history

    def close(self) -> None:
        """关闭自行创建的评估器；外部传入的评估器由调用方负责。"""
        if self._owns_evaluator and self.evaluator is not None:
            self.evaluator.shutdown()
            self.evaluator = None

    def run_generation(self, generation: int) -> CostStatistics:
        """评估当前种群并返回代价统计（屏障之后）。

        单独调用时可能会创建评估器，用完需调用 close()。
        """
        if self.evaluator is None:
            self.evaluator = ParallelEvaluator(self.max_workers)
        self.evaluator.evaluate(self.population, self.cost_factory, self.rng)

        stats = self.population.cost_evaluation()
        self.history.append(stats)
        log_msg(
            "INFO",
            f"第 {generation} 代: min={stats.min:.4f}, mean={stats.mean:.4f}, max={stats.max:.4f}",
        )
        return stats

    def breed(self, generation: int, stats: CostStatistics) -> None:
        """排序 -> 梯度选择 -> 补位繁殖（单线程）。"""
        self.population.sort_population()
        report = self.gradient.apply(self.population)
        self.population.repopulate()

        log_json(
            {
                "generation": generation,
                "cost": stats.to_dict(),
                "selection": report.to_dict(),
            }
        )
