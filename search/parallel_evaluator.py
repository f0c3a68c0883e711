"""并行评估器模块。

把种群下标切分为连续分片，使用线程池并发计算每个 Agent 的代价。
"""

from __future__ import annotations

import os
import random
from concurrent.futures import FIRST_EXCEPTION, ThreadPoolExecutor, wait
from typing import TYPE_CHECKING, Callable, List, Optional

from utils.logger_system import log_exception, log_msg

if TYPE_CHECKING:
    from agents.base_agent import Agent
    from core.population import Population

CostFactory = Callable[[random.Random], Callable[["Agent"], float]]


class EvaluationError(RuntimeError):
    """某个分片的代价计算失败。原始异常保存在 __cause__ 中。"""


def split_shards(count: int, workers: int) -> List[range]:
    """把 [0, count) 切分为 workers 个连续、互不相交的分片，长度相差不超过 1。

    示例:
        >>> split_shards(10, 3)
        [range(0, 4), range(4, 7), range(7, 10)]
    """
    base, extra = divmod(count, workers)
    shards = []
    start = 0
    for w in range(workers):
        end = start + base + (1 if w < extra else 0)
        shards.append(range(start, end))
        start = end
    return shards


class ParallelEvaluator:
    """并行评估器。

    每个分片拥有独立的随机流和一个新建的代价函数实例，工作线程之间不共享可变状态，
    且只写入各自分片内的代价槽。
    """

    def __init__(self, max_workers: Optional[int] = None):
        """初始化并行评估器。

        Args:
            max_workers: 最大并发线程数（None 时使用 CPU 核数）
        """
        if max_workers is not None and max_workers <= 0:
            msg = f"max_workers 必须为正整数，实际 {max_workers}"
            log_msg("ERROR", msg)
            raise ValueError(msg)
        self.max_workers = max_workers or os.cpu_count() or 1
        self.executor = ThreadPoolExecutor(max_workers=self.max_workers)

        log_msg("INFO", f"ParallelEvaluator 初始化: max_workers={self.max_workers}")

    def evaluate(
        self,
        population: Population,
        cost_factory: CostFactory,
        rng: random.Random,
    ) -> None:
        """并发评估整个种群，返回时所有代价均已写入（屏障）。

        Args:
            population: 待评估的种群
            cost_factory: cost_factory(worker_rng) -> cost_fn
            rng: 调用方随机源，为每个分片派生种子

        Raises:
            EvaluationError: 任一分片失败，未开始的分片会被取消
        """
        workers = min(self.max_workers, len(population))
        shards = split_shards(len(population), workers)
        log_msg("DEBUG", f"开始并行评估 {len(population)} 个个体（{workers} 个分片）")

        futures = {}
        for shard in shards:
            worker_rng = random.Random(rng.getrandbits(64))
            cost_fn = cost_factory(worker_rng)
            future = self.executor.submit(self._evaluate_shard, population, shard, cost_fn)
            futures[future] = shard

        done, pending = wait(futures, return_when=FIRST_EXCEPTION)
        for future in pending:
            future.cancel()
        # 等待已经开始的分片结束，避免其在后续阶段继续写代价
        wait(pending)

        for future in done:
            exc = future.exception()
            if exc is not None:
                shard = futures[future]
                log_exception(exc, f"分片 [{shard.start}, {shard.stop}) 评估失败")
                raise EvaluationError(
                    f"分片 [{shard.start}, {shard.stop}) 评估失败: {exc}"
                ) from exc

    @staticmethod
    def _evaluate_shard(population: Population, shard: range, cost_fn) -> None:
        for index in shard:
            population.evaluate_fitness(index, cost_fn)

    def shutdown(self) -> None:
        """关闭线程池。

        确保所有任务完成并释放资源。
        """
        log_msg("INFO", "关闭 ParallelEvaluator 线程池")
        self.executor.shutdown(wait=True)
