"""Blackjack 策略进化主程序入口。

流程：
    - 加载配置（YAML + .env + CLI 覆盖）
    - 构建种群、选择梯度、参考代价函数
    - 运行遗传算法并输出最优 Agent 的策略摘要
"""

import random
import time

from utils.config import load_config, print_config, Config
from utils.logger_system import init_logger, log_msg, log_exception, log_json
from agents.blackjack_agent import (
    BlackjackAgent,
    DEALER_FACES,
    MAX_SCORE,
    MIN_SCORE,
)
from core.evolution import TwoPassRepopulator, UniformMutation, build_crossover, build_gradient
from core.population import Population
from core.simulation import Simulation
from search.fitness import threshold_cost_factory


def build_simulation(config: Config) -> Simulation:
    """根据配置组装模拟器。

    Args:
        config: 全局配置

    Returns:
        可直接 run() 的 Simulation
    """
    rng = random.Random(config.simulation.seed)

    population = Population(
        size=config.population.size,
        agent_factory=BlackjackAgent.random,
        rng=rng,
        repopulator=TwoPassRepopulator(),
        crossover=build_crossover(config.population.crossover),
        mutation=UniformMutation(),
        mutation_rate=config.population.mutation_rate,
        crossover_bias=config.population.crossover_bias,
    )
    gradient = build_gradient(
        config.evolution.gradient,
        rng,
        steepness=config.evolution.steepness,
        choke=config.evolution.choke,
    )
    cost_factory = threshold_cost_factory(
        config.fitness.stand_threshold, config.fitness.samples
    )

    return Simulation(
        population=population,
        gradient=gradient,
        cost_factory=cost_factory,
        generations=config.evolution.generations,
        rng=rng,
        max_workers=config.simulation.max_workers,
    )


def summarize_agent(agent: BlackjackAgent, stand_threshold: int) -> dict:
    """计算 Agent 在阈值两侧的平均要牌概率。"""
    below, above = [], []
    for dealer_face in range(DEALER_FACES):
        for score in range(MIN_SCORE, MAX_SCORE + 1):
            for has_ace in (False, True):
                p = agent.hit_probability(dealer_face, score, has_ace)
                (below if score < stand_threshold else above).append(p)

    return {
        "hit_below_threshold": sum(below) / len(below) if below else None,
        "hit_at_or_above_threshold": sum(above) / len(above) if above else None,
    }


def format_probability(value: float | None) -> str:
    """格式化摘要中的概率；阈值在边界时对应区间为空，显示 N/A。"""
    return "N/A" if value is None else f"{value:.3f}"


def main() -> None:
    """主函数。"""
    print("\n" + "=" * 60)
    print("Blackjack 策略进化")
    print("=" * 60 + "\n")

    # [1] 配置与日志
    print("[1/3] 加载配置...")
    config = load_config()
    init_logger(
        config.project.log_dir / config.project.exp_name,
        level=config.logging.level,
        console_output=config.logging.console_output,
        file_output=config.logging.file_output,
    )
    print_config(config)
    log_msg("INFO", f"实验名称: {config.project.exp_name}")

    start_time = time.time()
    try:
        # [2] 运行
        print("\n[2/3] 运行遗传算法...")
        simulation = build_simulation(config)
        history = simulation.run()

        # [3] 结果
        print("\n[3/3] 结果展示...")
        if not history:
            log_msg("WARNING", "generations=0，未进行任何评估")
            return

        best = simulation.population.best_agent()
        summary = summarize_agent(best, config.fitness.stand_threshold)
        final = history[-1]

        print(f"  最终代价: min={final.min:.4f}, mean={final.mean:.4f}")
        print(f"  阈值以下平均要牌概率: {format_probability(summary['hit_below_threshold'])}")
        print(f"  阈值及以上平均要牌概率: {format_probability(summary['hit_at_or_above_threshold'])}")

        elapsed_time = time.time() - start_time
        log_json(
            {
                "event": "main_completed",
                "elapsed_time": elapsed_time,
                "generations": len(history),
                "final_cost": final.to_dict(),
                "best_agent": summary,
            }
        )
        print(f"\n✅ 执行完成！总耗时: {elapsed_time:.2f}s\n")

    except KeyboardInterrupt:
        print("\n\n⚠️  用户中断执行")
        log_msg("WARNING", "用户中断执行")
    except Exception as e:
        print(f"\n\n❌ 执行失败: {e}")
        log_exception(e, "主程序执行失败")
        raise


if __name__ == "__main__":
    main()
