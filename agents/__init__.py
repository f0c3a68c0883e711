"""Agent 模块入口。

导出 Agent 基类与 Blackjack 策略 Agent。
"""

from .base_agent import GENE_MAX, Agent, random_gene
from .blackjack_agent import GENE_COUNT, BlackjackAgent, context_index

__all__ = ["GENE_MAX", "Agent", "random_gene", "GENE_COUNT", "BlackjackAgent", "context_index"]
