"""Blackjack 要牌/停牌策略 Agent。

基因按三维决策上下文排列：
    庄家明牌（A..K，13 种）× 玩家当前点数（2..20，19 种）× 是否持有 A（2 种）

三维下标通过 context_index() 映射到扁平基因向量，交叉与变异只作用于扁平下标。
"""

from __future__ import annotations

import random
from typing import Optional

import numpy as np

from agents.base_agent import Agent, GENE_MAX, random_gene

# ---- 上下文维度 ----
DEALER_FACES = 13  # 0 -> A, 12 -> K
MIN_SCORE = 2
MAX_SCORE = 20
SCORE_COUNT = MAX_SCORE - MIN_SCORE + 1  # 19
ACE_STATES = 2
GENE_COUNT = DEALER_FACES * SCORE_COUNT * ACE_STATES  # 494


def context_index(dealer_face: int, score: int, has_ace: bool) -> int:
    """把 (庄家明牌, 点数, 是否有 A) 映射为扁平基因下标。

    index = (dealer_face * SCORE_COUNT + (score - MIN_SCORE)) * ACE_STATES + has_ace

    Args:
        dealer_face: 庄家明牌序号，0 (A) .. 12 (K)
        score: 玩家当前点数，2 .. 20
        has_ace: 玩家手牌中是否有 A

    Returns:
        [0, GENE_COUNT) 内的下标

    Raises:
        ValueError: 任一维度越界
    """
    if not 0 <= dealer_face < DEALER_FACES:
        raise ValueError(f"庄家明牌越界: {dealer_face}（应为 0..{DEALER_FACES - 1}）")
    if not MIN_SCORE <= score <= MAX_SCORE:
        raise ValueError(f"点数越界: {score}（应为 {MIN_SCORE}..{MAX_SCORE}）")
    return (dealer_face * SCORE_COUNT + (score - MIN_SCORE)) * ACE_STATES + int(bool(has_ace))


class BlackjackAgent(Agent):
    """以 494 个基因编码要牌倾向的 Agent。

    基因值越大越倾向要牌；GENE_MAX / 2 相当于抛硬币。
    """

    def __init__(self, weights: Optional[np.ndarray] = None):
        if weights is None:
            weights = np.zeros(GENE_COUNT, dtype=np.int64)
        weights = np.asarray(weights, dtype=np.int64)
        if weights.shape != (GENE_COUNT,):
            raise ValueError(f"基因向量长度必须为 {GENE_COUNT}，实际 {weights.shape}")
        if weights.min() < 0 or weights.max() > GENE_MAX:
            raise ValueError(f"基因取值必须在 [0, {GENE_MAX}] 内")
        self._weights = weights

    @classmethod
    def random(cls, rng: random.Random) -> BlackjackAgent:
        """创建基因完全随机的 Agent。"""
        return cls(np.array([random_gene(rng) for _ in range(GENE_COUNT)], dtype=np.int64))

    def get_weights(self) -> np.ndarray:
        return self._weights

    def get_weight(self, dealer_face: int, score: int, has_ace: bool) -> int:
        """读取指定上下文的基因值。"""
        return int(self._weights[context_index(dealer_face, score, has_ace)])

    def hit_probability(self, dealer_face: int, score: int, has_ace: bool) -> float:
        """指定上下文下要牌的概率（基因值 / GENE_MAX）。"""
        return self.get_weight(dealer_face, score, has_ace) / GENE_MAX

    def should_hit(
        self, dealer_face: int, score: int, has_ace: bool, rng: random.Random
    ) -> bool:
        """按基因倾向随机决定是否要牌。"""
        return random_gene(rng) < self.get_weight(dealer_face, score, has_ace)

    def __repr__(self) -> str:
        mean = float(self._weights.mean()) / GENE_MAX
        return f"BlackjackAgent(genes={GENE_COUNT}, mean_hit={mean:.3f})"
