"""Agent 模块单元测试。"""

import random

import numpy as np
import pytest

from agents.base_agent import GENE_MAX, random_gene
from agents.blackjack_agent import (
    ACE_STATES,
    DEALER_FACES,
    GENE_COUNT,
    MAX_SCORE,
    MIN_SCORE,
    BlackjackAgent,
    context_index,
)
from core.evolution.crossover import UniformCrossover


class TestContextIndex:
    """测试三维上下文到扁平下标的映射。"""

    def test_gene_count(self):
        assert GENE_COUNT == 13 * 19 * 2 == 494

    def test_corners(self):
        assert context_index(0, 2, False) == 0
        assert context_index(0, 2, True) == 1
        assert context_index(0, 3, False) == 2
        assert context_index(1, 2, False) == 38
        assert context_index(12, 20, True) == GENE_COUNT - 1

    def test_mapping_is_bijective(self):
        indices = {
            context_index(face, score, bool(ace))
            for face in range(DEALER_FACES)
            for score in range(MIN_SCORE, MAX_SCORE + 1)
            for ace in range(ACE_STATES)
        }
        assert indices == set(range(GENE_COUNT))

    @pytest.mark.parametrize(
        "face, score",
        [(-1, 10), (13, 10), (0, 1), (0, 21)],
    )
    def test_out_of_range_raises(self, face, score):
        with pytest.raises(ValueError):
            context_index(face, score, False)


class TestBlackjackAgent:
    """测试 BlackjackAgent。"""

    def test_default_weights_are_zero(self):
        agent = BlackjackAgent()
        assert agent.get_weights().shape == (GENE_COUNT,)
        assert not agent.get_weights().any()

    def test_random_agent_in_range(self):
        agent = BlackjackAgent.random(random.Random(0))
        weights = agent.get_weights()
        assert weights.dtype == np.int64
        assert weights.min() >= 0
        assert weights.max() <= GENE_MAX

    def test_random_is_reproducible(self):
        a = BlackjackAgent.random(random.Random(5))
        b = BlackjackAgent.random(random.Random(5))
        assert np.array_equal(a.get_weights(), b.get_weights())

    def test_get_weights_is_live(self):
        """get_weights 返回的数组可原地修改。"""
        agent = BlackjackAgent()
        agent.get_weights()[context_index(3, 12, True)] = 42
        assert agent.get_weight(3, 12, True) == 42

    def test_hit_probability(self):
        agent = BlackjackAgent()
        agent.get_weights()[context_index(9, 16, False)] = GENE_MAX
        assert agent.hit_probability(9, 16, False) == 1.0
        assert agent.hit_probability(9, 16, True) == 0.0

    def test_should_hit_follows_extremes(self):
        agent = BlackjackAgent()
        agent.get_weights()[context_index(0, 5, False)] = GENE_MAX
        rng = random.Random(1)
        assert not any(agent.should_hit(0, 20, False, rng) for _ in range(50))
        assert sum(agent.should_hit(0, 5, False, rng) for _ in range(50)) == 50

    @pytest.mark.parametrize(
        "weights",
        [np.zeros(10, dtype=np.int64), np.full(GENE_COUNT, -1), np.full(GENE_COUNT, GENE_MAX + 1)],
    )
    def test_invalid_weights_raise(self, weights):
        with pytest.raises(ValueError):
            BlackjackAgent(weights)

    def test_random_gene_range(self):
        rng = random.Random(0)
        assert all(0 <= random_gene(rng) <= GENE_MAX for _ in range(100))

    def test_blank_is_new_zero_agent(self):
        agent = BlackjackAgent.random(random.Random(0))

        child = agent.blank()

        assert type(child) is BlackjackAgent
        assert child is not agent
        assert not child.get_weights().any()
        assert agent.get_weights().any()


class TestInherit:
    """测试有性繁殖。"""

    @pytest.fixture
    def parents(self):
        rng = random.Random(2)
        return BlackjackAgent.random(rng), BlackjackAgent.random(rng)

    def test_bias_one_copies_father(self, parents):
        father, mother = parents
        child = BlackjackAgent()
        child.inherit(father, mother, random.Random(0), UniformCrossover(), bias=1.0)
        assert np.array_equal(child.get_weights(), father.get_weights())

    def test_bias_zero_copies_mother(self, parents):
        father, mother = parents
        child = BlackjackAgent()
        child.inherit(father, mother, random.Random(0), UniformCrossover(), bias=0.0)
        assert np.array_equal(child.get_weights(), mother.get_weights())

    def test_child_bits_come_from_parents(self, parents):
        father, mother = parents
        child = BlackjackAgent()
        child.inherit(father, mother, random.Random(0), UniformCrossover())

        f, m, c = father.get_weights(), mother.get_weights(), child.get_weights()
        assert not np.any(c & ~(f | m))
        assert np.array_equal(c & (f & m), f & m)

    def test_same_parent_twice_raises(self, parents):
        father, _ = parents
        with pytest.raises(ValueError, match="不同"):
            BlackjackAgent().inherit(father, father, random.Random(0), UniformCrossover())

    def test_identical_but_distinct_parents_allowed(self):
        """结构相同的两个 Agent 仍是不同的父母。"""
        a, b = BlackjackAgent(), BlackjackAgent()
        child = BlackjackAgent.random(random.Random(0))
        child.inherit(a, b, random.Random(0), UniformCrossover())
        assert not child.get_weights().any()

    def test_self_as_parent_raises(self, parents):
        father, mother = parents
        with pytest.raises(ValueError, match="自己"):
            father.inherit(father, mother, random.Random(0), UniformCrossover())
        with pytest.raises(ValueError, match="自己"):
            mother.inherit(father, mother, random.Random(0), UniformCrossover())
