"""进化机制子系统。

提供交叉、变异、选择梯度与补位繁殖策略。
"""

from .crossover import Crossover, SinglePointCrossover, UniformCrossover, build_crossover
from .gradient import BirdshotGradient, Gradient, SigmoidGradient, build_gradient
from .mutation import Mutation, UniformMutation
from .repopulator import Repopulator, TwoPassRepopulator

__all__ = [
    "Crossover",
    "UniformCrossover",
    "SinglePointCrossover",
    "build_crossover",
    "Mutation",
    "UniformMutation",
    "Gradient",
    "SigmoidGradient",
    "BirdshotGradient",
    "build_gradient",
    "Repopulator",
    "TwoPassRepopulator",
]
