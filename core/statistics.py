"""种群统计数据结构。

每一代的代价统计、逐基因统计与选择报告，均可通过 to_dict()/to_json() 序列化，
直接写入 metrics.json。
"""

from dataclasses import dataclass

from dataclasses_json import DataClassJsonMixin


@dataclass(frozen=True)
class CostStatistics(DataClassJsonMixin):
    """一代种群的代价汇总（代价越低越好）。"""

    min: float
    max: float
    mean: float
    count: int


@dataclass(frozen=True)
class GeneStatistics(DataClassJsonMixin):
    """单个基因下标在整个种群上的取值汇总。"""

    index: int
    min: int
    max: int
    mean: float
    count: int


@dataclass(frozen=True)
class SelectionReport(DataClassJsonMixin):
    """梯度选择结果的四类计数。

    Attributes:
        elite: 前半区存活个数
        lucky: 后半区存活个数
        non_elite: 后半区淘汰个数
        unlucky: 前半区淘汰个数
    """

    elite: int
    lucky: int
    non_elite: int
    unlucky: int

    @property
    def survivors(self) -> int:
        return self.elite + self.lucky

    @property
    def vacated(self) -> int:
        return self.non_elite + self.unlucky
