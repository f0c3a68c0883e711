"""配置管理模块。

提供基于 OmegaConf + YAML 的统一配置加载、验证和管理功能。
"""

from dataclasses import dataclass, asdict
from pathlib import Path
from collections.abc import Hashable
from typing import Optional
from omegaconf import OmegaConf, DictConfig
from datetime import datetime
import random
from dotenv import load_dotenv

# 环境变量插值使用 OmegaConf 内置的 ${oc.env:VAR,default} 解析器

CROSSOVER_CHOICES = ("uniform", "single_point")
GRADIENT_CHOICES = ("sigmoid", "birdshot")
LOG_LEVEL_CHOICES = ("DEBUG", "INFO", "WARNING", "ERROR")


# ============================================================
# 配置数据类定义
# ============================================================


@dataclass
class ProjectConfig:
    """项目基础配置。"""

    name: str
    version: str
    log_dir: Path
    exp_name: Optional[str]


@dataclass
class PopulationConfig:
    """种群配置。"""

    size: int
    mutation_rate: float
    crossover_bias: float
    crossover: str


@dataclass
class EvolutionConfig:
    """进化流程配置。"""

    generations: int
    gradient: str
    steepness: float
    choke: float


@dataclass
class SimulationConfig:
    """模拟运行配置。"""

    seed: Optional[int]
    max_workers: Optional[int]


@dataclass
class FitnessConfig:
    """参考代价函数配置。"""

    stand_threshold: int
    samples: int


@dataclass
class LoggingConfig:
    """日志配置。"""

    level: str
    console_output: bool
    file_output: bool


@dataclass
class Config(Hashable):
    """顶层配置类。

    实现 Hashable 接口，可用作 dict key 和 set 成员。
    """

    project: ProjectConfig
    population: PopulationConfig
    evolution: EvolutionConfig
    simulation: SimulationConfig
    fitness: FitnessConfig
    logging: LoggingConfig

    def __hash__(self) -> int:
        """基于实验名称的哈希值。

        Returns:
            实验名称的哈希值
        """
        return hash(self.project.exp_name)


# ============================================================
# 配置加载与验证函数
# ============================================================


def load_config(
    config_path: Path | None = None, use_cli: bool = True, env_file: Path | None = None
) -> Config:
    """加载 YAML 配置并合并 CLI 参数和环境变量。

    配置优先级（从高到低）:
        1. CLI 参数（key=value，例如 population.size=64）
        2. 环境变量（.env 文件或系统环境变量）
        3. YAML 配置文件

    Args:
        config_path: 配置文件路径，默认为 config/default.yaml
        use_cli: 是否合并 CLI 参数（通过 OmegaConf.from_cli()）
        env_file: .env 文件路径，默认为项目根目录的 .env 文件

    Returns:
        验证后的 Config 对象

    Raises:
        FileNotFoundError: 配置文件不存在
        ValueError: 配置验证失败

    示例:
        >>> cfg = load_config()  # 加载默认配置
        >>> cfg = load_config(Path("custom.yaml"))  # 加载自定义配置
        >>> cfg = load_config(use_cli=False)  # 不合并 CLI 参数
    """
    from utils.logger_system import log_msg

    # 步骤 1: 加载 .env 文件到环境变量
    if env_file is None:
        env_file = Path(__file__).parent.parent / ".env"

    if env_file.exists():
        load_dotenv(env_file, override=False)  # 不覆盖已存在的环境变量
        log_msg("INFO", f"加载环境变量文件: {env_file}")
    else:
        log_msg("INFO", "未找到 .env 文件，使用系统环境变量")

    # 步骤 2: 确定配置文件路径
    if config_path is None:
        config_path = Path(__file__).parent.parent / "config" / "default.yaml"

    if not config_path.exists():
        error_msg = f"配置文件不存在: {config_path}"
        log_msg("ERROR", error_msg)
        raise FileNotFoundError(error_msg)

    log_msg("INFO", f"加载配置文件: {config_path}")

    # 步骤 3: 加载 YAML 配置（${oc.env:VAR} 插值在类型化转换时解析）
    cfg = OmegaConf.load(config_path)

    # 步骤 4: 合并 CLI 参数（优先级最高）
    if use_cli:
        cli_cfg = OmegaConf.from_cli()
        if cli_cfg:
            log_msg("INFO", f"合并 CLI 参数: {OmegaConf.to_yaml(cli_cfg)}")
            cfg = OmegaConf.merge(cfg, cli_cfg)

    # 步骤 5: 验证配置
    validated_cfg = validate_config(cfg)
    log_msg("INFO", "配置加载并验证成功")

    return validated_cfg


def _fail(error_msg: str) -> None:
    from utils.logger_system import log_msg

    log_msg("ERROR", error_msg)
    raise ValueError(error_msg)


def validate_config(cfg: DictConfig) -> Config:
    """验证配置完整性和合法性。

    Args:
        cfg: OmegaConf DictConfig 对象

    Returns:
        类型化的 Config 对象

    Raises:
        ValueError: 配置验证失败

    验证规则:
        1. 类型化转换: 按数据类模板合并，字段类型不符时报错
        2. 种群: size 为 4 的正整数倍，mutation_rate/crossover_bias ∈ [0, 1]
        3. 进化: generations >= 0，steepness >= 1，choke ∈ [0, 0.5]
        4. 模拟: max_workers 为空或正整数
        5. 代价函数: stand_threshold ∈ [2, 21]，samples > 0
        6. 路径解析: log_dir 转为绝对路径并创建
        7. 实验名称生成: 如果未提供则自动生成
    """
    from utils.logger_system import log_msg

    # ---- 类型化转换 ----
    # 创建结构化配置模板
    cfg_schema = OmegaConf.structured(
        Config(
            project=ProjectConfig(name="", version="", log_dir=Path(), exp_name=None),
            population=PopulationConfig(
                size=0, mutation_rate=0.0, crossover_bias=0.0, crossover=""
            ),
            evolution=EvolutionConfig(generations=0, gradient="", steepness=0.0, choke=0.0),
            simulation=SimulationConfig(seed=None, max_workers=None),
            fitness=FitnessConfig(stand_threshold=0, samples=0),
            logging=LoggingConfig(level="", console_output=False, file_output=False),
        )
    )

    try:
        cfg_merged = OmegaConf.merge(cfg_schema, cfg)
    except Exception as e:
        error_msg = f"配置字段类型错误: {e}"
        log_msg("ERROR", error_msg)
        raise ValueError(error_msg) from e

    # 转换为 Python 对象
    cfg_dict = OmegaConf.to_container(cfg_merged, resolve=True)
    config = Config(
        project=ProjectConfig(**cfg_dict["project"]),
        population=PopulationConfig(**cfg_dict["population"]),
        evolution=EvolutionConfig(**cfg_dict["evolution"]),
        simulation=SimulationConfig(**cfg_dict["simulation"]),
        fitness=FitnessConfig(**cfg_dict["fitness"]),
        logging=LoggingConfig(**cfg_dict["logging"]),
    )

    # ---- 种群 ----
    population = config.population
    if population.size <= 0 or population.size % 4 != 0:
        _fail(f"`population.size` 必须是 4 的正整数倍，实际 {population.size}")
    if not 0.0 <= population.mutation_rate <= 1.0:
        _fail(f"`population.mutation_rate` 必须在 [0, 1] 内，实际 {population.mutation_rate}")
    if not 0.0 <= population.crossover_bias <= 1.0:
        _fail(f"`population.crossover_bias` 必须在 [0, 1] 内，实际 {population.crossover_bias}")
    if population.crossover not in CROSSOVER_CHOICES:
        _fail(f"`population.crossover` 必须是 {CROSSOVER_CHOICES} 之一，实际 {population.crossover}")

    # ---- 进化 ----
    evolution = config.evolution
    if evolution.generations < 0:
        _fail(f"`evolution.generations` 必须 >= 0，实际 {evolution.generations}")
    if evolution.gradient not in GRADIENT_CHOICES:
        _fail(f"`evolution.gradient` 必须是 {GRADIENT_CHOICES} 之一，实际 {evolution.gradient}")
    if evolution.steepness < 1:
        _fail(f"`evolution.steepness` 必须 >= 1，实际 {evolution.steepness}")
    if not 0.0 <= evolution.choke <= 0.5:
        _fail(f"`evolution.choke` 必须在 [0, 0.5] 内，实际 {evolution.choke}")

    # ---- 模拟 ----
    if config.simulation.max_workers is not None and config.simulation.max_workers <= 0:
        _fail(f"`simulation.max_workers` 必须为正整数，实际 {config.simulation.max_workers}")

    # ---- 代价函数 ----
    if not 2 <= config.fitness.stand_threshold <= 21:
        _fail(f"`fitness.stand_threshold` 必须在 [2, 21] 内，实际 {config.fitness.stand_threshold}")
    if config.fitness.samples <= 0:
        _fail(f"`fitness.samples` 必须为正整数，实际 {config.fitness.samples}")

    # ---- 日志 ----
    config.logging.level = config.logging.level.upper()
    if config.logging.level not in LOG_LEVEL_CHOICES:
        _fail(f"`logging.level` 必须是 {LOG_LEVEL_CHOICES} 之一，实际 {config.logging.level}")

    # ---- 路径解析和创建 ----
    config.project.log_dir = Path(config.project.log_dir).resolve()
    config.project.log_dir.mkdir(parents=True, exist_ok=True)
    log_msg("INFO", f"日志目录: {config.project.log_dir}")

    # ---- 生成实验名称 ----
    # ${oc.env:VAR,null} 未设置时解析为 None
    if not config.project.exp_name:
        config.project.exp_name = generate_exp_name()
        log_msg("INFO", f"生成实验名称: {config.project.exp_name}")

    return config


def generate_exp_name() -> str:
    """生成实验名称（时间戳 + 随机后缀）。

    Returns:
        实验名称字符串，格式: YYYYMMDD_HHMMSS_xxxx

    示例:
        >>> name = generate_exp_name()
        >>> print(name)
        20260130_143022_abcd
    """
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    suffix = "".join(random.choices("abcdefghijklmnopqrstuvwxyz", k=4))
    return f"{timestamp}_{suffix}"


def print_config(cfg: Config) -> None:
    """美观打印配置（用于调试）。

    Args:
        cfg: Config 对象

    实现细节:
        - 使用 rich 库高亮显示 YAML 格式
        - 使用 paraiso-dark 主题
    """
    from rich import print as rprint
    from rich.syntax import Syntax

    cfg_dict = asdict(cfg)
    cfg_dict["project"]["log_dir"] = str(cfg.project.log_dir)

    yaml_str = OmegaConf.to_yaml(OmegaConf.create(cfg_dict))
    syntax = Syntax(yaml_str, "yaml", theme="paraiso-dark", line_numbers=True)
    rprint(syntax)
