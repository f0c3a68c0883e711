"""配置系统单元测试。"""

import re
import warnings
from pathlib import Path

import pytest
from omegaconf import OmegaConf

from utils.config import (
    Config,
    PopulationConfig,
    generate_exp_name,
    load_config,
    print_config,
    validate_config,
)


def config_dict(tmp_path: Path) -> dict:
    return {
        "project": {
            "name": "blackjack-ga",
            "version": "0.1.0",
            "log_dir": str(tmp_path / "logs"),
            "exp_name": None,
        },
        "population": {
            "size": 16,
            "mutation_rate": 0.1,
            "crossover_bias": 0.5,
            "crossover": "uniform",
        },
        "evolution": {
            "generations": 10,
            "gradient": "sigmoid",
            "steepness": 8.0,
            "choke": 0.1,
        },
        "simulation": {"seed": 7, "max_workers": 2},
        "fitness": {"stand_threshold": 17, "samples": 100},
        "logging": {"level": "info", "console_output": True, "file_output": False},
    }


class TestLoadConfig:
    """配置加载测试类。"""

    def test_load_config_from_file(self, tmp_path: Path) -> None:
        """测试从 YAML 文件加载配置。"""
        config_path = tmp_path / "test.yaml"
        config_path.write_text(OmegaConf.to_yaml(OmegaConf.create(config_dict(tmp_path))))

        cfg = load_config(config_path, use_cli=False, env_file=tmp_path / ".env")

        assert isinstance(cfg, Config)
        assert isinstance(cfg.population, PopulationConfig)
        assert cfg.population.size == 16
        assert cfg.evolution.steepness == 8.0
        assert cfg.simulation.seed == 7
        assert cfg.logging.level == "INFO"
        assert cfg.project.log_dir == (tmp_path / "logs").resolve()
        assert cfg.project.log_dir.exists()

    def test_env_file_resolves_exp_name(self, tmp_path: Path, monkeypatch) -> None:
        """测试 .env 中的变量通过 ${oc.env:VAR,default} 注入。"""
        monkeypatch.setenv("BJ_EXP_NAME", "placeholder")
        monkeypatch.delenv("BJ_EXP_NAME")
        data = config_dict(tmp_path)
        data["project"]["exp_name"] = "${oc.env:BJ_EXP_NAME,null}"
        config_path = tmp_path / "test.yaml"
        config_path.write_text(OmegaConf.to_yaml(OmegaConf.create(data)))
        env_file = tmp_path / ".env"
        env_file.write_text("BJ_EXP_NAME=from_env\n")

        cfg = load_config(config_path, use_cli=False, env_file=env_file)

        assert cfg.project.exp_name == "from_env"

    def test_repeated_load_emits_no_warning(self, tmp_path: Path, monkeypatch) -> None:
        """多次加载配置不产生警告（环境变量插值使用内置解析器）。"""
        monkeypatch.delenv("BJ_EXP_NAME", raising=False)
        data = config_dict(tmp_path)
        data["project"]["exp_name"] = "${oc.env:BJ_EXP_NAME,null}"
        config_path = tmp_path / "test.yaml"
        config_path.write_text(OmegaConf.to_yaml(OmegaConf.create(data)))

        with warnings.catch_warnings():
            warnings.simplefilter("error")
            first = load_config(config_path, use_cli=False, env_file=tmp_path / ".env")
            second = load_config(config_path, use_cli=False, env_file=tmp_path / ".env")

        assert first.project.exp_name
        assert second.project.exp_name

    def test_cli_overrides(self, tmp_path: Path, monkeypatch) -> None:
        """测试 CLI 参数覆盖 YAML。"""
        config_path = tmp_path / "test.yaml"
        config_path.write_text(OmegaConf.to_yaml(OmegaConf.create(config_dict(tmp_path))))
        monkeypatch.setattr("sys.argv", ["main.py", "population.size=32", "evolution.gradient=birdshot"])

        cfg = load_config(config_path, use_cli=True, env_file=tmp_path / ".env")

        assert cfg.population.size == 32
        assert cfg.evolution.gradient == "birdshot"

    def test_missing_file_raises(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path / "missing.yaml", use_cli=False, env_file=tmp_path / ".env")

    def test_default_yaml_is_valid(self, tmp_path: Path, monkeypatch) -> None:
        """仓库自带的 default.yaml 可以通过验证。"""
        monkeypatch.delenv("BJ_EXP_NAME", raising=False)
        config_path = Path(__file__).parents[2] / "config" / "default.yaml"
        data = OmegaConf.load(config_path)
        data.project.log_dir = str(tmp_path / "logs")

        cfg = validate_config(data)

        assert cfg.population.size % 4 == 0
        assert cfg.project.exp_name


class TestValidateConfig:
    """配置验证测试类。"""

    def test_generates_exp_name(self, tmp_path: Path) -> None:
        cfg = validate_config(OmegaConf.create(config_dict(tmp_path)))
        assert re.match(r"^\d{8}_\d{6}_[a-z]{4}$", cfg.project.exp_name)

    @pytest.mark.parametrize(
        "section, key, value",
        [
            ("population", "size", 10),
            ("population", "size", 0),
            ("population", "mutation_rate", 1.5),
            ("population", "crossover_bias", -0.1),
            ("population", "crossover", "k_point"),
            ("evolution", "generations", -1),
            ("evolution", "gradient", "tournament"),
            ("evolution", "steepness", 0.5),
            ("evolution", "choke", 0.7),
            ("simulation", "max_workers", 0),
            ("fitness", "stand_threshold", 25),
            ("fitness", "samples", 0),
            ("logging", "level", "TRACE"),
        ],
    )
    def test_invalid_values_raise(self, tmp_path: Path, section, key, value) -> None:
        data = config_dict(tmp_path)
        data[section][key] = value
        with pytest.raises(ValueError, match=key if section != "logging" else "level"):
            validate_config(OmegaConf.create(data))

    def test_wrong_type_raises(self, tmp_path: Path) -> None:
        data = config_dict(tmp_path)
        data["population"]["size"] = "many"
        with pytest.raises(ValueError, match="类型"):
            validate_config(OmegaConf.create(data))

    def test_unknown_key_raises(self, tmp_path: Path) -> None:
        data = config_dict(tmp_path)
        data["population"]["elitism"] = True
        with pytest.raises(ValueError):
            validate_config(OmegaConf.create(data))

    def test_null_seed_and_workers(self, tmp_path: Path) -> None:
        data = config_dict(tmp_path)
        data["simulation"] = {"seed": None, "max_workers": None}
        cfg = validate_config(OmegaConf.create(data))
        assert cfg.simulation.seed is None
        assert cfg.simulation.max_workers is None


class TestHelpers:
    """辅助函数测试类。"""

    def test_generate_exp_name_format(self) -> None:
        assert re.match(r"^\d{8}_\d{6}_[a-z]{4}$", generate_exp_name())

    def test_config_hashable(self, tmp_path: Path) -> None:
        data = config_dict(tmp_path)
        data["project"]["exp_name"] = "exp"
        cfg = validate_config(OmegaConf.create(data))
        assert hash(cfg) == hash("exp")
        assert {cfg: 1}[cfg] == 1

    def test_print_config(self, tmp_path: Path, capsys) -> None:
        cfg = validate_config(OmegaConf.create(config_dict(tmp_path)))
        print_config(cfg)
        assert "population" in capsys.readouterr().out
