import pytest

from src.core.config.lint_config import PUSH_STRATEGIES, LintConfig
from src.lint.configuration import LintConfiguration, PushStrategy, load_configuration, merge_configuration


@pytest.fixture
def defaults() -> LintConfig:
    return LintConfig()


class TestMergeConfiguration:
    def test_defaults(self, defaults: LintConfig) -> None:
        configuration = merge_configuration(defaults, None)

        assert configuration.ext == [".js"]
        assert configuration.ignores == ["node_modules"]
        assert configuration.push == PushStrategy.NONE
        assert configuration.commit_msg == "ESLint fixes\n\n[lintflow:generated]"
        assert not configuration.fix

    def test_overrides_win_and_none_does_not_override(self, defaults: LintConfig) -> None:
        configuration = merge_configuration(
            defaults, {"ext": ["ts", ".tsx"], "push": "pr", "commitMsg": None, "labels": ["lint"]}
        )

        assert configuration.ext == [".ts", ".tsx"]
        assert configuration.push == PushStrategy.PR
        assert configuration.commit_msg == defaults.commit_msg
        assert configuration.labels == ["lint"]
        assert configuration.fix

    def test_unknown_strategy_is_rejected(self, defaults: LintConfig) -> None:
        with pytest.raises(ValueError):
            merge_configuration(defaults, {"push": "always"})

    def test_extensions_are_normalised(self) -> None:
        assert LintConfiguration(ext=["js", ".jsx"]).ext == [".js", ".jsx"]

    def test_service_strategies_match_enum(self) -> None:
        assert PUSH_STRATEGIES == tuple(strategy.value for strategy in PushStrategy)


class TestLoadConfiguration:
    def test_without_repository_file(self, tmp_path, defaults: LintConfig) -> None:
        assert load_configuration(tmp_path, defaults) == merge_configuration(defaults, None)

    def test_reads_repository_file(self, tmp_path, defaults: LintConfig) -> None:
        config_file = tmp_path / ".lintflow" / "config.yaml"
        config_file.parent.mkdir()
        config_file.write_text("push: commit_default\nargs: ['--max-warnings', '10']\nmodules: [eslint-plugin-react]\n")

        configuration = load_configuration(tmp_path, defaults)

        assert configuration.push == PushStrategy.COMMIT_DEFAULT
        assert configuration.args == ["--max-warnings", "10"]
        assert configuration.modules == ["eslint-plugin-react"]

    def test_empty_repository_file_uses_defaults(self, tmp_path, defaults: LintConfig) -> None:
        config_file = tmp_path / ".lintflow" / "config.yaml"
        config_file.parent.mkdir()
        config_file.write_text("")

        assert load_configuration(tmp_path, defaults).push == PushStrategy.NONE

    @pytest.mark.parametrize("content", ["- just\n- a list\n", "push: [unclosed\n", "push: sometimes\n"])
    def test_invalid_repository_file(self, tmp_path, defaults: LintConfig, content: str) -> None:
        config_file = tmp_path / ".lintflow" / "config.yaml"
        config_file.parent.mkdir()
        config_file.write_text(content)

        with pytest.raises(ValueError):
            load_configuration(tmp_path, defaults)
