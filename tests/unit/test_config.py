"""Tests for client configuration."""

import os

import pytest

from src.tvmclient.config import (
    DEFAULT_API_HOST,
    DEFAULT_CACHE_FILE,
    RetryOptions,
    TvmConfig,
    load_config_file,
)
from src.tvmclient.errors import BadArgumentError


class TestRetryOptions:
    """Test RetryOptions class."""

    def test_defaults(self):
        options = RetryOptions()
        assert options.max_retries == 3
        assert options.initial_delay_in_millis == 100

    def test_from_mapping(self):
        options = RetryOptions.from_mapping({"max_retries": 5, "initial_delay_in_millis": 20})
        assert options.to_dict() == {"max_retries": 5, "initial_delay_in_millis": 20}

    def test_from_partial_mapping(self):
        options = RetryOptions.from_mapping({"max_retries": 0})
        assert options == RetryOptions(max_retries=0, initial_delay_in_millis=100)

    @pytest.mark.parametrize(
        "options",
        [
            {"max_retries": -1},
            {"max_retries": 1.5},
            {"max_retries": True},
            {"initial_delay_in_millis": 0},
            {"initial_delay_in_millis": "100"},
            {"retries": 3},
            "3",
        ],
    )
    def test_invalid_options(self, options):
        with pytest.raises(BadArgumentError):
            RetryOptions.from_mapping(options)


class TestTvmConfig:
    """Test TvmConfig.from_mapping."""

    def test_minimal_config(self, tvm_input):
        config = TvmConfig.from_mapping(tvm_input)

        assert config.namespace == "fakens"
        assert config.auth_token == "fakeauth"
        assert config.api_host == DEFAULT_API_HOST
        assert config.cache_file == DEFAULT_CACHE_FILE
        assert config.retry_options == RetryOptions()
        assert set(config.defaults) == {"api_host", "cache_file", "retry_options"}

    def test_default_cache_file_location(self):
        assert os.path.basename(DEFAULT_CACHE_FILE) == ".tvmCache"

    def test_full_config(self, tvm_input, tmp_path):
        config = TvmConfig.from_mapping(
            {
                **tvm_input,
                "api_host": "https://tvm.example.com/apis/",
                "cache_file": str(tmp_path / "cache"),
                "retry_options": {"max_retries": 1, "initial_delay_in_millis": 10},
            }
        )

        assert config.api_host == "https://tvm.example.com/apis"
        assert config.cache_file == str(tmp_path / "cache")
        assert config.retry_options.max_retries == 1
        assert config.defaults == ()

    def test_path_cache_file(self, tvm_input, tmp_path):
        config = TvmConfig.from_mapping({**tvm_input, "cache_file": tmp_path / "cache"})
        assert config.cache_file == str(tmp_path / "cache")

    @pytest.mark.parametrize("value", [None, False, ""])
    def test_falsy_cache_file_disables_persistence(self, tvm_input, value):
        config = TvmConfig.from_mapping({**tvm_input, "cache_file": value})

        assert config.cache_file is None
        assert "cache_file" not in config.defaults

    def test_invalid_cache_file(self, tvm_input):
        with pytest.raises(BadArgumentError):
            TvmConfig.from_mapping({**tvm_input, "cache_file": 42})

    def test_env_fallback(self):
        config = TvmConfig.from_mapping(
            {}, env={"__OW_NAMESPACE": "envns", "__OW_API_KEY": "envauth"}
        )
        assert config.namespace == "envns"
        assert config.auth_token == "envauth"

    def test_env_fallback_reads_os_environ(self, monkeypatch):
        monkeypatch.setenv("__OW_NAMESPACE", "envns")
        monkeypatch.setenv("__OW_API_KEY", "envauth")

        config = TvmConfig.from_mapping(None)
        assert config.namespace == "envns"

    def test_explicit_values_win_over_env(self, tvm_input):
        config = TvmConfig.from_mapping(
            tvm_input, env={"__OW_NAMESPACE": "envns", "__OW_API_KEY": "envauth"}
        )
        assert config.namespace == "fakens"
        assert config.auth_token == "fakeauth"

    def test_missing_namespace(self):
        with pytest.raises(BadArgumentError, match="'namespace' is required"):
            TvmConfig.from_mapping({"auth_token": "fakeauth"}, env={})

    def test_missing_auth_token(self):
        with pytest.raises(BadArgumentError, match="'auth_token' is required"):
            TvmConfig.from_mapping({"namespace": "fakens"}, env={})

    def test_unknown_key(self, tvm_input):
        with pytest.raises(BadArgumentError, match="'region' is not allowed in config"):
            TvmConfig.from_mapping({**tvm_input, "region": "us-east-1"})

    @pytest.mark.parametrize(
        "overrides",
        [
            {"namespace": 123},
            {"auth_token": ["fakeauth"]},
            {"api_host": ""},
            {"api_host": 42},
            {"retry_options": {"max_retries": -2}},
        ],
    )
    def test_invalid_values(self, tvm_input, overrides):
        with pytest.raises(BadArgumentError):
            TvmConfig.from_mapping({**tvm_input, **overrides})

    def test_not_a_mapping(self):
        with pytest.raises(BadArgumentError):
            TvmConfig.from_mapping(["fakens", "fakeauth"])

    def test_repr_hides_auth_token(self, tvm_input):
        assert "fakeauth" not in repr(TvmConfig.from_mapping(tvm_input))


class TestLoadConfigFile:
    """Test load_config_file function."""

    def test_load_yaml(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text(
            "namespace: fakens\n"
            "auth_token: fakeauth\n"
            "cache_file: null\n"
            "retry_options:\n"
            "  max_retries: 2\n"
        )

        assert load_config_file(path) == {
            "namespace": "fakens",
            "auth_token": "fakeauth",
            "cache_file": None,
            "retry_options": {"max_retries": 2},
        }

    def test_empty_file(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("")
        assert load_config_file(path) == {}

    def test_missing_file(self, tmp_path):
        with pytest.raises(BadArgumentError, match="does not exist"):
            load_config_file(tmp_path / "missing.yaml")

    def test_missing_file_ok(self, tmp_path):
        assert load_config_file(tmp_path / "missing.yaml", missing_ok=True) == {}

    def test_invalid_yaml_does_not_leak_content(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("auth_token: secretvalue\nnamespace: [unclosed\n")

        with pytest.raises(BadArgumentError) as exc_info:
            load_config_file(path)

        assert "secretvalue" not in str(exc_info.value)
        assert exc_info.value.cause is not None

    def test_not_a_mapping(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("- fakens\n- fakeauth\n")

        with pytest.raises(BadArgumentError, match="must contain a mapping"):
            load_config_file(path)
