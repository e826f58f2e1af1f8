"""
Tests for YAML configuration loading and validation.
"""

from __future__ import annotations

import os

import pytest
import yaml

from fanbot.config import Configuration

VALID_CONFIG = {
    "llm": {
        "base_url": "http://127.0.0.1:11434",
        "model": "llama3.1:latest",
        "system_prompt": "Tu es FanBot.",
        "http_client": {
            "connect_timeout": 5.0,
            "read_timeout": 30.0,
            "write_timeout": 5.0,
            "pool_timeout": 5.0,
        },
    },
    "streaming": {"response_timeout": 120, "chunk_size": None},
    "assistant": {
        "default_mode": "ollama",
        "faq_path": "faq.json",
        "stopped_message": "stop",
        "error_message": "{model}: {detail}",
    },
    "logging": {"level": "DEBUG"},
}


def write_config(tmp_path, data) -> Configuration:
    path = tmp_path / "config.yaml"
    path.write_text(yaml.safe_dump(data, allow_unicode=True), encoding="utf-8")
    return Configuration(str(path))


def with_section(section: str, **changes) -> dict:
    data = {**VALID_CONFIG, section: {**VALID_CONFIG[section], **changes}}
    return data


@pytest.fixture(autouse=True)
def no_model_override(monkeypatch):
    monkeypatch.delenv("OLLAMA_MODEL", raising=False)


class TestConfiguration:
    """Test configuration getters."""

    def test_packaged_config_is_complete(self):
        config = Configuration()

        assert config.get_llm_config()["base_url"] == "http://127.0.0.1:11434"
        assert config.get_http_client_config()["read_timeout"] > 0
        assert config.get_streaming_config()["response_timeout"] == 120
        assert os.path.exists(config.get_assistant_config()["faq_path"])

    def test_valid_config(self, tmp_path):
        config = write_config(tmp_path, VALID_CONFIG)

        assert config.get_llm_config()["model"] == "llama3.1:latest"
        assert config.get_logging_config() == {"level": "DEBUG"}
        assert config.get_assistant_config()["faq_path"] == str(tmp_path / "faq.json")

    def test_model_override_from_environment(self, tmp_path, monkeypatch):
        monkeypatch.setenv("OLLAMA_MODEL", "mistral:7b")
        config = write_config(tmp_path, VALID_CONFIG)

        assert config.get_llm_config()["model"] == "mistral:7b"
        # Loaded YAML is not mutated by the override
        monkeypatch.delenv("OLLAMA_MODEL")
        assert config.get_llm_config()["model"] == "llama3.1:latest"

    def test_absolute_faq_path_kept(self, tmp_path):
        faq_path = str(tmp_path / "elsewhere" / "faq.json")
        config = write_config(tmp_path, with_section("assistant", faq_path=faq_path))

        assert config.get_assistant_config()["faq_path"] == faq_path

    def test_non_mapping_yaml_rejected(self, tmp_path):
        with pytest.raises(ValueError, match="YAML dict"):
            write_config(tmp_path, ["not", "a", "dict"])


class TestValidation:
    """Test that required keys must be explicitly configured."""

    def test_missing_llm_key(self, tmp_path):
        llm = {k: v for k, v in VALID_CONFIG["llm"].items() if k != "model"}
        config = write_config(tmp_path, {**VALID_CONFIG, "llm": llm})

        with pytest.raises(ValueError, match="llm.model"):
            config.get_llm_config()

    def test_non_positive_timeout(self, tmp_path):
        http_client = {**VALID_CONFIG["llm"]["http_client"], "read_timeout": 0}
        data = with_section("llm", http_client=http_client)

        with pytest.raises(ValueError, match="read_timeout must be positive"):
            write_config(tmp_path, data).get_http_client_config()

    def test_missing_response_timeout(self, tmp_path):
        config = write_config(tmp_path, {**VALID_CONFIG, "streaming": {}})

        with pytest.raises(ValueError, match="response_timeout"):
            config.get_streaming_config()

    def test_invalid_chunk_size(self, tmp_path):
        config = write_config(tmp_path, with_section("streaming", chunk_size=0))

        with pytest.raises(ValueError, match="chunk_size"):
            config.get_streaming_config()

    def test_unknown_mode(self, tmp_path):
        config = write_config(tmp_path, with_section("assistant", default_mode="gpt"))

        with pytest.raises(ValueError, match="default_mode"):
            config.get_assistant_config()

    def test_missing_stopped_message(self, tmp_path):
        assistant = {
            k: v for k, v in VALID_CONFIG["assistant"].items()
            if k != "stopped_message"
        }
        config = write_config(tmp_path, {**VALID_CONFIG, "assistant": assistant})

        with pytest.raises(ValueError, match="stopped_message"):
            config.get_assistant_config()
