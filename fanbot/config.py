"""Configuration management for the FanBot assistant."""

import json
import os
from typing import Any

import yaml
from dotenv import load_dotenv

ASSISTANT_MODES = ("faq", "ollama")


class Configuration:
    """Manages configuration and environment variables for FanBot."""

    def __init__(self, config_path: str | None = None) -> None:
        """Initialize configuration from YAML and environment variables.

        Args:
            config_path: YAML file to load; defaults to config.yaml beside
                this module.
        """
        self.load_env()  # Load .env for the model override
        self.config_path = config_path or os.path.join(
            os.path.dirname(__file__), "config.yaml"
        )
        self._config = self._load_yaml_config()

    @staticmethod
    def load_env() -> None:
        """Load environment variables from .env file."""
        load_dotenv()

    def _load_yaml_config(self) -> dict[str, Any]:
        """Load configuration from YAML file."""
        with open(self.config_path, encoding="utf-8") as file:
            config = yaml.safe_load(file)
            if not isinstance(config, dict):
                raise ValueError(
                    f"Config file must be YAML dict, got {type(config)}"
                )
            return config

    @staticmethod
    def load_faq(file_path: str) -> dict[str, str]:
        """Load FAQ entries from a JSON file.

        Args:
            file_path: Path to the JSON object mapping keywords to answers.

        Returns:
            Dict of keyword to answer.

        Raises:
            FileNotFoundError: If the FAQ file doesn't exist.
            JSONDecodeError: If the FAQ file is invalid JSON.
            ValueError: If the file is not a JSON object of strings.
        """
        with open(file_path, encoding="utf-8") as f:
            entries = json.load(f)

        if not isinstance(entries, dict) or not all(
            isinstance(v, str) for v in entries.values()
        ):
            raise ValueError(f"FAQ file {file_path} must map keywords to strings")
        return entries

    def get_llm_config(self) -> dict[str, Any]:
        """Get the Ollama configuration from YAML.

        The ``OLLAMA_MODEL`` environment variable overrides the model.

        Returns:
            LLM configuration dictionary.

        Raises:
            ValueError: If required LLM parameters are missing.
        """
        llm_config = self._config.get("llm", {})

        required_keys = ["base_url", "model", "system_prompt"]
        for key in required_keys:
            if key not in llm_config:
                raise ValueError(
                    f"llm.{key} must be explicitly configured in config.yaml"
                )

        result = {**llm_config}
        model_override = os.getenv("OLLAMA_MODEL")
        if model_override:
            result["model"] = model_override
        return result

    def get_http_client_config(self) -> dict[str, Any]:
        """Get HTTP client configuration for the Ollama endpoint.

        Returns:
            HTTP client configuration dictionary with validated values.

        Raises:
            ValueError: If required HTTP client parameters are missing or invalid.
        """
        http_config = self._config.get("llm", {}).get("http_client", {})

        required_keys = [
            "connect_timeout", "read_timeout", "write_timeout", "pool_timeout"
        ]
        for key in required_keys:
            if key not in http_config:
                raise ValueError(
                    f"llm.http_client.{key} must be explicitly configured "
                    "in config.yaml"
                )
            if http_config[key] <= 0:
                raise ValueError(f"llm.http_client.{key} must be positive")

        return http_config

    def get_streaming_config(self) -> dict[str, Any]:
        """Get streaming configuration from YAML.

        Returns:
            Streaming configuration dictionary.

        Raises:
            ValueError: If response_timeout is missing or invalid.
        """
        streaming_config = self._config.get("streaming", {})

        if "response_timeout" not in streaming_config:
            raise ValueError(
                "streaming.response_timeout must be explicitly configured "
                "in config.yaml"
            )
        if streaming_config["response_timeout"] <= 0:
            raise ValueError("streaming.response_timeout must be positive")

        chunk_size = streaming_config.get("chunk_size")
        if chunk_size is not None and chunk_size < 1:
            raise ValueError("streaming.chunk_size must be at least 1")

        return streaming_config

    def get_assistant_config(self) -> dict[str, Any]:
        """Get assistant configuration from YAML.

        Returns:
            Assistant configuration dictionary; ``faq_path`` is absolute.

        Raises:
            ValueError: If required assistant parameters are missing or invalid.
        """
        assistant_config = self._config.get("assistant", {})

        required_keys = [
            "default_mode", "faq_path", "stopped_message", "error_message"
        ]
        for key in required_keys:
            if key not in assistant_config:
                raise ValueError(
                    f"assistant.{key} must be explicitly configured in config.yaml"
                )

        if assistant_config["default_mode"] not in ASSISTANT_MODES:
            raise ValueError(
                f"assistant.default_mode must be one of: {list(ASSISTANT_MODES)}"
            )

        # Create new dictionary without mutating the original
        result = {**assistant_config}
        faq_path = result["faq_path"]
        if not os.path.isabs(faq_path):
            result["faq_path"] = os.path.join(
                os.path.dirname(os.path.abspath(self.config_path)), faq_path
            )
        return result

    def get_logging_config(self) -> dict[str, Any]:
        """Get logging configuration from YAML.

        Returns:
            Logging configuration dictionary.
        """
        return self._config.get("logging", {})
