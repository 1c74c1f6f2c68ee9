import os
import unittest
from unittest.mock import Mock, patch

from ai_client.config import EnvConfig
from ai_client.errors import ConfigError
from ai_client.infra import runtime


class EnvConfigTests(unittest.TestCase):
    def test_reads_all_settings(self) -> None:
        config = EnvConfig.from_env(
            {
                "OPENAI_API_BASE_URL": "http://localhost:11434/v1",
                "OPENAI_API_KEY": "sk-local",
                "ANTHROPIC_API_KEY": "sk-ant",
                "MODEL": "llama3",
                "MAX_TOKENS": "2048",
                "TEMPERATURE": "0",
                "AI_PROVIDER": "anthropic",
            }
        )

        self.assertEqual(config.openai_base_url, "http://localhost:11434/v1")
        self.assertEqual(config.openai_api_key, "sk-local")
        self.assertEqual(config.anthropic_api_key, "sk-ant")
        self.assertEqual(config.model, "llama3")
        self.assertEqual(config.max_tokens, 2048)
        self.assertEqual(config.temperature, 0.0)
        self.assertEqual(config.provider, "anthropic")

    def test_blank_values_are_unset(self) -> None:
        config = EnvConfig.from_env({"OPENAI_API_BASE_URL": "  ", "MODEL": ""})

        self.assertIsNone(config.openai_base_url)
        self.assertIsNone(config.model)
        self.assertEqual(config.anthropic_beta, "output-128k-2025-02-19")

    def test_empty_anthropic_beta_disables_header(self) -> None:
        self.assertIsNone(EnvConfig.from_env({"ANTHROPIC_BETA": ""}).anthropic_beta)

    def test_invalid_numbers_raise_config_error(self) -> None:
        with self.assertRaises(ConfigError) as ctx:
            EnvConfig.from_env({"MAX_TOKENS": "lots"})
        self.assertEqual(ctx.exception.setting, "MAX_TOKENS")

        with self.assertRaises(ConfigError):
            EnvConfig.from_env({"TEMPERATURE": "warm"})


class RuntimeCredentialTests(unittest.TestCase):
    def test_with_ssm_credentials_fills_missing_keys(self) -> None:
        config = EnvConfig(
            openai_api_key="sk-env",
            openai_api_key_parameter="/ai-client/openai-api-key",
            anthropic_api_key_parameter="/ai-client/anthropic-api-key",
        )

        with patch.object(runtime, "get_ssm_parameter", return_value="sk-ssm") as get_parameter:
            resolved = runtime.with_ssm_credentials(config)

        self.assertEqual(resolved.openai_api_key, "sk-env")
        self.assertEqual(resolved.anthropic_api_key, "sk-ssm")
        get_parameter.assert_called_once_with("ap-northeast-1", "/ai-client/anthropic-api-key")

    def test_with_ssm_credentials_without_parameters_is_a_no_op(self) -> None:
        config = EnvConfig(anthropic_api_key="sk-ant")

        self.assertIs(runtime.with_ssm_credentials(config), config)

    def test_secure_parameter_without_value_is_an_error(self) -> None:
        ssm_client = Mock()
        ssm_client.get_parameter.return_value = {"Parameter": {"Value": ""}}

        with self.assertRaisesRegex(RuntimeError, "has no value"):
            runtime._get_secure_parameter(ssm_client, "/ai-client/openai-api-key")

    def test_langsmith_tracing_disabled_without_key(self) -> None:
        with patch.dict(os.environ, {"LANGSMITH_TRACING": "true"}, clear=True):
            runtime.ensure_langsmith_configured(EnvConfig())

            self.assertNotIn("LANGSMITH_TRACING", os.environ)

    def test_langsmith_tracing_enabled_with_key(self) -> None:
        with patch.dict(os.environ, {"LANGSMITH_API_KEY": "ls-key"}, clear=True):
            runtime.ensure_langsmith_configured(EnvConfig())

            self.assertEqual(os.environ["LANGSMITH_TRACING"], "true")
            self.assertEqual(os.environ["LANGSMITH_PROJECT"], "ai-unified-client")


if __name__ == "__main__":
    unittest.main()
