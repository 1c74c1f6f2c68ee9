import unittest

from ai_client.config import EnvConfig
from ai_client.constants import ProviderId
from ai_client.provider_selector import select_provider


class ProviderSelectorTests(unittest.TestCase):
    def test_explicit_override_wins_over_everything(self) -> None:
        config = EnvConfig(
            openai_base_url="http://localhost:11434/v1",
            anthropic_api_key="sk-ant-test",
            provider="openai_compatible",
        )

        self.assertEqual(select_provider("anthropic", config), ProviderId.ANTHROPIC)
        self.assertEqual(select_provider(ProviderId.ANTHROPIC, config), ProviderId.ANTHROPIC)

    def test_pinned_provider_beats_detected_configuration(self) -> None:
        config = EnvConfig(openai_base_url="http://localhost:11434/v1", provider="anthropic")

        self.assertEqual(select_provider(None, config), ProviderId.ANTHROPIC)

    def test_base_url_takes_priority_over_anthropic_key(self) -> None:
        config = EnvConfig(
            openai_base_url="http://localhost:11434/v1", anthropic_api_key="sk-ant-test"
        )

        self.assertEqual(select_provider(None, config), ProviderId.OPENAI_COMPATIBLE)

    def test_anthropic_key_alone_selects_anthropic(self) -> None:
        config = EnvConfig(anthropic_api_key="sk-ant-test")

        self.assertEqual(select_provider(None, config), ProviderId.ANTHROPIC)

    def test_missing_configuration_warns_and_defaults_to_generic_chat(self) -> None:
        with self.assertLogs("ai_client.provider_selector", level="WARNING") as logs:
            provider = select_provider(None, EnvConfig())

        self.assertEqual(provider, ProviderId.OPENAI_COMPATIBLE)
        self.assertIn("No AI provider configuration found", logs.output[0])

    def test_unknown_provider_name_is_passed_through(self) -> None:
        self.assertEqual(select_provider("gemini", EnvConfig()), "gemini")

    def test_provider_names_are_normalized(self) -> None:
        self.assertEqual(select_provider(" Anthropic ", EnvConfig()), ProviderId.ANTHROPIC)

    def test_explicit_and_pinned_choices_are_logged(self) -> None:
        with self.assertLogs("ai_client.provider_selector", level="INFO") as logs:
            select_provider("anthropic", EnvConfig())
            select_provider(None, EnvConfig(provider="openai_compatible"))

        self.assertEqual(len(logs.records), 2)
        self.assertEqual(logs.records[0].levelname, "INFO")
        self.assertEqual(logs.records[0].provider, "anthropic")
        self.assertEqual(logs.records[1].provider, "openai_compatible")


if __name__ == "__main__":
    unittest.main()
