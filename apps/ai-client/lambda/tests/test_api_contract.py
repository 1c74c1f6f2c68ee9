import os
import unittest
from contextlib import ExitStack
from unittest.mock import Mock, patch

from fastapi.testclient import TestClient

import app as app_module
from ai_client.config import EnvConfig
from ai_client.errors import ClassifiedError, ErrorKind
from ai_client.schemas import InvocationOptions


class ApiContractTests(unittest.TestCase):
    def setUp(self) -> None:
        app_module.get_invoker.cache_clear()

    def _post_invoke(self, invoker: Mock, payload: dict) -> tuple[object, Mock]:
        with ExitStack() as stack:
            stack.enter_context(
                patch.object(app_module, "ensure_langsmith_configured", return_value=None)
            )
            flush_mock = stack.enter_context(
                patch.object(app_module, "flush_langsmith_traces", return_value=None)
            )
            stack.enter_context(patch.object(app_module, "get_invoker", return_value=invoker))
            with TestClient(app_module.app) as client:
                response = client.post("/api/invoke", json=payload)
        return response, flush_mock

    def test_health_endpoint(self) -> None:
        with TestClient(app_module.app) as client:
            response = client.get("/api/health")

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), {"status": "ok"})

    def test_invoke_endpoint_success_response_shape(self) -> None:
        invoker = Mock()
        invoker.invoke.return_value = "hello"

        response, flush_mock = self._post_invoke(
            invoker,
            {
                "prompt": {"system": "S", "turns": [{"role": "user", "content": "hi"}]},
                "provider": "anthropic",
                "maxTokens": 256,
                "temperature": 0.5,
            },
        )

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), {"text": "hello"})
        self.assertEqual(flush_mock.call_count, 1)

        prompt, options = invoker.invoke.call_args.args
        self.assertEqual(prompt, {"system": "S", "turns": [{"role": "user", "content": "hi"}]})
        self.assertIsInstance(options, InvocationOptions)
        self.assertEqual(
            (options.provider, options.model, options.max_tokens, options.temperature),
            ("anthropic", None, 256, 0.5),
        )

    def test_invoke_endpoint_invalid_temperature_returns_422(self) -> None:
        with TestClient(app_module.app) as client:
            response = client.post("/api/invoke", json={"prompt": "hi", "temperature": 9})

        self.assertEqual(response.status_code, 422)

    def test_invoke_endpoint_maps_error_kinds_to_status_codes(self) -> None:
        cases = [
            (ErrorKind.RATE_LIMITED, 429),
            (ErrorKind.CONFIG_MISSING, 500),
            (ErrorKind.UNSUPPORTED_PROVIDER, 500),
            (ErrorKind.UNAUTHORIZED, 502),
            (ErrorKind.NETWORK_UNREACHABLE, 502),
            (ErrorKind.UNKNOWN, 502),
        ]
        for kind, status_code in cases:
            with self.subTest(kind=kind):
                invoker = Mock()
                invoker.invoke.side_effect = ClassifiedError(
                    kind, f"{kind.value} happened", cause=RuntimeError("raw")
                )

                response, flush_mock = self._post_invoke(invoker, {"prompt": "hi"})

                self.assertEqual(response.status_code, status_code)
                self.assertEqual(
                    response.json()["detail"],
                    {"kind": kind.value, "message": f"{kind.value} happened"},
                )
                self.assertEqual(flush_mock.call_count, 1)

    def test_invalid_numeric_setting_returns_classified_config_error(self) -> None:
        environ = {"OPENAI_API_BASE_URL": "http://localhost:11434/v1", "MAX_TOKENS": "lots"}
        with ExitStack() as stack:
            stack.enter_context(patch.dict(os.environ, environ, clear=True))
            stack.enter_context(patch("ai_client.config.load_dotenv", return_value=False))
            flush_mock = stack.enter_context(
                patch.object(app_module, "flush_langsmith_traces", return_value=None)
            )
            with TestClient(app_module.app) as client:
                response = client.post("/api/invoke", json={"prompt": "hi"})

        self.assertEqual(response.status_code, 500)
        detail = response.json()["detail"]
        self.assertEqual(detail["kind"], "config_missing")
        self.assertIn("MAX_TOKENS", detail["message"])
        self.assertEqual(flush_mock.call_count, 1)

    def test_runtime_config_configures_tracing_once(self) -> None:
        config = EnvConfig(openai_base_url="http://localhost:11434/v1")
        with ExitStack() as stack:
            stack.enter_context(patch.object(app_module, "load_env_config", return_value=config))
            stack.enter_context(
                patch.object(app_module, "with_ssm_credentials", side_effect=lambda c: c)
            )
            ensure_mock = stack.enter_context(
                patch.object(app_module, "ensure_langsmith_configured", return_value=None)
            )

            resolved = app_module.load_runtime_config()

        self.assertIs(resolved, config)
        ensure_mock.assert_called_once_with(config)


if __name__ == "__main__":
    unittest.main()
