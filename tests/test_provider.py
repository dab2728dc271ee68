import sys
import os
import unittest

# Add the source directory to sys.path
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "src")))

from fakes import FakeChunkStream, FakeTransport, make_chunk, make_completion
from pydantic import ValidationError

from chatbridge import (
    EventType,
    InfineonOptions,
    Message,
    MessageRole,
    ModelProvider,
    OpenAIOptions,
    OpenAITransport,
    Provider,
    SUPPORTED_MODELS,
    TextContent,
    UnsupportedProviderError,
    get_model,
    new_provider,
)


class TestProviderFactory(unittest.TestCase):
    """
    Unit tests for building providers from an identifier and options.
    """

    def test_unknown_provider(self):
        """Verify an unknown identifier raises an error naming it."""
        with self.assertRaises(UnsupportedProviderError) as ctx:
            new_provider("carrier-pigeon", model=get_model("gpt-4o"))
        self.assertIn("carrier-pigeon", str(ctx.exception))
        self.assertIsInstance(ctx.exception, ValueError)

    def test_model_is_required(self):
        with self.assertRaises(ValueError):
            new_provider("openai", api_key="fake")

    def test_unknown_option_rejected(self):
        with self.assertRaises(ValidationError):
            new_provider("openai", api_key="fake", model=get_model("gpt-4o"), colour="blue")

    def test_openai_provider(self):
        model = get_model("gpt-4o")
        provider = new_provider(
            ModelProvider.OPENAI,
            api_key="fake",
            model=model,
            system_message="sys",
            openai_options=OpenAIOptions(base_url="http://localhost:8080/v1"),
        )

        self.assertIsInstance(provider, Provider)
        self.assertIs(provider.model, model)
        client = provider._client
        self.assertIsInstance(client.transport, OpenAITransport)
        self.assertEqual(str(client.transport.client.base_url), "http://localhost:8080/v1/")
        self.assertEqual(client.transport.client.max_retries, 0)
        self.assertEqual(client.system_message, "sys")

    def test_infineon_provider_defaults(self):
        provider = new_provider(
            "infineon",
            api_key="fake",
            model=get_model("infineon-gpt4o"),
            infineon_options={"extra_headers": {"X-Team": "core"}},
        )

        transport = provider._client.transport
        self.assertEqual(str(transport.client.base_url), "https://api.infineon.ai/v1/")
        self.assertEqual(transport.client.default_headers["X-Team"], "core")
        self.assertEqual(provider.model.provider, ModelProvider.INFINEON)

    def test_max_tokens_falls_back_to_model_default(self):
        model = get_model("infineon-gpt4o")
        provider = new_provider("infineon", model=model, transport=FakeTransport())
        self.assertEqual(provider._client.max_tokens, model.default_max_tokens)

        provider = new_provider("infineon", model=model, max_tokens=100, transport=FakeTransport())
        self.assertEqual(provider._client.max_tokens, 100)

    def test_infineon_options_defaults(self):
        options = InfineonOptions()
        self.assertEqual(options.base_url, "https://api.infineon.ai/v1")
        self.assertFalse(options.disable_cache)


class TestModelRegistry(unittest.TestCase):
    def test_registry_contains_both_providers(self):
        providers = {model.provider for model in SUPPORTED_MODELS.values()}
        self.assertEqual(providers, {ModelProvider.OPENAI, ModelProvider.INFINEON})

    def test_registry_is_read_only(self):
        with self.assertRaises(TypeError):
            SUPPORTED_MODELS["new"] = get_model("gpt-4o")

    def test_models_are_immutable(self):
        with self.assertRaises(ValidationError):
            get_model("gpt-4o").api_model = "other"

    def test_unknown_model(self):
        with self.assertRaises(ValueError):
            get_model("gpt-0")


class TestProvider(unittest.IsolatedAsyncioTestCase):
    """
    Unit tests for the uniform provider capability.
    """

    async def test_send_filters_empty_messages(self):
        transport = FakeTransport(completions=[make_completion(content="hello")])
        provider = new_provider("openai", model=get_model("gpt-4o"), transport=transport)

        response = await provider.send_messages(
            [
                Message(role=MessageRole.USER, parts=[TextContent(text="hi")]),
                Message(role=MessageRole.ASSISTANT),
            ]
        )

        self.assertEqual(response.content, "hello")
        roles = [m["role"] for m in transport.requests[0]["messages"]]
        self.assertEqual(roles, ["system", "user"])

    async def test_stream_response(self):
        stream = FakeChunkStream([make_chunk(content="hey", finish_reason="stop")])
        transport = FakeTransport(streams=[stream])
        provider = new_provider("infineon", model=get_model("infineon-gpt4o"), transport=transport)

        async with provider.stream_response(
            [Message(role=MessageRole.USER, parts=[TextContent(text="hi")])]
        ) as events:
            collected = await events.collect()

        self.assertEqual(collected[0].type, EventType.CONTENT_START)
        self.assertEqual(collected[-1].type, EventType.COMPLETE)
        self.assertEqual(collected[-1].response.content, "hey")
        self.assertEqual(transport.stream_requests[0]["model"], "gpt-4o")


if __name__ == "__main__":
    unittest.main()
