from __future__ import annotations

from types import SimpleNamespace
from unittest.mock import MagicMock, patch

import httpx
import openai
import pytest

from ai_compiler.completion import CompletionError, OpenAICompleter, make_client, retry
from ai_compiler.config import Settings


def chat_response(text):
    return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=text))])


def api_error(cls, status, message):
    request = httpx.Request("POST", "https://api.openai.com/v1/responses")
    return cls(message, response=httpx.Response(status, request=request), body=None)


def test_uses_responses_output_text() -> None:
    client = MagicMock()
    client.responses.create.return_value = SimpleNamespace(output_text="2\n")
    completer = OpenAICompleter(client, "gpt-4o-mini")

    assert completer("run this") == "2\n"
    client.responses.create.assert_called_once_with(model="gpt-4o-mini", input="run this")
    client.chat.completions.create.assert_not_called()


def test_joins_message_chunks_without_output_text() -> None:
    client = MagicMock()
    content = [SimpleNamespace(type="output_text", text="Enter "), SimpleNamespace(type="output_text", text="x: ")]
    client.responses.create.return_value = SimpleNamespace(
        output_text=None, output=[SimpleNamespace(type="message", content=content)]
    )
    assert OpenAICompleter(client, "m")("p") == "Enter x: "


@pytest.mark.parametrize(
    "error",
    [
        api_error(openai.NotFoundError, 404, "responses unsupported"),
        api_error(openai.BadRequestError, 400, "model not supported by responses"),
    ],
)
def test_falls_back_to_chat_completions_when_unsupported(error) -> None:
    client = MagicMock()
    client.responses.create.side_effect = error
    client.chat.completions.create.return_value = chat_response("5")

    assert OpenAICompleter(client, "m")("prompt") == "5"
    _, kwargs = client.chat.completions.create.call_args
    assert kwargs["messages"] == [{"role": "user", "content": "prompt"}]


@pytest.mark.parametrize(
    "error",
    [
        api_error(openai.RateLimitError, 429, "quota exceeded"),
        api_error(openai.AuthenticationError, 401, "quota exceeded: bad key"),
        openai.APIConnectionError(
            message="quota exceeded upstream", request=httpx.Request("POST", "https://api.openai.com/v1/responses")
        ),
    ],
)
def test_failed_call_makes_exactly_one_request(error) -> None:
    client = MagicMock()
    client.responses.create.side_effect = error

    with pytest.raises(CompletionError, match="quota exceeded"):
        OpenAICompleter(client, "m")("prompt")
    assert client.responses.create.call_count == 1
    client.chat.completions.create.assert_not_called()


def test_empty_chat_content_is_an_error() -> None:
    client = MagicMock()
    client.responses.create.side_effect = api_error(openai.NotFoundError, 404, "nope")
    client.chat.completions.create.return_value = chat_response(None)

    with pytest.raises(CompletionError, match="no content"):
        OpenAICompleter(client, "m")("prompt")


class TestRetry:
    def test_no_retry_by_default(self) -> None:
        fn = MagicMock(side_effect=RuntimeError("boom"))
        with pytest.raises(CompletionError, match="^boom$"):
            retry(fn)
        assert fn.call_count == 1

    @patch("ai_compiler.completion.time.sleep")
    def test_retries_then_succeeds(self, sleep) -> None:
        fn = MagicMock(side_effect=[RuntimeError("flaky"), "ok"])
        assert retry(fn, retries=2, base_delay=0.5) == "ok"
        sleep.assert_called_once_with(0.5)

    @patch("ai_compiler.completion.time.sleep")
    def test_gives_up_after_retries(self, sleep) -> None:
        fn = MagicMock(side_effect=RuntimeError("still down"))
        with pytest.raises(CompletionError, match="All retries failed: still down"):
            retry(fn, retries=2, base_delay=1.0)
        assert fn.call_count == 3
        assert [c.args[0] for c in sleep.call_args_list] == [1.0, 2.0]


def test_make_client_requires_key() -> None:
    with pytest.raises(CompletionError):
        make_client(Settings(api_key=None))


@patch("ai_compiler.completion.OpenAI")
def test_make_client_passes_timeout(openai_cls) -> None:
    make_client(Settings(api_key="sk-test", timeout=30.0))
    openai_cls.assert_called_once_with(api_key="sk-test", timeout=30.0, max_retries=0)


def test_client_does_not_retry_on_its_own() -> None:
    client = make_client(Settings(api_key="sk-test"))
    assert client.max_retries == 0
