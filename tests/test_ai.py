from types import SimpleNamespace
from unittest.mock import MagicMock

from launcher.ai import AIService, TokenMetadata, has_chinese
from launcher.constants import GROQ_MODEL


def completion(content):
    return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=content))])


def service(result=None, error=None):
    client = MagicMock()
    if error is not None:
        client.chat.completions.create.side_effect = error
    else:
        client.chat.completions.create.return_value = result
    return AIService("key", temperature=0.5, client=client), client


def test_generates_upper_case_english_metadata():
    ai, client = service(
        completion('{"name": "Moon Dog", "symbol": "mdog", "keyword": "moon"}')
    )

    metadata = ai.generate_token_metadata("dog to the moon 🚀", "elonmusk")

    assert metadata == TokenMetadata("MOON DOG", "MDOG", "moon")
    kwargs = client.chat.completions.create.call_args.kwargs
    assert kwargs["model"] == GROQ_MODEL
    assert kwargs["temperature"] == 0.5
    assert kwargs["response_format"] == {"type": "json_object"}
    assert kwargs["messages"][1]["content"] == "Tweet by elonmusk: dog to the moon 🚀"
    assert "uppercase letters" in kwargs["messages"][0]["content"]


def test_chinese_tweet_keeps_characters():
    ai, client = service(
        completion('{"name": "币安人生", "symbol": "人生", "keyword": "人生"}')
    )

    metadata = ai.generate_token_metadata("币安人生", "cz_binance")

    assert metadata == TokenMetadata("币安人生", "人生", "人生")
    system = client.chat.completions.create.call_args.kwargs["messages"][0]["content"]
    assert "Chinese characters" in system


def test_has_chinese():
    assert has_chinese("hello 世界")
    assert not has_chinese("hello world")


def test_api_error_returns_none():
    ai, _ = service(error=RuntimeError("rate limited"))
    assert ai.generate_token_metadata("gm", "cz") is None


def test_empty_answers_return_none():
    ai, _ = service(SimpleNamespace(choices=[]))
    assert ai.generate_token_metadata("gm", "cz") is None

    ai, _ = service(completion(None))
    assert ai.generate_token_metadata("gm", "cz") is None


def test_invalid_json_returns_none():
    ai, _ = service(completion("MOON"))
    assert ai.generate_token_metadata("gm", "cz") is None


def test_missing_field_returns_none():
    ai, _ = service(completion('{"name": "Moon", "symbol": "MOON"}'))
    assert ai.generate_token_metadata("gm", "cz") is None
