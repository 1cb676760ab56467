"""
Brain Tests - Remote Model, Local Fallback and Their Composition

The OpenAI client is always mocked; no test touches the network.
"""

from unittest.mock import MagicMock, Mock, patch

import httpx
import openai

from vaani.config import Settings
from vaani.core import build_prompt
from vaani.llm import (
    FallbackBrain,
    GENERIC_REPLY,
    IDENTITY_REPLY,
    LocalHeuristicBrain,
    OFFLINE_WEATHER_REPLY,
    RemoteBrain,
    RemoteBrainError,
    SHORT_PROMPT_REPLY,
    SYSTEM_PERSONA,
    build_brain,
    extract_user_text,
)


def fake_completion(text):
    response = MagicMock()
    response.choices = [MagicMock()]
    response.choices[0].message.content = text
    return response


def test_remote_brain_request_shape():
    client = MagicMock()
    client.chat.completions.create.return_value = fake_completion("  Namaste!  ")
    brain = RemoteBrain(api_key="k", base_url="https://example.invalid/v1", model="m", client=client)

    assert brain.complete("User: hi\n\nAnswer:", max_output_tokens=99) == "Namaste!"

    kwargs = client.chat.completions.create.call_args.kwargs
    assert kwargs["model"] == "m"
    assert kwargs["max_tokens"] == 99
    assert kwargs["temperature"] == 0.2
    assert kwargs["messages"] == [
        {"role": "system", "content": SYSTEM_PERSONA},
        {"role": "user", "content": "User: hi\n\nAnswer:"},
    ]


def test_remote_brain_without_key_fails_fast():
    with patch("vaani.llm.remote_llm.OpenAI") as client_cls:
        brain = RemoteBrain(api_key=None, base_url="https://example.invalid/v1", model="m")
        try:
            brain.complete("hello")
        except RemoteBrainError:
            pass
        else:
            raise AssertionError("Expected RemoteBrainError")
        assert not client_cls.called


def test_remote_brain_wraps_provider_errors():
    request = httpx.Request("POST", "https://example.invalid/v1/chat/completions")
    client = MagicMock()
    client.chat.completions.create.side_effect = openai.APIConnectionError(request=request)
    brain = RemoteBrain(api_key="k", base_url="https://example.invalid/v1", model="m", client=client)

    try:
        brain.complete("hello")
    except RemoteBrainError as e:
        assert isinstance(e.__cause__, openai.APIConnectionError)
    else:
        raise AssertionError("Expected RemoteBrainError")


def test_remote_brain_malformed_response():
    client = MagicMock()
    response = MagicMock()
    response.choices = []
    client.chat.completions.create.return_value = response
    brain = RemoteBrain(api_key="k", base_url="https://example.invalid/v1", model="m", client=client)

    try:
        brain.complete("hello")
    except RemoteBrainError:
        pass
    else:
        raise AssertionError("Expected RemoteBrainError")


def test_extract_user_text():
    prompt = build_prompt("aaj mausam kaisa hai?")
    assert extract_user_text(prompt) == "aaj mausam kaisa hai?"
    assert extract_user_text("plain weather question") == "plain weather question"
    assert extract_user_text("") == ""


def test_local_brain_replies():
    print("=" * 70)
    print("TEST: Local Heuristic Brain")
    print("=" * 70)

    brain = LocalHeuristicBrain()
    cases = [
        ("What is the weather today?", OFFLINE_WEATHER_REPLY),
        (build_prompt("aaj mausam kaisa hai"), OFFLINE_WEATHER_REPLY),
        (build_prompt("tum kaun ho"), IDENTITY_REPLY),
        (build_prompt("Who are you?"), IDENTITY_REPLY),
        (build_prompt("ok"), SHORT_PROMPT_REPLY),
        (build_prompt("aaj kaunsa din hai"), GENERIC_REPLY),
    ]
    for prompt, expected in cases:
        assert brain.complete(prompt) == expected
        print(f"✓ {extract_user_text(prompt)!r} -> {expected[:30]}...")

    print("\n✅ Local brain tests PASSED")


def test_persona_preamble_does_not_trigger_identity():
    """The prompt preamble names Vaani; only the user's words are inspected"""
    assert LocalHeuristicBrain().complete(build_prompt("chai kaise banaye")) == GENERIC_REPLY


def test_fallback_uses_primary_when_it_works():
    primary = Mock()
    primary.complete.return_value = "remote answer"
    fallback = Mock()
    brain = FallbackBrain(primary, fallback)

    assert brain.complete("p", max_output_tokens=10) == "remote answer"
    primary.complete.assert_called_once_with("p", max_output_tokens=10)
    assert not fallback.complete.called


def test_fallback_on_remote_error():
    primary = Mock()
    primary.complete.side_effect = RemoteBrainError("timeout")
    brain = FallbackBrain(primary, LocalHeuristicBrain())
    assert brain.complete("how is the weather") == OFFLINE_WEATHER_REPLY


def test_no_credential_never_calls_network():
    """No key + weather prompt -> offline weather reply, no client built"""
    settings = Settings(groq_api_key=None)
    with patch("vaani.llm.remote_llm.OpenAI") as client_cls:
        brain = build_brain(settings)
        assert brain.primary is None
        assert brain.complete("Kal ka weather kaisa rahega?") == OFFLINE_WEATHER_REPLY
        assert not client_cls.called


def test_build_brain_with_credential():
    settings = Settings(groq_api_key="gsk_test", groq_model="llama-test", brain_timeout=5.0)
    with patch("vaani.llm.remote_llm.OpenAI") as client_cls:
        brain = build_brain(settings)

    assert isinstance(brain.primary, RemoteBrain)
    assert isinstance(brain.fallback, LocalHeuristicBrain)
    client_cls.assert_called_once_with(
        api_key="gsk_test",
        base_url=settings.groq_base_url,
        timeout=5.0,
        max_retries=0,
    )
