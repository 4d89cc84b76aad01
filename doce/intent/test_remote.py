import asyncio
import json

import httpx
import pytest

from doce.actions.registry import ActionDescriptor, ActionRegistry
from doce.errors import RemoteClassificationError
from doce.intent.local import LocalIntentClassifier
from doce.intent.prompt import build_instructions, build_prompt
from doce.intent.remote import RemoteIntentClassifier, extract_json_object, reply_text


def _registry() -> ActionRegistry:
    return ActionRegistry([
        ActionDescriptor(
            "listar_orcamentos", lambda params: [], ("filtro", "limite"),
            "Lista todos os orçamentos salvos", "trabalho", "facil",
        ),
    ])


def _gemini_body(text: str) -> dict:
    return {"candidates": [{"content": {"parts": [{"text": text}]}}]}


def _classifier(handler, **kwargs) -> RemoteIntentClassifier:
    return RemoteIntentClassifier(
        _registry(),
        api_key="test-key",
        transport=httpx.MockTransport(handler),
        **kwargs,
    )


def test_network_failure_matches_local_classification() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("offline", request=request)

    text = "Preciso de um orçamento para a empresa ABC"
    result = asyncio.run(_classifier(handler).classify(text, {}))

    assert result == LocalIntentClassifier().classify(text, {})


@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(200, json=_gemini_body("não sei {action: listar")),
        httpx.Response(200, json=_gemini_body('{"params": {}}')),
        httpx.Response(200, json={"candidates": []}),
        httpx.Response(200, text="<html>not json</html>"),
        httpx.Response(503, json={"error": "unavailable"}),
    ],
)
def test_malformed_replies_fall_back_to_local(response: httpx.Response) -> None:
    text = "saintyco bomba de vácuo"
    result = asyncio.run(_classifier(lambda request: response).classify(text, {"contato": "doce"}))

    assert result == LocalIntentClassifier().classify(text, {"contato": "doce"})


def test_unconfigured_classifier_never_calls_the_network() -> None:
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(500)

    classifier = RemoteIntentClassifier(_registry(), api_key="", transport=httpx.MockTransport(handler))
    result = asyncio.run(classifier.classify("listar orçamentos", {}))

    assert calls == []
    assert result.method == "local"


def test_second_identical_request_is_served_from_cache() -> None:
    calls = []
    reply = json.dumps({
        "action": "listar_orcamentos",
        "params": {"limite": 5},
        "missing_params": [],
        "confidence": 0.9,
        "message": "Listando seus orçamentos...",
    })

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(200, json=_gemini_body(f"Claro!\n```json\n{reply}\n```"))

    classifier = _classifier(handler)

    async def run():
        first = await classifier.classify("mostra meus 5 últimos orçamentos", {})
        second = await classifier.classify("mostra meus 5 últimos orçamentos", {})
        return first, second

    first, second = asyncio.run(run())

    assert len(calls) == 1
    assert first.method == "remote"
    assert first.from_cache is False
    assert second.from_cache is True
    assert second.action == first.action == "listar_orcamentos"
    assert second.params == {"limite": 5}


def test_mutating_returned_params_leaves_the_cache_intact() -> None:
    reply = json.dumps({"action": "listar_orcamentos", "params": {"limite": 5}, "confidence": 0.9})
    classifier = _classifier(lambda request: httpx.Response(200, json=_gemini_body(reply)))

    async def run():
        first = await classifier.classify("lista orçamentos", {})
        first.params["limite"] = 99
        second = await classifier.classify("lista orçamentos", {})
        second.params.clear()
        return await classifier.classify("lista orçamentos", {})

    third = asyncio.run(run())

    assert third.from_cache is True
    assert third.params == {"limite": 5}


def test_request_carries_key_prompt_and_generation_config() -> None:
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = request.url
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json=_gemini_body('{"action": "conversa_livre", "params": {}, "confidence": 0.4}'))

    result = asyncio.run(_classifier(handler).classify("oi", {"contato": "doce"}))

    assert seen["url"].path.endswith("/gemini-1.5-flash:generateContent")
    assert seen["url"].params["key"] == "test-key"
    assert seen["body"]["generationConfig"] == {"temperature": 0.1, "maxOutputTokens": 500}
    prompt = seen["body"]["contents"][0]["parts"][0]["text"]
    assert "- listar_orcamentos: Lista todos os orçamentos salvos (params: filtro, limite)" in prompt
    assert 'Mensagem do usuário: "oi"' in prompt
    assert result.is_free_conversation


def test_extract_json_object_takes_outermost_span() -> None:
    payload = extract_json_object('Aqui está: {"action": "x", "params": {"a": 1}} fim')
    assert payload == {"action": "x", "params": {"a": 1}}

    with pytest.raises(RemoteClassificationError):
        extract_json_object("sem json aqui")
    with pytest.raises(RemoteClassificationError):
        reply_text({"promptFeedback": {}})


def test_prompt_appends_utterance_and_context() -> None:
    instructions = build_instructions(_registry())
    prompt = build_prompt(instructions, "listar", {"contato": "doce"})

    assert prompt.startswith(instructions)
    assert '"contato": "doce"' in prompt
