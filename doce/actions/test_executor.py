import asyncio

from doce.actions.executor import ActionExecutor
from doce.actions.registry import ActionDescriptor, ActionRegistry


def _explode(params: dict) -> None:
    raise ValueError("Planilha não encontrada: abc")


async def _echo(params: dict) -> dict:
    return {"recebido": params}


def _executor() -> ActionExecutor:
    return ActionExecutor(ActionRegistry([
        ActionDescriptor("explodir", _explode),
        ActionDescriptor("eco", _echo),
        ActionDescriptor("soma", lambda params: params["a"] + params["b"]),
    ]))


def test_unknown_action_is_a_structured_failure() -> None:
    envelope = asyncio.run(_executor().execute("nao_existe", {}))

    assert envelope.success is False
    assert envelope.error == 'Ação "nao_existe" não encontrada'
    assert envelope.available_actions == ["explodir", "eco", "soma"]
    assert envelope.to_dict()["available_actions"] == ["explodir", "eco", "soma"]


def test_handler_error_message_is_preserved_verbatim() -> None:
    envelope = asyncio.run(_executor().execute("explodir", {}))

    assert envelope.success is False
    assert envelope.action == "explodir"
    assert envelope.error == "Planilha não encontrada: abc"
    assert envelope.result is None


def test_async_and_sync_handlers_both_succeed() -> None:
    executor = _executor()
    params = {"a": 2, "b": 3}

    echoed = asyncio.run(executor.execute("eco", params))
    summed = asyncio.run(executor.execute("soma", params))

    assert echoed.success and echoed.result == {"recebido": params}
    assert echoed.result["recebido"] is params
    assert summed.success and summed.result == 5


def test_missing_params_reach_the_handler_as_an_empty_mapping() -> None:
    envelope = asyncio.run(_executor().execute("eco"))

    assert envelope.result == {"recebido": {}}


def test_key_error_inside_handler_becomes_failure() -> None:
    envelope = asyncio.run(_executor().execute("soma", {"a": 1}))

    assert envelope.success is False
    assert envelope.error == "'b'"
