"""Instruction block sent to the remote classifier."""

from __future__ import annotations

import json
from typing import Any

from doce.actions.registry import ActionRegistry

_INSTRUCTIONS = """Você é um interpretador de intenções para o sistema Doce.AI.
Sua tarefa é analisar a mensagem do usuário e identificar:
1. A AÇÃO que ele quer executar
2. Os PARÂMETROS necessários

AÇÕES DISPONÍVEIS:
{actions}

REGRAS:
- Responda APENAS com um único objeto JSON válido
- Se não conseguir identificar a ação, use "action": "conversa_livre"
- Extraia todos os parâmetros mencionados pelo usuário
- Se faltar informação, inclua em "missing_params"

FORMATO DE RESPOSTA:
{{
    "action": "nome_da_acao",
    "params": {{
        "param1": "valor1",
        "param2": "valor2"
    }},
    "missing_params": ["param_faltando"],
    "confidence": 0.95,
    "message": "Mensagem amigável para o usuário"
}}

EXEMPLOS:

Usuário: "Preciso fazer um orçamento para a empresa ABC"
{{
    "action": "gerar_orcamento",
    "params": {{ "cliente": "empresa ABC" }},
    "missing_params": ["itens"],
    "confidence": 0.9,
    "message": "Vou preparar o orçamento para a empresa ABC. Quais itens você quer incluir?"
}}

Usuário: "Busca informações sobre tablet counting machine no saintyco"
{{
    "action": "buscar_produto_saintyco",
    "params": {{ "termo": "tablet counting machine" }},
    "missing_params": [],
    "confidence": 0.95,
    "message": "Buscando 'tablet counting machine' no Saintyco..."
}}

Usuário: "Tem algum email do João sobre o projeto?"
{{
    "action": "consultar_emails",
    "params": {{ "remetente": "João", "termo": "projeto" }},
    "missing_params": [],
    "confidence": 0.85,
    "message": "Vou verificar os emails do João sobre o projeto."
}}"""


def render_actions(registry: ActionRegistry) -> str:
    """One ``- name: description (params: a, b)`` line per registered action."""
    return "\n".join(
        f"- {d.name}: {d.description} (params: {', '.join(d.declared_params)})"
        for d in registry
    )


def build_instructions(registry: ActionRegistry) -> str:
    return _INSTRUCTIONS.format(actions=render_actions(registry))


def build_prompt(instructions: str, text: str, context: dict[str, Any]) -> str:
    """Instruction block + the utterance + serialised context."""
    serialized = json.dumps(context, ensure_ascii=False, default=str)
    return f'{instructions}\n\nMensagem do usuário: "{text}"\n\nContexto: {serialized}'
