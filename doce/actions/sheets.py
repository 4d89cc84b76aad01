"""Spreadsheet actions over the Google Sheets API v4 (service account).

The googleapiclient service is synchronous; every call runs in a worker
thread so handlers stay non-blocking.
"""

from __future__ import annotations

import asyncio
import os
import re
from collections.abc import Callable
from typing import Any

from google.oauth2 import service_account
from googleapiclient.discovery import build
from loguru import logger

from doce.errors import InvalidSpreadsheetLinkError, SheetsNotConfiguredError
from doce.utils.helpers import today_br

SCOPES = ["https://www.googleapis.com/auth/spreadsheets"]
_SPREADSHEET_ID_RE = re.compile(r"/spreadsheets/d/([\w-]+)")


def spreadsheet_url(spreadsheet_id: str) -> str:
    return f"https://docs.google.com/spreadsheets/d/{spreadsheet_id}"


def parse_spreadsheet_id(link: str) -> str:
    """ID from ``https://docs.google.com/spreadsheets/d/<ID>[/edit...]``."""
    match = _SPREADSHEET_ID_RE.search(link or "")
    if not match:
        raise InvalidSpreadsheetLinkError("Link de planilha inválido")
    return match.group(1)


def _service_account_factory(credentials_path: str) -> Callable[[], Any]:
    def factory() -> Any:
        if not credentials_path:
            raise SheetsNotConfiguredError("Preciso de permissão para acessar o Google Sheets.")
        if not os.path.exists(credentials_path):
            raise SheetsNotConfiguredError(f"Arquivo de credenciais não encontrado: {credentials_path}")
        credentials = service_account.Credentials.from_service_account_file(credentials_path, scopes=SCOPES)
        return build("sheets", "v4", credentials=credentials, cache_discovery=False)

    return factory


class SheetActions:
    def __init__(self, credentials_path: str = "", service_factory: Callable[[], Any] | None = None):
        self._factory = service_factory or _service_account_factory(credentials_path)
        self._service: Any = None

    def _sheets(self) -> Any:
        if self._service is None:
            self._service = self._factory()
            logger.info("Google Sheets service connected")
        return self._service.spreadsheets()

    async def create(self, params: dict[str, Any]) -> dict[str, Any]:
        name = params.get("nome") or f"Doce AI - {today_br()}"
        tabs = params.get("abas") or ["Dados"]
        data = params.get("dados")

        def _create() -> str:
            body = {
                "properties": {"title": name},
                "sheets": [{"properties": {"title": tab}} for tab in tabs],
            }
            created = self._sheets().create(body=body).execute()
            return created["spreadsheetId"]

        spreadsheet_id = await asyncio.to_thread(_create)
        if data:
            await self._write(spreadsheet_id, "A1", data, append=False)

        return {
            "message": f'Planilha "{name}" criada!',
            "id": spreadsheet_id,
            "url": spreadsheet_url(spreadsheet_id),
            "action": "open_link",
        }

    async def read(self, params: dict[str, Any]) -> dict[str, Any]:
        spreadsheet_id = params.get("planilha_id")
        cell_range = params.get("range") or "A1:Z1000"
        tab = params.get("aba") or "Sheet1"

        def _read() -> list[list[Any]]:
            result = self._sheets().values().get(
                spreadsheetId=spreadsheet_id,
                range=f"{tab}!{cell_range}",
            ).execute()
            return result.get("values", [])

        rows = await asyncio.to_thread(_read)
        return {"linhas": len(rows), "colunas": len(rows[0]) if rows else 0, "dados": rows}

    async def update(self, params: dict[str, Any]) -> dict[str, Any]:
        rows = params.get("dados") or []
        tab = params.get("aba") or "Sheet1"
        cell_range = params.get("range") or "A1"
        append = params.get("modo") == "adicionar"
        await self._write(params.get("planilha_id"), f"{tab}!{cell_range}", rows, append=append)
        return {"message": "Planilha atualizada!", "linhasAfetadas": len(rows)}

    async def _write(self, spreadsheet_id: str, cell_range: str, rows: list[list[Any]], append: bool) -> None:
        def _call() -> None:
            values = self._sheets().values()
            if append:
                values.append(
                    spreadsheetId=spreadsheet_id,
                    range=cell_range,
                    valueInputOption="USER_ENTERED",
                    insertDataOption="INSERT_ROWS",
                    body={"values": rows},
                ).execute()
            else:
                values.update(
                    spreadsheetId=spreadsheet_id,
                    range=cell_range,
                    valueInputOption="USER_ENTERED",
                    body={"values": rows},
                ).execute()

        await asyncio.to_thread(_call)

    async def open_by_link(self, params: dict[str, Any]) -> dict[str, Any]:
        return await self.read({"planilha_id": parse_spreadsheet_id(params.get("link", ""))})

    async def create_quote_sheet(self, params: dict[str, Any]) -> dict[str, Any]:
        client = params.get("cliente") or ""
        return await self.create({
            "nome": f"Orçamento - {client} - {today_br()}",
            "dados": quote_sheet_rows(client, params.get("itens") or []),
        })


def quote_sheet_rows(client: str, items: list[dict[str, Any]]) -> list[list[Any]]:
    """Quote layout; item rows start at row 7 with a per-row formula total."""
    first_row = 7
    rows: list[list[Any]] = [
        ["ORÇAMENTO - DOCE AI"],
        [""],
        ["Cliente:", client],
        ["Data:", today_br()],
        [""],
        ["Item", "Quantidade", "Preço Unit.", "Total"],
    ]
    for offset, item in enumerate(items):
        row = first_row + offset
        rows.append([item.get("nome"), item.get("quantidade"), item.get("preco"), f"=B{row}*C{row}"])
    rows.append([""])
    total = f"=SUM(D{first_row}:D{len(items) + first_row - 1})" if items else 0
    rows.append(["", "", "TOTAL:", total])
    return rows
