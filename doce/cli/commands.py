"""CLI commands for Doce.AI."""

import asyncio
import json
import os
import signal
import sys

import typer
from dotenv import load_dotenv
from loguru import logger
from rich.console import Console
from rich.markdown import Markdown
from rich.table import Table
from rich.text import Text

from prompt_toolkit import PromptSession
from prompt_toolkit.formatted_text import HTML
from prompt_toolkit.history import FileHistory
from prompt_toolkit.patch_stdout import patch_stdout

from doce import __logo__, __version__

app = typer.Typer(
    name="doce",
    help=f"{__logo__} Doce.AI - assistente de trabalho e rede de agentes",
    no_args_is_help=True,
)

console = Console()
EXIT_COMMANDS = {"exit", "quit", "sair", "/exit", "/quit", "/sair", ":q"}

# ---------------------------------------------------------------------------
# CLI input: prompt_toolkit for editing, paste, history, and display
# ---------------------------------------------------------------------------

_PROMPT_SESSION: PromptSession | None = None
_SAVED_TERM_ATTRS = None  # original termios settings, restored on exit


def _restore_terminal() -> None:
    """Restore terminal to its original state (echo, line buffering, etc.)."""
    if _SAVED_TERM_ATTRS is None:
        return
    try:
        import termios
        termios.tcsetattr(sys.stdin.fileno(), termios.TCSADRAIN, _SAVED_TERM_ATTRS)
    except Exception:
        pass


def _init_prompt_session() -> None:
    """Create the prompt_toolkit session with persistent file history."""
    global _PROMPT_SESSION, _SAVED_TERM_ATTRS
    from doce.settings import get_settings

    try:
        import termios
        _SAVED_TERM_ATTRS = termios.tcgetattr(sys.stdin.fileno())
    except Exception:
        pass

    history_file = get_settings().state_dir / "history" / "cli_history"
    history_file.parent.mkdir(parents=True, exist_ok=True)

    _PROMPT_SESSION = PromptSession(
        history=FileHistory(str(history_file)),
        enable_open_in_editor=False,
        multiline=False,
    )


async def _read_interactive_input_async() -> str:
    if _PROMPT_SESSION is None:
        raise RuntimeError("Call _init_prompt_session() first")
    try:
        with patch_stdout():
            return await _PROMPT_SESSION.prompt_async(HTML("<b fg='ansimagenta'>Você:</b> "))
    except EOFError as exc:
        raise KeyboardInterrupt from exc


def _print_reply(name: str, avatar: str, text: str, render_markdown: bool) -> None:
    body = Markdown(text or "") if render_markdown else Text(text or "")
    console.print()
    console.print(f"[magenta]{avatar} {name}[/magenta]")
    console.print(body)
    console.print()


def _is_exit_command(command: str) -> bool:
    return command.lower() in EXIT_COMMANDS


def _configure_logs(logs: bool) -> None:
    if logs:
        logger.enable("doce")
    else:
        logger.disable("doce")


def _print_json(data) -> None:
    console.print_json(json.dumps(data, ensure_ascii=False, default=str))


def version_callback(value: bool):
    if value:
        console.print(f"{__logo__} Doce.AI v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        None, "--version", "-v", callback=version_callback, is_eager=True
    ),
):
    """Doce.AI - assistente de trabalho e rede de agentes."""
    # Provider keys read by LiteLLM itself (e.g. OPENAI_API_KEY) live in .env too.
    load_dotenv(override=False)


# ============================================================================
# Chat
# ============================================================================


@app.command()
def chat(
    message: str = typer.Option(None, "--message", "-m", help="Mensagem única para a Doce"),
    contact: str = typer.Option("doce", "--contact", "-c", help="Contato inicial"),
    local: bool = typer.Option(False, "--local", help="Usar só o classificador local"),
    markdown: bool = typer.Option(True, "--markdown/--no-markdown", help="Renderizar respostas como Markdown"),
    logs: bool = typer.Option(False, "--logs/--no-logs", help="Mostrar logs da Doce.AI durante o chat"),
):
    """Conversar com a Doce (e com os agentes que ela apresentar)."""
    from doce.conversation import Assistant

    _configure_logs(logs)
    assistant = Assistant.from_settings(local_only=local)
    sessions = assistant.sessions
    if contact not in sessions.contacts:
        console.print(f"[red]Contato desconhecido: {contact}[/red]")
        raise typer.Exit(1)

    state = {"session": sessions.for_contact(contact)}

    def _thinking_ctx():
        if logs:
            from contextlib import nullcontext
            return nullcontext()
        return console.status("[dim]Doce está digitando...[/dim]", spinner="dots")

    async def _send(text: str) -> None:
        session = state["session"]
        persona = sessions.contacts[session.contact]
        with _thinking_ctx():
            reply = await assistant.send(session, text)
        _print_reply(persona.name, persona.avatar, reply.text, markdown)
        if reply.new_contact is not None:
            console.print(
                f"[green]Novo contato: {reply.new_contact.avatar} {reply.new_contact.name}[/green] "
                f"(use [bold]/contato {reply.new_contact.id}[/bold])\n"
            )

    def _switch(target: str) -> None:
        if target not in sessions.contacts:
            console.print(f"[red]Contato desconhecido: {target}[/red]")
            return
        session = sessions.for_contact(target)
        state["session"] = session
        persona = sessions.contacts[target]
        console.print(f"[dim]Conversando com {persona.avatar} {persona.name}[/dim]")
        for msg in session.messages[-1:]:
            if msg["role"] == "assistant":
                _print_reply(persona.name, persona.avatar, msg["content"], markdown)

    if message:
        asyncio.run(_send(message))
        assistant.close()
        return

    _init_prompt_session()
    console.print(
        f"{__logo__} Modo interativo (digite [bold]sair[/bold] ou [bold]Ctrl+C[/bold] para encerrar, "
        f"[bold]/contatos[/bold] para listar contatos)\n"
    )

    def _exit_on_sigint(signum, frame):
        _restore_terminal()
        console.print("\nAté logo!")
        os._exit(0)

    signal.signal(signal.SIGINT, _exit_on_sigint)

    async def run_interactive():
        while True:
            try:
                command = (await _read_interactive_input_async()).strip()
                if not command:
                    continue
                if _is_exit_command(command):
                    break
                if command == "/contatos":
                    for persona in sessions.contacts.values():
                        console.print(f"  {persona.avatar} {persona.name} [dim]({persona.id})[/dim]")
                    continue
                if command.startswith("/contato "):
                    _switch(command.split(maxsplit=1)[1].strip().lower())
                    continue
                await _send(command)
            except KeyboardInterrupt:
                break
        _restore_terminal()
        console.print("\nAté logo!")

    asyncio.run(run_interactive())
    assistant.close()


# ============================================================================
# Classification / registry inspection
# ============================================================================


@app.command()
def classify(
    text: str = typer.Argument(..., help="Frase a classificar"),
    local: bool = typer.Option(False, "--local", help="Ignorar o classificador remoto"),
    context: str = typer.Option("{}", "--context", help="Contexto em JSON"),
    logs: bool = typer.Option(False, "--logs/--no-logs", help="Mostrar logs"),
):
    """Mostrar a intenção detectada para uma frase (sem executar)."""
    from doce.actions import build_default_registry
    from doce.intent import LocalIntentClassifier, RemoteIntentClassifier

    _configure_logs(logs)
    try:
        ctx = json.loads(context)
    except json.JSONDecodeError as exc:
        console.print(f"[red]Contexto inválido: {exc}[/red]")
        raise typer.Exit(1)

    if local:
        result = LocalIntentClassifier().classify(text, ctx)
    else:
        classifier = RemoteIntentClassifier.from_settings(build_default_registry())
        result = asyncio.run(classifier.classify(text, ctx))
    _print_json(result.to_dict())


@app.command()
def actions(
    category: str = typer.Option(None, "--category", "-c", help="Filtrar por categoria"),
):
    """Listar as ações registradas."""
    from doce.actions import build_default_registry

    registry = build_default_registry()
    table = Table(title="Ações")
    table.add_column("Nome", style="cyan")
    table.add_column("Descrição")
    table.add_column("Parâmetros", style="dim")
    table.add_column("Dificuldade")

    for descriptor in registry:
        if category and descriptor.category != category:
            continue
        table.add_row(
            descriptor.name,
            descriptor.description,
            ", ".join(descriptor.declared_params),
            descriptor.difficulty,
        )
    console.print(table)


@app.command()
def sites():
    """Listar os sites de catálogo configurados."""
    from doce.actions.scraping import CatalogScraper

    table = Table(title="Sites de catálogo")
    table.add_column("ID", style="cyan")
    table.add_column("Nome")
    table.add_column("URL", style="dim")
    for site in CatalogScraper().list_sites():
        table.add_row(site["id"], site["name"], site["url"])
    console.print(table)


# ============================================================================
# Local database
# ============================================================================

db_app = typer.Typer(help="Banco de dados local")
app.add_typer(db_app, name="db")


def _database():
    from doce.actions.database import DatabaseActions
    from doce.settings import get_settings
    from doce.storage import LocalStore

    s = get_settings()
    return DatabaseActions(LocalStore(s.database_path), history_limit=s.history_limit)


@db_app.command("export")
def db_export():
    """Exportar o banco de dados como JSON."""
    _print_json(asyncio.run(_database().export_db()))


@db_app.command("reset")
def db_reset(
    yes: bool = typer.Option(False, "--yes", "-y", help="Não pedir confirmação"),
):
    """Reiniciar o banco de dados."""
    if not yes and not typer.confirm("Apagar todos os dados locais?"):
        raise typer.Exit()
    result = asyncio.run(_database().reset_db())
    console.print(f"[green]✓[/green] {result['message']}")


# ============================================================================
# Status
# ============================================================================


@app.command()
def status():
    """Mostrar a configuração atual."""
    from doce.settings import get_settings

    s = get_settings()
    console.print(f"{__logo__} Doce.AI Status\n")
    console.print(f"Dados: {s.database_path} {'[green]✓[/green]' if s.database_path.exists() else '[dim]novo[/dim]'}")
    gemini = "[green]✓[/green]" if s.gemini_api_key else "[dim]não configurado (classificador local)[/dim]"
    console.print(f"Gemini ({s.gemini_model}): {gemini}")
    chat_llm = "[green]✓[/green]" if s.chat_api_key else "[dim]não configurado (respostas simuladas)[/dim]"
    console.print(f"Chat ({s.chat_model}): {chat_llm}")
    sheets = "[green]✓[/green]" if s.google_service_account_path else "[dim]não configurado[/dim]"
    console.print(f"Google Sheets: {sheets}")


if __name__ == "__main__":
    app()
