"""chatwright command line interface."""

from __future__ import annotations

import asyncio
import json
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console

from chatwright.config import load_settings
from chatwright.contracts import ChatTurnInput, validate_turn_input
from chatwright.core.directives import DIRECTIVE_FAMILIES, scan_all_directives
from chatwright.core.orchestrator import ResponseOrchestrator
from chatwright.core.placeholders import substitute
from chatwright.errors import ChatwrightError
from chatwright.functions import build_default_registry
from chatwright.integrations.republic_client import RepublicCompletionService
from chatwright.logging_utils import configure_logging
from chatwright.resolvers import DirectiveResolvers, HttpUrlResolver, LocalFileResolver

app = typer.Typer(name="chatwright", help="Directive-driven prompt templating.", add_completion=False)
console = Console()

VarOption = Annotated[list[str] | None, typer.Option("--var", "-v", help="Variable as key=value; repeatable.")]


def _parse_vars(items: list[str] | None) -> dict[str, str]:
    variables: dict[str, str] = {}
    for item in items or []:
        key, separator, value = item.partition("=")
        if not separator or not key.strip():
            raise typer.BadParameter(f"expected key=value, got {item!r}", param_hint="--var")
        variables[key.strip()] = value
    return variables


def _read_template(template: str) -> str:
    if template == "-":
        return typer.get_text_stream("stdin").read()
    return template


@app.command()
def scan(
    template: Annotated[str, typer.Argument(help="Template text, or '-' to read stdin.")],
) -> None:
    """Print every directive occurrence in TEMPLATE as JSON."""

    occurrences = scan_all_directives(_read_template(template), DIRECTIVE_FAMILIES)
    rows = [
        {
            "name": occurrence.name,
            "fullMatch": occurrence.full_match,
            "span": list(occurrence.span),
            "args": occurrence.args,
            "commented": occurrence.commented,
            "comment": occurrence.comment,
        }
        for occurrence in occurrences
    ]
    typer.echo(json.dumps(rows, ensure_ascii=False, indent=2))


@app.command()
def render(
    template: Annotated[str, typer.Argument(help="Template text, or '-' to read stdin.")],
    var: VarOption = None,
) -> None:
    """Substitute {{placeholders}} in TEMPLATE with --var values."""

    variables = _parse_vars(var)
    typer.echo(substitute(_read_template(template), variables.keys(), variables, {}))


@app.command()
def chat(
    message: Annotated[str, typer.Argument(help="User message, or '-' to read stdin.")],
    var: VarOption = None,
    chat_id: Annotated[str | None, typer.Option("--chat-id", help="Existing chat id.")] = None,
    model: Annotated[str | None, typer.Option("--model", help="Override CHATWRIGHT_MODEL.")] = None,
    files_root: Annotated[Path | None, typer.Option("--files-root", help="Root for local file directives.")] = None,
) -> None:
    """Run one orchestrated chat turn and print the result as JSON."""

    settings = load_settings(model=model, files_root=files_root)
    configure_logging(profile="chat", level=settings.log_level)

    text = _read_template(message)
    try:
        settings.require_model()
        turn: ChatTurnInput = validate_turn_input(
            {"chatId": chat_id, "userMessage": text, "variables": _parse_vars(var)}
        )
        resolvers = DirectiveResolvers(
            url=HttpUrlResolver(
                timeout_seconds=settings.resolver_timeout_seconds,
                max_bytes=settings.fetch_max_bytes,
            ),
            file=LocalFileResolver(settings.files_root) if settings.files_root else None,
        )
        orchestrator = ResponseOrchestrator.from_settings(
            settings,
            RepublicCompletionService(settings),
            build_default_registry(),
            resolvers,
        )
        output = asyncio.run(orchestrator.respond_to(text, turn))
    except ChatwrightError as exc:
        console.print(f"[red]error:[/red] {exc}")
        raise typer.Exit(1) from exc
    typer.echo(json.dumps(output.to_payload(), ensure_ascii=False, indent=2))


if __name__ == "__main__":
    app()
