"""CLI entry point for the IdeaForge intake interview.

Usage:
    # Interactive interview (uses the hosted model when OPENAI_API_KEY is set)
    ideaforge

    # Force the offline interview
    ideaforge --offline

    # Pick a model and an output directory
    ideaforge --model gpt-4o-mini --save-dir ./packages
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from rich.console import Console
from rich.logging import RichHandler
from rich.markdown import Markdown
from rich.panel import Panel
from rich.prompt import Confirm, Prompt
from rich.rule import Rule

from .config import load_config
from .gateway import build_gateway
from .interview.conversation_history import TurnRole
from .interview.interview_manager import InterviewManager
from .interview.session import Session, SessionStatus
from .models import ArtifactBundle, FieldKind, FieldSpec, FormSpec

logger = logging.getLogger(__name__)

console = Console()

COMMANDS = {
    "/quit": "Exit without generating",
    "/reset": "Start the interview over",
    "/retry": "Retry document generation after a failure",
    "/help": "Show available commands",
}


class _Command(Exception):
    """Raised from a prompt when the user types a slash command."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(name)


def _ask_text(label: str, required: bool, placeholder: Optional[str] = None) -> str:
    prompt = f"{label}" + (f" [dim]({placeholder})[/dim]" if placeholder else "")
    while True:
        value = Prompt.ask(prompt, default="", show_default=False, console=console).strip()
        if value.startswith("/") and value.split()[0].lower() in COMMANDS:
            raise _Command(value.split()[0].lower())
        if value or not required:
            return value
        console.print("[red]This field is required.[/red]")


def _print_options(options: Sequence[str]) -> None:
    for i, option in enumerate(options, start=1):
        console.print(f"  [cyan]{i}[/cyan]. {option}")


def _ask_choice(field: FieldSpec) -> str:
    _print_options(field.options)
    choices = [str(i) for i in range(1, len(field.options) + 1)]
    default = ... if field.required else ""
    picked = Prompt.ask(field.label, choices=choices, default=default, show_choices=False, console=console)
    return field.options[int(picked) - 1] if picked else ""


def parse_multi_choice(raw: str, options: Sequence[str]) -> List[str]:
    """Turn ``"2, 3"`` into the matching options, in the order typed."""
    picked: List[str] = []
    for token in raw.replace(" ", "").split(","):
        if not token:
            continue
        if not token.isdigit() or not 1 <= int(token) <= len(options):
            raise ValueError(f"'{token}' is not a valid choice")
        option = options[int(token) - 1]
        if option not in picked:
            picked.append(option)
    return picked


def _ask_multi_choice(field: FieldSpec) -> List[str]:
    _print_options(field.options)
    while True:
        raw = Prompt.ask(f"{field.label} [dim](comma-separated numbers)[/dim]", default="", show_default=False, console=console)
        try:
            picked = parse_multi_choice(raw, field.options)
        except ValueError as exc:
            console.print(f"[red]{exc}[/red]")
            continue
        if picked or not field.required:
            return picked
        console.print("[red]Pick at least one option.[/red]")


def collect_answers(form: FormSpec) -> Dict[str, Any]:
    """Prompt for every field of ``form`` and return the raw answers."""
    title = form.title or "Questions"
    body = form.description or ""
    console.print(Panel(body, title=title, expand=False) if body else Rule(title))

    answers: Dict[str, Any] = {}
    for field in form.fields:
        if field.helper_text:
            console.print(f"[dim]{field.helper_text}[/dim]")
        label = field.label + (" [red]*[/red]" if field.required else "")

        if field.kind in (FieldKind.TEXT, FieldKind.TEXTAREA):
            answers[field.id] = _ask_text(label, field.required, field.placeholder)
        elif field.kind in (FieldKind.SELECT, FieldKind.RADIO):
            answers[field.id] = _ask_choice(field)
        elif field.kind == FieldKind.MULTISELECT:
            answers[field.id] = _ask_multi_choice(field)
        elif field.kind == FieldKind.CHECKBOX:
            answers[field.id] = Confirm.ask(label, default=False, console=console)

    console.print(f"[dim]{form.submit_label or 'Continue'}[/dim]")
    return answers


def _print_new_turns(session: Session, shown: int) -> int:
    for turn in session.turns[shown:]:
        if turn.role == TurnRole.ASSISTANT:
            console.print(f"\n[bold blue]AI[/bold blue]: {turn.content}")
        else:
            console.print(f"[bold]You[/bold]: {turn.content}", style="dim")
    return len(session.turns)


def _print_artifacts(bundle: ArtifactBundle) -> None:
    for title, text in (
        ("Product Requirements", bundle.prd),
        ("Design Guide", bundle.design),
        ("Tech Spec", bundle.tech),
    ):
        console.print(Rule(title))
        console.print(Markdown(text))


def _save_artifacts(bundle: ArtifactBundle, save_dir: Path) -> Path:
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    output_dir = save_dir / f"package_{timestamp}"
    bundle.save(output_dir)
    return output_dir


def _on_progress(session: Session) -> None:
    step = session.generation_step
    if step is not None:
        console.print(f"[dim]Generating {step.display_name}...[/dim]")


async def run_interview(manager: InterviewManager) -> Optional[Session]:
    """Run the interactive loop until a package is generated or the user quits."""
    with console.status("Starting..."):
        session = await manager.start()
    shown = 0

    while True:
        shown = _print_new_turns(session, shown)
        if session.error:
            console.print(f"[red]{session.error}[/red]")
        if session.is_complete:
            return session

        try:
            if session.status == SessionStatus.FAILED:
                if not Confirm.ask("Retry generation?", default=True, console=console):
                    return None
                session = await manager.retry_generation(session)
                continue

            if session.pending_form is not None:
                answers = collect_answers(session.pending_form)
                with console.status("Thinking..."):
                    session = await manager.submit_form(session, answers)
            else:
                text = _ask_text("[bold]You[/bold]", required=True)
                with console.status("Thinking..."):
                    session = await manager.submit_text(session, text)
        except _Command as cmd:
            if cmd.name == "/quit":
                return None
            if cmd.name == "/reset":
                console.print(Rule("Starting over"))
                with console.status("Starting..."):
                    session = await manager.start(manager.reset())
                shown = 0
            elif cmd.name == "/retry" and session.status == SessionStatus.FAILED:
                session = await manager.retry_generation(session)
            else:
                for name, description in COMMANDS.items():
                    console.print(f"  {name} - {description}")


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, show_path=False, rich_tracebacks=True)],
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ideaforge",
        description="Turn a product idea into a PRD, design guide and tech spec through a guided interview",
    )
    parser.add_argument("--offline", action="store_true", help="Use the built-in interview even if a model key is set")
    parser.add_argument("--model", default=None, help="Model name for the hosted gateway")
    parser.add_argument("--save-dir", type=Path, default=None, help="Directory to save generated packages")
    parser.add_argument("--no-save", action="store_true", help="Do not write the package to disk")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    return parser


async def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    _configure_logging(args.verbose)

    try:
        config = load_config()
    except ValueError as exc:
        console.print(f"[red]Configuration error:[/red] {exc}")
        return 2
    if args.model:
        config.gateway.model = args.model
    if args.save_dir:
        config.save_dir = args.save_dir

    manager = InterviewManager(build_gateway(config, offline=args.offline))
    manager.set_on_progress(_on_progress)

    try:
        session = await run_interview(manager)
    except (KeyboardInterrupt, EOFError):
        console.print("\nInterrupted. Nothing was saved.")
        return 130

    if session is None or session.artifacts is None:
        console.print("Exiting. Nothing was generated.")
        return 1

    _print_artifacts(session.artifacts)
    if not args.no_save:
        output_dir = _save_artifacts(session.artifacts, config.save_dir)
        console.print(f"\n[green]Package saved to:[/green] {output_dir}")
    return 0


def run() -> None:
    """Console script entry point."""
    sys.exit(asyncio.run(main()))


if __name__ == "__main__":
    run()
