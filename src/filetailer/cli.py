from __future__ import annotations
import json
import logging
from typing import Optional
import typer
from rich.console import Console
from rich.logging import RichHandler

from .config import TailConfig, apply_overrides, build_session, load_config
from .engine import TailerRun
from .listener import TailerListener
from .tailer import Tailer

app = typer.Typer(help="filetailer - follow a growing, rotating or truncated file")
console = Console()
err_console = Console(stderr=True)


class ConsoleListener(TailerListener):
    """Prints lines to stdout and lifecycle events to stderr."""

    def __init__(self, json_out: bool = False, wait_for_file: bool = True) -> None:
        self.json_out = json_out
        self.wait_for_file = wait_for_file
        self.line_no = 0
        self.not_found = False
        self.errors = 0

    def init(self, tailer) -> None:
        err_console.print(f"[green]Following[/green] {tailer.path}  (Ctrl+C to stop)")

    def handle_line(self, line: str) -> None:
        self.not_found = False
        self.line_no += 1
        if self.json_out:
            print(json.dumps({"line_no": self.line_no, "line": line}, ensure_ascii=False))
        else:
            console.print(line, markup=False, highlight=False, soft_wrap=True)

    def file_not_found(self) -> None:
        # only announce the transition, not every poll
        if self.wait_for_file and not self.not_found:
            err_console.print("[yellow]File not found, waiting for it to appear...[/yellow]")
        self.not_found = True

    def file_rotated(self) -> None:
        self.not_found = False
        err_console.print("[yellow]File rotated, following the new file[/yellow]")

    def handle_error(self, exc: Exception) -> None:
        self.errors += 1
        err_console.print(f"[bold red]Error:[/bold red] {exc}")


def _setup_logging(verbose: bool) -> None:
    if not verbose:
        return
    logging.basicConfig(
        level=logging.DEBUG,
        format="%(message)s",
        handlers=[RichHandler(console=err_console, show_path=False)],
    )


def _resolve_config(config: Optional[str], **overrides) -> TailConfig:
    cfg = load_config(config) if config else TailConfig()
    return apply_overrides(cfg, **overrides)


@app.command()
def follow(
    file: Optional[str] = typer.Option(None, "--file", "-f", help="Path to the file to follow (overrides config)"),
    config: Optional[str] = typer.Option(None, "--config", "-c", help="Path to a tail YAML config"),
    json_out: bool = typer.Option(False, "--json", help="Output JSON lines ({line_no, line})"),
    from_start: bool = typer.Option(False, "--from-start", help="Read file from beginning (default: follow new lines only)"),
    poll_interval: Optional[float] = typer.Option(None, "--poll", help="Seconds between polls"),
    buffer_size: Optional[int] = typer.Option(None, "--buffer-size", help="Bytes per read call"),
    encoding: Optional[str] = typer.Option(None, "--encoding", help="Character set of the file"),
    reopen: bool = typer.Option(False, "--reopen", help="Close and reopen the file after every poll"),
    max_cycles: int = typer.Option(0, "--max-cycles", help="Stop after N polls (0 = run until Ctrl+C)"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log every poll decision to stderr"),
):
    """
    Follow a file like `tail -F`, surviving rotation and truncation.
    """
    _setup_logging(verbose)
    try:
        cfg = _resolve_config(
            config,
            file=file,
            delay=poll_interval,
            buffer_size=buffer_size,
            encoding=encoding,
            start_at_end=False if from_start else None,
            reopen=True if reopen else None,
        )
        listener = ConsoleListener(json_out=json_out)
        tailer = Tailer.from_config(cfg, listener)
    except FileNotFoundError as e:
        err_console.print(f"[bold red]Error:[/bold red] {e}", style="red")
        raise typer.Exit(1)
    except ValueError as e:
        err_console.print(f"[bold red]Configuration Error:[/bold red] {e}", style="red")
        raise typer.Exit(1)

    try:
        tailer.run(max_cycles=max_cycles)
    except KeyboardInterrupt:
        tailer.stop()
        err_console.print("[yellow]Stopped.[/yellow]")


@app.command()
def once(
    file: Optional[str] = typer.Option(None, "--file", "-f", help="Path to the file to read"),
    config: Optional[str] = typer.Option(None, "--config", "-c", help="Path to a tail YAML config"),
    json_out: bool = typer.Option(False, "--json", help="Output JSON lines ({line_no, line})"),
    buffer_size: Optional[int] = typer.Option(None, "--buffer-size", help="Bytes per read call"),
    encoding: Optional[str] = typer.Option(None, "--encoding", help="Character set of the file"),
):
    """
    Run a single poll from the start of the file and print every complete line.

    A trailing line without a terminator is not printed, exactly as `follow`
    would hold it back until it is finished.
    """
    try:
        cfg = _resolve_config(
            config,
            file=file,
            buffer_size=buffer_size,
            encoding=encoding,
            start_at_end=False,
        )
        session = build_session(cfg)
    except FileNotFoundError as e:
        err_console.print(f"[bold red]Error:[/bold red] {e}", style="red")
        raise typer.Exit(1)
    except ValueError as e:
        err_console.print(f"[bold red]Configuration Error:[/bold red] {e}", style="red")
        raise typer.Exit(1)

    listener = ConsoleListener(json_out=json_out, wait_for_file=False)
    with session:
        TailerRun(session, listener).run()

    if listener.not_found:
        err_console.print(f"[bold red]Error:[/bold red] File not found: {cfg.file}", style="red")
        raise typer.Exit(1)
    if listener.errors:
        raise typer.Exit(1)


if __name__ == "__main__":
    app()
