"""CLI main entry point using Typer."""

import logging
from pathlib import Path
from typing import List, Optional

import typer
import uvicorn
from rich.console import Console
from rich.table import Table

from fsgate.config.models import DEFAULT_FS_DENY, AliasRule, ServerConfig
from fsgate.config.settings import (
    DEFAULT_HOST,
    DEFAULT_LOG_LEVEL,
    DEFAULT_PORT,
    DEFAULT_STRICT,
    FS_PREFIX,
)

app = typer.Typer(
    name="fsgate",
    help="Development file server with path-based access control",
    add_completion=False,
)

console = Console()


def _parse_headers(values: List[str]) -> dict[str, str]:
    headers = {}
    for value in values:
        name, sep, content = value.partition(":")
        if not sep or not name.strip():
            raise ValueError(f"Invalid header (expected Name: value): {value}")
        headers[name.strip()] = content.strip()
    return headers


def _build_config(
    root: Path,
    allow: Optional[List[str]],
    deny: Optional[List[str]],
    strict: bool,
    **kwargs,
) -> ServerConfig:
    return ServerConfig(
        root=root.absolute(),
        allow=list(allow or []),
        deny=list(deny) if deny else list(DEFAULT_FS_DENY),
        strict=strict,
        **kwargs,
    )


def _print_banner(config: ServerConfig) -> None:
    console.print("\n[bold blue]fsgate[/bold blue] - development file server\n")
    console.print(f"[green]✓[/green] Root: {config.served_root}")
    if config.public_dir is not None:
        console.print(f"[green]✓[/green] Public: {config.served_public_dir}")
    console.print(f"[green]✓[/green] Strict: {'yes' if config.strict else 'no'}")
    for entry in config.resolve_allow():
        console.print(f"  • allow {entry}")
    for pattern in config.deny:
        console.print(f"  • deny  {pattern}")
    console.print(f"[green]✓[/green] Escape hatch: {FS_PREFIX}")
    console.print(f"\n[bold]http://{config.host}:{config.port}[/bold]\n")


@app.command()
def serve(
    root: Path = typer.Argument(
        Path("."),
        help="Project root to serve",
        exists=True,
        file_okay=False,
    ),
    public_dir: Optional[Path] = typer.Option(
        None,
        "--public-dir",
        help="Directory of public assets served without access checks",
    ),
    port: int = typer.Option(
        DEFAULT_PORT,
        "--port",
        "-p",
        help="Port to bind server (1024-65535)",
        min=1024,
        max=65535,
    ),
    host: str = typer.Option(
        DEFAULT_HOST,
        "--host",
        "-h",
        help="Host to bind server",
    ),
    allow: Optional[List[str]] = typer.Option(
        None,
        "--allow",
        "-a",
        help="Directory that may be served (repeatable, defaults to the root)",
    ),
    deny: Optional[List[str]] = typer.Option(
        None,
        "--deny",
        "-d",
        help="Glob pattern that must never be served (repeatable)",
    ),
    alias: Optional[List[str]] = typer.Option(
        None,
        "--alias",
        help="Path alias FIND=REPLACEMENT, 're:' prefix for a regex (repeatable)",
    ),
    header: Optional[List[str]] = typer.Option(
        None,
        "--header",
        help="Extra response header 'Name: value' for static files (repeatable)",
    ),
    no_strict: bool = typer.Option(
        not DEFAULT_STRICT,
        "--no-strict",
        help="Serve any file, ignoring the allow list",
    ),
    no_public_cache: bool = typer.Option(
        False,
        "--no-public-cache",
        help="Check the disk for every public file request",
    ),
    log_level: str = typer.Option(
        DEFAULT_LOG_LEVEL,
        "--log-level",
        "--log",
        "-l",
        help="Logging level (DEBUG/INFO/WARNING/ERROR)",
    ),
) -> None:
    """Start the development file server."""
    try:
        try:
            config = _build_config(
                root,
                allow,
                deny,
                strict=not no_strict,
                host=host,
                port=port,
                public_dir=public_dir.absolute() if public_dir else None,
                aliases=[AliasRule.parse(value) for value in alias or []],
                headers=_parse_headers(header or []),
                public_files_cache=not no_public_cache,
                log_level=log_level.upper(),
            )
            config.validate()
        except ValueError as e:
            console.print(f"[red]✗[/red] Configuration error: {e}", style="bold")
            raise typer.Exit(code=2)

        logging.basicConfig(
            level=config.log_level,
            format="%(levelname)s:     %(name)s - %(message)s",
        )

        _print_banner(config)

        from fsgate.server.app import create_app

        server_app = create_app(config)

        uvicorn.run(
            server_app,
            host=host,
            port=port,
            log_level=config.log_level.lower(),
        )

    except KeyboardInterrupt:
        console.print("\n[yellow]Server stopped[/yellow]")
        raise typer.Exit(code=0)
    except OSError as e:
        if "address already in use" in str(e).lower():
            console.print(f"[red]✗[/red] Port {port} is already in use", style="bold")
            raise typer.Exit(code=5)
        console.print(f"[red]✗[/red] Error: {e}", style="bold")
        raise typer.Exit(code=1)


@app.command()
def check(
    root: Path = typer.Argument(
        ...,
        help="Project root the policy is built for",
        exists=True,
        file_okay=False,
    ),
    paths: List[Path] = typer.Argument(
        ...,
        help="Filesystem paths to check",
    ),
    allow: Optional[List[str]] = typer.Option(
        None,
        "--allow",
        "-a",
        help="Directory that may be served (repeatable, defaults to the root)",
    ),
    deny: Optional[List[str]] = typer.Option(
        None,
        "--deny",
        "-d",
        help="Glob pattern that must never be served (repeatable)",
    ),
    no_strict: bool = typer.Option(
        False,
        "--no-strict",
        help="Evaluate with strict mode off",
    ),
) -> None:
    """Show how the access policy treats each path."""
    from fsgate.security.paths import normalize_path
    from fsgate.security.policy import Decision, check_loading_access

    policy = _build_config(root, allow, deny, strict=not no_strict).to_policy()

    table = Table(title="fsgate access check")
    table.add_column("Path")
    table.add_column("Decision")

    colors = {
        Decision.ALLOWED: "green",
        Decision.DENIED: "red",
        Decision.FALLBACK: "yellow",
    }
    denied = False
    for path in paths:
        normalized = normalize_path(str(path.absolute()))
        decision = check_loading_access(policy, normalized)
        denied = denied or decision is Decision.DENIED
        table.add_row(normalized, f"[{colors[decision]}]{decision.value}[/{colors[decision]}]")

    console.print(table)
    if denied:
        raise typer.Exit(code=1)


def main() -> None:
    """Main entry point."""
    app()


if __name__ == "__main__":
    main()
