"""
Command line entry point for the lookup service.

Each command opens the service container, runs one rate-limited operation
and prints the JSON result. Failures print their stable description and
exit non-zero.
"""

import asyncio
from typing import Any, Awaitable, Callable, Dict, Optional

import typer
from rich.console import Console

from .database import DatabaseConfig
from .services import ServiceContainer
from .utils import AppConfig, RateLimited, SkyLookupError, configure_logging, load_config

app = typer.Typer(help="Resolve aircraft ModeS codes and flight callsigns")
console = Console()
err_console = Console(stderr=True)

Operation = Callable[[ServiceContainer], Awaitable[Dict[str, Any]]]


def _setup(verbose: bool) -> AppConfig:
    try:
        config = load_config()
    except ValueError as e:
        err_console.print(f"[red]Configuration error:[/red] {e}")
        raise typer.Exit(code=1)
    configure_logging("DEBUG" if verbose else config.log_level, console=err_console)
    return config


async def _call(config: AppConfig, client_key: str, operation: Operation) -> Dict[str, Any]:
    async with ServiceContainer(config) as services:
        services.install_signal_handlers()
        return await services.limited(client_key, operation, services)


def _run(config: AppConfig, client_key: str, operation: Operation) -> None:
    try:
        result = asyncio.run(_call(config, client_key, operation))
    except RateLimited as e:
        err_console.print(f"[red]{e.description}[/red] retry in {e.retry_after_seconds}s")
        raise typer.Exit(code=1)
    except SkyLookupError as e:
        err_console.print(f"[red]{e.description}[/red]")
        raise typer.Exit(code=1)
    except asyncio.CancelledError:
        err_console.print("[yellow]Interrupted[/yellow]")
        raise typer.Exit(code=130)
    console.print_json(data=result)


@app.command()
def aircraft(
    mode_s: str = typer.Argument(..., help="6 character hex ModeS, e.g. A7E152"),
    callsign: Optional[str] = typer.Option(
        None, "--callsign", "-c", help="Also resolve this callsign's flightroute"
    ),
    client_key: str = typer.Option("cli", "--client-key", help="Rate limiter identity"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
):
    """Resolve an aircraft by ModeS"""
    config = _setup(verbose)
    _run(config, client_key, lambda s: s.pipeline.resolve_aircraft(mode_s, callsign))


@app.command()
def callsign(
    callsign: str = typer.Argument(..., help="4 to 8 character callsign, e.g. RYR544"),
    client_key: str = typer.Option("cli", "--client-key", help="Rate limiter identity"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
):
    """Resolve a flightroute by callsign"""
    config = _setup(verbose)
    _run(config, client_key, lambda s: s.pipeline.resolve_flightroute(callsign))


@app.command("n-number")
def n_number(
    n_number: str = typer.Argument(..., help="US registration, e.g. N12345"),
    client_key: str = typer.Option("cli", "--client-key", help="Rate limiter identity"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
):
    """Convert a US N-Number to its ModeS"""
    config = _setup(verbose)
    _run(config, client_key, lambda s: s.pipeline.resolve_n_number(n_number))


@app.command("mode-s")
def mode_s(
    mode_s: str = typer.Argument(..., help="6 character hex ModeS, e.g. A7E152"),
    client_key: str = typer.Option("cli", "--client-key", help="Rate limiter identity"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
):
    """Convert a ModeS to its US N-Number"""
    config = _setup(verbose)
    _run(config, client_key, lambda s: s.pipeline.resolve_mode_s(mode_s))


@app.command()
def airline(
    code: str = typer.Argument(..., help="IATA (U2) or ICAO (EZY) airline prefix"),
    client_key: str = typer.Option("cli", "--client-key", help="Rate limiter identity"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
):
    """List the airlines using a prefix"""
    config = _setup(verbose)
    _run(config, client_key, lambda s: s.pipeline.resolve_airline(code))


@app.command()
def online(
    health: bool = typer.Option(False, "--health", help="Also ping Valkey and the database"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
):
    """Show API version and uptime"""
    config = _setup(verbose)
    _run(config, "cli", lambda s: s.pipeline.online(include_health=health))


@app.command("init-db")
def init_db(
    drop: bool = typer.Option(False, "--drop", help="Drop existing tables first"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
):
    """Create the database tables"""
    config = _setup(verbose)

    async def create() -> None:
        database = DatabaseConfig.from_app_config(config)
        try:
            if drop:
                await database.drop_tables()
            await database.create_tables()
        finally:
            await database.dispose()

    try:
        asyncio.run(create())
    except SkyLookupError as e:
        err_console.print(f"[red]{e.description}[/red]")
        raise typer.Exit(code=1)
    console.print(f"[green]Tables created[/green] ({config.database_url.split('@')[-1]})")


if __name__ == "__main__":
    app()
