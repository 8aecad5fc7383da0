import asyncio

import structlog
import typer
from rich.console import Console
from rich.progress import BarColumn, Progress, TextColumn
from rich.table import Table

from studio.config import settings
from studio.schemas.pull import PullPhase
from studio.services.bootstrap import build_services
from studio.services.status import StatusLog

console = Console()
cli_app = typer.Typer(name="studio", help="Perspective Studio runtime and catalog CLI")


def _run_async(coro):
    """Run async code from sync CLI context."""
    return asyncio.run(coro)


def _echo(message: str) -> None:
    console.print(f"  [dim]{message}[/dim]")


def _format_size(size_bytes: int | None) -> str:
    if size_bytes is None:
        return "?"
    return f"{size_bytes / 1024**3:.1f} GB"


@cli_app.callback()
def configure(verbose: bool = typer.Option(False, "--verbose", "-v", help="Show structured logs")):
    structlog.configure(wrapper_class=structlog.make_filtering_bound_logger(10 if verbose else 30))


@cli_app.command("status")
def status():
    """Show whether Ollama is installed and running."""
    async def _status():
        services = build_services()
        try:
            runtime_status = await services.supervisor.detect()
            exe = services.locator.find_runtime_executable()
            version = await services.locator.runtime_version()
            state = services.app_state.load()
            return runtime_status, exe, version, services.locator, state
        finally:
            await services.close()

    runtime_status, exe, version, locator, state = _run_async(_status())

    console.print(f"\n[bold]Runtime:[/bold]   {runtime_status.value}")
    console.print(f"  Host:       {settings.runtime_host}")
    console.print(f"  Executable: {exe or '[dim]not found[/dim]'}")
    console.print(f"  Version:    {version or '[dim]unknown[/dim]'}")
    console.print(f"  OS:         {locator.os_family}")
    managers = ", ".join(
        f"{pm.name}{'' if pm.invocable else ' (missing)'}" for pm in locator.available_package_managers()
    )
    console.print(f"  Packages:   {managers or '[dim]none[/dim]'}")
    console.print(f"  First run:  {state.first_run}\n")


@cli_app.command("install")
def install():
    """Install Ollama using this OS's preferred method."""
    async def _install():
        services = build_services()
        try:
            return await services.installer.install(StatusLog(echo=_echo))
        finally:
            await services.close()

    outcome = _run_async(_install())
    if outcome.success:
        console.print("[bold green]Ollama is installed.[/bold green]")
    else:
        console.print(f"[bold red]{outcome.message}[/bold red]")
        raise typer.Exit(code=1)


@cli_app.command("start")
def start():
    """Start the Ollama server and wait until it answers."""
    async def _start():
        services = build_services()
        try:
            return await services.supervisor.ensure_running(StatusLog(echo=_echo))
        finally:
            await services.close()

    if _run_async(_start()):
        console.print("[bold green]Ollama server is running.[/bold green]")
    else:
        console.print("[bold red]Ollama server did not become ready.[/bold red]")
        raise typer.Exit(code=1)


@cli_app.command("pull")
def pull(model: str = typer.Argument(help="Model id, e.g. llama3.2:1b")):
    """Download a model into the local runtime."""
    async def _pull():
        services = build_services()
        try:
            channel = services.pulls.start(model)
            with Progress(
                TextColumn("[bold]{task.fields[model]}"),
                BarColumn(),
                TextColumn("{task.percentage:>5.1f}%"),
                TextColumn("[dim]{task.description}"),
                console=console,
            ) as progress:
                task_id = progress.add_task("", total=100, model=model)
                async for event in channel:
                    update = {"description": event.status[:60]}
                    if event.percent is not None:
                        update["completed"] = event.percent
                    progress.update(task_id, **update)
            return channel.last_event
        finally:
            await services.close()

    final = _run_async(_pull())
    if final is not None and final.phase is PullPhase.SUCCESS:
        console.print(f"[bold green]{model} is ready.[/bold green]")
    else:
        console.print(f"[bold red]Download failed: {final.status if final else 'no progress received'}[/bold red]")
        raise typer.Exit(code=1)


@cli_app.command("list")
def list_models():
    """List models installed in the local runtime."""
    async def _list():
        services = build_services()
        try:
            return await services.runtime.list_installed()
        finally:
            await services.close()

    names = _run_async(_list())
    if names is None:
        console.print("[yellow]Could not reach Ollama. Is it running?[/yellow]")
        raise typer.Exit(code=1)
    if not names:
        console.print("[dim]No models installed.[/dim]")
        return
    for name in names:
        console.print(f"  {name}")


@cli_app.command("delete")
def delete(name: str = typer.Argument(help="Installed model name")):
    """Delete one installed model."""
    async def _delete():
        services = build_services()
        try:
            return await services.runtime.delete_model(name)
        finally:
            await services.close()

    if _run_async(_delete()):
        console.print(f"[bold]Deleted {name}.[/bold]")
    else:
        console.print(f"[yellow]Could not delete '{name}'.[/yellow]")
        raise typer.Exit(code=1)


def _print_catalog(entries, title: str) -> None:
    if not entries:
        console.print("[dim]No models found.[/dim]")
        return
    table = Table(title=title)
    table.add_column("Model", style="cyan")
    table.add_column("Size", justify="right")
    table.add_column("Description")
    table.add_column("Source", style="dim")
    for entry in entries:
        table.add_row(entry.id, _format_size(entry.size_bytes), entry.description, entry.source.value)
    console.print(table)


@cli_app.command("search")
def search(
    query: str = typer.Argument(help="Search terms; every term must match"),
    limit: int = typer.Option(25, "--limit", "-n"),
):
    """Search the model catalog."""
    async def _search():
        services = build_services()
        try:
            return await services.catalog.search(query, limit)
        finally:
            await services.close()

    _print_catalog(_run_async(_search()), f"Models matching '{query}'")


@cli_app.command("top")
def top(limit: int = typer.Option(25, "--limit", "-n")):
    """Show the head of the model catalog."""
    async def _top():
        services = build_services()
        try:
            return await services.catalog.list_top(limit)
        finally:
            await services.close()

    _print_catalog(_run_async(_top()), "Model catalog")


@cli_app.command("reset")
def reset(yes: bool = typer.Option(False, "--yes", help="Skip the confirmation prompt")):
    """Delete all models, uninstall Ollama and restart onboarding."""
    if not yes:
        typer.confirm("This removes every model, Ollama itself and all app data. Continue?", abort=True)

    async def _reset():
        services = build_services()
        try:
            return await services.reset.reset_everything(StatusLog(echo=_echo))
        finally:
            await services.close()

    result = _run_async(_reset())
    if result.success:
        console.print(f"[bold green]{result.message}[/bold green]")
    else:
        console.print(f"[bold red]{result.message}[/bold red]")
        raise typer.Exit(code=1)


@cli_app.command("check-update")
def check_update():
    """Compare the installed Ollama version with the latest release."""
    async def _check():
        services = build_services()
        try:
            return await services.updates.check()
        finally:
            await services.close()

    result = _run_async(_check())
    if result.current_version is None:
        console.print("[yellow]Ollama version could not be determined.[/yellow]")
    elif result.needs_update:
        console.print(
            f"[bold yellow]Update available:[/bold yellow] {result.current_version} -> {result.latest_version}"
        )
    else:
        console.print(f"Ollama {result.current_version} is up to date.")


@cli_app.command("serve")
def serve(
    host: str = typer.Option("127.0.0.1", "--host"),
    port: int = typer.Option(8765, "--port"),
):
    """Run the HTTP API."""
    import uvicorn

    uvicorn.run("studio.main:app", host=host, port=port, log_level=settings.log_level.lower())


def main():
    cli_app()


if __name__ == "__main__":
    main()
