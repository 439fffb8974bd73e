import asyncio
import typer
from rich.console import Console
from rich.syntax import Syntax
from rich.table import Table

from livegraph.core.config import settings
from livegraph.core.exceptions import GraphSyncError
from livegraph.core.logging import configure_logging
from livegraph.db.graph_store import GraphStore
from livegraph.models.graph import GraphDelta
from livegraph.services.sync_service import SyncService
from livegraph.services.transport_client import TransportClient

cli_app = typer.Typer()
console = Console()

def _delta_table(cycle: int, delta: GraphDelta, store: GraphStore) -> Table:
    table = Table(title=f"Poll {cycle} (version {store.version})", show_header=True)
    table.add_column("Change")
    table.add_column("Identities")
    rows = [
        ("+ vertices", [str(v.id) for v in delta.added_vertices]),
        ("- vertices", [str(v.id) for v in delta.removed_vertices]),
        ("+ edges", [f"{e.source} -> {e.target}" for e in delta.added_edges]),
        ("- edges", [f"{e.source} -> {e.target}" for e in delta.removed_edges]),
    ]
    for label, items in rows:
        if items:
            table.add_row(label, ", ".join(items))
    return table

@cli_app.command()
def snapshot(
    endpoint: str = typer.Option(None, "--endpoint", "-e", help="JSON-RPC endpoint of the graph provider."),
    method: str = typer.Option(None, "--method", "-m", help="RPC method returning the graph."),
):
    """
    Fetches the graph once and prints the decoded snapshot.
    """
    configure_logging(settings.LOG_LEVEL)

    async def main():
        async with TransportClient(endpoint_url=endpoint, rpc_method=method) as transport:
            return await transport.fetch_snapshot()

    try:
        graph = asyncio.run(main())
    except GraphSyncError as exc:
        console.print(f"[bold red]Error:[/bold red] {exc.message}")
        raise typer.Exit(code=1)

    console.print(f"[cyan]{len(graph.vertices)} vertices, {len(graph.edges)} edges[/cyan]")
    console.print(Syntax(graph.model_dump_json(indent=2), "json", theme="solarized-dark"))

@cli_app.command()
def poll(
    endpoint: str = typer.Option(None, "--endpoint", "-e", help="JSON-RPC endpoint of the graph provider."),
    method: str = typer.Option(None, "--method", "-m", help="RPC method returning the graph."),
    interval_ms: int = typer.Option(None, "--interval-ms", "-i", help="Delay between polls in milliseconds."),
    mode: str = typer.Option(None, "--mode", help="'snapshot' or 'delta'."),
    cycles: int = typer.Option(None, "--cycles", "-n", help="Stop after this many polls."),
):
    """
    Runs the sync loop without a layout and prints each applied delta.
    """
    configure_logging(settings.LOG_LEVEL)
    if mode not in (None, "snapshot", "delta"):
        console.print("[bold red]Error:[/bold red] --mode must be 'snapshot' or 'delta'.")
        raise typer.Exit(code=2)

    async def main():
        store = GraphStore(strict=settings.STRICT_RECONCILIATION)
        async with TransportClient(endpoint_url=endpoint, rpc_method=method) as transport:
            service = SyncService(
                transport,
                store,
                poll_interval=interval_ms / 1000 if interval_ms else None,
                mode=mode,
            )

            def report(delta: GraphDelta | None) -> None:
                if delta is not None and not delta.is_empty:
                    console.print(_delta_table(service.cycles, delta, store))

            await service.run(cycles=cycles, on_cycle=report)
            console.print(f"[green]{len(store)} vertices, {len(store.edges)} edges after {service.cycles} polls.[/green]")

    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        console.print("[yellow]Stopped.[/yellow]")

@cli_app.command()
def serve(
    host: str = typer.Option("127.0.0.1", "--host", help="Interface to bind."),
    port: int = typer.Option(8000, "--port", "-p", help="Port to bind."),
):
    """
    Serves the live graph to renderers while polling the provider in the background.
    """
    import uvicorn

    configure_logging(settings.LOG_LEVEL)
    uvicorn.run("livegraph.main:app", host=host, port=port, log_config=None)


if __name__ == "__main__":
    cli_app()
