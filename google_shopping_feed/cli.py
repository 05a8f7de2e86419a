"""Command-line interface for the Google Shopping feed."""

import json
import logging
from pathlib import Path
from typing import Optional
import typer
from rich.console import Console
from rich.table import Table
from rich.json import JSON

from .catalog import Catalog
from .config import FeedConfig
from .context import FeedContext
from .exporter import FeedExporter
from .google_feed import build_registry
from .storage import InMemoryOverrideStore, SQLiteOverrideStore
from .taxonomy import TaxonomyClient, TaxonomyUnavailable

app = typer.Typer(
    name="google-feed",
    help="Google Shopping product feed CLI"
)
console = Console()


@app.callback()
def main(verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging")):
    """Google Shopping product feed CLI."""
    logging.basicConfig(level=logging.DEBUG if verbose else logging.WARNING)


def load_config(config_path: str) -> FeedConfig:
    """Load configuration from JSON file."""
    config_file = Path(config_path)
    if not config_file.exists():
        console.print(f"[red]Error: Config file not found: {config_path}[/red]")
        raise typer.Exit(1)

    with open(config_file) as f:
        config_data = json.load(f)

    return FeedConfig(**config_data)


def make_exporter(cfg: FeedConfig, taxonomy: TaxonomyClient, db: Optional[str] = None) -> FeedExporter:
    store = SQLiteOverrideStore(db) if db else InMemoryOverrideStore()
    return FeedExporter(build_registry(cfg, taxonomy), store=store)


@app.command()
def init(
    output: str = typer.Option("config.json", help="Output configuration file path")
):
    """Initialize a new configuration file with example values."""
    example_config = FeedConfig.model_config["json_schema_extra"]["example"]

    output_path = Path(output)
    with open(output_path, 'w') as f:
        json.dump(example_config, f, indent=2)

    console.print(f"[green]✓[/green] Configuration file created: {output}")
    console.print("\n[yellow]⚠ Please edit the brand and storefront URL for your store![/yellow]")


@app.command()
def validate(
    config: str = typer.Option("config.json", help="Configuration file path"),
):
    """Validate configuration file."""
    try:
        cfg = load_config(config)
    except typer.Exit:
        raise
    except Exception as e:
        console.print(f"[red]✗ Configuration error:[/red] {str(e)}")
        raise typer.Exit(1)
    console.print("[green]✓[/green] Configuration is valid!")
    console.print(f"\n[bold]Brand:[/bold] {cfg.store.brand}")
    console.print(f"[bold]Storefront:[/bold] {cfg.store.storefront_url or '-'}")
    console.print(f"[bold]Target Country:[/bold] {cfg.feed.target_country}")
    console.print(f"[bold]Shipping Countries:[/bold] {', '.join(cfg.shipping.countries)}")


@app.command()
def fields(
    config: str = typer.Option("config.json", help="Configuration file path"),
):
    """List the registered feed fields."""
    cfg = load_config(config)
    with TaxonomyClient(cfg.taxonomy) as taxonomy:
        registry = build_registry(cfg, taxonomy)

    table = Table(title="Feed Fields")
    table.add_column("Field", style="cyan")
    table.add_column("Kind", style="green")
    table.add_column("Default", style="yellow")

    for mapping in registry:
        default = "" if mapping.default is None else str(mapping.default)
        table.add_row(mapping.name, mapping.kind, default)

    console.print(table)


@app.command()
def export(
    catalog_file: str = typer.Argument(..., help="Catalog JSON file"),
    config: str = typer.Option("config.json", help="Configuration file path"),
    base_url: Optional[str] = typer.Option(None, help="Request URL used to build product links"),
    db: Optional[str] = typer.Option(None, help="SQLite override database"),
    output: Optional[str] = typer.Option(None, help="Output file for JSON (optional)"),
):
    """Build feed records for every product in a catalog file."""
    cfg = load_config(config)
    if not Path(catalog_file).exists():
        console.print(f"[red]Error: Catalog file not found: {catalog_file}[/red]")
        raise typer.Exit(1)

    catalog = Catalog.from_file(catalog_file)
    context = FeedContext(request_url=base_url) if base_url else None
    with TaxonomyClient(cfg.taxonomy) as taxonomy:
        records = make_exporter(cfg, taxonomy, db).export(catalog.products(), context)

    if output:
        with open(Path(output), 'w') as f:
            json.dump(records, f, indent=2, default=str)
        console.print(f"[green]✓[/green] Saved {len(records)} records to {output}")
    else:
        console.print(JSON(json.dumps(records, indent=2, default=str)))


@app.command()
def categories(
    config: str = typer.Option("config.json", help="Configuration file path"),
    search: Optional[str] = typer.Option(None, help="Only show categories containing this text"),
):
    """Print the valid google_product_category values."""
    cfg = load_config(config)
    with TaxonomyClient(cfg.taxonomy) as taxonomy:
        try:
            found = taxonomy.search(search) if search else taxonomy.categories()
        except TaxonomyUnavailable as e:
            console.print(f"[red]Error:[/red] {e}")
            raise typer.Exit(1)

    for category in found:
        console.print(category, highlight=False)
    console.print(f"\n[blue]{len(found)} categories[/blue]")


@app.command()
def serve(
    catalog_file: str = typer.Argument(..., help="Catalog JSON file"),
    config: str = typer.Option("config.json", help="Configuration file path"),
    db: str = typer.Option("google_products.db", help="SQLite override database"),
    host: str = typer.Option("0.0.0.0", help="Host to bind to"),
    port: int = typer.Option(8000, help="Port to bind to"),
):
    """Serve feed records and override editors over HTTP."""
    from fastapi import FastAPI
    import uvicorn
    from .router import get_feed_router
    from .telemetry import init_metrics

    cfg = load_config(config)
    init_metrics(console=True)
    logging.getLogger("google_shopping_feed").setLevel(logging.INFO)

    with TaxonomyClient(cfg.taxonomy) as taxonomy:
        feed_app = FastAPI(title="Google Shopping Feed")
        feed_app.include_router(
            get_feed_router(make_exporter(cfg, taxonomy, db), Catalog.from_file(catalog_file))
        )

        console.print(f"[green]Starting feed server on {host}:{port}[/green]")
        console.print(f"[blue]Fields: http://{host}:{port}/feed/fields[/blue]")

        uvicorn.run(feed_app, host=host, port=port)


if __name__ == "__main__":
    app()
