import asyncio
import logging
from dataclasses import replace

from typer import Argument, BadParameter, Option, Typer
from typing import Annotated
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from .catalog import JsonFileCatalog
from .config import SearchSettings, resolve_db_path
from .controller import create_controller
from .models import BusinessType, Notice, SearchResult
from .storage import DuckDBKeyValueStore
from .suggestions import SuggestionStore, popular_searches

app = Typer(help="Search a storefront catalog from the command line.")


def _open_store(db_path: str | None, business_type: BusinessType) -> tuple[DuckDBKeyValueStore, SuggestionStore]:
    kv_store = DuckDBKeyValueStore(resolve_db_path(db_path))
    return kv_store, SuggestionStore(kv_store, fallback_trending=popular_searches(business_type))


def render_result(console: Console, query: str, result: SearchResult) -> None:
    table = Table(title=f"Results for '{query}'", title_justify="left")
    table.add_column("#", justify="right")
    table.add_column("Product")
    table.add_column("Brand")
    table.add_column("Category")
    table.add_column("Price", justify="right")
    table.add_column("Rx")
    table.add_column("Match")
    table.add_column("Score", justify="right")
    for position, hit in enumerate(result.products, start=1):
        product = hit.product
        table.add_row(
            str(position),
            product.name,
            product.brand or "",
            product.category,
            f"{product.price:.2f}",
            "yes" if product.requires_rx else "",
            hit.match_reason,
            str(hit.relevance_score),
        )
    console.print(table)

    summary = [
        f"[bold]Matches:[/] {result.total_count}",
        f"[bold]Confidence:[/] {result.confidence:.2f}",
        f"[bold]Categories:[/] {', '.join(result.categories) or '-'}",
    ]
    if result.search_type is not None:
        summary.append(f"[bold]Search type:[/] {result.search_type}")
    if result.ai_explanation:
        summary.append(f"[bold]Explanation:[/] {result.ai_explanation}")
    if result.suggestions:
        summary.append(f"[bold]Try also:[/] {', '.join(result.suggestions)}")
    console.print(Panel("\n".join(summary), title="Summary", title_align="left", border_style="bold green"))


async def run_search(
    query: str,
    catalog_path: str,
    *,
    tenant_id: str,
    business_type: BusinessType,
    db_path: str | None = None,
    use_ai: bool = True,
) -> SearchResult | None:
    console = Console()
    notices: list[Notice] = []
    results: list[SearchResult] = []
    kv_store, store = _open_store(db_path, business_type)
    settings = SearchSettings.from_env()
    if not use_ai:
        settings = replace(settings, ai_enabled=False)
    try:
        controller = create_controller(
            JsonFileCatalog(catalog_path),
            store,
            sink=results.append,
            notify=notices.append,
            tenant_id=tenant_id,
            business_type=business_type,
            settings=settings,
        )
        with console.status(status="Searching..."):
            await controller.on_submit(query)
            await controller.drain()
    finally:
        kv_store.close()

    for notice in notices:
        style = "bold red" if notice.level == "error" else "bold yellow"
        body = notice.message if notice.description is None else f"{notice.message}\n{notice.description}"
        console.print(Panel(body, title="Notice", title_align="left", border_style=style))
    if not results:
        return None
    render_result(console, query, results[-1])
    return results[-1]


@app.callback()
def main(
    log_level: Annotated[
        str,
        Option("--log-level", help="Logging level for the search subsystem."),
    ] = "WARNING",
) -> None:
    logging.basicConfig(
        level=log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@app.command()
def search(
    query: Annotated[str, Argument(help="Text to search for.")],
    catalog: Annotated[
        str,
        Option("--catalog", "-c", help="JSON file holding the product catalog."),
    ],
    tenant: Annotated[str, Option("--tenant", "-t", help="Tenant whose products are searched.")] = "default",
    business_type: Annotated[
        str,
        Option("--business-type", "-b", help="pharmacy, grocery or general."),
    ] = "pharmacy",
    db_path: Annotated[str | None, Option("--db-path", help="DuckDB file for search history.")] = None,
    no_ai: Annotated[bool, Option("--no-ai", help="Skip AI-assisted query analysis.")] = False,
) -> None:
    """Run one immediate search and print the ranked products."""
    if business_type not in ("pharmacy", "grocery", "general"):
        raise BadParameter(f"Unknown business type: {business_type}")
    asyncio.run(
        run_search(
            query,
            catalog,
            tenant_id=tenant,
            business_type=business_type,  # type: ignore[arg-type]
            db_path=db_path,
            use_ai=not no_ai,
        )
    )


@app.command()
def history(
    db_path: Annotated[str | None, Option("--db-path", help="DuckDB file for search history.")] = None,
    business_type: Annotated[str, Option("--business-type", "-b")] = "pharmacy",
) -> None:
    """Show recent searches and the merged suggestion list."""
    console = Console()
    kv_store, store = _open_store(db_path, business_type)  # type: ignore[arg-type]
    try:
        entries = store.history()
        suggestions = store.merged_suggestions()
    finally:
        kv_store.close()

    table = Table(title="Recent searches", title_justify="left")
    table.add_column("Query")
    table.add_column("Results", justify="right")
    table.add_column("Timestamp", justify="right")
    for entry in entries:
        table.add_row(entry.query, str(entry.results), str(entry.timestamp))
    console.print(table)
    console.print(
        Panel(
            "\n".join(f"{i}. {s}" for i, s in enumerate(suggestions)) or "No suggestions",
            title="Suggestions",
            title_align="left",
            border_style="bold cyan",
        )
    )


@app.command("clear-history")
def clear_history(
    db_path: Annotated[str | None, Option("--db-path", help="DuckDB file for search history.")] = None,
) -> None:
    """Forget every recorded search."""
    kv_store, store = _open_store(db_path, "general")
    try:
        store.clear_history()
    finally:
        kv_store.close()
    Console().print("[bold green]Search history cleared[/]")


@app.command()
def trending(
    terms: Annotated[list[str], Argument(help="Trending terms, most popular first.")],
    db_path: Annotated[str | None, Option("--db-path", help="DuckDB file for search history.")] = None,
) -> None:
    """Replace the trending search terms."""
    kv_store, store = _open_store(db_path, "general")
    try:
        store.set_trending(terms)
        saved = store.trending()
    finally:
        kv_store.close()
    Console().print(f"[bold green]Trending terms saved:[/] {', '.join(saved)}")
