"""
Recipe Intake - CLI Entry Point.

Usage:
    recipe-intake import URL_OR_TEXT      Import a recipe from a link or pasted text
    recipe-intake import --file card.jpg  Import a recipe from a photo
    recipe-intake classify INPUT          Show how an input would be classified
    recipe-intake health                  Check configuration and OCR tooling
    recipe-intake --help                  Show help
"""

import asyncio
import json
import mimetypes
from pathlib import Path

import typer
from rich.console import Console
from rich.live import Live
from rich.panel import Panel
from rich.spinner import Spinner
from rich.table import Table

app = typer.Typer(
    name="recipe-intake",
    help="Recipe Intake - turn links, text and photos into structured recipes.",
    add_completion=False,
)
console = Console()


def _load_input(source: str | None, file: Path | None):
    from recipe_intake.recipe_import import BinaryFileRef

    if file is not None:
        if not file.is_file():
            console.print(f"[red]File not found: {file}[/red]")
            raise typer.Exit(1)
        data = file.read_bytes()
        mime_type, _ = mimetypes.guess_type(file.name)
        return BinaryFileRef(name=file.name, mime_type=mime_type, size=len(data), data=data)

    if not source:
        console.print("[red]Give a URL or recipe text, or use --file for an image.[/red]")
        raise typer.Exit(1)
    return source


def _format_amount(quantity: float | None, unit: str | None) -> str:
    if quantity is None:
        return unit or ""
    amount = f"{quantity:g}"
    return f"{amount} {unit}" if unit else amount


def _print_recipe(imported) -> None:
    draft = imported.draft
    recovery = imported.recovery
    extraction = imported.extraction

    console.print(
        Panel.fit(
            f"[bold green]{draft.title}[/bold green]\n"
            f"[dim]{extraction.source} via {', '.join(extraction.extraction_methods)}[/dim]",
            title="Imported",
            border_style="green",
        )
    )

    table = Table(title="Ingredients", show_lines=False)
    table.add_column("Amount", justify="right")
    table.add_column("Ingredient")
    table.add_column("Notes", style="dim")
    table.add_column("Conf", justify="right")
    for ingredient in recovery.recovered_ingredients:
        name = ingredient.name
        if ingredient.inferred:
            name = f"[yellow]{name}[/yellow]"
        if ingredient.optional:
            name = f"{name} [dim](optional)[/dim]"
        table.add_row(
            _format_amount(ingredient.quantity, ingredient.unit),
            name,
            ingredient.notes or "",
            f"{ingredient.confidence:.2f}",
        )
    console.print(table)

    if draft.instructions:
        console.print("\n[bold]Instructions[/bold]")
        for i, step in enumerate(draft.instructions, 1):
            console.print(f"  {i}. {step}")

    if draft.nutrition:
        console.print("\n[bold]Nutrition[/bold]")
        for key, value in draft.nutrition.items():
            console.print(f"  • {key}: {value}")

    for issue in recovery.inconsistencies:
        console.print(f"[yellow]⚠ {issue.ingredient_name}: {issue.detail} ({issue.severity.value})[/yellow]")
    for warning in imported.warnings:
        console.print(f"[yellow]⚠ {warning}[/yellow]")
    for hint in imported.hints:
        console.print(f"[dim]💡 {hint}[/dim]")

    console.print(f"\n[bold]Confidence:[/bold] {recovery.confidence:.2f}")


@app.command("import")
def import_recipe(
    source: str | None = typer.Argument(None, help="Recipe URL or pasted recipe text"),
    file: Path | None = typer.Option(None, "--file", "-f", help="Image (or video) file to import"),
    as_json: bool = typer.Option(False, "--json", help="Print the full result as JSON"),
    no_ai: bool = typer.Option(False, "--no-ai", help="Heuristic parsing only, no AI quantity inference"),
    log_prompts: bool = typer.Option(False, "--log-prompts", "-l", help="Log all LLM prompts to prompt_logs/"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
) -> None:
    """Import a recipe from a URL, pasted text, or an image."""
    from recipe_intake.config import setup_logging
    from recipe_intake.llm.prompt_logger import enable_prompt_logging, get_session_log_dir
    from recipe_intake.pipeline import RecipeImporter
    from recipe_intake.recipe_import import ExtractionFailed, InputRejected
    from recipe_intake.recovery import RecoveryOptions

    setup_logging(verbose)
    if log_prompts:
        enable_prompt_logging(True)

    raw_input = _load_input(source, file)
    importer = RecipeImporter(use_llm_parser=False if no_ai else None)
    recovery_options = RecoveryOptions(use_ai_for_inference=not no_ai)

    try:
        with Live(Spinner("dots", text="Importing..."), console=console, transient=True):
            imported = asyncio.run(importer.import_recipe(raw_input, recovery_options=recovery_options))
    except InputRejected as e:
        for error in e.errors:
            console.print(f"[red]❌ {error}[/red]")
        raise typer.Exit(1)
    except ExtractionFailed as e:
        console.print(f"[red]❌ {e.user_message}[/red]")
        for attempt in e.attempts:
            console.print(f"[dim]   {attempt.method}: {attempt.error}[/dim]")
        raise typer.Exit(1)

    if as_json:
        console.print_json(json.dumps(imported.to_dict(), default=str))
    else:
        _print_recipe(imported)

    if log_prompts:
        log_dir = get_session_log_dir()
        if log_dir:
            console.print(f"\n[dim]📝 Prompts logged to: {log_dir}[/dim]")


@app.command()
def classify(
    source: str | None = typer.Argument(None, help="Recipe URL or pasted recipe text"),
    file: Path | None = typer.Option(None, "--file", "-f", help="File to classify"),
) -> None:
    """Show how an input would be classified and validated."""
    from recipe_intake.recipe_import import classify as classify_input
    from recipe_intake.recipe_import import get_platform_hints, validate_input

    raw_input = _load_input(source, file)
    detection = classify_input(raw_input)
    validation = validate_input(raw_input, detection)

    console.print(f"\n[bold]Type:[/bold] {detection.type.value} ({detection.confidence:.2f})")
    for key, value in vars(detection.metadata).items():
        if value is not None:
            console.print(f"   {key}: {value}")

    if validation.is_valid:
        console.print("✅ Valid input")
    for error in validation.errors:
        console.print(f"[red]❌ {error}[/red]")
    for warning in validation.warnings:
        console.print(f"[yellow]⚠ {warning}[/yellow]")
    for hint in get_platform_hints(detection):
        console.print(f"[dim]💡 {hint}[/dim]")


@app.command()
def health() -> None:
    """Check configuration and OCR tooling."""
    from recipe_intake.config import get_settings
    from recipe_intake.ocr import OcrEngine

    console.print("\n[bold]Recipe Intake Health Check[/bold]\n")

    try:
        settings = get_settings()
        console.print("✅ Configuration loaded")
        console.print(f"   Environment: {settings.intake_env}")
        console.print(f"   Log level: {settings.log_level}")

        if settings.openai_api_key and settings.openai_api_key.startswith("sk-"):
            console.print("✅ OpenAI API key configured (LLM parsing, vision OCR, AI inference)")
        elif settings.openai_api_key:
            console.print("⚠️  OpenAI API key may be invalid")
        else:
            console.print("ℹ️  No OpenAI API key - heuristic parsing and Tesseract OCR only")

        for provider in OcrEngine().providers:
            mark = "✅" if provider.is_available() else "❌"
            console.print(f"{mark} OCR provider: {provider.name}")

        console.print(f"   Reader proxy: {settings.reader_proxy_url}")
        console.print("\n[green]All checks passed![/green]")

    except Exception as e:
        console.print(f"\n[red]❌ Configuration error: {e}[/red]")
        console.print("[dim]Check your .env file.[/dim]")
        raise typer.Exit(1)


@app.command()
def version() -> None:
    """Show version information."""
    from recipe_intake import __version__

    console.print(f"Recipe Intake version {__version__}")


@app.command()
def serve(
    host: str = typer.Option("127.0.0.1", help="Bind address"),
    port: int = typer.Option(8000, help="Port"),
) -> None:
    """Run the HTTP API."""
    import uvicorn

    uvicorn.run("recipe_intake.web.app:app", host=host, port=port)


if __name__ == "__main__":
    app()
