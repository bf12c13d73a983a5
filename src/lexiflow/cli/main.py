"""
LexiFlow CLI - Main entry point
"""

import json
import logging
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from lexiflow.core.config.settings import settings
from lexiflow.core.exceptions.custom_exceptions import LexiFlowError
from lexiflow.core.logging.logger import get_logger
from lexiflow.documents.document import Document
from lexiflow.documents.language import Language
from lexiflow.pipelines.pipeline import Pipeline
from lexiflow.storage import DiskModelStore

app = typer.Typer(
    name="lexiflow",
    help="Language-scoped document processing pipelines",
    no_args_is_help=True,
    add_completion=False,
    rich_markup_mode="rich",
)

console = Console()
logger = get_logger(__name__)


def _parse_language(value: str) -> Language:
    try:
        return Language.parse(value)
    except ValueError:
        console.print(f"Unknown language: {value}", style="red")
        raise typer.Exit(1)


def _open_pipeline(
    language: Language, store_path: Optional[str], from_store: bool, version: int, tag: str
) -> Pipeline:
    store = DiskModelStore(store_path)
    try:
        if from_store:
            return Pipeline.from_store(language, version=version, tag=tag, store=store)
        return Pipeline.tokenizer_for(language, store=store)
    except LexiFlowError as e:
        console.print(f"Could not load pipeline: {e.message}", style="red")
        raise typer.Exit(1)


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose logging"),
) -> None:
    """
    LexiFlow CLI - Language-scoped document processing pipelines

    Run 'lexiflow --help' for available commands.
    """
    if verbose:
        logging.getLogger().setLevel(logging.DEBUG)
        logger.info("Verbose logging enabled")


@app.command()
def process(
    input_file: str = typer.Argument(..., help="Path to a UTF-8 text file."),
    language: str = typer.Option("en", "--language", "-l", help="Document language code."),
    store_path: Optional[str] = typer.Option(
        None, "--store", help="Model store directory (defaults to MODEL_STORE_PATH)."
    ),
    from_store: bool = typer.Option(
        False, "--from-store", help="Load the stored pipeline instead of a tokenizer pipeline."
    ),
    version: int = typer.Option(0, "--version", help="Stored pipeline version."),
    tag: str = typer.Option("", "--tag", help="Stored pipeline tag."),
    output_file: Optional[str] = typer.Option(
        None, "--output", "-o", help="Write the annotated document as JSON."
    ),
) -> None:
    """
    Process a text file through a pipeline and summarize the annotations.

    Examples:
      lexiflow process notes.txt --language en
      lexiflow process notes.txt --from-store --tag wiki -o notes.json
    """
    input_path = Path(input_file)
    if not input_path.exists():
        console.print(f"Input file not found: {input_file}", style="red")
        raise typer.Exit(1)

    lang = _parse_language(language)
    pipeline = _open_pipeline(lang, store_path, from_store, version, tag)

    document = Document(input_path.read_text(encoding="utf-8"), lang)
    pipeline.process_single(document)

    table = Table(title=f"Processed {input_path.name}")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", style="green")
    table.add_row("Language", lang.value)
    table.add_row("Stages", str(len(pipeline)))
    table.add_row("Sentences", str(document.spans_count))
    table.add_row("Tokens", str(document.tokens_count))
    table.add_row("Entities", str(document.entities_count))
    console.print(table)

    if output_file:
        output_path = Path(output_file)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(json.dumps(document.to_dict(), indent=2, ensure_ascii=False))
        console.print(f"Saved annotated document to {output_path}", style="green")


@app.command()
def models(
    language: str = typer.Option("en", "--language", "-l", help="Pipeline language code."),
    store_path: Optional[str] = typer.Option(
        None, "--store", help="Model store directory (defaults to MODEL_STORE_PATH)."
    ),
    version: int = typer.Option(0, "--version", help="Stored pipeline version."),
    tag: str = typer.Option("", "--tag", help="Stored pipeline tag."),
) -> None:
    """List the models of a stored pipeline."""
    lang = _parse_language(language)
    pipeline = _open_pipeline(lang, store_path, True, version, tag)

    table = Table(title=f"Pipeline {lang.value} v{pipeline.version} {tag}".rstrip())
    table.add_column("Kind", style="cyan")
    table.add_column("Language", style="yellow")
    table.add_column("Tag")
    table.add_column("Version", style="green")
    for descriptor in pipeline.get_models_descriptions():
        table.add_row(
            descriptor.kind, descriptor.language.value, descriptor.tag, str(descriptor.version)
        )
    console.print(table)


@app.command(name="version")
def show_version() -> None:
    """Show LexiFlow version information"""
    table = Table(title="LexiFlow Version Information")
    table.add_column("Component", style="cyan")
    table.add_column("Version", style="green")
    table.add_column("Environment", style="yellow")
    table.add_row(settings.APP_NAME, settings.APP_VERSION, settings.ENVIRONMENT)
    table.add_row("Model store", str(settings.model_store_dir), "Default")
    console.print(table)


if __name__ == "__main__":
    app()
