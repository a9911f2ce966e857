"""Command-line interface for conceptgen."""

# Load .env before anything reads os.environ
from dotenv import load_dotenv
load_dotenv()

import json
import logging
import sys
from enum import Enum
from pathlib import Path
from typing import Optional

import structlog
import typer
from pydantic import ValidationError
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from conceptgen.indexing.scanner import ScanError
from conceptgen.llm.oracle import OllamaOracle
from conceptgen.pipeline import DiscoveryError, PipelineOptions, run_pipeline

# Configure structlog for CLI
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.JSONRenderer(),
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)

app = typer.Typer(
    name="conceptgen",
    help="conceptgen - Generate Dubberly-style concept models from a codebase",
    add_completion=False,
)
console = Console()


class Mode(str, Enum):
    models = "models"
    sheets = "sheets"


@app.command()
def analyze(
    repo_path: Path = typer.Argument(
        Path("."),
        help="Path to the repository to analyze",
        exists=True,
        file_okay=False,
        dir_okay=True,
        resolve_path=True,
    ),
    out_dir: Optional[str] = typer.Option(
        None,
        "--out-dir",
        help="Output directory relative to the repository (default: docs/domain/concepts)",
    ),
    clean: bool = typer.Option(False, "--clean", help="Remove existing Markdown documents first"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose logging"),
    max_discovery_iterations: Optional[int] = typer.Option(
        None,
        "--max-discovery-iterations",
        min=1,
        help="Maximum concept discovery iterations (sheets mode)",
    ),
    name: Optional[str] = typer.Option(None, "--name", help="Override the discovered project name"),
    publish: bool = typer.Option(
        True,
        "--publish/--no-publish",
        help="Publish the project to the viewer registry",
    ),
    mode: Mode = typer.Option(Mode.models, "--mode", help="Pipeline shape to run"),
    max_models: Optional[int] = typer.Option(
        None,
        "--max-models",
        min=1,
        help="Only enrich the first N discovered models",
    ),
    rationalize: bool = typer.Option(
        False,
        "--rationalize",
        help="Consolidate bounded contexts across concepts",
    ),
) -> None:
    """Analyze a repository and generate its concept model."""
    from conceptgen.config import get_settings

    settings = get_settings()
    logging.basicConfig(level=logging.DEBUG if verbose else logging.WARNING)

    console.print(
        Panel.fit(
            "[bold blue]conceptgen[/bold blue]\n"
            f"Generating concept {'model' if mode == Mode.models else 'sheets'}...",
            border_style="blue",
        )
    )

    out_dir = out_dir or settings.out_dir
    console.print(f"\n[dim]Repository:[/dim] {repo_path}")
    console.print(f"[dim]Output:[/dim] {repo_path / out_dir}\n")

    oracle = OllamaOracle()

    try:
        console.print("[yellow]Processing repository... (this may take a few minutes)[/yellow]\n")

        if mode == Mode.sheets:
            from conceptgen.sheets import run_sheet_pipeline

            state = run_sheet_pipeline(
                oracle,
                repo_path,
                out_dir=out_dir,
                max_iterations=max_discovery_iterations,
                clean=clean,
                settings=settings,
            )
            console.print("[green]Processing complete![/green]")
            _display_sheet_summary(state)
        else:
            options = PipelineOptions(
                repo_root=repo_path,
                out_dir=out_dir,
                clean=clean,
                publish=publish,
                rationalize=rationalize,
                max_models=max_models,
                project_name=name,
            )
            result = run_pipeline(oracle, options, settings)
            console.print("[green]Processing complete![/green]")
            _display_model_summary(result)

    except (DiscoveryError, ScanError) as e:
        console.print(f"\n[red]Error:[/red] {e}")
        if verbose:
            console.print_exception()
        sys.exit(1)

    except Exception as e:
        console.print(f"\n[red]Unexpected error:[/red] {e}")
        if verbose:
            console.print_exception()
        sys.exit(1)


@app.command()
def validate(
    artifact_path: Path = typer.Argument(
        ...,
        help="Path to a project-model.json file",
        exists=True,
        file_okay=True,
        dir_okay=False,
        readable=True,
    ),
    strict: bool = typer.Option(False, "--strict", help="Exit non-zero when integrity issues exist"),
) -> None:
    """Validate a persisted project and report integrity issues."""
    from conceptgen.processing import audit_model
    from conceptgen.storage import load_project

    try:
        project = load_project(artifact_path)
    except json.JSONDecodeError as e:
        console.print(f"[red]Invalid JSON:[/red] {e}")
        sys.exit(1)
    except ValidationError as e:
        console.print(f"[red]Validation failed:[/red] {e.error_count()} error(s)")
        for error in e.errors()[:10]:
            location = " -> ".join(str(p) for p in error["loc"])
            console.print(f"  [dim]{location}:[/dim] {error['msg']}")
        sys.exit(1)

    issues = [issue for model in project.models for issue in audit_model(model)]

    console.print(
        f"[green]Validation successful![/green] {project.name}: "
        f"{len(project.models)} model(s), "
        f"{sum(len(m.concepts) for m in project.models)} concept(s)"
    )

    if not issues:
        console.print("[green]No integrity issues found.[/green]")
        return

    table = Table(title=f"Integrity Issues ({len(issues)})")
    table.add_column("Kind", style="yellow")
    table.add_column("Model", style="dim")
    table.add_column("Subject")
    table.add_column("Message")
    for issue in issues:
        table.add_row(issue.kind.value, issue.model_id, issue.subject_id or "-", issue.message)
    console.print(table)

    if strict:
        sys.exit(1)


@app.command()
def info() -> None:
    """Display system information and configuration."""
    from conceptgen import __version__
    from conceptgen.config import get_settings
    from conceptgen.llm.client import get_llm_settings

    settings = get_settings()
    llm_settings = get_llm_settings()

    console.print(Panel.fit("[bold blue]conceptgen[/bold blue]", border_style="blue"))

    table = Table(show_header=False, box=None)
    table.add_column("Setting", style="dim")
    table.add_column("Value")

    table.add_row("Version", __version__)
    table.add_row("LLM Model", llm_settings.model_name)
    table.add_row("Ollama URL", llm_settings.ollama_base_url)
    table.add_row("Temperature", str(llm_settings.temperature))
    table.add_row("Context Window", str(llm_settings.num_ctx))
    table.add_row("Max Attempts", str(llm_settings.max_attempts))
    table.add_row("Source Dir", settings.source_dir)
    table.add_row("Extensions", ", ".join(settings.source_extensions))
    table.add_row("Snippet Budget", f"{settings.snippet_max_files} files x {settings.snippet_max_chars} chars")
    table.add_row("Discovery Iterations", str(settings.max_discovery_iterations))
    table.add_row("Output Dir", settings.out_dir)
    table.add_row("Viewer Models Dir", str(settings.viewer_models_dir))

    console.print(table)


def _display_model_summary(result: dict) -> None:
    """Display a summary of a staged-model run.

    Args:
        result: Final pipeline state.
    """
    project = result.get("project") or {}
    models = project.get("models", [])

    console.print("\n[bold]Analysis Summary[/bold]")
    console.print("-" * 40)
    console.print(f"[dim]Project:[/dim] {project.get('name', 'N/A')}")

    table = Table(show_header=False, box=None)
    table.add_column("Metric", style="dim")
    table.add_column("Count", justify="right")

    table.add_row("Models", str(len(models)))
    table.add_row("Concepts", str(sum(len(m.get("concepts", [])) for m in models)))
    table.add_row("Relationships", str(sum(len(m.get("relationships", [])) for m in models)))
    table.add_row("Views", str(sum(len(m.get("views", [])) for m in models)))
    table.add_row("Stories", str(sum(len(m.get("storyViews", [])) for m in models)))
    console.print(table)

    warnings = result.get("warnings", [])
    issues = result.get("integrity_issues", [])
    if warnings:
        console.print(f"\n[yellow]Warnings:[/yellow] {len(warnings)}")
        for warning in warnings[:10]:
            console.print(f"  [dim]{warning.get('stage')}:[/dim] {warning.get('message')}")
    if issues:
        console.print(f"[yellow]Integrity issues:[/yellow] {len(issues)} (run 'conceptgen validate' for details)")

    console.print(f"\n[green]Project saved to:[/green] {result.get('artifact_path')}")
    if result.get("published_path"):
        console.print(f"[green]Published to:[/green] {result['published_path']}")
    console.print(f"[dim]{result.get('llm_calls_count', 0)} LLM calls[/dim]")


def _display_sheet_summary(state) -> None:
    """Display a summary of a concept sheet run."""
    console.print("\n[bold]Analysis Summary[/bold]")
    console.print("-" * 40)

    contexts = {s.metadata.bounded_context for s in state.sheets if s.metadata.bounded_context}
    table = Table(show_header=False, box=None)
    table.add_column("Metric", style="dim")
    table.add_column("Count", justify="right")
    table.add_row("Concepts", str(len(state.sheets)))
    table.add_row("Bounded Contexts", str(len(contexts)))
    table.add_row("Discovery Iterations", str(len((state.discovery_trace or {}).get("iterations", []))))
    console.print(table)

    if state.warnings:
        console.print(f"\n[yellow]Warnings:[/yellow] {len(state.warnings)}")

    console.print(f"\n[green]Concept model saved to:[/green] {state.artifact_path}")
    console.print(f"[dim]{state.llm_calls_made} LLM calls[/dim]")


if __name__ == "__main__":
    app()
