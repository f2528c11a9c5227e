#!/usr/bin/env python
"""
Submit a CSV of scanned answer strings to the analysis API and display the
item statistics.

The variants file is the JSON written by generate_variants.py.
"""

import json
from datetime import datetime
from pathlib import Path

import httpx
import matplotlib
import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from exam_analysis.analysis.data_models import ExamVariantForAnalysis
from exam_analysis.core.data import load_csv_to_student_responses
from exam_analysis.integrity.plotting import plot_similarity_heatmap

matplotlib.use("Agg")

PROJECT_DIR = Path(__file__).parent.parent.absolute()
DEFAULT_OUTPUT_DIR = PROJECT_DIR / "reports" / "analysis"
DEFAULT_BASE_URL = "http://127.0.0.1:8000"
DEFAULT_CONFIDENCE_LEVEL = 0.95

console = Console(force_terminal=True, legacy_windows=True)
app = typer.Typer()


def read_variants(variants_path: Path) -> list[ExamVariantForAnalysis]:
    with open(variants_path) as f:
        raw = json.load(f)
    items = raw["variants"] if isinstance(raw, dict) else raw
    return [ExamVariantForAnalysis.model_validate(item) for item in items]


def health_check(client: httpx.Client) -> None:
    """Abort if server is unreachable."""
    try:
        resp = client.get("/api/v1/health")
        resp.raise_for_status()
    except httpx.HTTPError as e:
        console.print(f"[red]Server health check failed: {e}[/red]")
        raise typer.Exit(1) from e


def post(client: httpx.Client, path: str, payload: dict[str, object]) -> object:
    """POST a request and return the decoded body, aborting on an error."""
    resp = client.post(path, json=payload)
    if resp.status_code >= 400:
        console.print(f"[red]Request to {path} failed (HTTP {resp.status_code}):[/red]")
        try:
            body = resp.json()
            console.print(f"  {body.get('message', body)}")
        except ValueError:
            console.print(f"  {resp.text}")
        raise typer.Exit(1)
    return resp.json()


def _fmt(value: object, spec: str = ".3f") -> str:
    return format(value, spec) if isinstance(value, (int, float)) else "-"


def print_questions_table(result: dict[str, object]) -> None:
    table = Table(title=str(result.get("examTitle", "Item Analysis")))
    table.add_column("Question", style="bold")
    table.add_column("Responses", justify="right")
    table.add_column("Difficulty", justify="right")
    table.add_column("Discrimination", justify="right")
    table.add_column("Point-Biserial", justify="right")
    table.add_column("p-value", justify="right")

    questions = result.get("questionResults", [])
    assert isinstance(questions, list)
    for q in questions:
        significance = q.get("statisticalSignificance") or {}
        table.add_row(
            str(q["questionText"])[:40],
            str(q["totalResponses"]),
            _fmt(q.get("difficultyIndex")),
            _fmt(q.get("discriminationIndex")),
            _fmt(q.get("pointBiserialCorrelation")),
            _fmt(significance.get("pValue"), ".4f"),
        )

    console.print(table)


def print_summary(result: dict[str, object]) -> None:
    summary = result.get("summary", {})
    assert isinstance(summary, dict)
    reliability = summary.get("reliabilityMetrics") or {}
    distribution = summary.get("scoreDistribution") or {}
    console.print(
        Panel(
            f"Mean score: [cyan]{_fmt(distribution.get('mean'), '.2f')}[/cyan]\n"
            f"Average difficulty: [cyan]{_fmt(summary.get('averageDifficulty'))}[/cyan]\n"
            f"Average discrimination: "
            f"[cyan]{_fmt(summary.get('averageDiscrimination'))}[/cyan]\n"
            f"Cronbach's alpha: [cyan]{_fmt(reliability.get('cronbachsAlpha'))}[/cyan]",
            title="Summary",
        )
    )


def save_report(output_dir: Path, data: dict[str, object]) -> Path:
    output_dir.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    path = output_dir / f"{timestamp}_analysis.json"
    with open(path, "w") as f:
        json.dump(data, f, indent=2, default=str)
    return path


@app.command()
def main(
    input_path: Path = typer.Argument(
        ...,
        help="CSV with student_id, variant_code and answer_string columns",
    ),
    variants_path: Path = typer.Option(
        ...,
        "--variants",
        help="Variants JSON written by generate_variants.py",
    ),
    url: str = typer.Option(
        DEFAULT_BASE_URL,
        help="Server base URL",
    ),
    confidence_level: float = typer.Option(
        DEFAULT_CONFIDENCE_LEVEL,
        help="Confidence level for significance tests",
    ),
    min_sample_size: int | None = typer.Option(
        None,
        help="Minimum number of responses required",
    ),
    by_variant: bool = typer.Option(
        False,
        help="Also analyze each variant separately",
    ),
    integrity: bool = typer.Option(
        False,
        help="Compute student similarity and save a heatmap",
    ),
    output_dir: Path = typer.Option(
        DEFAULT_OUTPUT_DIR,
        help="Directory for JSON report output",
    ),
) -> None:
    """Run item analysis for scanned exam responses."""

    # 1. Validate input
    for path in (input_path, variants_path):
        if not path.exists():
            console.print(f"[red]File not found: {path}[/red]")
            raise typer.Exit(1)
    if input_path.suffix != ".csv":
        console.print("[red]Only .csv files are supported[/red]")
        raise typer.Exit(1)

    # 2. Read variants and responses
    variants = read_variants(variants_path)
    question_ids_by_variant = {
        str(v.variant_code): [q.id for q in v.questions] for v in variants
    }
    points = {q.id: q.points for v in variants for q in v.questions}
    try:
        responses = load_csv_to_student_responses(
            input_path, question_ids_by_variant, points
        )
    except ValueError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1) from e

    console.print(
        Panel(
            f"[bold]Analysis Request[/bold]\n\n"
            f"File: [cyan]{input_path}[/cyan]\n"
            f"Students: [cyan]{len(responses)}[/cyan]\n"
            f"Variants: [cyan]{len(variants)}[/cyan]\n"
            f"Server: [cyan]{url}[/cyan]",
            title="Configuration",
        )
    )

    # 3. Health check
    client = httpx.Client(base_url=url, timeout=120.0)
    health_check(client)
    console.print("[green]Server is healthy[/green]")

    # 4. Pooled analysis
    config: dict[str, object] = {"confidenceLevel": confidence_level}
    if min_sample_size is not None:
        config["minSampleSize"] = min_sample_size
    payload: dict[str, object] = {
        "variants": [v.model_dump(mode="json", by_alias=True) for v in variants],
        "responses": [r.model_dump(mode="json", by_alias=True) for r in responses],
        "config": config,
    }
    with console.status("[bold cyan]Analyzing responses..."):
        result = post(client, "/api/v1/analysis", payload)
    assert isinstance(result, dict)
    print_questions_table(result)
    print_summary(result)
    report: dict[str, object] = {"pooled": result}

    # 5. Per-variant analysis
    if by_variant:
        per_variant = post(client, "/api/v1/analysis/variants", payload)
        assert isinstance(per_variant, list)
        for variant_result in per_variant:
            print_questions_table(variant_result)
        report["byVariant"] = per_variant

    # 6. Integrity
    if integrity:
        integrity_payload = {
            "variants": payload["variants"],
            "responses": payload["responses"],
        }
        integrity_result = post(client, "/api/v1/analysis/integrity", integrity_payload)
        assert isinstance(integrity_result, dict)
        report["integrity"] = integrity_result

        output_dir.mkdir(parents=True, exist_ok=True)
        fig = plot_similarity_heatmap(
            integrity_result["studentSimilarity"], title="Student similarity"
        )
        heatmap_path = output_dir / "student_similarity.png"
        fig.savefig(heatmap_path)
        console.print(f"Heatmap saved: [cyan]{heatmap_path}[/cyan]")

    # 7. Save report
    report_path = save_report(output_dir, report)
    console.print(f"Report saved: [cyan]{report_path}[/cyan]")


if __name__ == "__main__":
    app()
