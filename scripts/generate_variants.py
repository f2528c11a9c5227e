#!/usr/bin/env python
"""
Generate exam variants from a JSON question file and save them with their
answer keys.

The saved variants file is the input expected by run_item_analysis.py.
"""

import json
from dataclasses import replace
from datetime import datetime
from pathlib import Path

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from exam_analysis.analysis.adapter import to_analysis_variant
from exam_analysis.core.data_models import Question
from exam_analysis.core.exceptions import ExamAnalysisError
from exam_analysis.integrity.report import analyze_variant_randomization
from exam_analysis.variants.config import ExamVariationConfig, load_config
from exam_analysis.variants.data_models import ExamVariationResult
from exam_analysis.variants.export import (
    build_answer_key,
    export_variant_for_exam,
)
from exam_analysis.variants.generator import generate_exam_variations
from exam_analysis.variants.presets import get_available_presets, get_preset

PROJECT_DIR = Path(__file__).parent.parent.absolute()
DEFAULT_OUTPUT_DIR = PROJECT_DIR / "reports" / "variants"

console = Console(force_terminal=True, legacy_windows=True)
app = typer.Typer()


def read_questions(input_path: Path) -> list[Question]:
    """Read a JSON list of questions (camelCase or snake_case keys)."""
    with open(input_path) as f:
        raw = json.load(f)
    if not isinstance(raw, list):
        console.print("[red]Question file must contain a JSON list[/red]")
        raise typer.Exit(1)
    try:
        return [Question.model_validate(item) for item in raw]
    except ValidationError as e:
        console.print(f"[red]Invalid question file:[/red]\n{e}")
        raise typer.Exit(1) from e


def resolve_config(
    preset: str | None,
    config_path: Path | None,
    seed: str | None,
    max_variations: int | None,
) -> ExamVariationConfig:
    if preset is not None and config_path is not None:
        console.print("[red]Use either --preset or --config, not both[/red]")
        raise typer.Exit(1)
    try:
        if preset is not None:
            config = get_preset(preset)
        else:
            config = load_config(config_path)
    except (ValueError, FileNotFoundError) as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1) from e

    if seed is not None:
        config = replace(config, seed=seed)
    if max_variations is not None:
        config = replace(config, max_variations=max_variations)
    return config


def print_variants_table(
    result: ExamVariationResult, questions: list[Question]
) -> None:
    table = Table(title="Generated Variants")
    table.add_column("#", justify="right")
    table.add_column("Variant ID", style="bold")
    table.add_column("Seed")
    table.add_column("Question Order")
    table.add_column("Answer Key")

    for variant in result.variants:
        order = " ".join(str(i + 1) for i in variant.metadata.question_order)
        key = "".join(
            e.correct_answer or "?" for e in build_answer_key(variant, questions)
        )
        table.add_row(
            str(variant.metadata.variant_number),
            variant.id,
            variant.metadata.seed,
            order,
            key,
        )

    console.print(table)


def save_variants(
    output_dir: Path,
    result: ExamVariationResult,
    questions: list[Question],
    exam_title: str,
) -> Path:
    output_dir.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    path = output_dir / f"{timestamp}_variants.json"

    analysis_variants = [
        to_analysis_variant(
            variant,
            questions,
            variant_code=str(variant.metadata.variant_number),
            exam_title=exam_title,
        )
        for variant in result.variants
    ]
    data = {
        "variants": [
            v.model_dump(mode="json", by_alias=True) for v in analysis_variants
        ],
        "exports": [
            export_variant_for_exam(v).model_dump(mode="json", by_alias=True)
            for v in result.variants
        ],
        "statistics": result.statistics.model_dump(mode="json", by_alias=True),
    }
    with open(path, "w") as f:
        json.dump(data, f, indent=2)
    return path


@app.command()
def main(
    input_path: Path = typer.Argument(
        ...,
        help="Path to JSON file with the question bank",
    ),
    preset: str | None = typer.Option(
        None,
        help=f"Variation preset ({', '.join(get_available_presets())})",
    ),
    config_path: Path | None = typer.Option(
        None,
        "--config",
        help="YAML variation config",
    ),
    seed: str | None = typer.Option(
        None,
        help="Base seed (derived from the questions when omitted)",
    ),
    max_variations: int | None = typer.Option(
        None,
        help="Number of variants to generate",
    ),
    exam_title: str = typer.Option(
        "Untitled Exam",
        help="Title stored with the variants",
    ),
    output_dir: Path = typer.Option(
        DEFAULT_OUTPUT_DIR,
        help="Directory for the variants JSON",
    ),
) -> None:
    """Generate exam variants and report how well they are randomized."""

    if not input_path.exists():
        console.print(f"[red]File not found: {input_path}[/red]")
        raise typer.Exit(1)

    questions = read_questions(input_path)
    config = resolve_config(preset, config_path, seed, max_variations)

    console.print(
        Panel(
            f"[bold]Variation Request[/bold]\n\n"
            f"File: [cyan]{input_path}[/cyan]\n"
            f"Questions: [cyan]{len(questions)}[/cyan]\n"
            f"Variants requested: [cyan]{config.max_variations}[/cyan]\n"
            f"Question order: [cyan]{config.randomize_question_order}[/cyan]\n"
            f"Option order: [cyan]{config.randomize_option_order}[/cyan]\n"
            f"Seed: [cyan]{config.seed or '(derived)'}[/cyan]",
            title="Configuration",
        )
    )

    try:
        result = generate_exam_variations(questions, config)
    except ExamAnalysisError as e:
        console.print(f"[red]{e.message}[/red]")
        raise typer.Exit(1) from e

    print_variants_table(result, questions)

    report = analyze_variant_randomization(
        questions, result.variants, exam_title=exam_title
    )
    overall = report.overall_similarity
    console.print(
        Panel(
            f"Question order similarity: [cyan]{overall.question_order_similarity:.1%}[/cyan]\n"
            f"Option order similarity: [cyan]{overall.option_order_similarity:.1%}[/cyan]\n"
            f"Combined: [cyan]{overall.combined_similarity:.1%}[/cyan]\n"
            f"Estimated possible variations: "
            f"[cyan]{result.statistics.estimated_total_possible_variations}[/cyan]",
            title="Randomization",
        )
    )
    for flag in report.flags:
        color = "red" if flag.severity == "ERROR" else "yellow"
        console.print(f"[{color}]{flag.message}[/{color}]: {flag.details}")
    for recommendation in report.recommendations:
        console.print(f"  - {recommendation}")

    path = save_variants(output_dir, result, questions, exam_title)
    console.print(f"Variants saved: [cyan]{path}[/cyan]")


if __name__ == "__main__":
    app()
