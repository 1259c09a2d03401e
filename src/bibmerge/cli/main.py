"""Command-line interface for bibmerge.

Provides CLI commands for deduplicating source batches and for
inspecting pairwise match decisions.
"""

import importlib.metadata
import json
import sys
from pathlib import Path
from typing import TYPE_CHECKING, Any

import click

if TYPE_CHECKING:
    from bibmerge.engine import DedupConfig, DeduplicationPipeline

__all__ = ["cli"]

try:
    __version__ = importlib.metadata.version("bibmerge")
except importlib.metadata.PackageNotFoundError:
    __version__ = "0.1.0"  # Fallback for development


@click.group()
@click.version_option(version=__version__, prog_name="bibmerge")
def cli() -> None:
    """Merge bibliographic search results from several sources.

    Use 'bibmerge COMMAND --help' for command-specific help.
    """


@cli.command()
@click.argument("batches", nargs=-1, required=True, type=click.Path(exists=True, dir_okay=False))
@click.option(
    "--output",
    "-o",
    type=click.Path(dir_okay=False),
    required=True,
    help="Output JSONL file for canonical records",
)
@click.option(
    "--priority",
    type=str,
    default=None,
    help="Comma-separated source ids, best first (default: crossref,pubmed,ads,...)",
)
@click.option(
    "--title-threshold",
    type=float,
    default=0.85,
    show_default=True,
    help="Minimum title Jaccard similarity for a fuzzy match",
)
@click.option(
    "--year-tolerance",
    type=int,
    default=1,
    show_default=True,
    help="Maximum year difference for a fuzzy match",
)
@click.option(
    "--no-fuzzy",
    is_flag=True,
    help="Link results by shared identifiers only",
)
@click.option(
    "--audit-dir",
    type=click.Path(file_okay=False),
    default=None,
    help="Write events.jsonl and run.json to this directory",
)
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Enable verbose output (and DEBUG audit events)",
)
def dedupe(
    batches: tuple[str, ...],
    output: str,
    priority: str | None,
    title_threshold: float,
    year_tolerance: int,
    no_fuzzy: bool,
    audit_dir: str | None,
    verbose: bool,
) -> None:
    """Deduplicate BATCHES into canonical records.

    Each BATCH is a JSONL file holding the raw results of one source, one
    object per line. Batches are read in the order given.

    Examples
    --------
        bibmerge dedupe crossref.jsonl arxiv.jsonl -o merged.jsonl
        bibmerge dedupe *.jsonl -o merged.jsonl --priority arxiv,crossref
        bibmerge dedupe a.jsonl b.jsonl -o out.jsonl --no-fuzzy --audit-dir audit/
    """
    from bibmerge.api import load_batch, write_jsonl
    from bibmerge.engine import DedupConfig, DeduplicationPipeline

    try:
        config_kwargs: dict[str, Any] = {
            "title_threshold": title_threshold,
            "year_tolerance": year_tolerance,
            "use_fuzzy_matching": not no_fuzzy,
        }
        if priority is not None:
            config_kwargs["priority"] = tuple(s.strip() for s in priority.split(",") if s.strip())
        config = DedupConfig(**config_kwargs)

        if verbose:
            click.echo("Starting deduplication...", err=True)
            click.echo(f"  Batches: {len(batches)}", err=True)
            click.echo(f"  Priority: {','.join(config.priority)}", err=True)
            click.echo(f"  Title threshold: {config.title_threshold}", err=True)
            click.echo(f"  Year tolerance: {config.year_tolerance}", err=True)
            click.echo(f"  Fuzzy matching: {config.use_fuzzy_matching}", err=True)

        if audit_dir is None:
            loaded = [load_batch(path) for path in batches]
            pipeline = DeduplicationPipeline(config)
            records = pipeline.run(loaded)
            count = write_jsonl(records, output)
        else:
            count, pipeline = _run_audited(
                batches, output, config, Path(audit_dir), "DEBUG" if verbose else "INFO"
            )

        summary = pipeline.last_summary
        if verbose and summary is not None:
            click.echo("\nResults:", err=True)
            click.echo(f"  Records in: {summary.records_in}", err=True)
            click.echo(f"  Multi-member clusters: {summary.multi_member_clusters}", err=True)
            click.echo(f"    identifier-linked: {summary.identifier_clusters}", err=True)
            click.echo(f"    fuzzy-linked: {summary.fuzzy_clusters}", err=True)
            click.echo(f"  Dedup rate: {summary.dedup_rate:.2%}", err=True)
            if audit_dir is not None:
                click.echo(f"  Audit: {audit_dir}", err=True)

        records_in = summary.records_in if summary is not None else 0
        click.secho(
            f"✓ Merged {records_in} results into {count} records in {output}",
            fg="green",
        )

    except (OSError, ValueError, TypeError) as e:
        click.secho(f"✗ Error: {e}", fg="red", err=True)
        sys.exit(1)


def _run_audited(
    batches: tuple[str, ...],
    output: str,
    config: "DedupConfig",
    audit_dir: Path,
    min_level: str,
) -> tuple[int, "DeduplicationPipeline"]:
    from bibmerge.api import load_batch, write_jsonl
    from bibmerge.audit import BatchInfo, InputsInfo, RunContext
    from bibmerge.engine import DeduplicationPipeline
    from bibmerge.utils import calculate_file_sha256

    with RunContext.start(
        output_dir=audit_dir,
        parameters=config.to_dict(),
        min_level=min_level,
    ) as run:
        run.start_stage("load")
        loaded = []
        infos = []
        for index, path in enumerate(batches):
            batch = load_batch(path)
            loaded.append(batch)
            infos.append(
                BatchInfo(
                    index=index,
                    records=len(batch),
                    source_ids=sorted({result.source_id for result in batch}),
                    path=Path(path).name,
                    sha256=calculate_file_sha256(Path(path)),
                )
            )
        total = sum(info.records for info in infos)
        run.set_inputs(InputsInfo(batches=infos, total_records=total))
        run.finish_stage("load", counters={"batches": len(loaded), "records": total})

        pipeline = DeduplicationPipeline(config, logger=run.audit_logger)
        run.start_stage("dedupe", expected_records=total)
        records = pipeline.run(loaded)
        summary = pipeline.last_summary
        if summary is not None:
            run.set_summary(summary.to_dict())
        run.finish_stage(
            "dedupe",
            counters={
                "records_in": total,
                "clusters_out": len(records),
                "multi_member_clusters": summary.multi_member_clusters if summary else 0,
            },
        )

        run.start_stage("write")
        count = write_jsonl(records, output)
        run.record_artifact(Path(output), record_count=count)
        run.finish_stage("write", counters={"records_out": count})

        run.finish(status="success", records_processed=total)

    return count, pipeline


@cli.command()
@click.argument("first", type=click.Path(exists=True, dir_okay=False))
@click.argument("second", type=click.Path(exists=True, dir_okay=False))
@click.option(
    "--title-threshold",
    type=float,
    default=0.85,
    show_default=True,
    help="Minimum title Jaccard similarity for a fuzzy match",
)
@click.option(
    "--year-tolerance",
    type=int,
    default=1,
    show_default=True,
    help="Maximum year difference for a fuzzy match",
)
@click.option(
    "--no-fuzzy",
    is_flag=True,
    help="Test shared identifiers only",
)
def compare(
    first: str,
    second: str,
    title_threshold: float,
    year_tolerance: int,
    no_fuzzy: bool,
) -> None:
    """Explain whether two raw results denote the same publication.

    FIRST and SECOND are JSON files each holding one raw result object.
    The decision is printed as JSON; the exit code is 0 either way.

    Examples
    --------
        bibmerge compare crossref_hit.json arxiv_hit.json
    """
    from bibmerge.api import compare_results
    from bibmerge.engine import DedupConfig
    from bibmerge.models import RawResult

    try:
        config = DedupConfig(
            title_threshold=title_threshold,
            year_tolerance=year_tolerance,
            use_fuzzy_matching=not no_fuzzy,
        )
        a = RawResult.from_dict(_read_json_object(first))
        b = RawResult.from_dict(_read_json_object(second))
        result = compare_results(a, b, config)
    except (OSError, KeyError, ValueError, TypeError) as e:
        click.secho(f"✗ Error: {e}", fg="red", err=True)
        sys.exit(1)

    click.echo(json.dumps(result.to_dict(), indent=2, ensure_ascii=False, sort_keys=True))


def _read_json_object(path: str) -> dict[str, Any]:
    with Path(path).open("r", encoding="utf-8") as f:
        data = json.load(f)
    if not isinstance(data, dict):
        raise ValueError(f"{path}: expected a JSON object, got {type(data).__name__}")
    return data


if __name__ == "__main__":
    cli()
