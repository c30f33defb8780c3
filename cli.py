"""MailGuard CLI — temporary email and malicious domain detection.

Commands:
  check-email   Check one or more email addresses
  check-domain  Check one or more domains
  check-file    Check emails (or domains) from a text file
"""

import asyncio
import csv
import io
import json
import logging
from typing import Optional

import click
from pydantic import ValidationError
from tqdm import tqdm

from mailguard.config import MailGuardConfig
from mailguard.detector import MailGuard
from mailguard.errors import MailGuardError


def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
        datefmt="%H:%M:%S",
    )


def _detector_options(f):
    f = click.option("--concurrency", "-c", type=int, default=None, help="Max concurrent DNS lookups")(f)
    f = click.option("--cache-ttl", type=float, default=None, help="Cache TTL in seconds")(f)
    f = click.option("--no-cache", is_flag=True, help="Disable the result cache")(f)
    f = click.option("--timeout", type=float, default=None, help="DNS lookup timeout in seconds")(f)
    return f


def _build_detector(timeout: Optional[float], no_cache: bool, cache_ttl: Optional[float],
                    concurrency: Optional[int]) -> MailGuard:
    try:
        config = MailGuardConfig.from_env(
            lookup_timeout=timeout,
            cache_enabled=False if no_cache else None,
            cache_ttl=cache_ttl,
            batch_concurrency=concurrency,
        )
    except ValidationError as e:
        raise click.UsageError(f"Invalid configuration: {e}")
    return MailGuard(config)


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
def main(verbose: bool):
    """MailGuard — SURBL-based temporary email detection."""
    _setup_logging(verbose)


@main.command("check-email")
@click.argument("emails", nargs=-1, required=True)
@click.option("--json-output", is_flag=True, help="Output as JSON")
@_detector_options
def check_email_cmd(emails, json_output: bool, timeout, no_cache, cache_ttl, concurrency):
    """Check one or more email addresses."""
    detector = _build_detector(timeout, no_cache, cache_ttl, concurrency)
    results = asyncio.run(detector.check_emails_batch(emails))
    _emit(emails, results, json_output)


@main.command("check-domain")
@click.argument("domains", nargs=-1, required=True)
@click.option("--json-output", is_flag=True, help="Output as JSON")
@_detector_options
def check_domain_cmd(domains, json_output: bool, timeout, no_cache, cache_ttl, concurrency):
    """Check one or more domains."""
    detector = _build_detector(timeout, no_cache, cache_ttl, concurrency)
    results = asyncio.run(detector.check_domains_batch(domains))
    _emit(domains, results, json_output)


@main.command("check-file")
@click.argument("filepath", type=click.Path(exists=True, dir_okay=False))
@click.option("--domains", "as_domains", is_flag=True, help="File lists domains instead of emails")
@click.option("--output", "-o", type=click.Path(), help="Output file path")
@click.option("--format", "fmt", type=click.Choice(["json", "csv", "text"]), default="text")
@_detector_options
def check_file(filepath: str, as_domains: bool, output: str, fmt: str, timeout, no_cache, cache_ttl, concurrency):
    """Check entries from a text file (one per line, '#' starts a comment)."""
    items = _read_lines(filepath)
    if not items:
        click.echo("No entries found in file.")
        return

    detector = _build_detector(timeout, no_cache, cache_ttl, concurrency)
    kind = "domain" if as_domains else "email"
    click.echo(f"Checking {len(items)} {kind}s (concurrency={detector.config.batch_concurrency})...", err=True)

    pbar = tqdm(total=len(items), desc="Checking", unit=kind)

    async def run():
        # Chunked so the progress bar moves while keeping input order
        chunk = max(1, detector.config.batch_concurrency)
        results = []
        for start in range(0, len(items), chunk):
            batch = items[start:start + chunk]
            results.extend(await detector.check_many(batch, kind=kind))
            pbar.update(len(batch))
        return results

    results = asyncio.run(run())
    pbar.close()

    _output_results(items, results, output, fmt)
    _print_summary(results, detector.cache_stats())


def _read_lines(filepath: str) -> list[str]:
    """Read non-empty, non-comment lines from a text file."""
    with open(filepath) as f:
        return [
            line.strip()
            for line in f
            if line.strip() and not line.lstrip().startswith("#")
        ]


def _result_record(item: str, result) -> dict:
    if isinstance(result, MailGuardError):
        return {"input": item, "error": str(result)}
    record = result.model_dump(mode="json")
    if result.category is not None:
        record["description"] = result.category.description
        record["severity"] = result.category.severity
    return record


def _emit(items, results, json_output: bool) -> None:
    if json_output:
        click.echo(json.dumps([_result_record(i, r) for i, r in zip(items, results)], indent=2))
        return
    for item, result in zip(items, results):
        _print_result(item, result)


def _format_line(item: str, result) -> str:
    if isinstance(result, MailGuardError):
        return f"✗ {item} -> Error: {result}"
    cached = " [cached]" if result.from_cache else ""
    if result.is_threat:
        category = result.category
        return f"⚠ {item} -> {category.description} (level {category.severity}){cached}"
    return f"✓ {item} -> safe{cached}"


def _print_result(item: str, result) -> None:
    click.echo(_format_line(item, result))


def _output_results(items, results, output_path, fmt):
    """Write results to a file or stdout."""
    if fmt == "json":
        text = json.dumps([_result_record(i, r) for i, r in zip(items, results)], indent=2)
    elif fmt == "csv":
        buf = io.StringIO()
        writer = csv.writer(buf)
        writer.writerow(["input", "domain", "is_threat", "category", "severity", "from_cache", "error"])
        for item, r in zip(items, results):
            if isinstance(r, MailGuardError):
                writer.writerow([item, "", "", "", "", "", str(r)])
                continue
            writer.writerow([
                item, r.domain, r.is_threat,
                r.category.description if r.category else "",
                r.category.severity if r.category else "",
                r.from_cache, "",
            ])
        text = buf.getvalue()
    else:
        text = "\n".join(_format_line(i, r) for i, r in zip(items, results))

    if output_path:
        with open(output_path, "w") as f:
            f.write(text)
        click.echo(f"Results written to {output_path}", err=True)
    else:
        click.echo(text)


def _print_summary(results, cache_size: Optional[int]) -> None:
    """Print a summary of batch results."""
    total = len(results)
    errors = sum(1 for r in results if isinstance(r, MailGuardError))
    threats = sum(1 for r in results if not isinstance(r, MailGuardError) and r.is_threat)
    cache_hits = sum(1 for r in results if not isinstance(r, MailGuardError) and r.from_cache)
    safe = total - errors - threats

    click.echo(f"\nSummary ({total} entries):", err=True)
    for label, count in (("threat", threats), ("safe", safe), ("error", errors)):
        pct = (count / total * 100) if total > 0 else 0
        click.echo(f"  {label}: {count} ({pct:.1f}%)", err=True)
    click.echo(f"  cache hits: {cache_hits}", err=True)
    if cache_size is not None:
        click.echo(f"  cache entries: {cache_size}", err=True)


if __name__ == "__main__":
    main()
