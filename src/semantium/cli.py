from __future__ import annotations

import importlib
import logging
import sys
from pathlib import Path
from typing import List, Optional

import typer

from semantium.audit import AuditReport, Severity, audit_grammar, describe_catalog
from semantium.config import (
    audit_defaults,
    audit_fail_on_warnings,
    audit_ignore_list,
    grammar_defaults,
    grammar_targets,
    logging_defaults,
    logging_level,
    merge_payload,
)
from semantium.exceptions import GrammarError
from semantium.grammar import Grammar, as_grammar
from semantium.log import setup_logging

app = typer.Typer(add_completion=False)
logger = logging.getLogger(__name__)

EXIT_FINDINGS = 1
EXIT_LOAD_FAILURE = 2


class TargetLoadError(Exception):
    pass


@app.callback()
def main(
    ctx: typer.Context,
    log_level: Optional[str] = typer.Option(None, "--log-level", help="Overrides [logging] level."),
) -> None:
    """Compile and inspect semantium grammars."""
    ctx.obj = {"log_level": log_level}


def _configure_logging(ctx: typer.Context, root: Path, config: Optional[Path]) -> None:
    explicit = (ctx.obj or {}).get("log_level")
    level = explicit or logging_level(logging_defaults(root=root, config_path=config))
    setup_logging(level)


def _bootstrap_root(root: Path) -> None:
    resolved = str(root.resolve())
    if resolved not in sys.path:
        sys.path.insert(0, resolved)


def load_target(target: str) -> Grammar:
    """Import ``module:attribute`` and return the grammar it names."""
    module_name, sep, attribute = target.partition(":")
    if not sep or not module_name or not attribute:
        raise TargetLoadError(f"target {target!r} must look like 'package.module:attribute'")
    try:
        value: object = importlib.import_module(module_name)
    except ImportError as exc:
        raise TargetLoadError(f"cannot import {module_name!r}: {exc}") from exc
    for part in attribute.split("."):
        try:
            value = getattr(value, part)
        except AttributeError as exc:
            raise TargetLoadError(f"{module_name!r} has no attribute path {attribute!r}") from exc
    try:
        return as_grammar(value)
    except TypeError as exc:
        raise TargetLoadError(str(exc)) from exc


def _render_report(report: AuditReport) -> str:
    lines = [
        f"{report.grammar}: {len(report.errors)} error(s), {len(report.warnings)} warning(s), "
        f"{report.positions} position(s) explored"
    ]
    for finding in report.findings:
        where = ".".join(part for part in (finding.block, finding.word) if part)
        prefix = f"  [{finding.severity.value}] {finding.kind.value}"
        lines.append(f"{prefix} {where}: {finding.message}" if where else f"{prefix}: {finding.message}")
    return "\n".join(lines)


@app.command()
def catalog(
    ctx: typer.Context,
    target: str = typer.Argument(..., help="Grammar as 'package.module:attribute'."),
    json_output: bool = typer.Option(False, "--json", help="Emit the catalog as JSON."),
    root: Path = typer.Option(Path("."), "--root"),
    config: Optional[Path] = typer.Option(None, "--config"),
) -> None:
    """Print the compiled word catalog of a grammar."""
    _configure_logging(ctx, root, config)
    _bootstrap_root(root)
    try:
        grammar = load_target(target)
    except (TargetLoadError, GrammarError) as exc:
        typer.echo(f"{target}: {exc}", err=True)
        raise typer.Exit(code=EXIT_LOAD_FAILURE)
    description = describe_catalog(grammar)
    if json_output:
        typer.echo(description.model_dump_json(indent=2))
        return
    typer.echo(f"result: {description.result} (chain: {description.chain_builder})")
    for block in description.blocks:
        marker = " [initial]" if block.initial else ""
        typer.echo(f"{block.name}{marker}")
        for word in description.words:
            if word.block != block.name:
                continue
            continuation = ", ".join(word.continuation) if word.continuation is not None else "?"
            typer.echo(f"  {word.name:<16} {word.kind:<10} -> {continuation}")


@app.command()
def check(
    ctx: typer.Context,
    targets: List[str] = typer.Argument(None, help="Grammars as 'package.module:attribute'."),
    root: Path = typer.Option(Path("."), "--root"),
    config: Optional[Path] = typer.Option(None, "--config"),
    fail_on_warnings: Optional[bool] = typer.Option(
        None,
        "--fail-on-warnings/--no-fail-on-warnings",
        help="Defaults to [audit] fail_on_warnings.",
    ),
    json_output: bool = typer.Option(False, "--json", help="Emit one JSON report per line."),
) -> None:
    """Compile grammars and audit their structural reachability."""
    _configure_logging(ctx, root, config)
    _bootstrap_root(root)
    audit_section = audit_defaults(root=root, config_path=config)
    selected = list(targets or []) or grammar_targets(grammar_defaults(root=root, config_path=config))
    if not selected:
        raise typer.BadParameter("no targets given and no [grammar] targets configured")
    policy = merge_payload({"fail_on_warnings": fail_on_warnings}, audit_section)
    strict = audit_fail_on_warnings(policy)
    ignore = audit_ignore_list(policy)

    exit_code = 0
    for target in selected:
        try:
            grammar = load_target(target)
            report = audit_grammar(grammar, name=target).filtered(ignore)
        except (TargetLoadError, GrammarError) as exc:
            logger.debug("failed to load %s", target, exc_info=True)
            typer.echo(f"{target}: {exc}", err=True)
            exit_code = max(exit_code, EXIT_LOAD_FAILURE)
            continue
        typer.echo(report.to_dto().model_dump_json() if json_output else _render_report(report))
        failing = any(
            finding.severity is Severity.ERROR or (strict and finding.severity is Severity.WARNING)
            for finding in report.findings
        )
        if failing:
            exit_code = max(exit_code, EXIT_FINDINGS)
    raise typer.Exit(code=exit_code)
