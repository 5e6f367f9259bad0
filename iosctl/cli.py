"""Typer CLI entrypoint."""

from __future__ import annotations

import logging
from pathlib import Path

import typer

from iosctl.core.errors import IosctlError
from iosctl.core.resolver import describe
from iosctl.core.service import IosService, signing_summary

app = typer.Typer(help="Resolve iOS deployment targets and build configuration")


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


def _build_service() -> IosService:
    return IosService()


@app.command("devices")
def list_devices() -> None:
    """List connected physical iOS devices."""
    try:
        service = _build_service()
        devices = service.list_devices()
        if not devices:
            typer.echo("No connected iOS devices found")
            return
        for device in devices:
            typer.echo(describe(device))
    except IosctlError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from None


@app.command("simulators")
def list_simulators() -> None:
    """List available iOS simulators."""
    try:
        service = _build_service()
        simulators = service.list_simulators()
        if not simulators:
            typer.echo("No available iOS simulators found")
            return
        for simulator in simulators:
            typer.echo(describe(simulator))
    except IosctlError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from None


@app.command("target")
def resolve_target(
    target: str | None = typer.Option(None, "--target", "-t", help="Device or simulator name fragment"),
) -> None:
    """Resolve the device or simulator to deploy to, booting a simulator if needed."""
    try:
        service = _build_service()
        resolved = service.resolve_target(target)
        candidate = resolved.candidate
        typer.echo(f"Target: {candidate} ({candidate.id}) [{candidate.kind.value}] triple={resolved.triple}")
    except IosctlError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from None


@app.command("config")
def show_config(
    config: Path | None = typer.Option(None, "--config", "-c", help="Project config file"),
    features: list[str] = typer.Option([], "--features", "-f", help="Extra feature flag (repeatable)"),
) -> None:
    """Print the resolved build configuration."""
    try:
        service = _build_service()
        project = service.load_config(config)
        result = service.synthesize(project, features)
        for warning in result.warnings:
            typer.echo(f"Warning: {warning}", err=True)
        resolved = result.config
        typer.echo(f"app: {resolved.app.name} ({resolved.app.identifier})")
        typer.echo(f"project_dir: {resolved.project_dir}")
        typer.echo(f"development_team: {resolved.development_team or '<unset>'}")
        typer.echo(f"features: {', '.join(resolved.features)}")
        typer.echo(f"frameworks: {', '.join(resolved.frameworks)}")
        typer.echo(f"vendor_frameworks: {', '.join(resolved.vendor_frameworks)}")
        typer.echo(f"bundle_version: {resolved.bundle_version or '<unset>'}")
        typer.echo(f"minimum_system_version: {resolved.minimum_system_version}")
    except IosctlError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from None


@app.command("signing")
def show_signing() -> None:
    """Print the signing mode derived from IOS_CERTIFICATE / IOS_MOBILE_PROVISION."""
    try:
        service = _build_service()
        summary = signing_summary(service.signing())
        for key, value in summary.items():
            typer.echo(f"{key}: {value or '<unset>'}")
    except IosctlError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from None


@app.command("merge-plist")
def merge_plist(
    sources: list[Path] = typer.Argument(..., help="Overlay plists, applied in order"),
    dest: Path = typer.Option(..., "--dest", "-d", help="Plist to merge into"),
) -> None:
    """Merge plist overlays into DEST; later sources win, unreadable sources are skipped."""
    try:
        service = _build_service()
        result = service.merge_plist(sources, dest)
        for skipped in result.skipped:
            typer.echo(f"Warning: skipped unreadable source {skipped}", err=True)
        if result.written:
            typer.echo(f"Merged {result.merged} source(s) into {result.destination}")
        else:
            typer.echo(f"No sources merged; {result.destination} left unchanged")
    except IosctlError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from None


@app.command("prepare")
def prepare(
    config: Path | None = typer.Option(None, "--config", "-c", help="Project config file"),
    features: list[str] = typer.Option([], "--features", "-f", help="Extra feature flag (repeatable)"),
) -> None:
    """Synthesize the build configuration and prepare the generated Xcode project."""
    try:
        service = _build_service()
        project = service.load_config(config)
        result = service.synthesize(project, features)
        for warning in result.warnings:
            typer.echo(f"Warning: {warning}", err=True)
        merged = service.prepare_project(project, result.config)
        typer.echo(f"Prepared {result.config.project_dir} ({merged.merged} Info.plist source(s) merged)")
    except IosctlError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from None


def run() -> None:
    app()


if __name__ == "__main__":
    run()
