"""Command line interface for the GitSnap backup stack."""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

import typer

from .aws_utils import make_client
from .backup import BackupWriter
from .config import WEEKDAYS, load_config
from .handlers import artifact_dispatcher, provider_dispatcher
from .partition import partition_keys
from .retention import apply_lifecycle as apply_bucket_lifecycle
from .retention import lifecycle_configuration
from .workflow import render_workflow as render_workflow_yaml

app = typer.Typer(help="Manage GitHub repository backups stored in S3.")

RESOURCES = ("oidc-provider", "workflow-uploader")


def _parse_instant(value: Optional[str]) -> datetime:
    if not value:
        return datetime.now(timezone.utc)
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError as exc:
        raise typer.BadParameter(f"Not an ISO 8601 instant: {value}") from exc


@app.callback()
def main(verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging")):
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@app.command()
def keys(
    at: Optional[str] = typer.Option(None, help="Capture instant (ISO 8601, default now, UTC if naive)"),
    extension: str = typer.Option("7z", help="Archive extension"),
    weekly_day: str = typer.Option("Sunday", help="Day that also gets a weekly copy"),
):
    """Prints the storage keys a backup captured at AT is written to."""

    day = weekly_day.strip().capitalize()
    if day not in WEEKDAYS:
        raise typer.BadParameter(f"Unknown weekday: {weekly_day}")

    for backup_key in partition_keys(_parse_instant(at), extension, WEEKDAYS.index(day)).all():
        typer.echo(backup_key.key)


@app.command()
def render_workflow(
    role_arn: str = typer.Option(..., help="Role assumed by GitHub Actions"),
    region: str = typer.Option(..., help="AWS region of the backup bucket"),
    bucket: str = typer.Option(..., help="Backup bucket name"),
    output: Optional[Path] = typer.Option(None, help="Write to this file instead of stdout"),
    config: Path = typer.Option(..., exists=True, readable=True, help="Path to the YAML configuration"),
):
    """Renders the GitHub Actions backup workflow."""

    content = render_workflow_yaml(load_config(config), role_arn=role_arn, region=region, bucket=bucket)
    if output:
        output.write_text(content, encoding="utf-8")
        typer.echo(f"Workflow written to {output}")
    else:
        typer.echo(content, nl=False)


@app.command()
def lifecycle(
    config: Path = typer.Option(..., exists=True, readable=True, help="Path to the YAML configuration"),
):
    """Prints the bucket lifecycle configuration for the retention settings."""

    typer.echo(json.dumps(lifecycle_configuration(load_config(config)), indent=2))


@app.command()
def apply_lifecycle(
    bucket: str = typer.Argument(..., help="Backup bucket name"),
    region: Optional[str] = typer.Option(None, help="AWS region"),
    config: Path = typer.Option(..., exists=True, readable=True, help="Path to the YAML configuration"),
):
    """Applies the retention rules to the backup bucket."""

    s3_client = make_client("s3", region)
    result = apply_bucket_lifecycle(s3_client, bucket, load_config(config))
    typer.echo(f"Applied {len(result['Rules'])} lifecycle rules to s3://{bucket}")


@app.command()
def upload_backup(
    archive: Path = typer.Argument(..., exists=True, dir_okay=False, readable=True, help="Archive to upload"),
    bucket: str = typer.Option(..., help="Backup bucket name"),
    at: Optional[str] = typer.Option(None, help="Capture instant (ISO 8601, default now)"),
    region: Optional[str] = typer.Option(None, help="AWS region"),
    config: Path = typer.Option(..., exists=True, readable=True, help="Path to the YAML configuration"),
):
    """Uploads an archive to its daily (and, on the weekly day, weekly) key."""

    writer = BackupWriter(make_client("s3", region), bucket, load_config(config))
    for uri in writer.upload(archive, _parse_instant(at)):
        typer.echo(f"Uploaded: {uri}")


@app.command()
def invoke(
    resource: str = typer.Argument(..., help="oidc-provider | workflow-uploader"),
    event: Path = typer.Option(..., exists=True, readable=True, help="Custom resource event (JSON)"),
    region: Optional[str] = typer.Option(None, help="AWS region"),
):
    """Runs a custom resource handler locally against a JSON event."""

    if resource not in RESOURCES:
        raise typer.BadParameter(f"Unknown resource '{resource}', expected one of {', '.join(RESOURCES)}")

    payload = json.loads(event.read_text(encoding="utf-8"))
    if resource == "oidc-provider":
        dispatcher = provider_dispatcher(make_client("iam", region))
    else:
        dispatcher = artifact_dispatcher(make_client("s3", region))

    response = dispatcher.dispatch(payload)
    typer.echo(json.dumps(response, indent=2))
    if response.get("Status") != "SUCCESS":
        raise typer.Exit(code=1)


def run():
    app()


if __name__ == "__main__":  # pragma: no cover
    run()
