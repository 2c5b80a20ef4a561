"""netpluginspect CLI entry point — `netplug-inspect` command."""

from __future__ import annotations

from typing import NoReturn

import click

from netpluginspect.cli.output import (
    console,
    plugin_info_table,
    print_finding,
    print_header,
    print_step,
    print_summary,
    write_html_report,
)
from netpluginspect.core.auth import resolve_credentials
from netpluginspect.core.config import Settings, get_settings
from netpluginspect.core.errors import InspectionError
from netpluginspect.core.logging import bind_run_context, configure_logging, get_logger
from netpluginspect.inspection.inspector import Inspector
from netpluginspect.inspection.report import InspectionReport
from netpluginspect.schemas.reference import PluginReference, sanitize_reference

logger = get_logger(__name__)

SYNTAX = "Syntax: netplug-inspect [options] namespace/name:tag"


@click.command(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(package_name="netpluginspect")
@click.argument("plugin")
@click.option("--docker-user", default=None, help="Docker ID. Overrides DOCKER_USER.")
@click.option(
    "--docker-password", default=None, help="Docker ID password. Overrides DOCKER_PASSWORD."
)
@click.option(
    "--docker-registry-auth-endpoint",
    default=None,
    help="Registry authentication endpoint. Overrides DOCKER_REGISTRY_AUTH_ENDPOINT "
    "(default https://auth.docker.io).",
)
@click.option(
    "--docker-registry-api-endpoint",
    default=None,
    help="Registry API endpoint. Overrides DOCKER_REGISTRY_API_ENDPOINT "
    "(default https://registry-1.docker.io).",
)
@click.option(
    "--test-script",
    type=click.Path(exists=True, dir_okay=False, resolve_path=True),
    default=None,
    help="Script to test the plugin with; it receives the plugin name as its only argument.",
)
@click.option("--json", "json_output", is_flag=True, default=False, help="Write JSON to stdout.")
@click.option("--html", "html_output", is_flag=True, default=False, help="Generate an HTML report.")
@click.option("-v", "--verbose", is_flag=True, default=False, help="Verbose (debug) logging.")
def cli(
    plugin: str,
    docker_user: str | None,
    docker_password: str | None,
    docker_registry_auth_endpoint: str | None,
    docker_registry_api_endpoint: str | None,
    test_script: str | None,
    json_output: bool,
    html_output: bool,
    verbose: bool,
) -> None:
    """Inspect a Docker networking plugin.

    Fetches the plugin's digest, manifest and configuration from the registry,
    installs it, creates and deletes a network with it as the driver, removes
    it again and reports what happened.

    \b
    Example:
      netplug-inspect --html acme/netplug:1.0
    """
    settings = get_settings()
    configure_logging("DEBUG" if verbose else None)

    report = InspectionReport(plugin=sanitize_reference(plugin))
    bind_run_context(plugin=report.plugin)
    if not json_output:
        report.on_finding = print_finding
        report.on_step = print_step

    try:
        report.reference = PluginReference.parse(plugin)
    except InspectionError as exc:
        report.error(str(exc))
        if not json_output:
            click.echo(SYNTAX, err=True)
        _finish(report, settings, json_output, html_output=False, summary=False)

    try:
        credentials = resolve_credentials(
            settings,
            username=docker_user,
            password=docker_password,
            auth_endpoint=docker_registry_auth_endpoint,
            api_endpoint=docker_registry_api_endpoint,
        )
        inspector = Inspector(report, credentials, settings, test_script=test_script)
        inspector.prepare()
        if not json_output:
            print_header(report.plugin)
        inspector.fetch_metadata()
    except InspectionError as exc:
        logger.debug("Inspection aborted", error_type=type(exc).__name__)
        report.error(str(exc))
        _finish(report, settings, json_output, html_output)

    if not json_output:
        console.print(plugin_info_table(report))

    inspector.verify()
    _finish(report, settings, json_output, html_output)


def _finish(
    report: InspectionReport,
    settings: Settings,
    json_output: bool,
    html_output: bool,
    summary: bool = True,
) -> NoReturn:
    """Produce the requested outputs and exit with the report's status."""
    if summary and not json_output:
        print_summary(report)

    if html_output:
        path = report.report_file_path(settings.report_dir)
        try:
            write_html_report(report, path)
        except OSError as exc:
            report.error(f"Unable to write the HTML report {path}: {exc}")
        else:
            report.report_file = str(path)
            if not json_output:
                console.print(f"An HTML report has been generated in the file {path}")

    if json_output:
        click.echo(report.to_json_output().render())

    raise SystemExit(report.exit_code)


if __name__ == "__main__":
    cli()
