"""Rich console helpers and the HTML report writer."""

from __future__ import annotations

import io
from pathlib import Path

from rich.console import Console
from rich.markup import escape
from rich.table import Table
from rich.text import Text

from netpluginspect.inspection.report import InspectionReport
from netpluginspect.schemas.report import Finding, Severity

console = Console()

REFERENCE_DOCS = [
    ("Networking driver plugins documentation", "https://github.com/docker/cli/tree/master/docs/extend"),
    ("Docker Engine managed plugin system", "https://docs.docker.com/engine/extend/"),
    ("Using a networking driver plugin", "https://docs.docker.com/engine/extend/plugins_network/"),
]


def severity_style(severity: Severity) -> str:
    return {
        Severity.SUCCESS: "bold green",
        Severity.WARNING: "bold yellow",
        Severity.ERROR: "bold red",
    }.get(severity, "white")


def finding_text(finding: Finding) -> Text:
    label = f"{finding.severity.label}:"
    return Text(f"{label:<10}{finding.text}", style=severity_style(finding.severity))


def print_header(plugin: str, out: Console = console) -> None:
    out.print()
    out.rule(f"[bold cyan]Docker networking plugin: {escape(plugin)}", align="left")


def print_step(number: int, title: str, out: Console = console) -> None:
    out.print()
    out.rule(f"[bold]Step #{number}[/bold] {escape(title)}", align="left")


def print_finding(finding: Finding, out: Console = console) -> None:
    out.print(finding_text(finding))


def plugin_info_table(report: InspectionReport) -> Table:
    table = Table(
        title="Docker networking plugin information",
        show_header=False,
        header_style="bold cyan",
        border_style="dim",
        show_lines=False,
    )
    table.add_column("Field", style="bold cyan", no_wrap=True)
    table.add_column("Value", overflow="fold")

    config = report.config
    rows = [
        ("Docker networking plugin", report.plugin),
        ("Description", config.description),
        ("Documentation", config.documentation),
        ("Digest", report.digest),
        ("Base layer digest", report.base_layer_digest),
    ]
    if config.docker_version:
        rows.append(("Docker version", config.docker_version))
    rows += [
        ("Interface socket", config.interface.socket),
        ("Interface socket types", report.interface_types_display),
        ("IpcHost", str(config.ipc_host).lower()),
        ("PidHost", str(config.pid_host).lower()),
        ("Entrypoint", config.entrypoint_display),
        ("WorkDir", config.workdir),
        ("User", report.users_display),
    ]
    for label, value in rows:
        table.add_row(label, value or "—")
    return table


def system_table(report: InspectionReport) -> Table:
    table = Table(title="Report summary", show_header=False, border_style="dim")
    table.add_column("Field", style="bold cyan", no_wrap=True)
    table.add_column("Value")
    table.add_row("Date", report.date_display)
    table.add_row("Operating system", report.system.operating_system or "—")
    table.add_row("Architecture", report.system.architecture or "—")
    table.add_row("Docker version", report.system.docker_version or "—")
    return table


def findings_table(report: InspectionReport) -> Table:
    table = Table(
        title=f"Inspection results ({len(report.findings)})",
        header_style="bold cyan",
        border_style="dim",
    )
    table.add_column("Status", no_wrap=True)
    table.add_column("Message", overflow="fold")
    for finding in report.findings:
        table.add_row(
            Text(finding.severity.label, style=severity_style(finding.severity)),
            finding.text,
        )
    return table


def print_summary(report: InspectionReport, out: Console = console) -> None:
    out.print()
    out.rule(
        f"[bold cyan]Summary of the inspection for the Docker networking plugin: {escape(report.plugin)}",
        align="left",
    )
    out.print(f"Report Date: {report.date_display}")
    out.print(f"Operating System: {escape(report.system.operating_system)}")
    out.print(f"Architecture: {escape(report.system.architecture)}")
    out.print(escape(report.system.docker_version))
    out.print()

    if report.warning_count:
        out.print(f"There were {report.warning_count} [bold yellow]warnings[/bold yellow] detected!")
    if report.error_count:
        out.print(f"There were {report.error_count} [bold red]errors[/bold red] detected!")

    out.print()
    for finding in report.findings:
        print_finding(finding, out)
    out.print()
    out.print(f"The inspection of the Docker networking plugin {escape(report.plugin)} has completed.")

    if report.vulnerability_scan_url:
        out.print(f"\nVulnerabilities scan report URL: {report.vulnerability_scan_url}")


def render_report(report: InspectionReport, out: Console) -> None:
    """Full report layout, used for the HTML artifact."""
    out.rule(
        f"[bold]Docker networking plugin: [blue]{escape(report.plugin)}[/blue][/bold]"
        f"  ·  Report Date: [blue]{report.date_display}[/blue]"
    )
    out.print(plugin_info_table(report))
    out.print(system_table(report))
    out.print(findings_table(report))

    if report.vulnerability_scan_url:
        out.print()
        out.print(
            f"[bold]Security scan results:[/bold] "
            f"[link={report.vulnerability_scan_url}]{escape(report.vulnerability_scan_url)}[/link]"
        )

    out.print()
    out.print("[bold]Reference documentation[/bold]")
    for title, url in REFERENCE_DOCS:
        out.print(f"  [link={url}]{title}[/link]")


def write_html_report(report: InspectionReport, path: str | Path) -> Path:
    """Render the report to an HTML file, creating its directory if needed."""
    path = Path(path)
    recorder = Console(record=True, file=io.StringIO(), width=140, color_system="truecolor")
    render_report(report, recorder)

    path.parent.mkdir(parents=True, exist_ok=True)
    recorder.save_html(str(path), inline_styles=True)
    return path
