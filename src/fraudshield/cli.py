"""CLI entry point for fraudshield.

Thin front-end over the community service: check an entity, submit and
browse scam reports, record verifications and confirm payments through
the provider fallback chain.
"""

import asyncio
import sys
from pathlib import Path

import click
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from .community import CommunityService
from .config import Config
from .errors import FraudShieldError
from .identity import StaticIdentity
from .log import configure_logging
from .models import (
    REPORT_CATEGORIES,
    SCAM_TYPES,
    VERIFICATION_KINDS,
    EntityRef,
    EntityType,
    ReportSubmission,
)
from .providers import (
    PAYMENT,
    REGISTRY,
    PaymentVerificationRequest,
    ProviderRegistry,
    lookup_company_with_fallback,
    verify_payment_with_fallback,
)
from .report import render_check_json, render_check_markdown
from .risk import RiskAssessor
from .store import JsonFileStore

console = Console()

ENTITY_TYPES = [t.value for t in EntityType]
RISK_STYLES = {1: "green", 2: "green", 3: "yellow", 4: "red", 5: "bold red"}
BADGE_STYLES = {
    "verified": "green",
    "unverified": "white",
    "under_watch": "yellow",
    "flagged": "bold red",
}


def _build_service(config: Config) -> CommunityService:
    return CommunityService(
        store=JsonFileStore(config.store_path),
        identity=StaticIdentity(config.user_id),
        assessor=RiskAssessor(config.reference_domains),
        report_lookup_limit=config.report_lookup_limit,
    )


def _exit_on_config_issues(config: Config) -> None:
    issues = config.validate()
    if issues:
        console.print("[bold red]Configuration issues found:\n")
        for issue in issues:
            console.print(f"  [red]✗ {issue}")
        sys.exit(1)


def _run(coro):
    """Run a coroutine, turning fraudshield errors into a clean exit."""
    try:
        return asyncio.run(coro)
    except FraudShieldError as e:
        console.print("[red]✗ Unable to verify at this time, try again.")
        console.print(f"[dim]{e}")
        sys.exit(1)


@click.group()
@click.option(
    "--store",
    default=None,
    type=click.Path(dir_okay=False, path_type=Path),
    help="Path to the JSON store. Default: FRAUDSHIELD_STORE from .env",
)
@click.option("--verbose", "-v", is_flag=True, help="Log debug events to stderr")
@click.pass_context
def cli(ctx, store, verbose):
    """🛡️ fraudshield: community fraud checks for small businesses."""
    config = Config()
    if store:
        config.store_path = str(store)
    configure_logging("DEBUG" if verbose else config.log_level)
    ctx.obj = config


@cli.command()
@click.argument("entity")
@click.option(
    "--type", "entity_type", type=click.Choice(ENTITY_TYPES), required=True,
    help="What kind of entity ENTITY is",
)
@click.option("--json", "as_json", is_flag=True, help="Print the check as JSON")
@click.option("--markdown", is_flag=True, help="Print the check as Markdown")
@click.pass_obj
def check(config, entity, entity_type, as_json, markdown):
    """Check a phone, email, domain or company against community data."""
    service = _build_service(config)
    result = _run(service.check_entity(entity, entity_type))

    if as_json:
        click.echo(render_check_json(result))
        return
    if markdown:
        click.echo(render_check_markdown(result))
        return
    _print_check(result)


@cli.command()
@click.option("--title", required=True, help="Short headline for the incident")
@click.option("--description", required=True, help="What happened")
@click.option("--scam-type", type=click.Choice(SCAM_TYPES), required=True)
@click.option("--category", type=click.Choice(REPORT_CATEGORIES), required=True)
@click.option("--risk-level", type=click.IntRange(1, 5), required=True)
@click.option("--phone", default=None, help="Phone number used by the scammer")
@click.option("--email", default=None, help="Email address used by the scammer")
@click.option("--domain", default=None, help="Website or email domain involved")
@click.option("--company", default=None, help="Company name the scammer used")
@click.option("--location", default=None)
@click.option("--amount-lost", type=float, default=None)
@click.option("--evidence-url", "evidence_urls", multiple=True)
@click.pass_obj
def report(config, title, description, scam_type, category, risk_level,
           phone, email, domain, company, location, amount_lost, evidence_urls):
    """Submit a scam report to the community wall."""
    refs = [
        EntityRef(value, kind)
        for value, kind in (
            (phone, EntityType.PHONE),
            (email, EntityType.EMAIL),
            (domain, EntityType.DOMAIN),
            (company, EntityType.COMPANY),
        )
        if value
    ]
    submission = ReportSubmission(
        title=title,
        description=description,
        scam_type=scam_type,
        category=category,
        risk_level=risk_level,
        entity_refs=refs,
        location=location,
        amount_lost=amount_lost,
        evidence_urls=list(evidence_urls),
    )
    service = _build_service(config)
    created = _run(service.record_adverse_report(submission))
    console.print(f"[green]✓ Report {created.id} recorded")
    for ref in created.entity_refs:
        console.print(f"  [blue]{ref.entity_type.value}: {ref.entity_id}")


@cli.command("verify-entity")
@click.argument("entity")
@click.option("--type", "entity_type", type=click.Choice(ENTITY_TYPES), required=True)
@click.pass_obj
def verify_entity(config, entity, entity_type):
    """Record that an entity was verified through an official channel."""
    service = _build_service(config)
    record = _run(service.record_verification_event(entity, entity_type))
    _print_record(record)


@cli.command()
@click.argument("entity")
@click.option("--type", "entity_type", type=click.Choice(ENTITY_TYPES), required=True)
@click.pass_obj
def transaction(config, entity, entity_type):
    """Record a completed, legitimate transaction with an entity."""
    service = _build_service(config)
    record = _run(service.record_successful_transaction(entity, entity_type))
    _print_record(record)


@cli.command()
@click.argument("report_id")
@click.option("--kind", type=click.Choice(VERIFICATION_KINDS), default="upvote")
@click.option("--comment", default=None)
@click.pass_obj
def vote(config, report_id, kind, comment):
    """Upvote, confirm ("happened to me") or dispute a scam report."""
    service = _build_service(config)
    _run(service.verify_report(report_id, kind, comment))
    console.print(f"[green]✓ Recorded {kind} on {report_id}")


@cli.command()
@click.option("--category", type=click.Choice(REPORT_CATEGORIES), default=None)
@click.option("--scam-type", type=click.Choice(SCAM_TYPES), default=None)
@click.option("--location", default=None)
@click.option("--risk-level", type=click.IntRange(1, 5), default=None)
@click.option("--limit", type=int, default=20)
@click.pass_obj
def wall(config, category, scam_type, location, risk_level, limit):
    """Browse recent scam reports."""
    service = _build_service(config)
    reports = _run(service.list_reports(
        category=category,
        location=location,
        scam_type=scam_type,
        risk_level=risk_level,
        limit=limit,
    ))
    if not reports:
        console.print("[yellow]No matching reports.")
        return

    table = Table(title="Scam Wall", border_style="cyan")
    table.add_column("ID", style="dim")
    table.add_column("Title", style="bold")
    table.add_column("Type")
    table.add_column("Risk", justify="right")
    table.add_column("Upvotes", justify="right")
    table.add_column("Confirmed", justify="right")
    for r in reports:
        table.add_row(
            r.id,
            r.title,
            r.scam_type,
            f"[{RISK_STYLES[r.risk_level]}]{r.risk_level}/5",
            str(r.upvotes),
            str(r.corroborations),
        )
    console.print(table)


@cli.command()
@click.option("--category", default=None)
@click.option("--location", default=None)
@click.option(
    "--status", "verification_status",
    type=click.Choice(["verified", "pending", "rejected"]), default=None,
)
@click.option("--students", is_flag=True, help="Only student businesses")
@click.option("--limit", type=int, default=20)
@click.pass_obj
def directory(config, category, location, verification_status, students, limit):
    """Browse the community business directory."""
    service = _build_service(config)
    listings = _run(service.list_business_listings(
        category=category,
        location=location,
        verification_status=verification_status,
        is_student_business=True if students else None,
        limit=limit,
    ))
    if not listings:
        console.print("[yellow]No matching businesses.")
        return

    table = Table(title="Business Directory", border_style="cyan")
    table.add_column("Business", style="bold")
    table.add_column("Category")
    table.add_column("Location")
    table.add_column("Status")
    table.add_column("Trust", justify="right")
    for b in listings:
        table.add_row(
            b.business_name,
            b.category,
            b.location or "-",
            b.verification_status,
            str(b.trust_score),
        )
    console.print(table)


@cli.command()
@click.argument("user_id", required=False)
@click.pass_obj
def stats(config, user_id):
    """Show contribution points and badges for a user."""
    service = _build_service(config)
    user_id = user_id or config.user_id
    gamification = _run(service.get_user_gamification(user_id))
    if gamification is None:
        console.print(f"[yellow]No contributions recorded for {user_id}.")
        return

    table = Table(title=f"Contributions: {user_id}", border_style="cyan")
    table.add_column("Metric", style="bold")
    table.add_column("Value", justify="right")
    table.add_row("Level", str(gamification.level))
    table.add_row("Points", str(gamification.points))
    table.add_row("Reports submitted", str(gamification.scam_reports_submitted))
    table.add_row("Verifications made", str(gamification.verifications_made))
    table.add_row("Businesses verified", str(gamification.businesses_verified))
    table.add_row("Fraud catches", str(gamification.fraud_catches))
    table.add_row("Badges", ", ".join(gamification.badges) or "-")
    console.print(table)


@cli.command("verify-payment")
@click.option("--bank", "bank_name", required=True, help="Paying bank name")
@click.option("--reference", required=True, help="Payment reference")
@click.option("--amount", type=float, required=True, help="Amount in rand")
@click.pass_obj
def verify_payment(config, bank_name, reference, amount):
    """Confirm an EFT has cleared before releasing goods."""
    _exit_on_config_issues(config)
    providers = ProviderRegistry.build_chain(
        PAYMENT, config.payment_providers, config.credentials(),
        timeout=config.http_timeout,
    )
    request = PaymentVerificationRequest(
        bank_name=bank_name, reference=reference, amount=amount
    )
    result = _run(verify_payment_with_fallback(providers, request))
    style = "green" if result.verified else "red"
    mark = "✅" if result.verified else "🚨"
    console.print(f"[{style}]{mark} {result.message}")
    if result.provider:
        console.print(f"[dim]Provider: {result.provider} (confidence {result.confidence}%)")


@cli.command("lookup-company")
@click.argument("registration_number")
@click.pass_obj
def lookup_company(config, registration_number):
    """Look a company registration number up in the registries."""
    _exit_on_config_issues(config)
    providers = ProviderRegistry.build_chain(
        REGISTRY, config.registry_providers, config.credentials(),
        timeout=config.http_timeout,
    )
    info = _run(lookup_company_with_fallback(providers, registration_number))
    table = Table(title=f"Company {info.registration_number}", border_style="cyan")
    table.add_column("Field", style="bold")
    table.add_column("Value")
    table.add_row("Name", info.name)
    table.add_row("Status", info.status)
    table.add_row("Verified", "yes" if info.verified else "no")
    table.add_row("Source", info.source)
    table.add_row("Directors", ", ".join(info.directors) or "-")
    console.print(table)


@cli.command("config")
@click.pass_obj
def show_config(config):
    """Validate configuration and show the active settings."""
    _exit_on_config_issues(config)
    console.print("[bold green]✓ Configuration looks good!")
    console.print(f"  Store: {config.store_path}")
    console.print(f"  User: {config.user_id}")
    console.print(f"  Payment providers: {', '.join(config.payment_providers)}")
    console.print(f"  Registry providers: {', '.join(config.registry_providers)}")
    console.print(f"  Reference domains: {len(config.reference_domains)}")


def _print_record(record):
    badge = record.badge.value
    console.print(
        f"[green]✓ {record.entity_type.value} {record.entity_id}: "
        f"score {record.score}, badge [{BADGE_STYLES[badge]}]{badge}"
    )


def _print_check(result):
    """Print an entity check as a panel plus factor/recommendation lists."""
    assessment = result.assessment
    style = RISK_STYLES[assessment.risk_level]
    lines = [
        f"[bold]{result.entity_type.value}[/bold] {result.entity_id}",
        f"Risk level: [{style}]{assessment.risk_level}/5",
    ]
    record = result.trust_record
    if record:
        badge = record.badge.value
        lines.append(
            f"Trust score: {record.score}/100  "
            f"Badge: [{BADGE_STYLES[badge]}]{badge}"
        )
    else:
        lines.append("[dim]No community trust record")
    console.print(Panel("\n".join(lines), border_style=style))

    for factor in assessment.risk_factors:
        console.print(f"  [red]✗ {factor}")
    for rec in assessment.recommendations:
        console.print(f"  [cyan]→ {rec}")
    if result.reports:
        console.print(f"\n[bold]{len(result.reports)} community report(s):")
        for r in result.reports:
            console.print(f"  • {r.title} [dim]({r.id}, risk {r.risk_level}/5)")


if __name__ == "__main__":
    cli()
