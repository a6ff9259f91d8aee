"""Main CLI entry point for the leadctl command."""

import json
import click
from rich.console import Console
from rich.table import Table
from rich.panel import Panel
from typing import Optional, Tuple

from .. import __version__
from ..config import Settings, STORAGE_BACKENDS, configure_logging
from ..core.rules import ENGAGEMENT_ACTIONS, classify
from ..services.container import ServiceContainer
from ..services.lead_service import LeadNotFoundError, LeadService
from ..services.registry import IDENTITY, LEADS, PERSISTENCE, build_container
from ..storage.models import LeadProfile, LeadStatus
from ..tracking.attribution import RequestContext
from ..tracking.session import SessionIdProvider

console = Console()

STATUS_COLORS = {
    "hot_lead": "red",
    "candidate": "yellow",
    "cold_lead": "blue",
    "visitor": "dim",
}


def _status_label(status: str) -> str:
    color = STATUS_COLORS.get(status, "")
    return f"[{color}]{status}[/{color}]" if color else status


def get_container(ctx: click.Context) -> ServiceContainer:
    return ctx.obj["container"]


def get_service(ctx: click.Context) -> LeadService:
    return get_container(ctx).resolve(LEADS)


def _session_id(ctx: click.Context, session_id: Optional[str]) -> str:
    if session_id:
        return session_id
    return SessionIdProvider(get_container(ctx).resolve(PERSISTENCE)).get_or_create()


def _parse_metadata(pairs: Tuple[str, ...], multiplier: Optional[float]) -> Optional[dict]:
    metadata = {}
    for pair in pairs:
        if "=" not in pair:
            raise click.BadParameter(f"Expected key=value, got '{pair}'", param_hint="--meta")
        key, value = pair.split("=", 1)
        try:
            metadata[key] = json.loads(value)
        except ValueError:
            metadata[key] = value
    if multiplier is not None:
        metadata["multiplier"] = multiplier
    return metadata or None


def _print_profile(profile: LeadProfile):
    predictions = profile.predictions
    path = " → ".join(predictions.best_conversion_path) or "(complete)"
    console.print(Panel.fit(
        f"Status: {_status_label(profile.status.value)}\n"
        f"Source: [cyan]{profile.source}[/cyan]\n\n"
        f"[bold]Scores[/bold]\n"
        f"  Engagement:  {profile.engagement_score}\n"
        f"  Demographic: {profile.demographic_score}\n"
        f"  Behavioral:  {profile.behavioral_score}\n"
        f"  Total:       [bold]{profile.total_score}[/bold]\n\n"
        f"[bold]Predictions[/bold]\n"
        f"  Readiness:        {profile.conversion_readiness:.2f}\n"
        f"  Conversion:       {predictions.conversion_probability:.0%}\n"
        f"  Days to convert:  {predictions.time_to_conversion:.0f}\n"
        f"  Churn risk:       {predictions.risk_of_churn:.0%}\n"
        f"  Next best action: [yellow]{predictions.next_best_action}[/yellow]\n"
        f"  Path:             {path}\n\n"
        f"[dim]{len(profile.activities)} activities, last at "
        f"{profile.last_activity.strftime('%Y-%m-%d %H:%M')}[/dim]",
        title=f"Lead profile {profile.id}"
    ))


@click.group()
@click.version_option(version=__version__, prog_name="leadctl")
@click.option("--data-dir", type=click.Path(file_okay=False), help="Custom data directory")
@click.option("--storage", type=click.Choice(STORAGE_BACKENDS), help="Storage backend")
@click.option("--max-activities", type=int, help="Activities kept per profile (0 = all)")
@click.option("--log-level", help="Logging level")
@click.pass_context
def cli(ctx, data_dir, storage, max_activities, log_level):
    """Lead Lifecycle Engine - engagement scoring and lead predictions.

    \b
    Quick Start:
      leadctl actions                        # Show the scoring vocabulary
      leadctl track tool_usage               # Score an action for this session
      leadctl profile                        # Inspect this session's profile
      leadctl create jane@example.com        # Create a lead
      leadctl leads                          # List profiles by score
    """
    config = Settings.from_overrides(
        data_dir=data_dir,
        storage=storage,
        max_activities=max_activities,
        log_level=log_level.upper() if log_level else None,
    )
    configure_logging(config.log_level)
    ctx.ensure_object(dict)
    ctx.obj["settings"] = config
    ctx.obj["container"] = build_container(config)
    ctx.call_on_close(ctx.obj["container"].dispose)


@cli.command()
def actions():
    """List the engagement actions and their scoring."""
    table = Table(title=f"Engagement Actions ({len(ENGAGEMENT_ACTIONS)})")
    table.add_column("Action", style="cyan")
    table.add_column("Points", justify="right", style="bold")
    table.add_column("Category")
    table.add_column("Weight", justify="right")

    for rule in ENGAGEMENT_ACTIONS.values():
        table.add_row(rule.action, str(rule.points), rule.category.value, f"{rule.weight:.1f}")

    console.print(table)


@cli.command()
@click.argument("action")
@click.option("--session", "-s", "session_id", help="Session id (defaults to this machine's session)")
@click.option("--multiplier", "-x", type=float, help="Point multiplier")
@click.option("--url", default="", help="Page URL the action happened on")
@click.option("--referrer", default="", help="Referrer of the page")
@click.option("--meta", multiple=True, help="Extra metadata as key=value")
@click.pass_context
def track(ctx, action, session_id, multiplier, url, referrer, meta):
    """Track an engagement ACTION for a session."""
    service = get_service(ctx)
    session_id = _session_id(ctx, session_id)

    profile = service.track_engagement(
        session_id,
        action,
        metadata=_parse_metadata(meta, multiplier),
        context=RequestContext(url=url, referrer=referrer),
    )
    if profile is None:
        console.print(f"[yellow]Unknown engagement action '{action}' - nothing scored.[/yellow]")
        console.print("[dim]Run 'leadctl actions' for the list of actions[/dim]")
        return

    console.print(f"[green]✓ Tracked {action} for {session_id}[/green]")
    _print_profile(profile)


@cli.command()
@click.argument("session_id", required=False)
@click.pass_context
def profile(ctx, session_id):
    """Show the profile for SESSION_ID (defaults to this machine's session)."""
    _print_profile(get_service(ctx).get_lead_profile(_session_id(ctx, session_id)))


@cli.command()
@click.argument("email")
@click.option("--name", help="Lead name")
@click.option("--phone", help="Lead phone")
@click.option("--source", help="Lead source (default: direct)")
@click.pass_context
def create(ctx, email, name, phone, source):
    """Create a lead for EMAIL."""
    lead = get_service(ctx).create_lead(email=email, name=name, phone=phone, source=source)
    console.print(Panel.fit(
        f"[green]✓ Lead created[/green]\n\n"
        f"ID:     [cyan]{lead.id}[/cyan]\n"
        f"Email:  {lead.email}\n"
        f"Source: {lead.source}\n"
        + (f"User:   {lead.user_id}\n" if lead.user_id else "")
        + f"\n[dim]Run 'leadctl score {lead.id} <points>' to adjust its score[/dim]",
        title="New Lead"
    ))


@cli.command()
@click.argument("lead_id")
@click.argument("points", type=int)
@click.pass_context
def score(ctx, lead_id, points):
    """Add POINTS to the engagement score of LEAD_ID."""
    try:
        profile = get_service(ctx).update_lead_score(lead_id, points)
    except LeadNotFoundError as e:
        console.print(f"[red]{e}[/red]")
        ctx.exit(1)

    console.print(f"[green]✓ Added {points} points to {lead_id}[/green]")
    _print_profile(profile)


@cli.command()
@click.argument("total_score", type=int)
def preview(total_score):
    """Show which stage TOTAL_SCORE maps to."""
    console.print(f"{total_score} → {_status_label(classify(total_score).value)}")


@cli.command()
@click.option("--status", type=click.Choice(list(STATUS_COLORS.keys())), help="Filter by status")
@click.option("--min-status", type=click.Choice(list(STATUS_COLORS.keys())),
              help="Only profiles at or above this stage")
@click.option("--limit", "-n", default=20, help="Number of profiles to show")
@click.pass_context
def leads(ctx, status, min_status, limit):
    """List lead profiles sorted by total score."""
    profiles = get_service(ctx).profiles.all_profiles()
    if status:
        profiles = [p for p in profiles if p.status.value == status]
    if min_status:
        profiles = [p for p in profiles if p.status >= LeadStatus(min_status)]
    profiles.sort(key=lambda p: p.total_score, reverse=True)
    profiles = profiles[:limit]

    if not profiles:
        console.print("[yellow]No profiles found matching criteria.[/yellow]")
        return

    table = Table(title=f"Profiles ({len(profiles)})" + (f" - {status}" if status else ""))
    table.add_column("ID", style="dim", no_wrap=True)
    table.add_column("Total", justify="right", style="bold")
    table.add_column("Status", justify="center")
    table.add_column("Readiness", justify="right")
    table.add_column("Churn", justify="right")
    table.add_column("Next Action", max_width=35)

    for p in profiles:
        table.add_row(
            p.id,
            str(p.total_score),
            _status_label(p.status.value),
            f"{p.conversion_readiness:.2f}",
            f"{p.predictions.risk_of_churn:.0%}",
            p.predictions.next_best_action,
        )

    console.print(table)


@cli.command()
@click.argument("email")
@click.option("--role", default="soft_member", help="Session role")
@click.pass_context
def login(ctx, email, role):
    """Open an identity session so new leads are attributed to EMAIL."""
    session = get_container(ctx).resolve(IDENTITY).start_session(email, role=role)
    console.print(
        f"[green]✓ Signed in as {session.email}[/green] "
        f"[dim](expires {session.expires_at.strftime('%Y-%m-%d')})[/dim]"
    )


@cli.command()
@click.pass_context
def logout(ctx):
    """Close the identity session."""
    get_container(ctx).resolve(IDENTITY).sign_out()
    console.print("[green]✓ Signed out[/green]")


@cli.command()
@click.pass_context
def health(ctx):
    """Build every service and report its health."""
    container = get_container(ctx)
    for name in container.registered_services():
        container.resolve(name)

    colors = {"healthy": "green", "unhealthy": "red", "unknown": "dim"}
    table = Table(title="Service Health")
    table.add_column("Service", style="cyan")
    table.add_column("Status")
    for name, state in container.health_status().items():
        table.add_row(name, f"[{colors[state]}]{state}[/{colors[state]}]")
    console.print(table)


@cli.command()
@click.option("--host", help="Bind host")
@click.option("--port", type=int, help="Bind port")
@click.pass_context
def serve(ctx, host, port):
    """Run the HTTP API."""
    import uvicorn
    from ..api.main import create_app

    config = ctx.obj["settings"]
    app = create_app(container=get_container(ctx))
    uvicorn.run(app, host=host or config.host, port=port or config.port)


if __name__ == "__main__":
    cli()
