"""CLI tools for PhishNet administration."""

import click
from pydantic import ValidationError

from phishnet.core.config import settings
from phishnet.core.errors import ConflictError
from phishnet.core.security import hash_password
from phishnet.schemas.auth import OrganizationCreate, UserCreate
from phishnet.services import auth_service
from phishnet.storage import DatabaseStorage


@click.group()
@click.option(
    "--database-url",
    default=None,
    help="SQLAlchemy URL (defaults to DATABASE_URL from the environment)",
)
@click.pass_context
def cli(ctx: click.Context, database_url: str | None):
    """PhishNet CLI tools."""
    ctx.obj = {"database_url": database_url or settings.DATABASE_URL}


def _open_store(ctx: click.Context, create_tables: bool = False) -> DatabaseStorage:
    store = DatabaseStorage(database_url=ctx.obj["database_url"], create_tables=create_tables)
    ctx.call_on_close(store.close)
    return store


@cli.command("init-db")
@click.pass_context
def init_db(ctx: click.Context):
    """Create all tables on the configured database (no-op for existing tables)."""
    _open_store(ctx, create_tables=True)
    click.echo("✓ Database tables created")


@cli.command("create-admin")
@click.option("--org", "org_name", required=True, help="Organization name")
@click.option("--email", required=True, help="Admin email address")
@click.option("--password", required=True, help="Initial password")
@click.option("--first-name", required=True)
@click.option("--last-name", required=True)
@click.pass_context
def create_admin(
    ctx: click.Context,
    org_name: str,
    email: str,
    password: str,
    first_name: str,
    last_name: str,
):
    """
    Create an admin user, creating the organization if it does not exist.

    This is the bootstrap command for setting up a new tenant.

    Example:
        phishnet create-admin --org "Acme Corp" --email admin@acme.com \\
            --password secret1 --first-name Ada --last-name Admin
    """
    store = _open_store(ctx, create_tables=True)
    try:
        hashed = hash_password(password)
        org = store.get_organization_by_name(org_name)
        created_org = org is None
        if created_org:
            org = store.create_organization(OrganizationCreate(name=org_name))
        user = store.create_user(
            org.id,
            UserCreate(
                email=email,
                password=hashed,
                first_name=first_name,
                last_name=last_name,
                is_admin=True,
                organization_name=org.name,
            ),
        )
    except ValidationError as e:
        click.echo(f"❌ Invalid input: {e.errors()[0]['msg']}")
        ctx.exit(1)
    except ValueError as e:
        click.echo(f"❌ Invalid input: {e}")
        ctx.exit(1)
    except ConflictError as e:
        click.echo(f"❌ {e.message}")
        ctx.exit(1)

    if created_org:
        click.echo(f"✓ Created organization: {org.name} (ID: {org.id})")
    click.echo(f"✓ Created admin {user.email} (ID: {user.id})")


@cli.command("revoke-sessions")
@click.option("--email", required=True, help="User email address")
@click.pass_context
def revoke_sessions(ctx: click.Context, email: str):
    """Invalidate every outstanding session for a user (bumps token_version)."""
    store = _open_store(ctx)
    user = store.get_user_by_email(email)
    if user is None:
        click.echo(f"❌ No user with email {email}")
        ctx.exit(1)
    updated = auth_service.revoke_sessions(store, user.id)
    click.echo(f"✓ Revoked sessions for {updated.email} (token version {updated.token_version})")


if __name__ == "__main__":
    cli()
