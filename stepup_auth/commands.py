import click
from flask.cli import AppGroup

from .extensions import db
from .models.user import ROLES, User
from .services import get_challenge_manager
from .services.credentials import normalize_email
from .utils.time import utcnow

challenges_cli = AppGroup("challenges", help="Manage login challenges.")
users_cli = AppGroup("users", help="Manage user accounts.")


@challenges_cli.command("purge")
def purge_challenges():
    """Delete challenges whose validity window has passed."""
    removed = get_challenge_manager().store.purge(utcnow())
    click.echo(f"Purged {removed} expired challenge(s)")


@users_cli.command("create")
@click.option("--email", required=True)
@click.option("--password", prompt=True, hide_input=True, confirmation_prompt=True)
@click.option("--role", type=click.Choice(ROLES), default="user", show_default=True)
@click.option("--full-name", default=None)
@click.option("--company-name", default=None)
def create_user(email, password, role, full_name, company_name):
    """Create an account, or update role and password if it exists."""
    email = normalize_email(email)
    user = User.query.filter_by(email=email).first()
    created = user is None
    if created:
        user = User(email=email)
        db.session.add(user)

    user.role = role
    user.set_password(password)
    if full_name is not None:
        user.full_name = full_name
    if company_name is not None:
        user.company_name = company_name
    db.session.commit()

    click.echo(f"{'Created' if created else 'Updated'} {user.email} role={user.role}")


def register_commands(app) -> None:
    app.cli.add_command(challenges_cli)
    app.cli.add_command(users_cli)
