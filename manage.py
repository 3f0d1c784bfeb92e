import logging
import subprocess

import click

from resume_forge.app.core.config import get_settings
from resume_forge.app.core.exceptions import ResumeForgeError
from resume_forge.app.database.database import get_session_local
from resume_forge.app.ledger.store import LedgerStore
from resume_forge.app.llm.generator import list_generation_models

log = logging.getLogger(__name__)


@click.group()
def cli():
    """Management script for the ResumeForge service."""
    pass


@cli.command("generate-migration")
@click.option(
    "-m",
    "--message",
    required=True,
    help="A short message describing the migration.",
)
def generate_migration(message: str):
    """
    Generate a new database migration script.

    This command wraps 'alembic revision --autogenerate'.

    Args:
        message (str): A short message describing the migration.

    Returns:
        None

    Notes:
        1. Executes the 'alembic revision --autogenerate' command as a subprocess.
        2. On success, prints a success message.
        3. On failure, catches exceptions and prints an error message.

    """
    _msg = "generate_migration starting"
    log.debug(_msg)
    click.echo("Generating new migration...")
    try:
        command = ["alembic", "revision", "--autogenerate", "-m", message]
        subprocess.run(command, check=True)
        _success_msg = f"Successfully generated new migration: {message}"
        click.echo(_success_msg)
        log.info(_success_msg)
    except subprocess.CalledProcessError as e:
        _error_msg = f"An error occurred while generating migration: {e}"
        click.echo(_error_msg, err=True)
        log.exception(_error_msg)
    except FileNotFoundError:
        _error_msg = "Error: 'alembic' command not found. Make sure Alembic is installed and in your PATH."
        click.echo(_error_msg, err=True)
        log.exception(_error_msg)
    _msg = "generate_migration returning"
    log.debug(_msg)


@cli.command("apply-migrations")
def apply_migrations():
    """
    Apply all pending migrations to the database.

    This command wraps 'alembic upgrade head'.

    Notes:
        1. Executes the 'alembic upgrade head' command as a subprocess.
        2. On success, prints a success message.
        3. On failure, catches exceptions and prints an error message.

    """
    _msg = "apply_migrations starting"
    log.debug(_msg)
    click.echo("Applying database migrations...")
    try:
        command = ["alembic", "upgrade", "head"]
        subprocess.run(command, check=True)
        _success_msg = "Successfully applied all migrations."
        click.echo(_success_msg)
        log.info(_success_msg)
    except subprocess.CalledProcessError as e:
        _error_msg = f"An error occurred while applying migrations: {e}"
        click.echo(_error_msg, err=True)
        log.exception(_error_msg)
    except FileNotFoundError:
        _error_msg = "Error: 'alembic' command not found. Make sure Alembic is installed and in your PATH."
        click.echo(_error_msg, err=True)
        log.exception(_error_msg)
    _msg = "apply_migrations returning"
    log.debug(_msg)


@cli.command("list-models")
def list_models():
    """
    List the generation models available to the configured API key.

    The pinned model is marked with '*'. To rotate it, set GEMINI_MODEL to one
    of the listed ids and restart the service.

    Notes:
        1. Calls the models endpoint once.
        2. Exits with status 1 if the endpoint cannot be queried.

    """
    settings = get_settings()
    try:
        model_ids = list_generation_models(settings)
    except ResumeForgeError as e:
        _error_msg = f"Could not list models ({e.kind}): {e.message}"
        click.echo(_error_msg, err=True)
        log.error(_error_msg)
        raise SystemExit(1)

    for model_id in model_ids:
        marker = "*" if model_id == settings.gemini_model else " "
        click.echo(f"{marker} {model_id}")
    if settings.gemini_model not in model_ids:
        click.echo(
            f"Warning: pinned model '{settings.gemini_model}' is not in the list.",
            err=True,
        )


@cli.command("grant-credits")
@click.option("--user-id", required=True, help="The user whose ledger is credited.")
@click.option("--amount", required=True, type=int, help="Number of credits to add.")
def grant_credits(user_id: str, amount: int):
    """
    Manually credit a user's ledger, e.g. for support refunds.

    Args:
        user_id (str): The user to credit.
        amount (int): A positive number of credits.

    Notes:
        1. Goes through `LedgerStore.credit`, the same primitive the webhook uses.
        2. Prints the resulting balance, or an error and exits with status 1.

    """
    _msg = "grant_credits starting"
    log.debug(_msg)
    ledger = LedgerStore(get_session_local())
    try:
        ledger.credit(user_id, amount)
        balance = ledger.read(user_id)
    except ResumeForgeError as e:
        _error_msg = f"Error granting credits: {e.message}"
        click.echo(_error_msg, err=True)
        log.error(_error_msg)
        raise SystemExit(1)

    _success_msg = f"Granted {amount} credit(s) to {user_id}. New balance: {balance}"
    click.echo(_success_msg)
    log.info(_success_msg)


def main():
    """Run the command line interface."""
    cli()


if __name__ == "__main__":
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(levelname)s - %(message)s",
    )
    main()
