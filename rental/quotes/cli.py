import logging
from datetime import datetime

import click
from flask import current_app
from flask.cli import AppGroup

from rental import db
from rental.errors import QuoteError
from rental.integrations.messaging import chat_link, get_messenger
from rental.quotes.expiration import check_expirations
from rental.quotes.repository import QuoteRepository


@click.group("quotes", cls=AppGroup)
def quotes_cli() -> None:
    """Quote maintenance commands."""


@quotes_cli.command("check-expirations")
@click.option("--to", "destination", default=None,
              help="Collections chat number (defaults to COLLECTIONS_NUMBER)")
@click.option("--date", "reference", type=click.DateTime(formats=["%Y-%m-%d"]), default=None,
              help="Reference date, YYYY-MM-DD (defaults to today)")
def check_expirations_command(destination: str | None, reference: datetime | None) -> None:
    """Report expired, unpaid quotes to the collections chat.

    Meant to be run once a day by a scheduler.  Failures are logged and the
    command still exits 0.
    """
    logging.basicConfig(level=logging.INFO)
    run_expiration_check(destination, reference.date() if reference else None)


def run_expiration_check(destination=None, reference_date=None):
    destination = destination or current_app.config.get("COLLECTIONS_NUMBER")
    try:
        report = check_expirations(QuoteRepository(db.session), reference_date)
    except QuoteError as e:
        logging.error("Expiration check failed: %s", e)
        return None

    if not report.matches:
        logging.info(report.summary)
        click.echo(report.summary)
        return report

    click.echo(report.message)
    if not destination:
        logging.error("No collections number configured; message not sent")
        return report

    messenger = get_messenger(current_app)
    if messenger is None:
        logging.info("No messaging webhook configured; open %s", chat_link(destination, report.message))
        return report
    try:
        messenger.send(destination, report.message)
    except QuoteError as e:
        logging.error("Collections message not delivered: %s", e)
    return report
