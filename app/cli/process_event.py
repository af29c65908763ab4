# app/cli/process_event.py
import asyncio
import json
import logging
import click

from app.core.config import get_settings
from app.core.logging_config import configure_logging
from app.dependencies import get_orchestrator
from app.core.exceptions import MalformedPayloadError
from app.services.payload_normalizer import normalize_payload

logger = logging.getLogger(__name__)

@click.command()
@click.argument('payload_file', type=click.File('rb'))
@click.option('--dry-run', is_flag=True, help='Only normalize the payload; no Jamf or Snipe-IT calls')
def process_event(payload_file, dry_run):
    """Replay a saved Snipe-IT webhook body through the sync pipeline.

    The inbound secret and host checks are skipped; the result is audited
    like a live webhook unless --dry-run is given.
    """
    configure_logging()
    body = payload_file.read()

    if dry_run:
        settings = get_settings()
        try:
            normalized = normalize_payload(
                body,
                test_ping_channel=settings.TEST_PING_CHANNEL,
                test_ping_marker=settings.TEST_PING_MARKER,
            )
        except MalformedPayloadError as e:
            raise click.ClickException(f"Malformed payload: {str(e)}")

        click.echo(f"{type(normalized).__name__}:")
        click.echo(json.dumps(normalized.model_dump(mode="json"), indent=2))
        return

    result = asyncio.run(get_orchestrator().process_payload(body))
    click.echo(result.response_text)
    if not result.status.is_success:
        raise SystemExit(1)

if __name__ == "__main__":
    process_event()
