import json
import click
import requests
from core.actions import build_action_descriptor
from core.config import setting
from core.utils import decode_transfer_transaction, LAMPORTS_PER_SOL

@click.group()
def cli():
    pass

@cli.command()
@click.option('--host', default="0.0.0.0", help='Interface to bind')
@click.option('--port', default=8000, type=int, help='Port to listen on')
def serve(host: str, port: int):
    """Run the tip jar action server."""
    import uvicorn
    uvicorn.run("app:app", host=host, port=port, reload=False)

@cli.command()
def describe():
    """Print the action metadata returned by GET /api/tip."""
    descriptor = build_action_descriptor(setting)
    click.echo(json.dumps(descriptor.model_dump(exclude_none=True), indent=2, ensure_ascii=False))

@cli.command()
@click.option('--account', type=str, prompt="Sender address", help='Sender wallet address')
@click.option('--amount', type=str, prompt="Amount in SOL", help='Tip amount in SOL')
@click.option('--server-url', default="http://localhost:8000", help='Base URL of a running server')
def request_tip(account: str, amount: str, server_url: str):
    """Ask a running server for an unsigned tip transaction."""
    response = requests.post(
        f"{server_url}/api/tip",
        params={"amount": amount},
        json={"account": account},
        timeout=30,
    )
    click.echo(json.dumps(response.json(), indent=2, ensure_ascii=False))

@cli.command()
@click.argument('transaction')
def inspect(transaction: str):
    """Decode a base64 tip transaction and print what it transfers."""
    try:
        details = decode_transfer_transaction(transaction)
    except ValueError as exc:
        raise click.BadParameter(str(exc), param_hint="TRANSACTION")

    click.echo(f"sender={details['sender']}")
    click.echo(f"recipient={details['recipient']}")
    click.echo(f"lamports={details['lamports']} ({details['lamports'] / LAMPORTS_PER_SOL} SOL)")
    click.echo(f"fee_payer={details['fee_payer']}")
    click.echo(f"blockhash={details['blockhash']}")
    click.echo(f"signed={details['signed']}")

if __name__ == "__main__":
    cli()
