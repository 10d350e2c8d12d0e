"""
LedgerGate CLI Tool

This module provides a command-line interface for operators of the gateway.
It validates the configuration, lists the configured organizations, and
inspects the identities held in each organization's wallet without talking to
the certificate authority or the ledger network.
"""

import sys

import click

from ledgergate.config.settings import Settings, get_settings, configure_logging
from ledgergate.core.exceptions import LedgerGateError
from ledgergate.core.organization import OrganizationRegistry
from ledgergate.security.certificate import CertificateFormatError, read_certificate
from ledgergate.wallet import create_wallet


def _load_registry(config: Settings) -> OrganizationRegistry:
    try:
        return OrganizationRegistry.from_settings(config)
    except LedgerGateError as e:
        click.echo(f"Error loading organizations: {e.message}", err=True)
        sys.exit(1)


def _open_wallet(config: Settings, org: str):
    registry = _load_registry(config)
    try:
        profile = registry.resolve(org)
        return create_wallet(profile, config.get_wallet_config())
    except LedgerGateError as e:
        click.echo(f"Error opening wallet: {e.message}", err=True)
        sys.exit(1)


@click.group()
@click.pass_context
def lgw(ctx):
    """LedgerGate CLI - identity and configuration inspection"""
    ctx.ensure_object(dict)
    if "settings" not in ctx.obj:
        ctx.obj["settings"] = get_settings()
    configure_logging(ctx.obj["settings"])


@lgw.command("check-config")
@click.pass_context
def check_config(ctx):
    """Validate configuration and connection profiles"""
    config = ctx.obj["settings"]
    errors = config.validate_config()
    if errors:
        for error in errors:
            click.echo(f"  - {error}")
        click.echo(f"Configuration has {len(errors)} error(s)")
        sys.exit(1)

    registry = _load_registry(config)
    click.echo(f"Configuration OK: {len(registry.organizations())} organization(s)")


@lgw.command()
@click.pass_context
def orgs(ctx):
    """List configured organizations"""
    registry = _load_registry(ctx.obj["settings"])

    for org in registry.organizations():
        profile = registry.resolve(org)
        click.echo(f"{org}: msp={profile.msp_id} ca={profile.ca_name} url={profile.ca_url} "
                   f"affiliation={profile.affiliation}")


@lgw.command()
@click.argument("org")
@click.pass_context
def identities(ctx, org):
    """List identity labels in an organization's wallet"""
    wallet = _open_wallet(ctx.obj["settings"], org)
    try:
        labels = wallet.list()
    except LedgerGateError as e:
        click.echo(f"Error reading wallet: {e.message}", err=True)
        sys.exit(1)

    if not labels:
        click.echo(f"No identities in the wallet of {org}")
        return

    for label in labels:
        click.echo(label)


@lgw.command("show-identity")
@click.argument("org")
@click.argument("label")
@click.pass_context
def show_identity(ctx, org, label):
    """Show certificate details of a wallet identity"""
    wallet = _open_wallet(ctx.obj["settings"], org)
    try:
        identity = wallet.get(label)
    except LedgerGateError as e:
        click.echo(f"Error reading wallet: {e.message}", err=True)
        sys.exit(1)
    if identity is None:
        click.echo(f"Identity not found: {label}", err=True)
        sys.exit(1)

    click.echo(f"Label: {identity.label}")
    click.echo(f"MSP ID: {identity.msp_id}")
    click.echo(f"Type: {identity.type}")

    try:
        info = read_certificate(identity.certificate)
    except CertificateFormatError as e:
        click.echo(f"Certificate could not be read: {e}")
        return

    click.echo(f"Subject: {info.subject}")
    click.echo(f"Issuer: {info.issuer}")
    click.echo(f"Serial: {info.serial_number}")
    click.echo(f"Valid until: {info.valid_until.isoformat()}"
               f"{' (expired)' if info.is_expired() else f' ({info.days_until_expiry()} days left)'}")
    for name, value in sorted(info.attributes.items()):
        click.echo(f"Attribute {name}: {value}")


if __name__ == "__main__":
    lgw()
