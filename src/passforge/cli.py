"""CLI entry point for passforge."""

from __future__ import annotations

import sys
from pathlib import Path

import click

from passforge.builder import PassBuilder
from passforge.bundle import PassBundle
from passforge.errors import PassError
from passforge.models import PushConfig
from passforge.push import PushNotifier
from passforge.signing import PassSigner
from passforge.verify import PassVerifier

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _load_signer(
    p12: str | None,
    password: str | None,
    cert: str | None,
    key: str | None,
    key_password: str | None,
    wwdr: str | None,
) -> PassSigner:
    if p12:
        return PassSigner.from_pkcs12(p12, password, wwdr)
    if cert and key:
        return PassSigner.from_pem(cert, key, wwdr, key_password)
    raise click.UsageError("Provide either --p12 or both --cert and --key.")


# ---------------------------------------------------------------------------
# CLI
# ---------------------------------------------------------------------------


@click.group()
@click.version_option(package_name="passforge")
def main() -> None:
    """passforge: build, sign and bundle Apple Wallet passes."""


@main.command("build")
@click.option(
    "--data",
    "data_path",
    required=True,
    type=click.Path(exists=True, dir_okay=False),
    help="pass.json document.",
)
@click.option(
    "--asset",
    "assets",
    multiple=True,
    type=click.Path(exists=True, dir_okay=False),
    help="File to include; repeat for each asset.",
)
@click.option("--p12", envvar="PASSFORGE_P12", metavar="PATH", help="Certificate bundle (.p12).")
@click.option("--password", envvar="PASSFORGE_P12_PASSWORD", default=None, help="Bundle password.")
@click.option("--cert", envvar="PASSFORGE_CERT", metavar="PATH", help="Signing certificate.")
@click.option("--key", envvar="PASSFORGE_KEY", metavar="PATH", help="Signing private key (PEM).")
@click.option("--key-password", envvar="PASSFORGE_KEY_PASSWORD", default=None)
@click.option(
    "--wwdr",
    envvar="PASSFORGE_WWDR",
    metavar="PATH",
    help="Intermediate (WWDR) certificate to embed.",
)
@click.option("--output", required=True, metavar="PATH", help="Where to write the .pkpass.")
def build_command(
    data_path: str,
    assets: tuple[str, ...],
    p12: str | None,
    password: str | None,
    cert: str | None,
    key: str | None,
    key_password: str | None,
    wwdr: str | None,
    output: str,
) -> None:
    """Sign and pack a single pass."""
    try:
        signer = _load_signer(p12, password, cert, key, key_password, wwdr)
        builder = PassBuilder(signer)
        builder.set_data(Path(data_path).read_text(encoding="utf-8"))
        for asset in assets:
            builder.add_file(asset)
        out_path = builder.write_to_file(output)
    except (PassError, OSError) as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(1)

    click.echo(f"Pass written to: {out_path}")
    click.echo(f"  Serial : {builder.data.get('serialNumber')}")
    click.echo(f"  Files  : {len(builder.assets) + 1}")


@main.command("bundle")
@click.argument("passes", nargs=-1, type=click.Path(exists=True, dir_okay=False))
@click.option("--output", required=True, metavar="PATH", help="Where to write the .pkpasses.")
@click.option(
    "--temp-dir",
    envvar="PASSFORGE_TEMP_DIR",
    default=None,
    metavar="DIR",
    help="Scratch directory (default: system temp).",
)
def bundle_command(passes: tuple[str, ...], output: str, temp_dir: str | None) -> None:
    """Combine signed .pkpass files into one bundle."""
    bundle = PassBundle(temp_dir=temp_dir)
    try:
        for path in passes:
            bundle.add(Path(path).read_bytes())
        out_path = bundle.write_to_file(output)
    except (PassError, OSError, ValueError) as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(1)

    click.echo(f"Bundle written to: {out_path}")
    for name, source in zip(bundle.names(), passes):
        click.echo(f"  {name}  <- {source}")


@main.command("verify")
@click.argument("pass_path", type=click.Path(exists=True, dir_okay=False))
@click.option("--ca", "ca_file", default=None, metavar="PATH", help="Trusted root certificate.")
@click.option("--skip-signature", is_flag=True, help="Only check layout and digests.")
def verify_command(pass_path: str, ca_file: str | None, skip_signature: bool) -> None:
    """Check a .pkpass archive."""
    verifier = PassVerifier()
    result = verifier.verify(
        Path(pass_path).read_bytes(), ca_file=ca_file, check_signature=not skip_signature
    )
    if result.valid:
        click.echo("Pass: VALID")
        click.echo(f"  Type   : {result.pass_type_identifier}")
        click.echo(f"  Serial : {result.serial_number}")
        return

    click.echo("Pass: INVALID")
    for error in result.errors:
        click.echo(f"  {error}")
    sys.exit(2)


@main.command("push")
@click.option("--token", "device_token", required=True, help="Device push token.")
@click.option("--title", required=True)
@click.option("--body", required=True)
@click.option("--bundle-id", envvar="PASSFORGE_PUSH_BUNDLE_ID", default="", help="apns-topic.")
@click.option("--key-id", envvar="PASSFORGE_PUSH_KEY_ID", default="")
@click.option("--team-id", envvar="PASSFORGE_PUSH_TEAM_ID", default="")
@click.option("--auth-key", envvar="PASSFORGE_PUSH_AUTH_KEY", default="", metavar="PATH")
@click.option("--sandbox", is_flag=True, envvar="PASSFORGE_PUSH_SANDBOX")
def push_command(
    device_token: str,
    title: str,
    body: str,
    bundle_id: str,
    key_id: str,
    team_id: str,
    auth_key: str,
    sandbox: bool,
) -> None:
    """Send one push notification."""
    config = PushConfig(
        bundle_id=bundle_id,
        key_id=key_id,
        team_id=team_id,
        auth_key_path=auth_key,
        production=not sandbox,
    )
    try:
        result = PushNotifier(config).push(device_token, title, body)
    except PassError as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(1)
    click.echo(f"Delivered: HTTP {result.status}")


if __name__ == "__main__":
    main()
