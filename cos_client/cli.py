"""CLI entry point for cos-client.

Thin wrappers over the bucket/service APIs for poking at a bucket from a
shell. Results are printed as JSON on stdout; request ids and errors go to
stderr. The CLI does not sign requests: pass a pre-computed Authorization
with --header or through the config file.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from dataclasses import dataclass, field
from pathlib import Path

from pydantic import BaseModel

from cos_client.client import Client
from cos_client.config import ClientConfig, load_client_config
from cos_client.errors import CosClientError
from cos_client.models import ACLHeaderOptions, BucketGetOptions, BucketPutACLOptions, CannedACL
from cos_client.response import Response
from cos_client.transport import Context, DebugSender


@dataclass
class CliArgs:
    """Parsed arguments shared by every subcommand, plus per-command extras."""

    command: str
    config: Path | None = None
    bucket_url: str | None = None
    headers: dict[str, str] = field(default_factory=dict)
    timeout: float | None = None
    debug: bool = False
    verbose: bool = False
    # put-acl
    acl: str | None = None
    grant_read: str | None = None
    grant_write: str | None = None
    grant_full_control: str | None = None
    # list-objects
    prefix: str | None = None
    delimiter: str | None = None
    marker: str | None = None
    max_keys: int | None = None


def positive_float(value: str) -> float:
    """Parse and validate a positive float value.

    Raises:
        argparse.ArgumentTypeError: If value is not a positive number.
    """
    try:
        result = float(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"Invalid number '{value}'.")
    if result <= 0:
        raise argparse.ArgumentTypeError(f"Value must be positive, got {result}.")
    return result


def positive_int(value: str) -> int:
    try:
        result = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"Invalid integer '{value}'.")
    if result <= 0:
        raise argparse.ArgumentTypeError(f"Value must be positive, got {result}.")
    return result


def parse_header(value: str) -> tuple[str, str]:
    """Parse NAME:VALUE into a header pair."""
    name, sep, header_value = value.partition(":")
    if not sep or not name.strip():
        raise argparse.ArgumentTypeError(f"Invalid header '{value}'. Expected NAME:VALUE.")
    return name.strip(), header_value.strip()


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser with one subcommand per API call."""
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--config", type=Path, help="Path to client config YAML")
    common.add_argument("--bucket-url", help="Bucket base URL (overrides config)")
    common.add_argument(
        "--header",
        type=parse_header,
        action="append",
        default=[],
        metavar="NAME:VALUE",
        dest="header",
        help="Extra request header (can be repeated)",
    )
    common.add_argument("--timeout", type=positive_float, help="Request timeout in seconds")
    common.add_argument(
        "--debug", action="store_true", help="Log full requests and responses to stderr"
    )
    common.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")

    parser = argparse.ArgumentParser(
        prog="cos-client",
        description="Command-line access to the COS object storage API.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True, help="API call")

    subparsers.add_parser("list-buckets", parents=[common], help="List buckets of the account")
    subparsers.add_parser("get-acl", parents=[common], help="Show the bucket ACL")
    subparsers.add_parser("get-location", parents=[common], help="Show the bucket region")
    subparsers.add_parser("get-lifecycle", parents=[common], help="Show bucket lifecycle rules")

    list_objects = subparsers.add_parser(
        "list-objects", parents=[common], help="List objects in the bucket"
    )
    list_objects.add_argument("--prefix")
    list_objects.add_argument("--delimiter")
    list_objects.add_argument("--marker")
    list_objects.add_argument("--max-keys", type=positive_int)

    put_acl = subparsers.add_parser("put-acl", parents=[common], help="Set the bucket ACL")
    put_acl.add_argument("--acl", choices=[c.value for c in CannedACL], help="Canned ACL")
    put_acl.add_argument("--grant-read", metavar='id="UIN"')
    put_acl.add_argument("--grant-write", metavar='id="UIN"')
    put_acl.add_argument("--grant-full-control", metavar='id="UIN"')

    return parser


def parse_args(args: list[str] | None = None) -> CliArgs:
    """Parse command-line arguments into CliArgs.

    Raises:
        SystemExit: If arguments are invalid (argparse behavior).
    """
    parser = build_parser()
    namespace = parser.parse_args(args)

    if namespace.command == "put-acl" and not any(
        (namespace.acl, namespace.grant_read, namespace.grant_write, namespace.grant_full_control)
    ):
        parser.error("put-acl needs --acl or at least one --grant-* option")

    return CliArgs(
        command=namespace.command,
        config=namespace.config,
        bucket_url=namespace.bucket_url,
        headers=dict(namespace.header),
        timeout=namespace.timeout,
        debug=namespace.debug,
        verbose=namespace.verbose,
        acl=getattr(namespace, "acl", None),
        grant_read=getattr(namespace, "grant_read", None),
        grant_write=getattr(namespace, "grant_write", None),
        grant_full_control=getattr(namespace, "grant_full_control", None),
        prefix=getattr(namespace, "prefix", None),
        delimiter=getattr(namespace, "delimiter", None),
        marker=getattr(namespace, "marker", None),
        max_keys=getattr(namespace, "max_keys", None),
    )


def build_config(args: CliArgs) -> ClientConfig:
    """Config file (if any) with command-line overrides applied."""
    config = load_client_config(args.config) if args.config else ClientConfig()
    updates: dict[str, object] = {}
    if args.bucket_url:
        updates["bucket_url"] = args.bucket_url
    if args.headers:
        updates["headers"] = {**config.headers, **args.headers}
    if args.timeout:
        updates["timeout"] = args.timeout
    return config.model_copy(update=updates)


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if (args.verbose or args.debug) else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    try:
        config = build_config(args)
        return asyncio.run(run_command(args, config))
    except CosClientError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        print("\nInterrupted", file=sys.stderr)
        return 1


async def run_command(args: CliArgs, config: ClientConfig) -> int:
    """Run one subcommand against a client built from *config*."""
    ctx = Context(timeout=config.timeout)
    async with Client.from_config(config) as client:
        if args.debug:
            client.sender = DebugSender(client.sender)

        result: BaseModel | None
        resp: Response
        if args.command == "list-buckets":
            result, resp = await client.service.get(ctx)
        elif args.command == "list-objects":
            opt = BucketGetOptions(
                prefix=args.prefix,
                delimiter=args.delimiter,
                marker=args.marker,
                max_keys=args.max_keys,
            )
            result, resp = await client.bucket.get(opt, ctx)
        elif args.command == "get-acl":
            result, resp = await client.bucket.get_acl(ctx)
        elif args.command == "get-location":
            result, resp = await client.bucket.get_location(ctx)
        elif args.command == "get-lifecycle":
            result, resp = await client.bucket.get_lifecycle(ctx)
        else:
            header = ACLHeaderOptions(
                x_cos_acl=args.acl,
                x_cos_grant_read=args.grant_read,
                x_cos_grant_write=args.grant_write,
                x_cos_grant_full_control=args.grant_full_control,
            )
            result = None
            resp = await client.bucket.put_acl(BucketPutACLOptions(header=header), ctx)

    if result is not None:
        print(result.model_dump_json(indent=2, exclude_none=True))
    print(f"request-id: {resp.request_id}", file=sys.stderr)
    return 0


if __name__ == "__main__":
    sys.exit(main())
