import argparse
import asyncio
import os
import sys
from typing import List, Optional

from app.client.entitlement import JsonFileEntitlementStorage, ProEntitlement
from app.client.license_client import LicenseApiClient, LicenseApiError, VerificationOutcome
from app.services.license_key_service import is_well_formed_license_key


async def run_issue(args: argparse.Namespace) -> int:
    secret = args.admin_secret or os.environ.get("ADMIN_ISSUE_SECRET", "")
    client = LicenseApiClient(args.base_url, timeout=args.timeout)
    try:
        key = await client.issue_license(secret)
    except LicenseApiError as e:
        print(f"Failed to issue license: {e}", file=sys.stderr)
        return 1
    print(key)
    return 0


async def run_verify(args: argparse.Namespace) -> int:
    if not is_well_formed_license_key(args.key.strip()):
        print(f"Warning: {args.key.strip()!r} does not look like a CTP-XXXX-XXXX-XXXX key", file=sys.stderr)
    client = LicenseApiClient(args.base_url, timeout=args.timeout)
    if args.state_file:
        outcome = await ProEntitlement(client, JsonFileEntitlementStorage(args.state_file)).activate(args.key)
    else:
        outcome = await client.verify_license(args.key)
    print(outcome)
    return 0 if outcome is VerificationOutcome.VALID else 1


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="calltrack-license", description="Issue or verify CallTrack Pro license keys")
    parser.add_argument("--base-url", default=os.environ.get("LICENSE_API_BASE", "http://localhost:8000"),
                        help="License API base URL (default: $LICENSE_API_BASE or http://localhost:8000)")
    parser.add_argument("--timeout", type=float, default=10.0, help="Request timeout in seconds")
    subparsers = parser.add_subparsers(dest="command", required=True)

    issue = subparsers.add_parser("issue", help="Mint a new license key (admin)")
    issue.add_argument("--admin-secret", default=None, help="Admin secret (default: $ADMIN_ISSUE_SECRET)")
    issue.set_defaults(handler=run_issue)

    verify = subparsers.add_parser("verify", help="Check whether a license key is active")
    verify.add_argument("key")
    verify.add_argument("--state-file", default=None, help="JSON file to record the Pro flag in on success")
    verify.set_defaults(handler=run_verify)
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    return asyncio.run(args.handler(args))


if __name__ == "__main__":
    sys.exit(main())
