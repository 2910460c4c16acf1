from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any

from . import __version__
from .models import OVERRIDE_NAMES, ClientIdentity, ValidationRequest
from .orchestrator import DEFAULT_TIMEOUT, TrustDecisionOrchestrator
from .overrides import parse_overrides

CLI_IDENTITY_REF = "cli"


def _write_output(out_path: str | None, payload: Any) -> None:
    text = json.dumps(payload, indent=2, ensure_ascii=False)
    if out_path:
        Path(out_path).write_text(text + "\n", encoding="utf-8")
    else:
        print(text)


def _setup_logging(verbosity: int) -> None:
    if verbosity <= 0:
        level = logging.WARNING
    elif verbosity == 1:
        level = logging.INFO
    else:
        level = logging.DEBUG
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s", stream=sys.stderr)


def parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(
        prog="restapi-trust",
        description="Check that a REST API base URL is reachable and its TLS certificate can be trusted.",
    )
    p.add_argument("baseurl", nargs="?", help="http[s]://<HOST>[:<PORT>][/<BASE_LOCATION>]")
    p.add_argument(
        "--grant",
        "-g",
        action="append",
        default=[],
        metavar="OVERRIDE",
        help=f"Grant an override, repeatable ({', '.join(OVERRIDE_NAMES)})",
    )
    p.add_argument("--client-cert", help="TLS client certificate (PEM) to present")
    p.add_argument("--client-key", help="Private key (PEM) of --client-cert, if not in the same file")
    p.add_argument(
        "--timeout",
        type=float,
        default=DEFAULT_TIMEOUT,
        help=f"Socket timeout seconds (default: {DEFAULT_TIMEOUT:g})",
    )
    p.add_argument("--out", "-o", help="Write JSON output to file (default: stdout)")
    p.add_argument("--verbose", "-v", action="count", default=0, help="Log to stderr (-vv for debug)")
    p.add_argument("--version", action="store_true", help="Print version and exit")
    return p.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(sys.argv[1:] if argv is None else argv)

    if args.version:
        print(__version__)
        return 0

    if not args.baseurl:
        print("Error: baseurl is required", file=sys.stderr)
        return 1
    if args.client_key and not args.client_cert:
        print("Error: --client-key requires --client-cert", file=sys.stderr)
        return 1
    if args.timeout <= 0:
        print("Error: timeout must be positive", file=sys.stderr)
        return 1

    try:
        granted = parse_overrides(args.grant)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    _setup_logging(args.verbose)

    identity = None
    if args.client_cert:
        identity = ClientIdentity(certfile=args.client_cert, keyfile=args.client_key)

    orchestrator = TrustDecisionOrchestrator(
        timeout=args.timeout,
        resolve_identity=lambda ref: identity if ref == CLI_IDENTITY_REF else None,
    )
    outcome = orchestrator.validate(
        ValidationRequest(
            baseurl=args.baseurl,
            client_identity_ref=CLI_IDENTITY_REF if identity else None,
            granted=granted,
        )
    )

    payload = {
        "baseurl": args.baseurl,
        "version": __version__,
        "granted": list(granted),
        "outcome": outcome.to_dict(),
    }
    _write_output(args.out, payload)

    if outcome.accepted:
        return 0
    # malformed input offers nothing to grant
    return 2 if len(outcome.required_overrides) else 1


if __name__ == "__main__":
    raise SystemExit(main())
