#!/usr/bin/env python3
"""
RTA Transcript Poller — Command Line Interface
Watches a Teams meeting's realtime transcript feed and prints new fragments.

Usage:
    python cli.py                    # poll forever (POLL_MS interval)
    python cli.py --once             # single pass, e.g. to check credentials
    python cli.py --interval 5000 --verbose
"""
import argparse
import logging
import sys

from config.settings import ConfigError, RtaConfig
from triggers.graph_auth import GraphCredentialProvider
from triggers.graph_client import GraphClient
from triggers.rta_trigger import TranscriptPoller

logger = logging.getLogger("rta.cli")


def setup_logging(debug: bool = False):
    level = logging.DEBUG if debug else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
        datefmt="%H:%M:%S",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Microsoft Graph RTA transcript poller")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    parser.add_argument("--verbose", action="store_true", help="Print raw list/detail payloads")
    parser.add_argument("--interval", type=int, metavar="MS", help="Poll interval in milliseconds")
    runs = parser.add_mutually_exclusive_group()
    runs.add_argument("--once", action="store_true", help="Run a single poll iteration and exit")
    runs.add_argument("--iterations", type=int, metavar="N", help="Stop after N iterations")
    return parser


def build_poller(cfg: RtaConfig) -> TranscriptPoller:
    credentials = GraphCredentialProvider(
        cfg.graph.tenant_id,
        cfg.graph.client_id,
        cfg.graph.client_secret,
        scope=cfg.graph.scope,
        authority_host=cfg.graph.authority_host,
    )
    client = GraphClient(
        base_url=cfg.graph.base_url,
        max_attempts=cfg.poller.max_attempts,
        max_backoff_ms=cfg.poller.max_backoff_ms,
        timeout=cfg.graph.timeout,
    )
    return TranscriptPoller(
        meeting_id=cfg.poller.meeting_id,
        credentials=credentials,
        client=client,
        poll_interval_ms=cfg.poller.poll_ms,
        verbose=cfg.poller.verbose,
        token_max_age=cfg.poller.token_max_age,
    )


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.interval is not None and args.interval < 0:
        parser.error("--interval must be >= 0")
    if args.iterations is not None and args.iterations < 1:
        parser.error("--iterations must be >= 1")

    cfg = RtaConfig()
    if args.interval is not None:
        cfg.poller.poll_ms = args.interval
    if args.verbose:
        cfg.poller.verbose = True
    setup_logging(args.debug or cfg.debug)

    try:
        cfg.validate()
    except ConfigError as e:
        print(str(e), file=sys.stderr)
        return 1

    max_iterations = 1 if args.once else args.iterations
    poller = build_poller(cfg)
    try:
        poller.run(max_iterations=max_iterations)
    except KeyboardInterrupt:
        logger.info("Stopped")
    except Exception:
        logger.exception("Poller crashed")
        return 1
    finally:
        poller.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())
