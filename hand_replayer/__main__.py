#!/usr/bin/env python3
"""
CLI for the hand replayer.
Usage: python -m hand_replayer replay hand.txt [--out replay.json] [--config config.yml]
"""

import argparse
import json
import logging
import sys
from pathlib import Path

from .config import load_config
from .guards.anomaly_log import open_anomaly_log
from .parse.runner import parse_hand
from .pipeline import replay_hand


def _read(path: str) -> str:
    return Path(path).read_text(encoding='utf-8', errors='replace')


def _report_failure(result) -> int:
    print(f"Error [{result.code.value}]: {result.message}", file=sys.stderr)
    return 1


def run_parse(args, config) -> int:
    result = parse_hand(_read(args.file))
    if not result.ok:
        return _report_failure(result)
    print(json.dumps(result.value.model_dump(mode="json"), indent=2, ensure_ascii=False))
    for warning in result.warnings:
        print(f"warning: {warning}", file=sys.stderr)
    return 0


def run_replay(args, config) -> int:
    result = replay_hand(_read(args.file), config, open_anomaly_log(config))
    if not result.ok:
        return _report_failure(result)

    replay = result.value
    payload = json.dumps(replay.to_dict(), indent=2, ensure_ascii=False)
    if args.out:
        Path(args.out).parent.mkdir(parents=True, exist_ok=True)
        Path(args.out).write_text(payload, encoding='utf-8')
        print(f"Hand {replay.hand.hand_id}: {len(replay.snapshots)} snapshots -> {args.out}")
    else:
        print(payload)
    for warning in result.warnings:
        print(f"warning: {warning}", file=sys.stderr)
    return 0


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(
        prog='hand_replayer',
        description='Parse poker hand histories and build replay snapshots'
    )
    parser.add_argument('--config', dest='config_path', default=None,
                        help='Path to YAML configuration (default: packaged config.yml)')
    parser.add_argument('--verbose', action='store_true', help='Enable verbose logging')

    sub = parser.add_subparsers(dest='command', required=True)

    p_parse = sub.add_parser('parse', help='Print the parsed hand as JSON')
    p_parse.add_argument('file', help='Text file holding exactly one hand')
    p_parse.set_defaults(func=run_parse)

    p_replay = sub.add_parser('replay', help='Build the snapshot sequence of a hand')
    p_replay.add_argument('file', help='Text file holding exactly one hand')
    p_replay.add_argument('--out', default=None, help='Write replay JSON here instead of stdout')
    p_replay.set_defaults(func=run_replay)

    args = parser.parse_args(argv)

    # Configure logging
    log_level = logging.DEBUG if args.verbose else logging.INFO
    logging.basicConfig(
        level=log_level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    try:
        config = load_config(args.config_path)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    try:
        return args.func(args, config)
    except OSError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == '__main__':
    sys.exit(main())
