"""
Command-line event sender.

Loads TCPLOGGING_* settings from the environment (and a .env file),
starts one session, records the given events, ends the session.

    tcplog-send "Login:method=password" "Level.Complete:level=3,score=1200"
    tcplog-send --sink file --output-dir ./out --session-attr build=42 Boot
"""

from __future__ import annotations

import argparse
import sys
from dataclasses import replace
from typing import Iterable

from dotenv import load_dotenv

from analytics.attributes import Attribute, AttributeValue
from config import AnalyticsConfig, ConfigInvalid
from constants import PROFILES, SINKS
from protocol.encoder import is_json_number
from provider import create_session_manager


EXIT_OK = 0
EXIT_START_FAILED = 1
EXIT_CONFIG_INVALID = 2
EXIT_EVENTS_DROPPED = 3


def parse_attribute(entry: str) -> Attribute:
    """`key=value`; values that are JSON numbers are sent as numbers."""
    if "=" not in entry:
        raise ValueError(f"Attribute must be key=value: {entry}")
    name, raw = entry.split("=", 1)
    if not name:
        raise ValueError(f"Attribute name cannot be empty: {entry}")
    if is_json_number(raw):
        return Attribute(name, AttributeValue.numeric(raw))
    return Attribute(name, AttributeValue.of_text(raw))


def parse_event_spec(spec: str) -> tuple[str, tuple[Attribute, ...]]:
    """`Name[:key=value[,key=value...]]`"""
    name, _, rest = spec.partition(":")
    if not name:
        raise ValueError(f"Event name cannot be empty: {spec}")
    if not rest:
        return name, ()
    return name, tuple(parse_attribute(entry) for entry in rest.split(","))


def run_cli(argv: Iterable[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Send analytics events in one session.")
    parser.add_argument("events", nargs="+", help="Event spec: Name[:key=value[,key=value...]]")
    parser.add_argument("--env-file", default=".env", help="dotenv file to load first (default: .env)")
    parser.add_argument("--profile", choices=PROFILES, help="Build profile for TCPLOGGING_<PROFILE>_* overrides")
    parser.add_argument("--sink", choices=SINKS, help="Override TCPLOGGING_SINK")
    parser.add_argument("--host", dest="host_name", help="Override TCPLOGGING_HOST_NAME")
    parser.add_argument("--port", type=int, help="Override TCPLOGGING_PORT")
    parser.add_argument("--output-dir", dest="output_dir", help="Override TCPLOGGING_OUTPUT_DIR")
    parser.add_argument(
        "--session-attr",
        dest="session_attrs",
        action="append",
        default=[],
        help="Session-start attribute key=value (repeatable)",
    )

    args = parser.parse_args(list(argv) if argv is not None else None)

    load_dotenv(args.env_file)

    try:
        config = AnalyticsConfig.load_from_env(profile=args.profile)
        session_attributes = tuple(parse_attribute(entry) for entry in args.session_attrs)
        events = [parse_event_spec(spec) for spec in args.events]
    except (ConfigInvalid, ValueError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return EXIT_CONFIG_INVALID

    overrides = {
        key: value
        for key, value in (
            ("sink", args.sink),
            ("host_name", args.host_name),
            ("port", args.port),
            ("output_dir", args.output_dir),
        )
        if value is not None
    }
    config = replace(config, **overrides)

    manager = create_session_manager(config)
    if manager is None:
        return EXIT_CONFIG_INVALID

    with manager:
        if not manager.start_session(session_attributes):
            return EXIT_START_FAILED

        dropped = 0
        for name, attributes in events:
            if not manager.record_event(name, attributes):
                dropped += 1

    return EXIT_EVENTS_DROPPED if dropped else EXIT_OK


def main() -> None:
    sys.exit(run_cli())


if __name__ == "__main__":
    main()
