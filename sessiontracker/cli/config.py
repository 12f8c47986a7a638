# ==============================================================================
# Config Commands
# ==============================================================================
"""
Configuration commands for the session tracker CLI.

Shows the effective configuration, including the fallbacks applied to the
session settings.
"""

import json
from typing import Annotated

import typer

from sessiontracker.cli.shared import C
from sessiontracker.utils.config import get_settings


# ==============================================================================
# Commands
# ==============================================================================


def config_show(
    json_output: Annotated[
        bool, typer.Option("--json", "-j", help="Output configuration as JSON")
    ] = False,
) -> None:
    """Display current configuration (includes secrets in JSON mode)."""
    settings = get_settings()
    tracker_config = settings.session.to_tracker_config()

    if json_output:
        config = {
            "session": {
                "length_seconds": tracker_config.session_length_seconds,
                "start_event": tracker_config.session_start_event,
                "end_event": tracker_config.session_end_event,
                "recheck_interval_seconds": tracker_config.recheck_interval_seconds,
                "key_prefix": tracker_config.key_prefix,
                "state_ttl_seconds": tracker_config.state_ttl_seconds,
            },
            "kafka": {
                "bootstrap_servers": [
                    s.strip() for s in settings.kafka.bootstrap_servers.split(",")
                ],
                "security_protocol": settings.kafka.security_protocol,
                "events_topic": settings.kafka.events_topic,
                "session_events_topic": settings.kafka.session_events_topic,
            },
            "valkey": {
                "host": settings.valkey.host,
                "port": settings.valkey.port,
                "db": settings.valkey.db,
                "ssl_enabled": settings.valkey.ssl,
                "password": settings.valkey.password,
            },
            "consumer": {
                "group_id": settings.consumer.group_id,
                "auto_offset_reset": settings.consumer.auto_offset_reset,
                "batch_size": settings.consumer.batch_size,
            },
            "sink": {
                "impl": settings.sink.impl,
                "http_host": settings.sink.http_host,
                "http_api_key": settings.sink.http_api_key,
            },
        }
        print(json.dumps(config, indent=2))
        return

    # Human-readable output
    print()
    print(f"{C.BOLD}Configuration{C.RESET}")
    print()

    print(f"{C.CYAN}Session{C.RESET}")
    print(f"  Length:     {C.WHITE}{tracker_config.session_length_seconds}s{C.RESET}")
    print(f"  Start:      {C.WHITE}{tracker_config.session_start_event}{C.RESET}")
    print(f"  End:        {C.WHITE}{tracker_config.session_end_event}{C.RESET}")
    print(f"  Recheck:    {C.WHITE}{tracker_config.recheck_interval_seconds}s{C.RESET}")
    print(f"  Keys:       {C.WHITE}{tracker_config.key_prefix}*{C.RESET}")
    print()

    print(f"{C.CYAN}Kafka{C.RESET}")
    servers = settings.kafka.bootstrap_servers.split(",")
    for i, server in enumerate(servers):
        label = "  Bootstrap:  " if i == 0 else "              "
        print(f"{label}{C.WHITE}{server.strip()}{C.RESET}")
    print(f"  Inbound:    {C.WHITE}{settings.kafka.events_topic}{C.RESET}")
    print(f"  Outbound:   {C.WHITE}{settings.kafka.session_events_topic}{C.RESET}")
    print(f"  Group:      {C.WHITE}{settings.consumer.group_id}{C.RESET}")
    print()

    print(f"{C.CYAN}Valkey{C.RESET}")
    print(f"  Host:       {C.WHITE}{settings.valkey.host}:{settings.valkey.port}{C.RESET}")
    print(f"  SSL:        {C.WHITE}{'enabled' if settings.valkey.ssl else 'disabled'}{C.RESET}")
    print()

    print(f"{C.CYAN}Sink{C.RESET}")
    print(f"  Impl:       {C.WHITE}{settings.sink.impl}{C.RESET}")
    if settings.sink.impl == "http":
        print(f"  Host:       {C.WHITE}{settings.sink.http_host}{C.RESET}")
    print()
