"""
AirTwitch command line.

Usage:
    airtwitch devices [--wait SECONDS]
    airtwitch search QUERY
    airtwitch streams CHANNEL
    airtwitch play CHANNEL [--device INDEX] [--variant TITLE] [--wait SECONDS]

CHANNEL is matched against search results by login or display name; the
first result is used when nothing matches exactly.
"""

import argparse
import logging
import sys
import time
from typing import Optional

from airtwitch import __version__
from airtwitch.config import load_config
from airtwitch.context import AirTwitchContext
from airtwitch.exceptions import AirTwitchError, ConfigurationError
from airtwitch.twitch.models import Channel, LiveStreamVariant
from airtwitch.twitch.resolver import StreamResolver
from airtwitch.utils.logging_setup import log_exception, setup_logging_from_config

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="airtwitch",
        description="Play live Twitch streams on AirPlay receivers",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--config", help="Path to airtwitch.yaml")
    parser.add_argument("--log-level", help="Override the configured log level")

    commands = parser.add_subparsers(dest="command", required=True)

    devices = commands.add_parser("devices", help="List AirPlay receivers on the network")
    devices.add_argument("--wait", type=float, help="Seconds to browse before listing")

    search = commands.add_parser("search", help="Search channels")
    search.add_argument("query")

    streams = commands.add_parser("streams", help="List live variants of a channel")
    streams.add_argument("channel")

    play = commands.add_parser("play", help="Play a channel on a receiver until interrupted")
    play.add_argument("channel")
    play.add_argument("--device", type=int, default=0, help="Device index from 'devices' (default 0)")
    play.add_argument("--variant", help="Variant title (default: first variant)")
    play.add_argument("--wait", type=float, help="Seconds to browse before picking the device")

    return parser


def find_channel(resolver: StreamResolver, query: str) -> Optional[Channel]:
    """Best search match for a channel query."""
    channels = resolver.search_channels(query)
    wanted = query.lower()
    for channel in channels:
        if wanted in (channel.name.lower(), channel.display_name.lower()):
            return channel
    return channels[0] if channels else None


def pick_variant(variants: list[LiveStreamVariant], title: Optional[str]) -> Optional[LiveStreamVariant]:
    if title is None:
        return variants[0] if variants else None
    return next((variant for variant in variants if variant.title == title), None)


def cmd_devices(context: AirTwitchContext, args: argparse.Namespace) -> int:
    context.start()
    time.sleep(args.wait if args.wait is not None else context.config.discovery.browse_seconds)
    devices = context.registry.list()
    if not devices:
        print("No devices found")
        return 1
    for index, device in enumerate(devices):
        print(f"{index}) {device}")
    return 0


def cmd_search(context: AirTwitchContext, args: argparse.Namespace) -> int:
    channels = context.resolver.search_channels(args.query)
    if not channels:
        print(f"No search results for {args.query}")
        return 1
    for index, channel in enumerate(channels):
        print(f"{index}) {channel.display_name} [{channel.name}]: {channel.status}")
    return 0


def cmd_streams(context: AirTwitchContext, args: argparse.Namespace) -> int:
    channel = find_channel(context.resolver, args.channel)
    if channel is None:
        print(f"No channel matches {args.channel}")
        return 1
    variants = context.resolver.resolve_live_variants(channel)
    if not variants:
        if channel.is_live:
            print(f"Channel {channel.display_name} is live but its manifest lists no streams")
        else:
            print(f"Channel {channel.display_name} is not live")
        return 1
    for index, variant in enumerate(variants):
        print(f"{index}) {variant.title}: {variant.uri}")
    return 0


def cmd_play(context: AirTwitchContext, args: argparse.Namespace) -> int:
    context.start()
    channel = find_channel(context.resolver, args.channel)
    if channel is None:
        print(f"No channel matches {args.channel}")
        return 1
    variants = context.resolver.resolve_live_variants(channel)
    variant = pick_variant(variants, args.variant)
    if variant is None:
        print(f"Channel {channel.display_name} has no matching live stream")
        return 1

    time.sleep(args.wait if args.wait is not None else context.config.discovery.browse_seconds)
    device = context.registry.get(args.device)

    context.controller.play(device, variant)
    print(f"Playing {variant.title} from {channel.display_name} on {device.name}; Ctrl+C to stop")
    try:
        while True:
            time.sleep(1)
    except KeyboardInterrupt:
        pass
    context.controller.stop()
    return 0


COMMANDS = {
    "devices": cmd_devices,
    "search": cmd_search,
    "streams": cmd_streams,
    "play": cmd_play,
}


def main(argv: Optional[list[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        config = load_config(args.config)
    except ConfigurationError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 2

    if args.log_level:
        config.logging.level = args.log_level
    setup_logging_from_config(config.logging)

    context = AirTwitchContext(config)
    try:
        return COMMANDS[args.command](context, args)
    except AirTwitchError as e:
        log_exception(logger, e, f"{args.command} failed")
        print(f"Error: {e}", file=sys.stderr)
        return 1
    finally:
        context.close()


if __name__ == "__main__":
    sys.exit(main())
