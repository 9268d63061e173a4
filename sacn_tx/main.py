#!/usr/bin/env python3
"""
sacn-tx - command line sACN sender

Sends a single frame or plays a CSV file of frames on one universe, to the
universe's multicast group or to a unicast host.

Usage:
    sacn-tx --universe 1 --values 255,0,128
    sacn-tx --universe 2 --csv show.csv --fps 25 --loop --host 10.0.0.50
"""

import argparse
import sys
from typing import List, Optional

from .config import DEFAULT_CONFIG_FILE, ConfigManager, build_sender
from .errors import SACNError
from .frame_player import FramePlayer, load_frames_csv
from .sender import Destination


def parse_values(text: str) -> List[int]:
    try:
        return [int(v) for v in text.split(',') if v.strip()]
    except ValueError as e:
        raise argparse.ArgumentTypeError(f"values must be comma-separated integers: {e}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Send DMX data over sACN (E1.31)")
    parser.add_argument('--universe', type=int, required=True, help='Universe to send on (1-63999)')
    frame_source = parser.add_mutually_exclusive_group(required=True)
    frame_source.add_argument('--values', type=parse_values, help='One frame of comma-separated slot values')
    frame_source.add_argument('--csv', help='CSV file of frames, one frame per row')
    parser.add_argument('--fps', type=int, help='Playback frame rate for --csv')
    parser.add_argument('--loop', action='store_true', help='Repeat the CSV frames until interrupted')
    parser.add_argument('--host', help='Unicast to this host instead of multicast')
    parser.add_argument('--interface', help='Outgoing multicast interface (address, index or name)')
    parser.add_argument('--priority', type=int, help='Packet priority (0-200)')
    parser.add_argument('--port', type=int, help='Destination UDP port')
    parser.add_argument('--source-name', help='Source name carried in every packet')
    parser.add_argument('--config', default=DEFAULT_CONFIG_FILE, help='JSON configuration file')
    parser.add_argument('--save-config', action='store_true', help='Write the effective settings back to --config')
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    manager = ConfigManager(args.config)
    config = manager.load_config()
    if args.source_name is not None:
        config.source_name = args.source_name
    if args.port is not None:
        config.port = args.port
    if args.priority is not None:
        config.priority = args.priority
    if args.interface is not None:
        config.multicast_interface = args.interface
    if args.host is not None:
        config.unicast_host = args.host
    if args.fps is not None:
        config.fps = args.fps

    if args.save_config and manager.save_config(config):
        print(f"💾 Configuration saved to {args.config}")

    try:
        sender = build_sender(config)
    except (SACNError, ValueError) as e:
        print(f"❌ Could not create sender: {e}")
        return 2

    destination = Destination.unicast(config.unicast_host) if config.unicast_host else Destination.multicast()
    target = config.unicast_host or "multicast"

    with sender:
        if args.values is not None:
            try:
                sequence = sender.send(args.universe, args.values, destination)
            except SACNError as e:
                print(f"❌ Send failed: {e}")
                return 1
            print(f"📤 Sent {len(args.values)} slots to universe {args.universe} ({target}), sequence {sequence}")
            return 0

        try:
            frames = load_frames_csv(args.csv)
        except (OSError, ValueError) as e:
            print(f"❌ Error loading CSV '{args.csv}': {e}")
            return 2

        player = FramePlayer(sender, args.universe, frames, fps=config.fps,
                             destination=destination, loop=args.loop)
        player.start()
        try:
            while not player.wait(timeout=0.5):
                pass
        except KeyboardInterrupt:
            print("🛑 Interrupted, stopping playback")
        finally:
            player.stop()

    return 1 if player.last_error else 0


if __name__ == "__main__":
    sys.exit(main())
