#!/usr/bin/env python3
"""
StreamDock Linux - Command Line Interface

Entry point for the ``streamdock`` console script.
"""

import argparse
import logging
import os
import sys

from streamdock import conf
from streamdock.__version__ import __version__
from streamdock.errors import StreamDockError
from streamdock.key_events import KEY_COUNT


def _int(value):
    """argparse type accepting decimal or 0x-prefixed hex."""
    try:
        return int(value, 0)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid integer: {value!r}")


def _byte(value):
    """argparse type for a single command byte (0-255)."""
    number = _int(value)
    if not 0 <= number <= 0xFF:
        raise argparse.ArgumentTypeError(f"must be in 0-255: {value!r}")
    return number


def _setup_logging(verbose=0):
    """Configure logging from -v count (filter out noisy PIL)."""
    if verbose >= 2:
        logging.basicConfig(level=logging.DEBUG, format='[%(levelname)s] %(name)s: %(message)s')
        logging.getLogger('PIL').setLevel(logging.WARNING)
    elif verbose == 1:
        logging.basicConfig(level=logging.INFO, format='[%(levelname)s] %(message)s')
    else:
        logging.basicConfig(level=logging.WARNING)


def _open():
    from streamdock.device import open_device
    return open_device()


def build_parser():
    parser = argparse.ArgumentParser(
        prog="streamdock",
        description="StreamDock button panel control for Linux",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    streamdock version              Show firmware version
    streamdock wake                 Wake the display
    streamdock brightness 25        Set brightness
    streamdock icon 1 play.png      Set icon of key 1
    streamdock fill blank.png       Set the same icon on every key
    streamdock clear --key 3        Clear key 3 (all keys without --key)
    streamdock boot logo.jpg        Replace the boot logo
    streamdock listen               Print key presses
        """
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}"
    )
    parser.add_argument(
        "-v", "--verbose",
        action="count",
        default=0,
        help="Increase verbosity (-v, -vv)"
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    subparsers.add_parser("version", help="Show device firmware version")
    subparsers.add_parser("wake", help="Wake the key displays")
    subparsers.add_parser("refresh", help="Commit pending image data")

    clear_parser = subparsers.add_parser("clear", help="Clear key displays")
    clear_parser.add_argument("--key", "-k", type=_int, help="Key to clear (default: all keys)")

    brightness_parser = subparsers.add_parser("brightness", help="Set display brightness")
    brightness_parser.add_argument("value", type=_byte, help="Brightness value (0-255)")

    icon_parser = subparsers.add_parser("icon", help="Set the image of one key")
    icon_parser.add_argument("key", type=_int, help=f"Key number (1-{KEY_COUNT})")
    icon_parser.add_argument("image", help="Image file to send")

    fill_parser = subparsers.add_parser("fill", help="Set the same image on every key")
    fill_parser.add_argument("image", help="Image file to send")

    boot_parser = subparsers.add_parser("boot", help="Replace the 800x480 boot logo")
    boot_parser.add_argument("image", help="Image file to send")

    listen_parser = subparsers.add_parser("listen", help="Print key events")
    listen_parser.add_argument("--pressed", "-p", help="Image shown on a key while pressed")
    listen_parser.add_argument("--released", "-r", help="Image shown on a key when released")
    listen_parser.add_argument("--count", "-c", type=int, default=0,
                               help="Stop after N events (default: run until Ctrl+C)")

    return parser


def main(argv=None):
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    _setup_logging(args.verbose)

    if args.command == "version":
        return show_version()
    elif args.command == "wake":
        return wake()
    elif args.command == "refresh":
        return refresh()
    elif args.command == "clear":
        return clear(key=args.key)
    elif args.command == "brightness":
        return set_brightness(args.value)
    elif args.command == "icon":
        return set_icon(args.key, args.image)
    elif args.command == "fill":
        return fill(args.image)
    elif args.command == "boot":
        return set_boot(args.image)
    elif args.command == "listen":
        return listen(pressed=args.pressed, released=args.released, count=args.count)

    return 0


def _check_file(path):
    if not os.path.exists(path):
        print(f"Error: File not found: {path}")
        return False
    return True


def show_version():
    """Print the firmware version."""
    try:
        with _open() as dock:
            print(f"Firmware: {dock.get_firmware_version()}")
        return 0
    except StreamDockError as e:
        print(f"Error: {e}")
        return 1


def wake():
    """Wake the key displays."""
    try:
        with _open() as dock:
            dock.wake_screen()
        return 0
    except StreamDockError as e:
        print(f"Error: {e}")
        return 1


def refresh():
    """Send the commit command."""
    try:
        with _open() as dock:
            dock.refresh()
        return 0
    except StreamDockError as e:
        print(f"Error: {e}")
        return 1


def clear(key=None):
    """Clear one key, or every key when *key* is None."""
    try:
        with _open() as dock:
            if key is None:
                dock.clear_screen()
                print("Cleared all keys")
            else:
                dock.clear_key_image(key)
                print(f"Cleared key {key}")
        return 0
    except (StreamDockError, ValueError) as e:
        print(f"Error: {e}")
        return 1


def set_brightness(value):
    """Set display brightness."""
    try:
        with _open() as dock:
            dock.set_brightness(value)
        print(f"Brightness set to {value}")
        return 0
    except (StreamDockError, ValueError) as e:
        print(f"Error: {e}")
        return 1


def set_icon(key, image_path):
    """Send an image to one key."""
    if not _check_file(image_path):
        return 1
    try:
        with _open() as dock:
            dock.set_key_image(key, image_path)
        print(f"Sent {image_path} to key {key}")
        return 0
    except (StreamDockError, ValueError) as e:
        print(f"Error sending image: {e}")
        return 1


def fill(image_path):
    """Send the same image to every key at the configured brightness."""
    if not _check_file(image_path):
        return 1
    try:
        with open(image_path, 'rb') as f:
            data = f.read()
        with _open() as dock:
            dock.set_brightness(conf.settings.brightness)
            for key in range(1, KEY_COUNT + 1):
                dock.set_key_image(key, data)
        print(f"Sent {image_path} to {KEY_COUNT} keys")
        return 0
    except (StreamDockError, OSError, ValueError) as e:
        print(f"Error sending image: {e}")
        return 1


def set_boot(image_path):
    """Replace the boot logo."""
    if not _check_file(image_path):
        return 1
    try:
        print("Uploading boot logo...")
        with _open() as dock:
            dock.set_boot_image(image_path)
        print(f"Boot logo set from {image_path}")
        return 0
    except StreamDockError as e:
        print(f"Error sending boot logo: {e}")
        return 1


def _format_event(event):
    state = "pressed" if event.pressed else "released"
    if event.is_mapped:
        return f"Key {event.key_id} {state}"
    code = "?" if event.physical_code is None else f"0x{event.physical_code:02x}"
    return f"Unmapped key (code {code}) {state}"


def listen(pressed=None, released=None, count=0):
    """Print key events, optionally swapping key images on press/release."""
    for path in (pressed, released):
        if path and not _check_file(path):
            return 1
    try:
        images = {}
        for name, path in (("pressed", pressed), ("released", released)):
            if path:
                with open(path, 'rb') as f:
                    images[name] = f.read()

        with _open() as dock:
            dock.wake_screen()
            dock.set_brightness(conf.settings.brightness)
            if "released" in images:
                for key in range(1, KEY_COUNT + 1):
                    dock.set_key_image(key, images["released"])

            print("Listening for key events (Ctrl+C to stop)...")
            seen = 0
            for event in dock.key_events():
                print(_format_event(event))
                if event.is_mapped:
                    image = images.get("pressed" if event.pressed else "released")
                    if image is not None:
                        dock.set_key_image(event.key_id, image)
                seen += 1
                if count and seen >= count:
                    break
        return 0
    except KeyboardInterrupt:
        print()
        return 0
    except (StreamDockError, OSError, ValueError) as e:
        print(f"Error: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
