"""StreamDock Linux version information."""

__version__ = "0.3.0"
__version_info__ = tuple(int(x) for x in __version__.split("."))

# Version history:
# 0.1.0 - Initial release: wake/clear/brightness, key icons, key press decoding
# 0.2.0 - Boot logo upload (800x480 BGR), firmware version query
# 0.3.0 - FIFO transfer lock released on USB errors, explicit unmapped key
#         events, STREAMDOCK_* environment overrides, fill/listen CLI commands
