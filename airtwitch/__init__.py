"""
AirTwitch - Live Twitch streams on AirPlay receivers

- Continuous AirPlay receiver discovery and device registry
- Channel search and live stream variant resolution
- Remote playback sessions over the AirPlay HTTP control protocol
"""

__version__ = "1.0.0"
__author__ = "AirTwitch Contributors"
__license__ = "MIT"

from airtwitch.config import get_config, load_config

__all__ = [
    "__version__",
    "get_config",
    "load_config",
]
