import logging
import sys
from enum import Enum

from .config import Settings

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

logger = logging.getLogger("opendig")


class StartupState(Enum):
    UNINITIALIZED = "uninitialized"
    INITIALIZED = "initialized"


class StartupInfo:
    """
    Logs the host/tool summary once per process.

    The app calls initialize() from its startup hook; later calls are no-ops.
    """

    def __init__(self) -> None:
        self.state = StartupState.UNINITIALIZED

    def initialize(self, settings: Settings) -> bool:
        if self.state is StartupState.INITIALIZED:
            return False

        logger.info("System info:")
        logger.info("  platform: %s", sys.platform)
        logger.info("  dig path: %s", settings.dig_path)
        logger.info("  default server: %s", settings.default_server)
        logger.info("  debug mode: %s", "on" if settings.debug else "off")

        self.state = StartupState.INITIALIZED
        return True


startup_info = StartupInfo()


def setup_logging(settings: Settings) -> None:
    logging.basicConfig(
        level=logging.DEBUG if settings.debug else logging.INFO,
        format=LOG_FORMAT,
        handlers=[logging.StreamHandler(sys.stdout)],
    )
