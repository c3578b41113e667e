"""Main background service for Playback Scrobbler."""

import signal
import sys
import time
from pathlib import Path
from typing import List, Optional

from .config.settings import Settings
from .core.engine import ScrobbleEngine
from .core.notifier import Notifier
from .core.scheduler import TickScheduler
from .sinks import Sink, build_sinks
from .sources import Source, build_sources
from .utils.logger import setup_logger
from .utils.platform import is_windows


class ScrobblerService:
    """Wires sources, sinks and notifications together and runs the loop."""

    def __init__(
        self,
        config_path: Optional[Path] = None,
        debug: bool = False,
        json_logs: bool = False
    ):
        """Initialize the service.

        Args:
            config_path: Path to configuration file (optional)
            debug: Force DEBUG logging
            json_logs: Print log messages as JSON lines
        """
        self.running = False
        self.config_path = config_path

        # Load settings
        self.settings = Settings.from_file_or_default(config_path)

        # Setup logging
        self.logger = setup_logger(
            log_file=self.settings.logging.path,
            level="DEBUG" if debug else self.settings.logging.level,
            max_size_mb=self.settings.logging.max_size_mb,
            backup_count=self.settings.logging.backup_count,
            console=True,
            json_format=json_logs
        )

        self.logger.info("Initializing Playback Scrobbler service")
        self.logger.debug(f"Parsed config: {self.settings}")

        self.sources: List[Source] = []
        self.sinks: List[Sink] = []
        self.notifier: Optional[Notifier] = None
        self.engine: Optional[ScrobbleEngine] = None
        self.scheduler: Optional[TickScheduler] = None

    def setup_signal_handlers(self) -> None:
        """Setup signal handlers for graceful shutdown."""

        def signal_handler(signum, frame):
            self.logger.info(f"Received signal {signum}, shutting down...")
            self.shutdown()

        # Windows uses SIGBREAK, Linux/macOS use SIGTERM
        signal.signal(signal.SIGINT, signal_handler)

        if is_windows():
            signal.signal(signal.SIGBREAK, signal_handler)
        else:
            signal.signal(signal.SIGTERM, signal_handler)

    def build(self) -> ScrobbleEngine:
        """Create sources, sinks, notifier and engine from the settings."""
        self.sources = build_sources(self.settings, self.logger)
        self.sinks = build_sinks(self.settings, self.logger)

        self.notifier = Notifier(
            logger=self.logger,
            enabled=self.settings.notifications.enabled
        )

        self.engine = ScrobbleEngine.from_settings(
            self.settings,
            sources=self.sources,
            sinks=self.sinks,
            notifier=self.notifier,
            logger=self.logger
        )

        self.logger.info(
            f"Sources: {', '.join(s.name for s in self.sources) or 'none'}; "
            f"sinks: {', '.join(s.name for s in self.sinks) or 'none'}"
        )
        return self.engine

    def start(self) -> None:
        """Start the scrobbling service."""
        try:
            self.running = True

            # Setup signal handlers
            self.setup_signal_handlers()

            engine = self.build()

            self.scheduler = TickScheduler(
                logger=self.logger,
                tick_function=engine.run_once,
                poll_interval=self.settings.poll_interval
            )

            self.scheduler.start(run_now=True)

            self.logger.info("Service started successfully")
            self.logger.info("Press Ctrl+C to stop")

            # Keep service alive
            self._keep_alive()

        except KeyboardInterrupt:
            self.logger.info("Keyboard interrupt received")
            self.shutdown()
        except Exception as e:
            self.logger.error(f"Service error: {e}", exc_info=True)
            self.shutdown()
            raise

    def _keep_alive(self) -> None:
        """Keep the service alive.

        Windows doesn't support signal.pause(), so we use a sleep loop.
        """
        if is_windows():
            while self.running:
                time.sleep(1)
        else:
            while self.running:
                signal.pause()

    def shutdown(self) -> None:
        """Graceful shutdown."""
        if not self.running:
            return

        self.logger.info("Shutting down service...")
        self.running = False

        if self.scheduler:
            self.scheduler.stop()

        self.logger.info("Service stopped")

        sys.exit(0)


def main():
    """Main entry point."""
    service = ScrobblerService()
    service.start()


if __name__ == "__main__":
    main()
