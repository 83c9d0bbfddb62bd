#!/usr/bin/env python3
"""
Endpoint Catalog - Main Application Entry Point

A developer-tool panel for browsing discovered HTTP endpoints by class,
Swagger tag or source method, with keyword filtering and selection that
survives background re-scans.
"""

import sys
import os
import asyncio
import threading
import logging
import argparse
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from catalog import __version__
from catalog.view_mode import ViewMode
from catalog.view_model import EndpointViewModel
from config.catalog_config import CatalogSettings
from config.env_loader import EnvLoader
from services.openapi_scanner import OpenApiScanner, ScanError, ScanResult
from ui.controller import EndpointTreeController
from ui.text_tree import TextTreePresenter
from utils.logger import initialize_logging, LogLevel, get_logger, log_exception, log_scan
from utils.error_handler import get_error_handler


DEFAULT_ENV_FILE = ".env"


class EndpointCatalogApp:
    """Main application class for the endpoint catalog panel."""

    def __init__(self, env_path: Optional[str] = None, debug: bool = False):
        """
        Initialize the application.

        Args:
            env_path: Path to a .env file, defaults to ./.env when present
            debug: Enable debug logging regardless of configuration
        """
        self.env_path = env_path
        self.debug = debug
        self.root = None
        self.panel = None
        self.running = False

        self.settings = CatalogSettings()
        self.controller: Optional[EndpointTreeController] = None
        self.scanner: Optional[OpenApiScanner] = None
        self.error_handler = None

        # Async event loop for scans
        self.event_loop: Optional[asyncio.AbstractEventLoop] = None
        self.loop_thread: Optional[threading.Thread] = None
        self._rescan_job = None
        self._scan_in_flight = False

        self._setup_logging(debug)

    def _setup_logging(self, debug: bool):
        """Set up application logging."""
        log_level = LogLevel.DEBUG if debug else LogLevel.INFO
        try:
            initialize_logging(log_level=log_level, log_to_file=True, log_to_console=True)
        except OSError as e:
            # Read-only install location: console only
            initialize_logging(log_level=log_level, log_to_file=False, log_to_console=True)
            get_logger("EndpointCatalogApp").warning(f"File logging disabled: {e}")

        self.logger = get_logger("EndpointCatalogApp")
        self.error_handler = get_error_handler()

    def load_configuration(self) -> bool:
        """
        Load settings from the .env file and environment.

        Returns:
            True if the configuration had no validation errors
        """
        env_path = self.env_path
        if env_path is None and Path(DEFAULT_ENV_FILE).exists():
            env_path = DEFAULT_ENV_FILE

        if env_path and Path(env_path).exists():
            load_dotenv(env_path)
            self.logger.info(f"Loaded configuration from: {env_path}")

        configuration = EnvLoader().load_config(env_path)
        self.settings = configuration.settings

        for error in configuration.validation_errors:
            self.logger.warning(f"Configuration problem: {error}")

        if self.settings.debug and not self.debug:
            logging.getLogger("EndpointCatalog").setLevel(logging.DEBUG)

        self.scanner = OpenApiScanner(self.settings.scanner)
        self.controller = EndpointTreeController(
            view_model=EndpointViewModel(untagged_label=self.settings.untagged_label),
            initial_view_mode=self.settings.default_view_mode,
            error_handler=self.error_handler
        )
        return configuration.is_valid

    def scan_once(self) -> ScanResult:
        """Run one scan synchronously. Used by the headless mode."""
        try:
            result = asyncio.run(self.scanner.scan())
        except ScanError as e:
            log_scan(e.source or "<unconfigured>", error=str(e))
            raise

        log_scan(result.source, len(result.endpoints), result.duration_ms)
        return result

    def print_tree(self, view_mode: Optional[ViewMode] = None, filter_text: str = "") -> str:
        """
        Scan once and render the endpoint tree as text.

        Args:
            view_mode: View mode to render, defaults to the configured one
            filter_text: Filter to apply

        Returns:
            Rendered tree
        """
        presenter = TextTreePresenter(marker=self.settings.highlight.to_marker())
        self.controller.set_presenter(presenter)

        result = self.scan_once()
        if view_mode is not None:
            self.controller.switch_view_mode(view_mode)
        if filter_text:
            self.controller.apply_filter(filter_text)

        self.controller.refresh(result.endpoints)
        return presenter.render()

    # GUI mode

    def _start_event_loop(self):
        """Start the asyncio event loop in a background thread."""
        ready = threading.Event()

        def run_loop():
            self.event_loop = asyncio.new_event_loop()
            asyncio.set_event_loop(self.event_loop)
            ready.set()
            try:
                self.event_loop.run_forever()
            finally:
                self.event_loop.close()

        self.loop_thread = threading.Thread(target=run_loop, daemon=True)
        self.loop_thread.start()
        ready.wait(timeout=5)

    def request_scan(self):
        """Start a background scan unless one is already running."""
        if self._scan_in_flight or self.event_loop is None:
            return

        if not self.settings.scanner.is_configured:
            self.logger.warning("No OpenAPI source configured; set CATALOG_OPENAPI_URL or CATALOG_OPENAPI_FILE")
            return

        self._scan_in_flight = True
        future = asyncio.run_coroutine_threadsafe(self.scanner.scan(), self.event_loop)
        # Controller calls must happen on the Tk thread
        future.add_done_callback(lambda f: self.root.after(0, self._on_scan_finished, f))

    def _on_scan_finished(self, future):
        self._scan_in_flight = False
        try:
            result = future.result()
            log_scan(result.source, len(result.endpoints), result.duration_ms)
            self.controller.refresh(result.endpoints)
        except ScanError as e:
            log_scan(e.source or "<unconfigured>", error=str(e))
            self.error_handler.handle_error(e, context={"operation": "scan"}, show_dialog=False)
        except Exception as e:
            log_exception("Unexpected failure while refreshing endpoints", e,
                          context={"operation": "scan"}, logger_name="EndpointCatalogApp")
            self.error_handler.handle_error(e, context={"operation": "scan"}, show_dialog=False)
        finally:
            # A failed scan must not stop the periodic re-scan
            self._schedule_rescan()

    def _schedule_rescan(self):
        interval = self.settings.scanner.rescan_interval
        if self.running and interval > 0:
            self._rescan_job = self.root.after(interval, self.request_scan)

    def setup_ui(self):
        """Create the main window and the endpoint tree panel."""
        import tkinter as tk
        from ui.components.endpoint_tree_panel import EndpointTreePanel

        self.root = tk.Tk()
        self.root.title(f"Endpoint Catalog v{__version__}")
        self.root.geometry("760x620")
        self.error_handler.parent_window = self.root

        self.panel = EndpointTreePanel(
            self.root,
            controller=self.controller,
            filter_debounce_ms=self.settings.filter_debounce_ms,
            on_refresh_requested=self.request_scan
        )
        self.panel.pack(fill='both', expand=True)

        self.root.protocol("WM_DELETE_WINDOW", self.on_closing)

    def on_closing(self):
        """Handle application closing."""
        self.running = False
        self.logger.info("Application closing requested")

        if self.root is not None and self._rescan_job is not None:
            self.root.after_cancel(self._rescan_job)
            self._rescan_job = None

        if self.event_loop:
            self.event_loop.call_soon_threadsafe(self.event_loop.stop)

        if self.root is not None:
            self.root.quit()
            self.root.destroy()
            self.root = None

    def run(self, initial_filter: str = "") -> int:
        """Run the GUI application."""
        self.logger.info("Starting Endpoint Catalog...")
        self.load_configuration()
        self._start_event_loop()
        self.setup_ui()
        if initial_filter:
            self.panel.filter_var.set(initial_filter)

        self.running = True
        self.request_scan()

        try:
            self.root.mainloop()
        except KeyboardInterrupt:
            self.logger.info("Shutting down Endpoint Catalog...")
            self.on_closing()

        return 0


def parse_arguments(argv=None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Endpoint Catalog - browse discovered HTTP endpoints",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python app.py --openapi http://localhost:8080/v3/api-docs
  python app.py --openapi api.json --print-tree --mode swagger --filter "get users"

Environment Variables:
  CATALOG_DEBUG=true               # Enable debug logging
  CATALOG_OPENAPI_URL=http://...   # OpenAPI document to scan
  CATALOG_OPENAPI_FILE=api.json    # Local OpenAPI document to scan
  CATALOG_RESCAN_INTERVAL=30000    # Re-scan period in ms (0 disables)
        """
    )

    parser.add_argument('--version', action='version', version=f'Endpoint Catalog v{__version__}')
    parser.add_argument('--debug', action='store_true', help='Enable debug logging')
    parser.add_argument('--config', type=str, help='Path to .env configuration file')
    parser.add_argument('--openapi', type=str, help='OpenAPI document URL or file (overrides configuration)')
    parser.add_argument('--mode', type=str, choices=[mode.value for mode in ViewMode],
                        help='Initial view mode')
    parser.add_argument('--filter', type=str, default='', help='Initial filter text')
    parser.add_argument('--print-tree', action='store_true',
                        help='Scan once, print the endpoint tree and exit')

    return parser.parse_args(argv)


def main(argv=None) -> int:
    """Main entry point for the application."""
    args = parse_arguments(argv)

    if args.openapi:
        key = 'CATALOG_OPENAPI_URL' if args.openapi.startswith(('http://', 'https://')) else 'CATALOG_OPENAPI_FILE'
        os.environ[key] = args.openapi

    try:
        app = EndpointCatalogApp(env_path=args.config, debug=args.debug)

        if args.print_tree:
            app.load_configuration()
            mode = ViewMode.from_string(args.mode) if args.mode else None
            print(app.print_tree(mode, args.filter))
            return 0

        if args.mode:
            os.environ['CATALOG_DEFAULT_VIEW_MODE'] = args.mode
        return app.run(args.filter)

    except ScanError as e:
        print(f"Scan failed: {e}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        print("\nApplication interrupted by user")
        return 0
    except Exception as e:
        log_exception("Fatal error", e, logger_name="EndpointCatalogApp")
        print(f"Fatal error: {e}", file=sys.stderr)
        return 1


def cli_main():
    """CLI entry point for package installation."""
    sys.exit(main())


if __name__ == "__main__":
    cli_main()
