"""
AccessiScan - Scan API Server
Flask application exposing the accessibility scanner over HTTP.
"""

import argparse
import logging
from typing import Optional

from flask import Flask

from accessiscan.core.managers.config_manager import config_manager
from accessiscan.core.utils.configure_logging import configure_logger
from auditor.controllers.scan_controller import ScanController
from auditor.server.routers.scan_api_router import scan_api_router

logger = logging.getLogger(__name__)


def create_app(scan_controller: Optional[ScanController] = None) -> Flask:
    """
    Application factory. The controller holds no per-scan state, so one
    instance serves every request.
    """
    flask_app = Flask(__name__)

    # Inject Controller into App Config for Blueprint access
    flask_app.config['SCAN_CONTROLLER'] = scan_controller or ScanController()

    flask_app.register_blueprint(scan_api_router, url_prefix='/api')

    return flask_app


def run_server(host: str, port: int, debug: bool = False) -> None:
    """Starts the Flask development server and prints the API route mapping."""
    app = create_app()

    print("\n" + "=" * 50)
    print("♿  ACCESSISCAN | Scan API")
    print("=" * 50)
    print(f"📡  Listening on: http://{host}:{port}")
    print("-" * 50)

    print("\n🔍 API ROUTE MAPPING:")
    for rule in app.url_map.iter_rules():
        if "api" in str(rule):
            print(f"   ✅ {rule}")
    print("-" * 50 + "\n")

    # use_reloader=False prevents double-initialization
    app.run(debug=debug, host=host, port=port, use_reloader=False)


def main():
    """Parses arguments and starts the server."""
    parser = argparse.ArgumentParser(description="AccessiScan Scan API Server")
    parser.add_argument("--host", type=str, default=config_manager.get_nested("server.host", "127.0.0.1"),
                        help="Host interface to bind to (use 0.0.0.0 for Docker/External access)")
    parser.add_argument("--port", type=int, default=config_manager.get_nested("server.port", 5000),
                        help="Port to bind the server to")
    parser.add_argument("--debug", action="store_true", help="Run Flask in debug mode")
    args = parser.parse_args()

    configure_logger(
        config_manager.get_nested("debug.level", "INFO"),
        silenced_loggers=config_manager.get_nested("debug.silenced_loggers", {}),
    )
    run_server(args.host, args.port, args.debug)


if __name__ == '__main__':
    main()
