"""Health check HTTP server for the worker."""
import json
import logging
import threading
from http.server import BaseHTTPRequestHandler, HTTPServer
from typing import Any, Callable, Dict, Optional

logger = logging.getLogger(__name__)


class HealthStatus:
    """Global health status tracker."""

    def __init__(self):
        self.is_healthy = False
        self.worker_running = False
        self.services = {}
        self.checks: Dict[str, Callable[[], bool]] = {}

    def update_worker_status(self, running: bool):
        """Update worker running status."""
        self.worker_running = running

    def register_check(self, name: str, check: Callable[[], bool]):
        """Register a dependency check, e.g. the record store or the bus."""
        self.checks[name] = check

    def get_status(self) -> Dict[str, Any]:
        """Get current health status."""
        self.services = {"worker": "ok" if self.worker_running else "down"}
        for name, check in self.checks.items():
            try:
                self.services[name] = "ok" if check() else "error"
            except Exception as e:
                logger.error(f"Health check {name} failed: {e}")
                self.services[name] = "error"

        # Overall health: all services must be OK
        self.is_healthy = all(status == "ok" for status in self.services.values())

        return {
            "status": "ok" if self.is_healthy else "error",
            "services": self.services,
            "version": "1.0.0"
        }


# Global health status instance
health_status = HealthStatus()


class HealthHandler(BaseHTTPRequestHandler):
    """HTTP handler for health checks."""

    def do_GET(self):
        """Handle GET requests to /health."""
        if self.path != '/health':
            self.send_response(404)
            self.end_headers()
            return

        status_data = health_status.get_status()
        status_code = 200 if status_data["status"] == "ok" else 503

        self.send_response(status_code)
        self.send_header('Content-Type', 'application/json')
        self.end_headers()
        self.wfile.write(json.dumps(status_data, indent=2).encode('utf-8'))

    def log_message(self, format, *args):
        """Suppress default HTTP logging."""
        pass


def start_health_server(port: int = 8000) -> Optional[threading.Thread]:
    """Start health check HTTP server in a background thread."""
    def run_server():
        try:
            server = HTTPServer(('0.0.0.0', port), HealthHandler)
            logger.info(f"Health server running on port {port}")
            server.serve_forever()
        except OSError as e:
            logger.error(f"Health server failed: {e}")

    thread = threading.Thread(target=run_server, daemon=True)
    thread.start()
    return thread
