import json
import logging
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from urllib.parse import parse_qs, urlparse

from restobook.api import ReservationSystem
from restobook.core.config import Settings
from restobook.core.logging import configure_logging
from restobook.core.result import Result

logger = logging.getLogger(__name__)

INVALID_BODY = object()

STATUS_BY_KIND = {
    "validation": 400,
    "not_found": 404,
    "conflict": 409,
    "store": 400,
}


class RestobookHandler(BaseHTTPRequestHandler):
    @property
    def system(self) -> ReservationSystem:
        return self.server.system

    def do_GET(self):
        parsed = urlparse(self.path)
        parts = self.split_path(parsed.path)
        if parts == ["restaurants"]:
            self.send_result(self.system.get_restaurants())
        elif len(parts) == 2 and parts[0] == "restaurants":
            self.send_result(self.system.get_restaurant(parts[1]))
        elif len(parts) == 3 and parts[0] == "restaurants" and parts[2] == "reservations":
            self.send_result(self.system.get_restaurant_reservations(parts[1]))
        elif len(parts) == 3 and parts[0] == "restaurants" and parts[2] == "available-tables":
            self.handle_available_tables(parts[1], parse_qs(parsed.query))
        elif parts == ["reservations"]:
            self.send_result(self.system.get_reservations())
        elif len(parts) == 2 and parts[0] == "reservations":
            self.send_result(self.system.get_reservation(parts[1]))
        else:
            self.send_not_found()

    def do_POST(self):
        parts = self.split_path(urlparse(self.path).path)
        body = self.read_json()
        if body is INVALID_BODY:
            return
        if parts == ["restaurants"]:
            self.send_result(self.system.add_restaurant(body), created=True)
        elif parts == ["reservations"]:
            self.send_result(self.system.create_reservation(body), created=True)
        elif len(parts) == 3 and parts[0] == "reservations":
            reservation_id, action = parts[1], parts[2]
            if action == "confirm":
                self.send_result(self.system.confirm_reservation(reservation_id))
            elif action == "cancel":
                self.send_result(self.system.cancel_reservation(reservation_id))
            elif action == "status":
                status = body.get("status") if isinstance(body, dict) else None
                self.send_result(self.system.change_reservation_status(reservation_id, status))
            else:
                self.send_not_found()
        else:
            self.send_not_found()

    def do_PUT(self):
        parts = self.split_path(urlparse(self.path).path)
        body = self.read_json()
        if body is INVALID_BODY:
            return
        if len(parts) == 2 and parts[0] == "restaurants":
            self.send_result(self.system.update_restaurant(parts[1], body))
        elif len(parts) == 2 and parts[0] == "reservations":
            self.send_result(self.system.update_reservation(parts[1], body))
        else:
            self.send_not_found()

    def do_PATCH(self):
        parts = self.split_path(urlparse(self.path).path)
        body = self.read_json()
        if body is INVALID_BODY:
            return
        if len(parts) == 2 and parts[0] == "reservations":
            self.send_result(self.system.edit_reservation(parts[1], body))
        else:
            self.send_not_found()

    def do_DELETE(self):
        parts = self.split_path(urlparse(self.path).path)
        if len(parts) == 2 and parts[0] == "restaurants":
            self.send_result(self.system.delete_restaurant(parts[1]))
        else:
            self.send_not_found()

    def handle_available_tables(self, restaurant_id: str, params: dict):
        date = params.get("date", [""])[0]
        time = params.get("time", [""])[0]
        raw_size = params.get("partySize", [""])[0]
        if not raw_size.isdecimal():
            self.send_json(400, {"err": "partySize must be a positive integer."})
            return
        self.send_result(self.system.get_available_tables(restaurant_id, date, time, int(raw_size)))

    @staticmethod
    def split_path(path: str) -> list:
        return [part for part in path.split("/") if part]

    def read_json(self):
        """Parsed JSON object or list; INVALID_BODY once a 400 has been sent."""
        try:
            length = int(self.headers.get("Content-Length", "0"))
        except ValueError:
            self.send_json(400, {"err": "Invalid Content-Length header."})
            return INVALID_BODY
        if length <= 0:
            return {}
        try:
            body = json.loads(self.rfile.read(length).decode("utf-8"))
        except (UnicodeDecodeError, ValueError) as exc:
            self.send_json(400, {"err": f"Invalid JSON body: {exc}"})
            return INVALID_BODY
        if not isinstance(body, (dict, list)):
            self.send_json(400, {"err": "JSON body must be an object or a list."})
            return INVALID_BODY
        return body

    def send_result(self, result: Result, created: bool = False):
        if result.success:
            self.send_json(201 if created else 200, result.to_dict())
        else:
            self.send_json(STATUS_BY_KIND.get(result.kind, 500), result.to_dict())

    def send_not_found(self):
        self.send_json(404, {"err": f"No route for {self.command} {self.path}"})

    def send_json(self, status: int, payload: dict):
        body = json.dumps(payload).encode("utf-8")
        self.send_response(status)
        self.send_header("Content-Type", "application/json; charset=utf-8")
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        self.wfile.write(body)

    def log_message(self, format, *args):
        logger.info("%s - %s", self.address_string(), format % args)


def make_server(system: ReservationSystem, port: int, host: str = "") -> ThreadingHTTPServer:
    httpd = ThreadingHTTPServer((host, port), RestobookHandler)
    httpd.system = system
    return httpd


def run():
    settings = Settings.from_env()
    configure_logging(settings.log_level)
    system = ReservationSystem.from_settings(settings)
    httpd = make_server(system, settings.server_port)
    logger.info(f"Server started on http://localhost:{settings.server_port} ({settings.store_backend} store)")
    httpd.serve_forever()


if __name__ == "__main__":
    run()
