import http.client
import json
import threading
import unittest

from restobook.api import ReservationSystem
from restobook.repositories.store import InMemoryStore
from restobook.server import make_server


class SystemTest(unittest.TestCase):
    @classmethod
    def setUpClass(cls):
        cls.httpd = make_server(ReservationSystem(InMemoryStore(0), InMemoryStore(1)), 0, host="127.0.0.1")
        cls.port = cls.httpd.server_address[1]
        cls.thread = threading.Thread(target=cls.httpd.serve_forever, daemon=True)
        cls.thread.start()

    @classmethod
    def tearDownClass(cls):
        cls.httpd.shutdown()
        cls.httpd.server_close()

    def setUp(self):
        self.conn = http.client.HTTPConnection("127.0.0.1", self.port, timeout=5)

    def tearDown(self):
        self.conn.close()

    def call(self, method, path, body=None):
        headers = {}
        payload = None
        if body is not None:
            payload = json.dumps(body)
            headers["Content-Type"] = "application/json"
        self.conn.request(method, path, payload, headers)
        response = self.conn.getresponse()
        return response.status, json.loads(response.read())

    def create_restaurant(self):
        status, body = self.call("POST", "/restaurants", {
            "name": "Bistro",
            "location": "Main St",
            "capacity": 4,
            "openingHours": {"start": "09:00", "end": "22:00"},
            "tables": [{"id": 1, "available": True}, {"id": 2, "available": True}],
        })
        self.assertEqual(status, 201)
        return body["ok"]["id"]

    def reservation(self, restaurant_id, **overrides):
        payload = {
            "restaurantId": restaurant_id,
            "date": "2024-01-01",
            "time": "19:00",
            "partySize": 2,
            "contactInfo": "a@b.com",
            "tableId": 1,
            "status": "pending",
        }
        payload.update(overrides)
        return payload

    def test_flujo_completo_reserva(self):
        restaurant_id = self.create_restaurant()

        status, body = self.call("POST", "/reservations", self.reservation(restaurant_id))
        self.assertEqual(status, 201)
        reservation_id = body["ok"]["id"]

        status, body = self.call("POST", "/reservations", self.reservation(restaurant_id))
        self.assertEqual(status, 409)
        self.assertIn("already booked", body["err"])

        status, body = self.call("GET", f"/restaurants/{restaurant_id}/available-tables?date=2024-01-01&time=19:00&partySize=2")
        self.assertEqual(status, 200)
        self.assertEqual([t["id"] for t in body["ok"]], [2])

        status, body = self.call("POST", f"/reservations/{reservation_id}/confirm")
        self.assertEqual((status, body["ok"]["status"]), (200, "confirmed"))

        status, body = self.call("PATCH", f"/reservations/{reservation_id}", {
            "date": "2024-01-01", "time": "20:00", "partySize": 3, "contactInfo": "a@b.com",
        })
        self.assertEqual((status, body["ok"]["time"]), (200, "20:00"))

        status, body = self.call("POST", f"/reservations/{reservation_id}/status", {"status": "pending"})
        self.assertEqual(status, 409)

        status, _ = self.call("DELETE", f"/restaurants/{restaurant_id}")
        self.assertEqual(status, 409)

        status, body = self.call("POST", f"/reservations/{reservation_id}/cancel")
        self.assertEqual((status, body["ok"]["status"]), (200, "cancelled"))

        status, body = self.call("DELETE", f"/restaurants/{restaurant_id}")
        self.assertEqual((status, body["ok"]["id"]), (200, restaurant_id))

    def test_errores_se_mapean_a_codigos_http(self):
        status, body = self.call("GET", "/reservations/unknown")
        self.assertEqual(status, 404)
        self.assertIn("not found", body["err"])

        status, _ = self.call("POST", "/restaurants", {"name": "Bistro"})
        self.assertEqual(status, 400)

        status, _ = self.call("GET", "/nowhere")
        self.assertEqual(status, 404)

        self.conn.request("POST", "/restaurants", "{not json", {"Content-Type": "application/json"})
        response = self.conn.getresponse()
        response.read()
        self.assertEqual(response.status, 400)

    def test_actualizar_restaurante_y_listar(self):
        restaurant_id = self.create_restaurant()
        status, body = self.call("PUT", f"/restaurants/{restaurant_id}", {
            "name": "Bistro Nuevo",
            "location": "Main St",
            "capacity": 6,
            "openingHours": {"start": "10:00", "end": "23:00"},
            "tables": [{"id": 1, "available": True}],
        })
        self.assertEqual((status, body["ok"]["name"]), (200, "Bistro Nuevo"))

        status, body = self.call("GET", "/restaurants")
        self.assertEqual(status, 200)
        self.assertIn(restaurant_id, [r["id"] for r in body["ok"]])

    def send_raw(self, method, path, body=b"", content_length=None):
        self.conn.putrequest(method, path)
        self.conn.putheader("Content-Type", "application/json")
        self.conn.putheader("Content-Length", content_length if content_length is not None else str(len(body)))
        self.conn.endheaders()
        if body:
            self.conn.send(body)
        response = self.conn.getresponse()
        return response.status, json.loads(response.read())

    def test_error_cuerpo_json_null(self):
        status, body = self.send_raw("POST", "/restaurants", b"null")
        self.assertEqual(status, 400)
        self.assertIn("err", body)

    def test_error_cuerpo_json_escalar(self):
        status, body = self.send_raw("PUT", "/reservations/abc", b"42")
        self.assertEqual(status, 400)
        self.assertIn("err", body)

    def test_error_cuerpo_no_utf8(self):
        status, body = self.send_raw("POST", "/restaurants", b"\xff\xfe{}")
        self.assertEqual(status, 400)
        self.assertIn("Invalid JSON body", body["err"])

    def test_error_content_length_no_numerico(self):
        status, body = self.send_raw("PATCH", "/reservations/abc", content_length="abc")
        self.assertEqual(status, 400)
        self.assertIn("Content-Length", body["err"])

    def test_error_party_size_con_digito_no_decimal(self):
        restaurant_id = self.create_restaurant()
        status, body = self.call("GET", f"/restaurants/{restaurant_id}/available-tables?date=2024-01-01&time=19:00&partySize=%C2%B2")
        self.assertEqual(status, 400)
        self.assertIn("partySize", body["err"])


if __name__ == "__main__":
    unittest.main()
