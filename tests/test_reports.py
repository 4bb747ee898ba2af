"""
Tests for the reporting dashboard endpoints
"""

from conftest import client, submit_order

def _line(product_id, name, quantity, unit_price):
    return {
        "product_id": product_id,
        "product_name": name,
        "quantity": quantity,
        "unit_price": unit_price,
        "total": quantity * unit_price,
    }

def _seed_orders():
    submit_order(order_number="ORD-R-1", customer_phone="0900000000",
                 items=[_line(7, "Gaming Headset", 2, 1000)], subtotal=2000)
    submit_order(order_number="ORD-R-2", customer_phone="0900000000",
                 items=[_line(7, "Gaming Headset", 3, 1000), _line(2, "Wireless Mouse", 1, 300)], subtotal=3300)
    submit_order(order_number="ORD-R-3", customer_phone="0911111111", customer_name="Tran Thi Binh",
                 items=[_line(2, "Wireless Mouse", 2, 300)], subtotal=600)

class TestReportAccess:

    def test_reports_require_login(self):
        for path in ("orders", "products", "phone-products", "line-items"):
            response = client.get(f"/api/v1/reports/{path}")
            assert response.status_code in (401, 403)

    def test_activity_is_admin_only(self, staff_headers):
        response = client.get("/api/v1/reports/activity", headers=staff_headers)
        assert response.status_code == 403

class TestReportProjections:
    """Each tab of the dashboard"""

    def test_order_details_newest_order_number_first(self, staff_headers):
        _seed_orders()
        response = client.get("/api/v1/reports/orders", headers=staff_headers)
        assert response.status_code == 200

        data = response.json()
        assert data["count"] == 3
        assert [row["order_number"] for row in data["rows"]] == ["ORD-R-3", "ORD-R-2", "ORD-R-1"]

    def test_order_details_search(self, staff_headers):
        _seed_orders()
        response = client.get("/api/v1/reports/orders", params={"search": "binh"}, headers=staff_headers)
        assert [row["order_number"] for row in response.json()["rows"]] == ["ORD-R-3"]

    def test_product_totals(self, staff_headers):
        _seed_orders()
        response = client.get(
            "/api/v1/reports/products",
            params={"sort_by": "quantity", "order": "desc"},
            headers=staff_headers,
        )
        assert response.status_code == 200
        rows = response.json()["rows"]
        assert [(row["product_id"], row["quantity"], row["total"]) for row in rows] == [
            (7, 5, 5000),
            (2, 3, 900),
        ]

    def test_phone_product_totals(self, staff_headers):
        _seed_orders()
        response = client.get("/api/v1/reports/phone-products", headers=staff_headers)
        assert response.status_code == 200

        rows = {(row["customer_phone"], row["product_id"]): row for row in response.json()["rows"]}
        assert len(rows) == 3
        assert rows[("0900000000", 7)]["quantity"] == 5
        assert rows[("0900000000", 7)]["total"] == 5000
        assert rows[("0911111111", 2)]["customer_name"] == "Tran Thi Binh"

    def test_line_items(self, staff_headers):
        _seed_orders()
        response = client.get(
            "/api/v1/reports/line-items",
            params={"search": "ORD-R-2"},
            headers=staff_headers,
        )
        data = response.json()
        assert data["count"] == 2
        assert {row["product_name"] for row in data["rows"]} == {"Gaming Headset", "Wireless Mouse"}
        assert all(row["status"] == "PENDING" for row in data["rows"])

    def test_reports_reflect_status_changes(self, staff_headers, admin_headers):
        order_id = submit_order(order_number="ORD-R-9")["orderId"]
        client.post("/api/v1/orders/status", json={"orderIds": [order_id], "status": "DELIVERED"}, headers=admin_headers)

        rows = client.get("/api/v1/reports/orders", headers=staff_headers).json()["rows"]
        assert rows[0]["status"] == "DELIVERED"

    def test_empty_reports(self, staff_headers):
        response = client.get("/api/v1/reports/products", headers=staff_headers)
        assert response.json() == {"rows": [], "count": 0}

    def test_unknown_sort_field(self, staff_headers):
        response = client.get("/api/v1/reports/products", params={"sort_by": "colour"}, headers=staff_headers)
        assert response.status_code == 400
        assert "colour" in response.json()["detail"]

    def test_invalid_sort_order(self, staff_headers):
        response = client.get("/api/v1/reports/products", params={"order": "sideways"}, headers=staff_headers)
        assert response.status_code == 422

class TestActivityReport:

    def test_order_creation_listed(self, admin_headers):
        submit_order(order_number="ORD-ACT-1")
        response = client.get("/api/v1/reports/activity", params={"action": "order_created"}, headers=admin_headers)
        assert response.status_code == 200

        data = response.json()
        assert data["count"] == 1
        assert data["activities"][0]["endpoint"] == "/api/v1/orders/"
        assert "ORD-ACT-1" in data["activities"][0]["details"]
