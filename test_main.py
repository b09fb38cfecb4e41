# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false

"""
API tests for the Member Access Service (in-memory backend).
"""

from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient

from main import app
from member_access.core.config import settings
from member_access.core.dependencies import (
    get_access_log_repo, get_member_repo, get_parking_repo, get_parking_service,
)
from member_access.core.errors import StoreError

client = TestClient(app)


# ============================================
# Fixtures
# ============================================
@pytest.fixture(autouse=True)
def reset_state():
    """Empty every store, then re-create the parking singleton (simulates startup)."""
    get_member_repo().clear()
    get_access_log_repo().clear()
    get_parking_repo().clear()
    get_parking_service().initialize()
    yield


def _create(full_name="Ana Gómez", dni="30111222"):
    response = client.post("/api/v1/members", json={"full_name": full_name, "dni": dni})
    assert response.status_code == 201, response.text
    return response.json()


# ============================================
# Health & Metrics
# ============================================
class TestHealth:
    def test_health(self):
        data = client.get("/health").json()
        assert data["status"] == "ok"
        assert data["service"] == settings.SERVICE_NAME
        assert data["version"] == settings.SERVICE_VERSION

    def test_ready(self):
        response = client.get("/health/ready")
        assert response.status_code == 200
        assert response.json()["backend"] == "memory"

    def test_ready_when_store_down(self):
        with patch.object(get_member_repo(), "verify_connection", side_effect=RuntimeError("down")):
            response = client.get("/health/ready")
        assert response.status_code == 503

    def test_metrics_exposed(self):
        client.get("/api/v1/parking")
        response = client.get("/metrics")
        assert response.status_code == 200
        assert "member_access_requests_total" in response.text
        assert "parking_occupied" in response.text

    def test_request_id_generated(self):
        assert client.get("/health").headers.get("X-Request-ID")

    def test_request_id_propagated(self):
        response = client.get("/health", headers={"X-Request-ID": "req-42"})
        assert response.headers["X-Request-ID"] == "req-42"

    def test_lifespan_initialises_parking(self):
        get_parking_repo().clear()
        with TestClient(app) as c:
            assert c.get("/api/v1/parking").json()["total"] == settings.PARKING_SPACES


# ============================================
# Members
# ============================================
class TestMembers:
    def test_create(self):
        data = _create(dni="30.111.222")
        assert data["dni"] == "30111222"
        assert data["full_name"] == "Ana Gómez"
        assert data["id"]

    def test_create_numeric_dni(self):
        assert _create(dni=30111222)["dni"] == "30111222"

    def test_create_duplicate(self):
        _create()
        response = client.post("/api/v1/members", json={"full_name": "Otra", "dni": "30-111-222"})
        assert response.status_code == 409
        assert "30111222" in response.json()["detail"]

    def test_create_blank_name(self):
        response = client.post("/api/v1/members", json={"full_name": "   ", "dni": "1"})
        assert response.status_code == 422

    def test_create_blank_dni(self):
        response = client.post("/api/v1/members", json={"full_name": "Ana", "dni": " .- "})
        assert response.status_code == 422

    def test_get(self):
        member = _create()
        response = client.get(f"/api/v1/members/{member['id']}")
        assert response.status_code == 200
        assert response.json() == member

    def test_get_missing(self):
        assert client.get("/api/v1/members/does-not-exist").status_code == 404

    def test_search_by_dni(self):
        member = _create()
        response = client.get("/api/v1/members/dni/30.111.222")
        assert response.status_code == 200
        assert response.json()["id"] == member["id"]

    def test_search_by_dni_missing(self):
        response = client.get("/api/v1/members/dni/999")
        assert response.status_code == 404
        assert response.json()["detail"] == "Socio no encontrado con el DNI: 999"

    def test_update(self):
        member = _create()
        response = client.put(f"/api/v1/members/{member['id']}",
                              json={"full_name": "Ana María Gómez", "dni": "30111223"})
        assert response.status_code == 200
        assert response.json()["dni"] == "30111223"
        assert client.get("/api/v1/members/dni/30111222").status_code == 404

    def test_update_missing(self):
        response = client.put("/api/v1/members/nope", json={"full_name": "X", "dni": "1"})
        assert response.status_code == 404

    def test_update_duplicate(self):
        _create("Ana", "1")
        other = _create("Beto", "2")
        response = client.put(f"/api/v1/members/{other['id']}", json={"full_name": "Beto", "dni": "1"})
        assert response.status_code == 409

    def test_update_store_unavailable(self):
        member = _create()
        with patch.object(get_member_repo(), "update", side_effect=StoreError("db down")):
            response = client.put(f"/api/v1/members/{member['id']}",
                                  json={"full_name": "Ana", "dni": "30111222"})
        assert response.status_code == 503
        assert response.json()["detail"] == "db down"

    def test_delete(self):
        member = _create()
        response = client.delete(f"/api/v1/members/{member['id']}")
        assert response.status_code == 200
        assert response.json()["dni"] == "30111222"
        assert client.delete(f"/api/v1/members/{member['id']}").status_code == 404

    def test_store_failure_on_create(self):
        with patch.object(get_member_repo(), "insert_one", side_effect=StoreError("db down")):
            response = client.post("/api/v1/members", json={"full_name": "Ana", "dni": "1"})
        assert response.status_code == 503
        assert response.json()["detail"] == "db down"

    def test_unexpected_error_envelope(self):
        safe_client = TestClient(app, raise_server_exceptions=False)
        with patch.object(get_member_repo(), "get", side_effect=RuntimeError("boom")):
            response = safe_client.get("/api/v1/members/some-id")
        assert response.status_code == 500
        body = response.json()
        assert body["error"] == "internal_server_error"
        assert body["detail"] == "boom"


class TestMemberList:
    @pytest.fixture(autouse=True)
    def seed(self):
        for i in range(12):
            _create(f"Socio {i:02d}", str(20000000 + i))

    def test_default_page(self):
        data = client.get("/api/v1/members").json()
        assert data["total"] == 12
        assert data["pages"] == 2
        assert data["current_page"] == 1
        assert len(data["data"]) == settings.DEFAULT_PAGE_SIZE
        assert data["data"][0]["full_name"] == "Socio 00"

    def test_second_page(self):
        data = client.get("/api/v1/members", params={"page": 2, "limit": 5}).json()
        assert [m["full_name"] for m in data["data"]] == [f"Socio {i:02d}" for i in range(5, 10)]
        assert data["pages"] == 3

    def test_sort_desc_by_dni(self):
        data = client.get("/api/v1/members", params={"sort_by": "dni", "sort_order": "desc"}).json()
        assert data["data"][0]["dni"] == "20000011"

    def test_query(self):
        data = client.get("/api/v1/members", params={"query": "2000001"}).json()
        assert data["total"] == 2

    def test_query_no_match(self):
        data = client.get("/api/v1/members", params={"query": "zzz"}).json()
        assert data == {"data": [], "total": 0, "pages": 0, "current_page": 1}

    @pytest.mark.parametrize("params", [
        {"sort_by": "id"}, {"sort_order": "sideways"}, {"page": 0}, {"limit": 0},
    ])
    def test_invalid_params(self, params):
        assert client.get("/api/v1/members", params=params).status_code == 422


# ============================================
# Bulk upload
# ============================================
class TestUploadRows:
    def test_upload(self):
        rows = [
            {"Nombre": "Alice", "DNI": "123"},
            {"Nombre": "Bob", "DNI": "123"},
            {"Nombre": "Charlie", "DNI": "456"},
            {"Nombre": "", "DNI": "789"},
        ]
        response = client.post("/api/v1/members/upload-rows", json=rows)
        assert response.status_code == 200
        body = response.json()
        assert body["inserted"] == 2
        assert [(f["index"], f["row_number"], f["message"]) for f in body["failures"]] == [
            (1, 3, "DNI duplicado en archivo"),
            (3, 5, "Fila inválida: nombre o DNI faltante"),
        ]
        assert client.get("/api/v1/members").json()["total"] == 2

    def test_upload_again_reports_existing(self):
        rows = [{"nombre": "Alice", "dni": "1"}, {"nombre": "Bob", "dni": "2"}]
        client.post("/api/v1/members/upload-rows", json=rows)
        body = client.post("/api/v1/members/upload-rows", json=rows).json()
        assert body["inserted"] == 0
        assert {f["message"] for f in body["failures"]} == {"DNI duplicado"}

    def test_upload_empty(self):
        response = client.post("/api/v1/members/upload-rows", json=[])
        assert response.status_code == 400
        assert response.json()["detail"] == "No se recibieron filas para subir"

    def test_upload_not_a_list(self):
        response = client.post("/api/v1/members/upload-rows", json={"nombre": "Alice"})
        assert response.status_code == 422

    def test_upload_too_many_rows(self):
        with patch.object(settings, "MAX_IMPORT_ROWS", 2):
            response = client.post("/api/v1/members/upload-rows",
                                   json=[{"nombre": "A", "dni": str(i)} for i in range(3)])
        assert response.status_code == 413

    def test_upload_store_unavailable(self):
        with patch.object(get_member_repo(), "find_existing", side_effect=StoreError("db down")):
            response = client.post("/api/v1/members/upload-rows", json=[{"nombre": "A", "dni": "1"}])
        assert response.status_code == 503


# ============================================
# Access log
# ============================================
class TestAccessLog:
    def test_granted_then_cooldown(self):
        _create("John Doe", "12345678")
        first = client.post("/api/v1/access-log", json={"dni": "12345678"}).json()
        assert first["granted"] is True
        assert first["title"] == "Acceso Permitido"
        assert first["member"]["full_name"] == "John Doe"

        second = client.post("/api/v1/access-log", json={"dni": "12.345.678"}).json()
        assert second["granted"] is False
        assert second["subtitle"] == (
            f"Ya registraste un acceso recientemente, debes esperar {settings.ACCESS_LOG_THRESHOLD} minutos"
        )
        assert get_access_log_repo().count() == 1

    def test_unknown_member(self):
        response = client.post("/api/v1/access-log", json={"dni": "99999999"})
        assert response.status_code == 200
        body = response.json()
        assert body["granted"] is False
        assert body["title"] == "Acceso Denegado"
        assert body["member"] is None
        assert get_access_log_repo().count() == 0

    def test_missing_dni(self):
        assert client.post("/api/v1/access-log", json={}).status_code == 422


# ============================================
# Parking
# ============================================
class TestParking:
    def test_status(self):
        data = client.get("/api/v1/parking").json()
        assert data == {"total": settings.PARKING_SPACES, "occupied": 0,
                        "available": settings.PARKING_SPACES}

    def test_enter_and_leave(self):
        assert client.post("/api/v1/parking/enter").json()["occupied"] == 1
        data = client.post("/api/v1/parking/leave").json()
        assert data["occupied"] == 0
        assert data["available"] == settings.PARKING_SPACES

    def test_leave_when_empty(self):
        assert client.post("/api/v1/parking/leave").json()["occupied"] == 0

    def test_full_lot(self):
        for _ in range(settings.PARKING_SPACES):
            client.post("/api/v1/parking/enter")
        writes = get_parking_repo().writes
        data = client.post("/api/v1/parking/enter").json()
        assert data["occupied"] == settings.PARKING_SPACES
        assert data["available"] == 0
        assert get_parking_repo().writes == writes
