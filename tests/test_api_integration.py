"""
Tests for the HTTP front end: district editing and city generation.
"""

import pytest
from fastapi.testclient import TestClient

from py_citygen.api.main import app, session


GENERATE = {
    "seed": "test-city",
    "district_rows": 10,
    "district_cols": 10,
    "neighborhood_rows": 5,
    "neighborhood_cols": 5,
}


class TestDistrictEndpoints:
    """Test editing the district list."""

    def setup_method(self):
        """Set up test client with a fresh session."""
        session.reset()
        self.client = TestClient(app)

    def test_root(self):
        response = self.client.get("/")
        assert response.status_code == 200
        assert response.json()["status"] == "running"

    def test_health(self):
        response = self.client.get("/health")
        assert response.status_code == 200
        assert response.json() == {"status": "healthy", "generating": False}

    def test_default_districts(self):
        response = self.client.get("/districts")

        assert response.status_code == 200
        data = response.json()
        assert [d["name"] for d in data] == ["slum", "suburb", "adventuring", "financial", "business"]
        assert data[0]["color"] == [222, 42, 195]
        assert all(d["cell_count"] == 0 for d in data)

    def test_add_district(self):
        response = self.client.post("/districts", json={"name": "harbor", "color": [1, 2, 3]})

        assert response.status_code == 201
        data = response.json()
        assert data["index"] == 5
        assert data["id"] == 6
        assert data["color"] == [1, 2, 3]

    def test_add_reserved_name(self):
        response = self.client.post("/districts", json={"name": "EMPTY"})
        assert response.status_code == 400

    def test_add_blank_name(self):
        response = self.client.post("/districts", json={"name": ""})
        assert response.status_code == 422

    def test_remove_district(self):
        response = self.client.delete("/districts/0")

        assert response.status_code == 200
        assert response.json()["name"] == "slum"
        assert len(self.client.get("/districts").json()) == 4

    def test_remove_missing_district(self):
        assert self.client.delete("/districts/9").status_code == 404

    def test_set_color(self):
        response = self.client.put("/districts/1/color", json={"color": [9, 8, 7]})

        assert response.status_code == 200
        assert response.json()["color"] == [9, 8, 7]

    def test_set_invalid_color(self):
        response = self.client.put("/districts/1/color", json={"color": [300, 0, 0]})
        assert response.status_code == 400

    def test_rename(self):
        response = self.client.put("/districts/2/name", json={"name": "guild quarter"})

        assert response.status_code == 200
        assert response.json()["name"] == "guild quarter"

    def test_find_by_name(self):
        response = self.client.get("/districts", params={"name": "FINANCIAL"})

        assert response.status_code == 200
        data = response.json()
        assert len(data) == 1
        assert data[0]["index"] == 3
        assert data[0]["name"] == "financial"

    def test_find_missing_name(self):
        response = self.client.get("/districts", params={"name": "harbor"})
        assert response.status_code == 404

    def test_edit_blocked_during_generation(self):
        with session.registry.generation_in_progress():
            response = self.client.put("/districts/0/color", json={"color": [1, 1, 1]})
        assert response.status_code == 409


class TestCityEndpoints:
    """Test generating and reading a city."""

    def setup_method(self):
        session.reset()
        self.client = TestClient(app)

    def test_no_city_yet(self):
        assert self.client.get("/city").status_code == 404
        assert self.client.get("/city/cells/0/0").status_code == 404

    def test_generate_city(self):
        response = self.client.post("/city/generate", json=GENERATE)

        assert response.status_code == 200
        data = response.json()
        assert data["seed"] == "test-city"
        assert data["neighborhoods"] == 100
        assert data["rounds"] >= 1
        assert sum(d["cell_count"] for d in data["districts"]) == 100
        assert all(d["center"] is not None for d in data["districts"])

    def test_city_layout(self):
        self.client.post("/city/generate", json=GENERATE)
        data = self.client.get("/city").json()

        assert data["rows"] == 10 and data["cols"] == 10
        ids = {d["id"] for d in data["districts"]}
        for row in data["district_ids"]:
            assert len(row) == 10
            assert all(district_id in ids for district_id in row)

    def test_city_cell(self):
        self.client.post("/city/generate", json=GENERATE)
        response = self.client.get("/city/cells/3/4")

        assert response.status_code == 200
        data = response.json()
        assert data["district_name"] is not None
        nhood = data["neighborhood"]
        assert nhood["rows"] == 5 and nhood["cols"] == 5
        names = {name for row in nhood["building_types"] for name in row}
        assert "Road" in names
        assert names <= {"Road", "Residence", "Shop", "Empty"}

    def test_city_cell_out_of_bounds(self):
        self.client.post("/city/generate", json=GENERATE)

        assert self.client.get("/city/cells/10/0").status_code == 404
        assert self.client.get("/city/cells/-1/0").status_code == 404

    def test_same_seed_same_city(self):
        self.client.post("/city/generate", json=GENERATE)
        first = self.client.get("/city").json()["district_ids"]
        self.client.post("/city/generate", json=GENERATE)
        second = self.client.get("/city").json()["district_ids"]

        assert first == second

    def test_too_many_districts_for_grid(self):
        request = dict(GENERATE, district_rows=2, district_cols=2)
        response = self.client.post("/city/generate", json=request)

        assert response.status_code == 400

    @pytest.mark.parametrize("field", ["neighborhood_rows", "neighborhood_cols"])
    def test_neighborhood_too_small(self, field):
        request = dict(GENERATE, **{field: 2})
        assert self.client.post("/city/generate", json=request).status_code == 422

    def test_color_edit_reflected_in_cells(self):
        """Cells resolve their district at read time."""
        self.client.post("/city/generate", json=GENERATE)
        district_id = self.client.get("/city").json()["district_ids"][0][0]
        index = next(i for i, d in enumerate(session.registry) if d.id == district_id)

        self.client.put(f"/districts/{index}/color", json={"color": [4, 5, 6]})

        assert self.client.get("/city/cells/0/0").json()["color"] == [4, 5, 6]

    def test_city_too_large(self):
        """Oversized cities are refused before any generation work."""
        request = dict(
            GENERATE,
            district_rows=200,
            district_cols=200,
            neighborhood_rows=100,
            neighborhood_cols=100,
        )
        response = self.client.post("/city/generate", json=request)

        assert response.status_code == 400
        assert "limit" in response.json()["detail"]
        assert session.grid is None
        assert not session.registry.locked
