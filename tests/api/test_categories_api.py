"""Tests for category API endpoints."""

from fastapi.testclient import TestClient

UNKNOWN_ID = "abcdef0123456789abcdef01"


class TestCreateCategory:
    """Tests for POST /api/categories/create-category."""

    def test_create_category(self, client: TestClient) -> None:
        """Should create a category with a derived slug."""
        response = client.post(
            "/api/categories/create-category",
            json={"name": "Elektronik", "description": "Cihazlar"},
        )

        assert response.status_code == 201
        body = response.json()
        assert body["success"] is True
        assert body["message"] == "Category created successfully"
        data = body["data"]
        assert data["name"] == "Elektronik"
        assert data["slug"] == "elektronik"
        assert data["isActive"] is True
        assert data["sortOrder"] == 0
        assert data["parentCategory"] is None
        assert len(data["id"]) == 24
        assert "createdAt" in data
        assert "updatedAt" in data

    def test_duplicate_name(self, client: TestClient, create_category) -> None:
        """Should reject a second category with the same name."""
        create_category("Elektronik")

        response = client.post("/api/categories/create-category", json={"name": "Elektronik"})

        assert response.status_code == 400
        body = response.json()
        assert body["success"] is False
        assert body["errorCode"] == "DUPLICATE_NAME"
        assert "requestId" in body

    def test_missing_name(self, client: TestClient) -> None:
        """Should reject a body without a name."""
        response = client.post("/api/categories/create-category", json={})

        assert response.status_code == 400
        body = response.json()
        assert body["errorCode"] == "VALIDATION_ERROR"
        assert body["errors"][0]["field"] == "name"

    def test_malformed_parent(self, client: TestClient) -> None:
        """Should reject a malformed parent id."""
        response = client.post(
            "/api/categories/create-category",
            json={"name": "Telefonlar", "parentCategory": "123"},
        )

        assert response.status_code == 400
        assert response.json()["errorCode"] == "INVALID_IDENTIFIER"

    def test_unknown_parent(self, client: TestClient) -> None:
        """Should reject a parent that does not exist."""
        response = client.post(
            "/api/categories/create-category",
            json={"name": "Telefonlar", "parentCategory": UNKNOWN_ID},
        )

        assert response.status_code == 400
        assert response.json()["errorCode"] == "INVALID_REFERENCE"

    def test_parent_is_populated(self, client: TestClient, create_category) -> None:
        """Should return the parent's id, name and slug."""
        parent = create_category("Elektronik")
        child = create_category("Telefonlar", parentCategory=parent["id"])

        assert child["parentCategory"] == {
            "id": parent["id"],
            "name": "Elektronik",
            "slug": "elektronik",
        }

    def test_child_readable_on_every_lookup(self, client: TestClient, create_category) -> None:
        """Should load the parent when a child is read back by id, slug or listing."""
        parent = create_category("Elektronik")
        child = create_category("Telefon", parentCategory=parent["id"])
        expected = {"id": parent["id"], "name": "Elektronik", "slug": "elektronik"}

        by_slug = client.get("/api/categories/slug/telefon")
        assert by_slug.status_code == 200
        assert by_slug.json()["data"]["parentCategory"] == expected

        by_id = client.get(f"/api/categories/id/{child['id']}")
        assert by_id.status_code == 200
        assert by_id.json()["data"]["parentCategory"] == expected

        listing = client.get("/api/categories/")
        assert listing.status_code == 200
        rows = {row["name"]: row for row in listing.json()["data"]}
        assert rows["Telefon"]["parentCategory"] == expected
        assert rows["Elektronik"]["parentCategory"] is None


class TestEditAndDeleteCategory:
    """Tests for edit and delete endpoints."""

    def test_edit_category(self, client: TestClient, create_category) -> None:
        """Should update supplied fields and recompute the slug."""
        category = create_category("Elektronik")

        response = client.put(
            f"/api/categories/edit-category/{category['id']}",
            json={"name": "Beyaz Eşya", "sortOrder": 3},
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["slug"] == "beyaz-esya"
        assert data["sortOrder"] == 3

    def test_edit_cycle(self, client: TestClient, create_category) -> None:
        """Should reject a parent that would create a cycle."""
        parent = create_category("Elektronik")
        child = create_category("Telefonlar", parentCategory=parent["id"])

        response = client.put(
            f"/api/categories/edit-category/{parent['id']}",
            json={"parentCategory": child["id"]},
        )

        assert response.status_code == 400
        assert response.json()["errorCode"] == "CATEGORY_CYCLE"

    def test_edit_missing(self, client: TestClient) -> None:
        """Should return 404 for a missing category."""
        response = client.put(
            f"/api/categories/edit-category/{UNKNOWN_ID}",
            json={"description": "x"},
        )

        assert response.status_code == 404
        assert response.json()["errorCode"] == "CATEGORY_NOT_FOUND"

    def test_edit_malformed_id(self, client: TestClient) -> None:
        """Should return 400 for a malformed id."""
        response = client.put("/api/categories/edit-category/abc", json={"description": "x"})

        assert response.status_code == 400

    def test_delete_category(self, client: TestClient, create_category) -> None:
        """Should delete and return the category."""
        category = create_category("Elektronik")

        response = client.delete(f"/api/categories/delete-category/{category['id']}")

        assert response.status_code == 200
        assert response.json()["data"]["id"] == category["id"]
        assert client.get(f"/api/categories/id/{category['id']}").status_code == 404


class TestCategoryListings:
    """Tests for category listing endpoints."""

    def test_list_all(self, client: TestClient, create_category) -> None:
        """Should list every category with a count."""
        create_category("Elektronik")
        create_category("Arşiv", isActive=False)

        response = client.get("/api/categories/")

        assert response.status_code == 200
        body = response.json()
        assert body["count"] == 2
        assert len(body["data"]) == 2

    def test_advanced_pagination(self, client: TestClient, create_category) -> None:
        """Should paginate with three categories per page by default."""
        for name in ("A Kategori", "B Kategori", "C Kategori", "D Kategori"):
            create_category(name)

        response = client.get(
            "/api/categories/advanced",
            params={"page": 2, "sortBy": "name", "sortOrder": "asc"},
        )

        assert response.status_code == 200
        body = response.json()
        assert [c["name"] for c in body["data"]] == ["D Kategori"]
        assert body["pagination"] == {
            "currentPage": 2,
            "totalPages": 2,
            "totalCategories": 4,
            "hasNextPage": False,
            "hasPrevPage": True,
            "limit": 3,
        }

    def test_advanced_filters(self, client: TestClient, create_category) -> None:
        """Should filter by activity and top-level parent."""
        root = create_category("Elektronik")
        create_category("Telefonlar", parentCategory=root["id"])
        create_category("Arşiv", isActive=False)

        response = client.get(
            "/api/categories/advanced",
            params={"isActive": "true", "parentCategory": "null", "limit": 10},
        )

        assert [c["name"] for c in response.json()["data"]] == ["Elektronik"]

    def test_active_and_main(self, client: TestClient, create_category) -> None:
        """Should list active and active top-level categories."""
        root = create_category("Elektronik")
        create_category("Telefonlar", parentCategory=root["id"])
        create_category("Arşiv", isActive=False)

        active = client.get("/api/categories/active").json()
        main = client.get("/api/categories/main").json()

        assert active["count"] == 2
        assert [c["name"] for c in main["data"]] == ["Elektronik"]

    def test_sub_categories(self, client: TestClient, create_category) -> None:
        """Should list children and describe the parent."""
        root = create_category("Elektronik")
        create_category("Telefonlar", parentCategory=root["id"])

        response = client.get(f"/api/categories/sub/{root['id']}")

        assert response.status_code == 200
        body = response.json()
        assert body["count"] == 1
        assert body["parentCategory"] == {
            "id": root["id"],
            "name": "Elektronik",
            "slug": "elektronik",
        }

    def test_sub_categories_errors(self, client: TestClient) -> None:
        """Should return 400 for malformed and 404 for unknown parents."""
        assert client.get("/api/categories/sub/bad").status_code == 400
        assert client.get(f"/api/categories/sub/{UNKNOWN_ID}").status_code == 404

    def test_get_by_slug(self, client: TestClient, create_category) -> None:
        """Should find a category by slug."""
        category = create_category("Ev Aletleri")

        response = client.get("/api/categories/slug/ev-aletleri")

        assert response.status_code == 200
        assert response.json()["data"]["id"] == category["id"]
        assert client.get("/api/categories/slug/yok").status_code == 404
