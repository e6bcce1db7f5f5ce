"""HTTP tests for the catalog API and pages."""

from unittest.mock import Mock

import pytest
from sqlmodel import select

from src.catalog.api.http.deps import get_product_repository
from src.catalog.core.errors import ErrorCode, UpstreamStoreError
from src.catalog.entities.catalog.category import Category
from src.catalog.entities.catalog.product import ProductRepository, ProductTable


@pytest.fixture
def failing_repository(client):
    from src.catalog.api.http.app import app

    repository = Mock(spec=ProductRepository)
    repository.count.side_effect = UpstreamStoreError("count")
    repository.find_category.return_value = Category(id=1, category_name="Dog food")
    repository.fetch_by_id.side_effect = UpstreamStoreError("fetch_by_id")
    repository.insert.side_effect = UpstreamStoreError("insert", ErrorCode.STORE_WRITE_FAILED)
    app.dependency_overrides[get_product_repository] = lambda: repository
    return repository


class TestListProducts:
    def test_empty_catalog(self, client, categories):
        response = client.get("/api")

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["totalRows"] == 0
        assert body["totalPages"] == 0
        assert body["perPage"] == 12
        assert body["rows"] == []
        assert body["redirect"] is None

    def test_first_page(self, client, seed_products):
        ids = seed_products(30)

        body = client.get("/api").json()

        assert body["success"] is True
        assert body["totalRows"] == 30
        assert body["totalPages"] == 3
        assert body["page"] == 1
        assert [row["id"] for row in body["rows"]] == ids[:12]
        assert body["rows"][0]["category_name"] == "Dog food"
        assert body["rows"][0]["average_rating"] == 0

    def test_last_page_is_partial(self, client, seed_products):
        ids = seed_products(30)

        body = client.get("/api", params={"page": "3"}).json()

        assert [row["id"] for row in body["rows"]] == ids[24:]

    @pytest.mark.parametrize("page", ["0", "-4"])
    def test_page_below_one_redirects_to_first(self, client, seed_products, page):
        seed_products(3)

        body = client.get("/api", params={"page": page}).json()

        assert body["success"] is False
        assert body["redirect"] == "?page=1"
        assert body["rows"] == []

    def test_page_past_the_end_redirects_to_last(self, client, seed_products):
        seed_products(13)

        body = client.get("/api", params={"page": "5"}).json()

        assert body["redirect"] == "?page=2"
        assert body["rows"] == []

    def test_non_numeric_page_is_first_page(self, client, seed_products):
        seed_products(2)

        body = client.get("/api", params={"page": "abc"}).json()

        assert body["success"] is True
        assert body["page"] == 1

    def test_keyword_and_category_filters(self, client, seed_products):
        seed_products(3, category="Dog food", prefix="Chunky")
        seed_products(2, category="Cat food", prefix="Chunky")
        seed_products(4, category="Cat food", prefix="Smooth")

        body = client.get(
            "/api", params={"keyword": "  chunky ", "category_name": "Cat food"}
        ).json()

        assert body["totalRows"] == 2
        assert body["keyword"] == "chunky"
        assert body["category"] == "Cat food"
        assert {row["category_name"] for row in body["rows"]} == {"Cat food"}

    def test_keyword_is_bound_not_interpolated(self, client, seed_products):
        seed_products(3)

        body = client.get("/api", params={"keyword": "' OR '1'='1"}).json()

        assert body["success"] is True
        assert body["totalRows"] == 0

    def test_store_failure_is_reported_in_body(self, client, failing_repository):
        response = client.get("/api", params={"keyword": "x"})

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is False
        assert body["error"]["code"] == "STORE_READ_FAILED"
        assert body["keyword"] == "x"
        assert "OperationalError" not in response.text


class TestGetProduct:
    def test_found_with_variants(self, client, make_product, make_variant):
        product = make_product(name="Kibble")
        make_variant(product.id, weight=1.5, image_url="small.png")
        make_variant(product.id, weight=5.0)

        body = client.get(f"/api/{product.id}").json()

        assert body["success"] is True
        assert body["data"]["product_name"] == "Kibble"
        assert body["data"]["category_name"] == "Dog food"
        assert [v["weight"] for v in body["data"]["variants"]] == [1.5, 5.0]

    def test_found_without_variants(self, client, make_product):
        product = make_product()

        body = client.get(f"/api/{product.id}").json()

        assert body["success"] is True
        assert body["data"]["variants"] == []

    def test_missing(self, client, categories):
        assert client.get("/api/999").json() == {"success": False, "data": None}

    def test_non_numeric_id(self, client, categories):
        assert client.get("/api/abc").json() == {"success": False, "data": None}

    def test_store_failure(self, client, failing_repository):
        body = client.get("/api/1").json()

        assert body["success"] is False
        assert body["data"] is None
        assert body["error"]["code"] == "STORE_READ_FAILED"


class TestCreateProduct:
    def test_valid_with_image(self, client, session, image_store, png_bytes, categories):
        response = client.post(
            "/api",
            data={
                "product_code": "P101",
                "name": "Kibble",
                "description": "Crunchy",
                "category_name": "Dog food",
                "price": "19.90",
            },
            files={"avatar": ("kibble.png", png_bytes, "image/png")},
        )

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["result"]["affectedRows"] == 1
        assert body["bodyData"]["product_code"] == "P101"

        row = session.exec(select(ProductTable)).one()
        assert row.id == body["result"]["insertedId"]
        assert row.image_url.endswith(".png")
        assert (image_store.base_dir / row.image_url).read_bytes() == png_bytes

    def test_avatar_folder(self, client, session, image_store, png_bytes, categories):
        body = client.post(
            "/api",
            data={
                "product_code": "P102",
                "name": "Treat",
                "description": "Chewy",
                "category_name": "Treats",
                "price": "3",
                "folder": "avatar",
            },
            files={"avatar": ("t.webp", png_bytes, "image/webp")},
        ).json()

        assert body["success"] is True
        row = session.exec(select(ProductTable)).one()
        assert (image_store.base_dir / "avatar" / row.image_url).exists()

    def test_created_product_is_readable(self, client, categories):
        created = client.post(
            "/api",
            data={
                "product_code": "P103",
                "name": "Round trip",
                "description": "Listed and fetched",
                "category_name": "Cat food",
                "price": "7",
            },
        ).json()
        product_id = created["result"]["insertedId"]

        detail = client.get(f"/api/{product_id}").json()
        listing = client.get("/api", params={"keyword": "Round trip"}).json()

        assert detail["success"] is True
        assert detail["data"]["category_name"] == "Cat food"
        assert [row["id"] for row in listing["rows"]] == [product_id]

    @pytest.mark.parametrize("category", [None, "Nope"])
    def test_missing_or_unknown_category(self, client, session, categories, category):
        form = {"product_code": "P104", "name": "A", "description": "B", "price": "1"}
        if category is not None:
            form["category_name"] = category

        body = client.post("/api", data=form).json()

        assert body["success"] is False
        assert [e["field"] for e in body["errors"]] == ["category_name"]
        assert session.exec(select(ProductTable)).all() == []

    def test_invalid_form(self, client, session, image_store, png_bytes):
        body = client.post(
            "/api",
            data={"product_code": "X12", "name": "A", "description": "B", "price": "1"},
            files={"avatar": ("a.png", png_bytes, "image/png")},
        ).json()

        assert body["success"] is False
        assert body["errors"][0]["field"] == "product_code"
        assert body["bodyData"]["product_code"] == "X12"
        assert session.exec(select(ProductTable)).all() == []
        assert not any(image_store.base_dir.rglob("*.png"))

    def test_store_failure(self, client, failing_repository, image_store, png_bytes):
        body = client.post(
            "/api",
            data={
                "product_code": "P001",
                "name": "A",
                "description": "B",
                "category_name": "Dog food",
                "price": "1",
            },
            files={"avatar": ("a.png", png_bytes, "image/png")},
        ).json()

        assert body["success"] is False
        assert body["ex"]["code"] == "STORE_WRITE_FAILED"
        assert not any(image_store.base_dir.rglob("*.png"))


class TestPages:
    def test_list_page(self, client, seed_products):
        seed_products(2, prefix="Biscuit")

        response = client.get("/")

        assert response.status_code == 200
        assert "text/html" in response.headers["content-type"]
        assert "Biscuit 0" in response.text
        assert "Biscuit 1" in response.text

    def test_empty_list_page(self, client, categories):
        response = client.get("/", params={"keyword": "nothing"})

        assert response.status_code == 200
        assert "No products found." in response.text

    def test_list_page_store_failure(self, client, failing_repository):
        response = client.get("/", params={"keyword": "bone"})

        assert response.status_code == 200
        assert "STORE_READ_FAILED" in response.text
        assert 'value="bone"' in response.text

    def test_out_of_range_page_redirects(self, client, seed_products):
        seed_products(3)

        response = client.get("/", params={"page": "9", "keyword": "Product"})

        assert response.status_code == 302
        location = response.headers["location"]
        assert "page=1" in location
        assert "keyword=Product" in location

    def test_add_page_lists_categories(self, client, categories):
        response = client.get("/add")

        assert response.status_code == 200
        for name in categories:
            assert f'<option value="{name}">' in response.text


class TestHealth:
    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "healthy"}
        assert response.headers["X-Content-Type-Options"] == "nosniff"
        assert "X-Request-ID" in response.headers

    def test_ready_when_store_answers(self, client):
        assert client.get("/ready").json() == {"status": "ready"}

    def test_not_ready_when_store_fails(self, client, app_dependencies, monkeypatch):
        monkeypatch.setattr(app_dependencies.database_service, "health_check", lambda: False)

        response = client.get("/ready")

        assert response.status_code == 503
        assert response.json() == {"status": "unavailable"}

    def test_request_id_is_echoed(self, client):
        response = client.get("/health", headers={"X-Request-ID": "abc-123"})
        assert response.headers["X-Request-ID"] == "abc-123"
