def create_product(client, admin_headers, **overrides):
    payload = {"name": "Moringa Powder", "price": 1200, "category": "Superfoods", "in_stock": True}
    payload.update(overrides)
    response = client.post("/api/admin/products", json=payload, headers=admin_headers)
    assert response.status_code == 200, response.text
    return response.json()["product"]


def test_create_product_normalises_fields(client, admin_headers):
    response = client.post(
        "/api/admin/products",
        json={
            "name": "Hibiscus Tea",
            "price": "850",
            "category": "Herbal Teas",
            "short_description": "Tart and bright",
            "benefits": "Caffeine free\n\n  Rich in antioxidants  \n",
            "images": ["https://cdn.test/a.jpg", "  ", ""],
        },
        headers=admin_headers,
    )

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["message"] == "Product created successfully"
    product = body["product"]
    assert product["price"] == 850.0
    assert product["benefits"] == ["Caffeine free", "Rich in antioxidants"]
    assert product["images"] == ["https://cdn.test/a.jpg"]
    assert product["description"] == "Tart and bright"
    assert product["in_stock"] is False


def test_create_product_requires_name_price_category(client, admin_headers):
    response = client.post("/api/admin/products", json={"name": "Nameless"}, headers=admin_headers)

    assert response.status_code == 400
    assert response.json() == {"error": "Name, price, and category are required"}


def test_product_without_stock_flag_is_not_listed(client, admin_headers):
    response = client.post(
        "/api/admin/products",
        json={"name": "Baobab Powder", "price": 900, "category": "Superfoods"},
        headers=admin_headers,
    )

    assert response.json()["product"]["in_stock"] is False
    assert client.get("/api/products").json() == []


def test_public_list_hides_out_of_stock(client, admin_headers):
    create_product(client, admin_headers, name="Moringa")
    create_product(client, admin_headers, name="Neem Soap", in_stock=False, category="Skin Care")

    names = [p["name"] for p in client.get("/api/products").json()]
    assert names == ["Moringa"]

    admin_names = [p["name"] for p in client.get("/api/admin/products", headers=admin_headers).json()["products"]]
    assert sorted(admin_names) == ["Moringa", "Neem Soap"]


def test_public_list_filters_by_category(client, admin_headers):
    create_product(client, admin_headers, name="Moringa")
    create_product(client, admin_headers, name="Shea Butter", category="Skin Care")

    response = client.get("/api/products", params={"category": "Skin Care"})

    assert [p["name"] for p in response.json()] == ["Shea Butter"]


def test_get_missing_product_is_404(client):
    response = client.get("/api/products/42")

    assert response.status_code == 404
    assert response.json() == {"error": "Product not found"}


def test_featured_endpoint_caps_at_two(client, admin_headers):
    ids = [create_product(client, admin_headers, name=f"Herb {i}")["id"] for i in range(3)]
    for product_id in ids:
        response = client.put(f"/api/admin/products/{product_id}/featured", json={"featured": True}, headers=admin_headers)
        assert response.status_code == 200

    assert response.json()["unfeatured"] == [ids[0]]
    featured = client.get("/api/products/featured").json()
    assert [p["id"] for p in featured] == ids[1:]


def test_featuring_out_of_stock_product_is_rejected(client, admin_headers):
    product = create_product(client, admin_headers, in_stock=False)

    response = client.put(f"/api/admin/products/{product['id']}/featured", json={"featured": True}, headers=admin_headers)

    assert response.status_code == 400
    assert response.json() == {"error": "Only in-stock products can be featured"}


def test_rejected_featured_create_saves_nothing(client, admin_headers):
    response = client.post(
        "/api/admin/products",
        json={"name": "Neem Soap", "price": 450, "category": "Skin Care", "in_stock": False, "featured": True},
        headers=admin_headers,
    )

    assert response.status_code == 400
    assert response.json() == {"error": "Only in-stock products can be featured"}
    assert client.get("/api/admin/products", headers=admin_headers).json()["products"] == []


def test_featured_create_is_saved_featured(client, admin_headers):
    product = create_product(client, admin_headers, featured=True)

    assert product["featured"] is True
    assert [p["id"] for p in client.get("/api/products/featured").json()] == [product["id"]]


def test_update_product_keeps_unsent_fields(client, admin_headers):
    product = create_product(client, admin_headers, short_description="Daily greens")

    response = client.put(f"/api/admin/products/{product['id']}", json={"price": 999.5}, headers=admin_headers)

    assert response.status_code == 200
    updated = response.json()["product"]
    assert updated["price"] == 999.5
    assert updated["short_description"] == "Daily greens"


def test_delete_product_removes_its_images(client, admin_headers, storage):
    storage.upload_file("product-images", "123-abc.jpg", b"img", "image/jpeg")
    image_url = storage.get_public_url("product-images", "123-abc.jpg")
    product = create_product(client, admin_headers, images=[image_url, "https://elsewhere.test/x.jpg"])

    response = client.delete(f"/api/admin/products/{product['id']}", headers=admin_headers)

    assert response.status_code == 200
    assert response.json()["message"] == "Product deleted successfully"
    assert ("product-images", "123-abc.jpg") not in storage.objects
    assert client.get(f"/api/products/{product['id']}").status_code == 404


def test_homepage_collects_featured_slots(client, admin_headers):
    product = create_product(client, admin_headers)
    client.put(f"/api/admin/products/{product['id']}/featured", json={"featured": True}, headers=admin_headers)
    post = client.post(
        "/api/admin/blog",
        json={"title": "Welcome", "content": "Hello", "published": True, "featured": True},
        headers=admin_headers,
    ).json()["post"]

    home = client.get("/api/homepage").json()

    assert [p["id"] for p in home["featured_products"]] == [product["id"]]
    assert home["featured_blog_post"]["id"] == post["id"]
    assert home["featured_community_post"] is None
    assert home["logo_url"] == ""
