"""Tests for warehouse stock endpoints and capacity rules."""


def stock_body(product_id, warehouse_id, current_quantity=10, reserved_quantity=0, location="A-01"):
    return {
        "product_id": product_id,
        "warehouse_id": warehouse_id,
        "current_quantity": current_quantity,
        "reserved_quantity": reserved_quantity,
        "location": location,
    }


def test_create_stock(client, create_product, create_warehouse, level_check):
    product = create_product()
    warehouse = create_warehouse()

    response = client.post(
        "/api/warehouse-stocks",
        json=stock_body(product["id"], warehouse["id"], current_quantity=20, reserved_quantity=5)
    )

    assert response.status_code == 201
    data = response.json()
    assert data["product_id"] == product["id"]
    assert data["warehouse_id"] == warehouse["id"]
    assert data["current_quantity"] == 20
    assert data["reserved_quantity"] == 5
    level_check.assert_called_once_with(product["id"])


def test_fill_warehouse_exactly_to_capacity(client, create_product, create_warehouse):
    """A total equal to capacity is accepted; one more unit is not."""
    first = create_product(article_number="PROD0001")
    second = create_product(article_number="PROD0002")
    warehouse = create_warehouse(capacity=10)

    response = client.post(
        "/api/warehouse-stocks",
        json=stock_body(first["id"], warehouse["id"], current_quantity=10)
    )
    assert response.status_code == 201

    response = client.post(
        "/api/warehouse-stocks",
        json=stock_body(second["id"], warehouse["id"], current_quantity=1)
    )
    assert response.status_code == 400
    assert "Not enough space" in response.json()["errors"]


def test_capacity_is_per_warehouse(client, create_product, create_warehouse, create_stock):
    product = create_product()
    full = create_warehouse(name="Full", capacity=5)
    empty = create_warehouse(name="Empty", capacity=5)
    create_stock(product["id"], full["id"], current_quantity=5)

    response = client.post(
        "/api/warehouse-stocks",
        json=stock_body(product["id"], empty["id"], current_quantity=5)
    )

    assert response.status_code == 201


def test_duplicate_pair_is_rejected(client, create_product, create_warehouse, create_stock):
    product = create_product()
    warehouse = create_warehouse()
    create_stock(product["id"], warehouse["id"])

    response = client.post(
        "/api/warehouse-stocks",
        json=stock_body(product["id"], warehouse["id"], location="B-02")
    )

    assert response.status_code == 400
    assert "already exists" in response.json()["errors"]


def test_reserved_above_current_is_rejected(client, create_product, create_warehouse):
    product = create_product()
    warehouse = create_warehouse()

    response = client.post(
        "/api/warehouse-stocks",
        json=stock_body(product["id"], warehouse["id"], current_quantity=3, reserved_quantity=4)
    )

    assert response.status_code == 400
    assert "reserved_quantity" in response.json()["errors"]


def test_create_stock_unknown_product(client, create_warehouse):
    warehouse = create_warehouse()

    response = client.post("/api/warehouse-stocks", json=stock_body(9999, warehouse["id"]))

    assert response.status_code == 404


def test_create_stock_unknown_warehouse(client, create_product):
    product = create_product()

    response = client.post("/api/warehouse-stocks", json=stock_body(product["id"], 9999))

    assert response.status_code == 404


def test_create_stock_validation(client):
    response = client.post(
        "/api/warehouse-stocks",
        json=stock_body(0, 1, current_quantity=-1, location="A")
    )

    assert response.status_code == 400
    errors = response.json()["errors"]
    assert {"product_id", "current_quantity", "location"} <= set(errors)


def test_get_stock(client, create_product, create_warehouse, create_stock):
    product = create_product()
    warehouse = create_warehouse()
    stock = create_stock(product["id"], warehouse["id"])

    response = client.get(f"/api/warehouse-stocks/{stock['id']}")

    assert response.status_code == 200
    assert response.json()["location"] == "A-01"


def test_get_stock_not_found(client):
    response = client.get("/api/warehouse-stocks/9999")

    assert response.status_code == 404


def test_list_stocks_filtered_by_warehouse(client, create_product, create_warehouse, create_stock):
    product = create_product()
    north = create_warehouse(name="North")
    south = create_warehouse(name="South")
    create_stock(product["id"], north["id"])
    create_stock(product["id"], south["id"])

    response = client.get(f"/api/warehouse-stocks?warehouse_id={north['id']}")

    assert response.status_code == 200
    data = response.json()
    assert data["total"] == 1
    assert data["items"][0]["warehouse_id"] == north["id"]


def test_stocks_by_product(client, create_product, create_warehouse, create_stock):
    product = create_product(article_number="PROD0001")
    other = create_product(article_number="PROD0002")
    north = create_warehouse(name="North")
    south = create_warehouse(name="South")
    create_stock(product["id"], north["id"])
    create_stock(product["id"], south["id"])
    create_stock(other["id"], north["id"])

    response = client.get(f"/api/warehouse-stocks/product/{product['id']}")

    assert response.status_code == 200
    data = response.json()
    assert len(data) == 2
    assert all(item["product_id"] == product["id"] for item in data)


def test_stocks_by_unknown_product(client):
    response = client.get("/api/warehouse-stocks/product/9999")

    assert response.status_code == 404


def test_update_stock_quantity_within_capacity(client, create_product, create_warehouse, create_stock):
    """Only the difference to the old quantity counts against capacity."""
    product = create_product()
    warehouse = create_warehouse(capacity=10)
    stock = create_stock(product["id"], warehouse["id"], current_quantity=8)

    response = client.put(f"/api/warehouse-stocks/{stock['id']}", json={"current_quantity": 10})

    assert response.status_code == 200
    assert response.json()["current_quantity"] == 10


def test_update_stock_over_capacity(client, create_product, create_warehouse, create_stock):
    product = create_product()
    warehouse = create_warehouse(capacity=10)
    stock = create_stock(product["id"], warehouse["id"], current_quantity=8)

    response = client.put(f"/api/warehouse-stocks/{stock['id']}", json={"current_quantity": 11})

    assert response.status_code == 400
    assert client.get(f"/api/warehouse-stocks/{stock['id']}").json()["current_quantity"] == 8


def test_update_stock_partial_fields(client, create_product, create_warehouse, create_stock):
    product = create_product()
    warehouse = create_warehouse()
    stock = create_stock(product["id"], warehouse["id"], current_quantity=8, reserved_quantity=2)

    response = client.put(f"/api/warehouse-stocks/{stock['id']}", json={"location": "C-07"})

    assert response.status_code == 200
    data = response.json()
    assert data["location"] == "C-07"
    assert data["current_quantity"] == 8
    assert data["reserved_quantity"] == 2


def test_update_reserved_against_stored_current(client, create_product, create_warehouse, create_stock):
    """Reserved quantity is checked against the stored current quantity when only one is sent."""
    product = create_product()
    warehouse = create_warehouse()
    stock = create_stock(product["id"], warehouse["id"], current_quantity=5)

    response = client.put(f"/api/warehouse-stocks/{stock['id']}", json={"reserved_quantity": 6})

    assert response.status_code == 400
    assert "reserved_quantity" in response.json()["errors"]


def test_move_stock_checks_target_capacity(client, create_product, create_warehouse, create_stock):
    """Moving a record checks the whole quantity against the target warehouse."""
    product = create_product()
    source = create_warehouse(name="Source", capacity=100)
    target = create_warehouse(name="Target", capacity=5)
    stock = create_stock(product["id"], source["id"], current_quantity=6)

    response = client.put(f"/api/warehouse-stocks/{stock['id']}", json={"warehouse_id": target["id"]})
    assert response.status_code == 400

    response = client.put(
        f"/api/warehouse-stocks/{stock['id']}",
        json={"warehouse_id": target["id"], "current_quantity": 5}
    )
    assert response.status_code == 200
    assert response.json()["warehouse_id"] == target["id"]


def test_update_stock_onto_existing_pair(client, create_product, create_warehouse, create_stock):
    product = create_product()
    north = create_warehouse(name="North")
    south = create_warehouse(name="South")
    create_stock(product["id"], north["id"])
    stock = create_stock(product["id"], south["id"])

    response = client.put(f"/api/warehouse-stocks/{stock['id']}", json={"warehouse_id": north["id"]})

    assert response.status_code == 400


def test_update_stock_unknown_product(client, create_product, create_warehouse, create_stock):
    product = create_product()
    warehouse = create_warehouse()
    stock = create_stock(product["id"], warehouse["id"])

    response = client.put(f"/api/warehouse-stocks/{stock['id']}", json={"product_id": 9999})

    assert response.status_code == 404


def test_update_stock_change_product_checks_both(
    client, create_product, create_warehouse, create_stock, level_check
):
    first = create_product(article_number="PROD0001")
    second = create_product(article_number="PROD0002")
    warehouse = create_warehouse()
    stock = create_stock(first["id"], warehouse["id"])
    level_check.reset_mock()

    response = client.put(f"/api/warehouse-stocks/{stock['id']}", json={"product_id": second["id"]})

    assert response.status_code == 200
    checked = {call.args[0] for call in level_check.call_args_list}
    assert checked == {first["id"], second["id"]}


def test_update_stock_not_found(client):
    response = client.put("/api/warehouse-stocks/9999", json={"location": "C-07"})

    assert response.status_code == 404


def test_delete_stock(client, create_product, create_warehouse, create_stock):
    product = create_product()
    warehouse = create_warehouse()
    stock = create_stock(product["id"], warehouse["id"])

    response = client.delete(f"/api/warehouse-stocks/{stock['id']}")

    assert response.status_code == 204
    assert client.get(f"/api/warehouse-stocks/{stock['id']}").status_code == 404
    # Product and warehouse can now be removed
    assert client.delete(f"/api/products/{product['id']}").status_code == 200
    assert client.delete(f"/api/warehouses/{warehouse['id']}").status_code == 200


def test_delete_stock_not_found(client):
    response = client.delete("/api/warehouse-stocks/9999")

    assert response.status_code == 404
