"""Tests for the background stock level check."""
from unittest.mock import patch

import pytest
from kombu.exceptions import OperationalError

from inventory_api.models.product import Product
from inventory_api.models.stock import Stock
from inventory_api.models.warehouse import Warehouse
from inventory_api.tasks.stock_tasks import check_stock_levels


@pytest.fixture
def stocked_product(db_session):
    product = Product(
        article_number="TASK0001",
        name="Stretch film",
        description="Stretch film roll",
        category="Packaging",
        manufacturer="Wrapco",
        purchase_price=10,
        selling_price=15,
        min_stock_level=10,
        max_stock_level=20,
    )
    north = Warehouse(
        name="North", address="1 North Street, Poznan", contact_person="Ewa",
        phone="+48111222333", email="north@acme-logistics.pl", capacity=100,
    )
    south = Warehouse(
        name="South", address="1 South Street, Krakow", contact_person="Piotr",
        phone="+48111222444", email="south@acme-logistics.pl", capacity=100,
    )
    db_session.add_all([product, north, south])
    db_session.commit()
    return product, north, south


def add_stock(db_session, product, warehouse, quantity):
    db_session.add(Stock(
        product_id=product.id, warehouse_id=warehouse.id,
        current_quantity=quantity, reserved_quantity=0, location="A-01",
    ))
    db_session.commit()


def run_check(session_factory, product_id):
    with patch("inventory_api.tasks.stock_tasks.SessionLocal", session_factory):
        return check_stock_levels(product_id)


def test_low_stock_across_warehouses(db_session, stocked_product, session_factory):
    product, north, south = stocked_product
    add_stock(db_session, product, north, 4)
    add_stock(db_session, product, south, 3)

    result = run_check(session_factory, product.id)

    assert result == {"product_id": product.id, "total_quantity": 7, "level": "low"}


def test_high_stock(db_session, stocked_product, session_factory):
    product, north, _ = stocked_product
    add_stock(db_session, product, north, 25)

    assert run_check(session_factory, product.id)["level"] == "high"


def test_stock_within_bounds(db_session, stocked_product, session_factory):
    product, north, south = stocked_product
    add_stock(db_session, product, north, 10)
    add_stock(db_session, product, south, 5)

    assert run_check(session_factory, product.id)["level"] == "ok"


def test_missing_product(db_session, session_factory):
    assert run_check(session_factory, 9999)["status"] == "failed"


def test_broker_outage_does_not_fail_stock_write(client, create_product, create_warehouse, level_check):
    """The stock record is saved even if the check cannot be queued."""
    level_check.side_effect = OperationalError("broker down")
    product = create_product()
    warehouse = create_warehouse()

    response = client.post(
        "/api/warehouse-stocks",
        json={
            "product_id": product["id"],
            "warehouse_id": warehouse["id"],
            "current_quantity": 3,
            "reserved_quantity": 0,
            "location": "A-01",
        },
    )

    assert response.status_code == 201
