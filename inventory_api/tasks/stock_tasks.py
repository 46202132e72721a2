import logging

from sqlalchemy import func

from inventory_api.tasks.celery_app import celery_app
from inventory_api.database import SessionLocal
from inventory_api.models.product import Product
from inventory_api.models.stock import Stock
from inventory_api.services import rules

logger = logging.getLogger(__name__)


@celery_app.task(name="check_stock_levels")
def check_stock_levels(product_id: int) -> dict:
    """
    Compare a product's total stock with its min/max stock levels.

    Runs after every accepted stock write. The total is summed over all
    warehouses; a level outside the product's bounds is logged as a warning.

    Args:
        product_id: ID of the product whose stock changed

    Returns:
        Dictionary with the computed total and level
    """
    db = SessionLocal()

    try:
        product = db.query(Product).filter(Product.id == product_id).first()

        if not product:
            logger.error(f"Stock level check: product #{product_id} not found")
            return {"status": "failed", "error": "Product not found"}

        total = (
            db.query(func.coalesce(func.sum(Stock.current_quantity), 0))
            .filter(Stock.product_id == product_id)
            .scalar()
        )
        total = int(total)
        level = rules.classify_stock_level(total, product.min_stock_level, product.max_stock_level)

        if level == rules.LEVEL_LOW:
            logger.warning(
                f"Product #{product_id} ({product.article_number}) below minimum stock: "
                f"{total} < {product.min_stock_level}"
            )
        elif level == rules.LEVEL_HIGH:
            logger.warning(
                f"Product #{product_id} ({product.article_number}) above maximum stock: "
                f"{total} > {product.max_stock_level}"
            )

        return {"product_id": product_id, "total_quantity": total, "level": level}

    finally:
        db.close()
