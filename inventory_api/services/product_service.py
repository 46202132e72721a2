from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError
from sqlalchemy import or_
from typing import Optional, List
import math
import logging

from inventory_api.models.product import Product
from inventory_api.models.stock import Stock
from inventory_api.schemas.product import ProductCreate, ProductUpdate, ProductResponse
from inventory_api.services.result import Result
from inventory_api.utils.cache import CacheService

logger = logging.getLogger(__name__)


class ProductService:
    """
    Service class for Product CRUD operations.

    This service handles:
    - Creating products with unique article numbers
    - Reading products (detail reads go through the cache)
    - Replacing product fields
    - Deleting products that are not stocked anywhere
    """

    CACHE_PREFIX = "product"

    def __init__(self, db: Session, cache: Optional[CacheService] = None):
        self.db = db
        self.cache = cache

    def create(self, product_data: ProductCreate) -> Result[Product]:
        """
        Create a new product.

        Args:
            product_data: Product creation data

        Returns:
            Result with the created product, or a conflict if the
            article number is already taken
        """
        if self._article_number_taken(product_data.article_number):
            return Result.conflict(
                f"Product with article number {product_data.article_number} already exists"
            )

        product = Product(**product_data.model_dump())
        self.db.add(product)
        if not self._commit():
            return Result.conflict(
                f"Product with article number {product_data.article_number} already exists"
            )
        self.db.refresh(product)

        logger.info(f"Product #{product.id} ({product.article_number}) created")
        return Result.success(product)

    def get_by_id(self, product_id: int) -> Result[Product]:
        product = self.db.query(Product).filter(Product.id == product_id).first()
        if not product:
            return Result.not_found(f"Product with ID {product_id} not found")
        return Result.success(product)

    def get_by_id_cached(self, product_id: int) -> Result[dict]:
        """
        Get product details from cache or database.

        Returns a dictionary (suitable for API response) and caches
        it on a miss.
        """
        if self.cache:
            cached = self.cache.get(self.CACHE_PREFIX, str(product_id))
            if cached:
                return Result.success(cached)

        result = self.get_by_id(product_id)
        if not result.ok:
            return result

        product_dict = ProductResponse.model_validate(result.value).model_dump(mode="json")
        if self.cache:
            self.cache.set(self.CACHE_PREFIX, str(product_id), product_dict)
        return Result.success(product_dict)

    def get_all(
        self,
        page: int = 1,
        page_size: int = 10,
        search: str = None
    ) -> tuple[List[Product], int, int]:
        """
        Get paginated list of products.

        Args:
            page: Page number (1-indexed)
            page_size: Number of items per page
            search: Optional search term matched against name and article number

        Returns:
            Tuple of (products list, total count, total pages)
        """
        query = self.db.query(Product)

        if search:
            like = f"%{search}%"
            query = query.filter(or_(Product.name.ilike(like), Product.article_number.ilike(like)))

        total = query.count()
        total_pages = math.ceil(total / page_size) if total > 0 else 1

        offset = (page - 1) * page_size
        products = query.order_by(Product.id.desc()).offset(offset).limit(page_size).all()

        return products, total, total_pages

    def update(self, product_id: int, product_data: ProductUpdate) -> Result[Product]:
        """
        Replace every mutable field of a product.

        Args:
            product_id: ID of product to update
            product_data: New field values

        Returns:
            Result with the updated product; not found if it does not exist,
            conflict if the new article number belongs to another product
        """
        product = self.db.query(Product).filter(Product.id == product_id).first()

        if not product:
            return Result.not_found(f"Product with ID {product_id} not found")

        if (
            product.article_number != product_data.article_number
            and self._article_number_taken(product_data.article_number)
        ):
            return Result.conflict(
                f"Product with article number {product_data.article_number} already exists"
            )

        for field, value in product_data.model_dump().items():
            setattr(product, field, value)

        if not self._commit():
            return Result.conflict(
                f"Product with article number {product_data.article_number} already exists"
            )
        self.db.refresh(product)

        self._invalidate_cache(product_id)
        logger.info(f"Product #{product_id} updated")
        return Result.success(product)

    def delete(self, product_id: int) -> Result[None]:
        """
        Delete a product.

        A product referenced by any stock record is kept and a bad request
        is returned instead.
        """
        product = self.db.query(Product).filter(Product.id == product_id).first()

        if not product:
            return Result.not_found(f"Product with ID {product_id} not found")

        if self.is_stocked(product_id):
            return Result.bad_request(
                "Cannot delete product: it is still stocked in one or more warehouses"
            )

        self.db.delete(product)
        if not self._commit():
            return Result.bad_request(
                "Cannot delete product: it is still stocked in one or more warehouses"
            )

        self._invalidate_cache(product_id)
        logger.info(f"Product #{product_id} deleted")
        return Result.success()

    def is_stocked(self, product_id: int) -> bool:
        """True if any stock record references the product."""
        return self.db.query(Stock.id).filter(Stock.product_id == product_id).first() is not None

    def _article_number_taken(self, article_number: str) -> bool:
        return (
            self.db.query(Product.id).filter(Product.article_number == article_number).first()
            is not None
        )

    def _commit(self) -> bool:
        """Commit, rolling back and returning False on a constraint violation."""
        try:
            self.db.commit()
            return True
        except IntegrityError as e:
            self.db.rollback()
            logger.error(f"Integrity error saving product: {e}")
            return False

    def _invalidate_cache(self, product_id: int) -> None:
        """Invalidate cache for a product."""
        if self.cache:
            self.cache.delete(self.CACHE_PREFIX, str(product_id))
