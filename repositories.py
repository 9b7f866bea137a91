import logging
from typing import Any, Dict, List, Optional

from bson.objectid import ObjectId
from pymongo import ASCENDING
from pymongo.collection import Collection
from pymongo.errors import DuplicateKeyError, PyMongoError

from database import parse_object_id, serialize_doc
from errors import Conflict, NotFound
from schemas import Product

logger = logging.getLogger(__name__)


class ProductRepository:
    """Typed product operations on top of a single Mongo collection."""

    def __init__(self, collection: Collection):
        self.collection = collection

    def insert_many(self, products: List[Product]) -> List[str]:
        # One insert per product, no transaction: a store failure keeps the
        # documents already written and reports the error.
        inserted_ids = []
        for product in products:
            doc = product.to_document()
            doc["_id"] = ObjectId()
            try:
                res = self.collection.insert_one(doc)
            except PyMongoError as e:
                logger.error("Unable to insert product after %d inserts: %s", len(inserted_ids), e)
                raise
            inserted_ids.append(str(res.inserted_id))
        return inserted_ids

    def find(self, filt: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
        try:
            items = list(self.collection.find(filt or {}))
        except PyMongoError as e:
            logger.error("Unable to find products: %s", e)
            raise
        return [serialize_doc(i) for i in items]

    def get(self, product_id: str) -> Dict[str, Any]:
        doc = self.collection.find_one({"_id": parse_object_id(product_id)})
        if not doc:
            raise NotFound("Product not found")
        return serialize_doc(doc)

    def replace(self, product_id: str, product: Product) -> None:
        self.collection.update_one({"_id": parse_object_id(product_id)}, {"$set": product.to_document()})

    def delete(self, product_id: str) -> int:
        try:
            oid = parse_object_id(product_id)
        except NotFound:
            raise NotFound("Cannot delete product")
        if self.collection.find_one({"_id": oid}) is None:
            raise NotFound("Cannot delete product")
        try:
            res = self.collection.delete_one({"_id": oid})
        except PyMongoError as e:
            logger.error("Unable to delete product %s: %s", product_id, e)
            raise NotFound("Cannot delete product")
        return res.deleted_count


class UserRepository:
    def __init__(self, collection: Collection):
        self.collection = collection

    def ensure_indexes(self) -> None:
        self.collection.create_index([("username", ASCENDING)], unique=True)

    def find_by_username(self, username: str) -> Optional[Dict[str, Any]]:
        return self.collection.find_one({"username": username})

    def exists(self, username: str) -> bool:
        return self.find_by_username(username) is not None

    def insert(self, username: str, password_hash: str) -> str:
        try:
            res = self.collection.insert_one({"username": username, "password": password_hash})
        except DuplicateKeyError:
            # lost a race against a concurrent registration
            logger.warning("User %s already exists", username)
            raise Conflict("User already exists")
        return str(res.inserted_id)
