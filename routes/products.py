import logging
from typing import Any, Dict, List

from bson.objectid import ObjectId
from fastapi import APIRouter, Depends, Request
from pydantic import TypeAdapter, ValidationError

from dependencies import get_product_repo, read_json_body, require_authorized, require_token
from errors import ValidationFailed
from repositories import ProductRepository
from schemas import Product

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/products", tags=["Products"])

# Query-string values arrive as text; known scalar fields are coerced so that
# ?price=300 matches the stored integer.
_FILTER_TYPES = {
    name: TypeAdapter(field.annotation)
    for name, field in Product.model_fields.items()
    if name not in ("id", "accessories")
}


def build_filter(params) -> Dict[str, Any]:
    filt: Dict[str, Any] = {}
    for key, value in params.multi_items():
        # first value wins for repeated keys
        if key in filt:
            continue
        if key == "_id":
            if not ObjectId.is_valid(value):
                raise ValidationFailed(f"Invalid _id filter: {value}")
            filt[key] = ObjectId(value)
        elif key in _FILTER_TYPES:
            try:
                filt[key] = _FILTER_TYPES[key].validate_python(value)
            except ValidationError:
                raise ValidationFailed(f"Invalid value for {key}: {value}")
        else:
            filt[key] = value
    return filt


def _validate_product(data: Any) -> Product:
    if not isinstance(data, dict):
        raise ValidationFailed("Unable to validate the product")
    try:
        return Product.model_validate(data)
    except ValidationError as e:
        logger.warning("Unable to validate the product %s: %s", data, e)
        raise ValidationFailed("Unable to validate the product")


@router.get("")
def list_products(request: Request, repo: ProductRepository = Depends(get_product_repo)):
    return repo.find(build_filter(request.query_params))


@router.get("/{product_id}")
def get_product(product_id: str, repo: ProductRepository = Depends(get_product_repo)):
    return repo.get(product_id)


@router.post("", status_code=201)
def create_products(
    claims: dict = Depends(require_token),
    payload: Any = Depends(read_json_body),
    repo: ProductRepository = Depends(get_product_repo),
) -> List[str]:
    if not isinstance(payload, list):
        raise ValidationFailed("unable to parse request payload")
    # Whole batch is validated before the first insert; the inserts
    # themselves are not transactional.
    products = [_validate_product(item) for item in payload]
    ids = repo.insert_many(products)
    logger.info("User %s created %d products", claims.get("user_id"), len(ids))
    return ids


@router.put("/{product_id}")
def update_product(
    product_id: str,
    claims: dict = Depends(require_token),
    payload: Any = Depends(read_json_body),
    repo: ProductRepository = Depends(get_product_repo),
):
    existing = repo.get(product_id)
    if not isinstance(payload, dict):
        raise ValidationFailed("unable to parse request payload")
    # null leaves the stored value in place
    merged = {**existing, **{k: v for k, v in payload.items() if k != "_id" and v is not None}}
    product = _validate_product(merged)
    repo.replace(product_id, product)
    return product.to_json()


@router.delete("/{product_id}")
def delete_product(
    product_id: str,
    claims: dict = Depends(require_authorized),
    repo: ProductRepository = Depends(get_product_repo),
) -> int:
    return repo.delete(product_id)
