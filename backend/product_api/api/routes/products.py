from fastapi import APIRouter, Depends, HTTPException, Response
from sqlalchemy.orm import Session

from product_api.api.deps import get_db_session, require_user
from product_api.api.middleware import Identity
from product_api.schemas.product import ProductCreate, ProductOut, ProductUpdate
from product_api.services import products as product_service

router = APIRouter(prefix="/api/products", tags=["products"])


@router.post("", response_model=ProductOut)
def create_product(
    body: ProductCreate,
    db: Session = Depends(get_db_session),
    identity: Identity = Depends(require_user),
) -> ProductOut:
    product = product_service.create_product(db, body, user_id=identity.user_id)
    return ProductOut.model_validate(product)


@router.get("/{product_id}", response_model=ProductOut)
def get_product(product_id: str, db: Session = Depends(get_db_session)) -> ProductOut:
    product = product_service.find_product(db, product_id)
    if not product:
        raise HTTPException(status_code=404, detail="Product not found")
    return ProductOut.model_validate(product)


@router.put("/{product_id}", response_model=ProductOut)
def update_product(
    product_id: str,
    body: ProductUpdate,
    db: Session = Depends(get_db_session),
    identity: Identity = Depends(require_user),
) -> ProductOut:
    product = product_service.find_product(db, product_id)
    if not product:
        raise HTTPException(status_code=404, detail="Product not found")
    if int(product.user_id) != identity.user_id:
        raise HTTPException(status_code=403, detail="Forbidden")
    product = product_service.update_product(db, product, body)
    return ProductOut.model_validate(product)


@router.delete("/{product_id}")
def delete_product(
    product_id: str,
    db: Session = Depends(get_db_session),
    identity: Identity = Depends(require_user),
) -> Response:
    product = product_service.find_product(db, product_id)
    if not product:
        raise HTTPException(status_code=404, detail="Product not found")
    if int(product.user_id) != identity.user_id:
        raise HTTPException(status_code=403, detail="Forbidden")
    product_service.delete_product(db, product)
    return Response(status_code=200)
