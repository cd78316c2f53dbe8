from __future__ import annotations

import secrets
import string
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from product_api.core.errors import StorageFailure
from product_api.core.metrics import observe_db
from product_api.models.product import Product
from product_api.schemas.product import ProductCreate, ProductUpdate

_ALPHABET = string.ascii_lowercase + string.digits


def new_product_id() -> str:
    return "product_" + "".join(secrets.choice(_ALPHABET) for _ in range(10))


def create_product(db: Session, data: ProductCreate, user_id: int) -> Product:
    product = Product(product_id=new_product_id(), user_id=int(user_id), **data.model_dump())
    try:
        with observe_db("createProduct"):
            db.add(product)
            db.commit()
            db.refresh(product)
    except SQLAlchemyError as e:
        db.rollback()
        raise StorageFailure("createProduct", e) from e
    return product


def find_product(db: Session, product_id: str) -> Optional[Product]:
    try:
        with observe_db("findProduct"):
            return db.query(Product).filter(Product.product_id == product_id).first()
    except SQLAlchemyError as e:
        raise StorageFailure("findProduct", e) from e


def update_product(db: Session, product: Product, data: ProductUpdate) -> Product:
    for key, value in data.model_dump().items():
        setattr(product, key, value)
    try:
        with observe_db("updateProduct"):
            db.add(product)
            db.commit()
            db.refresh(product)
    except SQLAlchemyError as e:
        db.rollback()
        raise StorageFailure("updateProduct", e) from e
    return product


def delete_product(db: Session, product: Product) -> None:
    try:
        with observe_db("deleteProduct"):
            db.delete(product)
            db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        raise StorageFailure("deleteProduct", e) from e
