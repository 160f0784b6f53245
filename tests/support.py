"""App/database builders shared by the API tests."""
from __future__ import annotations

from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from crm.core.database import Base, create_db_engine, get_db
from crm.core.errors import register_exception_handlers
from crm.models.address import Address
from crm.models.customer import Customer
from crm.routers.addresses import router as addresses_router
from crm.routers.customers import router as customers_router
from crm.routers.history import router as history_router
import crm.models  # noqa: F401


def build_session() -> Session:
    engine = create_db_engine("sqlite+pysqlite:///:memory:", poolclass=StaticPool)
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    Base.metadata.create_all(bind=engine)
    return TestingSessionLocal()


def build_app(db: Session) -> FastAPI:
    app = FastAPI()
    register_exception_handlers(app)
    app.include_router(customers_router)
    app.include_router(addresses_router)
    app.include_router(history_router)
    app.dependency_overrides[get_db] = lambda: db
    return app


def build_client(db: Session | None = None, **kwargs) -> tuple[TestClient, Session]:
    db = db or build_session()
    return TestClient(build_app(db), **kwargs), db


def seed_customer(db: Session, index: int, addresses: int = 0, city: str = "Hyderabad", state: str = "Telangana") -> Customer:
    customer = Customer(
        first_name=f"First{index}",
        last_name=f"Last{index}",
        phone=str(9000000000 + index),
        email=f"user{index}@example.com",
        account_type="premium" if index % 5 == 0 else "basic",
    )
    db.add(customer)
    db.flush()
    for position in range(addresses):
        db.add(
            Address(
                customer_id=customer.id,
                line1=f"Street {index}-{position}",
                city=city,
                state=state,
                pincode=str(500000 + index),
            )
        )
    db.commit()
    return customer
