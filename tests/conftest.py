from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.core.security import create_access_token, hash_password
from app.db.database import Base, get_db
from app.main import app
from app.models import ComponentType, CostComponent, ExpenseCategory, PriceScheme, Product, ProductCost, User

engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False)

PASSWORD = "secret123"


def auth_headers(user: User) -> dict[str, str]:
    token = create_access_token(subject=str(user.id), role=user.role.value)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture(name="session")
def session_fixture():
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(name="client")
def client_fixture(session):
    def override_get_db():
        yield session

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as client:
        yield client
    app.dependency_overrides.clear()


@pytest.fixture
def make_user(session):
    def _make(email: str = "owner@example.com", name: str = "Owner", password: str = PASSWORD) -> User:
        user = User(name=name, email=email, password_hash=hash_password(password))
        session.add(user)
        session.commit()
        session.refresh(user)
        return user

    return _make


@pytest.fixture
def user(make_user):
    return make_user()


@pytest.fixture
def other_user(make_user):
    return make_user(email="other@example.com", name="Other")


@pytest.fixture
def headers(user):
    return auth_headers(user)


@pytest.fixture
def other_headers(other_user):
    return auth_headers(other_user)


@pytest.fixture
def make_product(session):
    counter = {"value": 0}

    def _make(owner: User, *, hpp: str | None = None, name: str | None = None) -> Product:
        counter["value"] += 1
        product = Product(
            user_id=owner.id,
            name=name or f"Product {counter['value']}",
            sku=f"SKU-{owner.id}-{counter['value']}",
            hpp=Decimal(hpp) if hpp is not None else None,
            selling_price=Decimal(hpp) if hpp is not None else None,
        )
        session.add(product)
        session.commit()
        session.refresh(product)
        return product

    return _make


@pytest.fixture
def make_component(session):
    def _make(
        owner: User,
        *,
        name: str = "Flour",
        component_type: ComponentType = ComponentType.DIRECT_MATERIAL,
        description: str | None = None,
    ) -> CostComponent:
        component = CostComponent(
            user_id=owner.id,
            name=name,
            description=description,
            component_type=component_type,
        )
        session.add(component)
        session.commit()
        session.refresh(component)
        return component

    return _make


@pytest.fixture
def make_cost_line(session):
    def _make(product: Product, component: CostComponent, *, unit_price: str, quantity: str = "1",
              conversion_qty: str = "1", amount: str | None = None) -> ProductCost:
        line = ProductCost(
            product_id=product.id,
            cost_component_id=component.id,
            unit="pcs",
            unit_price=Decimal(unit_price),
            quantity=Decimal(quantity),
            conversion_qty=Decimal(conversion_qty),
            amount=Decimal(amount if amount is not None else unit_price),
        )
        session.add(line)
        session.commit()
        session.refresh(line)
        return line

    return _make


@pytest.fixture
def make_level(session):
    def _make(product: Product, *, level_order: int, purchase: str, selling: str, discount: str = "0",
              name: str | None = None) -> PriceScheme:
        scheme = PriceScheme(
            user_id=product.user_id,
            product_id=product.id,
            level_name=name or f"Level {level_order}",
            level_order=level_order,
            discount_percentage=Decimal(discount),
            purchase_price=Decimal(purchase),
            selling_price=Decimal(selling),
            profit_amount=Decimal(selling) - Decimal(purchase),
        )
        session.add(scheme)
        session.commit()
        session.refresh(scheme)
        return scheme

    return _make


@pytest.fixture
def make_category(session):
    def _make(owner: User, *, name: str = "Rent", is_salary: bool = False) -> ExpenseCategory:
        category = ExpenseCategory(user_id=owner.id, name=name, is_salary=is_salary)
        session.add(category)
        session.commit()
        session.refresh(category)
        return category

    return _make
