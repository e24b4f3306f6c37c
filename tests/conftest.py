import pytest
from datetime import date
from decimal import Decimal
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

import create_tables  # noqa: F401  registers every model on Base
from database import Base, get_db
from main import app
from modules.auth.models.user import Role
from modules.auth.services.auth_service import AuthService
from modules.contracts.schemas.contract_schemas import ContractCreateAndSend
from modules.contracts.services.signature_capture import SignaturePad

KITCHEN_TEMPLATE = (
    "CONSTRUCTION CONTRACT\n"
    "Contract No. {{CONTRACT_NUMBER}}\n"
    "Between [COMPANY_NAME] and {{CLIENT_NAME}}\n"
    "Project: {{PROJECT_NAME}}\n"
    "Total: {{TOTAL_AMOUNT}}\n"
    "Work begins on [START_DATE]."
)


@pytest.fixture
def engine(tmp_path):
    # A file database so separate sessions really use separate connections
    engine = create_engine(
        f"sqlite:///{tmp_path / 'contracts.db'}",
        connect_args={"check_same_thread": False}
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def admin(db):
    return AuthService.create_user(db, "Admin Tester", "admin@example.com", "admin123", Role.ADMIN)


@pytest.fixture
def client_user(db):
    return AuthService.create_user(db, "Client Tester", "client@example.com", "client123", Role.CLIENT)


@pytest.fixture
def client(session_factory):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    # Not used as a context manager: the lifespan would touch the real database
    yield TestClient(app)
    app.dependency_overrides.clear()


def auth_headers(user):
    token = AuthService.create_access_token(data={"sub": user.email})
    return {"Authorization": f"Bearer {token}"}


def signature_data_uri():
    pad = SignaturePad()
    pad.begin((20, 150))
    pad.extend((120, 40))
    pad.extend((220, 160))
    pad.end()
    return pad.export()


def kitchen_remodel(**overrides) -> ContractCreateAndSend:
    data = dict(
        project_name="Kitchen Remodel",
        project_description="Full kitchen renovation",
        total_amount=Decimal("50000"),
        start_date=date(2026, 1, 5),
        end_date=date(2026, 3, 31),
        payment_terms="50% upfront, 50% on completion",
        scope_of_work="Cabinets, counters and flooring",
        guest_name="Jane Doe",
        guest_email="jane@example.com",
        contract_content=KITCHEN_TEMPLATE,
        admin_signature=signature_data_uri(),
    )
    data.update(overrides)
    return ContractCreateAndSend(**data)
