"""Shared test fixtures for the records core test suite.

Every test gets a fresh in-memory SQLite database (StaticPool keeps the
single connection alive across sessions). Uploads and PDF scratch files go
to the per-test tmp_path.
"""

import os

# Keep the module-level engine off disk and logs readable before any package imports.
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["LOG_FORMAT"] = "text"
os.environ["STORAGE_BACKEND"] = "local"

import fitz
import pytest
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from cabinet_records.database import Base, build_engine
from cabinet_records.models import Cabinet, CabinetMember, User
from cabinet_records.services.pdf_extractor import PdfExtractor
from cabinet_records.services.record_service import RecordService
from cabinet_records.services.storage_service import LocalFileStorage


@pytest.fixture()
def engine():
    test_engine = build_engine("sqlite://", poolclass=StaticPool)
    Base.metadata.create_all(bind=test_engine)
    yield test_engine
    Base.metadata.drop_all(bind=test_engine)
    test_engine.dispose()


@pytest.fixture()
def db(engine):
    """Per-test database session."""
    session = sessionmaker(autoflush=False, bind=engine)()
    yield session
    session.close()


@pytest.fixture()
def storage(tmp_path):
    local = LocalFileStorage(str(tmp_path / "uploads"))
    local.initialize()
    return local


@pytest.fixture()
def extractor(tmp_path):
    return PdfExtractor(scratch_dir=str(tmp_path))


@pytest.fixture()
def service(db, storage, extractor):
    """RecordService wired to the real activity and notification services."""
    return RecordService(db, storage=storage, extractor=extractor)


def make_user(db, first_name: str = "Test", last_name: str = "User", **overrides) -> User:
    user = User(first_name=first_name, last_name=last_name, **overrides)
    db.add(user)
    db.commit()
    return user


def make_cabinet(
    db,
    owner: User,
    custom_fields: list | None = None,
    approvers: list[User] | None = None,
    name: str = "Invoices",
) -> Cabinet:
    cabinet = Cabinet(
        name=name,
        created_by_id=owner.id,
        custom_fields=custom_fields or [],
        approvers=[{"userId": u.id} for u in approvers or []],
    )
    db.add(cabinet)
    db.commit()
    return cabinet


def add_member(db, cabinet: Cabinet, user: User, role: str = "member") -> CabinetMember:
    member = CabinetMember(cabinet_id=cabinet.id, user_id=user.id, role=role)
    db.add(member)
    db.commit()
    return member


def make_pdf(pages: list[list[str]]) -> bytes:
    """Build a real PDF; each inner list is one page of text lines."""
    document = fitz.open()
    for lines in pages:
        page = document.new_page()
        y = 72
        for line in lines:
            page.insert_text((72, y), line, fontsize=11)
            y += 20
    data = document.tobytes()
    document.close()
    return data
