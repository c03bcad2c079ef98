"""
School Self-Evaluation Tracker - Test Configuration and Fixtures
"""
import os
import tempfile
from pathlib import Path
from typing import AsyncGenerator, List

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import NullPool
from faker import Faker

# Set testing environment before anything reads settings
os.environ['ENVIRONMENT'] = 'test'
os.environ['DATABASE_URL'] = 'sqlite+aiosqlite:///./test.db'
os.environ['GOOGLE_CLIENT_EMAIL'] = ''
os.environ['GOOGLE_PRIVATE_KEY'] = ''
os.environ['LOG_FILE'] = ''
os.environ['UPLOAD_PATH'] = tempfile.mkdtemp(prefix='school-eval-uploads-')

from school_eval.main import app
from school_eval.api.deps import get_evidence_service
from school_eval.core.config import settings
from school_eval.core.database import Base, get_db
from school_eval.models import (
    User,
    UserRole,
    Standard,
    Indicator,
    ChecklistItem,
    ProgressStatus,
)
from school_eval.services.evidence_service import EvidenceService
from school_eval.services.evidence_storage import EvidenceStorage, LocalEvidenceBackend

fake = Faker()

MISSING_DRIVE_ENV = ['GOOGLE_CLIENT_EMAIL', 'GOOGLE_PRIVATE_KEY']

# Test database setup
TEST_DATABASE_URL = 'sqlite+aiosqlite:///./test.db'
test_engine = create_async_engine(TEST_DATABASE_URL, echo=False, poolclass=NullPool)
TestSessionLocal = sessionmaker(
    bind=test_engine,
    class_=AsyncSession,
    expire_on_commit=False
)


@pytest_asyncio.fixture(scope='function')
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Create a fresh database session for each test"""
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with TestSessionLocal() as session:
        yield session
        await session.rollback()

    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest.fixture
def upload_dir() -> Path:
    """Directory served under /uploads"""
    path = settings.UPLOAD_DIR
    path.mkdir(parents=True, exist_ok=True)
    return path


@pytest.fixture
def evidence_storage(upload_dir: Path) -> EvidenceStorage:
    """Storage without Drive credentials: uploads land in the local uploads directory"""
    return EvidenceStorage(
        local=LocalEvidenceBackend(upload_dir),
        drive=None,
        missing_credentials=list(MISSING_DRIVE_ENV),
    )


@pytest.fixture
def evidence_service(evidence_storage: EvidenceStorage) -> EvidenceService:
    return EvidenceService(evidence_storage)


@pytest_asyncio.fixture
async def client(db_session: AsyncSession, evidence_service: EvidenceService) -> AsyncGenerator[AsyncClient, None]:
    """Create test client with database and evidence service overrides"""
    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_evidence_service] = lambda: evidence_service

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url='http://test') as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def test_user(db_session: AsyncSession) -> User:
    """Create a teacher"""
    user = User(name=fake.name(), role=UserRole.TEACHER)
    db_session.add(user)
    await db_session.commit()
    await db_session.refresh(user)
    return user


@pytest_asyncio.fixture
async def standard(db_session: AsyncSession) -> Standard:
    """Create a standard without indicators"""
    standard = Standard(standard_no=1, title='Leadership and management')
    db_session.add(standard)
    await db_session.commit()
    await db_session.refresh(standard)
    return standard


@pytest_asyncio.fixture
async def indicator(db_session: AsyncSession, standard: Standard) -> Indicator:
    """Create an indicator under the standard"""
    indicator = Indicator(standard_id=standard.id, code='1.1', name='School development plan')
    db_session.add(indicator)
    await db_session.commit()
    await db_session.refresh(indicator)
    return indicator


@pytest_asyncio.fixture
async def checklist_items(db_session: AsyncSession, indicator: Indicator) -> List[ChecklistItem]:
    """Four not-started checklist items on the indicator"""
    items = [
        ChecklistItem(indicator_id=indicator.id, text=text, status=ProgressStatus.NOT_STARTED)
        for text in ['Submit plan', 'Attach schedule', 'File budget', 'Hold review meeting']
    ]
    db_session.add_all(items)
    await db_session.commit()
    for item in items:
        await db_session.refresh(item)
    return items


@pytest.fixture
def checklist_item(checklist_items: List[ChecklistItem]) -> ChecklistItem:
    return checklist_items[0]
