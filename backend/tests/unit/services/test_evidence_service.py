"""
Unit Tests for the Evidence Lifecycle Service
"""
import pytest
from unittest.mock import AsyncMock, MagicMock

from sqlalchemy import select

from school_eval.core.exceptions import (
    BadRequestError,
    ChecklistItemNotFoundError,
    ConfigError,
    DeleteError,
    EvidenceNotFoundError,
)
from school_eval.models import ChecklistItem, EvidenceFile, EvidenceStorage, LocalLocation, RemoteLocation
from school_eval.services.evidence_service import EvidenceService, filename_from_url
from school_eval.services.evidence_storage import StoredBlob

BASE_URL = 'http://test/'


class TestFilenameFromUrl:
    """Test display names derived from links"""

    @pytest.mark.parametrize('url,expected', [
        ('https://example.org/docs/Annual%20Plan.pdf', 'Annual Plan.pdf'),
        ('https://example.org/docs/report/', 'report'),
        ('https://example.org', 'Drive link'),
        ('https://example.org/', 'Drive link'),
    ])
    def test_filename_from_url(self, url, expected):
        assert filename_from_url(url) == expected


class TestAttachUpload:
    """Test uploading evidence"""

    @pytest.mark.asyncio
    async def test_attach_upload_stores_locally(self, db_session, evidence_service, checklist_item, upload_dir):
        evidence = await evidence_service.attach_upload(
            db_session, checklist_item.id, b'plan body', 'Plan 2024.pdf', 'application/pdf', BASE_URL,
        )

        assert evidence.id is not None
        assert evidence.storage == EvidenceStorage.LOCAL
        assert evidence.drive_file_id is None
        assert evidence.indicator_id == checklist_item.indicator_id
        assert evidence.filename == 'Plan 2024.pdf'
        assert evidence.uploaded_by == 'Teacher'
        assert evidence.size_bytes == 9
        assert evidence.path == evidence.web_view_link
        assert evidence.path == f'http://test/uploads/{evidence.local_name}'
        assert (upload_dir / evidence.local_name).read_bytes() == b'plan body'

    @pytest.mark.asyncio
    async def test_attach_upload_records_uploader(self, db_session, evidence_service, checklist_item):
        evidence = await evidence_service.attach_upload(
            db_session, checklist_item.id, b'x', 'a.txt', 'text/plain', BASE_URL, uploaded_by='Sokha',
        )

        assert evidence.uploaded_by == 'Sokha'

    @pytest.mark.asyncio
    async def test_attach_upload_requires_content(self, db_session, evidence_service, checklist_item):
        with pytest.raises(BadRequestError):
            await evidence_service.attach_upload(db_session, checklist_item.id, b'', 'a.txt', None, BASE_URL)

    @pytest.mark.asyncio
    async def test_attach_upload_requires_filename(self, db_session, evidence_service, checklist_item):
        with pytest.raises(BadRequestError):
            await evidence_service.attach_upload(db_session, checklist_item.id, b'data', '', None, BASE_URL)

    @pytest.mark.asyncio
    async def test_attach_upload_unknown_item(self, db_session, evidence_service, upload_dir):
        before = set(upload_dir.iterdir())

        with pytest.raises(ChecklistItemNotFoundError):
            await evidence_service.attach_upload(db_session, 9999, b'data', 'a.txt', None, BASE_URL)

        assert set(upload_dir.iterdir()) == before

    @pytest.mark.asyncio
    async def test_attach_upload_drive(self, db_session, checklist_item):
        storage = AsyncMock()
        storage.store.return_value = StoredBlob(
            location=RemoteLocation(object_id='f1', link='https://drive.google.com/file/d/f1/view'),
            public_link='https://drive.google.com/file/d/f1/view',
            backend_id='f1',
            size_bytes=4,
        )
        service = EvidenceService(storage)

        evidence = await service.attach_upload(db_session, checklist_item.id, b'data', 'a.pdf', None, BASE_URL)

        assert evidence.storage == EvidenceStorage.DRIVE
        assert evidence.drive_file_id == 'f1'
        assert evidence.path == 'https://drive.google.com/file/d/f1/view'
        assert evidence.location == RemoteLocation(object_id='f1', link='https://drive.google.com/file/d/f1/view')

    @pytest.mark.asyncio
    async def test_failed_record_removes_blob(self):
        location = LocalLocation(stored_name='1-a.txt', link='http://test/uploads/1-a.txt')
        storage = AsyncMock()
        storage.store.return_value = StoredBlob(
            location=location, public_link=location.link, backend_id='1-a.txt', size_bytes=4,
        )
        db = AsyncMock()
        db.add = MagicMock()
        db.get.return_value = ChecklistItem(id=1, indicator_id=1, text='Submit plan')
        db.commit.side_effect = RuntimeError('database is locked')
        service = EvidenceService(storage)

        with pytest.raises(RuntimeError):
            await service.attach_upload(db, 1, b'data', 'a.txt', 'text/plain', BASE_URL)

        storage.delete.assert_awaited_once_with(location)
        db.rollback.assert_awaited_once()


class TestAttachLink:
    """Test attaching external links"""

    @pytest.mark.asyncio
    async def test_attach_link(self, db_session, evidence_service, checklist_item):
        url = 'https://drive.google.com/drive/folders/Annual%20Plan'

        evidence = await evidence_service.attach_link(db_session, checklist_item.id, url)

        assert evidence.storage == EvidenceStorage.LINK
        assert evidence.drive_file_id is None
        assert evidence.path == url
        assert evidence.web_view_link == url
        assert evidence.filename == 'Annual Plan'
        assert evidence.uploaded_by == 'Teacher'

    @pytest.mark.asyncio
    async def test_attach_link_keeps_given_name(self, db_session, evidence_service, checklist_item):
        evidence = await evidence_service.attach_link(
            db_session, checklist_item.id, 'https://example.org/x', filename=' Budget ', uploaded_by='Dara',
        )

        assert evidence.filename == 'Budget'
        assert evidence.uploaded_by == 'Dara'

    @pytest.mark.asyncio
    async def test_attach_link_requires_url(self, db_session, evidence_service, checklist_item):
        with pytest.raises(BadRequestError):
            await evidence_service.attach_link(db_session, checklist_item.id, '   ')

    @pytest.mark.asyncio
    async def test_attach_link_unknown_item(self, db_session, evidence_service):
        with pytest.raises(ChecklistItemNotFoundError):
            await evidence_service.attach_link(db_session, 9999, 'https://example.org/x')

    @pytest.mark.asyncio
    async def test_attach_link_never_touches_storage(self, db_session, checklist_item):
        storage = AsyncMock()
        service = EvidenceService(storage)

        await service.attach_link(db_session, checklist_item.id, 'https://example.org/x')

        storage.store.assert_not_awaited()
        storage.delete.assert_not_awaited()


class TestDetach:
    """Test removing evidence"""

    @pytest.mark.asyncio
    async def test_detach_local(self, db_session, evidence_service, checklist_item, upload_dir):
        evidence = await evidence_service.attach_upload(
            db_session, checklist_item.id, b'data', 'a.txt', 'text/plain', BASE_URL,
        )
        stored_path = upload_dir / evidence.local_name

        await evidence_service.detach(db_session, evidence.id)

        assert not stored_path.exists()
        with pytest.raises(EvidenceNotFoundError):
            await evidence_service.get_evidence(db_session, evidence.id)

    @pytest.mark.asyncio
    async def test_detach_local_file_already_removed(self, db_session, evidence_service, checklist_item, upload_dir):
        evidence = await evidence_service.attach_upload(
            db_session, checklist_item.id, b'data', 'a.txt', 'text/plain', BASE_URL,
        )
        (upload_dir / evidence.local_name).unlink()

        await evidence_service.detach(db_session, evidence.id)

        with pytest.raises(EvidenceNotFoundError):
            await evidence_service.get_evidence(db_session, evidence.id)

    @pytest.mark.asyncio
    async def test_detach_link(self, db_session, evidence_service, checklist_item):
        evidence = await evidence_service.attach_link(db_session, checklist_item.id, 'https://example.org/x')

        await evidence_service.detach(db_session, evidence.id)

        assert await evidence_service.list_evidence(db_session, checklist_item.id) == []

    @pytest.mark.asyncio
    async def test_detach_unknown(self, db_session, evidence_service):
        with pytest.raises(EvidenceNotFoundError):
            await evidence_service.detach(db_session, 4242)

    @pytest.mark.asyncio
    async def test_detach_drive_without_credentials_keeps_record(self, db_session, evidence_service, checklist_item):
        evidence = EvidenceFile(
            checklist_item_id=checklist_item.id,
            indicator_id=checklist_item.indicator_id,
            filename='plan.pdf',
            path='https://drive.google.com/file/d/f1/view',
            storage=EvidenceStorage.DRIVE,
            drive_file_id='f1',
            web_view_link='https://drive.google.com/file/d/f1/view',
            uploaded_by='Teacher',
        )
        db_session.add(evidence)
        await db_session.commit()

        with pytest.raises(ConfigError):
            await evidence_service.detach(db_session, evidence.id)

        result = await db_session.execute(select(EvidenceFile).where(EvidenceFile.id == evidence.id))
        assert result.scalar_one_or_none() is not None

    @pytest.mark.asyncio
    async def test_detach_backend_failure_keeps_record(self, db_session, checklist_item):
        storage = AsyncMock()
        storage.delete.side_effect = DeleteError('Drive returned 500', backend='drive')
        service = EvidenceService(storage)
        evidence = await service.attach_link(db_session, checklist_item.id, 'https://example.org/x')

        with pytest.raises(DeleteError):
            await service.detach(db_session, evidence.id)

        assert (await service.get_evidence(db_session, evidence.id)).id == evidence.id


class TestListEvidence:
    """Test evidence reads"""

    @pytest.mark.asyncio
    async def test_list_in_creation_order(self, db_session, evidence_service, checklist_item):
        first = await evidence_service.attach_link(db_session, checklist_item.id, 'https://example.org/a')
        second = await evidence_service.attach_link(db_session, checklist_item.id, 'https://example.org/b')

        evidence = await evidence_service.list_evidence(db_session, checklist_item.id)

        assert [e.id for e in evidence] == [first.id, second.id]

    @pytest.mark.asyncio
    async def test_list_unknown_item(self, db_session, evidence_service):
        with pytest.raises(ChecklistItemNotFoundError):
            await evidence_service.list_evidence(db_session, 9999)
