"""
Unit Tests for Checklist Item API Endpoints
"""
import pytest
from httpx import AsyncClient


class TestChecklistItemUpdate:
    """Test status changes and progress recomputation"""

    @pytest.mark.asyncio
    async def test_half_completed(self, client: AsyncClient, indicator, checklist_items):
        for item in checklist_items[:2]:
            response = await client.patch(f'/api/checklist-items/{item.id}', json={'status': 'COMPLETED'})
            assert response.status_code == 200

        data = response.json()
        assert data['item']['status'] == 'COMPLETED'
        assert data['indicator'] == {
            'id': indicator.id,
            'standardId': indicator.standard_id,
            'code': '1.1',
            'name': indicator.name,
            'status': 'IN_PROGRESS',
            'progress': 50,
            'managerId': None,
        }

    @pytest.mark.asyncio
    async def test_all_completed(self, client: AsyncClient, indicator, checklist_items):
        for item in checklist_items:
            response = await client.patch(f'/api/checklist-items/{item.id}', json={'status': 'COMPLETED'})

        assert response.json()['indicator']['progress'] == 100
        assert response.json()['indicator']['status'] == 'COMPLETED'

        detail = (await client.get(f'/api/indicators/{indicator.id}')).json()
        assert detail['progress'] == 100

    @pytest.mark.asyncio
    async def test_reopen_item(self, client: AsyncClient, checklist_items):
        item = checklist_items[0]
        await client.patch(f'/api/checklist-items/{item.id}', json={'status': 'COMPLETED'})

        response = await client.patch(f'/api/checklist-items/{item.id}', json={'status': 'NOT_STARTED'})

        assert response.json()['indicator']['progress'] == 0
        assert response.json()['indicator']['status'] == 'NOT_STARTED'

    @pytest.mark.asyncio
    async def test_assign_and_unassign(self, client: AsyncClient, checklist_item, test_user):
        response = await client.patch(f'/api/checklist-items/{checklist_item.id}', json={'assigneeId': test_user.id})
        assert response.json()['item']['assigneeId'] == test_user.id

        response = await client.patch(f'/api/checklist-items/{checklist_item.id}', json={'assigneeId': None})
        assert response.json()['item']['assigneeId'] is None

    @pytest.mark.asyncio
    async def test_invalid_status(self, client: AsyncClient, checklist_item):
        response = await client.patch(f'/api/checklist-items/{checklist_item.id}', json={'status': 'DONE'})

        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_unknown_item(self, client: AsyncClient):
        response = await client.patch('/api/checklist-items/999', json={'status': 'COMPLETED'})

        assert response.status_code == 404
        assert response.json()['error']['code'] == 'CHECKLIST_ITEM_NOT_FOUND'


class TestComments:
    """Test comments on checklist items"""

    @pytest.mark.asyncio
    async def test_add_comment_default_author(self, client: AsyncClient, checklist_item):
        response = await client.post(f'/api/checklist-items/{checklist_item.id}/comments', json={'text': 'Uploaded draft'})

        assert response.status_code == 200
        data = response.json()
        assert data['authorName'] == 'Teacher'
        assert data['text'] == 'Uploaded draft'
        assert data['checklistItemId'] == checklist_item.id

    @pytest.mark.asyncio
    async def test_add_comment_with_author(self, client: AsyncClient, checklist_item):
        response = await client.post(
            f'/api/checklist-items/{checklist_item.id}/comments',
            json={'text': 'Reviewed', 'authorName': 'Principal'},
        )

        assert response.json()['authorName'] == 'Principal'

    @pytest.mark.asyncio
    async def test_comment_requires_text(self, client: AsyncClient, checklist_item):
        response = await client.post(f'/api/checklist-items/{checklist_item.id}/comments', json={'text': '  '})

        assert response.status_code == 400
        assert response.json()['error']['code'] == 'BAD_REQUEST'

    @pytest.mark.asyncio
    async def test_comment_unknown_item(self, client: AsyncClient):
        response = await client.post('/api/checklist-items/999/comments', json={'text': 'hello'})

        assert response.status_code == 404
