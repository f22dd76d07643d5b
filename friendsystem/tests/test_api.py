import uuid
import pytest
from httpx import ASGITransport, AsyncClient

from friendsystem.main import create_app


@pytest.fixture
def app(coordinator):
    return create_app(coordinator=coordinator)

@pytest.mark.asyncio
async def test_friendship_workflow(app, alice, bob):
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        r = await ac.post(f"/api/friends/{alice}/requests/{bob}")
        assert r.status_code == 200, r.text
        assert r.json() == {'result': 'sent_request'}

        r = await ac.post(f"/api/friends/{alice}/requests/{bob}")
        assert r.json() == {'result': 'already_sent'}

        r = await ac.get(f"/api/friends/{bob}/requests")
        assert r.status_code == 200
        assert r.json() == {'requests': [{'requester': str(alice), 'requested': str(bob)}]}

        r = await ac.post(f"/api/friends/{bob}/requests/{alice}/accept")
        assert r.json() == {'result': 'accepted_outstanding_request'}

        r = await ac.get(f"/api/friends/{alice}/friends")
        assert r.json() == {'friends': [str(bob)]}

        r = await ac.delete(f"/api/friends/{bob}/friends/{alice}")
        assert r.status_code == 200
        assert r.json() == {'ok': True}

        r = await ac.get(f"/api/friends/{bob}/friends")
        assert r.json() == {'friends': []}

@pytest.mark.asyncio
async def test_withdraw_and_accept_nothing(app, alice, bob):
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        await ac.post(f"/api/friends/{alice}/requests/{bob}")
        r = await ac.delete(f"/api/friends/{alice}/requests/{bob}")
        assert r.json() == {'ok': True}

        r = await ac.post(f"/api/friends/{bob}/requests/{alice}/accept")
        assert r.json() == {'result': 'no_outstanding_request'}

@pytest.mark.asyncio
async def test_invalid_pairs(app, alice):
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        r = await ac.post(f"/api/friends/{alice}/requests/{alice}")
        assert r.status_code == 400

        r = await ac.post(f"/api/friends/{alice}/requests/not-a-uuid")
        assert r.status_code == 422

@pytest.mark.asyncio
async def test_healthz_and_missing_storage():
    app = create_app()
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        r = await ac.get('/healthz')
        assert r.json() == {'status': 'ok'}

        r = await ac.get(f"/api/friends/{uuid.uuid4()}/friends")
        assert r.status_code == 503
