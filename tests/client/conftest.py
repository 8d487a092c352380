"""
Client test fixtures - an in-memory stand-in for the registrations API
"""
import json
from datetime import datetime, timezone
from typing import Any, Dict, List

import httpx
import pytest

from client.api import RegistrationApi
from client.config import ClientConfig


def make_record(index: int, **overrides: Any) -> Dict[str, Any]:
    record = {
        'id': f'id-{index:03d}',
        'fullName': f'Student {index}',
        'email': f'student{index}@example.com',
        'phone': '9876543210',
        'qualification': 'B.Tech',
        'passingYear': 2022,
        'service': 'EduTech',
        'course': 'Online Tutoring',
        'message': None,
        'createdAt': datetime(2024, 1, 1, tzinfo=timezone.utc).isoformat(),
    }
    record.update(overrides)
    return record


class FakeApiServer:
    """Serves list/delete/create from a list of records, newest first"""

    def __init__(self, records: List[Dict[str, Any]]):
        self.records = records
        self.requests: List[httpx.Request] = []
        self.fail_next = 0

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.fail_next:
            self.fail_next -= 1
            return httpx.Response(500, json={'success': False, 'message': 'Service temporarily unavailable. Please try again.', 'code': 'SERVICE_UNAVAILABLE', 'retryable': True})

        path = request.url.path
        if request.method == 'GET' and path.endswith('/registrations'):
            return self._list(request)
        if request.method == 'DELETE' and '/registrations/' in path:
            registration_id = path.rsplit('/', 1)[-1]
            before = len(self.records)
            self.records = [r for r in self.records if r['id'] != registration_id]
            if len(self.records) == before:
                return httpx.Response(404, json={'success': False, 'message': f"Registration with ID '{registration_id}' not found", 'code': 'REGISTRATION_NOT_FOUND'})
            return httpx.Response(200, json={'success': True, 'message': 'Registration deleted'})
        if request.method == 'POST' and path.endswith('/registrations'):
            data = json.loads(request.content)
            if any(r['email'] == data['email'].lower() for r in self.records):
                return httpx.Response(400, json={'success': False, 'message': 'Email already registered', 'code': 'DUPLICATE_EMAIL'})
            record = make_record(len(self.records) + 100, **data)
            record['email'] = data['email'].lower()
            self.records.insert(0, record)
            return httpx.Response(201, json={'success': True, 'data': record})
        if request.method == 'GET' and path.endswith('/catalog'):
            return httpx.Response(200, json={'success': True, 'data': {'EduTech': ['Online Tutoring']}})
        return httpx.Response(404, json={'success': False, 'message': 'Not Found'})

    def _list(self, request: httpx.Request) -> httpx.Response:
        params = request.url.params
        page = int(params.get('page', 1))
        page_size = int(params.get('pageSize', 100))
        search = params.get('search', '').lower()
        service = params.get('service')

        matching = [
            r for r in self.records
            if (not service or r['service'] == service)
            and (not search or any(search in str(r[k]).lower() for k in ('fullName', 'email', 'phone', 'service', 'course')))
        ]
        total = len(matching)
        total_pages = max(1, -(-total // page_size))
        start = (page - 1) * page_size
        return httpx.Response(200, json={
            'success': True,
            'data': matching[start:start + page_size],
            'total': total,
            'page': page,
            'pageSize': page_size,
            'totalPages': total_pages,
            'hasNextPage': page < total_pages,
            'hasPreviousPage': page > 1,
        })


@pytest.fixture
def config() -> ClientConfig:
    return ClientConfig(api_base_url='http://portal.test/api/v1', page_size=2)


@pytest.fixture
def fake_server() -> FakeApiServer:
    return FakeApiServer([make_record(i) for i in range(5, 0, -1)])


@pytest.fixture
async def api(config: ClientConfig, fake_server: FakeApiServer):
    client = RegistrationApi(config, transport=httpx.MockTransport(fake_server.handler))
    yield client
    await client.close()


@pytest.fixture
def record_factory():
    """Build API-shaped registration records"""
    return make_record
