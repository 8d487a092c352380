"""
Unit Tests for RegistrationService and RegistrationStore
Uses the sqlite test database from conftest.
"""
import asyncio
from datetime import datetime, timedelta, timezone

import pytest
from faker import Faker
from sqlalchemy import insert
from sqlalchemy.exc import DataError, OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import (
    DuplicateEmailError,
    RegistrationNotFoundError,
    RegistrationValidationError,
    UnavailableError,
)
from app.models.registration import Registration
from app.services.registration_service import RegistrationService
from app.services.registration_store import RegistrationStore, escape_like


fake = Faker()


def build_registration(**overrides):
    data = {
        "fullName": fake.name(),
        "email": fake.unique.email(),
        "phone": fake.numerify("##########"),
        "qualification": "B.Tech",
        "passingYear": 2022,
        "service": "EduTech",
        "course": "Online Tutoring",
    }
    data.update(overrides)
    return data


@pytest.fixture
def notifications():
    return []


@pytest.fixture
def service(db_session: AsyncSession, notifications) -> RegistrationService:
    return RegistrationService(RegistrationStore(db_session), notify=notifications.append)


async def seed(db_session: AsyncSession, count: int, prefix: str = "seed", **overrides):
    """Insert rows directly with distinct, increasing createdAt"""
    base = datetime(2024, 1, 1, tzinfo=timezone.utc)
    rows = []
    for i in range(count):
        data = build_registration(**overrides)
        rows.append({
            "id": f"{prefix}-{i:03d}",
            "full_name": data["fullName"],
            "email": data["email"].lower(),
            "phone": data["phone"],
            "qualification": data["qualification"],
            "passing_year": data["passingYear"],
            "service": data["service"],
            "course": data["course"],
            "message": None,
            "created_at": base + timedelta(minutes=i),
        })
    await db_session.execute(insert(Registration), rows)
    await db_session.commit()
    return rows


class TestCreate:
    """Test registration creation"""

    @pytest.mark.asyncio
    async def test_create_then_list(self, service: RegistrationService, notifications):
        """A created record is listed once, normalized, with id and createdAt"""
        created = await service.create(build_registration(email="  Asha@Example.COM "))

        result = await service.list()
        matches = [r for r in result["records"] if r.email == "asha@example.com"]

        assert len(matches) == 1
        assert matches[0].id == created.id
        assert matches[0].created_at is not None
        assert len(notifications) == 1
        assert notifications[0]["id"] == created.id

    @pytest.mark.asyncio
    async def test_duplicate_email_rejected(self, service: RegistrationService, notifications):
        """Same normalized email fails with DuplicateEmailError and nothing is stored"""
        await service.create(build_registration(email="asha@example.com"))

        with pytest.raises(DuplicateEmailError) as exc_info:
            await service.create(build_registration(email="ASHA@EXAMPLE.COM"))

        assert exc_info.value.message == "Email already registered"
        assert await service.store.count() == 1
        assert len(notifications) == 1

    @pytest.mark.asyncio
    async def test_unique_index_catches_missed_precheck(self, service: RegistrationService, monkeypatch):
        """When two creates race past the pre-check the index decides"""
        await service.create(build_registration(email="race@example.com"))

        async def no_match(email):
            return None

        monkeypatch.setattr(service.store, "find_by_email", no_match)

        with pytest.raises(DuplicateEmailError):
            await service.create(build_registration(email="race@example.com"))

        assert await service.store.count() == 1

    @pytest.mark.asyncio
    async def test_validation_errors_collected(self, service: RegistrationService, notifications):
        with pytest.raises(RegistrationValidationError) as exc_info:
            await service.create({"fullName": "", "email": "nope", "phone": "12345"})

        fields = {e["field"] for e in exc_info.value.errors}
        assert {"fullName", "email", "phone", "service", "course"} <= fields
        messages = {e["field"]: e["message"] for e in exc_info.value.errors}
        assert messages["service"] == "Service is required"
        assert messages["fullName"] == "Full name is required"
        assert "10 digits" in messages["phone"]
        assert notifications == []
        assert await service.store.count() == 0

    @pytest.mark.asyncio
    async def test_non_object_body_rejected(self, service: RegistrationService):
        with pytest.raises(RegistrationValidationError):
            await service.create(["not", "an", "object"])

    @pytest.mark.asyncio
    async def test_catalog_enforced_when_enabled(self, db_session: AsyncSession):
        service = RegistrationService(
            RegistrationStore(db_session),
            catalog={"EduTech": ["Online Tutoring"]},
            enforce_catalog=True,
        )

        with pytest.raises(RegistrationValidationError) as exc_info:
            await service.create(build_registration(service="Astrology", course="Charts"))

        assert exc_info.value.errors[0]["field"] == "service"

    @pytest.mark.asyncio
    async def test_notify_failure_does_not_fail_create(self, db_session: AsyncSession):
        def broken(payload):
            raise RuntimeError("channel down")

        service = RegistrationService(RegistrationStore(db_session), notify=broken)
        created = await service.create(build_registration())

        assert created.id


class TestList:
    """Test listing, ordering, search and pagination"""

    @pytest.mark.asyncio
    async def test_sorted_newest_first(self, service: RegistrationService, db_session):
        await seed(db_session, 5)

        result = await service.list()
        stamps = [r.created_at for r in result["records"]]

        assert stamps == sorted(stamps, reverse=True)
        assert result["records"][0].id == "seed-004"

    @pytest.mark.asyncio
    async def test_pages_cover_everything_once(self, service: RegistrationService, db_session):
        """Union of all pages equals the full set with no duplicates or gaps"""
        rows = await seed(db_session, 7)

        seen = []
        page = 1
        while True:
            result = await service.list(page=page, page_size=3)
            seen.extend(r.id for r in result["records"])
            if not result["has_next_page"]:
                break
            page += 1

        assert result["total_pages"] == 3
        assert len(seen) == len(set(seen)) == 7
        assert set(seen) == {r["id"] for r in rows}

    @pytest.mark.asyncio
    async def test_page_size_clamped(self, service: RegistrationService, db_session):
        await seed(db_session, 2)

        result = await service.list(page=0, page_size=10_000)

        assert result["page"] == 1
        assert result["page_size"] == service.max_page_size

    @pytest.mark.asyncio
    async def test_search_is_case_insensitive_across_fields(self, service: RegistrationService, db_session):
        await seed(db_session, 3)
        await service.create(build_registration(fullName="Zubin QZXdef"))
        await service.create(build_registration(email="xqzxx@example.com"))
        await service.create(build_registration(course="qzx Robotics"))

        result = await service.list(search="qzx")

        assert result["total"] == 3
        for record in result["records"]:
            haystack = " ".join([record.full_name, record.email, record.phone, record.service, record.course])
            assert "qzx" in haystack.lower()

    @pytest.mark.asyncio
    async def test_empty_search_returns_all(self, service: RegistrationService, db_session):
        await seed(db_session, 4)

        result = await service.list(search="   ")

        assert result["total"] == 4

    @pytest.mark.asyncio
    async def test_search_wildcards_are_literal(self, service: RegistrationService, db_session):
        await seed(db_session, 3)

        result = await service.list(search="%")

        assert result["total"] == 0

    @pytest.mark.asyncio
    async def test_service_filter(self, service: RegistrationService, db_session):
        await seed(db_session, 2, service="EduTech", course="Online Tutoring")
        await service.create(build_registration(service="Data Science", course="Machine Learning"))

        filtered = await service.list(service="Data Science")
        everything = await service.list(service="All")

        assert filtered["total"] == 1
        assert filtered["records"][0].service == "Data Science"
        assert everything["total"] == 3

    @pytest.mark.asyncio
    async def test_malformed_rows_dropped(self, service: RegistrationService, db_session, monkeypatch):
        rows = await seed(db_session, 2)

        async def with_bad_row(page, page_size, search=None, service=None):
            return [dict(rows[0], created_at=None), rows[1]], 2

        monkeypatch.setattr(service.store, "list_page", with_bad_row)
        result = await service.list()

        assert [r.id for r in result["records"]] == [rows[1]["id"]]


class TestGetDeleteStats:
    """Test lookup, deletion and counts"""

    @pytest.mark.asyncio
    async def test_get_by_id(self, service: RegistrationService):
        created = await service.create(build_registration())
        fetched = await service.get(created.id)
        assert fetched.email == created.email

    @pytest.mark.asyncio
    async def test_get_unknown_id(self, service: RegistrationService):
        with pytest.raises(RegistrationNotFoundError):
            await service.get("missing")

    @pytest.mark.asyncio
    async def test_delete(self, service: RegistrationService):
        created = await service.create(build_registration())
        await service.delete(created.id)
        assert await service.store.count() == 0

    @pytest.mark.asyncio
    async def test_delete_unknown_id(self, service: RegistrationService):
        await service.create(build_registration())

        with pytest.raises(RegistrationNotFoundError):
            await service.delete("does-not-exist")

        assert await service.store.count() == 1

    @pytest.mark.asyncio
    async def test_service_counts(self, service: RegistrationService, db_session):
        await seed(db_session, 2, service="EduTech", course="Online Tutoring")
        await seed(db_session, 1, prefix="ds", service="Data Science", course="Machine Learning")

        counts = await service.service_counts()

        assert counts == {"total": 3, "services": {"Data Science": 1, "EduTech": 2}}


class TestStoreFailures:
    """Timeouts and connection errors surface as UnavailableError"""

    @pytest.mark.asyncio
    async def test_timeout_becomes_unavailable(self, db_session: AsyncSession):
        store = RegistrationStore(db_session, timeout=0.01)

        with pytest.raises(UnavailableError) as exc_info:
            await store._run("slow", asyncio.sleep(1))

        assert exc_info.value.details["retryable"] is True
        assert exc_info.value.status_code == 500

    @pytest.mark.asyncio
    async def test_operational_error_becomes_unavailable(self, db_session: AsyncSession):
        store = RegistrationStore(db_session)

        async def broken():
            raise OperationalError("SELECT 1", {}, Exception("database is locked"))

        with pytest.raises(UnavailableError):
            await store._run("find_by_id", broken())

    @pytest.mark.asyncio
    async def test_data_error_is_not_retryable(self, db_session: AsyncSession):
        """A value the column rejects fails the same way on every retry"""
        store = RegistrationStore(db_session)

        async def too_long():
            raise DataError("INSERT INTO registrations", {}, Exception("value too long for type character varying(255)"))

        with pytest.raises(DataError):
            await store._run("insert", too_long())

    def test_escape_like(self):
        assert escape_like("50%_off\\") == "50\\%\\_off\\\\"
