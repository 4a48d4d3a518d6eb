"""
Test configuration and fixtures for the TownWrent API.
Provides a per-test in-memory database, isolated storage and draft
directories, test data factories and an HTTP client wired to the app.
"""

import io
import pytest
import uuid
from decimal import Decimal
from typing import AsyncGenerator, Dict, List, Optional, Tuple

from httpx import AsyncClient, ASGITransport
from PIL import Image
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import StaticPool

from townwrent.main import app
from townwrent.config import settings
from townwrent.database import Base, get_db, enable_sqlite_foreign_keys
from townwrent.models import User, Property, PropertyImage, Message
from townwrent.models.property import PropertyType, PaymentFrequency
from townwrent.repositories.user import UserRepository
from townwrent.repositories.property import PropertyRepository
from townwrent.repositories.image import PropertyImageRepository
from townwrent.repositories.message import MessageRepository
from townwrent.services.auth import AuthService
from townwrent.services.drafts import DraftStore
from townwrent.services.mailer import Mailer
from townwrent.services.message import MessageService
from townwrent.services.notifications import NotificationHub
from townwrent.services.profile import ProfileService
from townwrent.services.property import PropertyService
from townwrent.services.site_visit import SiteVisitService
from townwrent.services.storage import StorageService
from townwrent.utils.auth import create_access_token
from townwrent.utils.dependencies import (
    get_storage_service,
    get_mailer,
    get_notification_hub,
    get_draft_store,
)
from townwrent.utils.file_utils import ImageFile


TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"
TEST_PASSWORD = "secret123"


class RecordingMailer(Mailer):
    """Mailer that keeps messages instead of sending them."""

    def __init__(self):
        super().__init__(host="")
        self.sent: List[Tuple[str, str, str]] = []

    async def send(self, to: str, subject: str, body: str) -> None:
        self.sent.append((to, subject, body))


@pytest.fixture
async def test_engine() -> AsyncGenerator[AsyncEngine, None]:
    """Fresh in-memory database per test."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False}
    )
    enable_sqlite_foreign_keys(engine)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(test_engine: AsyncEngine) -> async_sessionmaker:
    return async_sessionmaker(bind=test_engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db_session(session_factory: async_sessionmaker) -> AsyncGenerator[AsyncSession, None]:
    """Create a test database session."""
    async with session_factory() as session:
        yield session


@pytest.fixture
def storage(tmp_path) -> StorageService:
    return StorageService(
        root=str(tmp_path / "storage"),
        public_base_url="http://test",
        fallback_image_url=settings.fallback_image_url
    )


@pytest.fixture
def draft_store(tmp_path) -> DraftStore:
    return DraftStore(directory=str(tmp_path / "drafts"))


@pytest.fixture
def mailer() -> RecordingMailer:
    return RecordingMailer()


@pytest.fixture
def hub() -> NotificationHub:
    return NotificationHub()


@pytest.fixture
async def client(
    session_factory: async_sessionmaker,
    storage: StorageService,
    mailer: RecordingMailer,
    hub: NotificationHub,
    draft_store: DraftStore
) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client against the app, with every external dependency swapped for a test double."""

    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_storage_service] = lambda: storage
    app.dependency_overrides[get_mailer] = lambda: mailer
    app.dependency_overrides[get_notification_hub] = lambda: hub
    app.dependency_overrides[get_draft_store] = lambda: draft_store

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


# Repository fixtures
@pytest.fixture
def user_repository(db_session: AsyncSession) -> UserRepository:
    return UserRepository(db_session)


@pytest.fixture
def property_repository(db_session: AsyncSession) -> PropertyRepository:
    return PropertyRepository(db_session)


@pytest.fixture
def image_repository(db_session: AsyncSession) -> PropertyImageRepository:
    return PropertyImageRepository(db_session)


@pytest.fixture
def message_repository(db_session: AsyncSession) -> MessageRepository:
    return MessageRepository(db_session)


# Service fixtures
@pytest.fixture
def auth_service(db_session: AsyncSession, mailer: RecordingMailer) -> AuthService:
    return AuthService(db_session, mailer=mailer)


@pytest.fixture
def property_service(db_session: AsyncSession, storage: StorageService) -> PropertyService:
    return PropertyService(db_session, storage=storage)


@pytest.fixture
def profile_service(db_session: AsyncSession, storage: StorageService) -> ProfileService:
    return ProfileService(db_session, storage=storage)


@pytest.fixture
def message_service(db_session: AsyncSession, hub: NotificationHub) -> MessageService:
    return MessageService(db_session, hub=hub)


@pytest.fixture
def site_visit_service(db_session: AsyncSession) -> SiteVisitService:
    return SiteVisitService(db_session)


# Test data factories
def make_image_bytes(fmt: str = "PNG", size: Tuple[int, int] = (16, 16), color: str = "blue") -> bytes:
    """Encode a small solid-colour image."""
    buffer = io.BytesIO()
    Image.new("RGB", size, color=color).save(buffer, format=fmt)
    return buffer.getvalue()


def make_image_file(filename: str = "photo.png", fmt: str = "PNG") -> ImageFile:
    content_type = "image/jpeg" if fmt == "JPEG" else f"image/{fmt.lower()}"
    return ImageFile(filename=filename, content=make_image_bytes(fmt), content_type=content_type)


def listing_form(**overrides) -> Dict[str, object]:
    """Valid listing form fields."""
    form = {
        "title": "Two bedroom flat in Osu",
        "property_type": PropertyType.APARTMENT.value,
        "price": "850",
        "payment_frequency": PaymentFrequency.MONTHLY.value,
        "region": "Greater Accra",
        "town": "Osu",
        "landmark": "Near Oxford Street",
        "amenities": ["Water", "Electricity"],
        "description": "Spacious flat with a balcony and steady water supply.",
    }
    form.update(overrides)
    return form


def auth_headers(user: User) -> Dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(user_id=user.id, email=user.email)}"}


class UserFactory:
    """Factory for creating test users."""

    @staticmethod
    async def create_user(
        user_repo: UserRepository,
        email: Optional[str] = None,
        password: str = TEST_PASSWORD,
        full_name: Optional[str] = "Test User"
    ) -> User:
        return await user_repo.create_user(
            email or f"user{uuid.uuid4().hex[:8]}@example.com",
            password,
            full_name
        )


class PropertyFactory:
    """Factory for creating test properties directly in the database."""

    @staticmethod
    async def create_property(
        property_repo: PropertyRepository,
        owner_id: uuid.UUID,
        title: str = "Single room in Madina",
        property_type: PropertyType = PropertyType.SINGLE_ROOM,
        price: Decimal = Decimal("400.00"),
        region: str = "Greater Accra",
        town: str = "Madina",
        description: str = "Clean single room close to the market.",
        **extra
    ) -> Property:
        data = {
            "owner_id": owner_id,
            "title": title,
            "property_type": property_type,
            "price": price,
            "region": region,
            "town": town,
            "description": description,
        }
        data.update(extra)
        created = await property_repo.create(data)
        return await property_repo.get_by_id(created.id)

    @staticmethod
    async def add_image(
        image_repo: PropertyImageRepository,
        property_id: uuid.UUID,
        storage_path: str,
        display_order: int = 0
    ) -> PropertyImage:
        return await image_repo.create({
            "property_id": property_id,
            "storage_path": storage_path,
            "display_order": display_order,
        })


class MessageFactory:

    @staticmethod
    async def create_message(
        message_repo: MessageRepository,
        property_id: uuid.UUID,
        sender_id: uuid.UUID,
        receiver_id: uuid.UUID,
        body: str = "Is this still available?",
        is_read: bool = False
    ) -> Message:
        return await message_repo.create({
            "property_id": property_id,
            "sender_id": sender_id,
            "receiver_id": receiver_id,
            "body": body,
            "is_read": is_read,
        })


# Common user fixtures
@pytest.fixture
async def landlord(user_repository: UserRepository) -> User:
    return await UserFactory.create_user(user_repository, email="landlord@example.com", full_name="Kofi Landlord")


@pytest.fixture
async def tenant(user_repository: UserRepository) -> User:
    return await UserFactory.create_user(user_repository, email="tenant@example.com", full_name="Ama Tenant")


@pytest.fixture
async def listing(property_repository: PropertyRepository, landlord: User) -> Property:
    return await PropertyFactory.create_property(property_repository, landlord.id)
