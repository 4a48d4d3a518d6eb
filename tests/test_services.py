"""
Tests for the service layer: accounts, listings, profiles, messages and site visits.
"""

import pytest
import uuid
from datetime import date, timedelta
from decimal import Decimal

from townwrent.config import settings
from townwrent.models.property import PropertyType
from townwrent.models.site_visit import VisitStatus
from townwrent.models.user import User
from townwrent.repositories.property import PropertySearchFilters
from townwrent.services.auth import AuthService
from townwrent.services.message import MessageService
from townwrent.services.profile import ProfileService
from townwrent.services.property import PropertyService
from townwrent.services.site_visit import SiteVisitService
from townwrent.services.storage import StorageService
from townwrent.utils.auth import create_refresh_token, create_password_reset_token
from townwrent.utils.exceptions import (
    BadRequestError,
    DuplicateResourceError,
    ForbiddenError,
    InvalidCredentialsError,
    InvalidResetLinkError,
    InvalidTokenError,
    NotFoundError,
    PropertyNotFoundError,
    PropertyOwnershipError,
    ResourceLimitExceededError,
    StorageError,
    ValidationError,
)
from tests.conftest import (
    TEST_PASSWORD,
    MessageFactory,
    PropertyFactory,
    UserFactory,
    listing_form,
    make_image_file,
)


class TestAuthService:

    async def test_sign_up_creates_user_profile_and_tokens(self, auth_service: AuthService):
        user, access_token, refresh_token = await auth_service.sign_up("New@Example.com", TEST_PASSWORD, "Esi Owusu")

        assert user.email == "new@example.com"
        assert user.full_name == "Esi Owusu"
        assert access_token and refresh_token

        current = await auth_service.get_current_user(access_token)
        assert current.id == user.id

    async def test_sign_up_duplicate_email(self, auth_service: AuthService, tenant: User):
        with pytest.raises(DuplicateResourceError, match="User already registered"):
            await auth_service.sign_up(tenant.email, TEST_PASSWORD)

    async def test_sign_up_short_password(self, auth_service: AuthService):
        with pytest.raises(BadRequestError, match="at least 6 characters"):
            await auth_service.sign_up("short@example.com", "abc")

    async def test_sign_in_success(self, auth_service: AuthService, tenant: User):
        user, access_token, _ = await auth_service.sign_in(tenant.email, TEST_PASSWORD)
        assert user.id == tenant.id
        assert access_token

    async def test_sign_in_wrong_password(self, auth_service: AuthService, tenant: User):
        with pytest.raises(InvalidCredentialsError) as exc_info:
            await auth_service.sign_in(tenant.email, "wrong-password")
        assert exc_info.value.status_code == 400
        assert exc_info.value.detail == "Invalid login credentials"

    async def test_sign_in_unknown_email(self, auth_service: AuthService):
        with pytest.raises(InvalidCredentialsError):
            await auth_service.sign_in("nobody@example.com", TEST_PASSWORD)

    async def test_refresh_token_is_not_an_access_token(self, auth_service: AuthService, tenant: User):
        refresh_token = create_refresh_token(user_id=tenant.id, email=tenant.email)

        with pytest.raises(InvalidTokenError):
            await auth_service.get_current_user(refresh_token)

        new_access = await auth_service.refresh_access_token(refresh_token)
        assert (await auth_service.get_current_user(new_access)).id == tenant.id

    async def test_password_reset_requires_email(self, auth_service: AuthService):
        with pytest.raises(ValidationError, match="Please enter your email address"):
            await auth_service.request_password_reset("  ")

    async def test_password_reset_unknown_email_sends_nothing(self, auth_service: AuthService, mailer):
        await auth_service.request_password_reset("ghost@example.com")
        assert mailer.sent == []

    async def test_password_reset_email_contains_link(self, auth_service: AuthService, tenant: User, mailer):
        await auth_service.request_password_reset(tenant.email, "https://townwrent.example/reset-password")

        assert len(mailer.sent) == 1
        to, _, body = mailer.sent[0]
        assert to == tenant.email
        assert "https://townwrent.example/reset-password?token=" in body

    async def test_reset_password_full_flow(self, auth_service: AuthService, tenant: User, mailer):
        await auth_service.request_password_reset(tenant.email)
        body = mailer.sent[0][2]
        token = body.split("?token=", 1)[1].split()[0]

        await auth_service.reset_password(token, "brand-new-pass", "brand-new-pass")

        user, _, _ = await auth_service.sign_in(tenant.email, "brand-new-pass")
        assert user.id == tenant.id
        with pytest.raises(InvalidCredentialsError):
            await auth_service.sign_in(tenant.email, TEST_PASSWORD)

    async def test_reset_password_short_password_checked_before_token(self, auth_service: AuthService):
        # An invalid token would raise InvalidResetLinkError if it were looked at
        with pytest.raises(ValidationError, match="at least 6 characters"):
            await auth_service.reset_password("not-a-token", "abc", "abc")

    async def test_reset_password_mismatch(self, auth_service: AuthService, tenant: User):
        token = create_password_reset_token(user_id=tenant.id, email=tenant.email)
        with pytest.raises(ValidationError, match="Passwords do not match"):
            await auth_service.reset_password(token, "abcdef", "abcdeg")

    async def test_reset_password_rejects_bad_and_wrong_type_tokens(self, auth_service: AuthService, tenant: User):
        with pytest.raises(InvalidResetLinkError):
            await auth_service.reset_password("garbage", "abcdef", "abcdef")

        refresh_token = create_refresh_token(user_id=tenant.id, email=tenant.email)
        with pytest.raises(InvalidResetLinkError):
            await auth_service.reset_password(refresh_token, "abcdef", "abcdef")

        with pytest.raises(InvalidResetLinkError):
            await auth_service.reset_password(None, "abcdef", "abcdef")


class TestPropertyService:

    async def test_create_listing_uploads_images_in_order(
        self,
        property_service: PropertyService,
        storage: StorageService,
        landlord: User
    ):
        images = [make_image_file("front.png"), make_image_file("kitchen.jpg", fmt="JPEG")]

        created = await property_service.create_listing(listing_form(), images, landlord)

        assert created.title == "Two bedroom flat in Osu"
        assert created.property_type == PropertyType.APARTMENT
        assert created.price == Decimal("850")
        assert created.amenities == ["Water", "Electricity"]
        assert created.owner_id == landlord.id
        assert [image.display_order for image in created.images] == [0, 1]

        for image in created.images:
            assert image.storage_path.startswith(f"{landlord.id}/{created.id}/")
            assert await storage.exists(settings.property_images_bucket, image.storage_path)
        assert created.images[1].storage_path.endswith(".jpg")

    async def test_create_listing_without_images_writes_nothing(
        self,
        property_service: PropertyService,
        property_repository,
        storage: StorageService,
        landlord: User
    ):
        with pytest.raises(ValidationError) as exc_info:
            await property_service.create_listing(listing_form(), [], landlord)

        assert exc_info.value.detail == "Please upload at least one image"
        assert await property_repository.count() == 0
        assert not (storage.root / settings.property_images_bucket).exists()

    async def test_create_listing_reports_every_invalid_field(
        self,
        property_service: PropertyService,
        property_repository,
        landlord: User
    ):
        form = listing_form(title="Flat", property_type="Castle", price="0", region="", town=" ", description="Nice")

        with pytest.raises(ValidationError) as exc_info:
            await property_service.create_listing(form, [make_image_file()], landlord)

        messages = {e["field"]: e["message"] for e in exc_info.value.field_errors}
        assert messages == {
            "title": "Please enter a descriptive title.",
            "property_type": "Select a property type.",
            "price": "Enter a valid price.",
            "region": "Region is required.",
            "town": "Town / Community is required.",
            "description": "Provide a helpful description.",
        }
        assert await property_repository.count() == 0

    async def test_create_listing_image_limit(self, property_service: PropertyService, landlord: User):
        images = [make_image_file(f"{i}.png") for i in range(settings.max_images_per_property + 1)]

        with pytest.raises(ValidationError, match="maximum of 5 images"):
            await property_service.create_listing(listing_form(), images, landlord)

    async def test_create_listing_rejects_non_image(
        self,
        property_service: PropertyService,
        property_repository,
        landlord: User
    ):
        bogus = make_image_file()
        bogus.content = b"definitely not a png"

        with pytest.raises(ValidationError, match="Invalid image file"):
            await property_service.create_listing(listing_form(), [bogus], landlord)
        assert await property_repository.count() == 0

    async def test_create_listing_rolls_back_on_upload_failure(
        self,
        property_service: PropertyService,
        property_repository,
        storage: StorageService,
        landlord: User,
        monkeypatch
    ):
        original_upload = storage.upload
        attempted = []

        async def flaky_upload(bucket, path, content, upsert=False):
            attempted.append(path)
            if len(attempted) == 2:
                raise StorageError("disk full")
            return await original_upload(bucket, path, content, upsert)

        monkeypatch.setattr(storage, "upload", flaky_upload)

        with pytest.raises(StorageError):
            await property_service.create_listing(listing_form(), [make_image_file(), make_image_file()], landlord)

        assert await property_repository.count() == 0
        assert not await storage.exists(settings.property_images_bucket, attempted[0])

    async def test_get_property_counts_views_from_others_only(
        self,
        property_service: PropertyService,
        listing,
        landlord: User,
        tenant: User
    ):
        viewed = await property_service.get_property(listing.id, viewer=tenant)
        assert viewed.views == 1

        viewed = await property_service.get_property(listing.id)
        assert viewed.views == 2

        viewed = await property_service.get_property(listing.id, viewer=landlord)
        assert viewed.views == 2

    async def test_get_missing_property(self, property_service: PropertyService):
        with pytest.raises(PropertyNotFoundError):
            await property_service.get_property(uuid.uuid4())

    async def test_update_property_owner_only(self, property_service: PropertyService, listing, tenant: User):
        with pytest.raises(PropertyOwnershipError):
            await property_service.update_property(listing.id, {"title": "Hijacked listing"}, tenant)

    async def test_update_property_validates_and_clears_landmark(
        self,
        property_service: PropertyService,
        property_repository,
        landlord: User
    ):
        prop = await PropertyFactory.create_property(property_repository, landlord.id, landmark="Behind the mall")

        with pytest.raises(ValidationError, match="Please enter a descriptive title."):
            await property_service.update_property(prop.id, {"title": "  "}, landlord)

        with pytest.raises(ValidationError, match="Enter a valid price."):
            await property_service.update_property(prop.id, {"price": "-5"}, landlord)

        updated = await property_service.update_property(
            prop.id,
            {"price": "450", "landmark": None, "available": False},
            landlord
        )
        assert updated.price == Decimal("450")
        assert updated.landmark is None
        assert updated.available is False

    async def test_list_properties_filters(self, property_service: PropertyService, property_repository, landlord: User):
        await PropertyFactory.create_property(property_repository, landlord.id, title="Room in Madina", town="Madina")
        await PropertyFactory.create_property(
            property_repository,
            landlord.id,
            title="Office space in Kumasi",
            property_type=PropertyType.OFFICE,
            region="Ashanti",
            town="Adum",
            price=Decimal("2500")
        )
        await PropertyFactory.create_property(property_repository, landlord.id, title="Hidden listing", available=False)

        results, total = await property_service.list_properties(PropertySearchFilters())
        assert total == 2
        assert "Hidden listing" not in [p.title for p in results]

        results, total = await property_service.list_properties(PropertySearchFilters(region="ashanti"))
        assert [p.title for p in results] == ["Office space in Kumasi"]

        results, total = await property_service.list_properties(PropertySearchFilters(search_text="madina"))
        assert [p.title for p in results] == ["Room in Madina"]

        results, total = await property_service.list_properties(
            PropertySearchFilters(min_price=Decimal("1000"), property_type=PropertyType.OFFICE)
        )
        assert total == 1

    async def test_list_properties_price_range_check(self, property_service: PropertyService):
        with pytest.raises(ValidationError, match="Minimum price cannot be greater"):
            await property_service.list_properties(
                PropertySearchFilters(min_price=Decimal("900"), max_price=Decimal("100"))
            )

    async def test_featured_strategies(self, property_service: PropertyService, property_repository, landlord: User):
        await PropertyFactory.create_property(property_repository, landlord.id, title="Cheap room", price=Decimal("100"))
        await PropertyFactory.create_property(
            property_repository, landlord.id, title="Flagged flat", price=Decimal("700"), is_featured=True
        )
        await PropertyFactory.create_property(property_repository, landlord.id, title="Luxury house", price=Decimal("5000"))

        flagged = await property_service.get_featured_properties(strategy="flagged")
        assert [p.title for p in flagged] == ["Flagged flat"]

        by_price = await property_service.get_featured_properties(limit=2, strategy="price")
        assert [p.title for p in by_price] == ["Luxury house", "Flagged flat"]

        assert len(await property_service.get_featured_properties(limit=3, strategy="random")) == 3

        with pytest.raises(ValidationError):
            await property_service.get_featured_properties(strategy="popular")

    async def test_add_images_respects_limit(self, property_service: PropertyService, landlord: User):
        created = await property_service.create_listing(
            listing_form(),
            [make_image_file(f"{i}.png") for i in range(4)],
            landlord
        )

        updated = await property_service.add_images(created.id, [make_image_file("extra.png")], landlord)
        assert updated.image_count == 5
        assert updated.images[-1].display_order == 4

        with pytest.raises(ResourceLimitExceededError):
            await property_service.add_images(created.id, [make_image_file("too-many.png")], landlord)

    async def test_delete_image(self, property_service: PropertyService, storage: StorageService, landlord: User):
        created = await property_service.create_listing(
            listing_form(),
            [make_image_file("a.png"), make_image_file("b.png")],
            landlord
        )
        # the same instance is refreshed by the delete, so keep plain values
        first_id, first_path = created.images[0].id, created.images[0].storage_path
        second_id = created.images[1].id

        await property_service.delete_image(created.id, first_id, landlord)

        remaining = await property_service.ensure_exists(created.id)
        assert [image.id for image in remaining.images] == [second_id]
        assert not await storage.exists(settings.property_images_bucket, first_path)

        with pytest.raises(NotFoundError):
            await property_service.delete_image(created.id, uuid.uuid4(), landlord)

    async def test_delete_property_removes_files_and_dependents(
        self,
        property_service: PropertyService,
        storage: StorageService,
        message_repository,
        image_repository,
        landlord: User,
        tenant: User
    ):
        created = await property_service.create_listing(listing_form(), [make_image_file()], landlord)
        path = created.images[0].storage_path
        await MessageFactory.create_message(message_repository, created.id, tenant.id, landlord.id)

        with pytest.raises(PropertyOwnershipError):
            await property_service.delete_property(created.id, tenant)

        assert await property_service.delete_property(created.id, landlord) is True

        assert not await storage.exists(settings.property_images_bucket, path)
        assert await image_repository.count_by_property_id(created.id) == 0
        assert await message_repository.count_unread(landlord.id) == 0
        with pytest.raises(PropertyNotFoundError):
            await property_service.ensure_exists(created.id)

    async def test_analytics_cover_only_own_listings(
        self,
        property_service: PropertyService,
        property_repository,
        landlord: User,
        tenant: User
    ):
        await PropertyFactory.create_property(property_repository, landlord.id, views=40, favorites=6)
        await PropertyFactory.create_property(property_repository, tenant.id, views=1000, favorites=1)

        analytics = await property_service.get_analytics(landlord)

        assert analytics["total_properties"] == 1
        assert analytics["total_views"] == 40
        assert analytics["engagement_rate"] == 15


class TestProfileService:

    async def test_get_or_create_profile(self, profile_service: ProfileService, user_repository):
        user = await UserFactory.create_user(user_repository, full_name=None)

        profile = await profile_service.get_or_create_profile(user)

        assert profile.id == user.id
        assert profile.full_name is None

    async def test_update_profile_requires_name(self, profile_service: ProfileService, tenant: User):
        with pytest.raises(ValidationError, match="Please enter your full name"):
            await profile_service.update_profile(tenant, full_name="   ", phone="0241234567")

    async def test_update_profile_replaces_avatar(
        self,
        profile_service: ProfileService,
        storage: StorageService,
        tenant: User
    ):
        first = await profile_service.update_profile(tenant, "Ama Mensah", "024 123 4567", make_image_file("me.png"))
        first_path = storage.path_from_url(settings.avatars_bucket, first.avatar_url)
        assert first.full_name == "Ama Mensah"
        assert first.phone == "024 123 4567"
        assert first.avatar_url.startswith(f"http://test/storage/v1/object/public/{settings.avatars_bucket}/{tenant.id}/")
        assert await storage.exists(settings.avatars_bucket, first_path)

        second = await profile_service.update_profile(tenant, "Ama Mensah", None, make_image_file("new.jpg", fmt="JPEG"))
        second_path = storage.path_from_url(settings.avatars_bucket, second.avatar_url)

        assert second_path != first_path
        assert await storage.exists(settings.avatars_bucket, second_path)
        assert not await storage.exists(settings.avatars_bucket, first_path)
        assert second.phone is None


class TestMessageService:

    async def test_send_message_publishes_to_receiver(
        self,
        message_service: MessageService,
        hub,
        listing,
        landlord: User,
        tenant: User
    ):
        landlord_feed = hub.subscribe(landlord.id)
        tenant_feed = hub.subscribe(tenant.id)

        message = await message_service.send_message(listing.id, landlord.id, "  Is it still available?  ", tenant)

        assert message.body == "Is it still available?"
        assert message.is_read is False
        assert message.sender_name == "Ama Tenant"

        event = await landlord_feed.get(timeout=1)
        assert event["event"] == "INSERT"
        assert event["record"]["id"] == str(message.id)
        assert event["record"]["message"] == "Is it still available?"
        assert tenant_feed.queue.empty()

    async def test_send_message_validation(self, message_service: MessageService, listing, landlord: User, tenant: User):
        with pytest.raises(ValidationError, match="Missing fields"):
            await message_service.send_message(listing.id, landlord.id, "   ", tenant)

        with pytest.raises(BadRequestError):
            await message_service.send_message(listing.id, landlord.id, "Talking to myself", landlord)

        with pytest.raises(PropertyNotFoundError):
            await message_service.send_message(uuid.uuid4(), landlord.id, "Hello", tenant)

        with pytest.raises(NotFoundError):
            await message_service.send_message(listing.id, uuid.uuid4(), "Hello", tenant)

    async def test_reply_goes_back_to_sender(self, message_service: MessageService, listing, landlord: User, tenant: User):
        original = await message_service.send_message(listing.id, landlord.id, "Can I visit on Friday?", tenant)

        reply = await message_service.reply(original.id, "Yes, any time after 2pm.", landlord)

        assert reply.receiver_id == tenant.id
        assert reply.sender_id == landlord.id
        assert reply.property_id == listing.id

        with pytest.raises(ForbiddenError):
            await message_service.reply(original.id, "Replying to my own message", tenant)

    async def test_mark_read_is_idempotent(self, message_service: MessageService, listing, landlord: User, tenant: User):
        message = await message_service.send_message(listing.id, landlord.id, "Hello", tenant)
        assert await message_service.get_unread_count(landlord) == 1

        first = await message_service.mark_read(message.id, landlord)
        second = await message_service.mark_read(message.id, landlord)

        assert first.is_read and second.is_read
        assert await message_service.get_unread_count(landlord) == 0

        with pytest.raises(ForbiddenError):
            await message_service.mark_read(message.id, tenant)

    async def test_get_message_participants_only(
        self,
        message_service: MessageService,
        user_repository,
        listing,
        landlord: User,
        tenant: User
    ):
        message = await message_service.send_message(listing.id, landlord.id, "Hello", tenant)
        stranger = await UserFactory.create_user(user_repository)

        assert (await message_service.get_message(message.id, tenant)).id == message.id
        with pytest.raises(ForbiddenError):
            await message_service.get_message(message.id, stranger)

    async def test_inbox_newest_first(self, message_service: MessageService, listing, landlord: User, tenant: User):
        await message_service.send_message(listing.id, landlord.id, "First", tenant)
        await message_service.send_message(listing.id, landlord.id, "Second", tenant)

        inbox = await message_service.get_inbox(landlord)

        assert [m.body for m in inbox] == ["Second", "First"]
        assert await message_service.get_inbox(tenant) == []


class TestSiteVisitService:

    async def test_book_visit_requires_package(self, site_visit_service: SiteVisitService, listing):
        with pytest.raises(ValidationError, match="Please select a package before booking!"):
            await site_visit_service.book_visit(listing.id, "Ama", "0241234567", date.today(), None)

    async def test_book_visit_confirmation(self, site_visit_service: SiteVisitService, listing, tenant: User):
        visit_date = date.today() + timedelta(days=3)

        result = await site_visit_service.book_visit(listing.id, "Ama", "0241234567", visit_date, "glide", tenant)

        assert result["message"] == "Booking request submitted for Single room in Madina with the Glide package for ₵25!"
        visit = result["visit"]
        assert visit.package == "Glide"
        assert visit.package_price == Decimal("25")
        assert visit.status == VisitStatus.PENDING
        assert visit.visitor_id == tenant.id

    async def test_book_visit_field_checks(self, site_visit_service: SiteVisitService, listing):
        tomorrow = date.today() + timedelta(days=1)

        with pytest.raises(ValidationError, match="Name is required"):
            await site_visit_service.book_visit(listing.id, " ", "0241234567", tomorrow, "Breeze")
        with pytest.raises(ValidationError, match="phone is required"):
            await site_visit_service.book_visit(listing.id, "Ama", "", tomorrow, "Breeze")
        with pytest.raises(ValidationError, match="Visit date is required"):
            await site_visit_service.book_visit(listing.id, "Ama", "0241234567", None, "Breeze")
        with pytest.raises(ValidationError, match="cannot be in the past"):
            await site_visit_service.book_visit(listing.id, "Ama", "0241234567", date.today() - timedelta(days=1), "Breeze")
        with pytest.raises(PropertyNotFoundError):
            await site_visit_service.book_visit(uuid.uuid4(), "Ama", "0241234567", tomorrow, "Breeze")

    async def test_owner_sees_visits_on_own_listings(
        self,
        site_visit_service: SiteVisitService,
        listing,
        landlord: User,
        tenant: User
    ):
        await site_visit_service.book_visit(listing.id, "Ama", "0241234567", date.today() + timedelta(days=2), "Summit")

        assert len(await site_visit_service.get_owner_visits(landlord)) == 1
        assert await site_visit_service.get_owner_visits(tenant) == []
