"""
Unit Tests for request/response schemas
Tests for: camelCase aliases, trimming, field limits
"""
import pytest
from pydantic import ValidationError

from app.schemas.auth import UserRegister, AuthResponse, UserResponse, LinkProfileRequest
from app.schemas.profile import ProfileCreate, ProfileUpdate, ProfileResponse
from app.schemas.group import GroupCreate
from app.schemas.room import RoomCreate, RoomUpdate, RoomDetailResponse, BulkAddMembersRequest
from app.schemas.notification import ResolveRequest, ResolveActionEnum, NotificationCreate


class TestUserRegister:

    def test_defaults_to_user_role(self):
        data = UserRegister(email="a@example.com", password="secret1")

        assert data.role.value == "user"

    def test_short_password_rejected(self):
        with pytest.raises(ValidationError):
            UserRegister(email="a@example.com", password="12345")

    def test_invalid_email_rejected(self):
        with pytest.raises(ValidationError):
            UserRegister(email="not-an-email", password="secret1")


class TestAuthResponse:

    def test_redirect_url_serialized_in_camel_case(self):
        response = AuthResponse(
            message="Login successful",
            user=UserResponse(id="u-1", email="a@example.com", role="admin"),
            redirect_url="/",
            access_token="token",
        )

        body = response.model_dump(by_alias=True)

        assert body["redirectUrl"] == "/"
        assert body["token_type"] == "bearer"

    def test_link_profile_accepts_camel_case(self):
        assert LinkProfileRequest(profileId="p-1").profile_id == "p-1"
        assert LinkProfileRequest().profile_id is None


class TestProfileSchemas:

    def test_accepts_camel_case_and_trims_names(self):
        data = ProfileCreate(firstName="  Ada ", lastName="Lovelace", professions=["Engineer"])

        assert data.first_name == "Ada"
        assert data.last_name == "Lovelace"
        assert data.professions == ["Engineer"]
        assert data.age is None

    def test_blank_name_rejected(self):
        with pytest.raises(ValidationError):
            ProfileCreate(firstName="   ", lastName="Lovelace")

    def test_negative_age_rejected(self):
        with pytest.raises(ValidationError):
            ProfileCreate(firstName="Ada", lastName="Lovelace", age=-1)

    def test_blank_message_becomes_none(self):
        data = ProfileCreate(firstName="Ada", lastName="Lovelace", message="   ")

        assert data.message is None

    def test_update_tracks_sent_fields(self):
        data = ProfileUpdate(message=None)

        assert data.model_fields_set == {"message"}
        assert data.professions is None

    def test_response_serialized_in_camel_case(self):
        response = ProfileResponse(id="p-1", first_name="Ada", last_name="Lovelace", age=36)

        body = response.model_dump(by_alias=True)

        assert body["firstName"] == "Ada"
        assert body["roomId"] is None
        assert body["groupName"] is None


class TestGroupCreate:

    def test_camel_case_ids(self):
        data = GroupCreate(name=" Readers ", subjectIds=["s-1"], profileIds=["p-1", "p-2"])

        assert data.name == "Readers"
        assert data.subject_ids == ["s-1"]
        assert data.profile_ids == ["p-1", "p-2"]

    def test_blank_name_rejected(self):
        with pytest.raises(ValidationError):
            GroupCreate(name="  ", subjectIds=["s-1"])


class TestRoomSchemas:

    def test_negative_capacity_rejected(self):
        with pytest.raises(ValidationError):
            RoomCreate(name="Room A", max_capacity=-1)

    def test_zero_capacity_allowed(self):
        assert RoomCreate(name="Room A", max_capacity=0).max_capacity == 0

    def test_partial_update(self):
        data = RoomUpdate(max_capacity=3)

        assert data.name is None
        assert "description" not in data.model_fields_set

    def test_detail_aliases(self):
        detail = RoomDetailResponse(id="r-1", name="Room A", max_capacity=5, member_count=2)

        body = detail.model_dump(by_alias=True)

        assert body["memberCount"] == 2
        assert body["assignedGroups"] == []
        assert body["max_capacity"] == 5

    def test_bulk_request_camel_case(self):
        assert BulkAddMembersRequest(profileIds=["a", "b"]).profile_ids == ["a", "b"]


class TestNotificationSchemas:

    def test_resolve_actions(self):
        assert ResolveRequest(action="approve").action == ResolveActionEnum.APPROVE
        with pytest.raises(ValidationError):
            ResolveRequest(action="maybe")

    def test_create_defaults(self):
        data = NotificationCreate(title="Hello", message="World")

        assert data.type == "general"
        assert data.priority == "normal"

    def test_blank_title_rejected(self):
        with pytest.raises(ValidationError):
            NotificationCreate(title=" ", message="World")
