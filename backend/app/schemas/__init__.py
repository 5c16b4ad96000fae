# Pydantic schemas
from app.schemas.common import CamelModel, MessageResponse
from app.schemas.auth import (
    UserRoleEnum,
    UserRegister,
    UserLogin,
    UserResponse,
    AuthResponse,
    LinkProfileRequest,
)
from app.schemas.profile import (
    ProfileCreate,
    ProfileUpdate,
    ProfileResponse,
    ProfileMutationResponse,
    ChangeGroupRequest,
    AvatarResponse,
    ProfessionResponse,
)
from app.schemas.group import (
    GroupCreate,
    GroupUpdate,
    GroupResponse,
    GroupDetailResponse,
    GroupMutationResponse,
    SubjectResponse,
)
from app.schemas.room import (
    RoomCreate,
    RoomUpdate,
    RoomResponse,
    RoomDetailResponse,
    RoomMutationResponse,
    AssignedGroupResponse,
    AddMemberRequest,
    AddMemberResponse,
    BulkAddMembersRequest,
    BulkAddMembersResponse,
    AssignGroupsRequest,
    AssignGroupsResponse,
    RemoveMemberResponse,
    RemoveGroupResponse,
    SeatedProfile,
    AutoAssignment,
    AutoAssignResponse,
)
from app.schemas.notification import (
    ResolveActionEnum,
    NotificationCreate,
    GroupRequestCreate,
    ResolveRequest,
    ProfileInfo,
    NotificationResponse,
    NotificationCountResponse,
    NotificationCreatedResponse,
)
