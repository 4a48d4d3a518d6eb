"""
Message API endpoints: contact a landlord from a listing, read the inbox,
reply and mark messages as read.
"""

from fastapi import APIRouter, Depends, status, Path, Query
from typing import Optional
from uuid import UUID

from townwrent.models.user import User
from townwrent.services.message import MessageService
from townwrent.schemas.message import (
    SendMessageRequest,
    ReplyRequest,
    MessageResponse,
    SendMessageResponse,
    InboxResponse,
    UnreadCountResponse,
)
from townwrent.utils.dependencies import (
    get_current_user,
    get_optional_current_user,
    get_message_service,
)
from townwrent.utils.exceptions import ValidationError, UnauthorizedError


router = APIRouter(prefix="/messages", tags=["Messages"])


def _parse_id(value: str, name: str) -> UUID:
    try:
        return UUID(value)
    except ValueError:
        raise ValidationError(f"Invalid {name}")


@router.post(
    "/send",
    response_model=SendMessageResponse,
    status_code=status.HTTP_200_OK,
    summary="Message a landlord",
    description="Send a message about a listing to its landlord"
)
async def send_message(
    message_data: SendMessageRequest,
    current_user: Optional[User] = Depends(get_optional_current_user),
    message_service: MessageService = Depends(get_message_service)
) -> SendMessageResponse:
    """
    Raises:
        ValidationError: "Missing fields" when any field is empty, checked before the session
        UnauthorizedError: If the caller is not signed in
    """
    if not (message_data.property_id and message_data.receiver_id and (message_data.message or "").strip()):
        raise ValidationError("Missing fields")
    if current_user is None:
        raise UnauthorizedError("Not authenticated")

    message = await message_service.send_message(
        property_id=_parse_id(message_data.property_id, "property_id"),
        receiver_id=_parse_id(message_data.receiver_id, "receiver_id"),
        body=message_data.message,
        sender=current_user
    )
    return SendMessageResponse(success=True, message=MessageResponse.from_model(message))


@router.get("", response_model=InboxResponse, summary="Inbox", description="Received messages, newest first")
async def get_inbox(
    limit: int = Query(100, ge=1, le=500),
    current_user: User = Depends(get_current_user),
    message_service: MessageService = Depends(get_message_service)
) -> InboxResponse:
    messages = await message_service.get_inbox(current_user, limit=limit)
    return InboxResponse(
        messages=[MessageResponse.from_model(m) for m in messages],
        unread_count=await message_service.get_unread_count(current_user)
    )


@router.get("/unread-count", response_model=UnreadCountResponse, summary="Unread message count")
async def get_unread_count(
    current_user: User = Depends(get_current_user),
    message_service: MessageService = Depends(get_message_service)
) -> UnreadCountResponse:
    return UnreadCountResponse(unread_count=await message_service.get_unread_count(current_user))


@router.get("/{message_id}", response_model=MessageResponse, summary="Get a message")
async def get_message(
    message_id: UUID = Path(..., description="Message ID"),
    current_user: User = Depends(get_current_user),
    message_service: MessageService = Depends(get_message_service)
) -> MessageResponse:
    return MessageResponse.from_model(await message_service.get_message(message_id, current_user))


@router.post(
    "/{message_id}/reply",
    response_model=SendMessageResponse,
    status_code=status.HTTP_200_OK,
    summary="Reply to a message"
)
async def reply_to_message(
    reply_data: ReplyRequest,
    message_id: UUID = Path(..., description="Message ID"),
    current_user: User = Depends(get_current_user),
    message_service: MessageService = Depends(get_message_service)
) -> SendMessageResponse:
    message = await message_service.reply(message_id, reply_data.message, current_user)
    return SendMessageResponse(success=True, message=MessageResponse.from_model(message))


@router.post("/{message_id}/read", response_model=MessageResponse, summary="Mark a message as read")
async def mark_message_read(
    message_id: UUID = Path(..., description="Message ID"),
    current_user: User = Depends(get_current_user),
    message_service: MessageService = Depends(get_message_service)
) -> MessageResponse:
    return MessageResponse.from_model(await message_service.mark_read(message_id, current_user))
