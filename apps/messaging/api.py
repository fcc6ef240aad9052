"""Messaging endpoints."""
from typing import List
from uuid import UUID

from django.http import HttpRequest
from ninja import Router, Schema

from apps.identity.decorators import require_auth

from . import services
from .dtos import ConversationDTO, MessageDTO, MessagePageDTO, SendMessageIn, StartConversationIn

router = Router(tags=["Messages"])


class CountResponse(Schema):
    success: bool
    count: int


@router.post("/conversations", response={201: ConversationDTO}, auth=None)
def start_conversation(request: HttpRequest, payload: StartConversationIn):
    user = require_auth(request)
    return 201, services.start_conversation(user, payload)


@router.get("/conversations", response=List[ConversationDTO], auth=None)
def list_conversations(request: HttpRequest):
    user = require_auth(request)
    return services.list_conversations(user)


@router.get("/unread-count", response=CountResponse, auth=None)
def unread_count(request: HttpRequest):
    user = require_auth(request)
    return {"success": True, "count": services.unread_count(user)}


@router.get("/conversations/{conversation_id}/messages", response=MessagePageDTO, auth=None)
def get_messages(
    request: HttpRequest,
    conversation_id: UUID,
    limit: int = services.DEFAULT_PAGE_SIZE,
    offset: int = 0,
):
    user = require_auth(request)
    return services.get_messages(user, conversation_id, limit=limit, offset=offset)


@router.post("/conversations/{conversation_id}/messages", response={201: MessageDTO}, auth=None)
def send_message(request: HttpRequest, conversation_id: UUID, payload: SendMessageIn):
    user = require_auth(request)
    return 201, services.send_message(user, conversation_id, payload.content)


@router.post("/conversations/{conversation_id}/read", response=CountResponse, auth=None)
def mark_read(request: HttpRequest, conversation_id: UUID):
    user = require_auth(request)
    return {"success": True, "count": services.mark_conversation_read(user, conversation_id)}
