"""Support messages router: shopper conversations with the store admins."""

import uuid

from fastapi import APIRouter, Depends
from libs.auth.dependencies import get_current_user
from libs.auth.models import AuthUser
from libs.common.datetime_utils import utc_now
from libs.common.errors import ForbiddenError, NotFoundError
from libs.common.logging import get_logger
from libs.db.session import get_async_db
from services.storefront_service.dependencies import is_admin_user
from services.storefront_service.models import Conversation, Message
from services.storefront_service.schemas import (
    ConversationResponse,
    MessageCreate,
    MessageCreateResponse,
)
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

router = APIRouter(tags=["messages"])
logger = get_logger(__name__)


async def get_conversation_or_404(
    db: AsyncSession, conversation_id: uuid.UUID, *, with_messages: bool = False
) -> Conversation:
    query = select(Conversation).where(Conversation.id == conversation_id)
    if with_messages:
        query = query.options(selectinload(Conversation.messages))
    result = await db.execute(query)
    conversation = result.scalar_one_or_none()
    if not conversation:
        raise NotFoundError("Conversation not found")
    return conversation


@router.post("/messages", response_model=MessageCreateResponse)
async def send_message(
    message_in: MessageCreate,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    """Append a message to a conversation.

    Shoppers write to their own conversation (created on first message);
    admins reply by passing ``conversation_id``.
    """
    is_admin = await is_admin_user(db, current_user.user_id)

    if message_in.conversation_id is not None:
        conversation = await get_conversation_or_404(db, message_in.conversation_id)
        if not is_admin and conversation.user_id != current_user.user_id:
            raise ForbiddenError("You do not have access to this conversation")
    else:
        result = await db.execute(
            select(Conversation).where(Conversation.user_id == current_user.user_id)
        )
        conversation = result.scalar_one_or_none()
        if conversation is None:
            conversation = Conversation(id=uuid.uuid4(), user_id=current_user.user_id)
            db.add(conversation)

    from_admin = is_admin and conversation.user_id != current_user.user_id
    db.add(
        Message(
            conversation_id=conversation.id,
            sender_id=current_user.user_id,
            is_from_admin=from_admin,
            body=message_in.message,
        )
    )
    conversation.last_message = message_in.message
    conversation.last_message_at = utc_now()
    conversation.unread_by_admin = not from_admin

    await db.commit()
    logger.info(
        "Message from %s in conversation %s", current_user.user_id, conversation.id
    )
    return MessageCreateResponse(conversation_id=conversation.id)


@router.get("/messages/{conversation_id}", response_model=ConversationResponse)
async def get_conversation(
    conversation_id: uuid.UUID,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    """Return a conversation with its messages (owner or admin).

    An admin reading a conversation marks it read.
    """
    conversation = await get_conversation_or_404(
        db, conversation_id, with_messages=True
    )
    is_admin = await is_admin_user(db, current_user.user_id)
    if not is_admin and conversation.user_id != current_user.user_id:
        raise ForbiddenError("You do not have access to this conversation")

    if is_admin and conversation.unread_by_admin:
        conversation.unread_by_admin = False
        await db.commit()
    return conversation
