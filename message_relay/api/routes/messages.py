"""
Message Endpoints

Outbound send endpoints, inbound webhooks, and conversation history.
Handlers only map HTTP to the sender and the delivery queue; retry and
queuing semantics live in those components.
"""
from fastapi import APIRouter, Request, Query
from fastapi.responses import JSONResponse
from loguru import logger

from message_relay.api.models.messages import MessagePayload, MessageView
from message_relay.config import settings
from message_relay.errors import (
    PersistenceError,
    ProviderTerminalError,
    QueueUninitializedError,
    ValidationError,
)
from message_relay.message_queue import DeliveryQueue
from message_relay.models.message import MessageKind
from message_relay.repositories import ConversationRepository, MessageRepository
from message_relay.services.outbound_sender import OutboundSender

router = APIRouter(prefix="/api", tags=["Messages"])


def _validation_response(error: ValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=400,
        content={"error": "Validation failed", "details": error.details}
    )


def _internal_error() -> JSONResponse:
    return JSONResponse(status_code=500, content={"error": "Internal server error"})


def _validate(payload: MessagePayload, outbound: bool) -> None:
    errors = payload.validation_errors(outbound=outbound)
    if errors:
        raise ValidationError(errors)


async def handle_send_message(request: Request, payload: MessagePayload) -> JSONResponse:
    """
    Validate, persist and send one outbound message.

    Returns 200 with provider id on success, the provider's status code
    on terminal failure, 400 on validation errors, 500 otherwise.
    """
    try:
        _validate(payload, outbound=True)
    except ValidationError as e:
        return _validation_response(e)

    sender: OutboundSender = request.app.state.sender

    try:
        result = await sender.send(payload.to_outbound_request())

    except ProviderTerminalError as e:
        return JSONResponse(
            status_code=e.status_code,
            content={
                "error": "Failed to send message",
                "messageId": e.message_id,
                "details": e.detail,
            }
        )

    except PersistenceError as e:
        logger.bind(to=payload.recipient).error("Database error: {}", e)
        return JSONResponse(
            status_code=500,
            content={"error": "Failed to save message to database"}
        )

    except Exception as e:
        logger.opt(exception=True).error("Send message error: {}", e)
        return _internal_error()

    return JSONResponse(
        status_code=200,
        content={
            "success": True,
            "messageId": result.message_id,
            "providerId": result.provider_id,
            "timestamp": result.timestamp.isoformat(),
        }
    )


async def handle_incoming_message(request: Request, payload: MessagePayload) -> JSONResponse:
    """
    Validate an inbound webhook and enqueue it for persistence.

    Returns 202 as soon as the message is queued.
    """
    try:
        _validate(payload, outbound=False)
    except ValidationError as e:
        return _validation_response(e)

    try:
        queue: DeliveryQueue = request.app.state.queue
        queue_status = queue.enqueue(payload.to_queued_message())

    except QueueUninitializedError as e:
        logger.error("Post message error: {}", e)
        return _internal_error()

    except Exception as e:
        logger.opt(exception=True).error("Post message error: {}", e)
        return _internal_error()

    return JSONResponse(
        status_code=202,
        content={
            "success": True,
            "message": "Message received and queued for processing",
            "queueStatus": {
                "queueLength": queue_status.pending_count,
                "processing": queue_status.draining,
            },
        }
    )


@router.post("/messages/sms")
async def send_sms(request: Request, payload: MessagePayload):
    """SMS/MMS send endpoint; `type` is required."""
    return await handle_send_message(request, payload)


@router.post("/messages/email")
async def send_email(request: Request, payload: MessagePayload):
    """Email send endpoint; `type` is always email."""
    payload.type = MessageKind.EMAIL.value
    return await handle_send_message(request, payload)


@router.post("/webhooks/sms")
async def sms_webhook(request: Request, payload: MessagePayload):
    """Inbound SMS/MMS webhook."""
    return await handle_incoming_message(request, payload)


@router.post("/webhooks/email")
async def email_webhook(request: Request, payload: MessagePayload):
    """Inbound email webhook; `type` is always email."""
    payload.type = MessageKind.EMAIL.value
    return await handle_incoming_message(request, payload)


@router.get("/conversations")
async def list_conversations(request: Request):
    """All conversations, most recently active first, with message counts."""
    try:
        conversations: ConversationRepository = request.app.state.conversation_repo
        rows = await conversations.list_with_counts()

    except Exception as e:
        logger.opt(exception=True).error("Get conversations error: {}", e)
        return _internal_error()

    return {
        "conversations": [row.model_dump(mode="json") for row in rows],
        "total": len(rows),
    }


@router.get("/conversations/{conversation_id}/messages")
async def get_conversation_messages(
    request: Request,
    conversation_id: str,
    page: int = Query(1, ge=1),
    limit: int = Query(settings.default_conversation_page_size, ge=1),
):
    """
    Page through a conversation, newest first.

    A purely numeric id selects the nth most recently active
    conversation (1-indexed) instead of a stored id.
    """
    if limit > settings.max_conversation_page_size:
        return JSONResponse(
            status_code=400,
            content={"error": f"Limit cannot exceed {settings.max_conversation_page_size}"}
        )

    offset = (page - 1) * limit

    try:
        conversations: ConversationRepository = request.app.state.conversation_repo
        messages: MessageRepository = request.app.state.message_repo

        if conversation_id.isdigit():
            conversation = await conversations.find_nth_recent(int(conversation_id))
            if conversation is None:
                return JSONResponse(
                    status_code=404,
                    content={"error": "Conversation not found"}
                )
            conversation_id = conversation.id

        rows = await messages.get_conversation_messages(
            conversation_id, limit=limit, skip=offset
        )

    except Exception as e:
        logger.opt(exception=True).error("Get conversation messages error: {}", e)
        return _internal_error()

    return {
        "messages": [
            MessageView.from_message(row).model_dump(mode="json", by_alias=True)
            for row in rows
        ],
        "pagination": {
            "page": page,
            "limit": limit,
            "total": len(rows),
        },
    }
