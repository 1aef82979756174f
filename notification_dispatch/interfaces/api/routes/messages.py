"""Endpoints that dispatch notification events and expose the dashboard stream."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, WebSocket, WebSocketDisconnect, status
from sqlalchemy.orm import Session

from notification_dispatch.application.use_cases.messages import (
    BatchDispatcher,
    StreamPublisher,
    create_messages,
)
from notification_dispatch.domain.entities import (
    Asset,
    Context,
    Message,
    PerRecipientAsset,
    StreamItem,
    User,
)
from notification_dispatch.infrastructure.database import SessionLocal, get_db, get_replica_db
from notification_dispatch.infrastructure.notifications import (
    serialize_stream_item,
    stream_manager,
)
from notification_dispatch.infrastructure.repositories import (
    ContextRepository,
    NotificationNotFound,
    NotificationRepository,
    StreamItemRepository,
)
from notification_dispatch.interfaces.api.dependencies import (
    get_current_user,
    get_message_dispatcher,
    get_stream_publisher,
    resolve_current_user,
)
from notification_dispatch.interfaces.api.schemas import (
    AssetReference,
    MessageCreateRequest,
    MessageRead,
    StreamItemRead,
)

router = APIRouter(prefix="/notifications", tags=["notifications"])


def _message_to_schema(message: Message) -> MessageRead:
    return MessageRead(
        id=message.id,
        notification_id=message.notification_id,
        notification_name=message.notification_name,
        user_id=message.user_id,
        to=message.to,
        path_type=message.path_type,
        subject=message.subject,
        body=message.body,
        url=message.url,
        locale=message.locale,
        workflow_state=message.workflow_state,
        dispatch_at=message.dispatch_at,
        created_at=message.created_at,
    )


def _stream_item_to_schema(stream_item: StreamItem) -> StreamItemRead:
    return StreamItemRead(
        id=stream_item.id or 0,
        user_id=stream_item.user_id,
        notification_name=stream_item.notification_name,
        subject=stream_item.subject,
        body=stream_item.body,
        url=stream_item.url,
        asset_type=stream_item.asset_type,
        asset_id=stream_item.asset_id,
        context_type=stream_item.context_type,
        context_id=stream_item.context_id,
        created_at=stream_item.created_at,
    )


def _resolve_context(db: Session, data: dict) -> Context | None:
    repository = ContextRepository(db)
    course_id = data.get("course_id")
    if isinstance(course_id, int):
        context = repository.get_course(course_id)
        if context is not None:
            return context
    root_account_id = data.get("root_account_id")
    if isinstance(root_account_id, int):
        return repository.get_account(root_account_id)
    return None


def _build_asset(reference: AssetReference, context: Context | None) -> Asset:
    if reference.variants is not None:
        return PerRecipientAsset(
            asset_type=reference.asset_type,
            asset_id=reference.asset_id,
            title=reference.title,
            url=reference.url,
            context=context,
            data=dict(reference.data),
            variants=reference.variants,
        )
    return Asset(
        asset_type=reference.asset_type,
        asset_id=reference.asset_id,
        title=reference.title,
        url=reference.url,
        context=context,
        data=dict(reference.data),
    )


@router.post(
    "/{notification_id}/messages",
    response_model=list[MessageRead],
    status_code=status.HTTP_201_CREATED,
)
def create_notification_messages(
    notification_id: int,
    payload: MessageCreateRequest,
    db: Session = Depends(get_db),
    replica_db: Session = Depends(get_replica_db),
    dispatcher: BatchDispatcher = Depends(get_message_dispatcher),
    stream_publisher: StreamPublisher = Depends(get_stream_publisher),
) -> list[MessageRead]:
    """Create, queue and dispatch the messages for one notification event."""

    try:
        notification = NotificationRepository(db).get(notification_id)
    except NotificationNotFound as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc

    asset = _build_asset(payload.asset, _resolve_context(db, payload.data))
    messages = create_messages(
        db,
        notification,
        asset,
        to_list=payload.to_list,
        data=payload.data,
        dispatcher=dispatcher,
        stream_publisher=stream_publisher,
        replica_session=replica_db,
    )
    return [_message_to_schema(message) for message in messages]


@router.get("/stream", response_model=list[StreamItemRead])
def list_stream_items(
    limit: int = 50,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> list[StreamItemRead]:
    """Return the most recent dashboard stream items for the authenticated user."""

    stream_items = StreamItemRepository(db).list_for_user(current_user.id, limit=limit)
    return [_stream_item_to_schema(stream_item) for stream_item in stream_items]


@router.websocket("/ws")
async def stream_websocket(websocket: WebSocket) -> None:
    """Websocket endpoint that pushes new stream items to the authenticated user."""

    token = websocket.query_params.get("token")
    if not token:
        await websocket.close(code=1008)
        return

    session = SessionLocal()
    try:
        user_id = resolve_current_user(token, session).id
        recent = StreamItemRepository(session).list_for_user(user_id, limit=20)
    except HTTPException:
        await websocket.close(code=1008)
        return
    finally:
        session.close()

    await stream_manager.connect(user_id, websocket)
    try:
        if recent:
            await websocket.send_json(
                {"type": "init", "data": [serialize_stream_item(item) for item in recent]}
            )
        while True:
            message = await websocket.receive_json()
            if isinstance(message, dict) and message.get("type") == "ping":
                await websocket.send_json({"type": "pong"})
    except WebSocketDisconnect:
        stream_manager.disconnect(user_id, websocket)
    except Exception:  # pragma: no cover - defensive path
        stream_manager.disconnect(user_id, websocket)
        raise


__all__ = ["router"]
