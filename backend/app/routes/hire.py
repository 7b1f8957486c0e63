from fastapi import APIRouter, BackgroundTasks, Depends
from sqlalchemy.orm import Session

from app.core.auth import get_current_user
from app.core.errors import MarketplaceError, as_http_exception
from app.database.deps import get_db
from app.models.user import User
from app.schemas.hire import HireOut, HireRequest
from app.services.hiring import hire_bid
from app.services.notifications import NotificationDispatcher, get_dispatcher

router = APIRouter(tags=["Hire"])


@router.post("/hire", response_model=HireOut)
def hire(
    payload: HireRequest,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    dispatcher: NotificationDispatcher = Depends(get_dispatcher),
):
    try:
        notification = hire_bid(db, current_user.id, payload.gig_id, payload.bid_id)
    except MarketplaceError as exc:
        raise as_http_exception(exc)

    # Enviado depois da resposta; falha na notificação não desfaz a contratação.
    background_tasks.add_task(dispatcher.dispatch, notification)
    return HireOut(gig_id=notification.gig_id, bid_id=notification.bid_id)
