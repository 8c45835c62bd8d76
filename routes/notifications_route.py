from fastapi import APIRouter, Request

router = APIRouter(prefix="/notifications")


@router.get("")
def get_notifications(request: Request):
    feed = request.app.state.notifications
    return {"status": "success", "notifications": feed.recent()}
