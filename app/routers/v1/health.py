from fastapi import APIRouter, Request

router = APIRouter()

@router.get("/health")
async def health_check(request: Request):
    reminders = getattr(request.app.state, "reminders", None)
    if reminders is None:
        reminder_state = "disabled"
    else:
        reminder_state = "ready" if reminders.is_ready() else "unavailable"
    return {"status": "ok", "reminders": reminder_state}
