# main.py
import logging
from contextlib import asynccontextmanager
from typing import List, Optional

import pytz
import uvicorn
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from fastapi import Depends, FastAPI, Header, HTTPException, Request, WebSocket, WebSocketDisconnect
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

import config
from composer import Composer
from database import init_db
from dispatcher import Dispatcher
from errors import ReminderError, ValidationFailed
from followups import FollowUpScheduler
from mailer import SmtpMailer
from personalizer import Personalizer
from realtime import RealtimeHub
from repository import Repository
from scheduler import SchedulerState
from schemas import (
    MoreResponses, ReminderCreate, ReminderCreated, ReminderOut, ReminderUpdate, Stats, Usage, VoiceTest,
)
from service import ReminderService
from tiers import TierResolver
from voices import VOICE_CATALOG, speech_payload

config.setup_logging()
logger = logging.getLogger(__name__)


def create_app(repository=None, personalizer=None, mailer=None, realtime=None, bind=None, start_scheduler=True):
    """Wire the reminder engine onto a FastAPI app. ``bind`` is the engine tables are created on."""
    repository = repository or Repository()
    realtime = realtime or RealtimeHub()
    tiers = TierResolver(repository)
    composer = Composer(repository, personalizer or Personalizer())
    jobs = AsyncIOScheduler(timezone=pytz.UTC)
    followups = FollowUpScheduler(repository, realtime, jobs)
    dispatcher = Dispatcher(repository, tiers, composer, realtime, mailer or SmtpMailer(), followups)
    scheduler = SchedulerState(repository, dispatcher, jobs)
    service = ReminderService(repository, tiers, composer, scheduler, followups)

    @asynccontextmanager
    async def lifespan(app):
        init_db(bind)
        await repository.seed_rude_phrases()
        if start_scheduler:
            await scheduler.start()
        yield
        scheduler.shutdown()
        logger.info("Scheduler stopped")

    app = FastAPI(title="Rude Reminders API", lifespan=lifespan)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.state.repository = repository
    app.state.realtime = realtime
    app.state.tiers = tiers
    app.state.scheduler = scheduler
    app.state.followups = followups
    app.state.service = service

    # ---------- Errors ----------
    @app.exception_handler(ReminderError)
    async def reminder_error_handler(request: Request, exc: ReminderError):
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        errors = [
            {"field": ".".join(str(part) for part in e.get("loc", ()) if part != "body"), "message": e.get("msg")}
            for e in exc.errors()
        ]
        return JSONResponse(
            status_code=400,
            content={"message": "Invalid request", "code": ValidationFailed.code, "errors": errors},
        )

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.exception(f"Unhandled error on {request.method} {request.url.path}: {exc}")
        return JSONResponse(status_code=500, content={"message": "Internal server error"})

    _register_routes(app)
    return app


# ---------- Dependencies ----------
def get_service(request: Request) -> ReminderService:
    return request.app.state.service


async def current_user(
    request: Request,
    x_user_id: Optional[str] = Header(None),
    x_user_email: Optional[str] = Header(None),
):
    """The auth provider in front of us forwards the signed-in user as headers."""
    if not x_user_id:
        raise HTTPException(status_code=401, detail="Not authenticated")
    repository = request.app.state.repository
    user = await repository.get_user(x_user_id)
    if user is None or (x_user_email and user.email != x_user_email):
        user = await repository.upsert_user(x_user_id, email=x_user_email)
        user = await request.app.state.tiers.assign_whitelist(user)
    return user


# ---------- Routes ----------
def _register_routes(app):
    @app.get("/")
    def read_root():
        return {"message": "Rude Reminders API is running"}

    @app.post("/api/reminders", response_model=ReminderCreated, status_code=201)
    async def create_reminder(data: ReminderCreate, user=Depends(current_user),
                              service: ReminderService = Depends(get_service)):
        first, *rest = await service.create(user, data)
        created = ReminderCreated.model_validate(first)
        created.additional_reminders = [ReminderOut.model_validate(r) for r in rest]
        return created

    @app.get("/api/reminders", response_model=List[ReminderOut])
    async def list_reminders(user=Depends(current_user), service: ReminderService = Depends(get_service)):
        return await service.list(user)

    @app.get("/api/reminders/{reminder_id}", response_model=ReminderOut)
    async def get_reminder(reminder_id: str, user=Depends(current_user),
                           service: ReminderService = Depends(get_service)):
        return await service.get(user, reminder_id)

    @app.patch("/api/reminders/{reminder_id}", response_model=ReminderOut)
    async def update_reminder(reminder_id: str, data: ReminderUpdate, user=Depends(current_user),
                              service: ReminderService = Depends(get_service)):
        return await service.update(user, reminder_id, data)

    @app.delete("/api/reminders/{reminder_id}")
    async def delete_reminder(reminder_id: str, user=Depends(current_user),
                              service: ReminderService = Depends(get_service)):
        await service.delete(user, reminder_id)
        return {"success": True}

    @app.patch("/api/reminders/{reminder_id}/complete", response_model=ReminderOut)
    async def complete_reminder(reminder_id: str, user=Depends(current_user),
                                service: ReminderService = Depends(get_service)):
        return await service.complete(user, reminder_id)

    @app.post("/api/reminders/{reminder_id}/generate-response", response_model=ReminderOut)
    async def generate_response(reminder_id: str, user=Depends(current_user),
                                service: ReminderService = Depends(get_service)):
        return await service.regenerate(user, reminder_id)

    @app.get("/api/reminders/{reminder_id}/more-responses", response_model=MoreResponses)
    async def more_responses(reminder_id: str, refresh: bool = False, user=Depends(current_user),
                             service: ReminderService = Depends(get_service)):
        return await service.more_responses(user, reminder_id, refresh)

    @app.get("/api/voices")
    def list_voices():
        return VOICE_CATALOG

    @app.post("/api/voices/test")
    def test_voice(data: VoiceTest):
        voice = next(v for v in VOICE_CATALOG if v["id"] == data.voice_character.value)
        message = data.message or voice["testMessage"]
        return {
            **speech_payload(message, data.voice_character),
            "message": message,
            "useBrowserSpeech": True,
        }

    @app.get("/api/phrases/{level}")
    async def rude_phrases(level: int, request: Request):
        if not 1 <= level <= 5:
            raise ValidationFailed("Rudeness level must be between 1 and 5")
        phrases = await request.app.state.repository.get_rude_phrases_for_level(level)
        return [
            {"id": p.id, "rudenessLevel": p.rudeness_level, "phrase": p.phrase, "category": p.category}
            for p in phrases
        ]

    @app.get("/api/stats", response_model=Stats)
    async def stats(user=Depends(current_user), service: ReminderService = Depends(get_service)):
        return Stats(**await service.stats(user))

    @app.get("/api/usage", response_model=Usage)
    async def usage(user=Depends(current_user), service: ReminderService = Depends(get_service)):
        return await service.usage(user)

    @app.websocket("/ws")
    async def websocket_endpoint(websocket: WebSocket):
        hub = websocket.app.state.realtime
        await hub.connect(websocket)
        try:
            while True:
                # clients only listen; incoming frames keep the connection alive
                await websocket.receive_text()
        except WebSocketDisconnect:
            hub.disconnect(websocket)


app = create_app()

if __name__ == "__main__":
    uvicorn.run(app, host="0.0.0.0", port=config.PORT)
