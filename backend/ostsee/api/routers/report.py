# backend/ostsee/api/routers/report.py
import re
import uuid
from functools import lru_cache
from typing import Optional

from fastapi import APIRouter, Body, Depends, File, Form, Request, Response, UploadFile

from ostsee.config import Settings, get_settings
from ostsee.db import SessionLocal
from ostsee.exceptions import ConflictError
from ostsee.logging_config import get_logger
from ostsee.report.controller import StepController
from ostsee.report.draft import DraftBackend, DraftStore, FileDraftBackend, MemoryDraftBackend
from ostsee.report.media import MediaPipeline
from ostsee.report.options import ALL_OPTIONS
from ostsee.report.steps import FORM_STEPS, step_for_field
from ostsee.report.submit import HttpSightingBackend, RepositoryBackend, SightingBackend, SubmissionClient
from ostsee.schemas.report import SightingDraft
from ostsee.services.storage.base import StorageProvider
from ostsee.services.storage.factory import get_storage_provider

logger = get_logger(__name__)

router = APIRouter()

_SESSION_RE = re.compile(r"^[0-9a-f]{32}$")


@lru_cache
def get_draft_backend() -> DraftBackend:
    settings = get_settings()
    if settings.draft_backend == "memory":
        return MemoryDraftBackend()
    return FileDraftBackend(settings.resolved_draft_dir)


def get_draft_store(request: Request, response: Response,
                    backend: DraftBackend = Depends(get_draft_backend),
                    settings: Settings = Depends(get_settings)) -> DraftStore:
    key = request.cookies.get(settings.draft_cookie_name)
    if not key or not _SESSION_RE.match(key):
        key = uuid.uuid4().hex
        response.set_cookie(settings.draft_cookie_name, key, httponly=True, samesite="lax",
                            max_age=settings.session_max_age_seconds, path="/")
    return DraftStore(backend, key)


def get_sighting_backend(settings: Settings = Depends(get_settings)) -> SightingBackend:
    if settings.sightings_api_url:
        return HttpSightingBackend(settings.sightings_api_url, timeout=settings.api_timeout_seconds)
    return RepositoryBackend(SessionLocal)


def _state(draft: SightingDraft, controller: Optional[StepController] = None, **extra) -> dict:
    controller = controller or StepController.from_draft(draft)
    return {"draft": draft.public_dict(), "controller": controller.snapshot(), **extra}


@router.get("/steps")
def list_steps():
    return [s.to_dict() for s in FORM_STEPS]


@router.get("/options")
def list_options():
    return {name: option_set.options() for name, option_set in ALL_OPTIONS.items()}


@router.get("/draft")
def get_draft(store: DraftStore = Depends(get_draft_store)):
    return _state(store.load_with_contact())


@router.patch("/draft")
def update_draft(values: dict = Body(...), store: DraftStore = Depends(get_draft_store)):
    outcome: dict = {}

    def apply(draft: SightingDraft):
        draft.values.update(values)
        controller = StepController.from_draft(draft)
        # completed steps stay completed only while their fields are still valid
        touched = {step_for_field(name) for name in values} - {None}
        errors = []
        for index in sorted(touched & controller.completed):
            errors.extend(controller.revalidate(index, draft.values))
        controller.apply_to(draft)
        outcome["errors"] = [e.to_dict() for e in errors]

    draft = store.modify(apply)
    return _state(draft, **outcome)


@router.delete("/draft")
def delete_draft(store: DraftStore = Depends(get_draft_store)):
    store.clear()
    return {"success": True}


@router.post("/next")
def next_step(values: Optional[dict] = Body(None), store: DraftStore = Depends(get_draft_store)):
    result: dict = {}

    def apply(draft: SightingDraft):
        if values:
            draft.values.update(values)
        controller = StepController.from_draft(draft)
        result["outcome"] = controller.next(draft.values)
        result["controller"] = controller
        controller.apply_to(draft)

    draft = store.modify(apply)
    return _state(draft, result["controller"], outcome=result["outcome"].to_dict())


@router.post("/back")
def previous_step(store: DraftStore = Depends(get_draft_store)):
    result: dict = {}

    def apply(draft: SightingDraft):
        controller = StepController.from_draft(draft)
        result["outcome"] = controller.back()
        result["controller"] = controller
        controller.apply_to(draft)

    draft = store.modify(apply)
    return _state(draft, result["controller"], outcome=result["outcome"].to_dict())


@router.post("/goto/{index}")
def go_to_step(index: int, store: DraftStore = Depends(get_draft_store)):
    def apply(draft: SightingDraft):
        controller = StepController.from_draft(draft)
        if not controller.go_to(index):
            raise ConflictError("Dieser Schritt ist noch nicht erreichbar", context={"index": index})
        controller.apply_to(draft)

    return _state(store.modify(apply))


@router.post("/media", status_code=201)
async def add_media(file: UploadFile = File(...), position_step: bool = Form(False),
                    store: DraftStore = Depends(get_draft_store)):
    data = await file.read()
    pipeline = MediaPipeline(store)
    if position_step:
        attachment = pipeline.ingest_from_position_step(file.filename or "", file.content_type, data)
    else:
        attachment = pipeline.ingest(file.filename or "", file.content_type, data)
    return {"attachment": attachment.public_dict(), **_state(store.load())}


@router.delete("/media/{index}")
def remove_media(index: int, store: DraftStore = Depends(get_draft_store)):
    removed = MediaPipeline(store).remove(index)
    return {"removed": removed.public_dict(), **_state(store.load())}


@router.post("/submit", status_code=201)
def submit_draft(store: DraftStore = Depends(get_draft_store),
                 storage: StorageProvider = Depends(get_storage_provider),
                 backend: SightingBackend = Depends(get_sighting_backend)):
    controller = StepController.from_draft(store.load())
    if not controller.is_last:
        raise ConflictError("Bitte füllen Sie zuerst alle Schritte aus",
                            context={"current_step": controller.current})
    client = SubmissionClient(store, backend, storage=storage)
    sighting_id = client.submit()
    controller.mark_submitted()
    return {"success": True, "id": sighting_id, "controller": controller.snapshot()}


@router.get("/contact")
def get_contact(store: DraftStore = Depends(get_draft_store)):
    return store.remembered_contact()


@router.delete("/contact")
def delete_contact(store: DraftStore = Depends(get_draft_store)):
    store.forget_contact()
    return {"success": True}
