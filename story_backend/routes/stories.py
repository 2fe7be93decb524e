from __future__ import annotations

from fastapi import APIRouter, Body, Depends, HTTPException, Request
from pydantic import BaseModel

from ..errors import StoreBusyError, StoreError
from ..services.story_svc import StoryStore

router = APIRouter()


def get_store(request: Request) -> StoryStore:
    return request.app.state.store


def _fail(e: StoreError) -> HTTPException:
    if isinstance(e, StoreBusyError):
        return HTTPException(status_code=503, detail=str(e))
    return HTTPException(status_code=500, detail=str(e))


class PromptStoryIn(BaseModel):
    story: str
    subject: str
    verb: str
    object: str
    setting: str
    consequences: str


class SelfWrittenStoryIn(BaseModel):
    story: str
    name: str


# ---- prompt stories ----

@router.post("/api/stories/save")
def api_story_save(body: PromptStoryIn, store: StoryStore = Depends(get_store)):
    try:
        store.save_prompt_story(
            body.story, body.subject, body.verb, body.object, body.setting, body.consequences
        )
        return {"message": "ok"}
    except StoreError as e:
        raise _fail(e)


@router.get("/api/stories")
def api_story_list(store: StoryStore = Depends(get_store)):
    try:
        return {"items": store.list_prompt_stories()}
    except StoreError as e:
        raise _fail(e)


@router.get("/api/stories/all")
def api_story_list_all(store: StoryStore = Depends(get_store)):
    """Prompt and self-written stories merged, newest first, each tagged with `kind`."""
    try:
        return {"items": store.list_all_stories()}
    except StoreError as e:
        raise _fail(e)


@router.post("/api/stories/delete")
def api_story_delete(id: int = Body(..., embed=True), store: StoryStore = Depends(get_store)):
    try:
        store.delete_prompt_story(id)
        return {"message": "ok"}
    except StoreError as e:
        raise _fail(e)


# ---- self-written stories ----

@router.post("/api/self-written-stories/save")
def api_self_written_save(body: SelfWrittenStoryIn, store: StoryStore = Depends(get_store)):
    try:
        store.save_self_written_story(body.story, body.name)
        return {"message": "ok"}
    except StoreError as e:
        raise _fail(e)


@router.get("/api/self-written-stories")
def api_self_written_list(store: StoryStore = Depends(get_store)):
    try:
        return {"items": store.list_self_written_stories()}
    except StoreError as e:
        raise _fail(e)


@router.post("/api/self-written-stories/delete")
def api_self_written_delete(id: int = Body(..., embed=True), store: StoryStore = Depends(get_store)):
    try:
        store.delete_self_written_story(id)
        return {"message": "ok"}
    except StoreError as e:
        raise _fail(e)
