from __future__ import annotations

import logging
import threading
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from agent.agent import LocationResponseGenerator
from agent.core.memory import ChatStore
from agent.core.models import ChatInput, ChatRecord, NewChat
from agent.core.personas import Persona, PersonaTable
from app.errors import install_error_handlers
from config.settings import Settings, get_settings


logger = logging.getLogger("location_chat")

router = APIRouter()

_generator_lock = threading.Lock()


def get_store(request: Request) -> ChatStore:
    return request.app.state.store


def get_personas(request: Request) -> PersonaTable:
    return request.app.state.personas


def get_generator(request: Request) -> LocationResponseGenerator:
    # Built on first use so the API can list and clear chats without model credentials.
    state = request.app.state
    if state.generator is None:
        with _generator_lock:
            if state.generator is None:
                settings: Settings = state.settings
                logger.info(
                    "Config: model=%s key_set=%s",
                    settings.gemini_model,
                    bool(settings.google_api_key),
                )
                state.generator = LocationResponseGenerator.from_settings(settings)
    return state.generator


@router.get("/api/chats", response_model=List[ChatRecord])
def list_chats(store: ChatStore = Depends(get_store)) -> List[ChatRecord]:
    return store.list()


@router.post("/api/chat", response_model=ChatRecord)
def create_chat(
    req: ChatInput,
    request: Request,
    store: ChatStore = Depends(get_store),
    personas: PersonaTable = Depends(get_personas),
) -> ChatRecord:
    persona_prompt = personas.resolve_prompt(req.system_prompt, req.persona)
    logger.info(
        "Incoming chat: lat=%.5f lng=%.5f address=%s persona=%s places=%s",
        req.location.lat,
        req.location.lng,
        req.location.address,
        req.persona or ("custom" if req.system_prompt else "default"),
        len(req.places),
    )
    generator = get_generator(request)
    answer = generator.generate(req.message, req.location, persona_prompt, req.places)
    # Persist only after a fully successful generation.
    return store.create(
        NewChat(
            message=req.message,
            response=answer.to_json(),
            system_prompt=persona_prompt,
            location=req.location,
        )
    )


@router.delete("/api/chats")
def clear_chats(store: ChatStore = Depends(get_store)) -> Dict[str, Any]:
    removed = store.clear()
    return {"success": True, "cleared": removed}


@router.get("/api/personas", response_model=List[Persona])
def list_personas(personas: PersonaTable = Depends(get_personas)) -> List[Persona]:
    return personas.all()


@router.get("/health")
def health():
    return {"status": "ok"}


def create_app(
    store: Optional[ChatStore] = None,
    generator: Optional[LocationResponseGenerator] = None,
    personas: Optional[PersonaTable] = None,
    settings: Optional[Settings] = None,
) -> FastAPI:
    settings = settings or get_settings()
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="[%(asctime)s] %(levelname)s - %(message)s",
    )

    app = FastAPI(title="Location Chat Assistant", version="1.0.0")
    app.state.settings = settings
    app.state.store = store if store is not None else ChatStore()
    app.state.generator = generator
    app.state.personas = personas if personas is not None else PersonaTable.from_file(settings.personas_path)

    # CORS: allow local frontend during development
    if settings.is_development:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=["*"],
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    install_error_handlers(app)
    app.include_router(router)
    return app


app = create_app()
