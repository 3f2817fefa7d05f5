"""HTTP routes — transcripts, Vapi webhook, room views and UI events."""

import sys
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, HTTPException, Request
from pydantic import BaseModel

from homevoice.app import HomeVoiceApp
from homevoice.domain.models import (
    Direction,
    HealthQuery,
    Intent,
    Navigate,
    TemperatureChange,
    TemperatureSet,
    ThermostatState,
)
from homevoice.ports.inbound import Role, TranscriptEvent, TranscriptKind

voice_router = APIRouter(tags=["Voice"])
rooms_router = APIRouter(prefix="/rooms", tags=["Rooms"])


def _log(msg: str):
    print(msg, file=sys.stderr)


# Request/Response models
class TranscriptRequest(BaseModel):
    text: str
    role: Role = Role.USER
    kind: TranscriptKind = TranscriptKind.FINAL


class IntentResponse(BaseModel):
    intent: str
    room: Optional[str] = None
    delta: Optional[int] = None
    target: Optional[int] = None
    text: Optional[str] = None


class RoomStateResponse(BaseModel):
    room: str
    current_temp: int
    target: Optional[int] = None
    is_animating: bool
    last_voice_action: Optional[Direction] = None
    last_button_action: Optional[Direction] = None


class RoomsResponse(BaseModel):
    current_page: str
    rooms: List[RoomStateResponse]
    home: Optional[RoomStateResponse] = None


class EventsResponse(BaseModel):
    events: List[Dict[str, Any]]


def _home(request: Request) -> HomeVoiceApp:
    return request.app.state.home


def intent_response(intent: Intent) -> IntentResponse:
    if isinstance(intent, TemperatureChange):
        return IntentResponse(intent="temperature_change", room=intent.room, delta=intent.delta)
    if isinstance(intent, TemperatureSet):
        return IntentResponse(intent="temperature_set", room=intent.room, target=intent.target)
    if isinstance(intent, Navigate):
        return IntentResponse(intent="navigate", room=intent.room)
    if isinstance(intent, HealthQuery):
        return IntentResponse(intent="health_query", text=intent.text)
    return IntentResponse(intent="none")


def state_response(state: ThermostatState) -> RoomStateResponse:
    return RoomStateResponse(**state.__dict__)


# --- Transcript endpoints ---

@voice_router.post("/transcripts", response_model=IntentResponse)
async def post_transcript(req: TranscriptRequest, request: Request):
    event = TranscriptEvent(role=req.role, kind=req.kind, text=req.text)
    intent = await _home(request).handle_transcript(event)
    return intent_response(intent)


@voice_router.post("/vapi/webhook")
async def vapi_webhook(payload: Dict[str, Any], request: Request):
    """Vapi server messages: transcripts, call status and end-of-call reports."""
    message = payload.get("message")
    if not isinstance(message, dict):
        _log(f"[Webhook] malformed payload, message={message!r:.80}")
        return {"ok": True, "ignored": "malformed"}
    msg_type = message.get("type", "")
    home = _home(request)

    if msg_type == "transcript":
        try:
            event = TranscriptEvent(
                role=Role(message.get("role", "")),
                kind=TranscriptKind(message.get("transcriptType", "")),
                text=str(message.get("transcript") or ""),
            )
        except ValueError:
            _log(f"[Webhook] unsupported transcript role/kind: {message.get('role')}/{message.get('transcriptType')}")
            return {"ok": True, "intent": "none"}
        intent = await home.handle_transcript(event)
        return {"ok": True, "intent": intent_response(intent).intent}

    if msg_type == "status-update":
        call = message.get("call")
        monitor = call.get("monitor") if isinstance(call, dict) else None
        control_url = monitor.get("controlUrl") if isinstance(monitor, dict) else None
        voice = getattr(request.app.state, "voice", None)
        if control_url and voice is not None:
            voice.set_control_url(control_url)
            _log("[Webhook] call control URL updated")
        if message.get("status") == "ended":
            home.end_call()
        return {"ok": True}

    if msg_type == "end-of-call-report":
        home.end_call()
        return {"ok": True}

    return {"ok": True, "ignored": msg_type}


@voice_router.post("/call/end")
async def end_call(request: Request):
    _home(request).end_call()
    return {"ok": True}


@voice_router.get("/events", response_model=EventsResponse)
async def get_events(request: Request):
    return EventsResponse(events=request.app.state.presentation.drain())


# --- Room endpoints ---

@rooms_router.get("", response_model=RoomsResponse)
async def list_rooms(request: Request):
    home = _home(request)
    home_state = home.registry.home.state() if home.registry.home is not None else None
    return RoomsResponse(
        current_page=request.app.state.presentation.current_page,
        rooms=[state_response(s) for s in home.room_states()],
        home=state_response(home_state) if home_state is not None else None,
    )


@rooms_router.get("/{room}", response_model=RoomStateResponse)
async def get_room(room: str, request: Request):
    state = _home(request).room_state(room)
    if state is None:
        raise HTTPException(status_code=404, detail=f"Room not shown yet: {room}")
    return state_response(state)


@rooms_router.post("/{room}/show", response_model=RoomStateResponse)
async def show_room(room: str, request: Request):
    home = _home(request)
    await home.navigate(room)
    return state_response(home.room_state(room))


@rooms_router.post("/{room}/buttons/{direction}", response_model=RoomStateResponse)
async def press_button(room: str, direction: str, request: Request):
    aliases = {"up": Direction.INCREASE, "down": Direction.DECREASE}
    try:
        kind = aliases.get(direction.lower()) or Direction(direction.lower())
    except ValueError:
        raise HTTPException(status_code=400, detail=f"Unknown direction: {direction}")
    controller = _home(request).press_button(room, kind)
    if controller is None:
        raise HTTPException(status_code=404, detail=f"Room not shown yet: {room}")
    return state_response(controller.state())
