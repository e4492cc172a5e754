"""
api/routes/voice.py
-------------------
    POST /api/voice/process
    GET  /api/voice/commands
    GET  /api/voice/status
"""
from __future__ import annotations

from typing import Any, Optional

from fastapi import APIRouter
from pydantic import BaseModel

from trip_planner.modules.assistant.voice_assistant import voice_assistant_service

router = APIRouter()


class VoiceRequest(BaseModel):
    audioData: Optional[Any] = None
    userId: Optional[str] = None


@router.post("/process", summary="Run a voice (or typed) command")
def process(req: VoiceRequest) -> dict:
    result = voice_assistant_service.process_voice_command(req.audioData, req.userId)
    return {"success": True, "result": result, "message": "Voice command processed successfully!"}


@router.get("/commands", summary="Supported voice commands")
def commands() -> dict:
    return {
        "success": True,
        "commands": voice_assistant_service.get_available_commands(),
        "message": "Voice commands retrieved successfully!",
    }


@router.get("/status", summary="Voice assistant status")
def status() -> dict:
    return {"success": True, "status": voice_assistant_service.get_status()}
