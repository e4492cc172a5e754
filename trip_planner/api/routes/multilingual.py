"""
api/routes/multilingual.py
--------------------------
    POST /api/multilingual/translate
    POST /api/multilingual/phrases
    GET  /api/multilingual/languages/{destination}
    POST /api/multilingual/cultural-tips
"""
from __future__ import annotations

from typing import Any, Optional

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel

from trip_planner.modules.assistant.multilingual import multilingual_service

router = APIRouter()


class TranslateRequest(BaseModel):
    content: Optional[Any] = None
    targetLanguage: Optional[str] = None
    sourceLanguage: str = "en"


class PhrasesRequest(BaseModel):
    destination: str
    language: str = "hi"


class CulturalTipsRequest(BaseModel):
    destination: str
    language: str = "en"


@router.post("/translate", summary="Translate travel content")
def translate(req: TranslateRequest) -> dict:
    if not req.content or not req.targetLanguage:
        raise HTTPException(status_code=400, detail="Content and targetLanguage are required")
    translated = multilingual_service.translate_content(req.content, req.targetLanguage, req.sourceLanguage)
    return {"success": True, "translatedContent": translated, "message": "Content translated successfully!"}


@router.post("/phrases", summary="Essential travel phrases")
def phrases(req: PhrasesRequest) -> dict:
    return {
        "success": True,
        "phrases": multilingual_service.get_travel_phrases(req.destination, req.language),
        "message": "Travel phrases generated successfully!",
    }


@router.get("/languages/{destination}", summary="Languages spoken around a destination")
def languages(destination: str) -> dict:
    return {
        "success": True,
        "languages": multilingual_service.get_supported_languages(destination),
        "culturalContext": multilingual_service.get_cultural_context(destination),
    }


@router.post("/cultural-tips", summary="Etiquette and customs")
def cultural_tips(req: CulturalTipsRequest) -> dict:
    return {"success": True, "tips": multilingual_service.get_cultural_tips(req.destination, req.language)}
