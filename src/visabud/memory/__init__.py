"""Profile memory: persisted user profile and chat-derived updates."""

from .extractor import extract_from_chat, normalize_date
from .manager import AutoFillResult, ProfileMemory
from .models import ProfileUpdate, TravelEvent, UserProfile, merge_profile
from .requirements import NeedHints, build_prompt, missing_fields, passport_is_valid

__all__ = [
    "AutoFillResult",
    "NeedHints",
    "ProfileMemory",
    "ProfileUpdate",
    "TravelEvent",
    "UserProfile",
    "build_prompt",
    "extract_from_chat",
    "merge_profile",
    "missing_fields",
    "normalize_date",
    "passport_is_valid",
]
