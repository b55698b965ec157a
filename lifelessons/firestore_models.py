"""
Firestore document models using Python dataclasses.

Each model describes one collection and builds the document written on
creation through ``to_dict()``. Field names are stored in camelCase, the way
the web client reads them. Datetime fields are kept as native datetime objects
since Firestore handles them natively.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Optional


ROLES = ('admin', 'user')
ACCESS_LEVELS = ('free', 'premium')
VISIBILITIES = ('public', 'private')

DEFAULT_CATEGORY = 'Self-Growth'
DEFAULT_TONE = 'Reflective'


def _now() -> datetime:
    return datetime.now(timezone.utc)


# ===========================================================================
# 1. User
# ===========================================================================

@dataclass
class User:
    email: str = ""
    name: str = ""
    photoURL: str = ""
    role: str = "user"
    isPremium: bool = False

    def profile_fields(self) -> Dict[str, Any]:
        """Fields rewritten on every sign-in upsert."""
        return {
            "email": self.email,
            "name": self.name,
            "photoURL": self.photoURL,
            "updatedAt": _now(),
        }

    def insert_only_fields(self) -> Dict[str, Any]:
        """Fields written only when the document is first created."""
        return {
            "createdAt": _now(),
            "role": self.role,
            "isPremium": self.isPremium,
        }


# ===========================================================================
# 2. Lesson
# ===========================================================================

@dataclass
class Lesson:
    title: str = ""
    shortDescription: str = ""
    creatorEmail: str = ""
    details: str = ""
    category: str = DEFAULT_CATEGORY
    emotionalTone: str = DEFAULT_TONE
    accessLevel: str = "free"
    visibility: str = "public"
    creatorName: str = ""
    creatorPhotoURL: str = ""
    created_at: Optional[datetime] = None

    # Only these fields may be changed after creation
    MUTABLE_FIELDS = (
        "title", "shortDescription", "details", "category",
        "emotionalTone", "accessLevel", "visibility",
    )

    def to_dict(self) -> Dict[str, Any]:
        now = self.created_at or _now()
        return {
            "title": self.title,
            "shortDescription": self.shortDescription,
            "details": self.details,
            "category": self.category,
            "emotionalTone": self.emotionalTone,
            "accessLevel": self.accessLevel,
            "visibility": self.visibility,
            "creatorEmail": self.creatorEmail,
            "creatorName": self.creatorName,
            "creatorPhotoURL": self.creatorPhotoURL,
            "savedCount": 0,
            "likesCount": 0,
            "likes": [],
            "createdAt": now,
            "updatedAt": now,
            "isDeleted": False,
            "isFeatured": False,
            "isReviewed": False,
        }


# ===========================================================================
# 3. Report
# ===========================================================================

@dataclass
class Report:
    lessonId: str
    reporterEmail: str
    reason: str = "Other"
    message: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "lessonId": self.lessonId,
            "reason": self.reason or "Other",
            "message": self.message or "",
            "reporterEmail": self.reporterEmail,
            "status": "pending",
            "createdAt": _now(),
        }


# ===========================================================================
# 4. Favorite
# ===========================================================================

@dataclass
class Favorite:
    lessonId: str
    userEmail: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "lessonId": self.lessonId,
            "userEmail": self.userEmail,
            "createdAt": _now(),
        }


# ===========================================================================
# 5. Comment
# ===========================================================================

@dataclass
class Comment:
    lessonId: str
    userEmail: str
    text: str
    userName: str = "Anonymous"
    userPhoto: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "lessonId": self.lessonId,
            "userName": self.userName or "Anonymous",
            "userEmail": self.userEmail,
            "userPhoto": self.userPhoto or "",
            "text": self.text,
            "createdAt": _now(),
        }


# ===========================================================================
# 6. ContactMessage
# ===========================================================================

@dataclass
class ContactMessage:
    name: str
    email: str
    subject: str
    message: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name.strip(),
            "email": self.email.strip(),
            "subject": self.subject.strip(),
            "message": self.message.strip(),
            "createdAt": _now(),
            "status": "new",
        }
