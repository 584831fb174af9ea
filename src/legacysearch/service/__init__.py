"""Person service and response shaping."""

from legacysearch.service.person_service import PersonService
from legacysearch.service.response import build_response, serialize_response

__all__ = ["PersonService", "build_response", "serialize_response"]
