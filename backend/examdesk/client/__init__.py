"""Client-side support for the admin front end: API client, normalizer and view models."""

from examdesk.client.api import ExamApiClient, ExamClientError, ExamNotFoundError, ExamTransportError
from examdesk.client.map import ExamMapView, MapMarker, MapRenderer, OneShotLoader, create_map_loader
from examdesk.client.normalize import normalize_exam, normalize_exam_list
from examdesk.client.view_model import ExamTableViewModel

__all__ = [
    "ExamApiClient",
    "ExamClientError",
    "ExamMapView",
    "ExamNotFoundError",
    "ExamTableViewModel",
    "ExamTransportError",
    "MapMarker",
    "MapRenderer",
    "OneShotLoader",
    "create_map_loader",
    "normalize_exam",
    "normalize_exam_list",
]
