from .http import HttpStoryGateway
from .interface import StoryGateway
from .memory import InMemoryStoryGateway, RecordedRequest

__all__ = [
    "StoryGateway",
    "HttpStoryGateway",
    "InMemoryStoryGateway",
    "RecordedRequest",
]
