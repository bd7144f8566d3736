"""Business logic services."""

from src.services.purge_coordinator import PurgeCoordinator
from src.services.replacement_detector import looks_like_replacement
from src.services.url_resolver import UrlResolver, find_first_img_src

__all__ = [
    "PurgeCoordinator",
    "UrlResolver",
    "find_first_img_src",
    "looks_like_replacement",
]
