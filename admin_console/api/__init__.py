"""Remote admin API access."""

from .client import ApiRequestError, HttpResourceApi, ResourceApi
from .records import ListResponse

__all__ = ["ApiRequestError", "HttpResourceApi", "ListResponse", "ResourceApi"]
