"""HTTP execution: the asynchronous request pipeline and the response store."""

from openapi_tui.client.pipeline import RequestPipeline
from openapi_tui.client.response import ResponseStore, record_from_response

__all__ = ["RequestPipeline", "ResponseStore", "record_from_response"]
