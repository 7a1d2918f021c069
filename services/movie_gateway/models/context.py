"""
Request context model.

Read-only snapshot of the inbound request shared by every pipeline stage.
"""

from typing import Dict, List, Optional, Union

from fastapi import Request
from pydantic import BaseModel, ConfigDict, Field


class RequestContext(BaseModel):
    """
    What the pipeline knows about an incoming request.

    Decouples logging and handlers from Starlette's Request object.
    """

    model_config = ConfigDict(frozen=True)

    method: str
    path: str
    url: str
    query_params: Dict[str, Union[str, List[str]]] = Field(default_factory=dict)
    client_ip: Optional[str] = None
    user_agent: Optional[str] = None

    @classmethod
    def from_request(cls, request: Request) -> "RequestContext":
        query_params: Dict[str, Union[str, List[str]]] = {}
        for key in request.query_params.keys():
            values = request.query_params.getlist(key)
            query_params[key] = values[0] if len(values) == 1 else values

        url = request.url.path
        if request.url.query:
            url = f"{url}?{request.url.query}"

        return cls(
            method=request.method,
            path=request.url.path,
            url=url,
            query_params=query_params,
            client_ip=request.client.host if request.client else None,
            user_agent=request.headers.get("user-agent"),
        )
