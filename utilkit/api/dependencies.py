"""
FastAPI dependencies for dependency injection.
"""

from fastapi import Request

from utilkit.request import RequestContext


async def get_request_context(request: Request) -> RequestContext:
    """
    Get the RequestContext of the current request.

    Reuses the context attached by RequestContextMiddleware; without the
    middleware a context is built once and stored on the request state.

    Args:
        request: Incoming request

    Returns:
        RequestContext for this request
    """
    context = getattr(request.state, "context", None)
    if context is None:
        body = await request.body()
        context = RequestContext.from_request(request, body)
        request.state.context = context
    return context
