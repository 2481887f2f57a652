import time
import logging
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

logger = logging.getLogger(__name__)

# 이 시간(ms)을 넘는 요청은 WARNING 으로 남김 (대시보드 집계 등)
SLOW_REQUEST_MS = 1000


class TimingMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        start = time.perf_counter()
        response = await call_next(request)
        latency_ms = int((time.perf_counter() - start) * 1000)
        response.headers["X-Latency-Ms"] = str(latency_ms)

        if latency_ms >= SLOW_REQUEST_MS:
            logger.warning(f"느린 요청: {request.method} {request.url.path} {latency_ms}ms")
        else:
            logger.debug(f"{request.method} {request.url.path} {response.status_code} {latency_ms}ms")
        return response
