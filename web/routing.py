"""
금액 정밀도 보존 라우트

FastAPI 기본 요청 본문 파싱은 JSON 소수를 float로 읽는다.
DecimalJSONRoute는 json.loads(parse_float=Decimal)로 본문을 읽어
금액이 float를 거치지 않고 Decimal 그대로 요청 모델에 전달되게 한다.
"""

import json
from decimal import Decimal
from typing import Any, Callable, Coroutine

from fastapi import Request, Response
from fastapi.routing import APIRoute


class DecimalJSONRequest(Request):
    """JSON 소수를 Decimal로 파싱하는 Request"""

    async def json(self) -> Any:
        if not hasattr(self, "_json"):
            body = await self.body()
            self._json = json.loads(body, parse_float=Decimal)
        return self._json


class DecimalJSONRoute(APIRoute):
    """DecimalJSONRequest를 사용하는 APIRoute

    사용 예시:
    ```python
    router = APIRouter(prefix="/api/assets", route_class=DecimalJSONRoute)
    ```
    """

    def get_route_handler(self) -> Callable[[Request], Coroutine[Any, Any, Response]]:
        original_handler = super().get_route_handler()

        async def decimal_route_handler(request: Request) -> Response:
            return await original_handler(DecimalJSONRequest(request.scope, request.receive))

        return decimal_route_handler
