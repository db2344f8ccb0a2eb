# tests/test_main.py

"""
FastAPI 애플리케이션의 메인 엔드포인트에 대한 통합 테스트를 정의하는 모듈입니다.

- 애플리케이션의 루트 경로 (`/`) 응답을 테스트합니다.
- 데이터베이스 연결 헬스 체크 엔드포인트 (`/health-check`)를 테스트합니다.
- 도메인 예외가 공통 JSON 오류 형식으로 변환되는지 확인합니다.
"""

from httpx import AsyncClient


async def test_read_root(client: AsyncClient):
    response = await client.get("/")

    assert response.status_code == 200
    assert response.json() == {"message": "Welcome to FIMS API. Visit /docs for interactive API documentation."}


async def test_health_check(client: AsyncClient):
    """헬스 체크가 테스트 데이터베이스에 연결되어 ok를 반환하는지 확인합니다."""
    response = await client.get("/health-check")

    assert response.status_code == 200
    assert response.json() == {"status": "ok", "database_connection": "successful"}


async def test_domain_error_response_shape(staff_client: AsyncClient):
    """NotFoundError는 404와 {detail, code, data} 본문으로 변환됩니다."""
    response = await staff_client.get("/api/v1/inv/materials/9999")

    assert response.status_code == 404
    body = response.json()
    assert body["code"] == "NOT_FOUND"
    assert body["data"] == {"resource": "Material", "identifier": 9999}
    assert "9999" in body["detail"]


async def test_protected_endpoint_requires_token(client: AsyncClient):
    response = await client.get("/api/v1/inv/materials")
    assert response.status_code == 401
