"""Testing utilities for inkpost applications.

Usage::

    from inkpost.testing import TestClient

    async def test_home():
        async with TestClient(create_app(config)) as client:
            response = await client.get("/")
            assert response.status == 200
"""

from inkpost.testing.client import TestClient

__all__ = ["TestClient"]
