"""Tests for inkpost.site — the demo routes behind the session middleware."""

import pytest

from inkpost.config import AppConfig
from inkpost.middleware.sessions import SessionMiddleware
from inkpost.site import create_app
from inkpost.testing import TestClient


@pytest.fixture
def config() -> AppConfig:
    return AppConfig(secret_key="site-secret", app_url="http://localhost")


class TestCreateApp:
    def test_registers_demo_routes(self, config: AppConfig) -> None:
        app = create_app(config)
        assert [(r.method, r.pattern) for r in app.router.routes] == [
            ("GET", "/"),
            ("GET", "/test-page"),
            ("GET", "/user/{id}"),
            ("GET", "/posts/{slug}"),
        ]

    def test_installs_session_middleware(self, config: AppConfig) -> None:
        app = create_app(config)
        assert any(isinstance(mw, SessionMiddleware) for mw in app.middleware)

    def test_database_not_connected(self, config: AppConfig) -> None:
        assert create_app(config).db.connected is False

    def test_loads_config_from_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("APP_NAME", "Env Blog")
        monkeypatch.setenv("SECRET_KEY", "env-secret")
        monkeypatch.setenv("APP_TIMEZONE", "UTC")
        monkeypatch.setenv("TZ", "UTC")
        app = create_app()
        assert app.config.app_name == "Env Blog"


class TestDemoRoutes:
    async def test_home(self, config: AppConfig) -> None:
        async with TestClient(create_app(config)) as client:
            response = await client.get("/")

        assert response.status == 200
        assert "<h1>Welcome to the Blog Platform!</h1>" in response.text
        assert "<p>Current App URL: http://localhost</p>" in response.text
        assert "href='http://localhost/test-page'" in response.text
        assert "href='http://localhost/user/123'" in response.text

    async def test_home_then_test_page_shows_flash_once(self, config: AppConfig) -> None:
        async with TestClient(create_app(config)) as client:
            await client.get("/")
            first = await client.get("/test-page")
            second = await client.get("/test-page")

        assert "Homepage loaded successfully!" in first.text
        assert "<p style='color:green;'>" in first.text
        assert "Homepage loaded successfully!" not in second.text
        assert "<h1>Test Page</h1>" in second.text

    async def test_test_page_without_flash(self, config: AppConfig) -> None:
        async with TestClient(create_app(config)) as client:
            response = await client.get("/test-page")
        assert response.text == (
            "<h1>Test Page</h1><p><a href='http://localhost/'>Back to Home</a></p>"
        )

    async def test_user_profile(self, config: AppConfig) -> None:
        async with TestClient(create_app(config)) as client:
            response = await client.get("/user/123")
        assert response.text == "<h1>User Profile</h1><p>User ID: 123</p>"

    async def test_user_profile_escapes(self, config: AppConfig) -> None:
        async with TestClient(create_app(config)) as client:
            response = await client.get("/user/<b>")
        assert response.text == "<h1>User Profile</h1><p>User ID: &lt;b&gt;</p>"

    async def test_post(self, config: AppConfig) -> None:
        async with TestClient(create_app(config)) as client:
            response = await client.get("/posts/my-example-post")
        assert response.text == "<h1>Blog Post</h1><p>Post Slug: my-example-post</p>"

    async def test_not_found(self, config: AppConfig) -> None:
        async with TestClient(create_app(config)) as client:
            response = await client.get("/non-existent-page")
        assert response.status == 404
        assert "404 Not Found" in response.text

    async def test_under_base_path(self) -> None:
        config = AppConfig(secret_key="s", app_url="http://localhost/php-multi-user-blog")
        async with TestClient(create_app(config)) as client:
            home = await client.get("/php-multi-user-blog/")
            post = await client.get("/php-multi-user-blog/posts/hello")

        assert "href='http://localhost/php-multi-user-blog/test-page'" in home.text
        assert post.text == "<h1>Blog Post</h1><p>Post Slug: hello</p>"
