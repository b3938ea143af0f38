"""The blog site: config bootstrap, session middleware, and the demo routes.

Serve it with::

    inkpost run                        # uses inkpost.site:create_app
    uvicorn --factory inkpost.site:create_app
"""

from html import escape

from inkpost.app import App
from inkpost.config import AppConfig, load_config
from inkpost.data.database import Database
from inkpost.middleware.sessions import SessionConfig, SessionMiddleware, get_session


def create_app(config: AppConfig | None = None) -> App:
    """Build the site application.

    Loads the config from the environment when none is given, installs
    the session middleware and registers the demo pages. The database
    gateway is attached but only connects when a handler first queries it.
    """
    if config is None:
        config = load_config()

    app = App(config, db=Database.from_config(config))
    app.add_middleware(SessionMiddleware(SessionConfig.from_app_config(config)))
    _register_demo_routes(app)
    return app


def _register_demo_routes(app: App) -> None:
    base_url = app.config.app_url.rstrip("/")

    @app.get("/")
    def home() -> str:
        get_session().set_flash("success", "Homepage loaded successfully!")
        return (
            "<h1>Welcome to the Blog Platform!</h1>"
            f"<p>Current App URL: {escape(app.config.app_url)}</p>"
            f"<p><a href='{escape(base_url)}/test-page'>Test Page</a></p>"
            f"<p><a href='{escape(base_url)}/user/123'>User Profile (ID: 123)</a></p>"
            f"<p><a href='{escape(base_url)}/posts/my-example-post'>Example Post</a></p>"
            f"<p><a href='{escape(base_url)}/non-existent-page'>"
            "Non Existent Page (404)</a></p>"
        )

    @app.get("/test-page")
    def test_page() -> str:
        session = get_session()
        body = "<h1>Test Page</h1>"
        if session.has_flash("success"):
            message = session.get_flash("success")
            body += f"<p style='color:green;'>{escape(str(message))}</p>"
        return body + f"<p><a href='{escape(base_url)}/'>Back to Home</a></p>"

    @app.get("/user/{id}")
    def user_profile(id: str) -> str:
        return f"<h1>User Profile</h1><p>User ID: {escape(id)}</p>"

    @app.get("/posts/{slug}")
    def show_post(slug: str) -> str:
        return f"<h1>Blog Post</h1><p>Post Slug: {escape(slug)}</p>"
