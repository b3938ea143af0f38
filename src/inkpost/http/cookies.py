"""Reading the ``Cookie`` header and writing ``Set-Cookie`` values."""

from dataclasses import dataclass


def parse_cookies(header: str) -> dict[str, str]:
    """``"a=1; b=2"`` -> ``{"a": "1", "b": "2"}``. Malformed pairs are dropped."""
    pairs = (chunk.strip().partition("=") for chunk in header.split(";"))
    return {name.strip(): value.strip() for name, eq, value in pairs if eq and name.strip()}


@dataclass(frozen=True, slots=True)
class SetCookie:
    """One ``Set-Cookie`` header. ``max_age=None`` lasts for the browser
    session, ``max_age=0`` deletes the cookie."""

    name: str
    value: str
    max_age: int | None = None
    path: str = "/"
    domain: str | None = None
    secure: bool = False
    httponly: bool = True
    samesite: str = "Lax"

    def __str__(self) -> str:
        attributes = [
            ("Max-Age", self.max_age),
            ("Path", self.path),
            ("Domain", self.domain),
            ("SameSite", self.samesite),
        ]
        rendered = [f"{self.name}={self.value}"]
        rendered += [f"{key}={value}" for key, value in attributes if value not in (None, "")]
        flags = (("Secure", self.secure), ("HttpOnly", self.httponly))
        rendered += [flag for flag, on in flags if on]
        return "; ".join(rendered)
