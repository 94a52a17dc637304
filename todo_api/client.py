"""
HTTP client for the ToDo API with transparent session renewal.

``SessionRenewalAuth`` is an ``httpx.Auth`` flow that attaches the bearer
token to every request. When the server answers 401 it renews the session
once through ``/users/refresh-token`` and re-sends the original request with
the new token. If renewal is impossible or fails, the session is dropped and
``SessionEvents.session_ended`` tells the UI to go back to the login screen.

Usage:
    client = ApiClient("http://localhost:8000")
    client.login("ann@x.com", "secret1")
    projects = client.list_projects()
"""
import logging
import threading
from dataclasses import dataclass
from typing import Any

import httpx

logger = logging.getLogger(__name__)

API_PREFIX = "/api"
REFRESH_PATH = f"{API_PREFIX}/users/refresh-token"


# ─── Session state ────────────────────────────────────────────────────────────
@dataclass
class Session:
    token:         str | None = None
    refresh_token: str | None = None
    user_id:       int | None = None
    name:          str | None = None
    email:         str | None = None

    def store(self, pair: dict) -> None:
        self.token = pair["token"]
        self.refresh_token = pair["refreshToken"]
        self.user_id = pair.get("id")
        self.name = pair.get("name")
        self.email = pair.get("email")

    def clear(self) -> None:
        self.token = self.refresh_token = None
        self.user_id = self.name = self.email = None

    @property
    def is_authenticated(self) -> bool:
        return bool(self.token)


class SessionEvents:
    """
    Hooks the UI layer overrides. The defaults only log.
    """

    def session_ended(self) -> None:
        """The session is gone; navigate to the login screen."""
        logger.warning("Session ended; login required")

    def permission_denied(self, response: httpx.Response) -> None:
        logger.error(f"Forbidden access: {response.request.method} {response.request.url}")

    def connection_failed(self, error: httpx.TransportError) -> None:
        logger.error(f"Network error - unable to reach the server: {error}")


# ─── Renewal flow ─────────────────────────────────────────────────────────────
class SessionRenewalAuth(httpx.Auth):
    requires_response_body = True

    def __init__(self, session: Session, events: SessionEvents, base_url: httpx.URL | str):
        self.session = session
        self.events = events
        # The API may be mounted below a path prefix, e.g. http://host/todo/.
        self.refresh_url = httpx.URL(str(base_url).rstrip("/") + REFRESH_PATH)
        self._lock = threading.Lock()

    def _end_session(self) -> None:
        self.session.clear()
        self.events.session_ended()

    def _authorize(self, request: httpx.Request) -> None:
        if self.session.token:
            request.headers["Authorization"] = f"Bearer {self.session.token}"

    def auth_flow(self, request: httpx.Request):
        sent_token = self.session.token
        self._authorize(request)
        response = yield request
        if response.status_code != 401:
            return

        if not self.session.refresh_token or request.url.path == self.refresh_url.path:
            self._end_session()
            return

        with self._lock:
            # Another request may have renewed while this one waited.
            if self.session.token == sent_token:
                renewal = yield httpx.Request(
                    "POST",
                    self.refresh_url,
                    json={"token": self.session.token, "refreshToken": self.session.refresh_token},
                )
                if renewal.status_code != 200:
                    logger.info(f"Session renewal failed with status {renewal.status_code}")
                    self._end_session()
                    return
                self.session.store(renewal.json())
            elif not self.session.is_authenticated:
                return

        self._authorize(request)
        retried = yield request
        if retried.status_code == 401:
            self._end_session()


# ─── Client ───────────────────────────────────────────────────────────────────
class ApiClient:

    def __init__(
        self,
        base_url: str = "http://localhost:8000",
        events: SessionEvents | None = None,
        http_client: httpx.Client | None = None,
        request_timeout: float = 30.0,
    ):
        self.session = Session()
        self.events = events or SessionEvents()
        self._http = http_client or httpx.Client(base_url=base_url, timeout=request_timeout)
        self._auth = SessionRenewalAuth(self.session, self.events, self._http.base_url)

    def close(self) -> None:
        self._http.close()

    def __enter__(self) -> "ApiClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    # ─── Transport ────────────────────────────────────────────────────────────
    def request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        """
        Send a request through the renewal flow.
        Raises httpx.HTTPStatusError for error statuses and re-raises
        transport failures after notifying the UI.
        """
        try:
            response = self._http.request(method, f"{API_PREFIX}{path}", auth=self._auth, **kwargs)
        except httpx.TransportError as exc:
            self.events.connection_failed(exc)
            raise

        if response.status_code == 403:
            self.events.permission_denied(response)
        response.raise_for_status()
        return response

    def _json(self, method: str, path: str, **kwargs: Any) -> Any:
        response = self.request(method, path, **kwargs)
        return response.json() if response.content else None

    # ─── Auth ─────────────────────────────────────────────────────────────────
    def _sign_in(self, path: str, payload: dict) -> dict:
        pair = self._json("POST", path, json=payload)
        self.session.store(pair)
        return pair

    def register(self, name: str, email: str, password: str) -> dict:
        return self._sign_in("/users/register", {"name": name, "email": email, "password": password})

    def login(self, email: str, password: str) -> dict:
        return self._sign_in("/users/login", {"email": email, "password": password})

    def google_sign_in(self, id_token: str) -> dict:
        return self._sign_in("/users/google-signin", {"idToken": id_token})

    def refresh(self) -> dict:
        return self._sign_in(
            "/users/refresh-token",
            {"token": self.session.token, "refreshToken": self.session.refresh_token},
        )

    def logout(self) -> None:
        """Invalidate the server-side refresh token, then forget the session."""
        if self.session.token:
            try:
                self.request("POST", "/users/logout")
            except httpx.HTTPError as exc:
                logger.info(f"Server-side logout failed: {exc}")
        self.session.clear()

    # ─── Projects ─────────────────────────────────────────────────────────────
    def list_projects(self) -> list[dict]:
        return self._json("GET", "/projects")

    def get_project(self, project_id: int) -> dict:
        return self._json("GET", f"/projects/{project_id}")

    def create_project(self, **fields: Any) -> dict:
        return self._json("POST", "/projects", json=fields)

    def update_project(self, project_id: int, **fields: Any) -> None:
        self.request("PUT", f"/projects/{project_id}", json=fields)

    def delete_project(self, project_id: int) -> None:
        self.request("DELETE", f"/projects/{project_id}")

    # ─── Tasks ────────────────────────────────────────────────────────────────
    def list_tasks(self, project_id: int | None = None) -> list[dict]:
        params = {"projectId": project_id} if project_id is not None else None
        return self._json("GET", "/tasks", params=params)

    def get_task(self, task_id: int) -> dict:
        return self._json("GET", f"/tasks/{task_id}")

    def create_task(self, **fields: Any) -> dict:
        return self._json("POST", "/tasks", json=fields)

    def update_task(self, task_id: int, **fields: Any) -> None:
        self.request("PUT", f"/tasks/{task_id}", json=fields)

    def delete_task(self, task_id: int) -> None:
        self.request("DELETE", f"/tasks/{task_id}")
