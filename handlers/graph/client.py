# ================================================================
# File     : client.py
# Purpose  : Microsoft Graph API read-only client for Entra (Azure AD)
# Notes    : Read-only: GET + pagination + retries. No destructive ops.
#            - App-only (client secret) or delegated (device code) auth
#            - Auto-refresh token on 401
#            - Proactive refresh if token expires in <5 minutes
#            - One requests.Session per client; close() when done
# ================================================================

import os
import time
import threading
import msal
import requests
from typing import Dict, Any, List, Optional
from core.utils import fncPrintMessage, fncRetry

GRAPH_ROOT = "https://graph.microsoft.com/v1.0"
DEFAULT_AUTHORITY = "https://login.microsoftonline.com"

APP_SCOPES = ["https://graph.microsoft.com/.default"]
DELEGATED_SCOPES = [
    "https://graph.microsoft.com/User.Read",
    "https://graph.microsoft.com/Directory.Read.All",
    "https://graph.microsoft.com/RoleManagement.Read.Directory",
    "https://graph.microsoft.com/AdministrativeUnit.Read.All",
]


class GraphError(Exception):
    """Graph request failed; status is the HTTP status (0 if none)."""

    def __init__(self, message: str, status: int = 0):
        super().__init__(message)
        self.status = status


class GraphNotFound(GraphError):
    pass


class GraphForbidden(GraphError):
    pass


class GraphServiceError(GraphError):
    pass


class GraphAuthError(GraphError):
    pass


# Faults worth another attempt; 4xx answers are final.
TRANSIENT_ERRORS = (GraphServiceError, requests.ConnectionError, requests.Timeout)


class GraphClient:
    def __init__(
        self,
        tenant_id: Optional[str] = None,
        client_id: Optional[str] = None,
        client_secret: Optional[str] = None,
        authority: Optional[str] = None,
        session: Optional[requests.Session] = None,
        app=None,
    ):
        tenant_id = tenant_id or os.getenv("ROLEHOUND_TENANT_ID")
        client_id = client_id or os.getenv("ROLEHOUND_CLIENT_ID")
        client_secret = client_secret or os.getenv("ROLEHOUND_CLIENT_SECRET")

        # Prompt interactively if any identifier is missing
        if not tenant_id:
            tenant_id = input("Enter Tenant ID: ").strip()
        if not client_id:
            client_id = input("Enter Application (Client) ID: ").strip()

        self.tenant_id = tenant_id
        self.client_id = client_id
        self.delegated = not client_secret
        self.authority = f"{(authority or DEFAULT_AUTHORITY).rstrip('/')}/{tenant_id}"
        self.scope = DELEGATED_SCOPES if self.delegated else APP_SCOPES

        fncPrintMessage("Initialising Microsoft Graph (read-only) client...", "info")

        if app is not None:
            self.app = app
        elif self.delegated:
            fncPrintMessage("No client secret configured — using delegated sign-in (device code).", "warn")
            self.app = msal.PublicClientApplication(client_id=client_id, authority=self.authority)
        else:
            self.app = msal.ConfidentialClientApplication(
                client_id=client_id,
                client_credential=client_secret,
                authority=self.authority,
            )

        self.session = session or requests.Session()
        self._token_lock = threading.Lock()

        # token/bookkeeping
        self.token: str = ""
        self._token_expires_on: int = 0  # epoch seconds
        self._set_token(self._acquire_token())

        fncPrintMessage("GraphClient initialised (read-only).", "success")

    # ---------- Lifecycle ----------

    def close(self) -> None:
        self.session.close()
        fncPrintMessage("Graph session closed.", "debug")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False

    # ---------- Token helpers ----------

    def _acquire_token(self) -> Dict[str, Any]:
        """Acquire a token using MSAL (silent first). Returns the MSAL result dict."""
        fncPrintMessage("Requesting Microsoft Graph access token...", "debug")
        result = None
        if self.delegated:
            accounts = self.app.get_accounts()
            if accounts:
                result = self.app.acquire_token_silent(self.scope, account=accounts[0])
            if not result:
                flow = self.app.initiate_device_flow(scopes=self.scope)
                if "user_code" not in flow:
                    raise GraphAuthError(f"Failed to start device flow: {flow.get('error_description', flow)}")
                fncPrintMessage(flow.get("message") or f"Sign in at {flow['verification_uri']} with code {flow['user_code']}", "info")
                result = self.app.acquire_token_by_device_flow(flow)
        else:
            result = self.app.acquire_token_silent(self.scope, account=None)
            if not result:
                result = self.app.acquire_token_for_client(scopes=self.scope)

        if not result or "access_token" not in result:
            reason = (result or {}).get("error_description", "Unknown error")
            fncPrintMessage(f"MSAL Authentication failed: {reason}", "error")
            raise GraphAuthError("Failed to acquire access token")
        return result

    def _set_token(self, msal_result: Dict[str, Any]) -> None:
        """Store token and expiry from MSAL result."""
        self.token = msal_result["access_token"]
        try:
            self._token_expires_on = int(msal_result.get("expires_on") or 0)
        except (TypeError, ValueError):
            self._token_expires_on = 0
        if not self._token_expires_on:
            self._token_expires_on = int(time.time()) + int(msal_result.get("expires_in", 3600))

    def _ensure_fresh_token(self) -> None:
        """Proactively refresh token if it expires in <5 minutes."""
        with self._token_lock:
            if int(time.time()) >= (self._token_expires_on - 300):
                fncPrintMessage("Refreshing access token (nearing expiry)...", "debug")
                self._set_token(self._acquire_token())

    def _auth_headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self.token}",
            "Accept": "application/json",
        }

    # ---------- HTTP handling ----------

    def _handle_response(self, response: requests.Response, retried: bool = False) -> Dict[str, Any]:
        status = response.status_code

        if status == 200:
            return response.json()

        # Rate limit
        if status == 429 and not retried:
            retry_after = int(response.headers.get("Retry-After", 5))
            fncPrintMessage(f"Rate limit hit. Sleeping for {retry_after}s...", "warn")
            time.sleep(retry_after)
            resp = self.session.get(response.request.url, headers=self._auth_headers())
            return self._handle_response(resp, retried=True)

        # Unauthorized (refresh and retry once)
        if status == 401 and not retried:
            try:
                err = response.json().get("error") or {}
            except ValueError:
                err = {}
            code = err.get("code") or ""
            msg = err.get("message") or ""
            if "InvalidAuthenticationToken" in code or "expired" in str(msg).lower():
                fncPrintMessage("Access token expired, Attempting Refresh.", "warn")
                with self._token_lock:
                    self._set_token(self._acquire_token())
                resp = self.session.get(response.request.url, headers=self._auth_headers())
                return self._handle_response(resp, retried=True)

        if status >= 400:
            fncPrintMessage(f"Graph API Error [{status}] -> {response.text}", "debug")
            message = f"Graph API request failed with status {status}: {response.request.url}"
            if status == 404:
                raise GraphNotFound(message, status)
            if status in (401, 403):
                raise GraphForbidden(message, status)
            if status >= 500 or status == 429:
                raise GraphServiceError(message, status)
            raise GraphError(message, status)

        # Fallback
        try:
            return response.json()
        except ValueError:
            return {"status": status, "text": response.text}

    def _request(self, url: str, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """Single GET with proactive token refresh and 401 auto-refresh retry."""
        self._ensure_fresh_token()
        resp = self.session.get(url, headers=self._auth_headers(), params=params)
        return self._handle_response(resp)

    # ---------- Public API ----------

    def get(self, endpoint: str, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """
        Perform a GET request to a Graph endpoint (single resource / page).
        Use get_all for paginated resources.
        """
        url = f"{GRAPH_ROOT}/{endpoint.strip().lstrip('/')}"
        fncPrintMessage(f"GET {url}", "debug")
        return fncRetry(lambda: self._request(url, params=params), exceptions=TRANSIENT_ERRORS)

    def get_all(self, endpoint: str, params: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
        """
        Retrieve all items from a paginated Graph endpoint.
        Returns a flat list of items (value) for list endpoints.
        Example: client.get_all("directory/administrativeUnits/{id}/members")
        """
        url = f"{GRAPH_ROOT}/{endpoint.strip().lstrip('/')}"
        fncPrintMessage(f"GET (all pages) {url}", "debug")

        data = fncRetry(lambda: self._request(url, params=params), exceptions=TRANSIENT_ERRORS)
        if not isinstance(data, dict):
            return []
        if "value" not in data:
            return [data]

        items: List[Dict[str, Any]] = list(data.get("value") or [])
        next_link = data.get("@odata.nextLink")
        while next_link:
            fncPrintMessage(f"Following nextLink -> {next_link}", "debug")
            page = fncRetry(lambda: self._request(next_link), exceptions=TRANSIENT_ERRORS)
            if not isinstance(page, dict):
                break
            items.extend(page.get("value") or [])
            next_link = page.get("@odata.nextLink")

        return items
