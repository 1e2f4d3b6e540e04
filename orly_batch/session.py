from orly_batch import config
from orly_batch.exceptions import (
    AuthenticationError,
    HttpRequestError,
    NetworkConnectionError,
    UserAccountError
)


class SessionVerifier:
    """
    Checks that exported SSO cookies still open a valid session before any
    container is started. Nothing is logged in here: a rejected session is
    reported and the run stops.
    """

    def __init__(self, http_client, display):
        self.http_client = http_client
        self.display = display

    def verify(self, session_cookies):
        self.http_client.session.cookies.update(session_cookies.as_dict())
        self.display.info("Verifying session...", state=True)
        try:
            response = self.http_client.get(config.PROFILE_URL, perform_redirect=False, expected_status_codes=[200])
        except NetworkConnectionError as e:
            raise AuthenticationError(f"Session check failed: Unable to reach profile page. Network error: {e}") from e
        except HttpRequestError as e:
            if e.status_code in (401, 403) or (e.status_code and 300 <= e.status_code < 400):
                raise AuthenticationError(
                    f"Session invalid or expired. Export fresh cookies. Status: {e.status_code}"
                ) from e
            raise AuthenticationError(f"Session check failed: Unable to access profile page. Status: {e.status_code}") from e

        if "user_type\":\"Expired\"" in response.text:
            raise UserAccountError("Account subscription has expired.")
        self.display.info("Session is valid.", state=True)
