import requests
from orly_batch.exceptions import NetworkConnectionError, HttpRequestError
import orly_batch.config as config


class HttpClient:
    def __init__(self, timeout=30):
        self.session = requests.Session()
        self.session.headers.update(config.DEFAULT_REQUEST_HEADERS)
        self.timeout = timeout

    def request(self, method, url, perform_redirect=True, check_status_code=True,
                expected_status_codes=None, **kwargs):
        """
        Generic request method.
        `expected_status_codes`: A list of integers. If provided, `check_status_code` will
                                 validate against this list. Otherwise, it checks for 2xx.
        """
        kwargs["allow_redirects"] = perform_redirect
        kwargs.setdefault("timeout", self.timeout)

        try:
            response = self.session.request(method, url, **kwargs)
        except requests.RequestException as e:
            raise NetworkConnectionError(f"Network connection error for {method} {url}: {e}") from e

        if check_status_code:
            if expected_status_codes:
                is_success = response.status_code in expected_status_codes
            else:
                is_success = 200 <= response.status_code < 300

            if not is_success:
                raise HttpRequestError(
                    f"Unexpected status code {response.status_code} for {method} {url}.",
                    status_code=response.status_code,
                    response_text=response.text
                )

        return response

    def get(self, url, **kwargs):
        return self.request("GET", url, **kwargs)
