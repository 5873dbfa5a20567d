import pytest
import requests

from fleetops.kpi.client import KpiClient, KpiClientError


class FakeResponse:
    def __init__(self, status=200, body=None):
        self.status_code = status
        self._body = body

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")

    def json(self):
        if self._body is None:
            raise ValueError("no json")
        return self._body


class FakeSession:
    def __init__(self, response):
        self.headers = {}
        self.response = response
        self.requests = []

    def request(self, method, url, **kwargs):
        self.requests.append((method, url, kwargs))
        return self.response


def test_aggregated_returns_kpi_metrics():
    session = FakeSession(FakeResponse(body={"isSuccessful": True, "result": {"kpiMetrics": {"otd": {"actual": 1}}}}))
    c = KpiClient(base_url="http://kpi.local/", token="tok", timeout=5, session=session)
    assert c.get_aggregated("2024-01-01", "2024-02-01", transporter_numbers=["T1"]) == {"otd": {"actual": 1}}

    method, url, kwargs = session.requests[0]
    assert method == "POST"
    assert url.startswith("http://kpi.local/api/")
    assert kwargs["json"] == {"startDate": "2024-01-01", "endDate": "2024-02-01", "transporterNumbers": ["T1"]}
    assert kwargs["timeout"] == 5
    assert session.headers["Authorization"] == "Bearer tok"


def test_aggregated_without_metrics_is_empty():
    session = FakeSession(FakeResponse(body={"isSuccessful": True, "result": None}))
    assert KpiClient(base_url="http://kpi.local", token="", session=session).get_aggregated("a", "b") == {}


def test_history_request():
    session = FakeSession(FakeResponse(body={"result": {"history": []}}))
    c = KpiClient(base_url="http://kpi.local", token=None, session=session)
    assert c.get_history("T1", "HRD", "2024-01-01", "2024-02-01", window_days=7) == {"history": []}

    method, url, kwargs = session.requests[0]
    assert (method, url) == ("GET", "http://kpi.local/api/v1/kpi/rankings/T1/history")
    assert kwargs["params"] == {"kpiType": "HRD", "startDate": "2024-01-01", "endDate": "2024-02-01", "windowDays": 7}
    assert "Authorization" not in session.headers


def test_unsuccessful_envelope_raises():
    session = FakeSession(FakeResponse(body={"isSuccessful": False, "message": "No access"}))
    with pytest.raises(KpiClientError, match="No access"):
        KpiClient(base_url="http://kpi.local", session=session).get_history("T1", "HRD", "a", "b")


@pytest.mark.parametrize("response", [FakeResponse(status=500, body={}), FakeResponse(body=None)])
def test_transport_errors_raise(response):
    with pytest.raises(KpiClientError):
        KpiClient(base_url="http://kpi.local", session=FakeSession(response)).get_aggregated("a", "b")
