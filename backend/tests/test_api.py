"""
Tests for the HTTP API.

Validates:
1. Health and series catalog endpoints
2. Combination counts
3. Ranked search results, including the reference regulator divider
4. Error mapping: parse errors 422, oversized searches 413, unknown series 422
"""

import pytest
import sys
import os

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.dirname(__file__))))

from fastapi.testclient import TestClient

from backend.main import app
from backend.models import SolveRequest
from resistor_calc import config


@pytest.fixture(scope='module')
def client():
    with TestClient(app) as c:
        yield c


class TestHealth:
    """Test the health endpoint."""

    def test_health(self, client):
        resp = client.get('/api/health')
        assert resp.status_code == 200
        assert resp.json() == {"status": "healthy", "service": "resistor-calc-backend"}


class TestSeries:
    """Test the series catalog."""

    def test_list(self, client):
        resp = client.get('/api/series')
        assert resp.status_code == 200
        series = {s['name']: s for s in resp.json()['series']}
        assert list(series) == ['E3', 'E6', 'E12', 'E24', 'E48', 'E96']
        assert series['E24']['size'] == 168
        assert series['E24']['per_decade'] == 24
        assert series['E24']['minimum'] == 1.0

    def test_get_one(self, client):
        resp = client.get('/api/series/e6')
        assert resp.status_code == 200
        body = resp.json()
        assert body['series']['name'] == 'E6'
        assert body['values'][:6] == [1.0, 1.5, 2.2, 3.3, 4.7, 6.8]

    def test_unknown(self, client):
        assert client.get('/api/series/E192').status_code == 404


class TestCombinations:
    """Test the combination count endpoint."""

    def test_reference_count(self, client):
        resp = client.post('/api/combinations', json={"slots": ["E24", "E6", "E24"]})
        assert resp.status_code == 200
        assert resp.json() == {"combinations": 1185408}

    def test_unknown_series(self, client):
        resp = client.post('/api/combinations', json={"slots": ["E24", "E7"]})
        assert resp.status_code == 422

    def test_no_slots_rejected(self, client):
        resp = client.post('/api/combinations', json={"slots": []})
        assert resp.status_code == 422


class TestSolve:
    """Test the search endpoint."""

    def test_reference_divider(self, client):
        resp = client.post('/api/solve', json={
            "slots": ["E24", "E6", "E24"],
            "bounds": [
                "R1+R2+R3 <= 1e6",
                "R1+R2+R3 >= 1e4",
                "0.8*(1+R1/R3) ~ 6.0",
                "0.8*(1+(R1+R2)/R3) ~ 12.0",
            ],
            "top_k": 2,
            "workers": 2,
        })
        assert resp.status_code == 200
        body = resp.json()
        assert body['combinations'] == 1185408
        assert body['complete'] is True
        first, second = body['results']
        assert first['rank'] == 1
        assert first['error'] == 0.0
        assert [v['display'] for v in first['values']] == ['13K', '15K', '2K']
        assert [v['value'] for v in second['values']] == [130000.0, 150000.0, 20000.0]

    def test_ties_in_order(self, client):
        resp = client.post('/api/solve', json={"slots": ["E3", "E3"], "bounds": ["R1 + R2 ~ 500"], "top_k": 2})
        assert resp.status_code == 200
        results = resp.json()['results']
        assert [r['error'] for r in results] == [8.0, 8.0]
        assert [v['display'] for v in results[0]['values']] == ['22R', '470R']
        assert results[0]['index'] < results[1]['index']

    def test_custom_names(self, client):
        resp = client.post('/api/solve', json={
            "slots": ["E6", "E6"], "names": ["A1", "B1"], "bounds": ["A1 / B1 ~ 2.2"], "top_k": 1,
        })
        assert resp.status_code == 200
        assert [v['name'] for v in resp.json()['results'][0]['values']] == ['A1', 'B1']

    def test_parse_error(self, client):
        resp = client.post('/api/solve', json={"slots": ["E6"], "bounds": ["R1 <> 10"]})
        assert resp.status_code == 422
        detail = resp.json()['detail']
        assert detail['kind'] == 'unknown_token'
        assert detail['position'] == 3
        assert detail['bound'] == 'R1 <> 10'

    def test_unbound_variable(self, client):
        resp = client.post('/api/solve', json={"slots": ["E6"], "bounds": ["R2 ~ 10"]})
        assert resp.status_code == 422
        assert 'R2' in resp.json()['detail']

    def test_division_by_zero(self, client):
        resp = client.post('/api/solve', json={"slots": ["E3", "E3"], "bounds": ["R1 / (R1 - R2) ~ 1"]})
        assert resp.status_code == 422
        assert 'division by zero' in resp.json()['detail']

    def test_too_many_combinations(self, client):
        resp = client.post('/api/solve', json={"slots": ["E96", "E96", "E96"], "bounds": ["R1 ~ R2"]})
        assert resp.status_code == 413

    def test_top_k_limits(self, client):
        resp = client.post('/api/solve', json={"slots": ["E6"], "bounds": ["R1 ~ 1"], "top_k": 0})
        assert resp.status_code == 422

    def test_default_top_k_from_config(self, client):
        """Omitting top_k returns RCALC_TOP_K results."""
        resp = client.post('/api/solve', json={"slots": ["E6", "E6"], "bounds": ["R1 ~ R2"]})
        assert resp.status_code == 200
        assert len(resp.json()['results']) == min(config.DEFAULT_TOP_K, 42 * 42)
        assert SolveRequest(slots=["E6"], bounds=["R1 ~ 1"]).top_k == config.DEFAULT_TOP_K
