"""
Unit tests for the API endpoints.
"""

import pytest
from unittest.mock import Mock, patch
from fastapi.testclient import TestClient

from recorddedup.main import app
from recorddedup.core.detection import DetectionCancelled
from recorddedup.services.deduplication_service import DeduplicationService


HEALTHCARE_RECORDS = [
    {"Title": "Deep Learning in Healthcare", "Doi": "10.1/a"},
    {"Title": "Deep Learning in Health Care", "Doi": "10.1/b"},
    {"Title": "Unrelated Topic", "Doi": "10.1/c"},
]


class TestHealthEndpoint:
    """Test the health endpoint."""

    def setup_method(self):
        self.client = TestClient(app)

    def test_health(self):
        response = self.client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"


class TestDuplicatesEndpoint:
    """Test the /duplicates endpoint."""

    def setup_method(self):
        """Setup test fixtures."""
        self.client = TestClient(app)

    def test_find_duplicates(self):
        response = self.client.post("/duplicates", json={
            "records": HEALTHCARE_RECORDS, "keys": ["Title"], "threshold": 85
        })

        assert response.status_code == 200
        data = response.json()
        assert data["summary"]["total_records"] == 3
        assert data["summary"]["clean_records"] == 2
        assert len(data["duplicates"]) == 1

        pair = data["duplicates"][0]
        assert pair["index1"] == 0
        assert pair["index2"] == 1
        assert pair["similarity"] >= 85
        assert pair["record2"]["Doi"] == "10.1/b"

    def test_article_kind_defaults_to_title(self):
        response = self.client.post("/duplicates", json={
            "records": HEALTHCARE_RECORDS, "kind": "article"
        })
        assert response.status_code == 200
        assert len(response.json()["duplicates"]) == 1

    def test_empty_records(self):
        response = self.client.post("/duplicates", json={"records": [], "keys": ["Title"]})
        assert response.status_code == 200
        assert response.json()["duplicates"] == []

    def test_missing_keys_for_general_records(self):
        response = self.client.post("/duplicates", json={"records": HEALTHCARE_RECORDS})
        assert response.status_code == 400
        assert "comparison_keys" in response.json()["detail"]

    def test_invalid_threshold(self):
        response = self.client.post("/duplicates", json={
            "records": HEALTHCARE_RECORDS, "keys": ["Title"], "threshold": 150
        })
        assert response.status_code == 400

    def test_unknown_algorithm(self):
        response = self.client.post("/duplicates", json={
            "records": HEALTHCARE_RECORDS, "keys": ["Title"], "algorithm": "nope"
        })
        assert response.status_code == 500
        assert "Scorer unavailable" in response.json()["detail"]

    def test_malformed_body(self):
        response = self.client.post("/duplicates", json={"records": "not a list"})
        assert response.status_code == 422

    def test_get_not_allowed(self):
        response = self.client.get("/duplicates")
        assert response.status_code == 405

    @patch('recorddedup.main.DeduplicationService')
    def test_timeout(self, mock_service_class):
        """Test that a cancelled run maps to 408."""
        mock_service = Mock()
        mock_service_class.return_value = mock_service

        async def cancelled(*args, **kwargs):
            raise DetectionCancelled("Detection cancelled after 3 of 9 batches")

        mock_service.find_duplicates_async.side_effect = cancelled

        response = self.client.post("/duplicates", json={"records": HEALTHCARE_RECORDS, "keys": ["Title"]})
        assert response.status_code == 408

    @patch('recorddedup.main.DeduplicationService')
    def test_unexpected_error(self, mock_service_class):
        mock_service = Mock()
        mock_service_class.return_value = mock_service

        async def broken(*args, **kwargs):
            raise RuntimeError("boom")

        mock_service.find_duplicates_async.side_effect = broken

        response = self.client.post("/duplicates", json={"records": HEALTHCARE_RECORDS, "keys": ["Title"]})
        assert response.status_code == 500
        assert response.json()["detail"] == "Failed to find duplicates"


class TestDeduplicateEndpoint:
    """Test the /deduplicate endpoint."""

    def setup_method(self):
        self.client = TestClient(app)

    def test_deduplicate(self):
        response = self.client.post("/deduplicate", json={
            "records": HEALTHCARE_RECORDS, "keys": ["Title"], "threshold": 85
        })

        assert response.status_code == 200
        data = response.json()
        assert data["records"] == [HEALTHCARE_RECORDS[0], HEALTHCARE_RECORDS[2]]
        assert len(data["duplicates"]) == 1

    @patch('recorddedup.main.DeduplicationService')
    def test_capped_report_still_removes_every_duplicate(self, mock_service_class):
        """Test that survivors come from all matches, not the capped list."""
        mock_service_class.side_effect = lambda **kwargs: DeduplicationService(
            max_matches_per_record=3, **kwargs
        )
        original = "a" * 60
        records = [{"Title": original}] + [
            {"Title": original[:i] + "b" + original[i + 1:]} for i in range(6)
        ]

        response = self.client.post("/deduplicate", json={
            "records": records, "keys": ["Title"], "threshold": 98
        })

        assert response.status_code == 200
        data = response.json()
        assert data["records"] == [records[0]]
        assert len(data["duplicates"]) == 3
        assert data["summary"]["total_duplicates_found"] == 6
        assert data["summary"]["clean_records"] == 1

    @pytest.mark.parametrize("threshold,expected", [(100, 2), (0, 1)])
    def test_threshold_changes_survivors(self, threshold, expected):
        records = [{"Title": "X"}, {"Title": "x"}]
        response = self.client.post("/deduplicate", json={
            "records": records, "keys": ["Title"], "threshold": threshold
        })
        assert response.status_code == 200
        assert len(response.json()["records"]) == expected
