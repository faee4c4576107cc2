"""Shared test fixtures."""

import sys
from pathlib import Path

import pytest
import respx
from tenacity import wait_none

# Add src/ to path so tests can import farmika
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from farmika.core import client  # noqa: E402
from farmika.core.config import settings  # noqa: E402
from farmika.pedigree.recommendations import invalidate_recommendations  # noqa: E402

TEST_BACKEND_URL = "https://test-project.supabase.co"


@pytest.fixture(autouse=True)
def test_settings(monkeypatch):
    """Point the client at a fake backend and skip retry backoff."""
    monkeypatch.setattr(settings, "supabase_url", TEST_BACKEND_URL)
    monkeypatch.setattr(settings, "supabase_api_key", "test-api-key")
    monkeypatch.setattr(settings, "supabase_access_token", None)
    monkeypatch.setattr(settings, "environment_class", "unconstrained")
    monkeypatch.setattr(settings, "max_recommendations", 10)
    monkeypatch.setattr(client.rest_request_with_retry.retry, "wait", wait_none())
    yield settings


@pytest.fixture(autouse=True)
def fresh_recommendation_cache():
    """Each test starts with an empty module-level recommendation cache."""
    invalidate_recommendations()
    yield
    invalidate_recommendations()


@pytest.fixture
def mock_backend():
    """Mock the hosted backend REST API."""
    with respx.mock(base_url=f"{TEST_BACKEND_URL}/rest/v1") as mock:
        yield mock


@pytest.fixture
def sample_animal_rows():
    """Raw animal rows as returned by the backend.

    SHIVA (F) and JAZZ (M) are the parents of CRIA (M). THOR (M) is CRIA's
    paternal grandfather, recorded by name only. LUNA (F) is unrelated.
    """
    return [
        {
            "id": "a-shiva",
            "name": "SHIVA",
            "species": "donkey",
            "gender": "hembra",
            "lifecycle_status": "active",
            "health_status": "healthy",
            "pedigree_max_generation": None,
            "mother_id": "",
            "father_id": None,
        },
        {
            "id": "a-jazz",
            "name": "JAZZ",
            "species": "donkey",
            "gender": "macho",
            "lifecycle_status": "active",
            "health_status": "healthy",
            "pedigree_max_generation": 2,
            "father_id": "Thor",
        },
        {
            "id": "a-cria",
            "name": "CRIA DE SHIVA Y JAZZ",
            "species": "donkey",
            "gender": "macho",
            "lifecycle_status": "active",
            "health_status": "healthy",
            "pedigree_max_generation": 1,
            "mother_id": "a-shiva",
            "father_id": "JAZZ",
            "paternal_grandfather_id": "Thor",
        },
        {
            "id": "a-thor",
            "name": "THOR",
            "species": "donkey",
            "gender": "male",
            "lifecycle_status": "deceased",
            "health_status": None,
            "pedigree_max_generation": 1,
        },
        {
            "id": "a-luna",
            "name": "LUNA",
            "species": "donkey",
            "gender": "female",
            "lifecycle_status": "active",
            "health_status": "good",
            "pedigree_max_generation": 1,
            "mother_id": "Estrella",
            "gen4_maternal_ggggf_m": "Platero",
        },
    ]
