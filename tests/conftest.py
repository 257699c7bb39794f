"""
Shared pytest fixtures for bracket manager tests.

Running tests:
    pytest tests/
"""
import pytest
import random
import sys
import os

# Add src directory to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))


@pytest.fixture
def client():
    """Create a test client."""
    from app import app
    app.config['TESTING'] = True
    with app.test_client() as client:
        yield client


@pytest.fixture
def temp_data_dir(tmp_path, monkeypatch):
    """Point the app's data files at a temporary directory."""
    import app as app_module

    data_dir = tmp_path / "data"
    monkeypatch.setattr(app_module, 'DATA_DIR', str(data_dir))
    monkeypatch.setattr(app_module, 'TOURNAMENTS_FILE', str(data_dir / "tournaments.yaml"))
    monkeypatch.setattr(app_module, 'TOURNAMENTS_DIR', str(data_dir / "tournaments"))
    return data_dir


@pytest.fixture
def letters():
    """Return a function giving the first n capital letters as names."""
    def _letters(n):
        return [chr(ord('A') + i) for i in range(n)]
    return _letters


@pytest.fixture
def rng():
    """Seeded random source for deterministic 'random' seeding."""
    return random.Random(1234)
