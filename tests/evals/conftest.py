import pytest

def pytest_collection_modifyitems(items):
    """Mark the complete coefficient searches in the evals directory as slow."""
    for item in items:
        if "/evals/" in item.nodeid or "\\evals\\" in item.nodeid:
            item.add_marker(pytest.mark.slow)
