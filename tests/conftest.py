from pathlib import Path

import pytest
import yaml

from oas_validator.cache import SpecCache
from oas_validator.spec.loader import SpecLoader
from oas_validator.spec.swagger import build_document

FIXTURES = Path(__file__).parent / "fixtures"


@pytest.fixture
def items_doc():
    return build_document(yaml.safe_load((FIXTURES / "items.yaml").read_text(encoding="utf-8")))


@pytest.fixture
def orders_doc():
    return build_document(yaml.safe_load((FIXTURES / "orders.json").read_text(encoding="utf-8")))


@pytest.fixture
def cache():
    """A fresh cache whose loader finds specs in tests/fixtures."""
    return SpecCache(loader=SpecLoader(fetch_timeout=5.0, resource_dir=FIXTURES))
