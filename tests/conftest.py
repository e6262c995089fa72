import sys
from datetime import date
from pathlib import Path

import pytest

# Ensure `src` is importable when running tests from repo root.
ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

TODAY = date(2025, 6, 2)


@pytest.fixture(autouse=True)
def fresh_catalog_cache(monkeypatch):
    from kostennote.core.services import tariff_catalog

    monkeypatch.delenv(tariff_catalog.TARIFF_DIR_ENV, raising=False)
    tariff_catalog.clear_catalog_cache()
    yield
    tariff_catalog.clear_catalog_cache()


@pytest.fixture
def catalog():
    from kostennote.core.services.tariff_catalog import load_catalog

    return load_catalog()


@pytest.fixture
def period(catalog):
    from kostennote.core.services.tariff_catalog import ratg_period_for

    return ratg_period_for(TODAY, catalog)


@pytest.fixture
def court_schedule(catalog):
    from kostennote.core.services.tariff_catalog import court_fee_schedule_for

    return court_fee_schedule_for(TODAY, catalog)


@pytest.fixture
def case():
    """Civil case at 5.000 € without co-litigants."""
    from kostennote.core.models.case import CaseParameters

    return CaseParameters(base_cents=500_000)


@pytest.fixture
def make_service():
    from kostennote.core.models.service import Service

    counter = iter(range(1, 1000))

    def factory(service_type, **kwargs):
        kwargs.setdefault("id", f"s{next(counter)}")
        kwargs.setdefault("date", TODAY)
        kwargs.setdefault("label", str(service_type))
        return Service(type=service_type, **kwargs)

    return factory
