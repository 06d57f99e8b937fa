"""
Tests for the uvicorn entry point and environment-driven app construction.
"""

import importlib

import pytest

import restaurant_orders.main as main_module
from restaurant_orders.core.config import get_settings
from restaurant_orders.services.orders import InMemoryOrderStore
from restaurant_orders.services.payment import MockPaymentProvider


@pytest.fixture
def environment(monkeypatch, tmp_path):
    """Settings read from a clean environment (no .env file, no Stripe keys)."""
    monkeypatch.chdir(tmp_path)
    for name in ("STRIPE_SECRET_KEY", "STRIPE_WEBHOOK_SECRET", "DEBUG"):
        monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()
    yield monkeypatch
    get_settings.cache_clear()


def test_import_builds_nothing_even_with_bad_production_config(environment):
    environment.setenv("ENV_MODE", "production")

    module = importlib.reload(main_module)

    assert not hasattr(module, "app")
    assert callable(module.app_factory)


def test_factory_refuses_production_without_keys(environment):
    environment.setenv("ENV_MODE", "production")
    environment.setenv("STORAGE_BACKEND", "memory")

    with pytest.raises(ValueError):
        main_module.app_factory()


def test_factory_builds_development_app(environment):
    environment.setenv("ENV_MODE", "development")
    environment.setenv("STORAGE_BACKEND", "memory")

    app = main_module.app_factory()

    assert isinstance(app.state.order_store, InMemoryOrderStore)
    assert isinstance(app.state.payment_provider, MockPaymentProvider)
    assert app.state.restaurants is not None
