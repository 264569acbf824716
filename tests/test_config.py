"""Settings parsing."""

from tourdesk.config import Settings


def test_sync_url_drops_async_driver():
    settings = Settings(database_url="postgresql+asyncpg://tourdesk:secret@db:5432/tourdesk")
    assert settings.sync_database_url == "postgresql://tourdesk:secret@db:5432/tourdesk"


def test_sync_url_keeps_other_drivers():
    settings = Settings(database_url="sqlite+aiosqlite://")
    assert settings.sync_database_url == "sqlite+aiosqlite://"


def test_currencies_are_upper_cased():
    settings = Settings(cost_currency="try", sell_currency="eur")
    assert (settings.cost_currency, settings.sell_currency) == ("TRY", "EUR")


def test_cors_origins_from_comma_list():
    settings = Settings(cors_origins="http://a.test, http://b.test")
    assert settings.cors_origins == ["http://a.test", "http://b.test"]
