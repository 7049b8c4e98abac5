from app.settings import Settings, load_settings, parse_datum_grids


def test_parse_datum_grids():
    grids = parse_datum_grids(" NAD27>NAD83=/grids/ntv2_0.gsb; broken ;X>=p; >Y=q;DHDN > ETRS89 = /grids/BETA2007.gsb;")
    assert grids == {
        ("nad27", "nad83"): "/grids/ntv2_0.gsb",
        ("dhdn", "etrs89"): "/grids/BETA2007.gsb",
    }
    assert parse_datum_grids(None) == {}


def test_load_settings_defaults(monkeypatch):
    for name in (
        "LOG_LEVEL",
        "ENABLE_JSON_LOGS",
        "CRS_CATALOG_PATH",
        "CRS_NTV2_GRIDS",
        "CRS_REGISTRY_TIMEOUT",
        "CRS_MAX_POINTS",
        "REDIS_URL",
        "CACHE_DISABLE",
        "CACHE_PREFIX",
        "CACHE_TTL_SECONDS",
    ):
        monkeypatch.delenv(name, raising=False)
    assert load_settings() == Settings()


def test_load_settings_from_environment(monkeypatch):
    monkeypatch.setenv("LOG_LEVEL", "debug")
    monkeypatch.setenv("ENABLE_JSON_LOGS", "0")
    monkeypatch.setenv("CRS_CATALOG_PATH", "/data/catalog.txt")
    monkeypatch.setenv("CRS_NTV2_GRIDS", "NAD27>NAD83=/grids/ntv2_0.gsb")
    monkeypatch.setenv("CRS_REGISTRY_TIMEOUT", "5")
    monkeypatch.setenv("CRS_MAX_POINTS", "500")
    settings = load_settings()
    assert settings.log_level == "DEBUG"
    assert settings.json_logs is False
    assert settings.catalog_path == "/data/catalog.txt"
    assert settings.datum_grids == {("nad27", "nad83"): "/grids/ntv2_0.gsb"}
    assert settings.registry_timeout == 5.0
    assert settings.max_points == 500


def test_bad_numbers_fall_back_to_defaults(monkeypatch):
    monkeypatch.setenv("CRS_REGISTRY_TIMEOUT", "soon")
    monkeypatch.setenv("CRS_MAX_POINTS", "lots")
    settings = load_settings()
    assert settings.registry_timeout == 30.0
    assert settings.max_points == 100_000


def test_cache_settings(monkeypatch):
    monkeypatch.delenv("CACHE_DISABLE", raising=False)
    monkeypatch.setenv("REDIS_URL", "redis://localhost:6379/1")
    monkeypatch.setenv("CACHE_PREFIX", "geo")
    monkeypatch.setenv("CACHE_TTL_SECONDS", "60")
    settings = load_settings()
    assert settings.cache_enabled
    assert (settings.cache_prefix, settings.cache_ttl) == ("geo", 60)

    monkeypatch.setenv("CACHE_DISABLE", "1")
    assert not load_settings().cache_enabled
    assert not Settings().cache_enabled
