from survey_dashboard.server import ServerFactory
from survey_dashboard import config


def test_health_endpoint(flask_client):
    rv = flask_client.get("/health")
    assert rv.status_code == 200
    js = rv.get_json()
    assert js["status"] == "ok"
    assert "time" in js


def test_server_factory_title_and_cache():
    settings = config.get_settings()
    factory = ServerFactory(settings)
    server = factory.create_server()
    cache = factory.create_cache(server)
    app = factory.create_app(server)
    # Dash app title comes from settings
    assert app.title == settings.app_title
    # Cache configured type matches settings
    assert cache.config.get("CACHE_TYPE") == settings.cache_type


def test_index_serves_dash_page(flask_client):
    rv = flask_client.get("/")
    assert rv.status_code == 200
    assert b"Survey Insights" in rv.data


def test_layout_endpoint_lists_cards(flask_client):
    rv = flask_client.get("/_dash-layout")
    assert rv.status_code == 200
    body = rv.get_data(as_text=True)
    for k in ("choice", "nps", "csat"):
        assert f"{k}-graph" in body
