from designs.main import create_app
from fastapi.testclient import TestClient
from shared.core.health import HealthStatus, check_database, check_redis, overall_status


def test_health(client):
    resp = client.get('/health')
    assert resp.status_code == 200
    body = resp.json()
    assert body['status'] == 'pass'
    assert body['service'] == 'designs-service'


def test_liveness(client):
    assert client.get('/health/live').json() == {'status': 'alive'}


def test_readiness_checks_database(client):
    resp = client.get('/health/ready')
    assert resp.status_code in (200, 503)
    checks = resp.json()['checks']
    assert checks['database:connectivity']['status'] == 'pass'


def test_startup_without_migrations_warns(client):
    # create_all was used, so alembic's version table is missing
    resp = client.get('/health/startup')
    assert resp.status_code == 200
    assert resp.json()['checks']['database:migrations']['status'] == 'warn'


def test_metrics(client):
    body = client.get('/metrics').json()
    assert body['service'] == 'designs-service'
    assert 'uptime_seconds' in body


def test_api_health(client):
    assert client.get('/api/health').json() == {'ok': True}


def test_info(client):
    body = client.get('/info').json()
    assert body['endpoints']['designs'] == '/api/designs'


def test_overall_status_takes_the_worst_check():
    passed = {'status': HealthStatus.PASS}
    warned = {'status': HealthStatus.WARN}
    failed = {'status': HealthStatus.FAIL}
    assert overall_status({'a': passed}) is HealthStatus.PASS
    assert overall_status({'a': passed, 'b': warned}) is HealthStatus.WARN
    assert overall_status({'a': warned, 'b': failed}) is HealthStatus.FAIL


def test_database_check_without_engine_fails():
    check = check_database(None)
    assert check['status'] is HealthStatus.FAIL
    assert check['output'] == 'database not configured'


def test_unreachable_cache_only_warns():
    check = check_redis('redis://127.0.0.1:1/0')
    assert check['status'] is HealthStatus.WARN
    assert check['componentType'] == 'cache'


def test_readiness_reports_cache_when_configured(settings, database):
    settings.REDIS_URL = 'redis://127.0.0.1:1/0'
    settings.RELEASE_ID = 'r42'
    client = TestClient(create_app(settings=settings, database=database))
    body = client.get('/health/ready').json()
    assert body['releaseId'] == 'r42'
    assert body['checks']['cache:connectivity']['status'] == 'warn'
    assert body['checks']['database:connectivity']['status'] == 'pass'
