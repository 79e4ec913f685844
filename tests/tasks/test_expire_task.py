import pytest
import structlog

from dawazon.celery_worker import celery_app
from dawazon.tasks import expire

GALAXY = "Hx9Lp2Ks4TnB"


@pytest.fixture()
def task_env(monkeypatch, session_factory, catalog, lock_service):
    monkeypatch.setattr(expire, "SessionLocal", session_factory)
    monkeypatch.setattr(expire, "ProductClient", lambda: catalog)
    monkeypatch.setattr(expire, "LockService", lambda: lock_service)


class TestExpireCheckoutsTask:
    def test_expires_abandoned_checkouts(self, task_env, cart_service, catalog):
        cart_service.add_product(3, GALAXY)
        cart_service.begin_checkout(3)
        assert catalog.stock(GALAXY) == 9

        #ujemny timeout = kazdy rozpoczety checkout jest juz przeterminowany
        assert expire.expire_checkouts_task(timeout_seconds=-1) == 1
        assert catalog.stock(GALAXY) == 10

    def test_nothing_to_expire(self, task_env, cart_service):
        cart_service.add_product(3, GALAXY)
        assert expire.expire_checkouts_task() == 0

    def test_binds_run_context_while_running(self, task_env, monkeypatch):
        seen = {}

        def fake_expire(service, timeout_seconds):
            seen.update(structlog.contextvars.get_contextvars())
            return 0

        monkeypatch.setattr(expire.CartService, "expire_stale_checkouts", fake_expire)

        assert expire.expire_checkouts_task() == 0
        assert seen["task"] == "expire_checkouts"
        assert len(seen["run_id"]) == 12
        assert structlog.contextvars.get_contextvars() == {}


class TestBeatSchedule:
    def test_cleanup_runs_every_two_minutes(self):
        entry = celery_app.conf.beat_schedule["expire-checkouts-every-2-minutes"]

        assert entry["task"] == "dawazon.tasks.expire.expire_checkouts_task"
        assert entry["schedule"] == 120.0
