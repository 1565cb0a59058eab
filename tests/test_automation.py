from spewn import db
from spewn.utils.automation import ensure_monthly_automation, is_automation_due
from spewn.utils.distribution import current_month

from tests.conftest import get_user

BALANCED = {'savings': 30, 'parents_preserve': 10, 'extras_buffer': 10, 'wants': 15, 'needs': 35}


def _automated(user, salary=50000):
    user.salary = salary
    user.splits = BALANCED
    user.automate = True
    user.last_automated_month = ''
    db.session.commit()
    return user


def test_sweep_runs_once_per_month(user):
    _automated(user)

    assert ensure_monthly_automation(user, '2026-10') is True
    assert user.distribution == {
        'savings': 15000, 'parents_preserve': 5000, 'extras_buffer': 5000, 'wants': 7500, 'needs': 17500
    }
    assert user.last_automated_month == '2026-10'

    # Salary changes mid-month do not trigger a second run
    user.salary = 90000
    db.session.commit()
    assert ensure_monthly_automation(user, '2026-10') is False
    assert user.distribution['savings'] == 15000


def test_sweep_runs_again_in_a_new_month(user):
    _automated(user)
    ensure_monthly_automation(user, '2026-10')

    user.salary = 60000
    db.session.commit()
    assert ensure_monthly_automation(user, '2026-11') is True
    assert user.distribution['savings'] == 18000
    assert user.last_automated_month == '2026-11'


def test_sweep_is_noop_without_automation(user):
    user.salary = 50000
    user.splits = BALANCED
    user.distribution = {'savings': 1}
    db.session.commit()

    assert is_automation_due(user, '2026-10') is False
    assert ensure_monthly_automation(user, '2026-10') is False
    assert user.distribution == {'savings': 1}
    assert user.last_automated_month == ''


def test_sweep_ignores_extra_income(user):
    _automated(user)
    user.extra_income = 10000
    db.session.commit()

    ensure_monthly_automation(user, '2026-10')
    assert user.distribution['needs'] == 17500


def test_me_runs_sweep_for_current_month(app, auth_client):
    auth_client.put('/api/profile', json={'salary': 40000, 'splits': BALANCED, 'automate': True})

    resp = auth_client.get('/api/auth/me')
    assert resp.status_code == 200
    body = resp.get_json()
    assert body['lastAutomatedMonth'] == current_month()
    assert body['distribution']['savings'] == 12000

    stored = get_user(app)
    assert stored.last_automated_month == current_month()


def test_me_survives_sweep_failure(app, auth_client, monkeypatch):
    auth_client.put('/api/profile', json={'salary': 40000, 'splits': BALANCED, 'automate': True})

    def broken(user, month=None):
        raise RuntimeError('store unavailable')

    monkeypatch.setattr('spewn.routes.auth.ensure_monthly_automation', broken)

    resp = auth_client.get('/api/auth/me')
    assert resp.status_code == 200
    body = resp.get_json()
    assert body['salary'] == 40000
    assert body['lastAutomatedMonth'] == ''
    assert body['distribution'] is None
