import pytest

from spewn.models.salary_history import SalaryHistory
from spewn.utils.distribution import current_month

from tests.conftest import get_user

BALANCED = {'savings': 30, 'parents_preserve': 10, 'extras_buffer': 10, 'wants': 15, 'needs': 35}
AGGRESSIVE = {'savings': 40, 'parents_preserve': 5, 'extras_buffer': 10, 'wants': 20, 'needs': 25}


def start_cycle(client, month, salary=50000, **extra):
    body = {'salary': salary, 'splits': BALANCED, 'startMonth': month, 'startNewCycle': True}
    body.update(extra)
    return client.put('/api/profile', json=body)


def test_start_cycle_sets_lock_and_distribution(auth_client):
    resp = start_cycle(auth_client, '2026-01', extraIncome=5000, preset='balanced')
    assert resp.status_code == 200
    body = resp.get_json()

    assert body['salary'] == 50000
    assert body['startMonth'] == '2026-01'
    assert body['salaryLockedMonth'] == '2026-01'
    assert body['onboardComplete'] is True
    assert body['distribution'] == {
        'savings': 16500, 'parents_preserve': 5500, 'extras_buffer': 5500, 'wants': 8250, 'needs': 19250
    }
    assert len(body['salaryHistory']) == 1
    assert body['salaryHistory'][0]['salary'] == 0
    assert body['salaryHistory'][0]['startMonth'] == ''


def test_same_month_cycle_is_locked(auth_client):
    assert start_cycle(auth_client, '2026-01').status_code == 200

    resp = start_cycle(auth_client, '2026-01', salary=70000)
    assert resp.status_code == 409
    assert 'locked' in resp.get_json()['message']

    me = auth_client.get('/api/auth/me').get_json()
    assert me['salary'] == 50000
    assert len(me['salaryHistory']) == 1


def test_simulate_into_locked_month_conflicts(auth_client):
    start_cycle(auth_client, '2026-01')

    resp = auth_client.post('/api/simulate-distribute', json={'salary': 1, 'splits': BALANCED, 'month': '2026-01'})
    assert resp.status_code == 409


def test_new_month_cycle_appends_previous_period(auth_client):
    start_cycle(auth_client, '2026-01', extraIncome=2000)

    resp = start_cycle(auth_client, '2026-02', salary=60000)
    assert resp.status_code == 200
    body = resp.get_json()

    assert len(body['salaryHistory']) == 2
    superseded = body['salaryHistory'][-1]
    assert superseded['salary'] == 50000
    assert superseded['startMonth'] == '2026-01'
    assert superseded['extraIncome'] == 2000
    assert body['salary'] == 60000
    assert body['salaryLockedMonth'] == '2026-02'
    assert body['distribution']['savings'] == 18000


def test_active_tracking_is_server_computed(auth_client):
    body = start_cycle(auth_client, '2026-01', automate=True, activeTracking=False).get_json()
    assert body['automate'] is True
    assert body['activeTracking'] is True

    body = start_cycle(auth_client, '2026-02', automate=False, activeTracking=True).get_json()
    assert body['activeTracking'] is False

    body = auth_client.put('/api/profile', json={'automate': True, 'activeTracking': True}).get_json()
    assert body['automate'] is True
    assert body['activeTracking'] is False


def test_cycle_keeps_stored_automate_when_not_supplied(auth_client):
    start_cycle(auth_client, '2026-01', automate=True)
    body = start_cycle(auth_client, '2026-02').get_json()
    assert body['automate'] is True
    assert body['activeTracking'] is True


@pytest.mark.parametrize('payload,message', [
    ({'splits': {'savings': 50, 'needs': 49}, 'startMonth': '2026-13'}, 'Splits must sum to 100'),
    ({'splits': BALANCED, 'startMonth': '2026-13'}, 'startMonth must be in YYYY-MM format'),
    ({'splits': BALANCED}, 'startMonth must be provided in YYYY-MM format when starting a new cycle'),
    ({'splits': BALANCED, 'startMonth': ''}, 'startMonth must be provided in YYYY-MM format when starting a new cycle'),
])
def test_cycle_preconditions_in_order(auth_client, payload, message):
    payload = dict(payload, startNewCycle=True, salary=50000)
    resp = auth_client.put('/api/profile', json=payload)
    assert resp.status_code == 400
    assert resp.get_json()['message'] == message


def test_lock_checked_after_validation(auth_client):
    start_cycle(auth_client, '2026-01')
    resp = auth_client.put('/api/profile', json={
        'splits': {'savings': 10}, 'startMonth': '2026-01', 'startNewCycle': True
    })
    assert resp.status_code == 400


def test_cycle_rejects_unknown_preset(auth_client):
    resp = start_cycle(auth_client, '2026-01', preset='yolo')
    assert resp.status_code == 400


def test_cycle_is_atomic(app, auth_client, monkeypatch):
    start_cycle(auth_client, '2026-01')

    def explode(*args, **kwargs):
        raise RuntimeError('calculator failure')

    monkeypatch.setattr('spewn.utils.budget.compute_distribution', explode)
    resp = start_cycle(auth_client, '2026-02', salary=90000)
    assert resp.status_code == 500
    assert resp.get_json() == {'message': 'Server error'}

    stored = get_user(app)
    assert stored.salary == 50000
    assert stored.salary_locked_month == '2026-01'
    with app.app_context():
        assert SalaryHistory.query.count() == 1


def test_plain_update_skips_history_and_lock(auth_client):
    resp = auth_client.put('/api/profile', json={
        'salary': 45000, 'salaryFrequency': 'monthly', 'splits': AGGRESSIVE,
        'preset': 'aggressive', 'startMonth': '2026-03'
    })
    assert resp.status_code == 200
    body = resp.get_json()
    assert body['salary'] == 45000
    assert body['splits'] == AGGRESSIVE
    assert body['preset'] == 'aggressive'
    assert body['startMonth'] == '2026-03'
    assert body['salaryHistory'] == []
    assert body['salaryLockedMonth'] == ''
    assert body['onboardComplete'] is True


def test_plain_update_keeps_stored_splits_when_omitted(auth_client):
    auth_client.put('/api/profile', json={'salary': 45000, 'splits': AGGRESSIVE})
    body = auth_client.put('/api/profile', json={'salary': 47000}).get_json()
    assert body['splits'] == AGGRESSIVE
    assert body['salary'] == 47000


def test_plain_update_validates_splits(auth_client):
    # A new user's stored splits are all zero
    resp = auth_client.put('/api/profile', json={'salary': 45000})
    assert resp.status_code == 400
    assert resp.get_json()['message'] == 'Splits must sum to 100'


def test_negative_salary_rejected(auth_client):
    resp = start_cycle(auth_client, '2026-01', salary=-5)
    assert resp.status_code == 400


def test_simulate_persists_distribution_without_history(auth_client):
    auth_client.put('/api/profile', json={'salary': 50000, 'splits': BALANCED, 'startMonth': '2026-04'})

    resp = auth_client.post('/api/simulate-distribute', json={'extraIncome': 10000})
    assert resp.status_code == 200
    body = resp.get_json()
    assert body['salary'] == 60000
    assert body['month'] == '2026-04'
    assert body['preset'] == 'balanced'
    assert body['distribution']['needs'] == 21000

    me = auth_client.get('/api/auth/me').get_json()
    assert me['distribution'] == body['distribution']
    assert me['salaryHistory'] == []
    assert me['salaryLockedMonth'] == ''
    assert me['salary'] == 50000


def test_simulate_defaults_to_current_month(auth_client):
    auth_client.put('/api/profile', json={'salary': 50000, 'splits': BALANCED})
    body = auth_client.post('/api/simulate-distribute', json={}).get_json()
    assert body['month'] == current_month()


def test_simulate_validates_input(auth_client):
    resp = auth_client.post('/api/simulate-distribute', json={'salary': 100, 'splits': {'a': 99}})
    assert resp.status_code == 400

    resp = auth_client.post('/api/simulate-distribute', json={'salary': 100, 'splits': BALANCED, 'month': '2026-00'})
    assert resp.status_code == 400
    assert resp.get_json()['message'] == 'month must be in YYYY-MM format'


def test_simulate_other_month_after_cycle(auth_client):
    start_cycle(auth_client, '2026-01')
    resp = auth_client.post('/api/simulate-distribute', json={'salary': 20000, 'splits': BALANCED, 'month': '2026-02'})
    assert resp.status_code == 200
    assert resp.get_json()['distribution']['savings'] == 6000

    me = auth_client.get('/api/auth/me').get_json()
    assert me['salaryLockedMonth'] == '2026-01'
    assert len(me['salaryHistory']) == 1


def test_profile_requires_login(client):
    assert client.put('/api/profile', json={}).status_code == 401
    assert client.post('/api/simulate-distribute', json={}).status_code == 401


def test_presets_table(client):
    body = client.get('/api/presets').get_json()
    assert set(body) == {'balanced', 'conservative', 'aggressive'}
    for splits in body.values():
        assert sum(splits.values()) == 100


def test_distribution_history_from_backfill(app, auth_client):
    from backfill_monthly_distributions import backfill_monthly_distributions

    auth_client.put('/api/profile', json={'salary': 50000, 'splits': BALANCED})
    auth_client.post('/api/simulate-distribute', json={'month': '2026-05'})

    assert backfill_monthly_distributions(app, '2026-05') == 1
    # Second run finds the snapshot and skips it
    assert backfill_monthly_distributions(app, '2026-05') == 0

    body = auth_client.get('/api/distribution-history').get_json()
    assert [h['month'] for h in body['history']] == ['2026-05']
    assert body['history'][0]['distribution']['savings'] == 15000

    stored = get_user(app)
    assert stored.start_month == '2026-05'


def test_locked_month_with_trailing_newline_rejected(auth_client):
    start_cycle(auth_client, '2026-01')

    resp = start_cycle(auth_client, '2026-01\n', salary=90000)
    assert resp.status_code == 400
    assert resp.get_json()['message'] == 'startMonth must be in YYYY-MM format'

    resp = auth_client.post('/api/simulate-distribute', json={'splits': BALANCED, 'month': '2026-01\n'})
    assert resp.status_code == 400

    me = auth_client.get('/api/auth/me').get_json()
    assert me['salary'] == 50000
    assert me['salaryLockedMonth'] == '2026-01'
    assert len(me['salaryHistory']) == 1


def test_simulate_rejects_explicit_empty_splits(auth_client):
    auth_client.put('/api/profile', json={'salary': 50000, 'splits': BALANCED})

    resp = auth_client.post('/api/simulate-distribute', json={'splits': {}})
    assert resp.status_code == 400
    assert resp.get_json()['message'] == 'Splits must sum to 100'
