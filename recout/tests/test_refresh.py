import threading
import time

from recout.services import DashboardRefresher


class FakeStats:
    def __init__(self, fail_first=0):
        self.calls = 0
        self.fail_first = fail_first

    def dashboard_snapshot(self):
        self.calls += 1
        if self.calls <= self.fail_first:
            raise RuntimeError('boom')
        return {'call': self.calls}


class Collector:
    def __init__(self, wanted):
        self.snapshots = []
        self.wanted = wanted
        self.done = threading.Event()

    def __call__(self, snapshot):
        self.snapshots.append(snapshot)
        if len(self.snapshots) >= self.wanted:
            self.done.set()


def test_refresher_delivers_snapshots_repeatedly():
    collector = Collector(wanted=3)
    refresher = DashboardRefresher(FakeStats(), collector, interval=0.01)

    refresher.start()
    try:
        assert collector.done.wait(2.0)
    finally:
        refresher.stop()

    assert [s['call'] for s in collector.snapshots[:3]] == [1, 2, 3]


def test_no_callbacks_after_stop():
    collector = Collector(wanted=2)
    refresher = DashboardRefresher(FakeStats(), collector, interval=0.01)
    refresher.start()
    assert collector.done.wait(2.0)

    refresher.stop()
    seen = len(collector.snapshots)
    time.sleep(0.1)

    assert not refresher.running
    assert len(collector.snapshots) == seen


def test_refresh_errors_do_not_stop_the_loop(caplog):
    collector = Collector(wanted=1)
    refresher = DashboardRefresher(FakeStats(fail_first=2), collector, interval=0.01)

    with caplog.at_level('ERROR'):
        refresher.start()
        try:
            assert collector.done.wait(2.0)
        finally:
            refresher.stop()

    assert collector.snapshots[0] == {'call': 3}
    assert 'Error en el refresco del panel' in caplog.text


def test_context_manager_stops_on_exit():
    collector = Collector(wanted=1)
    with DashboardRefresher(FakeStats(), collector, interval=0.01) as refresher:
        assert collector.done.wait(2.0)
        assert refresher.running

    assert not refresher.running


def test_refresh_once_after_stop_is_ignored():
    collector = Collector(wanted=1)
    refresher = DashboardRefresher(FakeStats(), collector, interval=0.01)
    refresher.stop()

    refresher.refresh_once()
    assert collector.snapshots == []
