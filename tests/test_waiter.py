import asyncio

from fe_sniper import endpoints
from fe_sniper.sku import CartOutcome
from fe_sniper.timing import backoff_delay, wait_until
from fe_sniper.waiter import wait_for_drop

from conftest import PRODUCT_URL, FakeSession, go_to_basket

CHALLENGE_URL = "https://challenges.cloudflare.com/cdn-cgi/challenge-platform/h/g/orchestrate/chl_page"


class FakeClock:
    """Advances by one step each time it is read."""

    def __init__(self, start: float, step: float = 0.1):
        self.now = start
        self.step = step
        self.reads = 0

    def __call__(self) -> float:
        self.reads += 1
        value = self.now
        self.now += self.step
        return value


def test_backoff_delay_range() -> None:
    for _ in range(200):
        assert 1.0 <= backoff_delay() <= 3.0


def test_wait_until_spins_until_target() -> None:
    clock = FakeClock(start=100.0, step=0.1)
    steps = asyncio.run(wait_until(100.35, step_ms=1, clock=clock))
    assert steps == 4


def test_wait_until_past_target_returns_immediately() -> None:
    assert asyncio.run(wait_until(0, clock=lambda: 10.0)) == 0


def test_drop_commits_once_button_appears(session) -> None:
    session.appear_after_reloads[endpoints.ADD_TO_BASKET] = 3
    session.on_click[endpoints.ADD_TO_BASKET] = go_to_basket
    delays = []

    def delay():
        delays.append(1)
        return 0

    outcome = asyncio.run(wait_for_drop(session, PRODUCT_URL, target=0, clock=lambda: 1.0, delay=delay))

    assert outcome == CartOutcome(success=True, product="NVIDIA-GeForce-RTX-5080-Founders-Edition")
    assert len(session.called("navigate")) == 1
    assert session.reloads == 3
    assert len(delays) == 2
    # Each reload gets the short affordance budget
    waits = session.called("wait_for_selector")
    assert all(w[2] == endpoints.DROP_AFFORDANCE_WAIT_MS for w in waits)


def test_drop_waits_for_target_before_navigating(session) -> None:
    clock = FakeClock(start=50.0, step=1.0)
    session.present.add(endpoints.ADD_TO_BASKET)

    asyncio.run(wait_for_drop(session, PRODUCT_URL, target=53.0, clock=clock, delay=lambda: 0))

    assert clock.now >= 53.0
    assert len(session.called("navigate")) == 1


def test_drop_gives_up_after_budget(session) -> None:
    outcome = asyncio.run(
        wait_for_drop(session, PRODUCT_URL, target=0, max_attempts=4, clock=lambda: 1.0, delay=lambda: 0)
    )
    assert outcome is None
    assert session.reloads == 4
    assert session.called("click") == []


def test_drop_commit_failure_is_reported(session) -> None:
    session.present.add(endpoints.ADD_TO_BASKET)

    outcome = asyncio.run(wait_for_drop(session, PRODUCT_URL, target=0, clock=lambda: 1.0, delay=lambda: 0))

    assert outcome.success is False


def test_challenge_triggers_pointer_response(session) -> None:
    session.reload_responses = [CHALLENGE_URL]
    session.boxes[endpoints.CHALLENGE_WIDGET] = {"x": 100, "y": 200, "width": 300, "height": 65}
    session.appear_after_reloads[endpoints.ADD_TO_BASKET] = 2
    session.on_click[endpoints.ADD_TO_BASKET] = go_to_basket

    outcome = asyncio.run(
        wait_for_drop(session, PRODUCT_URL, target=0, challenge_timeout=1234, clock=lambda: 1.0, delay=lambda: 0)
    )

    assert outcome.success is True
    assert len(session.called("mouse_down")) == 1
    assert len(session.called("mouse_up")) == 1
    assert session.called("wait_for_response") == [("wait_for_response", 1234)]


def test_no_challenge_means_no_pointer_input(session) -> None:
    session.reload_responses = ["https://www.proshop.fi/api/basket/count"]

    asyncio.run(wait_for_drop(session, PRODUCT_URL, target=0, max_attempts=3, clock=lambda: 1.0, delay=lambda: 0))

    assert session.called("mouse_down") == []
    assert session.called("bounding_box") == []


def test_listener_removed_after_drop(session) -> None:
    asyncio.run(wait_for_drop(session, PRODUCT_URL, target=0, max_attempts=1, clock=lambda: 1.0, delay=lambda: 0))
    assert session._listeners == []


class FlakySession(FakeSession):
    """Loses its page context on the first reload."""

    async def reload(self, wait_until: str = "domcontentloaded") -> None:
        if self.reloads == 0:
            self.reloads += 1
            raise RuntimeError("Execution context was destroyed, most likely because of a navigation")
        await super().reload(wait_until)


def test_drop_survives_a_failed_reload() -> None:
    session = FlakySession()
    session.appear_after_reloads[endpoints.ADD_TO_BASKET] = 2
    session.on_click[endpoints.ADD_TO_BASKET] = go_to_basket
    delays = []

    def delay():
        delays.append(1)
        return 0

    outcome = asyncio.run(wait_for_drop(session, PRODUCT_URL, target=0, clock=lambda: 1.0, delay=delay))

    assert outcome.success is True
    assert session.reloads == 2
    assert len(delays) == 1


def test_drop_survives_a_failed_challenge_response(session) -> None:
    session.reload_responses = [CHALLENGE_URL]
    session.fail_on["bounding_box"] = RuntimeError("frame detached")

    outcome = asyncio.run(
        wait_for_drop(session, PRODUCT_URL, target=0, max_attempts=3, clock=lambda: 1.0, delay=lambda: 0)
    )

    assert outcome is None
    assert session.reloads == 3
