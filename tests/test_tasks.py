from barbershop.tasks import RetryRunner


class Flaky:
    def __init__(self, failures):
        self.failures = failures
        self.calls = 0

    def __call__(self, value):
        self.calls += 1
        if self.calls <= self.failures:
            raise ConnectionError("temporarily down")
        return value


def test_retries_until_success_with_backoff():
    pauses = []
    runner = RetryRunner(attempts=3, delay=1.0, sleep=pauses.append)
    task = Flaky(failures=2)
    assert runner.run("flaky task", task, "x") is True
    assert task.calls == 3
    assert pauses == [1.0, 2.0]


def test_gives_up_after_last_attempt_without_raising():
    pauses = []
    runner = RetryRunner(attempts=2, delay=0.5, sleep=pauses.append)
    task = Flaky(failures=5)
    assert runner.run("always failing", task, "x") is False
    assert task.calls == 2
    assert pauses == [0.5]


def test_at_least_one_attempt():
    runner = RetryRunner(attempts=0, delay=0, sleep=lambda s: None)
    task = Flaky(failures=0)
    assert runner.run("single", task, "x") is True
    assert task.calls == 1
