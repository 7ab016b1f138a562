import pytest

from core.container import DIContainer


class DummyClient:
    pass


def test_lazy_factory_runs_once():
    container = DIContainer()
    calls = []

    def build():
        calls.append(1)
        return DummyClient()

    container.register_lazy(DummyClient, build)

    first = container.get(DummyClient)
    second = container.get(DummyClient)

    assert first is second
    assert len(calls) == 1


def test_failed_factory_is_retried_on_next_get():
    container = DIContainer()
    attempts = []

    def build():
        attempts.append(1)
        if len(attempts) == 1:
            raise RuntimeError("transient")
        return DummyClient()

    container.register_lazy(DummyClient, build)

    with pytest.raises(RuntimeError):
        container.get(DummyClient)

    assert container.is_registered(DummyClient)
    assert isinstance(container.get(DummyClient), DummyClient)
    assert len(attempts) == 2


def test_singleton_overrides_lazy_factory():
    container = DIContainer()
    instance = DummyClient()
    container.register_lazy(DummyClient, lambda: pytest.fail("factory should not run"))
    container.register_singleton(DummyClient, instance)

    assert container.get(DummyClient) is instance


def test_unregistered_service_raises():
    with pytest.raises(ValueError):
        DIContainer().get(DummyClient)
