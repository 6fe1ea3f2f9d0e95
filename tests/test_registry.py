import asyncio
import threading

import pytest

from alerts_handler.config import HandlerConfig, ProcessorConfig
from alerts_handler.processors import BasicProcessor, WebhookProcessor
from alerts_handler.registry import ProcessorRegistry

from tests.fakes import ExplodingProcessor, FailingProcessor, RecordingProcessor


class TestDispatch:
    @pytest.mark.asyncio
    async def test_every_processor_receives_the_alert(self, registry, metrics, firing_alert):
        processors = [RecordingProcessor(f"rec-{i}", metrics) for i in range(3)]
        for processor in processors:
            registry.register(processor)

        await registry.dispatch_alert(firing_alert)

        for processor in processors:
            assert processor.alerts == [firing_alert]
        assert metrics.processed_total() == 3
        assert metrics.errors_total() == 0

    @pytest.mark.asyncio
    async def test_no_processors_is_a_noop(self, registry, metrics, firing_alert):
        await registry.dispatch_alert(firing_alert)

        assert metrics.processed_total() == 0
        assert metrics.errors_total() == 0

    @pytest.mark.asyncio
    async def test_processors_run_concurrently(self, registry, metrics, firing_alert):
        for i in range(5):
            registry.register(RecordingProcessor(f"slow-{i}", metrics, delay=0.2))

        loop = asyncio.get_running_loop()
        start = loop.time()
        await registry.dispatch_alert(firing_alert)
        elapsed = loop.time() - start

        assert elapsed < 0.8
        assert metrics.processed_total() == 5

    @pytest.mark.asyncio
    async def test_transmission_failure_is_counted(self, registry, metrics, firing_alert):
        sibling = RecordingProcessor("ok", metrics)
        registry.register(FailingProcessor("broken", metrics))
        registry.register(sibling)

        await registry.dispatch_alert(firing_alert)

        assert sibling.alerts == [firing_alert]
        assert metrics.registry.get_sample_value(
            "prometheus_alerts_handler_alerts_processing_errors_total", {"processor": "failing"}
        ) == 1
        assert metrics.processed_total() == 1

    @pytest.mark.asyncio
    async def test_fault_does_not_affect_siblings(self, registry, metrics, firing_alert):
        before = RecordingProcessor("before", metrics)
        after = RecordingProcessor("after", metrics)
        registry.register(before)
        registry.register(ExplodingProcessor("exploding", metrics))
        registry.register(after)

        await registry.dispatch_alert(firing_alert)

        assert before.alerts == [firing_alert]
        assert after.alerts == [firing_alert]
        assert metrics.errors_total() == 1

    @pytest.mark.asyncio
    async def test_slow_processor_times_out(self, metrics, firing_alert):
        registry = ProcessorRegistry(metrics, timeout=0.1)
        stuck = RecordingProcessor("stuck", metrics, delay=10)
        fast = RecordingProcessor("fast", metrics)
        registry.register(stuck)
        registry.register(fast)

        await asyncio.wait_for(registry.dispatch_alert(firing_alert), timeout=2)

        assert stuck.alerts == []
        assert fast.alerts == [firing_alert]
        assert metrics.errors_total() == 1
        assert metrics.processed_total() == 1


class TestRegistration:
    def test_concurrent_registration(self, registry, metrics):
        def register_many():
            for i in range(100):
                registry.register(RecordingProcessor(f"rec-{i}", metrics))

        threads = [threading.Thread(target=register_many) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert registry.processor_count() == 800

    @pytest.mark.asyncio
    async def test_registration_during_dispatch(self, registry, metrics, firing_alert):
        registry.register(RecordingProcessor("slow", metrics, delay=0.1))

        dispatch = asyncio.create_task(registry.dispatch_alert(firing_alert))
        await asyncio.sleep(0)
        late = RecordingProcessor("late", metrics)
        registry.register(late)
        await dispatch

        assert late.alerts == []
        assert registry.processor_count() == 2

    def test_snapshot_is_a_copy(self, registry, metrics):
        registry.register(RecordingProcessor("rec", metrics))

        snapshot = registry.processors()
        snapshot.clear()

        assert registry.processor_count() == 1


class TestLoadFromConfig:
    def test_enabled_processors_are_registered(self, registry):
        config = HandlerConfig(
            processors=[
                ProcessorConfig(type="basic", enabled=True, name="log"),
                ProcessorConfig(
                    type="webhook",
                    enabled=True,
                    name="hook",
                    config={"url": "http://hooks.local/alerts"},
                ),
            ]
        )

        registry.load_from_config(config)

        processors = registry.processors()
        assert [type(p) for p in processors] == [BasicProcessor, WebhookProcessor]
        assert [p.name for p in processors] == ["log", "hook"]

    def test_disabled_processors_are_skipped(self, registry):
        config = HandlerConfig(processors=[ProcessorConfig(type="basic", enabled=False, name="off")])

        registry.load_from_config(config)

        assert registry.processor_count() == 0

    def test_invalid_entries_are_skipped(self, registry):
        config = HandlerConfig(
            processors=[
                ProcessorConfig(type="carrier-pigeon", enabled=True, name="bird"),
                ProcessorConfig(type="slack", enabled=True, name="no-url", config={}),
                ProcessorConfig(type="basic", enabled=True, name="log"),
            ]
        )

        registry.load_from_config(config)

        assert [p.name for p in registry.processors()] == ["log"]

    @pytest.mark.asyncio
    async def test_aclose_closes_processors(self, registry, metrics):
        processor = WebhookProcessor.from_config("hook", {"url": "http://hooks.local"}, metrics)
        registry.register(processor)

        await registry.aclose()

        assert processor.client.is_closed
