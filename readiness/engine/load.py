"""
Multi-threaded load test engine.

Drives concurrent synthetic traffic against a set of endpoints using thread
pools: one pool per endpoint running its virtual users, and an outer pool
fanning out across endpoints. Each virtual user writes only to its own
pre-allocated slot, so no locking is needed while results accumulate.
"""

import random
import resource
import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Sequence

from readiness.models.results import EndpointMetric, ResourceDelta, StressReport, StressTier
from readiness.utils.http import ProbeClient
from readiness.utils.logger import get_logger
from readiness.config import (
    DEFAULT_ENDPOINTS,
    DEFAULT_CONCURRENCY,
    DEFAULT_REQUESTS_PER_USER,
    DEFAULT_RAMP_UP,
    DEFAULT_TEST_DURATION,
    THINK_TIME_MAX,
    MAX_CONCURRENCY,
    STRESS_TIERS,
    STRESS_ENDPOINTS,
    STRESS_REQUESTS_PER_USER,
    STRESS_RAMP_UP,
    STRESS_ERROR_THRESHOLD,
    STRESS_LATENCY_WARNING,
    STRESS_COOLDOWN,
)

logger = get_logger(__name__)


@dataclass
class LoadTestConfig:
    """Parameters of one load phase."""
    base_url: str
    endpoints: List[str] = field(default_factory=lambda: list(DEFAULT_ENDPOINTS))
    concurrency: int = DEFAULT_CONCURRENCY
    requests_per_user: int = DEFAULT_REQUESTS_PER_USER
    ramp_up: float = DEFAULT_RAMP_UP            # seconds
    duration: float = DEFAULT_TEST_DURATION     # seconds; <= 0 means measured window
    think_time_max: float = THINK_TIME_MAX      # seconds


@dataclass
class UserSample:
    """Per-virtual-user slot. Only its owning task writes to it."""
    latencies: List[float] = field(default_factory=list)
    successes: int = 0
    failures: int = 0


def _resource_snapshot():
    usage = resource.getrusage(resource.RUSAGE_SELF)
    return usage.ru_maxrss, time.process_time()


def summarize_endpoint(
    endpoint: str,
    samples: Sequence[UserSample],
    duration: float,
    resource_delta: Optional[ResourceDelta] = None,
) -> EndpointMetric:
    """
    Fold the virtual-user slots of one endpoint into an EndpointMetric.

    Latency statistics cover the successful calls. An empty latency set
    yields 0 for mean/min/max, and an endpoint without requests has an
    error rate of 0.
    """
    latencies = [value for sample in samples for value in sample.latencies]
    successes = sum(sample.successes for sample in samples)
    failures = sum(sample.failures for sample in samples)
    total = successes + failures

    return EndpointMetric(
        endpoint=endpoint,
        total_requests=total,
        success_count=successes,
        fail_count=failures,
        avg_latency=sum(latencies) / len(latencies) if latencies else 0.0,
        min_latency=min(latencies) if latencies else 0.0,
        max_latency=max(latencies) if latencies else 0.0,
        requests_per_second=total / duration if duration > 0 else 0.0,
        error_rate=failures / total * 100 if total else 0.0,
        resource_delta=resource_delta or ResourceDelta(),
    )


def failed_endpoint(endpoint: str) -> EndpointMetric:
    """Metric for an endpoint whose test never completed: no requests, 100% errors."""
    return EndpointMetric(
        endpoint=endpoint,
        total_requests=0,
        success_count=0,
        fail_count=0,
        avg_latency=0.0,
        min_latency=0.0,
        max_latency=0.0,
        requests_per_second=0.0,
        error_rate=100.0,
    )


class LoadTestEngine:
    """
    Concurrent load generator.

    Args:
        client_factory: Callable(base_url) returning a context-managed client
            with a request(method, path) method; one client per virtual user
        sleep: Sleep function used for ramp-up staggering and think time
        rng: Random source for think-time jitter
    """

    def __init__(
        self,
        client_factory: Callable[[str], ProbeClient] = ProbeClient,
        sleep: Callable[[float], None] = time.sleep,
        rng: Optional[random.Random] = None,
    ):
        self.client_factory = client_factory
        self.sleep = sleep
        self.rng = rng or random.Random()

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _virtual_user(
        self,
        endpoint: str,
        config: LoadTestConfig,
        start_delay: float,
        slot: UserSample,
    ):
        """Issue requests_per_user sequential calls, recording into *slot*."""
        if start_delay > 0:
            self.sleep(start_delay)

        with self.client_factory(config.base_url) as client:
            for i in range(config.requests_per_user):
                try:
                    response = client.request('GET', endpoint)
                except Exception as e:
                    logger.debug(f"Virtual user call to {endpoint} raised: {e}")
                    slot.failures += 1
                else:
                    if response.succeeded:
                        slot.latencies.append(response.elapsed)
                        slot.successes += 1
                    else:
                        slot.failures += 1

                if i < config.requests_per_user - 1 and config.think_time_max > 0:
                    self.sleep(self.rng.uniform(0, config.think_time_max))

    def test_endpoint(self, endpoint: str, config: LoadTestConfig) -> EndpointMetric:
        """Run every virtual user of one endpoint and summarize the window."""
        concurrency = max(0, min(config.concurrency, MAX_CONCURRENCY))
        slots = [UserSample() for _ in range(concurrency)]

        rss_before, cpu_before = _resource_snapshot()
        window_start = time.perf_counter()

        if concurrency > 0 and config.requests_per_user > 0:
            # Linear ramp: user i starts at i * ramp_up / concurrency
            stagger = config.ramp_up / concurrency if config.ramp_up > 0 else 0.0
            with ThreadPoolExecutor(max_workers=concurrency) as pool:
                futures = [
                    pool.submit(self._virtual_user, endpoint, config, index * stagger, slots[index])
                    for index in range(concurrency)
                ]
                for future in as_completed(futures):
                    try:
                        future.result()
                    except Exception as e:
                        logger.error(f"Virtual user on {endpoint} aborted: {e}")

        window = time.perf_counter() - window_start
        rss_after, cpu_after = _resource_snapshot()
        delta = ResourceDelta(
            memory_kb=max(0, rss_after - rss_before),
            cpu_seconds=round(cpu_after - cpu_before, 6),
        )

        duration = config.duration if config.duration > 0 else window
        metric = summarize_endpoint(endpoint, slots, duration, delta)
        logger.debug(
            f"{endpoint}: {metric.total_requests} requests, "
            f"{metric.error_rate:.2f}% errors, {metric.avg_latency:.2f}ms avg"
        )
        return metric

    def _test_endpoint_isolated(self, endpoint: str, config: LoadTestConfig) -> EndpointMetric:
        """Per-endpoint failure boundary: a crashed window counts as all-failed."""
        try:
            return self.test_endpoint(endpoint, config)
        except Exception as e:
            logger.error(f"Load test of {endpoint} failed: {e}")
            return failed_endpoint(endpoint)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    def run(self, config: LoadTestConfig) -> List[EndpointMetric]:
        """
        Test every endpoint concurrently.

        Returns:
            One EndpointMetric per configured endpoint, in configuration order
        """
        if config.concurrency > MAX_CONCURRENCY:
            logger.warning(f"Concurrency {config.concurrency} capped at {MAX_CONCURRENCY}")

        if not config.endpoints:
            logger.warning("No endpoints configured. Nothing to load test.")
            return []

        logger.info(
            f"Load test: {len(config.endpoints)} endpoint(s) x {config.concurrency} users "
            f"x {config.requests_per_user} requests against {config.base_url}"
        )
        start = time.perf_counter()

        with ThreadPoolExecutor(max_workers=len(config.endpoints)) as pool:
            futures = [
                pool.submit(self._test_endpoint_isolated, endpoint, config)
                for endpoint in config.endpoints
            ]
            metrics = [future.result() for future in futures]

        logger.info(f"Load test completed in {time.perf_counter() - start:.2f}s")
        return metrics

    def run_stress_profile(
        self,
        base_url: str,
        endpoints: Optional[List[str]] = None,
        tiers: Sequence[int] = STRESS_TIERS,
        requests_per_user: int = STRESS_REQUESTS_PER_USER,
        ramp_up: float = STRESS_RAMP_UP,
        error_threshold: float = STRESS_ERROR_THRESHOLD,
        cooldown: float = STRESS_COOLDOWN,
    ) -> StressReport:
        """
        Repeat the load phase at escalating concurrency.

        Stops after the first tier whose mean error rate exceeds
        *error_threshold*, or when the tier list is exhausted.
        """
        endpoints = list(endpoints) if endpoints is not None else list(STRESS_ENDPOINTS)
        results: List[StressTier] = []
        breaking_point = None

        for position, level in enumerate(tiers):
            logger.info(f"Stress level: {level} concurrent users")
            config = LoadTestConfig(
                base_url=base_url,
                endpoints=endpoints,
                concurrency=level,
                requests_per_user=requests_per_user,
                ramp_up=ramp_up,
                duration=0,
            )
            metrics = self.run(config)

            avg_latency = sum(m.avg_latency for m in metrics) / len(metrics) if metrics else 0.0
            error_rate = sum(m.error_rate for m in metrics) / len(metrics) if metrics else 0.0
            degraded = avg_latency > STRESS_LATENCY_WARNING
            results.append(StressTier(
                concurrency=level,
                avg_latency=avg_latency,
                error_rate=error_rate,
                degraded=degraded,
                metrics=tuple(metrics),
            ))
            logger.info(f"Stress result: {avg_latency:.2f}ms avg, {error_rate:.2f}% errors")

            if error_rate > error_threshold:
                logger.warning(f"Breaking point reached at {level} users")
                breaking_point = level
                break

            if degraded:
                logger.warning(f"Performance degradation at {level} users")

            if cooldown > 0 and position < len(tiers) - 1:
                self.sleep(cooldown)

        return StressReport(tiers=tuple(results), breaking_point=breaking_point)
