"""Orchestrator - Wires Functional Core and Imperative Shell.

This module coordinates the flow of data between the core and the
I/O-performing shell components, and owns the timers that drive them:

- warning poll: scrape warnings, announce new ones
- aggregation tick: announce dense lightning buckets
- alarm check: send the daily forecast once a day at the configured time

The lightning feed pushes strikes from its own network thread. All shared
state (strike buffer, dedup gates, radio) is guarded by its own lock.
"""

import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime

from stormrelay.core.aggregator import EventAggregator
from stormrelay.core.alarm import AlarmTime
from stormrelay.core.config import ChannelConfig, Config, ForecastConfig
from stormrelay.core.dedup import DailyPolicy, DedupGate
from stormrelay.core.formatter import format_forecast_header, format_warning_alert
from stormrelay.core.segmenter import segment
from stormrelay.core.warning import parse_warnings, warning_identity
from stormrelay.dispatcher import AlertDispatcher, Destination, DispatchResult
from stormrelay.shell.forecast_client import ForecastClient
from stormrelay.shell.lightning_client import LightningClient
from stormrelay.shell.mesh_client import MeshClient, RadioError
from stormrelay.shell.warning_client import WarningClient


logger = logging.getLogger(__name__)


FORECAST_ALARM_KEY = "forecast"


class StartupError(Exception):
    """Raised when the relay cannot be wired up (e.g., channel missing)."""


@dataclass
class PollResult:
    """Result of one warning poll.

    Attributes:
        warnings_fetched: Raw records scraped from the page
        warnings_valid: Records that parsed cleanly
        warnings_new: Records not announced before
        dispatches: One DispatchResult per announced warning
        errors: Any errors that occurred
    """
    warnings_fetched: int = 0
    warnings_valid: int = 0
    warnings_new: int = 0
    dispatches: list[DispatchResult] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)

    @property
    def success(self) -> bool:
        """Returns True if no errors occurred."""
        return len(self.errors) == 0

    @property
    def summary(self) -> str:
        """Human-readable summary of the poll."""
        return (
            f"Fetched {self.warnings_fetched} warnings, "
            f"{self.warnings_valid} valid, "
            f"{self.warnings_new} new"
        )


class WarningPoller:
    """Announces each distinct weather warning once.

    Warnings are identified by type, severity and validity window, so a
    reworded headline does not trigger a second announcement.
    """

    def __init__(
        self,
        client: WarningClient,
        dispatcher: AlertDispatcher,
        destination: Destination,
        gate: DedupGate | None = None,
    ) -> None:
        self.client = client
        self.dispatcher = dispatcher
        self.destination = destination
        self.gate = gate or DedupGate()

    def poll(self) -> PollResult:
        """Run one poll cycle.

        A failed fetch skips the cycle; the next scheduled poll retries.

        Returns:
            PollResult with details of what happened
        """
        try:
            raw_records = self.client.fetch_warnings()
        except Exception as e:
            error_msg = f"Failed to fetch warnings: {e}"
            logger.error(error_msg)
            return PollResult(errors=[error_msg])

        warnings = parse_warnings(raw_records)
        if len(warnings) < len(raw_records):
            logger.warning(
                "Dropped %d malformed warning records",
                len(raw_records) - len(warnings),
            )

        result = PollResult(
            warnings_fetched=len(raw_records),
            warnings_valid=len(warnings),
        )

        # Feed order, not re-sorted
        for warning in warnings:
            if not self.gate.should_fire(warning_identity(warning)):
                continue

            result.warnings_new += 1
            dispatch = self.dispatcher.dispatch(
                format_warning_alert(warning),
                self.destination,
            )
            result.dispatches.append(dispatch)

        logger.info("Warning poll: %s", result.summary)
        return result


class ForecastJob:
    """Sends the daily forecast, prefixed by a dated header chunk."""

    def __init__(
        self,
        client: ForecastClient,
        dispatcher: AlertDispatcher,
        destination: Destination,
        settings: ForecastConfig,
        gate: DedupGate | None = None,
    ) -> None:
        self.client = client
        self.dispatcher = dispatcher
        self.destination = destination
        self.settings = settings
        self.alarm = AlarmTime.parse(settings.alarm_time)
        self.gate = gate or DedupGate(DailyPolicy())

    def check(self, now: datetime) -> DispatchResult | None:
        """Run the forecast if the alarm is due and has not fired today.

        Returns:
            DispatchResult if the forecast ran, else None
        """
        if not self.alarm.is_due(now):
            return None
        if not self.gate.should_fire(FORECAST_ALARM_KEY):
            return None

        logger.info("Forecast alarm triggered at %s", now.isoformat(timespec="seconds"))
        return self.run(now)

    def run(self, now: datetime) -> DispatchResult | None:
        """Fetch the forecast and send it.

        Returns:
            DispatchResult, or None if there was nothing to send
        """
        try:
            forecast = self.client.fetch_forecast()
        except Exception as e:
            logger.error("Failed to fetch forecast: %s", e)
            return None

        chunks = segment(forecast, self.settings.chunk_bytes)
        if not chunks:
            logger.warning("Forecast is empty, nothing to send")
            return None

        header = format_forecast_header(
            now.date(),
            self.settings.header_template,
            self.settings.weekday_names,
        )

        result = self.dispatcher.send_chunks([header, *chunks], self.destination)
        logger.info("Forecast: %s", result.summary)
        return result


class Orchestrator:
    """Coordinates the relay's feeds, timers and radio.

    This class wires together:
    - Mesh client (radio transport)
    - Warning client + WarningPoller
    - Forecast client + ForecastJob
    - Lightning client + EventAggregator
    - AlertDispatcher (byte limits and pacing)
    """

    def __init__(
        self,
        config: Config,
        mesh_client: MeshClient | None = None,
        warning_client: WarningClient | None = None,
        forecast_client: ForecastClient | None = None,
        lightning_client: LightningClient | None = None,
        now: Callable[[], datetime] = datetime.now,
    ) -> None:
        """Initialize orchestrator with configuration.

        Args:
            config: Application configuration
            mesh_client: Radio client (created if not provided)
            warning_client: Warning client (created if not provided)
            forecast_client: Forecast client (created if not provided)
            lightning_client: Lightning client (created if not provided)
            now: Wall clock for the daily alarm (injectable for tests)
        """
        self.config = config
        self.mesh_client = mesh_client or MeshClient(
            device=config.mesh.device,
            host=config.mesh.host,
        )
        self.warning_client = warning_client or WarningClient(
            url=config.warnings.url,
            language=config.warnings.language,
        )
        self.forecast_client = forecast_client or ForecastClient(
            url=config.forecast.url,
            fold_diacritics=config.forecast.fold_diacritics,
        )
        self.now = now

        self.dispatcher = AlertDispatcher(
            self.mesh_client,
            pacing_seconds=config.mesh.pacing_seconds,
        )
        self.aggregator = EventAggregator(
            reference=config.reference_point,
            compass_names=config.compass_names,
            threshold=config.storm.threshold,
            bucket_width_km=config.storm.bucket_width_km,
        )
        self.lightning_client = lightning_client or LightningClient(
            bounds=config.lightning_bounds,
            on_strike=self.aggregator.on_event,
            host=config.mqtt.host,
            port=config.mqtt.port,
            topic=config.mqtt.topic,
        )

        self.alert_destination: Destination | None = None
        self.weather_destination: Destination | None = None
        self.warning_poller: WarningPoller | None = None
        self.forecast_job: ForecastJob | None = None

        self._stop_event = threading.Event()
        self._threads: list[threading.Thread] = []

    def _resolve_destination(self, channel: ChannelConfig) -> Destination:
        """Look up a configured channel on the radio.

        Raises:
            StartupError: If the radio has no channel with that name
        """
        index = self.mesh_client.find_channel_index(channel.name)
        if index is None:
            raise StartupError(f"Channel {channel.name} not found!")

        logger.info("Channel %s is index %d", channel.name, index)
        return Destination(
            name=channel.name,
            channel_index=index,
            max_bytes=channel.max_bytes,
        )

    def setup(self) -> None:
        """Resolve radio channels and build the jobs.

        This method performs radio I/O.

        Raises:
            StartupError: If the radio does not answer or a configured
                channel is missing
        """
        try:
            self.alert_destination = self._resolve_destination(self.config.alert_channel)
            self.weather_destination = self._resolve_destination(self.config.weather_channel)
        except RadioError as e:
            raise StartupError(f"Radio not ready: {e}") from e

        self.warning_poller = WarningPoller(
            self.warning_client,
            self.dispatcher,
            self.alert_destination,
        )
        self.forecast_job = ForecastJob(
            self.forecast_client,
            self.dispatcher,
            self.weather_destination,
            self.config.forecast,
            gate=DedupGate(DailyPolicy(today=lambda: self.now().date())),
        )

        self.mesh_client.log_incoming()

    def poll_warnings(self) -> PollResult:
        """Run one warning poll."""
        return self.warning_poller.poll()

    def storm_tick(self) -> DispatchResult | None:
        """Close the current lightning window and announce new buckets."""
        text = self.aggregator.tick()
        if text is None:
            return None
        return self.dispatcher.dispatch(text, self.alert_destination)

    def check_alarm(self) -> DispatchResult | None:
        """Run the daily forecast if it is due."""
        return self.forecast_job.check(self.now())

    def _run_job(self, name: str, job: Callable[[], object]) -> None:
        """Run a timer job; a failing job never stops its timer."""
        try:
            job()
        except Exception:
            logger.exception("%s job failed", name)

    def _run_every(
        self,
        name: str,
        interval: float,
        job: Callable[[], object],
        run_immediately: bool = False,
    ) -> None:
        """Timer loop: run job every interval seconds until stopped."""
        if run_immediately:
            self._run_job(name, job)

        while not self._stop_event.wait(interval):
            self._run_job(name, job)

        logger.debug("%s timer stopped", name)

    def _start_timer(
        self,
        name: str,
        interval: float,
        job: Callable[[], object],
        run_immediately: bool = False,
    ) -> None:
        thread = threading.Thread(
            target=self._run_every,
            args=(name, interval, job, run_immediately),
            name=name,
            daemon=True,
        )
        thread.start()
        self._threads.append(thread)

    def start(self) -> None:
        """Wire everything up and start the feeds and timers.

        Raises:
            StartupError: If a configured channel is missing
            OSError: If the lightning feed cannot be reached
        """
        self.setup()
        self.lightning_client.start()

        self._start_timer(
            "warning-poll",
            self.config.warnings.poll_interval_seconds,
            self.poll_warnings,
            run_immediately=True,
        )
        self._start_timer(
            "storm-tick",
            self.config.storm.tick_interval_seconds,
            self.storm_tick,
        )
        self._start_timer(
            "forecast-alarm",
            self.config.alarm_check_seconds,
            self.check_alarm,
        )

        logger.info(
            "Relay running: forecast daily at %s, storm window %ds",
            self.forecast_job.alarm,
            self.config.storm.tick_interval_seconds,
        )

    def stop(self, timeout: float = 5.0) -> None:
        """Stop timers and feeds, then close the radio."""
        self._stop_event.set()
        self.lightning_client.stop()

        for thread in self._threads:
            thread.join(timeout)
        self._threads = []

        self.mesh_client.close()
        logger.info("Relay stopped")

    def run_forever(self) -> None:
        """Start the relay and block until interrupted."""
        self.start()
        try:
            while not self._stop_event.wait(1.0):
                pass
        except KeyboardInterrupt:
            logger.info("Interrupted, shutting down")
        finally:
            self.stop()
