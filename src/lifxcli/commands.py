from __future__ import annotations

import dataclasses
import logging
import math
from typing import Callable, Dict, List, Optional, Sequence

from .api import Client, Response
from .config import Settings
from .errors import (
    LifxError,
    ParseError,
    ServiceError,
    UnsupportedCommandError,
    UsageError,
)
from .listing import ListingRow, build_listing
from .models import ALL_SELECTOR, StateBatch, StateMutation

logger = logging.getLogger(__name__)

POWER_STATES = ("on", "off")
UNIMPLEMENTED_COMMANDS = {"hue": "hue", "kel": "kelvin", "sat": "saturation"}


@dataclasses.dataclass(frozen=True)
class TargetResult:
    target: str
    error: Optional[LifxError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclasses.dataclass
class Outcome:
    """Per-target results of one command; failed if any single target failed."""

    results: List[TargetResult] = dataclasses.field(default_factory=list)

    @property
    def ok(self) -> bool:
        return all(r.ok for r in self.results)

    def failures(self) -> List[TargetResult]:
        return [r for r in self.results if not r.ok]

    def record(self, target: str, error: Optional[LifxError] = None) -> None:
        if error is not None:
            logger.error("%s: %s", target, error)
        self.results.append(TargetResult(target, error))


@dataclasses.dataclass
class CommandResult:
    command: str
    outcome: Outcome = dataclasses.field(default_factory=Outcome)
    rows: List[ListingRow] = dataclasses.field(default_factory=list)
    message: str = ""

    @property
    def ok(self) -> bool:
        return self.outcome.ok


def _check(response: Response) -> Response:
    if not response.ok:
        raise ServiceError(response.status_code, response.body)
    return response


def parse_brightness(value: str) -> float:
    # no range check: out-of-range values are forwarded and left to the service
    try:
        brightness = float(value)
    except (TypeError, ValueError):
        raise ParseError("brightness", value) from None
    if not math.isfinite(brightness):
        raise ParseError("brightness", value, expected="finite number")
    return brightness


def parse_power(value: str) -> str:
    state = value.strip().lower()
    if state not in POWER_STATES:
        raise ParseError("power state", value, expected="'on' or 'off'")
    return state


class Orchestrator:
    """Turns a command name and its positional arguments into API calls.

    Every call is made sequentially. Transport, service and decode errors are
    recorded per target and never stop the remaining targets; argument errors
    are raised before anything is sent.
    """

    def __init__(self, settings: Settings, client: Optional[Client] = None):
        self.settings = settings
        self.client = client if client is not None else Client(
            token=settings.token, base_url=settings.base_url, timeout=settings.timeout
        )
        self._handlers: Dict[str, Callable[[Sequence[str]], CommandResult]] = {
            "list": self._cmd_list,
            "toggle": self._cmd_toggle,
            "bri": self._cmd_bri,
            "power": self._cmd_power,
        }
        for name in UNIMPLEMENTED_COMMANDS:
            self._handlers[name] = self._unimplemented(name)

    def dispatch(self, command: Optional[str], args: Sequence[str] = ()) -> CommandResult:
        handler = self._handlers.get(command or "")
        if handler is None:
            raise UnsupportedCommandError(command)
        logger.debug("Args called: %s %s", command, list(args))
        return handler(list(args))

    # --- Queries ---
    def list_lights(self, selector: str = ALL_SELECTOR) -> CommandResult:
        result = CommandResult("list")
        try:
            response = _check(self.client.list_lights(selector))
            result.rows = build_listing(response.body)
        except LifxError as e:
            result.outcome.record(selector, e)
        else:
            result.outcome.record(selector)
        return result

    # --- Mutations ---
    def toggle_bulb(self, bulb_id: str) -> None:
        response = _check(self.client.toggle(bulb_id, self.settings.toggle_duration))
        logger.info("toggle %s: %s", bulb_id, response.status_code)
        logger.info("%s", response.text)

    def toggle(self, bulb_ids: Sequence[str]) -> Outcome:
        outcome = Outcome()
        for bulb_id in bulb_ids:
            try:
                self.toggle_bulb(bulb_id)
            except LifxError as e:
                outcome.record(bulb_id, e)
            else:
                outcome.record(bulb_id)
        return outcome

    def set_states(self, mutations: Sequence[StateMutation]) -> Outcome:
        """Send all mutations as one batch; each selector shares the request's fate."""
        batch = StateBatch(list(mutations))
        outcome = Outcome()
        error: Optional[LifxError] = None
        try:
            response = _check(self.client.set_states(batch))
            logger.info("states: %s", response.status_code)
            logger.debug("%s", response.text)
        except LifxError as e:
            error = e
        for m in batch.states:
            outcome.record(m.selector, error)
        return outcome

    def set_brightness(self, bulb_ids: Sequence[str], value: str) -> Outcome:
        brightness = parse_brightness(value)
        return self.set_states([StateMutation(selector=b, brightness=brightness) for b in bulb_ids])

    def set_power(self, bulb_ids: Sequence[str], value: str) -> Outcome:
        power = parse_power(value)
        return self.set_states([StateMutation(selector=b, power=power) for b in bulb_ids])

    # --- Command handlers ---
    def _cmd_list(self, args: List[str]) -> CommandResult:
        if len(args) > 1:
            raise UsageError("list takes at most one bulb ID")
        return self.list_lights(args[0] if args else ALL_SELECTOR)

    def _cmd_toggle(self, args: List[str]) -> CommandResult:
        if not args:
            raise UsageError("Must provide a bulb ID or bulb IDs to toggle.")
        return CommandResult("toggle", outcome=self.toggle(args))

    def _cmd_bri(self, args: List[str]) -> CommandResult:
        if len(args) < 2:
            raise UsageError("bri needs a bulb ID and a brightness value")
        return CommandResult("bri", outcome=self.set_brightness(args[:-1], args[-1]))

    def _cmd_power(self, args: List[str]) -> CommandResult:
        if len(args) < 2:
            raise UsageError("power needs a bulb ID and 'on' or 'off'")
        return CommandResult("power", outcome=self.set_power(args[:-1], args[-1]))

    def _unimplemented(self, name: str) -> Callable[[Sequence[str]], CommandResult]:
        def handler(args: Sequence[str]) -> CommandResult:
            logger.info("Adjusting %s", UNIMPLEMENTED_COMMANDS[name])
            logger.info("Unimplemented")
            return CommandResult(name, message="Unimplemented")
        return handler
