"""
Commands and facilities used across the test suite.
"""

import time
from typing import Optional

from starchain.core.command import BaseCommand, Cacheable, Command
from starchain.core.errors import FatalError, ForwardRequest, Interrupt, RecoverableError
from starchain.datasource.base import Datasource


class Recorder(BaseCommand):
    """Appends its name to the `trace` list in the context and returns `value`."""

    def expects(self):
        return (self
            .description("Record that this command ran.")
            .uses_param("value", "Value to return.")
            .and_returns("The value param."))

    def do_command(self):
        trace = list(self.from_context("trace", []))
        trace.append(self.name)
        self.context.add("trace", trace)
        return self.param("value")


class Counting(BaseCommand, Cacheable):
    """Cacheable command that counts how often it really computes."""

    calls = 0

    def expects(self):
        return (self
            .description("Compute a value for a key.")
            .uses_param("key", "Cache key suffix.").which_has_default("k")
            .uses_param("backend", "Cache to use.")
            .uses_param("nothing", "Return None instead of a value.").which_has_default(False)
            .with_filter("boolean")
            .and_returns("computed-<key>"))

    def do_command(self):
        Counting.calls += 1
        if self.param("nothing"):
            return None
        return f"computed-{self.param('key')}"

    def cache_key(self) -> Optional[str]:
        return f"count-{self.param('key')}"

    def cache_backend(self) -> Optional[str]:
        return self.param("backend")


class Fail(BaseCommand):
    """Raises the signal named by `kind`."""

    def expects(self):
        return (self
            .description("Fail in a chosen way.")
            .uses_param("kind", "recoverable, fatal, runtime or interrupt").which_is_required())

    def do_command(self):
        kind = self.param("kind")
        if kind == "recoverable":
            raise RecoverableError("recoverable failure")
        if kind == "fatal":
            raise FatalError("fatal failure")
        if kind == "interrupt":
            raise Interrupt("stop here")
        raise RuntimeError("unexpected failure")


class Strict(BaseCommand):
    """Requires `needed` and escalates parameter errors."""

    escalate_parameter_errors = True

    def expects(self):
        return self.description("Needs a param.").uses_param("needed", "Needed.").which_is_required()

    def do_command(self):
        return self.param("needed")


class Announcer(BaseCommand):
    """Fires `announce` with its `message` param and returns the listener results."""

    def expects(self):
        return (self
            .description("Fire an event.")
            .uses_param("message", "Event data.").which_has_default("hi")
            .declares_event("announce", "Fired with the message.")
            .and_returns("Listener results."))

    def do_command(self):
        return self.fire_event("announce", self.param("message"))


class Restart(BaseCommand):
    """Forwards to `route` without carrying the current context."""

    def expects(self):
        return self.description("Start another request afresh.").uses_param("route", "Destination.").which_is_required()

    def do_command(self):
        raise ForwardRequest(self.param("route"), None, False)


class Plain(Command):
    """Minimal command with no declared parameters."""

    def execute(self, params, context):
        context.add(self.name, dict(params))


class NotACommand:
    def __init__(self, name, caching=False):
        self.name = name


class CountingDatasource(Datasource):
    """Datasource that counts init() calls."""

    def __init__(self, params=None, name="counting"):
        super().__init__(params, name)
        self.inits = 0

    def init(self):
        time.sleep(self.params.get("delay", 0))
        self.inits += 1

    def get(self):
        return {"handle": self.name}
