"""
Flow commands: hand off to another request.
"""

from ..core.command import BaseCommand
from ..core.errors import ForwardRequest


class Forward(BaseCommand):
    """Stops the current request and continues with `route`, carrying the context."""

    def expects(self):
        return (self
            .description("Forward to another route.")
            .uses_param("route", "The name of the route.").which_is_required()
            .with_filter("string")
            .uses_param("allow_internal", "Allow this to forward to an @-request.").which_has_default(False)
            .with_filter("boolean")
            .and_returns("Nothing, but it will stop processing of the present route and begin a new route."))

    def do_command(self) -> None:
        raise ForwardRequest(self.param("route"), self.context, self.param("allow_internal", False))
