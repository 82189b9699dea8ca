"""
HTTP commands.
"""

from ..core.command import BaseCommand
from ..core.errors import Interrupt


class Redirect(BaseCommand):
    """Sets a 3xx status with a Location header, then stops the request."""

    def expects(self):
        return (self
            .description("Redirect the user agent using an HTTP 3xx")
            .uses_param("redirect_type", "The type of redirect (301, 302, 303, 304, 305, 307) to issue.")
            .which_has_default("301")
            .with_filter("regex", {"options": {"regexp": r"^30[1-57]$"}})
            .uses_param("url", "The URL to which we should redirect.").which_is_required()
            .with_filter("url")
            .and_returns("Nothing; It raises an Interrupt, which terminates the request."))

    def do_command(self) -> None:
        code = int(self.param("redirect_type"))
        url = str(self.param("url"))
        output = self.context.output
        if output is not None:
            output.redirect(url, code)
        raise Interrupt(f"Redirect to {url} using HTTP {code}")
