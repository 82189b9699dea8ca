"""
Basic commands: echo text and a cacheable counter.
"""

from typing import Optional

from ..core.command import BaseCommand, Cacheable


class EchoText(BaseCommand):
    """Writes the `text` parameter to the output."""

    def expects(self):
        return (self
            .description('Echo the contents of the "text" parameter to the output.')
            .uses_param("text", "The text to echo.").which_has_default("")
            .with_filter("string")
            .uses_param("content_type", "Response content type to set.")
            .and_returns("Nothing."))

    def do_command(self) -> None:
        content_type = self.param("content_type")
        if content_type and self.context.output is not None:
            self.context.output.headers["Content-Type"] = content_type
        self.write(self.param("text", ""))


class Increment(BaseCommand, Cacheable):
    """
    Adds `by` to `value` and returns the sum.

    The result is cached per (value, by) pair when caching is enabled
    for the command.
    """

    def expects(self):
        return (self
            .description("Add an amount to a number.")
            .uses_param("value", "The starting number.").which_is_required()
            .with_filter("int")
            .uses_param("by", "Amount to add.").which_has_default(1)
            .with_filter("int")
            .uses_param("lifetime", "Cache lifetime in seconds.")
            .with_filter("int")
            .uses_param("cache", "Name of the cache to use.")
            .and_returns("The incremented number."))

    def do_command(self) -> int:
        return self.param("value") + self.param("by")

    def cache_key(self) -> Optional[str]:
        return f"increment-{self.param('value')}-{self.param('by')}"

    def cache_lifetime(self) -> Optional[int]:
        return self.param("lifetime")

    def cache_backend(self) -> Optional[str]:
        return self.param("cache")
