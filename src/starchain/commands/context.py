"""
Context commands: put values into the context and inspect it.
"""

import html
from pprint import pformat
from typing import Any, Dict

from ..core.command import BaseCommand, Command, Explainable


class AddToContext(Command, Explainable):
    """Adds every configured parameter to the context under its own name."""

    def execute(self, params: Dict[str, Any], context) -> None:
        for name, value in params.items():
            context.add(name, value)

    def explain(self) -> str:
        klass = f"{self.__class__.__module__}.{self.__class__.__qualname__}"
        return f"CMD: {self.name} ({klass}): Add all parameters to the context.\n\tRETURNS: Nothing\n\n"


class DumpContext(BaseCommand):

    def expects(self):
        return (self
            .description("Dumps everything in the context to the output.")
            .uses_param("html", "Wrap the dump in HTML markup.").which_has_default(False)
            .with_filter("boolean")
            .uses_param("item", "Dump only this item, not the entire context.")
            .with_filter("string")
            .and_returns("Nothing."))

    def do_command(self) -> None:
        pretty = self.param("html", False)
        item = self.param("item")

        if item:
            dump = pformat(self.context.get(item))
            header = f'Dumping Context Item "{item}"'
        else:
            dump = pformat(self.context.to_dict())
            header = "Dumping Context"

        if pretty:
            self.write(
                f'<div class="starchain-context-dump-header">{html.escape(header)}</div>'
                f'<div class="starchain-context-dump"><pre>{html.escape(dump)}</pre></div>'
            )
        else:
            self.write(f"{header}\n{dump}\n")
