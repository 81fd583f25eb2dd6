"""
Expansion driver.

Public API tying together scanner, placeholder parser, head resolver and
filter registry:

    scan -> for each placeholder: parse -> resolve head -> run pipeline -> emit

Output is produced incrementally (``iter_expand``). Callers that need
all-or-nothing semantics either join the chunks (``expand``) or write them
to a temporary file that replaces the target only on success
(``expand_file``).
"""

from __future__ import annotations

import os
import tempfile
from pathlib import Path
from typing import Iterator, Mapping, Optional, Union

from .errors import OutputKindError, TemplateError, XtplUserError
from .filters.registry import FilterRegistry, create_default_registry
from .filters.values import FilterValue
from .template.lexer import TemplateLexer
from .template.parser import parse_placeholder
from .template.resolver import EnvironmentView, HeadResolver, VariableTable
from .template.tokens import Segment
from .types import ExpandOptions

PathLike = Union[str, "os.PathLike[str]"]


class TemplateProcessor:
    """
    Expands ``{{ ... }}`` placeholders in template text.

    One processor can serve many expansion calls (also from several
    threads): the registry is only read, and every call builds its own
    resolver from the variables and environment it is given.
    """

    def __init__(self, registry: Optional[FilterRegistry] = None, options: Optional[ExpandOptions] = None):
        self.registry = registry if registry is not None else create_default_registry()
        self.options = options or ExpandOptions()
        self.log = self.options.logger

    # ======= Public API =======

    def iter_expand(
        self,
        text: str,
        variables: Optional[Mapping[str, str]] = None,
        environment: Optional[Mapping[str, str]] = None,
        template_name: str = "",
    ) -> Iterator[str]:
        """
        Yields output chunks in order.

        Chunks already yielded stay valid text, but if an error is raised
        mid-way the expansion as a whole has failed; see ``expand_file``
        for a writer that discards partial output.

        Raises:
            TemplateError: Parse, resolution, filter or output-kind error,
                with line and column bound to ``text``
        """
        resolver = HeadResolver(self._variables(variables), self._environment(environment))
        lexer = TemplateLexer(text)
        count = 0
        try:
            for segment in lexer.segments():
                if segment.is_placeholder:
                    count += 1
                    yield self._expand_placeholder(segment, resolver)
                else:
                    yield segment.value
        except TemplateError as e:
            e.bind_source(text, template_name)
            self.log.debug("expansion of %s failed: %s", template_name or "<string>", e)
            raise
        self.log.debug("expanded %s: %d placeholder(s)", template_name or "<string>", count)

    def expand(
        self,
        text: str,
        variables: Optional[Mapping[str, str]] = None,
        environment: Optional[Mapping[str, str]] = None,
        template_name: str = "",
    ) -> str:
        """Returns the complete expanded text, or raises without partial output."""
        return "".join(self.iter_expand(text, variables, environment, template_name))

    def expand_file(
        self,
        source: PathLike,
        target: PathLike,
        variables: Optional[Mapping[str, str]] = None,
        environment: Optional[Mapping[str, str]] = None,
        *,
        output_encoding: Optional[str] = None,
    ) -> Path:
        """
        Streams the expansion of ``source`` into ``target``.

        Output goes to a temporary file in the target directory and is
        moved over ``target`` only after the whole template expanded; on any
        error the temporary file is removed and ``target`` is untouched.
        Line endings are preserved exactly.
        """
        src = Path(source)
        dst = Path(target)
        encoding = output_encoding or self.options.output_encoding
        text = read_template(src, self.options.input_encoding)

        dst.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(prefix=f".{dst.name}.", suffix=".tmp", dir=str(dst.parent))
        try:
            with os.fdopen(fd, "w", encoding=encoding, newline="") as out:
                for chunk in self.iter_expand(text, variables, environment, template_name=str(src)):
                    out.write(chunk)
            os.replace(tmp_name, dst)
        except UnicodeEncodeError as e:
            _discard(tmp_name)
            raise XtplUserError(
                f"{src}: expanded text cannot be encoded as {encoding}: {e.reason}"
            ) from e
        except BaseException:
            _discard(tmp_name)
            raise

        self.log.info("wrote %s (%s)", dst, encoding)
        return dst

    # ======= Internals =======

    def _expand_placeholder(self, segment: Segment, resolver: HeadResolver) -> str:
        placeholder = parse_placeholder(segment)
        value = FilterValue.text(resolver.resolve(placeholder))
        value = self.registry.run_pipeline(placeholder.pipeline, value)
        if value.is_bytes:
            raise OutputKindError(
                "placeholder ended with binary data; finish the pipeline with a "
                "text-producing filter such as 'utf8', 'base64' or 'hex'",
                position=placeholder.position,
                snippet="{{" + segment.value + "}}",
            )
        self.log.debug("%s at %d:%d -> %d char(s)", placeholder.head, segment.line, segment.column, len(value.payload))
        return value.as_text()

    def _variables(self, variables: Optional[Mapping[str, str]]) -> Mapping[str, str]:
        if isinstance(variables, VariableTable):
            return variables
        return VariableTable(variables)

    def _environment(self, environment: Optional[Mapping[str, str]]) -> Mapping[str, str]:
        if isinstance(environment, EnvironmentView):
            return environment
        return EnvironmentView(environment, case_sensitive=self.options.env_case_sensitive)


def read_template(path: Path, encoding: str) -> str:
    """Reads template text without newline translation."""
    try:
        with open(path, "r", encoding=encoding, newline="") as f:
            return f.read()
    except UnicodeDecodeError as e:
        raise XtplUserError(f"{path}: cannot decode template as {encoding}: {e.reason} at byte {e.start}") from e
    except FileNotFoundError as e:
        raise XtplUserError(f"Template not found: {path}") from e
    except OSError as e:
        raise XtplUserError(f"Cannot read template {path}: {e.strerror or e}") from e


def _discard(tmp_name: str) -> None:
    try:
        os.unlink(tmp_name)
    except FileNotFoundError:
        pass


def expand_template(
    text: str,
    variables: Optional[Mapping[str, str]] = None,
    environment: Optional[Mapping[str, str]] = None,
    *,
    options: Optional[ExpandOptions] = None,
) -> str:
    """One-shot expansion with the default filter catalogue."""
    return TemplateProcessor(options=options).expand(text, variables, environment)


__all__ = ["TemplateProcessor", "expand_template", "read_template"]
