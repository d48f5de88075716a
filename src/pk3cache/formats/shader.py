"""Shader script parsing (``scripts/*.shader``).

A script is a sequence of ``name { ... }`` blocks. Lines inside a block are
directives; nested ``{ ... }`` blocks are stages holding their own
directives::

    textures/base_wall/glow
    {
        surfaceparm nomarks
        {
            map $lightmap
            rgbGen identity
        }
    }

parses to ``{"name": "textures/base_wall/glow",
"directives": [["surfaceparm", "nomarks"]],
"stages": [[["map", "$lightmap"], ["rgbGen", "identity"]]]}``.
"""

from __future__ import annotations

import re
from typing import Any, Dict, Iterator, List, Optional, Tuple

from ..errors import format_error

__all__ = ["parse_shaders", "strip_comments"]

_COMMENT_LINE = re.compile(r"//[^\n]*")
_COMMENT_BLOCK = re.compile(r"/\*.*?\*/", re.DOTALL)
_TOKEN = re.compile(r'"([^"\n]*)"|([{}])|(\n)|([^\s{}"]+)|(")')

Directive = List[str]


def strip_comments(text: str) -> str:
    # keep line numbers stable for error messages
    text = _COMMENT_BLOCK.sub(lambda m: "\n" * m.group(0).count("\n"), text)
    return _COMMENT_LINE.sub("", text)


def _tokens(text: str) -> Iterator[Tuple[str, str, int]]:
    line = 1
    for m in _TOKEN.finditer(text):
        quoted, brace, newline, word, stray = m.groups()
        if newline:
            yield "newline", newline, line
            line += 1
        elif brace:
            yield "brace", brace, line
        elif stray:
            raise format_error(f"line {line}: unterminated string", {"line": line})
        else:
            yield "word", quoted if quoted is not None else word, line


class _ShaderReader:
    def __init__(self) -> None:
        self.shaders: List[Dict[str, Any]] = []
        self.name: Optional[str] = None
        self.shader: Optional[Dict[str, Any]] = None
        self.stage: Optional[List[Directive]] = None
        self.directive: Directive = []

    def end_directive(self) -> None:
        if not self.directive:
            return
        assert self.shader is not None
        target = self.stage if self.stage is not None else self.shader["directives"]
        target.append(self.directive)
        self.directive = []

    def word(self, value: str, line: int) -> None:
        if self.shader is not None:
            self.directive.append(value)
        elif self.name is not None:
            raise format_error(
                f"line {line}: expected '{{' after shader '{self.name}'",
                {"line": line, "shader": self.name},
            )
        else:
            self.name = value

    def open(self, line: int) -> None:
        if self.shader is None:
            if self.name is None:
                raise format_error(
                    f"line {line}: block without a shader name", {"line": line}
                )
            self.shader = {"name": self.name, "directives": [], "stages": []}
            self.name = None
        elif self.stage is None:
            self.stage = []
        else:
            raise format_error(
                f"line {line}: stages cannot be nested in '{self.shader['name']}'",
                {"line": line, "shader": self.shader["name"]},
            )

    def close(self, line: int) -> None:
        if self.shader is None:
            raise format_error(f"line {line}: unbalanced '}}'", {"line": line})
        if self.stage is not None:
            self.shader["stages"].append(self.stage)
            self.stage = None
        else:
            self.shaders.append(self.shader)
            self.shader = None

    def finish(self, line: int) -> List[Dict[str, Any]]:
        if self.shader is not None:
            raise format_error(
                f"line {line}: unterminated shader '{self.shader['name']}'",
                {"line": line, "shader": self.shader["name"]},
            )
        if self.name is not None:
            raise format_error(
                f"line {line}: shader '{self.name}' has no body",
                {"line": line, "shader": self.name},
            )
        return self.shaders


def parse_shaders(text: str) -> List[Dict[str, Any]]:
    reader = _ShaderReader()
    line = 1
    for kind, value, line in _tokens(strip_comments(text)):
        if kind == "word":
            reader.word(value, line)
            continue
        reader.end_directive()
        if kind == "newline":
            continue
        if value == "{":
            reader.open(line)
        else:
            reader.close(line)
    reader.end_directive()
    return reader.finish(line)
