"""JavaScript / TypeScript adapter (tree-sitter-javascript, tree-sitter-typescript)."""

from __future__ import annotations

from typing import Iterator, Optional

from ...models import CodeChange, Language
from ..edits import EditBuffer
from ..parser import Node, walk
from ..values import Invocation, Name, Opaque, Value, join_surrogates
from .base import Binding, CallSite, ImportTable, LanguageAdapter

_ESCAPES = {"n": "\n", "t": "\t", "r": "\r", "b": "\b", "f": "\f", "v": "\v", "0": "\0"}
_DECLARATIONS = frozenset({"lexical_declaration", "variable_declaration"})


def _unescape(seq: str) -> str:
    body = seq[1:]
    if body in _ESCAPES:
        return _ESCAPES[body]
    if body.startswith("u{") and body.endswith("}"):
        return chr(int(body[2:-1], 16))
    if body.startswith("u") and len(body) == 5:
        return chr(int(body[1:], 16))
    if body.startswith("x") and len(body) == 3:
        return chr(int(body[1:], 16))
    return body


def _quote(text: str) -> str:
    escaped = (
        text.replace("\\", "\\\\").replace("'", "\\'").replace("\n", "\\n").replace("\r", "\\r").replace("\t", "\\t")
    )
    return f"'{escaped}'"


class JavaScriptAdapter(LanguageAdapter):
    """Covers .js/.jsx/.mjs/.cjs and, with another grammar, .ts/.tsx."""

    language = Language.JAVASCRIPT
    grammar = "javascript"

    # -- discovery ---------------------------------------------------------

    def _receiver(self, obj: Node) -> str:
        if obj.type in ("identifier", "this"):
            return self.text(obj)
        if obj.type == "member_expression":
            prop = obj.child_by_field_name("property")
            if prop is not None and prop.type == "property_identifier":
                return self.text(prop)
        return ""

    def iter_calls(self, root: Node) -> Iterator[CallSite]:
        for node in walk(root):
            if node.type != "call_expression":
                continue
            function = node.child_by_field_name("function")
            arguments = node.child_by_field_name("arguments")
            if function is None or arguments is None or arguments.type != "arguments":
                continue
            args = [c for c in arguments.named_children if c.type != "comment"]
            if function.type == "identifier":
                yield CallSite(node, None, self.text(function), function, arguments, args)
            elif function.type == "member_expression":
                prop = function.child_by_field_name("property")
                obj = function.child_by_field_name("object")
                if prop is None or obj is None:
                    continue
                yield CallSite(node, self._receiver(obj), self.text(prop), prop, arguments, args)

    def _constructed_class(self, value: Optional[Node]) -> Optional[Node]:
        """The new_expression behind `value`, looking through await and parentheses."""
        while value is not None and value.type in ("await_expression", "parenthesized_expression"):
            value = value.named_children[0] if value.named_children else None
        if value is not None and value.type == "new_expression":
            return value
        return None

    def _binding_from(self, target: Node, value: Optional[Node], statement: Optional[Node], classes) -> Optional[Binding]:
        new = self._constructed_class(value)
        if new is None:
            return None
        ctor = new.child_by_field_name("constructor")
        class_name = self.text(ctor).split(".")[-1]
        if class_name not in classes:
            return None
        if target.type == "member_expression":
            name = self.text(target.child_by_field_name("property"))
        elif target.type == "identifier":
            name = self.text(target)
        else:
            return None
        driver = None
        arguments = new.child_by_field_name("arguments")
        if arguments is not None:
            first = [c for c in arguments.named_children if c.type != "comment"]
            if first:
                driver = self.text(first[0])
        return Binding(name, class_name, driver, statement)

    def find_bindings(self, root: Node, classes: frozenset[str]) -> list[Binding]:
        found: list[Binding] = []
        if not classes:
            return found
        for node in walk(root):
            if node.type == "variable_declarator":
                decl = node.parent
                declarators = [c for c in decl.named_children if c.type == "variable_declarator"] if decl else []
                statement = decl if decl is not None and decl.type in _DECLARATIONS and len(declarators) == 1 else None
                binding = self._binding_from(
                    node.child_by_field_name("name"), node.child_by_field_name("value"), statement, classes
                )
            elif node.type == "assignment_expression":
                parent = node.parent
                statement = parent if parent is not None and parent.type == "expression_statement" else None
                binding = self._binding_from(
                    node.child_by_field_name("left"), node.child_by_field_name("right"), statement, classes
                )
            else:
                continue
            if binding is not None:
                found.append(binding)
        return found

    # -- imports -----------------------------------------------------------

    def _string_value(self, node: Optional[Node]) -> Optional[str]:
        if node is None or node.type != "string":
            return None
        parts = []
        for child in node.named_children:
            if child.type == "string_fragment":
                parts.append(self.text(child))
            elif child.type == "escape_sequence":
                parts.append(_unescape(self.text(child)))
        return join_surrogates("".join(parts))

    def _replace_source(self, src: Node, target: str, buffer: EditBuffer) -> Optional[CodeChange]:
        old = self.text(src)
        quote = old[0] if old and old[0] in "'\"" else "'"
        new = f"{quote}{target}{quote}"
        if not buffer.replace(src.start_byte, src.end_byte, new):
            return None
        return CodeChange("import", old, new, self.line_of(src), f"Replace module '{old.strip(quote)}' with '{target}'")

    def _rewrite_names(self, specs: list[tuple[str, Optional[str]]], table: ImportTable) -> list[str]:
        out: list[str] = []
        for name, alias in specs:
            renamed = table.symbols.get(name, name) if name in table.symbols else name
            if renamed is None:
                continue
            entry = f"{renamed} as {alias}" if alias and alias != renamed else renamed
            if entry not in out:
                out.append(entry)
        if table.target_symbol and table.target_symbol not in [e.split(" as ")[0] for e in out]:
            out.append(table.target_symbol)
        return out

    def _rewrite_import_statement(self, node: Node, buffer: EditBuffer, table: ImportTable) -> list[CodeChange]:
        src = node.child_by_field_name("source")
        module = self._string_value(src)
        if module is None or module not in table.modules:
            return []
        target = table.modules[module]
        clause = next((c for c in node.named_children if c.type == "import_clause"), None)
        named = None
        if clause is not None:
            named = next((c for c in clause.named_children if c.type == "named_imports"), None)
        if named is not None:
            specs = []
            for spec in named.named_children:
                if spec.type != "import_specifier":
                    continue
                alias = spec.child_by_field_name("alias")
                specs.append((self.text(spec.child_by_field_name("name")), self.text(alias) if alias else None))
            names = self._rewrite_names(specs, table)
            others = [c for c in clause.named_children if c is not named and c.type != "comment"]
            if not names and not others:
                old = self.text(node)
                new = f"import {_quote(target)};"
                if buffer.replace(node.start_byte, node.end_byte, new):
                    return [CodeChange("import", old, new, self.line_of(node), f"Replace import of '{module}'")]
                return []
            changes = []
            new_named = "{ " + ", ".join(names) + " }" if names else ""
            if new_named and new_named != self.text(named) and buffer.replace(named.start_byte, named.end_byte, new_named):
                changes.append(
                    CodeChange("import", self.text(named), new_named, self.line_of(named), "Rename imported symbols")
                )
            change = self._replace_source(src, target, buffer)
            return changes + ([change] if change else [])
        change = self._replace_source(src, target, buffer)
        if clause is not None:
            default = next((c for c in clause.named_children if c.type == "identifier"), None)
            renamed = table.symbols.get(self.text(default)) if default is not None else None
            if default is not None and renamed and buffer.replace(default.start_byte, default.end_byte, renamed):
                return ([change] if change else []) + [
                    CodeChange("import", self.text(default), renamed, self.line_of(default), "Rename imported symbol")
                ]
        return [change] if change else []

    def _rewrite_require(self, node: Node, buffer: EditBuffer, table: ImportTable) -> list[CodeChange]:
        arguments = node.child_by_field_name("arguments")
        args = [c for c in arguments.named_children if c.type != "comment"] if arguments else []
        module = self._string_value(args[0]) if len(args) == 1 else None
        if module is None or module not in table.modules:
            return []
        changes = []
        change = self._replace_source(args[0], table.modules[module], buffer)
        if change:
            changes.append(change)
        declarator = node.parent
        if declarator is None or declarator.type != "variable_declarator":
            return changes
        pattern = declarator.child_by_field_name("name")
        if pattern is not None and pattern.type == "object_pattern":
            specs = []
            for prop in pattern.named_children:
                if prop.type == "shorthand_property_identifier_pattern":
                    specs.append((self.text(prop), None))
                elif prop.type == "pair_pattern":
                    specs.append((self.text(prop.child_by_field_name("key")), self.text(prop.child_by_field_name("value"))))
            names = [n.replace(" as ", ": ") for n in self._rewrite_names(specs, table)]
            new = "{ " + ", ".join(names) + " }"
            if names and new != self.text(pattern) and buffer.replace(pattern.start_byte, pattern.end_byte, new):
                changes.append(CodeChange("import", self.text(pattern), new, self.line_of(pattern), "Rename required symbols"))
        elif pattern is not None and pattern.type == "identifier":
            renamed = table.symbols.get(self.text(pattern))
            if renamed and buffer.replace(pattern.start_byte, pattern.end_byte, renamed):
                changes.append(CodeChange("import", self.text(pattern), renamed, self.line_of(pattern), "Rename required symbol"))
        return changes

    def rewrite_imports(self, root: Node, buffer: EditBuffer, table: ImportTable) -> list[CodeChange]:
        changes: list[CodeChange] = []
        for node in walk(root):
            if node.type == "import_statement":
                changes.extend(self._rewrite_import_statement(node, buffer, table))
            elif node.type == "call_expression":
                function = node.child_by_field_name("function")
                if function is not None and function.type == "identifier" and self.text(function) == "require":
                    changes.extend(self._rewrite_require(node, buffer, table))
        return changes

    # -- values ------------------------------------------------------------

    def _is_reference(self, node: Node) -> bool:
        if node.type in ("identifier", "this"):
            return True
        if node.type == "member_expression":
            obj = node.child_by_field_name("object")
            prop = node.child_by_field_name("property")
            return obj is not None and prop is not None and prop.type == "property_identifier" and self._is_reference(obj)
        return False

    def value(self, node: Node) -> Value:
        kind = node.type
        if kind == "string":
            text = self._string_value(node)
            return Opaque(self.text(node)) if text is None else text
        if kind == "template_string":
            if any(c.type == "template_substitution" for c in node.named_children):
                return Opaque(self.text(node))
            text = join_surrogates(
                "".join(
                    self.text(c) if c.type == "string_fragment" else _unescape(self.text(c))
                    for c in node.named_children
                    if c.type in ("string_fragment", "escape_sequence")
                )
            )
            return Opaque(self.text(node)) if text is None else text
        if kind == "number":
            text = self.text(node).replace("_", "")
            try:
                return int(text)
            except ValueError:
                try:
                    return float(text)
                except ValueError:
                    return Opaque(self.text(node))
        if kind == "true":
            return True
        if kind == "false":
            return False
        if kind == "null":
            return None
        if kind == "parenthesized_expression" and len(node.named_children) == 1:
            return self.value(node.named_children[0])
        if kind == "array":
            items = [c for c in node.named_children if c.type != "comment"]
            if any(c.type == "spread_element" for c in items):
                return Opaque(self.text(node))
            return [self.value(c) for c in items]
        if kind == "object":
            return self._object_value(node)
        if kind == "call_expression":
            return self._call_value(node)
        if self._is_reference(node):
            return Name(self.text(node))
        return Opaque(self.text(node))

    def _object_value(self, node: Node) -> Value:
        out: dict = {}
        for child in node.named_children:
            if child.type == "comment":
                continue
            if child.type == "pair":
                key_node = child.child_by_field_name("key")
                if key_node.type in ("property_identifier", "identifier"):
                    key = self.text(key_node)
                elif key_node.type == "string":
                    key = self._string_value(key_node)
                    if key is None:
                        return Opaque(self.text(node))
                else:
                    return Opaque(self.text(node))
                out[key] = self.value(child.child_by_field_name("value"))
            elif child.type == "shorthand_property_identifier":
                out[self.text(child)] = Name(self.text(child))
            else:
                return Opaque(self.text(node))
        return out

    def _call_value(self, node: Node) -> Value:
        function = node.child_by_field_name("function")
        arguments = node.child_by_field_name("arguments")
        if function is None or arguments is None or arguments.type != "arguments":
            return Opaque(self.text(node))
        args = tuple(self.value(c) for c in arguments.named_children if c.type != "comment")
        if function.type == "member_expression":
            prop = function.child_by_field_name("property")
            target = self.value(function.child_by_field_name("object"))
            return Invocation(target, self.text(prop), args, self.text(node))
        return Invocation(None, self.text(function), args, self.text(node))

    def render(self, value: Value) -> str:
        if isinstance(value, bool):
            return "true" if value else "false"
        if value is None:
            return "null"
        if isinstance(value, str):
            return _quote(value)
        if isinstance(value, (int, float)):
            return repr(value)
        if isinstance(value, list):
            return "[" + ", ".join(self.render(v) for v in value) + "]"
        if isinstance(value, dict):
            if not value:
                return "{}"
            fields = []
            for key, item in value.items():
                k = key if self.is_identifier(str(key)) else _quote(str(key))
                fields.append(f"{k}: {self.render(item)}")
            return "{ " + ", ".join(fields) + " }"
        if isinstance(value, Invocation):
            return value.text
        return value.text

    def trailing_options(self, site: CallSite) -> tuple[list[Node], Optional[dict]]:
        if site.args and site.args[-1].type == "object":
            options = self.value(site.args[-1])
            if isinstance(options, dict):
                return site.args[:-1], options
        return list(site.args), None

    # -- statements --------------------------------------------------------

    def is_statement(self, node: Node) -> bool:
        return node.type.endswith("_statement") or node.type in _DECLARATIONS

    def statement_of(self, node: Node) -> Optional[Node]:
        current = node
        parent = current.parent
        if parent is not None and parent.type == "await_expression":
            current, parent = parent, parent.parent
        if parent is not None and parent.type == "expression_statement":
            named = [c for c in parent.named_children if c.type != "comment"]
            if len(named) == 1 and named[0] == current:
                return parent
        return None


class TypeScriptAdapter(JavaScriptAdapter):
    grammar = "typescript"


class TsxAdapter(JavaScriptAdapter):
    grammar = "tsx"
