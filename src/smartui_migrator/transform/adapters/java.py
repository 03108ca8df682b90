"""Java adapter (tree-sitter-java)."""

from __future__ import annotations

import json
from typing import Iterator, Optional

from ...mappings.dependencies import JAVA_TARGET_IMPORT
from ...models import CodeChange, Language
from ..edits import EditBuffer, line_end, line_start
from ..parser import Node, walk
from ..values import Invocation, Name, Opaque, Value, join_surrogates
from .base import Binding, CallSite, ImportTable, LanguageAdapter

_LIST_FACTORIES = {("Arrays", "asList"), ("List", "of"), ("Set", "of")}
_DECLARATIONS = frozenset({"local_variable_declaration", "field_declaration"})
_MAP_OF_LIMIT = 10


def _type_name(text: str) -> str:
    """``Map<String, Object>`` -> ``Map``; ``com.x.Eyes`` -> ``Eyes``."""
    return text.split("<", 1)[0].strip().split(".")[-1]


class JavaAdapter(LanguageAdapter):
    language = Language.JAVA
    grammar = "java"

    # -- discovery ---------------------------------------------------------

    def _receiver(self, obj: Node) -> str:
        if obj.type == "identifier":
            return self.text(obj)
        if obj.type == "field_access":
            return self.text(obj.child_by_field_name("field"))
        return ""

    def _arguments(self, arguments: Optional[Node]) -> list[Node]:
        if arguments is None:
            return []
        return [c for c in arguments.named_children if c.type not in ("line_comment", "block_comment")]

    def iter_calls(self, root: Node) -> Iterator[CallSite]:
        for node in walk(root):
            if node.type != "method_invocation":
                continue
            name = node.child_by_field_name("name")
            arguments = node.child_by_field_name("arguments")
            if name is None or arguments is None:
                continue
            obj = node.child_by_field_name("object")
            receiver = None if obj is None else self._receiver(obj)
            yield CallSite(node, receiver, self.text(name), name, arguments, self._arguments(arguments))

    def _creation(self, value: Optional[Node]) -> Optional[Node]:
        """First object creation in a value, e.g. inside ``new X.Builder(d).build()``."""
        if value is None:
            return None
        for node in walk(value):
            if node.type == "object_creation_expression":
                return node
        return None

    def _created_class(self, creation: Node, classes: frozenset[str]) -> Optional[str]:
        type_text = self.text(creation.child_by_field_name("type")).split("<", 1)[0]
        for part in type_text.split("."):
            if part in classes:
                return part
        return None

    def _driver_of(self, creation: Node) -> Optional[str]:
        args = self._arguments(creation.child_by_field_name("arguments"))
        return self.text(args[0]) if args else None

    def find_bindings(self, root: Node, classes: frozenset[str]) -> list[Binding]:
        found: list[Binding] = []
        if not classes:
            return found
        for node in walk(root):
            if node.type in _DECLARATIONS:
                declared = _type_name(self.text(node.child_by_field_name("type")))
                for declarator in node.children_by_field_name("declarator"):
                    creation = self._creation(declarator.child_by_field_name("value"))
                    class_name = declared if declared in classes else None
                    if class_name is None and creation is not None:
                        class_name = self._created_class(creation, classes)
                    if class_name is None:
                        continue
                    driver = self._driver_of(creation) if creation is not None else None
                    name = self.text(declarator.child_by_field_name("name"))
                    found.append(Binding(name, class_name, driver, node))
            elif node.type == "assignment_expression":
                left = node.child_by_field_name("left")
                creation = self._creation(node.child_by_field_name("right"))
                if left is None or creation is None:
                    continue
                class_name = self._created_class(creation, classes)
                if class_name is None:
                    continue
                if left.type == "identifier":
                    name = self.text(left)
                elif left.type == "field_access":
                    name = self.text(left.child_by_field_name("field"))
                else:
                    continue
                parent = node.parent
                statement = parent if parent is not None and parent.type == "expression_statement" else None
                found.append(Binding(name, class_name, self._driver_of(creation), statement))
        return found

    # -- imports -----------------------------------------------------------

    def _imports(self, root: Node) -> list[tuple[Node, str, bool]]:
        """(declaration, dotted name, is wildcard) for each non-static import."""
        out = []
        for node in root.named_children:
            if node.type != "import_declaration":
                continue
            if any(c.type == "static" for c in node.children):
                continue
            name = next((c for c in node.named_children if c.type in ("scoped_identifier", "identifier")), None)
            if name is None:
                continue
            wildcard = any(c.type == "asterisk" for c in node.children)
            out.append((node, self.text(name), wildcard))
        return out

    @staticmethod
    def _lookup(name: str, wildcard: bool, modules: dict[str, str]) -> Optional[str]:
        key = f"{name}.*" if wildcard else name
        if key in modules:
            return modules[key]
        for entry, target in modules.items():
            if entry.endswith(".*") and not wildcard and name.startswith(entry[:-1]):
                return target
        return None

    def rewrite_imports(self, root: Node, buffer: EditBuffer, table: ImportTable) -> list[CodeChange]:
        changes: list[CodeChange] = []
        imports = self._imports(root)
        present = any(name == JAVA_TARGET_IMPORT and not wildcard for _n, name, wildcard in imports)
        emitted: set[str] = set()
        for node, name, wildcard in imports:
            target = self._lookup(name, wildcard, table.modules)
            if target is None:
                continue
            old = self.text(node)
            if present or target in emitted:
                if buffer.delete_statement(node.start_byte, node.end_byte):
                    changes.append(CodeChange("remove", old, "", self.line_of(node), "Remove vendor import"))
                continue
            emitted.add(target)
            new = f"import {target};"
            if buffer.replace(node.start_byte, node.end_byte, new):
                changes.append(CodeChange("import", old, new, self.line_of(node), f"Replace import '{name}' with '{target}'"))
        return changes

    def finalize(self, root: Node, buffer: EditBuffer, emitted: list[str]) -> list[CodeChange]:
        joined = "\n".join(emitted)
        needed = []
        if "List.of(" in joined:
            needed.append("java.util.List")
        if "Map.of(" in joined or "Map.ofEntries(" in joined:
            needed.append("java.util.Map")
        if not needed:
            return []
        imports = self._imports(root)
        have = {name for _n, name, wildcard in imports if not wildcard}
        wild = {name for _n, name, wildcard in imports if wildcard}
        missing = [n for n in needed if n not in have and n.rsplit(".", 1)[0] not in wild]
        if not missing:
            return []
        lines = "".join(f"import {n};\n" for n in missing)
        if imports:
            pos = line_start(buffer.source, imports[0][0].start_byte)
            text = lines
        else:
            package = next((c for c in root.named_children if c.type == "package_declaration"), None)
            pos = line_end(buffer.source, package.end_byte) if package is not None else 0
            text = ("\n" + lines) if package is not None else lines + "\n"
        if not buffer.insert(pos, text):
            return []
        return [CodeChange("import", "", f"import {n};", 1, f"Add import {n}") for n in missing]

    # -- values ------------------------------------------------------------

    def _is_reference(self, node: Node) -> bool:
        if node.type == "identifier":
            return True
        if node.type == "field_access":
            return self._is_reference(node.child_by_field_name("object"))
        return False

    def _string_value(self, node: Node) -> Value:
        if self.text(node).startswith('"""'):
            return Opaque(self.text(node))
        parts = []
        for child in node.named_children:
            if child.type == "string_fragment":
                parts.append(self.text(child))
            elif child.type == "escape_sequence":
                try:
                    parts.append(json.loads(f'"{self.text(child)}"'))
                except ValueError:
                    return Opaque(self.text(node))
        text = join_surrogates("".join(parts))
        return Opaque(self.text(node)) if text is None else text

    def value(self, node: Node) -> Value:
        kind = node.type
        if kind == "string_literal":
            return self._string_value(node)
        if kind in ("decimal_integer_literal", "hex_integer_literal", "octal_integer_literal", "binary_integer_literal"):
            try:
                return int(self.text(node).rstrip("lL").replace("_", ""), 0)
            except ValueError:
                return Opaque(self.text(node))
        if kind == "decimal_floating_point_literal":
            try:
                return float(self.text(node).rstrip("fFdD").replace("_", ""))
            except ValueError:
                return Opaque(self.text(node))
        if kind == "true":
            return True
        if kind == "false":
            return False
        if kind == "null_literal":
            return None
        if kind == "parenthesized_expression" and len(node.named_children) == 1:
            return self.value(node.named_children[0])
        if kind == "array_creation_expression":
            init = node.child_by_field_name("value")
            if init is not None:
                return [self.value(c) for c in init.named_children if c.type not in ("line_comment", "block_comment")]
            return Opaque(self.text(node))
        if kind == "method_invocation":
            return self._call_value(node)
        if self._is_reference(node):
            return Name(self.text(node))
        return Opaque(self.text(node))

    def _call_value(self, node: Node) -> Value:
        obj = node.child_by_field_name("object")
        method = self.text(node.child_by_field_name("name"))
        args = tuple(self.value(a) for a in self._arguments(node.child_by_field_name("arguments")))
        if obj is not None and obj.type == "identifier":
            if (self.text(obj), method) in _LIST_FACTORIES:
                return list(args)
            if (self.text(obj), method) == ("Map", "of") and len(args) % 2 == 0:
                keys = args[0::2]
                if all(isinstance(k, str) for k in keys):
                    return dict(zip(keys, args[1::2]))
        target = self.value(obj) if obj is not None else None
        return Invocation(target, method, args, self.text(node))

    def render(self, value: Value) -> str:
        if isinstance(value, bool):
            return "true" if value else "false"
        if value is None:
            return "null"
        if isinstance(value, str):
            return json.dumps(value, ensure_ascii=False)
        if isinstance(value, (int, float)):
            return repr(value)
        if isinstance(value, list):
            return "List.of(" + ", ".join(self.render(v) for v in value) + ")"
        if isinstance(value, dict):
            if len(value) > _MAP_OF_LIMIT:
                entries = ", ".join(f"Map.entry({self.render(str(k))}, {self.render(v)})" for k, v in value.items())
                return f"Map.ofEntries({entries})"
            return "Map.of(" + ", ".join(f"{self.render(str(k))}, {self.render(v)}" for k, v in value.items()) + ")"
        return value.text

    # -- statements --------------------------------------------------------

    def is_statement(self, node: Node) -> bool:
        return node.type.endswith("_statement") or node.type in _DECLARATIONS

    def statement_of(self, node: Node) -> Optional[Node]:
        parent = node.parent
        if parent is not None and parent.type == "expression_statement":
            named = [c for c in parent.named_children if c.type not in ("line_comment", "block_comment")]
            if len(named) == 1 and named[0] == node:
                return parent
        return None
