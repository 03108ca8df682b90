"""Language-independent rewrite pass over one parsed file."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from ..mappings.api import (
    LAYOUT_COMMENT,
    LAYOUT_DETAILS,
    LAYOUT_WARNING,
    REMOVE_NOT_STATEMENT,
    REMOVE_NOT_STATEMENT_DETAILS,
    CallShape,
    PlatformRules,
    SnapshotTarget,
    Strategy,
    snapshot_target,
    visibility_assertion,
)
from ..models import CodeChange, Framework, TransformationWarning
from .adapters.base import Binding, CallSite, ImportTable, LanguageAdapter
from .edits import EditBuffer, indentation_at
from .parser import Node
from .rules import read_snapshot, remap_options


@dataclass
class RewriteOutcome:
    source: bytes
    changes: list[CodeChange] = field(default_factory=list)
    warnings: list[TransformationWarning] = field(default_factory=list)
    snapshot_count: int = 0


class Rewriter:
    """Applies one platform's call-shape table through a language adapter."""

    def __init__(
        self, adapter: LanguageAdapter, rules: PlatformRules, framework: Framework, imports: ImportTable
    ) -> None:
        self.adapter = adapter
        self.rules = rules
        self.framework = framework
        self.imports = imports
        self.target: SnapshotTarget = snapshot_target(adapter.language, framework)

    def _match(self, site: CallSite, bound: dict[str, str]) -> Optional[CallShape]:
        for shape in self.rules.shapes:
            names = frozenset(name for name, cls in bound.items() if cls in shape.classes)
            if shape.matches(site.receiver, site.method, names):
                return shape
        return None

    def _driver(self, matched: list[tuple[CallSite, CallShape]], bindings: list[Binding]) -> Optional[str]:
        if self.target.driver is None:
            return None
        opens = [s for s in self.rules.shapes if s.captures_driver]
        for site, shape in matched:
            if shape.captures_driver and site.args:
                return self.adapter.text(site.args[0])
        if not opens:
            for binding in bindings:
                if binding.driver:
                    return binding.driver
        return self.target.driver

    def rewrite(self, source: bytes, root: Node) -> RewriteOutcome:
        adapter = self.adapter
        buffer = EditBuffer(source)
        out = RewriteOutcome(source)
        emitted: list[str] = []

        bindings = adapter.find_bindings(root, self.rules.vendor_classes)
        bound = {b.name: b.class_name for b in bindings}
        matched = [(site, shape) for site in adapter.iter_calls(root) if (shape := self._match(site, bound))]
        driver = self._driver(matched, bindings)

        out.changes.extend(adapter.rewrite_imports(root, buffer, self.imports))

        removals: list[tuple[Node, str]] = [
            (b.statement, "Remove vendor object declaration") for b in bindings if b.statement is not None
        ]
        for site, shape in matched:
            if shape.strategy is not Strategy.REMOVE:
                continue
            statement = adapter.statement_of(site.node)
            if statement is None:
                out.warnings.append(
                    TransformationWarning(
                        REMOVE_NOT_STATEMENT.format(text=adapter.text(site.node)),
                        REMOVE_NOT_STATEMENT_DETAILS,
                        line=site.line,
                    )
                )
                continue
            removals.append((statement, f"Remove `{site.method}` call"))
        removing = frozenset(stmt.start_byte for stmt, _d in removals)
        for statement, description in removals:
            replacement = adapter.removal_text(statement, removing)
            if buffer.delete_statement(statement.start_byte, statement.end_byte, replacement):
                out.changes.append(
                    CodeChange("remove", adapter.text(statement), replacement, adapter.line_of(statement), description)
                )

        for site, shape in matched:
            if shape.strategy is Strategy.RENAME:
                self._rename(site, shape, buffer, out, emitted)
            elif shape.strategy is Strategy.SNAPSHOT:
                self._snapshot(site, shape, driver, buffer, out, emitted)

        out.changes.extend(adapter.finalize(root, buffer, emitted))
        out.source = buffer.apply()
        return out

    # -- strategies --------------------------------------------------------

    def _warn(self, out: RewriteOutcome, notes, line: int) -> None:
        for message, details in notes:
            out.warnings.append(TransformationWarning(message, details, line=line))

    def _rename(self, site: CallSite, shape: CallShape, buffer: EditBuffer, out: RewriteOutcome, emitted: list[str]) -> None:
        adapter = self.adapter
        if buffer.overlaps(site.node.start_byte, site.node.end_byte):
            return
        old_name = adapter.text(site.name_node)
        if not buffer.replace(site.name_node.start_byte, site.name_node.end_byte, shape.rename_to):
            return
        out.snapshot_count += 1
        out.changes.append(
            CodeChange("rename", old_name, shape.rename_to, site.line, f"Rename `{old_name}` to `{shape.rename_to}`")
        )
        positional, options = adapter.trailing_options(site)
        if options is None:
            return
        remapped, notes = remap_options(options, self.rules.options)
        self._warn(out, notes, site.line)
        if remapped == options:
            return
        args = [adapter.text(n) for n in positional]
        if remapped:
            args.append(adapter.render_options(remapped))
        new_args = "(" + ", ".join(args) + ")"
        old_args = adapter.text(site.arguments)
        if buffer.replace(site.arguments.start_byte, site.arguments.end_byte, new_args):
            emitted.append(new_args)
            out.changes.append(CodeChange("remap", old_args, new_args, site.line, "Remap snapshot options"))

    def _snapshot(
        self,
        site: CallSite,
        shape: CallShape,
        driver: Optional[str],
        buffer: EditBuffer,
        out: RewriteOutcome,
        emitted: list[str],
    ) -> None:
        adapter = self.adapter
        node = site.node
        if buffer.overlaps(node.start_byte, node.end_byte):
            return
        args = [adapter.value(n) for n in site.args]
        kwargs = {key: adapter.value(n) for key, n in site.kwargs}
        spec = read_snapshot(shape, args, kwargs, self.rules.options)

        call_driver = site.receiver if shape.receiver_is_driver and site.receiver else driver
        call_args = [call_driver] if self.target.driver is not None and call_driver else []
        call_args.append(adapter.render(spec.name))
        if spec.options:
            call_args.append(adapter.render_options(spec.options))
        call = adapter.render_call(self.target.callee, call_args)
        old = adapter.text(node)
        if not buffer.replace(node.start_byte, node.end_byte, call):
            return
        emitted.append(call)
        out.snapshot_count += 1
        self._warn(out, spec.notes, site.line)

        if not spec.layout:
            kind = "remap" if spec.options or spec.notes else "rename"
            out.changes.append(CodeChange(kind, old, call, site.line, "Rebuild as SmartUI snapshot"))
            return
        statement = adapter.enclosing_statement(node)
        indent = indentation_at(buffer.source, statement.start_byte)
        template = visibility_assertion(adapter.language, self.framework)
        lines = [
            template.format(driver=call_driver or self.target.driver or "driver", selector=adapter.render(sel))
            for sel in spec.layout
        ]
        lines.append(adapter.comment(LAYOUT_COMMENT))
        prefix = "".join(f"{line}\n{indent}" for line in lines)
        if buffer.insert(statement.start_byte, prefix):
            emitted.append(prefix)
        out.changes.append(CodeChange("emulate", old, prefix + call, site.line, "Emulate layout region"))
        for sel in spec.layout:
            out.warnings.append(TransformationWarning(LAYOUT_WARNING.format(selector=sel), LAYOUT_DETAILS, line=site.line))
