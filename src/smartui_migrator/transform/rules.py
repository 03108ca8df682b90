"""Language-independent interpretation of vendor snapshot arguments.

Adapters hand over neutral values (see values.py); this module decides what
the SmartUI call should carry: a snapshot name, an options record in SmartUI
shape, the layout regions that need emulation, and fidelity-loss notes.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from ..mappings.api import (
    DEFAULT_SNAPSHOT_NAME,
    EYES_CHECK,
    EYES_CYPRESS,
    EYES_REGION,
    EYES_WINDOW,
    FULLY_MODIFIERS,
    FULLY_WARNING,
    IGNORE_MODIFIERS,
    LAYOUT_MODIFIERS,
    NAME_MODIFIERS,
    REGION_ROOTS,
    TARGET_CLASS,
    TARGET_OPTION_KEYS,
    UNRESOLVED_VALUE,
    UNSUPPORTED_MODIFIER,
    UNSUPPORTED_OPTION,
    UNSUPPORTED_OPTION_DETAILS,
    WINDOW_ROOTS,
    CallShape,
    OptionRules,
    option_key,
)
from .values import Invocation, Name, Opaque, Value, selector_of, selectors_from, source_text

# (message, details)
Note = tuple[str, Optional[str]]


@dataclass
class SnapshotSpec:
    """What a rebuilt SmartUI snapshot call should contain."""

    name: Value
    options: dict = field(default_factory=dict)
    layout: list[str] = field(default_factory=list)
    notes: list[Note] = field(default_factory=list)


def _note(notes: list[Note], note: Note) -> None:
    if note not in notes:
        notes.append(note)


def _nest(out: dict, target: str, key: str, value: Value, is_list: bool, notes: list[Note]) -> None:
    bucket = out.get(target)
    if bucket is None:
        bucket = out[target] = {}
    elif not isinstance(bucket, dict):
        _note(notes, (UNRESOLVED_VALUE.format(text=source_text(bucket), key=target), None))
        return
    if is_list:
        existing = bucket.setdefault(key, [])
        if isinstance(existing, list):
            existing.extend(value if isinstance(value, list) else [value])
    else:
        bucket[key] = value


def remap_options(options: dict, rules: OptionRules) -> tuple[dict, list[Note]]:
    """Restructure a flat vendor options record into SmartUI's nested shape.

    Keys already in SmartUI shape pass through. Unknown keys are dropped with
    a note; known lossy keys are dropped with their own note.
    """
    out: dict = {}
    notes: list[Note] = []
    for key, value in options.items():
        k = option_key(str(key))
        if k in TARGET_OPTION_KEYS:
            if isinstance(value, dict) and isinstance(out.get(key), dict):
                for sub, sub_value in value.items():
                    _nest(out, key, sub, sub_value, isinstance(sub_value, list), notes)
            else:
                out[key] = value
            continue
        nested = rules.nested.get(k)
        if nested is not None:
            if nested.is_list:
                resolved, unresolved = selectors_from(value)
                for item in unresolved:
                    _note(notes, (UNRESOLVED_VALUE.format(text=source_text(item), key=key), None))
                if resolved:
                    _nest(out, nested.target, nested.key, resolved, True, notes)
            else:
                sel = selector_of(value)
                if sel is None:
                    _note(notes, (UNRESOLVED_VALUE.format(text=source_text(value), key=key), None))
                else:
                    _nest(out, nested.target, nested.key, sel, False, notes)
            continue
        if k in rules.silent:
            continue
        if k in rules.lossy:
            if value is not False and value is not None:
                _note(notes, rules.lossy[k])
            continue
        _note(notes, (UNSUPPORTED_OPTION.format(key=key), UNSUPPORTED_OPTION_DETAILS))
    return out, notes


def _add_ignores(options: dict, selectors: list[str]) -> None:
    if selectors:
        options.setdefault("ignoreDOM", {}).setdefault("cssSelector", []).extend(selectors)


def apply_layout(spec: SnapshotSpec) -> None:
    """Configure the snapshot to ignore everything inside each layout region."""
    _add_ignores(spec.options, [f"{sel} *" for sel in spec.layout])


# ---------------------------------------------------------------------------
# Readers
# ---------------------------------------------------------------------------


def _is_target_chain(value: Value) -> bool:
    return isinstance(value, Invocation) and value.chain()[0] == TARGET_CLASS


def _first_string(args: list[Value]) -> Optional[Value]:
    for arg in args:
        if isinstance(arg, str):
            return arg
    return None


def _name_value(value: Value) -> Optional[Value]:
    """Snapshot names may be literals or expressions (kept as source text)."""
    if isinstance(value, str):
        return value
    if isinstance(value, (Opaque, Name)):
        return value
    if isinstance(value, Invocation) and not _is_target_chain(value):
        return Opaque(value.text)
    return None


def read_target_chain(chain: Invocation, spec: SnapshotSpec, rules: OptionRules) -> None:
    """Interpret ``Target.window()/region()/layout()`` plus fluent modifiers."""
    _root, steps = chain.chain()
    if not steps:
        return
    (first, first_args), modifiers = steps[0], steps[1:]
    region: Optional[str] = None
    layout = False
    kind = first.lower()
    if kind in REGION_ROOTS or kind in LAYOUT_MODIFIERS:
        if first_args:
            region = selector_of(first_args[0])
            if region is None:
                _note(spec.notes, (UNRESOLVED_VALUE.format(text=source_text(first_args[0]), key=first), None))
        layout = kind in LAYOUT_MODIFIERS
    elif kind not in WINDOW_ROOTS:
        _note(spec.notes, (UNSUPPORTED_MODIFIER.format(name=first), None))

    ignores: list[str] = []
    for method, args in modifiers:
        m = option_key(method)
        if m in FULLY_MODIFIERS:
            if not args or args[0] is not False:
                _note(spec.notes, FULLY_WARNING)
        elif m in IGNORE_MODIFIERS:
            resolved, unresolved = selectors_from(list(args))
            ignores.extend(resolved)
            for item in unresolved:
                _note(spec.notes, (UNRESOLVED_VALUE.format(text=source_text(item), key=method), None))
        elif m in LAYOUT_MODIFIERS and region is not None:
            layout = True
        elif m in NAME_MODIFIERS and args:
            name = _name_value(args[0])
            if name is not None:
                spec.name = name
        else:
            _note(spec.notes, (UNSUPPORTED_MODIFIER.format(name=method), None))

    if region is not None:
        if layout:
            spec.layout.append(region)
        else:
            spec.options["element"] = {"cssSelector": region}
    _add_ignores(spec.options, ignores)


def _read_plain(shape: CallShape, args: list[Value], kwargs: dict, rules: OptionRules) -> SnapshotSpec:
    spec = SnapshotSpec(name=shape.default_name)
    rest = list(args)
    if rest:
        name = _name_value(rest[0])
        if name is not None:
            spec.name = name
            rest.pop(0)
    flat: dict = {}
    if shape.positional_options:
        for key, value in zip(shape.positional_options, rest):
            if value is not None:
                flat[key] = value
        rest = rest[len(shape.positional_options):]
    for value in rest:
        if isinstance(value, dict):
            flat.update(value)
        elif isinstance(value, Invocation):
            flat.update(builder_options(value))
    flat.update(kwargs)
    spec.options, spec.notes = remap_options(flat, rules)
    return spec


def builder_options(chain: Invocation) -> dict:
    """``new CheckOptions.Builder().withIgnoreElements(...).build()`` -> flat options."""
    _root, steps = chain.chain()
    out: dict = {}
    for method, args in steps:
        if method.startswith("with") and len(method) > 4 and args:
            key = method[4].lower() + method[5:]
            out[key] = args[0] if len(args) == 1 else list(args)
    return out


def _read_eyes_check(shape: CallShape, args: list[Value], kwargs: dict, rules: OptionRules) -> SnapshotSpec:
    spec = SnapshotSpec(name=shape.default_name)
    name = _first_string(args)
    if name is None:
        for key in ("name", "tag"):
            if key in kwargs:
                name = _name_value(kwargs[key])
    if name is None and args and not _is_target_chain(args[0]) and not isinstance(args[0], dict):
        name = _name_value(args[0])
    if name is not None:
        spec.name = name
    chain = next((a for a in list(args) + list(kwargs.values()) if _is_target_chain(a)), None)
    if chain is not None:
        read_target_chain(chain, spec, rules)
    return spec


def _read_eyes_window(shape: CallShape, args: list[Value], kwargs: dict, rules: OptionRules) -> SnapshotSpec:
    spec = SnapshotSpec(name=shape.default_name)
    flat = dict(kwargs)
    name = kwargs.get("tag", kwargs.get("name"))
    flat.pop("tag", None)
    flat.pop("name", None)
    for value in args:
        if isinstance(value, bool):
            flat.setdefault("fully", value)
        elif name is None and _name_value(value) is not None:
            name = value
    if name is not None and _name_value(name) is not None:
        spec.name = _name_value(name)
    spec.options, spec.notes = remap_options(flat, rules)
    return spec


def _read_eyes_region(shape: CallShape, args: list[Value], kwargs: dict, rules: OptionRules) -> SnapshotSpec:
    spec = SnapshotSpec(name=shape.default_name)
    rest = list(args)
    region_value = rest.pop(0) if rest else kwargs.get("region")
    flat = {k: v for k, v in kwargs.items() if k not in ("region", "tag", "name")}
    name = kwargs.get("tag", kwargs.get("name"))
    for value in rest:
        if isinstance(value, bool):
            flat.setdefault("fully", value)
        elif name is None and _name_value(value) is not None:
            name = value
    if name is not None and _name_value(name) is not None:
        spec.name = _name_value(name)
    spec.options, spec.notes = remap_options(flat, rules)
    if region_value is not None:
        sel = selector_of(region_value)
        if sel is None:
            _note(spec.notes, (UNRESOLVED_VALUE.format(text=source_text(region_value), key="region"), None))
        else:
            spec.options["element"] = {"cssSelector": sel}
    return spec


def _read_eyes_cypress(shape: CallShape, args: list[Value], kwargs: dict, rules: OptionRules) -> SnapshotSpec:
    spec = SnapshotSpec(name=shape.default_name)
    record: dict = {}
    named = False
    for value in args:
        if isinstance(value, dict):
            record.update(value)
        elif not named and _name_value(value) is not None:
            spec.name = _name_value(value)
            named = True
    tag = record.pop("tag", None)
    if tag is not None and _name_value(tag) is not None:
        spec.name = _name_value(tag)
    target = record.pop("target", "window")
    selector_value = record.pop("selector", None)
    match_level = record.pop("matchLevel", None)
    spec.options, spec.notes = remap_options(record, rules)
    if target == "region" and selector_value is not None:
        sel = selector_of(selector_value)
        if sel is None:
            _note(spec.notes, (UNRESOLVED_VALUE.format(text=source_text(selector_value), key="selector"), None))
        elif isinstance(match_level, str) and match_level.lower() == "layout":
            spec.layout.append(sel)
        else:
            spec.options["element"] = {"cssSelector": sel}
    elif match_level is not None and not (isinstance(match_level, str) and match_level.lower() == "strict"):
        _note(spec.notes, (UNSUPPORTED_MODIFIER.format(name=f"matchLevel: {source_text(match_level)}"), None))
    return spec


_READERS = {
    EYES_CHECK: _read_eyes_check,
    EYES_WINDOW: _read_eyes_window,
    EYES_REGION: _read_eyes_region,
    EYES_CYPRESS: _read_eyes_cypress,
}


def read_snapshot(shape: CallShape, args: list[Value], kwargs: dict, rules: OptionRules) -> SnapshotSpec:
    """Interpret a matched vendor snapshot call."""
    reader = _READERS.get(shape.reader, _read_plain)
    spec = reader(shape, args, kwargs, rules)
    apply_layout(spec)
    if spec.name is None:
        spec.name = DEFAULT_SNAPSHOT_NAME
    return spec
