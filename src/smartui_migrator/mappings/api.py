"""API call shapes, option keys and warning texts per platform and language.

The rewrite engine is language-independent: it asks these tables which calls
are vendor constructs, which strategy applies, and how option records map to
SmartUI's nested option shape.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from ..models import Framework, Language, Platform

DEFAULT_SNAPSHOT_NAME = "Untitled Snapshot"


class Strategy(Enum):
    """How a matched construct is rewritten."""

    RENAME = "rename"  # change the call name, keep arguments
    SNAPSHOT = "snapshot"  # rebuild as a SmartUI snapshot call
    REMOVE = "remove"  # delete the whole statement


# Argument readers for SNAPSHOT shapes
PLAIN = "plain"
EYES_CHECK = "eyes-check"
EYES_WINDOW = "eyes-window"
EYES_REGION = "eyes-region"
EYES_CYPRESS = "eyes-cypress"


@dataclass(frozen=True)
class CallShape:
    """Structural description of a vendor call.

    An empty `receivers` set with no `classes` means a bare function call
    (`percySnapshot(...)`); otherwise the call must be `receiver.method(...)`
    where the receiver is one of `receivers` or a variable bound to an
    instance of one of `classes`.
    """

    method: str
    strategy: Strategy
    receivers: frozenset[str] = frozenset()
    classes: frozenset[str] = frozenset()
    rename_to: Optional[str] = None
    reader: str = PLAIN
    default_name: str = DEFAULT_SNAPSHOT_NAME
    positional_options: tuple[str, ...] = ()
    captures_driver: bool = False
    receiver_is_driver: bool = False

    @property
    def bare(self) -> bool:
        return not self.receivers and not self.classes

    def matches(self, receiver: Optional[str], method: str, bound: frozenset[str] = frozenset()) -> bool:
        if method != self.method:
            return False
        if self.bare:
            return receiver is None
        return receiver is not None and (receiver in self.receivers or receiver in bound)


@dataclass(frozen=True)
class NestedOption:
    """A flat source option that becomes `{target: {key: value}}`."""

    target: str
    key: str
    is_list: bool = False


@dataclass(frozen=True)
class OptionRules:
    """Option-record handling for one platform. Keys are normalized (see option_key)."""

    nested: dict[str, NestedOption] = field(default_factory=dict)
    lossy: dict[str, tuple[str, Optional[str]]] = field(default_factory=dict)
    silent: frozenset[str] = frozenset()


@dataclass(frozen=True)
class PlatformRules:
    platform: Platform
    language: Language
    shapes: tuple[CallShape, ...]
    options: OptionRules
    vendor_classes: frozenset[str] = frozenset()


@dataclass(frozen=True)
class SnapshotTarget:
    """How a rebuilt SmartUI call is spelled. driver None means no driver argument."""

    callee: str
    driver: Optional[str]


def option_key(key: str) -> str:
    """Normalize camelCase and snake_case option keys to one spelling."""
    return key.replace("_", "").replace("-", "").lower()


# SmartUI option keys that are already in target shape
TARGET_OPTION_KEYS = frozenset({"ignoredom", "selectdom", "element", "ignoretype"})

# ---------------------------------------------------------------------------
# Warning texts
# ---------------------------------------------------------------------------

WIDTHS_WARNING = (
    "Per-snapshot `widths` option was found and is not supported. "
    "Viewports must be configured in `.smartui.json`.",
    "Configure viewports globally in your SmartUI configuration file instead of per-snapshot.",
)
FULLY_WARNING = (
    "Applitools `fully()` was detected. To achieve full-page screenshots in SmartUI, please "
    "ensure your viewports in `.smartui.json` are defined with a single width value (e.g., `[1920]`).",
    None,
)
DIFFING_WARNING = (
    "Sauce Labs' custom `diffingMethod` and `diffingOptions` are not supported by SmartUI. "
    "The snapshot will be compared using SmartUI's default algorithm. Please review the results carefully.",
    None,
)
UNSUPPORTED_OPTION = "Option `{key}` is not supported by SmartUI and was removed from the snapshot call."
UNSUPPORTED_OPTION_DETAILS = "The original behavior of this option is not reproduced. Review the migrated snapshot."
UNSUPPORTED_MODIFIER = "Check setting `{name}` has no SmartUI equivalent and was dropped."
UNRESOLVED_VALUE = "Value `{text}` for `{key}` is not a literal and could not be migrated."
LAYOUT_COMMENT = (
    "MIGRATION-NOTE: Applitools 'layout' region was emulated. A functional assertion was added "
    "to check for the container's visibility, and a SmartUI snapshot was taken with child "
    "elements ignored. Please verify this provides adequate coverage."
)
LAYOUT_WARNING = (
    "Applitools layout region `{selector}` was emulated with a visibility assertion and a "
    "snapshot that ignores its child elements."
)
LAYOUT_DETAILS = "SmartUI has no layout match level. Verify that the emulation provides adequate coverage."
PARSE_FAILURE = "Failed to parse source code: {reason}"
PARSE_FAILURE_DETAILS = "The source file may contain unsupported syntax or be malformed."
REWRITE_FAILURE = "Failed to rewrite source code: {reason}"
REWRITE_FAILURE_DETAILS = "The file was left unchanged. Migrate its visual calls manually."
REMOVE_NOT_STATEMENT = "Could not remove `{text}` because it is not a standalone statement."
REMOVE_NOT_STATEMENT_DETAILS = "Remove this vendor session call manually."

# ---------------------------------------------------------------------------
# Option rules
# ---------------------------------------------------------------------------

_IGNORE_DOM = NestedOption("ignoreDOM", "cssSelector", is_list=True)
_ELEMENT = NestedOption("element", "cssSelector")

OPTION_RULES: dict[Platform, OptionRules] = {
    Platform.PERCY: OptionRules(
        nested={"ignoreregionselectors": _IGNORE_DOM, "scope": _ELEMENT},
        lossy={"widths": WIDTHS_WARNING},
    ),
    Platform.APPLITOOLS: OptionRules(
        nested={"ignore": _IGNORE_DOM, "ignoreregions": _IGNORE_DOM},
        lossy={"fully": FULLY_WARNING},
    ),
    Platform.SAUCE_LABS: OptionRules(
        nested={"ignoredregions": _IGNORE_DOM, "clipselector": _ELEMENT},
        lossy={"diffingmethod": DIFFING_WARNING, "diffingoptions": DIFFING_WARNING},
        silent=frozenset({"capturedom"}),
    ),
}

# Fluent check-setting modifiers (`Target.window().fully()`)
FULLY_MODIFIERS = frozenset({"fully"})
IGNORE_MODIFIERS = frozenset({"ignore", "ignoreregions", "ignoreregion"})
LAYOUT_MODIFIERS = frozenset({"layout"})
NAME_MODIFIERS = frozenset({"withname", "name"})
REGION_ROOTS = frozenset({"region"})
WINDOW_ROOTS = frozenset({"window"})
TARGET_CLASS = "Target"

# ---------------------------------------------------------------------------
# Call shapes
# ---------------------------------------------------------------------------


def _f(*names: str) -> frozenset[str]:
    return frozenset(names)


def _removals(methods: tuple[str, ...], receivers: frozenset[str], classes: frozenset[str]) -> tuple[CallShape, ...]:
    return tuple(
        CallShape(m, Strategy.REMOVE, receivers=receivers, classes=classes, captures_driver=(m == "open"))
        for m in methods
    )


_EYES = _f("eyes")
_EYES_CLASSES = _f("Eyes")
_RUNNERS = _f("runner")
_RUNNER_CLASSES = _f("ClassicRunner", "VisualGridRunner")
_APPLITOOLS_VENDOR = _EYES_CLASSES | _RUNNER_CLASSES | _f("BatchInfo")

_PERCY_OPTIONS = ("widths", "minHeight", "enableJavaScript", "percyCSS", "scope")

API_RULES: dict[tuple[Platform, Language], PlatformRules] = {
    (Platform.PERCY, Language.JAVASCRIPT): PlatformRules(
        Platform.PERCY,
        Language.JAVASCRIPT,
        shapes=(
            CallShape("percySnapshot", Strategy.RENAME, rename_to="smartuiSnapshot"),
            CallShape("percySnapshot", Strategy.RENAME, receivers=_f("cy"), rename_to="smartuiSnapshot"),
            CallShape("percyScreenshot", Strategy.RENAME, rename_to="smartuiSnapshot"),
        ),
        options=OPTION_RULES[Platform.PERCY],
    ),
    (Platform.PERCY, Language.PYTHON): PlatformRules(
        Platform.PERCY,
        Language.PYTHON,
        shapes=(
            CallShape("percy_snapshot", Strategy.RENAME, rename_to="smartui_snapshot"),
            CallShape("percy_screenshot", Strategy.RENAME, rename_to="smartui_snapshot"),
        ),
        options=OPTION_RULES[Platform.PERCY],
    ),
    (Platform.PERCY, Language.JAVA): PlatformRules(
        Platform.PERCY,
        Language.JAVA,
        shapes=(
            CallShape(
                "snapshot",
                Strategy.SNAPSHOT,
                receivers=_f("percy"),
                classes=_f("Percy"),
                positional_options=_PERCY_OPTIONS,
            ),
            CallShape("screenshot", Strategy.SNAPSHOT, receivers=_f("percy", "appPercy"), classes=_f("AppPercy")),
        ),
        options=OPTION_RULES[Platform.PERCY],
        vendor_classes=_f("Percy", "AppPercy"),
    ),
    (Platform.APPLITOOLS, Language.JAVASCRIPT): PlatformRules(
        Platform.APPLITOOLS,
        Language.JAVASCRIPT,
        shapes=(
            *_removals(
                ("open", "close", "closeAsync", "abort", "abortAsync", "abortIfNotClosed",
                 "setApiKey", "setBatch", "setConfiguration"),
                _EYES,
                _EYES_CLASSES,
            ),
            *_removals(("getAllTestResults",), _RUNNERS, _RUNNER_CLASSES),
            CallShape("eyesOpen", Strategy.REMOVE, receivers=_f("cy")),
            CallShape("eyesClose", Strategy.REMOVE, receivers=_f("cy")),
            CallShape("check", Strategy.SNAPSHOT, receivers=_EYES, classes=_EYES_CLASSES, reader=EYES_CHECK),
            CallShape(
                "checkWindow", Strategy.SNAPSHOT, receivers=_EYES, classes=_EYES_CLASSES,
                reader=EYES_WINDOW, default_name="Full Page",
            ),
            CallShape(
                "checkRegion", Strategy.SNAPSHOT, receivers=_EYES, classes=_EYES_CLASSES,
                reader=EYES_REGION, default_name="Region",
            ),
            CallShape("eyesCheckWindow", Strategy.SNAPSHOT, receivers=_f("cy"), reader=EYES_CYPRESS),
        ),
        options=OPTION_RULES[Platform.APPLITOOLS],
        vendor_classes=_APPLITOOLS_VENDOR,
    ),
    (Platform.APPLITOOLS, Language.PYTHON): PlatformRules(
        Platform.APPLITOOLS,
        Language.PYTHON,
        shapes=(
            *_removals(
                ("open", "close", "close_async", "abort", "abort_async", "abort_if_not_closed",
                 "set_api_key", "set_batch", "set_configuration"),
                _EYES,
                _EYES_CLASSES,
            ),
            *_removals(("get_all_test_results",), _RUNNERS, _RUNNER_CLASSES),
            CallShape("check", Strategy.SNAPSHOT, receivers=_EYES, classes=_EYES_CLASSES, reader=EYES_CHECK),
            CallShape(
                "check_window", Strategy.SNAPSHOT, receivers=_EYES, classes=_EYES_CLASSES,
                reader=EYES_WINDOW, default_name="Full Page",
            ),
            CallShape(
                "check_region", Strategy.SNAPSHOT, receivers=_EYES, classes=_EYES_CLASSES,
                reader=EYES_REGION, default_name="Region",
            ),
        ),
        options=OPTION_RULES[Platform.APPLITOOLS],
        vendor_classes=_APPLITOOLS_VENDOR,
    ),
    (Platform.APPLITOOLS, Language.JAVA): PlatformRules(
        Platform.APPLITOOLS,
        Language.JAVA,
        shapes=(
            *_removals(
                ("open", "close", "closeAsync", "abort", "abortAsync", "abortIfNotClosed",
                 "setApiKey", "setBatch", "setConfiguration"),
                _EYES,
                _EYES_CLASSES,
            ),
            *_removals(("getAllTestResults",), _RUNNERS, _RUNNER_CLASSES),
            CallShape("check", Strategy.SNAPSHOT, receivers=_EYES, classes=_EYES_CLASSES, reader=EYES_CHECK),
            CallShape(
                "checkWindow", Strategy.SNAPSHOT, receivers=_EYES, classes=_EYES_CLASSES,
                reader=EYES_WINDOW, default_name="Full Page",
            ),
            CallShape(
                "checkRegion", Strategy.SNAPSHOT, receivers=_EYES, classes=_EYES_CLASSES,
                reader=EYES_REGION, default_name="Region",
            ),
        ),
        options=OPTION_RULES[Platform.APPLITOOLS],
        vendor_classes=_APPLITOOLS_VENDOR,
    ),
    (Platform.SAUCE_LABS, Language.JAVASCRIPT): PlatformRules(
        Platform.SAUCE_LABS,
        Language.JAVASCRIPT,
        shapes=(
            CallShape("sauceVisualCheck", Strategy.RENAME, receivers=_f("cy"), rename_to="smartuiSnapshot"),
            CallShape("sauceVisualCheck", Strategy.SNAPSHOT, receivers=_f("browser"), receiver_is_driver=True),
            CallShape("sauceVisualCheck", Strategy.RENAME, rename_to="smartuiSnapshot"),
        ),
        options=OPTION_RULES[Platform.SAUCE_LABS],
    ),
    (Platform.SAUCE_LABS, Language.PYTHON): PlatformRules(
        Platform.SAUCE_LABS,
        Language.PYTHON,
        shapes=(
            CallShape(
                "sauce_visual_check", Strategy.SNAPSHOT,
                receivers=_f("visual", "visual_client", "sauce_visual"), classes=_f("SauceLabsVisual"),
            ),
            *_removals(
                ("create_build", "finish_build"),
                _f("visual", "visual_client", "sauce_visual"),
                _f("SauceLabsVisual"),
            ),
        ),
        options=OPTION_RULES[Platform.SAUCE_LABS],
        vendor_classes=_f("SauceLabsVisual"),
    ),
    (Platform.SAUCE_LABS, Language.JAVA): PlatformRules(
        Platform.SAUCE_LABS,
        Language.JAVA,
        shapes=(
            CallShape(
                "sauceVisualCheck", Strategy.SNAPSHOT,
                receivers=_f("visual", "visualApi"), classes=_f("VisualApi"),
            ),
        ),
        options=OPTION_RULES[Platform.SAUCE_LABS],
        vendor_classes=_f("VisualApi"),
    ),
}

# ---------------------------------------------------------------------------
# Rebuilt-call targets and emulation assertions
# ---------------------------------------------------------------------------

JS_TARGET_SYMBOL = "smartuiSnapshot"
PYTHON_TARGET_SYMBOL = "smartui_snapshot"

SNAPSHOT_TARGETS: dict[tuple[Language, Optional[Framework]], SnapshotTarget] = {
    (Language.JAVASCRIPT, Framework.CYPRESS): SnapshotTarget("cy.smartuiSnapshot", None),
    (Language.JAVASCRIPT, Framework.PLAYWRIGHT): SnapshotTarget("smartuiSnapshot", "page"),
    (Language.JAVASCRIPT, None): SnapshotTarget("smartuiSnapshot", "driver"),
    (Language.PYTHON, None): SnapshotTarget("smartui_snapshot", "driver"),
    (Language.JAVA, None): SnapshotTarget("SmartUISnapshot.smartuiSnapshot", "driver"),
}

# {driver} and {selector} are substituted; selector is already a quoted literal
VISIBILITY_ASSERTIONS: dict[tuple[Language, Optional[Framework]], str] = {
    (Language.JAVASCRIPT, Framework.CYPRESS): "cy.get({selector}).should('be.visible');",
    (Language.JAVASCRIPT, Framework.PLAYWRIGHT): "await expect({driver}.locator({selector})).toBeVisible();",
    (Language.JAVASCRIPT, None): "assert.ok(await {driver}.findElement(By.css({selector})).isDisplayed());",
    (Language.PYTHON, None): "assert {driver}.find_element(By.CSS_SELECTOR, {selector}).is_displayed()",
    (Language.JAVA, None): "Assert.assertTrue({driver}.findElement(By.cssSelector({selector})).isDisplayed());",
}


def rules_for(platform: Platform, language: Language) -> PlatformRules:
    return API_RULES[(platform, language)]


def snapshot_target(language: Language, framework: Framework) -> SnapshotTarget:
    return SNAPSHOT_TARGETS.get((language, framework)) or SNAPSHOT_TARGETS[(language, None)]


def visibility_assertion(language: Language, framework: Framework) -> str:
    return VISIBILITY_ASSERTIONS.get((language, framework)) or VISIBILITY_ASSERTIONS[(language, None)]


# ---------------------------------------------------------------------------
# Robot Framework keywords (Sauce Labs library)
# ---------------------------------------------------------------------------

ROBOT_KEYWORD_RENAMES: dict[Platform, dict[str, str]] = {
    Platform.SAUCE_LABS: {"visual snapshot": "SmartUI Snapshot"},
}
ROBOT_KEYWORD_REMOVALS: dict[Platform, frozenset[str]] = {
    Platform.SAUCE_LABS: frozenset({"create visual build", "finish visual build"}),
}
