"""Swift and iOS convention rules."""

from patchnote.models import Severity
from patchnote.rules.base import PatternRule
from patchnote.rules.base import compile_pattern as _re

SWIFT = ("*.swift",)
SWIFT_TESTS = ("*Test*.swift", "*Tests.swift")

RULES = (
  PatternRule(
    id="SWF001",
    name="xctest-usage",
    pattern=_re(r"import XCTest|XCTestCase|XCTest"),
    paths=SWIFT,
    severity=Severity.MEDIUM,
    message=(
      "**Swift Testing Convention**: Use the Swift Testing framework instead of XCTest. "
      "Import 'Testing' and use '@Suite' and '@Test' annotations."
    ),
  ),
  PatternRule(
    id="SWF002",
    name="force-unwrap",
    pattern=_re(r"[\w\)\]]!(?![=!])"),
    paths=SWIFT,
    severity=Severity.HIGH,
    message=(
      "**iOS Safety**: Avoid force unwrapping (`{match}`), which can crash at runtime. "
      "Use optional binding (`if let`, `guard let`), nil coalescing (`??`) or optional chaining."
    ),
  ),
  PatternRule(
    id="SWF003",
    name="force-try",
    pattern=_re(r"\btry[!?]"),
    paths=SWIFT,
    severity=Severity.MEDIUM,
    message=(
      "**iOS Error Handling**: Consider do-catch blocks instead of `{match}`. "
      "This prevents unexpected crashes and silently dropped errors."
    ),
  ),
  PatternRule(
    id="SWF004",
    name="view-model-main-actor",
    pattern=_re(r"ViewModel|ViewController"),
    absent=_re(r"@MainActor"),
    paths=SWIFT,
    severity=Severity.MEDIUM,
    message=(
      "**iOS Architecture**: ViewModels and ViewControllers should be marked with @MainActor "
      "so UI updates happen on the main thread."
    ),
  ),
  PatternRule(
    id="SWF005",
    name="observable-object-main-actor",
    pattern=_re(r"ObservableObject"),
    absent=_re(r"@MainActor"),
    paths=SWIFT,
    severity=Severity.MEDIUM,
    message=(
      "**SwiftUI Best Practice**: ObservableObject classes should be marked with @MainActor "
      "for thread safety."
    ),
  ),
  PatternRule(
    id="SWF006",
    name="weak-delegate",
    pattern=_re(r"var.*delegate.*:"),
    absent=_re(r"\bweak\b"),
    paths=SWIFT,
    severity=Severity.MEDIUM,
    message=(
      "**iOS Memory Management**: Delegate properties should be declared `weak` "
      "to prevent retain cycles."
    ),
  ),
  PatternRule(
    id="SWF007",
    name="closure-self-capture",
    pattern=_re(r"\{.*self\."),
    absent=_re(r"\[(?:weak|unowned) self\]"),
    paths=SWIFT,
    severity=Severity.MEDIUM,
    message=(
      "**iOS Memory Management**: Consider `[weak self]` or `[unowned self]` in closures "
      "to prevent retain cycles."
    ),
  ),
  PatternRule(
    id="SWF008",
    name="dispatch-main-async",
    pattern=_re(r"DispatchQueue\.main\.async"),
    requires=_re(r"@MainActor"),
    paths=SWIFT,
    severity=Severity.LOW,
    message=(
      "**iOS Modernization**: Prefer async/await with @MainActor over "
      "DispatchQueue.main.async."
    ),
  ),
  PatternRule(
    id="SWF009",
    name="test-description",
    pattern=_re(r"@Test\b"),
    absent=_re(r'".*"'),
    paths=SWIFT,
    severity=Severity.LOW,
    message=(
      "**Testing Best Practice**: Add a descriptive name using the "
      '@Test("Description") form.'
    ),
  ),
  PatternRule(
    id="SWF010",
    name="identifier-case",
    pattern=_re(r"\b(?:func|var|let)\s+(?:[A-Z]\w*|[a-z0-9]+_\w+)"),
    paths=SWIFT,
    severity=Severity.LOW,
    message=(
      "**Swift Naming Convention**: Use lowerCamelCase for functions and variables "
      "(`{match}`)."
    ),
  ),
  PatternRule(
    id="SWF011",
    name="dependency-injection",
    pattern=_re(r"init.*:.*="),
    absent=_re(r"Container|Resolver|@Injected"),
    paths=SWIFT,
    severity=Severity.LOW,
    message=(
      "**iOS Architecture**: Consider dependency injection (for example Swinject) "
      "instead of default-constructed collaborators."
    ),
  ),
  PatternRule(
    id="SWF012",
    name="public-api-docs",
    pattern=_re(r"public\s+(?:class|struct|func|var|let)"),
    absent=_re(r"///"),
    paths=SWIFT,
    severity=Severity.LOW,
    message="**Documentation**: Public APIs should be documented with /// comments.",
  ),
  PatternRule(
    id="SWF013",
    name="hardcoded-string",
    pattern=_re(r'"[A-Za-z ]{4,}"'),
    absent=_re(r"NSLocalizedString|String\(localized:"),
    paths=SWIFT,
    severity=Severity.LOW,
    message=(
      "**iOS Localization**: Use NSLocalizedString or String(localized:) for "
      "user-facing strings such as {match}."
    ),
  ),
  PatternRule(
    id="SWF014",
    name="async-throws-order",
    pattern=_re(r"\bthrows\s+async\b"),
    paths=SWIFT,
    severity=Severity.MEDIUM,
    message="**Async/Await**: Write `async throws`, not `throws async`.",
  ),
  PatternRule(
    id="SWF015",
    name="background-uikit",
    pattern=_re(r"\bUI[A-Z]\w*\."),
    requires=_re(r"DispatchQueue\.global|Task\.detached"),
    paths=SWIFT,
    severity=Severity.HIGH,
    message=(
      "**iOS Threading**: UIKit must only be used from the main thread. "
      "Wrap UI updates with @MainActor or DispatchQueue.main.async."
    ),
  ),
  PatternRule(
    id="SWF016",
    name="core-data-context",
    pattern=_re(r"NSManagedObjectContext"),
    absent=_re(r"\bperform(?:AndWait)?\b"),
    paths=SWIFT,
    severity=Severity.MEDIUM,
    message=(
      "**Core Data**: Use perform or performAndWait when working with "
      "NSManagedObjectContext."
    ),
  ),
  PatternRule(
    id="SWF017",
    name="app-entry-point",
    pattern=_re(r"@UIApplicationMain|@main\b"),
    absent=_re(r"App.*:\s*App\b"),
    paths=SWIFT,
    severity=Severity.LOW,
    message=(
      "**iOS App Structure**: Consider the SwiftUI App protocol with @main "
      "instead of UIApplicationMain."
    ),
  ),
  PatternRule(
    id="SWF018",
    name="force-cast",
    pattern=_re(r"\bas!"),
    paths=SWIFT,
    severity=Severity.HIGH,
    message="**iOS Safety**: Force casting (`as!`) can crash. Use `guard let ... as?` instead.",
  ),
  PatternRule(
    id="SWF019",
    name="timer-retain-cycle",
    pattern=_re(r"Timer\.scheduledTimer"),
    absent=_re(r"\[weak self\]"),
    paths=SWIFT,
    severity=Severity.MEDIUM,
    message="**iOS Memory Management**: Scheduled timers retain their target. Capture `[weak self]`.",
  ),
  PatternRule(
    id="SWF020",
    name="view-model-ui-import",
    pattern=_re(r"^\s*import\s+(?:UIKit|SwiftUI)\b"),
    paths=("*ViewModel*.swift",),
    severity=Severity.MEDIUM,
    message="**MVVM**: ViewModels should not import UI frameworks ({match}).",
  ),
  PatternRule(
    id="SWF021",
    name="view-business-logic",
    pattern=_re(r"URLSession|UserDefaults|CoreData"),
    paths=("*View.swift",),
    severity=Severity.MEDIUM,
    message="**MVVM**: Views should not use {match} directly. Move it into the ViewModel.",
  ),
  PatternRule(
    id="SWT001",
    name="swift-testing-structure",
    absent=_re(r"@Suite|@Test"),
    anchor=_re(r"import.*XCTest|class.*XCTestCase"),
    paths=SWIFT_TESTS,
    severity=Severity.MEDIUM,
    message=(
      "**Swift Testing Framework**: Use @Suite and @Test annotations "
      "instead of XCTest classes."
    ),
  ),
  PatternRule(
    id="SWT002",
    name="test-function-name",
    pattern=_re(r"@Test\s+func\s+test"),
    absent=_re(r'@Test\("'),
    paths=SWIFT_TESTS,
    severity=Severity.LOW,
    message='**Test Naming**: Use @Test("Description") instead of test-prefixed names.',
  ),
  PatternRule(
    id="SWT003",
    name="xct-assert",
    pattern=_re(r"XCTAssert\w*"),
    paths=SWIFT_TESTS,
    severity=Severity.MEDIUM,
    message="**Swift Testing Assertion**: Use #expect() instead of {match}.",
  ),
)
