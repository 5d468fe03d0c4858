import pytest

from safety.analyzer import analyze, format_blocking_issues
from safety.patterns import PATTERN_LIBRARY, Severity

EVAL_ISSUE = "Use of eval() detected - this is a security risk"
FUNCTION_ISSUE = "Use of Function constructor detected - this is a security risk"
PROTO_ISSUE = "__proto__ usage detected - this is a security risk"
INNER_HTML_WARNING = "innerHTML usage detected - be careful with user input"
DOCUMENT_WRITE_WARNING = "document.write() detected - this can cause issues"
LOCATION_WARNING = "window.location modification detected"
CONSTRUCTOR_WARNING = "Constructor bracket access detected - potential prototype pollution"
WHILE_WARNING = "Potential infinite loop detected (while(true) without break)"
FOR_WARNING = "Potential infinite loop detected (for(;;) without break)"
ARRAY_WARNING = "Large array allocation detected - may cause memory issues"
PY_WHILE_WARNING = "Potential infinite loop detected (while True without break)"


def test_empty_text_is_safe():
    report = analyze("")
    assert report.safe is True
    assert report.issues == ()
    assert report.warnings == ()


def test_plain_function_has_no_findings():
    code = """
def add(a, b):
    return a + b
"""
    report = analyze(code)
    assert report.safe is True
    assert report.issues == ()
    assert report.warnings == ()


def test_eval_example_scenario():
    report = analyze('eval("x")')
    assert report.safe is False
    assert report.issues == (EVAL_ISSUE,)
    assert report.warnings == ()


def test_inner_html_example_scenario():
    report = analyze("element.innerHTML = x")
    assert report.safe is True
    assert report.issues == ()
    assert report.warnings == (INNER_HTML_WARNING,)


@pytest.mark.parametrize(
    "code",
    [
        'eval  ("code")',
        "const x = 1;\neval(userInput);\nconst y = 2;",
        "result = eval(expression)",
    ],
)
def test_eval_calls_are_blocking(code):
    report = analyze(code)
    assert report.safe is False
    assert EVAL_ISSUE in report.issues


@pytest.mark.parametrize(
    "code",
    ['new Function("return 1")', 'Function("return x")', 'Function  ("code")'],
)
def test_function_constructor_is_blocking(code):
    report = analyze(code)
    assert report.safe is False
    assert FUNCTION_ISSUE in report.issues


@pytest.mark.parametrize(
    "code",
    ["obj.__proto__ = {}", "const obj = { __proto__: null };", "const proto = obj.__proto__;"],
)
def test_proto_reference_is_blocking(code):
    report = analyze(code)
    assert report.safe is False
    assert PROTO_ISSUE in report.issues


@pytest.mark.parametrize(
    "code",
    [
        'const evaluation = "good";',
        "evaluation(score)",
        "const fetchData = load();",
        "class DataFetcher {}",
        "myFunction(1)",
        "retrieval(x)",
    ],
)
def test_substring_collisions_do_not_match(code):
    report = analyze(code)
    assert report.safe is True
    assert report.issues == ()
    assert report.warnings == ()


def test_inner_html_assignment_forms():
    assert INNER_HTML_WARNING in analyze('document.getElementById("id").innerHTML = userContent').warnings
    assert INNER_HTML_WARNING in analyze("el.innerHTML += more").warnings


def test_inner_html_read_does_not_warn():
    assert analyze("const content = element.innerHTML;").warnings == ()
    assert analyze("if (el.innerHTML == old) {}").warnings == ()


def test_document_write_warns():
    report = analyze('document.write("<p>Hello</p>")')
    assert report.safe is True
    assert report.warnings == (DOCUMENT_WRITE_WARNING,)
    assert DOCUMENT_WRITE_WARNING in analyze('document.writeln("text")').warnings


@pytest.mark.parametrize(
    "code",
    [
        'window.location = "http://evil.com"',
        "window.location.href = url",
        "window.location.replace(url)",
    ],
)
def test_window_location_modification_warns(code):
    report = analyze(code)
    assert report.safe is True
    assert LOCATION_WARNING in report.warnings


def test_window_location_read_does_not_warn():
    assert LOCATION_WARNING not in analyze("const here = window.location.href;").warnings
    assert LOCATION_WARNING not in analyze("if (window.location === prev) {}").warnings


def test_constructor_bracket_access_warns():
    assert CONSTRUCTOR_WARNING in analyze('obj.constructor["prototype"]').warnings
    assert CONSTRUCTOR_WARNING in analyze("x.constructor[key]").warnings
    assert analyze("x.constructor.name").warnings == ()


def test_while_true_without_break_warns():
    code = """
while (true) {
  doSomething();
}
"""
    assert WHILE_WARNING in analyze(code).warnings


def test_while_true_with_break_does_not_warn():
    code = """
while (true) {
  if (condition) break;
  doSomething();
}
"""
    assert WHILE_WARNING not in analyze(code).warnings


def test_for_ever_loop_without_break_warns():
    code = """
for (;;) {
  doSomething();
}
"""
    assert FOR_WARNING in analyze(code).warnings


def test_for_ever_loop_with_break_does_not_warn():
    code = """
for (;;) {
  if (done) break;
  process();
}
"""
    assert FOR_WARNING not in analyze(code).warnings


def test_break_in_nested_block_still_suppresses():
    code = """
while (true) {
  items.forEach(function () { if (x) { break; } });
}
"""
    assert WHILE_WARNING not in analyze(code).warnings


def test_break_outside_loop_body_does_not_suppress():
    code = """
while (true) { tick(); }
switch (x) { case 1: break; }
"""
    assert WHILE_WARNING in analyze(code).warnings


def test_normal_while_loop_does_not_warn():
    report = analyze("while (i < 10) { i++; }")
    assert [w for w in report.warnings if "infinite loop" in w] == []


def test_python_while_true_without_break_warns():
    code = """
def spin():
    while True:
        tick()
    return 1
"""
    assert PY_WHILE_WARNING in analyze(code).warnings


def test_python_while_true_with_break_does_not_warn():
    code = """
def first_even(values):
    i = 0
    while True:
        if values[i] % 2 == 0:
            break
        i += 1
    return values[i]
"""
    assert PY_WHILE_WARNING not in analyze(code).warnings


def test_python_while_true_body_spans_unindented_comments():
    code = """
def poll():
    while True:
# retry until ready
        if ready():
            break
    return 1
"""
    assert PY_WHILE_WARNING not in analyze(code).warnings


@pytest.mark.parametrize(
    "code",
    [
        "const arr = new Array(1000000);",
        "Array(10000000)",
        "Array( 123456 )",
        "const buf = new Float64Array(1000000);",
        "new Uint8Array(2000000)",
    ],
)
def test_large_array_allocation_warns(code):
    assert ARRAY_WARNING in analyze(code).warnings


@pytest.mark.parametrize(
    "code",
    ["const arr = new Array(100);", "new Array(99999)", "new Int32Array(1024)", "myArray(1000000)"],
)
def test_small_or_unrelated_array_calls_do_not_warn(code):
    assert ARRAY_WARNING not in analyze(code).warnings


def test_python_dynamic_execution_is_blocking():
    assert analyze("exec(source)").safe is False
    assert analyze("os = __import__('os')").safe is False
    assert analyze("().__class__.__bases__[0].__subclasses__()").safe is False


def test_member_exec_is_not_flagged():
    assert analyze("match = pattern.exec(text);").safe is True


def test_multiple_issues_reported_once_per_rule():
    code = """
eval(code);
eval(other);
Function(dynamicCode);
obj.__proto__ = {};
"""
    report = analyze(code)
    assert report.safe is False
    assert report.issues == (EVAL_ISSUE, FUNCTION_ISSUE, PROTO_ISSUE)


def test_issues_and_warnings_together():
    code = """
eval(code);
element.innerHTML = content;
document.write("text");
"""
    report = analyze(code)
    assert report.safe is False
    assert report.issues == (EVAL_ISSUE,)
    assert report.warnings == (INNER_HTML_WARNING, DOCUMENT_WRITE_WARNING)


def test_warnings_never_affect_safe():
    report = analyze("while (true) { x(); }\nnew Array(1000000)")
    assert report.safe is True
    assert len(report.warnings) == 2


def test_unparseable_text_is_still_scanned():
    report = analyze("def broken(:\n    eval(x")
    assert report.safe is False


def test_library_rules_have_unique_ids():
    ids = [rule.id for rule in PATTERN_LIBRARY]
    assert len(ids) == len(set(ids))
    assert {rule.severity for rule in PATTERN_LIBRARY} == {Severity.ISSUE, Severity.WARNING}


def test_format_blocking_issues_lists_each_issue():
    text = format_blocking_issues(analyze("eval(x); new Function('y')"))
    assert text.startswith("Code safety check failed")
    assert "eval()" in text
    assert "Function constructor" in text
