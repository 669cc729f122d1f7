"""Tests for document validation, auto-fix and model feedback."""

import copy

import pytest

from tests.conftest import OUT_OF_RANGE_DOC, SIMPLE_DOC, make_document
from unisvg.models.validation import IssueCategory, Severity
from unisvg.validation.validator import DocumentValidator, is_valid_color


def _doc(**changes) -> dict:
    data = copy.deepcopy(SIMPLE_DOC)
    data.update(changes)
    return data


def test_valid_document(validator, simple_doc):
    report = validator.validate(simple_doc)
    assert report.success
    assert report.errors == ()
    assert not report.auto_fix_applied
    assert report.fixed_document is None


def test_accepts_wire_dict(validator):
    report = validator.validate(SIMPLE_DOC)
    assert report.success
    assert report.statistics.layer_count == 2
    assert report.statistics.path_count == 2
    assert report.statistics.command_count == 10
    assert report.statistics.regions_used == ("top_right",)


def test_schema_error_is_reported_not_raised(validator):
    report = validator.validate({"layers": "nope"})
    assert not report.success
    assert report.errors[0].message.startswith("Schema error at layers")


class TestStructure:
    def test_wrong_version(self, validator):
        report = validator.validate(_doc(version="2.0"))
        assert "Invalid document version: 2.0" in report.error_messages()

    def test_missing_canvas(self, validator):
        data = _doc()
        del data["canvas"]
        assert "Document missing canvas configuration" in validator.validate(data).error_messages()

    def test_no_layers(self, validator):
        report = validator.validate(_doc(layers=[]))
        assert "Document must contain at least one layer" in report.error_messages()

    def test_duplicate_and_missing_ids(self, validator):
        data = _doc()
        data["layers"][1]["id"] = "sun"
        data["layers"][0]["paths"][0]["id"] = ""
        report = validator.validate(data, auto_fix=False)
        messages = report.error_messages()
        assert "Duplicate layer id: sun" in messages
        assert "Path 0 in layer sun missing required id" in messages

    def test_missing_label_is_warning(self, validator):
        data = _doc()
        data["layers"][0]["label"] = " "
        report = validator.validate(data)
        assert report.success
        assert "Layer sun missing descriptive label" in report.warning_messages()

    def test_unsupported_ratio(self, validator):
        data = _doc(canvas={"width": 500, "height": 400, "aspectRatio": "5:4"})
        assert "Unsupported aspect ratio: 5:4" in validator.validate(data).error_messages()

    def test_canvas_ratio_mismatch_warns(self, validator):
        data = _doc(canvas={"width": 512, "height": 300, "aspectRatio": "1:1"})
        report = validator.validate(data)
        assert "Canvas dimensions 512x300 don't match aspect ratio 1:1" in report.warning_messages()

    def test_oversized_canvas(self, validator):
        data = _doc(canvas={"width": 9000, "height": 9000, "aspectRatio": "1:1"})
        assert "Canvas dimensions exceed maximum of 8192" in validator.validate(data).error_messages()


class TestCommands:
    def _with_commands(self, commands):
        data = _doc()
        data["layers"][1]["paths"][0]["commands"] = commands
        return data

    def test_invalid_command(self, validator):
        report = validator.validate(self._with_commands([{"cmd": "M", "coords": [0, 0]}, {"cmd": "A", "coords": [1]}]))
        assert "Invalid path command 'A' at index 1" in report.error_messages()

    def test_arity(self, validator):
        report = validator.validate(self._with_commands([{"cmd": "M", "coords": [1]}]))
        assert "Command 'M' expects 2 coordinates, got 1" in report.error_messages()

    def test_first_command_not_move_warns(self, validator):
        report = validator.validate(self._with_commands([{"cmd": "L", "coords": [1, 1]}]))
        assert report.success
        assert "Path ground_rect should start with a Move (M) command" in report.warning_messages()

    def test_close_without_subpath(self, validator):
        report = validator.validate(self._with_commands([
            {"cmd": "M", "coords": [1, 1]}, {"cmd": "Z"}, {"cmd": "Z"},
        ]))
        assert "Close (Z) command at index 2 has no open subpath" in report.warning_messages()

    def test_out_of_range_is_warning(self, validator):
        report = validator.validate(OUT_OF_RANGE_DOC, auto_fix=False)
        assert report.success
        assert "Coordinate (-10, 20) outside valid range [0, 512]" in report.warning_messages()

    def test_strict_mode_turns_coordinates_into_errors(self):
        report = DocumentValidator(strict_mode=True).validate(OUT_OF_RANGE_DOC, auto_fix=False)
        assert not report.success
        assert any("outside valid range" in m for m in report.error_messages())

    def test_bounds_check_can_be_disabled(self):
        report = DocumentValidator(enforce_coordinate_bounds=False).validate(OUT_OF_RANGE_DOC, auto_fix=False)
        assert not any("outside valid range" in m for m in report.warning_messages())


class TestStyleAndLayout:
    def test_invalid_colors(self, validator):
        data = _doc()
        data["layers"][0]["paths"][0]["style"] = {"fill": "red", "stroke": "#12345", "opacity": 2}
        messages = validator.validate(data).error_messages()
        assert "Invalid fill color: red" in messages
        assert "Invalid stroke color: #12345" in messages
        assert "Invalid opacity: 2" in messages
        assert all(i.category == IssueCategory.STYLE for i in validator.validate(data).errors)

    def test_invisible_path_warns(self, validator):
        data = _doc()
        data["layers"][0]["paths"][0]["style"] = {"fill": "none"}
        report = validator.validate(data)
        assert "Path sun_disc has no fill or stroke and will be invisible" in report.warning_messages()

    def test_unknown_region_and_anchor(self, validator):
        data = _doc()
        data["layers"][0]["layout"] = {"region": "moon", "anchor": "middle"}
        messages = validator.validate(data).error_messages()
        assert "Unknown region: moon" in messages
        assert "Invalid anchor: middle" in messages

    def test_custom_region_is_known(self, validator):
        data = _doc(layout={"customRegions": [{"name": "moon", "x": 0.8, "y": 0, "width": 0.2, "height": 0.2}]})
        data["layers"][0]["layout"] = {"region": "moon"}
        assert validator.validate(data).success

    def test_custom_region_shadowing_standard(self, validator):
        data = _doc(layout={"customRegions": [{"name": "center", "x": 0, "y": 0, "width": 0.2, "height": 0.2}]})
        assert "Cannot override standard region 'center'" in validator.validate(data).error_messages()

    def test_offset_checks(self, validator):
        data = _doc()
        data["layers"][0]["layout"]["offset"] = [0.5]
        assert "Offset must have exactly 2 values, got 1" in validator.validate(data).error_messages()
        data["layers"][0]["layout"]["offset"] = [2, 0]
        assert "Offset values must be between -1 and 1, got [2, 0]" in validator.validate(data).error_messages()

    def test_size_and_repeat_checks(self, validator):
        data = _doc()
        data["layers"][0]["layout"]["size"] = {"relative": 1.5}
        data["layers"][0]["layout"]["repeat"] = {"type": "spiral", "count": 0}
        messages = validator.validate(data).error_messages()
        assert "Relative size must be between 0 and 1, got 1.5" in messages
        assert "Invalid repetition type: spiral" in messages
        assert "Repetition count must be a positive integer" in messages

    def test_layout_checks_can_be_disabled(self):
        data = _doc()
        data["layers"][0]["layout"] = {"region": "moon"}
        assert DocumentValidator(validate_layout_language=False).validate(data).success


def test_performance_warnings():
    validator = DocumentValidator(max_layers=1)
    report = validator.validate(SIMPLE_DOC)
    assert report.success
    perf = [w for w in report.warnings if w.category == IssueCategory.PERFORMANCE]
    assert perf and "exceeding recommended maximum of 1" in perf[0].message
    assert all(w.severity == Severity.WARNING for w in perf)


class TestAutoFix:
    def test_fixed_document_is_in_range(self, validator):
        report = validator.validate(OUT_OF_RANGE_DOC, auto_fix=True)
        assert report.auto_fix_applied
        fixed = report.fixed_document
        coords = [c for _, path in fixed.iter_paths() for cmd in path.commands for c in cmd.coords]
        assert coords
        assert all(0 <= c <= 512 for c in coords)

    def test_report_describes_input(self, validator):
        report = validator.validate(OUT_OF_RANGE_DOC, auto_fix=True)
        assert any("outside valid range" in m for m in report.warning_messages())
        assert report.statistics.coordinate_range.max_x == pytest.approx(700.456)

    def test_synthesizes_missing_ids(self):
        doc = make_document()
        doc.layers[0].id = ""
        doc.layers[1].paths[0].id = ""
        fixed, fixes = DocumentValidator.auto_fix(doc)
        assert fixes == 2
        assert fixed.layers[0].id == "layer_1"
        assert fixed.layers[1].paths[0].id == "path_2"
        # original untouched
        assert doc.layers[0].id == ""

    def test_synthetic_ids_avoid_collisions(self):
        doc = make_document()
        doc.layers[1].id = "layer_1"
        doc.layers[0].id = ""
        fixed, _ = DocumentValidator.auto_fix(doc)
        assert fixed.layers[0].id == "layer_1_"

    def test_no_fixes_means_no_fixed_document(self, validator, simple_doc):
        report = validator.validate(simple_doc, auto_fix=True)
        assert report.fixed_document is None

    def test_auto_fix_disabled_by_option(self):
        report = DocumentValidator(enable_auto_fix=False).validate(OUT_OF_RANGE_DOC)
        assert report.fixed_document is None


def test_model_feedback_order(validator):
    data = copy.deepcopy(OUT_OF_RANGE_DOC)
    data["layers"][0]["paths"][0]["style"] = {"fill": "red"}
    data["layers"][0]["layout"] = {"region": "moon"}
    report = DocumentValidator(max_commands_per_path=2).validate(data)
    feedback = validator.generate_model_feedback(report)

    assert feedback[0] == "Critical issues found:"
    headings = [line for line in feedback if not line.startswith("- ")]
    assert headings == [
        "Critical issues found:",
        "Style issues:",
        "Layout language issues:",
        "Coordinate warnings:",
        "Performance recommendations:",
    ]
    assert "- Invalid fill color: red" in feedback


def test_model_feedback_groups_command_errors(validator):
    data = _doc(version="2.0")
    data["layers"][1]["paths"][0]["commands"].insert(1, {"cmd": "X", "coords": [1, 2]})
    feedback = validator.generate_model_feedback(validator.validate(data))

    headings = [line for line in feedback if not line.startswith("- ")]
    assert headings[:3] == ["Critical issues found:", "Structure issues:", "Path command issues:"]
    structure, command = feedback.index("Structure issues:"), feedback.index("Path command issues:")
    assert structure < feedback.index("- Invalid document version: 2.0") < command
    assert feedback.index("- Invalid path command 'X' at index 1") > command


def test_options_are_copied():
    validator = DocumentValidator()
    options = validator.get_options()
    validator.update_options(max_layers=3)
    assert options.max_layers == 10
    assert validator.get_options().max_layers == 3


@pytest.mark.parametrize("value,ok", [
    (None, True), ("none", True), ("#A1B2C3", True), ("#abc", False), ("blue", False),
])
def test_is_valid_color(value, ok):
    assert is_valid_color(value) is ok
