"""
Tests for naming and description validation.
"""

import pytest

from vro_docs.lint.naming import (
    RULE_DESCRIPTION,
    RULE_NAMING,
    RULE_PARSE,
    is_valid_name,
    validate_files,
    validate_workflow,
)
from vro_docs.workflow import parse_workflow


class TestIsValidName:
    @pytest.mark.parametrize("name", ["vsName", "poolMembers", "x", "item2Id"])
    def test_camel_case(self, name):
        assert is_valid_name(name, constant=False)

    @pytest.mark.parametrize("name", ["VsName", "vs_name", "Bad_Name", "2fast", ""])
    def test_not_camel_case(self, name):
        assert not is_valid_name(name, constant=False)

    @pytest.mark.parametrize("name", ["API_VERSION", "TIMEOUT", "MAX_2"])
    def test_upper_case(self, name):
        assert is_valid_name(name, constant=True)

    @pytest.mark.parametrize("name", ["maxRetries", "Api_Version"])
    def test_not_upper_case(self, name):
        assert not is_valid_name(name, constant=True)


class TestValidateWorkflow:
    """Tests for validate_workflow()."""

    def test_missing_descriptions(self, avi_workflow):
        """Test items without <description> are reported, end items included."""
        violations = validate_workflow(parse_workflow(avi_workflow))

        assert [(v.rule, v.subject) for v in violations] == [
            (RULE_DESCRIPTION, "item0"),
            (RULE_DESCRIPTION, "item3"),
        ]
        assert violations[0].message == 'workflow-item "item0" is missing <description>'
        assert violations[0].line is not None

    def test_naming_rules(self, minimal_workflow):
        """Test camelCase inputs and UPPER_CASE read-only constants."""
        violations = validate_workflow(parse_workflow(minimal_workflow))

        assert [(v.rule, v.subject) for v in violations] == [
            (RULE_NAMING, "Bad_Name"),
            (RULE_NAMING, "maxRetries"),
        ]
        assert violations[0].message == 'invalid name "Bad_Name" (expected camelCase)'
        assert violations[1].message == 'invalid name "maxRetries" (expected UPPER_CASE)'

    def test_relative_file_paths(self, project):
        path = project / "workflows" / "minimal.workflow.xml"

        violations = validate_workflow(parse_workflow(path), base=project)

        assert violations[0].file == "workflows/minimal.workflow.xml"
        assert violations[0].location().startswith("workflows/minimal.workflow.xml:")

    def test_to_dict(self, minimal_workflow):
        data = validate_workflow(parse_workflow(minimal_workflow))[0].to_dict()

        assert set(data) == {"file", "line", "rule", "subject", "message"}


class TestValidateFiles:
    def test_all_files(self, avi_workflow, minimal_workflow):
        violations = validate_files([avi_workflow, minimal_workflow])

        assert len(violations) == 4

    def test_parse_error_is_a_violation(self, tmp_path):
        broken = tmp_path / "broken.workflow.xml"
        broken.write_text("<workflow>")

        violations = validate_files([broken], base=tmp_path)

        assert len(violations) == 1
        assert violations[0].rule == RULE_PARSE
        assert violations[0].file == "broken.workflow.xml"
        assert violations[0].location() == "broken.workflow.xml"

    def test_clean_workflow(self, tmp_path):
        clean = tmp_path / "clean.workflow.xml"
        clean.write_text(
            '<workflow id="c"><input><param name="hostName" type="string"/></input>'
            '<workflow-item name="item0" type="end"><description>Done</description>'
            "</workflow-item></workflow>"
        )

        assert validate_files([clean]) == []
