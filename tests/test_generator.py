"""
Tests for documentation generation over a repository.
"""

from vro_docs.docs.generator import discover_workflows, generate_docs, output_filename


class TestDiscoverWorkflows:
    """Tests for discover_workflows()."""

    def test_default_glob(self, project):
        files = discover_workflows(project)

        assert [f.name for f in files] == ["create-avi-lb.workflow.xml", "minimal.workflow.xml"]

    def test_custom_glob(self, project):
        files = discover_workflows(project, "workflows/avi/*.xml")

        assert [f.name for f in files] == ["create-avi-lb.workflow.xml"]

    def test_no_match(self, project):
        assert discover_workflows(project, "nothing/**/*.xml") == []


class TestOutputFilename:
    def test_spaces_become_underscores(self):
        assert output_filename("Create AVI Load Balancer") == "Create_AVI_Load_Balancer.md"

    def test_unsafe_characters(self):
        assert output_filename("workflow:name=generic") == "workflow_name=generic.md"
        assert output_filename("a/b", ".html") == "a_b.html"


class TestGenerateDocs:
    """Tests for generate_docs()."""

    def test_writes_markdown_and_index(self, project):
        result = generate_docs(project, "docs/workflows")

        out = project / "docs" / "workflows"
        assert (out / "Create_AVI_Load_Balancer.md").exists()
        assert (out / "workflow_name=generic.md").exists()
        assert result.index_file == out / "README.md"
        assert result.documented_count == 2
        assert result.failures == []

        readme = (out / "README.md").read_text()
        assert "[Create AVI Load Balancer](Create_AVI_Load_Balancer.md)" in readme

    def test_form_is_included(self, project):
        generate_docs(project, "docs")

        md = (project / "docs" / "Create_AVI_Load_Balancer.md").read_text()
        assert "<h2>Workflow Form</h2>" in md

    def test_without_index(self, project):
        result = generate_docs(project, "docs", index=False)

        assert result.index_file is None
        assert not (project / "docs" / "README.md").exists()

    def test_html_pages(self, project):
        result = generate_docs(project, "docs", html=True)

        out = project / "docs"
        assert (out / "Create_AVI_Load_Balancer.html").exists()
        assert (out / "index.html").exists()
        assert 'href="Create_AVI_Load_Balancer.html"' in (out / "index.html").read_text()
        assert result.documented_count == 2

    def test_absolute_out_dir(self, project, tmp_path):
        out = tmp_path / "elsewhere"

        generate_docs(project, out)

        assert (out / "Create_AVI_Load_Balancer.md").exists()

    def test_parse_failure_is_recorded(self, project):
        broken = project / "workflows" / "broken.workflow.xml"
        broken.write_text("<workflow><input></workflow>")

        result = generate_docs(project, "docs")

        assert [path for path, _ in result.failures] == [broken]
        assert result.documented_count == 2

    def test_duplicate_names_get_id_suffix(self, project):
        copy_dir = project / "workflows" / "copy"
        copy_dir.mkdir()
        source = project / "workflows" / "avi" / "create-avi-lb.workflow.xml"
        (copy_dir / "create-avi-lb.workflow.xml").write_text(
            source.read_text().replace("000000000001", "000000000009")
        )

        result = generate_docs(project, "docs")

        names = sorted(p.name for p in result.written)
        assert "Create_AVI_Load_Balancer.md" in names
        assert any(n.startswith("Create_AVI_Load_Balancer_") for n in names)
        assert result.documented_count == 3

    def test_workflow_named_readme_does_not_overwrite_index(self, project):
        (project / "workflows" / "readme.workflow.xml").write_text(
            '<workflow id="r-1" version="1"><display-name>README</display-name></workflow>'
        )

        result = generate_docs(project, "docs")

        assert (project / "docs" / "README_r-1.md").exists()
        assert "# Workflow Documentation" in (project / "docs" / "README.md").read_text()
        assert result.documented_count == 3

    def test_on_file_callback(self, project):
        seen = []

        generate_docs(project, "docs", on_file=seen.append)

        assert [p.name for p in seen] == ["create-avi-lb.workflow.xml", "minimal.workflow.xml"]

    def test_repeated_duplicates_get_distinct_files(self, project):
        source = project / "workflows" / "avi" / "create-avi-lb.workflow.xml"
        for name in ("copy1", "copy2"):
            copy_dir = project / "workflows" / name
            copy_dir.mkdir()
            (copy_dir / "create-avi-lb.workflow.xml").write_text(source.read_text())

        result = generate_docs(project, "docs")

        names = sorted(p.name for p in result.written if p.stem != "README")
        assert names == [
            "Create_AVI_Load_Balancer.md",
            "Create_AVI_Load_Balancer_5a1b2c3d-0000-4000-8000-000000000001.md",
            "Create_AVI_Load_Balancer_5a1b2c3d-0000-4000-8000-000000000001_2.md",
            "workflow_name=generic.md",
        ]
        assert result.documented_count == 4

    def test_html_index_links_names_with_parentheses(self, project):
        (project / "workflows" / "vm.workflow.xml").write_text(
            '<workflow id="vm-1" version="1"><display-name>Create VM (Linux)</display-name>'
            "</workflow>"
        )

        generate_docs(project, "docs", html=True)

        index_html = (project / "docs" / "index.html").read_text()
        assert 'href="Create_VM_(Linux).html"' in index_html
        assert 'href="Create_VM_(Linux).md"' not in index_html
