"""Template registry and loader."""

import pytest

from codenv.lib.template_loader import load_template
from codenv.lib.template_registry import (
    TEMPLATE_SPECS,
    TemplateCategory,
    TemplateRegistry,
)


def test_every_registered_template_file_exists() -> None:
    registry = TemplateRegistry.instance()
    for spec in TEMPLATE_SPECS.values():
        path = registry.templates_dir / spec.filename
        assert path.exists(), f"{spec.name}: missing {path}"


@pytest.mark.parametrize(
    "name",
    [n for n, s in TEMPLATE_SPECS.items() if not s.required_vars],
)
def test_variable_free_templates_render_verbatim(name) -> None:
    content = TemplateRegistry.instance().render(name)
    assert content
    assert not content.startswith("---")


def test_missing_required_variable_raises() -> None:
    with pytest.raises(ValueError, match="tool_name"):
        TemplateRegistry.instance().render(
            "pending_question.block",
            {"question_type": "X", "asked_at": "now", "question": "?"},
        )


def test_unknown_template_raises() -> None:
    with pytest.raises(KeyError):
        TemplateRegistry.instance().render("nope.block")


def test_optional_variable_defaults_to_empty() -> None:
    rendered = TemplateRegistry.instance().render_with_metadata(
        "mcp_workflow.suggestion", {"workflow_type": "W", "example": "E"}
    )
    assert "Platforms Detected" not in rendered.content
    assert "Workflow Type: W" in rendered.content
    assert rendered.variables_used == {"workflow_type": "W", "example": "E"}


def test_list_by_category() -> None:
    registry = TemplateRegistry.instance()
    blocks = registry.list_templates(TemplateCategory.BLOCK_MESSAGE)
    assert sorted(blocks) == ["pending_question.block", "verification.block"]
    assert len(registry.list_templates()) == len(TEMPLATE_SPECS)


def test_env_override(tmp_path, monkeypatch) -> None:
    custom = tmp_path / "block.md"
    custom.write_text("---\nname: custom\n---\nStop: {tool_name}\n")
    monkeypatch.setenv("CODENV_PENDING_QUESTION_TEMPLATE", str(custom))
    content = TemplateRegistry.instance().render(
        "pending_question.block",
        {"tool_name": "Bash", "question_type": "X", "asked_at": "now", "question": "?"},
    )
    assert content == "Stop: Bash"


def test_env_override_to_missing_file_raises(tmp_path, monkeypatch) -> None:
    monkeypatch.setenv("CODENV_VERIFICATION_TEMPLATE", str(tmp_path / "gone.md"))
    with pytest.raises(FileNotFoundError):
        TemplateRegistry.instance().render("verification.block")


def test_configure_uses_other_directory(tmp_path) -> None:
    (tmp_path / "verification-block.md").write_text("custom verification\n")
    registry = TemplateRegistry.configure(tmp_path)
    assert TemplateRegistry.instance() is registry
    assert registry.render("verification.block") == "custom verification"


def test_frontmatter_only_file_is_empty(tmp_path) -> None:
    path = tmp_path / "t.md"
    path.write_text("---\nname: x\n---\n")
    assert load_template(path) == ""


def test_body_rules_are_kept(tmp_path) -> None:
    path = tmp_path / "t.md"
    path.write_text("---\nname: x\n---\nabove\n---\nbelow\n")
    assert load_template(path) == "above\n---\nbelow"


def test_loader_missing_file(tmp_path) -> None:
    with pytest.raises(FileNotFoundError):
        load_template(tmp_path / "missing.md")
