import logging
from pathlib import Path

import pytest

from studynotes.config import CONFIG_NAME, find_course_root, load_config
from studynotes.errors import ConfigError


def test_course_root_found_from_subdirectory(course_path: Path) -> None:
    nested = course_path / "notes" / "figures"
    nested.mkdir()

    assert find_course_root(nested) == course_path.resolve()


def test_defaults_without_config_file(course_path: Path) -> None:
    config = load_config(course_path)

    assert config.notes_path == course_path / "notes"
    assert config.log_path == course_path / ".metadata" / "lectures.db"
    assert config.guides_path == course_path / "studyGuides"
    assert config.fmt.extension == ".tex"
    assert config.fmt.block_open == "% METADATA"


def test_yaml_overrides(course_path: Path) -> None:
    (course_path / CONFIG_NAME).write_text(
        "notes_dir: lectures\nextension: md\ncomment_prefix: '#'\n",
        encoding="utf-8",
    )

    config = load_config(course_path)

    assert config.notes_path == course_path / "lectures"
    assert config.fmt.extension == ".md"
    assert config.fmt.block_open == "# METADATA"


def test_unknown_keys_are_logged(course_path: Path, caplog) -> None:
    (course_path / CONFIG_NAME).write_text("colour: blue\n", encoding="utf-8")

    with caplog.at_level(logging.WARNING, logger="studynotes.config"):
        config = load_config(course_path)

    assert config.notes_dir == "notes"
    assert "colour" in caplog.text


@pytest.mark.parametrize("content", ["notes_dir: [unclosed\n", "- just\n- a list\n"])
def test_bad_config_raises(course_path: Path, content: str) -> None:
    (course_path / CONFIG_NAME).write_text(content, encoding="utf-8")

    with pytest.raises(ConfigError):
        load_config(course_path)
