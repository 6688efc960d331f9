import os

import pytest
import yaml

from loopcoder.utils import config_utils
from loopcoder.utils.config_utils import (
    convert_config_value, convert_yaml_to_config, get_final_config, load_env_config, save_project_config)


@pytest.fixture
def fake_home(tmp_path, monkeypatch):
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setattr(config_utils, "global_config_path",
                        lambda: str(home / ".loopcoder" / "config.yml"))
    return home


def write_yaml(path, data):
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(yaml.safe_dump(data))


def test_defaults(fake_home, tmp_path):
    args = get_final_config(str(tmp_path / "project"), environ={})

    assert args.max_iterations == 5
    assert args.tool_output_limit == 2000
    assert args.preview_url == "http://localhost:3000"
    assert args.source_dir == os.path.abspath(str(tmp_path / "project"))


def test_layers_override_in_order(fake_home, tmp_path):
    project = tmp_path / "project"
    write_yaml(fake_home / ".loopcoder" / "config.yml", {"provider": "ollama", "model": "llama3", "max_iterations": 8})
    write_yaml(project / ".loopcoder" / "config.yml", {"model": "qwen2.5-coder", "file_tree_depth": 4})

    args = get_final_config(str(project), environ={"LOOPCODER_MAX_ITERATIONS": "3", "UNRELATED": "1"})

    assert args.provider == "ollama"
    assert args.model == "qwen2.5-coder"
    assert args.file_tree_depth == 4
    assert args.max_iterations == 3


def test_env_reference_in_yaml(fake_home, tmp_path, monkeypatch):
    monkeypatch.setenv("MY_TEST_KEY", "sk-test")
    project = tmp_path / "project"
    write_yaml(project / ".loopcoder" / "config.yml", {"api_key": "ENV {{ MY_TEST_KEY }}"})

    assert get_final_config(str(project), environ={}).api_key == "sk-test"


def test_non_mapping_and_unknown_keys_are_ignored(fake_home, tmp_path):
    project = tmp_path / "project"
    (project / ".loopcoder").mkdir(parents=True)
    (project / ".loopcoder" / "config.yml").write_text("- just\n- a list\n")
    write_yaml(fake_home / ".loopcoder" / "config.yml", {"no_such_option": 1, "model": "gpt-4o-mini"})

    args = get_final_config(str(project), environ={})

    assert args.model == "gpt-4o-mini"
    assert not hasattr(args, "no_such_option")


def test_convert_config_value():
    assert convert_config_value("max_iterations", "7") == 7
    assert convert_config_value("model", "gpt-4o") == "gpt-4o"
    assert convert_config_value("model", "True") is True
    assert convert_config_value("not_a_field", "x") is None


def test_load_env_config():
    assert load_env_config({"LOOPCODER_MODEL": "m", "LOOPCODER_BOGUS": "x", "PATH": "/bin"}) == {"model": "m"}


def test_convert_yaml_to_config_keeps_base_values():
    base = convert_yaml_to_config({"model": "a", "max_iterations": 9})
    merged = convert_yaml_to_config({"model": "b"}, base)
    assert (merged.model, merged.max_iterations) == ("b", 9)


def test_save_project_config_roundtrips(fake_home, tmp_path):
    project = tmp_path / "project"
    save_project_config(str(project), "max_iterations", 12)
    save_project_config(str(project), "model", "llama3")

    args = get_final_config(str(project), environ={})

    assert (args.max_iterations, args.model) == (12, "llama3")
