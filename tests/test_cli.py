from app.cli.prompts import main
from app.services.ai.prompt_defaults import BUILTIN_PROMPT_NAME, BUILTIN_SYSTEM_PROMPT


def test_list_empty_store(repository, capsys):
    assert main(["list"], repository=repository) == 0

    assert "No prompts found." in capsys.readouterr().out


def test_seed_creates_default_prompt_once(repository, capsys):
    assert main(["seed"], repository=repository) == 0
    assert main(["seed"], repository=repository) == 0

    prompts = repository.list_all()
    assert len(prompts) == 1
    assert prompts[0].name == BUILTIN_PROMPT_NAME
    assert prompts[0].prompt_text == BUILTIN_SYSTEM_PROMPT.strip()
    assert "nothing to seed" in capsys.readouterr().out


def test_seed_force_adds_another(repository):
    main(["seed"], repository=repository)
    main(["seed", "--force"], repository=repository)

    assert repository.count() == 2


def test_create_with_options(repository, capsys):
    code = main(
        ["create", "--name", "Launch", "--text", "Announce it.", "--temperature", "0.9", "--top-k", "12"],
        repository=repository,
    )

    assert code == 0
    prompt = repository.list_all()[0]
    assert prompt.model_config["temperature"] == 0.9
    assert prompt.model_config["topK"] == 12
    assert prompt.model_config["maxOutputTokens"] == 500
    assert prompt.id in capsys.readouterr().out


def test_show_and_list(repository, capsys):
    prompt = repository.create(name="Launch", prompt_text="Announce it.")

    assert main(["show", prompt.id], repository=repository) == 0
    assert main(["list"], repository=repository) == 0

    out = capsys.readouterr().out
    assert "Announce it." in out
    assert "Total: 1 prompt(s)" in out


def test_delete_last_prompt_reports_error(repository, capsys):
    prompt = repository.create(name="Only", prompt_text="Text")

    assert main(["delete", prompt.id], repository=repository) == 1

    assert "Cannot delete the last prompt" in capsys.readouterr().err
    assert repository.count() == 1


def test_show_unknown_prompt_reports_error(repository, capsys):
    assert main(["show", "missing"], repository=repository) == 1

    assert "Prompt not found: missing" in capsys.readouterr().err
