import threading

import pytest

from app.core.exceptions import (
    LastPromptException,
    PromptNotFoundException,
    ValidationException,
)
from app.models.domain import PromptRecord, PromptStore, parse_timestamp
from app.repositories.base import JsonDocumentStore
from app.repositories.prompt_repository import DEFAULT_MODEL_CONFIG, PromptRepository


def test_create_then_get_returns_trimmed_record_with_defaults(repository):
    created = repository.create(name="  Launch  ", prompt_text="\tWrite a launch post.\n")

    fetched = repository.get_by_id(created.id)

    assert fetched is not None
    assert fetched.id
    assert fetched.name == "Launch"
    assert fetched.prompt_text == "Write a launch post."
    assert fetched.model_config == DEFAULT_MODEL_CONFIG
    assert fetched.is_active is True
    assert fetched.created_at == fetched.updated_at
    assert fetched.created_at.endswith("Z")


def test_create_merges_supplied_options_over_defaults(repository):
    created = repository.create(name="Hot", prompt_text="Be bold.", model_config={"temperature": 1.2})

    assert created.model_config == {**DEFAULT_MODEL_CONFIG, "temperature": 1.2}


def test_create_generates_unique_ids(repository):
    first = repository.create(name="A", prompt_text="a")
    second = repository.create(name="A", prompt_text="a")

    assert first.id != second.id
    assert [p.id for p in repository.list_all()] == [first.id, second.id]


@pytest.mark.parametrize("name, prompt_text", [
    ("", "text"),
    ("   ", "text"),
    ("Name", ""),
    ("Name", " \n "),
])
def test_create_with_blank_fields_persists_nothing(repository, name, prompt_text):
    with pytest.raises(ValidationException) as exc_info:
        repository.create(name=name, prompt_text=prompt_text)

    assert exc_info.value.status_code == 400
    assert "is required and cannot be empty" in exc_info.value.message
    assert repository.list_all() == []


def test_get_unknown_id_returns_none(repository):
    assert repository.get_by_id("missing") is None
    with pytest.raises(PromptNotFoundException):
        repository.require("missing")


def test_partial_update_changes_only_supplied_fields(repository):
    created = repository.create(name="Original", prompt_text="Keep me.")

    updated = repository.update(created.id, name="Renamed")

    assert updated.name == "Renamed"
    assert updated.prompt_text == created.prompt_text
    assert updated.model_config == created.model_config
    assert updated.is_active == created.is_active
    assert updated.created_at == created.created_at
    assert parse_timestamp(updated.updated_at) > parse_timestamp(created.updated_at)
    assert repository.get_by_id(created.id).name == "Renamed"


def test_repeated_updates_strictly_advance_updated_at(repository):
    created = repository.create(name="Tick", prompt_text="Tock")

    stamps = [created.updated_at]
    for _ in range(5):
        stamps.append(repository.update(created.id, is_active=False).updated_at)

    parsed = [parse_timestamp(s) for s in stamps]
    assert all(later > earlier for earlier, later in zip(parsed, parsed[1:]))


def test_update_model_config_is_shallow_merged(repository, store):
    store.save(PromptStore(prompts=[
        PromptRecord(
            id="merge",
            name="Merge",
            prompt_text="Merge me.",
            model_config={"temperature": 0.7, "topK": 40},
            created_at="2024-01-01T00:00:00.000Z",
            updated_at="2024-01-01T00:00:00.000Z",
        )
    ]))

    updated = repository.update("merge", model_config={"temperature": 0.2})

    assert updated.model_config == {"temperature": 0.2, "topK": 40}
    assert repository.get_by_id("merge").model_config == {"temperature": 0.2, "topK": 40}


def test_update_with_blank_name_is_rejected(repository):
    created = repository.create(name="Keep", prompt_text="Text")

    with pytest.raises(ValidationException):
        repository.update(created.id, name="  ")

    assert repository.get_by_id(created.id).name == "Keep"


def test_update_unknown_id_raises_not_found(repository):
    repository.create(name="Only", prompt_text="Text")

    with pytest.raises(PromptNotFoundException):
        repository.update("missing", name="New")


def test_delete_removes_record(repository):
    first = repository.create(name="One", prompt_text="1")
    second = repository.create(name="Two", prompt_text="2")

    assert repository.delete(first.id) is True

    assert [p.id for p in repository.list_all()] == [second.id]


def test_delete_last_record_is_refused_and_store_unchanged(repository, store):
    only = repository.create(name="Only", prompt_text="Text")
    before = store.document_path.read_bytes()

    with pytest.raises(LastPromptException) as exc_info:
        repository.delete(only.id)

    assert exc_info.value.status_code == 400
    assert exc_info.value.message == "Cannot delete the last prompt"
    assert store.document_path.read_bytes() == before


def test_delete_unknown_id_is_not_found_and_store_unchanged(repository, store):
    repository.create(name="One", prompt_text="1")
    repository.create(name="Two", prompt_text="2")
    before = store.document_path.read_bytes()

    with pytest.raises(PromptNotFoundException) as exc_info:
        repository.delete("missing")

    assert exc_info.value.status_code == 404
    assert store.document_path.read_bytes() == before


def test_delete_unknown_id_on_single_record_store_is_not_found(repository):
    repository.create(name="Only", prompt_text="Text")

    with pytest.raises(PromptNotFoundException):
        repository.delete("missing")


def test_default_prompt_lifecycle(repository):
    assert repository.list_all() == []

    default = repository.create(name="Default", prompt_text="Write an engaging post.")

    listed = repository.list_all()
    assert [p.id for p in listed] == [default.id]
    with pytest.raises(LastPromptException):
        repository.delete(default.id)
    assert repository.count() == 1


def test_records_survive_a_new_repository_instance(repository, store, settings):
    created = repository.create(name="Persist", prompt_text="Across instances")

    reopened = PromptRepository(JsonDocumentStore(settings.prompts_file))
    assert reopened.get_by_id(created.id).to_dict() == created.to_dict()


def run_in_threads(target, args_list):
    errors = []

    def runner(*args):
        try:
            target(*args)
        except Exception as e:
            errors.append(e)

    threads = [threading.Thread(target=runner, args=args) for args in args_list]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()
    return errors


def test_concurrent_creates_are_all_persisted(repository):
    errors = run_in_threads(
        lambda i: repository.create(name=f"Prompt {i}", prompt_text=f"Text {i}"),
        [(i,) for i in range(20)],
    )

    prompts = repository.list_all()
    assert errors == []
    assert repository.count() == 20
    assert len({p.id for p in prompts}) == 20
    assert {p.name for p in prompts} == {f"Prompt {i}" for i in range(20)}


def test_concurrent_updates_and_deletes_lose_nothing(repository):
    keep = [repository.create(name=f"Keep {i}", prompt_text="k") for i in range(10)]
    drop = [repository.create(name=f"Drop {i}", prompt_text="d") for i in range(10)]

    jobs = [("update", p.id) for p in keep] + [("delete", p.id) for p in drop]

    def apply(action, prompt_id):
        if action == "update":
            repository.update(prompt_id, model_config={"temperature": 0.1})
        else:
            repository.delete(prompt_id)

    errors = run_in_threads(apply, jobs)

    prompts = repository.list_all()
    assert errors == []
    assert [p.id for p in prompts] == [p.id for p in keep]
    assert all(p.model_config["temperature"] == 0.1 for p in prompts)


def test_concurrent_deletes_never_empty_the_store(repository):
    prompts = [repository.create(name=f"P {i}", prompt_text="t") for i in range(5)]

    errors = run_in_threads(repository.delete, [(p.id,) for p in prompts])

    assert repository.count() == 1
    assert len(errors) == 1
    assert isinstance(errors[0], LastPromptException)
